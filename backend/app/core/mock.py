import logging

from app.core.config import settings

logger = logging.getLogger(__name__)

_mock_mode = settings.MOCK_MODE


def get_mock_mode() -> bool:
    return _mock_mode


def set_mock_mode(enabled: bool) -> bool:
    global _mock_mode
    _mock_mode = bool(enabled)
    logger.info("Mock mode %s", "enabled" if _mock_mode else "disabled")
    return _mock_mode
