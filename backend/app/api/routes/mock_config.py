from typing import Any

from fastapi import APIRouter

from app.api.deps import CurrentAdmin
from app.core.mock import get_mock_mode, set_mock_mode
from app.models import MockModeUpdate

router = APIRouter(prefix="/config/mock", tags=["config"])


@router.get("/")
def read_mock_mode() -> Any:
    return {"mock_mode": get_mock_mode()}


@router.post("/")
def update_mock_mode(current_admin: CurrentAdmin, body: MockModeUpdate) -> Any:
    return {"mock_mode": set_mock_mode(body.mock_mode)}
