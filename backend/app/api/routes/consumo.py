from typing import Any

from fastapi import APIRouter

from app.api.deps import CurrentAdmin, SessionDep
from app.core.config_manager import get_config
from app.services.usage import collect_usage

router = APIRouter(prefix="/consumo", tags=["consumo"])


@router.get("/")
async def read_consumo(session: SessionDep, current_admin: CurrentAdmin) -> Any:
    return await collect_usage(
        get_config(session, "OPENROUTER_API_KEY", fallback_env_key="OPENROUTER_API_KEY"),
        get_config(session, "ELEVEN_API_KEY", fallback_env_key="ELEVEN_API_KEY"),
    )
