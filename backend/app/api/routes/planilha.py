import logging
from typing import Any

from fastapi import APIRouter, HTTPException

from app import mock_data
from app.api.deps import CurrentUser
from app.core.mock import get_mock_mode
from app.models import PlanilhaRequest
from app.services.sheets import InvalidSheetUrlError, extract_sheet_id, fetch_first_column

router = APIRouter(prefix="/planilha", tags=["planilha"])
logger = logging.getLogger(__name__)


@router.post("/")
async def read_planilha(current_user: CurrentUser, body: PlanilhaRequest) -> Any:
    try:
        extract_sheet_id(body.url)
    except InvalidSheetUrlError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if get_mock_mode():
        return {"valores": mock_data.mock_planilha(current_user.language)}
    valores = await fetch_first_column(body.url)
    logger.info("Read %s values from spreadsheet", len(valores))
    return {"valores": valores}
