import uuid
from typing import Any

from fastapi import APIRouter

from app import mock_data, realtime
from app.agent.temas_agent import TemasCarrosselAgent
from app.api.deps import CurrentUser, SessionDep
from app.api.routes.temas import generate_suggestions, get_user_topico, saved_suggestions
from app.models import TemasPublic, TemasRequest, UserTemaCarrossel

router = APIRouter(prefix="/temas-carrossel", tags=["temas-carrossel"])


@router.get("/{topico_id}", response_model=TemasPublic)
def read_temas_carrossel(session: SessionDep, current_user: CurrentUser, topico_id: uuid.UUID) -> Any:
    topico = get_user_topico(session, current_user, topico_id)
    return TemasPublic(temas=saved_suggestions(session, UserTemaCarrossel, topico), topico=topico.nome)


@router.post("/", response_model=TemasPublic)
async def create_temas_carrossel(session: SessionDep, current_user: CurrentUser, body: TemasRequest) -> Any:
    return await generate_suggestions(
        session=session,
        user=current_user,
        body=body,
        kind="temas_carrossel",
        model=UserTemaCarrossel,
        agent_cls=TemasCarrosselAgent,
        quota_field="quota_temas_carrossel",
        mock_factory=mock_data.mock_temas_carrossel,
        emit=realtime.emit_temas_carrossel_suggestions,
    )
