import logging
import uuid
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import Session, select

from app import crud, mock_data, realtime
from app.agent.artifacts import TemasInput
from app.agent.factory import build_llm_client, resolve_prompt
from app.agent.temas_agent import TemasAgent
from app.api.deps import CurrentUser, SessionDep, request_language, require_quota
from app.core.mock import get_mock_mode
from app.models import Tema, TemasPublic, TemasRequest, User, UserTemaCarrossel, UserTopico

router = APIRouter(prefix="/temas", tags=["temas"])
logger = logging.getLogger(__name__)

SuggestionModel = type[Tema] | type[UserTemaCarrossel]


def get_user_topico(session: Session, user: User, topico_id: uuid.UUID | None) -> UserTopico:
    if not topico_id:
        raise HTTPException(status_code=400, detail="topico_id é obrigatório")
    topico = session.get(UserTopico, topico_id)
    if not topico or topico.user_id != user.id or not topico.ativo:
        raise HTTPException(status_code=404, detail="Tópico não encontrado")
    return topico


def saved_suggestions(session: Session, model: SuggestionModel, topico: UserTopico) -> list[str]:
    rows = session.exec(
        select(model).where(model.user_topico_id == topico.id).order_by(model.created_at)
    ).all()
    return [row.titulo for row in rows]


def replace_suggestions(
    session: Session, model: SuggestionModel, topico: UserTopico, temas: list[str]
) -> None:
    for old in session.exec(select(model).where(model.user_topico_id == topico.id)).all():
        session.delete(old)
    for titulo in temas:
        session.add(model(titulo=titulo, user_topico_id=topico.id))
    session.commit()


async def generate_suggestions(
    *,
    session: Session,
    user: User,
    body: TemasRequest,
    kind: str,
    model: SuggestionModel,
    agent_cls: type[TemasAgent],
    quota_field: str,
    mock_factory: Callable[[str], list[str]],
    emit: Callable[[uuid.UUID, Any], Awaitable[None]],
) -> TemasPublic:
    """Shared flow of the video and carousel theme endpoints."""
    language = request_language(body.language, user)
    topico = get_user_topico(session, user, body.topico_id)

    if get_mock_mode():
        # Canned suggestions are never persisted over the topic's saved ones.
        return TemasPublic(temas=mock_factory(language), topico=topico.nome, language=language)

    require_quota(user, quota_field)
    async with build_llm_client(session, user) as llm:
        prompt = resolve_prompt(session, kind, language, user)
        suggestion = await agent_cls(llm).run(
            TemasInput(prompt=prompt, topico=topico.nome, language=language)
        )
    temas = suggestion.temas

    replace_suggestions(session, model, topico, temas)
    crud.consume_quota(session=session, user=user, field=quota_field)

    result = TemasPublic(temas=temas, topico=topico.nome, language=language)
    await emit(user.id, result.model_dump())
    logger.info("%s suggestions generated for topic %s (user=%s)", kind, topico.nome, user.email)
    return result


@router.get("/{topico_id}", response_model=TemasPublic)
def read_temas(session: SessionDep, current_user: CurrentUser, topico_id: uuid.UUID) -> Any:
    topico = get_user_topico(session, current_user, topico_id)
    return TemasPublic(temas=saved_suggestions(session, Tema, topico), topico=topico.nome)


@router.post("/", response_model=TemasPublic)
async def create_temas(session: SessionDep, current_user: CurrentUser, body: TemasRequest) -> Any:
    return await generate_suggestions(
        session=session,
        user=current_user,
        body=body,
        kind="temas",
        model=Tema,
        agent_cls=TemasAgent,
        quota_field="quota_temas",
        mock_factory=mock_data.mock_temas,
        emit=realtime.emit_temas_suggestions,
    )
