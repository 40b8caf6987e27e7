import logging
import uuid
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import col, select

from app import crud, mock_data, realtime
from app.agent.artifacts import CarrosselInput
from app.agent.carrossel_agent import CarrosselAgent, SlideValidationError, validate_slides
from app.agent.factory import build_llm_client, resolve_prompt
from app.api.deps import CurrentUser, SessionDep, request_language, require_quota
from app.api.routes.roteiro import deactivate_previous, parse_int, validate_tema
from app.core.language import localized, normalize_language
from app.core.mock import get_mock_mode
from app.models import CarrosselRequest, CarrosselUpdate, UserCarrossel

router = APIRouter(prefix="/carrossel", tags=["carrossel"])
logger = logging.getLogger(__name__)

MIN_SLIDES = 2
MAX_SLIDES = 8


def validate_quantidade(quantidade: Any, language: str) -> int:
    parsed = parse_int(quantidade)
    if parsed is None or not MIN_SLIDES <= parsed <= MAX_SLIDES:
        raise HTTPException(
            status_code=400,
            detail=localized(
                language,
                f"Quantidade deve ser um número inteiro entre {MIN_SLIDES} e {MAX_SLIDES}",
                f"Quantity must be an integer between {MIN_SLIDES} and {MAX_SLIDES}",
            ),
        )
    return parsed


@router.get("/")
def read_carrossel(session: SessionDep, current_user: CurrentUser) -> Any:
    carrossel = session.exec(
        select(UserCarrossel)
        .where(UserCarrossel.user_id == current_user.id, UserCarrossel.ativo == True)  # noqa: E712
        .order_by(col(UserCarrossel.created_at).desc())
    ).first()
    if not carrossel:
        return {"carrossel": []}
    return {"carrossel": carrossel.conteudo.get("carrossel", []), "id": carrossel.id}


@router.post("/")
async def create_carrossel(session: SessionDep, current_user: CurrentUser, body: CarrosselRequest) -> Any:
    language = request_language(body.language, current_user)
    tema = validate_tema(body.tema, language)
    quantidade = validate_quantidade(body.quantidade, language)

    if get_mock_mode():
        # The active carousel stays untouched.
        return {"carrossel": mock_data.mock_carrossel(quantidade, language), "language": language}

    require_quota(current_user, "quota_carrossel")
    await realtime.emit_carrossel_progress(
        current_user.id,
        {"status": "generating", "message": localized(language, "Gerando carrossel...", "Generating carousel...")},
    )

    try:
        async with build_llm_client(session, current_user) as llm:
            prompt = resolve_prompt(session, "carrossel", language, current_user)
            carrossel = await CarrosselAgent(llm).run(
                CarrosselInput(prompt=prompt, tema=tema, quantidade=quantidade, language=language)
            )
        slides = [slide.model_dump() for slide in carrossel.carrossel]
    except Exception as e:
        await realtime.emit_error(current_user.id, {"type": "carrossel", "message": str(e)})
        raise

    deactivate_previous(session, UserCarrossel, current_user)
    db_carrossel = UserCarrossel(
        tema=tema,
        quantidade=quantidade,
        language=language,
        conteudo={"carrossel": slides},
        user_id=current_user.id,
    )
    session.add(db_carrossel)
    session.commit()
    session.refresh(db_carrossel)
    crud.consume_quota(session=session, user=current_user, field="quota_carrossel")

    result = {"carrossel": slides, "language": language, "id": str(db_carrossel.id)}
    await realtime.emit_carrossel_generated(current_user.id, result)
    logger.info("Carousel generated (user=%s, slides=%s)", current_user.email, len(slides))
    return result


@router.put("/{carrossel_id}")
def update_carrossel(
    session: SessionDep, current_user: CurrentUser, carrossel_id: uuid.UUID, body: CarrosselUpdate
) -> Any:
    language = normalize_language(current_user.language)
    db_carrossel = session.get(UserCarrossel, carrossel_id)
    if not db_carrossel or db_carrossel.user_id != current_user.id or not db_carrossel.ativo:
        raise HTTPException(
            status_code=404,
            detail=localized(language, "Carrossel não encontrado", "Carousel not found"),
        )
    if not body.carrossel:
        raise HTTPException(
            status_code=400,
            detail=localized(language, "O carrossel precisa ter ao menos um slide", "The carousel needs at least one slide"),
        )
    try:
        validate_slides(body.carrossel, language)
    except SlideValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    slides = [
        {"titulo": slide.get("titulo", ""), "paragrafo": slide.get("paragrafo", ""), "imagem": slide.get("imagem", "")}
        for slide in body.carrossel
    ]
    db_carrossel.conteudo = {"carrossel": slides}
    session.add(db_carrossel)
    session.commit()
    session.refresh(db_carrossel)
    return {"carrossel": slides, "id": db_carrossel.id}
