import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import Session, col, select

from app import crud, mock_data, realtime
from app.agent.artifacts import RoteiroInput
from app.agent.factory import build_llm_client, resolve_prompt
from app.agent.roteiro_agent import RoteiroAgent
from app.api.deps import CurrentUser, SessionDep, request_language, require_quota
from app.core.language import localized
from app.core.mock import get_mock_mode
from app.models import RoteiroRequest, User, UserRoteiro

router = APIRouter(prefix="/roteiro", tags=["roteiro"])
logger = logging.getLogger(__name__)

MAX_TEMA_CHARS = 500
MIN_DURACAO = 30
MAX_DURACAO = 600


def validate_tema(tema: Any, language: str) -> str:
    if not isinstance(tema, str) or not tema.strip():
        raise HTTPException(
            status_code=400,
            detail=localized(language, "Tema é obrigatório", "Theme is required"),
        )
    tema = tema.strip()
    if len(tema) > MAX_TEMA_CHARS:
        raise HTTPException(
            status_code=400,
            detail=localized(
                language,
                f"Tema deve ter no máximo {MAX_TEMA_CHARS} caracteres",
                f"Theme must have at most {MAX_TEMA_CHARS} characters",
            ),
        )
    return tema


def parse_int(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return None


def validate_duracao(duracao: Any, language: str) -> int:
    parsed = parse_int(duracao)
    if parsed is None or not MIN_DURACAO <= parsed <= MAX_DURACAO:
        raise HTTPException(
            status_code=400,
            detail=localized(
                language,
                f"Duração deve ser um número inteiro entre {MIN_DURACAO} e {MAX_DURACAO} segundos",
                f"Duration must be an integer between {MIN_DURACAO} and {MAX_DURACAO} seconds",
            ),
        )
    return parsed


def deactivate_previous(session: Session, model: Any, user: User) -> None:
    previous = session.exec(
        select(model).where(model.user_id == user.id, model.ativo == True)  # noqa: E712
    ).all()
    for row in previous:
        row.ativo = False
        session.add(row)


@router.get("/")
def read_roteiro(session: SessionDep, current_user: CurrentUser) -> Any:
    roteiro = session.exec(
        select(UserRoteiro)
        .where(UserRoteiro.user_id == current_user.id, UserRoteiro.ativo == True)  # noqa: E712
        .order_by(col(UserRoteiro.created_at).desc())
    ).first()
    if not roteiro:
        return {"roteiro": []}
    return {
        "roteiro": roteiro.conteudo.get("roteiro", []),
        "id": roteiro.id,
        "tema": roteiro.tema,
        "duracao": roteiro.duracao,
    }


@router.post("/")
async def create_roteiro(session: SessionDep, current_user: CurrentUser, body: RoteiroRequest) -> Any:
    language = request_language(body.language, current_user)
    tema = validate_tema(body.tema, language)
    duracao = validate_duracao(body.duracao, language)

    if get_mock_mode():
        # The active script stays untouched.
        return {"roteiro": mock_data.mock_roteiro(language), "tema": tema, "duracao": duracao}

    require_quota(current_user, "quota_roteiros")
    await realtime.emit_roteiro_progress(
        current_user.id,
        {"status": "generating", "message": localized(language, "Gerando roteiro...", "Generating script...")},
    )

    try:
        async with build_llm_client(session, current_user) as llm:
            prompt = resolve_prompt(session, "roteiro", language, current_user)
            roteiro = await RoteiroAgent(llm).run(
                RoteiroInput(prompt=prompt, tema=tema, duracao=duracao, language=language)
            )
        cenas = [cena.model_dump() for cena in roteiro.roteiro]
    except Exception as e:
        await realtime.emit_error(current_user.id, {"type": "roteiro", "message": str(e)})
        raise

    deactivate_previous(session, UserRoteiro, current_user)
    db_roteiro = UserRoteiro(
        tema=tema,
        duracao=duracao,
        language=language,
        conteudo={"roteiro": cenas},
        user_id=current_user.id,
    )
    session.add(db_roteiro)
    session.commit()
    session.refresh(db_roteiro)
    crud.consume_quota(session=session, user=current_user, field="quota_roteiros")

    result = {"roteiro": cenas, "id": str(db_roteiro.id), "tema": tema, "duracao": duracao}
    await realtime.emit_roteiro_generated(current_user.id, result)
    logger.info("Script generated (user=%s, scenes=%s)", current_user.email, len(cenas))
    return result
