import asyncio
import logging
from typing import Any

from fastapi import APIRouter, HTTPException
from sqlmodel import col, select

from app import crud, realtime
from app.agent.factory import MissingConfigurationError
from app.api.deps import CurrentUser, SessionDep, require_quota
from app.core.config_manager import get_config
from app.core.mock import get_mock_mode
from app.models import NarracoesPublic, NarracoesRequest, UserNarracao, UserNarracaoPublic
from app.services import audio_library
from app.services.elevenlabs import ElevenLabsClient

router = APIRouter(prefix="/narracoes", tags=["narracoes"])
logger = logging.getLogger(__name__)


def narration_items(narracoes: dict[str, str] | list[str] | None) -> list[tuple[str, str, str]]:
    """Normalise the request body into (nome, texto, arquivo) triples, keeping the caller's order."""
    if isinstance(narracoes, dict):
        items = [(str(nome), texto) for nome, texto in narracoes.items()]
    elif isinstance(narracoes, list):
        items = [(f"narracao_{index}", texto) for index, texto in enumerate(narracoes, start=1)]
    else:
        items = []
    if not items:
        raise HTTPException(status_code=400, detail="Campo 'narracoes' é obrigatório")

    validated = []
    seen: set[str] = set()
    for nome, texto in items:
        if not isinstance(texto, str) or not texto.strip():
            raise HTTPException(status_code=400, detail=f"Narração '{nome}' está vazia")
        try:
            file_name = audio_library.clip_file_name(nome)
        except audio_library.AudioPathError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if file_name in seen:
            raise HTTPException(status_code=400, detail=f"Nome de narração duplicado: '{nome}'")
        seen.add(file_name)
        validated.append((nome, texto, file_name))
    return validated


@router.get("/", response_model=list[UserNarracaoPublic])
def read_narracoes(session: SessionDep, current_user: CurrentUser) -> Any:
    return session.exec(
        select(UserNarracao)
        .where(UserNarracao.user_id == current_user.id)
        .order_by(col(UserNarracao.created_at).desc())
    ).all()


@router.post("/", response_model=NarracoesPublic)
async def create_narracoes(session: SessionDep, current_user: CurrentUser, body: NarracoesRequest) -> Any:
    items = narration_items(body.narracoes)

    if get_mock_mode():
        arquivos = [file_name for _, _, file_name in items]
        return NarracoesPublic(mensagem="Áudios gerados com sucesso! (mock)", arquivos=arquivos, final=None)

    require_quota(current_user, "quota_narracoes")
    api_key = get_config(session, "ELEVEN_API_KEY", current_user.id, "ELEVEN_API_KEY")
    if not api_key:
        raise MissingConfigurationError("Chave da API ElevenLabs não configurada")
    client = ElevenLabsClient(
        api_key,
        voice_id=get_config(session, "VOICE_ID", current_user.id, "VOICE_ID"),
        model_id=get_config(session, "ELEVEN_MODEL_ID", current_user.id, "ELEVEN_MODEL_ID"),
    )

    directory = audio_library.user_audio_dir(current_user.id)
    try:
        paths = [audio_library.safe_audio_path(directory, file_name) for _, _, file_name in items]
    except audio_library.AudioPathError as e:
        raise HTTPException(status_code=400, detail=str(e))

    clips = []
    try:
        for index, ((nome, texto, file_name), path) in enumerate(zip(items, paths), start=1):
            await realtime.emit_audio_progress(
                current_user.id, {"current": index, "total": len(items), "nome": nome}
            )
            logger.info("Synthesizing %s (%s/%s)", file_name, index, len(items))
            audio = await client.synthesize(texto)
            await asyncio.to_thread(path.write_bytes, audio)
            clips.append(path)
            session.add(UserNarracao(nome=nome, texto=texto, arquivo=file_name, user_id=current_user.id))
    except Exception as e:
        await realtime.emit_error(current_user.id, {"type": "audio", "message": str(e)})
        raise

    silence = await audio_library.ensure_silence_async(directory)
    final = await asyncio.to_thread(audio_library.write_final, directory, clips, silence)
    session.commit()
    crud.consume_quota(session=session, user=current_user, field="quota_narracoes")

    result = NarracoesPublic(
        mensagem="Áudios gerados com sucesso!",
        arquivos=[clip.name for clip in clips],
        final=final.name,
    )
    await realtime.emit_audio_generated(current_user.id, result.model_dump())
    logger.info("Final audio written to %s", final)
    return result
