import asyncio
from typing import Any

from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse, Response

from app.api.deps import CurrentUser
from app.models import MensagemPublic
from app.services import audio_library

router = APIRouter(prefix="/audios", tags=["audios"])


@router.get("/")
async def list_audios(current_user: CurrentUser) -> Any:
    directory = audio_library.user_audio_dir(current_user.id)
    return {"audios": await asyncio.to_thread(audio_library.list_audios, directory)}


@router.delete("/", response_model=MensagemPublic)
def delete_audios(current_user: CurrentUser) -> Any:
    removed = audio_library.delete_audios(audio_library.user_audio_dir(current_user.id))
    if not removed:
        return MensagemPublic(mensagem="Nenhum áudio para deletar")
    return MensagemPublic(mensagem="Todos os áudios foram deletados (exceto silence.mp3)")


@router.get("/download")
async def download_audios(current_user: CurrentUser) -> Response:
    directory = audio_library.user_audio_dir(current_user.id)
    content = await asyncio.to_thread(audio_library.build_zip, directory)
    return Response(
        content=content,
        media_type="application/zip",
        headers={"Content-Disposition": 'attachment; filename="audios.zip"'},
    )


@router.get("/{nome}")
def read_audio(current_user: CurrentUser, nome: str) -> FileResponse:
    directory = audio_library.user_audio_dir(current_user.id)
    try:
        path = audio_library.safe_audio_path(directory, nome)
    except audio_library.AudioPathError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not path.is_file():
        raise HTTPException(status_code=404, detail="Áudio não encontrado")
    return FileResponse(path, media_type="audio/mpeg", filename=path.name)
