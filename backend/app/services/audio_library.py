"""
Per-user audio directory.

Layout: `<AUDIO_DIR>/<user_id>/` holds one `.mp3` per narration, the shared
`silence.mp3` gap and the concatenated `final.mp3`.
"""
import asyncio
import io
import logging
import shutil
import subprocess
import uuid
import zipfile
from pathlib import Path
from typing import Any

from app.core.config import settings

logger = logging.getLogger(__name__)

SILENCE_FILE = "silence.mp3"
FINAL_FILE = "final.mp3"
SILENCE_SECONDS = 1

_duration_cache: dict[tuple[str, float, int], float | None] = {}


class AudioPathError(ValueError):
    pass


def user_audio_dir(user_id: uuid.UUID | str, *, root: Path | None = None) -> Path:
    path = Path(root or settings.AUDIO_DIR) / str(user_id)
    path.mkdir(parents=True, exist_ok=True)
    return path


def audio_file_name(nome: str) -> str:
    return "_".join(str(nome).split()) + ".mp3"


def clip_file_name(nome: str) -> str:
    """File name for a narration clip; rejects path separators and the reserved silence/final names."""
    file_name = audio_file_name(nome)
    if file_name == ".mp3" or Path(file_name).name != file_name or file_name.startswith("."):
        raise AudioPathError(f"Nome de narração inválido: '{nome}'")
    if file_name.lower() in (SILENCE_FILE, FINAL_FILE):
        raise AudioPathError(f"Nome de narração reservado: '{nome}'")
    return file_name


def safe_audio_path(directory: Path, nome: str) -> Path:
    """Resolve `nome` inside `directory`, rejecting anything that escapes it."""
    if not nome or Path(nome).name != nome:
        raise AudioPathError("Nome de arquivo inválido")
    base = directory.resolve()
    candidate = (base / nome).resolve()
    if candidate.parent != base:
        raise AudioPathError("Nome de arquivo inválido")
    return candidate


def _tool(name: str, configured: str | None) -> str | None:
    return shutil.which(configured or name)


def media_duration(path: Path) -> float | None:
    stat = path.stat()
    key = (str(path.resolve()), stat.st_mtime, stat.st_size)
    if key in _duration_cache:
        return _duration_cache[key]

    duration: float | None = None
    ffprobe = _tool("ffprobe", settings.FFPROBE_PATH)
    if ffprobe:
        try:
            result = subprocess.run(
                [
                    ffprobe,
                    "-v",
                    "error",
                    "-show_entries",
                    "format=duration",
                    "-of",
                    "default=noprint_wrappers=1:nokey=1",
                    str(path),
                ],
                capture_output=True,
                text=True,
                timeout=10,
                check=False,
            )
            if result.returncode == 0 and result.stdout.strip():
                duration = round(float(result.stdout.strip()), 2)
        except (OSError, ValueError, subprocess.TimeoutExpired) as e:
            logger.warning("ffprobe failed for %s: %s", path, e)

    _duration_cache[key] = duration
    return duration


def clear_duration_cache() -> None:
    _duration_cache.clear()


def list_audios(directory: Path) -> list[dict[str, Any]]:
    audios = []
    for path in sorted(directory.glob("*.mp3")):
        if path.name in (SILENCE_FILE, FINAL_FILE):
            continue
        audios.append(
            {
                "nome": path.name,
                "caminho": f"{settings.API_PREFIX}/audios/{path.name}",
                "tamanho": path.stat().st_size,
                "duracao": media_duration(path),
            }
        )
    return audios


def delete_audios(directory: Path) -> int:
    removed = 0
    for path in directory.iterdir():
        if path.is_file() and path.name != SILENCE_FILE:
            path.unlink()
            removed += 1
    return removed


def build_zip(directory: Path) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED, compresslevel=9) as archive:
        for path in sorted(directory.iterdir()):
            if path.is_file() and path.name != SILENCE_FILE:
                archive.write(path, arcname=path.name)
    return buffer.getvalue()


def ensure_silence(directory: Path) -> Path | None:
    """Create the one-second gap clip once; None when ffmpeg is unavailable."""
    silence = directory / SILENCE_FILE
    if silence.exists():
        return silence
    ffmpeg = _tool("ffmpeg", settings.FFMPEG_PATH)
    if not ffmpeg:
        logger.warning("ffmpeg not found; narrations will be joined without silence")
        return None
    try:
        result = subprocess.run(
            [
                ffmpeg,
                "-y",
                "-f",
                "lavfi",
                "-i",
                "anullsrc=r=44100:cl=stereo",
                "-t",
                str(SILENCE_SECONDS),
                "-q:a",
                "9",
                str(silence),
            ],
            capture_output=True,
            timeout=30,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired) as e:
        logger.warning("ffmpeg failed to create silence: %s", e)
        return None
    if result.returncode != 0 or not silence.exists():
        logger.warning("ffmpeg failed to create silence (exit %s)", result.returncode)
        return None
    logger.info("Created %s", silence)
    return silence


async def ensure_silence_async(directory: Path) -> Path | None:
    return await asyncio.to_thread(ensure_silence, directory)


def write_final(directory: Path, clips: list[Path], silence: Path | None) -> Path:
    """Concatenate the clips into final.mp3 with the silence clip between them."""
    gap = silence.read_bytes() if silence else b""
    final = directory / FINAL_FILE
    with final.open("wb") as out:
        for index, clip in enumerate(clips):
            if index and gap:
                out.write(gap)
            out.write(clip.read_bytes())
    return final
