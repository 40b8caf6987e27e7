"""
Socket.IO push channel.

Clients connect with `auth={"token": <access JWT>}` and are placed in their
own `user:<id>` room; routes push generation results there.
"""
import logging
import time
import uuid
from typing import Any

import socketio
from fastapi import HTTPException
from socketio.exceptions import ConnectionRefusedError as SocketConnectionRefusedError
from sqlmodel import Session

from app.api.deps import get_user_from_token
from app.core import db
from app.core.config import settings

logger = logging.getLogger(__name__)

sio = socketio.AsyncServer(
    async_mode="asgi",
    cors_allowed_origins=settings.all_cors_origins or [],
)


def user_room(user_id: uuid.UUID | str) -> str:
    return f"user:{user_id}"


@sio.event
async def connect(sid: str, environ: dict[str, Any], auth: dict[str, Any] | None = None) -> None:
    token = (auth or {}).get("token")
    with Session(db.engine) as session:
        try:
            user = get_user_from_token(session, token)
        except HTTPException as e:
            logger.warning("Socket %s rejected: %s", sid, e.detail)
            raise SocketConnectionRefusedError(e.detail)
        user_id = str(user.id)
        email = user.email

    await sio.save_session(sid, {"user_id": user_id})
    await sio.enter_room(sid, user_room(user_id))
    logger.info("Socket %s connected (user=%s)", sid, email)


@sio.event
async def disconnect(sid: str, *args: Any) -> None:
    logger.info("Socket %s disconnected", sid)


@sio.event
async def ping(sid: str, *args: Any) -> None:
    await sio.emit("pong", {"timestamp": int(time.time() * 1000)}, to=sid)


async def emit_to_user(user_id: uuid.UUID | str, event: str, data: Any) -> None:
    logger.debug("Emitting %s to %s", event, user_room(user_id))
    await sio.emit(event, data, room=user_room(user_id))


async def emit_temas_suggestions(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "temas:suggestions", data)


async def emit_temas_carrossel_suggestions(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "temasCarrossel:suggestions", data)


async def emit_roteiro_progress(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "roteiro:progress", data)


async def emit_roteiro_generated(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "roteiro:generated", data)


async def emit_carrossel_progress(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "carrossel:progress", data)


async def emit_carrossel_generated(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "carrossel:generated", data)


async def emit_audio_progress(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "audio:progress", data)


async def emit_audio_generated(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "audio:generated", data)


async def emit_error(user_id: uuid.UUID | str, data: Any) -> None:
    await emit_to_user(user_id, "error", data)
