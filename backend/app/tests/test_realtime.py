from datetime import timedelta
from unittest.mock import AsyncMock, patch

import pytest
from socketio.exceptions import ConnectionRefusedError as SocketConnectionRefusedError

from app import realtime
from app.core.security import create_access_token


@pytest.mark.asyncio
async def test_connect_without_token_is_refused(db):
    with pytest.raises(SocketConnectionRefusedError):
        await realtime.connect("sid-1", {}, None)


@pytest.mark.asyncio
async def test_connect_with_invalid_token_is_refused(db):
    with pytest.raises(SocketConnectionRefusedError):
        await realtime.connect("sid-1", {}, {"token": "not-a-jwt"})


@pytest.mark.asyncio
async def test_connect_joins_user_room(db, normal_user):
    token = create_access_token(normal_user.id, timedelta(minutes=5), email=normal_user.email)

    with patch.object(realtime.sio, "save_session", new_callable=AsyncMock) as save_session, patch.object(
        realtime.sio, "enter_room", new_callable=AsyncMock
    ) as enter_room:
        await realtime.connect("sid-1", {}, {"token": token})

    save_session.assert_awaited_once_with("sid-1", {"user_id": str(normal_user.id)})
    enter_room.assert_awaited_once_with("sid-1", f"user:{normal_user.id}")


@pytest.mark.asyncio
async def test_inactive_user_is_refused(db, normal_user):
    normal_user.is_active = False
    db.add(normal_user)
    db.commit()
    token = create_access_token(normal_user.id, timedelta(minutes=5))

    with pytest.raises(SocketConnectionRefusedError):
        await realtime.connect("sid-1", {}, {"token": token})


@pytest.mark.asyncio
async def test_ping_answers_with_timestamp(sio_emit):
    await realtime.ping("sid-9")
    event, payload = sio_emit.call_args.args
    assert event == "pong"
    assert isinstance(payload["timestamp"], int)
    assert sio_emit.call_args.kwargs == {"to": "sid-9"}


@pytest.mark.asyncio
async def test_events_are_sent_to_the_user_room(sio_emit):
    await realtime.emit_carrossel_generated("u-1", {"carrossel": []})
    await realtime.emit_error("u-1", {"error": "falhou"})

    assert sio_emit.await_args_list[0].args == ("carrossel:generated", {"carrossel": []})
    assert sio_emit.await_args_list[0].kwargs == {"room": "user:u-1"}
    assert sio_emit.await_args_list[1].args == ("error", {"error": "falhou"})
