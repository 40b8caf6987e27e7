from unittest.mock import AsyncMock, patch

from sqlmodel import select

from app.core.config import settings
from app.core.mock import set_mock_mode
from app.models import UserNarracao
from app.services.elevenlabs import ElevenLabsClient, ElevenLabsHttpError

NARRACOES = f"{settings.API_PREFIX}/narracoes"


def test_generate_narracoes_writes_clips_and_final(
    client, db, configured, normal_user, user_headers, audio_dir, sio_emit
):
    user_dir = audio_dir / str(normal_user.id)
    user_dir.mkdir()
    (user_dir / "silence.mp3").write_bytes(b"--")

    with patch.object(ElevenLabsClient, "synthesize", new_callable=AsyncMock) as synthesize:
        synthesize.side_effect = [b"AAA", b"BBB"]
        r = client.post(
            f"{NARRACOES}/",
            headers=user_headers,
            json={"narracoes": {"cena 1": "Olá", "cena 2": "Tchau"}},
        )

    assert r.status_code == 200
    assert r.json() == {
        "mensagem": "Áudios gerados com sucesso!",
        "arquivos": ["cena_1.mp3", "cena_2.mp3"],
        "final": "final.mp3",
    }
    assert (user_dir / "cena_1.mp3").read_bytes() == b"AAA"
    assert (user_dir / "final.mp3").read_bytes() == b"AAA--BBB"
    assert [call.args[0] for call in synthesize.call_args_list] == ["Olá", "Tchau"]

    events = [call.args[0] for call in sio_emit.call_args_list]
    assert events == ["audio:progress", "audio:progress", "audio:generated"]

    rows = db.exec(select(UserNarracao).where(UserNarracao.user_id == normal_user.id)).all()
    assert sorted(row.arquivo for row in rows) == ["cena_1.mp3", "cena_2.mp3"]
    db.refresh(normal_user)
    assert normal_user.quota_narracoes == settings.DEFAULT_QUOTA - 1

    r = client.get(f"{NARRACOES}/", headers=user_headers)
    assert len(r.json()) == 2


def test_list_of_narrations_gets_numbered_names(client, configured, user_headers, audio_dir, monkeypatch):
    monkeypatch.setattr(settings, "FFMPEG_PATH", "missing-ffmpeg-binary")
    with patch.object(ElevenLabsClient, "synthesize", new=AsyncMock(return_value=b"X")):
        r = client.post(f"{NARRACOES}/", headers=user_headers, json={"narracoes": ["um", "dois"]})

    assert r.status_code == 200
    assert r.json()["arquivos"] == ["narracao_1.mp3", "narracao_2.mp3"]


def test_narracoes_required(client, user_headers):
    r = client.post(f"{NARRACOES}/", headers=user_headers, json={})
    assert r.status_code == 400
    assert r.json() == {"error": "Campo 'narracoes' é obrigatório"}

    r = client.post(f"{NARRACOES}/", headers=user_headers, json={"narracoes": {"a": "  "}})
    assert r.status_code == 400


def test_provider_failure_does_not_consume_quota(
    client, db, configured, normal_user, user_headers, audio_dir, sio_emit
):
    with patch.object(
        ElevenLabsClient, "synthesize", new=AsyncMock(side_effect=ElevenLabsHttpError("boom"))
    ):
        r = client.post(f"{NARRACOES}/", headers=user_headers, json={"narracoes": {"a": "texto"}})

    assert r.status_code == 500
    assert r.json() == {"error": "boom"}
    assert sio_emit.call_args_list[-1].args[0] == "error"
    db.refresh(normal_user)
    assert normal_user.quota_narracoes == settings.DEFAULT_QUOTA


def test_names_escaping_the_user_directory_are_rejected(
    client, configured, normal_user, make_user, user_headers, audio_dir
):
    other = make_user("other@example.com")
    with patch.object(ElevenLabsClient, "synthesize", new=AsyncMock(return_value=b"X")) as synthesize:
        r = client.post(
            f"{NARRACOES}/",
            headers=user_headers,
            json={"narracoes": {"cena 1": "ok", f"../{other.id}/cena_1": "x"}},
        )

    assert r.status_code == 400
    assert r.json()["error"].startswith("Nome de narração inválido")
    synthesize.assert_not_awaited()
    assert not (audio_dir / str(other.id) / "cena_1.mp3").exists()
    assert not (audio_dir / str(normal_user.id) / "cena_1.mp3").exists()


def test_reserved_and_duplicate_names_are_rejected(client, configured, normal_user, user_headers, audio_dir):
    user_dir = audio_dir / str(normal_user.id)
    user_dir.mkdir()
    (user_dir / "silence.mp3").write_bytes(b"--")

    with patch.object(ElevenLabsClient, "synthesize", new=AsyncMock(return_value=b"SPEECH")) as synthesize:
        for nome in ("silence", "final", "Final"):
            r = client.post(
                f"{NARRACOES}/", headers=user_headers, json={"narracoes": {"a": "A", nome: "fala", "b": "B"}}
            )
            assert r.status_code == 400
            assert r.json()["error"].startswith("Nome de narração reservado")

        r = client.post(
            f"{NARRACOES}/", headers=user_headers, json={"narracoes": {"cena 1": "A", "cena_1": "B"}}
        )
        assert r.status_code == 400

    synthesize.assert_not_awaited()
    assert (user_dir / "silence.mp3").read_bytes() == b"--"
    assert not (user_dir / "final.mp3").exists()


def test_mock_mode_ignores_exhausted_quota(client, db, normal_user, user_headers, audio_dir):
    normal_user.quota_narracoes = 0
    db.add(normal_user)
    db.commit()
    set_mock_mode(True)

    with patch.object(ElevenLabsClient, "synthesize", new_callable=AsyncMock) as synthesize:
        r = client.post(f"{NARRACOES}/", headers=user_headers, json={"narracoes": {"cena 1": "Olá"}})

    assert r.status_code == 200
    assert r.json() == {"mensagem": "Áudios gerados com sucesso! (mock)", "arquivos": ["cena_1.mp3"], "final": None}
    synthesize.assert_not_awaited()
