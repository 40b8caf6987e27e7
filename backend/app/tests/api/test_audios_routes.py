import io
import zipfile

import pytest

from app.core.config import settings

AUDIOS = f"{settings.API_PREFIX}/audios"


@pytest.fixture
def user_dir(audio_dir, normal_user, monkeypatch):
    monkeypatch.setattr(settings, "FFPROBE_PATH", "missing-ffprobe-binary")
    directory = audio_dir / str(normal_user.id)
    directory.mkdir()
    for name in ("cena_1.mp3", "cena_2.mp3", "silence.mp3", "final.mp3"):
        (directory / name).write_bytes(name.encode())
    return directory


def test_list_audios_skips_silence_and_final(client, user_headers, user_dir):
    r = client.get(f"{AUDIOS}/", headers=user_headers)

    assert r.status_code == 200
    assert r.json()["audios"] == [
        {"nome": "cena_1.mp3", "caminho": f"{AUDIOS}/cena_1.mp3", "tamanho": 10, "duracao": None},
        {"nome": "cena_2.mp3", "caminho": f"{AUDIOS}/cena_2.mp3", "tamanho": 10, "duracao": None},
    ]


def test_download_zip_excludes_silence(client, user_headers, user_dir):
    r = client.get(f"{AUDIOS}/download", headers=user_headers)

    assert r.status_code == 200
    assert r.headers["content-type"] == "application/zip"
    names = zipfile.ZipFile(io.BytesIO(r.content)).namelist()
    assert sorted(names) == ["cena_1.mp3", "cena_2.mp3", "final.mp3"]


def test_read_single_audio(client, user_headers, user_dir):
    r = client.get(f"{AUDIOS}/cena_1.mp3", headers=user_headers)
    assert r.status_code == 200
    assert r.content == b"cena_1.mp3"

    assert client.get(f"{AUDIOS}/nope.mp3", headers=user_headers).status_code == 404


def test_delete_keeps_silence(client, user_headers, user_dir):
    r = client.delete(f"{AUDIOS}/", headers=user_headers)

    assert r.status_code == 200
    assert sorted(p.name for p in user_dir.iterdir()) == ["silence.mp3"]

    r = client.delete(f"{AUDIOS}/", headers=user_headers)
    assert r.json() == {"mensagem": "Nenhum áudio para deletar"}


def test_audio_directories_are_per_user(client, make_user, auth_headers, user_dir):
    other_headers = auth_headers(make_user("other@example.com"))
    assert client.get(f"{AUDIOS}/", headers=other_headers).json() == {"audios": []}
    assert client.get(f"{AUDIOS}/cena_1.mp3", headers=other_headers).status_code == 404
