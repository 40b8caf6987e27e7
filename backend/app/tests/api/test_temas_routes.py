import json

import pytest
from sqlmodel import select

from app.core.config import settings
from app.core.mock import set_mock_mode
from app.models import Tema, UserTopico

TEMAS = f"{settings.API_PREFIX}/temas"
TEMAS_CARROSSEL = f"{settings.API_PREFIX}/temas-carrossel"


@pytest.fixture
def topico(db, normal_user):
    topico = UserTopico(nome="Produtividade", user_id=normal_user.id)
    db.add(topico)
    db.commit()
    db.refresh(topico)
    return topico


def test_generate_temas_calls_model_and_replaces_suggestions(
    client, db, configured, normal_user, user_headers, topico, openai_create, chat_response, sio_emit
):
    db.add(Tema(titulo="Antigo", user_topico_id=topico.id))
    db.commit()
    openai_create.return_value = chat_response(json.dumps({"temas": ["Rotina matinal", " ", "Foco total"]}))

    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": str(topico.id)})

    assert r.status_code == 200
    assert r.json() == {"temas": ["Rotina matinal", "Foco total"], "topico": "Produtividade", "language": "pt-BR"}
    kwargs = openai_create.call_args.kwargs
    assert kwargs["response_format"]["type"] == "json_schema"
    assert kwargs["response_format"]["json_schema"]["name"] == "temas_schema"
    assert kwargs["messages"][1]["content"].endswith(" Produtividade")

    saved = db.exec(select(Tema).where(Tema.user_topico_id == topico.id)).all()
    assert sorted(t.titulo for t in saved) == ["Foco total", "Rotina matinal"]
    db.refresh(normal_user)
    assert normal_user.quota_temas == settings.DEFAULT_QUOTA - 1
    sio_emit.assert_awaited_once()
    assert sio_emit.call_args.args[0] == "temas:suggestions"
    assert sio_emit.call_args.kwargs["room"] == f"user:{normal_user.id}"

    r = client.get(f"{TEMAS}/{topico.id}", headers=user_headers)
    assert sorted(r.json()["temas"]) == ["Foco total", "Rotina matinal"]


def test_generate_temas_uses_english_prompt(client, configured, user_headers, topico, openai_create, chat_response):
    openai_create.return_value = chat_response('{"temas": ["Morning routine"]}')

    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": str(topico.id), "language": "en"})

    assert r.status_code == 200
    assert r.json()["language"] == "en"
    user_prompt = openai_create.call_args.kwargs["messages"][1]["content"]
    assert user_prompt.startswith("Generate 5 engaging short-video themes")


def test_generate_temas_rejects_unknown_language(client, user_headers, topico):
    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": str(topico.id), "language": "es"})
    assert r.status_code == 400


def test_generate_temas_enforces_quota(client, db, normal_user, user_headers, topico, openai_create):
    normal_user.quota_temas = 0
    db.add(normal_user)
    db.commit()

    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": str(topico.id)})

    assert r.status_code == 403
    openai_create.assert_not_called()


def test_generate_temas_without_api_key_is_server_error(client, user_headers, topico, monkeypatch):
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": str(topico.id)})
    assert r.status_code == 500
    assert r.json() == {"error": "Chave da API OpenRouter não configurada"}


def test_generate_temas_unknown_topic(client, configured, user_headers):
    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": "00000000-0000-0000-0000-000000000000"})
    assert r.status_code == 404


def test_mock_mode_skips_model_and_quota(client, db, normal_user, user_headers, topico, openai_create):
    set_mock_mode(True)

    r = client.post(f"{TEMAS_CARROSSEL}/", headers=user_headers, json={"topico_id": str(topico.id)})

    assert r.status_code == 200
    assert len(r.json()["temas"]) == 5
    openai_create.assert_not_called()
    db.refresh(normal_user)
    assert normal_user.quota_temas_carrossel == settings.DEFAULT_QUOTA

    r = client.get(f"{TEMAS_CARROSSEL}/{topico.id}", headers=user_headers)
    assert r.json()["temas"] == []


def test_mock_mode_ignores_exhausted_quota_and_keeps_saved_suggestions(
    client, db, normal_user, user_headers, topico, openai_create, sio_emit
):
    db.add(Tema(titulo="Guardado", user_topico_id=topico.id))
    normal_user.quota_temas = 0
    db.add(normal_user)
    db.commit()
    set_mock_mode(True)

    r = client.post(f"{TEMAS}/", headers=user_headers, json={"topico_id": str(topico.id), "language": "en"})

    assert r.status_code == 200
    assert r.json()["language"] == "en"
    assert len(r.json()["temas"]) == 5
    openai_create.assert_not_called()
    sio_emit.assert_not_called()

    r = client.get(f"{TEMAS}/{topico.id}", headers=user_headers)
    assert r.json()["temas"] == ["Guardado"]
