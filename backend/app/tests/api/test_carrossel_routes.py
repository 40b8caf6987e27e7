import json

from app.core.config import settings
from app.core.mock import set_mock_mode
from app.models import UserCarrossel

CARROSSEL = f"{settings.API_PREFIX}/carrossel"


def _slides(count, **overrides):
    slide = {"titulo": "Título", "paragrafo": "Parágrafo", "imagem": "Imagem"}
    slide.update(overrides)
    return [dict(slide) for _ in range(count)]


def test_generate_carrossel(client, configured, normal_user, user_headers, openai_create, chat_response, sio_emit):
    openai_create.return_value = chat_response(json.dumps({"carrossel": _slides(3)}))

    r = client.post(f"{CARROSSEL}/", headers=user_headers, json={"tema": "Café", "quantidade": 3})

    assert r.status_code == 200
    assert r.json()["carrossel"] == _slides(3)
    assert r.json()["language"] == "pt-BR"
    assert openai_create.call_args.kwargs["response_format"]["json_schema"]["name"] == "carrossel_schema"
    events = [call.args[0] for call in sio_emit.call_args_list]
    assert events == ["carrossel:progress", "carrossel:generated"]

    r = client.get(f"{CARROSSEL}/", headers=user_headers)
    assert len(r.json()["carrossel"]) == 3


def test_generated_slides_over_limit_are_rejected(client, configured, user_headers, openai_create, chat_response):
    openai_create.return_value = chat_response(
        json.dumps({"carrossel": _slides(2, paragrafo="p" * 1600)})
    )

    r = client.post(f"{CARROSSEL}/", headers=user_headers, json={"tema": "Café", "quantidade": 2})

    assert r.status_code == 400
    assert r.json()["error"].startswith("Total de caracteres dos parágrafos (3200)")


def test_quantidade_bounds(client, user_headers):
    for quantidade in (1, 9, "abc"):
        r = client.post(f"{CARROSSEL}/", headers=user_headers, json={"tema": "Café", "quantidade": quantidade})
        assert r.status_code == 400


def test_update_carrossel(client, db, normal_user, make_user, auth_headers, user_headers):
    db_carrossel = UserCarrossel(tema="Café", quantidade=2, conteudo={"carrossel": _slides(2)}, user_id=normal_user.id)
    db.add(db_carrossel)
    db.commit()
    created = {"id": str(db_carrossel.id)}

    r = client.put(
        f"{CARROSSEL}/{created['id']}",
        headers=user_headers,
        json={"carrossel": _slides(2, titulo="Novo")},
    )
    assert r.status_code == 200
    assert client.get(f"{CARROSSEL}/", headers=user_headers).json()["carrossel"][0]["titulo"] == "Novo"

    r = client.put(
        f"{CARROSSEL}/{created['id']}",
        headers=user_headers,
        json={"carrossel": _slides(2, imagem=" ")},
    )
    assert r.status_code == 400
    assert r.json() == {"error": "Todos os campos de descrição de imagem devem ser preenchidos"}

    other_headers = auth_headers(make_user("other@example.com"))
    r = client.put(f"{CARROSSEL}/{created['id']}", headers=other_headers, json={"carrossel": _slides(2)})
    assert r.status_code == 404


def test_mock_mode_leaves_saved_carrossel_and_quota_alone(
    client, db, normal_user, user_headers, openai_create, sio_emit
):
    db.add(UserCarrossel(tema="Real", quantidade=2, conteudo={"carrossel": _slides(2)}, user_id=normal_user.id))
    normal_user.quota_carrossel = 0
    db.add(normal_user)
    db.commit()
    set_mock_mode(True)

    r = client.post(
        f"{CARROSSEL}/", headers=user_headers, json={"tema": "Demo", "quantidade": 2, "language": "en"}
    )

    assert r.status_code == 200
    assert len(r.json()["carrossel"]) == 2
    assert r.json()["language"] == "en"
    openai_create.assert_not_called()
    sio_emit.assert_not_called()
    assert client.get(f"{CARROSSEL}/", headers=user_headers).json()["carrossel"] == _slides(2)
