from fastapi import APIRouter

from app.api.routes import (
    audios,
    auth,
    carrossel,
    configuracoes,
    consumo,
    mock_config,
    narracoes,
    planilha,
    roteiro,
    temas,
    temas_carrossel,
    topicos,
    users,
    utils,
)

api_router = APIRouter()
api_router.include_router(auth.router)
api_router.include_router(users.router)
api_router.include_router(topicos.router)
api_router.include_router(temas.router)
api_router.include_router(temas_carrossel.router)
api_router.include_router(roteiro.router)
api_router.include_router(carrossel.router)
api_router.include_router(narracoes.router)
api_router.include_router(audios.router)
api_router.include_router(configuracoes.router)
api_router.include_router(consumo.router)
api_router.include_router(planilha.router)
api_router.include_router(mock_config.router)
api_router.include_router(utils.router)
