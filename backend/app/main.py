import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import httpx
import openai
import socketio
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.agent.carrossel_agent import SlideValidationError
from app.agent.factory import MissingConfigurationError
from app.agent.llm_client import LLMResponseError
from app.api.main import api_router
from app.core.config import settings
from app.core.db import engine, init_db
from app.realtime import sio
from app.services.elevenlabs import ElevenLabsHttpError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    with Session(engine) as session:
        init_db(session)
    logger.info("%s started (environment=%s)", settings.PROJECT_NAME, settings.ENVIRONMENT)
    yield


app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_PREFIX}/openapi.json",
    lifespan=lifespan,
)

if settings.all_cors_origins:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.all_cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


def error_response(status_code: int, message: str, **extra: object) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message, **extra})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    if isinstance(exc.detail, dict):
        content = {"error": exc.detail.get("error", ""), **exc.detail}
    else:
        content = {"error": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if not errors:
        return error_response(400, "Requisição inválida")
    first = errors[0]
    field = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Requisição inválida")
    return error_response(400, f"{field}: {message}" if field else message)


@app.exception_handler(SlideValidationError)
async def slide_validation_handler(request: Request, exc: SlideValidationError) -> JSONResponse:
    return error_response(400, str(exc))


@app.exception_handler(LLMResponseError)
async def llm_response_handler(request: Request, exc: LLMResponseError) -> JSONResponse:
    logger.error("Unparseable model output on %s: %s", request.url.path, exc)
    return error_response(500, "Falha ao interpretar resposta do modelo", raw=exc.raw)


@app.exception_handler(MissingConfigurationError)
async def missing_configuration_handler(request: Request, exc: MissingConfigurationError) -> JSONResponse:
    logger.error("Missing configuration on %s: %s", request.url.path, exc)
    return error_response(500, str(exc))


@app.exception_handler(openai.APIError)
async def openai_error_handler(request: Request, exc: openai.APIError) -> JSONResponse:
    logger.error("OpenRouter call failed on %s: %s", request.url.path, exc)
    return error_response(500, f"Erro ao chamar o modelo: {exc.message}")


@app.exception_handler(ElevenLabsHttpError)
async def elevenlabs_error_handler(request: Request, exc: ElevenLabsHttpError) -> JSONResponse:
    logger.error("ElevenLabs call failed on %s: %s", request.url.path, exc)
    return error_response(500, str(exc))


@app.exception_handler(httpx.HTTPError)
async def http_client_error_handler(request: Request, exc: httpx.HTTPError) -> JSONResponse:
    logger.error("Outgoing HTTP call failed on %s: %s", request.url.path, exc)
    return error_response(500, str(exc) or type(exc).__name__)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s", request.url.path)
    return error_response(500, "Erro interno do servidor")


app.include_router(api_router, prefix=settings.API_PREFIX)

# Served by uvicorn: Socket.IO on /socket.io, everything else falls through to FastAPI.
asgi_app = socketio.ASGIApp(sio, other_asgi_app=app)
