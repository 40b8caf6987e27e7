"""
Runtime configuration stored in the database.

API keys, model names, prompts and voice settings can be edited by admins
without a restart. Lookups resolve in this order: the user's own override,
the global value, the environment variable named by `fallback_env_key`, and
finally the environment variable with the same name as the key.
"""
import logging
import os
import time
import uuid

from dotenv import load_dotenv
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.config import settings
from app.models import Configuracao, User, UserConfiguracao

logger = logging.getLogger(__name__)

load_dotenv()


class ConfigCache:
    def __init__(self, ttl_seconds: float):
        self.ttl_seconds = ttl_seconds
        self._entries: dict[str, tuple[str, float]] = {}

    def get(self, key: str) -> str | None:
        entry = self._entries.get(key)
        if entry is None:
            return None
        value, expires_at = entry
        if time.monotonic() >= expires_at:
            self._entries.pop(key, None)
            return None
        return value

    def set(self, key: str, value: str) -> None:
        self._entries[key] = (value, time.monotonic() + self.ttl_seconds)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


config_cache = ConfigCache(settings.CONFIG_CACHE_TTL_SECONDS)


def _cache_key(chave: str, user_id: uuid.UUID | None) -> str:
    return f"{user_id}:{chave}" if user_id else chave


def _env_fallback(chave: str, fallback_env_key: str | None) -> str | None:
    if fallback_env_key and os.getenv(fallback_env_key):
        logger.warning(
            "Configuration '%s' not found in the database, using env fallback %s",
            chave,
            fallback_env_key,
        )
        return os.getenv(fallback_env_key)
    if os.getenv(chave):
        logger.warning(
            "Configuration '%s' not found in the database, using env var of the same name",
            chave,
        )
        return os.getenv(chave)
    return None


def get_config(
    session: Session,
    chave: str,
    user_id: uuid.UUID | None = None,
    fallback_env_key: str | None = None,
) -> str | None:
    cache_key = _cache_key(chave, user_id)
    cached = config_cache.get(cache_key)
    if cached is not None:
        return cached

    try:
        config: Configuracao | UserConfiguracao | None = None
        if user_id:
            config = session.exec(
                select(UserConfiguracao).where(
                    UserConfiguracao.chave == chave,
                    UserConfiguracao.user_id == user_id,
                    UserConfiguracao.ativo == True,  # noqa: E712
                )
            ).first()
        if not config:
            config = session.exec(
                select(Configuracao).where(
                    Configuracao.chave == chave,
                    Configuracao.ativo == True,  # noqa: E712
                )
            ).first()
    except SQLAlchemyError as e:
        logger.error("Failed to read configuration '%s': %s", chave, e)
        return _env_fallback(chave, fallback_env_key)

    valor = config.valor if config and config.valor else _env_fallback(chave, fallback_env_key)
    if valor is not None:
        config_cache.set(cache_key, valor)
    return valor


def get_configs(
    session: Session, chaves: list[str], user_id: uuid.UUID | None = None
) -> dict[str, str | None]:
    return {chave: get_config(session, chave, user_id, chave) for chave in chaves}


def clear_config_cache() -> None:
    config_cache.clear()


DEFAULT_CONFIGS: list[dict[str, str]] = [
    {
        "chave": "OPENROUTER_API_KEY",
        "nome": "Chave API OpenRouter",
        "descricao": "Chave de API para acessar os serviços do OpenRouter",
        "categoria": "API",
        "default": "",
    },
    {
        "chave": "MODEL_NAME",
        "nome": "Nome do Modelo IA",
        "descricao": "Nome do modelo de IA a ser usado para geração de conteúdo",
        "categoria": "IA",
        "default": settings.MODEL_DEFAULT,
    },
    {
        "chave": "PROMPT_TEMAS",
        "nome": "Prompt para Temas",
        "descricao": "Prompt usado para gerar temas baseados em um tópico",
        "categoria": "Prompts",
        "default": "Gere 5 temas interessantes para vídeos curtos sobre o tópico fornecido.",
    },
    {
        "chave": "PROMPT_TEMAS_EN",
        "nome": "Prompt for Topics (English)",
        "descricao": "Prompt used to generate themes in English based on a topic",
        "categoria": "Prompts",
        "default": "Generate 5 engaging short-video themes about the provided subject.",
    },
    {
        "chave": "PROMPT_ROTEIRO",
        "nome": "Prompt para Roteiro",
        "descricao": "Prompt usado para gerar roteiros baseados em um tema",
        "categoria": "Prompts",
        "default": (
            "Crie um roteiro detalhado para um vídeo de {duracao} segundos sobre o tema: {tema}. "
            "Retorne um array \"roteiro\" com narração e sugestão de imagem para cada cena."
        ),
    },
    {
        "chave": "PROMPT_ROTEIRO_EN",
        "nome": "Prompt for Script (English)",
        "descricao": "Prompt used to generate scripts in English based on a theme",
        "categoria": "Prompts",
        "default": (
            "Create a detailed script in English for the provided theme. Duration: {duracao} seconds. "
            "Theme: {tema}. Return an array under the \"roteiro\" key with narration and imagery suggestions."
        ),
    },
    {
        "chave": "PROMPT_TEMAS_CARROSSEL",
        "nome": "Prompt para Temas de Carrossel",
        "descricao": "Prompt usado para gerar temas de carrossel baseados em um tópico",
        "categoria": "Prompts",
        "default": "Gere 5 temas para carrosséis de redes sociais sobre o tópico fornecido.",
    },
    {
        "chave": "PROMPT_TEMAS_CARROSSEL_EN",
        "nome": "Prompt for Carousel Themes (English)",
        "descricao": "Prompt used to generate carousel themes in English based on a topic",
        "categoria": "Prompts",
        "default": "Generate 5 social-media carousel themes about the provided subject.",
    },
    {
        "chave": "PROMPT_CARROSSEL",
        "nome": "Prompt para Carrossel",
        "descricao": "Prompt usado para gerar carrosséis baseados em um tema",
        "categoria": "Prompts",
        "default": (
            "Crie um carrossel de {quantidade} slides sobre o tema \"{tema}\". Cada slide deve conter "
            "um título chamativo e um parágrafo explicativo. Para o campo \"imagem\", forneça APENAS uma "
            "descrição textual detalhada do que deve aparecer na imagem, sem URLs, sem links, sem nomes "
            "de arquivos. Retorne um array \"carrossel\" onde cada item tem: \"titulo\", \"paragrafo\" e \"imagem\"."
        ),
    },
    {
        "chave": "PROMPT_CARROSSEL_EN",
        "nome": "Prompt for Carousel (English)",
        "descricao": "Prompt used to generate carousels in English based on a theme",
        "categoria": "Prompts",
        "default": (
            "Create a {quantidade}-slide carousel about \"{tema}\". Each slide has a catchy title, an "
            "explanatory paragraph and, in \"imagem\", ONLY a textual description of the picture. Return a "
            "\"carrossel\" array whose items have \"titulo\", \"paragrafo\" and \"imagem\"."
        ),
    },
    {
        "chave": "ELEVEN_API_KEY",
        "nome": "Chave API ElevenLabs",
        "descricao": "Chave de API para acessar os serviços de síntese de voz do ElevenLabs",
        "categoria": "API",
        "default": "",
    },
    {
        "chave": "VOICE_ID",
        "nome": "ID da Voz",
        "descricao": "Identificador da voz a ser usada na síntese de áudio",
        "categoria": "Audio",
        "default": "",
    },
    {
        "chave": "ELEVEN_MODEL_ID",
        "nome": "ID do Modelo ElevenLabs",
        "descricao": "Identificador do modelo de síntese de voz do ElevenLabs",
        "categoria": "Audio",
        "default": settings.ELEVEN_MODEL_DEFAULT,
    },
]


def initialize_default_configs(session: Session) -> list[str]:
    """Creates every missing global default. Existing rows are left untouched."""
    created: list[str] = []
    existing = set(session.exec(select(Configuracao.chave)).all())
    for default in DEFAULT_CONFIGS:
        if default["chave"] in existing:
            continue
        session.add(
            Configuracao(
                chave=default["chave"],
                valor=os.getenv(default["chave"]) or default["default"],
                nome=default["nome"],
                descricao=default["descricao"],
                categoria=default["categoria"],
            )
        )
        created.append(default["chave"])
    if created:
        session.commit()
        clear_config_cache()
    return created


def set_user_config(
    session: Session, user: User, chave: str, valor: str
) -> UserConfiguracao:
    override = session.exec(
        select(UserConfiguracao).where(
            UserConfiguracao.user_id == user.id, UserConfiguracao.chave == chave
        )
    ).first()
    if override is None:
        base = session.exec(select(Configuracao).where(Configuracao.chave == chave)).first()
        override = UserConfiguracao(
            user_id=user.id,
            chave=chave,
            nome=base.nome if base else chave,
            descricao=base.descricao if base else None,
            categoria=base.categoria if base else "Geral",
        )
    override.valor = valor
    override.ativo = True
    session.add(override)
    session.commit()
    session.refresh(override)
    clear_config_cache()
    return override
