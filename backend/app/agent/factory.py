import logging

from sqlmodel import Session

from app.agent.llm_client import LLMClient
from app.agent.prompts import PROMPT_KEYS
from app.core.config_manager import get_config
from app.core.language import DEFAULT_LANGUAGE
from app.models import User

logger = logging.getLogger(__name__)


class MissingConfigurationError(RuntimeError):
    pass


def resolve_prompt(session: Session, kind: str, language: str, user: User | None = None) -> str:
    """The prompt for `language`, falling back to the pt-BR prompt when the translation is missing."""
    keys = PROMPT_KEYS[kind]
    prompt_key = keys.get(language) or keys[DEFAULT_LANGUAGE]
    user_id = user.id if user else None
    prompt = get_config(session, prompt_key, user_id, prompt_key)
    if not prompt and language != DEFAULT_LANGUAGE:
        fallback_key = keys[DEFAULT_LANGUAGE]
        logger.warning("Prompt %s not configured, falling back to %s", prompt_key, fallback_key)
        prompt = get_config(session, fallback_key, user_id, fallback_key)
    if not prompt:
        raise MissingConfigurationError("Prompt não configurado")
    return prompt


def build_llm_client(session: Session, user: User | None = None) -> LLMClient:
    user_id = user.id if user else None
    api_key = get_config(session, "OPENROUTER_API_KEY", user_id, "OPENROUTER_API_KEY")
    if not api_key:
        raise MissingConfigurationError("Chave da API OpenRouter não configurada")
    model_name = get_config(session, "MODEL_NAME", user_id, "MODEL_NAME")
    return LLMClient(model_name=model_name, api_key=api_key)
