import logging

from app.agent.artifacts import TemasInput, TemasSuggestion
from app.agent.base import BaseAgent
from app.agent.llm_client import LLMResponseError

logger = logging.getLogger(__name__)


class TemasAgent(BaseAgent[TemasInput, TemasSuggestion]):
    """
    Suggests short-video themes for a topic. The user prompt is the configured
    prompt followed by the topic name.
    """

    schema_name = "temas_schema"

    async def run(self, input_data: TemasInput) -> TemasSuggestion:
        system_prompt = self.get_system_prompt(input_data.language)
        user_prompt = f"{input_data.prompt} {input_data.topico}"
        logger.info(
            "%s request (model=%s, language=%s): %s",
            type(self).__name__,
            self.llm.model_name,
            input_data.language,
            user_prompt,
        )

        suggestion = await self.llm.generate_structured(
            system_prompt=system_prompt,
            user_prompt=user_prompt,
            response_schema=TemasSuggestion,
            schema_name=self.schema_name,
        )

        suggestion.temas = [tema.strip() for tema in suggestion.temas if tema and tema.strip()]
        if not suggestion.temas:
            raise LLMResponseError(f"{type(self).__name__} returned no themes.")
        return suggestion


class TemasCarrosselAgent(TemasAgent):
    """Same contract as TemasAgent, tuned for social-media carousels."""

    schema_name = "temas_carrossel_schema"
