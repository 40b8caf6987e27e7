import logging

from app.agent.artifacts import Roteiro, RoteiroInput
from app.agent.base import BaseAgent
from app.agent.llm_client import LLMResponseError
from app.agent.prompts import render_prompt

logger = logging.getLogger(__name__)


class RoteiroAgent(BaseAgent[RoteiroInput, Roteiro]):
    """
    Agent responsible for turning a theme and a target duration into a scene
    by scene video script (narration plus imagery suggestion).
    """

    async def run(self, input_data: RoteiroInput) -> Roteiro:
        prompt = render_prompt(input_data.prompt, duracao=input_data.duracao, tema=input_data.tema)
        logger.info(
            "RoteiroAgent request (model=%s, language=%s, duracao=%ss): %s",
            self.llm.model_name,
            input_data.language,
            input_data.duracao,
            prompt,
        )

        roteiro = await self.llm.generate_structured(
            system_prompt=self.get_system_prompt(input_data.language),
            user_prompt=prompt,
            response_schema=Roteiro,
            schema_name="roteiro_schema",
        )

        if not roteiro.roteiro:
            raise LLMResponseError("RoteiroAgent returned an empty script.")
        return roteiro
