from abc import ABC, abstractmethod
from typing import Generic, TypeVar

from pydantic import BaseModel

from app.agent.llm_client import LLMClient
from app.agent.prompts import SYSTEM_MESSAGES
from app.core.language import DEFAULT_LANGUAGE

InType = TypeVar("InType", bound=BaseModel | str)
OutType = TypeVar("OutType", bound=BaseModel)


class BaseAgent(ABC, Generic[InType, OutType]):
    """Abstract base class for the content agents."""

    system_message_kind = "json"

    def __init__(self, llm: LLMClient):
        self.llm = llm

    @abstractmethod
    async def run(self, input_data: InType) -> OutType:
        """Run the agent on the given input to produce the output artifact."""
        pass

    def get_system_prompt(self, language: str) -> str:
        messages = SYSTEM_MESSAGES[self.system_message_kind]
        return messages.get(language) or messages[DEFAULT_LANGUAGE]
