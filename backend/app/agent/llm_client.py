import json
import logging
import re
from typing import Any, TypeVar

from openai import APIStatusError, AsyncOpenAI
from pydantic import BaseModel, ValidationError

from app.core.config import settings

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)


class LLMResponseError(ValueError):
    """The provider answered but the content could not be parsed into the expected schema."""

    def __init__(self, message: str, raw: str = ""):
        super().__init__(message)
        self.raw = raw


def _extract_fenced_block(text: str) -> str | None:
    blocks = re.findall(r"```(?:json)?\s*(.*?)\s*```", text, re.DOTALL | re.IGNORECASE)
    return blocks[0].strip() if blocks else None


def strip_code_fences(text: str) -> str:
    if not text:
        return ""
    return re.sub(r"```(?:json)?", "", text, flags=re.IGNORECASE).strip()


def _extract_balanced_json_span(text: str) -> str | None:
    """Best-effort extraction of the first balanced top-level JSON object/array."""
    if not text:
        return None

    starts = []
    first_obj = text.find("{")
    first_arr = text.find("[")
    if first_obj != -1:
        starts.append((first_obj, "{", "}"))
    if first_arr != -1:
        starts.append((first_arr, "[", "]"))
    if not starts:
        return None

    start_idx, open_ch, close_ch = min(starts, key=lambda x: x[0])
    depth = 0
    in_string = False
    escape = False
    for i in range(start_idx, len(text)):
        ch = text[i]
        if in_string:
            if escape:
                escape = False
            elif ch == "\\":
                escape = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return text[start_idx:i + 1]
    return None


def _structured_text_candidates(raw_text: str) -> list[str]:
    text = (raw_text or "").strip()
    if not text:
        return []

    candidates: list[str] = []
    fenced = _extract_fenced_block(text)
    if fenced:
        candidates.append(fenced)

    candidates.append(strip_code_fences(text))

    balanced = _extract_balanced_json_span(text)
    if balanced:
        candidates.append(balanced)

    # Deduplicate while preserving order.
    seen = set()
    unique: list[str] = []
    for candidate in candidates:
        c = candidate.strip()
        if not c or c in seen:
            continue
        seen.add(c)
        unique.append(c)
    return unique


def parse_structured(raw_text: str, response_schema: type[T]) -> T:
    parse_candidates = _structured_text_candidates(raw_text)
    if not parse_candidates:
        raise LLMResponseError("Model returned empty content for structured response", raw_text)
    parse_errors: list[str] = []
    for candidate in parse_candidates:
        try:
            parsed_data = json.loads(candidate, strict=False)
            return response_schema.model_validate(parsed_data)
        except (json.JSONDecodeError, ValidationError, ValueError) as candidate_error:
            parse_errors.append(str(candidate_error))
            continue
    raise LLMResponseError(
        "Unable to parse structured response: " + " | ".join(parse_errors[:3]),
        strip_code_fences(raw_text),
    )


class LLMClient:
    """Structured JSON generation against OpenRouter's OpenAI-compatible chat completions API."""

    def __init__(
        self,
        model_name: str | None = None,
        base_url: str | None = None,
        api_key: str | None = None,
    ):
        self.model_name = model_name or settings.MODEL_DEFAULT

        self.client = AsyncOpenAI(
            base_url=base_url or settings.OPENROUTER_BASE_URL,
            api_key=api_key,
            timeout=settings.HTTP_TIMEOUT_SECONDS,
        )

    async def aclose(self) -> None:
        await self.client.close()

    async def __aenter__(self) -> "LLMClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @staticmethod
    def _response_formats(schema_name: str, response_schema: type[BaseModel]) -> list[dict[str, Any]]:
        return [
            {
                "type": "json_schema",
                "json_schema": {
                    "name": schema_name,
                    "schema": response_schema.model_json_schema(),
                },
            },
            # Some providers reject named schemas; plain JSON mode is the single fallback.
            {"type": "json_object"},
        ]

    async def complete_json(
        self, system_prompt: str, user_prompt: str, response_schema: type[BaseModel], schema_name: str
    ) -> str:
        """Returns the raw message content. Retries once with plain JSON mode if the provider rejects the schema."""
        response_formats = self._response_formats(schema_name, response_schema)
        for attempt_idx, response_format in enumerate(response_formats, start=1):
            try:
                logger.info(
                    "Issuing structured request to model %s (attempt %s/%s, response_format=%s)",
                    self.model_name,
                    attempt_idx,
                    len(response_formats),
                    response_format["type"],
                )
                response = await self.client.chat.completions.create(
                    model=self.model_name,
                    messages=[
                        {"role": "system", "content": system_prompt},
                        {"role": "user", "content": user_prompt},
                    ],
                    response_format=response_format,
                )
            except APIStatusError as e:
                if attempt_idx < len(response_formats):
                    logger.warning(
                        "Model %s rejected response_format %s (status %s): %s. Retrying with %s...",
                        self.model_name,
                        response_format["type"],
                        e.status_code,
                        e.message,
                        response_formats[attempt_idx]["type"],
                    )
                    continue
                logger.error("Error calling LLM provider with model %s: %s", self.model_name, e)
                raise

            if not getattr(response, "choices", None):
                logger.error("Received 0 choices from %s: %s", self.model_name, response)
                raise LLMResponseError(
                    f"Provider {self.model_name} returned no output. Try again or change model."
                )
            content = response.choices[0].message.content or ""
            logger.info("Received structured response from %s (attempt %s)", self.model_name, attempt_idx)
            logger.debug("Raw content: %s", content)
            return content

        raise RuntimeError("Structured generation failed without a captured error")

    async def generate_structured(
        self,
        system_prompt: str,
        user_prompt: str,
        response_schema: type[T],
        schema_name: str = "response_schema",
    ) -> T:
        """
        Generate a structured response matching the provided Pydantic schema.
        Raises LLMResponseError carrying the raw content when it cannot be parsed.
        """
        content = await self.complete_json(system_prompt, user_prompt, response_schema, schema_name)
        try:
            return parse_structured(content, response_schema)
        except LLMResponseError as e:
            logger.error("Error parsing structured LLM response from %s: %s", self.model_name, e)
            raise
