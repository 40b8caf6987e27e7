import logging
from collections.abc import Iterable
from typing import Any

from app.agent.artifacts import Carrossel, CarrosselInput, Slide
from app.agent.base import BaseAgent
from app.agent.llm_client import LLMResponseError
from app.agent.prompts import render_prompt
from app.core.language import localized

logger = logging.getLogger(__name__)

MAX_TITLE_CHARS = 1000
MAX_PARAGRAPH_CHARS = 3000
MAX_IMAGE_CHARS = 2000


class SlideValidationError(ValueError):
    pass


def _text(slide: Slide | dict[str, Any], field: str) -> str:
    value = getattr(slide, field, None) if isinstance(slide, Slide) else slide.get(field)
    return value if isinstance(value, str) else ""


def validate_slides(slides: Iterable[Slide | dict[str, Any]], language: str) -> None:
    """
    Every slide needs a title, a paragraph and an image description, and the
    totals across the carousel are capped per field.
    """
    total_titles = total_paragraphs = total_images = 0
    for slide in slides:
        titulo = _text(slide, "titulo")
        paragrafo = _text(slide, "paragrafo")
        imagem = _text(slide, "imagem")
        if not titulo.strip():
            raise SlideValidationError(
                localized(language, "Todos os campos de título devem ser preenchidos",
                          "All title fields must be filled")
            )
        if not paragrafo.strip():
            raise SlideValidationError(
                localized(language, "Todos os campos de parágrafo devem ser preenchidos",
                          "All paragraph fields must be filled")
            )
        if not imagem.strip():
            raise SlideValidationError(
                localized(language, "Todos os campos de descrição de imagem devem ser preenchidos",
                          "All image description fields must be filled")
            )
        total_titles += len(titulo)
        total_paragraphs += len(paragrafo)
        total_images += len(imagem)

    if total_titles > MAX_TITLE_CHARS:
        raise SlideValidationError(
            localized(
                language,
                f"Total de caracteres dos títulos ({total_titles}) excede o limite de {MAX_TITLE_CHARS} caracteres",
                f"Total title characters ({total_titles}) exceeds the limit of {MAX_TITLE_CHARS} characters",
            )
        )
    if total_paragraphs > MAX_PARAGRAPH_CHARS:
        raise SlideValidationError(
            localized(
                language,
                f"Total de caracteres dos parágrafos ({total_paragraphs}) excede o limite de {MAX_PARAGRAPH_CHARS} caracteres",
                f"Total paragraph characters ({total_paragraphs}) exceeds the limit of {MAX_PARAGRAPH_CHARS} characters",
            )
        )
    if total_images > MAX_IMAGE_CHARS:
        raise SlideValidationError(
            localized(
                language,
                f"Total de caracteres das descrições de imagem ({total_images}) excede o limite de {MAX_IMAGE_CHARS} caracteres",
                f"Total image description characters ({total_images}) exceeds the limit of {MAX_IMAGE_CHARS} characters",
            )
        )


class CarrosselAgent(BaseAgent[CarrosselInput, Carrossel]):
    """
    Agent responsible for generating a social-media carousel: one title,
    one paragraph and one image description per slide.
    """

    system_message_kind = "pure_json"

    async def run(self, input_data: CarrosselInput) -> Carrossel:
        prompt = render_prompt(input_data.prompt, quantidade=input_data.quantidade, tema=input_data.tema)
        logger.info(
            "CarrosselAgent request (model=%s, language=%s, slides=%s): %s",
            self.llm.model_name,
            input_data.language,
            input_data.quantidade,
            prompt,
        )

        carrossel = await self.llm.generate_structured(
            system_prompt=self.get_system_prompt(input_data.language),
            user_prompt=prompt,
            response_schema=Carrossel,
            schema_name="carrossel_schema",
        )

        if not carrossel.carrossel:
            raise LLMResponseError("CarrosselAgent returned no slides.")
        validate_slides(carrossel.carrossel, input_data.language)
        return carrossel
