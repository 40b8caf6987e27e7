SYSTEM_MESSAGES = {
    "json": {
        "pt-BR": "Responda sempre em JSON válido.",
        "en": "Always respond with valid JSON.",
    },
    "pure_json": {
        "pt-BR": "Responda em JSON puro válido. Não use markdown ou blocos de código.",
        "en": "Respond in pure JSON. Do not use markdown or code blocks.",
    },
}

# Configuration keys holding the editable user prompt of each agent, per language.
PROMPT_KEYS = {
    "temas": {"pt-BR": "PROMPT_TEMAS", "en": "PROMPT_TEMAS_EN"},
    "temas_carrossel": {"pt-BR": "PROMPT_TEMAS_CARROSSEL", "en": "PROMPT_TEMAS_CARROSSEL_EN"},
    "roteiro": {"pt-BR": "PROMPT_ROTEIRO", "en": "PROMPT_ROTEIRO_EN"},
    "carrossel": {"pt-BR": "PROMPT_CARROSSEL", "en": "PROMPT_CARROSSEL_EN"},
}


def render_prompt(template: str, **values: object) -> str:
    prompt = template
    for key, value in values.items():
        prompt = prompt.replace("{" + key + "}", str(value))
    return prompt
