"""Canned payloads returned by the generation routes while mock mode is on."""
from typing import Any

from app.core.language import normalize_language

PLANILHA = {
    "pt-BR": [
        "Dicas de produtividade",
        "Receitas rápidas",
        "Exercícios em casa",
        "Tecnologia para iniciantes",
        "Dicas de viagem",
    ],
    "en": [
        "Productivity tips",
        "Quick recipes",
        "Home workouts",
        "Technology for beginners",
        "Travel tips",
    ],
}

TEMAS = {
    "pt-BR": [
        "Como organizar sua rotina diária",
        "Aplicativos essenciais para produtividade",
        "Técnica Pomodoro explicada",
        "Dicas para reuniões eficientes",
        "Como evitar procrastinação",
    ],
    "en": [
        "How to organize your daily routine",
        "Essential productivity apps",
        "The Pomodoro technique explained",
        "Tips for efficient meetings",
        "How to stop procrastinating",
    ],
}

TEMAS_CARROSSEL = {
    "pt-BR": [
        "5 hábitos de pessoas produtivas",
        "Erros comuns ao planejar a semana",
        "Checklist para uma manhã eficiente",
        "Ferramentas gratuitas de organização",
        "Como definir metas realistas",
    ],
    "en": [
        "5 habits of productive people",
        "Common mistakes when planning your week",
        "Checklist for an efficient morning",
        "Free organization tools",
        "How to set realistic goals",
    ],
}

ROTEIRO = {
    "pt-BR": [
        {
            "narracao": "Você já se sentiu sobrecarregado com tantas tarefas para fazer? Neste vídeo vamos te mostrar como organizar sua rotina de forma eficiente.",
            "imagem": "Pessoa estressada com muitas notas adesivas e tarefas pendentes.",
        },
        {
            "narracao": "O primeiro passo é listar todas as suas tarefas em um único lugar. Pode ser um aplicativo ou um caderno físico.",
            "imagem": "Mão escrevendo em um caderno ou usando um aplicativo de lista de tarefas no celular.",
        },
        {
            "narracao": "Em seguida, classifique suas tarefas por prioridade. O que precisa ser feito hoje? O que pode esperar até amanhã?",
            "imagem": "Lista de tarefas com códigos de cores indicando diferentes níveis de prioridade.",
        },
        {
            "narracao": "Reserve blocos de tempo específicos para cada tarefa importante. Isso ajuda a manter o foco e evitar distrações.",
            "imagem": "Calendário ou agenda com blocos de tempo coloridos para diferentes atividades.",
        },
        {
            "narracao": "Por fim, revise sua rotina regularmente e ajuste conforme necessário.",
            "imagem": "Pessoa analisando um calendário ou lista de tarefas e fazendo ajustes.",
        },
    ],
    "en": [
        {
            "narracao": "Have you ever felt overwhelmed by everything on your to-do list? In this video we show you how to organize your routine efficiently.",
            "imagem": "Stressed person surrounded by sticky notes and pending tasks.",
        },
        {
            "narracao": "The first step is to list all your tasks in one place. It can be an app or a paper notebook.",
            "imagem": "Hand writing in a notebook or using a to-do app on a phone.",
        },
        {
            "narracao": "Next, sort your tasks by priority. What has to be done today? What can wait until tomorrow?",
            "imagem": "Color-coded task list showing different priority levels.",
        },
        {
            "narracao": "Block specific time slots for each important task. It helps you keep focus and avoid distractions.",
            "imagem": "Calendar with colorful time blocks for different activities.",
        },
        {
            "narracao": "Finally, review your routine regularly and adjust it as needed.",
            "imagem": "Person reviewing a calendar and making adjustments.",
        },
    ],
}

CARROSSEL = {
    "pt-BR": [
        {
            "titulo": "Organize sua rotina",
            "paragrafo": "Pequenas mudanças no seu dia fazem uma grande diferença na produtividade.",
            "imagem": "Mesa organizada com agenda aberta e xícara de café.",
        },
        {
            "titulo": "Liste tudo",
            "paragrafo": "Anote todas as tarefas em um único lugar para enxergar o que precisa ser feito.",
            "imagem": "Caderno com lista de tarefas escrita à mão.",
        },
        {
            "titulo": "Defina prioridades",
            "paragrafo": "Comece pelo que é importante e urgente, deixe o resto para depois.",
            "imagem": "Matriz de Eisenhower desenhada em um quadro branco.",
        },
    ],
    "en": [
        {
            "titulo": "Organize your routine",
            "paragrafo": "Small changes in your day make a big difference in productivity.",
            "imagem": "Tidy desk with an open planner and a cup of coffee.",
        },
        {
            "titulo": "Write it all down",
            "paragrafo": "Keep every task in one place so you can see what needs to be done.",
            "imagem": "Notebook with a handwritten to-do list.",
        },
        {
            "titulo": "Set priorities",
            "paragrafo": "Start with what is important and urgent, leave the rest for later.",
            "imagem": "Eisenhower matrix drawn on a whiteboard.",
        },
    ],
}


def _pick(table: dict[str, Any], language: str | None) -> Any:
    return table[normalize_language(language)]


def mock_planilha(language: str | None = None) -> list[str]:
    return list(_pick(PLANILHA, language))


def mock_temas(language: str | None = None) -> list[str]:
    return list(_pick(TEMAS, language))


def mock_temas_carrossel(language: str | None = None) -> list[str]:
    return list(_pick(TEMAS_CARROSSEL, language))


def mock_roteiro(language: str | None = None) -> list[dict[str, str]]:
    return [dict(cena) for cena in _pick(ROTEIRO, language)]


def mock_carrossel(quantidade: int | None = None, language: str | None = None) -> list[dict[str, str]]:
    slides = [dict(slide) for slide in _pick(CARROSSEL, language)]
    if quantidade:
        slides = slides[:quantidade]
    return slides
