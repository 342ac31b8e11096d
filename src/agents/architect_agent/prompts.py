"""Prompt text used to steer the slide architect LLM.

The JSON shape shown to the model is rendered from the pydantic models in
``models.py`` so the prompt and the validator can never disagree on field
names or enum values.
"""

from __future__ import annotations

import types
from dataclasses import dataclass
from enum import Enum
from inspect import isclass
from typing import Annotated, Any, Dict, List, Type, Union, get_args, get_origin

from annotated_types import Ge, Gt, Le, Lt
from pydantic import BaseModel
from pydantic.fields import FieldInfo

from src.agents.template_introspection.schemas import TemplateDescriptor
from src.agents.template_introspection.service import format_template_for_prompt

from .models import CloningInstructions, PresentationPlan

PLAN_MODE = "plan"
CLONING_MODE = "cloning"

_INDENT = "  "
_UNION_TYPES = (Union, types.UnionType)


@dataclass(frozen=True)
class ComposedPrompt:
    system: str
    user: str


# ---- Schema rendering ----


def _strip_annotated(tp: Any) -> Any:
    while get_origin(tp) is Annotated:
        tp = get_args(tp)[0]
    return tp


def _bounds(metadata: List[Any]) -> str:
    parts = []
    for item in metadata:
        if isinstance(item, Gt):
            parts.append(f"> {item.gt}")
        elif isinstance(item, Ge):
            parts.append(f">= {item.ge}")
        elif isinstance(item, Lt):
            parts.append(f"< {item.lt}")
        elif isinstance(item, Le):
            parts.append(f"<= {item.le}")
    return f" ({', '.join(parts)})" if parts else ""


def _render_type(tp: Any, depth: int, description: str = "", metadata: List[Any] = ()) -> str:
    tp = _strip_annotated(tp)
    origin = get_origin(tp)

    if origin in _UNION_TYPES:
        members = [_strip_annotated(arg) for arg in get_args(tp) if arg is not type(None)]
        if members and all(member in (int, float) for member in members):
            return f"number{_bounds(list(metadata))}" + (f" - {description}" if description else "")
        if len(members) == 1:
            return _render_type(members[0], depth, description, metadata)
        return " | ".join(_render_type(member, depth) for member in members)

    if origin in (list, List):
        (item_type,) = get_args(tp) or (Any,)
        pad = _INDENT * (depth + 1)
        item = _render_type(item_type, depth + 1, description)
        return f"[\n{pad}{item}\n{_INDENT * depth}]"

    if isclass(tp) and issubclass(tp, Enum):
        return " | ".join(f'"{member.value}"' for member in tp)

    if isclass(tp) and issubclass(tp, BaseModel):
        return render_schema(tp, depth)

    if tp is str:
        return f'"string - {description}"' if description else '"string"'

    if tp is bool:
        name = "boolean"
    elif tp is int:
        name = "integer"
    elif tp is float:
        name = "number"
    else:
        name = getattr(tp, "__name__", str(tp))
    rendered = f"{name}{_bounds(list(metadata))}"
    return f"{rendered} - {description}" if description else rendered


def _render_field(name: str, field: FieldInfo, depth: int) -> str:
    rendered = _render_type(field.annotation, depth, field.description or "", field.metadata)
    if not field.is_required():
        rendered = f"{rendered} (optional)"
    return f'{_INDENT * depth}"{name}": {rendered}'


def render_schema(model: Type[BaseModel], indent: int = 0) -> str:
    """Render a pydantic model as the JSON skeleton shown to the model."""

    lines = [
        _render_field(name, field, indent + 1)
        for name, field in model.model_fields.items()
    ]
    body = ",\n".join(lines)
    return f"{{\n{body}\n{_INDENT * indent}}}"


# ---- Locale labels ----

_SYSTEM_PROMPTS: Dict[str, Dict[str, str]] = {
    "en": {
        PLAN_MODE: (
            "You are an expert presentation designer. Your role is to analyze presentation "
            "templates (slide images) and create a detailed plan that turns raw text into a "
            "professional presentation.\n\n"
            "## Your skills:\n"
            "- Analyze the visual style of slides (colors, typography, layout)\n"
            "- Identify layout types (title, lists, image and text, etc.)\n"
            "- Map the user's content onto the appropriate layouts\n"
            "- Give precise, actionable design instructions\n\n"
            "## Output format:\n"
            "You must ALWAYS answer with valid JSON that follows the provided schema exactly.\n"
            "Never include text before or after the JSON."
        ),
        CLONING_MODE: (
            "You are an expert PowerPoint presentation designer. Your mission is to produce "
            "detailed instructions for building a presentation with the **Template Cloning** method.\n\n"
            "## Context: Template Cloning\n\n"
            "Template Cloning means:\n"
            "1. Analyze the PPTX template the user provided\n"
            "2. Identify the kinds of slides in that template (title, content, conclusion, etc.)\n"
            "3. For every new slide, choose which template slide to clone\n"
            "4. Replace only the text in the cloned slide (the design stays intact)\n\n"
            "The goal is a presentation that keeps the exact visual style of the user's template."
        ),
    },
    "fr": {
        PLAN_MODE: (
            "Tu es un expert en design de présentations. Ton rôle est d'analyser des templates "
            "de présentation (images de slides) et de créer un plan détaillé pour transformer du "
            "contenu texte brut en une présentation professionnelle.\n\n"
            "## Tes compétences :\n"
            "- Analyser le style visuel des slides (couleurs, typographie, mise en page)\n"
            "- Identifier les types de layouts (titre, listes, image+texte, etc.)\n"
            "- Mapper le contenu utilisateur sur les layouts appropriés\n"
            "- Donner des instructions de design précises et actionnables\n\n"
            "## Format de sortie :\n"
            "Tu dois TOUJOURS répondre en JSON valide suivant exactement le schéma fourni.\n"
            "Ne jamais inclure de texte avant ou après le JSON."
        ),
        CLONING_MODE: (
            "Tu es un expert en design de présentations PowerPoint. Ta mission est de générer des "
            "instructions détaillées pour créer une présentation en utilisant la méthode du "
            "**Template Cloning**.\n\n"
            "## Contexte : Template Cloning\n\n"
            "Le Template Cloning consiste à :\n"
            "1. Analyser le template PPTX que l'utilisateur a fourni\n"
            "2. Identifier les différents types de slides dans ce template (titre, contenu, conclusion, etc.)\n"
            "3. Pour chaque nouvelle slide à créer, choisir quelle slide du template cloner\n"
            "4. Remplacer uniquement le texte dans la slide clonée (le design reste intact)\n\n"
            "L'objectif est de produire une présentation qui conserve exactement le style visuel "
            "du template de l'utilisateur."
        ),
    },
}

_PLAN_LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "task": "Task",
        "template": "Template provided",
        "images": "slide images",
        "content": "Content to transform",
        "instructions": "Instructions",
        "analyze": "Analyze each template image to understand",
        "style": "visual style (colors, fonts, spacing)",
        "layout": "available layout types",
        "elements": "recurring visual elements",
        "create": "Create a presentation plan by mapping content to layouts",
        "respond": "Respond only with a valid JSON object following this exact schema",
        "range": "reference_image_index must be between 0 and {last} (0-based, {count} images).",
        "precise": "BE VERY PRECISE about 'modifications'. Split every change into its own step.",
        "details": "Give visual details (font, approximate size) in 'style_details'.",
        "markdown": "The 'body' content must be MARKDOWN.",
    },
    "fr": {
        "task": "Tâche",
        "template": "Template fourni",
        "images": "images de slides",
        "content": "Contenu à transformer",
        "instructions": "Instructions",
        "analyze": "Analyse chaque image du template pour comprendre",
        "style": "le style visuel (couleurs, polices, espacements)",
        "layout": "les types de layouts disponibles",
        "elements": "les éléments visuels récurrents",
        "create": "Crée un plan de présentation en mappant le contenu sur les layouts",
        "respond": "Réponds uniquement avec un objet JSON valide suivant ce schéma exact",
        "range": "reference_image_index doit être compris entre 0 et {last} (base 0, {count} images).",
        "precise": "SOIS TRÈS PRÉCIS sur les 'modifications'. Découpe chaque changement en une étape.",
        "details": "Donne des détails visuels (police, taille approximative) dans 'style_details'.",
        "markdown": "Le contenu 'body' doit être en MARKDOWN.",
    },
}

_CLONING_LABELS: Dict[str, Dict[str, str]] = {
    "en": {
        "data": "Provided data",
        "template": "Analyzed template",
        "legend": (
            "This analysis contains:\n"
            "- total slides: number of slides in the template\n"
            "- slides: each slide with its index (0 = first slide), layout name, detected "
            "category, title/body flags and number of text zones\n"
            "- color palette: dominant template colors\n"
            "- fonts: fonts used"
        ),
        "content": "User content",
        "mission": "Your mission",
        "steps": (
            "For every slide you create, you must:\n"
            "1. **Choose which template slide to clone** by analyzing the template data\n"
            "2. **Specify the exact content** to insert (title and body)\n"
            "3. **State precisely** which template slide to use"
        ),
        "format": "MANDATORY output format",
        "respond": "Answer ONLY with a valid JSON object following this EXACT structure:",
        "rules": "CRITICAL rules",
        "range": "template_slide_reference.index must ALWAYS be a valid index between 0 and {last} ({count} template slides).",
        "palette": "Use ONLY the colors and fonts present in the template data.",
        "json_only": "Generate ONLY valid JSON, nothing else (no markdown, no text before or after).",
        "spread": (
            "Spread slides sensibly: first slide uses index 0 (usually the title slide), content "
            "slides use \"content\" template slides, the last slide uses a \"conclusion\" or "
            "\"content\" template slide."
        ),
        "start": "Start generating now.",
    },
    "fr": {
        "data": "Données fournies",
        "template": "Template analysé",
        "legend": (
            "Cette analyse contient :\n"
            "- total slides : nombre de slides dans le template\n"
            "- slides : chaque slide avec son index (0 = première slide), le nom du layout, la "
            "catégorie détectée, les indicateurs titre/corps et le nombre de zones de texte\n"
            "- color palette : couleurs dominantes du template\n"
            "- fonts : polices utilisées"
        ),
        "content": "Contenu utilisateur",
        "mission": "Ta mission",
        "steps": (
            "Pour chaque slide que tu crées, tu dois :\n"
            "1. **Choisir quelle slide du template cloner** en analysant les données du template\n"
            "2. **Spécifier le contenu exact** à insérer (titre et corps)\n"
            "3. **Indiquer précisément** quelle slide du template utiliser"
        ),
        "format": "Format de sortie OBLIGATOIRE",
        "respond": "Tu dois répondre UNIQUEMENT avec un objet JSON valide suivant cette structure EXACTE :",
        "rules": "Règles CRITIQUES",
        "range": "template_slide_reference.index doit TOUJOURS être un index valide entre 0 et {last} ({count} slides dans le template).",
        "palette": "Utilise UNIQUEMENT les couleurs et polices présentes dans les données du template.",
        "json_only": "Ne génère QUE du JSON valide, rien d'autre (pas de markdown, pas de texte avant/après).",
        "spread": (
            "Répartis intelligemment : la première slide utilise l'index 0 (généralement la slide "
            "de titre), les slides de contenu utilisent les slides \"content\" du template, la "
            "dernière slide utilise une slide \"conclusion\" ou \"content\"."
        ),
        "start": "Commence maintenant la génération.",
    },
}


def _locale(table: Dict[str, Dict[str, str]], language: str) -> Dict[str, str]:
    try:
        return table[language]
    except KeyError:
        raise ValueError(f"Unsupported language '{language}'. Expected one of {sorted(table)}") from None


def system_prompt(mode: str, language: str = "en") -> str:
    prompts = _locale(_SYSTEM_PROMPTS, language)
    if mode not in prompts:
        raise ValueError(f"Unknown prompt mode '{mode}'")
    return prompts[mode]


def compose_plan_prompt(user_content: str, image_count: int, language: str = "en") -> ComposedPrompt:
    """Build the plan-mode prompt for ``image_count`` template images."""

    labels = _locale(_PLAN_LABELS, language)
    user = (
        f"## {labels['task']}\n\n"
        f"### {labels['template']}\n"
        f"{image_count} {labels['images']}\n\n"
        f"### {labels['content']}\n"
        '"""\n'
        f"{user_content}\n"
        '"""\n\n'
        f"### {labels['instructions']}\n"
        f"1. {labels['analyze']}:\n"
        f"   - {labels['style']}\n"
        f"   - {labels['layout']}\n"
        f"   - {labels['elements']}\n\n"
        f"2. {labels['create']}\n\n"
        f"3. {labels['respond']}:\n\n"
        "```json\n"
        f"{render_schema(PresentationPlan)}\n"
        "```\n\n"
        "IMPORTANT:\n"
        f"- {labels['range'].format(last=image_count - 1, count=image_count)}\n"
        f"- {labels['precise']}\n"
        f"- {labels['details']}\n"
        f"- {labels['markdown']}\n"
    )
    return ComposedPrompt(system=system_prompt(PLAN_MODE, language), user=user)


def compose_cloning_prompt(template: TemplateDescriptor, user_content: str, language: str = "en") -> ComposedPrompt:
    """Build the cloning-mode prompt around a parsed template."""

    labels = _locale(_CLONING_LABELS, language)
    total = template.total_slides
    user = (
        f"## {labels['data']}\n\n"
        f"### {labels['template']}\n"
        f"{format_template_for_prompt(template)}\n\n"
        f"{labels['legend']}\n\n"
        f"### {labels['content']}\n"
        f"{user_content}\n\n"
        f"## {labels['mission']}\n\n"
        f"{labels['steps']}\n\n"
        f"## {labels['format']}\n\n"
        f"{labels['respond']}\n\n"
        f"{render_schema(CloningInstructions)}\n\n"
        f"## {labels['rules']}\n\n"
        f"1. {labels['range'].format(last=total - 1, count=total)}\n"
        f"2. {labels['palette']}\n"
        f"3. {labels['json_only']}\n"
        f"4. {labels['spread']}\n\n"
        f"{labels['start']}"
    )
    return ComposedPrompt(system=system_prompt(CLONING_MODE, language), user=user)


__all__ = [
    "CLONING_MODE",
    "ComposedPrompt",
    "PLAN_MODE",
    "compose_cloning_prompt",
    "compose_plan_prompt",
    "render_schema",
    "system_prompt",
]
