"""
Compile a board graph into the master prompt sent to the language model.

Section caps keep the prompt bounded regardless of board size; they are not
configurable.
"""

from typing import List, Optional
from app.modules.boards.schemas import BoardNode, BoardResponse, DevelopmentClass, Persona, UseCase

MAX_PERSONAS = 3
MAX_USE_CASES = 3
MAX_CLASSES = 5
MAX_KEY_FEATURES = 10
KEY_FEATURE_MAX_LEVEL = 1

GENERATION_INSTRUCTIONS = """BUILD A COMPLETE, WORKING WEB APPLICATION.

Create ONLY these essential elements:
1. 2-3 main entities (JSON schema)
2. 2-3 main React pages
3. 1-2 reusable components (if needed)
4. Optional layout

Important rules:
- Use import { base44 } from '@/api/base44Client' for entities
- Use shadcn/ui components from @/components/ui/
- Use Tailwind CSS for styling
- Use ONLY lucide-react icons that exist
- Keep the code SIMPLE and WORKING
- Do NOT include explanations, ONLY valid code
- Every file must be syntactically correct

IMPORTANT: Reply ONLY with valid JSON in the specified format."""

RESPONSE_SCHEMA = {
    "type": "object",
    "properties": {
        "entities": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "schema": {"type": "object"},
                },
                "required": ["name", "schema"],
            },
        },
        "pages": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "code": {"type": "string"},
                },
                "required": ["name", "code"],
            },
        },
        "components": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "code": {"type": "string"},
                },
            },
        },
        "layout": {
            "type": "object",
            "properties": {
                "code": {"type": "string"},
            },
        },
    },
    "required": ["entities", "pages"],
}


def _or_na(value: Optional[str]) -> str:
    return value or "N/A"


def compile_master_prompt(
    board: BoardResponse,
    nodes: List[BoardNode],
    development_classes: List[DevelopmentClass],
    personas: List[Persona],
    use_cases: List[UseCase],
) -> str:
    lines: List[str] = [f"# Master Prompt - Application: {board.name}", ""]

    if board.description:
        lines += ["## Project Description", board.description, ""]

    lines += ["## Main Objectives", ""]
    top_level = [n for n in nodes if n.data.level == 0]
    if top_level:
        for node in top_level:
            lines.append(f"- {node.data.objective or node.data.title or 'N/A'}")
    else:
        lines.append(f"- Build a working web application based on the project {board.name}")
    lines.append("")

    if personas:
        lines += ["## Personas", ""]
        for persona in personas[:MAX_PERSONAS]:
            lines.append(f"**{_or_na(persona.name)}**: {_or_na(persona.description)}")
        lines.append("")

    if use_cases:
        lines += ["## Main Use Cases", ""]
        for use_case in use_cases[:MAX_USE_CASES]:
            lines.append(f"### {_or_na(use_case.title)}")
            if use_case.steps:
                lines.append("Steps: " + " → ".join(step.action or "" for step in use_case.steps))
            lines.append("")

    if development_classes:
        lines += ["## Architecture Components", ""]
        for cls in development_classes[:MAX_CLASSES]:
            lines.append(f"**{_or_na(cls.name)}**: {_or_na(cls.description)}")
        lines.append("")

    if nodes:
        lines += ["## Key Features", ""]
        features = [n for n in nodes if n.level <= KEY_FEATURE_MAX_LEVEL][:MAX_KEY_FEATURES]
        for node in features:
            lines.append(f"- [L{node.level}] {_or_na(node.data.title)}: {node.data.objective or ''}")

    return "\n".join(lines) + "\n"


def build_generation_prompt(master_prompt: str) -> str:
    """Master prompt followed by the fixed generation instructions"""
    return f"{master_prompt}\n{GENERATION_INSTRUCTIONS}"
