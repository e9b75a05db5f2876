"""
Turn a validated model response into the artifact file map, the human-readable
code bundle and the run metrics.

Items are processed one by one; a malformed entity, page or component is
skipped with a warning so one bad item never discards the rest of the output.
"""

import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging

from app.core.results import Result
from app.modules.deployments.schemas import DeploymentMetrics, GeneratedFiles
from app.modules.generation.code_extractor import extract_code

logger = logging.getLogger(__name__)

LOW_COMPLEXITY_MAX_LINES = 500
MEDIUM_COMPLEXITY_MAX_LINES = 2000


@dataclass
class Assembly:
    generated_files: GeneratedFiles
    deployed_code: str
    metrics: DeploymentMetrics


def estimate_complexity(total_lines: int) -> str:
    if total_lines < LOW_COMPLEXITY_MAX_LINES:
        return "Bassa"
    if total_lines < MEDIUM_COMPLEXITY_MAX_LINES:
        return "Media"
    return "Alta"


def _header(board_name: str, generated_at: datetime) -> str:
    rule = "// ===================================="
    return (
        f"{rule}\n"
        f"// Project: {board_name}\n"
        f"// Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S')} UTC\n"
        f"{rule}\n\n"
    )


def _item_name(item: Any) -> str:
    if not isinstance(item, dict):
        raise ValueError("item is not an object")
    name = item.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValueError("missing name")
    return name.strip()


def _render_schema(schema: Any) -> str:
    if isinstance(schema, str):
        schema = json.loads(schema)
    if not isinstance(schema, dict):
        raise ValueError(f"schema must be an object, got {type(schema).__name__}")
    return json.dumps(schema, indent=2, ensure_ascii=False)


def _render_code(code: Any) -> str:
    if not isinstance(code, str):
        raise ValueError(f"code must be a string, got {type(code).__name__}")
    return extract_code(code)


def _layout_code(layout: Any) -> Optional[str]:
    if isinstance(layout, dict):
        layout = layout.get("code")
    if isinstance(layout, str) and layout.strip():
        return extract_code(layout)
    return None


class ArtifactAssembler:
    def __init__(self, board_name: str, total_classes: int = 0):
        self.board_name = board_name
        self.total_classes = total_classes

    def assemble(self, response: Dict[str, Any], started_at: float) -> Result[Assembly]:
        """
        Args:
            response: validated model response with ``entities`` and ``pages`` lists
            started_at: ``time.monotonic()`` taken when the orchestration run began
        """
        warnings: List[str] = []
        files = GeneratedFiles()
        parts: List[str] = [_header(self.board_name, datetime.now(timezone.utc))]

        for index, entity in enumerate(response.get("entities") or []):
            try:
                name = _item_name(entity)
                schema = _render_schema(entity.get("schema"))
            except (ValueError, TypeError) as e:
                warnings.append(self._skip("entity", index, entity, e))
                continue
            files.entities[name] = schema
            parts.append(f"// Entity: {name}\n{schema}\n\n")

        layout = _layout_code(response.get("layout"))
        if layout:
            files.layout = layout
            parts.append(f"// LAYOUT\n{layout}\n\n")

        for index, page in enumerate(response.get("pages") or []):
            try:
                name = _item_name(page)
                code = _render_code(page.get("code"))
            except (ValueError, TypeError) as e:
                warnings.append(self._skip("page", index, page, e))
                continue
            files.pages[name] = code
            parts.append(f"// Page: {name}\n{code}\n\n")

        components = response.get("components")
        if isinstance(components, list):
            for index, component in enumerate(components):
                try:
                    name = _item_name(component)
                    code = _render_code(component.get("code"))
                except (ValueError, TypeError) as e:
                    warnings.append(self._skip("component", index, component, e))
                    continue
                files.components[name] = code
                parts.append(f"// Component: {name}\n{code}\n\n")

        deployed_code = "".join(parts)
        total_lines = len(deployed_code.split("\n"))
        elapsed = time.monotonic() - started_at
        metrics = DeploymentMetrics(
            total_classes=self.total_classes,
            total_entities=len(files.entities),
            total_pages=len(files.pages),
            total_components=len(files.components),
            total_lines=total_lines,
            estimated_complexity=estimate_complexity(total_lines),
            deployment_time_seconds=int(elapsed + 0.5),
        )
        logger.info(f"Assembled artifacts for '{self.board_name}': {metrics.model_dump()}")
        return Result(Assembly(files, deployed_code, metrics), warnings)

    @staticmethod
    def _skip(kind: str, index: int, item: Any, error: Exception) -> str:
        label = item.get("name") if isinstance(item, dict) and item.get("name") else f"#{index + 1}"
        message = f"Skipped {kind} {label}: {error}"
        logger.warning(message)
        return message
