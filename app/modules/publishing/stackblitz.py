import base64
import gzip
import json
import time
from typing import Any, Dict, Optional

from app.core.errors import ValidationError
from app.modules.publishing.schemas import StackBlitzFile, StackBlitzResponse


def build_stackblitz_project(
    files: Optional[Dict[str, StackBlitzFile]],
    project_name: Optional[str],
) -> StackBlitzResponse:
    """Project payload for the StackBlitz SDK, plus a gzip+base64 copy for short URLs."""
    if not files or not project_name:
        raise ValidationError("Missing required parameters: files and projectName")

    payload: Dict[str, Any] = {
        "title": project_name,
        "description": f"Project generated by Intent Flow: {project_name}",
        "template": "node",
        "files": {path: file.content for path, file in files.items()},
    }
    compressed = gzip.compress(json.dumps(payload).encode("utf-8"))
    return StackBlitzResponse(
        project_id=f"intent-flow-{int(time.time() * 1000)}",
        payload=payload,
        payload_compressed=base64.b64encode(compressed).decode("ascii"),
    )
