"""
Typed errors raised by the generation and publishing pipeline.

Each error carries the HTTP status it maps to plus the envelope fields the API
returns on failure (``error``, ``details``, ``hint``). Rendering happens in the
exception handler registered in ``app.main``.
"""

from typing import Any, Dict, Optional


class PipelineError(Exception):
    status_code: int = 500
    default_hint: Optional[str] = None

    def __init__(self, error: str, details: Any = None, hint: Optional[str] = None):
        super().__init__(error)
        self.error = error
        self.details = details
        self.hint = hint if hint is not None else self.default_hint

    def to_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"success": False, "error": self.error}
        if self.details is not None:
            body["details"] = self.details
        if self.hint:
            body["hint"] = self.hint
        return body


class ValidationError(PipelineError):
    status_code = 400


class EmptyBoardError(ValidationError):
    def __init__(self, board_id: str):
        super().__init__(
            "The board has no nodes. Add at least one intent before generating.",
            details="Empty board",
        )
        self.board_id = board_id


class NotFoundError(PipelineError):
    status_code = 404


class BoardNotFound(NotFoundError):
    def __init__(self, board_id: str, details: Any = None):
        super().__init__("Board not found", details=details)
        self.board_id = board_id


class NoDeploymentFound(NotFoundError):
    def __init__(self, board_id: str, error: str = "No deployment found. Please generate the project first."):
        super().__init__(error)
        self.board_id = board_id


class InvalidTransition(PipelineError):
    status_code = 409


class ConcurrentUpdateError(PipelineError):
    status_code = 409
    default_hint = "Another run updated this deployment; retry the request"


class UpstreamError(PipelineError):
    status_code = 500


class UpstreamNotConfigured(UpstreamError):
    default_hint = "Check that the provider credentials are configured in the environment"


class GenerationFailed(UpstreamError):
    default_hint = "Check that OPENAI_API_KEY is configured and valid"


class RepositoryCreationFailed(UpstreamError):
    def __init__(self, details: Any = None):
        super().__init__("Failed to create GitHub repository", details=details)


class TreeCreationFailed(UpstreamError):
    def __init__(self, details: Any = None):
        super().__init__("Failed to create file tree", details=details)


class CommitCreationFailed(UpstreamError):
    def __init__(self, details: Any = None):
        super().__init__("Failed to create commit", details=details)


class RefUpdateFailed(UpstreamError):
    def __init__(self, details: Any = None):
        super().__init__("Failed to update branch reference", details=details)


class PartialDataError(PipelineError):
    """Non-fatal load failure. Recorded as a warning, never raised out of a service."""
