import time
from typing import Any, List, Optional
import logging

from app.core.errors import EmptyBoardError, PipelineError, UpstreamError, UpstreamNotConfigured
from app.modules.boards.service import BoardService
from app.modules.deployments import board_locks
from app.modules.deployments.schemas import DeploymentResponse, GenerateResponse
from app.modules.deployments.service import DeploymentService
from app.modules.generation.assembler import ArtifactAssembler
from app.modules.generation.llm_provider import LanguageModelProvider
from app.modules.generation.prompt_compiler import (
    RESPONSE_SCHEMA,
    build_generation_prompt,
    compile_master_prompt,
)

logger = logging.getLogger(__name__)


def validate_model_response(result: Any) -> List[str]:
    """
    Check the response shape in place. Missing or non-list entities/pages are
    coerced to empty lists and reported as warnings; a non-object response is an error.
    """
    if not isinstance(result, dict):
        raise UpstreamError("AI returned invalid format", details=type(result).__name__)
    warnings = []
    for key in ("entities", "pages"):
        if not isinstance(result.get(key), list):
            logger.warning(f"Missing {key} in AI response, continuing with none")
            warnings.append(f"AI response had no {key}")
            result[key] = []
    return warnings


class GenerationOrchestrator:
    def __init__(
        self,
        board_service: BoardService,
        deployment_service: DeploymentService,
        provider: Optional[LanguageModelProvider] = None,
    ):
        self.board_service = board_service
        self.deployment_service = deployment_service
        self.provider = provider

    def run(self, board_id: str) -> GenerateResponse:
        """
        Drive one generation run for a board and return the finalized deployment.

        Board lookup and the empty-board check happen before any write. Once the
        record is in ``building``, every failure is written back as ``failed``
        before it is raised.
        """
        logger.info(f"=== GENERATION START board={board_id} ===")
        board = self.board_service.get_board(board_id)
        nodes = self.board_service.get_nodes(board)
        logger.info(f"Board '{board.name}' loaded with {len(nodes)} node(s)")
        if not nodes:
            raise EmptyBoardError(board_id)

        related = self.board_service.load_related(board_id)
        warnings = list(related.warnings)

        with board_locks.hold(board_id):
            started_at = time.monotonic()
            deployment = self.deployment_service.start_build(board_id, "Starting app generation...")

            try:
                if self.provider is None:
                    raise UpstreamNotConfigured("Language model provider is not configured")

                master_prompt = compile_master_prompt(
                    board,
                    nodes,
                    related.value.development_classes,
                    related.value.personas,
                    related.value.use_cases,
                )
                prompt = build_generation_prompt(master_prompt)
                logger.info(f"Calling language model (prompt length: {len(prompt)})")
                result = self.provider.generate(prompt, RESPONSE_SCHEMA)

                warnings.extend(validate_model_response(result))
                logger.info(
                    f"AI response validated: {len(result['entities'])} entities, "
                    f"{len(result['pages'])} pages, {len(result.get('components') or [])} components"
                )

                assembler = ArtifactAssembler(board.name, len(related.value.development_classes))
                assembly = assembler.assemble(result, started_at)
                warnings.extend(assembly.warnings)
                metrics = assembly.value.metrics

                final = self.deployment_service.mark_deployed(
                    deployment,
                    assembly.value.generated_files,
                    assembly.value.deployed_code,
                    metrics,
                    result,
                    f"Deployment completed in {metrics.deployment_time_seconds}s: "
                    f"{metrics.total_entities} entities, {metrics.total_pages} pages, "
                    f"{metrics.total_components} components",
                )
            except Exception as e:
                self._record_failure(deployment, e)
                if isinstance(e, PipelineError):
                    raise
                raise UpstreamError(
                    str(e) or type(e).__name__,
                    details=type(e).__name__,
                    hint="Check function logs for details",
                ) from e

        logger.info(f"=== GENERATION END board={board_id} (SUCCESS) ===")
        return GenerateResponse(deployment=final, metrics=metrics, warnings=warnings)

    def _record_failure(self, deployment: DeploymentResponse, error: Exception) -> None:
        message = error.error if isinstance(error, PipelineError) else str(error)
        logger.error(f"Generation failed for board {deployment.board_id}: {message}", exc_info=error)
        try:
            self.deployment_service.mark_failed(deployment, f"Deployment failed: {message}")
        except Exception as update_error:
            logger.error(f"Failed to update deployment status: {str(update_error)}")
