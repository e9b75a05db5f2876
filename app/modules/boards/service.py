from concurrent.futures import ThreadPoolExecutor
from pydantic import ValidationError as PydanticValidationError
from supabase import Client
from app.core.errors import BoardNotFound, PartialDataError
from app.core.results import Result
from app.modules.boards.schemas import (
    BoardNode,
    BoardResponse,
    DevelopmentClass,
    Persona,
    RelatedCollections,
    UseCase,
)
from typing import Any, Callable, Dict, List
import logging

logger = logging.getLogger(__name__)

RELATED_TABLES = {
    "development_classes": DevelopmentClass,
    "personas": Persona,
    "use_cases": UseCase,
}


class BoardService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def get_board(self, board_id: str) -> BoardResponse:
        """Get board by ID"""
        try:
            result = self.supabase.table("boards")\
                .select("*")\
                .eq("id", board_id)\
                .maybe_single()\
                .execute()
        except Exception as e:
            logger.error(f"Error loading board {board_id}: {str(e)}")
            raise BoardNotFound(board_id, details=str(e))

        if not result or not result.data:
            raise BoardNotFound(board_id)

        data = dict(result.data)
        data["nodes"] = data.get("nodes") or []
        return BoardResponse(**data)

    def get_nodes(self, board: BoardResponse) -> List[BoardNode]:
        """Nodes in graph insertion order"""
        return list(board.nodes)

    def _list_related(self, table: str, board_id: str) -> List[Dict[str, Any]]:
        result = self.supabase.table(table)\
            .select("*")\
            .eq("board_id", board_id)\
            .order("created_at")\
            .execute()
        return result.data or []

    def load_related(self, board_id: str) -> Result[RelatedCollections]:
        """
        Load development classes, personas and use cases concurrently.
        A collection that fails to load is replaced by an empty list and reported as a warning.
        """
        outcome: Result[RelatedCollections] = Result(RelatedCollections())
        loaders: Dict[str, Callable[[], List[Dict[str, Any]]]] = {
            table: (lambda t=table: self._list_related(t, board_id)) for table in RELATED_TABLES
        }

        with ThreadPoolExecutor(max_workers=len(loaders)) as pool:
            futures = {table: pool.submit(loader) for table, loader in loaders.items()}

        for table, future in futures.items():
            try:
                rows = future.result()
            except Exception as e:
                warning = PartialDataError(f"Could not load {table}: {str(e)}")
                logger.warning(f"Board {board_id}: {warning.error}; continuing without it")
                outcome.warn(warning.error)
                continue
            setattr(outcome.value, table, self._parse_rows(table, rows, outcome))

        logger.info(
            f"Related data for board {board_id}: "
            f"{len(outcome.value.development_classes)} classes, "
            f"{len(outcome.value.personas)} personas, "
            f"{len(outcome.value.use_cases)} use cases"
        )
        return outcome

    def _parse_rows(self, table: str, rows: List[Dict[str, Any]], outcome: Result) -> List[Any]:
        model = RELATED_TABLES[table]
        items = []
        for index, row in enumerate(rows):
            try:
                items.append(model(**_normalize_row(table, row)))
            except (PydanticValidationError, TypeError) as e:
                warning = PartialDataError(f"Skipped {table} row {index + 1}: {str(e)}")
                logger.warning(warning.error)
                outcome.warn(warning.error)
        return items


def _normalize_row(table: str, row: Any) -> Dict[str, Any]:
    if not isinstance(row, dict):
        raise TypeError(f"expected an object, got {type(row).__name__}")
    data = dict(row)
    if table == "use_cases":
        data["steps"] = data.get("steps") or []
    return data
