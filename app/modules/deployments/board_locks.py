"""Thread-safe registry of board_id -> lock serializing generation runs for the same board."""
import threading
import logging
from contextlib import contextmanager
from typing import Iterator

logger = logging.getLogger(__name__)
_lock = threading.Lock()
_registry: dict[str, list] = {}  # board_id -> [lock, holders]


def _acquire_entry(board_id: str) -> threading.Lock:
    with _lock:
        entry = _registry.get(board_id)
        if entry is None:
            entry = [threading.Lock(), 0]
            _registry[board_id] = entry
        entry[1] += 1
        return entry[0]


def _release_entry(board_id: str) -> None:
    with _lock:
        entry = _registry.get(board_id)
        if entry is None:
            return
        entry[1] -= 1
        if entry[1] <= 0:
            _registry.pop(board_id, None)


def is_locked(board_id: str) -> bool:
    with _lock:
        entry = _registry.get(board_id)
        return entry is not None and entry[0].locked()


@contextmanager
def hold(board_id: str) -> Iterator[None]:
    """Block until no other run holds this board, then hold it for the duration of the block."""
    board_lock = _acquire_entry(board_id)
    if board_lock.locked():
        logger.info(f"Waiting for running generation on board {board_id}")
    board_lock.acquire()
    try:
        yield
    finally:
        board_lock.release()
        _release_entry(board_id)
