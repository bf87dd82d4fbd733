"""Best-effort removal of intermediate and partial output files."""

import logging
from collections.abc import Callable, Iterable
from pathlib import Path

from pydantic import BaseModel

logger = logging.getLogger(__name__)


class DeleteFailure(BaseModel):
    path: str
    error: str


def delete_files(paths: Iterable[str | Path]) -> list[DeleteFailure]:
    """Delete every path that exists; failures are returned, never raised."""
    failures = []
    for path in paths:
        try:
            Path(path).unlink(missing_ok=True)
        except OSError as e:
            failures.append(DeleteFailure(path=str(path), error=str(e)))
    return failures


def clean_files(paths: Iterable[str | Path], log: Callable[[str], None] | None = None) -> list[DeleteFailure]:
    """Delete paths and report each outcome to ``log``."""
    paths = [str(p) for p in paths]
    failures = {f.path: f for f in delete_files(paths)}
    for path in paths:
        failed = failures.get(path)
        if failed is None:
            message = f"Deleted file {path}"
        else:
            message = f"Failed to delete file {path} Exception: {failed.error}"
            logger.warning(message)
        if log:
            log(message)
    return list(failures.values())
