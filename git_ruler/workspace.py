"""First-run workspace scaffolding."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

SETUP_MARKER = ".gitruler"
SETUP_MARKER_CONTENT = "setup done"


def is_setup_done(repo: Path) -> bool:
    return (repo / SETUP_MARKER).exists()


def ensure_setup(repo: Path, setup_files: Mapping[str, str]) -> list[Path]:
    """Write setup files once per repository and return the files created.

    Files that already exist are left untouched. The marker file is written
    last, so a failed setup is retried on the next run. ``OSError`` propagates.
    """
    if is_setup_done(repo):
        return []

    created: list[Path] = []
    for rel_path, content in setup_files.items():
        target = repo / rel_path
        target.parent.mkdir(parents=True, exist_ok=True)
        try:
            with target.open("x", encoding="utf-8") as file_obj:
                file_obj.write(content)
        except FileExistsError:
            logger.warning("I was asked to create a file that already exists: %s", target)
            continue
        created.append(target)

    (repo / SETUP_MARKER).write_text(SETUP_MARKER_CONTENT, encoding="utf-8")
    return created
