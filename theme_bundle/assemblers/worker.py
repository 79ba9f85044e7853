"""Optional production build step run alongside the parsing tasks."""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol, Sequence

logger = logging.getLogger(__name__)


class BuildWorker(Protocol):
    def production(self) -> None: ...


@dataclass(slots=True)
class CommandBuildWorker:
    """Runs a theme's production build command, e.g. ``npm run build``."""

    command: Sequence[str]
    cwd: Path

    def production(self) -> None:
        logger.info("Theme task Started...")
        proc = subprocess.run(
            list(self.command),
            cwd=self.cwd,
            check=False,
            capture_output=True,
            text=True,
        )
        if proc.stdout:
            logger.debug("%s", proc.stdout.strip())
        if proc.returncode != 0:
            detail = proc.stderr.strip() or proc.stdout.strip()
            raise RuntimeError(f"Build command failed (exit {proc.returncode}): {detail}")
        logger.info("ok -- Theme task Finished")
