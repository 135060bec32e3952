"""Host utility checks."""

from __future__ import annotations

import logging
import shutil
from typing import Iterable

from winebuild.errors import MissingToolError

logger = logging.getLogger(__name__)

REQUIRED_COMMANDS = ("tar",)


def has_command(cmd: str) -> bool:
    """Check if a command is available on PATH."""
    return shutil.which(cmd) is not None


def check_commands(commands: Iterable[str] = REQUIRED_COMMANDS) -> None:
    """Raise MissingToolError naming the first command that is not installed."""
    for command in commands:
        if not has_command(command):
            raise MissingToolError(f"{command} is required")
        logger.debug(f"Found {command}")
