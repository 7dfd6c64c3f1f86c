#!/usr/bin/env python3

from .main import cli, configure_logging
from .publish import PublishResult, publish
from .shell import GitCommandError, get_subprocess_env, run_command

__all__ = [
    "configure_logging",
    "cli",
    "publish",
    "PublishResult",
    "run_command",
    "get_subprocess_env",
    "GitCommandError",
]
