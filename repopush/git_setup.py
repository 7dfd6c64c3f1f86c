#!/usr/bin/env python3

import logging
import os
from typing import List, Optional

import anyio

from .git_query import get_config_value, is_git_repository
from .shell import run_command

__all__ = [
    "ensure_repository",
    "ensure_identity",
    "ensure_gitignore",
]

log = logging.getLogger(__name__)


async def ensure_repository(path: str, branch: str) -> bool:
    """Make sure ``path`` is the root of a Git repository.

    The directory is created if it does not exist yet. An existing repository
    is left alone, including its current branch.

    Args:
        path: The directory to publish
        branch: Initial branch name for a freshly created repository

    Returns:
        True if a new repository was initialized, False if one already existed
    """
    os.makedirs(path, exist_ok=True)

    if is_git_repository(path):
        log.debug("Repository already exists in %s", path)
        return False

    await run_command(
        ["git", "init", "-b", branch],
        cwd=path,
        check=True,
        capture_output=True,
        text=True,
    )
    log.info("Initialized git repository in %s", path)
    return True


async def ensure_identity(
    path: str, name: Optional[str], email: Optional[str]
) -> List[str]:
    """Fill in a missing commit identity from the configured fallback.

    Only keys that git cannot resolve from any config level are set, and only
    in the repository's local config.

    Returns:
        The config keys that were set
    """
    configured = []
    for key, value in (("user.name", name), ("user.email", email)):
        if not value:
            continue
        if await get_config_value(path, key) is not None:
            continue
        await run_command(
            ["git", "config", key, value],
            cwd=path,
            check=True,
            capture_output=True,
            text=True,
        )
        configured.append(key)
    return configured


async def ensure_gitignore(path: str, patterns: List[str]) -> bool:
    """Write a .gitignore unless the repository already has one.

    Args:
        path: The repository root
        patterns: One ignore pattern per line

    Returns:
        True if the file was created
    """
    gitignore_path = os.path.join(path, ".gitignore")
    if os.path.exists(gitignore_path):
        log.debug("Keeping existing %s", gitignore_path)
        return False

    content = "".join(f"{pattern}\n" for pattern in patterns)
    async with await anyio.open_file(
        gitignore_path, "w", encoding="utf-8", newline=""
    ) as f:
        await f.write(content)

    log.info("Created %s with %d patterns", gitignore_path, len(patterns))
    return True
