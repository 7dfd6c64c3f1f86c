#!/usr/bin/env python3

import logging
import os

from .shell import run_command

__all__ = [
    "is_git_repository",
    "has_commits",
    "has_changes",
    "get_current_branch",
    "get_remote_url",
    "get_config_value",
]

log = logging.getLogger(__name__)


def is_git_repository(path: str) -> bool:
    """Check if the directory is itself the root of a Git repository.

    A directory nested inside some other repository does not count; it only
    qualifies if it carries its own ``.git`` entry (a directory, or a file for
    worktrees and submodules).

    Args:
        path: The directory to check

    Returns:
        True if path holds a .git entry, False otherwise
    """
    return os.path.exists(os.path.join(os.path.abspath(path), ".git"))


async def has_commits(directory: str) -> bool:
    """Check whether HEAD resolves to a commit."""
    result = await run_command(
        ["git", "rev-parse", "--verify", "--quiet", "HEAD"],
        cwd=directory,
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log.debug("No commits yet in %s", directory)
        return False
    return True


async def has_changes(directory: str) -> bool:
    """Check whether the working tree or index differs from HEAD.

    Args:
        directory: The repository directory

    Returns:
        True if ``git status --porcelain`` reports anything
    """
    result = await run_command(
        ["git", "status", "--porcelain"],
        cwd=directory,
        check=True,
        capture_output=True,
        text=True,
    )
    return bool(str(result.stdout).strip())


async def get_current_branch(directory: str) -> str:
    """Get the name of the branch HEAD points to.

    This works on an unborn branch too, where ``git rev-parse --abbrev-ref``
    would fail.

    Raises:
        GitCommandError: If HEAD is detached
    """
    result = await run_command(
        ["git", "symbolic-ref", "--short", "HEAD"],
        cwd=directory,
        check=True,
        capture_output=True,
        text=True,
    )
    return str(result.stdout.strip())


async def get_remote_url(directory: str, name: str) -> str | None:
    """Get the URL of a remote.

    Args:
        directory: The repository directory
        name: The remote name, e.g. ``origin``

    Returns:
        The configured URL, or None if no such remote exists
    """
    result = await run_command(
        ["git", "remote", "get-url", name],
        cwd=directory,
        check=False,
        capture_output=True,
        text=True,
    )
    if result.returncode != 0:
        log.debug("Remote %s does not exist in %s", name, directory)
        return None
    return str(result.stdout.strip())


async def get_config_value(directory: str, key: str) -> str | None:
    """Get a git config value as git resolves it (local, global, system, env).

    Returns:
        The value, or None if unset
    """
    result = await run_command(
        ["git", "config", "--get", key],
        cwd=directory,
        check=False,
        capture_output=True,
        text=True,
    )
    value = str(result.stdout.strip())
    if result.returncode != 0 or not value:
        return None
    return value
