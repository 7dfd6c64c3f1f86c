#!/usr/bin/env python3

import logging

from .git_query import has_changes, has_commits
from .shell import run_command

__all__ = ["stage_and_commit", "get_head_commit_hash"]

log = logging.getLogger(__name__)


async def get_head_commit_hash(directory: str, short: bool = True) -> str:
    """Get the commit hash from HEAD.

    Args:
        directory: The directory to check
        short: Whether to get short hash (default) or full hash

    Returns:
        The commit hash

    Raises:
        GitCommandError: If HEAD does not exist or another git error occurs
    """
    cmd = ["git", "rev-parse"]
    if short:
        cmd.append("--short")
    cmd.append("HEAD")

    result = await run_command(
        cmd,
        cwd=directory,
        check=True,
        capture_output=True,
        text=True,
    )

    return str(result.stdout.strip())


async def stage_and_commit(directory: str, message: str) -> str | None:
    """Stage every file in the repository and commit it.

    The life cycle looks like this:

    1. A repository with pending changes gets a regular commit.

    2. A repository with commits and a clean tree is left alone.

    3. A repository with no commits and nothing to stage (an empty directory)
       gets an empty initial commit, so there is a branch to push.

    Args:
        directory: The repository root
        message: Commit message

    Returns:
        The short hash of the new commit, or None if nothing was committed

    Raises:
        ValueError: If the commit message is empty
        GitCommandError: If a git command fails
    """
    if not message.strip():
        raise ValueError("Commit message must not be empty")

    log.debug("stage_and_commit(%s, %r)", directory, message)

    await run_command(
        ["git", "add", "-A"],
        cwd=directory,
        check=True,
        capture_output=True,
        text=True,
    )

    commit_cmd = ["git", "commit", "-m", message]
    if not await has_changes(directory):
        if await has_commits(directory):
            log.info("No changes to commit in %s", directory)
            return None
        commit_cmd.append("--allow-empty")

    await run_command(
        commit_cmd,
        cwd=directory,
        check=True,
        capture_output=True,
        text=True,
    )

    commit_hash = await get_head_commit_hash(directory)
    log.info("Created commit %s", commit_hash)
    return commit_hash
