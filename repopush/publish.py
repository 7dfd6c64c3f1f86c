#!/usr/bin/env python3

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from .common import normalize_path, redact_url
from .config import DEFAULT_GITIGNORE_PATTERNS
from .git_commit import stage_and_commit
from .git_remote import ensure_remote, push
from .git_setup import ensure_gitignore, ensure_identity, ensure_repository

__all__ = ["PublishResult", "publish"]

log = logging.getLogger(__name__)


@dataclass
class PublishResult:
    path: str
    created_repository: bool
    created_gitignore: bool
    commit: Optional[str]
    remote_action: str
    branch: str


async def publish(
    path: str,
    remote_url: str,
    *,
    remote: str = "origin",
    branch: str = "main",
    message: str = "Initial commit",
    identity: Tuple[Optional[str], Optional[str]] = (None, None),
    gitignore_patterns: Optional[List[str]] = None,
    env: Optional[Dict[str, str]] = None,
    force: bool = False,
    final_remote_url: Optional[str] = None,
    echo: Callable[[str], None] = print,
) -> PublishResult:
    """Initialize, commit and push a directory.

    Steps, in order: ensure repository, ensure ignore file, stage and commit,
    ensure remote, push.

    Args:
        path: Directory to publish
        remote_url: URL the remote is pointed at for the push
        remote: Remote name
        branch: Branch name to publish
        message: Commit message
        identity: Fallback (name, email) used when git has none configured
        gitignore_patterns: Patterns for a newly created .gitignore
        env: Extra environment for the push only
        force: Force-push
        final_remote_url: URL the remote is reset to once the push is over,
            whether it succeeded or not. Used to keep tokens out of .git/config.
        echo: Progress output

    Returns:
        A PublishResult describing what was done
    """
    directory = normalize_path(path)

    created_repository = await ensure_repository(directory, branch)
    if created_repository:
        echo(f"Initialized git repository in {directory}")
    else:
        echo(f"Git repository already exists in {directory}")

    name, email = identity
    for key in await ensure_identity(directory, name, email):
        echo(f"Set {key} for this repository")

    created_gitignore = await ensure_gitignore(
        directory,
        DEFAULT_GITIGNORE_PATTERNS if gitignore_patterns is None else gitignore_patterns,
    )
    if created_gitignore:
        echo("Created .gitignore")
    else:
        echo(".gitignore already exists, leaving it untouched")

    commit = await stage_and_commit(directory, message)
    if commit is None:
        echo("No changes to commit")
    else:
        echo(f"Committed {commit}: {message}")

    remote_action = await ensure_remote(directory, remote, remote_url)
    echo(f"Remote {remote} {remote_action}: {redact_url(remote_url)}")

    try:
        echo(f"Pushing {branch} to {remote}...")
        await push(directory, remote, branch, env=env, force=force)
    finally:
        if final_remote_url is not None and final_remote_url != remote_url:
            await ensure_remote(directory, remote, final_remote_url)
            log.info("Reset remote %s to %s", remote, redact_url(final_remote_url))

    echo(f"Pushed {branch} to {redact_url(remote_url)}")

    return PublishResult(
        path=directory,
        created_repository=created_repository,
        created_gitignore=created_gitignore,
        commit=commit,
        remote_action=remote_action,
        branch=branch,
    )
