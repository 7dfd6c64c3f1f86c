#!/usr/bin/env python3

"""Ephemeral askpass helper.

git asks the program named by ``GIT_ASKPASS`` for credentials, passing the
prompt text (``Username for 'https://...':`` or ``Password for ...``) as the
first argument and reading the answer from its stdout. We write a throwaway
helper that answers from environment variables, so the secrets only ever live
in the environment of the push process and never on disk.
"""

import logging
import os
import stat
import tempfile
from contextlib import contextmanager
from typing import Dict, Iterator

__all__ = [
    "USERNAME_ENV",
    "PASSWORD_ENV",
    "HELPER_SCRIPT",
    "askpass_helper",
]

log = logging.getLogger(__name__)

USERNAME_ENV = "REPOPUSH_ASKPASS_USERNAME"
PASSWORD_ENV = "REPOPUSH_ASKPASS_PASSWORD"

HELPER_SCRIPT = f"""\
#!/bin/sh
case "$1" in
    *Username*) printf '%s\\n' "${USERNAME_ENV}" ;;
    *) printf '%s\\n' "${PASSWORD_ENV}" ;;
esac
"""


@contextmanager
def askpass_helper(username: str, password: str) -> Iterator[Dict[str, str]]:
    """Create a temporary askpass helper and yield the environment that uses it.

    The helper file is removed when the context exits, whether or not the
    body raised.

    Args:
        username: Answer for git's username prompt
        password: Answer for git's password prompt (a token for hosted services)

    Yields:
        Environment variables to layer over the push process's environment
    """
    fd, helper_path = tempfile.mkstemp(prefix="repopush-askpass-", suffix=".sh")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(HELPER_SCRIPT)
        os.chmod(helper_path, stat.S_IRWXU)
        log.debug("Created askpass helper %s", helper_path)

        yield {
            "GIT_ASKPASS": helper_path,
            "SSH_ASKPASS": helper_path,
            "GIT_TERMINAL_PROMPT": "0",
            USERNAME_ENV: username,
            PASSWORD_ENV: password,
        }
    finally:
        try:
            os.unlink(helper_path)
            log.debug("Removed askpass helper %s", helper_path)
        except FileNotFoundError:
            pass
