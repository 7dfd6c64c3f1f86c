#!/usr/bin/env python3

import os
import subprocess
import tempfile
import unittest
from typing import Any, List
from unittest import mock

from expecttest import TestCase


class GitTestCase(TestCase, unittest.IsolatedAsyncioTestCase):
    """Base class for tests that drive a real git executable.

    Provides a scratch working directory and a bare repository standing in for
    the hosted service, with a deterministic git environment patched into
    repopush.shell.get_subprocess_env.
    """

    async def asyncSetUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.testing_time = "1112911993"  # Fixed timestamp for git

        self.env = os.environ.copy()
        self.env.setdefault("GIT_TERMINAL_PROMPT", "0")
        self.env.setdefault("EDITOR", ":")
        self.env.setdefault("GIT_MERGE_AUTOEDIT", "no")
        self.env.setdefault("LANG", "C")
        self.env.setdefault("LC_ALL", "C")
        self.env.setdefault("PAGER", "cat")
        self.env.setdefault("TZ", "UTC")
        self.env.setdefault("TERM", "dumb")
        # Keep the user's ~/.gitconfig out of the way
        self.env["GIT_CONFIG_GLOBAL"] = os.devnull
        self.env["GIT_CONFIG_NOSYSTEM"] = "1"
        self.env["GIT_AUTHOR_EMAIL"] = "author@example.com"
        self.env["GIT_AUTHOR_NAME"] = "A U Thor"
        self.env["GIT_COMMITTER_EMAIL"] = "committer@example.com"
        self.env["GIT_COMMITTER_NAME"] = "C O Mitter"
        self.env["GIT_COMMITTER_DATE"] = f"{self.testing_time} -0700"
        self.env["GIT_AUTHOR_DATE"] = f"{self.testing_time} -0700"

        self.env_patcher = mock.patch(
            "repopush.shell.get_subprocess_env", return_value=self.env
        )
        self.env_patcher.start()

        self.work_dir = os.path.join(self.temp_dir.name, "project")
        self.hosted_dir = os.path.join(self.temp_dir.name, "hosted", "project.git")
        os.makedirs(self.hosted_dir)
        self.git_run(["init", "--bare", "-b", "main"], cwd=self.hosted_dir)

    async def asyncTearDown(self):
        self.env_patcher.stop()
        self.temp_dir.cleanup()

    def git_run(self, args: List[str], cwd: str | None = None, **kwargs: Any) -> str:
        """Run git synchronously with the test environment and return stdout."""
        result = subprocess.run(
            ["git", *args],
            cwd=cwd or self.work_dir,
            env=self.env,
            check=True,
            capture_output=True,
            text=True,
            **kwargs,
        )
        return result.stdout.strip()

    def write_file(self, relpath: str, content: str) -> str:
        path = os.path.join(self.work_dir, relpath)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w") as f:
            f.write(content)
        return path

    def hosted_log(self, branch: str = "main") -> List[str]:
        """Commit subjects on ``branch`` of the hosted repository, newest first."""
        out = self.git_run(["log", "--format=%s", branch], cwd=self.hosted_dir)
        return out.splitlines()

    def hosted_files(self, branch: str = "main") -> List[str]:
        out = self.git_run(["ls-tree", "-r", "--name-only", branch], cwd=self.hosted_dir)
        return out.splitlines()

    def normalize_path(self, text: str) -> str:
        """Normalize temporary directory paths in output text."""
        return text.replace(self.temp_dir.name, "/tmp/test_dir")
