#!/usr/bin/env python3

"""Tests for repository inspection and setup helpers against a real git."""

import os
import unittest

from repopush.git_query import (
    get_config_value,
    get_current_branch,
    get_remote_url,
    has_changes,
    has_commits,
    is_git_repository,
)
from repopush.git_remote import ensure_remote
from repopush.git_setup import ensure_gitignore, ensure_repository
from repopush.testing import GitTestCase


class GitQueryTest(GitTestCase):
    async def test_fresh_repository(self):
        created = await ensure_repository(self.work_dir, "trunk")

        self.assertTrue(created)
        self.assertTrue(is_git_repository(self.work_dir))
        self.assertFalse(await has_commits(self.work_dir))
        self.assertFalse(await has_changes(self.work_dir))
        self.assertEqual(await get_current_branch(self.work_dir), "trunk")
        self.assertIsNone(await get_remote_url(self.work_dir, "origin"))
        self.assertIsNone(await get_config_value(self.work_dir, "user.name"))

    async def test_probes_log_missing_state(self):
        await ensure_repository(self.work_dir, "main")

        with self.assertLogs("repopush.git_query", level="DEBUG") as cm:
            await get_remote_url(self.work_dir, "origin")
            await has_commits(self.work_dir)

        output = "\n".join(cm.output)
        self.assertIn("Remote origin does not exist", output)
        self.assertIn("No commits yet", output)

    async def test_ensure_repository_is_idempotent(self):
        await ensure_repository(self.work_dir, "main")
        self.assertFalse(await ensure_repository(self.work_dir, "other"))
        self.assertEqual(await get_current_branch(self.work_dir), "main")

    async def test_subdirectory_of_repository_is_not_a_repository(self):
        await ensure_repository(self.work_dir, "main")
        nested = os.path.join(self.work_dir, "nested")
        os.makedirs(nested)

        self.assertFalse(is_git_repository(nested))
        self.assertTrue(await ensure_repository(nested, "main"))
        self.assertTrue(os.path.isdir(os.path.join(nested, ".git")))

    async def test_has_changes_sees_untracked_files(self):
        await ensure_repository(self.work_dir, "main")
        self.write_file("notes.txt", "hello\n")
        self.assertTrue(await has_changes(self.work_dir))

    async def test_ensure_remote_lifecycle(self):
        await ensure_repository(self.work_dir, "main")

        self.assertEqual(
            await ensure_remote(self.work_dir, "origin", self.hosted_dir), "added"
        )
        self.assertEqual(
            await ensure_remote(self.work_dir, "origin", self.hosted_dir), "unchanged"
        )
        self.assertEqual(
            await ensure_remote(self.work_dir, "origin", "git@github.com:a/b.git"),
            "updated",
        )
        self.assertEqual(
            await get_remote_url(self.work_dir, "origin"), "git@github.com:a/b.git"
        )

    async def test_ensure_gitignore_only_creates_once(self):
        await ensure_repository(self.work_dir, "main")

        self.assertTrue(await ensure_gitignore(self.work_dir, ["a", "b/"]))
        self.assertFalse(await ensure_gitignore(self.work_dir, ["c"]))
        with open(os.path.join(self.work_dir, ".gitignore")) as f:
            self.assertEqual(f.read(), "a\nb/\n")


if __name__ == "__main__":
    unittest.main()
