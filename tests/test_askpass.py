#!/usr/bin/env python3

import os
import stat
import subprocess
import sys
import unittest

from repopush.askpass import PASSWORD_ENV, USERNAME_ENV, askpass_helper


@unittest.skipIf(sys.platform == "win32", "askpass helper is a POSIX shell script")
class AskpassHelperTest(unittest.TestCase):
    def ask(self, env, prompt):
        result = subprocess.run(
            [env["GIT_ASKPASS"], prompt],
            env={**os.environ, **env},
            check=True,
            capture_output=True,
            text=True,
        )
        return result.stdout

    def test_answers_username_and_password_prompts(self):
        with askpass_helper("alice", "s3cr3t token") as env:
            self.assertEqual(
                self.ask(env, "Username for 'https://github.com': "), "alice\n"
            )
            self.assertEqual(
                self.ask(env, "Password for 'https://alice@github.com': "),
                "s3cr3t token\n",
            )

    def test_environment_wiring(self):
        with askpass_helper("alice", "secret") as env:
            self.assertEqual(env["GIT_ASKPASS"], env["SSH_ASKPASS"])
            self.assertEqual(env["GIT_TERMINAL_PROMPT"], "0")
            self.assertEqual(env[USERNAME_ENV], "alice")
            self.assertEqual(env[PASSWORD_ENV], "secret")

    def test_secrets_are_not_written_to_disk(self):
        with askpass_helper("alice", "super-secret-value") as env:
            with open(env["GIT_ASKPASS"]) as f:
                content = f.read()
            self.assertNotIn("super-secret-value", content)
            self.assertNotIn("alice", content)

    def test_helper_is_private_and_executable(self):
        with askpass_helper("alice", "secret") as env:
            mode = stat.S_IMODE(os.stat(env["GIT_ASKPASS"]).st_mode)
            self.assertEqual(mode, 0o700)

    def test_helper_removed_on_exit(self):
        with askpass_helper("alice", "secret") as env:
            path = env["GIT_ASKPASS"]
            self.assertTrue(os.path.exists(path))
        self.assertFalse(os.path.exists(path))

    def test_helper_removed_when_body_raises(self):
        with self.assertRaises(RuntimeError):
            with askpass_helper("alice", "secret") as env:
                path = env["GIT_ASKPASS"]
                raise RuntimeError("push failed")
        self.assertFalse(os.path.exists(path))


if __name__ == "__main__":
    unittest.main()
