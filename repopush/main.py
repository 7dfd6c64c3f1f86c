#!/usr/bin/env python3

import asyncio
import functools
import logging
import os
from typing import Any, Callable, Coroutine, Dict, Optional

import click

from .askpass import askpass_helper
from .common import normalize_path
from .config import get_git_defaults, get_gitignore_patterns, get_identity
from .git_remote import build_https_url, build_ssh_url, build_token_url
from .publish import PublishResult, publish
from .shell import GitCommandError

log = logging.getLogger(__name__)


def configure_logging(log_file: str = "repopush.log", debug: bool = False) -> None:
    """Configure logging to write to both a file and the console.

    The log level is determined from the configuration file.
    It can be overridden by setting the REPOPUSH_DEBUG_LEVEL environment variable,
    and forced to DEBUG with REPOPUSH_DEBUG=1 or --debug.

    The log directory is read from the configuration file's logger.path setting.
    By default, logs are written to $HOME/.repopush.

    Outside of debug mode the console only shows warnings and errors, so it
    does not interleave with the progress messages.
    """
    from .config import get_logger_path, get_logger_verbosity

    log_dir = get_logger_path()
    os.makedirs(log_dir, exist_ok=True)
    log_path = os.path.join(log_dir, log_file)

    log_level_str = os.environ.get("REPOPUSH_DEBUG_LEVEL") or get_logger_verbosity()

    log_level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }

    log_level = log_level_map.get(log_level_str.upper(), logging.INFO)

    debug_mode = debug or bool(os.environ.get("REPOPUSH_DEBUG"))
    if debug_mode:
        log_level = logging.DEBUG

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    if root_logger.hasHandlers():
        root_logger.handlers.clear()

    file_handler = logging.FileHandler(log_path)
    file_handler.setLevel(log_level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(log_level if debug_mode else logging.WARNING)

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    root_logger.addHandler(file_handler)
    root_logger.addHandler(console_handler)

    logging.info(f"Logging configured. Log file: {log_path}")
    logging.info(f"Log level set to: {logging.getLevelName(log_level)}")


def _config_default(key: str) -> Callable[[], str]:
    return lambda: get_git_defaults()[key]


def publish_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """Options shared by every publishing subcommand."""
    decorators = [
        click.argument("path", type=click.Path(file_okay=False), default="."),
        click.option(
            "--owner", required=True, help="Account or organization owning the repository"
        ),
        click.option("--repo", help="Repository name (default: directory name)"),
        click.option("--host", default=_config_default("host"), help="Git service host"),
        click.option("--remote", default=_config_default("remote"), help="Remote name"),
        click.option(
            "--branch", default=_config_default("branch"), help="Branch to push"
        ),
        click.option(
            "-m",
            "--message",
            default=_config_default("commit_message"),
            help="Commit message",
        ),
        click.option("--force", is_flag=True, help="Force-push the branch"),
    ]
    for decorator in reversed(decorators):
        f = decorator(f)
    return f


def _repo_name(path: str, repo: Optional[str]) -> str:
    return repo or os.path.basename(normalize_path(path))


def _run_publish(
    path: str,
    remote_url: str,
    remote: str,
    branch: str,
    message: str,
    force: bool,
    env: Optional[Dict[str, str]] = None,
    final_remote_url: Optional[str] = None,
) -> PublishResult:
    # Not in the group callback: --help must not create the log file
    debug = click.get_current_context().find_root().params.get("debug", False)
    configure_logging(debug=debug)
    return _run(
        publish(
            path,
            remote_url,
            remote=remote,
            branch=branch,
            message=message,
            identity=get_identity(),
            gitignore_patterns=get_gitignore_patterns(),
            env=env,
            force=force,
            final_remote_url=final_remote_url,
            echo=click.echo,
        )
    )


def _run(coro: Coroutine[Any, Any, PublishResult]) -> PublishResult:
    """Run the pipeline and translate failures into exit codes.

    A failing git command exits with git's own exit code.
    """
    try:
        return asyncio.run(coro)
    except GitCommandError as e:
        log.info("Publish failed: %s", e)
        click.secho(str(e), fg="red", err=True)
        raise SystemExit(e.returncode)
    except FileNotFoundError as e:
        raise click.ClickException(f"git executable not found: {e}")


def _usage_errors(f: Callable[..., Any]) -> Callable[..., Any]:
    """Report invalid URL components as usage errors."""

    @functools.wraps(f)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return f(*args, **kwargs)
        except UnicodeError:
            raise
        except ValueError as e:
            raise click.UsageError(str(e))

    return wrapper


@click.group()
@click.option("--debug", is_flag=True, help="Log at DEBUG level to the console")
def cli(debug: bool) -> None:
    """repopush: initialize, commit and push a directory to a hosted git service."""


@cli.command()
@publish_options
@_usage_errors
def ssh(
    path: str,
    owner: str,
    repo: Optional[str],
    host: str,
    remote: str,
    branch: str,
    message: str,
    force: bool,
) -> None:
    """Push over SSH using your SSH keys or agent."""
    url = build_ssh_url(host, owner, _repo_name(path, repo))
    _run_publish(path, url, remote, branch, message, force)
    click.secho("Done.", fg="green")


@cli.command("https-token")
@publish_options
@click.option(
    "--token",
    envvar="REPOPUSH_TOKEN",
    help="Personal access token (env: REPOPUSH_TOKEN; prompted if absent)",
)
@click.option("--user", help="User name paired with the token (default: owner)")
@click.option(
    "--keep-token/--scrub-token",
    default=False,
    help="Leave the token in the stored remote URL after pushing",
)
@_usage_errors
def https_token(
    path: str,
    owner: str,
    repo: Optional[str],
    host: str,
    remote: str,
    branch: str,
    message: str,
    force: bool,
    token: Optional[str],
    user: Optional[str],
    keep_token: bool,
) -> None:
    """Push over HTTPS with a personal access token embedded in the remote URL."""
    if not token:
        token = click.prompt("Personal access token", hide_input=True)
    name = _repo_name(path, repo)
    url = build_token_url(host, owner, name, token, user=user or owner)
    final_url = None if keep_token else build_https_url(host, owner, name)
    _run_publish(path, url, remote, branch, message, force, final_remote_url=final_url)
    if keep_token:
        click.secho(
            f"Warning: the token is stored in the URL of remote {remote}",
            fg="yellow",
            err=True,
        )
    click.secho("Done.", fg="green")


@cli.command("https-prompt")
@publish_options
@_usage_errors
def https_prompt(
    path: str,
    owner: str,
    repo: Optional[str],
    host: str,
    remote: str,
    branch: str,
    message: str,
    force: bool,
) -> None:
    """Push over HTTPS, answering git's credential prompts from a masked prompt."""
    url = build_https_url(host, owner, _repo_name(path, repo))
    username = click.prompt("Username", default=owner)
    password = click.prompt("Personal access token", hide_input=True)
    with askpass_helper(username, password) as env:
        _run_publish(path, url, remote, branch, message, force, env=env)
    click.secho("Done.", fg="green")
