from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from semrel.core.config import Config, find_config, load_config
from semrel.core.errors import ErrorCode
from semrel.core.result import Err
from semrel.git.repository import Repository
from semrel.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    repo: Repository
    config: Config
    config_path: Path | None
    console: ConsoleProtocol


def build_context(
    *,
    repo_path: Path | None,
    config_path: Path | None,
    verbose: bool = False,
    stderr: bool = False,
) -> CLIContext:
    """Resolve the target repository and its configuration.

    Args:
        repo_path: --repo value; defaults to the current directory
        config_path: --config value; defaults to semrel.toml or pyproject.toml
        verbose: Echo git commands
        stderr: Send console output to stderr (keeps stdout for documents)
    """
    console = RichConsole(stderr=stderr)

    try:
        root = (repo_path or Path.cwd()).expanduser().resolve()
    except OSError as e:
        typer.echo(f"error: invalid --repo: {e}", err=True)
        raise typer.Exit(code=int(ErrorCode.USER_ERROR))

    if not root.is_dir():
        typer.echo(f"error: --repo '{root}' is not a directory", err=True)
        raise typer.Exit(code=int(ErrorCode.ENV_ERROR))

    path = config_path if config_path is not None else find_config(root)
    config = Config()
    if path is not None:
        loaded = load_config(path)
        if isinstance(loaded, Err):
            typer.echo(f"error: {loaded.error.message}", err=True)
            raise typer.Exit(code=int(ErrorCode.USER_ERROR))
        config = loaded.value

    repo = Repository(root, retry=config.retry, console=console, verbose=verbose)
    return CLIContext(repo=repo, config=config, config_path=path, console=console)
