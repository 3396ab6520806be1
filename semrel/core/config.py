"""Typed configuration loading.

Configuration is optional. It is read from, in order:
- an explicit path given on the command line
- ``semrel.toml`` at the repository root
- the ``[tool.semrel]`` table of ``pyproject.toml``

and falls back to the defaults below when none of these exist.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_str, get_table

__all__ = [
    "Config",
    "ConfigError",
    "RetryConfig",
    "find_config",
    "load_config",
    "DEFAULT_MANIFEST",
    "DEFAULT_CHANGELOG",
    "DEFAULT_NOTES",
    "CONFIG_FILE_NAME",
]

CONFIG_FILE_NAME = "semrel.toml"

DEFAULT_MANIFEST = "package.json"
DEFAULT_CHANGELOG = "CHANGELOG.md"
DEFAULT_NOTES = ".release-notes.md"

DEFAULT_RETRY_ATTEMPTS = 3
DEFAULT_RETRY_BASE_DELAY = 1.0


@dataclass(frozen=True, slots=True)
class ConfigError:
    """Error when config cannot be loaded or parsed."""

    message: str
    path: Path | None = None


@dataclass(frozen=True, slots=True)
class RetryConfig:
    """Backoff policy for transient git failures.

    Attributes:
        attempts: Total attempts, including the first one.
        base_delay: Seconds before the first retry; doubles on each retry.
    """

    attempts: int = DEFAULT_RETRY_ATTEMPTS
    base_delay: float = DEFAULT_RETRY_BASE_DELAY

    def delay_for(self, attempt: int) -> float:
        """Delay after the given zero-based failed attempt."""
        return self.base_delay * (2**attempt)


@dataclass(frozen=True, slots=True)
class Config:
    """Release configuration.

    Paths are relative to the repository root.
    """

    manifest: str = DEFAULT_MANIFEST
    changelog: str = DEFAULT_CHANGELOG
    notes: str = DEFAULT_NOTES
    commit_url: str | None = None
    require_clean: bool = False
    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_dict(cls, data: StrDict) -> Config:
        """Build a Config from a parsed TOML table.

        Raises:
            ValueError: If a value has the wrong type or is out of range.
        """
        retry = get_table(data, "retry") or {}

        manifest = _relative_path(data, "manifest") or DEFAULT_MANIFEST
        changelog = _relative_path(data, "changelog") or DEFAULT_CHANGELOG
        notes = _relative_path(data, "notes") or DEFAULT_NOTES

        commit_url = get_str(data, "commit_url")
        if commit_url is not None and "{sha}" not in commit_url:
            raise ValueError("commit_url must contain a {sha} placeholder")

        require_clean = data.get("require_clean", False)
        if not isinstance(require_clean, bool):
            raise ValueError("require_clean must be a boolean")

        attempts = retry.get("attempts", DEFAULT_RETRY_ATTEMPTS)
        if not isinstance(attempts, int) or isinstance(attempts, bool) or attempts < 1:
            raise ValueError("retry.attempts must be an integer >= 1")

        base_delay = retry.get("base_delay", DEFAULT_RETRY_BASE_DELAY)
        if isinstance(base_delay, bool) or not isinstance(base_delay, (int, float)):
            raise ValueError("retry.base_delay must be a number")
        if base_delay < 0:
            raise ValueError("retry.base_delay must not be negative")

        return cls(
            manifest=manifest,
            changelog=changelog,
            notes=notes,
            commit_url=commit_url,
            require_clean=require_clean,
            retry=RetryConfig(attempts=attempts, base_delay=float(base_delay)),
        )


def _relative_path(data: StrDict, key: str) -> str | None:
    if key in data and not isinstance(data[key], str):
        raise ValueError(f"{key} must be a string")
    value = get_str(data, key)
    if value is None:
        return None
    p = PurePosixPath(value.replace("\\", "/"))
    if p.is_absolute() or ".." in p.parts:
        raise ValueError(f"{key} must be a path inside the repository: {value}")
    return str(p)


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load configuration from a TOML file.

    A ``pyproject.toml`` is read from its ``[tool.semrel]`` table; any other
    file is read from its root table.

    Args:
        path: Path to semrel.toml or pyproject.toml

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    data = result.value
    if path.name == "pyproject.toml":
        tool = get_table(data, "tool") or {}
        data = get_table(tool, "semrel") or {}

    try:
        return Ok(Config.from_dict(data))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config: {e}", path=path))


def find_config(repo_root: Path) -> Path | None:
    """Locate the config file for a repository, if any."""
    candidate = repo_root / CONFIG_FILE_NAME
    if candidate.is_file():
        return candidate

    pyproject = repo_root / "pyproject.toml"
    if pyproject.is_file() and "[tool.semrel" in pyproject.read_text(
        encoding="utf-8", errors="replace"
    ):
        return pyproject

    return None
