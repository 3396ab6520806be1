"""Version manifest: the file that records the project's current version.

Two formats are supported, chosen by file suffix:
- JSON (package.json style): the top-level "version" key.
- TOML (pyproject.toml, Cargo.toml): the `version = "..."` line of the
  [project], [package] or [tool.poetry] table, rewritten in place so the rest
  of the file stays byte-identical.
"""

from __future__ import annotations

import json
import re
import tomllib
from dataclasses import dataclass
from pathlib import Path

from semrel.core.result import Err, Ok, Result
from semrel.core.structured import as_str_dict
from semrel.services.release.errors import ReleaseError
from semrel.services.release.semver import Version, parse_version


_TOML_TABLES = ("project", "package", "tool.poetry")
_TOML_VERSION_RE = re.compile(r'(?m)^version\s*=\s*"([^"]*)"[ \t]*(?:#[^\r\n]*)?\r?$')
_TOML_HEADER_RE = re.compile(r"(?m)^\[")


@dataclass(frozen=True, slots=True)
class Manifest:
    """A parsed manifest and the text it was parsed from."""

    path: Path
    text: str
    version: Version

    @property
    def is_toml(self) -> bool:
        return self.path.suffix == ".toml"


def _invalid(path: Path, message: str) -> ReleaseError:
    return ReleaseError(kind="invalid_manifest", message=f"{path.name}: {message}", hint=str(path))


def read_manifest(path: Path) -> Result[Manifest, ReleaseError]:
    try:
        text = path.read_bytes().decode("utf-8")
    except FileNotFoundError:
        return Err(
            ReleaseError(
                kind="invalid_manifest",
                message=f"manifest not found: {path.name}",
                hint=f"Create {path} or set `manifest` in semrel.toml.",
            )
        )
    except (OSError, UnicodeDecodeError) as e:
        return Err(ReleaseError(kind="io_failed", message=f"failed to read {path.name}: {e}", hint=str(path)))

    raw = _read_toml_version(path, text) if path.suffix == ".toml" else _read_json_version(path, text)
    if isinstance(raw, Err):
        return raw

    version = parse_version(raw.value)
    if isinstance(version, Err):
        e = version.error
        return Err(ReleaseError(kind=e.kind, message=f"{path.name}: {e.message}", hint=e.hint))

    return Ok(Manifest(path=path, text=text, version=version.value))


def render_manifest(manifest: Manifest, version: Version) -> Result[str, ReleaseError]:
    """New manifest text carrying `version`. Nothing is written."""
    if manifest.is_toml:
        return _render_toml(manifest, version)
    return _render_json(manifest, version)


def _read_json_version(path: Path, text: str) -> Result[str, ReleaseError]:
    try:
        obj: object = json.loads(text)
    except json.JSONDecodeError as e:
        return Err(_invalid(path, f"invalid JSON: {e}"))

    data = as_str_dict(obj)
    if data is None:
        return Err(_invalid(path, "JSON root must be an object"))

    value = data.get("version")
    if value is None:
        return Err(_invalid(path, "missing version field"))
    if not isinstance(value, str):
        return Err(_invalid(path, f"version must be a string, got {type(value).__name__}"))
    return Ok(value)


def _render_json(manifest: Manifest, version: Version) -> Result[str, ReleaseError]:
    obj: object = json.loads(manifest.text)
    data = as_str_dict(obj)
    if data is None:
        return Err(_invalid(manifest.path, "JSON root must be an object"))
    data["version"] = str(version)
    return Ok(json.dumps(data, indent=2, ensure_ascii=False) + "\n")


def _toml_version_span(text: str) -> tuple[int, int, str] | None:
    """Locate the version value inside the first known table that has one.

    Returns (start, end, value) of the quoted value's contents.
    """
    for table in _TOML_TABLES:
        header = re.search(rf"(?m)^\[{re.escape(table)}\][ \t]*(?:#[^\r\n]*)?\r?$", text)
        if header is None:
            continue
        body_start = header.end()
        next_header = _TOML_HEADER_RE.search(text, body_start)
        body_end = next_header.start() if next_header else len(text)
        m = _TOML_VERSION_RE.search(text, body_start, body_end)
        if m is not None:
            return (m.start(1), m.end(1), m.group(1))
    return None


def _read_toml_version(path: Path, text: str) -> Result[str, ReleaseError]:
    try:
        tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        return Err(_invalid(path, f"invalid TOML: {e}"))

    span = _toml_version_span(text)
    if span is None:
        tables = ", ".join(f"[{t}]" for t in _TOML_TABLES)
        return Err(_invalid(path, f"missing version field (looked in {tables})"))
    return Ok(span[2])


def _render_toml(manifest: Manifest, version: Version) -> Result[str, ReleaseError]:
    span = _toml_version_span(manifest.text)
    if span is None:
        return Err(_invalid(manifest.path, "missing version field"))
    start, end, _ = span
    return Ok(manifest.text[:start] + str(version) + manifest.text[end:])
