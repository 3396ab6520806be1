from __future__ import annotations

import json
from pathlib import Path

import pytest

from semrel.core.result import Err, Ok
from semrel.services.release.manifest import read_manifest, render_manifest
from semrel.services.release.semver import Version


class TestJsonManifest:
    def test_read_and_render_keeps_key_order(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"name": "demo", "version": "1.2.3", "private": true, "label": "café"}', encoding="utf-8")

        manifest = read_manifest(path)
        assert isinstance(manifest, Ok)
        assert manifest.value.version == Version(1, 2, 3)

        rendered = render_manifest(manifest.value, Version(1, 3, 0))

        assert isinstance(rendered, Ok)
        assert rendered.value == (
            '{\n  "name": "demo",\n  "version": "1.3.0",\n  "private": true,\n  "label": "café"\n}\n'
        )

    def test_render_does_not_write(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text('{"version": "0.1.0"}', encoding="utf-8")

        manifest = read_manifest(path)
        assert isinstance(manifest, Ok)
        render_manifest(manifest.value, Version(0, 2, 0))

        assert json.loads(path.read_text(encoding="utf-8")) == {"version": "0.1.0"}

    @pytest.mark.parametrize(
        "content, kind",
        [
            ("{not json", "invalid_manifest"),
            ("[1, 2]", "invalid_manifest"),
            ('{"name": "demo"}', "invalid_manifest"),
            ('{"version": 1}', "invalid_manifest"),
            ('{"version": "1.2"}', "invalid_version"),
            ('{"version": "1.2.3-beta.1"}', "invalid_version"),
        ],
    )
    def test_invalid(self, tmp_path: Path, content: str, kind: str) -> None:
        path = tmp_path / "package.json"
        path.write_text(content, encoding="utf-8")

        result = read_manifest(path)

        assert isinstance(result, Err)
        assert result.error.kind == kind

    def test_missing(self, tmp_path: Path) -> None:
        result = read_manifest(tmp_path / "package.json")
        assert isinstance(result, Err)
        assert result.error.kind == "invalid_manifest"
        assert "not found" in result.error.message


class TestTomlManifest:
    def test_project_table_rewritten_in_place(self, tmp_path: Path) -> None:
        text = (
            "# top comment\n"
            "[build-system]\n"
            'requires = ["hatchling"]\n'
            "\n"
            "[project]\n"
            'name = "demo"\n'
            'version = "0.4.1"  # bumped by semrel\n'
            "dependencies = [\n"
            '    "rich",\n'
            "]\n"
            "\n"
            "[tool.other]\n"
            'version = "9.9.9"\n'
        )
        path = tmp_path / "pyproject.toml"
        path.write_text(text, encoding="utf-8")

        manifest = read_manifest(path)
        assert isinstance(manifest, Ok)
        assert manifest.value.version == Version(0, 4, 1)

        rendered = render_manifest(manifest.value, Version(0, 5, 0))

        assert isinstance(rendered, Ok)
        assert rendered.value == text.replace('"0.4.1"', '"0.5.0"')

    def test_cargo_package_table(self, tmp_path: Path) -> None:
        path = tmp_path / "Cargo.toml"
        path.write_text('[package]\nname = "demo"\nversion = "2.0.0"\n', encoding="utf-8")

        manifest = read_manifest(path)

        assert isinstance(manifest, Ok)
        assert manifest.value.version == Version(2, 0, 0)

    def test_poetry_table(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool.poetry]\nname = "demo"\nversion = "1.0.0"\n', encoding="utf-8")

        manifest = read_manifest(path)
        assert isinstance(manifest, Ok)
        rendered = render_manifest(manifest.value, Version(1, 0, 1))

        assert rendered == Ok('[tool.poetry]\nname = "demo"\nversion = "1.0.1"\n')

    def test_version_outside_known_tables(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text('[tool.other]\nversion = "1.0.0"\n', encoding="utf-8")

        result = read_manifest(path)

        assert isinstance(result, Err)
        assert result.error.kind == "invalid_manifest"

    def test_invalid_toml(self, tmp_path: Path) -> None:
        path = tmp_path / "pyproject.toml"
        path.write_text("[project\n", encoding="utf-8")

        result = read_manifest(path)

        assert isinstance(result, Err)
        assert "invalid TOML" in result.error.message
