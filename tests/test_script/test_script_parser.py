"""
ScriptParser のテスト

YAML ファイル・文字列からの読み込み、構文エラー・スキーマエラーの扱い、
validate() によるエラー位置の報告を検証する。
"""

from __future__ import annotations

from pathlib import Path

import pytest

from hxmacro.errors import ScriptError
from hxmacro.script.parser import ScriptParser
from hxmacro.script.schema import MacroScript

MALFORMED_YAML = """\
title: broken
events: [startRecording
"""

INVALID_SCRIPT = """\
title: invalid
events:
  - type
  - perform: {}
"""


class TestLoad:
    """load() / loads() のテスト。"""

    def test_load_file(self, sample_script_path: Path):
        script = ScriptParser().load(sample_script_path)

        assert isinstance(script, MacroScript)
        assert script.title == "duplicate greeting"
        assert len(script.events) == 8
        assert script.events[0].register_name == "m"
        assert script.expect is not None
        assert script.expect.text == "hellhelloo"

    def test_loads_string(self, sample_script_content: str):
        script = ScriptParser().loads(sample_script_content)
        assert script.events[-1].kind == "replay"

    def test_nested_args_are_plain_dicts(self):
        """ruamel.yaml の CommentedMap が通常の dict に変換されていること。"""
        script = ScriptParser().loads(
            "title: t\nevents:\n  - perform: {command: x, args: {count: 2, to: [1, 2]}}\n"
        )
        args = script.events[0].args
        assert type(args) is dict
        assert type(args["to"]) is list

    def test_missing_file(self, tmp_path: Path):
        with pytest.raises(ScriptError):
            ScriptParser().load(tmp_path / "missing.yaml")

    def test_malformed_yaml(self):
        with pytest.raises(ScriptError) as exc_info:
            ScriptParser().loads(MALFORMED_YAML)
        assert "YAML 構文エラー" in str(exc_info.value)
        assert exc_info.value.location == "yaml"
        assert exc_info.value.line is not None

    def test_error_location_on_load(self, tmp_path: Path):
        """load() の ScriptError にエラー箇所が設定されること。"""
        with pytest.raises(ScriptError) as exc_info:
            ScriptParser().load(tmp_path / "missing.yaml")
        assert exc_info.value.location == "file"

        path = tmp_path / "invalid.yaml"
        path.write_text(INVALID_SCRIPT, encoding="utf-8")
        with pytest.raises(ScriptError) as exc_info:
            ScriptParser().load(path)
        assert exc_info.value.location == "schema"

    def test_empty_yaml(self):
        with pytest.raises(ScriptError):
            ScriptParser().loads("")

    def test_schema_error(self):
        """スキーマ違反は ScriptError（ValueError 互換）になること。"""
        with pytest.raises(ValueError):
            ScriptParser().loads(INVALID_SCRIPT)


class TestValidate:
    """validate() のテスト。"""

    def test_valid_file(self, sample_script_path: Path):
        assert ScriptParser().validate(sample_script_path) == []

    def test_missing_file(self, tmp_path: Path):
        errors = ScriptParser().validate(tmp_path / "missing.yaml")
        assert len(errors) == 1
        assert errors[0].location == "file"

    def test_malformed_yaml_reports_line(self, tmp_path: Path):
        path = tmp_path / "broken.yaml"
        path.write_text(MALFORMED_YAML, encoding="utf-8")

        errors = ScriptParser().validate(path)

        assert len(errors) == 1
        assert errors[0].location == "yaml"
        assert errors[0].line is not None

    def test_empty_file(self, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        errors = ScriptParser().validate(path)
        assert [e.location for e in errors] == ["file"]

    def test_schema_errors_have_locations(self, tmp_path: Path):
        path = tmp_path / "invalid.yaml"
        path.write_text(INVALID_SCRIPT, encoding="utf-8")

        errors = ScriptParser().validate(path)

        assert len(errors) == 2
        assert all(err.location.startswith("events -> ") for err in errors)

    def test_bundled_scripts_are_valid(self):
        """リポジトリ同梱のサンプルスクリプトが検証を通ること。"""
        scripts_dir = Path(__file__).resolve().parents[2] / "scripts"
        paths = sorted(scripts_dir.glob("*.yaml"))
        assert paths
        for path in paths:
            assert ScriptParser().validate(path) == [], path
