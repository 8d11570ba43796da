"""
スクリプトパーサー — マクロスクリプト YAML の読み込み・検証

ruamel.yaml で YAML を読み込み、Pydantic の MacroScript モデルへ変換する。
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, TextIO, Union

from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from ..errors import ScriptError
from .schema import MacroScript


# ---------------------------------------------------------------------------
# バリデーションエラー表現
# ---------------------------------------------------------------------------

@dataclass
class ScriptValidationError:
    """スクリプトの検証で検出されたエラー。

    Attributes:
        message: エラーメッセージ
        location: エラー箇所（フィールドパス等）
        line: YAML ファイル内の行番号（取得可能な場合）
    """

    message: str
    location: str = ""
    line: Optional[int] = None


# ---------------------------------------------------------------------------
# ScriptParser 本体
# ---------------------------------------------------------------------------

class ScriptParser:
    """マクロスクリプトの読み込み・検証を担当するパーサー。"""

    def __init__(self) -> None:
        self._yaml = YAML()

    def load(self, path: Path) -> MacroScript:
        """YAML ファイルを読み込み、MacroScript モデルに変換する。

        Args:
            path: 読み込む YAML ファイルのパス

        Returns:
            パース済みの MacroScript

        Raises:
            ScriptError: ファイルが存在しない、YAML 構文エラー、スキーマ検証エラーの場合
        """
        return _to_script(self._read(Path(path)))

    def loads(self, content: str) -> MacroScript:
        """YAML 文字列から MacroScript を生成する。"""
        return _to_script(self._parse(content))

    def validate(self, path: Path) -> list[ScriptValidationError]:
        """スクリプトを検証し、検出したエラーのリストを返す。

        エラーがない場合は空リストを返す。
        """
        try:
            data = self._read(Path(path))
        except ScriptError as e:
            return [ScriptValidationError(message=str(e), location=e.location, line=e.line)]

        try:
            MacroScript.model_validate(data)
        except PydanticValidationError as e:
            return [
                ScriptValidationError(
                    message=err.get("msg", "不明なエラー"),
                    location=" -> ".join(str(part) for part in err.get("loc", [])) or "unknown",
                )
                for err in e.errors()
            ]
        return []

    def _read(self, path: Path) -> Any:
        if not path.exists():
            raise ScriptError(f"スクリプトファイルが見つかりません: {path}", location="file")

        with open(path, "r", encoding="utf-8") as f:
            return self._parse(f)

    def _parse(self, stream: Union[str, TextIO]) -> Any:
        """YAML を読み込み、通常の dict/list に変換して返す。"""
        try:
            data = self._yaml.load(stream)
        except YAMLError as e:
            mark = getattr(e, "problem_mark", None)
            raise ScriptError(
                f"YAML 構文エラー{_mark_info(e)}: {e}",
                location="yaml",
                line=mark.line + 1 if mark is not None else None,
            ) from e

        if data is None:
            raise ScriptError("YAML が空です", location="file")
        return _to_plain(data)


def _to_script(data: Any) -> MacroScript:
    try:
        return MacroScript.model_validate(data)
    except PydanticValidationError as e:
        raise ScriptError(f"スキーマ検証エラー: {e}", location="schema") from e


def _mark_info(error: YAMLError) -> str:
    """YAML エラーの位置情報を " (行 N, 列 M)" 形式で返す。"""
    mark = getattr(error, "problem_mark", None)
    if mark is None:
        return ""
    return f" (行 {mark.line + 1}, 列 {mark.column + 1})"


def _to_plain(data: Any) -> Any:
    """ruamel.yaml の CommentedMap/CommentedSeq を通常の dict/list に再帰変換する。"""
    if isinstance(data, dict):
        return {key: _to_plain(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_to_plain(item) for item in data]
    return data
