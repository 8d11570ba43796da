"""
例外定義 — hxmacro 共通の例外階層

ホスト層・スクリプトパーサー・CLI で送出される例外をまとめる。
マクロ再生中のアクション失敗はここで定義した例外として送出されるが、
MacroManager.replay() はこれを呼び出し元へ伝播させない。
"""

from __future__ import annotations

from typing import Optional


class HxMacroError(Exception):
    """hxmacro の全例外の基底クラス。"""


class CommandNotFoundError(HxMacroError, KeyError):
    """未登録のホストコマンドが呼び出された場合の例外。

    Attributes:
        name: 呼び出されたコマンド名
        registered: 登録済みコマンド名のリスト
    """

    def __init__(self, name: str, registered: list[str]) -> None:
        self.name = name
        self.registered = registered
        super().__init__(
            f"コマンド '{name}' は登録されていません。"
            f"登録済みコマンド: [{', '.join(registered)}]"
        )

    def __str__(self) -> str:
        # KeyError は repr() 形式で表示されるため上書きする
        return str(self.args[0])


class CommandExecutionError(HxMacroError):
    """ホストコマンドのハンドラが失敗した場合の例外。

    元の例外は __cause__ に保持される。

    Attributes:
        name: 失敗したコマンド名
    """

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(f"コマンド '{name}' の実行に失敗しました: {message}")


class ScriptError(HxMacroError, ValueError):
    """マクロスクリプトの構文エラー・スキーマ検証エラー。

    Attributes:
        location: エラー箇所（file / yaml / schema）
        line: YAML ファイル内の行番号（取得可能な場合）
    """

    def __init__(self, message: str, location: str = "", line: Optional[int] = None) -> None:
        self.location = location
        self.line = line
        super().__init__(message)
