"""
アクション定義 — 記録・再生の単位

マクロとして記録される操作を表す 2 種類のアクションを定義する。

  - CommandAction: ホストコマンドの呼び出し（引数ペイロードは不透明）
  - TextAction: 挿入されたテキストの連続区間

どちらも frozen dataclass であり、レジスタへ確定した後は変更されない。
記録中の末尾 TextAction の延長は、延長済みアクションへの置き換えで表現する。
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Literal, Optional, Union

# デフォルトレジスタ名（記録終了・再生終了後は必ずここへ戻る）
DEFAULT_REGISTER = "@"


@dataclass(frozen=True)
class CommandAction:
    """ホストコマンド呼び出しのアクション。

    Attributes:
        command: コマンド名
        args: コマンド引数（形状はコマンド依存。記録時に複製済み）
    """

    command: str
    args: Optional[Any] = None

    @property
    def kind(self) -> Literal["command"]:
        return "command"


@dataclass(frozen=True)
class TextAction:
    """リテラルテキスト挿入のアクション。

    Attributes:
        text: 挿入テキスト（連続入力は 1 アクションにまとめられる）
    """

    text: str

    @property
    def kind(self) -> Literal["text"]:
        return "text"

    def extended(self, text: str) -> TextAction:
        """text を末尾に連結したアクションを返す。"""
        return replace(self, text=self.text + text)


Action = Union[CommandAction, TextAction]


def describe_action(action: Action) -> str:
    """ログ出力用の短いラベルを返す。

    Args:
        action: 対象アクション

    Returns:
        "command:cursorRight" / "text:'abc'" 形式の文字列
    """
    if isinstance(action, CommandAction):
        return f"command:{action.command}"
    # 長いテキストは省略表示
    text = action.text if len(action.text) <= 20 else action.text[:17] + "..."
    return f"text:{text!r}"
