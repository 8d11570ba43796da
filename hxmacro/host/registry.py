"""
コマンドレジストリ — ホストコマンドの登録・検索・一覧

組み込みコマンドとマクロ拡張が登録するコマンドを
同一のインターフェースで管理する。

主な構成:
  - CommandInfo: コマンドのメタ情報（名前、説明、カテゴリ）
  - CommandRegistry: コマンドハンドラの登録・解除・検索・一覧
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ..errors import CommandNotFoundError

if TYPE_CHECKING:
    from .base import CommandHandler

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# コマンドメタ情報
# ---------------------------------------------------------------------------

@dataclass
class CommandInfo:
    """コマンドのメタ情報。

    CLI の list-commands コマンドで一覧表示に使用する。

    Attributes:
        name: コマンド名
        description: コマンドの説明文
        category: カテゴリ（edit, cursor, context, extension, unknown）
    """

    name: str
    description: str
    category: str


# ---------------------------------------------------------------------------
# CommandRegistry 本体
# ---------------------------------------------------------------------------

class CommandRegistry:
    """コマンドハンドラの登録・検索・一覧を管理するレジストリ。

    使用例::

        registry = CommandRegistry()
        registry.register("cursorLeft", handler, info=CommandInfo(...))
        handler = registry.get("cursorLeft")
        all_commands = registry.list_all()
    """

    def __init__(self) -> None:
        """空のレジストリを初期化する。"""
        self._handlers: dict[str, CommandHandler] = {}
        self._info: dict[str, CommandInfo] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        *,
        info: Optional[CommandInfo] = None,
    ) -> None:
        """コマンドハンドラを登録する。

        同名のハンドラが既に登録されている場合は上書きする（警告を出力）。

        Args:
            name: コマンド名
            handler: 引数 1 つを受け取る呼び出し可能オブジェクト（同期・非同期どちらも可）
            info: コマンドのメタ情報。None の場合はデフォルト値を使用

        Raises:
            TypeError: handler が呼び出し可能でない場合
        """
        if not callable(handler):
            raise TypeError(
                f"handler は呼び出し可能である必要があります: {type(handler).__name__}"
            )

        if name in self._handlers:
            logger.warning("コマンド '%s' のハンドラを上書きします", name)

        self._handlers[name] = handler

        if info is not None:
            self._info[name] = info
        elif name not in self._info:
            self._info[name] = CommandInfo(
                name=name,
                description=f"{name} コマンド",
                category="unknown",
            )

        logger.debug("コマンド '%s' を登録しました", name)

    def unregister(self, name: str) -> None:
        """コマンドの登録を解除する。未登録の場合は何もしない。"""
        self._handlers.pop(name, None)
        self._info.pop(name, None)

    def get(self, name: str) -> CommandHandler:
        """名前でコマンドハンドラを取得する。

        Args:
            name: コマンド名

        Returns:
            登録済みのハンドラ

        Raises:
            CommandNotFoundError: 指定名のハンドラが未登録の場合
        """
        if name not in self._handlers:
            raise CommandNotFoundError(name, self.names)
        return self._handlers[name]

    def list_all(self) -> list[CommandInfo]:
        """登録済み全コマンドのメタ情報を名前順で返す。"""
        return sorted(self._info.values(), key=lambda c: c.name)

    def has(self, name: str) -> bool:
        """指定名のコマンドが登録されているかを返す。"""
        return name in self._handlers

    @property
    def names(self) -> list[str]:
        """登録済み全コマンド名をソート済みリストで返す。"""
        return sorted(self._handlers.keys())
