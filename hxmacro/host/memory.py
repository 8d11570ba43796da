"""
InMemoryHost — メモリ上のテキストバッファを操作するホスト実装

Host Protocol を満たす最小のエディタ。スクリプト実行とテストで
マクロエンジンを実エディタなしに動作させるために使用する。

主な機能:
  - TextBuffer: テキストとカーソル位置の保持・編集
  - 組み込みコマンド（default:type, type, cursorLeft 等）の登録
  - type コマンドでのテキスト挿入監視（監視ハンドラ → ネイティブ挿入）
  - コマンド呼び出し・メッセージ・コンテキスト値の記録
  - 1 文字入力プロンプトへの応答キュー
"""

from __future__ import annotations

import inspect
import logging
from collections import deque
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import CommandExecutionError, HxMacroError
from .base import NATIVE_TYPE_COMMAND, TYPE_COMMAND, CommandHandler, Disposer, TextObserver
from .registry import CommandInfo, CommandRegistry

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# テキストバッファ
# ---------------------------------------------------------------------------

@dataclass
class TextBuffer:
    """単一ドキュメントのテキストとカーソル位置。

    Attributes:
        text: ドキュメント全体のテキスト
        cursor: カーソル位置（0 〜 len(text)）
    """

    text: str = ""
    cursor: int = 0

    def __post_init__(self) -> None:
        self.cursor = self._clamp(self.cursor)

    def _clamp(self, position: int) -> int:
        return max(0, min(position, len(self.text)))

    def insert(self, text: str) -> None:
        """カーソル位置にテキストを挿入し、カーソルを挿入末尾へ進める。"""
        self.text = self.text[: self.cursor] + text + self.text[self.cursor:]
        self.cursor += len(text)

    def move(self, delta: int) -> None:
        self.cursor = self._clamp(self.cursor + delta)

    def move_to(self, position: int) -> None:
        self.cursor = self._clamp(position)

    def delete_left(self, count: int = 1) -> None:
        """カーソル左側の count 文字を削除する。"""
        start = self._clamp(self.cursor - count)
        self.text = self.text[:start] + self.text[self.cursor:]
        self.cursor = start

    def delete_right(self, count: int = 1) -> None:
        """カーソル右側の count 文字を削除する。"""
        end = self._clamp(self.cursor + count)
        self.text = self.text[: self.cursor] + self.text[end:]


@dataclass
class Invocation:
    """記録されたコマンド呼び出し。"""

    name: str
    args: Optional[Any] = None


def _count(args: Optional[Any]) -> int:
    """カーソル系コマンドの繰り返し回数を取り出す。"""
    if isinstance(args, dict):
        return int(args.get("count", 1))
    return 1


def _text(args: Optional[Any]) -> str:
    """type 系コマンドの挿入テキストを取り出す。"""
    if not isinstance(args, dict) or "text" not in args:
        raise ValueError("text 引数が必要です")
    return str(args["text"])


# ---------------------------------------------------------------------------
# InMemoryHost 本体
# ---------------------------------------------------------------------------

class InMemoryHost:
    """メモリ上で動作するホストエディタ。

    Attributes:
        buffer: 編集対象のテキストバッファ
        registry: コマンドレジストリ
        invocations: invoke_command() の呼び出し履歴（ネストした呼び出しを含む）
        messages: 表示されたステータスメッセージ（テキスト, 表示時間）
        warnings: 表示された警告メッセージ
        context: コンテキスト値
        indicator: 記録中インジケータのテキスト（非表示時は None）
    """

    def __init__(self, text: str = "", cursor: Optional[int] = None) -> None:
        """InMemoryHost を初期化し、組み込みコマンドを登録する。

        Args:
            text: 初期テキスト
            cursor: 初期カーソル位置（None でテキスト末尾）
        """
        self.buffer = TextBuffer(text=text, cursor=len(text) if cursor is None else cursor)
        self.registry = CommandRegistry()
        self.invocations: list[Invocation] = []
        self.messages: list[tuple[str, int]] = []
        self.warnings: list[str] = []
        self.context: dict[str, Any] = {}
        self.indicator: Optional[str] = None
        self._observers: list[TextObserver] = []
        self._prompt_answers: deque[Optional[str]] = deque()
        self._register_builtins()

    # -------------------------------------------------------------------
    # Host Protocol
    # -------------------------------------------------------------------

    def observe_text_insertion(self, handler: TextObserver) -> Disposer:
        self._observers.append(handler)

        def dispose() -> None:
            if handler in self._observers:
                self._observers.remove(handler)

        return dispose

    async def invoke_command(self, name: str, args: Optional[Any] = None) -> Any:
        """登録済みコマンドを実行する。

        ハンドラが返した awaitable は完了まで待機する。
        hxmacro 以外の例外は CommandExecutionError に変換して送出する。

        Raises:
            CommandNotFoundError: 未登録コマンドの場合
            CommandExecutionError: ハンドラが失敗した場合
        """
        handler = self.registry.get(name)
        self.invocations.append(Invocation(name=name, args=args))

        try:
            result = handler(args)
            if inspect.isawaitable(result):
                result = await result
        except HxMacroError:
            raise
        except Exception as exc:
            raise CommandExecutionError(name, str(exc)) from exc
        return result

    def register_command(self, name: str, handler: CommandHandler) -> Disposer:
        self.registry.register(
            name,
            handler,
            info=CommandInfo(name=name, description=f"{name} コマンド", category="extension"),
        )

        def dispose() -> None:
            # 後から上書きされたハンドラは解除しない
            if self.registry.has(name) and self.registry.get(name) is handler:
                self.registry.unregister(name)

        return dispose

    def set_context(self, key: str, value: Any) -> None:
        self.context[key] = value
        logger.debug("コンテキストを設定しました: %s=%r", key, value)

    def show_transient_message(self, text: str, duration_ms: int) -> None:
        self.messages.append((text, duration_ms))
        logger.info("ステータス: %s", text)

    def show_warning_message(self, text: str) -> None:
        self.warnings.append(text)
        logger.warning("警告: %s", text)

    def set_recording_indicator(self, text: Optional[str]) -> None:
        self.indicator = text

    async def prompt_single_character(self, prompt: str) -> Optional[str]:
        """応答キューの先頭を返す。キューが空の場合はキャンセル扱い（None）。"""
        answer = self._prompt_answers.popleft() if self._prompt_answers else None
        logger.debug("プロンプト '%s' への応答: %r", prompt, answer)
        return answer

    # -------------------------------------------------------------------
    # テスト・スクリプト用ユーティリティ
    # -------------------------------------------------------------------

    def queue_prompt_answer(self, answer: Optional[str]) -> None:
        """次の prompt_single_character() の応答を積む。"""
        self._prompt_answers.append(answer)

    @property
    def last_message(self) -> Optional[str]:
        return self.messages[-1][0] if self.messages else None

    def invoked_names(self) -> list[str]:
        """呼び出し履歴のコマンド名リストを返す。"""
        return [inv.name for inv in self.invocations]

    # -------------------------------------------------------------------
    # 組み込みコマンド
    # -------------------------------------------------------------------

    def _register_builtins(self) -> None:
        """組み込みコマンドをレジストリへ登録する。"""
        buf = self.buffer

        builtins: list[tuple[str, CommandHandler, str, str]] = [
            (NATIVE_TYPE_COMMAND, lambda a: buf.insert(_text(a)),
             "カーソル位置へテキストを挿入する（監視なし）", "edit"),
            (TYPE_COMMAND, self._type,
             "監視ハンドラへ通知した後にテキストを挿入する", "edit"),
            ("cursorLeft", lambda a: buf.move(-_count(a)), "カーソルを左へ移動する", "cursor"),
            ("cursorRight", lambda a: buf.move(_count(a)), "カーソルを右へ移動する", "cursor"),
            ("cursorHome", lambda a: buf.move_to(0), "カーソルを先頭へ移動する", "cursor"),
            ("cursorEnd", lambda a: buf.move_to(len(buf.text)), "カーソルを末尾へ移動する", "cursor"),
            ("deleteLeft", lambda a: buf.delete_left(_count(a)), "カーソル左の文字を削除する", "edit"),
            ("deleteRight", lambda a: buf.delete_right(_count(a)), "カーソル右の文字を削除する", "edit"),
            ("setContext", self._set_context_command, "コンテキスト値を設定する", "context"),
        ]
        for name, handler, description, category in builtins:
            self.registry.register(
                name, handler,
                info=CommandInfo(name=name, description=description, category=category),
            )

    async def _type(self, args: Optional[Any]) -> Any:
        """type コマンド: 監視ハンドラへ通知してからネイティブ挿入を実行する。"""
        text = _text(args)
        for observer in list(self._observers):
            observer(text)
        return await self.invoke_command(NATIVE_TYPE_COMMAND, args)

    def _set_context_command(self, args: Optional[Any]) -> None:
        if not isinstance(args, dict) or "key" not in args:
            raise ValueError("key 引数が必要です")
        self.set_context(str(args["key"]), args.get("value"))
