"""
ホストインターフェース — エディタ側が提供する操作の Protocol

マクロエンジンはエディタ本体に直接依存せず、この Protocol を満たす
ホストアダプタを通じてテキスト挿入の監視・コマンド実行・UI 表示を行う。

主な構成:
  - Host Protocol: ホストアダプタの共通インターフェース
  - Disposer: 登録解除用コールバックの型
  - TYPE_COMMAND / NATIVE_TYPE_COMMAND: テキスト入力コマンド名
"""

from __future__ import annotations

from typing import Any, Awaitable, Callable, Optional, Protocol, Union, runtime_checkable

# テキスト入力時にホストが発行するコマンド（監視対象）
TYPE_COMMAND = "type"

# 監視を経由しないネイティブのテキスト挿入コマンド
NATIVE_TYPE_COMMAND = "default:type"

Disposer = Callable[[], None]

CommandHandler = Callable[[Optional[Any]], Union[Any, Awaitable[Any]]]

TextObserver = Callable[[str], None]


@runtime_checkable
class Host(Protocol):
    """ホストエディタのインターフェース。

    実装はシングルスレッドのイベントループ上で動作することを前提とする。
    """

    def observe_text_insertion(self, handler: TextObserver) -> Disposer:
        """テキスト挿入イベントの監視ハンドラを登録する。

        ハンドラは挿入テキストを受け取り、ネイティブの挿入処理より先に
        同期的に呼ばれる。挿入内容はハンドラによって変更されない。

        Args:
            handler: 挿入テキストを受け取るコールバック

        Returns:
            登録解除用コールバック
        """
        ...

    async def invoke_command(self, name: str, args: Optional[Any] = None) -> Any:
        """名前付きコマンドを実行し、完了まで待機する。

        Args:
            name: コマンド名
            args: コマンド引数

        Returns:
            コマンドの戻り値

        Raises:
            CommandNotFoundError: 未登録コマンドの場合
            CommandExecutionError: コマンドが失敗した場合
        """
        ...

    def register_command(self, name: str, handler: CommandHandler) -> Disposer:
        """コマンドを登録する。"""
        ...

    def set_context(self, key: str, value: Any) -> None:
        """キーバインド条件などに使うコンテキスト値を設定する。"""
        ...

    def show_transient_message(self, text: str, duration_ms: int) -> None:
        """一定時間で消えるステータスメッセージを表示する。"""
        ...

    def show_warning_message(self, text: str) -> None:
        """警告メッセージを表示する。"""
        ...

    def set_recording_indicator(self, text: Optional[str]) -> None:
        """記録中インジケータを表示する。None で非表示にする。"""
        ...

    async def prompt_single_character(self, prompt: str) -> Optional[str]:
        """ユーザーに 1 文字の入力を求める。キャンセル時は None。"""
        ...
