"""
ホストモジュール

エディタ側のインターフェース定義とメモリ上のホスト実装を提供する。

主要エクスポート:
  - Host: ホストアダプタの共通 Protocol
  - CommandRegistry / CommandInfo: コマンドの登録・検索・一覧
  - InMemoryHost / TextBuffer: スクリプト実行・テスト用のホスト実装
"""

from .base import NATIVE_TYPE_COMMAND, TYPE_COMMAND, Disposer, Host
from .memory import InMemoryHost, Invocation, TextBuffer
from .registry import CommandInfo, CommandRegistry

__all__ = [
    "NATIVE_TYPE_COMMAND",
    "TYPE_COMMAND",
    "CommandInfo",
    "CommandRegistry",
    "Disposer",
    "Host",
    "InMemoryHost",
    "Invocation",
    "TextBuffer",
]
