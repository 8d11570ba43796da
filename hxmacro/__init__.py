"""
hxmacro パッケージ

エディタに組み込むレジスタ式のマクロ記録・再生エンジンを提供する。
入力テキストとエディタコマンドをレジスタへ記録し、要求に応じて
記録順どおりにホストへ再発行する。

主な構成:
  - core: アクション定義と記録・再生エンジン（MacroManager）
  - host: ホストインターフェースとメモリ上のホスト実装
  - extension: MacroManager をホストへ接続する登録処理
  - config: 設定ファイル・環境変数からの設定読み込み
  - script: マクロスクリプトのスキーマ・パーサー・実行エンジン
  - cli: Typer ベースの CLI
"""

from __future__ import annotations

from .config import MacroConfig
from .core import (
    DEFAULT_REGISTER,
    Action,
    CommandAction,
    MacroManager,
    RecorderState,
    ReplayResult,
    TextAction,
)
from .extension import MacroExtension, activate

__all__ = [
    "DEFAULT_REGISTER",
    "Action",
    "CommandAction",
    "MacroConfig",
    "MacroExtension",
    "MacroManager",
    "RecorderState",
    "ReplayResult",
    "TextAction",
    "activate",
]
