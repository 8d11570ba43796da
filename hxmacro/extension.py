"""
拡張機能の登録 — MacroManager をホストへ接続する

ホストのテキスト挿入監視とコマンド登録を行い、
マクロの記録・再生をエディタのコマンドとして利用可能にする。

登録されるコマンド（接頭辞はデフォルト hxmacro）:
  - startRecording / stopRecording / toggleRecording: 記録の開始・終了
  - replay: 選択レジスタの再生
  - selectRegister: レジスタ選択（引数 register、省略時は 1 文字入力を要求）
  - performAction: 任意コマンドを記録付きで実行（引数 cmd / command, args）
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from .config import MacroConfig
from .core.manager import MacroManager, ReplayResult
from .host.base import Disposer, Host

logger = logging.getLogger(__name__)


@dataclass
class MacroExtension:
    """有効化された拡張機能。

    Attributes:
        manager: 記録・再生エンジン
        config: 実行時設定
        subscriptions: 登録解除用コールバックのリスト
    """

    manager: MacroManager
    config: MacroConfig
    subscriptions: list[Disposer] = field(default_factory=list)

    def dispose(self) -> None:
        """登録した監視ハンドラとコマンドを全て解除する。"""
        while self.subscriptions:
            self.subscriptions.pop()()
        logger.info("マクロ拡張を無効化しました")


def activate(host: Host, config: Optional[MacroConfig] = None) -> MacroExtension:
    """MacroManager を生成し、ホストへ監視ハンドラとコマンドを登録する。

    Args:
        host: 接続先のホスト
        config: 実行時設定（None でデフォルト値）

    Returns:
        有効化された拡張機能
    """
    config = config or MacroConfig()
    manager = MacroManager(host, config)
    extension = MacroExtension(manager=manager, config=config)

    # テキスト入力の監視（記録後にホストがネイティブ挿入を行う）
    extension.subscriptions.append(host.observe_text_insertion(manager.record_text))

    async def select_register(args: Optional[Any] = None) -> None:
        # register が None の場合は未指定として扱う
        if isinstance(args, dict) and args.get("register") is not None:
            value: Optional[str] = str(args["register"])
        else:
            value = await host.prompt_single_character("Press a key for register (a-z)")

        if value is None or value == "":
            logger.info("レジスタ選択がキャンセルされました")
            return
        if len(value) != 1:
            logger.warning("レジスタ名は 1 文字である必要があります: %r", value)
            host.show_warning_message("Single char only")
            return
        manager.set_register(value)

    async def perform_action(args: Optional[Any] = None) -> None:
        args = args if isinstance(args, dict) else {}
        command = args.get("cmd") or args.get("command")
        if not command:
            logger.warning("performAction にコマンド名が指定されていません: %r", args)
            return

        command_args = args.get("args")
        manager.record_command(command, command_args)
        await host.invoke_command(command, command_args)

    async def replay(args: Optional[Any] = None) -> ReplayResult:
        return await manager.replay()

    commands = {
        "startRecording": lambda args=None: manager.start_recording(),
        "stopRecording": lambda args=None: manager.stop_recording(),
        "toggleRecording": lambda args=None: manager.toggle_recording(),
        "replay": replay,
        "selectRegister": select_register,
        "performAction": perform_action,
    }
    for name, handler in commands.items():
        extension.subscriptions.append(host.register_command(config.command_id(name), handler))

    logger.info("マクロ拡張を有効化しました (prefix=%s)", config.command_prefix)
    return extension
