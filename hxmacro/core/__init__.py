# コアモジュール
# アクション定義、レジスタ管理・記録・再生エンジンを提供

from .actions import DEFAULT_REGISTER, Action, CommandAction, TextAction, describe_action
from .manager import MacroManager, RecorderState, ReplayResult

__all__ = [
    "DEFAULT_REGISTER",
    "Action",
    "CommandAction",
    "MacroManager",
    "RecorderState",
    "ReplayResult",
    "TextAction",
    "describe_action",
]
