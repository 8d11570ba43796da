"""
スクリプトモジュール

InMemoryHost を入力イベントで操作するマクロスクリプトの
スキーマ・パーサー・実行エンジンを提供する。
"""

from .parser import ScriptParser, ScriptValidationError
from .runner import EventResult, ScriptResult, ScriptRunner
from .schema import Expectation, MacroScript, ScriptEvent

__all__ = [
    "EventResult",
    "Expectation",
    "MacroScript",
    "ScriptEvent",
    "ScriptParser",
    "ScriptResult",
    "ScriptRunner",
    "ScriptValidationError",
]
