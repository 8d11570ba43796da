"""
ScriptRunner — マクロスクリプト実行エンジン

MacroScript を読み込み、InMemoryHost 上でイベントを順に発行して
マクロの記録・再生を実行する。

主な機能:
  - EventResult / ScriptResult: 実行結果データクラス
  - ScriptRunner: スクリプト実行エンジン本体
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Literal, Optional

from ..config import MacroConfig
from ..core.manager import ReplayResult
from ..extension import MacroExtension, activate
from ..host.base import TYPE_COMMAND
from ..host.memory import InMemoryHost

if TYPE_CHECKING:
    from .schema import MacroScript, ScriptEvent

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 結果データクラス
# ---------------------------------------------------------------------------

@dataclass
class EventResult:
    """単一イベントの実行結果。

    Attributes:
        index: イベントのインデックス（0始まり）
        kind: イベント種別
        status: 実行結果（passed / failed）
        duration_ms: 実行時間（ミリ秒）
        error: エラーメッセージ（失敗時のみ）
        replay: replay イベントの再生結果
    """

    index: int
    kind: str
    status: Literal["passed", "failed"] = "passed"
    duration_ms: float = 0.0
    error: Optional[str] = None
    replay: Optional[ReplayResult] = None


@dataclass
class ScriptResult:
    """スクリプト全体の実行結果。

    Attributes:
        title: スクリプト名
        status: 全体結果（passed / failed）
        events: 各イベントの実行結果リスト
        text: 実行後のバッファテキスト
        cursor: 実行後のカーソル位置
        registers: レジスタ名 → 記録アクション数
        expectation_errors: 期待値との不一致内容
        duration_ms: 全体実行時間（ミリ秒）
        started_at: 実行開始日時
        finished_at: 実行終了日時
    """

    title: str
    status: Literal["passed", "failed"] = "passed"
    events: list[EventResult] = field(default_factory=list)
    text: str = ""
    cursor: int = 0
    registers: dict[str, int] = field(default_factory=dict)
    expectation_errors: list[str] = field(default_factory=list)
    duration_ms: float = 0.0
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None


# ---------------------------------------------------------------------------
# ScriptRunner 本体
# ---------------------------------------------------------------------------

class ScriptRunner:
    """マクロスクリプト実行エンジン。

    使用例::

        runner = ScriptRunner(config)
        result = await runner.run(script)
    """

    def __init__(self, config: Optional[MacroConfig] = None) -> None:
        self._config = config or MacroConfig()

    async def run(
        self, script: MacroScript, host: Optional[InMemoryHost] = None,
    ) -> ScriptResult:
        """スクリプトを実行し、結果を返す。

        イベントを順に実行し、失敗したイベントで後続をスキップする。
        全イベント成功時のみ期待値を検証する。

        Args:
            script: 実行対象のスクリプト
            host: 使用するホスト（None で script の初期テキストから生成）

        Returns:
            スクリプト全体の実行結果
        """
        if host is None:
            host = InMemoryHost(text=script.text, cursor=script.cursor)

        result = ScriptResult(title=script.title, started_at=datetime.now())
        start_time = time.perf_counter()
        extension = activate(host, self._config)

        try:
            for idx, event in enumerate(script.events):
                event_result = await self._execute_event(host, extension, idx, event)
                result.events.append(event_result)

                # 失敗時は後続イベントをスキップ
                if event_result.status == "failed":
                    result.status = "failed"
                    break

            result.registers = {
                name: len(actions)
                for name, actions in extension.manager.registers.items()
            }
        finally:
            extension.dispose()

        result.text = host.buffer.text
        result.cursor = host.buffer.cursor

        if result.status == "passed" and script.expect is not None:
            result.expectation_errors = _check_expectation(script, result)
            if result.expectation_errors:
                result.status = "failed"

        result.finished_at = datetime.now()
        result.duration_ms = (time.perf_counter() - start_time) * 1000
        logger.info("スクリプト '%s' の実行が終了しました: %s", script.title, result.status)
        return result

    async def _execute_event(
        self,
        host: InMemoryHost,
        extension: MacroExtension,
        index: int,
        event: ScriptEvent,
    ) -> EventResult:
        """単一イベントを実行する。

        エラー発生時は EventResult.status を "failed" にする。
        """
        event_result = EventResult(index=index, kind=event.kind)
        start_time = time.perf_counter()

        try:
            outcome = await self._dispatch_event(host, event)
            if isinstance(outcome, ReplayResult):
                event_result.replay = outcome
        except Exception as exc:
            event_result.status = "failed"
            event_result.error = str(exc)
            logger.error("イベント '%s' (index=%d) でエラー: %s", event.kind, index, exc)

        event_result.duration_ms = (time.perf_counter() - start_time) * 1000
        return event_result

    async def _dispatch_event(self, host: InMemoryHost, event: ScriptEvent) -> object:
        """イベント種別に応じてホストのコマンドを呼び出す。"""
        cfg = self._config

        if event.kind == "type":
            return await host.invoke_command(TYPE_COMMAND, {"text": event.text})

        if event.kind == "perform":
            return await host.invoke_command(
                cfg.command_id("performAction"),
                {"command": event.command, "args": event.args},
            )

        if event.kind == "command":
            # 記録を経由せずに直接実行する
            return await host.invoke_command(event.command, event.args)

        if event.kind == "register":
            # 1 文字入力プロンプトの応答として渡す
            host.queue_prompt_answer(event.register_name)
            return await host.invoke_command(cfg.command_id("selectRegister"))

        # startRecording / stopRecording / toggleRecording / replay
        return await host.invoke_command(cfg.command_id(event.kind))


def _check_expectation(script: MacroScript, result: ScriptResult) -> list[str]:
    """実行後のバッファを期待値と比較し、不一致内容のリストを返す。"""
    errors: list[str] = []
    expect = script.expect
    if expect is None:
        return errors

    if expect.text is not None and expect.text != result.text:
        errors.append(f"テキストが一致しません: expected={expect.text!r}, actual={result.text!r}")
    if expect.cursor is not None and expect.cursor != result.cursor:
        errors.append(f"カーソル位置が一致しません: expected={expect.cursor}, actual={result.cursor}")
    return errors
