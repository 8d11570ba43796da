"""
MacroManager — マクロ記録・再生エンジン

入力テキストとエディタコマンドをレジスタ単位で記録し、
要求に応じて記録順どおりにホストへ再発行する。

主な機能:
  - RecorderState: 記録状態（IDLE / RECORDING）
  - ReplayResult: 再生結果データクラス
  - MacroManager: レジスタ管理・記録状態遷移・アクション記録・再生

記録状態はマネージャインスタンスごとに保持する。
エディタにつき 1 インスタンスを生成し、activate() などの登録処理へ明示的に渡す。
"""

from __future__ import annotations

import copy
import enum
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal, Mapping, Optional

from .actions import DEFAULT_REGISTER, Action, CommandAction, TextAction, describe_action

if TYPE_CHECKING:
    from ..config import MacroConfig
    from ..host.base import Host

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# 記録状態
# ---------------------------------------------------------------------------

class RecorderState(enum.Enum):
    """マクロ記録の状態。"""

    IDLE = "idle"
    RECORDING = "recording"


# ---------------------------------------------------------------------------
# 再生結果
# ---------------------------------------------------------------------------

@dataclass
class ReplayResult:
    """1 回の再生の結果。

    replay() は失敗を例外として送出しないため、
    結果を確認したい呼び出し元はこのオブジェクトを参照する。

    Attributes:
        register: 再生対象のレジスタ名
        status: completed / aborted（途中失敗） / empty（空レジスタ） / rejected（記録中など）
        executed: 実行を試みたアクション数（失敗したアクションを含む）
        total: レジスタ内のアクション数
        failed_action: 失敗したアクション
        error: エラーメッセージ
        duration_ms: 再生時間（ミリ秒）
    """

    register: str
    status: Literal["completed", "aborted", "empty", "rejected"] = "completed"
    executed: int = 0
    total: int = 0
    failed_action: Optional[Action] = None
    error: Optional[str] = None
    duration_ms: float = 0.0


# ---------------------------------------------------------------------------
# MacroManager 本体
# ---------------------------------------------------------------------------

class MacroManager:
    """レジスタ単位のマクロ記録・再生エンジン。

    使用例::

        manager = MacroManager(host)
        manager.set_register("q")
        manager.start_recording()
        manager.record_text("hello")
        manager.stop_recording()
        manager.set_register("q")
        await manager.replay()
    """

    def __init__(self, host: Host, config: Optional[MacroConfig] = None) -> None:
        """MacroManager を初期化する。

        Args:
            host: コマンド実行・UI 表示を担うホストアダプタ
            config: 実行時設定（None でデフォルト値）
        """
        if config is None:
            from ..config import MacroConfig

            config = MacroConfig()

        self._host = host
        self._config = config
        self._state: RecorderState = RecorderState.IDLE
        self._current_register: str = DEFAULT_REGISTER
        self._active: list[Action] = []
        self._registers: dict[str, tuple[Action, ...]] = {}
        self._replaying: bool = False

    # -------------------------------------------------------------------
    # 状態参照
    # -------------------------------------------------------------------

    @property
    def state(self) -> RecorderState:
        """現在の記録状態を返す。"""
        return self._state

    @property
    def is_recording(self) -> bool:
        return self._state == RecorderState.RECORDING

    @property
    def is_replaying(self) -> bool:
        return self._replaying

    @property
    def current_register(self) -> str:
        """次の記録・再生で使用するレジスタ名を返す。"""
        return self._current_register

    @property
    def active_sequence(self) -> tuple[Action, ...]:
        """記録中のアクション列のスナップショットを返す。"""
        return tuple(self._active)

    @property
    def registers(self) -> Mapping[str, tuple[Action, ...]]:
        """確定済みレジスタのコピーを返す。"""
        return dict(self._registers)

    def get_register(self, name: str) -> Optional[tuple[Action, ...]]:
        """レジスタの内容を返す。未登録の場合は None。"""
        return self._registers.get(name)

    # -------------------------------------------------------------------
    # 状態遷移
    # -------------------------------------------------------------------

    def set_register(self, name: str) -> None:
        """次の記録・再生で使用するレジスタを選択する。

        記録状態は変更しない。名前の妥当性（1 文字）は呼び出し側で検証する。

        Args:
            name: レジスタ名
        """
        self._current_register = name
        logger.info("レジスタを選択しました: %s", name)
        self._host.show_transient_message(
            f'Macro register selected: "{name}"', self._config.status_message_ms,
        )

    def start_recording(self) -> None:
        """記録を開始する。

        記録中に呼ばれた場合は記録途中のアクション列を破棄してやり直す。
        """
        if self.is_recording:
            logger.warning(
                "記録中に記録開始が要求されました。未確定の %d アクションを破棄します",
                len(self._active),
            )

        self._state = RecorderState.RECORDING
        self._active = []
        self._update_context()
        self._host.set_recording_indicator(f"Recording @{self._current_register}")
        logger.info("記録を開始しました (register=%s)", self._current_register)

    def stop_recording(self) -> None:
        """記録を終了し、アクション列をレジスタへ確定する。

        記録中でなければ何もしない。アクション列が空の場合はレジスタを変更しない。
        終了後、選択レジスタはデフォルトに戻る。
        """
        if not self.is_recording:
            return

        self._state = RecorderState.IDLE
        register = self._current_register

        if self._active:
            self._registers[register] = tuple(self._active)
            logger.info("%d アクションをレジスタ %s に記録しました", len(self._active), register)
            message = f"Macro recorded to @{register}"
        else:
            logger.info("アクションが記録されなかったため、レジスタ %s は変更しません", register)
            message = "Nothing recorded"
        self._active = []

        self._current_register = DEFAULT_REGISTER
        self._update_context()
        self._host.set_recording_indicator(None)
        self._host.show_transient_message(message, self._config.status_message_ms)

    def toggle_recording(self) -> None:
        """記録中なら終了し、そうでなければ開始する。"""
        if self.is_recording:
            self.stop_recording()
        else:
            self.start_recording()

    # -------------------------------------------------------------------
    # 記録フック
    # -------------------------------------------------------------------

    def record_command(self, command: str, args: Optional[Any] = None) -> None:
        """コマンド呼び出しを記録する。記録中でなければ何もしない。

        args は記録時点の値を保持するため複製する。

        Args:
            command: コマンド名
            args: コマンド引数
        """
        if not self.is_recording:
            return

        self._active.append(CommandAction(command=command, args=copy.deepcopy(args)))
        logger.debug("コマンドを記録しました: %s", command)

    def record_text(self, text: str) -> None:
        """テキスト挿入を記録する。記録中でなければ何もしない。

        末尾が TextAction の場合はそのテキストへ連結し、
        連続入力を 1 アクションにまとめる。

        Args:
            text: 挿入テキスト
        """
        if not self.is_recording:
            return

        if self._active and isinstance(self._active[-1], TextAction):
            self._active[-1] = self._active[-1].extended(text)
        else:
            self._active.append(TextAction(text=text))

    # -------------------------------------------------------------------
    # 再生
    # -------------------------------------------------------------------

    async def replay(self) -> ReplayResult:
        """選択レジスタのアクション列を順に再生する。

        各アクションの完了を待ってから次へ進む。失敗したアクションで再生を打ち切り、
        エラーはログに出力するのみで呼び出し元へは送出しない。
        再生後、選択レジスタはデフォルトに戻る。

        Returns:
            再生結果
        """
        register = self._current_register
        result = ReplayResult(register=register)

        if self.is_recording:
            logger.warning("記録中のため再生を中止しました")
            self._host.show_warning_message("Cannot replay while recording.")
            result.status = "rejected"
            result.error = "recording in progress"
            return result

        if self._replaying:
            logger.warning("再生中のため、入れ子の再生要求を無視しました (register=%s)", register)
            result.status = "rejected"
            result.error = "replay in progress"
            return result

        sequence = self._registers.get(register)
        if not sequence:
            logger.info("レジスタ %s は空です", register)
            self._host.show_transient_message(
                f"Register @{register} is empty", self._config.status_message_ms,
            )
            result.status = "empty"
            return result

        result.total = len(sequence)
        self._replaying = True
        start_time = time.perf_counter()
        logger.info("レジスタ %s を再生します (%d アクション)", register, len(sequence))

        try:
            for idx, action in enumerate(sequence):
                result.executed = idx + 1
                try:
                    await self._execute_action(action)
                except Exception as exc:
                    result.status = "aborted"
                    result.failed_action = action
                    result.error = str(exc)
                    logger.error(
                        "マクロ再生が %s アクション (index=%d, %s) で失敗しました: %s",
                        action.kind, idx, describe_action(action), exc,
                    )
                    break
        finally:
            self._replaying = False
            self._current_register = DEFAULT_REGISTER
            result.duration_ms = (time.perf_counter() - start_time) * 1000

        return result

    async def _execute_action(self, action: Action) -> None:
        """1 アクションをホストへ発行する。

        TextAction はネイティブの挿入コマンドで発行し、記録用の監視を経由させない。
        CommandAction の引数はコマンド側の変更が記録へ波及しないよう複製して渡す。
        """
        logger.debug("再生: %s", describe_action(action))
        if isinstance(action, CommandAction):
            await self._host.invoke_command(action.command, copy.deepcopy(action.args))
        else:
            await self._host.invoke_command(
                self._config.literal_insert_command, {"text": action.text},
            )

    # -------------------------------------------------------------------
    # ホスト通知
    # -------------------------------------------------------------------

    def _update_context(self) -> None:
        """記録中フラグをホストのコンテキストへ反映する。"""
        self._host.set_context(self._config.context_key, self.is_recording)
