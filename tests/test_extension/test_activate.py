"""
拡張機能登録のテスト

activate() によるテキスト監視・コマンド登録と、
selectRegister / performAction / replay コマンドの動作を InMemoryHost 上で検証する。
"""

from __future__ import annotations

import pytest

from hxmacro.config import MacroConfig
from hxmacro.core.actions import CommandAction, TextAction
from hxmacro.extension import activate
from hxmacro.host.memory import InMemoryHost

COMMANDS = [
    "hxmacro.performAction",
    "hxmacro.replay",
    "hxmacro.selectRegister",
    "hxmacro.startRecording",
    "hxmacro.stopRecording",
    "hxmacro.toggleRecording",
]


class TestActivate:
    """activate() の登録内容のテスト。"""

    def test_registers_commands(self, memory_host: InMemoryHost):
        activate(memory_host)
        for name in COMMANDS:
            assert memory_host.registry.has(name)

    def test_command_prefix_from_config(self, memory_host: InMemoryHost):
        activate(memory_host, MacroConfig(command_prefix="helixMacro"))
        assert memory_host.registry.has("helixMacro.replay")
        assert not memory_host.registry.has("hxmacro.replay")

    @pytest.mark.asyncio
    async def test_dispose_unregisters_everything(self, memory_host: InMemoryHost):
        """dispose() でコマンドとテキスト監視が解除されること。"""
        extension = activate(memory_host)
        await memory_host.invoke_command("hxmacro.startRecording")

        extension.dispose()
        await memory_host.invoke_command("type", {"text": "a"})

        for name in COMMANDS:
            assert not memory_host.registry.has(name)
        assert extension.manager.active_sequence == ()
        assert memory_host.buffer.text == "a"


class TestTextInterception:
    """type コマンド監視のテスト。"""

    @pytest.mark.asyncio
    async def test_typed_text_is_recorded_and_inserted(self, memory_host: InMemoryHost):
        """入力テキストが記録され、かつ通常どおり挿入されること。"""
        extension = activate(memory_host)
        await memory_host.invoke_command("hxmacro.startRecording")
        for ch in "abc":
            await memory_host.invoke_command("type", {"text": ch})
        await memory_host.invoke_command("hxmacro.stopRecording")

        assert memory_host.buffer.text == "abc"
        assert extension.manager.get_register("@") == (TextAction("abc"),)

    @pytest.mark.asyncio
    async def test_typing_when_idle_is_not_recorded(self, memory_host: InMemoryHost):
        extension = activate(memory_host)
        await memory_host.invoke_command("type", {"text": "a"})
        assert memory_host.buffer.text == "a"
        assert extension.manager.registers == {}

    @pytest.mark.asyncio
    async def test_context_and_indicator(self, memory_host: InMemoryHost):
        """記録中フラグとインジケータがホストへ反映されること。"""
        activate(memory_host)
        await memory_host.invoke_command("hxmacro.toggleRecording")
        assert memory_host.context["hxmacro.isRecording"] is True
        assert memory_host.indicator == "Recording @@"

        await memory_host.invoke_command("hxmacro.toggleRecording")
        assert memory_host.context["hxmacro.isRecording"] is False
        assert memory_host.indicator is None


class TestSelectRegister:
    """selectRegister コマンドのテスト。"""

    @pytest.mark.asyncio
    async def test_prompted_register(self, memory_host: InMemoryHost):
        extension = activate(memory_host)
        memory_host.queue_prompt_answer("q")
        await memory_host.invoke_command("hxmacro.selectRegister")
        assert extension.manager.current_register == "q"
        assert memory_host.last_message == 'Macro register selected: "q"'

    @pytest.mark.asyncio
    async def test_register_argument_skips_prompt(self, memory_host: InMemoryHost):
        """引数 register が指定された場合はプロンプトを使わないこと。"""
        extension = activate(memory_host)
        memory_host.queue_prompt_answer("x")
        await memory_host.invoke_command("hxmacro.selectRegister", {"register": "w"})
        assert extension.manager.current_register == "w"
        assert await memory_host.prompt_single_character("?") == "x"

    @pytest.mark.asyncio
    async def test_none_register_argument_prompts(self, memory_host: InMemoryHost):
        """register が None の場合はプロンプトで入力を求めること。"""
        extension = activate(memory_host)
        memory_host.queue_prompt_answer("e")
        await memory_host.invoke_command("hxmacro.selectRegister", {"register": None})
        assert extension.manager.current_register == "e"
        assert memory_host.warnings == []

    @pytest.mark.asyncio
    async def test_none_register_argument_without_answer(self, memory_host: InMemoryHost):
        extension = activate(memory_host)
        await memory_host.invoke_command("hxmacro.selectRegister", {"register": None})
        assert extension.manager.current_register == "@"
        assert memory_host.warnings == []

    @pytest.mark.asyncio
    async def test_cancelled_prompt_keeps_register(self, memory_host: InMemoryHost):
        extension = activate(memory_host)
        await memory_host.invoke_command("hxmacro.selectRegister")
        assert extension.manager.current_register == "@"

    @pytest.mark.asyncio
    async def test_multi_character_rejected(self, memory_host: InMemoryHost):
        """2 文字以上の入力は警告を表示して無視されること。"""
        extension = activate(memory_host)
        memory_host.queue_prompt_answer("ab")
        await memory_host.invoke_command("hxmacro.selectRegister")
        assert extension.manager.current_register == "@"
        assert memory_host.warnings == ["Single char only"]


class TestPerformAction:
    """performAction コマンドのテスト。"""

    @pytest.mark.asyncio
    async def test_records_and_executes(self, memory_host: InMemoryHost):
        """コマンドが記録され、実行されること。"""
        memory_host.buffer.insert("abc")
        extension = activate(memory_host)
        await memory_host.invoke_command("hxmacro.startRecording")
        await memory_host.invoke_command(
            "hxmacro.performAction", {"cmd": "cursorLeft", "args": {"count": 2}},
        )
        await memory_host.invoke_command("hxmacro.stopRecording")

        assert memory_host.buffer.cursor == 1
        assert extension.manager.get_register("@") == (
            CommandAction("cursorLeft", {"count": 2}),
        )

    @pytest.mark.asyncio
    async def test_command_key_alias(self, memory_host: InMemoryHost):
        memory_host.buffer.insert("abc")
        activate(memory_host)
        await memory_host.invoke_command("hxmacro.performAction", {"command": "cursorHome"})
        assert memory_host.buffer.cursor == 0

    @pytest.mark.asyncio
    async def test_without_command_is_noop(self, memory_host: InMemoryHost):
        extension = activate(memory_host)
        await memory_host.invoke_command("hxmacro.startRecording")
        await memory_host.invoke_command("hxmacro.performAction", {})
        await memory_host.invoke_command("hxmacro.performAction")
        assert extension.manager.active_sequence == ()


class TestReplayCommand:
    """replay コマンドのテスト。"""

    @pytest.mark.asyncio
    async def test_replay_does_not_record_replayed_text(self, memory_host: InMemoryHost):
        """再生されたテキストが監視ハンドラへ届かないこと。"""
        extension = activate(memory_host)
        seen: list[str] = []
        memory_host.observe_text_insertion(seen.append)

        await memory_host.invoke_command("hxmacro.startRecording")
        await memory_host.invoke_command("type", {"text": "ab"})
        await memory_host.invoke_command("hxmacro.stopRecording")
        result = await memory_host.invoke_command("hxmacro.replay")

        assert result.status == "completed"
        assert memory_host.buffer.text == "abab"
        assert seen == ["ab"]
        assert extension.manager.get_register("@") == (TextAction("ab"),)

    @pytest.mark.asyncio
    async def test_replay_unknown_command_aborts(self, memory_host: InMemoryHost):
        """再生中に未登録コマンドがあれば打ち切られ、例外にならないこと。"""
        extension = activate(memory_host)
        memory_host.register_command("temporary", lambda args=None: None)
        await memory_host.invoke_command("hxmacro.startRecording")
        await memory_host.invoke_command("type", {"text": "a"})
        await memory_host.invoke_command("hxmacro.performAction", {"cmd": "temporary"})
        await memory_host.invoke_command("type", {"text": "b"})
        await memory_host.invoke_command("hxmacro.stopRecording")
        memory_host.registry.unregister("temporary")

        result = await memory_host.invoke_command("hxmacro.replay")

        assert result.status == "aborted"
        assert result.executed == 2
        assert memory_host.buffer.text == "aba"
        assert extension.manager.current_register == "@"
