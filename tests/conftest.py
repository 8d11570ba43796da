"""
テスト共通フィクスチャ・Hypothesis ストラテジー定義

全テストモジュールで共有するフィクスチャとデータ生成器を提供する。
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from hypothesis import strategies as st

from hxmacro.config import MacroConfig
from hxmacro.core.manager import MacroManager
from hxmacro.host.memory import InMemoryHost


# ---------------------------------------------------------------------------
# pytest フィクスチャ
# ---------------------------------------------------------------------------

@pytest.fixture
def config() -> MacroConfig:
    """デフォルト値の MacroConfig。"""
    return MacroConfig()


@pytest.fixture
def mock_host() -> MagicMock:
    """Host Protocol のモック。

    invoke_command / prompt_single_character は AsyncMock、
    それ以外の UI 操作は MagicMock で代替する。
    """
    host = MagicMock()
    host.invoke_command = AsyncMock(return_value=None)
    host.prompt_single_character = AsyncMock(return_value=None)
    return host


@pytest.fixture
def manager(mock_host: MagicMock, config: MacroConfig) -> MacroManager:
    """モックホストに接続した MacroManager。"""
    return MacroManager(mock_host, config)


@pytest.fixture
def memory_host() -> InMemoryHost:
    """空バッファの InMemoryHost。"""
    return InMemoryHost()


@pytest.fixture
def sample_script_content() -> str:
    """サンプルのマクロスクリプト YAML 文字列。"""
    return """\
title: duplicate greeting
text: ""
events:
  - register: m
  - startRecording
  - type: h
  - type: ello
  - perform: {command: cursorLeft}
  - stopRecording
  - register: m
  - replay
expect:
  text: hellhelloo
  cursor: 8
"""


@pytest.fixture
def sample_script_path(tmp_path: Path, sample_script_content: str) -> Path:
    """サンプルスクリプトを書き出したファイルパス。"""
    path = tmp_path / "duplicate_greeting.yaml"
    path.write_text(sample_script_content, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Hypothesis ストラテジー
# ---------------------------------------------------------------------------

def make_text_chunks_strategy():
    """連続入力されるテキスト片のリストを生成する Hypothesis ストラテジー。"""
    return st.lists(st.text(min_size=1, max_size=10), min_size=1, max_size=30)


def make_register_name_strategy():
    """1 文字のレジスタ名を生成する Hypothesis ストラテジー。"""
    return st.characters(min_codepoint=33, max_codepoint=126)


def make_recording_events_strategy():
    """("text", str) / ("command", str) の記録イベント列を生成する Hypothesis ストラテジー。"""
    text_event = st.tuples(st.just("text"), st.text(min_size=1, max_size=5))
    command_event = st.tuples(
        st.just("command"),
        st.sampled_from(["cursorLeft", "cursorRight", "deleteLeft", "cursorHome"]),
    )
    return st.lists(st.one_of(text_event, command_event), max_size=30)
