"""
マクロスクリプトのスキーマ定義

InMemoryHost に対して入力イベントを順に発行するスクリプトの Pydantic v2 モデル。
イベントは YAML 上で { kind: params } 形式、または引数なしイベントの場合は
種別名の文字列で記述する。

例::

    title: duplicate greeting
    text: ""
    events:
      - register: m
      - startRecording
      - type: hello
      - perform: {command: cursorLeft}
      - stopRecording
      - register: m
      - replay
    expect:
      text: hellhelloo
"""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

EventKind = Literal[
    "type",
    "perform",
    "command",
    "register",
    "startRecording",
    "stopRecording",
    "toggleRecording",
    "replay",
]

# 引数を取らないイベント種別
NO_PARAM_EVENTS = frozenset({"startRecording", "stopRecording", "toggleRecording", "replay"})

# コマンド名と引数を取るイベント種別
COMMAND_EVENTS = frozenset({"perform", "command"})


# ---------------------------------------------------------------------------
# イベント
# ---------------------------------------------------------------------------

class ScriptEvent(BaseModel):
    """スクリプト内の 1 イベント。

    kind に応じて使用するフィールドが異なる。
      - type: text
      - register: register_name（YAML 上のキーは register）
      - perform / command: command, args
      - その他: なし

    YAML の数値（register: 1 / type: 123）は文字列として扱う。
    """

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    kind: EventKind = Field(..., description="イベント種別")
    text: Optional[str] = Field(default=None, description="type で入力するテキスト")
    register_name: Optional[str] = Field(
        default=None, alias="register", description="register で選択するレジスタ名",
    )
    command: Optional[str] = Field(default=None, description="perform / command で実行するコマンド名")
    args: Optional[Any] = Field(default=None, description="コマンド引数")

    @model_validator(mode="after")
    def _check_params(self) -> ScriptEvent:
        if self.kind == "type" and self.text is None:
            raise ValueError("type イベントには入力テキストが必要です")
        if self.kind == "register" and self.register_name is None:
            raise ValueError("register イベントにはレジスタ名が必要です")
        if self.kind in COMMAND_EVENTS and not self.command:
            raise ValueError(f"{self.kind} イベントにはコマンド名が必要です")
        return self


def normalize_event(raw: Any) -> Any:
    """YAML 上の記法を ScriptEvent の辞書形式へ変換する。

    Args:
        raw: "replay" / {"type": "abc"} / {"perform": {"command": "x"}} などの値

    Returns:
        ScriptEvent に渡せる辞書（変換できない値はそのまま返し、検証エラーにする）

    Raises:
        ValueError: 1 イベントに複数の種別が指定されている場合
    """
    if isinstance(raw, ScriptEvent):
        return raw
    if isinstance(raw, str):
        return {"kind": raw}
    if not isinstance(raw, dict):
        return raw
    if "kind" in raw:
        return raw
    if len(raw) != 1:
        raise ValueError(f"1 イベントには種別を 1 つだけ指定してください: {sorted(raw)}")

    kind, params = next(iter(raw.items()))
    if kind == "type":
        return {"kind": kind, "text": params}
    if kind == "register":
        return {"kind": kind, "register": params}
    if kind in COMMAND_EVENTS:
        if isinstance(params, str):
            return {"kind": kind, "command": params}
        if isinstance(params, dict):
            return {"kind": kind, **params}
        return {"kind": kind}
    return {"kind": kind}


# ---------------------------------------------------------------------------
# スクリプト全体
# ---------------------------------------------------------------------------

class Expectation(BaseModel):
    """実行後のバッファに対する期待値。"""

    text: Optional[str] = Field(default=None, description="期待するテキスト")
    cursor: Optional[int] = Field(default=None, ge=0, description="期待するカーソル位置")


class MacroScript(BaseModel):
    """マクロスクリプトのトップレベルモデル。

    Attributes:
        title: スクリプト名
        text: 初期テキスト
        cursor: 初期カーソル位置（省略時はテキスト末尾）
        events: 発行するイベントのリスト
        expect: 実行後の期待値
    """

    title: str = Field(..., min_length=1, description="スクリプト名")
    text: str = Field(default="", description="初期テキスト")
    cursor: Optional[int] = Field(default=None, ge=0, description="初期カーソル位置")
    events: list[ScriptEvent] = Field(default_factory=list, description="イベントリスト")
    expect: Optional[Expectation] = Field(default=None, description="実行後の期待値")

    @field_validator("events", mode="before")
    @classmethod
    def _normalize_events(cls, value: Any) -> Any:
        if not isinstance(value, list):
            return value
        return [normalize_event(item) for item in value]
