"""
CLI エントリポイント — Typer ベースのコマンドラインインターフェース

hxmacro コマンドとして以下のサブコマンドを提供する:
  - run: マクロスクリプトを InMemoryHost 上で実行
  - validate: スクリプトのスキーマ検証
  - list-commands: 利用可能なホストコマンド一覧
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

import typer

from .config import MacroConfig, load_config

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Typer アプリ定義
# ---------------------------------------------------------------------------

app = typer.Typer(
    help=(
        "hxmacro — レジスタ式マクロ記録・再生エンジン\n\n"
        "基本の流れ:\n"
        "  1. hxmacro validate scripts/xxx.yaml  スクリプトを検証\n"
        "  2. hxmacro run scripts/xxx.yaml       スクリプトを実行\n\n"
        "詳しくは各コマンドに --help を付けてください。"
    ),
    no_args_is_help=True,
)

# コールバックで構築した設定（サブコマンドから参照）
_state: dict = {"config": None}


@app.callback()
def main(
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="設定ファイル（省略時は ./hxmacro.yaml があれば使用）",
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="ログレベル (DEBUG / INFO / WARNING / ERROR)",
    ),
    status_ms: Optional[int] = typer.Option(
        None, "--status-ms", help="ステータスメッセージの表示時間（ミリ秒）",
    ),
) -> None:
    """設定の読み込みとロギングの初期化を行う。"""
    try:
        config = load_config(config_file)
    except Exception as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)

    # CLI 引数 > 環境変数 > 設定ファイル
    if log_level is not None:
        config.log_level = log_level.upper()
    if status_ms is not None:
        config.status_message_ms = status_ms

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.WARNING),
        format="%(name)s - %(levelname)s - %(message)s",
    )
    _state["config"] = config


def _config() -> MacroConfig:
    return _state["config"] or MacroConfig()


# ---------------------------------------------------------------------------
# run コマンド
# ---------------------------------------------------------------------------

@app.command()
def run(
    script_file: Path = typer.Argument(..., help="実行するマクロスクリプト"),
) -> None:
    """マクロスクリプトを実行し、結果のテキストを表示する。"""
    import asyncio

    from .script.parser import ScriptParser
    from .script.runner import ScriptRunner

    try:
        script = ScriptParser().load(script_file)
        result = asyncio.run(ScriptRunner(_config()).run(script))

        typer.echo(f"スクリプト: {result.title}")
        typer.echo(f"ステータス: {result.status}")
        typer.echo(f"実行時間: {result.duration_ms:.0f}ms")
        typer.echo(
            f"イベント: {len(result.events)} "
            f"(passed={sum(1 for e in result.events if e.status == 'passed')}, "
            f"failed={sum(1 for e in result.events if e.status == 'failed')})"
        )

        for event in result.events:
            if event.status == "failed":
                typer.echo(f"  [failed] #{event.index} {event.kind}: {event.error}")
            elif event.replay is not None:
                replay = event.replay
                line = (
                    f"  [replay] #{event.index} @{replay.register}: {replay.status} "
                    f"({replay.executed}/{replay.total})"
                )
                if replay.error:
                    line += f" {replay.error}"
                typer.echo(line)

        if result.registers:
            regs = ", ".join(f"@{name}={count}" for name, count in sorted(result.registers.items()))
            typer.echo(f"レジスタ: {regs}")

        typer.echo(f"テキスト: {result.text!r} (cursor={result.cursor})")

        for err in result.expectation_errors:
            typer.echo(f"✗ {err}", err=True)

        if result.status == "failed":
            raise typer.Exit(code=1)
    except typer.Exit:
        raise
    except Exception as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# validate コマンド
# ---------------------------------------------------------------------------

@app.command()
def validate(
    script_file: Path = typer.Argument(..., help="検証するマクロスクリプト"),
) -> None:
    """マクロスクリプトのスキーマ検証を行う。"""
    from .script.parser import ScriptParser

    errors = ScriptParser().validate(script_file)

    if not errors:
        typer.echo(f"✓ {script_file}: スキーマ検証 OK")
        return

    for err in errors:
        line_info = f" (行 {err.line})" if err.line else ""
        typer.echo(f"✗ {err.location}{line_info}: {err.message}", err=True)
    raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# list-commands コマンド
# ---------------------------------------------------------------------------

@app.command("list-commands")
def list_commands() -> None:
    """InMemoryHost でマクロ拡張を有効化した状態のコマンド一覧を表示する。"""
    from .extension import activate
    from .host.memory import InMemoryHost

    host = InMemoryHost()
    activate(host, _config())

    infos = host.registry.list_all()
    width = max(len(info.name) for info in infos)
    current_category = None
    for info in sorted(infos, key=lambda i: (i.category, i.name)):
        if info.category != current_category:
            current_category = info.category
            typer.echo(f"\n[{current_category}]")
        typer.echo(f"  {info.name:<{width}}  {info.description}")
