"""
hxmacro CLI エントリポイント

python -m hxmacro で CLI を起動する。

使用例:
  python -m hxmacro run scripts/duplicate_greeting.yaml
  python -m hxmacro --log-level DEBUG run scripts/duplicate_greeting.yaml
  python -m hxmacro list-commands
"""

from __future__ import annotations

from .cli import app

app(prog_name="hxmacro")
