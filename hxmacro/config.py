"""
設定 — 設定ファイル・環境変数からの設定読み込み

マクロエンジンとホストアダプタの動作を設定ファイルまたは環境変数で制御する。
CLI 引数 > 環境変数 > 設定ファイル > デフォルト値 の優先順位で適用される。

環境変数一覧:
  HXMACRO_STATUS_MS      : ステータスメッセージ表示時間（ミリ秒, デフォルト: 2000）
  HXMACRO_CONTEXT_KEY    : 記録中フラグのコンテキストキー（デフォルト: hxmacro.isRecording）
  HXMACRO_COMMAND_PREFIX : 登録コマンドの接頭辞（デフォルト: hxmacro）
  HXMACRO_INSERT_COMMAND : 再生時のテキスト挿入コマンド（デフォルト: default:type）
  HXMACRO_LOG_LEVEL      : ログレベル（デフォルト: WARNING）
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Optional

from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .errors import HxMacroError
from .host.base import NATIVE_TYPE_COMMAND

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 環境変数キー定数
# ---------------------------------------------------------------------------

_ENV_STATUS_MS = "HXMACRO_STATUS_MS"
_ENV_CONTEXT_KEY = "HXMACRO_CONTEXT_KEY"
_ENV_COMMAND_PREFIX = "HXMACRO_COMMAND_PREFIX"
_ENV_INSERT_COMMAND = "HXMACRO_INSERT_COMMAND"
_ENV_LOG_LEVEL = "HXMACRO_LOG_LEVEL"

DEFAULT_CONFIG_FILE = "hxmacro.yaml"

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


# ---------------------------------------------------------------------------
# 設定データクラス
# ---------------------------------------------------------------------------

@dataclass
class MacroConfig:
    """マクロエンジンの実行時設定。

    Attributes:
        status_message_ms: ステータスメッセージの表示時間（ミリ秒）
        context_key: 記録中フラグを伝えるコンテキストキー
        command_prefix: ホストに登録するコマンド名の接頭辞
        literal_insert_command: 再生時に使うネイティブのテキスト挿入コマンド
        log_level: ログレベル名
    """

    status_message_ms: int = 2000
    context_key: str = "hxmacro.isRecording"
    command_prefix: str = "hxmacro"
    literal_insert_command: str = NATIVE_TYPE_COMMAND
    log_level: str = "WARNING"

    def command_id(self, name: str) -> str:
        """接頭辞付きのコマンド名を返す。"""
        return f"{self.command_prefix}.{name}"


# ---------------------------------------------------------------------------
# 設定ファイルからの読み込み
# ---------------------------------------------------------------------------

def load_config_file(path: Path, config: Optional[MacroConfig] = None) -> MacroConfig:
    """YAML 設定ファイルの値を MacroConfig に適用する。

    未知のキーは警告を出して無視する。

    Args:
        path: 設定ファイルのパス
        config: ベースとなる設定（None でデフォルト値）

    Returns:
        設定ファイルが適用された設定

    Raises:
        HxMacroError: ファイルが存在しない、または YAML として不正な場合
    """
    config = config or MacroConfig()
    path = Path(path)

    if not path.exists():
        raise HxMacroError(f"設定ファイルが見つかりません: {path}")

    yaml = YAML(typ="safe")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.load(f)
    except YAMLError as e:
        raise HxMacroError(f"設定ファイルの YAML 構文エラー: {e}") from e

    if data is None:
        return config
    if not isinstance(data, dict):
        raise HxMacroError(f"設定ファイルの形式が不正です（マッピングが必要）: {path}")

    known = {f.name for f in fields(MacroConfig)}
    for key, value in data.items():
        if key not in known:
            logger.warning("未知の設定キーを無視します: %s", key)
            continue
        if value is None:
            logger.warning("設定キー %s の値が空のため無視します", key)
            continue
        if key == "status_message_ms":
            try:
                value = int(value)
            except (TypeError, ValueError):
                logger.warning("status_message_ms の値が不正です: %s", value)
                continue
        else:
            value = str(value)
        setattr(config, key, value)

    logger.info("設定ファイルを読み込みました: %s", path)
    return config


# ---------------------------------------------------------------------------
# 環境変数からの読み込み
# ---------------------------------------------------------------------------

def load_config_from_env(config: Optional[MacroConfig] = None) -> MacroConfig:
    """環境変数から MacroConfig を生成する。

    設定されていない環境変数はベース設定の値を使用する。

    Args:
        config: ベースとなる設定（None でデフォルト値）

    Returns:
        環境変数を適用した設定
    """
    config = config or MacroConfig()

    if _ENV_STATUS_MS in os.environ:
        try:
            config.status_message_ms = int(os.environ[_ENV_STATUS_MS])
        except ValueError:
            logger.warning("HXMACRO_STATUS_MS の値が不正です: %s", os.environ[_ENV_STATUS_MS])

    if _ENV_CONTEXT_KEY in os.environ:
        config.context_key = os.environ[_ENV_CONTEXT_KEY]

    if _ENV_COMMAND_PREFIX in os.environ:
        config.command_prefix = os.environ[_ENV_COMMAND_PREFIX]

    if _ENV_INSERT_COMMAND in os.environ:
        config.literal_insert_command = os.environ[_ENV_INSERT_COMMAND]

    if _ENV_LOG_LEVEL in os.environ:
        val = os.environ[_ENV_LOG_LEVEL].upper()
        if val in _LOG_LEVELS:
            config.log_level = val
        else:
            logger.warning("HXMACRO_LOG_LEVEL の値が不正です: %s", os.environ[_ENV_LOG_LEVEL])

    logger.debug("設定を読み込みました: %s", config)
    return config


def load_config(config_file: Optional[Path] = None) -> MacroConfig:
    """設定ファイル → 環境変数の順で設定を構築する。

    config_file が None の場合、カレントディレクトリの hxmacro.yaml が
    存在すればそれを読み込む。

    Args:
        config_file: 設定ファイルのパス

    Returns:
        構築された設定
    """
    config = MacroConfig()

    if config_file is None and Path(DEFAULT_CONFIG_FILE).exists():
        config_file = Path(DEFAULT_CONFIG_FILE)
    if config_file is not None:
        config = load_config_file(config_file, config)

    return load_config_from_env(config)
