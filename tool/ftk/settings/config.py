"""
ハーネス設定 — 環境変数からの設定読み込み

環境変数またはコマンドラインオプションでハーネスの動作を制御する。
コマンドラインオプション > 環境変数 > runsettings.yaml > デフォルト値
の優先順位で適用される。

環境変数一覧:
  FTK_SETTINGS : runsettings ファイルのパス（デフォルト: runsettings.yaml）
  FTK_HEADED   : ブラウザ表示モード（true/false、未設定時は runsettings に従う）
  FTK_BROWSER  : ブラウザエンジン（chromium/firefox/webkit、未設定時は runsettings に従う）
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from .schema import RunSettings

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# 環境変数キー定数
# ---------------------------------------------------------------------------

_ENV_SETTINGS = "FTK_SETTINGS"
_ENV_HEADED = "FTK_HEADED"
_ENV_BROWSER = "FTK_BROWSER"

_BROWSERS = ("chromium", "firefox", "webkit")


# ---------------------------------------------------------------------------
# 設定データクラス
# ---------------------------------------------------------------------------

@dataclass
class HarnessConfig:
    """ハーネスの実行時設定。

    Attributes:
        settings_path: runsettings ファイルのパス
        headed: ブラウザ表示モード。None の場合は runsettings の値を使用
        browser: ブラウザエンジン。None の場合は runsettings の値を使用
    """

    settings_path: str = "runsettings.yaml"
    headed: Optional[bool] = None
    browser: Optional[str] = None

    def apply_to(self, settings: RunSettings) -> RunSettings:
        """上書き指定を RunSettings に反映したコピーを返す。"""
        updates: dict = {}
        if self.headed is not None:
            updates["headed"] = self.headed
        if self.browser is not None:
            updates["browser"] = self.browser
        return settings.model_copy(update=updates)


# ---------------------------------------------------------------------------
# 環境変数からの読み込み
# ---------------------------------------------------------------------------

def _parse_bool(value: str) -> bool:
    """文字列を bool に変換する。

    Args:
        value: "true", "1", "yes" → True、それ以外 → False
    """
    return value.lower() in ("true", "1", "yes")


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> HarnessConfig:
    """環境変数から HarnessConfig を生成する。

    Args:
        environ: 参照する環境変数マッピング。None の場合は os.environ
    """
    env = os.environ if environ is None else environ
    config = HarnessConfig()

    if _ENV_SETTINGS in env:
        config.settings_path = env[_ENV_SETTINGS]

    if _ENV_HEADED in env:
        config.headed = _parse_bool(env[_ENV_HEADED])

    if _ENV_BROWSER in env:
        val = env[_ENV_BROWSER]
        if val in _BROWSERS:
            config.browser = val
        else:
            logger.warning("FTK_BROWSER の値が不正です: %s", val)

    logger.debug("設定を読み込みました: %s", config)
    return config


def parse_param_overrides(values: Optional[list[str]]) -> dict[str, str]:
    """NAME=VALUE 形式の指定をパラメータ辞書に変換する。

    Raises:
        ValueError: '=' を含まない、または NAME が空の場合
    """
    overrides: dict[str, str] = {}
    for item in values or []:
        name, sep, value = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise ValueError(f"パラメータの形式が不正です: '{item}'（NAME=VALUE）")
        overrides[name] = value
    return overrides
