"""
runsettings モジュール

テスト実行設定のスキーマ、YAML パーサー、環境変数からのハーネス設定を提供する。
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from .config import HarnessConfig, load_config_from_env, parse_param_overrides
from .parser import SettingsParser
from .schema import RunSettings

__all__ = [
    "HarnessConfig",
    "RunSettings",
    "SettingsParser",
    "load_config_from_env",
    "load_run_settings",
    "parse_param_overrides",
]


def load_run_settings(
    path: Optional[Path],
    overrides: Optional[dict[str, str]] = None,
    required: bool = False,
) -> RunSettings:
    """runsettings を読み込み、パラメータの上書きを適用する。

    path が None またはファイルが存在しない場合はデフォルト設定から始める。
    required=True の場合、ファイルが存在しなければ FileNotFoundError。
    """
    if required and (path is None or not Path(path).exists()):
        raise FileNotFoundError(f"設定ファイルが見つかりません: {path}")

    if path is not None and Path(path).exists():
        settings = SettingsParser().load(Path(path))
    else:
        settings = RunSettings()

    if overrides:
        parameters = {**settings.parameters, **overrides}
        settings = settings.model_copy(update={"parameters": parameters})
    return settings
