"""
パラメータリゾルバ — テストパラメータの取得と {ENV_VAR} 展開

runsettings の parameters に定義された値を取得し、値の中の
{ENV_VAR} 形式の参照を環境変数で置換する。

主な機能:
  - ParameterResolver.get_required_parameter(): 必須パラメータの取得と展開
  - ParameterResolver.get_parameter(): 任意パラメータの取得と展開
  - EnvFileLoader: .env ファイルの一度きりの読み込み（python-dotenv）

展開ルール:
  - {NAME} の NAME は '}' 以外の任意の文字列（非貪欲マッチ）
  - 左から右へ 1 パスで置換し、置換後の値は再走査しない
  - 未定義の環境変数は UnresolvedEnvironmentVariableError

.env の読み込みは最初の解決より前に 1 回だけ行われる。
読み込みに失敗してもログを出力するだけでテストは継続する。
"""

from __future__ import annotations

import logging
import os
import re
import sys
import threading
from collections.abc import Mapping
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# プレースホルダパターン
# ---------------------------------------------------------------------------

_PLACEHOLDER_PATTERN = re.compile(r"\{(.*?)\}")
"""{ENV_VAR} 形式の参照にマッチする正規表現。"""


# ---------------------------------------------------------------------------
# カスタム例外
# ---------------------------------------------------------------------------

class ParameterError(Exception):
    """パラメータ解決で発生する例外の基底クラス。"""


class MissingParameterError(ParameterError):
    """必須パラメータが未設定、または空白のみの場合に送出される例外。

    Attributes:
        parameter_name: 参照されたパラメータ名
    """

    def __init__(self, parameter_name: str) -> None:
        self.parameter_name = parameter_name
        super().__init__(
            f"必須のテストパラメータ '{parameter_name}' が設定されていません"
        )


class UnresolvedEnvironmentVariableError(ParameterError):
    """パラメータ値が参照する環境変数が未設定の場合に送出される例外。

    Attributes:
        variable_name: 未解決の環境変数名
        parameter_name: 展開中のパラメータ名
        raw_value: 展開前のパラメータ値
    """

    def __init__(self, variable_name: str, parameter_name: str, raw_value: str) -> None:
        self.variable_name = variable_name
        self.parameter_name = parameter_name
        self.raw_value = raw_value
        super().__init__(
            f"テストパラメータ '{parameter_name}' が参照する環境変数 "
            f"'{variable_name}' が設定されていません。元の値: {raw_value}"
        )


# ---------------------------------------------------------------------------
# .env ファイルローダー
# ---------------------------------------------------------------------------

class EnvFileLoader:
    """.env ファイルを一度だけ環境変数に読み込むローダー。

    候補パスを順に探索し、最初に見つかったファイルを読み込む。
    既存の環境変数は上書きしない。loaded フラグはロックで保護され、
    複数スレッドから同時に呼ばれても読み込みは 1 回に限られる。

    候補パス:
      1. カレントディレクトリ
      2. base_dir（デフォルト: 実行スクリプトのディレクトリ）
      3. base_dir から ancestor_levels 階層上のディレクトリ
    """

    def __init__(
        self,
        base_dir: Optional[Path] = None,
        filename: str = ".env",
        ancestor_levels: int = 3,
    ) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else _default_base_dir()
        self.filename = filename
        self.ancestor_levels = ancestor_levels
        self._loaded = False
        self._loaded_path: Optional[Path] = None
        self._lock = threading.Lock()

    @property
    def loaded(self) -> bool:
        """読み込み試行が完了しているかを返す。"""
        return self._loaded

    @property
    def loaded_path(self) -> Optional[Path]:
        """実際に読み込んだ .env のパス。未検出・失敗時は None。"""
        return self._loaded_path

    def candidate_paths(self) -> list[Path]:
        """探索対象の .env パスを優先順に返す（正規化・重複除去済み）。"""
        ancestor = self.base_dir.joinpath(*([".."] * self.ancestor_levels))
        raw_paths = [
            Path.cwd() / self.filename,
            self.base_dir / self.filename,
            ancestor / self.filename,
        ]

        candidates: list[Path] = []
        for path in raw_paths:
            normalized = Path(os.path.normpath(path.absolute()))
            if normalized not in candidates:
                candidates.append(normalized)
        return candidates

    def ensure_loaded(self) -> Optional[Path]:
        """未読み込みであれば .env を読み込む。

        Returns:
            読み込んだ .env のパス。見つからない・失敗した場合は None
        """
        if self._loaded:
            return self._loaded_path

        with self._lock:
            if self._loaded:
                return self._loaded_path
            try:
                self._loaded_path = self._load()
            except Exception as exc:
                logger.warning(".env ファイルの読み込みに失敗しました: %s", exc)
            finally:
                self._loaded = True

        return self._loaded_path

    def reset(self) -> None:
        """読み込み状態を初期化する。読み込み済みの環境変数は残る。"""
        with self._lock:
            self._loaded = False
            self._loaded_path = None

    def _load(self) -> Optional[Path]:
        for path in self.candidate_paths():
            if path.is_file():
                load_dotenv(path, override=False)
                logger.info("環境変数を読み込みました: %s", path)
                return path

        logger.info(".env ファイルが見つかりません（任意）")
        return None


def _default_base_dir() -> Path:
    """実行スクリプトのディレクトリを返す。取得できない場合はカレント。"""
    script = sys.argv[0] if sys.argv else ""
    if script:
        return Path(script).resolve().parent
    return Path.cwd()


_default_loader = EnvFileLoader()


def default_env_loader() -> EnvFileLoader:
    """プロセス共有のデフォルト EnvFileLoader を返す。"""
    return _default_loader


# ---------------------------------------------------------------------------
# ParameterResolver 本体
# ---------------------------------------------------------------------------

class ParameterResolver:
    """テストパラメータを取得し、{ENV_VAR} 参照を展開するリゾルバ。

    Args:
        parameters: パラメータ名 → 生の値 の読み取り専用マッピング
        environ: 参照する環境変数マッピング。None の場合は解決時点の os.environ
        loader: .env ローダー。None の場合はプロセス共有のローダー
    """

    def __init__(
        self,
        parameters: Mapping[str, str],
        environ: Optional[Mapping[str, str]] = None,
        loader: Optional[EnvFileLoader] = None,
    ) -> None:
        self._parameters = parameters
        self._environ = environ
        self._loader = loader if loader is not None else default_env_loader()

    @property
    def parameters(self) -> Mapping[str, str]:
        return self._parameters

    def get_required_parameter(self, name: str) -> str:
        """必須パラメータを取得し、環境変数参照を展開して返す。

        Args:
            name: パラメータ名

        Returns:
            環境変数参照が展開された値

        Raises:
            MissingParameterError: パラメータが未設定または空白のみの場合
            UnresolvedEnvironmentVariableError: 参照先の環境変数が未設定の場合
        """
        self._loader.ensure_loaded()

        raw_value = self._parameters.get(name)
        if raw_value is None or not str(raw_value).strip():
            raise MissingParameterError(name)

        return self.resolve_environment_variables(str(raw_value), name)

    def get_parameter(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """任意パラメータを取得する。未設定・空白のみの場合は default を返す。"""
        try:
            return self.get_required_parameter(name)
        except MissingParameterError:
            return default

    def resolve_environment_variables(self, value: str, context_name: str) -> str:
        """文字列中の {ENV_VAR} 参照を環境変数の値で置換する。

        Args:
            value: 展開対象の文字列
            context_name: エラーメッセージ用のパラメータ名

        Raises:
            UnresolvedEnvironmentVariableError: 参照先の環境変数が未設定の場合
        """
        self._loader.ensure_loaded()

        environ = self._environ if self._environ is not None else os.environ

        def _replace(match: re.Match[str]) -> str:
            var_name = match.group(1)
            env_value = environ.get(var_name)
            if env_value is None:
                raise UnresolvedEnvironmentVariableError(var_name, context_name, value)
            return env_value

        return _PLACEHOLDER_PATTERN.sub(_replace, value)
