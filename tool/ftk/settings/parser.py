"""
runsettings パーサー — runsettings.yaml の読み込み・書き出し

ruamel.yaml で YAML を読み込み、Pydantic の RunSettings モデルに変換する。
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
from ruamel.yaml import YAML
from ruamel.yaml.error import YAMLError

from .schema import RunSettings


class SettingsParser:
    """runsettings.yaml の読み込み・書き出しを担当するパーサー。"""

    def __init__(self) -> None:
        self._yaml = YAML()
        self._yaml.preserve_quotes = True
        self._yaml.default_flow_style = False

    def load(self, path: Path) -> RunSettings:
        """YAML ファイルを読み込み、RunSettings に変換する。

        空のファイルはデフォルト設定として扱う。

        Raises:
            FileNotFoundError: ファイルが存在しない場合
            ValueError: YAML 構文エラーまたはスキーマ検証エラーの場合
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"設定ファイルが見つかりません: {path}")

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = self._yaml.load(f)
        except YAMLError as e:
            line_info = ""
            if getattr(e, "problem_mark", None) is not None:
                mark = e.problem_mark
                line_info = f" (行 {mark.line + 1}, 列 {mark.column + 1})"
            raise ValueError(f"YAML 構文エラー{line_info}: {e}") from e

        if data is None:
            return RunSettings()

        return self.from_dict(_to_plain(data))

    def from_dict(self, data: Any) -> RunSettings:
        """辞書から RunSettings を生成する。

        Raises:
            ValueError: スキーマ検証エラーの場合
        """
        if not isinstance(data, dict):
            raise ValueError("設定ファイルのルートはマッピングである必要があります")
        try:
            return RunSettings(**data)
        except PydanticValidationError as e:
            raise ValueError(f"スキーマ検証エラー: {e}") from e

    def dump(self, settings: RunSettings, path: Path) -> None:
        """RunSettings を YAML ファイルに書き出す。"""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            self._yaml.dump(settings.model_dump(mode="python"), f)


def _to_plain(obj: Any) -> Any:
    """ruamel.yaml の CommentedMap / CommentedSeq を通常の dict / list に変換する。"""
    if isinstance(obj, dict):
        return {str(k): _to_plain(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_to_plain(v) for v in obj]
    if isinstance(obj, str):
        return str(obj)
    return obj
