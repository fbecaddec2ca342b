"""
runsettings スキーマ — テスト実行設定の Pydantic モデル

runsettings.yaml の構造を定義する。

  parameters:
    webAppUrl: "{WEB_APP_URL}"
    defaultTimeout: "10000"
    screenshotContext: CI
  browser: chromium
  headed: false
  test_id_attribute: data-test-id
  screenshot_dir: Screenshot

parameters の値は文字列として扱う（数値等は文字列に変換される）。
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator


class RunSettings(BaseModel):
    """テスト実行設定のルートモデル。"""

    parameters: dict[str, str] = Field(
        default_factory=dict, description="テストパラメータ（名前 → 生の値）"
    )
    browser: Literal["chromium", "firefox", "webkit"] = Field(
        default="chromium", description="使用するブラウザエンジン"
    )
    headed: bool = Field(default=False, description="ブラウザウィンドウを表示するか")
    test_id_attribute: str = Field(
        default="data-test-id", description="get_by_test_id() が参照する属性名"
    )
    screenshot_dir: str = Field(
        default="Screenshot", description="スクリーンショット保存先ディレクトリ"
    )

    @field_validator("parameters", mode="before")
    @classmethod
    def _stringify_parameters(cls, value: Any) -> Any:
        """YAML で数値・真偽値として読まれた値を文字列に変換する。"""
        if value is None:
            return {}
        if not isinstance(value, dict):
            return value
        converted: dict[str, str] = {}
        for key, raw in value.items():
            if raw is None:
                converted[str(key)] = ""
            elif isinstance(raw, bool):
                converted[str(key)] = "true" if raw else "false"
            else:
                converted[str(key)] = str(raw)
        return converted
