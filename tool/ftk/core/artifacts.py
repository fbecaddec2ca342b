"""
ScreenshotRecorder — テスト中のスクリーンショット保存

ページのスクリーンショットを以下の構造で保存する:

  <base_dir>/<context>/<test_class>/<test_name>[-<moment>].png

  - context: 実行環境名（screenshotContext パラメータ、デフォルト: Local）
  - test_class: テストクラス名（モジュール名で代用される場合あり）
  - test_name: テスト名（ファイル名に使えない文字は '_' に置換）
  - moment: 任意の撮影タイミング識別子（'/' は '-' に置換）

保存したファイルは attachments に記録され、pytest プラグインが
テスト結果の user_properties に添付する。
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from playwright.async_api import Page

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# ファイル名サニタイズ用パターン
# ---------------------------------------------------------------------------

_INVALID_CHARS = re.escape('<>:"/\\|?*' + "".join(chr(i) for i in range(32)))
_INVALID_FILENAME = re.compile(rf"([{_INVALID_CHARS}]*\.+$)|([{_INVALID_CHARS}]+)")
"""ファイル名に使用できない文字の連続、または末尾のドットを検出する正規表現。"""


# ---------------------------------------------------------------------------
# ScreenshotRecorder 本体
# ---------------------------------------------------------------------------

@dataclass
class ScreenshotRecorder:
    """テスト単位のスクリーンショット保存を担当するクラス。

    Attributes:
        context_name: 実行環境名（保存先ディレクトリの第 1 階層）
        test_class: テストクラス名
        test_name: テスト名
        base_dir: 保存先ベースディレクトリ（デフォルト: Screenshot/）
        attachments: 保存済みファイルのパス
    """

    context_name: str = "Local"
    test_class: str = ""
    test_name: str = ""
    base_dir: Path = field(default_factory=lambda: Path("Screenshot"))
    attachments: list[Path] = field(default_factory=list, init=False)

    def build_path(self, moment: Optional[str] = None) -> Path:
        """スクリーンショットの保存先パスを生成する。

        Args:
            moment: 撮影タイミングの識別子。空の場合はサフィックスなし
        """
        test_class = self.test_class.split(".")[-1]
        test_name = make_valid_file_name(self.test_name)
        suffix = f"-{moment.replace('/', '-')}" if moment else ""
        return self.base_dir / self.context_name / test_class / f"{test_name}{suffix}.png"

    async def save(
        self,
        page: Page,
        moment: Optional[str] = None,
        full_page: bool = True,
    ) -> Path:
        """現在のページのスクリーンショットを保存する。

        Args:
            page: Playwright の Page オブジェクト
            moment: 撮影タイミングの識別子
            full_page: True でページ全体、False でビューポートのみ

        Returns:
            保存されたスクリーンショットのパス
        """
        path = self.build_path(moment)
        path.parent.mkdir(parents=True, exist_ok=True)

        await page.screenshot(path=str(path), omit_background=True, full_page=full_page)
        self.attachments.append(path)
        logger.info("スクリーンショットを保存しました: %s", path)
        return path


def make_valid_file_name(name: str) -> str:
    """ファイル名に使用できない文字を '_' に置換する。

    使用できない文字の連続は 1 文字の '_' にまとめ、末尾のドットも置換する。
    """
    return _INVALID_FILENAME.sub("_", name)
