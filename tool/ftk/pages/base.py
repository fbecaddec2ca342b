"""
PageObjectModel — ページオブジェクトの基底クラス

画面をまたいで共通に使う操作を提供する。各画面のページオブジェクトは
このクラスを継承して作成する。

主な機能:
  - get_page_title(): ページタイトルの取得
  - launch_site(): サイトルート（baseURL の "/"）への遷移
  - is_available(): コントロールが操作可能か（visible かつ enabled）
  - wait_for_enabled(): コントロールが有効化されるまで待機
  - wait_for_api(): 操作を実行し、パターンに一致する API レスポンスを待機
  - save_screenshot(): スクリーンショットの保存
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Union

from ..core import waits

if TYPE_CHECKING:
    from playwright.async_api import Locator, Page, Response

    from ..core.artifacts import ScreenshotRecorder

logger = logging.getLogger(__name__)


class PageObjectModel:
    """ページオブジェクトの基底クラス。

    Attributes:
        page: Playwright の Page オブジェクト
        screenshots: スクリーンショット保存先。None の場合 save_screenshot() は使用不可
    """

    def __init__(self, page: Page, screenshots: Optional[ScreenshotRecorder] = None) -> None:
        self.page = page
        self.screenshots = screenshots

    async def get_page_title(self) -> str:
        """ブラウザからページタイトルを取得する。"""
        return await self.page.title()

    async def launch_site(self) -> Optional[Response]:
        """サイトルートに遷移する。"""
        return await self.page.goto("/")

    async def is_available(self, locator: Locator) -> bool:
        """コントロールが操作可能（visible かつ enabled）かを返す。"""
        return await waits.is_available(locator)

    async def wait_for_enabled(
        self, locator: Locator, timeout: float = waits.DEFAULT_TIMEOUT_MS
    ) -> None:
        """コントロールが有効化されるまで待機する。

        Raises:
            TimeoutError: タイムアウト時間内に有効化されなかった場合
        """
        await waits.wait_for_enabled(locator, timeout)

    async def wait_for_api(
        self,
        action: Callable[[], Awaitable[object]],
        pattern: Union[str, re.Pattern[str]],
    ) -> Response:
        """操作を実行し、パターンに一致する API レスポンスを待機する。

        Args:
            action: API 呼び出しを発生させる非同期操作
            pattern: レスポンス URL のパターン（glob 文字列または正規表現）

        Returns:
            一致したレスポンス
        """
        async with self.page.expect_response(pattern) as response_info:
            await action()
        response = await response_info.value
        logger.info("API リクエスト: %s", response.url)
        return response

    async def save_screenshot(
        self, moment: Optional[str] = None, full_page: bool = True
    ) -> Path:
        """現在のページのスクリーンショットを保存する。

        Raises:
            RuntimeError: screenshots が設定されていない場合
        """
        if self.screenshots is None:
            raise RuntimeError(
                "screenshots が未設定です。ScreenshotRecorder を渡してください。"
            )
        return await self.screenshots.save(self.page, moment=moment, full_page=full_page)
