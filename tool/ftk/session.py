"""
Session — ブラウザセッション管理

Playwright ブラウザの起動・終了・状態管理を担当する。
pytest プラグインがテストごとに 1 セッションを生成する。

主な機能:
  - ブラウザの起動（chromium / firefox / webkit、headed/headless 切り替え）
  - test id 属性（data-test-id）の設定
  - Context / Page の生成とデフォルトタイムアウトの適用
  - リソースの安全なクリーンアップ
"""

from __future__ import annotations

import enum
import logging
from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# セッション状態
# ---------------------------------------------------------------------------

class SessionState(enum.Enum):
    """ブラウザセッションの状態。"""

    IDLE = "idle"
    LAUNCHING = "launching"
    ACTIVE = "active"
    CLOSING = "closing"
    CLOSED = "closed"


# ---------------------------------------------------------------------------
# BrowserSession 本体
# ---------------------------------------------------------------------------

class BrowserSession:
    """Playwright ブラウザセッションの管理クラス。

    ブラウザの起動から終了までのライフサイクルを管理し、
    BrowserContext / Page へのアクセスを提供する。
    """

    def __init__(self) -> None:
        self._state: SessionState = SessionState.IDLE
        self._pw_instance: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._context: Optional[BrowserContext] = None
        self._page: Optional[Page] = None

    @property
    def state(self) -> SessionState:
        """現在のセッション状態を返す。"""
        return self._state

    @property
    def is_active(self) -> bool:
        """セッションがアクティブかどうかを返す。"""
        return self._state == SessionState.ACTIVE

    @property
    def context(self) -> Optional[BrowserContext]:
        """現在の BrowserContext を返す。非アクティブ時は None。"""
        if not self.is_active:
            return None
        return self._context

    @property
    def page(self) -> Optional[Page]:
        """現在の Page オブジェクトを返す。非アクティブ時は None。"""
        if not self.is_active:
            return None
        return self._page

    async def launch(
        self,
        browser_name: str = "chromium",
        headed: bool = False,
        context_options: Optional[dict[str, Any]] = None,
        test_id_attribute: str = "data-test-id",
        default_timeout: Optional[float] = None,
    ) -> Page:
        """ブラウザを起動し、Page を生成する。

        Args:
            browser_name: ブラウザエンジン名（chromium / firefox / webkit）
            headed: True でブラウザウィンドウを表示
            context_options: browser.new_context() に渡すオプション
            test_id_attribute: get_by_test_id() が参照する属性名
            default_timeout: Context のデフォルトタイムアウト（ミリ秒）。None で変更しない

        Returns:
            生成された Page

        Raises:
            RuntimeError: 既にアクティブなセッションがある場合
        """
        if self._state == SessionState.ACTIVE:
            raise RuntimeError(
                "既にアクティブなセッションがあります。"
                "先に close() を呼んでください。"
            )

        self._state = SessionState.LAUNCHING
        logger.info("ブラウザを起動しています... (%s, headed=%s)", browser_name, headed)

        try:
            from playwright.async_api import async_playwright

            pw = await async_playwright().start()
            self._pw_instance = pw

            pw.selectors.set_test_id_attribute(test_id_attribute)

            browser_type = getattr(pw, browser_name)
            self._browser = await browser_type.launch(headless=not headed)
            self._context = await self._browser.new_context(**(context_options or {}))

            if default_timeout is not None:
                self._context.set_default_timeout(default_timeout)
                logger.debug("デフォルトタイムアウトを設定しました: %sms", default_timeout)

            self._page = await self._context.new_page()
            self._state = SessionState.ACTIVE
            logger.info("ブラウザを起動しました")
            return self._page

        except Exception:
            self._state = SessionState.IDLE
            logger.exception("ブラウザの起動に失敗しました")
            await self._release()
            raise

    async def close(self) -> None:
        """ブラウザを終了し、リソースをクリーンアップする。"""
        if self._state in (SessionState.CLOSED, SessionState.CLOSING, SessionState.IDLE):
            return

        self._state = SessionState.CLOSING
        logger.info("ブラウザを終了しています...")
        await self._release()
        self._state = SessionState.CLOSED
        logger.info("ブラウザを終了しました")

    async def _release(self) -> None:
        try:
            if self._context is not None:
                await self._context.close()
            if self._browser is not None:
                await self._browser.close()
            if self._pw_instance is not None:
                await self._pw_instance.stop()
        except Exception:
            logger.exception("ブラウザの終了中にエラーが発生しました")
        finally:
            self._browser = None
            self._context = None
            self._page = None
            self._pw_instance = None
