"""
PageObjectModel のユニットテスト

Playwright の Page / Locator / Response はモックを使用する。
"""

from __future__ import annotations

import re
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from ftk.core.artifacts import ScreenshotRecorder
from ftk.pages.base import PageObjectModel


class LoginPage(PageObjectModel):
    """テスト用のページオブジェクト。"""

    @property
    def submit_button(self):
        return self.page.get_by_test_id("login-submit")


# ---------------------------------------------------------------------------
# ヘルパー: モックオブジェクト生成
# ---------------------------------------------------------------------------

def _make_mock_page() -> MagicMock:
    """モック Page を生成する。"""
    page = AsyncMock()
    page.title = AsyncMock(return_value="Sign in")
    page.goto = AsyncMock(return_value=MagicMock(status=200))
    page.get_by_test_id = MagicMock()
    return page


class _ResponseInfo:
    """expect_response() のコンテキストが返す EventInfo 相当。"""

    def __init__(self, response) -> None:
        self._response = response

    @property
    def value(self):
        async def _value():
            return self._response
        return _value()


class _ExpectResponse:
    """page.expect_response() の非同期コンテキストマネージャ相当。"""

    def __init__(self, response, events: list[str]) -> None:
        self._info = _ResponseInfo(response)
        self._events = events

    async def __aenter__(self):
        self._events.append("enter")
        return self._info

    async def __aexit__(self, *exc):
        self._events.append("exit")
        return False


# ===========================================================================
# テスト: ナビゲーション
# ===========================================================================

class TestNavigation:
    """タイトル取得・サイト起動のテスト。"""

    async def test_get_page_title(self) -> None:
        page = _make_mock_page()
        assert await LoginPage(page).get_page_title() == "Sign in"

    async def test_launch_site_goes_to_root(self) -> None:
        """サイトルート "/" に遷移し、レスポンスを返すこと。"""
        page = _make_mock_page()

        response = await LoginPage(page).launch_site()

        page.goto.assert_awaited_once_with("/")
        assert response.status == 200


# ===========================================================================
# テスト: 待機・判定
# ===========================================================================

class TestControls:
    """is_available / wait_for_enabled の委譲テスト。"""

    async def test_is_available_delegates(self) -> None:
        page = _make_mock_page()
        locator = AsyncMock()
        locator.is_visible = AsyncMock(return_value=True)
        locator.is_enabled = AsyncMock(return_value=False)

        assert await LoginPage(page).is_available(locator) is False

    async def test_wait_for_enabled_delegates(self) -> None:
        """waits.wait_for_enabled にタイムアウト付きで委譲すること。"""
        page = _make_mock_page()
        locator = AsyncMock()

        with patch("ftk.pages.base.waits.wait_for_enabled", new=AsyncMock()) as waiter:
            await LoginPage(page).wait_for_enabled(locator, timeout=1500)

        waiter.assert_awaited_once_with(locator, 1500)

    async def test_wait_for_enabled_default_timeout(self) -> None:
        page = _make_mock_page()
        locator = AsyncMock()

        with patch("ftk.pages.base.waits.wait_for_enabled", new=AsyncMock()) as waiter:
            await LoginPage(page).wait_for_enabled(locator)

        waiter.assert_awaited_once_with(locator, 5000)


# ===========================================================================
# テスト: wait_for_api
# ===========================================================================

class TestWaitForApi:
    """wait_for_api のテスト。"""

    async def test_action_runs_inside_expectation(self) -> None:
        """操作がレスポンス待機の内側で実行され、レスポンスが返ること。"""
        events: list[str] = []
        response = MagicMock(url="https://app/api/login")
        page = _make_mock_page()
        page.expect_response = MagicMock(return_value=_ExpectResponse(response, events))
        pattern = re.compile(r"/api/login")

        async def action():
            events.append("action")

        result = await LoginPage(page).wait_for_api(action, pattern)

        assert result is response
        assert events == ["enter", "action", "exit"]
        page.expect_response.assert_called_once_with(pattern)

    async def test_action_error_propagates(self) -> None:
        """操作の例外はそのまま伝播すること。"""
        page = _make_mock_page()
        page.expect_response = MagicMock(return_value=_ExpectResponse(MagicMock(), []))

        async def action():
            raise RuntimeError("click failed")

        with pytest.raises(RuntimeError, match="click failed"):
            await LoginPage(page).wait_for_api(action, "**/api/**")


# ===========================================================================
# テスト: save_screenshot
# ===========================================================================

class TestSaveScreenshot:
    """save_screenshot のテスト。"""

    async def test_delegates_to_recorder(self, tmp_path: Path) -> None:
        page = _make_mock_page()
        recorder = ScreenshotRecorder(test_class="TestLogin", test_name="t", base_dir=tmp_path)

        path = await LoginPage(page, screenshots=recorder).save_screenshot("done", full_page=False)

        assert path == tmp_path / "Local" / "TestLogin" / "t-done.png"
        page.screenshot.assert_awaited_once_with(
            path=str(path), omit_background=True, full_page=False
        )

    async def test_without_recorder_raises(self) -> None:
        """ScreenshotRecorder 未設定時は RuntimeError が発生すること。"""
        with pytest.raises(RuntimeError):
            await LoginPage(_make_mock_page()).save_screenshot()
