"""
待機戦略 — Playwright auto-wait の補助

Playwright の auto-wait だけでは不十分なケースの待機戦略を提供する。

主な機能:
  - wait_for_enabled: 要素が有効化（enabled）されるまでのポーリング待機
  - is_available: 要素が操作可能（visible かつ enabled）かの判定

クライアント側のハイドレーション完了待ちなど、要素が表示された後も
しばらく disabled のままになるケースで使用する。
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from playwright.async_api import Locator

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_POLL_INTERVAL_MS = 50


# ---------------------------------------------------------------------------
# 有効化待機
# ---------------------------------------------------------------------------

async def wait_for_enabled(
    locator: Locator,
    timeout: float = DEFAULT_TIMEOUT_MS,
    *,
    poll_interval: float = DEFAULT_POLL_INTERVAL_MS,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
) -> None:
    """要素が有効化されるまで待機する。

    まず要素の attached → visible を Playwright の wait_for() で待ち、
    その後 poll_interval ごとに locator.is_enabled() を確認する。
    wait_for() のタイムアウトは Playwright の例外としてそのまま伝播する。

    Args:
        locator: 待機対象の Locator
        timeout: タイムアウト（ミリ秒、デフォルト: 5000）
        poll_interval: ポーリング間隔（ミリ秒、デフォルト: 50）
        clock: 秒単位の単調時計（テスト用に差し替え可能）
        sleep: 秒単位の非同期スリープ（テスト用に差し替え可能）

    Raises:
        TimeoutError: タイムアウト時間内に要素が有効化されなかった場合
    """
    await locator.wait_for(state="attached", timeout=timeout)
    await locator.wait_for(state="visible", timeout=timeout)

    start = clock()
    deadline = start + timeout / 1000.0

    while clock() < deadline:
        if await locator.is_enabled():
            logger.debug(
                "要素が有効化されました（%.0fms 経過）", (clock() - start) * 1000
            )
            return
        await sleep(poll_interval / 1000.0)

    raise TimeoutError(f"要素が {timeout}ms 以内に有効化されませんでした")


# ---------------------------------------------------------------------------
# 操作可能判定
# ---------------------------------------------------------------------------

async def is_available(locator: Locator) -> bool:
    """要素が操作可能（visible かつ enabled）かを返す。

    非表示なのか disabled なのかを区別せずに判定できるため、
    権限によってコントロールが隠される / 無効化される画面で使用する。
    """
    if not await locator.is_visible():
        return False
    return await locator.is_enabled()
