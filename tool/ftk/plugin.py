"""
pytest プラグイン — 機能テストの共通フィクスチャ

pytest11 エントリポイントとして登録され、以下を提供する。

コマンドラインオプション:
  --ftk-settings PATH : runsettings ファイル（デフォルト: FTK_SETTINGS または runsettings.yaml）
  --param NAME=VALUE  : パラメータの上書き（複数指定可）
  --ftk-headed        : ブラウザウィンドウを表示

フィクスチャ:
  - run_settings (session): 上書き適用済みの RunSettings
  - parameter_resolver (session): .env 読み込み付きの ParameterResolver
  - context_options (session): browser.new_context() のオプション
  - default_timeout (session): defaultTimeout パラメータ（ミリ秒）
  - object_store (function): テストごとの ObjectStore
  - screenshots (function): テストごとの ScreenshotRecorder
  - browser_session / page (function): 起動済みのブラウザセッションと Page
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, AsyncIterator, Iterator, Optional

import pytest
import pytest_asyncio

from .core.artifacts import ScreenshotRecorder
from .core.object_store import ObjectStore
from .core.parameters import EnvFileLoader, ParameterResolver
from .session import BrowserSession
from .settings import RunSettings, load_config_from_env, load_run_settings, parse_param_overrides

logger = logging.getLogger(__name__)

VIEWPORT = {"width": 1280, "height": 720}


# ---------------------------------------------------------------------------
# コマンドラインオプション
# ---------------------------------------------------------------------------

def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("ftk", "functional test kit")
    group.addoption(
        "--ftk-settings", dest="ftk_settings", default=None,
        help="runsettings file (default: $FTK_SETTINGS or runsettings.yaml)",
    )
    group.addoption(
        "--param", dest="ftk_params", action="append", default=[],
        metavar="NAME=VALUE", help="override a test parameter (repeatable)",
    )
    group.addoption(
        "--ftk-headed", dest="ftk_headed", action="store_true", default=False,
        help="run the browser in headed mode",
    )


# ---------------------------------------------------------------------------
# ヘルパー
# ---------------------------------------------------------------------------

def build_context_options(resolver: ParameterResolver) -> dict[str, Any]:
    """BrowserContext の生成オプションを組み立てる。

    baseURL は webAppUrl パラメータから解決する（必須）。
    """
    return {
        "accept_downloads": True,
        "viewport": dict(VIEWPORT),
        "base_url": resolver.get_required_parameter("webAppUrl"),
    }


def parse_default_timeout(resolver: ParameterResolver) -> Optional[int]:
    """defaultTimeout パラメータを整数（ミリ秒）として返す。

    未設定または整数として解釈できない場合は None。
    """
    raw = resolver.parameters.get("defaultTimeout")
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning("defaultTimeout の値が整数ではないため無視します: %s", raw)
        return None


def _resolve_settings_path(config: pytest.Config, path: str) -> Path:
    """相対パスをカレント → rootdir の順に解決する。"""
    candidate = Path(path)
    if candidate.is_absolute() or candidate.exists():
        return candidate
    return config.rootpath / candidate


def _test_class_name(request: pytest.FixtureRequest) -> str:
    """テストクラス名を返す。クラスに属さない場合はモジュール名。"""
    if request.cls is not None:
        return request.cls.__name__
    return request.node.module.__name__ if request.node.module else ""


# ---------------------------------------------------------------------------
# フィクスチャ
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def run_settings(pytestconfig: pytest.Config) -> RunSettings:
    """上書きを適用した RunSettings を提供する。"""
    harness = load_config_from_env()
    explicit = pytestconfig.getoption("ftk_settings")
    path = explicit or harness.settings_path

    try:
        overrides = parse_param_overrides(pytestconfig.getoption("ftk_params"))
        settings = load_run_settings(
            _resolve_settings_path(pytestconfig, path), overrides, required=explicit is not None,
        )
    except (ValueError, FileNotFoundError) as exc:
        raise pytest.UsageError(str(exc)) from exc

    if pytestconfig.getoption("ftk_headed"):
        harness.headed = True
    return harness.apply_to(settings)


@pytest.fixture(scope="session")
def parameter_resolver(pytestconfig: pytest.Config, run_settings: RunSettings) -> ParameterResolver:
    """テストセッション共通の ParameterResolver を提供する。"""
    loader = EnvFileLoader(base_dir=pytestconfig.rootpath)
    return ParameterResolver(run_settings.parameters, loader=loader)


@pytest.fixture(scope="session")
def context_options(parameter_resolver: ParameterResolver) -> dict[str, Any]:
    return build_context_options(parameter_resolver)


@pytest.fixture(scope="session")
def default_timeout(parameter_resolver: ParameterResolver) -> Optional[int]:
    return parse_default_timeout(parameter_resolver)


@pytest.fixture
def object_store() -> ObjectStore:
    """テストごとに空の ObjectStore を提供する。"""
    return ObjectStore()


@pytest.fixture
def screenshots(
    request: pytest.FixtureRequest,
    run_settings: RunSettings,
    parameter_resolver: ParameterResolver,
) -> Iterator[ScreenshotRecorder]:
    """テストごとの ScreenshotRecorder を提供する。

    保存したスクリーンショットはテスト終了時に user_properties に添付される。
    """
    recorder = ScreenshotRecorder(
        context_name=parameter_resolver.get_parameter("screenshotContext") or "Local",
        test_class=_test_class_name(request),
        test_name=request.node.name,
        base_dir=Path(run_settings.screenshot_dir),
    )
    yield recorder
    for path in recorder.attachments:
        request.node.user_properties.append(("attachment", str(path)))


@pytest_asyncio.fixture
async def browser_session(
    run_settings: RunSettings,
    context_options: dict[str, Any],
    default_timeout: Optional[int],
) -> AsyncIterator[BrowserSession]:
    """起動済みの BrowserSession を提供し、テスト終了時に閉じる。"""
    session = BrowserSession()
    await session.launch(
        browser_name=run_settings.browser,
        headed=run_settings.headed,
        context_options=context_options,
        test_id_attribute=run_settings.test_id_attribute,
        default_timeout=default_timeout,
    )
    try:
        yield session
    finally:
        await session.close()


@pytest.fixture
def page(browser_session: BrowserSession):
    """起動済みセッションの Page を提供する。"""
    return browser_session.page
