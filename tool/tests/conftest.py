"""
テスト共通フィクスチャ・runsettings サンプル

全テストモジュールで共有するフィクスチャを提供する。
.env の探索がリポジトリ直下の実ファイルを拾わないよう、
パラメータ関連のテストは tmp_path をカレントにして実行する。
"""

from pathlib import Path

import pytest

from ftk.core.parameters import EnvFileLoader


# ---------------------------------------------------------------------------
# pytest フィクスチャ
# ---------------------------------------------------------------------------

@pytest.fixture
def isolated_cwd(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """tmp_path をカレントディレクトリにする。"""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def build_dir(isolated_cwd: Path) -> Path:
    """ビルド出力を模したネストしたディレクトリ（project/bin/Debug/net）を返す。"""
    path = isolated_cwd / "project" / "bin" / "Debug" / "net"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def loader(build_dir: Path) -> EnvFileLoader:
    """build_dir を基点とする EnvFileLoader を提供する。"""
    return EnvFileLoader(base_dir=build_dir)


@pytest.fixture
def sample_settings_yaml() -> str:
    """サンプルの runsettings.yaml 文字列。"""
    return """\
parameters:
  webAppUrl: "{WEB_APP_URL}"
  defaultTimeout: 10000
  screenshotContext: CI
  apiKey: "key-{API_KEY}"
browser: firefox
headed: true
"""
