"""
SettingsParser / load_run_settings のユニットテスト

テスト対象:
  - load(): YAML → RunSettings 変換、値の文字列化、空ファイル、エラー報告
  - dump(): RunSettings → YAML 書き出し
  - load_run_settings(): ファイル不在時のデフォルト、パラメータ上書き
"""

from __future__ import annotations

from pathlib import Path

import pytest

from ftk.settings import RunSettings, SettingsParser, load_run_settings


@pytest.fixture
def parser() -> SettingsParser:
    return SettingsParser()


@pytest.fixture
def settings_file(tmp_path: Path, sample_settings_yaml: str) -> Path:
    path = tmp_path / "runsettings.yaml"
    path.write_text(sample_settings_yaml, encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# load() テスト
# ---------------------------------------------------------------------------

class TestLoad:
    """YAML 読み込みのテスト。"""

    def test_parameters_loaded(self, parser: SettingsParser, settings_file: Path):
        settings = parser.load(settings_file)
        assert settings.parameters["webAppUrl"] == "{WEB_APP_URL}"
        assert settings.parameters["apiKey"] == "key-{API_KEY}"

    def test_non_string_values_stringified(self, parser: SettingsParser, settings_file: Path):
        """数値として読まれたパラメータが文字列になること。"""
        settings = parser.load(settings_file)
        assert settings.parameters["defaultTimeout"] == "10000"

    def test_top_level_fields(self, parser: SettingsParser, settings_file: Path):
        settings = parser.load(settings_file)
        assert settings.browser == "firefox"
        assert settings.headed is True
        assert settings.test_id_attribute == "data-test-id"
        assert settings.screenshot_dir == "Screenshot"

    def test_bool_and_null_parameters(self, parser: SettingsParser, tmp_path: Path):
        """真偽値は true/false、null は空文字列になること。"""
        path = tmp_path / "s.yaml"
        path.write_text("parameters:\n  flag: true\n  empty:\n", encoding="utf-8")
        settings = parser.load(path)
        assert settings.parameters == {"flag": "true", "empty": ""}

    def test_empty_file_gives_defaults(self, parser: SettingsParser, tmp_path: Path):
        path = tmp_path / "empty.yaml"
        path.write_text("", encoding="utf-8")
        assert parser.load(path) == RunSettings()

    def test_missing_file_raises(self, parser: SettingsParser, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            parser.load(tmp_path / "nothing.yaml")

    def test_syntax_error_reports_line(self, parser: SettingsParser, tmp_path: Path):
        """YAML 構文エラーが行番号付きの ValueError になること。"""
        path = tmp_path / "broken.yaml"
        path.write_text("parameters:\n  a: [1, 2\n", encoding="utf-8")
        with pytest.raises(ValueError, match="YAML 構文エラー"):
            parser.load(path)

    def test_invalid_browser_rejected(self, parser: SettingsParser, tmp_path: Path):
        path = tmp_path / "s.yaml"
        path.write_text("browser: netscape\n", encoding="utf-8")
        with pytest.raises(ValueError, match="スキーマ検証エラー"):
            parser.load(path)

    def test_non_mapping_root_rejected(self, parser: SettingsParser, tmp_path: Path):
        path = tmp_path / "s.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ValueError):
            parser.load(path)


# ---------------------------------------------------------------------------
# dump() テスト
# ---------------------------------------------------------------------------

class TestDump:
    """YAML 書き出しのテスト。"""

    def test_dump_then_load(self, parser: SettingsParser, tmp_path: Path):
        """書き出した設定を読み込むと同じ内容になること。"""
        settings = RunSettings(parameters={"webAppUrl": "{URL}"}, browser="webkit")
        path = tmp_path / "out" / "runsettings.yaml"

        parser.dump(settings, path)

        assert parser.load(path) == settings


# ---------------------------------------------------------------------------
# load_run_settings() テスト
# ---------------------------------------------------------------------------

class TestLoadRunSettings:
    """load_run_settings のテスト。"""

    def test_missing_file_gives_defaults(self, tmp_path: Path):
        assert load_run_settings(tmp_path / "runsettings.yaml") == RunSettings()

    def test_none_path_gives_defaults(self):
        assert load_run_settings(None) == RunSettings()

    def test_required_missing_file_raises(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            load_run_settings(tmp_path / "runsettings.yaml", required=True)

    def test_overrides_applied(self, settings_file: Path):
        """上書き指定がファイルの値より優先され、他の値は保持されること。"""
        settings = load_run_settings(settings_file, {"webAppUrl": "http://override", "extra": "1"})
        assert settings.parameters["webAppUrl"] == "http://override"
        assert settings.parameters["extra"] == "1"
        assert settings.parameters["screenshotContext"] == "CI"
