"""
CLI エントリポイント — Typer ベースのコマンドラインインターフェース

ftk コマンドとして以下のサブコマンドを提供する:
  - init: runsettings.yaml / .env.example の雛形生成
  - resolve: 単一パラメータの解決結果を表示
  - params: 全パラメータの解決結果を一覧表示
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

import typer

from .core.parameters import EnvFileLoader, ParameterError, ParameterResolver
from .settings import load_config_from_env, load_run_settings, parse_param_overrides

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Typer アプリ定義
# ---------------------------------------------------------------------------

app = typer.Typer(
    help=(
        "ftk — Playwright 機能テスト用ハーネス\n\n"
        "基本の流れ:\n"
        "  1. ftk init              runsettings.yaml を生成\n"
        "  2. ftk params            パラメータの解決結果を確認\n"
        "  3. pytest                テストを実行\n"
    ),
    no_args_is_help=True,
)

_SETTINGS_TEMPLATE = """\
# ftk テスト実行設定
# 値の中の {ENV_VAR} は環境変数（.env を含む）で置換されます
parameters:
  webAppUrl: "{WEB_APP_URL}"
  defaultTimeout: "10000"
  screenshotContext: Local
browser: chromium
headed: false
test_id_attribute: data-test-id
screenshot_dir: Screenshot
"""

_ENV_TEMPLATE = """\
# .env にコピーして値を設定してください
WEB_APP_URL=http://localhost:5000
"""


def _build_resolver(settings_path: Optional[Path], params: Optional[List[str]]) -> ParameterResolver:
    """runsettings を読み込み、ParameterResolver を生成する。"""
    path = settings_path or Path(load_config_from_env().settings_path)
    settings = load_run_settings(
        path, parse_param_overrides(params), required=settings_path is not None,
    )
    loader = EnvFileLoader(base_dir=path.resolve().parent)
    return ParameterResolver(settings.parameters, loader=loader)


# ---------------------------------------------------------------------------
# init コマンド
# ---------------------------------------------------------------------------

@app.command()
def init(
    project_dir: Path = typer.Argument(
        Path("."), help="プロジェクトディレクトリ（デフォルト: カレント）",
    ),
) -> None:
    """runsettings.yaml と .env.example の雛形を生成する。既存ファイルは上書きしない。"""
    try:
        project_dir.mkdir(parents=True, exist_ok=True)
        for name, content in (("runsettings.yaml", _SETTINGS_TEMPLATE), (".env.example", _ENV_TEMPLATE)):
            target = project_dir / name
            if target.exists():
                typer.echo(f"スキップ（既存）: {target}")
                continue
            target.write_text(content, encoding="utf-8")
            typer.echo(f"生成しました: {target}")
    except OSError as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# resolve コマンド
# ---------------------------------------------------------------------------

@app.command()
def resolve(
    name: str = typer.Argument(..., help="パラメータ名"),
    settings: Optional[Path] = typer.Option(
        None, "--settings", "-s", help="runsettings ファイル（デフォルト: runsettings.yaml）",
    ),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-p", help="パラメータの上書き NAME=VALUE（複数指定可）",
    ),
) -> None:
    """パラメータを解決し、展開後の値を表示する。"""
    try:
        resolver = _build_resolver(settings, param)
        typer.echo(resolver.get_required_parameter(name))
    except (ParameterError, ValueError, FileNotFoundError) as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)


# ---------------------------------------------------------------------------
# params コマンド
# ---------------------------------------------------------------------------

@app.command()
def params(
    settings: Optional[Path] = typer.Option(
        None, "--settings", "-s", help="runsettings ファイル（デフォルト: runsettings.yaml）",
    ),
    param: Optional[List[str]] = typer.Option(
        None, "--param", "-p", help="パラメータの上書き NAME=VALUE（複数指定可）",
    ),
) -> None:
    """全パラメータの解決結果を一覧表示する。1 件でも失敗した場合は終了コード 1。"""
    try:
        resolver = _build_resolver(settings, param)
    except (ValueError, FileNotFoundError) as exc:
        typer.echo(f"エラー: {exc}", err=True)
        raise typer.Exit(code=1)

    if not resolver.parameters:
        typer.echo("パラメータが定義されていません")
        return

    failed = False
    for name in sorted(resolver.parameters):
        try:
            typer.echo(f"{name} = {resolver.get_required_parameter(name)}")
        except ParameterError as exc:
            failed = True
            typer.echo(f"{name} ! {exc}")

    if failed:
        raise typer.Exit(code=1)


def main() -> None:
    """エントリポイント。"""
    logging.basicConfig(level=logging.INFO, format="%(name)s - %(message)s")
    app()


if __name__ == "__main__":
    main()
