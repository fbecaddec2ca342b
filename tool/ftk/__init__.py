"""
ftk — Playwright 機能テスト用ハーネス

オブジェクトストア、{ENV_VAR} 展開付きパラメータリゾルバ、
ページオブジェクト基底クラス、pytest プラグインを提供する。
"""

from .core.object_store import ObjectStore
from .core.parameters import (
    MissingParameterError,
    ParameterResolver,
    UnresolvedEnvironmentVariableError,
)
from .pages.base import PageObjectModel

__version__ = "0.1.0"

__all__ = [
    "MissingParameterError",
    "ObjectStore",
    "PageObjectModel",
    "ParameterResolver",
    "UnresolvedEnvironmentVariableError",
]
