# コアモジュール
# オブジェクトストア、パラメータリゾルバ、待機戦略、スクリーンショット保存を提供

from .artifacts import ScreenshotRecorder, make_valid_file_name
from .object_store import (
    ObjectNotFoundError,
    ObjectStore,
    ObjectStoreError,
    ObjectTypeMismatchError,
)
from .parameters import (
    EnvFileLoader,
    MissingParameterError,
    ParameterError,
    ParameterResolver,
    UnresolvedEnvironmentVariableError,
    default_env_loader,
)
from .waits import is_available, wait_for_enabled

__all__ = [
    "EnvFileLoader",
    "MissingParameterError",
    "ObjectNotFoundError",
    "ObjectStore",
    "ObjectStoreError",
    "ObjectTypeMismatchError",
    "ParameterError",
    "ParameterResolver",
    "ScreenshotRecorder",
    "UnresolvedEnvironmentVariableError",
    "default_env_loader",
    "is_available",
    "make_valid_file_name",
    "wait_for_enabled",
]
