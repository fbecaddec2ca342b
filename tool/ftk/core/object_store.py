"""
ObjectStore — テストステップ間で共有するオブジェクトの格納庫

テスト中に生成・参照されるオブジェクトを、キーまたは型名で保持する。
ローカル変数を引き回さずにステップを組み立てられるようにするためのもの。

キーの決定:
  - add(obj, key="x")  → "x" に格納
  - add(obj)           → type(obj).__name__ に格納（型ごとに 1 スロット）
  - get(Foo)           → "Foo" から取得し、Foo のインスタンスであることを検証

スレッドセーフではない。1 テストにつき 1 インスタンスで使用すること。
"""

from __future__ import annotations

import logging
from typing import Any, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# カスタム例外
# ---------------------------------------------------------------------------

class ObjectStoreError(Exception):
    """ObjectStore 操作で発生する例外の基底クラス。"""


class ObjectNotFoundError(ObjectStoreError, KeyError):
    """指定キーのオブジェクトが格納されていない場合に送出される例外。

    Attributes:
        key: 参照されたキー
    """

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"オブジェクトが格納されていません: '{key}'")

    def __str__(self) -> str:
        # KeyError の repr 形式を避ける
        return self.args[0]


class ObjectTypeMismatchError(ObjectStoreError, TypeError):
    """格納済みオブジェクトの型が期待する型と一致しない場合に送出される例外。

    Attributes:
        key: 参照されたキー
        expected: 呼び出し側が期待した型
        actual: 実際に格納されているオブジェクトの型
    """

    def __init__(self, key: str, expected: type, actual: type) -> None:
        self.key = key
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"キー '{key}' のオブジェクトは {expected.__name__} ではありません"
            f"（実際の型: {actual.__name__}）"
        )


# ---------------------------------------------------------------------------
# ObjectStore 本体
# ---------------------------------------------------------------------------

class ObjectStore:
    """キー / 型名でオブジェクトを保持するストア。"""

    def __init__(self) -> None:
        self._objects: dict[str, Any] = {}

    def add(self, obj: Any, *, key: Optional[str] = None) -> None:
        """オブジェクトを格納する。既存のキーは上書きされる。

        Args:
            obj: 格納するオブジェクト
            key: 格納先キー。None の場合は type(obj).__name__ を使用
        """
        if key is None:
            key = type(obj).__name__
        if key in self._objects:
            logger.debug("ObjectStore: '%s' を上書きします", key)
        self._objects[key] = obj

    def get(self, cls: Optional[type[T]] = None, key: Optional[str] = None) -> T:
        """オブジェクトを取得する。

        Args:
            cls: 期待する型。key 省略時は cls.__name__ をキーとして使用
            key: 取得元キー

        Returns:
            格納されているオブジェクト

        Raises:
            ValueError: cls と key の両方が省略された場合
            ObjectNotFoundError: キーが存在しない場合
            ObjectTypeMismatchError: cls が指定され、型が一致しない場合
        """
        key = _resolve_key(cls, key)
        if key not in self._objects:
            raise ObjectNotFoundError(key)

        obj = self._objects[key]
        if cls is not None and not isinstance(obj, cls):
            raise ObjectTypeMismatchError(key, cls, type(obj))
        return obj

    def contains(self, cls: Optional[type] = None, key: Optional[str] = None) -> bool:
        """オブジェクトが格納されているかを返す。

        key のみの場合はキーの存在だけを確認する。cls を指定した場合は
        格納済みオブジェクトが cls のインスタンスであることも条件とする。
        """
        key = _resolve_key(cls, key)
        if key not in self._objects:
            return False
        if cls is None:
            return True
        return isinstance(self._objects[key], cls)

    def __contains__(self, key: object) -> bool:
        return key in self._objects

    def __len__(self) -> int:
        return len(self._objects)


def _resolve_key(cls: Optional[type], key: Optional[str]) -> str:
    """明示キーまたは型名から格納キーを決定する。"""
    if key is not None:
        return key
    if cls is None:
        raise ValueError("cls または key のいずれかを指定してください")
    return cls.__name__
