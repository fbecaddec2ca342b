# ページオブジェクトモジュール
# ページオブジェクトの基底クラスを提供

from .base import PageObjectModel

__all__ = ["PageObjectModel"]
