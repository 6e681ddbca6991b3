"""
規格アダプタ - 公開API

フォームファクタ・材料・ファンの規格レコードを読み取り専用で提供する。
"""

from .catalog import (
    Appearance,
    FanSpec,
    FormFactor,
    FormFactorSpec,
    MaterialSpec,
    StandardsCatalog,
    get_catalog,
    reload_catalog,
)

__all__ = [
    "Appearance",
    "FanSpec",
    "FormFactor",
    "FormFactorSpec",
    "MaterialSpec",
    "StandardsCatalog",
    "get_catalog",
    "reload_catalog",
]
