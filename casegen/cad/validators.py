"""
生成関数の入力検証ユーティリティ。

カーネル呼び出しの前に寸法を検査し、退化した入力では
InvalidDimension を送出する。
"""

import math
from numbers import Real

from ..errors import InvalidDimension

# これ未満の分割数では穴の多角形化が目立つ
MIN_SEGMENTS = 8


def _as_number(field: str, value) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidDimension(field, value, "must be a number")
    number = float(value)
    if math.isnan(number) or math.isinf(number):
        raise InvalidDimension(field, value, "must be finite")
    return number


def require_positive(field: str, value) -> float:
    """
    値が正の有限数であることを確認する。

    戻り値:
        float に変換した値

    例外:
        InvalidDimension: 0以下・非数値の場合
    """
    number = _as_number(field, value)
    if number <= 0:
        raise InvalidDimension(field, value, "must be positive")
    return number


def require_non_negative(field: str, value) -> float:
    number = _as_number(field, value)
    if number < 0:
        raise InvalidDimension(field, value, "must not be negative")
    return number


def require_segments(value, field: str = "segments") -> int:
    """円の分割数を検証する。"""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidDimension(field, value, "must be an integer")
    if value < MIN_SEGMENTS:
        raise InvalidDimension(field, value, f"must be at least {MIN_SEGMENTS}")
    return value


def require_count(field: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise InvalidDimension(field, value, "must be a positive integer")
    return value


def require_point(field: str, value):
    """3要素の有限座標であることを確認する。"""
    try:
        coords = list(value)
    except TypeError:
        raise InvalidDimension(field, value, "must be a 3D point") from None
    if len(coords) != 3:
        raise InvalidDimension(field, value, "must be a 3D point")
    for axis, c in zip("xyz", coords):
        _as_number(f"{field}.{axis}", c)
    return value
