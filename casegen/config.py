"""
ケース構成値と実行環境設定。

CaseConfiguration は生成1回分の不変な入力値で、同じ構成からは常に
同じ組立品が得られる。辞書・JSON からの読み込み時に既定値を補完し、
型変換と検証を行う。
"""

import dataclasses
import os
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from .cad.anchors import ORIGIN, Point3
from .cad.validators import MIN_SEGMENTS, require_non_negative, require_point, require_positive
from .errors import InvalidConfiguration, InvalidDimension
from .utils import read_json


class PanelStyle(str, Enum):
    SOLID = "solid"
    MESH = "mesh"
    WINDOW = "window"


# 背面・底面は窓を持てない
RESTRICTED_FACES = ("rear_panel", "bottom_panel")

# 出力品質と円周分割数の対応
QUALITY_SEGMENTS = {
    "low": 16,
    "medium": 32,
    "high": 64,
}


def segments_for_quality(quality: str) -> int:
    """品質名（low/medium/high）から円周分割数を返す。"""
    try:
        return QUALITY_SEGMENTS[quality]
    except KeyError:
        raise InvalidConfiguration("quality", quality, f"must be one of {sorted(QUALITY_SEGMENTS)}") from None


@dataclass(frozen=True)
class CaseConfiguration:
    """
    ケース生成の入力値（寸法は全てmm）。

    座標系は x = 幅、y = 奥行き（前面が +y）、z = 高さ（上面が +z）。
    """

    width: float = 300.0
    height: float = 400.0
    depth: float = 350.0
    panel_thickness: float = 3.0
    corner_radius: float = 0.0
    front_panel: PanelStyle = PanelStyle.SOLID
    top_panel: PanelStyle = PanelStyle.SOLID
    side_panel: PanelStyle = PanelStyle.SOLID
    rear_panel: PanelStyle = PanelStyle.SOLID
    bottom_panel: PanelStyle = PanelStyle.SOLID
    motherboard_form_factor: Optional[str] = None
    material: str = "aluminum3mm"
    position: Point3 = ORIGIN
    standoff_height: float = 10.0
    rear_fan: Optional[str] = None
    ventilation_hole_size: float = 5.0
    ventilation_hole_spacing: float = 2.0
    window_ratio: float = 0.8
    segments: int = 32

    def __post_init__(self):
        for name in ("front_panel", "top_panel", "side_panel", "rear_panel", "bottom_panel"):
            value = getattr(self, name)
            if not isinstance(value, PanelStyle):
                try:
                    object.__setattr__(self, name, PanelStyle(value))
                except ValueError:
                    raise InvalidConfiguration(
                        name, value, f"must be one of {[s.value for s in PanelStyle]}"
                    ) from None
        if not isinstance(self.position, Point3):
            require_point("position", self.position)
            object.__setattr__(self, "position", Point3.of(self.position))

    def validate(self) -> "CaseConfiguration":
        """
        構成値を検証する。カーネルを呼ぶ前に必ず実行する。

        戻り値:
            self（連鎖呼び出し用）

        例外:
            InvalidDimension: 寸法が正でない場合など
            InvalidConfiguration: パネル様式などが不正な場合
        """
        for name in ("width", "height", "depth", "panel_thickness", "standoff_height",
                     "ventilation_hole_size", "window_ratio"):
            require_positive(name, getattr(self, name))
        require_non_negative("corner_radius", self.corner_radius)
        require_non_negative("ventilation_hole_spacing", self.ventilation_hole_spacing)
        if self.window_ratio >= 1.0:
            raise InvalidDimension("window_ratio", self.window_ratio, "must be below 1")
        if isinstance(self.segments, bool) or not isinstance(self.segments, int) or self.segments < MIN_SEGMENTS:
            raise InvalidDimension("segments", self.segments, f"must be an integer of at least {MIN_SEGMENTS}")
        for name in RESTRICTED_FACES:
            if getattr(self, name) is PanelStyle.WINDOW:
                raise InvalidConfiguration(name, PanelStyle.WINDOW.value, "window style is not available for this face")
        if not self.material:
            raise InvalidConfiguration("material", self.material, "must not be empty")
        return self

    def replace(self, **changes) -> "CaseConfiguration":
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        data = {}
        for f in dataclasses.fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Enum):
                value = value.value
            elif isinstance(value, Point3):
                value = list(value.as_tuple())
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CaseConfiguration":
        """
        辞書から構成を作る。

        キーは snake_case と camelCase（panelThickness など）の両方を受け付ける。
        欠落したキーは既定値、None も既定値として扱う。

        例外:
            InvalidConfiguration: 未知のキーや型変換できない値がある場合
        """
        known = {f.name: f for f in dataclasses.fields(cls)}
        params = {}
        for raw_key, value in (data or {}).items():
            key = _snake_case(raw_key)
            if key not in known:
                raise InvalidConfiguration(raw_key, value, "unknown configuration key")
            if value is None and key not in ("motherboard_form_factor", "rear_fan"):
                continue
            params[key] = _coerce(key, known[key], value)
        return cls(**params)

    @classmethod
    def from_json_file(cls, path: str) -> "CaseConfiguration":
        return cls.from_dict(read_json(path))


_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def _snake_case(key: str) -> str:
    return _CAMEL_RE.sub("_", key).lower()


def _coerce(key: str, f: dataclasses.Field, value):
    """フィールドの既定値の型に合わせて値を変換する。"""
    default = f.default
    try:
        if value is None:
            return None
        if isinstance(default, bool):
            return bool(value)
        if isinstance(default, int):
            if isinstance(value, float) and value != int(value):
                raise ValueError("expected an integer")
            return int(value)
        if isinstance(default, float):
            return float(value)
        if isinstance(default, Point3):
            require_point(key, value)
            return Point3.of(value)
        if isinstance(default, (PanelStyle, str)) or default is None:
            return str(value)
    except InvalidConfiguration:
        raise
    except (TypeError, ValueError) as exc:
        raise InvalidConfiguration(key, value, str(exc)) from None
    return value


@dataclass(frozen=True)
class Settings:
    """環境変数（.env を含む）から読む実行設定。"""

    output_dir: str = "out"
    log_level: str = "WARNING"
    standards_dir: Optional[str] = None
    quality: Optional[str] = None

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            output_dir=env.get("CASEGEN_OUTPUT_DIR") or "out",
            log_level=env.get("CASEGEN_LOG_LEVEL") or "WARNING",
            standards_dir=env.get("CASEGEN_STANDARDS_DIR") or None,
            quality=env.get("CASEGEN_QUALITY") or None,
        )
