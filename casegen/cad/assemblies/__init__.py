"""
組立品モジュール - 公開API

1. マザーボード（取付穴・I/O シールド）とスタンドオフ
2. 6面パネルとマザーボードからなるPCケース
"""

from .case import (
    FACE_ORDER,
    PanelLayout,
    build_case_panels,
    build_panel,
    case_panel_layouts,
    create_case,
    generate_case,
    place_motherboard,
    rear_fan_holes,
    resolve_panel_thickness,
)
from .motherboard import (
    create_motherboard,
    create_motherboard_assembly,
    create_motherboard_standoffs,
    mounting_hole_positions,
)

__all__ = [
    # ケース
    "FACE_ORDER",
    "PanelLayout",
    "build_case_panels",
    "build_panel",
    "case_panel_layouts",
    "create_case",
    "generate_case",
    "place_motherboard",
    "rear_fan_holes",
    "resolve_panel_thickness",
    # マザーボード
    "create_motherboard",
    "create_motherboard_assembly",
    "create_motherboard_standoffs",
    "mounting_hole_positions",
]
