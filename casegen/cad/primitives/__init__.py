"""
プリミティブ生成モジュール。

各関数は寸法から trimesh.Trimesh（パネルは GeometryWithAnchors）を返す。
"""

from .fillet import add_panel_fillets, create_fillet
from .hole_pattern import (
    FAN_HOLE_INSET_MM,
    create_fan_mount_pattern,
    create_hole_grid,
    create_hole_pattern,
    fan_mount_positions,
    grid_positions,
    vent_grid_positions,
)
from .panel import (
    Countersink,
    HoleDefinition,
    create_panel,
    create_panel_with_cutout,
    cutout_size,
)

__all__ = [
    # フィレット
    "add_panel_fillets",
    "create_fillet",
    # 穴パターン
    "FAN_HOLE_INSET_MM",
    "create_fan_mount_pattern",
    "create_hole_grid",
    "create_hole_pattern",
    "fan_mount_positions",
    "grid_positions",
    "vent_grid_positions",
    # パネル
    "Countersink",
    "HoleDefinition",
    "create_panel",
    "create_panel_with_cutout",
    "cutout_size",
]
