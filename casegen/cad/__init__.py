"""
CADコアモジュール - 公開API

このモジュールは以下の主要インターフェースを提供する:
1. アンカー（名前付き基準点）と位置合わせ
2. ソリッドモデリングカーネルのアダプタ
3. パネル・穴パターン・フィレットのプリミティブ

組立品は casegen.cad.assemblies から取り込む。
"""

from . import kernel
from .anchors import (
    ORIGIN,
    AnchorSet,
    GeometryWithAnchors,
    Point3,
    align,
    alignment_vector,
    anchor_path,
    rectangular_anchor_set,
    split_anchor_path,
    translate_point,
)
from .primitives import (
    HoleDefinition,
    add_panel_fillets,
    create_fan_mount_pattern,
    create_fillet,
    create_hole_grid,
    create_hole_pattern,
    create_panel,
    create_panel_with_cutout,
)

__all__ = [
    "kernel",
    # アンカー
    "ORIGIN",
    "AnchorSet",
    "GeometryWithAnchors",
    "Point3",
    "align",
    "alignment_vector",
    "anchor_path",
    "rectangular_anchor_set",
    "split_anchor_path",
    "translate_point",
    # プリミティブ
    "HoleDefinition",
    "add_panel_fillets",
    "create_fan_mount_pattern",
    "create_fillet",
    "create_hole_grid",
    "create_hole_pattern",
    "create_panel",
    "create_panel_with_cutout",
]
