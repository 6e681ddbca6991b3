"""
穴パターン（点集合 → 円柱の和）の生成関数。

生成物にアンカーは付かない。呼び出し側がパネルや組立品から直接差し引く。
"""

import logging
import math
from typing import List, Sequence

import trimesh

from .. import kernel
from ..anchors import ORIGIN, Point3
from ..validators import require_count, require_non_negative, require_point, require_positive, require_segments
from ...errors import InvalidDimension

logger = logging.getLogger(__name__)

# PCファン取付穴の標準インセット（外形の縁から穴中心まで）
FAN_HOLE_INSET_MM = 7.5


def create_hole_pattern(
    positions: Sequence,
    diameter: float,
    depth: float,
    segments: int = 32,
) -> trimesh.Trimesh:
    """
    各位置を中心とする z 軸円柱の和を生成する。

    引数:
        positions: 穴中心の3D座標列
        diameter: 穴径
        depth: 穴の深さ（円柱の高さ）
        segments: 円周の分割数（8以上）

    戻り値:
        全円柱の和。positions が空なら空のソリッド

    例外:
        InvalidDimension: 寸法・分割数・穴位置が不正な場合
    """
    require_positive("diameter", diameter)
    require_positive("depth", depth)
    require_segments(segments)
    positions = list(positions)
    for i, p in enumerate(positions):
        require_point(f"positions[{i}]", p)

    holes = [
        kernel.cylinder(diameter / 2.0, depth, Point3.of(p).as_tuple(), segments)
        for p in positions
    ]
    logger.debug("hole pattern: %d holes, d=%g", len(holes), diameter)
    return kernel.union(*holes)


def grid_positions(
    rows: int,
    columns: int,
    row_spacing: float,
    column_spacing: float,
    base_position=ORIGIN,
) -> List[Point3]:
    """base_position を中心に等間隔に並ぶ rows x columns の格子点。"""
    require_count("rows", rows)
    require_count("columns", columns)
    require_non_negative("row_spacing", row_spacing)
    require_non_negative("column_spacing", column_spacing)

    base = Point3.of(base_position)
    start_x = base.x - (columns - 1) * column_spacing / 2.0
    start_y = base.y - (rows - 1) * row_spacing / 2.0
    return [
        Point3(start_x + col * column_spacing, start_y + row * row_spacing, base.z)
        for row in range(rows)
        for col in range(columns)
    ]


def create_hole_grid(
    rows: int,
    columns: int,
    row_spacing: float,
    column_spacing: float,
    hole_diameter: float,
    hole_depth: float,
    base_position=ORIGIN,
    segments: int = 32,
) -> trimesh.Trimesh:
    """通気用などの格子状穴パターン。"""
    positions = grid_positions(rows, columns, row_spacing, column_spacing, base_position)
    return create_hole_pattern(positions, hole_diameter, hole_depth, segments)


def vent_grid_positions(
    width: float,
    height: float,
    hole_size: float,
    hole_spacing: float,
    margin: float = 0.0,
    base_position=ORIGIN,
) -> List[Point3]:
    """
    width x height の矩形（余白 margin を除く）に収まる最大の通気穴格子。

    穴ピッチは hole_size + hole_spacing。1穴も入らない場合は空リスト。
    """
    require_positive("width", width)
    require_positive("height", height)
    require_positive("hole_size", hole_size)
    require_non_negative("hole_spacing", hole_spacing)
    require_non_negative("margin", margin)

    pitch = hole_size + hole_spacing
    usable_w = width - 2.0 * margin
    usable_h = height - 2.0 * margin
    if usable_w < hole_size or usable_h < hole_size:
        return []
    columns = int(math.floor((usable_w - hole_size) / pitch)) + 1
    rows = int(math.floor((usable_h - hole_size) / pitch)) + 1
    return grid_positions(rows, columns, pitch, pitch, base_position)


def fan_mount_positions(fan_size: float, base_position=ORIGIN) -> List[Point3]:
    """
    ファン取付穴4点。辺 fan_size - 2 * 7.5 の正方形の角に置く。

    例外:
        InvalidDimension: ファンが小さすぎて穴が重なる場合
    """
    require_positive("fan_size", fan_size)
    mounting_distance = fan_size - FAN_HOLE_INSET_MM * 2.0
    if mounting_distance <= 0:
        raise InvalidDimension("fan_size", fan_size, f"must exceed {FAN_HOLE_INSET_MM * 2:g} mm")

    base = Point3.of(base_position)
    half = mounting_distance / 2.0
    return [
        Point3(base.x - half, base.y - half, base.z),
        Point3(base.x - half, base.y + half, base.z),
        Point3(base.x + half, base.y - half, base.z),
        Point3(base.x + half, base.y + half, base.z),
    ]


def create_fan_mount_pattern(
    fan_size: float,
    hole_diameter: float,
    hole_depth: float,
    base_position=ORIGIN,
    segments: int = 32,
) -> trimesh.Trimesh:
    """
    標準ファン取付穴パターンを生成する。

    引数:
        fan_size: ファン外形（120mm ファンなら 120）
        hole_diameter: 取付穴径
        hole_depth: 穴の深さ
        base_position: ファン中心
    """
    positions = fan_mount_positions(fan_size, base_position)
    return create_hole_pattern(positions, hole_diameter, hole_depth, segments)
