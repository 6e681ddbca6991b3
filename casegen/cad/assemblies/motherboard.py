"""
マザーボードとスタンドオフのサブアセンブリ。

ローカル座標では基板を xy 平面に置き、取付面の法線を +z とする。
position は取付面（スタンドオフ下端）の中心を表す。
"""

import logging
from typing import List, Optional

from .. import kernel
from ..anchors import ORIGIN, AnchorSet, GeometryWithAnchors, Point3, rectangular_anchor_set
from ..primitives.hole_pattern import create_hole_pattern
from ..validators import require_positive
from ...standards import FormFactorSpec, StandardsCatalog, get_catalog

logger = logging.getLogger(__name__)

# 標準的なマザーボード取付ネジのクリアランス径
MOUNTING_HOLE_DIAMETER_MM = 3.5
MOUNTING_HOLE_SEGMENTS = 16
HOLE_CLEARANCE_MM = 0.1

# I/O シールドは基板左端から固定量だけ内側に置く
IO_SHIELD_INSET_MM = 10.0
IO_SHIELD_THICKNESS_MM = 1.5

# 六角スタンドオフ
STANDOFF_RADIUS_MM = 3.2
STANDOFF_SEGMENTS = 6

DEFAULT_STANDOFF_HEIGHT_MM = 10.0


def _resolve_spec(form_factor, catalog: Optional[StandardsCatalog]) -> FormFactorSpec:
    catalog = catalog or get_catalog()
    return catalog.lookup_form_factor(form_factor)


def mounting_hole_positions(spec: FormFactorSpec, position=ORIGIN, z_offset: float = 0.0) -> List[Point3]:
    """
    規格の取付穴（左下原点）を、position を中心とする座標系へ写す。

    順序は規格の取付穴リストの順序を保つ。
    """
    p = Point3.of(position)
    return [
        Point3(p.x - spec.width / 2.0 + hx, p.y - spec.height / 2.0 + hy, p.z + z_offset)
        for hx, hy in spec.mounting_holes
    ]


def _semantic_anchors(spec: FormFactorSpec, position: Point3, standoff_height: float) -> dict:
    """
    部品配置の目安となるアンカー。

    実測した部品位置ではなく、基板寸法に対する固定比率から置いた
    ヒューリスティックな点である。
    """
    top = position.z + standoff_height + spec.thickness
    io_x = position.x - spec.width / 2.0 + IO_SHIELD_INSET_MM + spec.io_shield_width / 2.0
    return {
        # CPU ソケット: 上寄り中央
        "cpuSocket": (position.x, position.y - spec.height / 4.0, top),
        # メモリスロット: CPU の右
        "ramSlots": (position.x + spec.width / 4.0, position.y, top),
        # PCIe スロット: 下寄り
        "pcieSlots": (position.x, position.y + spec.height / 3.0, top),
        # I/O シールド中心
        "ioShield": (
            io_x,
            position.y - spec.height / 2.0 + IO_SHIELD_THICKNESS_MM / 2.0,
            top + spec.io_shield_height / 2.0,
        ),
    }


def create_motherboard(
    form_factor,
    position=ORIGIN,
    standoff_height: float = DEFAULT_STANDOFF_HEIGHT_MM,
    include_io_shield: bool = True,
    catalog: Optional[StandardsCatalog] = None,
) -> GeometryWithAnchors:
    """
    取付穴と任意の I/O シールドを持つマザーボードを生成する。

    引数:
        form_factor: フォームファクタキー（"ATX" など）または FormFactor
        position: 取付面の中心
        standoff_height: スタンドオフ高さ（基板は法線方向にこの分浮く）
        include_io_shield: I/O シールド板を付けるかどうか
        catalog: 規格カタログ（省略時はグローバルカタログ）

    戻り値:
        基板ソリッドと、基板外形の15点 + cpuSocket/ramSlots/pcieSlots/ioShield

    例外:
        UnknownFormFactor: フォームファクタが未登録の場合
        InvalidDimension: standoff_height が正でない場合
    """
    spec = _resolve_spec(form_factor, catalog)
    standoff_height = require_positive("standoff_height", standoff_height)
    p = Point3.of(position)

    board_center = Point3(p.x, p.y, p.z + standoff_height + spec.thickness / 2.0)
    board = kernel.box((spec.width, spec.height, spec.thickness), board_center.as_tuple())

    # 穴は板厚中心に置き、板厚より少し長くして貫通させる
    holes = create_hole_pattern(
        mounting_hole_positions(spec, p, standoff_height + spec.thickness / 2.0),
        MOUNTING_HOLE_DIAMETER_MM,
        spec.thickness + HOLE_CLEARANCE_MM,
        segments=MOUNTING_HOLE_SEGMENTS,
    )
    board = kernel.subtract(board, holes)

    if include_io_shield:
        # 切り欠きは作らない。基板の後端（-y）に立てた板として扱い、
        # 下端は板厚の中央まで埋め込む
        anchor = _semantic_anchors(spec, p, standoff_height)["ioShield"]
        embed = spec.thickness / 2.0
        shield = kernel.box(
            (spec.io_shield_width, IO_SHIELD_THICKNESS_MM, spec.io_shield_height + embed),
            (anchor[0], anchor[1], anchor[2] - embed / 2.0),
        )
        board = kernel.union(board, shield)

    anchors = rectangular_anchor_set(spec.width, spec.height, spec.thickness, board_center)
    anchors = anchors.merged(AnchorSet(_semantic_anchors(spec, p, standoff_height)))
    logger.debug("motherboard %s: %d mounting holes", spec.key.value, len(spec.mounting_holes))
    return GeometryWithAnchors(board, anchors)


def create_motherboard_standoffs(
    form_factor,
    position=ORIGIN,
    standoff_height: float = DEFAULT_STANDOFF_HEIGHT_MM,
    catalog: Optional[StandardsCatalog] = None,
) -> GeometryWithAnchors:
    """
    取付穴ごとの六角スタンドオフを生成する。

    アンカーは standoff_<i>（スタンドオフ上端、規格の穴順）。
    全スタンドオフの和を1つのソリッドとして返す。
    """
    spec = _resolve_spec(form_factor, catalog)
    standoff_height = require_positive("standoff_height", standoff_height)
    p = Point3.of(position)

    standoffs = [
        kernel.cylinder(STANDOFF_RADIUS_MM, standoff_height, center.as_tuple(), STANDOFF_SEGMENTS)
        for center in mounting_hole_positions(spec, p, standoff_height / 2.0)
    ]
    anchors = AnchorSet(
        (f"standoff_{i}", top)
        for i, top in enumerate(mounting_hole_positions(spec, p, standoff_height))
    )
    return GeometryWithAnchors(kernel.union(*standoffs), anchors)


def create_motherboard_assembly(
    form_factor,
    position=ORIGIN,
    standoff_height: float = DEFAULT_STANDOFF_HEIGHT_MM,
    include_io_shield: bool = True,
    catalog: Optional[StandardsCatalog] = None,
) -> GeometryWithAnchors:
    """
    スタンドオフと基板を1つにまとめたサブアセンブリ。

    基板のアンカーはそのまま、スタンドオフのアンカーは standoffs 配下に置く。
    """
    standoffs = create_motherboard_standoffs(form_factor, position, standoff_height, catalog)
    board = create_motherboard(form_factor, position, standoff_height, include_io_shield, catalog)
    return GeometryWithAnchors(
        kernel.union(standoffs.solid, board.solid),
        board.anchors.merged(standoffs.anchors, namespace="standoffs"),
    )
