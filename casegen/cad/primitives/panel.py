"""
矩形パネル（板 + 穴 + 任意の角R）の生成関数。
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import trimesh

from .. import kernel
from ..anchors import ORIGIN, GeometryWithAnchors, Point3, rectangular_anchor_set
from ..validators import require_non_negative, require_positive, require_segments
from .fillet import add_panel_fillets
from ...errors import InvalidDimension

logger = logging.getLogger(__name__)

# 同一平面の面での退化を避けるため、貫通工具を板厚より長くする量
CLEARANCE_MM = 0.1


@dataclass(frozen=True)
class Countersink:
    """皿取り（座ぐり）。+z 面側に掘り込む。"""

    diameter: float
    depth: float


@dataclass(frozen=True)
class HoleDefinition:
    """パネル中心からのオフセット (x, y) にあけた貫通穴。"""

    x: float
    y: float
    diameter: float
    countersink: Optional[Countersink] = None

    @classmethod
    def from_dict(cls, data: dict) -> "HoleDefinition":
        cs = data.get("countersink")
        countersink = None
        if cs:
            countersink = Countersink(float(cs["diameter"]), float(cs["depth"]))
        return cls(float(data["x"]), float(data["y"]), float(data["diameter"]), countersink)


def _validate_hole(index: int, hole: HoleDefinition, width: float, height: float, thickness: float) -> None:
    field = f"holes[{index}]"
    require_positive(f"{field}.diameter", hole.diameter)
    if abs(hole.x) > width / 2.0 or abs(hole.y) > height / 2.0:
        raise InvalidDimension(field, (hole.x, hole.y), "hole centre lies outside the panel")
    cs = hole.countersink
    if cs is None:
        return
    require_positive(f"{field}.countersink.diameter", cs.diameter)
    require_positive(f"{field}.countersink.depth", cs.depth)
    if cs.diameter <= hole.diameter:
        raise InvalidDimension(f"{field}.countersink.diameter", cs.diameter, "must exceed the hole diameter")
    if cs.depth >= thickness:
        raise InvalidDimension(f"{field}.countersink.depth", cs.depth, "must be shallower than the panel")


def hole_solids(
    hole: HoleDefinition,
    position: Point3,
    thickness: float,
    segments: int = 32,
) -> List[trimesh.Trimesh]:
    """1つの穴定義に対する除去工具（貫通円柱と任意の皿取り円柱）。"""
    center = Point3(position.x + hole.x, position.y + hole.y, position.z)
    solids = [
        kernel.cylinder(hole.diameter / 2.0, thickness + CLEARANCE_MM, center.as_tuple(), segments)
    ]
    cs = hole.countersink
    if cs is not None:
        # 上面から depth だけ掘り、上側へ CLEARANCE_MM 張り出す
        cs_height = cs.depth + CLEARANCE_MM
        cs_z = position.z + thickness / 2.0 - cs.depth + cs_height / 2.0
        solids.append(kernel.cylinder(cs.diameter / 2.0, cs_height, (center.x, center.y, cs_z), segments))
    return solids


def create_panel(
    width: float,
    height: float,
    thickness: float,
    position=ORIGIN,
    corner_radius: float = 0.0,
    holes: Sequence[HoleDefinition] = (),
    tools: Sequence[trimesh.Trimesh] = (),
    segments: int = 32,
) -> GeometryWithAnchors:
    """
    穴と角Rを持つ矩形パネルを生成する。

    引数:
        width: x 方向の寸法
        height: y 方向の寸法
        thickness: 板厚（z 方向）
        position: パネル中心
        corner_radius: 上下面の稜線のフィレット半径（0 で無し）
        holes: 穴定義のリスト（順序どおりに工具化する）
        tools: 追加で差し引くソリッド（通気穴パターンなど）
        segments: 円周の分割数

    戻り値:
        パネルと、公称外形に対する rectangular_anchor_set

    例外:
        InvalidDimension: 寸法が不正な場合（カーネル呼び出し前に検出）
    """
    width = require_positive("width", width)
    height = require_positive("height", height)
    thickness = require_positive("thickness", thickness)
    corner_radius = require_non_negative("corner_radius", corner_radius)
    require_segments(segments)
    position = Point3.of(position)
    for i, hole in enumerate(holes):
        _validate_hole(i, hole, width, height, thickness)

    panel = kernel.box((width, height, thickness), position.as_tuple())

    cutters: List[trimesh.Trimesh] = []
    for hole in holes:
        cutters.extend(hole_solids(hole, position, thickness, segments))
    cutters.extend(tools)
    if cutters:
        # 穴は全て和を取ってから1回で差し引く
        panel = kernel.subtract(panel, kernel.union(*cutters))

    panel = add_panel_fillets(panel, width, height, thickness, corner_radius, position, segments)

    # アンカーは加工後ではなく公称外形を表す
    return GeometryWithAnchors(panel, rectangular_anchor_set(width, height, thickness, position))


def cutout_size(width: float, height: float, width_ratio: float, height_ratio: float):
    """パネル寸法に対する比率から開口寸法を求める。"""
    for field, ratio in (("cutout_width_ratio", width_ratio), ("cutout_height_ratio", height_ratio)):
        require_positive(field, ratio)
        if ratio >= 1.0:
            raise InvalidDimension(field, ratio, "must be below 1")
    return width * width_ratio, height * height_ratio


def create_panel_with_cutout(
    width: float,
    height: float,
    thickness: float,
    position=ORIGIN,
    cutout_width_ratio: float = 0.8,
    cutout_height_ratio: float = 0.8,
    cutout_offset: Sequence[float] = (0.0, 0.0),
    corner_radius: float = 0.0,
    holes: Sequence[HoleDefinition] = (),
    tools: Sequence[trimesh.Trimesh] = (),
    segments: int = 32,
) -> GeometryWithAnchors:
    """
    矩形の開口（窓など）を1つ持つパネルを生成する。

    開口寸法はパネル幅・高さに対する比率で指定し、既定ではパネル中心に置く。
    アンカーは基本パネルのものをそのまま使う。
    """
    cut_w, cut_h = cutout_size(require_positive("width", width), require_positive("height", height),
                               cutout_width_ratio, cutout_height_ratio)
    base = create_panel(width, height, thickness, position, corner_radius, holes, tools, segments)

    p = Point3.of(position)
    ox, oy = (float(v) for v in cutout_offset)
    cutout = kernel.box(
        (cut_w, cut_h, thickness + CLEARANCE_MM),
        (p.x + ox, p.y + oy, p.z),
    )
    return base.with_solid(kernel.subtract(base.solid, cutout))
