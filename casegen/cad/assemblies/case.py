"""
PCケース組立品。

主な責務:
1. 構成値から6枚のパネルの配置（PanelLayout）を決める
2. 各パネルをローカル座標で生成し、剛体変換でケースの面へ置く
3. パネルを固定順で1つのソリッドに和を取り、任意でマザーボードを組み込む
4. ケース・各パネル・マザーボードのアンカーを階層名でまとめる

座標系は x = 幅、y = 奥行き（前面が +y）、z = 高さ（上面が +z）。
パネルのローカル座標は、外側から見て x が右、y が上、+z が外向き法線。
"""

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np

from .. import kernel
from ..anchors import ORIGIN, AnchorSet, GeometryWithAnchors, Point3, anchor_path, rectangular_anchor_set
from ..primitives.hole_pattern import create_hole_pattern, grid_positions, vent_grid_positions
from ..primitives.panel import CLEARANCE_MM, HoleDefinition, create_panel, create_panel_with_cutout, cutout_size
from .motherboard import create_motherboard_assembly
from ...config import CaseConfiguration, PanelStyle
from ...errors import InvalidDimension
from ...standards import FanSpec, StandardsCatalog, get_catalog

logger = logging.getLogger(__name__)

# パネルの和を取る順序
FACE_ORDER = ("front", "rear", "top", "bottom", "left", "right")

# 通気穴格子の縁からの余白
VENT_MARGIN_MM = 15.0

# 背面ファンの縁からの余白
FAN_MARGIN_MM = 20.0

# マザーボード取付面と背面パネル内面の距離
MOTHERBOARD_REAR_OFFSET_MM = 20.0

# マザーボードのローカル法線 +z をケース前方 +y へ向ける回転
MOTHERBOARD_ROTATION = (-math.pi / 2.0, 0.0, 0.0)


@dataclass(frozen=True)
class PanelLayout:
    """
    1枚のパネルの配置と加工内容。

    寸法・穴位置はパネルのローカル座標（パネル中心が原点）で持ち、
    u / v / center でケース座標へ写す。DXF 展開図もこの情報から描く。
    """

    name: str
    width: float
    height: float
    center: Point3
    u: Tuple[float, float, float]
    v: Tuple[float, float, float]
    style: PanelStyle = PanelStyle.SOLID
    holes: Tuple[HoleDefinition, ...] = ()
    vents: Tuple[Tuple[float, float], ...] = ()
    vent_diameter: float = 0.0
    cutout_ratio: Optional[float] = None

    @property
    def anchor_name(self) -> str:
        return f"{self.name}PanelCenter"

    @property
    def normal(self) -> Tuple[float, float, float]:
        return tuple(float(c) for c in np.cross(self.u, self.v))

    @property
    def matrix(self) -> np.ndarray:
        return kernel.frame_matrix(self.u, self.v, self.center.as_tuple())

    @property
    def cutout(self) -> Optional[Tuple[float, float]]:
        """窓の開口寸法（無ければ None）。"""
        if self.cutout_ratio is None:
            return None
        return cutout_size(self.width, self.height, self.cutout_ratio, self.cutout_ratio)


def resolve_panel_thickness(config: CaseConfiguration, catalog: Optional[StandardsCatalog] = None) -> float:
    """
    材料規格から板厚を決める。

    未登録の材料はエラーにせず、構成値の panel_thickness を使う。
    """
    catalog = catalog or get_catalog()
    material = catalog.get_material(config.material)
    if material is None:
        logger.warning(
            "Unknown material %r, using panel_thickness %g mm", config.material, config.panel_thickness
        )
        return config.panel_thickness
    return material.thickness


def _face_frames(config: CaseConfiguration):
    w, h, d = config.width, config.height, config.depth
    # name, パネル幅, パネル高さ, 中心オフセット, u(右), v(上), 様式
    return (
        ("front", w, h, (0.0, d / 2.0, 0.0), (-1.0, 0.0, 0.0), (0.0, 0.0, 1.0), config.front_panel),
        ("rear", w, h, (0.0, -d / 2.0, 0.0), (1.0, 0.0, 0.0), (0.0, 0.0, 1.0), config.rear_panel),
        ("top", w, d, (0.0, 0.0, h / 2.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0), config.top_panel),
        ("bottom", w, d, (0.0, 0.0, -h / 2.0), (1.0, 0.0, 0.0), (0.0, -1.0, 0.0), config.bottom_panel),
        ("left", d, h, (-w / 2.0, 0.0, 0.0), (0.0, -1.0, 0.0), (0.0, 0.0, 1.0), config.side_panel),
        ("right", d, h, (w / 2.0, 0.0, 0.0), (0.0, 1.0, 0.0), (0.0, 0.0, 1.0), config.side_panel),
    )


def rear_fan_holes(fan: FanSpec, panel_width: float, panel_height: float) -> List[HoleDefinition]:
    """
    背面ファンの取付穴4点と通風用の開口。

    ファンは背面パネルの左右中央、上端から FAN_MARGIN_MM の位置に置く。

    例外:
        InvalidDimension: ファンがパネルに収まらない場合
    """
    needed = fan.size + 2.0 * FAN_MARGIN_MM
    if needed > panel_width or needed > panel_height:
        raise InvalidDimension("rear_fan", fan.key, f"needs a rear panel of at least {needed:g} mm")

    center = Point3(0.0, panel_height / 2.0 - FAN_MARGIN_MM - fan.size / 2.0, 0.0)
    distance = fan.mounting_hole_distance
    holes = [
        HoleDefinition(p.x, p.y, fan.mounting_hole_diameter)
        for p in grid_positions(2, 2, distance, distance, center)
    ]
    # 開口は取付穴の内側に収める
    holes.append(HoleDefinition(center.x, center.y, distance - fan.mounting_hole_diameter * 2.0))
    return holes


def _vent_positions(config: CaseConfiguration, width: float, height: float, keep_out=None):
    points = vent_grid_positions(
        width, height,
        config.ventilation_hole_size,
        config.ventilation_hole_spacing,
        margin=VENT_MARGIN_MM,
    )
    vents = []
    for p in points:
        if keep_out is not None:
            (cx, cy), half = keep_out
            if abs(p.x - cx) < half and abs(p.y - cy) < half:
                continue
        vents.append((p.x, p.y))
    return tuple(vents)


def case_panel_layouts(config: CaseConfiguration, fan: Optional[FanSpec] = None) -> List[PanelLayout]:
    """
    6枚のパネルの配置を FACE_ORDER の順で返す。

    引数:
        config: ケース構成（検証済みであること）
        fan: 背面ファン規格（無ければ None）

    例外:
        InvalidDimension: 背面ファンが収まらない場合
    """
    base = config.position
    layouts = []
    for name, width, height, offset, u, v, style in _face_frames(config):
        holes: Tuple[HoleDefinition, ...] = ()
        keep_out = None
        if name == "rear" and fan is not None:
            holes = tuple(rear_fan_holes(fan, width, height))
            opening = holes[-1]
            keep_out = ((opening.x, opening.y), fan.size / 2.0 + config.ventilation_hole_size)

        vents: Tuple[Tuple[float, float], ...] = ()
        if style is PanelStyle.MESH:
            vents = _vent_positions(config, width, height, keep_out)
            if not vents:
                logger.warning("%s panel is too small for ventilation holes", name)

        layouts.append(
            PanelLayout(
                name=name,
                width=width,
                height=height,
                center=base + offset,
                u=u,
                v=v,
                style=style,
                holes=holes,
                vents=vents,
                vent_diameter=config.ventilation_hole_size if vents else 0.0,
                cutout_ratio=config.window_ratio if style is PanelStyle.WINDOW else None,
            )
        )
    return layouts


def build_panel(layout: PanelLayout, thickness: float, corner_radius: float = 0.0, segments: int = 32) -> GeometryWithAnchors:
    """
    パネルをローカル座標で生成し、ケース座標へ置く。

    アンカーもソリッドと同じ変換で移動する。
    """
    tools = []
    if layout.vents:
        tools.append(
            create_hole_pattern(
                [(x, y, 0.0) for x, y in layout.vents],
                layout.vent_diameter,
                thickness + CLEARANCE_MM,
                segments,
            )
        )

    if layout.cutout_ratio is not None:
        local = create_panel_with_cutout(
            layout.width, layout.height, thickness, ORIGIN,
            cutout_width_ratio=layout.cutout_ratio,
            cutout_height_ratio=layout.cutout_ratio,
            corner_radius=corner_radius,
            holes=layout.holes,
            tools=tools,
            segments=segments,
        )
    else:
        local = create_panel(
            layout.width, layout.height, thickness, ORIGIN,
            corner_radius=corner_radius,
            holes=layout.holes,
            tools=tools,
            segments=segments,
        )
    logger.debug("%s panel: %d holes, %d vents", layout.name, len(layout.holes), len(layout.vents))
    return local.transformed(layout.matrix)


def build_case_panels(
    layouts: List[PanelLayout],
    thickness: float,
    corner_radius: float = 0.0,
    segments: int = 32,
) -> Dict[str, GeometryWithAnchors]:
    """全パネルを生成し、面名からパネルへの辞書を返す（順序は layouts のまま）。"""
    return {layout.name: build_panel(layout, thickness, corner_radius, segments) for layout in layouts}


def place_motherboard(
    config: CaseConfiguration,
    thickness: float,
    catalog: Optional[StandardsCatalog] = None,
) -> GeometryWithAnchors:
    """
    マザーボードとスタンドオフをケース内へ置く。

    ローカルで生成した組立品を回転して取付面の法線を +y に向け、
    背面パネル内面から MOTHERBOARD_REAR_OFFSET_MM 前方に置く。
    基板の I/O シールド側はケース上側になる。
    """
    assembly = create_motherboard_assembly(
        config.motherboard_form_factor,
        ORIGIN,
        standoff_height=config.standoff_height,
        catalog=catalog,
    )
    p = config.position
    mount_y = p.y - config.depth / 2.0 + thickness / 2.0 + MOTHERBOARD_REAR_OFFSET_MM
    matrix = kernel.rotation_matrix(MOTHERBOARD_ROTATION)
    matrix[:3, 3] = (p.x, mount_y, p.z)
    return assembly.transformed(matrix)


def _check_motherboard_fit(config: CaseConfiguration, thickness: float, catalog: StandardsCatalog) -> None:
    spec = catalog.lookup_form_factor(config.motherboard_form_factor)
    inner_w = config.width - thickness
    inner_h = config.height - thickness
    if spec.width > inner_w or spec.height > inner_h:
        logger.warning(
            "%s board (%g x %g mm) is larger than the case interior (%g x %g mm)",
            spec.key.value, spec.width, spec.height, inner_w, inner_h,
        )


def create_case(config: CaseConfiguration, catalog: Optional[StandardsCatalog] = None) -> GeometryWithAnchors:
    """
    構成値からPCケースを生成する。

    引数:
        config: ケース構成
        catalog: 規格カタログ（省略時はグローバルカタログ）

    戻り値:
        全パネル（と任意のマザーボード）の和と、次のアンカー:
        - ケース外形の15点（幅 x 奥行き x 高さ）
        - frontPanelCenter などの6つのパネル中心
        - panels.<面>.<名前>: 各パネルのアンカー
        - motherboard.<名前>, motherboard.standoffs.standoff_<i>

    例外:
        InvalidConfiguration / InvalidDimension: 構成値が不正な場合
        UnknownFormFactor: マザーボード規格が未登録の場合
        UnknownFan: 背面ファン規格が未登録の場合

    使用例:
        config = CaseConfiguration(width=300, height=400, depth=350)
        case = create_case(config)
        case.anchors["topPanelCenter"]  # Point3(0, 0, 200)
    """
    config.validate()
    catalog = catalog or get_catalog()
    thickness = resolve_panel_thickness(config, catalog)

    # カーネル呼び出しの前に規格を全て解決する
    fan = catalog.lookup_fan(config.rear_fan) if config.rear_fan else None
    if config.motherboard_form_factor:
        _check_motherboard_fit(config, thickness, catalog)

    layouts = case_panel_layouts(config, fan)
    panels = build_case_panels(layouts, thickness, config.corner_radius, config.segments)
    solid = kernel.union(*(panels[name].solid for name in FACE_ORDER))

    anchors = rectangular_anchor_set(config.width, config.depth, config.height, config.position)
    anchors = anchors.merged(AnchorSet({layout.anchor_name: layout.center for layout in layouts}))
    for name in FACE_ORDER:
        anchors = anchors.merged(panels[name].anchors, namespace=anchor_path("panels", name))

    if config.motherboard_form_factor:
        board = place_motherboard(config, thickness, catalog)
        solid = kernel.union(solid, board.solid)
        anchors = anchors.merged(board.anchors, namespace="motherboard")

    logger.info(
        "Generated case %g x %g x %g mm (%s, %g mm panels)",
        config.width, config.depth, config.height, config.material, thickness,
    )
    return GeometryWithAnchors(solid, anchors)


def generate_case(config, catalog: Optional[StandardsCatalog] = None) -> GeometryWithAnchors:
    """
    公開エントリポイント。CaseConfiguration または辞書を受け付ける。
    """
    if not isinstance(config, CaseConfiguration):
        config = CaseConfiguration.from_dict(config)
    return create_case(config, catalog)
