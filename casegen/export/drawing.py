"""
パネルの2D展開図（DXF）と輪郭多角形。

各パネルを外側から見たローカル座標（x 右、y 上）で描く。
DXF では全パネルを FACE_ORDER の順に横一列へ並べる。
"""

import logging
import math

import ezdxf
from shapely.geometry import Polygon, box
from shapely.ops import unary_union

logger = logging.getLogger(__name__)

PANEL_GAP_MM = 40.0
TEXT_HEIGHT_MM = 6.0


def _circle_points(center, radius, segments=32):
    cx, cy = center
    pts = []
    for i in range(segments):
        theta = 2.0 * math.pi * i / segments
        pts.append((cx + radius * math.cos(theta), cy + radius * math.sin(theta)))
    return pts


def _cut_shapes(layout, segments=32):
    shapes = []
    for h in layout.holes:
        shapes.append(Polygon(_circle_points((h.x, h.y), h.diameter / 2.0, segments)))
    for x, y in layout.vents:
        shapes.append(Polygon(_circle_points((x, y), layout.vent_diameter / 2.0, segments)))
    cutout = layout.cutout
    if cutout is not None:
        cw, ch = cutout
        shapes.append(box(-cw / 2.0, -ch / 2.0, cw / 2.0, ch / 2.0))
    return shapes


def panel_profile(layout, segments=32):
    """
    パネルの輪郭から穴・通気穴・窓を除いた2D多角形（パネル中心が原点）。
    """
    hw = layout.width / 2.0
    hh = layout.height / 2.0
    outline = box(-hw, -hh, hw, hh)
    cuts = _cut_shapes(layout, segments)
    if not cuts:
        return outline
    profile = outline.difference(unary_union(cuts))
    if not profile.is_valid:
        profile = profile.buffer(0)
    return profile


def panel_area_mm2(layout):
    return float(panel_profile(layout).area)


def panel_mass_g(layout, thickness, density):
    """板厚 thickness (mm) と密度 density (g/cm³) からパネル質量 (g) を求める。"""
    volume_cm3 = panel_area_mm2(layout) * thickness / 1000.0
    return volume_cm3 * density


def _ensure_linetype(doc, name, description, pattern):
    if name in doc.linetypes:
        return
    doc.linetypes.new(name, dxfattribs={"description": description, "pattern": pattern})


def _ensure_layer(doc, name, color=7, linetype="Continuous"):
    if name in doc.layers:
        layer = doc.layers.get(name)
        layer.dxf.color = color
        layer.dxf.linetype = linetype
        return
    doc.layers.new(name, dxfattribs={"color": color, "linetype": linetype})


def _add_text_line(msp, text, x, y, layer="TEXT", height=TEXT_HEIGHT_MM):
    msp.add_text(
        text,
        dxfattribs={
            "layer": layer,
            "height": height,
            "insert": (x, y),
        },
    )


def _draw_panel(msp, layout, thickness, ox, oy):
    # ローカル座標（中心原点）を左下原点へずらす
    dx = ox + layout.width / 2.0
    dy = oy + layout.height / 2.0

    outline = [(ox, oy), (ox + layout.width, oy), (ox + layout.width, oy + layout.height), (ox, oy + layout.height)]
    msp.add_lwpolyline(outline, close=True, dxfattribs={"layer": "OUTLINE"})

    for h in layout.holes:
        cx, cy = h.x + dx, h.y + dy
        r = h.diameter / 2.0
        msp.add_circle((cx, cy), r, dxfattribs={"layer": "HOLES"})
        if h.countersink is not None:
            msp.add_circle((cx, cy), h.countersink.diameter / 2.0, dxfattribs={"layer": "HIDDEN"})
        msp.add_line((cx - r - 3.0, cy), (cx + r + 3.0, cy), dxfattribs={"layer": "CENTER"})
        msp.add_line((cx, cy - r - 3.0), (cx, cy + r + 3.0), dxfattribs={"layer": "CENTER"})

    for x, y in layout.vents:
        msp.add_circle((x + dx, y + dy), layout.vent_diameter / 2.0, dxfattribs={"layer": "VENTS"})

    cutout = layout.cutout
    if cutout is not None:
        cw, ch = cutout
        x0, y0 = dx - cw / 2.0, dy - ch / 2.0
        rect = [(x0, y0), (x0 + cw, y0), (x0 + cw, y0 + ch), (x0, y0 + ch)]
        msp.add_lwpolyline(rect, close=True, dxfattribs={"layer": "CUTOUT"})

    # パネル中心の十字
    msp.add_line((dx - 10.0, dy), (dx + 10.0, dy), dxfattribs={"layer": "CENTER"})
    msp.add_line((dx, dy - 10.0), (dx, dy + 10.0), dxfattribs={"layer": "CENTER"})

    lines = [
        f"PANEL: {layout.name.upper()} ({layout.style.value})",
        f"SIZE: W={layout.width:.2f} H={layout.height:.2f} T={thickness:.2f}",
        f"HOLES: {len(layout.holes)}  VENTS: {len(layout.vents)}",
    ]
    for i, line in enumerate(lines):
        _add_text_line(msp, line, ox, oy + layout.height + 8.0 + (len(lines) - 1 - i) * (TEXT_HEIGHT_MM + 2.0))


def draw_panels_dxf(layouts, thickness, out_path, material=None):
    """
    全パネルの展開図を1つの DXF に書き出す。

    引数:
        layouts: PanelLayout のリスト
        thickness: 板厚（注記用）
        out_path: 出力先パス
        material: 材料名（注記用、任意）
    """
    doc = ezdxf.new("R2010")
    doc.header["$INSUNITS"] = 4  # millimeters
    doc.header["$MEASUREMENT"] = 1
    msp = doc.modelspace()

    _ensure_linetype(doc, "CENTER", "Center ____ _ ____ _ ____", [0.0, 10.0, -2.0, 2.0, -2.0])
    _ensure_linetype(doc, "HIDDEN", "Hidden __ __ __ __", [0.0, 6.0, -3.0])
    _ensure_layer(doc, "OUTLINE", color=7, linetype="Continuous")
    _ensure_layer(doc, "HOLES", color=7, linetype="Continuous")
    _ensure_layer(doc, "VENTS", color=4, linetype="Continuous")
    _ensure_layer(doc, "CUTOUT", color=1, linetype="Continuous")
    _ensure_layer(doc, "CENTER", color=3, linetype="CENTER")
    _ensure_layer(doc, "HIDDEN", color=8, linetype="HIDDEN")
    _ensure_layer(doc, "TEXT", color=7, linetype="Continuous")

    x = 0.0
    for layout in layouts:
        _draw_panel(msp, layout, thickness, x, 0.0)
        x += layout.width + PANEL_GAP_MM

    if material:
        _add_text_line(msp, f"MAT: {material} t={thickness}", 0.0, -PANEL_GAP_MM / 2.0)

    doc.saveas(out_path)
    logger.info("Wrote %s (%d panels)", out_path, len(layouts))
    return out_path
