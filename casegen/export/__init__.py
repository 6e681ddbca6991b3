"""
境界アダプタ - 公開API

1. 表示用メッシュバッファと材料外観
2. STL 出力
3. パネル展開図（DXF）と輪郭多角形
"""

from .drawing import draw_panels_dxf, panel_area_mm2, panel_mass_g, panel_profile
from .mesh import material_appearance, to_buffer_data
from .stl import export_stl

__all__ = [
    "draw_panels_dxf",
    "panel_area_mm2",
    "panel_mass_g",
    "panel_profile",
    "material_appearance",
    "to_buffer_data",
    "export_stl",
]
