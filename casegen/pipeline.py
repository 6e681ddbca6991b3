"""
ケース生成のパイプラインモジュール。

構成値からケースを生成し、STL・アンカー・展開図・レポートを
出力ディレクトリへ書き出す。
"""

import logging
import os
from typing import Any, Dict, Optional

from .cad.assemblies import case_panel_layouts, create_case, resolve_panel_thickness
from .config import CaseConfiguration
from .export import draw_panels_dxf, export_stl, material_appearance, panel_area_mm2, panel_mass_g, to_buffer_data
from .standards import StandardsCatalog, get_catalog
from .utils import ensure_dir, new_run_id, write_json

logger = logging.getLogger(__name__)


def _panel_report(layouts, thickness, density):
    panels = []
    for layout in layouts:
        area = panel_area_mm2(layout)
        panels.append({
            "name": layout.name,
            "style": layout.style.value,
            "width_mm": layout.width,
            "height_mm": layout.height,
            "holes": len(layout.holes),
            "vents": len(layout.vents),
            "cutout_mm": list(layout.cutout) if layout.cutout else None,
            "area_mm2": round(area, 2),
            "mass_g": round(panel_mass_g(layout, thickness, density), 1) if density else None,
        })
    return panels


def run_case_pipeline(
    config: CaseConfiguration,
    out_dir: str,
    catalog: Optional[StandardsCatalog] = None,
    include_mesh: bool = False,
) -> Dict[str, Any]:
    """
    ケース生成パイプライン。

    引数:
        config: ケース構成
        out_dir: 出力ディレクトリ（無ければ作成）
        catalog: 規格カタログ（省略時はグローバルカタログ）
        include_mesh: True なら表示用バッファ mesh.json も書き出す

    戻り値:
        出力ファイルパスと run_id の辞書

    例外:
        CaseGenError の各サブクラス（構成・規格・カーネルのエラー）
    """
    catalog = catalog or get_catalog()
    config.validate()
    ensure_dir(out_dir)
    run_id = new_run_id()
    warnings = []

    case = create_case(config, catalog)

    # 展開図とレポートは3Dモデルと同じ配置情報から作る
    material = catalog.get_material(config.material)
    if material is None:
        warnings.append(f"unknown material {config.material!r}; used panel_thickness {config.panel_thickness:g} mm")
    thickness = resolve_panel_thickness(config, catalog)
    fan = catalog.lookup_fan(config.rear_fan) if config.rear_fan else None
    layouts = case_panel_layouts(config, fan)

    stl_path = os.path.join(out_dir, "case.stl")
    export_stl(case, stl_path)

    anchors_path = os.path.join(out_dir, "anchors.json")
    write_json(anchors_path, {"run_id": run_id, "anchors": case.anchors.to_dict()})

    dxf_path = os.path.join(out_dir, "panels.dxf")
    draw_panels_dxf(layouts, thickness, dxf_path, material=material.name if material else config.material)

    panels = _panel_report(layouts, thickness, material.density if material else None)
    masses = [p["mass_g"] for p in panels if p["mass_g"] is not None]
    solid = case.solid
    report = {
        "run_id": run_id,
        "configuration": config.to_dict(),
        "material": {
            "key": config.material,
            "name": material.name if material else None,
            "thickness_mm": thickness,
            "density_g_cm3": material.density if material else None,
            "appearance": material_appearance(config.material, catalog),
        },
        "panels": panels,
        "estimated_mass_g": round(sum(masses), 1) if len(masses) == len(panels) else None,
        "mesh": {
            "faces": int(len(solid.faces)),
            "vertices": int(len(solid.vertices)),
            "watertight": bool(solid.is_watertight),
            "bounds_mm": solid.bounds.tolist() if len(solid.faces) else None,
        },
        "anchor_count": len(case.anchors),
        "warnings": warnings,
    }
    report_path = os.path.join(out_dir, "report.json")
    write_json(report_path, report)

    outputs = {
        "run_id": run_id,
        "stl": stl_path,
        "anchors": anchors_path,
        "dxf": dxf_path,
        "report": report_path,
    }
    if include_mesh:
        mesh_path = os.path.join(out_dir, "mesh.json")
        write_json(mesh_path, to_buffer_data(case))
        outputs["mesh"] = mesh_path

    logger.info("Pipeline %s finished: %s", run_id, out_dir)
    return outputs
