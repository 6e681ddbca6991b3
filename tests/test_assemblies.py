import json
import math
import os
import tempfile
import unittest

import numpy as np

from casegen.cad.anchors import Point3
from casegen.cad.assemblies import (
    FACE_ORDER,
    case_panel_layouts,
    create_case,
    create_motherboard,
    create_motherboard_assembly,
    create_motherboard_standoffs,
    generate_case,
    mounting_hole_positions,
    rear_fan_holes,
    resolve_panel_thickness,
)
from casegen.config import CaseConfiguration, PanelStyle
from casegen.errors import InvalidConfiguration, InvalidDimension, UnknownFan, UnknownFormFactor
from casegen.standards import StandardsCatalog, get_catalog


TINY_BOARD = {
    "miniITX": {
        "name": "tiny",
        "width": 40,
        "height": 30,
        "thickness": 1.6,
        "mounting_holes": [[5, 5], [35, 25]],
        "io_shield_width": 10,
        "io_shield_height": 5,
    }
}


def _tiny_catalog(tmp):
    """小さな基板を1つだけ持つカタログ（材料・ファンは同梱データを使う）。"""
    bundled = StandardsCatalog().data_dir
    for name in ("materials.json", "fans.json"):
        with open(bundled / name, "r", encoding="utf-8") as src:
            data = src.read()
        with open(os.path.join(tmp, name), "w", encoding="utf-8") as dst:
            dst.write(data)
    with open(os.path.join(tmp, "motherboards.json"), "w", encoding="utf-8") as f:
        json.dump(TINY_BOARD, f)
    catalog = StandardsCatalog(tmp)
    catalog.load()
    return catalog


class MotherboardTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.catalog = _tiny_catalog(self._tmp.name)

    def tearDown(self):
        self._tmp.cleanup()

    def test_atx_mounting_holes(self):
        atx = get_catalog().lookup_form_factor("ATX")
        holes = mounting_hole_positions(atx)
        self.assertEqual(len(holes), 9)
        self.assertAlmostEqual(holes[0].x, -152.5 + 6.35)
        self.assertAlmostEqual(holes[0].y, -122.0 + 6.35)

    def test_atx_board_size(self):
        board = create_motherboard("ATX")
        anchors = board.anchors
        self.assertEqual(anchors["rightCenter"].x - anchors["leftCenter"].x, 305.0)
        self.assertEqual(anchors["frontCenter"].y - anchors["backCenter"].y, 244.0)
        extent = board.solid.bounds[1] - board.solid.bounds[0]
        self.assertAlmostEqual(extent[0], 305.0, places=6)
        self.assertAlmostEqual(extent[1], 244.0, places=6)
        standoffs = create_motherboard_standoffs("ATX")
        self.assertEqual(len(standoffs.anchors), 9)

    def test_board_position_and_anchors(self):
        board = create_motherboard("miniITX", position=(0, 0, 0), standoff_height=10, catalog=self.catalog)
        self.assertAlmostEqual(board.anchors["center"].z, 10.8)
        self.assertAlmostEqual(board.anchors["topCenter"].z, 11.6)
        for name in ("cpuSocket", "ramSlots", "pcieSlots", "ioShield"):
            self.assertIn(name, board.anchors)
        self.assertTrue(board.solid.is_watertight)
        # 取付穴と I/O シールドで体積が変わる
        plate = 40 * 30 * 1.6
        self.assertNotAlmostEqual(board.solid.volume, plate, places=1)

    def test_board_without_io_shield(self):
        board = create_motherboard("miniITX", include_io_shield=False, catalog=self.catalog)
        plate = 40 * 30 * 1.6
        self.assertLess(board.solid.volume, plate)
        self.assertGreater(board.solid.volume, plate - 2 * math.pi * 1.75 ** 2 * 1.6 * 1.01)

    def test_unknown_form_factor(self):
        with self.assertRaises(UnknownFormFactor):
            create_motherboard("XL-ATX", catalog=self.catalog)
        with self.assertRaises(UnknownFormFactor):
            create_motherboard("ATX", catalog=self.catalog)

    def test_invalid_standoff_height(self):
        with self.assertRaises(InvalidDimension):
            create_motherboard("miniITX", standoff_height=0, catalog=self.catalog)

    def test_standoffs_follow_hole_order(self):
        standoffs = create_motherboard_standoffs("miniITX", position=(0, 0, 0), standoff_height=10, catalog=self.catalog)
        self.assertEqual(list(standoffs.anchors), ["standoff_0", "standoff_1"])
        self.assertEqual(standoffs.anchors["standoff_0"], Point3(-15, -10, 10))
        self.assertEqual(standoffs.anchors["standoff_1"], Point3(15, 10, 10))
        # 全てのスタンドオフが和に含まれる
        self.assertEqual(standoffs.solid.body_count, 2)

    def test_assembly_nests_standoff_anchors(self):
        assembly = create_motherboard_assembly("miniITX", catalog=self.catalog)
        self.assertIn("standoffs.standoff_1", assembly.anchors)
        self.assertIn("cpuSocket", assembly.anchors)
        board = create_motherboard("miniITX", catalog=self.catalog)
        self.assertGreater(assembly.solid.volume, board.solid.volume)


class CaseAnchorTests(unittest.TestCase):
    def test_reference_case_anchors(self):
        case = create_case(CaseConfiguration(width=300, height=400, depth=350))
        self.assertEqual(case.anchors["topPanelCenter"], Point3(0, 0, 200))
        self.assertEqual(case.anchors["frontPanelCenter"], Point3(0, 175, 0))
        self.assertEqual(case.anchors["topCenter"], case.anchors["topPanelCenter"])
        self.assertEqual(case.anchors["center"], Point3(0, 0, 0))

    def test_panel_anchors_face_outward(self):
        config = CaseConfiguration(width=60, height=80, depth=70, position=(10, 0, 0))
        case = create_case(config)
        top = case.anchors["panels.front.topCenter"]
        # 前面パネルの外側の面は +y、板厚は 3mm
        self.assertAlmostEqual(top.x, 10.0)
        self.assertAlmostEqual(top.y, 36.5)
        self.assertAlmostEqual(case.anchors["panels.left.topCenter"].x, 10.0 - 31.5)
        self.assertAlmostEqual(case.anchors["panels.bottom.topCenter"].z, -41.5)


class CaseGeometryTests(unittest.TestCase):
    def test_single_union_of_all_panels(self):
        case = create_case(CaseConfiguration(width=60, height=80, depth=70))
        self.assertEqual(case.solid.body_count, 1)
        self.assertTrue(case.solid.is_watertight)
        np.testing.assert_allclose(case.solid.bounds, [[-31.5, -36.5, -41.5], [31.5, 36.5, 41.5]], atol=1e-6)

    def test_layouts_follow_face_order(self):
        layouts = case_panel_layouts(CaseConfiguration(width=60, height=80, depth=70))
        self.assertEqual(tuple(l.name for l in layouts), FACE_ORDER)
        for layout in layouts:
            offset = np.asarray(layout.center.as_tuple())
            # 法線は外向き
            self.assertGreater(float(np.dot(layout.normal, offset)), 0.0)

    def test_material_fallback(self):
        config = CaseConfiguration(width=60, height=80, depth=70, material="unobtainium", panel_thickness=4)
        with self.assertLogs("casegen", level="WARNING"):
            self.assertEqual(resolve_panel_thickness(config), 4)
        case = create_case(config)
        self.assertAlmostEqual(case.anchors["panels.top.topCenter"].z, 42.0)

    def test_material_thickness(self):
        config = CaseConfiguration(material="acrylic5mm")
        self.assertEqual(resolve_panel_thickness(config), 5.0)

    def test_unknown_rear_fan(self):
        with self.assertRaises(UnknownFan):
            create_case(CaseConfiguration(width=60, height=80, depth=70, rear_fan="fan999mm"))

    def test_rear_fan_must_fit(self):
        with self.assertRaises(InvalidDimension):
            create_case(CaseConfiguration(width=60, height=80, depth=70, rear_fan="fan120mm"))

    def test_rear_fan_holes(self):
        fan = get_catalog().lookup_fan("fan40mm")
        holes = rear_fan_holes(fan, 100, 120)
        self.assertEqual(len(holes), 5)
        xs = sorted({h.x for h in holes[:4]})
        self.assertAlmostEqual(xs[1] - xs[0], 32.0)
        self.assertAlmostEqual(holes[-1].y, 60.0 - 20.0 - 20.0)

    def test_rear_fan_case(self):
        config = CaseConfiguration(width=100, height=120, depth=80, rear_fan="fan40mm", segments=16)
        case = create_case(config)
        plain = create_case(config.replace(rear_fan=None))
        self.assertLess(case.solid.volume, plain.solid.volume)

    def test_window_side_panels(self):
        config = CaseConfiguration(width=60, height=80, depth=70, side_panel="window", window_ratio=0.5)
        layouts = {l.name: l for l in case_panel_layouts(config)}
        self.assertIs(layouts["left"].style, PanelStyle.WINDOW)
        self.assertEqual(layouts["left"].cutout, (35.0, 40.0))
        self.assertIsNone(layouts["front"].cutout)

    def test_mesh_front_panel(self):
        config = CaseConfiguration(width=60, height=80, depth=70, front_panel="mesh", segments=8)
        layouts = {l.name: l for l in case_panel_layouts(config)}
        self.assertGreater(len(layouts["front"].vents), 0)
        self.assertEqual(layouts["rear"].vents, ())

    def test_rear_window_rejected(self):
        with self.assertRaises(InvalidConfiguration):
            create_case(CaseConfiguration(rear_panel="window"))

    def test_invalid_dimension_before_kernel(self):
        with self.assertRaises(InvalidDimension):
            create_case(CaseConfiguration(width=-1))

    def test_generate_case_accepts_dict(self):
        case = generate_case({"width": 60, "height": 80, "depth": 70})
        self.assertEqual(case.anchors["rightPanelCenter"], Point3(30, 0, 0))


class CaseMotherboardTests(unittest.TestCase):
    def test_motherboard_is_placed_against_rear_panel(self):
        with tempfile.TemporaryDirectory() as tmp:
            catalog = _tiny_catalog(tmp)
            config = CaseConfiguration(width=80, height=100, depth=90, motherboard_form_factor="miniITX")
            case = create_case(config, catalog)

        # 取付面 y = -45 + 1.5 + 20
        mount_y = -23.5
        center = case.anchors["motherboard.center"]
        self.assertAlmostEqual(center.y, mount_y + 10.8)
        self.assertAlmostEqual(center.z, 0.0)
        standoff = case.anchors["motherboard.standoffs.standoff_0"]
        self.assertAlmostEqual(standoff.y, mount_y + 10.0)
        # 基板のローカル y は -z へ回る
        self.assertAlmostEqual(standoff.z, 10.0)
        self.assertAlmostEqual(standoff.x, -15.0)

    def test_unknown_form_factor_aborts(self):
        with self.assertRaises(UnknownFormFactor):
            create_case(CaseConfiguration(width=60, height=80, depth=70, motherboard_form_factor="XL-ATX"))


if __name__ == "__main__":
    unittest.main()
