import os
import tempfile
import unittest

import ezdxf

from casegen.cad import kernel
from casegen.cad.assemblies import case_panel_layouts
from casegen.config import CaseConfiguration
from casegen.export import (
    draw_panels_dxf,
    export_stl,
    material_appearance,
    panel_area_mm2,
    panel_mass_g,
    panel_profile,
    to_buffer_data,
)
from casegen.standards import get_catalog


class MeshBufferTests(unittest.TestCase):
    def test_box_buffer(self):
        data = to_buffer_data(kernel.box((2, 2, 2)))
        self.assertEqual(len(data["vertices"]), 12 * 9)
        self.assertEqual(len(data["normals"]), 12 * 9)
        self.assertEqual(data["indices"], list(range(36)))
        for i in range(0, len(data["normals"]), 3):
            n = data["normals"][i:i + 3]
            self.assertAlmostEqual(sum(c * c for c in n), 1.0)

    def test_empty_buffer(self):
        self.assertEqual(to_buffer_data(kernel.empty()), {"vertices": [], "normals": [], "indices": []})

    def test_material_appearance(self):
        acrylic = material_appearance("acrylic3mm")
        self.assertTrue(acrylic["transparent"])
        self.assertEqual(acrylic["opacity"], 0.7)
        aluminum = material_appearance("aluminum3mm")
        self.assertFalse(aluminum["transparent"])
        self.assertEqual(material_appearance("unobtainium")["opacity"], 1.0)


class StlTests(unittest.TestCase):
    def test_binary_stl(self):
        data = export_stl(kernel.box((2, 2, 2)))
        self.assertEqual(len(data), 84 + 50 * 12)

    def test_ascii_stl_to_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "box.stl")
            data = export_stl(kernel.box((2, 2, 2)), path, binary=False)
            self.assertTrue(data.startswith(b"solid"))
            with open(path, "rb") as f:
                self.assertEqual(f.read(), data)


class DrawingTests(unittest.TestCase):
    def setUp(self):
        config = CaseConfiguration(
            width=100, height=120, depth=80,
            front_panel="mesh", side_panel="window", window_ratio=0.5,
        )
        fan = get_catalog().lookup_fan("fan40mm")
        self.layouts = {l.name: l for l in case_panel_layouts(config, fan)}

    def test_solid_profile_area(self):
        top = self.layouts["top"]
        self.assertAlmostEqual(panel_area_mm2(top), 100 * 80)
        self.assertAlmostEqual(panel_mass_g(top, 3.0, 2.7), 100 * 80 * 3.0 / 1000.0 * 2.7)

    def test_window_profile_area(self):
        left = self.layouts["left"]
        self.assertAlmostEqual(panel_profile(left).area, 80 * 120 * (1 - 0.25), places=6)

    def test_holes_reduce_area(self):
        self.assertLess(panel_area_mm2(self.layouts["front"]), 100 * 120)
        self.assertLess(panel_area_mm2(self.layouts["rear"]), 100 * 120)

    def test_dxf_layers(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "panels.dxf")
            draw_panels_dxf(list(self.layouts.values()), 3.0, path, material="Aluminum 3mm")
            doc = ezdxf.readfile(path)
            layers = {layer.dxf.name for layer in doc.layers}
            for name in ("OUTLINE", "HOLES", "VENTS", "CUTOUT", "CENTER", "TEXT"):
                self.assertIn(name, layers)
            msp = doc.modelspace()
            self.assertEqual(len(msp.query('LWPOLYLINE[layer=="OUTLINE"]')), 6)
            self.assertEqual(len(msp.query('LWPOLYLINE[layer=="CUTOUT"]')), 2)
            self.assertEqual(len(msp.query('CIRCLE[layer=="HOLES"]')), 5)


if __name__ == "__main__":
    unittest.main()
