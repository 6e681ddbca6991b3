import os
import tempfile
import unittest

import ezdxf
import trimesh

from casegen.config import CaseConfiguration
from casegen.pipeline import run_case_pipeline
from casegen.utils import read_json


class PipelineTests(unittest.TestCase):
    def test_case_1_solid_box(self):
        with tempfile.TemporaryDirectory() as tmp:
            out_dir = os.path.join(tmp, "out1")
            config = CaseConfiguration(width=60, height=80, depth=70)
            outputs = run_case_pipeline(config, out_dir)

            for key in ("stl", "anchors", "dxf", "report"):
                self.assertTrue(os.path.exists(outputs[key]))
            self.assertNotIn("mesh", outputs)

            mesh = trimesh.load(outputs["stl"])
            self.assertTrue(mesh.is_watertight)

            anchors = read_json(outputs["anchors"])["anchors"]
            self.assertEqual(anchors["topPanelCenter"], [0.0, 0.0, 40.0])
            self.assertIn("panels.rear.topCenter", anchors)

            report = read_json(outputs["report"])
            self.assertEqual(report["material"]["thickness_mm"], 3.0)
            self.assertEqual(len(report["panels"]), 6)
            self.assertEqual(report["warnings"], [])
            self.assertGreater(report["estimated_mass_g"], 0.0)

    def test_case_2_mesh_front_and_rear_fan(self):
        with tempfile.TemporaryDirectory() as tmp:
            out_dir = os.path.join(tmp, "out2")
            config = CaseConfiguration(
                width=100, height=120, depth=80,
                front_panel="mesh", rear_fan="fan40mm", segments=8,
            )
            outputs = run_case_pipeline(config, out_dir, include_mesh=True)

            report = read_json(outputs["report"])
            panels = {p["name"]: p for p in report["panels"]}
            self.assertGreater(panels["front"]["vents"], 0)
            self.assertEqual(panels["rear"]["holes"], 5)

            doc = ezdxf.readfile(outputs["dxf"])
            layers = {layer.dxf.name for layer in doc.layers}
            self.assertIn("VENTS", layers)

            mesh = read_json(outputs["mesh"])
            self.assertEqual(len(mesh["vertices"]), len(mesh["normals"]))

    def test_case_3_unknown_material(self):
        with tempfile.TemporaryDirectory() as tmp:
            config = CaseConfiguration(width=60, height=80, depth=70, material="unobtainium", panel_thickness=2)
            with self.assertLogs("casegen", level="WARNING"):
                outputs = run_case_pipeline(config, tmp)

            report = read_json(outputs["report"])
            self.assertEqual(report["material"]["thickness_mm"], 2)
            self.assertIsNone(report["estimated_mass_g"])
            self.assertEqual(len(report["warnings"]), 1)


if __name__ == "__main__":
    unittest.main()
