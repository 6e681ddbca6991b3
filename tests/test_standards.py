import json
import os
import tempfile
import threading
import time
import unittest
from unittest import mock

from casegen.errors import UnknownFan, UnknownFormFactor, UnknownMaterial
from casegen.standards import FormFactor, StandardsCatalog, get_catalog, reload_catalog
from casegen.standards import catalog as catalog_module


class CatalogTests(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.catalog = StandardsCatalog()
        cls.catalog.load()

    def test_atx(self):
        atx = self.catalog.lookup_form_factor("ATX")
        self.assertEqual((atx.width, atx.height), (305.0, 244.0))
        self.assertEqual(len(atx.mounting_holes), 9)
        self.assertIs(atx.key, FormFactor.ATX)

    def test_all_form_factors(self):
        keys = {spec.key.value for spec in self.catalog.form_factors()}
        self.assertEqual(keys, {"ATX", "microATX", "miniITX"})
        self.assertEqual(len(self.catalog.lookup_form_factor(FormFactor.MINI_ITX).mounting_holes), 4)

    def test_unknown_form_factor(self):
        self.assertIsNone(self.catalog.get_form_factor("XL-ATX"))
        with self.assertRaises(UnknownFormFactor) as ctx:
            self.catalog.lookup_form_factor("XL-ATX")
        self.assertEqual(ctx.exception.key, "XL-ATX")
        self.assertIn("ATX", ctx.exception.available)
        with self.assertRaises(LookupError):
            FormFactor.parse("XL-ATX")

    def test_materials(self):
        acrylic = self.catalog.lookup_material("acrylic3mm")
        self.assertEqual(acrylic.thickness, 3.0)
        self.assertTrue(acrylic.appearance.transparent)
        self.assertFalse(self.catalog.lookup_material("aluminum5mm").appearance.transparent)
        self.assertIsNone(self.catalog.get_material("unobtainium"))
        with self.assertRaises(UnknownMaterial):
            self.catalog.lookup_material("unobtainium")

    def test_fans(self):
        fan = self.catalog.lookup_fan("fan120mm")
        self.assertEqual(fan.mounting_hole_distance, 105.0)
        with self.assertRaises(UnknownFan):
            self.catalog.lookup_fan("fan999mm")

    def test_summary(self):
        text = self.catalog.summary()
        self.assertIn("ATX", text)
        self.assertIn("fan120mm", text)

    def test_global_catalog_is_shared(self):
        self.assertIs(get_catalog(), get_catalog())


class GlobalCatalogTests(unittest.TestCase):
    def setUp(self):
        self._saved = catalog_module._catalog
        catalog_module._catalog = None

    def tearDown(self):
        catalog_module._catalog = self._saved

    def test_cold_cache_from_two_threads(self):
        original_read = StandardsCatalog._read

        def slow_read(catalog, filename):
            time.sleep(0.05)
            return original_read(catalog, filename)

        errors = []
        results = []

        def worker():
            try:
                catalog = get_catalog()
                results.append(catalog)
                catalog.lookup_form_factor("ATX")
            except Exception as exc:
                errors.append(exc)

        with mock.patch.object(StandardsCatalog, "_read", slow_read):
            threads = [threading.Thread(target=worker) for _ in range(2)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        self.assertEqual(errors, [])
        self.assertEqual(len(results), 2)
        self.assertIs(results[0], results[1])

    def test_reload_replaces_instance(self):
        first = get_catalog()
        second = reload_catalog()
        self.assertIsNot(first, second)
        self.assertIs(get_catalog(), second)
        self.assertEqual(second.lookup_form_factor("ATX").width, 305.0)


class CatalogDataDirTests(unittest.TestCase):
    def test_broken_records_are_skipped(self):
        with tempfile.TemporaryDirectory() as tmp:
            with open(os.path.join(tmp, "motherboards.json"), "w", encoding="utf-8") as f:
                json.dump({
                    "miniITX": {
                        "width": 170, "height": 170, "thickness": 1.6,
                        "mounting_holes": [[6.35, 10.16]],
                        "io_shield_width": 158.75, "io_shield_height": 44.45,
                    },
                    "XL-ATX": {"width": 345},
                    "ATX": {"width": 305},
                }, f)
            catalog = StandardsCatalog(tmp)
            with self.assertLogs("casegen", level="WARNING"):
                catalog.load()
            self.assertEqual([s.key for s in catalog.form_factors()], [FormFactor.MINI_ITX])
            # 存在しないファイルは空として扱う
            self.assertEqual(catalog.materials(), [])
            self.assertEqual(catalog.fans(), [])


if __name__ == "__main__":
    unittest.main()
