"""Tests for packaging and pyproject.toml correctness."""

import os
import sys
import unittest

PYPROJECT = os.path.join(os.path.dirname(os.path.dirname(__file__)), "pyproject.toml")


@unittest.skipIf(sys.version_info < (3, 11), "tomllib requires Python 3.11")
class TestPyproject(unittest.TestCase):
    def setUp(self):
        import tomllib
        with open(PYPROJECT, "rb") as f:
            self.data = tomllib.load(f)

    def test_runtime_deps(self):
        deps = " ".join(self.data["project"]["dependencies"])
        for name in ("numpy", "Pillow", "PyYAML", "tqdm"):
            with self.subTest(name=name):
                self.assertIn(name, deps)

    def test_no_heavy_image_stack(self):
        deps = " ".join(self.data["project"]["dependencies"])
        for name in ("opencv", "scipy", "torch", "onnxruntime"):
            with self.subTest(name=name):
                self.assertNotIn(name, deps)

    def test_console_script(self):
        scripts = self.data["project"]["scripts"]
        self.assertEqual(scripts["pbr-bridge"], "PBRBridge.cli:main")

    def test_pytest_in_test_extra(self):
        extra = self.data["project"]["optional-dependencies"]["test"]
        self.assertTrue(any(d.startswith("pytest") for d in extra))


if __name__ == "__main__":
    unittest.main(verbosity=2)
