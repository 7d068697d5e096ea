"""Tests for LabPBR -> MER conversion."""

import os
import shutil
import tempfile
import unittest

import numpy as np
from numpy.testing import assert_array_equal

from PBRBridge.config import ConversionDirection, ConverterConfig
from PBRBridge.core import make_planes
from PBRBridge.phases.bedrock import BedrockConverter, scan_for_subsurface
from helpers import read_texture, write_planes, write_texture


class TestSubsurfaceScan(unittest.TestCase):
    def test_scan(self):
        self.assertFalse(scan_for_subsurface(np.array([0, 10, 64], dtype=np.uint8)))
        self.assertTrue(scan_for_subsurface(np.array([0, 65, 0], dtype=np.uint8)))


class TestCreateMERTexture(unittest.TestCase):
    def setUp(self):
        self.converter = BedrockConverter()

    def test_without_subsurface(self):
        spec = make_planes([255, 0, 128, 200], [0, 230, 150, 60], [0, 10, 64, 30],
                           2, 2, a=[5, 5, 5, 5])
        mer, suffix = self.converter.create_mer_texture(spec)
        self.assertEqual(suffix, "_mer")
        pixels = mer.data.reshape(-1, 4)
        assert_array_equal(pixels[:, 0], [0, 255, 230, 100])
        assert_array_equal(pixels[:, 1], [0, 0, 0, 0])
        assert_array_equal(pixels[:, 2], [0, 255, 127, 55])
        assert_array_equal(pixels[:, 3], [255, 255, 255, 255])

    def test_with_subsurface(self):
        spec = make_planes([0] * 4, [0] * 4, [0, 65, 200, 64], 2, 2)
        mer, suffix = self.converter.create_mer_texture(spec)
        self.assertEqual(suffix, "_mers")
        assert_array_equal(mer.data.reshape(-1, 4)[:, 3], [255, 65, 200, 255])


class TestConvertLabPBRToBedrock(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.base = write_texture(os.path.join(self.tmpdir, "rock.png"),
                                  np.full((2, 2, 3), 200, dtype=np.uint8))
        self.spec = write_planes(
            os.path.join(self.tmpdir, "rock_s.png"), 2, 2,
            [255, 0, 128, 200], [0, 230, 150, 60], [0, 10, 64, 30], [0, 0, 0, 0],
        )
        self.normal = write_planes(
            os.path.join(self.tmpdir, "rock_n.png"), 2, 2,
            [128] * 4, [128] * 4, [0, 255, 255, 0], [10, 20, 30, 40],
        )

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _path(self, name):
        return os.path.join(self.tmpdir, name)

    def test_default_outputs(self):
        result = BedrockConverter().convert_labpbr_to_bedrock(
            self.spec, self.normal, self.base
        )
        self.assertTrue(result.success, result.messages)
        self.assertEqual(result.direction, ConversionDirection.LABPBR_TO_BEDROCK)
        self.assertEqual(result.output_paths, {
            "mer": self._path("rock_mer.png"),
            "bedrock_normal": self._path("rock_normal.png"),
            "height_map": self._path("rock_heightmap.png"),
        })
        self.assertIn("Saved MER texture to: rock_mer.png", result.messages)

        mer = read_texture(self._path("rock_mer.png")).reshape(-1, 4)
        assert_array_equal(mer[:, 0], [0, 255, 230, 100])
        assert_array_equal(mer[:, 3], [255, 255, 255, 255])

        normal = read_texture(self._path("rock_normal.png")).reshape(-1, 3)
        assert_array_equal(normal[:, 2], [180, 180, 180, 180])

        height = read_texture(self._path("rock_heightmap.png")).reshape(-1)
        assert_array_equal(height, [10, 20, 30, 40])

    def test_bake_ao_and_no_height(self):
        config = ConverterConfig()
        config.normal.bake_ao = True
        config.normal.extract_height = False
        out_dir = self._path("out")
        result = BedrockConverter(config).convert_labpbr_to_bedrock(
            self.spec, self.normal, self.base, out_dir
        )
        self.assertTrue(result.success, result.messages)
        self.assertNotIn("height_map", result.output_paths)
        baked_path = result.output_paths["base_color_with_ao"]
        self.assertEqual(baked_path, os.path.join(out_dir, "rock_withAO.png"))
        baked = read_texture(baked_path).reshape(-1, 3)
        assert_array_equal(baked[:, 0], [100, 200, 200, 100])

    def test_subsurface_gives_mers(self):
        write_planes(self.spec, 2, 2, [0] * 4, [0] * 4, [70, 0, 0, 0], [0] * 4)
        result = BedrockConverter().convert_labpbr_to_bedrock(
            self.spec, self.normal, self.base
        )
        self.assertTrue(result.success, result.messages)
        self.assertEqual(result.output_paths["mer"], self._path("rock_mers.png"))
        self.assertIn("Saved MERS texture to: rock_mers.png", result.messages)

    def test_rgb_normal_skips_heightmap(self):
        write_planes(self.normal, 2, 2, [128] * 4, [128] * 4, [255] * 4)
        result = BedrockConverter().convert_labpbr_to_bedrock(
            self.spec, self.normal, self.base
        )
        self.assertTrue(result.success, result.messages)
        self.assertNotIn("height_map", result.output_paths)

    def test_missing_normal_is_reported(self):
        os.remove(self.normal)
        result = BedrockConverter().convert_labpbr_to_bedrock(
            self.spec, self.normal, self.base
        )
        self.assertFalse(result.success)
        self.assertTrue(result.messages[-1].startswith("Error: Texture file not found"))

    def test_refuses_to_overwrite_source(self):
        # A packed texture passed as the specular input would be its own output.
        misnamed = write_planes(self._path("rock_mer.png"), 2, 2,
                                [1] * 4, [2] * 4, [3] * 4, [4] * 4)
        result = BedrockConverter().convert_labpbr_to_bedrock(
            misnamed, self.normal, self.base
        )
        self.assertFalse(result.success)
        self.assertIn("would overwrite source texture", result.messages[-1])
        assert_array_equal(read_texture(misnamed).reshape(-1, 4)[:, 0], [1] * 4)


if __name__ == "__main__":
    unittest.main(verbosity=2)
