"""Tests for pixel buffers and channel extraction."""

import unittest

import numpy as np
from numpy.testing import assert_array_equal

from PBRBridge.core import (
    ChannelPlanes,
    InvalidBufferError,
    InvalidDimensionsError,
    TextureData,
    combine_channels,
    extract_channels,
    extract_mer_channels,
    extract_normal_channels,
    extract_specular_channels,
    make_planes,
)


def _rgba_2x2():
    # pixel i has channel c = 10 * i + c
    data = [10 * i + c for i in range(4) for c in range(4)]
    return TextureData.from_bytes(2, 2, 4, bytes(data))


class TestTextureData(unittest.TestCase):
    def test_from_bytes_checks_length(self):
        with self.assertRaises(InvalidBufferError):
            TextureData.from_bytes(2, 2, 3, bytes(11))

    def test_zero_dimensions_rejected(self):
        with self.assertRaises(InvalidDimensionsError):
            TextureData(0, 4, 3, np.zeros(0, dtype=np.uint8))

    def test_invalid_dimensions_is_buffer_error(self):
        self.assertTrue(issubclass(InvalidDimensionsError, InvalidBufferError))

    def test_unsupported_channel_count(self):
        with self.assertRaises(InvalidBufferError):
            TextureData(1, 1, 2, np.zeros(2, dtype=np.uint8))

    def test_from_array_and_back(self):
        arr = np.arange(2 * 3 * 3, dtype=np.uint8).reshape(2, 3, 3)
        tex = TextureData.from_array(arr)
        self.assertEqual((tex.width, tex.height, tex.channels), (3, 2, 3))
        assert_array_equal(tex.to_array(), arr)
        self.assertEqual(tex.tobytes(), arr.tobytes())

    def test_from_2d_array_is_single_channel(self):
        tex = TextureData.from_array(np.zeros((4, 5), dtype=np.uint8))
        self.assertEqual(tex.channels, 1)
        self.assertFalse(tex.has_alpha)
        self.assertEqual(tex.pixel_count, 20)


class TestChannelExtraction(unittest.TestCase):
    def test_extract_rgba_planes(self):
        planes = extract_channels(_rgba_2x2())
        assert_array_equal(planes.r, [0, 10, 20, 30])
        assert_array_equal(planes.g, [1, 11, 21, 31])
        assert_array_equal(planes.b, [2, 12, 22, 32])
        assert_array_equal(planes.a, [3, 13, 23, 33])

    def test_extract_rgb_has_no_alpha(self):
        tex = TextureData.from_bytes(1, 2, 3, bytes([1, 2, 3, 4, 5, 6]))
        planes = extract_channels(tex)
        self.assertIsNone(planes.a)
        assert_array_equal(planes.b, [3, 6])

    def test_single_channel_cannot_be_extracted(self):
        tex = TextureData.from_bytes(2, 1, 1, bytes([1, 2]))
        with self.assertRaises(InvalidBufferError):
            extract_channels(tex)

    def test_combine_extract_is_identity(self):
        tex = _rgba_2x2()
        self.assertEqual(combine_channels(extract_channels(tex)), tex)

        rgb = TextureData.from_bytes(2, 1, 3, bytes([9, 8, 7, 6, 5, 4]))
        self.assertEqual(combine_channels(extract_channels(rgb)), rgb)

    def test_reextracting_gives_same_planes(self):
        planes = extract_channels(_rgba_2x2())
        again = extract_channels(combine_channels(planes))
        for name in ("r", "g", "b", "a"):
            assert_array_equal(getattr(again, name), getattr(planes, name))

    def test_planes_are_copies(self):
        tex = _rgba_2x2()
        planes = extract_channels(tex)
        planes.r[0] = 99
        self.assertEqual(int(tex.data[0]), 0)

    def test_combine_rejects_short_plane(self):
        planes = ChannelPlanes(
            r=np.zeros(4, dtype=np.uint8),
            g=np.zeros(3, dtype=np.uint8),
            b=np.zeros(4, dtype=np.uint8),
            width=2, height=2,
        )
        with self.assertRaises(InvalidBufferError):
            combine_channels(planes)

    def test_make_planes_coerces_lists(self):
        planes = make_planes([1, 2], [3, 4], [5, 6], 2, 1, a=[7, 8])
        tex = combine_channels(planes)
        self.assertEqual(tex.tobytes(), bytes([1, 3, 5, 7, 2, 4, 6, 8]))


class TestSemanticViews(unittest.TestCase):
    def test_mer_names(self):
        mer = extract_mer_channels(_rgba_2x2())
        assert_array_equal(mer["metallic"], [0, 10, 20, 30])
        assert_array_equal(mer["emissive"], [1, 11, 21, 31])
        assert_array_equal(mer["roughness"], [2, 12, 22, 32])
        assert_array_equal(mer["subsurface"], [3, 13, 23, 33])

    def test_specular_names(self):
        spec = extract_specular_channels(_rgba_2x2())
        assert_array_equal(spec["smoothness"], [0, 10, 20, 30])
        assert_array_equal(spec["reflectance"], [1, 11, 21, 31])
        assert_array_equal(spec["porosity_or_subsurface"], [2, 12, 22, 32])
        assert_array_equal(spec["emission"], [3, 13, 23, 33])

    def test_normal_names(self):
        normal = extract_normal_channels(_rgba_2x2())
        assert_array_equal(normal["x"], [0, 10, 20, 30])
        assert_array_equal(normal["y"], [1, 11, 21, 31])
        assert_array_equal(normal["ambient_occlusion"], [2, 12, 22, 32])
        assert_array_equal(normal["height"], [3, 13, 23, 33])

    def test_plane_properties_alias_rgba(self):
        planes = extract_channels(_rgba_2x2())
        self.assertIs(planes.metallic, planes.r)
        self.assertIs(planes.reflectance, planes.g)
        self.assertIs(planes.ambient_occlusion, planes.b)
        self.assertIs(planes.height_plane, planes.a)
        self.assertEqual(planes.pixel_count, 4)


if __name__ == "__main__":
    unittest.main(verbosity=2)
