"""Tests for texture load/save."""

import os
import shutil
import tempfile
import unittest

import numpy as np
from numpy.testing import assert_array_equal
from PIL import Image

from PBRBridge.core import (
    EncodeError,
    TextureData,
    TextureNotFoundError,
    UnsupportedFormatError,
    load_texture,
    resolve_format,
    save_texture,
)


class TestLoadTexture(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _path(self, name):
        return os.path.join(self.tmpdir, name)

    def test_rgba_round_trip(self):
        arr = np.arange(2 * 3 * 4, dtype=np.uint8).reshape(2, 3, 4)
        Image.fromarray(arr).save(self._path("t.png"))
        tex = load_texture(self._path("t.png"))
        self.assertEqual((tex.width, tex.height, tex.channels), (3, 2, 4))
        assert_array_equal(tex.to_array(), arr)

    def test_missing_file(self):
        with self.assertRaises(TextureNotFoundError):
            load_texture(self._path("missing.png"))
        self.assertTrue(issubclass(TextureNotFoundError, FileNotFoundError))

    def test_grayscale_promoted_to_rgb(self):
        Image.fromarray(np.full((2, 2), 77, dtype=np.uint8)).save(self._path("g.png"))
        tex = load_texture(self._path("g.png"))
        self.assertEqual(tex.channels, 3)
        self.assertTrue(np.all(tex.data == 77))

    def test_palette_promoted_to_rgba(self):
        img = Image.new("P", (2, 2))
        img.putpalette([10, 20, 30] * 256)
        img.save(self._path("p.png"))
        tex = load_texture(self._path("p.png"))
        self.assertEqual(tex.channels, 4)
        assert_array_equal(tex.to_array()[0, 0], [10, 20, 30, 255])

    def test_16bit_grayscale_scaled(self):
        arr = np.array([[0, 65535]], dtype=np.uint16)
        Image.fromarray(arr).save(self._path("w.png"))
        tex = load_texture(self._path("w.png"))
        self.assertEqual(tex.channels, 3)
        assert_array_equal(tex.to_array()[0, :, 0], [0, 255])

    def test_corrupt_file(self):
        with open(self._path("bad.png"), "wb") as f:
            f.write(b"not an image")
        with self.assertRaises(IOError):
            load_texture(self._path("bad.png"))


class TestSaveTexture(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.tex = TextureData(2, 1, 4, np.array([1, 2, 3, 4, 5, 6, 7, 8], dtype=np.uint8))

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def test_png_round_trip_creates_dirs(self):
        path = os.path.join(self.tmpdir, "a", "b", "t.png")
        self.assertEqual(save_texture(self.tex, path), path)
        self.assertEqual(load_texture(path), self.tex)
        leftovers = [n for n in os.listdir(os.path.dirname(path)) if ".tmp." in n]
        self.assertEqual(leftovers, [])

    def test_single_channel_png(self):
        tex = TextureData(2, 1, 1, np.array([10, 20], dtype=np.uint8))
        path = save_texture(tex, os.path.join(self.tmpdir, "h.png"))
        with Image.open(path) as img:
            self.assertEqual(img.mode, "L")
            assert_array_equal(np.asarray(img).reshape(-1), [10, 20])

    def test_jpg_drops_alpha(self):
        path = save_texture(self.tex, os.path.join(self.tmpdir, "t.jpg"), "jpg", 10)
        with Image.open(path) as img:
            self.assertEqual(img.format, "JPEG")
            self.assertEqual(img.mode, "RGB")

    def test_tga_not_supported(self):
        with self.assertRaises(UnsupportedFormatError) as cm:
            save_texture(self.tex, os.path.join(self.tmpdir, "t.tga"), "tga")
        self.assertIn("TGA format not supported", str(cm.exception))
        self.assertFalse(os.path.exists(os.path.join(self.tmpdir, "t.tga")))

    def test_unknown_format(self):
        with self.assertRaises(UnsupportedFormatError):
            save_texture(self.tex, os.path.join(self.tmpdir, "t.bmp"))

    def test_unwritable_target_raises_encode_error(self):
        target = os.path.join(self.tmpdir, "dir.png")
        os.makedirs(target)
        with self.assertRaises(EncodeError):
            save_texture(self.tex, target)

    def test_resolve_format(self):
        self.assertEqual(resolve_format("x.JPEG"), "jpg")
        self.assertEqual(resolve_format("x.png", "jpg"), "jpg")
        self.assertEqual(resolve_format("noext"), "png")


if __name__ == "__main__":
    unittest.main(verbosity=2)
