"""
Tests for the Frame Normalizer.

Tests cover:
- Center crop geometry
- Luminance desaturation
- Smoothing pass
- Full normalize pipeline (size, crop symmetry, smoothing, errors)
"""

import io
import unittest

import numpy as np
from PIL import Image

from IE_Libs.ImageEditingLib.errors import DecodeError
from IE_Libs.ImageEditingLib.frame_normalizer import (
    apply_smoothing,
    compute_crop_box,
    desaturate,
    normalize,
)
from IE_Libs.ImageEditingLib.image_codec import to_data_url


def _png(image):
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


def _decode(data):
    return np.array(Image.open(io.BytesIO(data)).convert("RGBA"))


class TestComputeCropBox(unittest.TestCase):
    """Test center crop geometry."""

    def test_matching_aspect_uses_full_source(self):
        self.assertEqual(compute_crop_box(1200, 1600, 600, 800), (0.0, 0.0, 1200.0, 1600.0))

    def test_wider_source_crops_left_and_right(self):
        left, top, right, bottom = compute_crop_box(1600, 1200, 600, 800)

        self.assertAlmostEqual(right - left, 900.0)
        self.assertAlmostEqual(left, 350.0)
        self.assertAlmostEqual(1600 - right, 350.0)
        self.assertEqual((top, bottom), (0.0, 1200.0))

    def test_taller_source_crops_top_and_bottom(self):
        left, top, right, bottom = compute_crop_box(1000, 2000, 600, 800)

        self.assertEqual((left, right), (0.0, 1000.0))
        self.assertAlmostEqual(bottom - top, 1000 / 0.75)
        self.assertAlmostEqual(top, 2000 - bottom)

    def test_crop_aspect_equals_target_aspect(self):
        for source in [(37, 1000), (1000, 37), (640, 480), (1, 1)]:
            left, top, right, bottom = compute_crop_box(*source, 600, 800)
            self.assertAlmostEqual((right - left) / (bottom - top), 0.75)

    def test_invalid_dimensions(self):
        with self.assertRaises(ValueError):
            compute_crop_box(0, 100, 600, 800)
        with self.assertRaises(ValueError):
            compute_crop_box(100, 100, 600, -1)


class TestDesaturate(unittest.TestCase):
    """Test luminance desaturation."""

    def test_primary_colors(self):
        pixels = np.array([[
            [255, 0, 0, 255],
            [0, 255, 0, 255],
            [0, 0, 255, 255],
        ]], dtype=np.uint8)

        result = desaturate(pixels)

        # 76.245, 149.685, 29.07
        self.assertEqual(result[0, :, 0].tolist(), [76, 150, 29])
        self.assertTrue(np.array_equal(result[..., 0], result[..., 1]))
        self.assertTrue(np.array_equal(result[..., 0], result[..., 2]))

    def test_alpha_unchanged(self):
        pixels = np.array([[[10, 200, 30, 17], [90, 90, 90, 0]]], dtype=np.uint8)

        result = desaturate(pixels)

        self.assertEqual(result[..., 3].tolist(), [[17, 0]])

    def test_input_not_modified(self):
        pixels = np.full((2, 2, 4), (200, 10, 10, 255), dtype=np.uint8)
        original = pixels.copy()

        desaturate(pixels)

        self.assertTrue(np.array_equal(pixels, original))

    def test_idempotent(self):
        rng = np.random.default_rng(7)
        pixels = rng.integers(0, 256, size=(32, 24, 4), dtype=np.uint8)

        once = desaturate(pixels)
        twice = desaturate(once)

        self.assertTrue(np.array_equal(once, twice))

    def test_invalid_shape(self):
        with self.assertRaises(ValueError):
            desaturate(np.zeros((4, 4, 3), dtype=np.uint8))


class TestApplySmoothing(unittest.TestCase):
    """Test the smoothing pass."""

    def test_keeps_size_and_mode(self):
        image = Image.new("RGBA", (40, 30), (10, 10, 10, 255))

        result = apply_smoothing(image)

        self.assertEqual(result.size, (40, 30))
        self.assertEqual(result.mode, "RGBA")

    def test_invalid_radius(self):
        image = Image.new("RGBA", (10, 10))
        with self.assertRaises(ValueError):
            apply_smoothing(image, radius=0)
        with self.assertRaises(ValueError):
            apply_smoothing(image, radius=6)

    def test_invalid_input_type(self):
        with self.assertRaises(TypeError):
            apply_smoothing("not_an_image")


class TestNormalize(unittest.TestCase):
    """Test the full normalization pipeline."""

    def test_output_size_for_any_aspect(self):
        sizes = [(1200, 1600), (1600, 1200), (50, 50), (17, 900), (900, 17), (3, 4)]

        for width, height in sizes:
            source = _png(Image.new("RGB", (width, height), "red"))
            result = _decode(normalize(source, 600, 800, False))
            self.assertEqual(result.shape, (800, 600, 4), msg=f"source {width}x{height}")

    def test_custom_target_size(self):
        source = _png(Image.new("RGB", (300, 300), "blue"))

        result = _decode(normalize(source, 90, 120, True))

        self.assertEqual(result.shape, (120, 90, 4))

    def test_output_is_grayscale(self):
        rng = np.random.default_rng(3)
        noise = rng.integers(0, 256, size=(160, 120, 3), dtype=np.uint8)
        source = _png(Image.fromarray(noise))

        result = _decode(normalize(source, 60, 80, False))

        self.assertTrue(np.array_equal(result[..., 0], result[..., 1]))
        self.assertTrue(np.array_equal(result[..., 0], result[..., 2]))

    def test_solid_color_becomes_its_luminance(self):
        source = _png(Image.new("RGB", (400, 300), (200, 100, 50)))

        result = _decode(normalize(source, 60, 80, False))

        # 0.299 * 200 + 0.587 * 100 + 0.114 * 50 = 124.2
        self.assertTrue(np.all(result[..., :3] == 124))
        self.assertTrue(np.all(result[..., 3] == 255))

    def test_alpha_preserved(self):
        source = _png(Image.new("RGBA", (120, 160), (255, 255, 255, 128)))

        result = _decode(normalize(source, 30, 40, False))

        self.assertTrue(np.all(result[..., 3] == 128))

    def test_matching_aspect_not_cropped_and_not_blurred(self):
        # 1200x1600 source: left half black, right half white
        pixels = np.full((1600, 1200, 3), 255, dtype=np.uint8)
        pixels[:, :600] = 0
        source = _png(Image.fromarray(pixels))

        result = _decode(normalize(source, 600, 800, False))

        self.assertEqual(result.shape, (800, 600, 4))
        self.assertTrue(np.all(result[:, :299, 0] == 0))
        self.assertTrue(np.all(result[:, 301:, 0] == 255))

    def test_smoothing_softens_edges(self):
        pixels = np.full((1600, 1200, 3), 255, dtype=np.uint8)
        pixels[:, :600] = 0
        source = _png(Image.fromarray(pixels))

        sharp = _decode(normalize(source, 600, 800, False))
        smooth = _decode(normalize(source, 600, 800, True))

        self.assertEqual(sharp[400, 298, 0], 0)
        self.assertGreater(smooth[400, 298, 0], 0)
        self.assertLess(smooth[400, 301, 0], 255)
        # Content far from the edge is unchanged
        self.assertEqual(smooth[400, 100, 0], 0)
        self.assertEqual(smooth[400, 500, 0], 255)

    def test_landscape_source_crops_symmetric_margins(self):
        # 1600x1200 source with black 350px margins on both sides
        pixels = np.full((1200, 1600, 3), 255, dtype=np.uint8)
        pixels[:, :350] = 0
        pixels[:, 1250:] = 0
        source = _png(Image.fromarray(pixels))

        result = _decode(normalize(source, 600, 800, False))

        self.assertEqual(result.shape, (800, 600, 4))
        self.assertTrue(np.all(result[:, 2:598, 0] == 255))

    def test_portrait_source_crops_symmetric_margins(self):
        # 600x1600 source cropped to 600x800: 400px bands top and bottom
        pixels = np.full((1600, 600, 3), 255, dtype=np.uint8)
        pixels[:400] = 0
        pixels[1200:] = 0
        source = _png(Image.fromarray(pixels))

        result = _decode(normalize(source, 600, 800, False))

        self.assertTrue(np.all(result[2:798, :, 0] == 255))

    def test_accepts_data_url(self):
        source = to_data_url(_png(Image.new("RGB", (30, 40), "white")))

        result = _decode(normalize(source, 30, 40, False))

        self.assertTrue(np.all(result[..., 0] == 255))

    def test_deterministic(self):
        source = _png(Image.new("RGB", (333, 222), (12, 200, 99)))

        self.assertEqual(normalize(source, 60, 80, True), normalize(source, 60, 80, True))

    def test_corrupt_data_raises_decode_error(self):
        with self.assertRaises(DecodeError):
            normalize(b"definitely not an image", 600, 800, False)

    def test_empty_data_raises_decode_error(self):
        with self.assertRaises(DecodeError):
            normalize(b"", 600, 800, False)

    def test_truncated_png_raises_decode_error(self):
        data = _png(Image.new("RGB", (64, 64), "red"))
        with self.assertRaises(DecodeError):
            normalize(data[: len(data) // 2], 600, 800, False)

    def test_invalid_target_size(self):
        source = _png(Image.new("RGB", (10, 10)))
        with self.assertRaises(ValueError):
            normalize(source, 0, 800, False)


if __name__ == "__main__":
    unittest.main()
