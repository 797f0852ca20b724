# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""Tests for decoding, resizing and bucket sampling."""

import io

import numpy as np
import pytest
from PIL import Image

from wallpalette.core.sampling import (
    GRID_SIZE,
    ColorBucket,
    buckets_to_points,
    fit_size,
    load_rgba,
    resize_to_fit,
    sample_buckets,
)
from wallpalette.core.colorspace import srgb8_to_lab


def _solid_image(r, g, b, height=100, width=100):
    """Create a solid-color RGB image."""
    return np.full((height, width, 3), [r, g, b], dtype=np.uint8)


def _quadrant_image(size=60):
    """Red / green on top, blue / yellow below."""
    img = np.zeros((size, size, 3), dtype=np.uint8)
    half = size // 2
    img[:half, :half] = [255, 0, 0]
    img[:half, half:] = [0, 255, 0]
    img[half:, :half] = [0, 0, 255]
    img[half:, half:] = [255, 255, 0]
    return img


def _png_bytes(pixels):
    buf = io.BytesIO()
    Image.fromarray(pixels).save(buf, format="PNG")
    return buf.getvalue()


class TestLoadRGBA:

    def test_rgb_array_gets_opaque_alpha(self):
        rgba = load_rgba(_solid_image(10, 20, 30, height=4, width=5))
        assert rgba.shape == (4, 5, 4)
        assert np.all(rgba[..., 3] == 255)
        assert tuple(rgba[0, 0, :3]) == (10, 20, 30)

    def test_rgba_array_is_premultiplied(self):
        pixels = np.array([[[255, 0, 0, 128], [200, 100, 50, 0]]], dtype=np.uint8)
        rgba = load_rgba(pixels)
        assert tuple(rgba[0, 0]) == (128, 0, 0, 128)
        assert tuple(rgba[0, 1]) == (0, 0, 0, 0)

    def test_png_bytes(self):
        rgba = load_rgba(_png_bytes(_solid_image(1, 2, 3, height=3, width=7)))
        assert rgba.shape == (3, 7, 4)
        assert tuple(rgba[2, 6]) == (1, 2, 3, 255)

    def test_path(self, tmp_path):
        path = tmp_path / "wall.png"
        path.write_bytes(_png_bytes(_solid_image(9, 9, 9, height=2, width=2)))
        assert load_rgba(path).shape == (2, 2, 4)
        assert load_rgba(str(path)).shape == (2, 2, 4)

    def test_pil_image(self):
        img = Image.new("L", (4, 3), 77)
        rgba = load_rgba(img)
        assert rgba.shape == (3, 4, 4)
        assert tuple(rgba[0, 0]) == (77, 77, 77, 255)

    def test_corrupt_bytes_return_none(self):
        assert load_rgba(b"definitely not an image") is None

    def test_missing_file_returns_none(self, tmp_path):
        assert load_rgba(tmp_path / "missing.png") is None

    def test_oversized_image_returns_none(self, monkeypatch):
        # Pillow refuses images over twice MAX_IMAGE_PIXELS
        monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 100)
        assert load_rgba(_png_bytes(_solid_image(1, 2, 3, height=40, width=40))) is None

    def test_invalid_type_raises(self):
        with pytest.raises(TypeError, match="Expected file path"):
            load_rgba(42)

    def test_invalid_shape_raises(self):
        with pytest.raises(ValueError, match="Expected .*H, W, 3"):
            load_rgba(np.zeros((10, 10), dtype=np.uint8))

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Expected uint8"):
            load_rgba(np.zeros((10, 10, 3), dtype=np.float32))


class TestResize:

    def test_fit_size_landscape(self):
        assert fit_size(1000, 500, 500) == (500, 250)

    def test_fit_size_never_upscales(self):
        assert fit_size(40, 30, 500) == (40, 30)

    def test_fit_size_min_one_pixel(self):
        assert fit_size(1000, 1, 64) == (64, 1)

    def test_resize_noop_when_small(self):
        pixels = load_rgba(_solid_image(5, 5, 5, height=10, width=20))
        assert resize_to_fit(pixels, 500) is pixels

    def test_resize_downscales_preserving_aspect(self):
        pixels = load_rgba(_solid_image(5, 5, 5, height=300, width=1200))
        out = resize_to_fit(pixels, 500)
        assert out.shape == (125, 500, 4)

    def test_premultiplied_pixels_are_not_premultiplied_again(self):
        rgba = np.zeros((200, 200, 4), dtype=np.uint8)
        rgba[::2] = [255, 0, 0, 255]
        pixels = load_rgba(rgba)

        out = resize_to_fit(pixels, 100)
        assert out.shape == (100, 100, 4)
        # Each output pixel averages one red and one transparent (black) row
        center = out[10:-10, 10:-10].astype(int)
        assert np.all((center[..., 0] >= 110) & (center[..., 0] <= 145))
        assert np.all((center[..., 3] >= 110) & (center[..., 3] <= 145))
        assert np.all(center[..., 1:3] == 0)

    def test_zero_area_passthrough(self):
        pixels = np.zeros((0, 10, 4), dtype=np.uint8)
        assert resize_to_fit(pixels, 64, always=True).shape == (0, 10, 4)


class TestSampleBuckets:

    def test_solid_image_single_bucket(self):
        buckets = sample_buckets(load_rgba(_solid_image(200, 100, 50)))
        assert len(buckets) == 1
        (bucket,) = buckets.values()
        assert bucket.count == 100 * 100
        assert bucket.mean_rgb8 == (200.0, 100.0, 50.0)
        assert bucket.cells == frozenset(range(GRID_SIZE * GRID_SIZE))

    def test_key_packing(self):
        buckets = sample_buckets(load_rgba(_quadrant_image()), bucket_bits=4)
        # r, g, b each reduced to 4 bits and concatenated
        assert sorted(buckets) == [0x00F, 0x0F0, 0xF00, 0xFF0]

    def test_keys_ascending(self):
        buckets = sample_buckets(load_rgba(_quadrant_image()), bucket_bits=4)
        assert list(buckets) == sorted(buckets)

    def test_key_packing_two_bits(self):
        buckets = sample_buckets(load_rgba(_solid_image(255, 128, 64)), bucket_bits=2)
        assert list(buckets) == [(3 << 4) | (2 << 2) | 1]

    def test_spatial_cells(self):
        buckets = sample_buckets(load_rgba(_quadrant_image(60)), bucket_bits=4)
        red = buckets[0xF00]
        assert red.cells == frozenset({0, 1, 2, 6, 7, 8, 12, 13, 14})
        yellow = buckets[0xFF0]
        assert yellow.cells == frozenset({21, 22, 23, 27, 28, 29, 33, 34, 35})

    def test_stride_sampling(self):
        pixels = load_rgba(_solid_image(0, 0, 0, height=100, width=100))
        buckets = sample_buckets(pixels, max_sample_pixels=2500)
        # step = 10000 // 2500 = 4: columns 0, 4, ..., 96 in every row
        assert buckets[0].count == 25 * 100

    def test_stride_takes_every_row(self):
        img = np.zeros((4, 8, 3), dtype=np.uint8)
        img[:, 0] = [255, 255, 255]  # first column is sampled in every row
        buckets = sample_buckets(load_rgba(img), max_sample_pixels=8)
        assert buckets[0xFFF].count == 4
        assert buckets[0].count == 4

    def test_channel_sums_use_original_values(self):
        img = np.zeros((1, 2, 3), dtype=np.uint8)
        img[0, 0] = [16, 16, 16]
        img[0, 1] = [31, 31, 31]  # same 4-bit bucket
        buckets = sample_buckets(load_rgba(img), bucket_bits=4)
        assert len(buckets) == 1
        assert buckets[0x111].r_sum == 47
        assert buckets[0x111].mean_rgb8 == (23.5, 23.5, 23.5)

    def test_zero_area_is_empty(self):
        assert sample_buckets(np.zeros((0, 0, 4), dtype=np.uint8)) == {}


class TestBucketsToPoints:

    def test_points_carry_exact_lab(self):
        buckets = sample_buckets(load_rgba(_quadrant_image()))
        points = buckets_to_points(buckets)
        assert len(points) == 4
        for point in points:
            np.testing.assert_allclose(point.lab, srgb8_to_lab(point.rgb8), atol=1e-12)

    def test_zero_count_buckets_skipped(self):
        buckets = {
            1: ColorBucket(key=1, count=0, r_sum=0, g_sum=0, b_sum=0, cells=frozenset()),
            2: ColorBucket(key=2, count=2, r_sum=20, g_sum=40, b_sum=60, cells=frozenset({0})),
        }
        points = buckets_to_points(buckets)
        assert len(points) == 1
        assert points[0].rgb8 == (10.0, 20.0, 30.0)
        assert points[0].population == 2

    def test_empty(self):
        assert buckets_to_points({}) == []
