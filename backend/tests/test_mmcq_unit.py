"""
Unit tests for the MMCQ quantization core.

Covers histogram construction, box statistics, the median cut splitter,
the two-phase refinement loop and palette ordering.
"""
import numpy as np
import pytest

from chromacut.services.colors.mmcq import (
    BLUE, GREEN, MAX_ITERATIONS, RED,
    Histogram, VBox, VBoxCutError,
    build_color_map, get_color_index, iterate, median_cut_apply, quantize
)


def _assert_close(color, expected, tolerance=4):
    for channel, target in zip(color, expected):
        assert abs(channel - target) <= tolerance, f"{color} != {expected}"


class TestQuantizeNoResult:
    """Inputs that have no defined palette"""

    def test_empty_samples(self):
        assert quantize([], 5) is None
        assert quantize(np.empty((0, 3), dtype=np.uint8), 5) is None

    @pytest.mark.parametrize("max_colors", [-1, 0, 1, 257, 300])
    def test_color_count_out_of_range(self, max_colors):
        assert quantize([(10, 20, 30)] * 10, max_colors) is None

    def test_range_limits_accepted(self):
        samples = [(10, 20, 30), (200, 100, 50)]
        assert quantize(samples, 2)
        assert quantize(samples, 256)

    def test_malformed_samples_raise(self):
        with pytest.raises(ValueError):
            quantize([(10, 20)], 5)
        with pytest.raises(ValueError):
            quantize([(10, 20, 300)], 5)


class TestQuantizePalette:
    """Palette size, values and ordering"""

    @pytest.fixture
    def random_samples(self):
        rng = np.random.default_rng(42)
        return rng.integers(0, 256, size=(5000, 3), dtype=np.int64)

    @pytest.mark.parametrize("max_colors", [2, 3, 5, 8, 16, 64, 256])
    def test_palette_size_bounded(self, random_samples, max_colors):
        palette = quantize(random_samples, max_colors)
        assert palette
        assert len(palette) <= max_colors
        for color in palette:
            assert len(color) == 3
            assert all(0 <= c <= 255 for c in color)

    def test_random_samples_fill_small_palette(self, random_samples):
        assert len(quantize(random_samples, 8)) == 8

    def test_uniform_color_single_entry(self):
        palette = quantize([(200, 100, 50)] * 100, 6)
        assert palette == [(204, 100, 52)]
        _assert_close(palette[0], (200, 100, 50))

    @pytest.mark.parametrize("color", [(0, 0, 0), (255, 255, 255), (17, 130, 249)])
    def test_uniform_color_within_quantization(self, color):
        palette = quantize([color] * 3, 2)
        assert len(palette) == 1
        _assert_close(palette[0], color)

    def test_red_and_blue(self):
        palette = quantize([(255, 0, 0), (0, 0, 255)], 2)
        assert palette == [(252, 4, 4), (4, 4, 252)]

    def test_dominant_color_first(self):
        samples = [(0, 128, 0)] * 90 + [(255, 255, 0)] * 10
        palette = quantize(samples, 2)
        assert len(palette) == 2
        _assert_close(palette[0], (0, 128, 0))
        _assert_close(palette[1], (255, 255, 0))

    def test_color_map_matches_palette(self):
        samples = [(255, 0, 0), (0, 0, 255)]
        color_map = build_color_map(samples, 2)
        assert len(color_map) == 2
        assert color_map.palette() == quantize(samples, 2)


class TestHistogram:
    """Histogram construction"""

    def test_total_equals_sample_count(self):
        rng = np.random.default_rng(7)
        samples = rng.integers(0, 256, size=(1234, 3))
        histogram, vbox = Histogram.from_pixels(samples)
        assert histogram.total == 1234
        assert vbox.count() == 1234

    def test_packed_index(self):
        histogram, _ = Histogram.from_pixels([(200, 100, 50)] * 4 + [(0, 0, 0)])
        assert histogram[get_color_index(25, 12, 6)] == 4
        assert histogram[get_color_index(0, 0, 0)] == 1
        assert get_color_index(1, 0, 0) == 1024
        assert get_color_index(0, 1, 0) == 32

    def test_initial_box_bounds(self):
        _, vbox = Histogram.from_pixels([(8, 255, 16), (64, 0, 16)])
        assert (vbox.r1, vbox.r2) == (1, 8)
        assert (vbox.g1, vbox.g2) == (0, 31)
        assert (vbox.b1, vbox.b2) == (2, 2)

    def test_histogram_is_read_only(self):
        histogram, _ = Histogram.from_pixels([(1, 2, 3)])
        with pytest.raises(ValueError):
            histogram.cells[0, 0, 0] = 5

    def test_empty_samples(self):
        assert Histogram.from_pixels([]) is None


class TestVBox:
    """Box statistics"""

    @pytest.fixture
    def white_histogram(self):
        histogram, _ = Histogram.from_pixels([(255, 255, 255)])
        return histogram

    def test_volume(self, white_histogram):
        assert VBox(0, 31, 0, 31, 0, 31, white_histogram).volume() == 32768
        assert VBox(2, 3, 4, 4, 0, 9, white_histogram).volume() == 20

    def test_count_and_avg(self):
        _, vbox = Histogram.from_pixels([(0, 0, 0), (255, 255, 255)])
        assert vbox.count() == 2
        assert vbox.volume() == 32768
        assert vbox.avg() == (128, 128, 128)

    def test_empty_box_avg_is_midpoint(self, white_histogram):
        vbox = VBox(2, 3, 4, 5, 0, 0, white_histogram)
        assert vbox.count() == 0
        assert vbox.avg() == (24, 40, 4)

    def test_count_is_cached(self, white_histogram):
        vbox = VBox(31, 31, 31, 31, 31, 31, white_histogram)
        assert vbox.count() == 1
        vbox.r1 = 0
        assert vbox.count() == 1
        assert vbox.count(force=True) == 1
        assert vbox.volume() == 1
        assert vbox.volume(force=True) == 32

    def test_widest_channel_ties_prefer_red(self, white_histogram):
        assert VBox(0, 5, 0, 5, 0, 5, white_histogram).widest_color_channel() == RED
        assert VBox(0, 5, 0, 3, 0, 5, white_histogram).widest_color_channel() == RED
        assert VBox(0, 3, 0, 5, 0, 5, white_histogram).widest_color_channel() == GREEN
        assert VBox(0, 3, 0, 5, 0, 7, white_histogram).widest_color_channel() == BLUE

    def test_with_bounds_shares_histogram(self, white_histogram):
        vbox = VBox(0, 31, 0, 31, 0, 31, white_histogram)
        child = vbox.with_bounds(GREEN, 4, 9)
        assert (child.g1, child.g2) == (4, 9)
        assert (child.r1, child.r2, child.b1, child.b2) == (0, 31, 0, 31)
        assert child.histogram is white_histogram


class TestMedianCut:
    """Splitter behaviour"""

    def test_red_blue_cut(self):
        _, vbox = Histogram.from_pixels([(255, 0, 0), (0, 0, 255)])
        first, second = median_cut_apply(vbox)
        assert (first.r1, first.r2) == (0, 14)
        assert (second.r1, second.r2) == (15, 31)
        for child in (first, second):
            assert (child.g1, child.g2, child.b1, child.b2) == (0, 0, 0, 31)
            assert child.count() == 1

    def test_children_partition_population(self):
        rng = np.random.default_rng(3)
        _, vbox = Histogram.from_pixels(rng.integers(0, 256, size=(500, 3)))
        children = median_cut_apply(vbox)
        assert len(children) == 2
        assert sum(child.count() for child in children) == 500
        assert all(child.count() > 0 for child in children)

    def test_empty_box_yields_nothing(self):
        histogram, _ = Histogram.from_pixels([(255, 255, 255)])
        assert median_cut_apply(VBox(0, 3, 0, 3, 0, 3, histogram)) == []

    def test_single_sample_returned_unsplit(self):
        _, vbox = Histogram.from_pixels([(12, 34, 56)])
        assert median_cut_apply(vbox) == [vbox]

    def test_single_cell_returned_unsplit(self):
        _, vbox = Histogram.from_pixels([(12, 34, 56)] * 5)
        assert median_cut_apply(vbox) == [vbox]

    def test_population_in_top_slice_returned_unsplit(self):
        histogram, _ = Histogram.from_pixels([(255, 0, 0)] * 4)
        vbox = VBox(20, 31, 0, 0, 0, 0, histogram)
        assert median_cut_apply(vbox) == [vbox]

    def test_uncuttable_box_raises(self, monkeypatch):
        histogram, _ = Histogram.from_pixels([(255, 255, 255)])
        vbox = VBox(0, 3, 0, 3, 0, 3, histogram)
        monkeypatch.setattr(vbox, "count", lambda force=False: 2)
        with pytest.raises(VBoxCutError):
            median_cut_apply(vbox)
        assert issubclass(VBoxCutError, RuntimeError)


class TestIterate:
    """Refinement loop"""

    def test_stops_at_target(self):
        rng = np.random.default_rng(11)
        _, vbox = Histogram.from_pixels(rng.integers(0, 256, size=(800, 3)))
        queue = [vbox]
        iterate(queue, lambda box: box.count(), 6)
        assert len(queue) == 6
        counts = [box.count() for box in queue]
        assert counts == sorted(counts)

    def test_target_already_reached(self):
        _, vbox = Histogram.from_pixels([(255, 0, 0), (0, 0, 255)])
        queue = [vbox]
        assert iterate(queue, lambda box: box.count(), 1) == 0
        assert queue == [vbox]

    def test_empty_boxes_discarded(self):
        histogram, _ = Histogram.from_pixels([(255, 255, 255)])
        queue = [VBox(0, 3, 0, 3, 0, 3, histogram)]
        assert iterate(queue, lambda box: box.count(), 5) == 1
        assert queue == []

    def test_unsplittable_box_ends_phase(self):
        _, vbox = Histogram.from_pixels([(12, 34, 56)] * 5)
        queue = [vbox]
        niters = iterate(queue, lambda box: box.count(), 5)
        assert 1 <= niters < MAX_ITERATIONS
        assert queue == [vbox]
