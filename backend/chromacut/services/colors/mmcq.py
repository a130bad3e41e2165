"""
Modified median cut quantization (MMCQ).

Partitions the populated part of a 5-bit-per-channel RGB histogram into boxes
by repeated population-weighted median cuts and reports one averaged color per
box, most significant first. Follows the Leptonica MMCQ algorithm as used by
Color Thief.
"""
import math
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from loguru import logger

SIGNAL_BITS = 5
RIGHT_SHIFT = 8 - SIGNAL_BITS
MULTIPLIER = 1 << RIGHT_SHIFT
HISTOGRAM_SIZE = 1 << (3 * SIGNAL_BITS)
VBOX_LENGTH = 1 << SIGNAL_BITS
FRACTION_BY_POPULATION = 0.75
MAX_ITERATIONS = 1000

MIN_COLORS = 2
MAX_COLORS = 256

RED, GREEN, BLUE = 0, 1, 2
AXES = (RED, GREEN, BLUE)

Color = Tuple[int, int, int]


class VBoxCutError(RuntimeError):
    """A populated box offered no coordinate to cut at."""


def get_color_index(r: int, g: int, b: int) -> int:
    """Packed histogram index of a quantized color."""
    return (r << (2 * SIGNAL_BITS)) + (g << SIGNAL_BITS) + b


class Histogram:
    """
    Population counts over the quantized color space.

    Stored as a read-only (32, 32, 32) array indexed [r, g, b], which matches
    the packed layout of get_color_index. One instance is built per
    quantization call and shared by every box derived from it.
    """

    def __init__(self, counts: np.ndarray):
        cells = np.array(counts, dtype=np.int64).reshape(VBOX_LENGTH, VBOX_LENGTH, VBOX_LENGTH)
        cells.setflags(write=False)
        self._cells = cells

    @classmethod
    def from_pixels(cls, pixels) -> Optional[Tuple["Histogram", "VBox"]]:
        """
        Build the histogram and the bounding box of all samples.

        Args:
            pixels: Sequence or (N, 3) array of 8-bit (r, g, b) samples

        Returns:
            (histogram, initial_vbox), or None when there are no samples

        Raises:
            ValueError: If samples are not 8-bit RGB triples
        """
        samples = np.asarray(pixels, dtype=np.int64)
        if samples.size == 0:
            return None
        if samples.ndim != 2 or samples.shape[1] != 3:
            raise ValueError(f"Expected (N, 3) RGB samples, got shape {samples.shape}")
        if samples.min() < 0 or samples.max() > 255:
            raise ValueError("Pixel channels must be in the range 0-255")

        quantized = samples >> RIGHT_SHIFT
        indices = get_color_index(quantized[:, 0], quantized[:, 1], quantized[:, 2])
        histogram = cls(np.bincount(indices, minlength=HISTOGRAM_SIZE))

        lows = quantized.min(axis=0)
        highs = quantized.max(axis=0)
        vbox = VBox(
            int(lows[0]), int(highs[0]),
            int(lows[1]), int(highs[1]),
            int(lows[2]), int(highs[2]),
            histogram,
        )
        return histogram, vbox

    @property
    def cells(self) -> np.ndarray:
        return self._cells

    @property
    def total(self) -> int:
        return int(self._cells.sum())

    def __getitem__(self, index: int) -> int:
        """Count at a packed index."""
        return int(self._cells.reshape(-1)[index])


class VBox:
    """Axis-aligned box over the quantized color space."""

    def __init__(self, r1: int, r2: int, g1: int, g2: int, b1: int, b2: int,
                 histogram: Histogram):
        self.r1 = r1
        self.r2 = r2
        self.g1 = g1
        self.g2 = g2
        self.b1 = b1
        self.b2 = b2
        self.histogram = histogram

        self._volume: Optional[int] = None
        self._count: Optional[int] = None
        self._avg: Optional[Color] = None

    def __repr__(self) -> str:
        return (f"VBox(r={self.r1}..{self.r2}, g={self.g1}..{self.g2}, "
                f"b={self.b1}..{self.b2})")

    def bounds(self, axis: int) -> Tuple[int, int]:
        if axis == RED:
            return self.r1, self.r2
        if axis == GREEN:
            return self.g1, self.g2
        return self.b1, self.b2

    def with_bounds(self, axis: int, low: int, high: int) -> "VBox":
        """New box sharing the histogram, with one axis replaced."""
        r1, r2, g1, g2, b1, b2 = self.r1, self.r2, self.g1, self.g2, self.b1, self.b2
        if axis == RED:
            r1, r2 = low, high
        elif axis == GREEN:
            g1, g2 = low, high
        else:
            b1, b2 = low, high
        return VBox(r1, r2, g1, g2, b1, b2, self.histogram)

    def cells(self) -> np.ndarray:
        """View of the histogram cells inside the box."""
        return self.histogram.cells[
            self.r1:self.r2 + 1,
            self.g1:self.g2 + 1,
            self.b1:self.b2 + 1,
        ]

    def volume(self, force: bool = False) -> int:
        if self._volume is None or force:
            self._volume = (
                (self.r2 - self.r1 + 1)
                * (self.g2 - self.g1 + 1)
                * (self.b2 - self.b1 + 1)
            )
        return self._volume

    def count(self, force: bool = False) -> int:
        if self._count is None or force:
            self._count = int(self.cells().sum())
        return self._count

    def avg(self, force: bool = False) -> Color:
        """
        Population-weighted centroid mapped back to 8-bit space.

        Each populated cell contributes h * (c + 0.5) * MULTIPLIER per channel.
        An empty box reports the midpoint of its bounds instead.
        """
        if self._avg is None or force:
            cells = self.cells()
            ntot = int(cells.sum())
            if ntot > 0:
                sums = []
                for axis in AXES:
                    low, high = self.bounds(axis)
                    others = tuple(a for a in AXES if a != axis)
                    per_slice = cells.sum(axis=others)
                    centers = np.arange(low, high + 1, dtype=np.int64) * MULTIPLIER + MULTIPLIER // 2
                    sums.append(int((per_slice * centers).sum()))
                self._avg = (sums[0] // ntot, sums[1] // ntot, sums[2] // ntot)
            else:
                self._avg = (
                    min(MULTIPLIER * (self.r1 + self.r2 + 1) // 2, 255),
                    min(MULTIPLIER * (self.g1 + self.g2 + 1) // 2, 255),
                    min(MULTIPLIER * (self.b1 + self.b2 + 1) // 2, 255),
                )
        return self._avg

    def widest_color_channel(self) -> int:
        """Axis with the largest extent; ties go to R, then G."""
        widths = (self.r2 - self.r1, self.g2 - self.g1, self.b2 - self.b1)
        return widths.index(max(widths))


class ColorMap:
    """Final boxes in palette order."""

    def __init__(self, vboxes: Optional[Sequence[VBox]] = None):
        self.vboxes: List[VBox] = list(vboxes or [])

    def palette(self) -> List[Color]:
        return [vbox.avg() for vbox in self.vboxes]

    def __len__(self) -> int:
        return len(self.vboxes)


def median_cut_apply(vbox: VBox) -> List[VBox]:
    """
    Split a box at the population-weighted median of its widest axis.

    Returns no boxes for an empty box and the box itself when it cannot be
    divided (a single sample, or all samples in the top slice of the axis).

    Raises:
        VBoxCutError: If no cut coordinate exists for a populated box
    """
    count = vbox.count()
    if count == 0:
        return []
    if count == 1:
        return [vbox]

    axis = vbox.widest_color_channel()
    low, high = vbox.bounds(axis)
    others = tuple(a for a in AXES if a != axis)
    cumulative = np.cumsum(vbox.cells().sum(axis=others)).tolist()
    total = int(cumulative[-1])

    partial_sum = [-1] * VBOX_LENGTH
    look_ahead_sum = [-1] * VBOX_LENGTH
    for offset, running in enumerate(cumulative):
        partial_sum[low + offset] = running
        look_ahead_sum[low + offset] = total - running

    return _do_cut(vbox, axis, partial_sum, look_ahead_sum, total)


def _do_cut(vbox: VBox, axis: int, partial_sum: List[int],
            look_ahead_sum: List[int], total: int) -> List[VBox]:
    low, high = vbox.bounds(axis)

    for i in range(low, high + 1):
        if partial_sum[i] <= total // 2:
            continue

        left = i - low
        right = high - i
        if left <= right:
            d2 = min(high - 1, i + right // 2)
        else:
            d2 = max(low, int(i - 1 - left / 2.0))

        # skip leading empty slices
        while d2 < 0 or partial_sum[d2] <= 0:
            d2 += 1
        # keep the upper child populated
        count2 = look_ahead_sum[d2]
        while count2 == 0 and d2 > 0 and partial_sum[d2 - 1] > 0:
            d2 -= 1
            count2 = look_ahead_sum[d2]

        if d2 >= high:
            logger.debug(f"{vbox!r} has all {total} samples in its top slice, not split")
            return [vbox]

        return [vbox.with_bounds(axis, low, d2), vbox.with_bounds(axis, d2 + 1, high)]

    raise VBoxCutError(f"{vbox!r} with population {total} can't be cut")


def _by_count(vbox: VBox) -> int:
    return vbox.count()


def _by_count_and_volume(vbox: VBox) -> int:
    return vbox.count() * vbox.volume()


def iterate(queue: List[VBox], sort_key: Callable[[VBox], int], target: int) -> int:
    """
    Split the highest-ranked box until the queue holds `target` boxes.

    The queue is kept sorted ascending by `sort_key`, so the tail is the next
    box to split. Bounded by MAX_ITERATIONS.

    Returns:
        Number of iterations used
    """
    niters = 0
    while niters < MAX_ITERATIONS:
        if not queue or len(queue) >= target:
            break

        vbox = queue.pop()
        if vbox.count() == 0:
            queue.sort(key=sort_key)
            niters += 1
            continue

        vboxes = median_cut_apply(vbox)
        queue.extend(vboxes)
        queue.sort(key=sort_key)
        niters += 1

        if len(vboxes) == 1 and vboxes[0] is vbox:
            # same box returns to the tail on every later pass
            break

    return niters


def build_color_map(pixels, max_colors: int) -> Optional[ColorMap]:
    """
    Quantize samples into at most `max_colors` boxes.

    Returns:
        ColorMap ordered most significant first, or None for an empty sample
        set or a color count outside [MIN_COLORS, MAX_COLORS]
    """
    if max_colors < MIN_COLORS or max_colors > MAX_COLORS:
        logger.debug(f"Color count {max_colors} outside [{MIN_COLORS}, {MAX_COLORS}]")
        return None

    built = Histogram.from_pixels(pixels)
    if built is None:
        logger.debug("No samples to quantize")
        return None
    histogram, vbox = built

    queue = [vbox]
    target = math.ceil(FRACTION_BY_POPULATION * max_colors)
    first = iterate(queue, _by_count, target)

    queue.sort(key=_by_count_and_volume)
    second = iterate(queue, _by_count_and_volume, max_colors)

    logger.debug(
        f"MMCQ: {histogram.total} samples -> {len(queue)} boxes "
        f"(iterations {first}+{second}, requested {max_colors})"
    )

    queue.reverse()
    return ColorMap(queue)


def quantize(pixels, max_colors: int) -> Optional[List[Color]]:
    """
    Representative colors of the samples, most significant first.

    Args:
        pixels: Sequence or (N, 3) array of 8-bit (r, g, b) samples
        max_colors: Requested palette size, 2-256

    Returns:
        Up to `max_colors` (r, g, b) tuples, or None when no result is defined
    """
    color_map = build_color_map(pixels, max_colors)
    if color_map is None:
        return None
    return color_map.palette()
