"""
Weighted LAB color descriptor from an image color histogram.

Three stages, each a plain function so they can be inspected separately:
    rank_colors -> merge_colors -> build_descriptor

ColorExtractor ties them together for a fixed color count K. It keeps no
per-extraction state, so one instance can be shared freely.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Mapping, Optional

import numpy as np

from ciede2000 import delta_e_2000
from colorspace import packed_to_lab_array
from histogram import histogram_from_image


logger = logging.getLogger(__name__)


# =============================================================================
# Constants
# =============================================================================

DEFAULT_COLOR_COUNT = 8
MERGE_RADIUS = 100.0  # Merge threshold is MERGE_RADIUS / K
MAX_COLOR = 0xFFFFFF

# Rows per block when matching the remaining colors against a full cluster set
MERGE_BLOCK_SIZE = 4096


class ConfigurationError(ValueError):
    """Invalid color count or merge threshold."""


# =============================================================================
# Data
# =============================================================================

@dataclass
class ScoredColor:
    """A histogram color with its significance score."""
    color: int  # Packed 0x00RRGGBB
    count: int  # Pixel count
    score: float
    lab: np.ndarray = field(repr=False)


@dataclass
class Cluster:
    """A representative color and the pixels merged into it."""
    color: int  # Representative packed color, fixed once accepted
    lab: np.ndarray = field(repr=False)
    count: int = 0


# =============================================================================
# Stage 1: Significance ranking
# =============================================================================

def rank_colors(histogram: Mapping[int, int]) -> list[ScoredColor]:
    """
    Order histogram colors by descending perceptual prominence.

    score = max(chroma, 1) * (1 - L / 200) * sqrt(count)

    Equal scores fall back to descending count, then ascending packed value,
    so the result does not depend on the histogram's iteration order.
    Entries with a non-positive count are ignored.

    Raises:
        ValueError: If a key is not a 24-bit packed color
    """
    if not histogram:
        return []

    for key in histogram:
        if isinstance(key, bool) or not isinstance(key, (int, np.integer)) or not 0 <= key <= MAX_COLOR:
            raise ValueError(f"Histogram key is not a 24-bit color: {key!r}")

    colors = np.fromiter(histogram.keys(), dtype=np.int64, count=len(histogram))
    counts = np.fromiter(histogram.values(), dtype=np.int64, count=len(histogram))

    keep = counts > 0
    if not keep.all():
        logger.debug("Ignoring %d histogram entries with non-positive counts", (~keep).sum())
        colors, counts = colors[keep], counts[keep]
    if colors.size == 0:
        return []

    lab = packed_to_lab_array(colors)
    chroma = np.maximum(np.sqrt(lab[:, 1] ** 2 + lab[:, 2] ** 2), 1.0)
    scores = chroma * (1 - lab[:, 0] / 200) * np.sqrt(counts)

    # lexsort: last key is primary
    order = np.lexsort((colors, -counts, -scores))

    return [
        ScoredColor(color=int(colors[i]), count=int(counts[i]), score=float(scores[i]), lab=lab[i])
        for i in order
    ]


# =============================================================================
# Stage 2: Perceptual merge
# =============================================================================

def merge_colors(ranked: list[ScoredColor], limit: int, max_delta: float) -> list[Cluster]:
    """
    Greedily merge ranked colors into at most `limit` clusters.

    Each color joins the first accepted cluster (in acceptance order) whose
    representative is closer than `max_delta` by CIEDE2000. Otherwise it
    becomes a new cluster while there is room, and is dropped once `limit`
    clusters exist. Representatives never move; only counts grow.

    Args:
        ranked: Colors from rank_colors(), most significant first
        limit: Maximum number of clusters
        max_delta: Strict CIEDE2000 merge threshold

    Returns:
        Clusters sorted by count descending, ties in acceptance order
    """
    # Never more clusters than distinct colors
    limit = max(min(limit, len(ranked)), 0)
    clusters: list[Cluster] = []
    cluster_labs = np.empty((limit, 3), dtype=np.float64)

    position = 0
    while position < len(ranked) and len(clusters) < limit:
        item = ranked[position]
        position += 1

        if clusters:
            distances = delta_e_2000(item.lab, cluster_labs[:len(clusters)])
            matches = np.flatnonzero(distances < max_delta)
            if matches.size:
                clusters[matches[0]].count += item.count
                continue

        cluster_labs[len(clusters)] = item.lab
        clusters.append(Cluster(color=item.color, lab=item.lab, count=item.count))

    # The cluster set is now final: the rest either merge or drop
    remaining = ranked[position:] if clusters else []
    dropped = len(ranked) - position - len(remaining)
    for start in range(0, len(remaining), MERGE_BLOCK_SIZE):
        block = remaining[start:start + MERGE_BLOCK_SIZE]
        labs = np.stack([item.lab for item in block])
        counts = np.array([item.count for item in block], dtype=np.int64)

        within = delta_e_2000(labs[:, None, :], cluster_labs[None, :, :]) < max_delta
        matched = within.any(axis=1)
        first = within.argmax(axis=1)

        for index, cluster in enumerate(clusters):
            cluster.count += int(counts[matched & (first == index)].sum())
        dropped += int((~matched).sum())

    logger.debug("Merged %d colors into %d clusters, dropped %d",
                 len(ranked), len(clusters), dropped)

    return sorted(clusters, key=lambda c: c.count, reverse=True)


# =============================================================================
# Stage 3: Descriptor
# =============================================================================

def build_descriptor(clusters: list[Cluster], total_pixels: int, color_count: int) -> list[float]:
    """
    Lay clusters out as (L, a, b, weight) quadruples, zero-padded to 4K.

    Args:
        clusters: Clusters sorted by count descending
        total_pixels: Pixel count of the whole histogram
        color_count: K, the number of quadruples

    Returns:
        List of 4 * color_count floats
    """
    descriptor = [0.0] * (4 * color_count)
    for i, cluster in enumerate(clusters[:color_count]):
        L, a, b = cluster.lab
        descriptor[4 * i:4 * i + 4] = [float(L), float(a), float(b), cluster.count / total_pixels]
    return descriptor


# =============================================================================
# Orchestration
# =============================================================================

def _validate_color_count(color_count) -> int:
    if isinstance(color_count, bool) or not isinstance(color_count, (int, np.integer)):
        raise ConfigurationError(f"Color count must be an integer, got {color_count!r}")
    if color_count < 1:
        raise ConfigurationError(f"Color count must be at least 1, got {color_count}")
    return int(color_count)


def _validate_max_delta(max_delta) -> Optional[float]:
    if max_delta is None:
        return None
    try:
        value = float(max_delta)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Merge threshold must be a number, got {max_delta!r}")
    if not math.isfinite(value) or value <= 0:
        raise ConfigurationError(f"Merge threshold must be positive and finite, got {max_delta!r}")
    return value


class ColorExtractor:
    """Extracts a fixed-length weighted LAB descriptor for K colors."""

    def __init__(self, color_count: int = DEFAULT_COLOR_COUNT, max_delta: Optional[float] = None):
        self._color_count = _validate_color_count(color_count)
        self._max_delta = _validate_max_delta(max_delta)

    @property
    def color_count(self) -> int:
        return self._color_count

    @color_count.setter
    def color_count(self, value: int) -> None:
        self._color_count = _validate_color_count(value)

    @property
    def max_delta(self) -> float:
        """CIEDE2000 merge threshold; 100 / K unless set explicitly."""
        if self._max_delta is None:
            return MERGE_RADIUS / self._color_count
        return self._max_delta

    @property
    def dimensions(self) -> int:
        return self._color_count * 4

    def palette(self, histogram: Mapping[int, int]) -> list[Cluster]:
        """Return the merged clusters, largest first."""
        ranked = rank_colors(histogram)
        return merge_colors(ranked, self._color_count, self.max_delta)

    def extract(self, histogram: Mapping[int, int]) -> list[float]:
        """
        Compute the descriptor for a histogram of packed color -> pixel count.

        An empty histogram gives an all-zero descriptor.
        """
        ranked = rank_colors(histogram)
        total_pixels = sum(item.count for item in ranked)
        logger.debug("Ranked %d colors over %d pixels", len(ranked), total_pixels)

        clusters = merge_colors(ranked, self._color_count, self.max_delta)
        return build_descriptor(clusters, total_pixels, self._color_count)

    def extract_from_image(self, image_path: str) -> list[float]:
        """Decode an image file and compute its descriptor."""
        return self.extract(histogram_from_image(image_path))
