# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Median-cut seeding.

Starting from a single box holding every color point, the widest box is
repeatedly split at the population-weighted median of its widest channel
until there are ``base_count`` boxes. Each box then becomes one seed
centroid for refinement.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Sequence

from wallpalette.core.clustering import Centroid, weighted_centroid
from wallpalette.core.sampling import ColorPoint

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ColorBox:
    """A partition of color points with its RGB bounding box."""
    indices: tuple[int, ...]
    r_min: float
    r_max: float
    g_min: float
    g_max: float
    b_min: float
    b_max: float
    population: int

    @classmethod
    def from_indices(
        cls,
        indices: Iterable[int],
        points: Sequence[ColorPoint],
    ) -> ColorBox:
        indices = tuple(indices)
        members = [points[i] for i in indices]
        return cls(
            indices=indices,
            r_min=min(p.r8 for p in members),
            r_max=max(p.r8 for p in members),
            g_min=min(p.g8 for p in members),
            g_max=max(p.g8 for p in members),
            b_min=min(p.b8 for p in members),
            b_max=max(p.b8 for p in members),
            population=sum(p.population for p in members),
        )

    @property
    def ranges(self) -> tuple[float, float, float]:
        return (
            self.r_max - self.r_min,
            self.g_max - self.g_min,
            self.b_max - self.b_min,
        )

    @property
    def range(self) -> float:
        """Widest channel extent."""
        return max(self.ranges)

    @property
    def longest_channel(self) -> int:
        """0 (r), 1 (g) or 2 (b); ties prefer the earlier channel."""
        ranges = self.ranges
        return ranges.index(max(ranges))

    def __len__(self) -> int:
        return len(self.indices)


def _widest_box(boxes: Sequence[ColorBox]) -> int:
    """Index of the box to split: widest, then most populated, then oldest."""
    return max(
        range(len(boxes)),
        key=lambda i: (boxes[i].range, boxes[i].population, -i),
    )


def split_boxes(
    points: Sequence[ColorPoint],
    base_count: int,
) -> list[ColorBox]:
    """
    Median-cut the points into at most ``base_count`` boxes.

    Splitting stops when enough boxes exist, when the widest box holds a
    single point, or when a box cannot be split at all: if both the
    weighted median and the half-length index would leave one side empty,
    the whole loop ends rather than trying another box.

    Returns:
        Boxes in creation order (unsplit boxes first, newest halves last).
        Empty when there are no points.
    """
    if not points:
        return []

    boxes = [ColorBox.from_indices(range(len(points)), points)]

    while len(boxes) < base_count:
        box_index = _widest_box(boxes)
        box = boxes[box_index]
        if len(box) <= 1:
            break

        channel = box.longest_channel
        ordered = sorted(box.indices, key=lambda i: points[i].rgb8[channel])

        split_index = 0
        cumulative = 0
        for position, idx in enumerate(ordered):
            cumulative += points[idx].population
            if cumulative * 2 >= box.population:
                split_index = position + 1
                break

        if split_index <= 0 or split_index >= len(ordered):
            split_index = len(ordered) // 2
            if split_index == 0 or split_index == len(ordered):
                break

        del boxes[box_index]
        boxes.append(ColorBox.from_indices(ordered[:split_index], points))
        boxes.append(ColorBox.from_indices(ordered[split_index:], points))

    logger.debug("Median cut produced %d boxes from %d points", len(boxes), len(points))
    return boxes


def box_centroid(box: ColorBox, points: Sequence[ColorPoint]) -> Centroid:
    """Population-weighted mean color of a box."""
    return weighted_centroid(points, box.indices)


def seed_centroids(
    points: Sequence[ColorPoint],
    base_count: int,
) -> list[Centroid]:
    """Median-cut the points and reduce every box to its centroid."""
    return [box_centroid(box, points) for box in split_boxes(points, base_count)]
