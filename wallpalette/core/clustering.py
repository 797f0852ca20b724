# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""
Centroid refinement with CIEDE2000.

K-means style: points (weighted by population) are assigned to their
perceptually nearest centroid, then each centroid moves to the weighted
mean RGB of its points. The number of centroids never changes; a centroid
that attracts no points keeps its previous value.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numpy.typing import NDArray

from wallpalette.core.colorspace import ciede2000_batch, srgb8_to_lab
from wallpalette.core.sampling import ColorPoint

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 12
# Largest per-channel move (0-255 scale) still counted as converged
CONVERGENCE_THRESHOLD = 0.5
# Distances closer than this are ties
TIE_EPSILON = 1e-9


@dataclass(frozen=True, slots=True)
class Centroid:
    """
    Population-weighted mean color of one cluster.

    Attributes:
        r8, g8, b8: Mean sRGB on the 0-255 scale (fractional)
        lab: Lab transform of (r8, g8, b8)
        population: Total sampled pixels represented
    """
    r8: float
    g8: float
    b8: float
    lab: tuple[float, float, float]
    population: int

    @property
    def rgb8(self) -> tuple[float, float, float]:
        return self.r8, self.g8, self.b8


def weighted_centroid(
    points: Sequence[ColorPoint],
    indices: Sequence[int],
) -> Centroid:
    """
    Population-weighted mean of the given points.

    If every point has zero population the plain mean is used instead.
    """
    members = [points[i] for i in indices]
    rgb = np.array([p.rgb8 for p in members], dtype=np.float64).reshape(-1, 3)
    weights = np.array([p.population for p in members], dtype=np.float64)

    population = int(weights.sum())
    if population > 0:
        mean = (rgb * weights[:, np.newaxis]).sum(axis=0) / population
    else:
        population = max(1, len(members))
        mean = rgb.sum(axis=0) / population

    return _centroid(mean, population)


def _centroid(mean: NDArray[np.float64], population: int) -> Centroid:
    L, a, b = srgb8_to_lab(mean)
    return Centroid(
        r8=float(mean[0]),
        g8=float(mean[1]),
        b8=float(mean[2]),
        lab=(float(L), float(a), float(b)),
        population=population,
    )


def assign_points(
    point_labs: NDArray[np.float64],
    centroids: Sequence[Centroid],
) -> NDArray[np.int64]:
    """
    Index of the nearest centroid (CIEDE2000) for every point.

    Distances within TIE_EPSILON of the minimum tie; ties go to the centroid
    with the larger population, then to the lower index.

    Args:
        point_labs: (N, 3) Lab values
        centroids: K centroids

    Returns:
        (N,) array of centroid indices
    """
    centroid_labs = np.array([c.lab for c in centroids], dtype=np.float64)
    populations = np.array([c.population for c in centroids], dtype=np.int64)

    # (N, K) distance matrix
    dists = ciede2000_batch(
        point_labs[:, np.newaxis, :],
        centroid_labs[np.newaxis, :, :],
    )
    nearest = dists.min(axis=1, keepdims=True)
    tied = dists <= nearest + TIE_EPSILON

    # argmax picks the lowest index among equal populations
    candidate_pops = np.where(tied, populations[np.newaxis, :], -1)
    return np.argmax(candidate_pops, axis=1)


def refine_centroids(
    points: Sequence[ColorPoint],
    centroids: Sequence[Centroid],
    max_iter: int = MAX_ITERATIONS,
) -> list[Centroid]:
    """
    Iteratively reassign points and recompute centroids.

    Stops after ``max_iter`` rounds, or earlier once no centroid moved more
    than CONVERGENCE_THRESHOLD in any RGB channel.

    Args:
        points: Sampled color points
        centroids: Seed centroids (from median cut)
        max_iter: Maximum iterations

    Returns:
        Refined centroids, same count and order as the seeds
    """
    centroids = list(centroids)
    if not points or not centroids:
        return centroids

    labs = np.array([p.lab for p in points], dtype=np.float64)
    rgb = np.array([p.rgb8 for p in points], dtype=np.float64)
    weights = np.array([p.population for p in points], dtype=np.float64)

    for iteration in range(max_iter):
        labels = assign_points(labs, centroids)

        changed = False
        updated: list[Centroid] = []
        for ci, old in enumerate(centroids):
            mask = labels == ci
            population = int(weights[mask].sum())
            if population == 0:
                updated.append(old)
                continue

            mean = (rgb[mask] * weights[mask, np.newaxis]).sum(axis=0) / population
            centroid = _centroid(mean, population)
            updated.append(centroid)

            moved = np.abs(np.array(old.rgb8) - mean)
            if np.any(moved > CONVERGENCE_THRESHOLD):
                changed = True

        centroids = updated
        if not changed:
            logger.debug("Refinement converged after %d iterations", iteration + 1)
            break

    return centroids
