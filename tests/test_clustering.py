# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""Tests for CIEDE2000 centroid refinement."""

import numpy as np
import pytest

from wallpalette.core.clustering import (
    Centroid,
    assign_points,
    refine_centroids,
    weighted_centroid,
)
from wallpalette.core.colorspace import srgb8_to_lab
from wallpalette.core.sampling import ColorPoint


def _lab(r, g, b):
    L, a, bb = srgb8_to_lab([r, g, b])
    return float(L), float(a), float(bb)


def _point(r, g, b, population=1):
    return ColorPoint(
        r8=float(r), g8=float(g), b8=float(b),
        population=population,
        cells=frozenset({0}),
        lab=_lab(r, g, b),
    )


def _centroid(r, g, b, population=1):
    return Centroid(
        r8=float(r), g8=float(g), b8=float(b),
        lab=_lab(r, g, b),
        population=population,
    )


class TestAssignPoints:

    def test_nearest_centroid(self):
        labs = np.array([_lab(250, 10, 10), _lab(10, 10, 240)])
        labels = assign_points(labs, [_centroid(0, 0, 255), _centroid(255, 0, 0)])
        assert labels.tolist() == [1, 0]

    def test_tie_prefers_larger_population(self):
        labs = np.array([_lab(100, 100, 100)])
        centroids = [_centroid(100, 100, 100, 3), _centroid(100, 100, 100, 7)]
        assert assign_points(labs, centroids).tolist() == [1]

    def test_tie_with_equal_population_prefers_lower_index(self):
        labs = np.array([_lab(100, 100, 100)])
        centroids = [
            _centroid(0, 0, 0, 9),
            _centroid(100, 100, 100, 4),
            _centroid(100, 100, 100, 4),
        ]
        assert assign_points(labs, centroids).tolist() == [1]


class TestWeightedCentroid:

    def test_weighted_mean(self):
        points = [_point(0, 0, 0, 1), _point(200, 100, 40, 3)]
        centroid = weighted_centroid(points, [0, 1])
        assert centroid.rgb8 == pytest.approx((150.0, 75.0, 30.0))
        assert centroid.population == 4

    def test_lab_matches_rgb(self):
        centroid = weighted_centroid([_point(12, 34, 56, 2)], [0])
        assert centroid.lab == pytest.approx(_lab(12, 34, 56))


class TestRefineCentroids:

    def test_count_and_order_preserved(self):
        points = [_point(r, 0, 0, 1) for r in range(0, 256, 32)]
        seeds = [_centroid(0, 0, 0), _centroid(128, 0, 0), _centroid(255, 0, 0)]
        refined = refine_centroids(points, seeds)
        assert len(refined) == 3
        assert refined[0].r8 < refined[1].r8 < refined[2].r8

    def test_moves_to_cluster_mean(self):
        points = [_point(250, 0, 0, 1), _point(240, 0, 0, 1), _point(0, 0, 250, 2)]
        seeds = [_centroid(255, 0, 0), _centroid(0, 0, 255)]
        refined = refine_centroids(points, seeds)
        assert refined[0].rgb8 == pytest.approx((245.0, 0.0, 0.0))
        assert refined[0].population == 2
        assert refined[1].rgb8 == pytest.approx((0.0, 0.0, 250.0))
        assert refined[1].population == 2

    def test_empty_cluster_keeps_previous_value(self):
        points = [_point(255, 0, 0, 5)]
        orphan = _centroid(0, 255, 0, 42)
        refined = refine_centroids(points, [_centroid(250, 0, 0), orphan])
        assert refined[1] == orphan

    def test_stops_after_max_iterations(self, monkeypatch):
        from wallpalette.core import clustering

        calls = []
        original = clustering.assign_points

        def counting(labs, centroids):
            calls.append(1)
            return original(labs, centroids)

        monkeypatch.setattr(clustering, "assign_points", counting)
        points = [_point(r, 255 - r, 0, 1) for r in range(0, 256, 4)]
        seeds = [_centroid(0, 255, 0), _centroid(5, 250, 0)]
        refine_centroids(points, seeds, max_iter=3)
        assert len(calls) <= 3

    def test_converged_seeds_run_once(self, monkeypatch):
        from wallpalette.core import clustering

        calls = []
        original = clustering.assign_points

        def counting(labs, centroids):
            calls.append(1)
            return original(labs, centroids)

        monkeypatch.setattr(clustering, "assign_points", counting)
        points = [_point(255, 0, 0, 3), _point(0, 0, 255, 3)]
        refine_centroids(points, [_centroid(255, 0, 0), _centroid(0, 0, 255)])
        assert len(calls) == 1

    def test_no_points(self):
        seeds = [_centroid(1, 2, 3)]
        assert refine_centroids([], seeds) == seeds
