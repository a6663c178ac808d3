"""Tests for greedy color clustering."""

from bg_remover.processors import CHECKER_CLUSTER_THRESHOLD, cluster_colors
from bg_remover.raster import Color


def test_empty_input():
    assert cluster_colors([], 15) == []


def test_single_sample():
    assert cluster_colors([Color(1, 2, 3)], 15) == [Color(1, 2, 3)]


def test_first_seen_representative_wins():
    """Absorbed samples do not move the representative."""
    samples = [Color(0, 0, 0), Color(10, 0, 0), Color(20, 0, 0)]

    # 10 joins the first cluster; 20 is 20 away from the unchanged representative
    assert cluster_colors(samples, 15) == [Color(0, 0, 0), Color(20, 0, 0)]


def test_order_dependence():
    samples = [Color(10, 0, 0), Color(0, 0, 0), Color(20, 0, 0)]
    assert cluster_colors(samples, 15) == [Color(10, 0, 0)]


def test_threshold_is_exclusive():
    assert len(cluster_colors([Color(0, 0, 0), Color(15, 0, 0)], 15)) == 2
    assert len(cluster_colors([Color(0, 0, 0), Color(14, 0, 0)], 15)) == 1


def test_appending_duplicate_keeps_cluster_count():
    samples = [Color(255, 255, 255), Color(204, 204, 204), Color(250, 250, 250)]
    clusters = cluster_colors(samples, CHECKER_CLUSTER_THRESHOLD)

    assert len(cluster_colors(samples + [clusters[1]], CHECKER_CLUSTER_THRESHOLD)) == len(clusters)


def test_accepts_plain_tuples():
    assert cluster_colors([(1, 1, 1), (200, 200, 200)], 15) == [Color(1, 1, 1), Color(200, 200, 200)]
