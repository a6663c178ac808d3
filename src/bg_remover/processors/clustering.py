"""Greedy color clustering used to summarize sampled border colors."""

from typing import List, Sequence

from ..raster import Color, color_distance

CHECKER_CLUSTER_THRESHOLD = 15


def cluster_colors(samples: Sequence[Color], threshold: int = CHECKER_CLUSTER_THRESHOLD) -> List[Color]:
    """Group sampled colors into representatives in a single pass.

    The first sample always becomes a cluster. Each later sample joins the
    first representative closer than ``threshold`` (L1) and leaves it
    unchanged; otherwise it starts a new cluster. The result depends on
    sample order but is deterministic for a given order.

    Args:
        samples: Colors in sampling order
        threshold: Maximum L1 distance (exclusive) for joining a cluster

    Returns:
        Cluster representatives in the order they were created
    """
    if not samples:
        return []

    clusters = [Color(*samples[0][:3])]

    for sample in samples[1:]:
        if not any(color_distance(sample, cluster) < threshold for cluster in clusters):
            clusters.append(Color(*sample[:3]))

    return clusters
