"""
Greedy proximity clustering.

Single pass, first-fit: each feature joins the first existing cluster whose
nucleus is within tolerance, otherwise it seeds a new cluster.
"""

from __future__ import annotations

from typing import Iterable

import numpy as np

from .models import Cluster, Feature, PointGeometry


def cluster_distance(nucleus: PointGeometry, geometry: PointGeometry) -> float:
    """
    Distance from a cluster nucleus to a feature geometry.

    With elevation the metric is cbrt(dx² + dy² + dz²), not the 3D Euclidean
    distance. The cube root shrinks apparent separation so more 3D points
    merge. Without elevation it is the usual sqrt(dx² + dy²).
    """
    dx = nucleus.x - geometry.x
    dy = nucleus.y - geometry.y

    if geometry.has_z:
        nucleus_z = nucleus.z if nucleus.z is not None else 0.0
        dz = nucleus_z - geometry.z
        return float(np.cbrt(dx * dx + dy * dy + dz * dz))

    return float(np.sqrt(dx * dx + dy * dy))


def cluster_proximity_test(cluster: Cluster, feature: Feature, tolerance: float) -> bool:
    """Check whether a feature is within tolerance of a cluster's nucleus."""
    return cluster_distance(cluster.geometry, feature.geometry) <= tolerance


def create_cluster(feature: Feature, cluster_id: int) -> Cluster:
    """Create a new cluster seeded by a feature."""
    return Cluster(id=cluster_id, geometry=feature.geometry, features=[feature])


def max_cluster_size(clusters: Iterable[Cluster]) -> int:
    """Largest feature count among clusters (0 if there are none)."""
    return max((c.size for c in clusters), default=0)


def assign_features(
    features: Iterable[Feature],
    tolerance: float,
    next_id: int,
) -> tuple[list[Cluster], int, int]:
    """
    Run one clustering pass over features in order.

    Args:
        features: Features in fetch order
        tolerance: Max nucleus distance for a feature to join a cluster
        next_id: First id to issue to a new cluster

    Returns:
        (clusters in creation order, max cluster size, advanced next_id)
    """
    clusters: list[Cluster] = []
    max_size = 0

    for feature in features:
        for cluster in clusters:
            if cluster_proximity_test(cluster, feature, tolerance):
                cluster.add_feature(feature)
                max_size = max(max_size, cluster.size)
                break
        else:
            clusters.append(create_cluster(feature, next_id))
            next_id += 1
            max_size = max(max_size, 1)

    return clusters, max_size, next_id
