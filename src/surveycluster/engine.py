"""
Cluster engine: fetch survey points and group them into clusters.

Holds the latest pass's clusters, the largest cluster size and the cluster
id counter. There is one counter per engine lifetime; ids are never reused,
even across passes.

Overlapping compute_clusters() calls are not serialized. If two calls from
different threads are in flight, whichever finishes last overwrites the
retained clusters; callers that refresh concurrently must guard externally.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Union

from .algorithm import assign_features
from .config import ClusterConfig, ClusterConfigError
from .feature_source import (
    ArcGISFeatureSource,
    FeatureSource,
    FeatureSourceError,
    MalformedResponseError,
)
from .logger import ClusterLogger
from .models import Cluster

RefreshListener = Callable[[list[Cluster]], None]


class ClusterEngine:
    """
    Greedy proximity clustering over a remote point feature layer.

    An engine built without a source location or spatial reference is
    inert: queries return empty defaults and compute_clusters() raises
    ClusterConfigError.
    """

    def __init__(
        self,
        config: Union[ClusterConfig, dict],
        source: Optional[FeatureSource] = None,
        logger: Optional[ClusterLogger] = None,
    ):
        """
        Initialize engine.

        Args:
            config: ClusterConfig or dict of options (url/sourceLocation,
                spatialReference, tolerance, useZ accepted)
            source: Feature source (default: ArcGIS REST query client)
            logger: Optional JSONL event logger
        """
        if isinstance(config, dict):
            config = ClusterConfig.from_dict(config)
        self.config = config
        self.logger = logger

        self._clusters: list[Cluster] = []
        self._max_cluster_size = 0
        self._next_cluster_id = 0
        self._listeners: list[RefreshListener] = []

        self.enabled = config.is_valid()
        self.source: Optional[FeatureSource] = None
        if self.enabled:
            self.source = source or ArcGISFeatureSource(
                token=config.token,
                timeout=config.timeout,
            )

    @property
    def clusters(self) -> list[Cluster]:
        """Clusters from the latest successful pass."""
        return list(self._clusters)

    @property
    def next_cluster_id(self) -> int:
        return self._next_cluster_id

    def compute_clusters(self) -> list[Cluster]:
        """
        Fetch all features and cluster them.

        Returns:
            Clusters in creation order

        Raises:
            ClusterConfigError: Engine is inert (no source or spatial reference)
            FeatureSourceError: Fetch failed or response was malformed;
                previously retained clusters are kept
        """
        if not self.enabled:
            message = "Clustering not configured: source location and spatial reference are required"
            if self.logger:
                self.logger.log_error(message, error_type="config")
            raise ClusterConfigError(message)

        config = self.config
        start = time.perf_counter()
        if self.logger:
            self.logger.log_pass_start(config.source_location, config.tolerance, config.use_z)

        try:
            features = self.source.fetch_all_point_features(
                config.source_location,
                config.spatial_reference,
                config.use_z,
            )
            if features is None:
                raise MalformedResponseError("Feature source returned no feature list")
        except FeatureSourceError as e:
            error_type = "malformed_response" if isinstance(e, MalformedResponseError) else "fetch_failed"
            if self.logger:
                self.logger.log_error(str(e), error_type=error_type, source=config.source_location)
            if config.verbose:
                print(f"  Clustering failed ({error_type}): {e}")
            raise

        clusters, max_size, next_id = assign_features(
            features,
            config.tolerance,
            self._next_cluster_id,
        )

        # Commit only after a complete pass
        self._clusters = clusters
        self._max_cluster_size = max_size
        self._next_cluster_id = next_id

        latency_ms = (time.perf_counter() - start) * 1000
        if self.logger:
            self.logger.log_pass_end(
                num_features=len(features),
                num_clusters=len(clusters),
                max_cluster_size=max_size,
                next_cluster_id=next_id,
                latency_ms=round(latency_ms, 2),
            )
        if config.verbose:
            print(f"  Clustered {len(features)} features into {len(clusters)} clusters "
                  f"(max size {max_size})")

        for listener in list(self._listeners):
            listener(self.clusters)

        return self.clusters

    def find_cluster_by_id(self, cluster_id: int) -> Optional[Cluster]:
        """Return the cluster with this id from the latest pass, or None."""
        for cluster in self._clusters:
            if cluster.id == cluster_id:
                return cluster
        return None

    def current_max_cluster_size(self) -> int:
        """Largest cluster's feature count from the latest pass (0 if none)."""
        return self._max_cluster_size

    def subscribe(self, listener: RefreshListener) -> Callable[[], None]:
        """
        Register a callback invoked with the clusters after each successful pass.

        Returns:
            Function that removes the listener
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def get_status(self) -> dict:
        """Get clustering status summary."""
        if not self.enabled:
            return {"enabled": False}

        return {
            "enabled": True,
            "num_clusters": len(self._clusters),
            "max_cluster_size": self._max_cluster_size,
            "next_cluster_id": self._next_cluster_id,
            "clusters": [
                {
                    "id": c.id,
                    "size": c.size,
                    "x": c.geometry.x,
                    "y": c.geometry.y,
                    "z": c.geometry.z,
                }
                for c in self._clusters
            ],
        }
