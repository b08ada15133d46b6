"""
Survey cluster - proximity clustering of survey point features.

Fetches point features from a feature service and groups them into
clusters with stable, never-reused ids.
"""

from .config import ClusterConfig, ClusterConfigError, load_config
from .models import PointGeometry, Feature, Cluster
from .algorithm import (
    cluster_distance,
    cluster_proximity_test,
    assign_features,
    max_cluster_size,
)
from .feature_source import (
    FeatureSource,
    ArcGISFeatureSource,
    FeatureSourceError,
    MalformedResponseError,
)
from .engine import ClusterEngine
from .logger import ClusterLogger
from .summary import (
    SurveyQuestion,
    parse_survey_questions,
    summarize_cluster,
    summarize_clusters,
    size_ratio,
)

__all__ = [
    # Config
    "ClusterConfig",
    "ClusterConfigError",
    "load_config",
    # Models
    "PointGeometry",
    "Feature",
    "Cluster",
    # Algorithm
    "cluster_distance",
    "cluster_proximity_test",
    "assign_features",
    "max_cluster_size",
    # Feature source
    "FeatureSource",
    "ArcGISFeatureSource",
    "FeatureSourceError",
    "MalformedResponseError",
    # Engine
    "ClusterEngine",
    "ClusterLogger",
    # Summary
    "SurveyQuestion",
    "parse_survey_questions",
    "summarize_cluster",
    "summarize_clusters",
    "size_ratio",
]
