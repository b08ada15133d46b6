"""
Data models for survey feature clustering.

Defines point geometries, fetched features and the clusters built from them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True)
class PointGeometry:
    """A point in the configured spatial reference."""

    x: float
    y: float
    z: Optional[float] = None
    has_z: bool = False

    def to_dict(self) -> dict:
        d = {"x": self.x, "y": self.y}
        if self.has_z:
            d["z"] = self.z
        return d

    @classmethod
    def from_dict(cls, data: dict) -> PointGeometry:
        """Create from a feature-service geometry, e.g. {"x": 1, "y": 2, "z": 3}."""
        z = data.get("z")
        has_z = bool(data.get("hasZ", z is not None)) and z is not None
        return cls(
            x=float(data["x"]),
            y=float(data["y"]),
            z=float(z) if has_z else None,
            has_z=has_z,
        )


@dataclass(frozen=True)
class Feature:
    """A point feature; attributes are passed through untouched."""

    geometry: PointGeometry
    attributes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "geometry": self.geometry.to_dict(),
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: dict) -> Feature:
        return cls(
            geometry=PointGeometry.from_dict(data["geometry"]),
            attributes=dict(data.get("attributes") or {}),
        )


@dataclass
class Cluster:
    """
    A group of nearby features.

    The nucleus geometry is the seed feature's geometry and never moves as
    further features join; it is not a centroid.
    """

    id: int                      # Unique for the lifetime of the engine
    geometry: PointGeometry      # Nucleus (seed feature geometry)
    features: list[Feature]      # Insertion order = fetch order

    @property
    def size(self) -> int:
        return len(self.features)

    def add_feature(self, feature: Feature) -> None:
        """Append a feature to the cluster."""
        self.features.append(feature)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "geometry": self.geometry.to_dict(),
            "count": self.size,
            "features": [f.to_dict() for f in self.features],
        }
