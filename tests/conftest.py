"""Shared fixtures for clustering tests."""

import pytest

from surveycluster.models import Feature, PointGeometry


def make_feature(x, y, z=None, **attributes):
    """Build a feature; passing z makes it a 3D feature."""
    geometry = PointGeometry(x=x, y=y, z=z, has_z=z is not None)
    return Feature(geometry=geometry, attributes=attributes)


@pytest.fixture
def scenario_features():
    """Features at (0,0), (5,0), (50,0)."""
    return [
        make_feature(0, 0, OBJECTID=1),
        make_feature(5, 0, OBJECTID=2),
        make_feature(50, 0, OBJECTID=3),
    ]
