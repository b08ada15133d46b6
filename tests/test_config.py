"""
Test clustering configuration.
"""

import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from surveycluster.config import (
    ClusterConfig,
    ClusterConfigError,
    load_config,
    load_token,
)


def test_defaults():
    config = ClusterConfig(source_location="https://example.com/FeatureServer/0", spatial_reference=4326)
    assert config.tolerance == 10
    assert config.use_z is False
    assert config.is_valid()


def test_from_dict_accepts_camel_case_names():
    """url/spatialReference/useZ map onto the Python fields; unknown keys are dropped."""
    config = ClusterConfig.from_dict({
        "url": "https://example.com/FeatureServer/0",
        "spatialReference": {"wkid": 3857},
        "tolerance": 25,
        "useZ": 1,
        "symbol": "pie",
    })
    assert config.source_location == "https://example.com/FeatureServer/0"
    assert config.spatial_reference == {"wkid": 3857}
    assert config.tolerance == 25
    assert config.use_z is True


def test_from_dict_tolerance_none_uses_default():
    assert ClusterConfig.from_dict({"tolerance": None}).tolerance == 10


def test_zero_tolerance_is_kept():
    assert ClusterConfig.from_dict({"tolerance": 0}).tolerance == 0


def test_is_valid_requires_source_and_spatial_reference():
    assert not ClusterConfig().is_valid()
    assert not ClusterConfig(source_location="https://example.com/0").is_valid()
    assert not ClusterConfig(spatial_reference=4326).is_valid()


def test_to_dict_excludes_token():
    config = ClusterConfig(source_location="u", spatial_reference=4326, token="secret")
    d = config.to_dict()
    assert "token" not in d
    assert ClusterConfig.from_dict(d).source_location == "u"


def test_load_config_yaml():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "clusters.yaml"
        path.write_text(
            "url: https://example.com/FeatureServer/0\n"
            "spatialReference:\n"
            "  wkid: 102100\n"
            "tolerance: 50\n"
            "useZ: true\n"
            "token: abc\n"
        )
        config = load_config(path)

    assert config.source_location == "https://example.com/FeatureServer/0"
    assert config.spatial_reference == {"wkid": 102100}
    assert config.tolerance == 50
    assert config.use_z is True
    assert config.token == "abc"


def test_load_config_rejects_non_mapping():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "clusters.yaml"
        path.write_text("- just\n- a list\n")
        with pytest.raises(ClusterConfigError):
            load_config(path)


def test_load_token_from_environment():
    with patch.dict(os.environ, {"FEATURE_SERVICE_TOKEN": "from-env"}):
        assert load_token() == "from-env"
