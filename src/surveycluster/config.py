"""
Configuration for survey feature clustering.
"""

import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Any, Optional, Union

import yaml

__all__ = [
    "ClusterConfig",
    "ClusterConfigError",
    "DEFAULT_TOLERANCE",
    "load_config",
    "load_token",
]

DEFAULT_TOLERANCE = 10.0

# camelCase option names accepted alongside the field names
_OPTION_ALIASES = {
    "url": "source_location",
    "sourceLocation": "source_location",
    "spatialReference": "spatial_reference",
    "useZ": "use_z",
}


class ClusterConfigError(ValueError):
    """Raised when clustering is attempted without a source or spatial reference."""
    pass


def load_token() -> Optional[str]:
    """Load feature service token from environment or .env file, if any."""
    token = os.environ.get("FEATURE_SERVICE_TOKEN")
    if token:
        return token

    env_path = Path(__file__).parent.parent.parent / ".env"
    if env_path.exists():
        with open(env_path) as f:
            for line in f:
                line = line.strip()
                if line.startswith("FEATURE_SERVICE_TOKEN"):
                    # Handle both KEY:value and KEY=value formats
                    if "=" in line:
                        return line.split("=", 1)[1].strip()
                    elif ":" in line:
                        return line.split(":", 1)[1].strip()
    return None


@dataclass
class ClusterConfig:
    """Configuration for a clustering engine."""

    # Feature source
    source_location: str = ""            # Feature layer URL
    spatial_reference: Any = None        # wkid int or spatial reference dict; opaque
    token: Optional[str] = None
    timeout: float = 30.0                # Seconds per fetch

    # Clustering
    tolerance: float = DEFAULT_TOLERANCE  # Max map units from nucleus
    use_z: bool = False                   # Request and compare elevation

    # Output
    verbose: bool = False

    def is_valid(self) -> bool:
        """Check that a source location and spatial reference are present."""
        return bool(self.source_location) and self.spatial_reference is not None

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict (token excluded)."""
        d = asdict(self)
        d.pop("token", None)
        return d

    @classmethod
    def from_dict(cls, data: dict) -> "ClusterConfig":
        """Create from dict, mapping camelCase option names and dropping unknown keys."""
        valid_keys = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {}
        for k, v in data.items():
            key = _OPTION_ALIASES.get(k, k)
            if key in valid_keys:
                filtered[key] = v

        # Explicit None means "use the default"
        if filtered.get("tolerance") is None:
            filtered.pop("tolerance", None)
        if "use_z" in filtered:
            filtered["use_z"] = bool(filtered["use_z"])
        return cls(**filtered)


def load_config(path: Union[str, Path]) -> ClusterConfig:
    """Load a ClusterConfig from a YAML file."""
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ClusterConfigError(f"Config file {path} must contain a mapping")

    config = ClusterConfig.from_dict(data)
    if config.token is None:
        config.token = load_token()
    return config
