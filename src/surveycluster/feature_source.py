"""
Feature source client for fetching survey points from a feature service.

Fetches every point feature of a layer with abort-on-failure semantics:
any transport or response problem raises FeatureSourceError.
"""

import json
from typing import Any, Optional, Protocol

import requests

from .models import Feature


class FeatureSourceError(Exception):
    """Raised when the feature source cannot be reached or reports an error."""
    pass


class MalformedResponseError(FeatureSourceError):
    """Raised when a fetch succeeds but carries no usable feature list."""
    pass


class FeatureSource(Protocol):
    """Anything that can supply the full point feature set of a layer."""

    def fetch_all_point_features(
        self,
        source_location: str,
        spatial_reference: Any,
        include_z: bool,
    ) -> list[Feature]:
        ...


def _spatial_reference_param(spatial_reference: Any) -> str:
    """Encode a spatial reference as an outSR query parameter."""
    if isinstance(spatial_reference, dict):
        if "wkid" in spatial_reference and len(spatial_reference) == 1:
            return str(spatial_reference["wkid"])
        return json.dumps(spatial_reference)
    return str(spatial_reference)


def parse_features(data: Any) -> list[Feature]:
    """
    Convert a query response body into features.

    Raises:
        MalformedResponseError: No feature list, or a feature without point coordinates
    """
    if not isinstance(data, dict) or not isinstance(data.get("features"), list):
        raise MalformedResponseError("Feature service response has no feature list")

    try:
        return [Feature.from_dict(item) for item in data["features"]]
    except (KeyError, TypeError, ValueError) as e:
        raise MalformedResponseError(f"Feature service response parse error: {e}")


class ArcGISFeatureSource:
    """
    Query all point features from an ArcGIS REST feature layer.

    Equivalent to a query of where=1=1 with all fields and geometry returned
    in the requested spatial reference.
    """

    def __init__(self, token: Optional[str] = None, timeout: float = 30.0):
        """
        Initialize feature source.

        Args:
            token: Optional service token for secured layers
            timeout: Request timeout in seconds
        """
        self.token = token
        self.timeout = timeout

    def build_query_params(self, spatial_reference: Any, include_z: bool) -> dict:
        """Query parameters for fetching every feature."""
        params = {
            "where": "1=1",
            "outFields": "*",
            "returnGeometry": "true",
            "returnZ": "true" if include_z else "false",
            "outSR": _spatial_reference_param(spatial_reference),
            "f": "json",
        }
        if self.token:
            params["token"] = self.token
        return params

    def _query_page(self, url: str, params: dict) -> dict:
        """Run one query request and return its JSON body."""
        try:
            response = requests.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except requests.exceptions.Timeout:
            raise FeatureSourceError(f"Feature service timeout after {self.timeout}s: {url}")
        except requests.exceptions.RequestException as e:
            raise FeatureSourceError(f"Feature service request failed: {e}")

        try:
            data = response.json()
        except ValueError as e:
            raise MalformedResponseError(f"Feature service returned invalid JSON: {e}")

        # Services report query errors with HTTP 200 and an error body
        if isinstance(data, dict) and "error" in data:
            error = data["error"] or {}
            message = error.get("message", error) if isinstance(error, dict) else error
            raise FeatureSourceError(f"Feature service error: {message}")

        return data

    def fetch_all_point_features(
        self,
        source_location: str,
        spatial_reference: Any,
        include_z: bool,
    ) -> list[Feature]:
        """
        Fetch the layer's features.

        Layers larger than the service's maxRecordCount come back in pages
        flagged with exceededTransferLimit; pages are requested with
        resultOffset until the flag is gone.

        Args:
            source_location: Feature layer URL (".../FeatureServer/0")
            spatial_reference: Spatial reference for returned coordinates
            include_z: Request elevation values

        Returns:
            Features in service order

        Raises:
            FeatureSourceError: On any request failure or service error
            MalformedResponseError: On a response without a usable feature list
        """
        url = f"{source_location.rstrip('/')}/query"
        params = self.build_query_params(spatial_reference, include_z)
        features: list[Feature] = []

        while True:
            data = self._query_page(url, params)
            page = parse_features(data)
            features.extend(page)

            if not data.get("exceededTransferLimit"):
                return features
            if not page:
                raise MalformedResponseError("Feature service exceeded transfer limit with an empty page")

            params = {**params, "resultOffset": len(features), "resultRecordCount": len(page)}
