"""
Structured logging for clustering passes.

Single JSONL file with typed events for streaming and analysis.

Event types:
- pass_start: Source and clustering parameters
- pass_end: Feature/cluster counts, max cluster size, id counter, latency
- error: Failed pass (fetch failure, malformed response, inert engine)
"""

import json
from pathlib import Path
from datetime import datetime
from typing import Any, Optional


class ClusterLogger:
    def __init__(self, output_dir: Path, filename: str = "clusters.jsonl"):
        """
        Initialize logger.

        Args:
            output_dir: Directory for log files
            filename: Log file name inside output_dir
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.output_dir / filename

        # Open file in append mode
        self.file_handle = open(self.log_file, 'a')

    def _write_event(self, event_type: str, data: dict[str, Any]) -> None:
        """Write typed event to JSONL log."""
        event = {
            "type": event_type,
            "timestamp": datetime.now().isoformat(),
            **data
        }
        self.file_handle.write(json.dumps(event) + '\n')
        self.file_handle.flush()  # Ensure streaming writes

    def log_pass_start(self, source_location: str, tolerance: float, use_z: bool) -> None:
        """
        Log start of a clustering pass.

        Args:
            source_location: Feature source being queried
            tolerance: Clustering tolerance in map units
            use_z: Whether elevation is requested
        """
        self._write_event("pass_start", {
            "source": source_location,
            "tolerance": tolerance,
            "use_z": use_z,
        })

    def log_pass_end(
        self,
        num_features: int,
        num_clusters: int,
        max_cluster_size: int,
        next_cluster_id: int,
        latency_ms: float,
    ) -> None:
        """
        Log a completed clustering pass.

        Args:
            num_features: Features fetched
            num_clusters: Clusters formed
            max_cluster_size: Largest cluster's feature count
            next_cluster_id: Id the next new cluster will receive
            latency_ms: Fetch + assignment time in milliseconds
        """
        self._write_event("pass_end", {
            "num_features": num_features,
            "num_clusters": num_clusters,
            "max_cluster_size": max_cluster_size,
            "next_cluster_id": next_cluster_id,
            "latency_ms": latency_ms,
        })

    def log_error(self, message: str, error_type: str = "error", source: Optional[str] = None) -> None:
        """
        Log a failed pass.

        Args:
            message: Error description
            error_type: Error category (fetch_failed, malformed_response, config)
            source: Feature source involved (if any)
        """
        data = {
            "message": message,
            "error_type": error_type,
        }
        if source is not None:
            data["source"] = source

        self._write_event("error", data)

    def close(self) -> None:
        """Close log file."""
        if hasattr(self, 'file_handle') and self.file_handle:
            self.file_handle.close()

    def __enter__(self):
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()
