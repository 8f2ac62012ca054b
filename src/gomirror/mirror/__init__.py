"""Mirror operations - catalog retrieval, verification, fetch and reconciliation."""

from .catalog_source import CatalogSource
from .fetcher import ArtifactFetcher, FetchOutcome, FetchResult
from .reconciler import ReconcileSummary, Reconciler
from .sidecar import read_sidecar, sidecar_path, write_sidecar
from .verifier import IntegrityVerifier

__all__ = [
    "ArtifactFetcher",
    "CatalogSource",
    "FetchOutcome",
    "FetchResult",
    "IntegrityVerifier",
    "ReconcileSummary",
    "Reconciler",
    "read_sidecar",
    "sidecar_path",
    "write_sidecar",
]
