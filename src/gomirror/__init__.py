"""gomirror - mirror a release catalog with hash-verified downloads."""

from .domain.catalog import Artifact, Catalog, Release, parse_catalog
from .domain.hashes import Hash
from .mirror import ArtifactFetcher, IntegrityVerifier, Reconciler, ReconcileSummary

__all__ = [
    "Artifact",
    "ArtifactFetcher",
    "Catalog",
    "Hash",
    "IntegrityVerifier",
    "Reconciler",
    "ReconcileSummary",
    "Release",
    "parse_catalog",
]
