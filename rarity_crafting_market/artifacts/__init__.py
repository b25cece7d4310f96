"""Artifact loading utilities for compiled smart contracts."""
from .loader import ArtifactRegistry, ContractArtifact, default_artifacts_dir

__all__ = ["ArtifactRegistry", "ContractArtifact", "default_artifacts_dir"]
