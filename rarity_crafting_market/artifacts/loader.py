"""
Artifact loader for compiled smart contracts.

This module resolves contract identifiers to the ABI and bytecode produced
by the Hardhat build step (``npx hardhat compile``). The build itself is an
external step; only its output directory is read here.
"""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..exceptions import ArtifactNotFoundError, ConfigurationError

ARTIFACTS_DIR_ENV = "ARTIFACTS_DIR"

# Hardhat writes debug and build metadata next to the real artifacts
_IGNORED_DIRS = {"build-info"}
_DEBUG_SUFFIX = ".dbg.json"


def default_artifacts_dir() -> Path:
    """Artifacts directory from ARTIFACTS_DIR, falling back to ./artifacts."""
    return Path(os.environ.get(ARTIFACTS_DIR_ENV) or Path.cwd() / "artifacts")


@dataclass(frozen=True)
class ContractArtifact:
    """Compiled output for one contract: ABI plus creation and runtime bytecode."""

    contract_name: str
    abi: List[Dict[str, Any]]
    bytecode: str = "0x"
    deployed_bytecode: str = "0x"
    source_name: Optional[str] = None
    path: Optional[Path] = field(default=None, compare=False)

    @classmethod
    def from_json(cls, data: Dict[str, Any], path: Optional[Path] = None) -> "ContractArtifact":
        return cls(
            contract_name=data.get("contractName") or (path.stem if path else ""),
            abi=data.get("abi", []),
            bytecode=data.get("bytecode") or "0x",
            deployed_bytecode=data.get("deployedBytecode") or "0x",
            source_name=data.get("sourceName"),
            path=path,
        )

    @property
    def is_deployable(self) -> bool:
        # Interfaces and abstract contracts compile to empty bytecode
        return self.bytecode not in ("", "0x")

    @property
    def needs_linking(self) -> bool:
        return "__$" in self.bytecode

    def initializer(self, name: str = "initialize") -> Optional[Dict[str, Any]]:
        """
        Find the initializer entry in the ABI.

        Args:
            name: Initializer function name

        Returns:
            The ABI entry, or None if the contract has no such function
        """
        for item in self.abi:
            if item.get("type") == "function" and item.get("name") == name:
                return item
        return None

    def constructor_inputs(self) -> List[Dict[str, Any]]:
        for item in self.abi:
            if item.get("type") == "constructor":
                return item.get("inputs", [])
        return []


class ArtifactRegistry:
    """
    Maps contract identifiers to compiled artifacts.

    Identifiers are either a bare contract name (``RarityCraftingMarket``)
    or a fully qualified name (``contracts/Market.sol:RarityCraftingMarket``).
    Explicit ``contract_paths`` entries, relative to the artifacts directory,
    take precedence over searching the directory.
    """

    def __init__(
        self,
        artifacts_dir: Optional[Path] = None,
        contract_paths: Optional[Dict[str, str]] = None,
    ):
        self.artifacts_dir = Path(artifacts_dir) if artifacts_dir else default_artifacts_dir()
        self.contract_paths = dict(contract_paths or {})
        self._cache: Dict[str, ContractArtifact] = {}

    def load_artifact(self, contract_name: str) -> ContractArtifact:
        """
        Load the artifact for a contract.

        Args:
            contract_name: Bare or fully qualified contract name

        Returns:
            The parsed ContractArtifact

        Raises:
            ArtifactNotFoundError: If no artifact file exists for the name
            ConfigurationError: If the name is ambiguous or the file is unreadable
        """
        if contract_name in self._cache:
            return self._cache[contract_name]

        artifact_path = self._resolve_path(contract_name)

        try:
            with open(artifact_path, "r") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid artifact file {artifact_path}: {e}") from e

        artifact = ContractArtifact.from_json(data, path=artifact_path)
        self._cache[contract_name] = artifact
        return artifact

    def get_abi(self, contract_name: str) -> List[Dict[str, Any]]:
        return self.load_artifact(contract_name).abi

    def get_bytecode(self, contract_name: str) -> str:
        return self.load_artifact(contract_name).bytecode

    def get_deployable(self, contract_name: str) -> ContractArtifact:
        """
        Load an artifact and check it can be deployed as is.

        Raises:
            ConfigurationError: If the artifact has no bytecode or has
                unlinked library references
        """
        artifact = self.load_artifact(contract_name)
        if not artifact.is_deployable:
            raise ConfigurationError(
                f"{contract_name} has no bytecode (interface or abstract contract?)"
            )
        if artifact.needs_linking:
            raise ConfigurationError(f"{contract_name} requires library linking")
        return artifact

    def list_available_contracts(self) -> List[str]:
        """
        List all contract names found in the artifacts directory.

        Returns:
            Sorted list of contract names
        """
        names = set(self.contract_paths)
        names.update(path.stem for path in self._artifact_files())
        return sorted(names)

    def validate_artifacts(self, contract_names: Optional[Iterable[str]] = None) -> Dict[str, bool]:
        """
        Check that the given (or all available) artifacts load and are deployable.

        Returns:
            Dictionary mapping contract names to availability status
        """
        if contract_names is None:
            contract_names = self.list_available_contracts()

        status = {}
        for contract_name in contract_names:
            try:
                self.get_deployable(contract_name)
                status[contract_name] = True
            except ConfigurationError:
                status[contract_name] = False

        return status

    def _resolve_path(self, contract_name: str) -> Path:
        if contract_name in self.contract_paths:
            artifact_path = self.artifacts_dir / self.contract_paths[contract_name]
            if not artifact_path.exists():
                raise ArtifactNotFoundError(f"Artifact file not found: {artifact_path}")
            return artifact_path

        if ":" in contract_name:
            source_name, _, name = contract_name.rpartition(":")
            artifact_path = self.artifacts_dir / source_name / f"{name}.json"
            if not artifact_path.exists():
                raise ArtifactNotFoundError(f"Artifact file not found: {artifact_path}")
            return artifact_path

        matches = [path for path in self._artifact_files() if path.stem == contract_name]

        if not matches:
            raise ArtifactNotFoundError(
                f"No artifact for contract: {contract_name} in {self.artifacts_dir}\n"
                f"Make sure the contracts have been compiled with 'npx hardhat compile'"
            )

        if len(matches) > 1:
            candidates = ", ".join(
                str(path.parent.relative_to(self.artifacts_dir)) for path in matches
            )
            raise ConfigurationError(
                f"Ambiguous contract name {contract_name}, use a fully qualified name. "
                f"Candidates: {candidates}"
            )

        return matches[0]

    def _artifact_files(self) -> List[Path]:
        if not self.artifacts_dir.exists():
            return []
        return [
            path
            for path in self.artifacts_dir.rglob("*.json")
            if not path.name.endswith(_DEBUG_SUFFIX)
            and not _IGNORED_DIRS.intersection(path.relative_to(self.artifacts_dir).parts)
        ]
