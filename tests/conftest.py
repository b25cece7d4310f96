"""Shared pytest fixtures for rarity-crafting-market tests."""

import json
from pathlib import Path
from typing import Any, Dict, List

import pytest
from eth_account.signers.local import LocalAccount
from loguru import logger
from web3 import Web3

from contract_fixtures import build_artifacts
from rarity_crafting_market.artifacts.loader import ArtifactRegistry
from rarity_crafting_market.config import NetworkConfig, ProjectConfig, load_config
from rarity_crafting_market.contracts.upgrades import ProxyDeployer
from rarity_crafting_market.network import connect
from rarity_crafting_market.signers import SignerDirectory

# Hardhat's well-known default mnemonic and its first two accounts
HARDHAT_TEST_MNEMONIC = "test test test test test test test test test test test junk"
HARDHAT_TEST_ACCOUNT_0 = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
HARDHAT_TEST_ACCOUNT_1 = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"

RARITY_ADDRESS = "0xce761D788DF608BD21bdd59d6f4B54b2e27F25Bb"
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"


@pytest.fixture(scope="session")
def project_config() -> ProjectConfig:
    """The bundled network config, without environment overrides."""
    return load_config(environ={})


@pytest.fixture(scope="session")
def hardhat_network(project_config: ProjectConfig) -> NetworkConfig:
    return project_config.get_network("hardhat")


@pytest.fixture(scope="session")
def signers(hardhat_network: NetworkConfig) -> List[LocalAccount]:
    return SignerDirectory(hardhat_network).get_signers()


@pytest.fixture(scope="session")
def deployer_account(signers: List[LocalAccount]) -> LocalAccount:
    return signers[0]


@pytest.fixture(scope="session")
def artifacts_dir(tmp_path_factory) -> Path:
    """A Hardhat artifacts directory holding the stand-in contracts."""
    return build_artifacts(tmp_path_factory.mktemp("artifacts"))


@pytest.fixture
def registry(artifacts_dir: Path) -> ArtifactRegistry:
    return ArtifactRegistry(artifacts_dir)


@pytest.fixture
def w3(hardhat_network: NetworkConfig, signers: List[LocalAccount]) -> Web3:
    """A fresh simulated chain per test."""
    return connect(hardhat_network, signers)


@pytest.fixture
def proxy_deployer(w3: Web3, deployer_account: LocalAccount, registry: ArtifactRegistry) -> ProxyDeployer:
    return ProxyDeployer(w3, deployer_account, registry)


@pytest.fixture
def write_config(tmp_path: Path):
    """Write a config mapping to a temporary JSON file and return its path."""

    def _write(data: Dict[str, Any], name: str = "network_config.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data, indent=2))
        return path

    return _write


@pytest.fixture
def minimal_config() -> Dict[str, Any]:
    return {
        "defaultNetwork": "local",
        "networks": {
            "local": {
                "accounts": {"mnemonic": HARDHAT_TEST_MNEMONIC, "initialIndex": 0},
                "chainId": 31337,
            },
            "remote": {
                "url": "https://rpc.example.org/",
                "accounts": {"mnemonic": HARDHAT_TEST_MNEMONIC},
                "chainId": 1,
            },
        },
    }


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages: List[str] = []
    handler_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(handler_id)
