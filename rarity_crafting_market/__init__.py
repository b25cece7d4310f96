"""
Rarity Crafting Market deployment package

Provides network configuration, HD signer derivation and upgradeable proxy
deployment for the RarityCraftingMarket smart contract.
"""

__version__ = "1.0.0"
__author__ = "Rarity Crafting Market"

from .artifacts.loader import ArtifactRegistry, ContractArtifact
from .config import NetworkConfig, ProjectConfig, load_config
from .contracts.crafting_market import RarityCraftingMarketContract
from .contracts.upgrades import DeploymentRecord, ProxyDeployer, ProxyDeployment
from .exceptions import ConfigurationError, DeploymentError
from .network import connect
from .signers import SignerDirectory

__all__ = [
    'ArtifactRegistry',
    'ConfigurationError',
    'ContractArtifact',
    'DeploymentError',
    'DeploymentRecord',
    'NetworkConfig',
    'ProjectConfig',
    'ProxyDeployer',
    'ProxyDeployment',
    'RarityCraftingMarketContract',
    'SignerDirectory',
    'connect',
    'load_config',
]
