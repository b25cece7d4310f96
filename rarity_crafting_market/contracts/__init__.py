"""Contract deployment wrappers."""
from .crafting_market import RarityCraftingMarketContract
from .upgrades import DeploymentRecord, ProxyDeployer, ProxyDeployment

__all__ = [
    "DeploymentRecord",
    "ProxyDeployer",
    "ProxyDeployment",
    "RarityCraftingMarketContract",
]
