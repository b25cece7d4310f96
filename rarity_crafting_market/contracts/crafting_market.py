"""
RarityCraftingMarket contract wrapper for deployment.

This module provides a high-level interface for deploying the crafting
market behind an upgradeable proxy with validated initializer arguments.
"""

from typing import Any, List

from eth_utils import is_hex_address
from loguru import logger
from web3 import Web3

from ..artifacts.loader import ArtifactRegistry
from ..exceptions import InitializerArgumentError
from .upgrades import ProxyDeployer, ProxyDeployment

# Rarity (summoner NFT) contract on Fantom opera
RARITY_ADDRESS = "0xce761D788DF608BD21bdd59d6f4B54b2e27F25Bb"
DEFAULT_FEE_NUMERATOR = 1
DEFAULT_FEE_DENOMINATOR = 5


class RarityCraftingMarketContract:
    """
    Wrapper for RarityCraftingMarket deployment.

    The market is upgradeable: it is deployed behind a proxy and set up by
    ``initialize(address rarity, uint256 feeNumerator, uint256 feeDenominator)``
    instead of a constructor.
    """

    CONTRACT_NAME = "RarityCraftingMarket"

    def __init__(self, registry: ArtifactRegistry):
        """Initialize the wrapper from the market's compiled artifact."""
        self.registry = registry
        artifact = registry.get_deployable(self.CONTRACT_NAME)
        self.abi = artifact.abi
        self.bytecode = artifact.bytecode

    def encode_initializer_params(
        self,
        rarity_address: str,
        fee_numerator: int,
        fee_denominator: int,
    ) -> List[Any]:
        """
        Validate and order the initializer arguments.

        Args:
            rarity_address: Address of the Rarity summoner contract
            fee_numerator: Market fee numerator
            fee_denominator: Market fee denominator

        Returns:
            Initializer arguments in declaration order

        Raises:
            InitializerArgumentError: If validation fails
        """
        if not isinstance(rarity_address, str) or not rarity_address.startswith("0x"):
            raise InitializerArgumentError("Invalid Rarity address")

        if len(rarity_address) != 42 or not is_hex_address(rarity_address):
            raise InitializerArgumentError("Rarity address must be 42 hex characters")

        for name, value in (("fee_numerator", fee_numerator), ("fee_denominator", fee_denominator)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise InitializerArgumentError(f"{name} must be an integer")

        if fee_numerator < 0:
            raise InitializerArgumentError("Fee numerator must not be negative")

        if fee_denominator <= 0:
            raise InitializerArgumentError("Fee denominator must be greater than 0")

        if fee_numerator > fee_denominator:
            raise InitializerArgumentError(
                f"Fee ({fee_numerator}/{fee_denominator}) cannot exceed 100%"
            )

        return [Web3.to_checksum_address(rarity_address), fee_numerator, fee_denominator]

    def deploy(
        self,
        deployer: ProxyDeployer,
        rarity_address: str = RARITY_ADDRESS,
        fee_numerator: int = DEFAULT_FEE_NUMERATOR,
        fee_denominator: int = DEFAULT_FEE_DENOMINATOR,
    ) -> ProxyDeployment:
        """
        Deploy the market behind a proxy.

        Returns:
            Pending deployment handle; call ``deployed()`` on it
        """
        args = self.encode_initializer_params(rarity_address, fee_numerator, fee_denominator)
        logger.info(
            f"Deploying {self.CONTRACT_NAME} with "
            f"{self.format_fee(fee_numerator, fee_denominator)}% fee"
        )
        return deployer.deploy_proxy(self.CONTRACT_NAME, args)

    @staticmethod
    def format_fee(fee_numerator: int, fee_denominator: int) -> float:
        """
        Convert a fee fraction to a percentage.

        Args:
            fee_numerator: Fee numerator
            fee_denominator: Fee denominator

        Returns:
            Fee in percent (e.g. 1/5 -> 20.0)
        """
        return fee_numerator * 100 / fee_denominator
