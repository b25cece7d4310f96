"""
Signer Directory.

Derives the ordered list of signing accounts for a network from its
mnemonic. The first signer is the default transaction sender (deployer).
"""

from typing import List

from eth_account import Account
from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError
from loguru import logger

from .config import AccountsConfig, NetworkConfig
from .exceptions import ConfigurationError

Account.enable_unaudited_hdwallet_features()


class SignerDirectory:
    """
    Ordered signers for a single network.

    Derivation is local and deterministic: the same mnemonic, path and
    initial index always yield the same addresses in the same order.
    """

    def __init__(self, network: NetworkConfig):
        self.network = network

    def get_signers(self) -> List[LocalAccount]:
        """
        Derive all signers for the network.

        Returns:
            Signers for indexes initial_index .. initial_index + count - 1

        Raises:
            ConfigurationError: If the derivation policy is missing or malformed
        """
        policy = self._policy()
        return [
            self._derive(policy, index)
            for index in range(policy.initial_index, policy.initial_index + policy.count)
        ]

    def get_signer(self, position: int = 0) -> LocalAccount:
        """Derive the signer at ``position`` in the ordered sequence."""
        policy = self._policy()
        if position < 0 or position >= policy.count:
            raise ConfigurationError(
                f"Signer position {position} out of range for {policy.count} accounts"
            )
        return self._derive(policy, policy.initial_index + position)

    @property
    def deployer(self) -> LocalAccount:
        return self.get_signer(0)

    def addresses(self) -> List[str]:
        return [signer.address for signer in self.get_signers()]

    def _policy(self) -> AccountsConfig:
        policy = self.network.accounts
        if policy is None:
            raise ConfigurationError(
                f"Network '{self.network.name}' has no accounts configured"
            )
        if not policy.mnemonic.strip():
            raise ConfigurationError(
                f"Network '{self.network.name}' has an empty mnemonic"
            )
        if policy.initial_index < 0:
            raise ConfigurationError(
                f"initialIndex must be >= 0, got {policy.initial_index}"
            )
        if policy.count <= 0:
            raise ConfigurationError(f"Account count must be > 0, got {policy.count}")
        return policy

    def _derive(self, policy: AccountsConfig, index: int) -> LocalAccount:
        account_path = f"{policy.path}/{index}"
        try:
            return Account.from_mnemonic(policy.mnemonic, account_path=account_path)
        except (ValidationError, ValueError) as e:
            logger.debug(f"Derivation failed for {self.network.name} at {account_path}: {e}")
            raise ConfigurationError(
                f"Cannot derive accounts for network '{self.network.name}': {e}"
            ) from e
