"""Unit tests for the Signer Directory."""

from dataclasses import replace

import pytest
from web3 import Web3

from rarity_crafting_market.config import AccountsConfig, NetworkConfig
from rarity_crafting_market.exceptions import ConfigurationError
from rarity_crafting_market.signers import SignerDirectory

from conftest import HARDHAT_TEST_ACCOUNT_0, HARDHAT_TEST_ACCOUNT_1, HARDHAT_TEST_MNEMONIC


def make_network(**accounts_kwargs) -> NetworkConfig:
    accounts_kwargs.setdefault("mnemonic", HARDHAT_TEST_MNEMONIC)
    return NetworkConfig(name="local", chain_id=31337, accounts=AccountsConfig(**accounts_kwargs))


class TestDerivation:
    """Test deterministic account derivation."""

    def test_known_addresses_for_hardhat_mnemonic(self):
        """Test derivation against Hardhat's published default accounts."""
        addresses = SignerDirectory(make_network(count=2)).addresses()

        assert addresses == [HARDHAT_TEST_ACCOUNT_0, HARDHAT_TEST_ACCOUNT_1]

    def test_same_configuration_yields_same_first_address(self, hardhat_network):
        """Test that repeated invocations return the same deployer."""
        first = SignerDirectory(hardhat_network).get_signers()[0].address
        second = SignerDirectory(hardhat_network).get_signers()[0].address

        assert first == second

    def test_sequence_is_restartable(self, hardhat_network):
        directory = SignerDirectory(hardhat_network)

        assert directory.addresses() == directory.addresses()

    def test_default_count_is_twenty(self, signers):
        assert len(signers) == 20

    def test_addresses_are_unique_and_checksummed(self, signers):
        addresses = [signer.address for signer in signers]

        assert len(set(addresses)) == len(addresses)
        assert all(Web3.is_checksum_address(address) for address in addresses)

    def test_deployer_is_first_signer(self, hardhat_network, signers):
        assert SignerDirectory(hardhat_network).deployer.address == signers[0].address

    def test_initial_index_shifts_sequence(self):
        """Test that initialIndex starts derivation further along the path."""
        shifted = SignerDirectory(make_network(initial_index=1, count=1)).addresses()

        assert shifted == [HARDHAT_TEST_ACCOUNT_1]

    def test_custom_count(self):
        assert len(SignerDirectory(make_network(count=3)).get_signers()) == 3

    def test_different_mnemonics_differ(self, hardhat_network):
        bundled = SignerDirectory(hardhat_network).deployer.address

        assert bundled != HARDHAT_TEST_ACCOUNT_0

    def test_signers_can_sign(self, signers):
        signed = signers[0].sign_transaction(
            {
                "to": signers[1].address,
                "value": 1,
                "gas": 21000,
                "gasPrice": 10 ** 9,
                "nonce": 0,
                "chainId": 50,
            }
        )
        assert len(signed.raw_transaction) > 0

    def test_get_signer_by_position(self):
        directory = SignerDirectory(make_network(count=2))

        assert directory.get_signer(1).address == HARDHAT_TEST_ACCOUNT_1


class TestPolicyValidation:
    """Test failures for missing or malformed derivation policies."""

    def test_missing_accounts_raises(self):
        network = NetworkConfig(name="bare", chain_id=1)

        with pytest.raises(ConfigurationError, match="no accounts configured"):
            SignerDirectory(network).get_signers()

    @pytest.mark.parametrize("mnemonic", ["", "   "])
    def test_empty_mnemonic_raises(self, mnemonic):
        with pytest.raises(ConfigurationError, match="empty mnemonic"):
            SignerDirectory(make_network(mnemonic=mnemonic)).get_signers()

    def test_invalid_mnemonic_raises(self):
        network = make_network(mnemonic="these words are not a valid seed phrase at all ok")

        with pytest.raises(ConfigurationError, match="Cannot derive accounts"):
            SignerDirectory(network).get_signers()

    def test_negative_initial_index_raises(self):
        with pytest.raises(ConfigurationError, match="initialIndex"):
            SignerDirectory(make_network(initial_index=-1)).get_signers()

    def test_zero_count_raises(self):
        with pytest.raises(ConfigurationError, match="count"):
            SignerDirectory(make_network(count=0)).get_signers()

    def test_position_out_of_range_raises(self):
        with pytest.raises(ConfigurationError, match="out of range"):
            SignerDirectory(make_network(count=2)).get_signer(2)

    def test_override_does_not_touch_source_config(self, hardhat_network):
        broken = replace(hardhat_network, accounts=replace(hardhat_network.accounts, mnemonic=""))

        with pytest.raises(ConfigurationError):
            SignerDirectory(broken).deployer

        assert SignerDirectory(hardhat_network).deployer.address
