"""
Network connections.

Networks with an RPC url are reached over HTTP JSON-RPC. Networks without
one run in-process on an eth-tester chain, the Python stand-in for
Hardhat's built-in ``hardhat`` network.
"""

from typing import Optional, Sequence

from eth_account.signers.local import LocalAccount
from eth_utils import ValidationError, to_canonical_address
from loguru import logger
from web3 import EthereumTesterProvider, Web3
from web3.exceptions import ContractLogicError, Web3ValidationError
from web3.middleware import Web3Middleware

from .config import DEFAULT_ACCOUNTS_BALANCE, NetworkConfig
from .exceptions import ChainIdMismatchError, NetworkUnavailableError
from .signers import SignerDirectory


def connect(network: NetworkConfig, signers: Optional[Sequence[LocalAccount]] = None) -> Web3:
    """
    Open a Web3 connection to a configured network.

    Args:
        network: Network to connect to
        signers: Signers to fund on a simulated network; derived from the
            network's accounts policy when omitted

    Returns:
        Connected Web3 instance

    Raises:
        NetworkUnavailableError: If the RPC endpoint cannot be reached
        ChainIdMismatchError: If the endpoint reports a different chain id
    """
    if network.is_simulated:
        if signers is None:
            signers = SignerDirectory(network).get_signers() if network.accounts else []
        return start_simulator(network, signers)

    w3 = Web3(
        Web3.HTTPProvider(network.url, request_kwargs={"timeout": network.timeout / 1000})
    )

    if not w3.is_connected():
        raise NetworkUnavailableError(
            f"Failed to connect to network '{network.name}' at {network.url}"
        )

    verify_chain_id(w3, network)
    logger.info(f"Connected to {network.name} (chain id {network.chain_id})")
    return w3


def verify_chain_id(w3: Web3, network: NetworkConfig) -> int:
    """Check the chain id reported by the node against the configured one."""
    reported = w3.eth.chain_id
    if reported != network.chain_id:
        raise ChainIdMismatchError(
            f"Network '{network.name}' is configured with chain id {network.chain_id} "
            f"but the node reports {reported}"
        )
    return reported


def start_simulator(network: NetworkConfig, signers: Sequence[LocalAccount]) -> Web3:
    """
    Start an in-process simulated chain with every signer pre-funded.

    The simulator keeps its own fixed chain id, so transactions are signed
    with the id it reports rather than the configured one.
    """
    from eth_tester import EthereumTester, PyEVMBackend

    balance = network.accounts.accounts_balance if network.accounts else DEFAULT_ACCOUNTS_BALANCE

    # Keep the tester's own funded accounts and add ours with the same state shape
    genesis_state = PyEVMBackend.generate_genesis_state(
        overrides={"balance": balance}, num_accounts=1
    )
    template = next(iter(genesis_state.values()))
    for signer in signers:
        genesis_state[to_canonical_address(signer.address)] = dict(template)

    tester = EthereumTester(backend=PyEVMBackend(genesis_state=genesis_state))
    w3 = Web3(EthereumTesterProvider(tester))
    w3.middleware_onion.add(SimulatorErrorMiddleware, name="simulator_errors")

    chain_id = w3.eth.chain_id
    logger.info(
        f"Started simulated network '{network.name}' with {len(signers)} funded accounts "
        f"(chain id {chain_id})"
    )
    if chain_id != network.chain_id:
        logger.warning(
            f"Network '{network.name}' is configured with chain id {network.chain_id} "
            f"but the simulator uses {chain_id}; chain id is not enforced"
        )
    return w3


class SimulatorErrorMiddleware(Web3Middleware):
    """Raise simulator failures as the web3 errors a JSON-RPC node produces."""

    def wrap_make_request(self, make_request):
        from eth_tester.exceptions import TransactionFailed
        from eth_tester.exceptions import ValidationError as TesterValidationError

        def middleware(method, params):
            try:
                return make_request(method, params)
            except TransactionFailed as e:
                raise ContractLogicError(str(e)) from e
            except (TesterValidationError, ValidationError) as e:
                raise Web3ValidationError(f"{method} rejected by simulator: {e}") from e

        return middleware
