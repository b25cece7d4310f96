"""
Upgradeable proxy deployments.

Deploys a contract's implementation, then a proxy pointing at it whose
constructor runs the initializer, the way OpenZeppelin's
``upgrades.deployProxy`` does. Proxy contracts come from compiled artifacts
and are treated as opaque: only their constructors are used.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from eth_abi.exceptions import EncodingError
from eth_account.signers.local import LocalAccount
from eth_utils import is_hex_address
from hexbytes import HexBytes
from loguru import logger
from web3 import Web3
from web3.contract import Contract
from web3.exceptions import TimeExhausted, Web3Exception

from ..artifacts.loader import ArtifactRegistry, ContractArtifact
from ..exceptions import (
    ConfigurationError,
    DeploymentError,
    InitializerArgumentError,
    TransactionRevertedError,
)

DEFAULT_TIMEOUT = 120

# Proxy kind -> proxy artifact name
PROXY_KINDS = {
    "transparent": "TransparentUpgradeableProxy",
    "uups": "ERC1967Proxy",
}
PROXY_ADMIN = "ProxyAdmin"


@dataclass(frozen=True)
class DeploymentRecord:
    """Outcome of one confirmed proxy deployment."""

    contract_name: str
    args: Tuple[Any, ...]
    address: str
    implementation_address: str
    kind: str
    transaction_hash: str
    block_number: int
    admin_address: Optional[str] = None


class ProxyDeployment:
    """
    Handle for a submitted proxy deployment.

    The handle starts out pending. ``deployed()`` waits for the proxy
    transaction to be mined; only then are ``address``, ``contract`` and
    ``record`` available.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    READY = "ready"

    def __init__(
        self,
        deployer: "ProxyDeployer",
        contract_name: str,
        abi: List[Dict[str, Any]],
        args: Sequence[Any],
        transaction_hash: HexBytes,
        implementation_address: str,
        admin_address: Optional[str] = None,
    ):
        self.deployer = deployer
        self.contract_name = contract_name
        self.abi = abi
        self.args = tuple(args)
        self.transaction_hash = transaction_hash
        self.implementation_address = implementation_address
        self.admin_address = admin_address
        self.state = self.PENDING
        self._record: Optional[DeploymentRecord] = None
        self._contract: Optional[Contract] = None

    def deployed(self, timeout: Optional[float] = None) -> "ProxyDeployment":
        """
        Wait for the proxy deployment to be confirmed.

        Args:
            timeout: Seconds to wait; defaults to the deployer's timeout

        Returns:
            This handle, now ready

        Raises:
            DeploymentError: If the transaction reverts or is not mined in time
        """
        if self.state == self.READY:
            return self

        receipt = self.deployer.wait_for_receipt(
            self.transaction_hash, timeout=timeout, label=f"{self.contract_name} proxy"
        )
        self.state = self.CONFIRMED

        address = receipt["contractAddress"]
        self._record = DeploymentRecord(
            contract_name=self.contract_name,
            args=self.args,
            address=address,
            implementation_address=self.implementation_address,
            kind=self.deployer.kind,
            transaction_hash=Web3.to_hex(self.transaction_hash),
            block_number=receipt["blockNumber"],
            admin_address=self.admin_address,
        )
        self._contract = self.deployer.w3.eth.contract(address=address, abi=self.abi)
        self.state = self.READY

        logger.info(f"{self.contract_name} deployed to: {address}")
        return self

    @property
    def address(self) -> str:
        return self.record.address

    @property
    def contract(self) -> Contract:
        self._require_ready()
        return self._contract

    @property
    def record(self) -> DeploymentRecord:
        self._require_ready()
        return self._record

    def _require_ready(self) -> None:
        if self.state != self.READY:
            raise DeploymentError(
                f"{self.contract_name} deployment is {self.state}; call deployed() first"
            )


class ProxyDeployer:
    """
    Deploys contracts behind upgradeable proxies from a single signer.

    For the ``transparent`` kind a ProxyAdmin is deployed on first use and
    shared by every later proxy from the same deployer.
    """

    def __init__(
        self,
        w3: Web3,
        signer: LocalAccount,
        registry: ArtifactRegistry,
        kind: str = "transparent",
        timeout: float = DEFAULT_TIMEOUT,
    ):
        if kind not in PROXY_KINDS:
            available = ", ".join(PROXY_KINDS)
            raise ConfigurationError(f"Unknown proxy kind: {kind}. Available kinds: {available}")

        self.w3 = w3
        self.signer = signer
        self.registry = registry
        self.kind = kind
        self.timeout = timeout
        self.admin_address: Optional[str] = None

    def deploy_proxy(
        self,
        contract_name: str,
        args: Sequence[Any] = (),
        initializer: str = "initialize",
    ) -> ProxyDeployment:
        """
        Deploy a contract behind a proxy and run its initializer.

        Args:
            contract_name: Contract identifier known to the artifact registry
            args: Initializer arguments, in declaration order
            initializer: Name of the initializer function

        Returns:
            Pending ProxyDeployment; call ``deployed()`` before using it

        Raises:
            ConfigurationError: If an artifact cannot be resolved
            InitializerArgumentError: If args do not match the initializer
            DeploymentError: If any transaction fails
        """
        artifact = self.registry.get_deployable(contract_name)
        proxy_artifact = self.registry.get_deployable(PROXY_KINDS[self.kind])

        # Encode before sending anything so bad arguments cost no gas
        init_data = self.encode_initializer(artifact, args, initializer)

        implementation_address = self.deploy_contract(artifact)

        if self.kind == "transparent":
            admin_address = self.get_admin_address()
            constructor_args = (implementation_address, admin_address, init_data)
        else:
            admin_address = None
            constructor_args = (implementation_address, init_data)

        tx_hash = self._send_deployment(proxy_artifact, constructor_args, f"{contract_name} proxy")

        return ProxyDeployment(
            deployer=self,
            contract_name=contract_name,
            abi=artifact.abi,
            args=args,
            transaction_hash=tx_hash,
            implementation_address=implementation_address,
            admin_address=admin_address,
        )

    def encode_initializer(
        self,
        artifact: ContractArtifact,
        args: Sequence[Any],
        initializer: str = "initialize",
    ) -> bytes:
        """
        ABI-encode the initializer call for a contract.

        Returns:
            Calldata for the initializer, or empty bytes when the contract
            has no initializer and no args were given
        """
        fn_abi = artifact.initializer(initializer)

        if fn_abi is None:
            if args:
                raise InitializerArgumentError(
                    f"{artifact.contract_name} has no {initializer} function"
                )
            return b""

        inputs = fn_abi.get("inputs", [])
        if len(args) != len(inputs):
            signature = ",".join(inp["type"] for inp in inputs)
            raise InitializerArgumentError(
                f"{initializer}({signature}) expects {len(inputs)} arguments, got {len(args)}"
            )

        normalized = [_normalize_argument(inp["type"], value) for inp, value in zip(inputs, args)]

        contract = self.w3.eth.contract(abi=artifact.abi)
        try:
            data = contract.encode_abi(initializer, args=normalized)
        except (Web3Exception, EncodingError, TypeError, ValueError) as e:
            raise InitializerArgumentError(
                f"Invalid arguments for {artifact.contract_name}.{initializer}: {e}"
            ) from e

        return bytes(HexBytes(data))

    def deploy_contract(self, artifact: ContractArtifact, constructor_args: Sequence[Any] = ()) -> str:
        """Deploy a plain contract and wait for it; returns its address."""
        tx_hash = self._send_deployment(artifact, constructor_args, artifact.contract_name)
        receipt = self.wait_for_receipt(tx_hash, label=artifact.contract_name)
        return receipt["contractAddress"]

    def get_admin_address(self) -> str:
        """Address of this deployer's ProxyAdmin, deploying it on first use."""
        if self.admin_address is None:
            admin_artifact = self.registry.get_deployable(PROXY_ADMIN)
            # Newer ProxyAdmin versions take the initial owner as constructor argument
            constructor_args = (self.signer.address,) if admin_artifact.constructor_inputs() else ()
            self.admin_address = self.deploy_contract(admin_artifact, constructor_args)
            logger.info(f"ProxyAdmin deployed to: {self.admin_address}")
        return self.admin_address

    def wait_for_receipt(
        self,
        tx_hash: HexBytes,
        timeout: Optional[float] = None,
        label: str = "transaction",
    ) -> Dict[str, Any]:
        """
        Block until a transaction is mined and check it succeeded.

        Raises:
            DeploymentError: If the wait times out or the node fails
            TransactionRevertedError: If the transaction was mined but reverted
        """
        timeout = self.timeout if timeout is None else timeout
        try:
            receipt = self.w3.eth.wait_for_transaction_receipt(tx_hash, timeout=timeout)
        except TimeExhausted as e:
            raise DeploymentError(
                f"{label} transaction {Web3.to_hex(tx_hash)} not confirmed within {timeout}s"
            ) from e
        except (Web3Exception, OSError) as e:
            raise DeploymentError(f"Failed waiting for {label} transaction: {e}") from e

        if receipt["status"] != 1:
            raise TransactionRevertedError(
                f"{label} transaction {Web3.to_hex(tx_hash)} reverted"
            )
        return receipt

    def _send_deployment(
        self,
        artifact: ContractArtifact,
        constructor_args: Sequence[Any],
        label: str,
    ) -> HexBytes:
        factory = self.w3.eth.contract(abi=artifact.abi, bytecode=artifact.bytecode)
        try:
            transaction = factory.constructor(*constructor_args).build_transaction(
                {
                    "from": self.signer.address,
                    "nonce": self.w3.eth.get_transaction_count(self.signer.address, "pending"),
                }
            )
            signed_tx = self.signer.sign_transaction(transaction)
            tx_hash = self.w3.eth.send_raw_transaction(signed_tx.raw_transaction)
        except (Web3Exception, ValueError, TypeError, OSError) as e:
            # Gas estimation surfaces reverting constructors and initializers here
            raise DeploymentError(f"Failed to submit {label} deployment: {e}") from e

        logger.info(f"Submitted {label} deployment: {Web3.to_hex(tx_hash)}")
        return tx_hash


def _normalize_argument(abi_type: str, value: Any) -> Any:
    # Hex addresses are checksummed whatever their case
    if abi_type == "address" and isinstance(value, str) and is_hex_address(value):
        return Web3.to_checksum_address(value)
    if abi_type == "address[]" and isinstance(value, (list, tuple)):
        return [_normalize_argument("address", item) for item in value]
    return value
