"""
Project configuration loader.

Reads the JSON project configuration (the same keys as a Hardhat
config: ``defaultNetwork``, ``networks``, ``etherscan`` and ``solidity``)
and applies environment overrides on top of it.
"""

import json
import os
import re
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

from .exceptions import ConfigurationError, UnknownNetworkError

# Get the package root directory
PACKAGE_DIR = Path(__file__).parent
DEFAULT_CONFIG_PATH = PACKAGE_DIR / "data" / "network_config.json"

# Hardhat defaults for HD account derivation
DEFAULT_DERIVATION_PATH = "m/44'/60'/0'/0"
DEFAULT_ACCOUNT_COUNT = 20
DEFAULT_ACCOUNTS_BALANCE = 10000 * 10 ** 18
DEFAULT_TIMEOUT_MS = 20000

# Environment variables that override values from the config file
MNEMONIC_ENV = "MNEMONIC"
ETHERSCAN_API_KEY_ENV = "ETHERSCAN_API_KEY"
DEFAULT_NETWORK_ENV = "DEFAULT_NETWORK"

_VERSION_RE = re.compile(r"^\d+\.\d+\.\d+$")


@dataclass(frozen=True)
class AccountsConfig:
    """Account derivation policy: a seed phrase plus a starting index."""

    mnemonic: str
    initial_index: int = 0
    count: int = DEFAULT_ACCOUNT_COUNT
    path: str = DEFAULT_DERIVATION_PATH
    accounts_balance: int = DEFAULT_ACCOUNTS_BALANCE


@dataclass(frozen=True)
class NetworkConfig:
    """
    A named network. Networks without an RPC url are simulated in-process.

    ``chain_id`` is checked against RPC endpoints only. A simulated network
    keeps the simulator's own chain id and logs a warning when it differs.
    """

    name: str
    chain_id: int
    accounts: Optional[AccountsConfig] = None
    url: Optional[str] = None
    timeout: int = DEFAULT_TIMEOUT_MS

    @property
    def is_simulated(self) -> bool:
        return self.url is None


@dataclass(frozen=True)
class CompilerConfig:
    version: str
    optimizer_enabled: bool = False
    optimizer_runs: int = 200


@dataclass(frozen=True)
class EtherscanConfig:
    api_key: str = ""


@dataclass(frozen=True)
class ProjectConfig:
    """Complete project configuration, passed explicitly to signers and deployers."""

    default_network: str
    networks: Dict[str, NetworkConfig]
    compilers: Tuple[CompilerConfig, ...] = ()
    etherscan: EtherscanConfig = field(default_factory=EtherscanConfig)

    def get_network(self, name: Optional[str] = None) -> NetworkConfig:
        """
        Resolve a network by name.

        Args:
            name: Network name; the default network is used when omitted

        Returns:
            The matching NetworkConfig

        Raises:
            UnknownNetworkError: If no network with that name is configured
        """
        name = name or self.default_network
        if name not in self.networks:
            available = ", ".join(sorted(self.networks))
            raise UnknownNetworkError(
                f"Unknown network: {name}. Available networks: {available}"
            )
        return self.networks[name]

    def network_names(self) -> List[str]:
        return list(self.networks.keys())


def load_config(
    path: Optional[Path] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ProjectConfig:
    """
    Load the project configuration from a JSON file.

    Args:
        path: Path to the config file (defaults to the bundled network_config.json)
        environ: Environment used for overrides (defaults to os.environ)

    Returns:
        Parsed ProjectConfig

    Raises:
        ConfigurationError: If the file is missing, is not valid JSON or
            contains malformed values
    """
    config_path = Path(path) if path is not None else DEFAULT_CONFIG_PATH

    if not config_path.exists():
        raise ConfigurationError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r") as f:
            raw = json.load(f)
    except json.JSONDecodeError as e:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e

    return parse_config(raw, environ=environ)


def parse_config(
    raw: Mapping[str, Any],
    environ: Optional[Mapping[str, str]] = None,
) -> ProjectConfig:
    """Build a ProjectConfig from an already decoded config mapping."""
    if environ is None:
        environ = os.environ

    if not isinstance(raw, Mapping):
        raise ConfigurationError("Config root must be an object")

    raw_networks = raw.get("networks") or {}
    if not isinstance(raw_networks, Mapping) or not raw_networks:
        raise ConfigurationError("At least one network must be configured")

    networks = {
        name: _parse_network(name, value) for name, value in raw_networks.items()
    }

    mnemonic_override = environ.get(MNEMONIC_ENV)
    if mnemonic_override:
        networks = {
            name: _with_mnemonic(network, mnemonic_override)
            for name, network in networks.items()
        }

    _check_unique_chain_ids(networks)

    default_network = environ.get(DEFAULT_NETWORK_ENV) or raw.get("defaultNetwork") or "hardhat"
    if default_network not in networks:
        raise UnknownNetworkError(
            f"Default network '{default_network}' is not configured"
        )

    raw_etherscan = raw.get("etherscan") or {}
    if not isinstance(raw_etherscan, Mapping):
        raise ConfigurationError("etherscan must be an object")
    etherscan = EtherscanConfig(
        api_key=environ.get(ETHERSCAN_API_KEY_ENV) or str(raw_etherscan.get("apiKey", ""))
    )

    return ProjectConfig(
        default_network=default_network,
        networks=networks,
        compilers=_parse_compilers(raw.get("solidity")),
        etherscan=etherscan,
    )


def _parse_network(name: str, raw: Any) -> NetworkConfig:
    if not isinstance(raw, Mapping):
        raise ConfigurationError(f"Network '{name}' must be an object")

    if "chainId" not in raw:
        raise ConfigurationError(f"Network '{name}' has no chainId")

    url = raw.get("url")
    if url is not None and not isinstance(url, str):
        raise ConfigurationError(f"Network '{name}' url must be a string")

    raw_accounts = raw.get("accounts")
    accounts = None
    if raw_accounts is not None:
        if not isinstance(raw_accounts, Mapping):
            raise ConfigurationError(
                f"Network '{name}' accounts must be an object with a mnemonic"
            )
        accounts = AccountsConfig(
            mnemonic=str(raw_accounts.get("mnemonic") or ""),
            initial_index=_to_int(raw_accounts.get("initialIndex", 0), f"{name}.accounts.initialIndex"),
            count=_to_int(raw_accounts.get("count", DEFAULT_ACCOUNT_COUNT), f"{name}.accounts.count"),
            path=str(raw_accounts.get("path", DEFAULT_DERIVATION_PATH)),
            accounts_balance=_to_int(
                raw_accounts.get("accountsBalance", DEFAULT_ACCOUNTS_BALANCE),
                f"{name}.accounts.accountsBalance",
            ),
        )

    return NetworkConfig(
        name=name,
        chain_id=_to_int(raw["chainId"], f"{name}.chainId"),
        accounts=accounts,
        url=url,
        timeout=_to_int(raw.get("timeout", DEFAULT_TIMEOUT_MS), f"{name}.timeout"),
    )


def _parse_compilers(raw: Any) -> Tuple[CompilerConfig, ...]:
    if raw is None:
        return ()

    # Hardhat accepts a bare version string as shorthand
    if isinstance(raw, str):
        raw = {"compilers": [{"version": raw}]}

    if not isinstance(raw, Mapping):
        raise ConfigurationError("solidity must be a version string or an object")

    raw_compilers = raw.get("compilers", [])
    if not isinstance(raw_compilers, list):
        raise ConfigurationError("solidity.compilers must be a list")

    compilers = []
    for entry in raw_compilers:
        if not isinstance(entry, Mapping):
            raise ConfigurationError(f"Compiler entry must be an object, got {entry!r}")
        version = str(entry.get("version", ""))
        if not _VERSION_RE.match(version):
            raise ConfigurationError(f"Invalid compiler version: '{version}'")

        settings = entry.get("settings") or {}
        if not isinstance(settings, Mapping):
            raise ConfigurationError(f"solidity {version} settings must be an object")

        optimizer = settings.get("optimizer") or {}
        if not isinstance(optimizer, Mapping):
            raise ConfigurationError(f"solidity {version} optimizer must be an object")

        runs = _to_int(optimizer.get("runs", 200), f"solidity {version} optimizer.runs")
        if runs < 0:
            raise ConfigurationError(f"Optimizer runs must be >= 0, got {runs}")

        compilers.append(
            CompilerConfig(
                version=version,
                optimizer_enabled=bool(optimizer.get("enabled", False)),
                optimizer_runs=runs,
            )
        )
    return tuple(compilers)


def _check_unique_chain_ids(networks: Dict[str, NetworkConfig]) -> None:
    seen: Dict[int, str] = {}
    for name, network in networks.items():
        if network.chain_id in seen:
            raise ConfigurationError(
                f"Networks '{seen[network.chain_id]}' and '{name}' share chain id {network.chain_id}"
            )
        seen[network.chain_id] = name


def _with_mnemonic(network: NetworkConfig, mnemonic: str) -> NetworkConfig:
    if network.accounts is None:
        return replace(network, accounts=AccountsConfig(mnemonic=mnemonic))
    return replace(network, accounts=replace(network.accounts, mnemonic=mnemonic))


def _to_int(value: Any, key: str) -> int:
    # Balances are written as decimal strings to survive JSON number precision
    if isinstance(value, bool):
        raise ConfigurationError(f"{key} must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdecimal():
        return int(value)
    raise ConfigurationError(f"{key} must be an integer, got {value!r}")
