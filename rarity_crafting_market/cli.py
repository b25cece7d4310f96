"""
Command line interface.

    rarity-market accounts
    rarity-market deploy RarityCraftingMarket --args 0xce761D788DF608BD21bdd59d6f4B54b2e27F25Bb 1 5
    rarity-market check-artifacts
"""

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from dotenv import load_dotenv
from loguru import logger

from .artifacts.loader import ArtifactRegistry
from .config import ProjectConfig, load_config
from .contracts.crafting_market import RarityCraftingMarketContract
from .contracts.upgrades import DEFAULT_TIMEOUT, PROXY_KINDS, ProxyDeployer
from .exceptions import ConfigurationError, DeploymentError, InitializerArgumentError
from .network import connect
from .signers import SignerDirectory

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)

TRUE_VALUES = ("true", "1", "yes")
FALSE_VALUES = ("false", "0", "no")


def configure_logging(verbose: bool = False) -> None:
    logger.remove()
    logger.add(sys.stderr, format=LOG_FORMAT, level="DEBUG" if verbose else "INFO")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rarity-market",
        description="Deploy the RarityCraftingMarket contract behind an upgradeable proxy",
    )
    parser.add_argument("--config", type=Path, default=None, help="Path to network config JSON")
    parser.add_argument("--network", default=None, help="Network name (default: defaultNetwork)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")

    subparsers = parser.add_subparsers(dest="command", required=True)

    accounts = subparsers.add_parser("accounts", help="Prints the list of accounts")
    accounts.set_defaults(func=cmd_accounts)

    deploy = subparsers.add_parser("deploy", help="Deploy a contract behind a proxy")
    deploy.add_argument(
        "contract",
        nargs="?",
        default=RarityCraftingMarketContract.CONTRACT_NAME,
        help="Contract name (default: %(default)s)",
    )
    deploy.add_argument("--args", nargs="*", default=[], help="Initializer arguments")
    deploy.add_argument("--initializer", default="initialize", help="Initializer function name")
    deploy.add_argument("--kind", choices=sorted(PROXY_KINDS), default="transparent")
    deploy.add_argument("--artifacts", type=Path, default=None, help="Hardhat artifacts directory")
    deploy.add_argument(
        "--timeout", type=float, default=DEFAULT_TIMEOUT, help="Confirmation timeout in seconds"
    )
    deploy.set_defaults(func=cmd_deploy)

    check = subparsers.add_parser("check-artifacts", help="Check compiled artifacts are loadable")
    check.add_argument("contracts", nargs="*", help="Contract names (default: all found)")
    check.add_argument("--artifacts", type=Path, default=None, help="Hardhat artifacts directory")
    check.set_defaults(func=cmd_check_artifacts)

    return parser


def cmd_accounts(args: argparse.Namespace, config: ProjectConfig) -> int:
    network = config.get_network(args.network)
    for address in SignerDirectory(network).addresses():
        print(address)
    return 0


def cmd_deploy(args: argparse.Namespace, config: ProjectConfig) -> int:
    network = config.get_network(args.network)
    signers = SignerDirectory(network).get_signers()
    registry = ArtifactRegistry(args.artifacts)

    # Resolve and check everything local before touching the network
    artifact = registry.get_deployable(args.contract)
    init_args = coerce_arguments(artifact.initializer(args.initializer), args.args)

    w3 = connect(network, signers)
    deployer = ProxyDeployer(w3, signers[0], registry, kind=args.kind, timeout=args.timeout)
    logger.info(f"Deploying from: {deployer.signer.address}")

    if args.contract == RarityCraftingMarketContract.CONTRACT_NAME and not init_args:
        deployment = RarityCraftingMarketContract(registry).deploy(deployer)
    else:
        deployment = deployer.deploy_proxy(args.contract, init_args, args.initializer)

    deployment.deployed()
    logger.success(f"Implementation: {deployment.record.implementation_address}")
    print(deployment.address)
    return 0


def cmd_check_artifacts(args: argparse.Namespace, config: ProjectConfig) -> int:
    registry = ArtifactRegistry(args.artifacts)
    names = args.contracts or registry.list_available_contracts()

    if not names:
        logger.error(f"No artifacts found in {registry.artifacts_dir}")
        return 1

    status = registry.validate_artifacts(names)
    for name, available in status.items():
        print(f"{'ok' if available else 'missing'}\t{name}")

    if all(status.values()):
        logger.success(f"All {len(status)} contracts valid")
        return 0

    logger.error("Some contracts failed validation")
    return 1


def coerce_arguments(fn_abi: Optional[Dict[str, Any]], raw_args: Sequence[str]) -> List[Any]:
    """
    Convert command line strings to initializer argument values.

    Integer and bool inputs are parsed; everything else is passed through.
    Arity is left for the deployer to check.
    """
    if fn_abi is None:
        return list(raw_args)

    inputs = fn_abi.get("inputs", [])
    values: List[Any] = []
    for position, raw in enumerate(raw_args):
        abi_type = inputs[position]["type"] if position < len(inputs) else None
        if abi_type and abi_type.startswith(("uint", "int")) and not abi_type.endswith("]"):
            try:
                values.append(_parse_int(raw))
            except ValueError as e:
                raise InitializerArgumentError(
                    f"Argument {position} must be an integer for {abi_type}, got {raw!r}"
                ) from e
        elif abi_type == "bool":
            values.append(_parse_bool(raw, position))
        else:
            values.append(raw)
    return values


def _parse_int(raw: str) -> int:
    try:
        return int(raw, 0)
    except ValueError:
        # base 0 rejects zero-padded decimals such as "010"
        return int(raw, 10)


def _parse_bool(raw: str, position: int) -> bool:
    value = raw.strip().lower()
    if value in TRUE_VALUES:
        return True
    if value in FALSE_VALUES:
        return False
    raise InitializerArgumentError(f"Argument {position} must be a bool, got {raw!r}")


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    try:
        config = load_config(args.config)
        return args.func(args, config)
    except (ConfigurationError, DeploymentError) as e:
        logger.error(str(e))
        return 1


if __name__ == "__main__":
    sys.exit(main())
