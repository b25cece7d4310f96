"""Exception classes for rarity-crafting-market deployments."""


class ConfigurationError(Exception):
    """Base exception for missing or malformed network, account or contract configuration."""

    pass


class DeploymentError(Exception):
    """Base exception for transaction submission, confirmation or initializer failures."""

    pass


class UnknownNetworkError(ConfigurationError, ValueError):
    """Raised when the requested network is not configured."""

    pass


class ChainIdMismatchError(ConfigurationError, ValueError):
    """Raised when an RPC endpoint reports a different chain id than configured."""

    pass


class ArtifactNotFoundError(ConfigurationError, FileNotFoundError):
    """Raised when a contract identifier does not resolve to a compiled artifact."""

    pass


class InitializerArgumentError(DeploymentError, ValueError):
    """Raised when initializer arguments do not match the initializer signature."""

    pass


class TransactionRevertedError(DeploymentError):
    """Raised when a deployment transaction is mined with a failed status."""

    pass


class NetworkUnavailableError(DeploymentError, ConnectionError):
    """Raised when the RPC endpoint of a network cannot be reached."""

    pass
