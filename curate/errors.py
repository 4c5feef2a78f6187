"""Named failures raised by the fee engine, action layer, and item pipeline."""

from __future__ import annotations

from typing import Iterable


class CurateError(Exception):
    """Base class for every error raised by this package."""


class ExternalReadError(CurateError):
    """Raised when a contract getter cannot be read or decoded."""

    def __init__(self, method: str, message: str | None = None) -> None:
        self.method = method
        super().__init__(message or f"Failed to read '{method}' from contract")


class ExternalWriteError(CurateError):
    """Raised when a transaction cannot be estimated or submitted."""

    def __init__(self, method: str, message: str | None = None) -> None:
        self.method = method
        super().__init__(message or f"Failed to submit '{method}' transaction")


class UserRejectedError(ExternalWriteError):
    """Raised when the signer explicitly declined the transaction."""

    def __init__(self, method: str) -> None:
        super().__init__(method, "Transaction rejected by user")


class InvalidArbitratorError(CurateError):
    """Raised when the registry reports an empty or malformed arbitrator."""


class NotDisputedError(CurateError):
    """Raised when appeal data is requested for a request without a dispute."""

    def __init__(self, item_id: str, request_id: int) -> None:
        self.item_id = item_id
        self.request_id = request_id
        super().__init__(
            f"Request {request_id} of item {item_id} is not disputed, no appeal available"
        )


class AlreadyFundedError(CurateError):
    """Raised when an appeal side has nothing left to fund."""


class InvalidItemStateError(CurateError):
    """Raised when an item is not in a state that allows the requested action."""


class UnsupportedChainError(CurateError):
    def __init__(self, chain_id: int, supported: Iterable[int]) -> None:
        self.chain_id = chain_id
        self.supported = tuple(sorted(int(value) for value in supported))
        super().__init__(
            f"Unsupported chain ID: {chain_id}. Supported chains are: "
            + ", ".join(str(value) for value in self.supported)
        )


class CacheKeyError(CurateError, ValueError):
    """Raised when item filters cannot be turned into a cache key."""


class NetworkError(CurateError):
    """Raised on transport failures to the indexer or storage network."""


class IndexerQueryError(NetworkError):
    """Raised when the indexer answers with GraphQL errors or a malformed payload."""


class AbortedError(CurateError):
    """Raised when a cancellation token was triggered before the next request."""


class ConfigurationError(CurateError):
    """Raised when settings are insufficient to reach an external service."""


__all__ = [
    "AbortedError",
    "AlreadyFundedError",
    "CacheKeyError",
    "ConfigurationError",
    "CurateError",
    "ExternalReadError",
    "ExternalWriteError",
    "IndexerQueryError",
    "InvalidArbitratorError",
    "InvalidItemStateError",
    "NetworkError",
    "NotDisputedError",
    "UnsupportedChainError",
    "UserRejectedError",
]
