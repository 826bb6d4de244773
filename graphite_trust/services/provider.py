"""
Trust data provider interface.

The gateway reads trust data and submits trust transactions only through
this interface; concrete adapters wrap a node client.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

from ..models import TransactionReceipt


class NotInitializedError(RuntimeError):
    """Raised when the provider is used before connect() has succeeded."""

    def __init__(self, message: str = "Trust provider not initialized. Call connect() first."):
        super().__init__(message)


class ProviderError(Exception):
    """
    Failure reported by the trust data provider.

    Covers network failures, contract reverts and insufficient fees. The
    message is the provider's own and is surfaced unchanged.
    """

    def __init__(self, message: str, operation: Optional[str] = None):
        """
        Initialize provider error.

        Args:
            message: Error message from the node client
            operation: Provider operation that failed
        """
        self.message = message
        self.operation = operation
        super().__init__(message)


class TrustDataProvider(ABC):
    """
    Read and write access to on-chain trust data.

    Reads for different fields have no ordering dependency and may be
    awaited concurrently.
    """

    @abstractmethod
    async def connect(self) -> None:
        """Establish the node connection. Raises ProviderError on failure."""

    @property
    @abstractmethod
    def is_connected(self) -> bool:
        """Whether connect() has completed."""

    @abstractmethod
    async def get_wallet_address(self) -> str:
        """Address of the signing account."""

    @abstractmethod
    async def is_activated(self, address: str) -> bool:
        ...

    @abstractmethod
    async def get_reputation(self, address: str) -> int:
        ...

    @abstractmethod
    async def get_kyc_level(self, address: str) -> int:
        ...

    @abstractmethod
    async def get_filter_level(self, address: str) -> int:
        ...

    @abstractmethod
    async def get_last_kyc_request(self, address: str) -> Optional[Dict[str, Any]]:
        """Most recent KYC request of the account, or None if it never made one."""

    @abstractmethod
    async def get_activation_fee(self) -> int:
        """Activation fee in wei."""

    @abstractmethod
    async def get_kyc_fee(self, level: int) -> int:
        """KYC fee in wei for the given level."""

    @abstractmethod
    async def activate_account(self) -> TransactionReceipt:
        """Activate the signing account."""

    @abstractmethod
    async def create_kyc_request(self, request_id: str, level: int) -> TransactionReceipt:
        """Submit a KYC request for the signing account."""


__all__ = ["TrustDataProvider", "ProviderError", "NotInitializedError"]
