"""
Pytest fixtures for Graphite Trust Gateway tests.

Uses an in-memory trust provider in place of a Graphite node.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import pytest

from graphite_trust.models import TransactionReceipt
from graphite_trust.services.provider import NotInitializedError, ProviderError, TrustDataProvider
from graphite_trust.services.trust_client import TrustClient

SIGNER = "0x9999999999999999999999999999999999999999"
ALICE = "0x1111111111111111111111111111111111111111"
BOB = "0x2222222222222222222222222222222222222222"
CAROL = "0x3333333333333333333333333333333333333333"


class FakeTrustProvider(TrustDataProvider):
    """In-memory provider. Accounts are dicts of activated/reputation/kyc_level/filter_level."""

    def __init__(self, wallet_address: str = SIGNER):
        self.wallet_address = wallet_address
        self.accounts: Dict[str, Dict[str, Any]] = {}
        self.last_kyc_requests: Dict[str, Dict[str, Any]] = {}
        self.activation_fee = 10**15
        self.kyc_fees = {1: 10**15, 2: 5 * 10**15, 3: 10**16}
        self.fail_on: Optional[str] = None
        self.calls: list = []
        self._connected = False
        self._block = 100

    def set_account(self, address, activated=False, reputation=0, kyc_level=0, filter_level=0):
        self.accounts[address.lower()] = {
            "activated": activated,
            "reputation": reputation,
            "kyc_level": kyc_level,
            "filter_level": filter_level,
        }

    def _account(self, operation: str, address: str) -> Dict[str, Any]:
        if not self._connected:
            raise NotInitializedError()
        self.calls.append((operation, address))
        if self.fail_on == operation:
            raise ProviderError("execution reverted", operation=operation)
        return self.accounts.get(address.lower(), {
            "activated": False, "reputation": 0, "kyc_level": 0, "filter_level": 0,
        })

    def _check(self, operation: str) -> None:
        if not self._connected:
            raise NotInitializedError()
        self.calls.append((operation, None))
        if self.fail_on == operation:
            raise ProviderError("insufficient funds for gas * price + value", operation=operation)

    def _receipt(self) -> TransactionReceipt:
        self._block += 1
        return TransactionReceipt(tx_hash="0x" + f"{self._block:064x}", block_number=self._block)

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        self._connected = True

    async def get_wallet_address(self) -> str:
        if not self._connected:
            raise NotInitializedError()
        return self.wallet_address

    async def is_activated(self, address):
        return self._account("is_activated", address)["activated"]

    async def get_reputation(self, address):
        return self._account("get_reputation", address)["reputation"]

    async def get_kyc_level(self, address):
        return self._account("get_kyc_level", address)["kyc_level"]

    async def get_filter_level(self, address):
        return self._account("get_filter_level", address)["filter_level"]

    async def get_last_kyc_request(self, address):
        self._account("get_last_kyc_request", address)
        return self.last_kyc_requests.get(address.lower())

    async def get_activation_fee(self):
        self._check("get_activation_fee")
        return self.activation_fee

    async def get_kyc_fee(self, level):
        self._check("get_kyc_fee")
        return self.kyc_fees[level]

    async def activate_account(self):
        self._check("activate_account")
        account = self._account("is_activated", self.wallet_address)
        account["activated"] = True
        self.accounts[self.wallet_address.lower()] = account
        return self._receipt()

    async def create_kyc_request(self, request_id, level):
        self._check("create_kyc_request")
        self.last_kyc_requests[self.wallet_address.lower()] = {
            "request_id": request_id, "level": level, "status": 0, "timestamp": 0,
        }
        return self._receipt()


@pytest.fixture
def provider():
    fake = FakeTrustProvider()
    fake._connected = True
    return fake


@pytest.fixture
def trust_client(provider):
    return TrustClient(provider=provider)


@pytest.fixture
def client(trust_client):
    """FastAPI TestClient with the trust client installed on app state."""
    from fastapi.testclient import TestClient

    from graphite_trust.main import app

    app.state.trust_client = trust_client
    yield TestClient(app)
    app.state.trust_client = None
