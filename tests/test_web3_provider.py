"""
Tests for the Web3 trust provider.

Contracts and the node's eth module are replaced by stubs, so no node is needed.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace

import aiohttp
import pytest
from web3.exceptions import ContractLogicError

from graphite_trust.config import Settings
from graphite_trust.services.provider import NotInitializedError, ProviderError
from graphite_trust.services.trust_client import TrustClient
from graphite_trust.services.web3_provider import LAST_KYC_REQUEST_FIELDS, Web3TrustProvider

ALICE = "0x1111111111111111111111111111111111111111"
SIGNER = "0x9999999999999999999999999999999999999999"


class NodeUnavailable(aiohttp.ClientResponseError):
    """HTTP 503 answer from the node's JSON-RPC endpoint."""

    def __init__(self):
        super().__init__(None, (), status=503, message="Service Unavailable")

    def __str__(self):
        return f"{self.status}, message='{self.message}'"


class StubCall:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.tx_params = None

    async def call(self):
        if self.error:
            raise self.error
        return self.result

    async def build_transaction(self, params):
        if self.error:
            raise self.error
        self.tx_params = params
        return {"to": ALICE, **params}


class StubContract:
    def __init__(self, **calls):
        self.functions = SimpleNamespace(**{name: (lambda *args, c=call: c) for name, call in calls.items()})


class StubEth:
    def __init__(self, receipt_status=1, send_error=None):
        self.receipt_status = receipt_status
        self.send_error = send_error

    async def get_transaction_count(self, address):
        return 7

    async def send_raw_transaction(self, raw):
        if self.send_error:
            raise self.send_error
        return b"\xab" * 32

    async def wait_for_transaction_receipt(self, tx_hash):
        return {"status": self.receipt_status, "blockNumber": 321}


class StubAccount:
    address = SIGNER

    def sign_transaction(self, tx):
        return SimpleNamespace(raw_transaction=b"\x01")


def connected_provider(eth=None, **contracts):
    provider = Web3TrustProvider(Settings(_env_file=None))
    provider._contracts = contracts
    provider._connected = True
    provider.account = StubAccount()
    if eth is not None:
        provider.w3 = SimpleNamespace(eth=eth)
    return provider


@pytest.fixture
def web3_provider():
    return Web3TrustProvider(Settings(_env_file=None))


def test_not_connected_until_connect(web3_provider):
    assert web3_provider.is_connected is False


@pytest.mark.parametrize("call", [
    lambda p: p.get_wallet_address(),
    lambda p: p.is_activated(ALICE),
    lambda p: p.get_reputation(ALICE),
    lambda p: p.get_kyc_fee(1),
    lambda p: p.activate_account(),
])
def test_operations_before_connect_raise(web3_provider, call):
    with pytest.raises(NotInitializedError):
        asyncio.run(call(web3_provider))


def test_http_error_from_node_becomes_provider_error():
    provider = connected_provider(reputation=StubContract(getReputation=StubCall(error=NodeUnavailable())))

    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(provider.get_reputation(ALICE))

    assert exc_info.value.operation == "get_reputation"
    assert "503" in exc_info.value.message


def test_contract_revert_on_read_becomes_provider_error():
    provider = connected_provider(
        activation=StubContract(isActivated=StubCall(error=ContractLogicError("execution reverted")))
    )

    with pytest.raises(ProviderError, match="execution reverted") as exc_info:
        asyncio.run(provider.is_activated(ALICE))

    assert exc_info.value.operation == "is_activated"


def test_activate_account_pays_fee_and_returns_receipt():
    activate = StubCall()
    provider = connected_provider(
        eth=StubEth(),
        activation=StubContract(getActivationFeeAmount=StubCall(result=10**15), activate=activate)
    )

    receipt = asyncio.run(provider.activate_account())

    assert receipt.tx_hash == "0x" + "ab" * 32
    assert receipt.block_number == 321
    assert activate.tx_params == {"from": SIGNER, "nonce": 7, "value": 10**15}


def test_reverted_transaction_becomes_provider_error():
    provider = connected_provider(
        eth=StubEth(receipt_status=0),
        activation=StubContract(getActivationFeeAmount=StubCall(result=0), activate=StubCall())
    )

    with pytest.raises(ProviderError, match="reverted") as exc_info:
        asyncio.run(provider.activate_account())

    assert exc_info.value.operation == "activate_account"


def test_send_failure_becomes_provider_error():
    provider = connected_provider(
        eth=StubEth(send_error=NodeUnavailable()),
        kyc=StubContract(getKYCFee=StubCall(result=5), createKYCRequest=StubCall())
    )

    with pytest.raises(ProviderError) as exc_info:
        asyncio.run(provider.create_kyc_request("kyc_1_abcdef123", 1))

    assert exc_info.value.operation == "create_kyc_request"


def test_last_kyc_request_empty_id_is_none():
    provider = connected_provider(kyc=StubContract(getLastKycRequest=StubCall(result=("", 0, 0, 0))))

    assert asyncio.run(provider.get_last_kyc_request(ALICE)) is None


def test_last_kyc_request_fields():
    provider = connected_provider(
        kyc=StubContract(getLastKycRequest=StubCall(result=("kyc_1_abcdef123", 2, 1, 1700000000)))
    )

    request = asyncio.run(provider.get_last_kyc_request(ALICE))

    assert tuple(request) == LAST_KYC_REQUEST_FIELDS
    assert request == {"request_id": "kyc_1_abcdef123", "level": 2, "status": 1, "timestamp": 1700000000}


def test_busy_node_activation_is_structured_failure():
    provider = connected_provider(
        eth=StubEth(send_error=NodeUnavailable()),
        activation=StubContract(
            isActivated=StubCall(result=False),
            getActivationFeeAmount=StubCall(result=0),
            activate=StubCall()
        )
    )

    result = asyncio.run(TrustClient(provider=provider).activate_account())

    assert result.success is False
    assert "503" in result.error


def test_busy_node_read_is_502(client):
    provider = connected_provider(
        activation=StubContract(isActivated=StubCall(result=True)),
        reputation=StubContract(getReputation=StubCall(error=NodeUnavailable())),
        kyc=StubContract(getKycLevel=StubCall(result=1)),
        filter=StubContract(getFilterLevel=StubCall(result=0))
    )
    client.app.state.trust_client = TrustClient(provider=provider)

    r = client.get(f"/trust-profile/{ALICE}")

    assert r.status_code == 502
    assert r.json()["error"] == "provider_error"
    assert r.json()["details"]["operation"] == "get_reputation"
