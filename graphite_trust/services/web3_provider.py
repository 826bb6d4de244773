"""
Web3 adapter for the Graphite trust contracts.

Implements TrustDataProvider on top of web3.py's async client. Signing and
transaction submission are done by web3/eth-account; this module only maps
contract calls to provider operations and node failures to ProviderError.
"""

import asyncio
from typing import Any, Awaitable, Dict, Optional, TypeVar
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import Web3Exception
import aiohttp
from eth_account import Account
import structlog

from ..config import Settings
from ..models import TransactionReceipt
from .provider import NotInitializedError, ProviderError, TrustDataProvider

logger = structlog.get_logger(__name__)

T = TypeVar("T")

# aiohttp.ClientResponseError (HTTP 4xx/5xx from the node) is not an OSError
NODE_ERRORS = (Web3Exception, aiohttp.ClientError, ValueError, OSError, asyncio.TimeoutError)


# ============================================================================
# Contract ABIs (only the functions the gateway calls)
# ============================================================================

def _view(name: str, inputs: list, output_type: str) -> dict:
    return {
        "name": name,
        "type": "function",
        "stateMutability": "view",
        "inputs": inputs,
        "outputs": [{"name": "", "type": output_type}],
    }


ACCOUNT_INPUT = [{"name": "account", "type": "address"}]
LEVEL_INPUT = [{"name": "level", "type": "uint8"}]

ACTIVATION_ABI = [
    _view("isActivated", ACCOUNT_INPUT, "bool"),
    _view("getActivationFeeAmount", [], "uint256"),
    {
        "name": "activate",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [],
        "outputs": [],
    },
]

REPUTATION_ABI = [
    _view("getReputation", ACCOUNT_INPUT, "uint256"),
]

FILTER_ABI = [
    _view("getFilterLevel", ACCOUNT_INPUT, "uint8"),
]

KYC_ABI = [
    _view("getKycLevel", ACCOUNT_INPUT, "uint8"),
    _view("getKYCFee", LEVEL_INPUT, "uint256"),
    {
        "name": "getLastKycRequest",
        "type": "function",
        "stateMutability": "view",
        "inputs": ACCOUNT_INPUT,
        "outputs": [
            {"name": "uuid", "type": "string"},
            {"name": "level", "type": "uint8"},
            {"name": "status", "type": "uint8"},
            {"name": "timestamp", "type": "uint256"},
        ],
    },
    {
        "name": "createKYCRequest",
        "type": "function",
        "stateMutability": "payable",
        "inputs": [
            {"name": "uuid", "type": "string"},
            {"name": "level", "type": "uint8"},
        ],
        "outputs": [],
    },
]

LAST_KYC_REQUEST_FIELDS = ("request_id", "level", "status", "timestamp")


class Web3TrustProvider(TrustDataProvider):
    """
    Trust data provider backed by a Graphite node over JSON-RPC.
    """

    def __init__(self, settings: Settings):
        """
        Initialize the adapter. No network traffic happens until connect().

        Args:
            settings: Application settings with node URL, key and contract addresses
        """
        self.settings = settings
        self.w3 = AsyncWeb3(AsyncHTTPProvider(settings.graphite_node_url))
        self.account = None
        self._connected = False
        self._contracts: Dict[str, Any] = {}

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        """
        Connect to the node, load the signer and bind the trust contracts.

        Raises:
            ProviderError if the node is unreachable or the key is invalid
        """
        logger.info(
            "connecting_to_graphite_node",
            node_url=self.settings.graphite_node_url
        )

        try:
            reachable = await self.w3.is_connected()
        except NODE_ERRORS as e:
            raise ProviderError(str(e), operation="connect") from e

        if not reachable:
            raise ProviderError(
                f"Graphite node unreachable at {self.settings.graphite_node_url}",
                operation="connect"
            )

        if not self.settings.private_key:
            raise ProviderError("PRIVATE_KEY is not configured", operation="connect")

        try:
            self.account = Account.from_key(self.settings.private_key)
        except ValueError as e:
            raise ProviderError(f"Invalid private key: {e}", operation="connect") from e

        self._contracts = {
            "activation": self._bind(self.settings.activation_contract, ACTIVATION_ABI),
            "reputation": self._bind(self.settings.reputation_contract, REPUTATION_ABI),
            "kyc": self._bind(self.settings.kyc_contract, KYC_ABI),
            "filter": self._bind(self.settings.filter_contract, FILTER_ABI),
        }
        self._connected = True

        logger.info(
            "graphite_node_connected",
            wallet_address=self.account.address
        )

    def _bind(self, address: str, abi: list):
        return self.w3.eth.contract(address=AsyncWeb3.to_checksum_address(address), abi=abi)

    def _contract(self, name: str):
        if not self._connected:
            raise NotInitializedError()
        return self._contracts[name]

    async def _node_call(self, operation: str, call: Awaitable[T]) -> T:
        try:
            return await call
        except NODE_ERRORS as e:
            logger.warning(
                "provider_call_failed",
                operation=operation,
                error=str(e)
            )
            raise ProviderError(str(e), operation=operation) from e

    # ------------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------------

    async def get_wallet_address(self) -> str:
        if not self._connected:
            raise NotInitializedError()
        return self.account.address

    async def is_activated(self, address: str) -> bool:
        fn = self._contract("activation").functions.isActivated(AsyncWeb3.to_checksum_address(address))
        return await self._node_call("is_activated", fn.call())

    async def get_reputation(self, address: str) -> int:
        fn = self._contract("reputation").functions.getReputation(AsyncWeb3.to_checksum_address(address))
        return await self._node_call("get_reputation", fn.call())

    async def get_kyc_level(self, address: str) -> int:
        fn = self._contract("kyc").functions.getKycLevel(AsyncWeb3.to_checksum_address(address))
        return await self._node_call("get_kyc_level", fn.call())

    async def get_filter_level(self, address: str) -> int:
        fn = self._contract("filter").functions.getFilterLevel(AsyncWeb3.to_checksum_address(address))
        return await self._node_call("get_filter_level", fn.call())

    async def get_last_kyc_request(self, address: str) -> Optional[Dict[str, Any]]:
        fn = self._contract("kyc").functions.getLastKycRequest(AsyncWeb3.to_checksum_address(address))
        raw = await self._node_call("get_last_kyc_request", fn.call())
        request = dict(zip(LAST_KYC_REQUEST_FIELDS, raw))
        # An empty request id means the account never submitted one
        if not request.get("request_id"):
            return None
        return request

    async def get_activation_fee(self) -> int:
        fn = self._contract("activation").functions.getActivationFeeAmount()
        return await self._node_call("get_activation_fee", fn.call())

    async def get_kyc_fee(self, level: int) -> int:
        fn = self._contract("kyc").functions.getKYCFee(level)
        return await self._node_call("get_kyc_fee", fn.call())

    # ------------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------------

    async def _transact(self, operation: str, fn, value: int) -> TransactionReceipt:
        """
        Build, sign and submit a contract call, then wait for the receipt.

        Raises:
            ProviderError on any node failure or a reverted transaction
        """
        nonce = await self._node_call(operation, self.w3.eth.get_transaction_count(self.account.address))
        tx = await self._node_call(
            operation,
            fn.build_transaction({
                "from": self.account.address,
                "nonce": nonce,
                "value": value,
            })
        )
        signed = self.account.sign_transaction(tx)
        tx_hash = await self._node_call(operation, self.w3.eth.send_raw_transaction(signed.raw_transaction))
        receipt = await self._node_call(operation, self.w3.eth.wait_for_transaction_receipt(tx_hash))

        tx_hash_hex = AsyncWeb3.to_hex(tx_hash)
        if receipt["status"] == 0:
            raise ProviderError(f"Transaction {tx_hash_hex} reverted", operation=operation)

        logger.info(
            "transaction_mined",
            operation=operation,
            tx_hash=tx_hash_hex,
            block_number=receipt["blockNumber"]
        )

        return TransactionReceipt(tx_hash=tx_hash_hex, block_number=receipt["blockNumber"])

    async def activate_account(self) -> TransactionReceipt:
        contract = self._contract("activation")
        fee = await self.get_activation_fee()
        return await self._transact("activate_account", contract.functions.activate(), fee)

    async def create_kyc_request(self, request_id: str, level: int) -> TransactionReceipt:
        contract = self._contract("kyc")
        fee = await self.get_kyc_fee(level)
        return await self._transact(
            "create_kyc_request",
            contract.functions.createKYCRequest(request_id, level),
            fee
        )


__all__ = ["Web3TrustProvider"]
