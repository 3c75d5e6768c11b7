"""JSON-RPC client for EVM-compatible nodes."""

from __future__ import annotations

import itertools
from typing import Any, Optional

import requests

from polychain.evm_address import Address, AddressError
from polychain.evm_tx import DynamicFeeTransaction, LegacyTransaction, Tx

DEFAULT_CLIENT_RPC_URL = "http://127.0.0.1:8545/"
ETHEREUM_RPC_URL = "http://127.0.0.1:8545/"
FANTOM_RPC_URL = "http://127.0.0.1:18545/"
KAVA_RPC_URL = "http://127.0.0.1:8575/"
MOONBEAM_RPC_URL = "http://127.0.0.1:8575/"
POLYGON_RPC_URL = "http://127.0.0.1:28545/"


class RPCError(RuntimeError):
    """Raised when a node call fails or returns an error."""


def _qty(value: Optional[str]) -> int:
    return int(value, 16) if value else 0


def _data(value: Optional[str]) -> bytes:
    if not value:
        return b""
    return bytes.fromhex(value[2:] if value.startswith("0x") else value)


def _parse_transaction(obj: dict):
    to = _data(obj.get("to")) or None
    common = dict(
        nonce=_qty(obj.get("nonce")),
        gas=_qty(obj.get("gas")),
        to=to,
        value=_qty(obj.get("value")),
        data=_data(obj.get("input")),
        v=_qty(obj.get("v")),
        r=_qty(obj.get("r")),
        s=_qty(obj.get("s")),
    )
    if _qty(obj.get("type")) == DynamicFeeTransaction.TYPE:
        return DynamicFeeTransaction(
            chain_id=_qty(obj.get("chainId")),
            gas_tip_cap=_qty(obj.get("maxPriorityFeePerGas")),
            gas_fee_cap=_qty(obj.get("maxFeePerGas")),
            **common,
        )
    return LegacyTransaction(gas_price=_qty(obj.get("gasPrice")), **common)


def _address(addr) -> str:
    try:
        return Address.from_hex(str(addr)).checksum_hex()
    except AddressError as exc:
        raise RPCError(f"bad to address '{addr}': {exc}") from exc


class Client:
    """Talks to an EVM node over JSON-RPC."""

    def __init__(self, rpc_url: str = DEFAULT_CLIENT_RPC_URL, session=None, timeout: float = 30.0):
        self.rpc_url = rpc_url
        self._session = session if session is not None else requests.Session()
        self._timeout = timeout
        self._ids = itertools.count(1)

    def call(self, method: str, *args) -> Any:
        payload = {"jsonrpc": "2.0", "id": next(self._ids), "method": method, "params": list(args)}
        try:
            response = self._session.post(self.rpc_url, json=payload, timeout=self._timeout)
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise RPCError(f"{method}: {exc}") from exc
        if body.get("error"):
            error = body["error"]
            message = error.get("message", error) if isinstance(error, dict) else error
            raise RPCError(f"{method}: {message}")
        return body.get("result")

    def header(self) -> dict:
        header = self.call("eth_getBlockByNumber", "latest", False)
        if header is None:
            raise RPCError("fetching header: not found")
        return header

    def latest_block(self) -> int:
        return _qty(self.header()["number"])

    def tx(self, tx_id: bytes) -> tuple:
        """Return the transaction and its number of confirmations."""
        tx_hex = "0x" + bytes(tx_id).hex()
        obj = self.call("eth_getTransactionByHash", tx_hex)
        if obj is None:
            raise RPCError(f"fetching tx by hash '{tx_hex}': not found")
        chain_id = _qty(self.call("eth_chainId"))
        tx = Tx(_parse_transaction(obj), chain_id)
        if obj.get("blockNumber") is None:
            raise RPCError(f"tx {tx_hex} is pending")
        receipt = self.call("eth_getTransactionReceipt", tx_hex)
        if receipt is None:
            return tx, 0
        if _qty(receipt.get("status")) == 0:
            raise RPCError(f"tx {tx_hex} reverted, reciept status 0")
        latest = self.latest_block()
        return tx, latest - _qty(receipt.get("blockNumber"))

    def submit_tx(self, tx: Tx) -> None:
        if not isinstance(tx, Tx):
            raise TypeError(f"expected type Tx, got type {type(tx).__name__}")
        try:
            self.call("eth_sendRawTransaction", "0x" + tx.serialize().hex())
        except RPCError as exc:
            raise RPCError(f"sending transaction '{tx.hash().hex()}': {exc}") from exc

    def account_nonce(self, addr) -> int:
        target = _address(addr)
        try:
            return _qty(self.call("eth_getTransactionCount", target, "latest"))
        except RPCError as exc:
            raise RPCError(f"failed to get nonce for '{addr}': {exc}") from exc

    def account_balance(self, addr) -> int:
        target = _address(addr)
        try:
            return _qty(self.call("eth_getBalance", target, "latest"))
        except RPCError as exc:
            raise RPCError(f"failed to get balance for '{addr}': {exc}") from exc

    def call_contract(self, program, calldata: bytes) -> bytes:
        target = _address(program)
        result = self.call("eth_call", {"to": target, "data": "0x" + bytes(calldata).hex()}, "latest")
        return _data(result)

    def suggest_gas_price(self) -> int:
        return _qty(self.call("eth_gasPrice"))