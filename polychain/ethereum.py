"""EIP-1559 fee estimation and dynamic-fee transaction building for Ethereum."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from polychain.evm_address import Address, AddressError
from polychain.evm_client import RPCError
from polychain.evm_tx import DynamicFeeTransaction, Tx

DEFAULT_CLIENT_RPC_URL = "http://127.0.0.1:8545/"

# How many blocks to consider for priority fee estimation.
FEE_HISTORY_BLOCKS = 10
# The percentile of effective priority fees to include.
FEE_HISTORY_PERCENTILE = 5
# Used when the max fee per gas cannot be calculated.
FALLBACK_MAX_FEE_PER_GAS = 20_000_000_000
# Base fee (in wei) at which priority fee estimation starts.
PRIORITY_FEE_ESTIMATION_TRIGGER = 100_000_000_000
# Priority fee returned when the trigger is not met.
DEFAULT_PRIORITY_FEE = 3_000_000_000
# A percentage jump in rewards above which lower rewards are ignored.
PRIORITY_FEE_INCREASE_BOUNDARY = 200


@dataclass(frozen=True)
class GasOptions:
    """Parameters of the fee recommendation heuristic."""

    fee_history_blocks: int = FEE_HISTORY_BLOCKS
    fee_history_percentile: int = FEE_HISTORY_PERCENTILE
    fallback_max_fee_per_gas: int = FALLBACK_MAX_FEE_PER_GAS
    priority_fee_estimation_trigger: int = PRIORITY_FEE_ESTIMATION_TRIGGER
    default_priority_fee: int = DEFAULT_PRIORITY_FEE
    priority_fee_increase_boundary: int = PRIORITY_FEE_INCREASE_BOUNDARY


def _quantity(value) -> int:
    if isinstance(value, int):
        return value
    return int(value, 16)


def _parse_reward(text) -> Optional[int]:
    try:
        return int(text, 0)
    except (TypeError, ValueError):
        return None


def _max_fee_multiplier(base_fee: int) -> int:
    """Multiplier in tenths applied to the base fee."""
    if base_fee < 40_000_000_000:
        return 20
    if base_fee < 100_000_000_000:
        return 16
    if base_fee < 200_000_000_000:
        return 14
    return 12


@dataclass
class GasEstimator:
    """Recommends a priority fee and a max fee per gas for EIP-1559 transactions."""

    client: object
    options: GasOptions = field(default_factory=GasOptions)

    def _fallback(self) -> tuple:
        return self.options.default_priority_fee, self.options.fallback_max_fee_per_gas

    def estimate_gas(self) -> tuple:
        """Return (max priority fee per gas, max fee per gas)."""
        try:
            latest = self.client.header()
        except RPCError as exc:
            raise RPCError(f"failed to get eth suggested gas price: {exc}") from exc

        raw_base_fee = latest.get("baseFeePerGas")
        if raw_base_fee is None:
            return self._fallback()
        base_fee = _quantity(raw_base_fee)

        estimated = self.estimate_priority_fee(base_fee, _quantity(latest["number"]))
        if estimated is None:
            return self._fallback()

        max_priority_fee = max(self.options.default_priority_fee, estimated)
        potential_max_fee = base_fee * _max_fee_multiplier(base_fee) // 10

        max_fee = potential_max_fee
        if max_priority_fee > potential_max_fee:
            max_fee = potential_max_fee + max_priority_fee
        return max_priority_fee, max_fee

    def estimate_priority_fee(self, base_fee: int, block_number: int) -> Optional[int]:
        """Median of recent priority rewards, ignoring low outliers; None if too few."""
        if base_fee < self.options.priority_fee_estimation_trigger:
            return self.options.default_priority_fee

        try:
            history = self.client.call(
                "eth_feeHistory",
                self.options.fee_history_blocks,
                hex(block_number),
                [int(self.options.fee_history_percentile)],
            )
        except RPCError as exc:
            raise RPCError(f"failed to get eth fee history: {exc}") from exc

        rewards = sorted(
            reward
            for reward in (
                _parse_reward(entry[0])
                for entry in (history or {}).get("reward") or []
                if entry
            )
            if reward
        )
        if len(rewards) <= 1:
            return None

        increases = [(upper - lower) // lower * 100 for lower, upper in zip(rewards, rewards[1:])]
        highest_index = max(range(len(increases)), key=lambda i: (increases[i], -i))
        highest = increases[highest_index]

        if highest > self.options.priority_fee_increase_boundary and highest_index >= len(rewards) // 2:
            rewards = rewards[highest_index:]
        return rewards[len(rewards) // 2]


@dataclass(frozen=True)
class TxBuilder:
    """Builds EIP-1559 dynamic-fee transactions for one chain."""

    chain_id: int

    def build_tx(self, from_pub_key, to, value, nonce, gas, gas_tip_cap, gas_fee_cap, payload) -> Tx:
        try:
            to_addr = Address.from_hex(str(to))
        except AddressError as exc:
            raise ValueError(f"bad to address '{to}': {exc}") from exc
        return Tx(
            DynamicFeeTransaction(
                chain_id=self.chain_id,
                nonce=int(nonce),
                gas_tip_cap=int(gas_tip_cap),
                gas_fee_cap=int(gas_fee_cap),
                gas=int(gas),
                to=to_addr.to_bytes(),
                value=int(value),
                data=bytes(payload or b""),
            ),
            self.chain_id,
        )