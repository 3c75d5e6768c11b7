"""Gas price estimation from the node's suggested gas price."""

from __future__ import annotations

from polychain.evm_client import Client, RPCError


class GasEstimator:
    """Recommends a gas price for inclusion with minimal delay."""

    def __init__(self, client: Client):
        self.client = client

    def estimate_gas(self) -> tuple:
        """Return (gas price, gas cap), both the node's suggested price."""
        try:
            price = self.client.suggest_gas_price()
        except RPCError as exc:
            raise RPCError(f"failed to get eth suggested gas price: {exc}") from exc
        return price, price