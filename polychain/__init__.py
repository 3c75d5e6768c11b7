"""Chain parameters, address codecs, ABI and RLP encoding, transactions and gas estimation for EVM chains and Filecoin."""

__version__ = "0.1.0"