# polychain

A library of building blocks for working with several blockchains from Python.

| Module | What it provides |
| --- | --- |
| `polychain.params` | `ChainParams` and `GenesisBlock` for DigiByte (`DIGIBYTE_MAINNET`, `DIGIBYTE_TESTNET`, `DIGIBYTE_REGTEST`) and Dogecoin (`DOGECOIN_MAINNET`, `DOGECOIN_TESTNET`, `DOGECOIN_REGTEST`); a registry of network magics with `register()` and `is_registered()` that raises `ParamsRegistrationError` on duplicates |
| `polychain.evm_address` | `Address` (20 bytes) with `from_hex`, `from_bytes`, `from_json`, `to_bytes`, `to_json`, `checksum_hex` (EIP-55); `keccak256`, `to_checksum_hex`; `AddressEncoder`, `AddressDecoder`, `AddressEncodeDecoder` |
| `polychain.abi` | `encode(*args)` for Solidity ABI argument tuples of `U8` … `U256`, `Bytes32`, `Address` and dynamic `bytes`; `Payload`; `EncodeError` for anything else |
| `polychain.rlp` | `encode()` / `decode()` of bytes, non-negative integers and nested lists; `RLPError` |
| `polychain.secp256k1` | `public_key`, `sign` (RFC 6979 nonces, low-s, 65-byte recoverable signature), `recover`, `parse_public_key`, `Point` |
| `polychain.evm_tx` | `LegacyTransaction` (EIP-155), `DynamicFeeTransaction` (EIP-1559), `Tx` with `hash`, `sender`, `to`, `value`, `nonce`, `payload`, `sighashes`, `sign`, `serialize`; `TxBuilder` that builds legacy transactions |
| `polychain.evm_client` | JSON-RPC `Client` for EVM nodes: `call`, `header`, `latest_block`, `tx`, `submit_tx`, `account_nonce`, `account_balance`, `call_contract`, `suggest_gas_price`; default URLs such as `ETHEREUM_RPC_URL`, `FANTOM_RPC_URL`, `KAVA_RPC_URL`, `MOONBEAM_RPC_URL`, `POLYGON_RPC_URL` |
| `polychain.evm_gas` | `GasEstimator` that returns the node's suggested gas price |
| `polychain.ethereum` | EIP-1559 `GasEstimator` (driven by `GasOptions` and `eth_feeHistory`) and a `TxBuilder` for dynamic-fee transactions |
| `polychain.filecoin_address` | `FilecoinAddress` (ID, secp256k1, actor and BLS protocols), `Protocol`, `AddressEncoder`, `AddressDecoder`, `AddressEncodeDecoder` |
| `polychain.filecoin_tx` | `Message` (DAG-CBOR encoding and CID), `Tx` with sighashes and signing, `TxBuilder` |

## Installing

```
pip install .
```

## Examples

Encoding call data:

```python
from polychain.abi import encode, U64, Bytes32
from polychain.evm_address import Address

addr = Address.from_hex("797522Fb74d42bB9fbF6b76dEa24D01A538d5D66")
data = encode(addr, U64(10000), Bytes32(bytes(32)))
print(data.hex())
```

Round-tripping an address:

```python
from polychain.evm_address import Address

addr = Address.from_hex("0x58afb504ef2444a267b8c7ce57279417f1377ceb")
print(addr.checksum_hex())
assert Address.from_json(addr.to_json()) == addr
```

Building and signing an EIP-1559 transaction:

```python
from polychain import secp256k1
from polychain.ethereum import TxBuilder

private_key = 1  # a made-up key for illustration
tx = TxBuilder(chain_id=1).build_tx(
    None, "0x58afb504ef2444a267b8c7ce57279417f1377ceb",
    value=1, nonce=0, gas=21000, gas_tip_cap=1, gas_fee_cap=2, payload=b"",
)
signature = secp256k1.sign(tx.sighashes()[0], private_key)
tx.sign([signature])
print(tx.sender(), tx.serialize().hex())
```

Filecoin addresses:

```python
from polychain.filecoin_address import AddressEncodeDecoder

codec = AddressEncodeDecoder()
text = codec.encode_address(bytes([0, 0x80, 0x01]))  # "f0128"
assert codec.decode_address(text) == bytes([0, 0x80, 0x01])
```

Talking to a node:

```python
from polychain.evm_client import Client
from polychain.evm_gas import GasEstimator

client = Client("http://127.0.0.1:8545/")
print(client.latest_block())
print(GasEstimator(client).estimate_gas())
```

Errors are raised as exceptions: `AddressError`, `EncodeError`, `RLPError`,
`SignatureError`, `RPCError`, `FilecoinAddressError` and
`ParamsRegistrationError`.

## What it does not do

- For DigiByte and Dogecoin only network parameters are provided: there is no
  address encoding, UTXO transaction building, node client or fee estimation
  for those chains.
- For Filecoin there are addresses and messages, but no node client and no gas
  estimator.
- There is no command-line tool; everything is used as a library.

## Running the tests

```
pip install .[test]
pytest
```