import pytest

from polychain import rlp, secp256k1
from polychain.evm_address import keccak256, to_checksum_hex
from polychain.evm_tx import DynamicFeeTransaction, Tx, TxBuilder, pubkey_to_address

_KEY = bytes([0x46]) * 32
_TO = "0x" + "35" * 20


def _legacy_example():
    return TxBuilder(1).build_tx(None, _TO, 10**18, 9, 21000, 20 * 10**9, 0, b"")


def _sign(tx, key=_KEY):
    tx.sign([secp256k1.sign(h, key) for h in tx.sighashes()], b"")


def test_eip155_signing_hash():
    tx = _legacy_example()
    assert tx.sighashes()[0].hex() == (
        "daf5a779ae972f972197303d7b574746c7ef83eadac0f2791ad23db92e4c8e53"
    )


def test_eip155_signed_serialization():
    tx = _legacy_example()
    _sign(tx)
    assert tx.serialize().hex() == (
        "f86c098504a817c800825208943535353535353535353535353535353535353535"
        "880de0b6b3a76400008025a028ef61340bd939bc2195fe537567866003e1a15d3c"
        "71ff63e1590620aa636276a067cbe9d8997f761aecb703304b3800ccf555c9f3dc"
        "64214b297fb1966a3b6d83"
    )


def test_sender_recovered_after_signing():
    tx = _legacy_example()
    assert tx.sender() == ""
    _sign(tx)
    expected = to_checksum_hex(pubkey_to_address(secp256k1.public_key(_KEY)))
    assert tx.sender() == expected


def test_accessors():
    tx = TxBuilder(5).build_tx(None, _TO, 7, 3, 50000, 10, 0, b"\x01\x02")
    assert tx.value() == 7
    assert tx.nonce() == 3
    assert tx.payload() == b"\x01\x02"
    assert tx.to().lower() == _TO


def test_hash_is_keccak_of_serialization():
    tx = _legacy_example()
    _sign(tx)
    assert tx.hash() == keccak256(tx.serialize())


def test_dynamic_fee_round_trip():
    tx = Tx(DynamicFeeTransaction(1337, 2, 5, 100, 21000, bytes(20), 9, b"ab"), 1337)
    _sign(tx)
    raw = tx.serialize()
    assert raw[0] == 2
    fields = rlp.decode(raw[1:])
    assert int.from_bytes(fields[0], "big") == 1337
    assert fields[7] == b"ab"
    assert tx.sender() == to_checksum_hex(pubkey_to_address(secp256k1.public_key(_KEY)))


def test_bad_to_address():
    with pytest.raises(ValueError, match="bad to address"):
        TxBuilder(1).build_tx(None, "0x1234", 0, 0, 0, 0, 0, b"")


def test_sign_without_signatures():
    with pytest.raises(ValueError):
        _legacy_example().sign([], b"")