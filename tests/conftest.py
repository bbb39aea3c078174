"""
Shared fixtures for htlcspend tests.
"""

from __future__ import annotations

import hashlib

import pytest
from coincurve import PrivateKey

from htlcspend.coin import SpendableCoin
from htlcspend.models import InputType, OutPoint

CLAIM_KEY = bytes.fromhex("11" * 32)
REFUND_KEY = bytes.fromhex("22" * 32)
ZERO_TXID = "00" * 32
ZERO_PREIMAGE = bytes(32)

# BIP-0173 example P2WPKH program
P2WPKH_PROGRAM = bytes.fromhex("751e76e8199196d454941c45d1b3a323f1433bd6")
MAINNET_P2WPKH = "bc1qw508d6qejxtdg4y5r3zarvary0c5xw7kv8f3t4"
TESTNET_P2WPKH = "tb1qw508d6qejxtdg4y5r3zarvary0c5xw7kxpjzsx"
P2WPKH_SCRIPT = bytes([0x00, 0x14]) + P2WPKH_PROGRAM


def build_htlc_script(preimage: bytes, claim_key: bytes, refund_key: bytes) -> bytes:
    """
    OP_SWAP OP_SHA256 <H> OP_EQUAL
    OP_IF <claim_pub> OP_ELSE <locktime> OP_CHECKLOCKTIMEVERIFY OP_DROP <refund_pub> OP_ENDIF
    OP_CHECKSIG

    With the witness <preimage> <sig>, OP_SWAP brings the preimage to the top.
    """
    claim_pub = PrivateKey(claim_key).public_key.format(compressed=True)
    refund_pub = PrivateKey(refund_key).public_key.format(compressed=True)
    payment_hash = hashlib.sha256(preimage).digest()
    locktime = bytes.fromhex("20a107")  # 500000
    return (
        bytes([0x7C, 0xA8, 0x20])
        + payment_hash
        + bytes([0x87, 0x63, 0x21])
        + claim_pub
        + bytes([0x67, 0x03])
        + locktime
        + bytes([0xB1, 0x75, 0x21])
        + refund_pub
        + bytes([0x68, 0xAC])
    )


@pytest.fixture
def preimage() -> bytes:
    return ZERO_PREIMAGE


@pytest.fixture
def claim_key() -> bytes:
    return CLAIM_KEY


@pytest.fixture
def zero_txid() -> str:
    return ZERO_TXID


@pytest.fixture
def p2wpkh_program() -> bytes:
    return P2WPKH_PROGRAM


@pytest.fixture
def p2wpkh_script() -> bytes:
    return P2WPKH_SCRIPT


@pytest.fixture
def mainnet_address() -> str:
    return MAINNET_P2WPKH


@pytest.fixture
def testnet_address() -> str:
    return TESTNET_P2WPKH


@pytest.fixture
def redeem_script() -> bytes:
    """114-byte HTLC script committing to the zero preimage."""
    return build_htlc_script(ZERO_PREIMAGE, CLAIM_KEY, REFUND_KEY)


@pytest.fixture
def outpoint() -> OutPoint:
    return OutPoint(ZERO_TXID, 0)


@pytest.fixture
def native_coin(outpoint: OutPoint, redeem_script: bytes) -> SpendableCoin:
    return SpendableCoin.from_redeem_script(
        outpoint, 100_000, redeem_script, InputType.NATIVE_SEGWIT
    )


@pytest.fixture
def wrapped_coin(outpoint: OutPoint, redeem_script: bytes) -> SpendableCoin:
    return SpendableCoin.from_redeem_script(
        outpoint, 100_000, redeem_script, InputType.WRAPPED_SEGWIT
    )


@pytest.fixture
def spend_options(redeem_script: bytes) -> dict[str, object]:
    """Raw option values as the CLI would pass them."""
    return {
        "redeem_script": redeem_script.hex(),
        "txid": ZERO_TXID,
        "fee_rate": 10,
        "amount": 100_000,
        "vout": 0,
        "private_key": CLAIM_KEY.hex(),
        "preimage": ZERO_PREIMAGE.hex(),
        "address": MAINNET_P2WPKH,
    }
