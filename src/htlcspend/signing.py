"""
Signing and witness assembly for HTLC claim inputs.
"""

from __future__ import annotations

from coincurve import PrivateKey
from loguru import logger

from htlcspend.coin import SpendableCoin
from htlcspend.constants import PRIVATE_KEY_SIZE, SIGHASH_ALL
from htlcspend.models import SigningError
from htlcspend.script import script_commits_to_preimage
from htlcspend.tx import Transaction, hash256, varint


def load_private_key(secret: bytes) -> PrivateKey:
    """Build a coincurve key, rejecting anything outside the secp256k1 scalar range."""
    if len(secret) != PRIVATE_KEY_SIZE:
        raise SigningError(f"Private key must be {PRIVATE_KEY_SIZE} bytes, got {len(secret)}")
    try:
        return PrivateKey(secret)
    except ValueError as e:
        raise SigningError(f"Invalid private key: {e}") from e


def compute_sighash_segwit(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """BIP143 signature hash for a segwit v0 input."""
    if not 0 <= input_index < len(tx.inputs):
        raise SigningError(f"Input index out of range: {input_index}")

    hash_prevouts = hash256(b"".join(inp.outpoint.serialize() for inp in tx.inputs))
    hash_sequence = hash256(b"".join(inp.sequence.to_bytes(4, "little") for inp in tx.inputs))
    hash_outputs = hash256(b"".join(out.serialize() for out in tx.outputs))

    target_input = tx.inputs[input_index]

    preimage = (
        tx.version.to_bytes(4, "little")
        + hash_prevouts
        + hash_sequence
        + target_input.outpoint.serialize()
        + varint(len(script_code))
        + script_code
        + value.to_bytes(8, "little")
        + target_input.sequence.to_bytes(4, "little")
        + hash_outputs
        + tx.locktime.to_bytes(4, "little")
        + sighash_type.to_bytes(4, "little")
    )

    return hash256(preimage)


def sign_segwit_input(
    tx: Transaction,
    input_index: int,
    script_code: bytes,
    value: int,
    private_key: PrivateKey,
    sighash_type: int = SIGHASH_ALL,
) -> bytes:
    """Sign a segwit v0 input using coincurve.

    Args:
        tx: The transaction to sign
        input_index: Index of the input to sign
        script_code: The scriptCode for signing (the witness script for P2WSH)
        value: The value of the input being spent (in satoshis)
        private_key: coincurve PrivateKey instance
        sighash_type: Sighash type (default SIGHASH_ALL = 1)

    Returns:
        DER-encoded signature with sighash type byte appended
    """
    sighash = compute_sighash_segwit(tx, input_index, script_code, value, sighash_type)

    # Sign the pre-hashed sighash (it's already SHA256d)
    # coincurve's sign() with hasher=None skips hashing; nonces follow RFC 6979
    signature = private_key.sign(sighash, hasher=None)

    return signature + bytes([sighash_type])


def sign_claim_input(tx: Transaction, coin: SpendableCoin, private_key: bytes) -> bytes:
    """Sign input 0 of the claim transaction with the redeem script as scriptCode."""
    key = load_private_key(private_key)
    signature = sign_segwit_input(tx, 0, coin.redeem_script, coin.amount, key)
    logger.debug(
        f"Signed input 0 ({coin.outpoint}) with pubkey "
        f"{key.public_key.format(compressed=True).hex()}"
    )
    return signature


def create_claim_witness(preimage: bytes, signature: bytes, redeem_script: bytes) -> list[bytes]:
    """Witness stack for the preimage branch: <preimage> <signature> <redeem_script>."""
    if not script_commits_to_preimage(redeem_script, preimage):
        logger.warning("Preimage hash not found in redeem script; the claim will likely fail")
    return [preimage, signature, redeem_script]


def finalize_claim(
    tx: Transaction,
    preimage: bytes,
    signature: bytes,
    redeem_script: bytes,
) -> Transaction:
    """Attach the claim witness to input 0 and return the signed transaction."""
    if tx.has_witness:
        raise SigningError("Transaction already carries witness data")
    return tx.attach_witness(0, create_claim_witness(preimage, signature, redeem_script))
