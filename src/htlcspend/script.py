"""
Locking script derivation for HTLC outputs.

An HTLC redeem script can be committed to in two ways:
- P2WSH (native segwit): OP_0 <sha256(redeem_script)>
- P2SH-P2WSH (wrapped segwit): OP_HASH160 <hash160(p2wsh_script)> OP_EQUAL
"""

from __future__ import annotations

import hashlib
import struct

from htlcspend.constants import (
    OP_0,
    OP_EQUAL,
    OP_HASH160,
    OP_PUSHDATA1,
    OP_PUSHDATA2,
    OP_PUSHDATA4,
)
from htlcspend.models import ConfigurationError, InputType


def sha256(data: bytes) -> bytes:
    return hashlib.sha256(data).digest()


def hash160(data: bytes) -> bytes:
    """RIPEMD160(SHA256(data))"""
    h = hashlib.new("ripemd160")
    h.update(hashlib.sha256(data).digest())
    return h.digest()


def push_data(data: bytes) -> bytes:
    """Encode ``data`` as a minimal script push."""
    length = len(data)
    if length < OP_PUSHDATA1:
        return bytes([length]) + data
    if length <= 0xFF:
        return bytes([OP_PUSHDATA1, length]) + data
    if length <= 0xFFFF:
        return bytes([OP_PUSHDATA2]) + struct.pack("<H", length) + data
    return bytes([OP_PUSHDATA4]) + struct.pack("<I", length) + data


def p2wsh_scriptpubkey(redeem_script: bytes) -> bytes:
    """P2WSH scriptPubKey (OP_0 <32-byte-hash>)"""
    return bytes([OP_0, 0x20]) + sha256(redeem_script)


def p2sh_scriptpubkey(script: bytes) -> bytes:
    """P2SH scriptPubKey (OP_HASH160 <20-byte-hash> OP_EQUAL)"""
    return bytes([OP_HASH160, 0x14]) + hash160(script) + bytes([OP_EQUAL])


def p2sh_p2wsh_script_sig(redeem_script: bytes) -> bytes:
    """
    scriptSig for a P2SH-wrapped P2WSH input.

    The P2SH redeem script is the witness program itself, so the scriptSig is
    a single push of the 34-byte P2WSH scriptPubKey.
    """
    return push_data(p2wsh_scriptpubkey(redeem_script))


def derive_locking_script(redeem_script: bytes, input_type: InputType) -> bytes:
    """
    Derive the scriptPubKey of the HTLC output from its redeem script.

    Args:
        redeem_script: The HTLC witness script
        input_type: Whether the output is native P2WSH or P2SH-wrapped

    Returns:
        scriptPubKey bytes

    Raises:
        ConfigurationError: If input_type is not a known InputType
    """
    if input_type == InputType.NATIVE_SEGWIT:
        return p2wsh_scriptpubkey(redeem_script)
    if input_type == InputType.WRAPPED_SEGWIT:
        return p2sh_scriptpubkey(p2wsh_scriptpubkey(redeem_script))
    raise ConfigurationError(f"Unsupported input type: {input_type!r}")


def script_commits_to_preimage(redeem_script: bytes, preimage: bytes) -> bool:
    """Check whether the script embeds sha256 or hash160 of ``preimage``."""
    return sha256(preimage) in redeem_script or hash160(preimage) in redeem_script
