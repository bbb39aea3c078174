"""
Bitcoin address decoding and encoding bound to a network.

Supports:
- P2WPKH / P2WSH (bech32, witness v0)
- P2TR and other witness v1+ programs (bech32m)
- P2PKH / P2SH (base58check)
"""

from __future__ import annotations

import base58
import bech32

from htlcspend.models import NetworkType, ValidationError

BECH32_HRP: dict[NetworkType, str] = {
    NetworkType.MAINNET: "bc",
    NetworkType.TESTNET: "tb",
    NetworkType.REGTEST: "bcrt",
}

# (P2PKH, P2SH) version bytes
BASE58_VERSIONS: dict[NetworkType, tuple[int, int]] = {
    NetworkType.MAINNET: (0x00, 0x05),
    NetworkType.TESTNET: (0x6F, 0xC4),
    NetworkType.REGTEST: (0x6F, 0xC4),
}


def _witness_scriptpubkey(witver: int, witprog: bytes) -> bytes:
    # OP_0 for v0, OP_1..OP_16 for later versions
    opcode = 0x00 if witver == 0 else 0x50 + witver
    return bytes([opcode, len(witprog)]) + witprog


def address_to_scriptpubkey(address: str, network: NetworkType = NetworkType.MAINNET) -> bytes:
    """
    Convert an address to the scriptPubKey it pays to.

    Args:
        address: Address string
        network: Network the address must belong to

    Returns:
        scriptPubKey bytes

    Raises:
        ValidationError: If the address is malformed or belongs to another network
    """
    address = address.strip()
    if not address:
        raise ValidationError("Destination address must not be empty")

    hrp = BECH32_HRP[network]
    lowered = address.lower()

    if lowered.startswith(hrp + "1"):
        witver, witprog = bech32.decode(hrp, address)
        if witver is None or witprog is None:
            raise ValidationError(f"Invalid bech32 address: {address}")
        witprog_bytes = bytes(witprog)
        if witver == 0 and len(witprog_bytes) not in (20, 32):
            raise ValidationError(f"Invalid witness v0 program length: {len(witprog_bytes)}")
        return _witness_scriptpubkey(witver, witprog_bytes)

    for other_network, other_hrp in BECH32_HRP.items():
        if other_network != network and lowered.startswith(other_hrp + "1"):
            raise ValidationError(f"Address {address} is not valid on {network.value}")

    try:
        decoded = base58.b58decode_check(address)
    except ValueError as e:
        raise ValidationError(f"Invalid address {address}: {e}") from e

    if len(decoded) != 21:
        raise ValidationError(f"Invalid base58 payload length: {len(decoded)}")

    version = decoded[0]
    payload = decoded[1:]
    p2pkh_version, p2sh_version = BASE58_VERSIONS[network]

    if version == p2pkh_version:
        # OP_DUP OP_HASH160 <20-byte-pubkeyhash> OP_EQUALVERIFY OP_CHECKSIG
        return bytes([0x76, 0xA9, 0x14]) + payload + bytes([0x88, 0xAC])
    if version == p2sh_version:
        # OP_HASH160 <20-byte-scripthash> OP_EQUAL
        return bytes([0xA9, 0x14]) + payload + bytes([0x87])

    raise ValidationError(f"Address {address} is not valid on {network.value}")


def scriptpubkey_to_address(
    scriptpubkey: bytes, network: NetworkType = NetworkType.MAINNET
) -> str:
    """Convert a P2WSH, P2WPKH or P2SH scriptPubKey to its address."""
    hrp = BECH32_HRP[network]

    # P2WPKH / P2WSH
    if scriptpubkey[:1] == b"\x00" and len(scriptpubkey) in (22, 34):
        if scriptpubkey[1] == len(scriptpubkey) - 2:
            result = bech32.encode(hrp, 0, scriptpubkey[2:])
            if result is None:
                raise ValueError(f"Failed to encode witness address: {scriptpubkey.hex()}")
            return result

    # P2SH
    if len(scriptpubkey) == 23 and scriptpubkey[:2] == b"\xa9\x14" and scriptpubkey[-1] == 0x87:
        _, p2sh_version = BASE58_VERSIONS[network]
        return base58.b58encode_check(bytes([p2sh_version]) + scriptpubkey[2:22]).decode()

    raise ValueError(f"Unsupported scriptPubKey: {scriptpubkey.hex()}")
