"""
Core data models for HTLC claim transactions.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum

from htlcspend.constants import MAX_OUTPUT_INDEX, TXID_SIZE

TXID_PATTERN = re.compile(r"[0-9a-fA-F]{64}")


class HTLCSpendError(Exception):
    """Base class for every error raised while building a claim transaction."""

    pass


class ValidationError(HTLCSpendError, ValueError):
    """Malformed input: bad hex, wrong length, out-of-range number, bad address."""

    pass


class ConfigurationError(HTLCSpendError):
    """Unknown network or input type."""

    pass


class InsufficientFundsError(HTLCSpendError):
    """The coin cannot pay the estimated fee."""

    pass


class SigningError(HTLCSpendError):
    pass


class NetworkType(str, Enum):
    MAINNET = "mainnet"
    TESTNET = "testnet"
    REGTEST = "regtest"

    @classmethod
    def parse(cls, name: str | None) -> NetworkType:
        if name is None:
            return cls.MAINNET
        try:
            return cls(name.lower())
        except ValueError:
            raise ConfigurationError(f"Unsupported network {name}") from None


class InputType(str, Enum):
    """How the HTLC output commits to the redeem script."""

    NATIVE_SEGWIT = "native-segwit"  # P2WSH
    WRAPPED_SEGWIT = "wrapped-segwit"  # P2SH-P2WSH

    @classmethod
    def parse(cls, name: str | None) -> InputType:
        if name is None:
            return cls.NATIVE_SEGWIT
        value = INPUT_TYPE_ALIASES.get(name.lower(), name.lower())
        try:
            return cls(value)
        except ValueError:
            raise ConfigurationError(f"Unsupported input type {name}") from None


INPUT_TYPE_ALIASES: dict[str, str] = {
    "wsh": InputType.NATIVE_SEGWIT.value,
    "p2wsh": InputType.NATIVE_SEGWIT.value,
    "sh-wsh": InputType.WRAPPED_SEGWIT.value,
    "p2sh-p2wsh": InputType.WRAPPED_SEGWIT.value,
}


@dataclass(frozen=True)
class OutPoint:
    """Reference to a previous transaction output.

    The txid is kept in display (RPC) byte order; serialization reverses it.
    """

    txid: str
    vout: int

    def __post_init__(self) -> None:
        if not TXID_PATTERN.fullmatch(self.txid):
            raise ValidationError(f"txid must be {TXID_SIZE} bytes in hex: {self.txid!r}")
        if not 0 <= self.vout <= MAX_OUTPUT_INDEX:
            raise ValidationError(f"Invalid output index: {self.vout}")

    def serialize(self) -> bytes:
        return bytes.fromhex(self.txid)[::-1] + self.vout.to_bytes(4, "little")

    def __str__(self) -> str:
        return f"{self.txid}:{self.vout}"


@dataclass(frozen=True)
class FeeRate:
    """Fee rate kept in satoshis per 1000 virtual bytes."""

    sat_per_kvb: int

    def __post_init__(self) -> None:
        if self.sat_per_kvb <= 0:
            raise ValidationError(f"Fee rate must be positive: {self.sat_per_kvb}")

    @classmethod
    def from_sat_per_vbyte(cls, sat_per_vbyte: int) -> FeeRate:
        if sat_per_vbyte <= 0:
            raise ValidationError(f"Fee rate must be positive: {sat_per_vbyte}")
        return cls(sat_per_kvb=sat_per_vbyte * 1000)

    def get_fee(self, vsize: int) -> int:
        """Fee for a transaction of ``vsize`` vbytes, rounded up."""
        return -(-vsize * self.sat_per_kvb // 1000)
