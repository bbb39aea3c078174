"""
Configuration for an HTLC claim.
"""

from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError

from htlcspend.address import address_to_scriptpubkey
from htlcspend.constants import (
    MAX_MONEY,
    MAX_OUTPUT_INDEX,
    PREIMAGE_SIZE,
    PRIVATE_KEY_SIZE,
    TXID_SIZE,
)
from htlcspend.models import InputType, NetworkType, ValidationError

HEX_PATTERN = re.compile(r"(?:[0-9a-fA-F]{2})+")


def decode_hex(value: Any, name: str, length: int | None = None) -> bytes:
    """Decode a hex string, optionally enforcing the decoded length."""
    if isinstance(value, bytes):
        decoded = value
    else:
        if not isinstance(value, str) or not HEX_PATTERN.fullmatch(value):
            raise ValueError(f"{name} must be hex")
        decoded = bytes.fromhex(value)
    if length is not None and len(decoded) != length:
        raise ValueError(f"{name} must be {length} bytes in hex")
    return decoded


class SpendConfig(BaseModel):
    """All inputs needed to build and sign one HTLC claim."""

    redeem_script: bytes
    txid: str = Field(..., description="Funding transaction id (display byte order)")
    fee_rate: int = Field(..., gt=0, description="Fee rate in sat/vbyte")
    amount: int = Field(..., ge=0, le=MAX_MONEY, description="HTLC output value in sats")
    vout: int = Field(..., ge=0, le=MAX_OUTPUT_INDEX)
    private_key: bytes = Field(..., repr=False)
    preimage: bytes = Field(..., repr=False)
    address: str
    input_type: InputType = InputType.NATIVE_SEGWIT
    network: NetworkType = NetworkType.MAINNET
    dust_threshold: int = Field(default=0, ge=0, description="Minimum output value (0 = off)")

    model_config = {"frozen": True}

    @field_validator("redeem_script", mode="before")
    @classmethod
    def validate_redeem_script(cls, v: Any) -> bytes:
        return decode_hex(v, "redeem script")

    @field_validator("txid", mode="before")
    @classmethod
    def validate_txid(cls, v: Any) -> str:
        return decode_hex(v, "txid", TXID_SIZE).hex()

    @field_validator("private_key", mode="before")
    @classmethod
    def validate_private_key(cls, v: Any) -> bytes:
        return decode_hex(v, "private key", PRIVATE_KEY_SIZE)

    @field_validator("preimage", mode="before")
    @classmethod
    def validate_preimage(cls, v: Any) -> bytes:
        return decode_hex(v, "preimage", PREIMAGE_SIZE)

    @model_validator(mode="after")
    def validate_address_network(self) -> SpendConfig:
        address_to_scriptpubkey(self.address, self.network)
        return self

    @property
    def destination_script(self) -> bytes:
        return address_to_scriptpubkey(self.address, self.network)

    @classmethod
    def from_options(
        cls,
        *,
        input_type: str | None = None,
        network: str | None = None,
        **options: Any,
    ) -> SpendConfig:
        """
        Build a config from raw option values (hex strings, ints, names).

        Raises:
            ConfigurationError: If network or input_type is unknown
            ValidationError: If any other option is malformed
        """
        network_type = NetworkType.parse(network)
        parsed_input_type = InputType.parse(input_type)
        try:
            return cls(input_type=parsed_input_type, network=network_type, **options)
        except PydanticValidationError as e:
            messages = "; ".join(
                f"{'.'.join(str(p) for p in err['loc']) or 'config'}: {err['msg']}"
                for err in e.errors()
            )
            raise ValidationError(messages) from e
