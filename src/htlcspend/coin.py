"""
Spendable HTLC coin.
"""

from __future__ import annotations

from dataclasses import dataclass

from htlcspend.constants import MAX_MONEY
from htlcspend.models import InputType, OutPoint, ValidationError
from htlcspend.script import derive_locking_script, p2sh_p2wsh_script_sig


@dataclass(frozen=True)
class SpendableCoin:
    """An HTLC output together with the redeem script that unlocks it.

    Build it with :meth:`from_redeem_script` so that ``script_pubkey`` is always
    the script derived from ``redeem_script`` and ``input_type``. The builder and
    the signer both read from this object and never derive scripts themselves.
    """

    outpoint: OutPoint
    amount: int
    script_pubkey: bytes
    redeem_script: bytes
    input_type: InputType = InputType.NATIVE_SEGWIT

    def __post_init__(self) -> None:
        if not 0 <= self.amount <= MAX_MONEY:
            raise ValidationError(f"Input amount out of range: {self.amount}")
        if not self.redeem_script:
            raise ValidationError("Redeem script must not be empty")

    @classmethod
    def from_redeem_script(
        cls,
        outpoint: OutPoint,
        amount: int,
        redeem_script: bytes,
        input_type: InputType = InputType.NATIVE_SEGWIT,
    ) -> SpendableCoin:
        return cls(
            outpoint=outpoint,
            amount=amount,
            script_pubkey=derive_locking_script(redeem_script, input_type),
            redeem_script=redeem_script,
            input_type=input_type,
        )

    @property
    def script_sig(self) -> bytes:
        """scriptSig the spending input must carry (empty for native segwit)."""
        if self.input_type == InputType.WRAPPED_SEGWIT:
            return p2sh_p2wsh_script_sig(self.redeem_script)
        return b""
