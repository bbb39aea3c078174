"""
Transaction builder for HTLC claim transactions.

Builds a one-input, one-output transaction that sends the whole HTLC value,
minus the estimated fee, to a single destination. There is no change output.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from htlcspend.coin import SpendableCoin
from htlcspend.constants import (
    MAX_SIGNATURE_SIZE,
    PREIMAGE_SIZE,
    SEQUENCE_FINAL,
    TX_LOCKTIME,
    TX_VERSION,
    WITNESS_SCALE_FACTOR,
)
from htlcspend.models import FeeRate, InsufficientFundsError
from htlcspend.tx import Transaction, TxInput, TxOutput, varint


@dataclass(frozen=True)
class UnsignedClaim:
    """Result of building the claim transaction before signing."""

    tx: Transaction
    fee: int
    estimated_vsize: int

    @property
    def output_value(self) -> int:
        return self.tx.outputs[0].value


def estimate_claim_witness_size(redeem_script: bytes) -> int:
    """
    Size of the claim witness once attached:
    item count + <preimage> + <signature> + <redeem_script>.
    """
    return (
        len(varint(3))
        + len(varint(PREIMAGE_SIZE))
        + PREIMAGE_SIZE
        + len(varint(MAX_SIGNATURE_SIZE))
        + MAX_SIGNATURE_SIZE
        + len(varint(len(redeem_script)))
        + len(redeem_script)
    )


def estimate_claim_vsize(coin: SpendableCoin, destination_script: bytes) -> int:
    """
    Estimate the virtual size of the finished claim transaction.

    The witness is not attached yet, so its size is assumed from the redeem
    script and the largest possible DER signature.
    """
    placeholder = Transaction(
        inputs=(TxInput(outpoint=coin.outpoint, script_sig=coin.script_sig),),
        outputs=(TxOutput(value=0, script_pubkey=destination_script),),
    )
    base_size = len(placeholder.serialize(include_witness=False))
    # marker + flag
    witness_size = 2 + estimate_claim_witness_size(coin.redeem_script)
    weight = base_size * WITNESS_SCALE_FACTOR + witness_size
    return -(-weight // WITNESS_SCALE_FACTOR)


def build_unsigned_transaction(
    coin: SpendableCoin,
    fee_rate: FeeRate,
    destination_script: bytes,
    dust_threshold: int = 0,
) -> UnsignedClaim:
    """
    Build the unsigned claim transaction.

    Args:
        coin: The HTLC output being spent
        fee_rate: Fee rate to pay
        destination_script: scriptPubKey receiving everything but the fee
        dust_threshold: Reject outputs below this value (0 disables the check)

    Returns:
        UnsignedClaim with the transaction, fee and estimated vsize

    Raises:
        InsufficientFundsError: If the fee consumes the whole coin or the
            output would fall below dust_threshold
    """
    vsize = estimate_claim_vsize(coin, destination_script)
    fee = fee_rate.get_fee(vsize)

    logger.debug(
        f"Fee estimate: {vsize} vbytes @ {fee_rate.sat_per_kvb} sat/kvB = {fee} sats "
        f"(input {coin.amount} sats)"
    )

    if fee >= coin.amount:
        raise InsufficientFundsError(
            f"Estimated fee {fee} sats exceeds or equals input amount {coin.amount} sats"
        )

    output_value = coin.amount - fee
    if output_value < dust_threshold:
        raise InsufficientFundsError(
            f"Output value {output_value} sats is below dust threshold {dust_threshold} sats"
        )

    tx = Transaction(
        inputs=(
            TxInput(outpoint=coin.outpoint, script_sig=coin.script_sig, sequence=SEQUENCE_FINAL),
        ),
        outputs=(TxOutput(value=output_value, script_pubkey=destination_script),),
        version=TX_VERSION,
        locktime=TX_LOCKTIME,
    )

    return UnsignedClaim(tx=tx, fee=fee, estimated_vsize=vsize)
