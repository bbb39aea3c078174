"""
HTLC claim pipeline.

Threads a SpendConfig through script derivation, coin construction,
transaction building, signing and witness assembly.
"""

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger

from htlcspend.address import scriptpubkey_to_address
from htlcspend.builder import build_unsigned_transaction
from htlcspend.coin import SpendableCoin
from htlcspend.config import SpendConfig
from htlcspend.models import FeeRate, OutPoint
from htlcspend.signing import finalize_claim, sign_claim_input
from htlcspend.tx import Transaction


@dataclass(frozen=True)
class ClaimResult:
    tx: Transaction
    coin: SpendableCoin
    fee: int

    @property
    def tx_hex(self) -> str:
        return self.tx.to_hex()


def build_coin(config: SpendConfig) -> SpendableCoin:
    coin = SpendableCoin.from_redeem_script(
        outpoint=OutPoint(config.txid, config.vout),
        amount=config.amount,
        redeem_script=config.redeem_script,
        input_type=config.input_type,
    )
    logger.info(
        f"Spending HTLC {coin.outpoint} ({coin.amount} sats) at "
        f"{scriptpubkey_to_address(coin.script_pubkey, config.network)} "
        f"[{config.input_type.value}]"
    )
    return coin


def build_claim_transaction(config: SpendConfig) -> ClaimResult:
    """
    Build and sign the transaction claiming the HTLC with its preimage.

    Raises:
        InsufficientFundsError: If the fee consumes the HTLC value
        SigningError: If the private key is not a valid secp256k1 scalar
    """
    coin = build_coin(config)

    unsigned = build_unsigned_transaction(
        coin,
        FeeRate.from_sat_per_vbyte(config.fee_rate),
        config.destination_script,
        dust_threshold=config.dust_threshold,
    )
    logger.info(
        f"Paying {unsigned.output_value} sats to {config.address} "
        f"(fee {unsigned.fee} sats, ~{unsigned.estimated_vsize} vbytes)"
    )

    signature = sign_claim_input(unsigned.tx, coin, config.private_key)
    signed = finalize_claim(unsigned.tx, config.preimage, signature, coin.redeem_script)

    logger.info(f"Claim transaction {signed.txid} ({signed.vsize} vbytes)")
    return ClaimResult(tx=signed, coin=coin, fee=unsigned.fee)
