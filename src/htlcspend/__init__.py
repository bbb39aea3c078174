"""
htlcspend - Build transactions claiming HTLC outputs with a preimage

Derives the HTLC locking script, builds a send-all claim transaction,
signs it (BIP143, RFC 6979) and attaches the preimage-branch witness.
"""

__version__ = "0.1.0"

from htlcspend.builder import UnsignedClaim, build_unsigned_transaction, estimate_claim_vsize
from htlcspend.coin import SpendableCoin
from htlcspend.config import SpendConfig
from htlcspend.models import (
    ConfigurationError,
    FeeRate,
    HTLCSpendError,
    InputType,
    InsufficientFundsError,
    NetworkType,
    OutPoint,
    SigningError,
    ValidationError,
)
from htlcspend.script import derive_locking_script
from htlcspend.signing import create_claim_witness, finalize_claim, sign_claim_input
from htlcspend.spender import ClaimResult, build_claim_transaction
from htlcspend.tx import Transaction, TxInput, TxOutput

__all__ = [
    "ClaimResult",
    "ConfigurationError",
    "FeeRate",
    "HTLCSpendError",
    "InputType",
    "InsufficientFundsError",
    "NetworkType",
    "OutPoint",
    "SigningError",
    "SpendConfig",
    "SpendableCoin",
    "Transaction",
    "TxInput",
    "TxOutput",
    "UnsignedClaim",
    "ValidationError",
    "build_claim_transaction",
    "build_unsigned_transaction",
    "create_claim_witness",
    "derive_locking_script",
    "estimate_claim_vsize",
    "finalize_claim",
    "sign_claim_input",
]
