"""
End-to-end tests for the claim pipeline.
"""

from __future__ import annotations

import bech32
import pytest
from coincurve import PrivateKey

from htlcspend.config import SpendConfig
from htlcspend.models import InputType, InsufficientFundsError, SigningError
from htlcspend.script import derive_locking_script
from htlcspend.signing import compute_sighash_segwit
from htlcspend.spender import build_claim_transaction
from htlcspend.tx import Transaction


class TestBuildClaimTransaction:
    def test_example_scenario(
        self,
        spend_options: dict[str, object],
        redeem_script: bytes,
        preimage: bytes,
        zero_txid: str,
        p2wpkh_script: bytes,
    ) -> None:
        result = build_claim_transaction(SpendConfig.from_options(**spend_options))
        tx = Transaction.from_hex(result.tx_hex)

        assert len(tx.inputs) == 1
        assert tx.inputs[0].outpoint.txid == zero_txid
        assert tx.inputs[0].outpoint.vout == 0
        assert tx.inputs[0].script_sig == b""

        assert len(tx.outputs) == 1
        assert tx.outputs[0].script_pubkey == p2wpkh_script
        assert result.fee == 1390
        assert tx.outputs[0].value == 100_000 - result.fee

        witness = tx.inputs[0].witness
        assert len(witness) == 3
        assert witness[0] == preimage
        assert witness[1][-1] == 0x01
        assert witness[2] == redeem_script

    def test_coin_matches_derived_script(
        self, spend_options: dict[str, object], redeem_script: bytes
    ) -> None:
        result = build_claim_transaction(SpendConfig.from_options(**spend_options))
        assert result.coin.script_pubkey == derive_locking_script(
            redeem_script, InputType.NATIVE_SEGWIT
        )

    def test_signature_verifies(
        self, spend_options: dict[str, object], redeem_script: bytes, claim_key: bytes
    ) -> None:
        result = build_claim_transaction(SpendConfig.from_options(**spend_options))
        signature = result.tx.inputs[0].witness[1]
        sighash = compute_sighash_segwit(result.tx, 0, redeem_script, 100_000)

        assert PrivateKey(claim_key).public_key.verify(signature[:-1], sighash, hasher=None)

    def test_deterministic(self, spend_options: dict[str, object]) -> None:
        config = SpendConfig.from_options(**spend_options)
        assert build_claim_transaction(config).tx_hex == build_claim_transaction(config).tx_hex

    def test_roundtrip(self, spend_options: dict[str, object]) -> None:
        result = build_claim_transaction(SpendConfig.from_options(**spend_options))
        parsed = Transaction.from_hex(result.tx_hex)

        assert parsed == result.tx
        assert parsed.txid == result.tx.txid

    def test_actual_vsize_within_estimate(self, spend_options: dict[str, object]) -> None:
        result = build_claim_transaction(SpendConfig.from_options(**spend_options))
        assert result.tx.vsize <= 139

    def test_wrapped_segwit(self, spend_options: dict[str, object], redeem_script: bytes) -> None:
        config = SpendConfig.from_options(input_type="wrapped-segwit", **spend_options)
        result = build_claim_transaction(config)
        tx = Transaction.from_hex(result.tx_hex)

        assert tx.inputs[0].script_sig == bytes([0x22]) + derive_locking_script(
            redeem_script, InputType.NATIVE_SEGWIT
        )
        assert tx.inputs[0].witness[2] == redeem_script
        assert result.fee == 1740
        assert tx.outputs[0].value == 100_000 - 1740

    def test_regtest(
        self, spend_options: dict[str, object], p2wpkh_program: bytes, p2wpkh_script: bytes
    ) -> None:
        spend_options["address"] = bech32.encode("bcrt", 0, p2wpkh_program)
        result = build_claim_transaction(
            SpendConfig.from_options(network="regtest", **spend_options)
        )
        assert result.tx.outputs[0].script_pubkey == p2wpkh_script

    def test_amount_equal_to_fee(self, spend_options: dict[str, object]) -> None:
        spend_options["amount"] = 1390
        with pytest.raises(InsufficientFundsError):
            build_claim_transaction(SpendConfig.from_options(**spend_options))

    def test_invalid_key_scalar(self, spend_options: dict[str, object]) -> None:
        spend_options["private_key"] = "ff" * 32
        with pytest.raises(SigningError):
            build_claim_transaction(SpendConfig.from_options(**spend_options))

    def test_dust_threshold(self, spend_options: dict[str, object]) -> None:
        spend_options["amount"] = 1390 + 100
        spend_options["dust_threshold"] = 546
        with pytest.raises(InsufficientFundsError):
            build_claim_transaction(SpendConfig.from_options(**spend_options))
