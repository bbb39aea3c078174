"""
Command-line interface for building HTLC claim transactions.
"""

from __future__ import annotations

import sys
from enum import Enum
from typing import Annotated

import typer
from loguru import logger

from htlcspend.config import SpendConfig
from htlcspend.models import HTLCSpendError
from htlcspend.spender import build_claim_transaction

app = typer.Typer(
    name="htlcspender",
    help="Build TX to spend HTLC without change.",
    add_completion=False,
)


class LogLevel(str, Enum):
    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    SUCCESS = "SUCCESS"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def setup_logging(level: str) -> None:
    """Configure loguru logging."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level.upper(),
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


@app.command()
def claim(
    redeem: Annotated[
        str, typer.Option("--redeem", "--redeem-script", "-r", help="Redeem script hex")
    ],
    txid: Annotated[str, typer.Option("--txid", "-t", help="Input HTLC tx id")],
    feerate: Annotated[
        int, typer.Option("--feerate", "--fee", "-f", help="Fee rate for the tx (sat/vbyte)")
    ],
    amount: Annotated[int, typer.Option("--amount", help="Input amount (in satoshi)")],
    outindex: Annotated[
        int,
        typer.Option("--prev-outindex", "--outindex", help="Previous UTXO's output index"),
    ],
    privkey: Annotated[
        str, typer.Option("--privkey", "--key", "-k", help="Private key hex used for signing")
    ],
    preimage: Annotated[
        str, typer.Option("--preimage", "-p", help="Preimage hex to claim the HTLC")
    ],
    address: Annotated[str, typer.Option("--address", help="Your address to send funds")],
    input_type: Annotated[
        str,
        typer.Option(
            "--input-type",
            "--type",
            help="Type of the previous output: native-segwit (wsh) | wrapped-segwit (sh-wsh)",
        ),
    ] = "native-segwit",
    network: Annotated[
        str, typer.Option("--network", "-n", help="Network: mainnet | testnet | regtest")
    ] = "mainnet",
    dust_threshold: Annotated[
        int, typer.Option("--dust-threshold", help="Refuse outputs below this value (0 = off)")
    ] = 0,
    log_level: Annotated[
        LogLevel, typer.Option("--log-level", "-l", case_sensitive=False, help="Log level")
    ] = LogLevel.INFO,
) -> None:
    """Build and sign a transaction claiming an HTLC output with its preimage."""
    setup_logging(log_level.value)

    typer.echo(f"Redeem Hex {redeem}")

    try:
        config = SpendConfig.from_options(
            redeem_script=redeem,
            txid=txid,
            fee_rate=feerate,
            amount=amount,
            vout=outindex,
            private_key=privkey,
            preimage=preimage,
            address=address,
            input_type=input_type,
            network=network,
            dust_threshold=dust_threshold,
        )
        result = build_claim_transaction(config)
    except HTLCSpendError as e:
        logger.error(f"{type(e).__name__}: {e}")
        raise typer.Exit(1)

    typer.echo(result.tx_hex)


def main() -> None:
    """Entry point."""
    app()


if __name__ == "__main__":
    main()
