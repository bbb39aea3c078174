"""
Bitcoin protocol constants used when building HTLC claim transactions.
"""

from __future__ import annotations

SIGHASH_ALL = 0x01

# Transaction defaults
TX_VERSION = 2
TX_LOCKTIME = 0
SEQUENCE_FINAL = 0xFFFFFFFF
MAX_OUTPUT_INDEX = 0xFFFFFFFF

# Opcodes
OP_0 = 0x00
OP_PUSHDATA1 = 0x4C
OP_PUSHDATA2 = 0x4D
OP_PUSHDATA4 = 0x4E
OP_EQUAL = 0x87
OP_HASH160 = 0xA9

# Witness size assumptions for fee estimation (the witness is not attached yet)
PREIMAGE_SIZE = 32
PRIVATE_KEY_SIZE = 32
TXID_SIZE = 32
# 72-byte DER signature + 1 sighash byte
MAX_SIGNATURE_SIZE = 73
WITNESS_SCALE_FACTOR = 4

# 21 million BTC in satoshis
MAX_MONEY = 2_100_000_000_000_000
