"""
Transaction model and segwit wire serialization.
"""

from __future__ import annotations

import hashlib
import struct
from dataclasses import dataclass, replace

from htlcspend.constants import SEQUENCE_FINAL, TX_LOCKTIME, TX_VERSION, WITNESS_SCALE_FACTOR
from htlcspend.models import OutPoint, ValidationError


def hash256(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()


def varint(n: int) -> bytes:
    """Encode integer as Bitcoin varint."""
    if n < 0xFD:
        return bytes([n])
    elif n <= 0xFFFF:
        return bytes([0xFD]) + struct.pack("<H", n)
    elif n <= 0xFFFFFFFF:
        return bytes([0xFE]) + struct.pack("<I", n)
    else:
        return bytes([0xFF]) + struct.pack("<Q", n)


def read_varint(data: bytes, offset: int) -> tuple[int, int]:
    """Read varint and return (value, new_offset)."""
    first = data[offset]
    offset += 1

    if first < 0xFD:
        return first, offset
    if first == 0xFD:
        return struct.unpack("<H", data[offset : offset + 2])[0], offset + 2
    if first == 0xFE:
        return struct.unpack("<I", data[offset : offset + 4])[0], offset + 4
    return struct.unpack("<Q", data[offset : offset + 8])[0], offset + 8


@dataclass(frozen=True)
class TxInput:
    """Transaction input."""

    outpoint: OutPoint
    script_sig: bytes = b""
    sequence: int = SEQUENCE_FINAL
    witness: tuple[bytes, ...] = ()

    def serialize(self) -> bytes:
        return (
            self.outpoint.serialize()
            + varint(len(self.script_sig))
            + self.script_sig
            + struct.pack("<I", self.sequence)
        )

    def serialize_witness(self) -> bytes:
        result = varint(len(self.witness))
        for item in self.witness:
            result += varint(len(item)) + item
        return result


@dataclass(frozen=True)
class TxOutput:
    """Transaction output."""

    value: int
    script_pubkey: bytes

    def serialize(self) -> bytes:
        return struct.pack("<Q", self.value) + varint(len(self.script_pubkey)) + self.script_pubkey


@dataclass(frozen=True)
class Transaction:
    """
    An immutable Bitcoin transaction.

    A transaction without witness data is the unsigned form; attach_witness
    returns the signed copy.
    """

    inputs: tuple[TxInput, ...]
    outputs: tuple[TxOutput, ...]
    version: int = TX_VERSION
    locktime: int = TX_LOCKTIME

    @property
    def has_witness(self) -> bool:
        return any(inp.witness for inp in self.inputs)

    def serialize(self, include_witness: bool = True) -> bytes:
        """Serialize to wire format; segwit marker/flag only when witness data is present."""
        segwit = include_witness and self.has_witness

        result = struct.pack("<I", self.version)
        if segwit:
            result += bytes([0x00, 0x01])

        result += varint(len(self.inputs))
        for inp in self.inputs:
            result += inp.serialize()

        result += varint(len(self.outputs))
        for out in self.outputs:
            result += out.serialize()

        if segwit:
            for inp in self.inputs:
                result += inp.serialize_witness()

        result += struct.pack("<I", self.locktime)
        return result

    def to_hex(self) -> str:
        return self.serialize().hex()

    @property
    def txid(self) -> str:
        """Double SHA256 of the non-witness serialization, display order."""
        return hash256(self.serialize(include_witness=False))[::-1].hex()

    @property
    def wtxid(self) -> str:
        return hash256(self.serialize())[::-1].hex()

    @property
    def weight(self) -> int:
        base_size = len(self.serialize(include_witness=False))
        total_size = len(self.serialize())
        return base_size * (WITNESS_SCALE_FACTOR - 1) + total_size

    @property
    def vsize(self) -> int:
        return -(-self.weight // WITNESS_SCALE_FACTOR)

    def attach_witness(self, input_index: int, witness: list[bytes]) -> Transaction:
        """Return a copy with ``witness`` set on input ``input_index``."""
        if not 0 <= input_index < len(self.inputs):
            raise IndexError(f"Input index out of range: {input_index}")
        inputs = list(self.inputs)
        inputs[input_index] = replace(inputs[input_index], witness=tuple(witness))
        return replace(self, inputs=tuple(inputs))

    @classmethod
    def from_hex(cls, tx_hex: str) -> Transaction:
        try:
            tx_bytes = bytes.fromhex(tx_hex)
        except ValueError as e:
            raise ValidationError(f"Transaction must be hex: {e}") from e
        return cls.deserialize(tx_bytes)

    @classmethod
    def deserialize(cls, tx_bytes: bytes) -> Transaction:
        try:
            offset = 0
            version = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
            offset += 4

            segwit = False
            if tx_bytes[offset] == 0x00 and tx_bytes[offset + 1] == 0x01:
                segwit = True
                offset += 2

            input_count, offset = read_varint(tx_bytes, offset)
            raw_inputs = []
            for _ in range(input_count):
                txid = tx_bytes[offset : offset + 32][::-1].hex()
                offset += 32
                vout = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
                offset += 4
                script_len, offset = read_varint(tx_bytes, offset)
                script_sig = tx_bytes[offset : offset + script_len]
                offset += script_len
                sequence = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
                offset += 4
                raw_inputs.append((OutPoint(txid, vout), script_sig, sequence))

            output_count, offset = read_varint(tx_bytes, offset)
            outputs = []
            for _ in range(output_count):
                value = struct.unpack("<Q", tx_bytes[offset : offset + 8])[0]
                offset += 8
                script_len, offset = read_varint(tx_bytes, offset)
                outputs.append(TxOutput(value, tx_bytes[offset : offset + script_len]))
                offset += script_len

            witnesses: list[tuple[bytes, ...]] = [() for _ in raw_inputs]
            if segwit:
                for i in range(input_count):
                    item_count, offset = read_varint(tx_bytes, offset)
                    items = []
                    for _ in range(item_count):
                        item_len, offset = read_varint(tx_bytes, offset)
                        items.append(tx_bytes[offset : offset + item_len])
                        offset += item_len
                    witnesses[i] = tuple(items)

            locktime = struct.unpack("<I", tx_bytes[offset : offset + 4])[0]
            offset += 4
        except (IndexError, struct.error) as e:
            raise ValidationError(f"Failed to parse transaction: {e}") from e

        if offset != len(tx_bytes):
            raise ValidationError(f"Trailing data after transaction: {len(tx_bytes) - offset} bytes")

        inputs = tuple(
            TxInput(outpoint=outpoint, script_sig=script_sig, sequence=sequence, witness=witness)
            for (outpoint, script_sig, sequence), witness in zip(raw_inputs, witnesses)
        )
        return cls(inputs=inputs, outputs=tuple(outputs), version=version, locktime=locktime)
