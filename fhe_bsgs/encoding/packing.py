"""
Bridge between field-element vectors and an engine's packed plaintexts.

Single-ciphertext helpers place a vector in the leading slots. The block
helpers cut a long vector into pack_size chunks, one ciphertext per chunk,
and stitch the decrypted chunks back to the requested length.
"""

import logging
from typing import Any, List, Optional, Sequence

from fhe_bsgs.engine.interface import PackedEngine
from fhe_bsgs.errors import PreconditionError

logger = logging.getLogger(__name__)


def _check_fits(length: int, capacity: int):
    if length > capacity:
        raise PreconditionError(f"Cannot pack {length} values into {capacity} slots")


def encode_vector(engine: PackedEngine, values: Sequence[int]) -> Any:
    _check_fits(len(values), engine.slot_count)
    p = engine.modulus
    return engine.encode([int(v) % p for v in values])


def decode_vector(
    engine: PackedEngine, plaintext: Any, length: Optional[int] = None
) -> List[int]:
    """Decoded slots, truncated to `length` when given."""
    decoded = engine.decode(plaintext)
    if length is None:
        return decoded
    _check_fits(length, len(decoded))
    return decoded[:length]


def encrypt_vector(engine: PackedEngine, values: Sequence[int]) -> Any:
    return engine.encrypt_packed(encode_vector(engine, values))


def decrypt_vector(
    engine: PackedEngine, ciphertext: Any, length: Optional[int] = None
) -> List[int]:
    return decode_vector(engine, engine.decrypt_packed(ciphertext), length)


def encrypt_blocks(
    engine: PackedEngine, values: Sequence[int], pack_size: int
) -> List[Any]:
    """One ciphertext per pack_size chunk of `values` (last chunk may be short)."""
    if pack_size < 1:
        raise PreconditionError(f"pack_size must be positive, got {pack_size}")
    _check_fits(pack_size, engine.slot_count)
    ciphertexts = [
        encrypt_vector(engine, values[start : start + pack_size])
        for start in range(0, len(values), pack_size)
    ]
    logger.debug("Encrypted %d values into %d ciphertexts", len(values), len(ciphertexts))
    return ciphertexts


def decrypt_blocks(
    engine: PackedEngine, ciphertexts: Sequence[Any], length: int, pack_size: int
) -> List[int]:
    """Concatenate the first pack_size slots of each block, resized to `length`."""
    _check_fits(pack_size, engine.slot_count)
    outputs: List[int] = []
    for ciphertext in ciphertexts:
        outputs.extend(decrypt_vector(engine, ciphertext, pack_size))
    if len(outputs) < length:
        outputs.extend([0] * (length - len(outputs)))
    return outputs[:length]
