"""
Bit-reversal helpers for the NTT input permutation.

The reversal works on a full 64-bit word with mask-and-shift swaps, then
shifts the result down, so every `num_bits` takes the same branch-free path.
"""

from fhe_bsgs.errors import PreconditionError

_MASK32 = 0xFFFFFFFF
_MASK64 = 0xFFFFFFFFFFFFFFFF


def reverse_bits32(value: int) -> int:
    out = ((value & 0xAAAAAAAA) >> 1) | ((value & 0x55555555) << 1)
    out = ((out & 0xCCCCCCCC) >> 2) | ((out & 0x33333333) << 2)
    out = ((out & 0xF0F0F0F0) >> 4) | ((out & 0x0F0F0F0F) << 4)
    out = ((out & 0xFF00FF00) >> 8) | ((out & 0x00FF00FF) << 8)
    # rotate by 16 swaps the two half-words
    return ((out << 16) | (out >> 16)) & _MASK32


def reverse_bits(value: int) -> int:
    """Reverse all 64 bits of `value`."""
    return reverse_bits32(value >> 32) | (reverse_bits32(value & _MASK32) << 32)


def reverse_n_bits(value: int, num_bits: int) -> int:
    """Reverse the low `num_bits` bits of `value` (0 <= num_bits <= 64)."""
    if not 0 <= num_bits <= 64:
        raise PreconditionError(f"num_bits must lie in [0, 64], got {num_bits}")
    if value < 0 or value > _MASK64:
        raise PreconditionError(f"value {value} does not fit in 64 bits")
    return reverse_bits(value) >> (64 - num_bits)


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0
