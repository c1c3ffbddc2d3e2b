"""
Capability surface of a packed (SIMD-slot) homomorphic encryption engine.

The matrix layer talks to the engine only through these methods. Handles are
opaque: ciphertexts, plaintexts and keys belong to the engine, and copying a
ciphertext must go through `clone`.
"""

from typing import Any, List, Protocol, Sequence


class PackedEngine(Protocol):
    @property
    def slot_count(self) -> int: ...

    @property
    def modulus(self) -> int: ...

    @property
    def secret_key(self) -> Any: ...

    # --- Encoding ---

    def encode(self, values: Sequence[int]) -> Any:
        """Pack up to slot_count field elements; longer input is refused."""
        ...

    def decode(self, plaintext: Any) -> List[int]: ...

    # --- Encryption ---

    def encrypt_packed(self, plaintext: Any) -> Any: ...

    def decrypt_packed(self, ciphertext: Any) -> Any: ...

    # --- Homomorphic operations ---

    def clone(self, ciphertext: Any) -> Any: ...

    def rotate(self, ciphertext: Any, step: int) -> Any:
        """Cyclic slot rotation by a signed step; needs a key for that step."""
        ...

    def add(self, lhs: Any, rhs: Any) -> Any: ...

    def add_in_place(self, lhs: Any, rhs: Any) -> None: ...

    def multiply_by_packed_plaintext(self, ciphertext: Any, plaintext: Any) -> Any: ...

    def multiply_by_scalar(self, ciphertext: Any, scalar: int) -> Any: ...

    # --- Keys ---

    def generate_rotation_key(self, secret_key: Any, step: int) -> None: ...

    def has_rotation_key(self, step: int) -> bool: ...
