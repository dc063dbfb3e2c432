from __future__ import annotations
import os

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305
from cryptography.hazmat.primitives.kdf.hkdf import HKDF

SUITE_CHACHA20P = "CHACHA20P"
KEY_LEN = 32
NONCE_LEN = 12


def derive_user_key(master: bytes, user_id: str, salt: bytes = b"scd-state") -> bytes:
    """Per-user sealing key so one user's stored state cannot be opened with another's."""
    hkdf = HKDF(algorithm=hashes.SHA256(), length=KEY_LEN, salt=salt, info=f"state-key:{user_id}".encode())
    return hkdf.derive(master)


class StateSealer:
    """ChaCha20-Poly1305 sealing of stored documents; blob layout is nonce || ciphertext+tag."""
    suite_id = SUITE_CHACHA20P

    def __init__(self, key: bytes):
        if len(key) != KEY_LEN:
            raise ValueError(f"sealing key must be {KEY_LEN} bytes, got {len(key)}")
        self._aead = ChaCha20Poly1305(key)

    def seal(self, plaintext: bytes, aad: bytes) -> bytes:
        nonce = os.urandom(NONCE_LEN)
        return nonce + self._aead.encrypt(nonce, plaintext, aad)

    def open(self, blob: bytes, aad: bytes) -> bytes:
        nonce, ct = blob[:NONCE_LEN], blob[NONCE_LEN:]
        return self._aead.decrypt(nonce, ct, aad)
