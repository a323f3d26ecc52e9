"""
Cocktail Catalog Backend: Credential Codec
============================================

What:  Turns a plaintext password into a storable salted digest and checks a
       plaintext password against a stored digest.
How:   PBKDF2-HMAC-SHA512, 2048 iterations, 32-byte key, 16-byte random salt.
       Digest format: "<hex salt>$<hex hash>".
Who:   UserService (registration, password change, sign-in).

The parameters are fixed: every digest already in the users table was
produced with them, and verification re-derives with the same values.
Changing any of them requires re-hashing on next sign-in.
"""

import hashlib
import hmac
import secrets

from cocktail_api.exceptions import MalformedDigestError

DIGEST_SEPARATOR = "$"
SALT_BYTES = 16
ITERATIONS = 2048
KEY_LENGTH = 32
HASH_NAME = "sha512"


class CredentialCodec:
    """Stateless; one instance is created in create_app() and shared."""

    def __init__(
        self,
        iterations: int = ITERATIONS,
        key_length: int = KEY_LENGTH,
        hash_name: str = HASH_NAME,
        salt_bytes: int = SALT_BYTES,
    ):
        self.iterations = iterations
        self.key_length = key_length
        self.hash_name = hash_name
        self.salt_bytes = salt_bytes

    def _derive(self, plaintext: str, salt: str) -> str:
        # The hex salt string itself is the KDF salt input
        return hashlib.pbkdf2_hmac(
            self.hash_name,
            plaintext.encode("utf-8"),
            salt.encode("utf-8"),
            self.iterations,
            dklen=self.key_length,
        ).hex()

    def hash(self, plaintext: str) -> str:
        """Return a fresh `salt$hash` digest for plaintext."""
        salt = secrets.token_hex(self.salt_bytes)
        return f"{salt}{DIGEST_SEPARATOR}{self._derive(plaintext, salt)}"

    def verify(self, plaintext: str, digest: str) -> bool:
        """
        Check plaintext against a stored digest.

        Raises:
            MalformedDigestError if the digest is not `salt$hash`. A broken
            stored value must never read as a match (or as a plain mismatch
            that hides the corruption).
        """
        salt, sep, stored_hash = (digest or "").partition(DIGEST_SEPARATOR)
        if not sep or not salt or not stored_hash:
            raise MalformedDigestError()
        return hmac.compare_digest(self._derive(plaintext, salt), stored_hash)
