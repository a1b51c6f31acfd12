"""Password hashing strategies."""

from __future__ import annotations

from werkzeug.security import check_password_hash, generate_password_hash

from treasury.domain.accounts.repositories import PasswordHasher


class WerkzeugPasswordHasher(PasswordHasher):
    """Slow salted KDF over the client's password proof.

    ``method`` is a werkzeug method string such as ``pbkdf2:sha256:600000``
    or ``scrypt:32768:8:1``; the resulting hash embeds the method, its
    parameters and a fresh random salt. Verification compares digests with
    ``hmac.compare_digest``.
    """

    def __init__(self, method: str = "pbkdf2:sha256:600000", salt_length: int = 16) -> None:
        self._method = method
        self._salt_length = salt_length

    def hash(self, proof: str) -> str:
        return str(generate_password_hash(proof, method=self._method, salt_length=self._salt_length))

    def verify(self, proof: str, hashed: str) -> bool:
        return bool(check_password_hash(hashed, proof))
