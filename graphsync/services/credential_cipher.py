"""Symmetric encryption for the tokens and client secret kept on disk."""

from __future__ import annotations

import base64
import hashlib
from typing import Optional

from cryptography.fernet import Fernet, InvalidToken

from graphsync.core.errors import ConfigError


class CredentialCipher:
    """Encrypt and decrypt credential secrets using a derived Fernet key."""

    def __init__(self, *, secret: Optional[str]) -> None:
        if not secret:
            raise ConfigError(
                "Token encryption secret must be provided.",
                field="token_encryption_secret",
            )
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: Optional[str]) -> Optional[str]:
        """Encrypt a string; ``None`` and empty values are stored as ``None``."""
        if not plaintext:
            return None
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def decrypt(self, ciphertext: Optional[str]) -> Optional[str]:
        if not ciphertext:
            return None
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError(
                "Failed to decrypt credential; invalid ciphertext or key changed."
            ) from exc
        return plaintext.decode("utf-8")


__all__ = ["CredentialCipher"]
