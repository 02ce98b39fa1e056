from typing import Dict, List


class VaultError(Exception):
    """Base class for failures raised by the vault subsystem."""


class ValidationError(VaultError):
    """Malformed or missing input. Carries field-level messages."""

    def __init__(self, messages: Dict[str, List[str]]):
        self.messages = messages
        super().__init__("Validation failed: " + ", ".join(sorted(messages)))


class NotFoundError(VaultError):
    """Record absent or not owned by the caller. Both cases look the same."""


class DecryptionError(VaultError):
    """Ciphertext failed its integrity check or was written under another key."""


class PersistenceError(VaultError):
    """Storage unavailable or rejected the write. The caller may retry."""
