"""
Vault error taxonomy.

Chain integrity problems are never raised: `Blockchain.validate()` reports
them as a boolean. "Not found" during verification is a plain `False`.
"""


class VaultError(Exception):
    """Base class for vault errors."""
    pass


class CryptoFailure(VaultError):
    """Key material is missing or malformed, or a primitive failed."""
    pass


class PreconditionError(VaultError):
    """A proof was requested for a claim that does not hold."""
    pass


class InvalidReference(VaultError):
    """
    A revocation target does not address an existing, non-genesis block.
    """

    def __init__(self, message: str, target_index: int = -1):
        super().__init__(message)
        self.target_index = target_index
