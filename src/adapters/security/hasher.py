"""
bcrypt password hasher adapter - Implements PasswordHasher protocol.
"""

import bcrypt


class BcryptPasswordHasher:
    """
    Implements PasswordHasher protocol via bcrypt.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    def __init__(self, cost: int = 10) -> None:
        """
        Args:
            cost: bcrypt work factor (log2 rounds), at least 10
        """
        if cost < 10:
            raise ValueError(f"bcrypt cost must be >= 10, got {cost}")
        self._cost = cost

    def hash(self, password: str) -> str:
        """Hash password with a fresh salt."""
        return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=self._cost)).decode()

    def verify(self, password: str, password_hash: str) -> bool:
        """Constant-time check of a password against a stored hash."""
        try:
            return bcrypt.checkpw(password.encode(), password_hash.encode())
        except ValueError:
            # Malformed stored hash
            return False
