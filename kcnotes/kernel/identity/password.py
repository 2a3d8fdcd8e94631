"""
Password hashing utilities using bcrypt.
"""

import bcrypt

# Default work factor, matches the cost used for existing stored credentials
DEFAULT_BCRYPT_ROUNDS = 10

# bcrypt only uses the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """
    Password hashing service.

    The salt and the work factor are embedded in the stored string
    (``$2b$<rounds>$<salt><digest>``), so verification needs nothing else.

    Only the first 72 bytes of a password count: longer passwords that
    share that prefix verify as the same password.
    """

    def __init__(self, rounds: int = DEFAULT_BCRYPT_ROUNDS):
        self.rounds = rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            Hashed password string

        Raises:
            ValueError: If the password is empty
        """
        if not password:
            raise ValueError("Password must not be empty")

        salt = bcrypt.gensalt(rounds=self.rounds)
        hashed = bcrypt.hashpw(self._encode(password), salt)
        return hashed.decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Returns False for empty input or a malformed stored hash.
        """
        if not plain_password or not hashed_password:
            return False
        try:
            return bcrypt.checkpw(
                self._encode(plain_password),
                hashed_password.encode("utf-8"),
            )
        except ValueError:
            return False

    def needs_rehash(self, hashed_password: str) -> bool:
        """
        Check if a stored hash was produced with a different work factor.

        Format: $2b$XX$... where XX is the rounds.
        """
        parts = hashed_password.split("$")
        if len(parts) < 4:
            return True
        try:
            return int(parts[2]) != self.rounds
        except ValueError:
            return True
