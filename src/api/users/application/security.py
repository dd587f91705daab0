"""Password hashing for user accounts.

Uses bcrypt with a per-password random salt. Plaintext passwords never
leave this module in any stored form.
"""

import bcrypt

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    """Hash a plaintext password using bcrypt.

    Uses bcrypt with automatic salt generation. The work factor is the
    bcrypt default from gensalt().

    Args:
        password: The plaintext password to hash

    Returns:
        The bcrypt hash as a string
    """
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt()).decode()

