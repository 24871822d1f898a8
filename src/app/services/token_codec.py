import hashlib
import secrets

TOKEN_BYTES = 64


class TokenCodec:
    """
    Session token generation and storage hashing.

    The raw token is the bearer credential and only ever travels inside the
    sealed cookie. The store sees SHA-256 digests, so a database dump cannot be
    replayed as a cookie, and a digest lookup is a single unique-index hit.
    """

    @staticmethod
    def generate_token() -> str:
        """64 bytes from the OS CSPRNG, url-safe base64 encoded"""
        return secrets.token_urlsafe(TOKEN_BYTES)

    @staticmethod
    def hash(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()
