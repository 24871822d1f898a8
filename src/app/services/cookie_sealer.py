"""
Cookie sealing

Tamper-evident encoding of the session cookie value: an HS256 JWS over the
cookie name and the raw token. Unsealing accepts a signature from any of the
configured secrets so keys can be rotated without logging everybody out.
"""

import json
from typing import Optional, Sequence

from jose import jws
from jose.constants import ALGORITHMS
from jose.exceptions import JWSError


class SealingFailure(Exception):
    """Cookie absent, garbled, tampered with or signed with an unknown key"""


class CookieSealer:
    def __init__(self, secrets: Sequence[str], cookie_name: str):
        if not secrets:
            raise ValueError("CookieSealer needs at least one secret")
        self.secrets = tuple(secrets)
        self.cookie_name = cookie_name

    def seal(self, token: str) -> str:
        """Sign with the primary (first) secret"""
        payload = {"name": self.cookie_name, "token": token}
        return jws.sign(payload, self.secrets[0], algorithm=ALGORITHMS.HS256)

    def unseal(self, sealed_value: Optional[str]) -> str:
        """
        Verify and open a sealed cookie value.

        Raises:
            SealingFailure: if no configured secret verifies the value, or the
                payload was sealed for a different cookie
        """
        if not sealed_value:
            raise SealingFailure("Cookie is empty")

        for secret in self.secrets:
            try:
                raw = jws.verify(sealed_value, secret, algorithms=[ALGORITHMS.HS256])
            except JWSError:
                continue
            return self._open(raw)

        raise SealingFailure("Cookie signature could not be verified")

    def _open(self, raw: bytes) -> str:
        try:
            payload = json.loads(raw)
        except ValueError as exc:
            raise SealingFailure("Cookie payload is not valid JSON") from exc

        if not isinstance(payload, dict) or payload.get("name") != self.cookie_name:
            raise SealingFailure("Cookie was sealed for another cookie name")
        token = payload.get("token")
        if not isinstance(token, str) or not token:
            raise SealingFailure("Cookie payload carries no token")
        return token
