import binascii
import json
import logging
import math
from typing import Any, Callable, Mapping, Optional

from jwt.utils import base64url_decode

from ...domain.entities import TokenData
from ...domain.exceptions import MalformedTokenError
from ...domain.ports import TokenDecoder

logger = logging.getLogger(__name__)


class UnverifiedJWTDecoder(TokenDecoder):
    """
    Adapter implementing TokenDecoder port on top of PyJWT's base64url helpers.

    Only the payload segment (`<header>.<payload>.<signature>`) is read.
    Signatures are NOT verified; the server that issued the token is the one
    that validates it.
    """

    def decode(self, token: str) -> Mapping[str, Any]:
        """
        Decode the middle segment of a dot-delimited token into claims.

        Raises:
            MalformedTokenError
        """
        if not isinstance(token, str):
            raise MalformedTokenError(f"Token must be a string, got {type(token).__name__}")

        segments = token.split(".")
        if len(segments) < 2 or not segments[1]:
            raise MalformedTokenError("Token has no payload segment")

        try:
            raw = base64url_decode(segments[1])
            claims = json.loads(raw.decode("utf-8"))
        except (binascii.Error, ValueError) as exc:
            # json.JSONDecodeError and UnicodeDecodeError are both ValueErrors
            raise MalformedTokenError(f"Invalid token payload: {exc}") from exc

        if not isinstance(claims, dict):
            raise MalformedTokenError("Token payload is not a JSON object")

        return claims


def token_data_from_response(
    response: Mapping[str, Any],
    *,
    decoder: TokenDecoder,
    token_property_name: str,
    token_expire_field_name: str,
    now: Callable[[], float],
    fallback_token: Optional[str] = None,
) -> TokenData:
    """
    Pull the token out of a server response and work out its expiry.

    The expiry claim is epoch seconds; `expires_in` is what remains of it at
    `now()`. A response without a token falls back to `fallback_token` and
    yields no claims.
    """
    token = response.get(token_property_name)
    if not token:
        if fallback_token is None:
            raise MalformedTokenError(f"Response has no {token_property_name!r} field")
        return TokenData(token=fallback_token)

    claims = decoder.decode(token)
    exp = claims.get(token_expire_field_name)
    if exp is None:
        logger.debug("Token carries no %r claim, treating as non-expiring", token_expire_field_name)
        return TokenData(token=token, claims=claims)

    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        raise MalformedTokenError(f"Claim {token_expire_field_name!r} is not a number: {exp!r}")
    try:
        finite = math.isfinite(exp)
    except OverflowError:
        # ints beyond float range
        finite = False
    if not finite:
        raise MalformedTokenError(f"Claim {token_expire_field_name!r} is not finite: {exp!r}")

    return TokenData(
        token=token,
        claims=claims,
        expires_in=exp - now(),
        expires_at=int(exp * 1000),
    )
