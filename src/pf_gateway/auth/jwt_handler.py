"""JWT bearer token verification.

Tokens are issued by the identity service and signed with the shared
JWT_SECRET (HS256). This service only verifies them; it never issues tokens.
"""

from jose import JWTError, jwt

from config.settings import settings
from src.pf_common.errors import InvalidCredentialsError

_ALGORITHM = settings.JWT_ALGORITHM  # "HS256"


def decode_token(token: str) -> dict[str, str]:
    """Decode and validate an access token.

    Args:
        token: Raw JWT string.

    Returns:
        Decoded payload dict with at minimum {"sub": ..., "type": "access"}.

    Raises:
        InvalidCredentialsError: Token invalid, expired or not an access token.
    """
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise InvalidCredentialsError() from None

    if payload.get("type") != "access":
        raise InvalidCredentialsError()

    return payload
