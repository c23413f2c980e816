"""Signed token issuing and validation.

Two token kinds share the service secret:

* **access tokens**: HS256 JWTs carrying ``sub`` (user id), ``email``,
  ``iss``, ``aud``, ``iat`` and ``exp``;
* **invitation tokens**: JWTs carrying ``sub`` (invitation id) and
  ``typ="invitation"``.  They never expire on their own; the invitation row's
  ``expires_at`` is authoritative.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from jose import JWTError, jwt

from taskhub.core.exceptions import InvalidInvitationTokenError, UnauthorizedError
from taskhub.utils.dates import utc_now

if TYPE_CHECKING:
    from taskhub.core.config import TaskHubConfig

logger = logging.getLogger(__name__)

_INVITATION_TYPE = "invitation"


class TokenIssuer:
    """Issue and validate access and invitation tokens.

    Example:
        ```python
        issuer = TokenIssuer(config)
        token = issuer.issue_access_token(user.id, user.email)
        user_id = issuer.decode_access_token(token)
        ```
    """

    def __init__(self, config: TaskHubConfig) -> None:
        self.secret = config.jwt_secret
        self.algorithm = config.jwt_algorithm
        self.issuer = config.jwt_issuer
        self.audience = config.jwt_audience
        self.ttl = timedelta(minutes=config.access_token_ttl_minutes)

    def issue_access_token(self, user_id: uuid.UUID, email: str) -> str:
        now = utc_now()
        claims: dict[str, Any] = {
            "sub": str(user_id),
            "email": email,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": int(now.timestamp()),
            "exp": int((now + self.ttl).timestamp()),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> uuid.UUID:
        """Return the user id of a valid access token.

        Raises:
            UnauthorizedError: If the signature, issuer, audience or expiry
                check fails, or the subject is not a UUID.
        """
        # Log the internal reason, never expose it
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                audience=self.audience,
                issuer=self.issuer,
            )
        except JWTError as e:
            logger.warning("Access token validation failed: %s", e)
            raise UnauthorizedError("Invalid or expired token") from e

        try:
            return uuid.UUID(str(payload.get("sub")))
        except ValueError as e:
            logger.warning("Access token subject is not a user id")
            raise UnauthorizedError("Invalid or expired token") from e

    def issue_invitation_token(self, invitation_id: uuid.UUID) -> str:
        claims = {"sub": str(invitation_id), "typ": _INVITATION_TYPE}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def decode_invitation_token(self, token: str) -> uuid.UUID:
        """Return the invitation id carried by *token*.

        Raises:
            InvalidInvitationTokenError: If the token is malformed, forged or
                not an invitation token.
        """
        try:
            payload = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning("Invitation token rejected: %s", e)
            raise InvalidInvitationTokenError() from e

        if payload.get("typ") != _INVITATION_TYPE:
            raise InvalidInvitationTokenError()
        try:
            return uuid.UUID(str(payload.get("sub")))
        except ValueError as e:
            raise InvalidInvitationTokenError() from e


__all__ = ["TokenIssuer"]
