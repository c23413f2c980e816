"""Registration, login and bearer-token authentication."""

from __future__ import annotations

import logging
import uuid
from typing import TYPE_CHECKING

from sqlalchemy.exc import IntegrityError

from taskhub.core.exceptions import (
    ConflictError,
    InvalidCredentialsError,
    UnauthorizedError,
)
from taskhub.core.types import LoginResult, RegisterResult
from taskhub.mail.messages import welcome_message
from taskhub.services.base import BaseService
from taskhub.storage.models import UserModel
from taskhub.storage.repositories import UserStore
from taskhub.utils.security import hash_password, verify_password
from taskhub.utils.validation import normalize_email, validate_email

if TYPE_CHECKING:
    from taskhub.core.config import TaskHubConfig
    from taskhub.mail.dispatcher import MailDispatcher
    from taskhub.services.tokens import TokenIssuer
    from taskhub.storage.database import Database

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    def __init__(
        self,
        database: Database,
        config: TaskHubConfig,
        tokens: TokenIssuer,
        mail: MailDispatcher,
    ) -> None:
        super().__init__(database, config)
        self.tokens = tokens
        self.mail = mail

    async def register(self, email: str, password: str, full_name: str) -> RegisterResult:
        """Create an active account and send a welcome mail in the background.

        Raises:
            ConflictError: If the email is malformed or already registered.
        """
        email = normalize_email(email)
        if not validate_email(email):
            raise ConflictError("Invalid email address", {"field": "email"})
        full_name = full_name.strip()

        async with self.database.session_factory() as session:
            users = UserStore(session)
            if await users.get_by_email(email) is not None:
                logger.warning("Registration rejected: email already registered")
                raise ConflictError("Email already registered")

            user = UserModel(
                email=email,
                full_name=full_name,
                password_hash=hash_password(password),
                is_active=True,
            )
            users.add(user)
            try:
                await session.commit()
            except IntegrityError as exc:
                # Lost a race with a concurrent registration of the same email
                await session.rollback()
                raise ConflictError("Email already registered") from exc

        logger.info("Registered user id=%s", user.id)
        self.mail.dispatch(welcome_message(user.email, user.full_name))
        return RegisterResult(user_id=user.id, email=user.email, full_name=user.full_name)

    async def login(self, email: str, password: str) -> LoginResult:
        """Check credentials and issue an access token.

        Raises:
            InvalidCredentialsError: For an unknown email, a wrong password or
                a deactivated account.
        """
        async with self.database.session_factory() as session:
            user = await UserStore(session).get_by_email(email)

        if user is None or not verify_password(user.password_hash, password):
            logger.warning("Login failed for unknown email or wrong password")
            raise InvalidCredentialsError("Invalid email or password")
        if not user.is_active:
            logger.warning("Login refused for deactivated user id=%s", user.id)
            raise InvalidCredentialsError("Account is deactivated")

        token = self.tokens.issue_access_token(user.id, user.email)
        return LoginResult(
            token=token, user_id=user.id, email=user.email, full_name=user.full_name
        )

    def authenticate(self, token: str) -> uuid.UUID:
        """Return the user id carried by a bearer *token*.

        Raises:
            UnauthorizedError: If the token is missing or invalid.
        """
        if not token:
            raise UnauthorizedError("Missing bearer token")
        return self.tokens.decode_access_token(token)


__all__ = ["AuthService"]
