"""
Authentication service layer
Handles credential verification, legacy credential migration and token issuance
"""

from typing import Optional, Tuple
from datetime import datetime, timezone
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete
import logging

from app.models import User, AuthSession
from app.core.security import SecurityUtils, CredentialFormat, TokenError
from app.core.exceptions import (
    UnauthorizedException,
    InvalidCredentialsException,
    AccountLockedException,
    NotFoundException,
)

logger = logging.getLogger(__name__)


class AuthService:
    """Authentication service"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user(self, user_id: int) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundException("User")
        return user

    async def authenticate(
        self,
        username: str,
        password: str,
        client_ip: str = "unknown"
    ) -> User:
        """
        Verify a username/password pair

        Args:
            username: Submitted username
            password: Submitted plaintext password
            client_ip: Caller address, for the audit log only

        Returns:
            The authenticated user

        Raises:
            InvalidCredentialsException: Unknown user or wrong password
            AccountLockedException: User has the locked role
        """
        result = await self.db.execute(select(User).where(User.username == username))
        user = result.scalar_one_or_none()

        if not user:
            logger.warning(f"Login attempt for non-existent user: {username} - IP: {client_ip}")
            raise InvalidCredentialsException()

        if user.is_locked:
            logger.warning(f"Login attempt for locked account: {username} - IP: {client_ip}")
            raise AccountLockedException()

        credential_format = SecurityUtils.credential_format(user.password_hash)

        if credential_format is CredentialFormat.HASHED:
            is_valid = SecurityUtils.verify_password(password, user.password_hash)
        else:
            is_valid = SecurityUtils.verify_legacy_password(user.username, password)
            if is_valid:
                await self._migrate_credential(user, password)

        if not is_valid:
            if user.is_admin:
                logger.warning(f"FAILED ADMIN LOGIN ATTEMPT - User: {username} - IP: {client_ip}")
            else:
                logger.warning(f"Failed login attempt for user: {username} - IP: {client_ip}")
            raise InvalidCredentialsException()

        return user

    async def _migrate_credential(self, user: User, password: str) -> None:
        """Rewrite a verified legacy credential in hash format, once"""
        user.password_hash = SecurityUtils.hash_password(password)
        self.db.add(user)
        await self.db.commit()
        await self.db.refresh(user)
        logger.info(f"Migrated password hash for user: {user.username}")

    async def login(
        self,
        username: str,
        password: str,
        client_ip: str = "unknown"
    ) -> Tuple[User, str, str]:
        """
        Authenticate and mint a token pair

        Returns:
            (user, access_token, refresh_token)
        """
        user = await self.authenticate(username, password, client_ip=client_ip)

        access_token = SecurityUtils.create_access_token(user.id, user.username, user.user_type)
        refresh_token = SecurityUtils.create_refresh_token(user.id)

        now = datetime.now(timezone.utc)

        # Expired records for this user are superseded by the new one
        await self.db.execute(
            delete(AuthSession).where(
                AuthSession.user_id == user.id,
                AuthSession.expires_at <= now
            )
        )

        self.db.add(AuthSession(
            id=SecurityUtils.generate_session_id(),
            user_id=user.id,
            refresh_token_hash=SecurityUtils.hash_token(refresh_token),
            expires_at=SecurityUtils.refresh_expiry(now),
        ))
        await self.db.commit()

        logger.info(f"Successful login for user: {user.username} (ID: {user.id}) - IP: {client_ip}")
        if user.is_admin:
            logger.warning(f"ADMIN ACCESS - User: {user.username} (ID: {user.id}) - IP: {client_ip}")

        return user, access_token, refresh_token

    async def refresh(self, refresh_token: Optional[str]) -> Tuple[User, str]:
        """
        Mint a new access token from a rotation token

        Signature failure, expiry and a missing server-side record all
        surface as the same UnauthorizedException.
        """
        if not refresh_token:
            raise UnauthorizedException("No refresh token provided")

        try:
            payload = SecurityUtils.decode_token(refresh_token, expected_type="refresh")
        except TokenError as e:
            logger.info(f"Rejected refresh token: {e}")
            raise UnauthorizedException("Invalid or expired refresh token")

        user_id = int(payload["sub"])
        result = await self.db.execute(
            select(User)
            .join(AuthSession, AuthSession.user_id == User.id)
            .where(
                AuthSession.refresh_token_hash == SecurityUtils.hash_token(refresh_token),
                AuthSession.expires_at > datetime.now(timezone.utc),
                AuthSession.user_id == user_id,
            )
        )
        user = result.scalar_one_or_none()

        if not user:
            logger.info(f"Refresh token without a live session record for user ID: {user_id}")
            raise UnauthorizedException("Invalid or expired refresh token")

        access_token = SecurityUtils.create_access_token(user.id, user.username, user.user_type)
        return user, access_token

    async def logout(self, refresh_token: Optional[str]) -> None:
        """Revoke the server-side record of a rotation token, if any"""
        if not refresh_token:
            return

        await self.db.execute(
            delete(AuthSession).where(
                AuthSession.refresh_token_hash == SecurityUtils.hash_token(refresh_token)
            )
        )
        await self.db.commit()
