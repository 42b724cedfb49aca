"""User domain service: register, login, refresh.

All DB operations use the injected AsyncSession. Transactions are managed
by the caller (router layer) via `async with db.begin()`.
"""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.smm_common.errors import (
    AccountDisabledError,
    EmailExistsError,
    InvalidCredentialsError,
)
from src.smm_gateway.auth.jwt_handler import (
    create_access_token,
    create_refresh_token,
    decode_token,
)
from src.smm_gateway.auth.password import hash_password, verify_password
from src.smm_gateway.user.db_models import UserModel
from src.smm_ledger.domain.repository import LedgerStoreProtocol
from src.smm_ledger.infrastructure.persistence import LedgerStore

logger = logging.getLogger(__name__)


def _is_bootstrap_admin(email: str) -> bool:
    admin_email = settings.BOOTSTRAP_ADMIN_EMAIL
    return bool(admin_email) and email == admin_email.strip().lower()


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(self, ledger: LedgerStoreProtocol | None = None) -> None:
        self._ledger: LedgerStoreProtocol = ledger or LedgerStore()

    async def register(
        self,
        email: str,
        password: str,
        full_name: str | None,
        db: AsyncSession,
    ) -> UserModel:
        """Register a new user and provision their ledger account.

        Inserts into `users` and `accounts` in a single transaction.
        The caller must wrap this in `async with db.begin()`.
        """
        email = email.strip().lower()

        # DB UNIQUE constraint is the final guard
        result = await db.execute(select(UserModel).where(UserModel.email == email))
        if result.scalar_one_or_none() is not None:
            raise EmailExistsError()

        user = UserModel(
            email=email,
            full_name=full_name,
            password_hash=hash_password(password),
            is_admin=_is_bootstrap_admin(email),
            is_active=True,
        )
        db.add(user)
        try:
            await db.flush()  # Get user.id without committing
        except IntegrityError:
            # A concurrent registration won the UNIQUE(email) race
            raise EmailExistsError() from None
        await db.refresh(user)  # load server defaults (created_at)

        await self._ledger.provision_account(db, str(user.id))
        logger.info("Registered user %s (admin=%s)", user.id, user.is_admin)
        return user

    async def login(
        self,
        email: str,
        password: str,
        db: AsyncSession,
    ) -> tuple[UserModel, str, str]:
        """Authenticate user and return (user, access_token, refresh_token).

        "User not found" and "wrong password" both raise InvalidCredentialsError
        so the endpoint cannot be used to enumerate emails.
        """
        result = await db.execute(
            select(UserModel).where(UserModel.email == email.strip().lower())
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return (
            user,
            create_access_token(str(user.id)),
            create_refresh_token(str(user.id)),
        )

    async def refresh(self, refresh_token: str) -> str:
        """Validate refresh token and return a new access token."""
        payload = decode_token(refresh_token, expected_type="refresh")
        user_id: str = str(payload["sub"])
        return create_access_token(user_id)
