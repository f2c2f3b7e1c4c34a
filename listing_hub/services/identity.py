from dataclasses import dataclass

from fastapi import Depends, Security
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from listing_hub.core.db import get_db
from listing_hub.core.errors import AuthenticationError, AuthorizationError
from listing_hub.core.security import hash_access_token
from listing_hub.models.access_token import AccessToken
from listing_hub.models.account import Account

bearer_scheme = HTTPBearer(auto_error=False)

ADMIN_LEVELS = ("basic", "owner", "super")


@dataclass(frozen=True)
class Principal:
    account_id: str
    email: str
    role: str  # "fsbo" | "landlord" | "agent" | "admin"
    admin_level: str | None
    subscription_tier: str
    tenant_id: str
    country_code: str | None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin" and self.admin_level in ADMIN_LEVELS

    @property
    def is_super_admin(self) -> bool:
        return self.is_admin and self.admin_level == "super"


def principal_from_account(account: Account) -> Principal:
    return Principal(
        account_id=account.id,
        email=account.email,
        role=account.role,
        admin_level=account.admin_level if account.role == "admin" else None,
        subscription_tier=account.subscription_tier or "basic",
        tenant_id=account.tenant_id,
        country_code=account.country_code,
    )


async def get_principal(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    db: AsyncSession = Depends(get_db),
) -> Principal:
    if credentials is None or not credentials.credentials:
        raise AuthenticationError("Missing bearer token")

    hashed = hash_access_token(credentials.credentials)
    stmt = select(AccessToken).where(AccessToken.token_hash == hashed, AccessToken.is_active.is_(True))
    token = (await db.execute(stmt)).scalar_one_or_none()
    if not token:
        raise AuthenticationError("Invalid bearer token")

    stmt = select(Account).where(Account.id == token.account_id, Account.is_active.is_(True))
    account = (await db.execute(stmt)).scalar_one_or_none()
    if not account:
        raise AuthenticationError("Profile not found", code="profile_not_found")

    return principal_from_account(account)


def require_admin(principal: Principal = Depends(get_principal)) -> Principal:
    if not principal.is_admin:
        raise AuthorizationError("Admin privileges required", code="admin_required")
    return principal
