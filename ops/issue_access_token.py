from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from listing_hub.core.config import settings
from listing_hub.core.security import generate_access_token
from listing_hub.models.access_token import AccessToken
from listing_hub.models.account import Account

log = logging.getLogger("ops.issue_access_token")


async def issue(email: str, *, revoke_existing: bool) -> str | None:
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)

    try:
        async with Session() as db:
            account = (await db.execute(
                select(Account).where(Account.email == email.strip().lower())
            )).scalar_one_or_none()
            if account is None:
                return None

            if revoke_existing:
                await db.execute(
                    update(AccessToken)
                    .where(AccessToken.account_id == account.id, AccessToken.is_active.is_(True))
                    .values(is_active=False, revoked_at=datetime.now(timezone.utc))
                )

            token = generate_access_token()
            db.add(AccessToken(
                account_id=account.id,
                token_prefix=token.prefix,
                token_hash=token.hashed,
                is_active=True,
            ))
            await db.commit()
            log.info("issued token %s for account %s (%s)", token.prefix, account.id, account.role)
            return token.plain
    finally:
        await engine.dispose()


def main() -> int:
    logging.basicConfig(level=logging.INFO)

    p = argparse.ArgumentParser(description="Issue a bearer access token for an existing account.")
    p.add_argument("--email", required=True, help="account email")
    p.add_argument("--revoke-existing", action="store_true", help="deactivate the account's other tokens")
    args = p.parse_args()

    plain = asyncio.run(issue(args.email, revoke_existing=args.revoke_existing))
    if plain is None:
        print(f"No account with email {args.email}", file=sys.stderr)
        return 1

    # shown once; only the hash is stored
    print(plain)
    return 0

if __name__ == "__main__":
    raise SystemExit(main())
