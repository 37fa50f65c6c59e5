"""
Create demo accounts: one issuing institution and one verifier, each with a
funded wallet, and print bearer tokens for them.
"""
import asyncio
from decimal import Decimal

from epr.core.security import create_access_token
from epr.domain.wallets import WalletLedger
from epr.infrastructure.database.repositories import SqlUserRepository
from epr.infrastructure.database.session import get_session, init_db

DEMO_ACCOUNTS = [
    ("issuer@example.com", "Demo Institution", "institution_admin", Decimal("100.00")),
    ("verifier@example.com", "Demo Verifier", "verifier", Decimal("50.00")),
]


async def create_demo_accounts():
    await init_db()

    async for db in get_session():
        users = SqlUserRepository(db)
        ledger = WalletLedger.with_session(db)
        for email, organization, role, opening_balance in DEMO_ACCOUNTS:
            user = await users.get_by_email(email)
            if user is None:
                user = await users.create(email=email, organization_name=organization, role=role)
                await ledger.top_up(user.id, opening_balance, reference="opening-balance")
                print(f"Created {role} account {email} with balance {opening_balance}")
            else:
                print(f"Account {email} already exists")
            print(f"  token: {create_access_token(user.id, user.role)}")


if __name__ == "__main__":
    asyncio.run(create_demo_accounts())
