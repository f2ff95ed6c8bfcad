"""
Create a super admin, or promote an existing account to super admin.

    python -m app.scripts.create_super_admin --email ops@example.com --password '...'
"""

import argparse
import asyncio
from typing import Optional

from app.core.auth import hash_password
from app.core.database import get_session_context
from app.core.tenancy import first_active_organization
from app.services.invitations import normalize_email
from app.services.users import get_user_by_email
from app.models.user import User
from hotel_crm_shared.schemas.common import AuthProvider, GlobalRole


async def create_super_admin(
    email: str,
    password: Optional[str],
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> None:
    async with get_session_context() as session:
        user = await get_user_by_email(email, session)

        if user is None:
            if not password:
                raise SystemExit("--password is required when creating a new account")
            user = User(
                email=normalize_email(email),
                first_name=first_name,
                last_name=last_name,
                password_hash=hash_password(password),
                auth_provider=AuthProvider.EMAIL.value,
            )
            print(f"Created user: {user.email}")
        else:
            print(f"User {user.email} already exists, promoting.")

        user.role = GlobalRole.SUPER_ADMIN.value

        # Start the org switcher on the oldest active hotel, if there is one
        if user.current_organization_id is None:
            org = await first_active_organization(session)
            if org is not None:
                user.current_organization_id = org.id
                print(f"Viewing context set to {org.name}.")

        session.add(user)

    print("Done.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create or promote a super admin.")
    parser.add_argument("--email", required=True, help="Email address for the user")
    parser.add_argument("--password", help="Password (required for new accounts)")
    parser.add_argument("--first-name", help="First name for a new account")
    parser.add_argument("--last-name", help="Last name for a new account")

    args = parser.parse_args()

    asyncio.run(create_super_admin(args.email, args.password, args.first_name, args.last_name))
