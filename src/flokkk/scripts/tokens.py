# src/flokkk/scripts/tokens.py
"""
Issue a bearer token for a local account.

Accounts are normally provisioned by the external auth provider. For local
development this script creates the account if needed and prints a token
that the API accepts:

    python -m flokkk.scripts.tokens alice --email alice@example.com
"""

from __future__ import annotations

import argparse

from sqlalchemy.orm import Session

from flokkk.core.security import create_access_token
from flokkk.db.session import SessionLocal
from flokkk.models import User


def ensure_user(db: Session, username: str, email: str | None = None) -> User:
    """Return the account named ``username``, creating it if it does not exist.

    Args:
        db: Database session
        username: Unique handle
        email: Optional email stored on creation
    """
    user = db.query(User).filter(User.username == username).first()
    if user is None:
        user = User(username=username, email=email, name=username)
        db.add(user)
        db.commit()
        db.refresh(user)
        print(f"Created user {username} (id={user.id})")
    return user


def main() -> None:
    parser = argparse.ArgumentParser(description="Print an access token for a local user")
    parser.add_argument("username")
    parser.add_argument("--email", default=None)
    parser.add_argument(
        "--minutes",
        type=int,
        default=None,
        help="Token lifetime; defaults to ACCESS_TOKEN_EXPIRE_MINUTES",
    )
    args = parser.parse_args()

    db = SessionLocal()
    try:
        user = ensure_user(db, args.username, args.email)
        print(create_access_token(user.id, expires_minutes=args.minutes))
    finally:
        db.close()


if __name__ == "__main__":
    main()
