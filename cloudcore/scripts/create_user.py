"""
Create a user (e.g. an operator account). Run from project root:
  python -m cloudcore.scripts.create_user EMAIL PASSWORD [role]
Example:
  python -m cloudcore.scripts.create_user ops@example.com your-secure-password operator
"""
import argparse
import sys

from cloudcore.core.config import get_settings
from cloudcore.core.database import build_engine_from_settings, build_session_factory
from cloudcore.core.security import PASSWORD_MAX_LEN, PASSWORD_MIN_LEN
from cloudcore.models import USER_ROLES
from cloudcore.services.auth import AuthService, UserAlreadyExists
from cloudcore.services.credential_store import CredentialStore, StoreError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create a CloudCore user.")
    parser.add_argument("email", help="Account email")
    parser.add_argument("password", help=f"Password ({PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} chars)")
    parser.add_argument("role", nargs="?", default="viewer", choices=list(USER_ROLES))
    args = parser.parse_args(argv)

    email = args.email.strip()
    if "@" not in email or len(email) > 255:
        print("Invalid email.", file=sys.stderr)
        return 1
    if not (PASSWORD_MIN_LEN <= len(args.password) <= PASSWORD_MAX_LEN):
        print(f"Password must be {PASSWORD_MIN_LEN}-{PASSWORD_MAX_LEN} characters.", file=sys.stderr)
        return 1

    settings = get_settings()
    session_factory = build_session_factory(build_engine_from_settings(settings))
    db = session_factory()
    try:
        auth = AuthService(CredentialStore(db), settings.JWT_SECRET.get_secret_value())
        result = auth.register(email, args.password, role=args.role)
    except UserAlreadyExists:
        print(f"User '{email}' already exists.", file=sys.stderr)
        return 1
    except StoreError as e:
        print(f"Database error: {e.message}", file=sys.stderr)
        return 1
    finally:
        db.close()
    print(f"Created user '{result.user.email}' with role '{result.user.role}'.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
