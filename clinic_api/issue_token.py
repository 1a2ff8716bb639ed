"""Print a staff access token to stdout.

Usage:
    python -m clinic_api.issue_token front-desk@clinic.example [--minutes 120]
"""
import argparse
import sys

from clinic_api.auth.jwt_handler import create_access_token
from clinic_api.core import config


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Issue a staff token for the clinic scheduler API.")
    parser.add_argument("subject", help="who the token is issued to")
    parser.add_argument("--minutes", type=int, default=None, help="token lifetime in minutes")
    args = parser.parse_args(argv)

    try:
        config.validate_runtime_config()
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        sys.exit(1)

    print(create_access_token(args.subject, expires_minutes=args.minutes))


if __name__ == "__main__":
    main()
