#!/usr/bin/env python3
"""
Issue a bearer token for the Resources API.

The token's subject is recorded as ``createdBy``/``modifiedBy`` on the
resources and rate references the holder creates or changes.  The
token is signed with ``SECRET_KEY`` from the environment, so run this
with the same environment as the service.

Usage:
    python create_token.py --principal alice --days 365
"""

import argparse

from resources_api.app.core.security import create_access_token


def main():
    ap = argparse.ArgumentParser(description="Issue a Resources API bearer token.")
    ap.add_argument("--principal", required=True, help="Principal name stored in the token subject")
    ap.add_argument("--days", type=int, default=1, help="Token lifetime in days")
    args = ap.parse_args()
    print(create_access_token(args.principal, expires_delta=args.days * 24 * 60 * 60))


if __name__ == "__main__":
    main()
