#!/usr/bin/env python3
"""
Generate the admin password hash for ADMIN_PASSWORD_HASH.

Usage:
  python scripts/hash_password.py 's3cret'
  python scripts/hash_password.py            # prompts without echo
"""
from __future__ import annotations

import argparse
import getpass
import sys

from campus.core.security import hash_password, verify_password


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser(description="Hash an admin password")
    ap.add_argument("password", nargs="?", help="Plain password (prompted when omitted)")
    args = ap.parse_args(argv)

    password = args.password or getpass.getpass("Password: ")
    if len(password) < 8:
        raise SystemExit("Password must have at least 8 characters")
    hashed = hash_password(password)
    if not verify_password(password, hashed):
        raise SystemExit("Hash verification failed")
    print(hashed)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:  # pragma: no cover - CLI use
        sys.stderr.write("\nAborted\n")
        raise SystemExit(1)
