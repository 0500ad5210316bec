#!/usr/bin/env python3
"""Generates a VAPID (P-256) key pair for pushwave. From the project root: python3 scripts/generate_vapid_keys.py
   Paste one of the printed forms into .env."""
import json

from cryptography.hazmat.primitives import serialization
from py_vapid import Vapid
from py_vapid.utils import b64urlencode


def generate_keys() -> tuple[str, str]:
    """(public, private) as base64url: uncompressed public point, raw 32-byte private scalar."""
    vapid = Vapid()
    vapid.generate_keys()
    public_raw = vapid.public_key.public_bytes(
        serialization.Encoding.X962,
        serialization.PublicFormat.UncompressedPoint,
    )
    private_raw = vapid.private_key.private_numbers().private_value.to_bytes(32, "big")
    return b64urlencode(public_raw), b64urlencode(private_raw)


def main() -> None:
    public_key, private_key = generate_keys()
    print(f"VAPID_PUBLIC_KEY={public_key}")
    print(f"VAPID_PRIVATE_KEY={private_key}")
    print()
    print("# or, as a single value:")
    print(f"VAPID_KEYS={json.dumps({'publicKey': public_key, 'privateKey': private_key}, separators=(',', ':'))}")
    print(f"VAPID_KEYS={public_key}:{private_key}")


if __name__ == "__main__":
    main()
