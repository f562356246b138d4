from __future__ import annotations

import json

import base58
from solders.keypair import Keypair

from .errors import KeyfileError


def load_keypair(path: str) -> Keypair:
    """
    Supports:
    1) {"privateKey": "<base58 64-byte secret key>"}
    2) solana-keygen output: a JSON array of 64 integers
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except OSError as e:
        raise KeyfileError(f"Cannot read key file {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise KeyfileError(f"Key file {path} is not valid JSON: {e}") from e

    if isinstance(raw, dict) and isinstance(raw.get("privateKey"), str):
        try:
            secret = base58.b58decode(raw["privateKey"])
        except ValueError as e:
            raise KeyfileError(f"privateKey in {path} is not base58: {e}") from e
    elif isinstance(raw, list) and all(isinstance(b, int) for b in raw):
        secret = bytes(raw)
    else:
        raise KeyfileError(
            f"Could not find a secret key in {path}. "
            'Expected {"privateKey": "<base58>"} or a JSON array of 64 bytes.'
        )

    if len(secret) != 64:
        raise KeyfileError(f"Secret key in {path} must be 64 bytes, got {len(secret)}")
    return Keypair.from_bytes(secret)
