from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import List

from borsh_construct import CStruct, I64, String, U8, U64, Vec
from construct import Bytes
from solders.pubkey import Pubkey

from .errors import AccountDecodeError
from .project_constants import DRAW_ID_SIZE, METADATA_V1_KEY, USER_ACCOUNT_HEADER_SIZE

DISCRIMINATOR_LEN = 8


def account_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"account:{name}".encode()).digest()[:DISCRIMINATOR_LEN]


FairLaunchAccountLayout = CStruct(
    "start_time" / I64,
    "start_slot" / U64,
    "end_slot" / U64,
    "next_draw_id" / U64,
    "draw_price" / U64,
    "sol_refund_amount" / U64,
    "token_claim_amount" / U64,
    "admin" / Bytes(32),
    "signer" / Bytes(32),
)
FairLaunchUserAccountLayout = CStruct("draw_ids" / Vec(U64))
LuckyBoxUserAccountLayout = CStruct(
    "referrer" / Bytes(32),
    "nft_mint" / Bytes(32),
    "nft_id" / U64,
    "mint_time" / I64,
)
LuckyBoxAccountLayout = CStruct(
    "mint_start_time" / I64,
    "swap_start_time" / I64,
    "seed_nft_count" / U64,
    "next_nft_id" / U64,
    "admin" / Bytes(32),
    "signer" / Bytes(32),
)
# Leading fields of a Metaplex Metadata account; the rest is not read.
MetadataLayout = CStruct(
    "key" / U8,
    "update_authority" / Bytes(32),
    "mint" / Bytes(32),
    "name" / String,
    "symbol" / String,
    "uri" / String,
)


@dataclass(frozen=True)
class FairLaunchAccount:
    start_time: int
    start_slot: int
    end_slot: int
    next_draw_id: int
    draw_price: int
    sol_refund_amount: int
    token_claim_amount: int
    admin: Pubkey
    signer: Pubkey


@dataclass(frozen=True)
class FairLaunchUserAccount:
    draw_ids: List[int]
    # Allocated size of the account data in bytes
    space: int

    def capacity(self) -> int:
        return (self.space - USER_ACCOUNT_HEADER_SIZE) // DRAW_ID_SIZE

    def needs_realloc(self, requested: int = 1) -> bool:
        return needs_realloc(self.space, len(self.draw_ids), requested)


@dataclass(frozen=True)
class LuckyBoxUserAccount:
    referrer: Pubkey
    nft_mint: Pubkey
    nft_id: int
    mint_time: int


@dataclass(frozen=True)
class LuckyBoxAccount:
    mint_start_time: int
    swap_start_time: int
    seed_nft_count: int
    next_nft_id: int
    admin: Pubkey
    signer: Pubkey


@dataclass(frozen=True)
class MetadataAccount:
    update_authority: Pubkey
    mint: Pubkey
    name: str
    symbol: str
    uri: str


def needs_realloc(space: int, entries: int, requested: int) -> bool:
    """
    True when the user account cannot take `requested` more draw ids.

    The comparison is inclusive: the last slot is never filled without a
    realloc.
    """
    return (space - USER_ACCOUNT_HEADER_SIZE) / DRAW_ID_SIZE <= entries + requested


def _body(name: str, data: bytes) -> bytes:
    expected = account_discriminator(name)
    if len(data) < DISCRIMINATOR_LEN or bytes(data[:DISCRIMINATOR_LEN]) != expected:
        raise AccountDecodeError(f"Account data is not a {name}")
    return bytes(data[DISCRIMINATOR_LEN:])


def decode_fair_launch_account(data: bytes) -> FairLaunchAccount:
    p = FairLaunchAccountLayout.parse(_body("FairLaunchAccount", data))
    return FairLaunchAccount(
        start_time=p.start_time,
        start_slot=p.start_slot,
        end_slot=p.end_slot,
        next_draw_id=p.next_draw_id,
        draw_price=p.draw_price,
        sol_refund_amount=p.sol_refund_amount,
        token_claim_amount=p.token_claim_amount,
        admin=Pubkey.from_bytes(p.admin),
        signer=Pubkey.from_bytes(p.signer),
    )


def decode_fair_launch_user_account(data: bytes) -> FairLaunchUserAccount:
    p = FairLaunchUserAccountLayout.parse(_body("FairLaunchUserAccount", data))
    return FairLaunchUserAccount(draw_ids=[int(d) for d in p.draw_ids], space=len(data))


def decode_lucky_box_user_account(data: bytes) -> LuckyBoxUserAccount:
    p = LuckyBoxUserAccountLayout.parse(_body("LuckyBoxUserAccount", data))
    return LuckyBoxUserAccount(
        referrer=Pubkey.from_bytes(p.referrer),
        nft_mint=Pubkey.from_bytes(p.nft_mint),
        nft_id=p.nft_id,
        mint_time=p.mint_time,
    )


def decode_lucky_box_account(data: bytes) -> LuckyBoxAccount:
    p = LuckyBoxAccountLayout.parse(_body("LuckyBoxAccount", data))
    return LuckyBoxAccount(
        mint_start_time=p.mint_start_time,
        swap_start_time=p.swap_start_time,
        seed_nft_count=p.seed_nft_count,
        next_nft_id=p.next_nft_id,
        admin=Pubkey.from_bytes(p.admin),
        signer=Pubkey.from_bytes(p.signer),
    )


def decode_metadata_account(data: bytes) -> MetadataAccount:
    if not data or data[0] != METADATA_V1_KEY:
        raise AccountDecodeError("Account data is not a Metaplex Metadata account")
    p = MetadataLayout.parse(bytes(data))
    return MetadataAccount(
        update_authority=Pubkey.from_bytes(p.update_authority),
        mint=Pubkey.from_bytes(p.mint),
        name=p.name.rstrip("\x00"),
        symbol=p.symbol.rstrip("\x00"),
        uri=p.uri.rstrip("\x00"),
    )
