from __future__ import annotations

import hashlib
from typing import Final, List, Sequence

from borsh_construct import CStruct, I64, String, U8, U64, Vec
from construct import Bytes, Int8ul, Int16ul, Struct
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey
from spl.token.constants import ASSOCIATED_TOKEN_PROGRAM_ID, TOKEN_PROGRAM_ID

from .pda import (
    find_collection_pda,
    find_fair_launch_pda,
    find_fair_launch_user_pda,
    find_fair_launch_vault_pda,
    find_lucky_box_pda,
    find_lucky_box_user_pda,
    find_master_edition_pda,
    find_metadata_pda,
    find_token_account,
    find_token_pda,
)
from .project_constants import (
    ED25519_PROGRAM_ID,
    PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    SYSVAR_INSTRUCTIONS_ID,
    SYSVAR_RENT_ID,
    TOKEN_METADATA_PROGRAM_ID,
)

SIGNATURE_LEN: Final[int] = 64
PUBKEY_LEN: Final[int] = 32


def sighash(name: str) -> bytes:
    """Anchor instruction discriminator for the snake_case method `name`."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


MetadataArgs = CStruct("name" / String, "symbol" / String, "uri" / String)
CreateTokenArgs = CStruct(
    "name" / String,
    "symbol" / String,
    "uri" / String,
    "token_decimals" / U8,
)
LuckyBoxConfigArgs = CStruct(
    "signer" / Bytes(PUBKEY_LEN),
    "mint_start_time" / I64,
    "swap_start_time" / I64,
    "seed_nft_count" / U64,
)
ReferrerArgs = CStruct("referrer" / Bytes(PUBKEY_LEN))
SwapArgs = CStruct("token_amount" / U64, "signature" / Bytes(SIGNATURE_LEN))
FairLaunchConfigArgs = CStruct(
    "signer" / Bytes(PUBKEY_LEN),
    "start_time" / I64,
    "draw_price" / U64,
    "sol_refund_amount" / U64,
    "token_claim_amount" / U64,
)
CountArgs = CStruct("count" / U64)
AmountArgs = CStruct("amount" / U64)
DrawIdArgs = CStruct("draw_id" / U64, "signature" / Bytes(SIGNATURE_LEN))
DrawIdsArgs = CStruct("draw_ids" / Vec(U64), "signature" / Bytes(SIGNATURE_LEN))

# Native ed25519 program: one signature whose pubkey, signature and message
# all live inside the instruction data itself.
Ed25519Header = Struct(
    "num_signatures" / Int8ul,
    "padding" / Int8ul,
    "signature_offset" / Int16ul,
    "signature_instruction_index" / Int16ul,
    "public_key_offset" / Int16ul,
    "public_key_instruction_index" / Int16ul,
    "message_data_offset" / Int16ul,
    "message_data_size" / Int16ul,
    "message_instruction_index" / Int16ul,
)
ED25519_HEADER_LEN: Final[int] = 16
CURRENT_INSTRUCTION: Final[int] = 0xFFFF


def _signature_bytes(signature: bytes) -> bytes:
    signature = bytes(signature)
    if len(signature) != SIGNATURE_LEN:
        raise ValueError(f"Signature must be {SIGNATURE_LEN} bytes, got {len(signature)}")
    return signature


def _ro(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=False, is_writable=False)


def _rw(pubkey: Pubkey) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=False, is_writable=True)


def _signer(pubkey: Pubkey, writable: bool = True) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=True, is_writable=writable)


def build_ed25519_verify_ix(public_key: Pubkey, message: bytes, signature: bytes) -> Instruction:
    """Signature check the program reads back through the instructions sysvar."""
    signature = _signature_bytes(signature)
    public_key_offset = ED25519_HEADER_LEN
    signature_offset = public_key_offset + PUBKEY_LEN
    message_offset = signature_offset + SIGNATURE_LEN
    header = Ed25519Header.build(
        dict(
            num_signatures=1,
            padding=0,
            signature_offset=signature_offset,
            signature_instruction_index=CURRENT_INSTRUCTION,
            public_key_offset=public_key_offset,
            public_key_instruction_index=CURRENT_INSTRUCTION,
            message_data_offset=message_offset,
            message_data_size=len(message),
            message_instruction_index=CURRENT_INSTRUCTION,
        )
    )
    data = header + bytes(public_key) + signature + bytes(message)
    return Instruction(program_id=ED25519_PROGRAM_ID, data=data, accounts=[])


def build_create_collection_ix(
    authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    collection = find_collection_pda(program_id)
    data = sighash("create_collection") + MetadataArgs.build(
        {"name": name, "symbol": symbol, "uri": uri}
    )
    accounts = [
        _signer(authority),
        _rw(collection),  # collection_mint
        _rw(find_metadata_pda(collection)),
        _rw(find_master_edition_pda(collection)),
        _rw(find_token_account(collection, authority)),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(TOKEN_PROGRAM_ID),
        _ro(ASSOCIATED_TOKEN_PROGRAM_ID),
        _ro(TOKEN_METADATA_PROGRAM_ID),
        _ro(SYSVAR_RENT_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_create_token_ix(
    authority: Pubkey,
    name: str,
    symbol: str,
    uri: str,
    decimals: int,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    token_mint = find_token_pda(program_id)
    data = sighash("create_token") + CreateTokenArgs.build(
        {"name": name, "symbol": symbol, "uri": uri, "token_decimals": decimals}
    )
    accounts = [
        _signer(authority),
        _rw(token_mint),
        _rw(find_metadata_pda(token_mint)),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(TOKEN_PROGRAM_ID),
        _ro(ASSOCIATED_TOKEN_PROGRAM_ID),
        _ro(TOKEN_METADATA_PROGRAM_ID),
        _ro(SYSVAR_RENT_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def _lucky_box_config(signer: Pubkey, mint_start_time: int, swap_start_time: int, seed_nft_count: int) -> bytes:
    return LuckyBoxConfigArgs.build(
        {
            "signer": bytes(signer),
            "mint_start_time": mint_start_time,
            "swap_start_time": swap_start_time,
            "seed_nft_count": seed_nft_count,
        }
    )


def build_lucky_box_initialize_ix(
    admin: Pubkey,
    signer: Pubkey,
    mint_start_time: int,
    swap_start_time: int,
    seed_nft_count: int,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    data = sighash("lucky_box_initialize") + _lucky_box_config(
        signer, mint_start_time, swap_start_time, seed_nft_count
    )
    accounts = [
        _signer(admin),
        _rw(find_lucky_box_pda(program_id)),
        _ro(SYSVAR_RENT_ID),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_lucky_box_update_ix(
    admin: Pubkey,
    signer: Pubkey,
    mint_start_time: int,
    swap_start_time: int,
    seed_nft_count: int,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    data = sighash("lucky_box_update") + _lucky_box_config(
        signer, mint_start_time, swap_start_time, seed_nft_count
    )
    accounts = [
        _signer(admin, writable=False),
        _rw(find_lucky_box_pda(program_id)),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_lucky_box_mint_nft_ix(
    user: Pubkey,
    nft_mint: Pubkey,
    referrer: Pubkey,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    collection = find_collection_pda(program_id)
    data = sighash("lucky_box_mint_nft") + ReferrerArgs.build({"referrer": bytes(referrer)})
    accounts = [
        _signer(user),
        _rw(find_lucky_box_pda(program_id)),
        _rw(find_lucky_box_user_pda(user, program_id)),
        _rw(collection),
        _rw(find_metadata_pda(collection)),
        _rw(find_master_edition_pda(collection)),
        _signer(nft_mint),
        _rw(find_metadata_pda(nft_mint)),
        _rw(find_master_edition_pda(nft_mint)),
        _rw(find_token_account(nft_mint, user)),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(TOKEN_PROGRAM_ID),
        _ro(ASSOCIATED_TOKEN_PROGRAM_ID),
        _ro(TOKEN_METADATA_PROGRAM_ID),
        _ro(SYSVAR_RENT_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_lucky_box_swap_ix(
    user: Pubkey,
    nft_mint: Pubkey,
    token_amount: int,
    signature: bytes,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    token_mint = find_token_pda(program_id)
    data = sighash("lucky_box_swap") + SwapArgs.build(
        {"token_amount": token_amount, "signature": _signature_bytes(signature)}
    )
    accounts = [
        _signer(user),
        _rw(find_lucky_box_pda(program_id)),
        _rw(nft_mint),
        _rw(find_token_account(nft_mint, user)),
        _rw(token_mint),
        _rw(find_token_account(token_mint, user)),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(TOKEN_PROGRAM_ID),
        _ro(ASSOCIATED_TOKEN_PROGRAM_ID),
        _ro(SYSVAR_RENT_ID),
        _ro(SYSVAR_INSTRUCTIONS_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def _fair_launch_config(
    signer: Pubkey,
    start_time: int,
    draw_price: int,
    sol_refund_amount: int,
    token_claim_amount: int,
) -> bytes:
    return FairLaunchConfigArgs.build(
        {
            "signer": bytes(signer),
            "start_time": start_time,
            "draw_price": draw_price,
            "sol_refund_amount": sol_refund_amount,
            "token_claim_amount": token_claim_amount,
        }
    )


def build_fair_launch_initialize_ix(
    admin: Pubkey,
    signer: Pubkey,
    start_time: int,
    draw_price: int,
    sol_refund_amount: int,
    token_claim_amount: int,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    data = sighash("fair_launch_initialize") + _fair_launch_config(
        signer, start_time, draw_price, sol_refund_amount, token_claim_amount
    )
    accounts = [
        _signer(admin),
        _rw(find_fair_launch_pda(program_id)),
        _ro(SYSVAR_RENT_ID),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_fair_launch_update_ix(
    admin: Pubkey,
    signer: Pubkey,
    start_time: int,
    draw_price: int,
    sol_refund_amount: int,
    token_claim_amount: int,
    program_id: Pubkey = PROGRAM_ID,
) -> Instruction:
    data = sighash("fair_launch_update") + _fair_launch_config(
        signer, start_time, draw_price, sol_refund_amount, token_claim_amount
    )
    accounts = [
        _signer(admin, writable=False),
        _rw(find_fair_launch_pda(program_id)),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def build_fair_launch_initialize_user_ix(user: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Instruction:
    accounts = [
        _signer(user),
        _rw(find_fair_launch_user_pda(user, program_id)),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(
        program_id=program_id, data=sighash("fair_launch_initialize_user"), accounts=accounts
    )


def build_fair_launch_realloc_user_ix(
    user: Pubkey, count: int, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_realloc_user") + CountArgs.build({"count": count})
    accounts = [
        _signer(user),
        _rw(find_fair_launch_user_pda(user, program_id)),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)


def _draw_accounts(user: Pubkey, program_id: Pubkey) -> List[AccountMeta]:
    return [
        _signer(user),
        _rw(find_fair_launch_vault_pda(program_id)),
        _rw(find_fair_launch_pda(program_id)),
        _rw(find_fair_launch_user_pda(user, program_id)),
        _ro(SYSTEM_PROGRAM_ID),
    ]


def build_fair_launch_draw_ix(user: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Instruction:
    return Instruction(
        program_id=program_id,
        data=sighash("fair_launch_draw"),
        accounts=_draw_accounts(user, program_id),
    )


def build_fair_launch_batch_draw_ix(
    user: Pubkey, count: int, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_batch_draw") + CountArgs.build({"count": count})
    return Instruction(program_id=program_id, data=data, accounts=_draw_accounts(user, program_id))


def _refund_accounts(user: Pubkey, program_id: Pubkey) -> List[AccountMeta]:
    return _draw_accounts(user, program_id) + [_ro(SYSVAR_INSTRUCTIONS_ID)]


def build_fair_launch_refund_ix(
    user: Pubkey, draw_id: int, signature: bytes, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_refund") + DrawIdArgs.build(
        {"draw_id": draw_id, "signature": _signature_bytes(signature)}
    )
    return Instruction(program_id=program_id, data=data, accounts=_refund_accounts(user, program_id))


def build_fair_launch_batch_refund_ix(
    user: Pubkey, draw_ids: Sequence[int], signature: bytes, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_batch_refund") + DrawIdsArgs.build(
        {"draw_ids": list(draw_ids), "signature": _signature_bytes(signature)}
    )
    return Instruction(program_id=program_id, data=data, accounts=_refund_accounts(user, program_id))


def _claim_accounts(user: Pubkey, program_id: Pubkey) -> List[AccountMeta]:
    token_mint = find_token_pda(program_id)
    return [
        _signer(user),
        _rw(find_fair_launch_pda(program_id)),
        _rw(find_fair_launch_user_pda(user, program_id)),
        _rw(token_mint),
        _rw(find_token_account(token_mint, user)),
        _ro(TOKEN_PROGRAM_ID),
        _ro(ASSOCIATED_TOKEN_PROGRAM_ID),
        _ro(SYSTEM_PROGRAM_ID),
        _ro(SYSVAR_INSTRUCTIONS_ID),
    ]


def build_fair_launch_claim_ix(
    user: Pubkey, draw_id: int, signature: bytes, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_claim") + DrawIdArgs.build(
        {"draw_id": draw_id, "signature": _signature_bytes(signature)}
    )
    return Instruction(program_id=program_id, data=data, accounts=_claim_accounts(user, program_id))


def build_fair_launch_batch_claim_ix(
    user: Pubkey, draw_ids: Sequence[int], signature: bytes, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_batch_claim") + DrawIdsArgs.build(
        {"draw_ids": list(draw_ids), "signature": _signature_bytes(signature)}
    )
    return Instruction(program_id=program_id, data=data, accounts=_claim_accounts(user, program_id))


def build_fair_launch_emergency_withdraw_ix(
    admin: Pubkey, recipient: Pubkey, amount: int, program_id: Pubkey = PROGRAM_ID
) -> Instruction:
    data = sighash("fair_launch_emergency_withdraw") + AmountArgs.build({"amount": amount})
    accounts = [
        _signer(admin, writable=False),
        _rw(find_fair_launch_vault_pda(program_id)),
        _rw(find_fair_launch_pda(program_id)),
        _rw(recipient),
        _ro(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id=program_id, data=data, accounts=accounts)
