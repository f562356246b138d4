from __future__ import annotations

from solders.pubkey import Pubkey
from spl.token.instructions import get_associated_token_address

from .project_constants import (
    COLLECTION_SEED,
    EDITION_SEED,
    FAIR_LAUNCH_SEED,
    FAIR_LAUNCH_USER_SEED,
    FAIR_LAUNCH_VAULT_SEED,
    LUCKY_BOX_SEED,
    LUCKY_BOX_USER_SEED,
    METADATA_SEED,
    PROGRAM_ID,
    TOKEN_METADATA_PROGRAM_ID,
    TOKEN_SEED,
)


def find_collection_pda(program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([COLLECTION_SEED], program_id)
    return result


def find_token_pda(program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([TOKEN_SEED], program_id)
    return result


def find_lucky_box_pda(program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([LUCKY_BOX_SEED], program_id)
    return result


def find_lucky_box_user_pda(user: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([LUCKY_BOX_USER_SEED, bytes(user)], program_id)
    return result


def find_fair_launch_pda(program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([FAIR_LAUNCH_SEED], program_id)
    return result


def find_fair_launch_vault_pda(program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([FAIR_LAUNCH_VAULT_SEED], program_id)
    return result


def find_fair_launch_user_pda(user: Pubkey, program_id: Pubkey = PROGRAM_ID) -> Pubkey:
    result, _ = Pubkey.find_program_address([FAIR_LAUNCH_USER_SEED, bytes(user)], program_id)
    return result


def find_metadata_pda(mint: Pubkey) -> Pubkey:
    """Metaplex token metadata account of `mint`."""
    result, _ = Pubkey.find_program_address(
        [METADATA_SEED, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint)],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return result


def find_master_edition_pda(mint: Pubkey) -> Pubkey:
    """Metaplex master edition account of `mint`."""
    result, _ = Pubkey.find_program_address(
        [METADATA_SEED, bytes(TOKEN_METADATA_PROGRAM_ID), bytes(mint), EDITION_SEED],
        TOKEN_METADATA_PROGRAM_ID,
    )
    return result


def find_token_account(mint: Pubkey, owner: Pubkey) -> Pubkey:
    return get_associated_token_address(owner, mint)
