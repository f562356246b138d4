from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from solana.rpc.api import Client
from solana.rpc.commitment import Commitment, Confirmed
from solana.rpc.types import TxOpts
from solders.compute_budget import set_compute_unit_limit
from solders.instruction import Instruction
from solders.keypair import Keypair
from solders.message import Message
from solders.pubkey import Pubkey
from solders.signature import Signature
from solders.transaction import Transaction

from . import instructions as ix
from . import pda
from .accounts import (
    FairLaunchAccount,
    FairLaunchUserAccount,
    LuckyBoxAccount,
    LuckyBoxUserAccount,
    MetadataAccount,
    decode_fair_launch_account,
    decode_fair_launch_user_account,
    decode_lucky_box_account,
    decode_lucky_box_user_account,
    decode_metadata_account,
)
from .errors import error_for_status
from .events import ProgramEvent, parse_events
from .project_constants import (
    CREATE_COMPUTE_UNITS,
    MINT_NFT_COMPUTE_UNITS,
    PROGRAM_ID,
    REALLOC_MARGIN,
)

log = logging.getLogger(__name__)


class MathsolClient:
    """
    Typed access to the Mathsol program.

    Every mutating call builds one atomic transaction, sends it without
    preflight and blocks until it is confirmed. Failures are raised to the
    caller; nothing is retried here.
    """

    def __init__(
        self,
        connection: Client,
        program_id: Pubkey = PROGRAM_ID,
        endpoint: Optional[str] = None,
        commitment: Commitment = Confirmed,
    ) -> None:
        self.connection = connection
        self.program_id = program_id
        self.endpoint = endpoint
        self.commitment = commitment

    @staticmethod
    def from_endpoint(
        endpoint: str,
        program_id: Pubkey = PROGRAM_ID,
        commitment: Commitment = Confirmed,
        timeout_s: float = 10.0,
    ) -> "MathsolClient":
        connection = Client(endpoint, commitment=commitment, timeout=timeout_s)
        return MathsolClient(connection, program_id=program_id, endpoint=endpoint, commitment=commitment)

    # --- addresses -------------------------------------------------------

    def find_collection_pda(self) -> Pubkey:
        return pda.find_collection_pda(self.program_id)

    def find_token_pda(self) -> Pubkey:
        return pda.find_token_pda(self.program_id)

    def find_lucky_box_pda(self) -> Pubkey:
        return pda.find_lucky_box_pda(self.program_id)

    def find_lucky_box_user_pda(self, user: Pubkey) -> Pubkey:
        return pda.find_lucky_box_user_pda(user, self.program_id)

    def find_fair_launch_pda(self) -> Pubkey:
        return pda.find_fair_launch_pda(self.program_id)

    def find_fair_launch_vault_pda(self) -> Pubkey:
        return pda.find_fair_launch_vault_pda(self.program_id)

    def find_fair_launch_user_pda(self, user: Pubkey) -> Pubkey:
        return pda.find_fair_launch_user_pda(user, self.program_id)

    # --- queries ---------------------------------------------------------

    def _account_data(self, address: Pubkey) -> Optional[bytes]:
        resp = self.connection.get_account_info(address, commitment=self.commitment)
        if resp.value is None:
            return None
        return bytes(resp.value.data)

    def query_lucky_box_account(self) -> Optional[LuckyBoxAccount]:
        data = self._account_data(self.find_lucky_box_pda())
        return decode_lucky_box_account(data) if data is not None else None

    def query_lucky_box_user_account(self, user: Pubkey) -> Optional[LuckyBoxUserAccount]:
        data = self._account_data(self.find_lucky_box_user_pda(user))
        return decode_lucky_box_user_account(data) if data is not None else None

    def query_fair_launch_account(self) -> Optional[FairLaunchAccount]:
        data = self._account_data(self.find_fair_launch_pda())
        return decode_fair_launch_account(data) if data is not None else None

    def query_fair_launch_user_account(self, user: Pubkey) -> Optional[FairLaunchUserAccount]:
        data = self._account_data(self.find_fair_launch_user_pda(user))
        return decode_fair_launch_user_account(data) if data is not None else None

    def query_metadata(self, address: Pubkey) -> Optional[MetadataAccount]:
        data = self._account_data(address)
        return decode_metadata_account(data) if data is not None else None

    def query_collection_metadata(self) -> Optional[MetadataAccount]:
        return self.query_metadata(pda.find_metadata_pda(self.find_collection_pda()))

    def query_token_metadata(self) -> Optional[MetadataAccount]:
        return self.query_metadata(pda.find_metadata_pda(self.find_token_pda()))

    def should_fair_launch_realloc_user(self, user: Pubkey, draw_count: int = 1) -> bool:
        account = self.query_fair_launch_user_account(user)
        if account is None:
            return True
        return account.needs_realloc(draw_count)

    def query_signatures(self, until: Optional[str] = None) -> list:
        """Program signatures newer than `until`, newest first."""
        resp = self.connection.get_signatures_for_address(
            self.program_id,
            until=Signature.from_string(until) if until else None,
            commitment=Confirmed,
        )
        return list(resp.value)

    def query_transaction(self, signature: str):
        resp = self.connection.get_transaction(
            Signature.from_string(signature),
            commitment=Confirmed,
            max_supported_transaction_version=0,
        )
        return resp.value

    def parse_events(self, log_messages: Sequence[str]) -> List[ProgramEvent]:
        return parse_events(log_messages, self.program_id)

    # --- submission ------------------------------------------------------

    def _send(self, instructions: List[Instruction], signers: List[Keypair], label: str) -> str:
        payer = signers[0]
        latest = self.connection.get_latest_blockhash(commitment=self.commitment).value
        message = Message(instructions, payer.pubkey())
        tx = Transaction(signers, message, latest.blockhash)

        log.debug("%s: %d instructions, %d bytes", label, len(instructions), len(bytes(tx)))
        resp = self.connection.send_transaction(tx, opts=TxOpts(skip_preflight=True))
        signature = resp.value

        status_resp = self.connection.confirm_transaction(
            signature,
            commitment=self.commitment,
            last_valid_block_height=latest.last_valid_block_height,
        )
        status = status_resp.value[0] if status_resp.value else None
        if status is not None and status.err is not None:
            raise error_for_status(str(signature), status.err)

        log.info("%s tx: %s", label, signature)
        return str(signature)

    def _send_signed(
        self,
        user: Keypair,
        signer: Pubkey,
        message: bytes,
        signature: bytes,
        instruction: Instruction,
        label: str,
    ) -> str:
        verify = ix.build_ed25519_verify_ix(signer, message, signature)
        return self._send([verify, instruction], [user], label)

    def create_collection(self, admin: Keypair, name: str, symbol: str, uri: str) -> str:
        instructions = [
            set_compute_unit_limit(CREATE_COMPUTE_UNITS),
            ix.build_create_collection_ix(admin.pubkey(), name, symbol, uri, self.program_id),
        ]
        return self._send(instructions, [admin], "createCollection")

    def create_token(self, payer: Keypair, name: str, symbol: str, uri: str, decimals: int) -> str:
        instructions = [
            set_compute_unit_limit(CREATE_COMPUTE_UNITS),
            ix.build_create_token_ix(payer.pubkey(), name, symbol, uri, decimals, self.program_id),
        ]
        return self._send(instructions, [payer], "createToken")

    def lucky_box_initialize(
        self,
        admin: Keypair,
        signer: Pubkey,
        mint_start_time: int,
        swap_start_time: int,
        seed_nft_count: int,
    ) -> str:
        instruction = ix.build_lucky_box_initialize_ix(
            admin.pubkey(), signer, mint_start_time, swap_start_time, seed_nft_count, self.program_id
        )
        return self._send([instruction], [admin], "luckyBoxInitialize")

    def lucky_box_update(
        self,
        admin: Keypair,
        signer: Pubkey,
        mint_start_time: int,
        swap_start_time: int,
        seed_nft_count: int,
    ) -> str:
        instruction = ix.build_lucky_box_update_ix(
            admin.pubkey(), signer, mint_start_time, swap_start_time, seed_nft_count, self.program_id
        )
        return self._send([instruction], [admin], "luckyBoxUpdate")

    def lucky_box_mint_nft(self, user: Keypair, referrer: Pubkey) -> str:
        nft_mint = Keypair()
        log.info("Minting lucky box NFT %s", nft_mint.pubkey())
        instructions = [
            set_compute_unit_limit(MINT_NFT_COMPUTE_UNITS),
            ix.build_lucky_box_mint_nft_ix(user.pubkey(), nft_mint.pubkey(), referrer, self.program_id),
        ]
        return self._send(instructions, [user, nft_mint], "luckyBoxMintNft")

    def lucky_box_swap(
        self,
        user: Keypair,
        nft_mint: Pubkey,
        signer: Pubkey,
        token_amount: int,
        message: bytes,
        signature: bytes,
    ) -> str:
        """Burns the user's NFT and mints `token_amount` tokens in exchange."""
        instruction = ix.build_lucky_box_swap_ix(
            user.pubkey(), nft_mint, token_amount, signature, self.program_id
        )
        return self._send_signed(user, signer, message, signature, instruction, "luckyBoxSwap")

    def fair_launch_initialize(
        self,
        admin: Keypair,
        signer: Pubkey,
        start_time: int,
        draw_price: int,
        sol_refund_amount: int,
        token_claim_amount: int,
    ) -> str:
        instruction = ix.build_fair_launch_initialize_ix(
            admin.pubkey(),
            signer,
            start_time,
            draw_price,
            sol_refund_amount,
            token_claim_amount,
            self.program_id,
        )
        return self._send([instruction], [admin], "fairLaunchInitialize")

    def fair_launch_update(
        self,
        admin: Keypair,
        signer: Pubkey,
        start_time: int,
        draw_price: int,
        sol_refund_amount: int,
        token_claim_amount: int,
    ) -> str:
        instruction = ix.build_fair_launch_update_ix(
            admin.pubkey(),
            signer,
            start_time,
            draw_price,
            sol_refund_amount,
            token_claim_amount,
            self.program_id,
        )
        return self._send([instruction], [admin], "fairLaunchUpdate")

    def _user_preflight(self, user: Pubkey, draw_count: int) -> List[Instruction]:
        """Init and realloc instructions the user account needs before `draw_count` draws."""
        account = self.query_fair_launch_user_account(user)
        instructions: List[Instruction] = []
        if account is None:
            instructions.append(ix.build_fair_launch_initialize_user_ix(user, self.program_id))
        if account is None or account.needs_realloc(draw_count):
            log.info("Reallocating user account for %d more draws", draw_count + REALLOC_MARGIN)
            instructions.append(
                ix.build_fair_launch_realloc_user_ix(user, draw_count + REALLOC_MARGIN, self.program_id)
            )
        return instructions

    def fair_launch_draw(self, user: Keypair) -> str:
        instructions = self._user_preflight(user.pubkey(), 1)
        instructions.append(ix.build_fair_launch_draw_ix(user.pubkey(), self.program_id))
        return self._send(instructions, [user], "fairLaunchDraw")

    def fair_launch_batch_draw(self, user: Keypair, draw_count: int) -> str:
        if draw_count <= 0:
            raise ValueError(f"draw_count must be positive, got {draw_count}")
        instructions = self._user_preflight(user.pubkey(), draw_count)
        instructions.append(ix.build_fair_launch_batch_draw_ix(user.pubkey(), draw_count, self.program_id))
        return self._send(instructions, [user], "fairLaunchBatchDraw")

    def fair_launch_refund(
        self, user: Keypair, signer: Pubkey, draw_id: int, message: bytes, signature: bytes
    ) -> str:
        instruction = ix.build_fair_launch_refund_ix(user.pubkey(), draw_id, signature, self.program_id)
        return self._send_signed(user, signer, message, signature, instruction, "fairLaunchRefund")

    def fair_launch_batch_refund(
        self, user: Keypair, signer: Pubkey, draw_ids: Sequence[int], message: bytes, signature: bytes
    ) -> str:
        instruction = ix.build_fair_launch_batch_refund_ix(
            user.pubkey(), draw_ids, signature, self.program_id
        )
        return self._send_signed(user, signer, message, signature, instruction, "fairLaunchBatchRefund")

    def fair_launch_claim(
        self, user: Keypair, signer: Pubkey, draw_id: int, message: bytes, signature: bytes
    ) -> str:
        instruction = ix.build_fair_launch_claim_ix(user.pubkey(), draw_id, signature, self.program_id)
        return self._send_signed(user, signer, message, signature, instruction, "fairLaunchClaim")

    def fair_launch_batch_claim(
        self, user: Keypair, signer: Pubkey, draw_ids: Sequence[int], message: bytes, signature: bytes
    ) -> str:
        instruction = ix.build_fair_launch_batch_claim_ix(
            user.pubkey(), draw_ids, signature, self.program_id
        )
        return self._send_signed(user, signer, message, signature, instruction, "fairLaunchBatchClaim")

    def fair_launch_emergency_withdraw(self, admin: Keypair, to: Pubkey, amount: int) -> str:
        instruction = ix.build_fair_launch_emergency_withdraw_ix(admin.pubkey(), to, amount, self.program_id)
        return self._send([instruction], [admin], "fairLaunchEmergencyWithdraw")
