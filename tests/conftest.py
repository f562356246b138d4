from __future__ import annotations

import base64
import hashlib
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional

import pytest
from borsh_construct import CStruct, I64, U64
from construct import Bytes
from solders.hash import Hash
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.transaction import Transaction

from mathsol_client.accounts import (
    FairLaunchUserAccountLayout,
    LuckyBoxUserAccountLayout,
    MetadataLayout,
    account_discriminator,
)
from mathsol_client.client import MathsolClient


class FakeConnection:
    """In-memory stand-in for solana.rpc.api.Client."""

    def __init__(self) -> None:
        self.accounts: Dict[Pubkey, bytes] = {}
        self.sent: List[Transaction] = []
        self.status_err: Any = None
        self.on_send: Optional[Callable[[Transaction], None]] = None

    def get_account_info(self, pubkey: Pubkey, commitment: Any = None) -> SimpleNamespace:
        data = self.accounts.get(pubkey)
        return SimpleNamespace(value=None if data is None else SimpleNamespace(data=data))

    def get_latest_blockhash(self, commitment: Any = None) -> SimpleNamespace:
        return SimpleNamespace(
            value=SimpleNamespace(blockhash=Hash.default(), last_valid_block_height=1_000)
        )

    def send_transaction(self, tx: Transaction, opts: Any = None) -> SimpleNamespace:
        self.sent.append(tx)
        self.last_opts = opts
        if self.on_send is not None:
            self.on_send(tx)
        return SimpleNamespace(value=tx.signatures[0])

    def confirm_transaction(self, signature: Any, commitment: Any = None, last_valid_block_height: Any = None) -> SimpleNamespace:
        return SimpleNamespace(value=[SimpleNamespace(err=self.status_err)])


def program_ids(tx: Transaction) -> List[Pubkey]:
    keys = tx.message.account_keys
    return [keys[ci.program_id_index] for ci in tx.message.instructions]


def instruction_data(tx: Transaction, index: int) -> bytes:
    return bytes(tx.message.instructions[index].data)


def user_account_data(draw_ids: List[int], space: int) -> bytes:
    data = account_discriminator("FairLaunchUserAccount") + FairLaunchUserAccountLayout.build(
        {"draw_ids": draw_ids}
    )
    return data + b"\x00" * (space - len(data))


def lucky_box_user_data(referrer: Pubkey, nft_mint: Pubkey, nft_id: int = 1, mint_time: int = 1_700_000_000) -> bytes:
    return account_discriminator("LuckyBoxUserAccount") + LuckyBoxUserAccountLayout.build(
        {
            "referrer": bytes(referrer),
            "nft_mint": bytes(nft_mint),
            "nft_id": nft_id,
            "mint_time": mint_time,
        }
    )


EVENT_LAYOUTS = {
    "FairLaunchDrawEvent": CStruct(
        "user" / Bytes(32), "draw_id" / U64, "draw_price" / U64, "time" / I64
    ),
    "FairLaunchStarted": CStruct("slot" / U64, "time" / I64),
}


def event_log_line(name: str, fields: Dict[str, Any]) -> str:
    disc = hashlib.sha256(f"event:{name}".encode()).digest()[:8]
    return "Program data: " + base64.b64encode(disc + EVENT_LAYOUTS[name].build(fields)).decode()


def metadata_data(mint: Pubkey, name: str, symbol: str, uri: str, key: int = 4) -> bytes:
    # Metaplex pads name, symbol and uri with NULs and stores more fields after them
    return MetadataLayout.build(
        {
            "key": key,
            "update_authority": bytes(Pubkey.default()),
            "mint": bytes(mint),
            "name": name.ljust(32, "\x00"),
            "symbol": symbol.ljust(10, "\x00"),
            "uri": uri.ljust(200, "\x00"),
        }
    ) + b"\x00" * 40


@pytest.fixture
def connection() -> FakeConnection:
    return FakeConnection()


@pytest.fixture
def client(connection: FakeConnection) -> MathsolClient:
    return MathsolClient(connection, endpoint="http://localhost:8899")


@pytest.fixture
def user() -> Keypair:
    return Keypair()
