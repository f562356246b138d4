from __future__ import annotations

import json
from dataclasses import dataclass, fields, is_dataclass
from typing import Any, Dict, Iterable, List

from anchorpy import Coder, EventParser, Idl
from solders.pubkey import Pubkey

from .project_constants import PROGRAM_ID


def _event(name: str, *pairs: tuple) -> Dict[str, Any]:
    return {
        "name": name,
        "fields": [{"name": n, "type": t, "index": False} for n, t in pairs],
    }


# Event section of the program's IDL; field names are kept in snake_case.
EVENTS_IDL = {
    "version": "0.0.1",
    "name": "mathsol",
    "instructions": [],
    "events": [
        _event(
            "FairLaunchClaimEvent",
            ("user", "publicKey"),
            ("draw_id", "u64"),
            ("claim_amount", "u64"),
            ("time", "i64"),
        ),
        _event(
            "FairLaunchDrawEvent",
            ("user", "publicKey"),
            ("draw_id", "u64"),
            ("draw_price", "u64"),
            ("time", "i64"),
        ),
        _event("FairLaunchStarted", ("slot", "u64"), ("time", "i64")),
        _event(
            "FairLaunchRefundEvent",
            ("user", "publicKey"),
            ("draw_id", "u64"),
            ("refund_amount", "u64"),
            ("time", "i64"),
        ),
        _event(
            "LuckyBoxMintNFTEvent",
            ("user", "publicKey"),
            ("nft_mint", "publicKey"),
            ("referrer", "publicKey"),
            ("nft_id", "u64"),
            ("time", "i64"),
        ),
    ],
}

_CODER = Coder(Idl.from_json(json.dumps(EVENTS_IDL)))


@dataclass(frozen=True)
class ProgramEvent:
    name: str
    data: Dict[str, Any]


def _as_dict(data: Any) -> Dict[str, Any]:
    if is_dataclass(data):
        return {f.name: getattr(data, f.name) for f in fields(data)}
    return {k: v for k, v in data.items() if not k.startswith("_")}


def parse_events(log_messages: Iterable[str], program_id: Pubkey = PROGRAM_ID) -> List[ProgramEvent]:
    """
    Decodes events emitted by `program_id` from a transaction's log messages.

    anchorpy's EventParser walks the invocation stack, so data logged by
    other programs during a CPI is skipped.
    """
    logs = list(log_messages)
    events: List[ProgramEvent] = []
    if not logs:
        return events
    parser = EventParser(program_id, _CODER)
    parser.parse_logs(logs, lambda e: events.append(ProgramEvent(name=e.name, data=_as_dict(e.data))))
    return events
