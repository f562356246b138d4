from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import base58
import httpx
from solders.pubkey import Pubkey

from .errors import ApiError


@dataclass(frozen=True)
class DrawRecord:
    draw_id: int
    is_success: bool
    claim_time: int  # 0 while unclaimed
    refund_time: int  # 0 while unrefunded


def _draw_record(item: Any) -> DrawRecord:
    try:
        is_success = item["isSuccess"]
        if not isinstance(is_success, bool):
            raise ValueError(f"isSuccess must be a boolean, got {is_success!r}")
        return DrawRecord(
            draw_id=int(item["drawId"]),
            is_success=is_success,
            claim_time=int(item.get("claimTime") or 0),
            refund_time=int(item.get("refundTime") or 0),
        )
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        raise ApiError(f"user-draw-logs: malformed draw record: {e}") from e


@dataclass(frozen=True)
class Authorization:
    """Ed25519-signed approval issued by the API for one batch of draw ids."""

    signer: Pubkey
    message: bytes
    signature: bytes


class MathsolApi:
    def __init__(
        self,
        domain: str,
        timeout_s: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.domain = domain.rstrip("/")
        self.client = httpx.Client(base_url=self.domain, timeout=timeout_s, transport=transport)

    def close(self) -> None:
        self.client.close()

    def __enter__(self) -> "MathsolApi":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()

    def _get(self, path: str, params: Dict[str, str]) -> Any:
        resp = self.client.get(path, params=params)
        resp.raise_for_status()
        body = resp.json()
        if not isinstance(body, dict) or "data" not in body:
            raise ApiError(f"{path}: response has no data field: {body!r}")
        return body["data"]

    def get_user_draw_logs(self, user: Pubkey) -> List[DrawRecord]:
        items = self._get("/api/fair-launch/user-draw-logs", {"user": str(user)})
        if not isinstance(items, list):
            raise ApiError(f"user-draw-logs: expected a list, got {type(items).__name__}")
        return [_draw_record(item) for item in items]

    def _authorization(self, path: str, user: Pubkey, draw_ids: Sequence[int]) -> Authorization:
        data = self._get(path, {"user": str(user), "drawId": ",".join(str(d) for d in draw_ids)})
        try:
            return Authorization(
                signer=Pubkey.from_string(data["signer"]),
                message=base58.b58decode(data["message"]),
                signature=base58.b58decode(data["signature"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise ApiError(f"{path}: malformed authorization: {e}") from e

    def get_claim_params(self, user: Pubkey, draw_ids: Sequence[int]) -> Authorization:
        return self._authorization("/api/fair-launch/claim-params", user, draw_ids)

    def get_refund_params(self, user: Pubkey, draw_ids: Sequence[int]) -> Authorization:
        return self._authorization("/api/fair-launch/refund-params", user, draw_ids)
