from __future__ import annotations

import logging
import time
from typing import Callable, Iterable, List, Optional

from solders.keypair import Keypair

from .api import DrawRecord, MathsolApi
from .client import MathsolClient
from .project_constants import CLAIM_THRESHOLD, DRAW_DELAY_S, DRAW_ITERATIONS

log = logging.getLogger(__name__)


def pending_claims(records: Iterable[DrawRecord]) -> List[int]:
    return [r.draw_id for r in records if r.is_success and r.claim_time == 0]


def pending_refunds(records: Iterable[DrawRecord]) -> List[int]:
    return [r.draw_id for r in records if not r.is_success and r.refund_time == 0]


def batch_ready(draw_ids: List[int], threshold: int = CLAIM_THRESHOLD) -> bool:
    """Small batches wait for a later cycle; only more than `threshold` ids are submitted."""
    return len(draw_ids) > threshold


class FairLaunchRunner:
    """
    Draw loop for a single keypair: draw, pause, then claim and refund
    whatever has piled up past the threshold. Any failure ends the loop.
    """

    def __init__(
        self,
        client: MathsolClient,
        api: MathsolApi,
        iterations: int = DRAW_ITERATIONS,
        delay_s: float = DRAW_DELAY_S,
        threshold: int = CLAIM_THRESHOLD,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.client = client
        self.api = api
        self.iterations = iterations
        self.delay_s = delay_s
        self.threshold = threshold
        self.sleep = sleep

    def run(self, user: Keypair) -> None:
        log.info("user %s", user.pubkey())
        for i in range(self.iterations):
            sig = self.client.fair_launch_draw(user)
            log.info("draw %d/%d: %s", i + 1, self.iterations, sig)
            self.sleep(self.delay_s)
            # Checked every cycle, whether or not the draw succeeded.
            self.claim(user)
            self.refund(user)

    def claim(self, user: Keypair) -> Optional[str]:
        records = self.api.get_user_draw_logs(user.pubkey())
        draw_ids = pending_claims(records)
        log.debug("pending claims: %d", len(draw_ids))
        if not batch_ready(draw_ids, self.threshold):
            return None
        auth = self.api.get_claim_params(user.pubkey(), draw_ids)
        sig = self.client.fair_launch_batch_claim(
            user, auth.signer, draw_ids, auth.message, auth.signature
        )
        log.info("claimed %d draws: %s", len(draw_ids), sig)
        return sig

    def refund(self, user: Keypair) -> Optional[str]:
        records = self.api.get_user_draw_logs(user.pubkey())
        draw_ids = pending_refunds(records)
        log.debug("pending refunds: %d", len(draw_ids))
        if not batch_ready(draw_ids, self.threshold):
            return None
        auth = self.api.get_refund_params(user.pubkey(), draw_ids)
        sig = self.client.fair_launch_batch_refund(
            user, auth.signer, draw_ids, auth.message, auth.signature
        )
        log.info("refunded %d draws: %s", len(draw_ids), sig)
        return sig
