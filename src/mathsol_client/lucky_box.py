from __future__ import annotations

import logging
from typing import Optional

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from .accounts import LuckyBoxUserAccount
from .client import MathsolClient

log = logging.getLogger(__name__)


class LuckyBoxRunner:
    def __init__(self, client: MathsolClient) -> None:
        self.client = client

    def run(self, user: Keypair, referrer: Pubkey) -> Optional[LuckyBoxUserAccount]:
        """Mints the user's lucky box NFT unless a mint record already exists."""
        user_info = self.client.query_lucky_box_user_account(user.pubkey())
        log.info("LuckyBox user info: %s", user_info)
        if user_info is None:
            sig = self.client.lucky_box_mint_nft(user, referrer)
            log.info("LuckyBox mint tx: %s", sig)
            user_info = self.client.query_lucky_box_user_account(user.pubkey())
            log.info("LuckyBox user info: %s", user_info)
        return user_info
