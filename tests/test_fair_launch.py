import base58
import httpx
import pytest
from solders.keypair import Keypair

from mathsol_client import instructions as ix
from mathsol_client.api import Authorization, DrawRecord, MathsolApi
from mathsol_client.fair_launch import (
    FairLaunchRunner,
    batch_ready,
    pending_claims,
    pending_refunds,
)
from mathsol_client.project_constants import ED25519_PROGRAM_ID, PROGRAM_ID

from conftest import instruction_data, program_ids

RECORDS = [
    DrawRecord(1, True, 0, 0),
    DrawRecord(2, True, 1700000000, 0),
    DrawRecord(3, False, 0, 0),
    DrawRecord(4, False, 0, 1700000000),
    DrawRecord(5, True, 0, 0),
]


def test_pending_filters():
    assert pending_claims(RECORDS) == [1, 5]
    assert pending_refunds(RECORDS) == [3]


def test_batch_gate_opens_above_threshold():
    assert not batch_ready(list(range(10)))
    assert batch_ready(list(range(11)))
    assert not batch_ready([])
    assert batch_ready([1, 2], threshold=1)


class FakeApi:
    def __init__(self, records):
        self.records = records
        self.calls = []
        self.signer = Keypair()

    def get_user_draw_logs(self, user):
        self.calls.append("logs")
        return self.records

    def _auth(self, kind, draw_ids):
        self.calls.append((kind, list(draw_ids)))
        message = kind.encode()
        return Authorization(self.signer.pubkey(), message, bytes(self.signer.sign_message(message)))

    def get_claim_params(self, user, draw_ids):
        return self._auth("claim", draw_ids)

    def get_refund_params(self, user, draw_ids):
        return self._auth("refund", draw_ids)


class FakeClient:
    def __init__(self):
        self.calls = []

    def fair_launch_draw(self, user):
        self.calls.append("draw")
        return "draw-sig"

    def fair_launch_batch_claim(self, user, signer, draw_ids, message, signature):
        self.calls.append(("claim", list(draw_ids)))
        return "claim-sig"

    def fair_launch_batch_refund(self, user, signer, draw_ids, message, signature):
        self.calls.append(("refund", list(draw_ids)))
        return "refund-sig"


def _records(claims, refunds):
    records = [DrawRecord(i, True, 0, 0) for i in range(claims)]
    records += [DrawRecord(100 + i, False, 0, 0) for i in range(refunds)]
    return records


def test_ten_pending_never_requests_authorization(user):
    api = FakeApi(_records(10, 10))
    client = FakeClient()
    runner = FairLaunchRunner(client, api)

    assert runner.claim(user) is None
    assert runner.refund(user) is None
    assert api.calls == ["logs", "logs"]
    assert client.calls == []


def test_eleven_pending_are_submitted(user):
    api = FakeApi(_records(11, 11))
    client = FakeClient()
    runner = FairLaunchRunner(client, api)

    assert runner.claim(user) == "claim-sig"
    assert runner.refund(user) == "refund-sig"
    assert api.calls[1] == ("claim", list(range(11)))
    assert client.calls == [("claim", list(range(11))), ("refund", [100 + i for i in range(11)])]


def test_run_loops_draw_pause_claim_refund(user):
    api = FakeApi(_records(0, 0))
    client = FakeClient()
    pauses = []
    runner = FairLaunchRunner(client, api, iterations=3, delay_s=2.5, sleep=pauses.append)

    runner.run(user)

    assert client.calls == ["draw", "draw", "draw"]
    assert pauses == [2.5, 2.5, 2.5]
    # claim and refund each fetch fresh logs every cycle
    assert api.calls == ["logs"] * 6


def test_failure_stops_the_loop(user):
    class FailingClient(FakeClient):
        def fair_launch_draw(self, user):
            super().fair_launch_draw(user)
            if len(self.calls) == 2:
                raise RuntimeError("draw rejected")
            return "draw-sig"

    client = FailingClient()
    runner = FairLaunchRunner(client, FakeApi([]), iterations=5, sleep=lambda s: None)

    with pytest.raises(RuntimeError, match="draw rejected"):
        runner.run(user)
    assert client.calls == ["draw", "draw"]


def test_twelve_unclaimed_draws_end_to_end(client, connection, user):
    draw_ids = [11, 12, 13, 14, 15, 16, 17, 18, 19, 20, 21, 22]
    signer = Keypair()
    message = b"fair-launch-claim"
    signature = bytes(signer.sign_message(message))
    requests = []

    def handler(request):
        requests.append(request)
        if request.url.path.endswith("/user-draw-logs"):
            logs = [
                {"drawId": d, "isSuccess": True, "claimTime": 0, "refundTime": 0}
                for d in draw_ids
            ]
            logs.append({"drawId": 99, "isSuccess": False, "claimTime": 0, "refundTime": 0})
            return httpx.Response(200, json={"data": logs})
        return httpx.Response(
            200,
            json={
                "data": {
                    "signer": str(signer.pubkey()),
                    "message": base58.b58encode(message).decode(),
                    "signature": base58.b58encode(signature).decode(),
                }
            },
        )

    api = MathsolApi("https://api.example.test", transport=httpx.MockTransport(handler))
    runner = FairLaunchRunner(client, api)

    runner.claim(user)

    assert requests[1].url.path == "/api/fair-launch/claim-params"
    assert requests[1].url.params["user"] == str(user.pubkey())
    assert requests[1].url.params["drawId"] == ",".join(str(d) for d in draw_ids)

    tx = connection.sent[0]
    assert program_ids(tx) == [ED25519_PROGRAM_ID, PROGRAM_ID]
    claim = instruction_data(tx, 1)
    assert claim[:8] == ix.sighash("fair_launch_batch_claim")
    assert list(ix.DrawIdsArgs.parse(claim[8:]).draw_ids) == draw_ids
    assert instruction_data(tx, 0)[112:] == message
