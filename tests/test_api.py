import base58
import httpx
import pytest
from solders.keypair import Keypair

from mathsol_client.api import DrawRecord, MathsolApi
from mathsol_client.errors import ApiError


def _api(handler):
    return MathsolApi("https://api.example.test/", transport=httpx.MockTransport(handler))


def test_draw_logs_are_parsed():
    user = Keypair().pubkey()
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "data": [
                    {"drawId": 1, "isSuccess": True, "claimTime": 0, "refundTime": 0},
                    {"drawId": 2, "isSuccess": False, "claimTime": 0, "refundTime": 1700000000},
                ]
            },
        )

    with _api(handler) as api:
        records = api.get_user_draw_logs(user)

    assert records == [DrawRecord(1, True, 0, 0), DrawRecord(2, False, 0, 1700000000)]
    assert seen[0].url.path == "/api/fair-launch/user-draw-logs"
    assert seen[0].url.params["user"] == str(user)


def test_claim_params_are_decoded():
    user = Keypair().pubkey()
    signer = Keypair()
    message = b"claim 1,2,3"
    signature = bytes(signer.sign_message(message))
    seen = []

    def handler(request):
        seen.append(request)
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

    with _api(handler) as api:
        auth = api.get_claim_params(user, [1, 2, 3])

    assert auth.signer == signer.pubkey()
    assert auth.message == message
    assert auth.signature == signature
    assert seen[0].url.path == "/api/fair-launch/claim-params"
    assert seen[0].url.params["drawId"] == "1,2,3"


def test_refund_params_use_refund_endpoint():
    signer = Keypair()
    seen = []

    def handler(request):
        seen.append(request.url.path)
        return httpx.Response(
            200,
            json={"data": {"signer": str(signer.pubkey()), "message": "2g", "signature": "3q"}},
        )

    with _api(handler) as api:
        api.get_refund_params(signer.pubkey(), [9])

    assert seen == ["/api/fair-launch/refund-params"]


def test_http_errors_propagate():
    with _api(lambda request: httpx.Response(502)) as api:
        with pytest.raises(httpx.HTTPStatusError):
            api.get_user_draw_logs(Keypair().pubkey())


def test_missing_data_field_is_an_api_error():
    with _api(lambda request: httpx.Response(200, json={"error": "nope"})) as api:
        with pytest.raises(ApiError):
            api.get_user_draw_logs(Keypair().pubkey())


def test_malformed_record_is_an_api_error():
    with _api(lambda request: httpx.Response(200, json={"data": [{"isSuccess": True}]})) as api:
        with pytest.raises(ApiError):
            api.get_user_draw_logs(Keypair().pubkey())


@pytest.mark.parametrize("flag", ["false", "true", 0, 1, None])
def test_non_boolean_success_flag_is_an_api_error(flag):
    record = {"drawId": 1, "isSuccess": flag, "claimTime": 0, "refundTime": 0}
    with _api(lambda request: httpx.Response(200, json={"data": [record]})) as api:
        with pytest.raises(ApiError, match="isSuccess"):
            api.get_user_draw_logs(Keypair().pubkey())
