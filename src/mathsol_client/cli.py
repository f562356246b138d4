from __future__ import annotations

import argparse
import logging

from solders.pubkey import Pubkey

from .api import MathsolApi
from .client import MathsolClient
from .config import Settings
from .fair_launch import FairLaunchRunner
from .lucky_box import LuckyBoxRunner
from .project_constants import CLUSTER_ENDPOINTS
from .wallet import load_keypair


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _settings(args: argparse.Namespace) -> Settings:
    return Settings.from_env(
        cluster_override=args.cluster,
        rpc_url_override=args.rpc_url,
        key_file_override=args.key_file,
    )


def cmd_mint(args: argparse.Namespace) -> int:
    settings = _settings(args)
    user = load_keypair(settings.key_file)
    referrer = Pubkey.from_string(args.referrer) if args.referrer else user.pubkey()

    client = MathsolClient.from_endpoint(settings.rpc_url, timeout_s=args.timeout)
    LuckyBoxRunner(client).run(user, referrer)
    return 0


def cmd_draw(args: argparse.Namespace) -> int:
    settings = _settings(args)
    log = logging.getLogger("draw")
    user = load_keypair(settings.key_file)

    iterations = args.iterations if args.iterations is not None else settings.draw_iterations
    delay_s = args.delay if args.delay is not None else settings.draw_delay_s
    threshold = args.threshold if args.threshold is not None else settings.claim_threshold
    api_url = args.api_url or settings.api_url

    log.info("Cluster           : %s", settings.cluster)
    log.info("API               : %s", api_url)
    log.info("Iterations        : %d", iterations)

    client = MathsolClient.from_endpoint(settings.rpc_url, timeout_s=args.timeout)
    with MathsolApi(api_url, timeout_s=args.timeout) as api:
        runner = FairLaunchRunner(
            client,
            api,
            iterations=iterations,
            delay_s=delay_s,
            threshold=threshold,
        )
        runner.run(user)
    return 0


def cmd_status(args: argparse.Namespace) -> int:
    settings = _settings(args)
    user = load_keypair(settings.key_file)
    client = MathsolClient.from_endpoint(settings.rpc_url, timeout_s=args.timeout)

    fair_launch = client.query_fair_launch_account()
    user_account = client.query_fair_launch_user_account(user.pubkey())
    lucky_box_user = client.query_lucky_box_user_account(user.pubkey())
    collection = client.query_collection_metadata()
    token = client.query_token_metadata()

    print("========================================")
    print("MATHSOL STATUS")
    print("========================================")
    print(f"Cluster       : {settings.cluster}")
    print(f"User          : {user.pubkey()}")
    print("----------------------------------------")
    if fair_launch is None:
        print("Fair launch   : not initialized")
    else:
        print(f"Start time    : {fair_launch.start_time}")
        print(f"Next draw id  : {fair_launch.next_draw_id}")
        print(f"Draw price    : {fair_launch.draw_price}")
    if user_account is None:
        print("User draws    : no user account")
    else:
        print(f"User draws    : {len(user_account.draw_ids)} / {user_account.capacity()} slots")
    print("----------------------------------------")
    if lucky_box_user is None:
        print("Lucky box     : not minted")
    else:
        print(f"Lucky box NFT : {lucky_box_user.nft_mint} (#{lucky_box_user.nft_id})")
    print("----------------------------------------")
    for label, meta in (("Collection", collection), ("Token", token)):
        if meta is None:
            print(f"{label:<14}: not created")
        else:
            print(f"{label:<14}: {meta.name} ({meta.symbol}) {meta.mint}")
            print(f"{label + ' uri':<14}: {meta.uri}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="mathsol",
        description="Mathsol lucky box and fair launch client.",
    )
    p.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    p.add_argument(
        "--cluster",
        choices=sorted(CLUSTER_ENDPOINTS),
        default=None,
        help="Cluster to use (else MATHSOL_CLUSTER, else devnet).",
    )
    p.add_argument("--rpc-url", default=None, help="Override RPC URL (else use env / cluster).")
    p.add_argument("--key-file", default=None, help="Secret key JSON (else MATHSOL_KEY_FILE).")
    p.add_argument("--timeout", type=float, default=30.0, help="RPC/HTTP timeout seconds.")

    sub = p.add_subparsers(dest="cmd", required=True)

    m = sub.add_parser("mint", help="Mint the lucky box NFT once.")
    m.add_argument("--referrer", default=None, help="Referrer pubkey (defaults to the user).")
    m.set_defaults(func=cmd_mint)

    d = sub.add_parser("draw", help="Run the fair launch draw/claim/refund loop.")
    d.add_argument("--iterations", type=int, default=None, help="Number of draws.")
    d.add_argument("--delay", type=float, default=None, help="Seconds to wait after each draw.")
    d.add_argument(
        "--threshold",
        type=int,
        default=None,
        help="Submit a batch claim/refund only when more than this many are pending.",
    )
    d.add_argument("--api-url", default=None, help="Override the Mathsol API domain.")
    d.set_defaults(func=cmd_draw)

    s = sub.add_parser("status", help="Show fair launch and lucky box state for the user.")
    s.set_defaults(func=cmd_status)

    return p


def main() -> None:
    parser = build_parser()
    args = parser.parse_args()
    setup_logging(args.verbose)
    try:
        code = args.func(args)
    except Exception:
        logging.getLogger("mathsol").exception("Run failed")
        code = 1
    raise SystemExit(code)
