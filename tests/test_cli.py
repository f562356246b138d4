import json

import pytest
from solders.keypair import Keypair

from mathsol_client import cli, pda

from conftest import metadata_data


def test_parser_accepts_loop_overrides():
    args = cli.build_parser().parse_args(
        ["--cluster", "mainnet", "draw", "--iterations", "2", "--delay", "0", "--threshold", "4"]
    )

    assert args.cluster == "mainnet"
    assert (args.iterations, args.delay, args.threshold) == (2, 0.0, 4)
    assert args.func is cli.cmd_draw


def test_mint_referrer_defaults_to_none():
    args = cli.build_parser().parse_args(["mint"])

    assert args.referrer is None
    assert args.func is cli.cmd_mint


def test_failures_exit_with_status_1(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(
        "sys.argv", ["mathsol", "--key-file", str(tmp_path / "missing.json"), "status"]
    )

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1


def test_status_prints_token_metadata(monkeypatch, tmp_path, capsys, connection, client):
    key_file = tmp_path / "key.json"
    key_file.write_text(json.dumps(list(bytes(Keypair()))))
    token = client.find_token_pda()
    connection.accounts[pda.find_metadata_pda(token)] = metadata_data(token, "Mathsol", "MATH", "https://example.test/t.json")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(cli.MathsolClient, "from_endpoint", staticmethod(lambda *a, **kw: client))
    monkeypatch.setattr("sys.argv", ["mathsol", "--key-file", str(key_file), "status"])

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    out = capsys.readouterr().out
    assert excinfo.value.code == 0
    assert f"Token         : Mathsol (MATH) {token}" in out
    assert "Collection    : not created" in out
