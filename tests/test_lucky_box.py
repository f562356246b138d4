from solders.keypair import Keypair

from mathsol_client.lucky_box import LuckyBoxRunner

from conftest import lucky_box_user_data


def test_mint_flow_mints_once(client, connection, user):
    user_pda = client.find_lucky_box_user_pda(user.pubkey())
    referrer = Keypair().pubkey()

    def commit_mint(tx):
        connection.accounts[user_pda] = lucky_box_user_data(referrer, tx.message.account_keys[1])

    connection.on_send = commit_mint
    runner = LuckyBoxRunner(client)

    first = runner.run(user, referrer)
    second = runner.run(user, referrer)

    assert len(connection.sent) == 1
    assert first is not None and first.referrer == referrer
    assert second == first


def test_existing_mint_record_skips_minting(client, connection, user):
    user_pda = client.find_lucky_box_user_pda(user.pubkey())
    connection.accounts[user_pda] = lucky_box_user_data(user.pubkey(), Keypair().pubkey())

    record = LuckyBoxRunner(client).run(user, user.pubkey())

    assert connection.sent == []
    assert record.referrer == user.pubkey()
