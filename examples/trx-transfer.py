"""
This example shows how to build and sign a TRX transfer offline. The output is the request body for the node's
`wallet/broadcasttransaction` endpoint.
"""
from tron3.core.utils import to_sun
from tron3.network.payloads.block import BlockReference
from tron3.api.helpers.txbuilder import TxBuilder
from tron3.api.helpers.signing import sign_with_account
from tron3.wallet.account import Account

# Response of `wallet/getnowblock`, trimmed to the fields that are used
now_block = {
    "blockID": "0000000002faf0801122334455667788" + "00" * 16,
    "block_header": {"raw_data": {"number": 50_000_000, "timestamp": 1700000000000}},
}


def example_transfer_trx():
    # Never hard code a real key, this one is for demonstration only
    account = Account.from_private_key((1).to_bytes(32, "big"))

    builder = TxBuilder(BlockReference.from_json(now_block))
    tx = builder.transfer(
        "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t", to_sun("1.5"), account.address
    )

    signer = sign_with_account(account, message="sent with tron-mamba")
    signed = signer(tx)
    print(signed.to_json_string())


if __name__ == "__main__":
    example_transfer_trx()
