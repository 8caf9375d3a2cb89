"""
This file has 2 examples for a TRC-20 token contract. The first prepares a read-only `balanceOf` call and decodes
a node response, the second creates and signs a `transfer` call.
"""
from tron3.contracts.abi import ContractABI
from tron3.network.payloads.block import BlockReference
from tron3.api.helpers import unwrap
from tron3.api.helpers.txbuilder import TxBuilder
from tron3.api.helpers.signing import sign_with_private_key

TOKEN = "TR7NHqjeKQxGTCi8q8ZY4pL8otSzgjLj6t"
HOLDER = "TPL66VK2gCXNCD7EJg9pgJRfqcRazjhUZY"

# Part of the ABI as returned by `wallet/getcontract`
token_abi = ContractABI.from_json(
    {
        "entrys": [
            {
                "name": "balanceOf",
                "type": "Function",
                "stateMutability": "View",
                "inputs": [{"name": "who", "type": "address"}],
                "outputs": [{"type": "uint256"}],
            },
            {
                "name": "transfer",
                "type": "Function",
                "stateMutability": "Nonpayable",
                "inputs": [
                    {"name": "to", "type": "address"},
                    {"name": "value", "type": "uint256"},
                ],
                "outputs": [{"type": "bool"}],
            },
        ]
    }
)

now_block = {
    "blockID": "0000000002faf0801122334455667788" + "00" * 16,
    "block_header": {"raw_data": {"number": 50_000_000, "timestamp": 1700000000000}},
}


def example_balance_of():
    builder = TxBuilder(BlockReference.from_json(now_block))
    balance_of = token_abi.resolve("balanceOf")
    call = builder.call_constant(TOKEN, balance_of, [HOLDER])
    # POST this to `wallet/triggerconstantcontract`
    print(call.to_json())

    # A response as the node would return it
    response = {
        "result": {"result": True},
        "energy_used": 935,
        "constant_result": [(1_000_000).to_bytes(32, "big").hex()],
    }
    print(f"Balance: {unwrap.as_int(unwrap.normalize(response, balance_of))}")


def example_transfer():
    builder = TxBuilder(BlockReference.from_json(now_block))
    tx = builder.trigger_smart_contract(
        TOKEN,
        token_abi.resolve("transfer"),
        ["TDvSsdrNM5eeXNL3czpa6AxLDHZA9nwe9K", 10],
        fee_limit=30_000_000,
        owner=HOLDER,
    )
    # Never hard code a real key, this one is for demonstration only
    signed = sign_with_private_key(bytes.fromhex("11" * 32))(tx)
    print(signed.to_json_string())


if __name__ == "__main__":
    example_balance_of()
    example_transfer()
