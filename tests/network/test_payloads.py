import unittest
import jsonschema
from tron3.network.payloads import block, contracts, transaction

OWNER = bytes.fromhex("41928c9af0651632157ef27a2cf17ca72c575a4d21")
TO = bytes.fromhex("41a614f803b6fd780986a42c78ec9c7f77e6ded13c")
BLOCK_ID = bytes.fromhex("0000000002faf080" + "1122334455667788" + "00" * 16)

TRANSFER_RAW = (
    "0a02f0802208112233445566778840e0a499ffbc315a67080112630a2d747970652e676f6f676c65617069732e636f6d2f70726f746f63"
    "6f6c2e5472616e73666572436f6e747261637412320a1541928c9af0651632157ef27a2cf17ca72c575a4d21121541a614f803b6fd7809"
    "86a42c78ec9c7f77e6ded13c18c0843d70e8d795ffbc31"
)
TRANSFER_TXID = "ac7b3500d3fb983527c0f135242d2275a0b465f95a6512cd69d7ac44b8077652"


def make_transfer_raw() -> transaction.TransactionRaw:
    param = contracts.TransferContract(OWNER, TO, 1_000_000)
    return transaction.TransactionRaw(
        contract=[transaction.Contract(param)],
        ref_block_bytes=bytes.fromhex("f080"),
        ref_block_hash=bytes.fromhex("1122334455667788"),
        expiration=1700000060000,
        timestamp=1700000001000,
    )


class ContractTypeTestCase(unittest.TestCase):
    def test_protocol_names(self):
        self.assertEqual("TransferContract", contracts.ContractType.TRANSFER.to_protocol_name())
        self.assertEqual(
            "TransferAssetContract", contracts.ContractType.TRANSFER_ASSET.to_protocol_name()
        )
        self.assertEqual(
            "TriggerSmartContract",
            contracts.ContractType.TRIGGER_SMART_CONTRACT.to_protocol_name(),
        )
        for t in contracts.ContractType:
            self.assertEqual(t, contracts.ContractType.from_protocol_name(t.to_protocol_name()))

    def test_unknown_protocol_name(self):
        with self.assertRaises(ValueError) as context:
            contracts.ContractType.from_protocol_name("VoteWitnessContract")
        self.assertIn("VoteWitnessContract cannot be converted to ContractType", str(context.exception))

    def test_resource_code(self):
        self.assertEqual(contracts.ResourceCode.ENERGY, contracts.ResourceCode.from_string("energy"))
        with self.assertRaises(ValueError) as context:
            contracts.ResourceCode.from_string("TRON_POWER")
        self.assertIn("expected BANDWIDTH or ENERGY", str(context.exception))

    def test_parameter_class(self):
        self.assertEqual(contracts.TransferContract, contracts.get_parameter_class(1))
        self.assertEqual(
            contracts.TriggerSmartContract,
            contracts.get_parameter_class(contracts.ContractType.TRIGGER_SMART_CONTRACT),
        )
        # known type without a message class
        self.assertIsNone(contracts.get_parameter_class(0))
        self.assertIsNone(contracts.get_parameter_class(999))


class ContractMessageTestCase(unittest.TestCase):
    def test_transfer_serialization(self):
        param = contracts.TransferContract(OWNER, TO, 1_000_000)
        expected = "0a15" + OWNER.hex() + "1215" + TO.hex() + "18c0843d"
        self.assertEqual(expected, param.to_array().hex())
        self.assertEqual(param, contracts.TransferContract.deserialize_from_bytes(param.to_array()))
        self.assertEqual(
            "type.googleapis.com/protocol.TransferContract", param.type_url
        )
        self.assertEqual(OWNER, param.owner)

    def test_default_values_are_omitted(self):
        param = contracts.TransferContract(OWNER, TO, 0)
        self.assertEqual("0a15" + OWNER.hex() + "1215" + TO.hex(), param.to_array().hex())
        self.assertEqual({"owner_address": OWNER.hex(), "to_address": TO.hex()}, param.to_json())

    def test_unknown_fields_are_ignored(self):
        data = contracts.TransferContract(OWNER, TO, 5).to_array() + bytes.fromhex("f80101")
        param = contracts.TransferContract.deserialize_from_bytes(data)
        self.assertEqual(5, param.amount)

    def test_wrong_wire_type(self):
        # amount (field 3) encoded as length delimited
        data = bytes.fromhex("1a0101")
        with self.assertRaises(ValueError) as context:
            contracts.TransferContract.deserialize_from_bytes(data)
        self.assertIn("field amount of TransferContract has wire type LEN", str(context.exception))

    def test_freeze_balance(self):
        param = contracts.FreezeBalanceContract(
            OWNER, 5_000_000, 3, contracts.ResourceCode.ENERGY, TO
        )
        expected = "0a15" + OWNER.hex() + "10c096b102" + "1803" + "5001" + "7a15" + TO.hex()
        self.assertEqual(expected, param.to_array().hex())
        other = contracts.FreezeBalanceContract.deserialize_from_bytes(param.to_array())
        self.assertEqual(contracts.ResourceCode.ENERGY, other.resource)
        self.assertEqual(TO, other.receiver_address)

    def test_unfreeze_receiver_field(self):
        param = contracts.UnfreezeBalanceContract(OWNER, receiver_address=TO)
        self.assertEqual("0a15" + OWNER.hex() + "6a15" + TO.hex(), param.to_array().hex())

    def test_asset_issue_nested(self):
        param = contracts.AssetIssueContract(
            owner_address=OWNER,
            name=b"TOKEN",
            abbr=b"TKN",
            total_supply=1000,
            frozen_supply=[contracts.FrozenSupply(100, 2), contracts.FrozenSupply(50, 1)],
            trx_num=1,
            num=1,
            url=b"https://example.com",
        )
        other = contracts.AssetIssueContract.deserialize_from_bytes(param.to_array())
        self.assertEqual(param, other)
        self.assertEqual(2, len(other.frozen_supply))
        self.assertEqual(100, other.frozen_supply[0].frozen_amount)

        json = param.to_json()
        self.assertEqual([{"frozen_amount": 100, "frozen_days": 2}, {"frozen_amount": 50, "frozen_days": 1}], json["frozen_supply"])
        self.assertEqual(b"TOKEN".hex(), json["name"])
        self.assertEqual(param, contracts.AssetIssueContract.from_json(json))

    def test_negative_int(self):
        param = contracts.TriggerSmartContract(OWNER, TO, token_id=-1)
        other = contracts.TriggerSmartContract.deserialize_from_bytes(param.to_array())
        self.assertEqual(-1, other.token_id)

    def test_from_json_accepts_base58(self):
        param = contracts.TransferContract.from_json(
            {
                "owner_address": "TPL66VK2gCXNCD7EJg9pgJRfqcRazjhUZY",
                "to_address": TO.hex(),
                "amount": 10,
            }
        )
        self.assertEqual(OWNER, param.owner_address)
        self.assertEqual(TO, param.to_address)

    def test_enum_from_json(self):
        param = contracts.FreezeBalanceContract.from_json(
            {"owner_address": OWNER.hex(), "frozen_balance": 1, "frozen_duration": 3, "resource": "ENERGY"}
        )
        self.assertEqual(contracts.ResourceCode.ENERGY, param.resource)
        self.assertEqual("ENERGY", param.to_json()["resource"])
        param = contracts.FreezeBalanceContract.from_json({"resource": 1})
        self.assertEqual(contracts.ResourceCode.ENERGY, param.resource)


class TransactionTestCase(unittest.TestCase):
    def test_raw_encoding(self):
        raw = make_transfer_raw()
        self.assertEqual(TRANSFER_RAW, raw.to_array().hex())

    def test_txid(self):
        tx = transaction.Transaction(make_transfer_raw())
        self.assertEqual(TRANSFER_TXID, tx.compute_txid().hex())

    def test_txid_without_raw_data(self):
        with self.assertRaises(ValueError) as context:
            transaction.Transaction().compute_txid()
        self.assertIn("Cannot compute transaction id without raw_data", str(context.exception))

    def test_note(self):
        raw = make_transfer_raw()
        raw.data = b"hello tron"
        self.assertIn("520a68656c6c6f2074726f6e5a67", raw.to_array().hex())
        self.assertEqual(
            "5e31834505303b11d73cafdc355ba4a65500be4c8eb4c45899a8dfb80d2b608f",
            transaction.Transaction(raw).compute_txid().hex(),
        )

    def test_deserialize(self):
        raw = transaction.TransactionRaw.deserialize_from_bytes(bytes.fromhex(TRANSFER_RAW))
        self.assertEqual(make_transfer_raw(), raw)
        self.assertEqual(1, len(raw.contract))
        param = raw.contract[0].parameter
        self.assertIsInstance(param, contracts.TransferContract)
        self.assertEqual(1_000_000, param.amount)

        tx = transaction.Transaction(raw, [b"\x01" * 65])
        other = transaction.Transaction.deserialize_from_bytes(tx.to_array())
        self.assertEqual(TRANSFER_TXID, other.txid.hex())
        self.assertEqual([b"\x01" * 65], other.signatures)
        self.assertTrue(other.is_signed)

    def test_opaque_contract(self):
        # a VoteWitnessContract (type 4) is kept as opaque bytes
        value = bytes.fromhex("0a15" + OWNER.hex())
        c = transaction.Contract(
            transaction.OpaqueContract(4, "type.googleapis.com/protocol.VoteWitnessContract", value)
        )
        other = transaction.Contract.deserialize_from_bytes(c.to_array())
        self.assertIsInstance(other.parameter, transaction.OpaqueContract)
        self.assertEqual(c, other)
        self.assertEqual(c.to_array(), other.to_array())
        self.assertEqual("4", other.to_json()["type"])

    def test_permission_id(self):
        c = transaction.Contract(contracts.TransferContract(OWNER, TO, 1), permission_id=2)
        self.assertTrue(c.to_array().hex().endswith("2802"))
        self.assertEqual(2, transaction.Contract.deserialize_from_bytes(c.to_array()).permission_id)
        self.assertEqual(2, c.to_json()["Permission_id"])
        self.assertEqual(c, transaction.Contract.from_json(c.to_json()))

    def test_contract_without_parameter(self):
        with self.assertRaises(ValueError) as context:
            transaction.Contract().to_array()
        self.assertIn("Cannot serialize a contract without parameter", str(context.exception))

    def test_contract_from_json_unsupported(self):
        with self.assertRaises(ValueError):
            transaction.Contract.from_json(
                {"type": "AccountCreateContract", "parameter": {"value": {}}}
            )

    def test_json(self):
        raw = make_transfer_raw()
        tx = transaction.Transaction(raw, txid=bytes.fromhex(TRANSFER_TXID))
        json = tx.to_json()
        self.assertFalse(json["visible"])
        self.assertEqual(TRANSFER_TXID, json["txID"])
        self.assertEqual(TRANSFER_RAW, json["raw_data_hex"])
        self.assertNotIn("signature", json)
        self.assertEqual("f080", json["raw_data"]["ref_block_bytes"])
        self.assertEqual(1700000060000, json["raw_data"]["expiration"])
        self.assertNotIn("fee_limit", json["raw_data"])
        contract = json["raw_data"]["contract"][0]
        self.assertEqual("TransferContract", contract["type"])
        self.assertEqual(
            {"owner_address": OWNER.hex(), "to_address": TO.hex(), "amount": 1_000_000},
            contract["parameter"]["value"],
        )

        self.assertEqual(tx, transaction.Transaction.from_json(json))

        # without the hex encoding the structured data is used
        del json["raw_data_hex"]
        other = transaction.Transaction.from_json(json)
        self.assertEqual(raw, other.raw_data)
        self.assertEqual(TRANSFER_TXID, other.txid.hex())

    def test_json_string(self):
        tx = transaction.Transaction(make_transfer_raw(), [b"\x02" * 65])
        tx.txid = tx.compute_txid()
        other = transaction.Transaction.from_json_string(tx.to_json_string())
        self.assertEqual(tx, other)
        self.assertEqual(tx.txid, other.txid)

    def test_json_validation(self):
        with self.assertRaises(jsonschema.ValidationError):
            transaction.Transaction.from_json({"txID": TRANSFER_TXID})
        with self.assertRaises(jsonschema.ValidationError):
            transaction.Transaction.from_json({"raw_data_hex": TRANSFER_RAW, "txID": "abc"})
        with self.assertRaises(jsonschema.ValidationError):
            transaction.Transaction.from_json({"raw_data_hex": TRANSFER_RAW, "signature": ["00"]})

    def test_copy(self):
        tx = transaction.Transaction(make_transfer_raw(), txid=bytes.fromhex(TRANSFER_TXID))
        clone = tx.copy()
        self.assertEqual(tx, clone)
        self.assertEqual(tx.txid, clone.txid)
        clone.signatures.append(b"\x00" * 65)
        self.assertFalse(tx.is_signed)
        clone.raw_data.data = b"changed"
        self.assertEqual(b"", tx.raw_data.data)

    def test_invalid_stream(self):
        with self.assertRaises(ValueError):
            transaction.Transaction.deserialize_from_bytes(bytes.fromhex("0a05aabb"))


class BlockReferenceTestCase(unittest.TestCase):
    def test_reference_values(self):
        ref = block.BlockReference(50_000_000, BLOCK_ID, 1700000000000)
        self.assertEqual("f080", ref.ref_block_bytes.hex())
        self.assertEqual("1122334455667788", ref.ref_block_hash.hex())
        self.assertEqual(1700000060000, ref.expiration)

    def test_small_block_number(self):
        ref = block.BlockReference(1, BLOCK_ID, 0)
        self.assertEqual("0001", ref.ref_block_bytes.hex())

    def test_invalid(self):
        with self.assertRaises(ValueError) as context:
            block.BlockReference(1, b"\x00" * 31, 0)
        self.assertIn("Block id must be 32 bytes, got 31 bytes", str(context.exception))
        with self.assertRaises(ValueError) as context:
            block.BlockReference(-1, BLOCK_ID, 0)
        self.assertIn("Block number cannot be negative", str(context.exception))

    def test_json(self):
        json = {
            "blockID": BLOCK_ID.hex(),
            "block_header": {
                "raw_data": {
                    "number": 50_000_000,
                    "timestamp": 1700000000000,
                    "witness_address": "41" + "00" * 20,
                }
            },
        }
        ref = block.BlockReference.from_json(json)
        self.assertEqual(50_000_000, ref.number)
        self.assertEqual(BLOCK_ID, ref.block_id)
        self.assertEqual(ref, block.BlockReference.from_json(ref.to_json()))

        with self.assertRaises(jsonschema.ValidationError):
            block.BlockReference.from_json({"blockID": BLOCK_ID.hex()})
