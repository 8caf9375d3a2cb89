import unittest
import jsonschema
from tron3.contracts import abi

TRC20_ABI = {
    "entrys": [
        {
            "outputs": [{"type": "bool"}],
            "inputs": [
                {"name": "to", "type": "address"},
                {"name": "value", "type": "uint256"},
            ],
            "name": "transfer",
            "stateMutability": "Nonpayable",
            "type": "Function",
        },
        {
            "outputs": [{"type": "uint256"}],
            "constant": True,
            "inputs": [{"name": "who", "type": "address"}],
            "name": "balanceOf",
            "stateMutability": "View",
            "type": "Function",
        },
        {
            "inputs": [
                {"indexed": True, "name": "from", "type": "address"},
                {"indexed": True, "name": "to", "type": "address"},
                {"name": "value", "type": "uint256"},
            ],
            "name": "Transfer",
            "type": "Event",
        },
        {"stateMutability": "Payable", "type": "Fallback"},
    ]
}


class AbiParameterTestCase(unittest.TestCase):
    def test_json(self):
        p = abi.AbiParameter.from_json({"name": "who", "type": "address"})
        self.assertEqual("address", p.type)
        self.assertEqual("who", p.name)
        self.assertFalse(p.indexed)
        self.assertEqual({"name": "who", "type": "address"}, p.to_json())

        p = abi.AbiParameter.from_json({"type": "uint256", "indexed": True})
        self.assertEqual("", p.name)
        self.assertEqual({"name": "", "type": "uint256", "indexed": True}, p.to_json())

    def test_json_missing_type(self):
        with self.assertRaises(jsonschema.ValidationError):
            abi.AbiParameter.from_json({"name": "who"})

    def test_canonical_type(self):
        self.assertEqual("uint256", abi.AbiParameter("uint").canonical_type)
        self.assertEqual("int256[]", abi.AbiParameter("int[]").canonical_type)
        self.assertEqual("uint8", abi.AbiParameter("uint8").canonical_type)
        self.assertEqual("address[2]", abi.AbiParameter("address[2]").canonical_type)


class AbiFunctionTestCase(unittest.TestCase):
    def test_selector(self):
        fn = abi.AbiFunction(
            "transfer", [abi.AbiParameter("address", "to"), abi.AbiParameter("uint", "value")]
        )
        self.assertEqual("transfer(address,uint256)", fn.build_selector())
        self.assertEqual("a9059cbb", fn.selector_id().hex())

        fn = abi.AbiFunction("balanceOf", [abi.AbiParameter("address")])
        self.assertEqual("70a08231", fn.selector_id().hex())

    def test_selector_without_inputs(self):
        fn = abi.AbiFunction("totalSupply")
        self.assertEqual("totalSupply()", fn.build_selector())

    def test_state_mutability(self):
        entry = abi.AbiFunction.from_json(TRC20_ABI["entrys"][1])
        self.assertEqual(abi.StateMutability.VIEW, entry.state_mutability)
        self.assertTrue(entry.is_constant)

        entry = abi.AbiFunction.from_json(TRC20_ABI["entrys"][0])
        self.assertEqual(abi.StateMutability.NONPAYABLE, entry.state_mutability)
        self.assertFalse(entry.is_constant)

    def test_legacy_mutability_flags(self):
        entry = abi.AbiFunction.from_json({"name": "f", "constant": True})
        self.assertEqual(abi.StateMutability.VIEW, entry.state_mutability)
        entry = abi.AbiFunction.from_json({"name": "f", "payable": True})
        self.assertEqual(abi.StateMutability.PAYABLE, entry.state_mutability)
        entry = abi.AbiFunction.from_json({"name": "f"})
        self.assertEqual(abi.StateMutability.NONPAYABLE, entry.state_mutability)
        self.assertEqual(abi.AbiEntryType.FUNCTION, entry.type)

    def test_unknown_values(self):
        with self.assertRaises(ValueError) as context:
            abi.AbiFunction.from_json({"name": "f", "stateMutability": "sometimes"})
        self.assertIn("sometimes is not a valid state mutability", str(context.exception))

        with self.assertRaises(ValueError) as context:
            abi.AbiFunction.from_json({"name": "f", "type": "Method"})
        self.assertIn("Method is not a valid ABI entry type", str(context.exception))

    def test_json_round_trip(self):
        entry = abi.AbiFunction.from_json(TRC20_ABI["entrys"][0])
        self.assertEqual(entry, abi.AbiFunction.from_json(entry.to_json()))
        self.assertEqual("function", entry.to_json()["type"])
        self.assertEqual("nonpayable", entry.to_json()["stateMutability"])


class ContractABITestCase(unittest.TestCase):
    def test_from_node_json(self):
        contract_abi = abi.ContractABI.from_json(TRC20_ABI)
        self.assertEqual(4, len(contract_abi))
        self.assertEqual(["transfer", "balanceOf"], [f.name for f in contract_abi.functions])
        self.assertEqual(1, len(contract_abi.events))
        self.assertTrue(contract_abi.events[0].inputs[0].indexed)

    def test_from_compiler_json(self):
        entries = [
            {
                "name": "balanceOf",
                "type": "function",
                "inputs": [{"name": "who", "type": "address"}],
                "outputs": [{"name": "", "type": "uint256"}],
                "stateMutability": "view",
            }
        ]
        contract_abi = abi.ContractABI.from_json(entries)
        self.assertEqual(1, len(contract_abi.functions))
        self.assertEqual(contract_abi, abi.ContractABI.from_json(contract_abi.to_json()))

    def test_empty(self):
        self.assertEqual(0, len(abi.ContractABI.from_json({})))
        self.assertEqual(0, len(abi.ContractABI.from_json([])))

    def test_resolve(self):
        contract_abi = abi.ContractABI.from_json(TRC20_ABI)
        self.assertEqual("balanceOf", contract_abi.resolve("balanceOf").name)
        # events are not callable
        with self.assertRaises(abi.FunctionNotFound) as context:
            contract_abi.resolve("Transfer")
        self.assertIn("Function Transfer not defined in ABI", str(context.exception))
        self.assertIsNone(contract_abi.get_function("approve"))

    def test_resolve_overload_picks_first(self):
        first = abi.AbiFunction("f", [abi.AbiParameter("uint256")])
        second = abi.AbiFunction("f", [abi.AbiParameter("address")])
        self.assertIs(first, abi.resolve([first, second], "f"))
