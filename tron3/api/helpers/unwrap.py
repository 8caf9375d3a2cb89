"""
Helper functions to turn the response of `wallet/triggerconstantcontract` into typed values.

The node signals failure in different ways (a false `result.result` with an error code, a `FAILED` execution state,
or a revert payload in `constant_result`). `normalize()` folds all of them into either a `Success` or a `Failure`
so callers only have one thing to check.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Union, Optional, Any
from tron3.contracts import abi, abiserializer
from tron3.core.utils import hex_to_bytes, hex_to_utf8

# Error(string)
_REVERT_SELECTOR = bytes.fromhex("08c379a0")


@dataclass(frozen=True)
class Success:
    #: decoded values, one per function output
    outputs: list = field(default_factory=list)
    energy_used: int = 0


@dataclass(frozen=True)
class Failure:
    #: human readable reason
    reason: str
    #: the node's result code, if any
    code: Optional[str] = None


CallResult = Union[Success, Failure]


def _revert_reason(data: bytes) -> str:
    if data[:4] == _REVERT_SELECTOR:
        try:
            return abiserializer.decode_abi(["string"], data[4:])[0]
        except abiserializer.AbiDecodingError:
            pass
    return "execution reverted" if not data else f"execution reverted: 0x{data.hex()}"


def normalize(response: dict, fn: abi.AbiFunction) -> CallResult:
    """
    Normalize a constant contract call response.

    Args:
        response: the parsed JSON response.
        fn: the called function, used to decode the outputs.

    Returns:
        `Success` with decoded outputs, or `Failure` with the reason.
    """
    result = response.get("result", {})
    if not result.get("result", False):
        message = result.get("message", "")
        try:
            reason = hex_to_utf8(message) if message else "unknown error"
        except ValueError:
            # some node versions return the plain text message
            reason = message
        return Failure(reason, result.get("code"))

    constant_result = response.get("constant_result", [])
    data = hex_to_bytes(constant_result[0]) if constant_result else b""

    rets = response.get("transaction", {}).get("ret", [])
    failed = any(map(lambda r: r.get("ret") == "FAILED", rets))
    if failed or data[:4] == _REVERT_SELECTOR:
        return Failure(_revert_reason(data), "REVERT")

    try:
        outputs = abiserializer.decode_parameters(fn, data)
    except abiserializer.AbiDecodingError as e:
        return Failure(f"Cannot decode result of {fn.name}: {e}", "DECODE_ERROR")
    return Success(outputs, response.get("energy_used", 0))


def check_success(res: CallResult) -> Success:
    """
    Check if the contract call finished successfully.

    Raises:
        ValueError: if the result is a `Failure`.
    """
    if isinstance(res, Failure):
        code = f" ({res.code})" if res.code else ""
        raise ValueError(f"Contract call failed{code}: {res.reason}")
    return res


def item(res: CallResult, idx: int = 0) -> Any:
    """
    Fetch the output at `idx`.

    Raises:
        ValueError: if the result is a `Failure` or the index is out of range.
    """
    outputs = check_success(res).outputs
    if not 0 <= idx < len(outputs):
        raise ValueError(
            f"Output index {idx} out of range, result has {len(outputs)} outputs"
        )
    return outputs[idx]


def _typed_item(res: CallResult, idx: int, type_: type, name: str) -> Any:
    value = item(res, idx)
    if isinstance(value, bool) and type_ is not bool:
        raise ValueError(f"Output {idx} is a bool, not {name}")
    if not isinstance(value, type_):
        raise ValueError(
            f"Output {idx} of type {type(value).__name__} cannot be converted to {name}"
        )
    return value


def as_int(res: CallResult, idx: int = 0) -> int:
    """
    Return the output at `idx` as `int`.

    Raises:
        ValueError: if the result is a failure, the index is out of range or the value is not an integer.
    """
    return _typed_item(res, idx, int, "int")


def as_bool(res: CallResult, idx: int = 0) -> bool:
    """
    Return the output at `idx` as `bool`.

    Raises:
        ValueError: if the result is a failure, the index is out of range or the value is not a boolean.
    """
    return _typed_item(res, idx, bool, "bool")


def as_str(res: CallResult, idx: int = 0) -> str:
    """
    Return the output at `idx` as `str`.

    Raises:
        ValueError: if the result is a failure, the index is out of range or the value is not a string.
    """
    return _typed_item(res, idx, str, "str")


def as_bytes(res: CallResult, idx: int = 0) -> bytes:
    return _typed_item(res, idx, bytes, "bytes")


def as_address(res: CallResult, idx: int = 0) -> str:
    """
    Return the output at `idx` as base58check address.

    Raises:
        ValueError: if the result is a failure, the index is out of range or the value is not an address.
    """
    value = _typed_item(res, idx, str, "address")
    if not value.startswith("T") or len(value) != 34:
        raise ValueError(f"Output {idx} is not an address: {value}")
    return value
