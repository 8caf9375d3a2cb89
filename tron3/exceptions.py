"""
All error kinds raised by the package. Every one of them is a `ValueError`.

The classes are defined next to the code raising them; this module only collects them for callers that want to
catch a specific kind without importing the individual modules.
"""
from tron3.wallet.utils import InvalidAddress
from tron3.core.cryptography import (
    UnsupportedOutputSize,
    MissingKey,
    InvalidKey,
    InvalidDigest,
    InvalidSignature,
)
from tron3.contracts.abi import FunctionNotFound
from tron3.contracts.abiserializer import ArityMismatch, AbiEncodingError, AbiDecodingError
from tron3.api.helpers.txbuilder import InvalidArgument
from tron3.api.helpers.signing import AlreadySigned, MissingTxId, MissingBody, TxIdMismatch

__all__ = [
    "InvalidAddress",
    "UnsupportedOutputSize",
    "MissingKey",
    "InvalidKey",
    "InvalidDigest",
    "InvalidSignature",
    "FunctionNotFound",
    "ArityMismatch",
    "AbiEncodingError",
    "AbiDecodingError",
    "InvalidArgument",
    "AlreadySigned",
    "MissingTxId",
    "MissingBody",
    "TxIdMismatch",
]
