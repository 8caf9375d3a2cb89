"""
Signing of transactions created by `TxBuilder`.

A signature covers the transaction identifier, the SHA-256 digest of the protobuf encoded `raw_data`. Any change to
the body after signing invalidates all signatures, which is why a note has to be attached as part of signing and
why a signed transaction is never signed again by `sign_transaction()`.
"""
from __future__ import annotations
from typing import Callable, Optional
from tron3 import api_logger as logger
from tron3.core import cryptography
from tron3.network.payloads import transaction
from tron3.wallet import account, utils as walletutils

# A signing function returns a signed copy of the provided transaction
SigningFunction = Callable[[transaction.Transaction], transaction.Transaction]
# Produces a 65 byte recoverable signature over a 32 byte digest
_DigestSigner = Callable[[bytes], bytes]


class AlreadySigned(ValueError):
    """Raised when signing a transaction that already carries signatures, or a signature of the same key."""


class MissingTxId(ValueError):
    """Raised when a transaction to be signed has no identifier."""


class MissingBody(ValueError):
    """Raised when a transaction to be signed has no raw_data or no contract."""


class TxIdMismatch(ValueError):
    """Raised when the stored identifier does not match the transaction body."""


def _validate_tx(tx: transaction.Transaction) -> None:
    if tx.raw_data is None or len(tx.raw_data.contract) == 0:
        raise MissingBody("Transaction raw_data is required")
    if tx.txid is None:
        raise MissingTxId("Transaction is missing txID")


def _verify_txid(tx: transaction.Transaction) -> None:
    expected = tx.compute_txid()
    if tx.txid != expected:
        raise TxIdMismatch(
            f"Transaction txID {tx.txid.hex() if tx.txid else None} does not match its body, "
            f"expected {expected.hex()}"
        )


def _sign(
    tx: transaction.Transaction, signer: _DigestSigner, message: Optional[str]
) -> transaction.Transaction:
    if tx.is_signed:
        raise AlreadySigned("Transaction is already signed")
    _validate_tx(tx)

    signed = tx.copy()
    if message is not None:
        signed.raw_data.data = message.encode("utf-8")  # type: ignore
        signed.txid = signed.compute_txid()
    else:
        _verify_txid(signed)

    signed.signatures.append(signer(signed.txid))  # type: ignore
    logger.debug(f"Signed transaction {signed.txid.hex()}")  # type: ignore
    return signed


def sign_transaction(
    tx: transaction.Transaction, private_key: bytes, message: Optional[str] = None
) -> transaction.Transaction:
    """
    Sign an unsigned transaction.

    The input transaction is not modified; a signed copy is returned.

    Args:
        tx: the transaction as returned by one of the `TxBuilder` methods.
        private_key: the 32 byte private key of the owner.
        message: optional note stored on chain with the transaction. Changes the transaction identifier.

    Raises:
        AlreadySigned: if the transaction already carries a signature.
        MissingBody: if the transaction has no raw_data or contract.
        MissingTxId: if the transaction has no identifier.
        TxIdMismatch: if the identifier does not match the body.
        MissingKey: if no private key is supplied.
        InvalidKey: if the private key is not valid.

    Returns:
        a copy of `tx` with exactly one signature.
    """
    return _sign(tx, lambda digest: cryptography.sign(digest, private_key), message)


def multi_sign_transaction(
    tx: transaction.Transaction, private_key: bytes
) -> transaction.Transaction:
    """
    Append another signature to a transaction, for accounts with a multi-signature permission.

    Unlike `sign_transaction()` the transaction may already be signed, but its body cannot be changed anymore.

    Args:
        tx: an unsigned or partially signed transaction.
        private_key: the 32 byte private key of a co-signer.

    Raises:
        AlreadySigned: if the key already signed the transaction.
        MissingBody: if the transaction has no raw_data or contract.
        MissingTxId: if the transaction has no identifier.
        TxIdMismatch: if the identifier does not match the body.
        MissingKey: if no private key is supplied.
    """
    _validate_tx(tx)
    _verify_txid(tx)
    key_pair = cryptography.KeyPair(private_key)
    for s in tx.signatures:
        if cryptography.verify_signature(tx.txid, s, key_pair.public_key):  # type: ignore
            raise AlreadySigned("Transaction is already signed by this key")

    signed = tx.copy()
    signed.signatures.append(key_pair.sign(signed.txid))  # type: ignore
    logger.debug(
        f"Added signature {len(signed.signatures)} to transaction {signed.txid.hex()}"  # type: ignore
    )
    return signed


def recover_signers(tx: transaction.Transaction) -> list[bytes]:
    """
    Return the raw addresses of all keys that signed the transaction, in signing order.

    Raises:
        MissingTxId: if the transaction has no identifier.
        InvalidSignature: if a signature is malformed.
    """
    if tx.txid is None:
        raise MissingTxId("Transaction is missing txID")
    return list(
        map(
            lambda s: walletutils.public_key_to_address(
                cryptography.recover_public_key(tx.txid, s)  # type: ignore
            ),
            tx.signatures,
        )
    )


def sign_with_account(acc: account.Account, message: Optional[str] = None) -> SigningFunction:
    """
    Sign using the key material of an account.
    """

    def account_signer(tx: transaction.Transaction) -> transaction.Transaction:
        return _sign(tx, acc.sign, message)

    return account_signer


def sign_with_private_key(
    private_key: bytes, message: Optional[str] = None
) -> SigningFunction:
    """
    Sign using a private key.
    """

    def key_signer(tx: transaction.Transaction) -> transaction.Transaction:
        return sign_transaction(tx, private_key, message)

    return key_signer


def no_signing() -> SigningFunction:
    """
    Dummy signing function to use with read-only or offline test flows.
    """

    def oh_noes(unused: transaction.Transaction) -> transaction.Transaction:
        raise cryptography.MissingKey(
            "can't sign with dummy signing function. Did you forget to configure a signer?"
        )

    return oh_noes
