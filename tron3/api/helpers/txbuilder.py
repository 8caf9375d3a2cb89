"""
Builder for unsigned transactions. Validates operation arguments, normalizes addresses and anchors the transaction
to a reference block.

No network access is performed. Obtain a `BlockReference` from a node (`wallet/getnowblock`) and hand the result of
any of the build methods to `tron3.api.helpers.signing`.
"""
from __future__ import annotations
import time
from dataclasses import dataclass
from collections.abc import Sequence
from typing import Optional, Union, Any
from urllib.parse import urlparse
from tron3 import api_logger as logger, settings
from tron3.contracts import abi, abiserializer
from tron3.network.payloads import block, contracts, transaction
from tron3.wallet import utils as walletutils

def zero_address() -> bytes:
    """
    The caller used for read-only calls when no owner is given, with the configured network prefix.
    """
    return bytes([settings.settings.network.address_prefix]) + b"\x00" * 20


class InvalidArgument(ValueError):
    """
    Raised when an argument to a build method violates its constraints.
    """

    def __init__(self, field: str, message: str):
        super(InvalidArgument, self).__init__(f"Invalid {field}: {message}")
        #: the name of the offending argument
        self.field = field


def _address(value: walletutils.AddressLike, field: str) -> bytes:
    try:
        return walletutils.to_raw(value)
    except walletutils.InvalidAddress as e:
        raise InvalidArgument(field, str(e)) from e


def _integer(value: Any, field: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidArgument(
            field, f"expected an integer amount in SUN, got {type(value).__name__}"
        )
    return value


def _positive(value: Any, field: str) -> int:
    value = _integer(value, field)
    if value <= 0:
        raise InvalidArgument(field, f"must be greater than 0, got {value}")
    return value


def _not_negative(value: Any, field: str) -> int:
    value = _integer(value, field)
    if value < 0:
        raise InvalidArgument(field, f"cannot be negative, got {value}")
    return value


def _non_empty(value: Any, field: str) -> str:
    if not isinstance(value, str) or len(value.strip()) == 0:
        raise InvalidArgument(field, "must be a non-empty string")
    return value


def _token_id(value: Union[str, int], field: str = "token_id") -> bytes:
    if isinstance(value, int) and not isinstance(value, bool):
        value = str(value)
    return _non_empty(value, field).encode("utf-8")


def _url(value: Any, field: str = "url") -> str:
    if not isinstance(value, str):
        raise InvalidArgument(field, "must be a string")
    parsed = urlparse(value)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise InvalidArgument(
            field, f"{value!r} is not a well-formed http(s) URL"
        )
    return value


def _resource(value: Union[str, contracts.ResourceCode]) -> contracts.ResourceCode:
    if isinstance(value, contracts.ResourceCode):
        return value
    if isinstance(value, str):
        try:
            return contracts.ResourceCode.from_string(value)
        except ValueError as e:
            raise InvalidArgument("resource", str(e))
    raise InvalidArgument(
        "resource", f"expected BANDWIDTH or ENERGY, got {value!r}"
    )


@dataclass
class TokenOptions:
    """
    Parameters of a TRC-10 token issuance.
    """

    name: str
    abbreviation: str
    description: str
    url: str
    #: total number of tokens, in the smallest unit
    total_supply: int
    #: `trx_ratio` SUN buy `token_ratio` tokens during the sale
    trx_ratio: int
    token_ratio: int
    #: sale window, milliseconds since epoch
    sale_start: int
    sale_end: int
    #: bandwidth the issuer grants each holder for token transfers
    free_bandwidth: int = 0
    #: total bandwidth the issuer grants all holders together
    free_bandwidth_limit: int = 0
    #: part of the supply locked for `frozen_duration` days
    frozen_amount: int = 0
    frozen_duration: int = 0
    precision: int = 0
    vote_score: int = 0


@dataclass
class ContractCall:
    """
    A read-only contract call. Its JSON form is the request body for `wallet/triggerconstantcontract`.
    """

    owner_address: bytes
    contract_address: bytes
    function: abi.AbiFunction
    parameter: bytes
    call_value: int = 0

    @property
    def data(self) -> bytes:
        """Full call data, selector followed by the encoded arguments."""
        return self.function.selector_id() + self.parameter

    def to_json(self) -> dict:
        """Convert object into JSON representation."""
        json = {
            "owner_address": self.owner_address.hex(),
            "contract_address": self.contract_address.hex(),
            "function_selector": self.function.build_selector(),
            "parameter": self.parameter.hex(),
            "visible": False,
        }
        if self.call_value:
            json["call_value"] = self.call_value
        return json


class TxBuilder:
    """
    Transaction builder.

    Every build method is pure: it validates its arguments, returns a new unsigned transaction with its identifier
    set and leaves the builder untouched, so one builder can be shared for all transactions referencing the same
    block.
    """

    def __init__(
        self,
        reference: block.BlockReference,
        timestamp: Optional[int] = None,
        expiration: Optional[int] = None,
    ):
        """
        Args:
            reference: the block new transactions are anchored to.
            timestamp: creation time in milliseconds since epoch. Defaults to the current time per transaction.
            expiration: expiration time in milliseconds since epoch. Defaults to the reference block time plus
             the configured expiration window.
        """
        self.reference = reference
        self.timestamp = timestamp
        self.expiration = expiration

    def _now(self) -> int:
        if self.timestamp is not None:
            return self.timestamp
        return int(time.time() * 1000)

    def _build(
        self, parameter: contracts.ContractParameter, fee_limit: int = 0
    ) -> transaction.Transaction:
        raw = transaction.TransactionRaw(
            contract=[transaction.Contract(parameter)],
            ref_block_bytes=self.reference.ref_block_bytes,
            ref_block_hash=self.reference.ref_block_hash,
            expiration=self.expiration
            if self.expiration is not None
            else self.reference.expiration,
            timestamp=self._now(),
            fee_limit=fee_limit,
        )
        tx = transaction.Transaction(raw)
        tx.txid = tx.compute_txid()
        logger.debug(
            f"Built {parameter.TYPE.to_protocol_name()} transaction {tx.txid.hex()}"
        )
        return tx

    def transfer(
        self,
        to: walletutils.AddressLike,
        amount: int,
        owner: walletutils.AddressLike,
    ) -> transaction.Transaction:
        """
        Create a TRX transfer.

        Args:
            to: the receiving address.
            amount: the amount in SUN. Use `tron3.core.utils.to_sun` to convert from TRX.
            owner: the sending address.

        Raises:
            InvalidArgument: if the amount is negative or `to` equals `owner`.
        """
        amount = _not_negative(amount, "amount")
        to_raw = _address(to, "to")
        owner_raw = _address(owner, "owner")
        if to_raw == owner_raw:
            raise InvalidArgument("to", "cannot transfer TRX to the same account")
        return self._build(contracts.TransferContract(owner_raw, to_raw, amount))

    def transfer_token(
        self,
        to: walletutils.AddressLike,
        amount: int,
        token_id: Union[str, int],
        owner: walletutils.AddressLike,
    ) -> transaction.Transaction:
        """
        Create a TRC-10 token transfer.

        Args:
            to: the receiving address.
            amount: number of tokens in the smallest unit.
            token_id: the token id, e.g. "1000001".
            owner: the sending address.

        Raises:
            InvalidArgument: if the amount is not positive, the token id is empty or `to` equals `owner`.
        """
        amount = _positive(amount, "amount")
        asset = _token_id(token_id)
        to_raw = _address(to, "to")
        owner_raw = _address(owner, "owner")
        if to_raw == owner_raw:
            raise InvalidArgument("to", "cannot transfer tokens to the same account")
        return self._build(
            contracts.TransferAssetContract(asset, owner_raw, to_raw, amount)
        )

    def purchase_token(
        self,
        issuer: walletutils.AddressLike,
        token_id: Union[str, int],
        amount: int,
        buyer: walletutils.AddressLike,
    ) -> transaction.Transaction:
        """
        Create a purchase of a TRC-10 token during its sale window.

        Args:
            issuer: the address that issued the token.
            token_id: the token id.
            amount: the SUN to spend.
            buyer: the purchasing address.

        Raises:
            InvalidArgument: if the amount is not positive, the token id is empty or `issuer` equals `buyer`.
        """
        amount = _positive(amount, "amount")
        asset = _token_id(token_id)
        issuer_raw = _address(issuer, "issuer")
        buyer_raw = _address(buyer, "buyer")
        if issuer_raw == buyer_raw:
            raise InvalidArgument("buyer", "cannot purchase tokens from yourself")
        return self._build(
            contracts.ParticipateAssetIssueContract(
                buyer_raw, issuer_raw, asset, amount
            )
        )

    def freeze_balance(
        self,
        owner: walletutils.AddressLike,
        amount: int,
        duration: int,
        resource: Union[str, contracts.ResourceCode],
        receiver: Optional[walletutils.AddressLike] = None,
    ) -> transaction.Transaction:
        """
        Stake TRX in exchange for bandwidth or energy.

        Args:
            owner: the address whose balance is frozen.
            amount: the SUN to freeze.
            duration: number of days. At least the configured minimum (3).
            resource: BANDWIDTH or ENERGY.
            receiver: optional address that receives the resource.

        Raises:
            InvalidArgument: if the resource is unknown, the duration is too short or the amount is not positive.
        """
        resource_code = _resource(resource)
        minimum = settings.settings.network.min_freeze_duration
        duration = _integer(duration, "duration")
        if duration < minimum:
            raise InvalidArgument(
                "duration", f"minimum of {minimum} days, got {duration}"
            )
        amount = _positive(amount, "amount")
        owner_raw = _address(owner, "owner")
        receiver_raw = b""
        if receiver is not None:
            receiver_raw = _address(receiver, "receiver")
            if receiver_raw == owner_raw:
                receiver_raw = b""
        return self._build(
            contracts.FreezeBalanceContract(
                owner_raw, amount, duration, resource_code, receiver_raw
            )
        )

    def unfreeze_balance(
        self,
        owner: walletutils.AddressLike,
        resource: Union[str, contracts.ResourceCode],
        receiver: Optional[walletutils.AddressLike] = None,
    ) -> transaction.Transaction:
        """
        Release frozen TRX once the freeze duration has passed.

        Raises:
            InvalidArgument: if the resource is unknown or an address is not valid.
        """
        resource_code = _resource(resource)
        owner_raw = _address(owner, "owner")
        receiver_raw = b""
        if receiver is not None:
            receiver_raw = _address(receiver, "receiver")
            if receiver_raw == owner_raw:
                receiver_raw = b""
        return self._build(
            contracts.UnfreezeBalanceContract(owner_raw, resource_code, receiver_raw)
        )

    def create_token(
        self, owner: walletutils.AddressLike, options: TokenOptions
    ) -> transaction.Transaction:
        """
        Issue a new TRC-10 token.

        Raises:
            InvalidArgument: if any of the token options violates its constraints.
        """
        _non_empty(options.name, "name")
        _non_empty(options.abbreviation, "abbreviation")
        _non_empty(options.description, "description")
        _url(options.url)
        _positive(options.total_supply, "total_supply")
        _positive(options.trx_ratio, "trx_ratio")
        _positive(options.token_ratio, "token_ratio")
        now = self._now()
        sale_start = _integer(options.sale_start, "sale_start")
        sale_end = _integer(options.sale_end, "sale_end")
        if sale_start <= now:
            raise InvalidArgument(
                "sale_start", f"must be in the future, got {sale_start} <= {now}"
            )
        if sale_end <= sale_start:
            raise InvalidArgument(
                "sale_end", f"must be after sale_start, got {sale_end} <= {sale_start}"
            )
        free_bandwidth = _not_negative(options.free_bandwidth, "free_bandwidth")
        free_bandwidth_limit = _not_negative(
            options.free_bandwidth_limit, "free_bandwidth_limit"
        )
        if free_bandwidth > 0 and free_bandwidth_limit == 0:
            raise InvalidArgument(
                "free_bandwidth_limit", "must be set when free_bandwidth is granted"
            )
        frozen_amount = _not_negative(options.frozen_amount, "frozen_amount")
        frozen_duration = _not_negative(options.frozen_duration, "frozen_duration")
        if frozen_amount > 0 and frozen_duration == 0:
            raise InvalidArgument(
                "frozen_duration", "must be set when frozen_amount is given"
            )
        precision = _not_negative(options.precision, "precision")
        if precision > 6:
            raise InvalidArgument("precision", f"must be between 0 and 6, got {precision}")
        vote_score = _not_negative(options.vote_score, "vote_score")

        frozen_supply = []
        if frozen_amount > 0:
            frozen_supply.append(contracts.FrozenSupply(frozen_amount, frozen_duration))
        return self._build(
            contracts.AssetIssueContract(
                owner_address=_address(owner, "owner"),
                name=options.name.encode("utf-8"),
                abbr=options.abbreviation.encode("utf-8"),
                total_supply=options.total_supply,
                frozen_supply=frozen_supply,
                trx_num=options.trx_ratio,
                precision=precision,
                num=options.token_ratio,
                start_time=sale_start,
                end_time=sale_end,
                vote_score=vote_score,
                description=options.description.encode("utf-8"),
                url=options.url.encode("utf-8"),
                free_asset_net_limit=free_bandwidth,
                public_free_asset_net_limit=free_bandwidth_limit,
            )
        )

    def update_token(
        self,
        owner: walletutils.AddressLike,
        description: str,
        url: str,
        new_limit: int = 0,
        new_public_limit: int = 0,
    ) -> transaction.Transaction:
        """
        Update the description, URL and free bandwidth limits of a token issued by `owner`.

        Raises:
            InvalidArgument: if the URL is malformed or a limit is negative.
        """
        if not isinstance(description, str):
            raise InvalidArgument("description", "must be a string")
        _url(url)
        new_limit = _not_negative(new_limit, "new_limit")
        new_public_limit = _not_negative(new_public_limit, "new_public_limit")
        return self._build(
            contracts.UpdateAssetContract(
                _address(owner, "owner"),
                description.encode("utf-8"),
                url.encode("utf-8"),
                new_limit,
                new_public_limit,
            )
        )

    def _call_data(self, function: abi.AbiFunction, args: Sequence[Any]) -> bytes:
        try:
            return abiserializer.encode_parameters(function, args)
        except (abiserializer.ArityMismatch, abiserializer.AbiEncodingError) as e:
            raise InvalidArgument("args", str(e)) from e

    def trigger_smart_contract(
        self,
        contract: walletutils.AddressLike,
        function: abi.AbiFunction,
        args: Sequence[Any],
        fee_limit: int,
        owner: walletutils.AddressLike,
        call_value: int = 0,
        token_value: int = 0,
        token_id: int = 0,
    ) -> transaction.Transaction:
        """
        Create a state changing contract call.

        Args:
            contract: the contract address.
            function: the function to call, see `ContractABI.resolve()`.
            args: one value per function input.
            fee_limit: maximum SUN to burn for energy.
            owner: the calling address.
            call_value: SUN to send along with the call.
            token_value: amount of TRC-10 token `token_id` to send along with the call.
            token_id: the numeric TRC-10 token id.

        Raises:
            InvalidArgument: if the fee limit exceeds the network ceiling, a value is negative or the arguments do
             not match the function inputs.
        """
        ceiling = settings.settings.network.fee_limit_max
        fee_limit = _not_negative(fee_limit, "fee_limit")
        if fee_limit > ceiling:
            raise InvalidArgument(
                "fee_limit", f"must not exceed {ceiling} SUN, got {fee_limit}"
            )
        call_value = _not_negative(call_value, "call_value")
        token_value = _not_negative(token_value, "token_value")
        token_id = _not_negative(token_id, "token_id")
        contract_raw = _address(contract, "contract")
        owner_raw = _address(owner, "owner")
        data = function.selector_id() + self._call_data(function, args)
        return self._build(
            contracts.TriggerSmartContract(
                owner_raw, contract_raw, call_value, data, token_value, token_id
            ),
            fee_limit=fee_limit,
        )

    def call_constant(
        self,
        contract: walletutils.AddressLike,
        function: abi.AbiFunction,
        args: Sequence[Any],
        owner: Optional[walletutils.AddressLike] = None,
        call_value: int = 0,
    ) -> ContractCall:
        """
        Prepare a read-only contract call. Nothing needs to be signed; send `to_json()` of the result to
        `wallet/triggerconstantcontract` and normalize the response with `tron3.api.helpers.unwrap.normalize()`.

        Args:
            contract: the contract address.
            function: the function to call.
            args: one value per function input.
            owner: the caller. Defaults to the zero address.
            call_value: SUN to simulate sending along with the call.

        Raises:
            InvalidArgument: if an address is not valid or the arguments do not match the function inputs.
        """
        call_value = _not_negative(call_value, "call_value")
        contract_raw = _address(contract, "contract")
        owner_raw = zero_address() if owner is None else _address(owner, "owner")
        return ContractCall(
            owner_raw,
            contract_raw,
            function,
            self._call_data(function, args),
            call_value,
        )

    def update_setting(
        self,
        contract: walletutils.AddressLike,
        user_fee_percentage: int,
        owner: walletutils.AddressLike,
    ) -> transaction.Transaction:
        """
        Change the share of the energy cost paid by callers of a contract deployed by `owner`.

        Raises:
            InvalidArgument: if the percentage is not between 0 and 100.
        """
        maximum = settings.settings.network.user_fee_percentage_max
        pct = _integer(user_fee_percentage, "user_fee_percentage")
        if not 0 <= pct <= maximum:
            raise InvalidArgument(
                "user_fee_percentage", f"must be between 0 and {maximum}, got {pct}"
            )
        return self._build(
            contracts.UpdateSettingContract(
                _address(owner, "owner"), _address(contract, "contract"), pct
            )
        )

    def update_energy_limit(
        self,
        contract: walletutils.AddressLike,
        origin_energy_limit: int,
        owner: walletutils.AddressLike,
    ) -> transaction.Transaction:
        """
        Change the maximum energy the deployer of a contract provides per call.

        Raises:
            InvalidArgument: if the limit is not between 1 and 10,000,000.
        """
        maximum = settings.settings.network.origin_energy_limit_max
        limit = _integer(origin_energy_limit, "origin_energy_limit")
        if not 0 < limit <= maximum:
            raise InvalidArgument(
                "origin_energy_limit", f"must be between 1 and {maximum}, got {limit}"
            )
        return self._build(
            contracts.UpdateEnergyLimitContract(
                _address(owner, "owner"), _address(contract, "contract"), limit
            )
        )
