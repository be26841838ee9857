import asyncio
import logging
from dataclasses import dataclass
from decimal import Decimal, Inexact, InvalidOperation, localcontext
from typing import Any, Dict, Optional

from py_near.account import Account

from .config import NetworkConfig
from .exceptions import InvalidAmountError, TransferError

logger = logging.getLogger(__name__)

YOCTO_PER_NEAR = 10 ** 24


@dataclass
class TransferResult:
    """Outcome of a single network operation."""

    success: bool
    data: Optional[Dict[str, Any]] = None
    error: Optional[BaseException] = None

    @classmethod
    def ok(cls, **data) -> "TransferResult":
        return cls(True, data=data)

    @classmethod
    def failed(cls, error: BaseException) -> "TransferResult":
        return cls(False, error=error)

    def to_dict(self) -> Dict[str, Any]:
        """Standardize result format for printing"""
        response = {"success": self.success}
        if self.success and self.data is not None:
            response["data"] = self.data
        if not self.success and self.error is not None:
            response["error"] = str(self.error) or type(self.error).__name__
        return response


def to_yocto(amount) -> int:
    """Convert whole NEAR to yoctoNEAR without going through floats.

    Raises InvalidAmountError for negative values, non-numbers, amounts
    finer than one yoctoNEAR and amounts too long to scale exactly.
    """
    try:
        value = Decimal(str(amount).strip())
    except InvalidOperation:
        raise InvalidAmountError(f"Invalid amount: {amount!r}") from None

    if not value.is_finite() or value < 0:
        raise InvalidAmountError(f"Invalid amount: {amount!r}")

    with localcontext() as ctx:
        ctx.prec = 100
        ctx.traps[Inexact] = True
        try:
            yocto = value * YOCTO_PER_NEAR
        except Inexact:
            raise InvalidAmountError(f"Amount {amount} has too many digits") from None
        if yocto != yocto.to_integral_value():
            raise InvalidAmountError(f"Amount {amount} is finer than one yoctoNEAR")
    return int(yocto)


def transaction_hash(result) -> Optional[str]:
    """Pull the transaction hash out of an SDK transaction result, if there is one."""
    transaction = getattr(result, "transaction", None)
    tx_hash = getattr(transaction, "hash", None) or getattr(result, "transaction_hash", None)
    if tx_hash is None and isinstance(result, str):
        return result
    return tx_hash


class NearConnection:
    """A signed connection to one network, shared by both transfer paths.

    Every call is bounded by ``config.timeout`` seconds.
    """

    def __init__(self, config: NetworkConfig, private_key: str, account_factory=Account):
        self.config = config
        self.account_id = config.account_id
        self.signer = account_factory(config.account_id, private_key, config.node_url)

    async def _call(self, coro):
        return await asyncio.wait_for(coro, timeout=self.config.timeout)

    async def startup(self) -> "NearConnection":
        logger.debug(f"Connecting to {self.config.network_id} at {self.config.node_url} as {self.account_id}")
        await self._call(self.signer.startup())
        return self

    def account(self, account_id: str) -> "AccountHandle":
        return AccountHandle(self, account_id)

    async def get_balance(self, account_id: str) -> int:
        return await self._call(self.signer.get_balance(account_id))

    async def send_money(self, receiver_id: str, amount: int):
        return await self._call(self.signer.send_money(receiver_id, amount))

    async def view(self, contract_id: str, method_name: str, args: Dict[str, Any]):
        result = await self._call(self.signer.view_function(contract_id, method_name, args))
        return getattr(result, "result", result)

    async def function_call(self, contract_id: str, method_name: str, args: Dict[str, Any],
                            gas: int, amount: int):
        return await self._call(
            self.signer.function_call(contract_id, method_name, args, gas=gas, amount=amount)
        )


class AccountHandle:
    """An account seen through a connection. Only the signer can pay."""

    def __init__(self, connection: NearConnection, account_id: str):
        self.connection = connection
        self.account_id = account_id

    async def get_balance(self) -> int:
        return await self.connection.get_balance(self.account_id)

    async def send_money(self, receiver_id: str, amount: int):
        if self.account_id != self.connection.account_id:
            raise TransferError(
                f"No private key loaded for {self.account_id} "
                f"(signing account is {self.connection.account_id})"
            )
        return await self.connection.send_money(receiver_id, amount)

    def __repr__(self):
        return f"AccountHandle({self.account_id!r})"


async def open_connection(config: NetworkConfig, private_key: str) -> NearConnection:
    """Shared setup for both transfer paths."""
    return await NearConnection(config, private_key, account_factory=Account).startup()
