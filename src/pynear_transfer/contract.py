from typing import Any, Dict, Optional

from .client import NearConnection
from .exceptions import MethodNotAllowedError


class FungibleTokenContract:
    """A NEP-141 token contract restricted to a fixed set of methods.

    Anything outside VIEW_METHODS / CHANGE_METHODS is rejected before it
    reaches the network.
    """

    VIEW_METHODS = ("ft_balance_of",)
    CHANGE_METHODS = ("mint", "storage_deposit", "ft_transfer")

    def __init__(self, connection: NearConnection, contract_id: str):
        self.connection = connection
        self.contract_id = contract_id

    async def view(self, method_name: str, args: Dict[str, Any]):
        if method_name not in self.VIEW_METHODS:
            raise MethodNotAllowedError(self.contract_id, method_name, "view")
        return await self.connection.view(self.contract_id, method_name, args)

    async def call(self, method_name: str, args: Dict[str, Any], gas, deposit):
        """Run a change method; ``gas`` and ``deposit`` accept ints or decimal strings."""
        if method_name not in self.CHANGE_METHODS:
            raise MethodNotAllowedError(self.contract_id, method_name, "change")
        return await self.connection.function_call(
            self.contract_id, method_name, args, gas=int(gas), amount=int(deposit)
        )

    async def ft_balance_of(self, account_id: str) -> str:
        return await self.view("ft_balance_of", {"account_id": account_id})

    async def ft_transfer(self, receiver_id: str, amount: str, gas, deposit,
                          memo: Optional[str] = None):
        args = {"receiver_id": receiver_id, "amount": str(amount)}
        if memo:
            args["memo"] = memo
        return await self.call("ft_transfer", args, gas, deposit)

    async def storage_deposit(self, account_id: str, gas, deposit, registration_only=True):
        args = {"account_id": account_id, "registration_only": registration_only}
        return await self.call("storage_deposit", args, gas, deposit)

    async def mint(self, args: Dict[str, Any], gas, deposit=0):
        return await self.call("mint", args, gas, deposit)

    def __repr__(self):
        return f"FungibleTokenContract({self.contract_id!r})"
