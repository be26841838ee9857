from dataclasses import dataclass
from typing import Dict, Optional, Union

from .exceptions import UnsupportedTokenError


@dataclass(frozen=True)
class NativeCoin:
    """The network's base currency, moved by a direct payment."""

    symbol: str = "NEAR"


@dataclass(frozen=True)
class FungibleToken:
    """A NEP-141 token living in a contract.

    ``deposit`` overrides the attached deposit (yoctoNEAR) for ``ft_transfer``
    when the contract expects something other than the network default.
    """

    contract_id: str
    deposit: Optional[str] = None


RegistryEntry = Union[NativeCoin, FungibleToken]

TOKEN_LIST: Dict[str, RegistryEntry] = {
    "NEAR": NativeCoin(),
    "PTC": FungibleToken("ft3.0xpj.testnet"),
}


def resolve(symbol: str, registry: Dict[str, RegistryEntry] = None) -> RegistryEntry:
    """Look up a symbol (exact, case-sensitive) in the token registry."""
    registry = TOKEN_LIST if registry is None else registry
    try:
        return registry[symbol]
    except KeyError:
        raise UnsupportedTokenError(symbol) from None


def is_native(entry: RegistryEntry) -> bool:
    return isinstance(entry, NativeCoin)
