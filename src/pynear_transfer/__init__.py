from .client import NearConnection, TransferResult, open_connection, to_yocto
from .config import ConfigManager, NetworkConfig, load_private_key
from .contract import FungibleTokenContract
from .tokens import TOKEN_LIST, FungibleToken, NativeCoin, resolve
from .transfer import TransferRequest, execute, transfer_native, transfer_token

__all__ = [
    'NearConnection', 'TransferResult', 'open_connection', 'to_yocto',
    'ConfigManager', 'NetworkConfig', 'load_private_key',
    'FungibleTokenContract',
    'TOKEN_LIST', 'FungibleToken', 'NativeCoin', 'resolve',
    'TransferRequest', 'execute', 'transfer_native', 'transfer_token',
]
