"""Native and fungible-token transfers, and the dispatcher choosing between them.

Network failures inside a transfer are logged and returned as a failed
TransferResult. Errors found before any network call (unknown symbol, missing
key, bad amount) are raised.
"""
import logging
from dataclasses import dataclass
from typing import Optional

from .client import (AccountHandle, NearConnection, TransferResult, open_connection,
                     to_yocto, transaction_hash)
from .config import NetworkConfig, load_private_key
from .contract import FungibleTokenContract
from .exceptions import ConfigError, TransferError
from .tokens import RegistryEntry, is_native, resolve

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransferRequest:
    sender_id: str
    receiver_id: str
    amount: str
    symbol: str
    memo: Optional[str] = None


async def report_balance(account: AccountHandle, symbol: str = "NEAR") -> TransferResult:
    """Log an account's native balance. Failures are logged, never raised."""
    try:
        balance = await account.get_balance()
    except Exception as e:
        logger.error(f"Failed to fetch balance of {symbol} for {account.account_id}: {e!r}")
        return TransferResult.failed(e)
    logger.info(f"Balance of {symbol} in {account.account_id}: {balance}")
    return TransferResult.ok(account_id=account.account_id, balance=str(balance))


async def transfer_native(connection: NearConnection, request: TransferRequest) -> TransferResult:
    """Pay NEAR directly from sender to receiver, reporting balances around it."""
    sender = connection.account(request.sender_id)
    receiver = connection.account(request.receiver_id)

    await report_balance(sender, request.symbol)
    await report_balance(receiver, request.symbol)

    yocto = to_yocto(request.amount)
    try:
        outcome = await sender.send_money(request.receiver_id, yocto)
        result = TransferResult.ok(
            transaction_hash=transaction_hash(outcome),
            amount=str(yocto),
            receiver_id=request.receiver_id,
        )
        logger.info(f"Successfully transferred {request.amount} {request.symbol} to {request.receiver_id}")
    except Exception as e:
        logger.error(
            f"Failed to transfer {request.amount} {request.symbol} "
            f"from {request.sender_id} to {request.receiver_id}: {e!r}"
        )
        result = TransferResult.failed(e)

    await report_balance(sender, request.symbol)
    await report_balance(receiver, request.symbol)
    return result


async def get_balance(contract: FungibleTokenContract, request: TransferRequest) -> TransferResult:
    """Log the sender's token balance."""
    try:
        balance = await contract.ft_balance_of(request.sender_id)
    except Exception as e:
        logger.error(f"Failed to fetch balance of {request.symbol} for {request.sender_id}: {e!r}")
        return TransferResult.failed(e)
    logger.info(f"Balance of {request.symbol} in {request.sender_id}: {balance}")
    return TransferResult.ok(account_id=request.sender_id, balance=str(balance))


async def transfer_token(contract: FungibleTokenContract, request: TransferRequest,
                         gas: str = "300000000000000", deposit: str = "1") -> TransferResult:
    """Send tokens with ``ft_transfer``.

    ``deposit`` is in yoctoNEAR; NEP-141 contracts require exactly one.
    """
    amount = str(request.amount)
    signer_id = contract.connection.account_id
    if request.sender_id != signer_id:
        error = TransferError(
            f"No private key loaded for {request.sender_id} (signing account is {signer_id})"
        )
        logger.error(f"Failed to transfer {amount} {request.symbol} to {request.receiver_id}: {error}")
        return TransferResult.failed(error)

    try:
        outcome = await contract.ft_transfer(
            request.receiver_id, amount, gas=gas, deposit=deposit, memo=request.memo
        )
    except Exception as e:
        logger.error(f"Failed to transfer {amount} {request.symbol} to {request.receiver_id}: {e!r}")
        return TransferResult.failed(e)
    logger.info(f"Successfully transferred {amount} {request.symbol} to {request.receiver_id}")
    return TransferResult.ok(
        transaction_hash=transaction_hash(outcome),
        amount=amount,
        receiver_id=request.receiver_id,
    )


async def storage_deposit(contract: FungibleTokenContract, account_id: str,
                          gas: str = "300000000000000",
                          deposit: str = "1250000000000000000000") -> TransferResult:
    """Register an account with a token contract so it can hold a balance."""
    try:
        outcome = await contract.storage_deposit(account_id, gas=gas, deposit=deposit)
    except Exception as e:
        logger.error(f"Failed to register {account_id} with {contract.contract_id}: {e!r}")
        return TransferResult.failed(e)
    logger.info(f"Registered {account_id} with {contract.contract_id}")
    return TransferResult.ok(transaction_hash=transaction_hash(outcome), account_id=account_id)


def _token_deposit(entry: RegistryEntry, config: NetworkConfig) -> str:
    return entry.deposit or config.token_deposit


async def _connect(config: NetworkConfig, connect, environ) -> NearConnection:
    if not config.account_id:
        raise ConfigError(f"No signing account configured for {config.network_id}")
    private_key = load_private_key(config, environ)
    return await connect(config, private_key)


async def execute(request: TransferRequest, config: NetworkConfig,
                  connect=open_connection, environ=None) -> TransferResult:
    """Validate a request, connect once, and route it to the matching transfer path."""
    entry = resolve(request.symbol)
    if is_native(entry):
        to_yocto(request.amount)

    connection = await _connect(config, connect, environ)

    if is_native(entry):
        return await transfer_native(connection, request)

    contract = FungibleTokenContract(connection, entry.contract_id)
    if request.sender_id == connection.account_id:
        await get_balance(contract, request)
    return await transfer_token(
        contract, request, gas=config.token_gas, deposit=_token_deposit(entry, config)
    )


async def query_balance(account_id: str, symbol: str, config: NetworkConfig,
                        connect=open_connection, environ=None) -> TransferResult:
    """Read one account's balance of a registered token."""
    entry = resolve(symbol)
    connection = await _connect(config, connect, environ)
    if is_native(entry):
        return await report_balance(connection.account(account_id), symbol)

    contract = FungibleTokenContract(connection, entry.contract_id)
    request = TransferRequest(account_id, account_id, "0", symbol)
    return await get_balance(contract, request)


async def register_account(account_id: str, symbol: str, config: NetworkConfig,
                           connect=open_connection, environ=None) -> TransferResult:
    """Pay the storage deposit that lets ``account_id`` hold a token."""
    entry = resolve(symbol)
    if is_native(entry):
        return TransferResult.ok(account_id=account_id, registered=True)

    connection = await _connect(config, connect, environ)
    contract = FungibleTokenContract(connection, entry.contract_id)
    return await storage_deposit(
        contract, account_id, gas=config.token_gas, deposit=config.storage_deposit
    )
