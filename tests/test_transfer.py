import asyncio
import logging

import pytest
from unittest.mock import AsyncMock, call, patch

from pynear_transfer.client import TransferResult
from pynear_transfer.contract import FungibleTokenContract
from pynear_transfer.config import NetworkConfig
from pynear_transfer.exceptions import (ConfigError, InvalidAmountError, MissingCredentialError,
                                        TransferError, UnsupportedTokenError)
from pynear_transfer.tokens import TOKEN_LIST, FungibleToken
from pynear_transfer.transfer import (TransferRequest, execute, get_balance, query_balance,
                                      register_account, storage_deposit, transfer_native,
                                      transfer_token)

from conftest import TEST_ENV, TEST_KEY

YOCTO = 10 ** 24


def near_request(amount="5"):
    return TransferRequest("a.testnet", "b.testnet", amount, "NEAR")

def token_request(amount="5", memo=None):
    return TransferRequest("a.testnet", "b.testnet", amount, "PTC", memo=memo)


@pytest.mark.parametrize("symbol", ["DOGE", "near", "Ptc"])
def test_unregistered_symbol_never_reaches_network(config, connect, symbol):
    request = TransferRequest("a.testnet", "b.testnet", "1", symbol)
    with pytest.raises(UnsupportedTokenError):
        asyncio.run(execute(request, config, connect=connect, environ=TEST_ENV))
    connect.assert_not_called()

def test_missing_credential_before_connection(config, connect):
    with pytest.raises(MissingCredentialError):
        asyncio.run(execute(near_request(), config, connect=connect, environ={}))
    connect.assert_not_called()

def test_missing_signing_account_before_connection(connect):
    config = NetworkConfig(network_id="mainnet", account_id=None)
    with pytest.raises(ConfigError) as exc:
        asyncio.run(execute(near_request(), config, connect=connect, environ=TEST_ENV))
    assert "No signing account configured for mainnet" in str(exc.value)
    connect.assert_not_called()

def test_invalid_native_amount_before_connection(config, connect):
    with pytest.raises(InvalidAmountError):
        asyncio.run(execute(near_request("-3"), config, connect=connect, environ=TEST_ENV))
    connect.assert_not_called()

def test_connects_once_with_key(config, connect):
    asyncio.run(execute(near_request(), config, connect=connect, environ=TEST_ENV))
    connect.assert_awaited_once_with(config, TEST_KEY)


@patch('pynear_transfer.transfer.transfer_token', new_callable=AsyncMock)
@patch('pynear_transfer.transfer.transfer_native', new_callable=AsyncMock)
def test_native_symbol_routes_to_native_path(mock_native, mock_token, config, connect, connection):
    mock_native.return_value = TransferResult.ok()
    request = near_request()

    result = asyncio.run(execute(request, config, connect=connect, environ=TEST_ENV))

    mock_native.assert_awaited_once_with(connection, request)
    mock_token.assert_not_awaited()
    assert result is mock_native.return_value

@patch('pynear_transfer.transfer.get_balance', new_callable=AsyncMock)
@patch('pynear_transfer.transfer.transfer_token', new_callable=AsyncMock)
@patch('pynear_transfer.transfer.transfer_native', new_callable=AsyncMock)
def test_token_symbol_routes_to_token_path(mock_native, mock_token, mock_balance, config, connect):
    request = token_request()

    asyncio.run(execute(request, config, connect=connect, environ=TEST_ENV))

    mock_native.assert_not_awaited()
    mock_balance.assert_awaited_once()
    contract = mock_token.await_args.args[0]
    assert isinstance(contract, FungibleTokenContract)
    assert contract.contract_id == "ft3.0xpj.testnet"
    assert mock_token.await_args.args[1] == request
    assert mock_token.await_args.kwargs == {"gas": "300000000000000", "deposit": "1"}

@patch.dict(TOKEN_LIST, {"XYZ": FungibleToken("xyz.token.testnet", deposit="5")})
@patch('pynear_transfer.transfer.transfer_token', new_callable=AsyncMock)
def test_contract_address_and_deposit_pass_through(mock_token, config, connect):
    request = TransferRequest("a.testnet", "b.testnet", "1", "XYZ")
    asyncio.run(execute(request, config, connect=connect, environ=TEST_ENV))

    assert mock_token.await_args.args[0].contract_id == "xyz.token.testnet"
    assert mock_token.await_args.kwargs["deposit"] == "5"


@pytest.mark.parametrize("amount, expected", [("1", YOCTO), ("0", 0), ("1000000", 10 ** 6 * YOCTO)])
def test_native_payment_is_scaled_exactly(connection, signer, amount, expected):
    result = asyncio.run(transfer_native(connection, near_request(amount)))

    signer.send_money.assert_awaited_once_with("b.testnet", expected)
    assert result.success
    assert result.data["amount"] == str(expected)
    assert result.data["transaction_hash"] == "near_tx"

def test_failed_payment_still_rereads_balances(connection, signer, caplog):
    signer.send_money.side_effect = RuntimeError("node unavailable")

    with caplog.at_level(logging.INFO, logger="pynear_transfer"):
        result = asyncio.run(transfer_native(connection, near_request()))

    assert not result.success
    assert isinstance(result.error, RuntimeError)
    assert signer.get_balance.await_args_list == [
        call("a.testnet"), call("b.testnet"), call("a.testnet"), call("b.testnet")
    ]
    assert "Failed to transfer 5 NEAR from a.testnet to b.testnet" in caplog.text

def test_failed_balance_read_does_not_stop_transfer(connection, signer, caplog):
    signer.get_balance.side_effect = [RuntimeError("rpc error"), 1, 2, 3]

    result = asyncio.run(transfer_native(connection, near_request()))

    assert result.success
    assert signer.get_balance.await_count == 4
    signer.send_money.assert_awaited_once()
    assert "Failed to fetch balance of NEAR for a.testnet" in caplog.text

def test_native_end_to_end_with_failing_payment(config, connect, signer):
    signer.send_money.side_effect = ConnectionError("reset by peer")

    result = asyncio.run(execute(near_request("5"), config, connect=connect, environ=TEST_ENV))

    assert result.to_dict() == {"success": False, "error": "reset by peer"}
    assert signer.get_balance.await_count == 4
    signer.send_money.assert_awaited_once_with("b.testnet", 5 * YOCTO)
    signer.function_call.assert_not_awaited()

def test_native_balances_are_logged(connection, caplog):
    with caplog.at_level(logging.INFO, logger="pynear_transfer"):
        asyncio.run(transfer_native(connection, near_request()))
    assert caplog.text.count(f"Balance of NEAR in a.testnet: {10 ** 25}") == 2
    assert "Successfully transferred 5 NEAR to b.testnet" in caplog.text


def test_token_end_to_end(config, connect, signer):
    result = asyncio.run(execute(token_request("5"), config, connect=connect, environ=TEST_ENV))

    signer.view_function.assert_awaited_once_with(
        "ft3.0xpj.testnet", "ft_balance_of", {"account_id": "a.testnet"}
    )
    signer.function_call.assert_awaited_once_with(
        "ft3.0xpj.testnet", "ft_transfer", {"receiver_id": "b.testnet", "amount": "5"},
        gas=300000000000000, amount=1,
    )
    signer.send_money.assert_not_awaited()
    assert result.success
    assert result.data["transaction_hash"] == "ft_tx"

@pytest.mark.parametrize("request_", [
    token_request("1"),
    token_request("999999999999999999999999999"),
    token_request(7, memo="invoice 42"),
    TransferRequest("a.testnet", "y.testnet", "0", "PTC"),
])
def test_token_gas_and_deposit_are_fixed(connection, signer, request_):
    contract = FungibleTokenContract(connection, "ft3.0xpj.testnet")
    asyncio.run(transfer_token(contract, request_))

    kwargs = signer.function_call.await_args.kwargs
    assert kwargs == {"gas": 300000000000000, "amount": 1}
    assert signer.function_call.await_args.args[2]["amount"] == str(request_.amount)

def test_token_transfer_failure_is_returned(connection, signer, caplog):
    signer.function_call.side_effect = RuntimeError("Smart contract panicked")
    contract = FungibleTokenContract(connection, "ft3.0xpj.testnet")

    result = asyncio.run(transfer_token(contract, token_request()))

    assert not result.success
    assert "Smart contract panicked" in result.to_dict()["error"]
    assert "Failed to transfer 5 PTC to b.testnet" in caplog.text

def test_token_balance(connection, caplog):
    contract = FungibleTokenContract(connection, "ft3.0xpj.testnet")
    with caplog.at_level(logging.INFO, logger="pynear_transfer"):
        result = asyncio.run(get_balance(contract, token_request()))
    assert result.data == {"account_id": "a.testnet", "balance": "1000"}
    assert "Balance of PTC in a.testnet: 1000" in caplog.text

def test_token_balance_failure_does_not_stop_transfer(config, connect, signer):
    signer.view_function.side_effect = asyncio.TimeoutError()

    result = asyncio.run(execute(token_request(), config, connect=connect, environ=TEST_ENV))

    assert result.success
    signer.function_call.assert_awaited_once()


def test_storage_deposit(connection, signer):
    contract = FungibleTokenContract(connection, "ft3.0xpj.testnet")
    result = asyncio.run(storage_deposit(contract, "b.testnet"))
    assert result.success
    assert signer.function_call.await_args.kwargs["amount"] == 1250000000000000000000

def test_storage_deposit_failure(connection, signer):
    signer.function_call.side_effect = RuntimeError("not enough balance")
    contract = FungibleTokenContract(connection, "ft3.0xpj.testnet")
    result = asyncio.run(storage_deposit(contract, "b.testnet"))
    assert not result.success

def test_register_native_needs_no_network(config, connect):
    result = asyncio.run(register_account("b.testnet", "NEAR", config, connect=connect, environ=TEST_ENV))
    assert result.success
    connect.assert_not_called()

def test_register_token(config, connect, signer):
    asyncio.run(register_account("b.testnet", "PTC", config, connect=connect, environ=TEST_ENV))
    assert signer.function_call.await_args.args[:2] == ("ft3.0xpj.testnet", "storage_deposit")

def test_query_balance_native(config, connect, signer):
    result = asyncio.run(query_balance("b.testnet", "NEAR", config, connect=connect, environ=TEST_ENV))
    assert result.data == {"account_id": "b.testnet", "balance": str(10 ** 25)}
    signer.get_balance.assert_awaited_once_with("b.testnet")

def test_query_balance_token(config, connect, signer):
    result = asyncio.run(query_balance("b.testnet", "PTC", config, connect=connect, environ=TEST_ENV))
    assert result.data["balance"] == "1000"
    assert signer.view_function.await_args.args[2] == {"account_id": "b.testnet"}

def test_query_balance_unknown_symbol(config, connect):
    with pytest.raises(UnsupportedTokenError):
        asyncio.run(query_balance("b.testnet", "DOGE", config, connect=connect, environ=TEST_ENV))
    connect.assert_not_called()

def test_token_transfer_only_from_signing_account(config, connect, signer, caplog):
    request = TransferRequest("x.testnet", "b.testnet", "5", "PTC")

    result = asyncio.run(execute(request, config, connect=connect, environ=TEST_ENV))

    assert not result.success
    assert isinstance(result.error, TransferError)
    assert "signing account is a.testnet" in str(result.error)
    signer.function_call.assert_not_awaited()
    signer.view_function.assert_not_awaited()
    assert "Successfully transferred" not in caplog.text

def test_transfer_token_checks_sender(connection, signer):
    contract = FungibleTokenContract(connection, "ft3.0xpj.testnet")
    result = asyncio.run(transfer_token(contract, TransferRequest("x.testnet", "b.testnet", "5", "PTC")))
    assert not result.success
    signer.function_call.assert_not_awaited()
