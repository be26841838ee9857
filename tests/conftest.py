import pytest
from unittest.mock import AsyncMock, Mock

from pynear_transfer.client import NearConnection
from pynear_transfer.config import NetworkConfig

TEST_KEY = "ed25519:testkey"
TEST_ENV = {"PRIVATE_KEY": TEST_KEY}


@pytest.fixture
def config():
    return NetworkConfig(account_id="a.testnet", timeout=5)

@pytest.fixture
def signer():
    """Stands in for py_near's Account."""
    signer = Mock()
    signer.startup = AsyncMock()
    signer.get_balance = AsyncMock(return_value=10 ** 25)
    signer.send_money = AsyncMock(return_value=Mock(transaction=Mock(hash="near_tx")))
    signer.view_function = AsyncMock(return_value=Mock(result="1000"))
    signer.function_call = AsyncMock(return_value=Mock(transaction=Mock(hash="ft_tx")))
    return signer

@pytest.fixture
def account_factory(signer):
    return Mock(return_value=signer)

@pytest.fixture
def connection(config, account_factory):
    return NearConnection(config, TEST_KEY, account_factory=account_factory)

@pytest.fixture
def connect(connection):
    """Connection factory that counts how often the network is reached."""
    return AsyncMock(return_value=connection)
