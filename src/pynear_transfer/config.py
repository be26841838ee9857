import os
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

import yaml
from dotenv import find_dotenv, load_dotenv

from .exceptions import ConfigError, MissingCredentialError

DEFAULT_CONFIG_PATH = "config/config.yaml"

# Built-in network settings, overridable per network from the YAML file
DEFAULT_NETWORKS = {
    "testnet": {
        "network_id": "testnet",
        "node_url": "https://rpc.testnet.near.org",
        "wallet_url": "https://wallet.testnet.near.org",
        "helper_url": "https://helper.testnet.near.org",
        "explorer_url": "https://explorer.testnet.near.org",
        "account_id": "0xpj.testnet",
    },
    "mainnet": {
        "network_id": "mainnet",
        "node_url": "https://rpc.mainnet.near.org",
        "wallet_url": "https://wallet.mainnet.near.org",
        "helper_url": "https://helper.mainnet.near.org",
        "explorer_url": "https://explorer.mainnet.near.org",
        "account_id": None,
    },
}


@dataclass(frozen=True)
class NetworkConfig:
    """Everything a transfer needs to reach the network and sign for an account."""

    network_id: str = "testnet"
    node_url: str = "https://rpc.testnet.near.org"
    wallet_url: str = "https://wallet.testnet.near.org"
    helper_url: str = "https://helper.testnet.near.org"
    explorer_url: str = "https://explorer.testnet.near.org"
    account_id: Optional[str] = "0xpj.testnet"
    private_key_env: str = "PRIVATE_KEY"
    timeout: float = 30.0
    token_gas: str = "300000000000000"
    token_deposit: str = "1"
    storage_deposit: str = "1250000000000000000000"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NetworkConfig":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigError(f"Unknown network settings: {', '.join(sorted(unknown))}")
        values = dict(data)
        if "timeout" in values:
            values["timeout"] = float(values["timeout"])
        for key in ("token_gas", "token_deposit", "storage_deposit"):
            if key in values:
                values[key] = str(values[key])
        return cls(**values)

    def override(self, **changes) -> "NetworkConfig":
        """Return a copy with every non-None keyword applied."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})


class ConfigManager:
    """Loads network settings from an optional YAML file."""

    def __init__(self, config_path: str = DEFAULT_CONFIG_PATH):
        self.config_path = config_path
        self.config = self.load_config()

    def load_config(self) -> Dict[str, Any]:
        """Load configuration from YAML file, or nothing if the file is absent."""
        if not os.path.exists(self.config_path):
            return {}

        try:
            with open(self.config_path, 'r') as f:
                config = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Error loading config {self.config_path}: {e}") from e

        if config is None:
            return {}
        if not isinstance(config, dict):
            raise ConfigError(f"Config {self.config_path} must be a mapping")
        return config

    def get_network_names(self):
        names = list(DEFAULT_NETWORKS)
        for name in self.config.get("networks", {}) or {}:
            if name not in names:
                names.append(name)
        return names

    def get_network_config(self, network: str = "testnet") -> NetworkConfig:
        """Merge the file's ``networks.<network>`` section over the built-in defaults."""
        file_networks = self.config.get("networks", {}) or {}
        if network not in DEFAULT_NETWORKS and network not in file_networks:
            raise ConfigError(f"Unknown network: {network} (known: {', '.join(self.get_network_names())})")

        settings = dict(DEFAULT_NETWORKS.get(network, {"network_id": network}))
        settings.update(file_networks.get(network) or {})
        return NetworkConfig.from_dict(settings)


def load_private_key(config: NetworkConfig, environ=None) -> str:
    """Read the signing key named by ``config.private_key_env``.

    ``.env`` is loaded first so a key kept there behaves like an exported one.
    """
    if environ is None:
        load_dotenv(find_dotenv(usecwd=True))
        environ = os.environ
    private_key = environ.get(config.private_key_env)
    if not private_key:
        raise MissingCredentialError(config.private_key_env)
    return private_key
