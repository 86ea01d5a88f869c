"""
RPC Manager
Resolves the active network from config/network_config.json and connects to it
"""

import os
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union
from web3 import Web3, EthereumTesterProvider
from web3.middleware import ExtraDataToPOAMiddleware
from loguru import logger

from .exceptions import ConfigurationError, NetworkNotFoundError, RPCConnectionError

DEFAULT_CONFIG_PATH = "config/network_config.json"

# Networks served by a development node; no confirmations wait or verification
LOCAL_NETWORKS = ("hardhat", "localhost")


@dataclass(frozen=True)
class ExplorerConfig:
    """Etherscan-compatible block explorer endpoints"""

    api_url: str
    browser_url: Optional[str] = None
    api_key_env: Optional[str] = None

    @property
    def api_key(self) -> Optional[str]:
        if not self.api_key_env:
            return None
        return os.getenv(self.api_key_env)


@dataclass(frozen=True)
class NetworkConfig:
    """Settings for a single named network"""

    name: str
    chain_id: Optional[int]
    chain_name: str
    rpc_url: Optional[str]
    provider: str = 'http'
    accounts_env: Optional[str] = None
    poa: bool = False
    explorer: Optional[ExplorerConfig] = None

    @property
    def is_local(self) -> bool:
        return self.name in LOCAL_NETWORKS


class RPCManager:
    """
    Loads network configuration and hands out a connected Web3 instance

    Active network precedence: explicit argument, $DEPLOY_NETWORK,
    then "default_network" from the config file.
    """

    def __init__(
        self,
        config_path: Optional[Union[Path, str]] = None,
        network_name: Optional[str] = None
    ):
        """
        Initialize RPC Manager

        Args:
            config_path: Network config file (defaults to $DEPLOY_CONFIG or
                         config/network_config.json)
            network_name: Network to use (defaults to $DEPLOY_NETWORK)

        Raises:
            ConfigurationError: If the config file is missing or malformed
            NetworkNotFoundError: If the network is not configured
        """
        if config_path is None:
            config_path = os.getenv('DEPLOY_CONFIG', DEFAULT_CONFIG_PATH)

        self.config_path = Path(config_path)
        self.config = self._load_config(self.config_path)

        if network_name is None:
            network_name = os.getenv('DEPLOY_NETWORK') or self.config.get('default_network')

        if not network_name:
            raise ConfigurationError(
                "No network selected: set $DEPLOY_NETWORK or 'default_network' in "
                f"{self.config_path}"
            )

        self.network = self._init_network(network_name)
        self.w3: Optional[Web3] = None

        logger.info(f"RPC Manager initialized for network: {self.network.name}")

    @staticmethod
    def _load_config(config_path: Path) -> Dict[str, Any]:
        """Load network configuration file"""
        if not config_path.exists():
            raise ConfigurationError(f"Network config not found at {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in {config_path}: {e}") from e

        if 'networks' not in config:
            raise ConfigurationError(f"{config_path} has no 'networks' section")

        return config

    def _init_network(self, network_name: str) -> NetworkConfig:
        """Build NetworkConfig for the selected network"""
        networks = self.config['networks']

        if network_name not in networks:
            raise NetworkNotFoundError(
                f"Network '{network_name}' not found in {self.config_path}. "
                f"Available: {', '.join(sorted(networks))}"
            )

        network_data = networks[network_name]
        provider = network_data.get('provider', 'http')

        # Environment wins over the file so endpoints with API keys stay in .env
        rpc_url = None
        if network_data.get('rpc_url_env'):
            rpc_url = os.getenv(network_data['rpc_url_env'])
        if not rpc_url:
            rpc_url = network_data.get('rpc_url')

        if provider == 'http' and not rpc_url:
            raise ConfigurationError(
                f"No RPC URL for network '{network_name}': "
                f"set ${network_data.get('rpc_url_env', 'RPC_URL')}"
            )

        explorer = None
        explorer_data = network_data.get('explorer')
        if explorer_data:
            explorer = ExplorerConfig(
                api_url=explorer_data['api_url'],
                browser_url=explorer_data.get('browser_url'),
                api_key_env=explorer_data.get('api_key_env'),
            )

        return NetworkConfig(
            name=network_name,
            chain_id=network_data.get('chain_id'),
            chain_name=network_data.get('chain_name', network_name),
            rpc_url=rpc_url,
            provider=provider,
            accounts_env=network_data.get('accounts_env'),
            poa=network_data.get('poa', False),
            explorer=explorer,
        )

    @property
    def deployment_settings(self) -> Dict[str, Any]:
        """Deployment section of the config file"""
        return self.config.get('deployment', {})

    def get_web3(self) -> Web3:
        """
        Get Web3 instance for the active network

        Returns:
            Connected Web3 instance

        Raises:
            RPCConnectionError: If the endpoint is unreachable
        """
        if self.w3 is not None:
            return self.w3

        if self.network.provider == 'tester':
            w3 = Web3(EthereumTesterProvider())
        elif self.network.provider == 'http':
            w3 = Web3(Web3.HTTPProvider(self.network.rpc_url))
        else:
            raise ConfigurationError(
                f"Unknown provider '{self.network.provider}' for network '{self.network.name}'"
            )

        if self.network.poa:
            w3.middleware_onion.inject(ExtraDataToPOAMiddleware, layer=0)

        if not w3.is_connected():
            raise RPCConnectionError(
                f"Failed to connect to {self.network.name} at {self.network.rpc_url}"
            )

        logger.success(f"Connected to {self.network.chain_name}")
        self.w3 = w3
        return w3
