# MIT License
# Copyright (c) 2025 Hashborn

import os
import logging
import configparser
from typing import Dict, Optional
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

# Global Constants
DECIMALS = 18
PUBKEY_PREFIX = "Mp"
ADDRESS_PREFIX = "Mx"
PUBKEY_LENGTH = 32          # ed25519 masternode key, bytes
COIN_SYMBOL_LENGTH = 10     # gas coin symbol, zero padded

DEFAULT_POLL_INTERVAL = 60  # seconds
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_CONFIG_FILE = "cmc0.ini"
NODE_ENV_VAR = "MINTWATCH_NODE"


class NetworkConfig:
    def __init__(self,
                 network_id: str,
                 base_coin: str,
                 chain_id: Optional[int] = None,
                 min_gas_price: int = 1):
        self.network_id = network_id
        self.base_coin = base_coin
        # None keeps the pre-chain-id transaction layout
        self.chain_id = chain_id
        self.min_gas_price = min_gas_price

NETWORKS: Dict[str, NetworkConfig] = {
    "testnet": NetworkConfig(network_id="testnet", base_coin="MNT"),
    "mainnet": NetworkConfig(network_id="mainnet", base_coin="BIP", chain_id=1),
}

# The bot was built against the testnet
CURRENT_NETWORK = NETWORKS["testnet"]


class WatcherConfig(BaseModel):
    """Everything the watcher needs from its configuration provider."""
    primary_url: str = Field(default="http://localhost:8841", description="Main node API base URL")
    secondary_url: Optional[str] = Field(default=None, description="Fallback node for validator polling")
    poll_interval: int = Field(default=DEFAULT_POLL_INTERVAL, description="Seconds between polls")
    gas_coin: str = Field(default=CURRENT_NETWORK.base_coin, description="Default gas coin symbol")
    gas_price: int = Field(default=CURRENT_NETWORK.min_gas_price)
    chain_id: Optional[int] = Field(default=CURRENT_NETWORK.chain_id)
    request_timeout: float = Field(default=DEFAULT_REQUEST_TIMEOUT, description="HTTP timeout, seconds")
    database: str = Field(default="mintwatch.db", description="sqlite file of the user directory")


def _get(parser: configparser.ConfigParser, section: str, key: str) -> Optional[str]:
    value = parser.get(section, key, fallback=None)
    if value is None:
        return None
    value = value.strip()
    return value or None


def load_config(path: Optional[str] = None) -> WatcherConfig:
    """
    Loads the INI file used by the original bot.

    [masternode] ADDRESS, ADDRESS_2, TIMEOUT
    [network]    COINNET, GASPRICE, CHAINID
    [telegram]   TIMEUPDATE
    [database]   ADDRESS

    Missing keys keep their defaults. MINTWATCH_NODE overrides the primary URL.
    """
    values = {}

    if path:
        parser = configparser.ConfigParser(interpolation=None)
        if not parser.read(path, encoding="utf-8"):
            raise FileNotFoundError(f"Config file not found: {path}")
        logger.info(f"Loaded config from {path}")

        primary = _get(parser, "masternode", "ADDRESS")
        if primary:
            values["primary_url"] = primary.rstrip("/")
        secondary = _get(parser, "masternode", "ADDRESS_2")
        if secondary:
            values["secondary_url"] = secondary.rstrip("/")
        timeout = _get(parser, "masternode", "TIMEOUT")
        if timeout:
            values["request_timeout"] = float(timeout)

        coin = _get(parser, "network", "COINNET")
        if coin:
            values["gas_coin"] = coin
        gas_price = _get(parser, "network", "GASPRICE")
        if gas_price:
            values["gas_price"] = int(gas_price)
        chain_id = _get(parser, "network", "CHAINID")
        if chain_id:
            values["chain_id"] = int(chain_id)

        interval = _get(parser, "telegram", "TIMEUPDATE")
        if interval is not None:
            try:
                values["poll_interval"] = int(interval)
            except ValueError:
                logger.warning(f"Bad TIMEUPDATE value {interval!r}, using {DEFAULT_POLL_INTERVAL}s")
                values["poll_interval"] = DEFAULT_POLL_INTERVAL

        database = _get(parser, "database", "ADDRESS")
        if database:
            values["database"] = database

    env_node = os.environ.get(NODE_ENV_VAR)
    if env_node:
        values["primary_url"] = env_node.rstrip("/")

    return WatcherConfig(**values)
