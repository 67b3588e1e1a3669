# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Union

import yaml
from dotenv import dotenv_values

from .exceptions import ConfigError

CONFIG_FILE = "sui-config.yaml"
DEFAULT_TIMEOUT = 30

_ENV_PATTERN = re.compile(r"^\$\{?(\w+)\}?$")


class NetworkConfig:
    def __init__(self, network: str, node_url: str, timeout=DEFAULT_TIMEOUT):
        self.network = network
        self.node_url = node_url
        self.timeout = timeout

    def __repr__(self):
        return f"NetworkConfig({self.network!r}, {self.node_url!r}, timeout={self.timeout})"


def load_env(project_path: Path, env_file: str) -> dict:
    """Process environment overlaid with the project's dotenv file"""
    env = dict(os.environ)
    env.update({k: v for k, v in dotenv_values(project_path.joinpath(env_file)).items() if v is not None})
    return env


def substitute_env(value, env: dict):
    """
    ${SUI_NODE_URL} -> value of SUI_NODE_URL
    """
    if not isinstance(value, str):
        return value
    matched = _ENV_PATTERN.match(value)
    if matched is None:
        return value
    env_name = matched.group(1)
    if env_name not in env:
        raise ConfigError(f"{env_name} env not exist")
    return env[env_name]


def load_network_config(network: str = "sui-testnet", project_path: Union[Path, str] = None) -> NetworkConfig:
    """
    Read the network section of sui-config.yaml:

        dotenv: .env
        networks:
          sui-testnet:
            node_url: ${SUI_TESTNET_URL}
            timeout: 30
    """
    project_path = Path.cwd() if project_path is None else Path(project_path)
    config_file = project_path.joinpath(CONFIG_FILE)
    if not config_file.exists():
        raise ConfigError(f"Project not found {CONFIG_FILE} for {project_path.absolute()}")

    with config_file.open() as fp:
        try:
            config = yaml.safe_load(fp) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"{CONFIG_FILE} format error: {e}")

    if not isinstance(config, dict) or not isinstance(config.get("networks"), dict):
        raise ConfigError(f"networks not found in {CONFIG_FILE}")
    if network not in config["networks"]:
        raise ConfigError(f"{network} not found in {CONFIG_FILE}")
    network_config = config["networks"][network] or {}
    if "node_url" not in network_config:
        raise ConfigError(f"Endpoint not config for {network}")

    env = load_env(project_path, config.get("dotenv", ".env"))
    try:
        timeout = float(substitute_env(network_config.get("timeout", DEFAULT_TIMEOUT), env))
    except ValueError:
        raise ConfigError(f"Invalid timeout for {network}: {network_config['timeout']!r}")
    return NetworkConfig(network, substitute_env(network_config["node_url"], env), timeout)
