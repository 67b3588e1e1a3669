# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

import abc
import logging
from pathlib import Path
from typing import List, Union

import httpx

from .config import load_network_config
from .utils import normalize_sui_object_id

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Error thrown when the API returns >= 400 or a JSON-RPC error"""

    def __init__(self, message, status_code=None, code=None):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.status_code = status_code
        self.code = code


class Provider(abc.ABC):
    """Chain state needed to resolve a transaction before it is built"""

    @abc.abstractmethod
    async def get_reference_gas_price(self) -> int:
        pass

    @abc.abstractmethod
    async def get_normalized_move_function(self, package: str, module_name: str, function_name: str) -> dict:
        """
        :return: {"visibility": "Public", "isEntry": True, "typeParameters": [], "parameters": [...], "return": [...]}
        """

    @abc.abstractmethod
    async def get_object_batch(self, object_ids: List[str], options: dict) -> List[dict]:
        """Object responses in the same order as ``object_ids``"""


class SuiClient(httpx.AsyncClient, Provider):
    def __init__(self, base_url, timeout=30, **kwargs):
        super(SuiClient, self).__init__(base_url=base_url, timeout=timeout, **kwargs)
        self.endpoint = base_url

    @classmethod
    def from_config(cls, network: str = "sui-testnet", project_path: Union[Path, str] = None, **kwargs) -> SuiClient:
        config = load_network_config(network, project_path)
        return cls(config.node_url, timeout=config.timeout, **kwargs)

    async def post(self, *args, **kwargs):
        response = await super().post(*args, **kwargs)
        if response.status_code >= 400:
            raise ApiError(response.text, response.status_code)
        return response

    async def request(self, method: str, params: list):
        logger.debug("Request %s %s", method, params)
        response = await self.post(
            f"{self.endpoint}",
            json={
                "jsonrpc": "2.0",
                "id": 1,
                "method": method,
                "params": params
            },
        )
        response = response.json()
        if response.get("error") is not None:
            error = response["error"]
            if isinstance(error, dict):
                raise ApiError(f"{method}: {error.get('message', error)}", code=error.get("code"))
            raise ApiError(f"{method}: {error}")
        return response["result"]

    async def suix_getReferenceGasPrice(
            self
    ):
        return await self.request("suix_getReferenceGasPrice", [])

    async def sui_getNormalizedMoveFunction(
            self,
            package,
            module_name,
            function_name,
    ):
        return await self.request("sui_getNormalizedMoveFunction", [
            package,
            module_name,
            function_name,
        ])

    async def sui_multiGetObjects(
            self,
            object_ids,
            options,
    ):
        return await self.request("sui_multiGetObjects", [
            object_ids,
            options,
        ])

    async def get_reference_gas_price(self) -> int:
        return int(await self.suix_getReferenceGasPrice())

    async def get_normalized_move_function(self, package: str, module_name: str, function_name: str) -> dict:
        return await self.sui_getNormalizedMoveFunction(
            normalize_sui_object_id(package),
            module_name,
            function_name
        )

    async def get_object_batch(self, object_ids: List[str], options: dict) -> List[dict]:
        return await self.sui_multiGetObjects(list(object_ids), options)
