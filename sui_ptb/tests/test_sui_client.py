import json
import tempfile
import unittest
from pathlib import Path

import httpx

from sui_ptb import ApiError, SuiClient

NODE_URL = "https://fullnode.testnet.sui.io:443"


class RecordingTransport:
    def __init__(self, responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(json.loads(request.content))
        return self.responses.pop(0)


def rpc_result(result):
    return httpx.Response(200, json={"jsonrpc": "2.0", "id": 1, "result": result})


class TestSuiClient(unittest.IsolatedAsyncioTestCase):
    def client(self, *responses):
        transport = RecordingTransport(responses)
        return SuiClient(NODE_URL, transport=httpx.MockTransport(transport)), transport

    async def test_request_body(self):
        client, transport = self.client(rpc_result("1000"))
        async with client:
            self.assertEqual(await client.get_reference_gas_price(), 1000)
        self.assertEqual(transport.requests, [
            {"jsonrpc": "2.0", "id": 1, "method": "suix_getReferenceGasPrice", "params": []}
        ])

    async def test_normalized_move_function(self):
        signature = {"parameters": ["U64"], "return": []}
        client, transport = self.client(rpc_result(signature))
        async with client:
            self.assertEqual(await client.get_normalized_move_function("0x2", "pay", "split"), signature)
        self.assertEqual(transport.requests[0]["method"], "sui_getNormalizedMoveFunction")
        self.assertEqual(transport.requests[0]["params"], ["0x" + "00" * 31 + "02", "pay", "split"])

    async def test_object_batch(self):
        objects = [{"data": {"objectId": "0x5"}}, {"error": {"code": "notExists"}}]
        client, transport = self.client(rpc_result(objects))
        async with client:
            self.assertEqual(await client.get_object_batch(("0x5", "0x6"), {"showOwner": True}), objects)
        self.assertEqual(transport.requests[0]["params"], [["0x5", "0x6"], {"showOwner": True}])

    async def test_rpc_error(self):
        client, _ = self.client(httpx.Response(200, json={
            "jsonrpc": "2.0", "id": 1, "error": {"code": -32602, "message": "Invalid params"}
        }))
        async with client:
            with self.assertRaises(ApiError) as cm:
                await client.get_reference_gas_price()
        self.assertEqual(cm.exception.code, -32602)
        self.assertIn("Invalid params", str(cm.exception))

    async def test_http_error(self):
        client, _ = self.client(httpx.Response(500, text="internal error"))
        async with client:
            with self.assertRaises(ApiError) as cm:
                await client.get_reference_gas_price()
        self.assertEqual(cm.exception.status_code, 500)

    async def test_from_config(self):
        with tempfile.TemporaryDirectory() as project_path:
            Path(project_path).joinpath("sui-config.yaml").write_text(
                "networks:\n"
                "  sui-testnet:\n"
                f"    node_url: {NODE_URL}\n"
                "    timeout: 10\n"
            )
            client = SuiClient.from_config("sui-testnet", project_path)
        async with client:
            self.assertEqual(client.endpoint, NODE_URL)
            self.assertEqual(client.timeout, httpx.Timeout(10.0))


if __name__ == '__main__':
    unittest.main()
