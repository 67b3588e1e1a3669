import os
import tempfile
import unittest
from pathlib import Path
from unittest import mock

from sui_ptb import ConfigError, load_network_config


class TestConfig(unittest.TestCase):
    def setUp(self):
        self.tempdir = tempfile.TemporaryDirectory()
        self.project_path = Path(self.tempdir.name)

    def tearDown(self):
        self.tempdir.cleanup()

    def write(self, name, text):
        self.project_path.joinpath(name).write_text(text)

    def test_dotenv_substitution(self):
        self.write("sui-config.yaml", (
            "dotenv: .env\n"
            "networks:\n"
            "  sui-devnet:\n"
            "    node_url: ${SUI_DEVNET_URL}\n"
            "    timeout: $SUI_TIMEOUT\n"
        ))
        self.write(".env", "SUI_DEVNET_URL=https://fullnode.devnet.sui.io:443\nSUI_TIMEOUT=5\n")
        config = load_network_config("sui-devnet", self.project_path)
        self.assertEqual(config.network, "sui-devnet")
        self.assertEqual(config.node_url, "https://fullnode.devnet.sui.io:443")
        self.assertEqual(config.timeout, 5.0)

    def test_process_environment(self):
        self.write("sui-config.yaml", "networks:\n  sui-testnet:\n    node_url: ${SUI_TESTNET_URL}\n")
        with mock.patch.dict(os.environ, {"SUI_TESTNET_URL": "http://127.0.0.1:9000"}):
            config = load_network_config(project_path=str(self.project_path))
        self.assertEqual(config.network, "sui-testnet")
        self.assertEqual(config.node_url, "http://127.0.0.1:9000")
        self.assertEqual(config.timeout, 30.0)

    def test_errors(self):
        cases = [
            None,
            "networks: [",
            "- sui-testnet\n",
            "dotenv: .env\n",
            "networks:\n  sui-mainnet:\n    node_url: http://127.0.0.1:9000\n",
            "networks:\n  sui-testnet:\n    timeout: 3\n",
            "networks:\n  sui-testnet:\n    node_url: ${SUI_MISSING_URL_FOR_TEST}\n",
            "networks:\n  sui-testnet:\n    node_url: http://127.0.0.1:9000\n    timeout: soon\n",
        ]
        for text in cases:
            config_file = self.project_path.joinpath("sui-config.yaml")
            if config_file.exists():
                config_file.unlink()
            if text is not None:
                self.write("sui-config.yaml", text)
            with self.assertRaises(ConfigError, msg=text):
                load_network_config("sui-testnet", self.project_path)


if __name__ == '__main__':
    unittest.main()
