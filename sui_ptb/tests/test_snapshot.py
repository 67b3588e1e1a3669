import base64
import json
import unittest

import base58

from sui_ptb import (
    Commands, Inputs, SnapshotFormatError, SnapshotVersionError, TransactionBuilder, UnresolvedInputError
)

SENDER = "0x" + "a1" * 32
RECIPIENT = "0x" + "b2" * 32
DIGEST = base58.b58encode(bytes(range(32))).decode()
GAS_PAYMENT = [{"objectId": "0x" + "11" * 32, "version": 1, "digest": DIGEST}]


def every_command_transaction():
    tx = TransactionBuilder()
    tx.set_sender(SENDER)
    tx.set_expiration(3)
    tx.set_gas_price(1000)
    tx.set_gas_budget(5000000)
    tx.set_gas_payment(GAS_PAYMENT)
    tx.set_gas_owner(RECIPIENT)

    owned = tx.input(Inputs.object_ref({"objectId": "0x5", "version": 2, "digest": DIGEST}))
    shared = tx.input(Inputs.shared_object_ref("0x6", 7, False))
    coins = tx.add(Commands.split_coins(tx.gas, [tx.input(100), tx.input(200)]))
    tx.add(Commands.merge_coins(owned, [coins[0]]))
    vec = tx.add(Commands.make_move_vec([coins[1]], "0x2::coin::Coin<0x2::sui::SUI>"))
    tx.add(Commands.move_call("0x2::m::f", [shared, vec], ["0x2::sui::SUI"]))
    tx.add(Commands.publish([b"\x01\x02"], ["0x1", "0x2"]))
    ticket = tx.add(Commands.move_call("0x2::package::authorize_upgrade", [tx.input(Inputs.pure("u8", 0))]))
    tx.add(Commands.upgrade([b"\x03"], ["0x1"], "0x7", ticket))
    tx.add(Commands.transfer_objects([owned], tx.input(RECIPIENT)))
    return tx


class TestSnapshot(unittest.IsolatedAsyncioTestCase):
    async def test_round_trip(self):
        tx = every_command_transaction()
        tx_bytes = await tx.build()
        serialized = tx.serialize()

        restored = TransactionBuilder.from_serialized(serialized)
        self.assertEqual(restored.sender, SENDER)
        self.assertEqual(restored.expiration, 3)
        self.assertEqual(restored.gas_config, tx.gas_config)
        self.assertEqual(restored.inputs, tx.inputs)
        self.assertEqual([v.encode for v in restored.commands], [v.encode for v in tx.commands])
        self.assertEqual(await restored.build(), tx_bytes)
        self.assertEqual(restored.serialize(), serialized)

    async def test_round_trip_node_payment(self):
        tx = TransactionBuilder()
        tx.set_sender(SENDER)
        tx.set_gas_price(1000)
        tx.set_gas_budget(5000000)
        tx.set_gas_payment([{"objectId": "0x" + "11" * 32, "version": "12", "digest": DIGEST}])
        tx_bytes = await tx.build()

        restored = TransactionBuilder.from_serialized(tx.serialize())
        self.assertEqual(restored.gas_config, tx.gas_config)
        self.assertEqual(await restored.build(), tx_bytes)

    async def test_format(self):
        tx = every_command_transaction()
        await tx.build()
        data = json.loads(tx.serialize())

        self.assertEqual(data["version"], 1)
        self.assertEqual(data["expiration"], {"Epoch": 3})
        self.assertEqual(data["gasConfig"]["budget"], "5000000")
        self.assertEqual(data["gasConfig"]["price"], "1000")
        self.assertEqual(data["inputs"][2], {
            "kind": "Input", "index": 2, "value": {"Pure": base64.b64encode((100).to_bytes(8, "little")).decode()}
        })
        self.assertEqual(data["inputs"][1]["value"], {"Object": {"Shared": {
            "objectId": "0x" + "00" * 31 + "06", "initialSharedVersion": 7, "mutable": False}}})
        self.assertEqual([v["kind"] for v in data["commands"]], [
            "SplitCoins", "MergeCoins", "MakeMoveVec", "MoveCall", "Publish", "MoveCall", "Upgrade", "TransferObjects"
        ])
        self.assertEqual(data["commands"][1]["sources"], [{"kind": "NestedResult", "index": 0, "resultIndex": 0}])
        self.assertEqual(data["commands"][0]["coin"], {"kind": "GasCoin"})
        self.assertEqual(data["commands"][4]["modules"], ["AQI="])

    def test_unbuilt_transaction(self):
        tx = TransactionBuilder()
        tx.set_sender(SENDER)
        restored = TransactionBuilder.from_serialized(tx.serialize())
        self.assertEqual(restored.sender, SENDER)
        self.assertIsNone(restored.expiration)
        self.assertEqual(restored.gas_config, {})
        self.assertEqual(restored.inputs, [])

    def test_unresolved_input(self):
        tx = TransactionBuilder()
        tx.input(Inputs.pure("u8", 1))
        tx.input(5)
        with self.assertRaises(UnresolvedInputError) as cm:
            tx.serialize()
        self.assertEqual(cm.exception.index, 1)

    def test_unsupported_version(self):
        data = json.loads(TransactionBuilder().serialize())
        data["version"] = 2
        with self.assertRaises(SnapshotVersionError) as cm:
            TransactionBuilder.from_serialized(json.dumps(data))
        self.assertEqual(cm.exception.version, 2)

        data["version"] = 1.0
        with self.assertRaises(SnapshotVersionError):
            TransactionBuilder.from_serialized(json.dumps(data))

    def test_malformed(self):
        base = json.loads(TransactionBuilder().serialize())
        cases = [
            "{not json",
            "[]",
            json.dumps(dict(base, inputs=[{"kind": "Input", "index": 1, "value": {"Pure": "AQ=="}}])),
            json.dumps(dict(base, inputs=[{"kind": "Input", "index": 0, "value": {"Pure": "%%"}}])),
            json.dumps(dict(base, inputs=[{"kind": "Input", "index": 0, "value": 5}])),
            json.dumps(dict(base, commands=[{"kind": "Teleport"}])),
            json.dumps(dict(base, commands=[{"kind": "SplitCoins", "coin": {"kind": "GasCoin"}}])),
            json.dumps(dict(base, commands=[{"kind": "MoveCall", "target": "pkg::m::f", "arguments": []}])),
            json.dumps(dict(base, gasConfig={"budget": 100})),
            json.dumps(dict(base, sender="alice")),
            json.dumps(dict(base, commands=[{"kind": "SplitCoins", "coin": {"kind": "Input", "index": 70000},
                                              "amounts": []}])),
            json.dumps(dict(base, inputs=[{"kind": "Input", "index": 0, "value": {"Object": {"ImmOrOwned": {
                "objectId": "0x5", "version": 1, "digest": "abc"}}}}])),
            json.dumps(dict(base, gasConfig={"payment": [{"objectId": "0x5", "version": "1x", "digest": DIGEST}]})),
        ]
        for serialized in cases:
            with self.assertRaises(SnapshotFormatError, msg=serialized):
                TransactionBuilder.from_serialized(serialized)

    def test_transaction_bytes_rejected(self):
        with self.assertRaises(SnapshotFormatError):
            TransactionBuilder.from_serialized(b"\x00\x00\x01")
        with self.assertRaises(SnapshotFormatError):
            TransactionBuilder.from_serialized(base64.b64encode(b"\x00\x00\x01").decode())


if __name__ == '__main__':
    unittest.main()
