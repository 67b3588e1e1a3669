import unittest

import base58

from sui_ptb import (
    U8, U16, U64, Argument, Bool, CallArg, NestedResult, NONE, ObjectArg, ObjectDigest, ObjectRef, Pure,
    SharedObject, SuiAddress, uleb128
)

DIGEST = base58.b58encode(bytes(range(32))).decode()


class TestBcs(unittest.TestCase):
    def test_uleb128(self):
        self.assertEqual(uleb128(0), b"\x00")
        self.assertEqual(uleb128(127), b"\x7f")
        self.assertEqual(uleb128(128), b"\x80\x01")
        self.assertEqual(uleb128(16384), b"\x80\x80\x01")

    def test_unsigned(self):
        self.assertEqual(U64(100).encode, (100).to_bytes(8, "little"))
        self.assertEqual(U16(258).encode, b"\x02\x01")
        with self.assertRaises(AssertionError):
            U8(256)
        with self.assertRaises(AssertionError):
            U64(True)

    def test_address(self):
        address = SuiAddress("0x2")
        self.assertEqual(address.encode, bytes(31) + b"\x02")
        self.assertEqual(str(address), "0x" + "00" * 31 + "02")
        self.assertEqual(address, SuiAddress("0x" + "00" * 31 + "02"))
        with self.assertRaises(ValueError):
            SuiAddress("2")

    def test_digest(self):
        digest = ObjectDigest(DIGEST)
        self.assertEqual(digest.encode, b"\x20" + bytes(range(32)))
        self.assertEqual(str(digest), DIGEST)

    def test_argument(self):
        self.assertEqual(Argument("GasCoin", NONE()).encode, b"\x00")
        self.assertEqual(Argument("Input", U16(0)).encode, b"\x01\x00\x00")
        self.assertEqual(Argument("Result", U16(1)).encode, b"\x02\x01\x00")
        nested = Argument("NestedResult", NestedResult(U16(1), U16(2)))
        self.assertEqual(nested.encode, b"\x03\x01\x00\x02\x00")
        self.assertEqual(nested.kind, "NestedResult")
        self.assertEqual(nested.index, 1)
        self.assertEqual(nested.result_index, 2)

        self.assertEqual(Argument("Input", U16(3)), Argument("Input", U16(3)))
        self.assertNotEqual(Argument("Input", U16(3)), Argument("Result", U16(3)))
        self.assertEqual(len({Argument("Input", U16(3)), Argument("Input", U16(3))}), 1)

    def test_call_arg(self):
        pure = CallArg("Pure", Pure(U64(1).encode))
        self.assertEqual(pure.encode, b"\x00\x08" + U64(1).encode)

        ref = ObjectRef.from_json({"objectId": "0x5", "version": 3, "digest": DIGEST})
        owned = CallArg("Object", ObjectArg("ImmOrOwnedObject", ref))
        self.assertEqual(owned.encode, b"\x01\x00" + bytes(31) + b"\x05" + U64(3).encode + b"\x20" + bytes(range(32)))
        self.assertEqual(ref.to_json(), {"objectId": "0x" + "00" * 31 + "05", "version": 3, "digest": DIGEST})

        shared = CallArg("Object", ObjectArg("SharedObject", SharedObject(SuiAddress("0x6"), U64(1), Bool(True))))
        self.assertEqual(shared.encode, b"\x01\x01" + bytes(31) + b"\x06" + U64(1).encode + b"\x01")
        self.assertNotEqual(owned, shared)


if __name__ == '__main__':
    unittest.main()
