# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

import io
from typing import List

import base58

from .utils import PureEncoding, ObjectEncoding, array_of, normalize_sui_address

MAX_U8 = 2 ** 8 - 1
MAX_U16 = 2 ** 16 - 1
MAX_U32 = 2 ** 32 - 1
MAX_U64 = 2 ** 64 - 1
MAX_U128 = 2 ** 128 - 1
MAX_U256 = 2 ** 256 - 1


def uleb128(value: int) -> bytes:
    output = b""
    while value >= 0x80:
        # Write 7 (lowest) bits of data and set the 8th bit to 1.
        byte = value & 0x7F
        output += U8(byte | 0x80).encode
        value >>= 7

    # Write the remaining bits of data and set the highest bit to 0.
    output += U8(value & 0x7F).encode
    return output


def encode_list(data: list):
    output = uleb128(len(data))
    for v in data:
        if isinstance(v, list):
            output += encode_list(v)
        else:
            output += v.encode
    return output


def from_list(data: list, sui_type):
    return [v if isinstance(v, sui_type) else sui_type(v) for v in data]


class Serializable:
    """Values compare equal when they are the same wire type with the same encoding"""

    @property
    def encode(self) -> bytes:
        raise NotImplementedError

    def __eq__(self, other):
        return type(self) is type(other) and self.encode == other.encode

    def __hash__(self):
        return hash((type(self).__name__, self.encode))

    def __repr__(self):
        return f"{type(self).__name__}({self.encode.hex()})"


class _Unsigned(Serializable):
    MAX = 0
    SIZE = 0

    def __init__(self, v0: int):
        assert isinstance(v0, int) and not isinstance(v0, bool), f"{v0!r} is not an integer"
        assert 0 <= v0 <= self.MAX, f"{v0} out of range for {type(self).__name__}"
        self.v0 = v0

    @property
    def encode(self) -> bytes:
        stream = io.BytesIO()
        stream.write(self.v0.to_bytes(self.SIZE, "little", signed=False))
        return stream.getvalue()

    def __int__(self):
        return self.v0

    def __repr__(self):
        return f"{type(self).__name__}({self.v0})"


class U8(_Unsigned):
    MAX = MAX_U8
    SIZE = 1

    @staticmethod
    def from_hex(data: str) -> List[U8]:
        assert data.startswith("0x")
        data = data[2:]
        if len(data) % 2 == 1:
            data = "0" + data
        return from_list(list(bytes.fromhex(data)), U8)


class U16(_Unsigned):
    MAX = MAX_U16
    SIZE = 2


class U32(_Unsigned):
    MAX = MAX_U32
    SIZE = 4


class U64(_Unsigned):
    MAX = MAX_U64
    SIZE = 8


class U128(_Unsigned):
    MAX = MAX_U128
    SIZE = 16


class U256(_Unsigned):
    MAX = MAX_U256
    SIZE = 32


class String(Serializable):
    def __init__(self, v0: str):
        assert isinstance(v0, str)
        self.v0 = v0

    @property
    def encode(self) -> bytes:
        data = self.v0.encode()
        return uleb128(len(data)) + data


class Bool(Serializable):
    def __init__(self, v0: bool):
        assert isinstance(v0, bool)
        self.v0 = v0

    @property
    def encode(self) -> bytes:
        if self.v0:
            v0 = 1
        else:
            v0 = 0
        stream = io.BytesIO()
        stream.write(v0.to_bytes(1, "little", signed=False))
        return stream.getvalue()


class RustEnum(Serializable):
    def __init__(self, key, value):
        assert isinstance(value, getattr(type(self), key)[0]), f"{type(self).__name__}.{key} got {value!r}"
        self.key = key
        self.value = value

    @property
    def encode(self) -> bytes:
        (ty, index) = getattr(type(self), self.key)
        return bytes([index]) + self.value.encode

    def __repr__(self):
        return f"{type(self).__name__}({self.key!r}, {self.value!r})"


class ObjectDigest(Serializable):
    def __init__(self, v0):
        if isinstance(v0, (bytes, list)):
            v0 = from_list(list(v0), U8)
        elif isinstance(v0, str):
            v0 = from_list(list(base58.b58decode(v0)), U8)
        else:
            raise ValueError(v0)
        assert len(v0) == 32, f"digest must be 32 bytes, got {len(v0)}"
        self.v0: List[U8] = v0

    @property
    def encode(self) -> bytes:
        return encode_list(self.v0)

    def __str__(self):
        return base58.b58encode(bytes(v.v0 for v in self.v0)).decode()


class SuiAddress(Serializable):
    def __init__(self, v0):
        if isinstance(v0, (bytes, list)):
            v0 = from_list(list(v0), U8)
        elif isinstance(v0, str) and v0.startswith("0x"):
            v0 = U8.from_hex(normalize_sui_address(v0))
        else:
            raise ValueError(v0)
        assert len(v0) == 32, f"address must be 32 bytes, got {len(v0)}"
        self.v0: List[U8] = v0

    @property
    def encode(self) -> bytes:
        return encode_list(self.v0)[1:]

    def __str__(self):
        return "0x" + self.encode.hex()

    def __repr__(self):
        return f"{type(self).__name__}({self})"


SequenceNumber = U64
EpochId = U64
ObjectID = SuiAddress
Address = SuiAddress


class SharedObject(Serializable):
    def __init__(self, object_id, initial_shared_version, mutable):
        self.object_id: ObjectID = object_id
        self.initial_shared_version: SequenceNumber = initial_shared_version
        self.mutable: Bool = mutable

    @property
    def encode(self) -> bytes:
        return self.object_id.encode + self.initial_shared_version.encode + self.mutable.encode


class ObjectRef(Serializable):
    def __init__(self, object_id, sequence_number, object_digest):
        self.object_id: ObjectID = object_id
        self.sequence_number: SequenceNumber = sequence_number
        self.object_digest: ObjectDigest = object_digest

    @property
    def encode(self) -> bytes:
        return self.object_id.encode + self.sequence_number.encode + self.object_digest.encode

    @classmethod
    def from_json(cls, data: dict) -> ObjectRef:
        """
        :param data: {"objectId": "0x..", "version": 3, "digest": "<base58>"}
        """
        return cls(
            ObjectID(data["objectId"]),
            SequenceNumber(int(data["version"])),
            ObjectDigest(data["digest"])
        )

    def to_json(self) -> dict:
        return {
            "objectId": str(self.object_id),
            "version": self.sequence_number.v0,
            "digest": str(self.object_digest),
        }


class ObjectArg(RustEnum):
    ImmOrOwnedObject = (ObjectRef, 0)
    SharedObject = (SharedObject, 1)


class Pure(Serializable):
    def __init__(self, v0):
        assert isinstance(v0, (list, bytes))
        self.v0: List[U8] = from_list(list(v0), U8)

    @property
    def encode(self) -> bytes:
        return encode_list(self.v0)

    @property
    def data(self) -> bytes:
        return bytes(v.v0 for v in self.v0)


class CallArg(RustEnum):
    Pure = (Pure, 0)
    Object = (ObjectArg, 1)


class Identifier(Serializable):
    def __init__(self, v0):
        assert isinstance(v0, str)
        self.v0 = v0

    @property
    def encode(self) -> bytes:
        return uleb128(len(self.v0)) + bytes(self.v0, encoding="ascii")

    def __str__(self):
        return self.v0


class NONE(Serializable):
    @property
    def encode(self) -> bytes:
        return b''


class StructTag(Serializable):
    def __init__(self,
                 address: SuiAddress,
                 module: Identifier,
                 name: Identifier,
                 type_params: List[TypeTag],
                 ):
        self.address: SuiAddress = address
        self.module: Identifier = module
        self.name: Identifier = name
        self.type_params: List[TypeTag] = type_params

    @property
    def encode(self) -> bytes:
        return self.address.encode + self.module.encode + self.name.encode + encode_list(self.type_params)


class TypeTag(RustEnum):
    Bool = (NONE, 0)
    U8 = (NONE, 1)
    U64 = (NONE, 2)
    U128 = (NONE, 3)
    Address = (NONE, 4)
    Signer = (NONE, 5)
    Vector = (RustEnum, 6)
    Struct = (StructTag, 7)
    U16 = (NONE, 8)
    U32 = (NONE, 9)
    U256 = (NONE, 10)


class ProgrammableMoveCall(Serializable):
    def __init__(self,
                 package: ObjectID,
                 module: Identifier,
                 function: Identifier,
                 type_arguments: List[TypeTag],
                 arguments: List[Argument]
                 ):
        self.package = package
        self.module = module
        self.function = function
        self.type_arguments = type_arguments
        self.arguments = arguments

    @property
    def target(self) -> str:
        return f"{self.package}::{self.module}::{self.function}"

    @property
    def encode(self) -> bytes:
        return self.package.encode + self.module.encode + \
               self.function.encode + encode_list(self.type_arguments) + encode_list(self.arguments)


class NestedResult(Serializable):
    def __init__(self, index, result_index):
        self.index: U16 = index
        self.result_index: U16 = result_index

    @property
    def encode(self) -> bytes:
        return self.index.encode + self.result_index.encode


class Argument(RustEnum):
    GasCoin = (NONE, 0)
    Input = (U16, 1)
    Result = (U16, 2)
    NestedResult = (NestedResult, 3)

    @property
    def kind(self) -> str:
        return self.key

    @property
    def index(self):
        """Input or command index, None for the gas coin"""
        if self.key == "GasCoin":
            return None
        if self.key == "NestedResult":
            return self.value.index.v0
        return self.value.v0

    @property
    def result_index(self):
        if self.key == "NestedResult":
            return self.value.result_index.v0
        return None

    def __eq__(self, other):
        return isinstance(other, Argument) and self.encode == other.encode

    def __hash__(self):
        return hash(("Argument", self.encode))


class TransferObjects(Serializable):
    WELL_KNOWN = {
        "objects": array_of(ObjectEncoding()),
        "address": PureEncoding("address"),
    }

    def __init__(self, objects, address):
        self.objects: List[Argument] = objects
        self.address: Argument = address

    @property
    def encode(self) -> bytes:
        return encode_list(self.objects) + self.address.encode


class SplitCoins(Serializable):
    WELL_KNOWN = {
        "coin": ObjectEncoding(),
        "amounts": array_of(PureEncoding("u64")),
    }

    def __init__(self, coin, amounts):
        self.coin: Argument = coin
        self.amounts: List[Argument] = amounts

    @property
    def encode(self) -> bytes:
        return self.coin.encode + encode_list(self.amounts)


class MergeCoins(Serializable):
    WELL_KNOWN = {
        "destination": ObjectEncoding(),
        "sources": array_of(ObjectEncoding()),
    }

    def __init__(self, destination, sources):
        self.destination: Argument = destination
        self.sources: List[Argument] = sources

    @property
    def encode(self) -> bytes:
        return self.destination.encode + encode_list(self.sources)


class Publish(Serializable):
    WELL_KNOWN = {}

    def __init__(self, modules, dependencies):
        self.modules: List[List[U8]] = [from_list(list(v), U8) for v in modules]
        self.dependencies: List[ObjectID] = dependencies

    @property
    def encode(self) -> bytes:
        return encode_list(self.modules) + encode_list(self.dependencies)


class OptionTypeTag(RustEnum):
    NONE = (NONE, 0)
    Some = (TypeTag, 1)


class MakeMoveVec(Serializable):
    WELL_KNOWN = {
        "objects": array_of(ObjectEncoding()),
    }

    def __init__(self, type_tag, objects):
        self.type_tag: OptionTypeTag = type_tag
        self.objects: List[Argument] = objects

    @property
    def encode(self) -> bytes:
        return self.type_tag.encode + encode_list(self.objects)


class Upgrade(Serializable):
    WELL_KNOWN = {
        "ticket": ObjectEncoding(),
    }

    def __init__(self, modules, dependencies, package_id, ticket):
        assert isinstance(modules, list)
        self.modules: List[List[U8]] = [from_list(list(v), U8) for v in modules]
        self.dependencies: List[ObjectID] = dependencies
        self.package_id: ObjectID = package_id
        self.ticket: Argument = ticket

    @property
    def encode(self) -> bytes:
        return encode_list(self.modules) + encode_list(self.dependencies) + self.package_id.encode + self.ticket.encode


class Command(RustEnum):
    MoveCall = (ProgrammableMoveCall, 0)
    TransferObjects = (TransferObjects, 1)
    SplitCoins = (SplitCoins, 2)
    MergeCoins = (MergeCoins, 3)
    Publish = (Publish, 4)
    MakeMoveVec = (MakeMoveVec, 5)
    Upgrade = (Upgrade, 6)

    @property
    def kind(self) -> str:
        return self.key


class ProgrammableTransaction(Serializable):
    def __init__(self, inputs, commands):
        self.inputs: List[CallArg] = inputs
        self.commands: List[Command] = commands

    @property
    def encode(self) -> bytes:
        return encode_list(self.inputs) + encode_list(self.commands)


class TransactionExpiration(RustEnum):
    NONE = (NONE, 0)
    Epoch = (EpochId, 1)


class GasData(Serializable):
    def __init__(self, payment, owner, price, budget):
        self.payment: List[ObjectRef] = payment
        self.owner: SuiAddress = owner
        self.price: U64 = price
        self.budget: U64 = budget

    @property
    def encode(self) -> bytes:
        return encode_list(self.payment) + self.owner.encode + self.price.encode + self.budget.encode


class TransactionKind(RustEnum):
    ProgrammableTransaction = (ProgrammableTransaction, 0)


class TransactionDataV1(Serializable):
    def __init__(
            self,
            kind: TransactionKind,
            sender: SuiAddress,
            gas_data: GasData,
            expiration: TransactionExpiration
    ):
        self.kind: TransactionKind = kind
        self.sender: SuiAddress = sender
        self.gas_data: GasData = gas_data
        self.expiration: TransactionExpiration = expiration

    @property
    def encode(self):
        return self.kind.encode + self.sender.encode + self.gas_data.encode + self.expiration.encode


class TransactionData(RustEnum):
    V1 = (TransactionDataV1, 0)
