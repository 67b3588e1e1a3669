# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

import copy

from .bcs import (
    Bool, CallArg, ObjectArg, ObjectID, ObjectRef, Pure, SequenceNumber, SharedObject
)
from .serializer import encode_pure


class TransactionInput:
    """
    One slot of the transaction input list.

    ``value`` is either a resolved ``CallArg`` or the raw value supplied by the caller
    (int, bool, str, bytes, list) waiting to be resolved during build.
    """

    def __init__(self, index: int, value=None):
        self.index = index
        self.value = value

    @property
    def resolved(self) -> bool:
        return isinstance(self.value, CallArg)

    def __eq__(self, other):
        return isinstance(other, TransactionInput) and self.index == other.index and self.value == other.value

    def __repr__(self):
        return f"TransactionInput({self.index}, {self.value!r})"

    def __copy__(self):
        return TransactionInput(self.index, copy.deepcopy(self.value))


class Inputs:
    """Factories for fully resolved input values"""

    @staticmethod
    def pure(type_name: str, value) -> CallArg:
        return CallArg("Pure", Pure(encode_pure(type_name, value)))

    @staticmethod
    def pure_bytes(data: bytes) -> CallArg:
        """Bytes that are already BCS encoded"""
        return CallArg("Pure", Pure(data))

    @staticmethod
    def object_ref(ref) -> CallArg:
        """
        :param ref: ObjectRef or {"objectId": "0x..", "version": 1, "digest": "<base58>"}
        """
        if not isinstance(ref, ObjectRef):
            ref = ObjectRef.from_json(ref)
        return CallArg("Object", ObjectArg("ImmOrOwnedObject", ref))

    @staticmethod
    def shared_object_ref(object_id: str, initial_shared_version: int, mutable: bool) -> CallArg:
        return CallArg("Object", ObjectArg("SharedObject", SharedObject(
            ObjectID(object_id),
            SequenceNumber(int(initial_shared_version)),
            Bool(mutable)
        )))
