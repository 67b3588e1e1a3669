# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

import asyncio
import logging
from typing import List, Optional, Tuple

from .bcs import CallArg, Command, ProgrammableMoveCall
from .exceptions import (
    ArgumentCountMismatchError, InvalidInputValueError, ObjectLookupError, UnknownArgumentTypeError
)
from .inputs import Inputs, TransactionInput
from .serializer import extract_struct_tag, get_pure_serialization_type, is_tx_context, is_type_parameter
from .utils import WellKnownEncoding, normalize_sui_object_id

logger = logging.getLogger(__name__)

# Shared objects are always requested mutably, whatever the command does with them.
DEFAULT_SHARED_OBJECT_MUTABLE = True

OBJECT_OPTIONS = {"showOwner": True}


def get_shared_object_initial_version(owner) -> Optional[int]:
    """
    :param owner: {"Shared": {"initial_shared_version": 3}} | {"AddressOwner": "0x.."} | "Immutable"
    """
    if isinstance(owner, dict) and "Shared" in owner:
        return int(owner["Shared"]["initial_shared_version"])
    return None


class ObjectQueue:
    """Inputs waiting for one batched object lookup, in the order they were queued"""

    def __init__(self):
        self._items: List[Tuple[str, TransactionInput]] = []
        self._queued = set()

    def push(self, object_id: str, tx_input: TransactionInput):
        if tx_input.index in self._queued:
            return
        try:
            object_id = normalize_sui_object_id(object_id)
        except ValueError:
            raise InvalidInputValueError(f"Input {tx_input.index} is not a valid object id: {object_id!r}")
        self._queued.add(tx_input.index)
        self._items.append((object_id, tx_input))

    @property
    def object_ids(self) -> List[str]:
        return [object_id for object_id, _ in self._items]

    def __contains__(self, index: int):
        return index in self._queued

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)


class ArgumentResolver:
    """Turns raw input values into call args, fetching signatures and objects from the provider"""

    def __init__(self, inputs: List[TransactionInput], provider=None):
        self.inputs = inputs
        self.provider = provider
        self.objects = ObjectQueue()

    def get_input(self, index: int) -> TransactionInput:
        if not 0 <= index < len(self.inputs):
            raise InvalidInputValueError(f"Missing input {index}")
        return self.inputs[index]

    def is_pending(self, index: int) -> bool:
        tx_input = self.get_input(index)
        return not tx_input.resolved and index not in self.objects

    # Well known encodings

    def resolve_well_known(self, commands: List[Command]):
        for command in commands:
            if command.key == "MoveCall":
                continue
            for field, encoding in type(command.value).WELL_KNOWN.items():
                value = getattr(command.value, field)
                if encoding.is_array:
                    for argument in value:
                        if argument.kind == "Input":
                            self.encode_input(argument.index, encoding.element)
                elif value.kind == "Input":
                    self.encode_input(value.index, encoding)

    def encode_input(self, index: int, encoding: WellKnownEncoding):
        if not self.is_pending(index):
            return
        tx_input = self.inputs[index]
        if encoding.kind == "object" and isinstance(tx_input.value, str):
            self.objects.push(tx_input.value, tx_input)
        elif encoding.kind == "pure":
            tx_input.value = Inputs.pure(encoding.type, tx_input.value)
        else:
            raise InvalidInputValueError(
                f"Unexpected input format for input {index}: expected {encoding.kind}, got {tx_input.value!r}")

    # Move calls

    def needs_resolution(self, move_call: ProgrammableMoveCall) -> bool:
        return any(argument.kind == "Input" and not self.get_input(argument.index).resolved
                   for argument in move_call.arguments)

    async def get_parameters(self, move_call: ProgrammableMoveCall) -> list:
        normalized = await self.provider.get_normalized_move_function(
            str(move_call.package),
            str(move_call.module),
            str(move_call.function),
        )
        return normalized["parameters"]

    async def resolve_move_calls(self, commands: List[Command]):
        move_calls = [command.value for command in commands
                      if command.key == "MoveCall" and self.needs_resolution(command.value)]
        if not move_calls:
            return

        logger.debug("Fetching %d move function signatures", len(move_calls))
        tasks = [asyncio.ensure_future(self.get_parameters(move_call)) for move_call in move_calls]
        try:
            signatures = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise

        for move_call, parameters in zip(move_calls, signatures):
            self.apply_signature(move_call, parameters)

    def apply_signature(self, move_call: ProgrammableMoveCall, parameters: list):
        # Entry functions may take &mut TxContext last, the caller never passes it.
        if len(parameters) and is_tx_context(parameters[-1]):
            parameters = parameters[:-1]

        if len(parameters) != len(move_call.arguments):
            raise ArgumentCountMismatchError(move_call.target, len(parameters), len(move_call.arguments))

        for param, argument in zip(parameters, move_call.arguments):
            if argument.kind != "Input" or not self.is_pending(argument.index):
                continue
            tx_input = self.inputs[argument.index]
            value = tx_input.value

            pure_type = get_pure_serialization_type(param, value)
            if pure_type is not None:
                tx_input.value = Inputs.pure(pure_type, value)
                continue

            if extract_struct_tag(param) is not None or is_type_parameter(param):
                if not isinstance(value, str):
                    raise InvalidInputValueError(f"Expect the argument to be an object id string, got {value!r}")
                self.objects.push(value, tx_input)
                continue

            raise UnknownArgumentTypeError(param, value)

    # Objects

    async def resolve_objects(self):
        if not len(self.objects):
            return

        object_ids = self.objects.object_ids
        logger.debug("Fetching %d objects", len(object_ids))
        object_infos = await self.provider.get_object_batch(object_ids, OBJECT_OPTIONS)
        if len(object_infos) != len(object_ids):
            raise ObjectLookupError(None, f"expected {len(object_ids)} objects, got {len(object_infos)}", object_ids)

        # Nothing is written back until every object resolved.
        call_args = [self.object_call_arg(object_id, object_info)
                     for object_id, object_info in zip(object_ids, object_infos)]
        for (_, tx_input), call_arg in zip(self.objects, call_args):
            tx_input.value = call_arg

    @staticmethod
    def object_call_arg(object_id: str, object_info: dict) -> CallArg:
        if not isinstance(object_info, dict):
            raise ObjectLookupError(object_id, f"unexpected response {object_info!r}")
        if object_info.get("error") is not None:
            raise ObjectLookupError(object_id, object_info["error"])
        data = object_info.get("data")
        if not data:
            raise ObjectLookupError(object_id, "object not found")

        try:
            if normalize_sui_object_id(data["objectId"]) != object_id:
                raise ObjectLookupError(object_id, f"response holds {data['objectId']}")
            initial_shared_version = get_shared_object_initial_version(data.get("owner"))
            if initial_shared_version is not None:
                return Inputs.shared_object_ref(object_id, initial_shared_version, DEFAULT_SHARED_OBJECT_MUTABLE)
            return Inputs.object_ref(data)
        except (AssertionError, KeyError, TypeError, ValueError) as e:
            raise ObjectLookupError(object_id, f"malformed object data: {e}")
