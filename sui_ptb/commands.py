# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

from typing import List, Optional, Union, Tuple

from .bcs import (
    MAX_U16, U16, Argument, Command, Identifier, MakeMoveVec, MergeCoins, NestedResult, NONE, ObjectID,
    OptionTypeTag, ProgrammableMoveCall, Publish, SplitCoins, TransferObjects, TypeTag, Upgrade
)
from .exceptions import ResultMutationError
from .serializer import parse_type_tag


class TransactionResult(Argument):
    """
    Result of a command that has not been executed yet.

    Used directly it is ``Result(index)``. Indexing or iterating it gives
    ``NestedResult(index, i)`` for commands with several outputs:

        coins = tx.add(Commands.split_coins(tx.gas, [amount_a, amount_b]))
        first, second = coins.unpack(2)

    Nothing checks how many outputs the command really has, reading past the end
    only fails when the network executes the transaction.

    ``value`` returns a new ``U16`` on every read, the command index cannot be changed.
    """

    def __init__(self, index: int):
        if type(index) is not int or not 0 <= index <= MAX_U16:
            raise ValueError(f"Command index out of range: {index!r}")
        object.__setattr__(self, "key", "Result")
        object.__setattr__(self, "_index", index)
        object.__setattr__(self, "_nested", {})
        object.__setattr__(self, "_sealed", True)

    @property
    def value(self) -> U16:
        return U16(self._index)

    def __setattr__(self, key, value):
        if self.__dict__.get("_sealed", False):
            raise ResultMutationError()
        super().__setattr__(key, value)

    def __delattr__(self, item):
        raise ResultMutationError()

    def __setitem__(self, key, value):
        raise ResultMutationError()

    def __delitem__(self, key):
        raise ResultMutationError()

    def __getitem__(self, result_index: int) -> Argument:
        if not isinstance(result_index, int) or isinstance(result_index, bool):
            raise TypeError(f"Result index must be an integer, got {result_index!r}")
        if result_index < 0:
            raise IndexError(f"Result index must not be negative, got {result_index}")
        nested = self._nested
        if result_index not in nested:
            nested[result_index] = Argument("NestedResult", NestedResult(U16(self._index), U16(result_index)))
        return nested[result_index]

    def __iter__(self):
        result_index = 0
        while True:
            yield self[result_index]
            result_index += 1

    def unpack(self, count: int) -> Tuple[Argument, ...]:
        return tuple(self[i] for i in range(count))

    def __copy__(self):
        return self

    def __deepcopy__(self, memodict=None):
        return self

    def __repr__(self):
        return f"TransactionResult({self._index})"


def _make_move_vec_type(type_tag) -> OptionTypeTag:
    if type_tag is None:
        return OptionTypeTag("NONE", NONE())
    if isinstance(type_tag, str):
        type_tag = parse_type_tag(type_tag)
    return OptionTypeTag("Some", type_tag)


class Commands:
    """Factories for the commands of a programmable transaction"""

    @staticmethod
    def move_call(
            target: str,
            arguments: List[Argument] = None,
            type_arguments: List[Union[str, TypeTag]] = None,
    ) -> Command:
        """
        :param target: package::module::function
        """
        data = target.split("::")
        if len(data) != 3:
            raise ValueError(f"Move call target must be package::module::function, got {target!r}")
        package_id, module_name, function_name = data
        type_arguments = [parse_type_tag(v) if isinstance(v, str) else v for v in (type_arguments or [])]
        return Command("MoveCall", ProgrammableMoveCall(
            ObjectID(package_id),
            Identifier(module_name),
            Identifier(function_name),
            type_arguments,
            list(arguments or [])
        ))

    @staticmethod
    def transfer_objects(objects: List[Argument], address: Argument) -> Command:
        return Command("TransferObjects", TransferObjects(list(objects), address))

    @staticmethod
    def split_coins(coin: Argument, amounts: List[Argument]) -> Command:
        return Command("SplitCoins", SplitCoins(coin, list(amounts)))

    @staticmethod
    def merge_coins(destination: Argument, sources: List[Argument]) -> Command:
        return Command("MergeCoins", MergeCoins(destination, list(sources)))

    @staticmethod
    def make_move_vec(objects: List[Argument], type_tag: Optional[Union[str, TypeTag]] = None) -> Command:
        return Command("MakeMoveVec", MakeMoveVec(_make_move_vec_type(type_tag), list(objects)))

    @staticmethod
    def publish(modules: List[bytes], dependencies: List[str]) -> Command:
        return Command("Publish", Publish(
            [list(v) for v in modules],
            [ObjectID(v) for v in dependencies]
        ))

    @staticmethod
    def upgrade(modules: List[bytes], dependencies: List[str], package_id: str, ticket: Argument) -> Command:
        return Command("Upgrade", Upgrade(
            [list(v) for v in modules],
            [ObjectID(v) for v in dependencies],
            ObjectID(package_id),
            ticket
        ))

