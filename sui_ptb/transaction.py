# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

import copy
import functools
import logging
from typing import List, Optional

from . import snapshot
from .bcs import (
    NONE, U16, U64, Argument, Command, EpochId, GasData, ObjectRef, ProgrammableTransaction, SuiAddress,
    TransactionData, TransactionDataV1, TransactionExpiration, TransactionKind
)
from .commands import TransactionResult
from .exceptions import (
    BuildInProgressError, DanglingInputError, InvalidInputValueError, MissingFieldError, MissingProviderError
)
from .inputs import TransactionInput
from .resolver import ArgumentResolver
from .utils import is_valid_sui_address

logger = logging.getLogger(__name__)


def _mutation(func):
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        if self._building:
            raise BuildInProgressError()
        return func(self, *args, **kwargs)

    return wrapper


class TransactionBuilder:
    """
    Programmable transaction builder.

    Inputs and commands are append-only, so the index handed out for each of them
    never changes. Raw input values are resolved against the chain when the
    transaction is built:

        tx = TransactionBuilder()
        coin = tx.add(Commands.split_coins(tx.gas, [tx.input(1000)]))
        tx.add(Commands.transfer_objects([coin], tx.input(recipient)))
        tx.set_sender(sender)
        tx.set_gas_budget(10000000)
        tx.set_gas_payment([{"objectId": "0x..", "version": 1, "digest": "..."}])
        tx_bytes = await tx.build(provider=client)
    """

    def __init__(self, transaction: TransactionBuilder = None):
        self._building = False
        self._sender: Optional[str] = None
        self._expiration: Optional[int] = None
        self._gas_config: dict = {}
        self._inputs: List[TransactionInput] = []
        self._commands: List[Command] = []
        if transaction is not None:
            self._sender = transaction.sender
            self._expiration = transaction.expiration
            self._gas_config = transaction.gas_config
            self._inputs = transaction.inputs
            self._commands = transaction.commands

    @staticmethod
    def is_(obj) -> bool:
        return isinstance(obj, TransactionBuilder)

    @classmethod
    def from_serialized(cls, serialized: str) -> TransactionBuilder:
        """Restore a builder from the text returned by ``serialize``"""
        state = snapshot.loads(serialized)
        tx = cls()
        tx._sender = state["sender"]
        tx._expiration = state["expiration"]
        tx._gas_config = state["gas_config"]
        tx._inputs = state["inputs"]
        tx._commands = state["commands"]
        return tx

    @property
    def sender(self) -> Optional[str]:
        return self._sender

    @property
    def expiration(self) -> Optional[int]:
        """Epoch after which the transaction is rejected, None when it never expires"""
        return self._expiration

    @property
    def gas_config(self) -> dict:
        """Copy of {"budget", "price", "payment", "owner"}, unset entries are absent"""
        return copy.deepcopy(self._gas_config)

    @property
    def inputs(self) -> List[TransactionInput]:
        return [copy.copy(v) for v in self._inputs]

    @property
    def commands(self) -> List[Command]:
        return copy.deepcopy(self._commands)

    @property
    def gas(self) -> Argument:
        return Argument("GasCoin", NONE())

    @_mutation
    def set_sender(self, sender: str):
        self._sender = sender

    @_mutation
    def set_expiration(self, epoch: Optional[int] = None):
        self._expiration = epoch

    @_mutation
    def set_gas_price(self, price: int):
        self._gas_config["price"] = int(price)

    @_mutation
    def set_gas_budget(self, budget: int):
        self._gas_config["budget"] = int(budget)

    @_mutation
    def set_gas_payment(self, payment: List[dict]):
        """
        :param payment: [{"objectId": "0x..", "version": 1, "digest": "<base58>"}]
        """
        self._gas_config["payment"] = [dict(v) for v in payment]

    @_mutation
    def set_gas_owner(self, owner: str):
        self._gas_config["owner"] = owner

    @_mutation
    def input(self, value=None) -> Argument:
        """
        Add an input and return the argument referring to it.

        ``value`` may be a resolved ``CallArg`` (see ``Inputs``) or a raw value: an int,
        bool, str, bytes or list for pure arguments, or an object id string for objects.
        """
        index = len(self._inputs)
        self._inputs.append(TransactionInput(index, value))
        return Argument("Input", U16(index))

    @_mutation
    def add(self, command: Command) -> TransactionResult:
        self._commands.append(command)
        return TransactionResult(len(self._commands) - 1)

    def _validate(self):
        if not self._sender:
            raise MissingFieldError("sender")
        if not is_valid_sui_address(self._sender):
            raise InvalidInputValueError(f"Invalid sender address {self._sender!r}")
        owner = self._gas_config.get("owner")
        if owner is not None and not is_valid_sui_address(owner):
            raise InvalidInputValueError(f"Invalid gas owner address {owner!r}")
        if self._gas_config.get("budget") is None:
            raise MissingFieldError("gas budget")
        if self._gas_config.get("payment") is None:
            raise MissingFieldError("gas payment")

    @staticmethod
    def _expect_provider(provider):
        if provider is None:
            raise MissingProviderError()
        return provider

    async def build(self, provider=None) -> bytes:
        """
        Resolve every input and return the BCS bytes of the transaction data.

        :param provider: ``Provider`` used to fetch the gas price, Move function
            signatures and objects. Only required when something is left to resolve.
        """
        if self._building:
            raise BuildInProgressError()
        self._building = True
        try:
            return await self._build(provider)
        finally:
            self._building = False

    async def _build(self, provider) -> bytes:
        self._validate()

        if self._gas_config.get("price") is None:
            self._gas_config["price"] = int(await self._expect_provider(provider).get_reference_gas_price())
            logger.debug("Using reference gas price %d", self._gas_config["price"])

        resolver = ArgumentResolver(self._inputs, provider)
        resolver.resolve_well_known(self._commands)
        if any(resolver.needs_resolution(v.value) for v in self._commands if v.key == "MoveCall"):
            self._expect_provider(provider)
            await resolver.resolve_move_calls(self._commands)
        if len(resolver.objects):
            self._expect_provider(provider)
            await resolver.resolve_objects()

        for tx_input in self._inputs:
            if not tx_input.resolved:
                raise DanglingInputError(tx_input.index)

        tx_bytes = self.get_transaction_data().encode
        logger.info("Built transaction with %d inputs and %d commands, %d bytes",
                    len(self._inputs), len(self._commands), len(tx_bytes))
        return tx_bytes

    def get_transaction_data(self) -> TransactionData:
        """Transaction data of a builder whose inputs are all resolved"""
        self._validate()
        if self._gas_config.get("price") is None:
            raise MissingFieldError("gas price")
        for tx_input in self._inputs:
            if not tx_input.resolved:
                raise DanglingInputError(tx_input.index)

        if self._expiration is None:
            expiration = TransactionExpiration("NONE", NONE())
        else:
            expiration = TransactionExpiration("Epoch", EpochId(self._expiration))
        programmable_transaction = ProgrammableTransaction(
            [v.value for v in self._inputs],
            list(self._commands)
        )
        gas_data = GasData(
            [ObjectRef.from_json(v) for v in self._gas_config["payment"]],
            SuiAddress(self._gas_config.get("owner") or self._sender),
            U64(self._gas_config["price"]),
            U64(self._gas_config["budget"])
        )
        return TransactionData("V1", TransactionDataV1(
            TransactionKind("ProgrammableTransaction", programmable_transaction),
            SuiAddress(self._sender),
            gas_data,
            expiration
        ))

    def serialize(self) -> str:
        """
        Serialize the builder to text that ``from_serialized`` restores, so that a
        partially built transaction can be completed somewhere else (e.g. a wallet
        filling in gas). Every input must already be resolved.
        """
        return snapshot.dumps({
            "sender": self._sender,
            "expiration": self._expiration,
            "inputs": self._inputs,
            "commands": self._commands,
            "gas_config": self._gas_config,
        })
