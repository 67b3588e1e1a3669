# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0
"""
Text form of a transaction builder, so a partially built transaction can be
handed to another process and finished there.

    {
        "version": 1,
        "sender": "0x..",
        "expiration": null | {"Epoch": 10},
        "inputs": [{"kind": "Input", "index": 0, "value": {"Pure": "<base64>"}}],
        "commands": [{"kind": "SplitCoins", "coin": {"kind": "GasCoin"}, "amounts": [...]}],
        "gasConfig": {"budget": "1000", "price": "1", "payment": [...], "owner": "0x.."}
    }
"""

from __future__ import annotations

import base64
import binascii
import json
from typing import List

import base58

from .bcs import MAX_U16, MAX_U64, U16, Argument, CallArg, Command, NestedResult, NONE
from .commands import Commands
from .exceptions import SnapshotFormatError, SnapshotVersionError, UnresolvedInputError
from .inputs import Inputs, TransactionInput
from .serializer import format_type_tag
from .utils import is_valid_sui_address

SNAPSHOT_VERSION = 1


def _b64encode(data: bytes) -> str:
    return base64.b64encode(data).decode()


def _b64decode(data, path: str) -> bytes:
    if not isinstance(data, str):
        raise SnapshotFormatError(f"{path}: expect base64 string, got {data!r}")
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise SnapshotFormatError(f"{path}: invalid base64 {data!r}")


def _expect(condition, path: str, message: str):
    if not condition:
        raise SnapshotFormatError(f"{path}: {message}")


def _expect_dict(data, path: str, *keys) -> dict:
    _expect(isinstance(data, dict), path, f"expect object, got {data!r}")
    for key in keys:
        _expect(key in data, path, f"missing {key}")
    return data


def _expect_list(data, path: str) -> list:
    _expect(isinstance(data, list), path, f"expect array, got {data!r}")
    return data


def _expect_int(data, path: str, maximum: int = MAX_U64) -> int:
    _expect(type(data) is int and 0 <= data <= maximum, path,
            f"expect integer between 0 and {maximum}, got {data!r}")
    return data


def _expect_digest(data, path: str) -> str:
    try:
        valid = isinstance(data, str) and len(base58.b58decode(data)) == 32
    except ValueError:
        valid = False
    _expect(valid, path, f"invalid digest {data!r}")
    return data


def _expect_address(data, path: str) -> str:
    _expect(is_valid_sui_address(data), path, f"expect address, got {data!r}")
    return data


def _expect_bigint(data, path: str) -> int:
    _expect(isinstance(data, str) and data.isascii() and data.isdigit() and int(data) <= MAX_U64, path,
            f"expect integer string, got {data!r}")
    return int(data)


# Arguments

def argument_to_json(argument: Argument) -> dict:
    if argument.kind == "GasCoin":
        return {"kind": "GasCoin"}
    elif argument.kind == "NestedResult":
        return {"kind": "NestedResult", "index": argument.index, "resultIndex": argument.result_index}
    return {"kind": argument.kind, "index": argument.index}


def argument_from_json(data, path: str = "argument") -> Argument:
    data = _expect_dict(data, path, "kind")
    kind = data["kind"]
    if kind == "GasCoin":
        return Argument("GasCoin", NONE())
    elif kind in ["Input", "Result"]:
        return Argument(kind, U16(_expect_int(data.get("index"), f"{path}.index", MAX_U16)))
    elif kind == "NestedResult":
        return Argument("NestedResult", NestedResult(
            U16(_expect_int(data.get("index"), f"{path}.index", MAX_U16)),
            U16(_expect_int(data.get("resultIndex"), f"{path}.resultIndex", MAX_U16))
        ))
    raise SnapshotFormatError(f"{path}: unknown argument kind {kind!r}")


def _arguments_from_json(data, path: str) -> List[Argument]:
    return [argument_from_json(v, f"{path}[{k}]") for k, v in enumerate(_expect_list(data, path))]


# Call args

def call_arg_to_json(call_arg: CallArg) -> dict:
    if call_arg.key == "Pure":
        return {"Pure": _b64encode(call_arg.value.data)}
    object_arg = call_arg.value
    if object_arg.key == "ImmOrOwnedObject":
        return {"Object": {"ImmOrOwned": object_arg.value.to_json()}}
    shared = object_arg.value
    return {"Object": {"Shared": {
        "objectId": str(shared.object_id),
        "initialSharedVersion": shared.initial_shared_version.v0,
        "mutable": shared.mutable.v0,
    }}}


def call_arg_from_json(data, path: str = "value") -> CallArg:
    _expect(isinstance(data, dict) and len(data) == 1, path, f"expect resolved call arg, got {data!r}")
    if "Pure" in data:
        return Inputs.pure_bytes(_b64decode(data["Pure"], f"{path}.Pure"))

    object_arg = _expect_dict(data.get("Object"), f"{path}.Object")
    if "ImmOrOwned" in object_arg:
        ref = _expect_dict(object_arg["ImmOrOwned"], f"{path}.Object.ImmOrOwned", "objectId", "version", "digest")
        _expect_address(ref["objectId"], f"{path}.Object.ImmOrOwned.objectId")
        _expect_int(ref["version"], f"{path}.Object.ImmOrOwned.version")
        _expect_digest(ref["digest"], f"{path}.Object.ImmOrOwned.digest")
        return Inputs.object_ref(ref)
    elif "Shared" in object_arg:
        shared = _expect_dict(object_arg["Shared"], f"{path}.Object.Shared",
                              "objectId", "initialSharedVersion", "mutable")
        _expect(isinstance(shared["mutable"], bool), f"{path}.Object.Shared.mutable", "expect boolean")
        return Inputs.shared_object_ref(
            _expect_address(shared["objectId"], f"{path}.Object.Shared.objectId"),
            _expect_int(shared["initialSharedVersion"], f"{path}.Object.Shared.initialSharedVersion"),
            shared["mutable"]
        )
    raise SnapshotFormatError(f"{path}.Object: unknown object arg {object_arg!r}")


def input_to_json(tx_input: TransactionInput) -> dict:
    if not tx_input.resolved:
        raise UnresolvedInputError(tx_input.index)
    return {"kind": "Input", "index": tx_input.index, "value": call_arg_to_json(tx_input.value)}


def input_from_json(data, index: int) -> TransactionInput:
    path = f"inputs[{index}]"
    data = _expect_dict(data, path, "index", "value")
    _expect(data.get("kind", "Input") == "Input", path, f"unknown input kind {data.get('kind')!r}")
    _expect(data["index"] == index, f"{path}.index", f"expect {index}, got {data['index']!r}")
    return TransactionInput(index, call_arg_from_json(data["value"], f"{path}.value"))


# Commands

def command_to_json(command: Command) -> dict:
    data = command.value
    if command.key == "MoveCall":
        return {
            "kind": "MoveCall",
            "target": data.target,
            "typeArguments": [format_type_tag(v) for v in data.type_arguments],
            "arguments": [argument_to_json(v) for v in data.arguments],
        }
    elif command.key == "TransferObjects":
        return {
            "kind": "TransferObjects",
            "objects": [argument_to_json(v) for v in data.objects],
            "address": argument_to_json(data.address),
        }
    elif command.key == "SplitCoins":
        return {
            "kind": "SplitCoins",
            "coin": argument_to_json(data.coin),
            "amounts": [argument_to_json(v) for v in data.amounts],
        }
    elif command.key == "MergeCoins":
        return {
            "kind": "MergeCoins",
            "destination": argument_to_json(data.destination),
            "sources": [argument_to_json(v) for v in data.sources],
        }
    elif command.key == "MakeMoveVec":
        return {
            "kind": "MakeMoveVec",
            "type": format_type_tag(data.type_tag.value) if data.type_tag.key == "Some" else None,
            "objects": [argument_to_json(v) for v in data.objects],
        }
    elif command.key == "Publish":
        return {
            "kind": "Publish",
            "modules": [_b64encode(bytes(v.v0 for v in module)) for module in data.modules],
            "dependencies": [str(v) for v in data.dependencies],
        }
    else:
        return {
            "kind": "Upgrade",
            "modules": [_b64encode(bytes(v.v0 for v in module)) for module in data.modules],
            "dependencies": [str(v) for v in data.dependencies],
            "packageId": str(data.package_id),
            "ticket": argument_to_json(data.ticket),
        }


def _modules_from_json(data, path: str) -> List[bytes]:
    return [_b64decode(v, f"{path}[{k}]") for k, v in enumerate(_expect_list(data, path))]


def _addresses_from_json(data, path: str) -> List[str]:
    return [_expect_address(v, f"{path}[{k}]") for k, v in enumerate(_expect_list(data, path))]


def command_from_json(data, index: int) -> Command:
    path = f"commands[{index}]"
    data = _expect_dict(data, path, "kind")
    kind = data["kind"]
    try:
        if kind == "MoveCall":
            _expect_dict(data, path, "target", "arguments")
            type_arguments = _expect_list(data.get("typeArguments", []), f"{path}.typeArguments")
            _expect(all(isinstance(v, str) for v in type_arguments), f"{path}.typeArguments", "expect strings")
            _expect(isinstance(data["target"], str), f"{path}.target", "expect string")
            return Commands.move_call(
                data["target"],
                _arguments_from_json(data["arguments"], f"{path}.arguments"),
                type_arguments
            )
        elif kind == "TransferObjects":
            _expect_dict(data, path, "objects", "address")
            return Commands.transfer_objects(
                _arguments_from_json(data["objects"], f"{path}.objects"),
                argument_from_json(data["address"], f"{path}.address")
            )
        elif kind == "SplitCoins":
            _expect_dict(data, path, "coin", "amounts")
            return Commands.split_coins(
                argument_from_json(data["coin"], f"{path}.coin"),
                _arguments_from_json(data["amounts"], f"{path}.amounts")
            )
        elif kind == "MergeCoins":
            _expect_dict(data, path, "destination", "sources")
            return Commands.merge_coins(
                argument_from_json(data["destination"], f"{path}.destination"),
                _arguments_from_json(data["sources"], f"{path}.sources")
            )
        elif kind == "MakeMoveVec":
            _expect_dict(data, path, "objects")
            type_tag = data.get("type")
            _expect(type_tag is None or isinstance(type_tag, str), f"{path}.type", "expect string or null")
            return Commands.make_move_vec(_arguments_from_json(data["objects"], f"{path}.objects"), type_tag)
        elif kind == "Publish":
            _expect_dict(data, path, "modules", "dependencies")
            return Commands.publish(
                _modules_from_json(data["modules"], f"{path}.modules"),
                _addresses_from_json(data["dependencies"], f"{path}.dependencies")
            )
        elif kind == "Upgrade":
            _expect_dict(data, path, "modules", "dependencies", "packageId", "ticket")
            return Commands.upgrade(
                _modules_from_json(data["modules"], f"{path}.modules"),
                _addresses_from_json(data["dependencies"], f"{path}.dependencies"),
                _expect_address(data["packageId"], f"{path}.packageId"),
                argument_from_json(data["ticket"], f"{path}.ticket")
            )
    except ValueError as e:
        raise SnapshotFormatError(f"{path}: {e}")
    raise SnapshotFormatError(f"{path}: unknown command kind {kind!r}")


# Gas config

def gas_config_to_json(gas_config: dict) -> dict:
    output = {}
    if gas_config.get("budget") is not None:
        output["budget"] = str(gas_config["budget"])
    if gas_config.get("price") is not None:
        output["price"] = str(gas_config["price"])
    if gas_config.get("payment") is not None:
        output["payment"] = [dict(v) for v in gas_config["payment"]]
    if gas_config.get("owner") is not None:
        output["owner"] = gas_config["owner"]
    return output


def gas_config_from_json(data) -> dict:
    data = _expect_dict(data, "gasConfig")
    output = {}
    if data.get("budget") is not None:
        output["budget"] = _expect_bigint(data["budget"], "gasConfig.budget")
    if data.get("price") is not None:
        output["price"] = _expect_bigint(data["price"], "gasConfig.price")
    if data.get("payment") is not None:
        payment = []
        for k, ref in enumerate(_expect_list(data["payment"], "gasConfig.payment")):
            path = f"gasConfig.payment[{k}]"
            ref = _expect_dict(ref, path, "objectId", "version", "digest")
            _expect_address(ref["objectId"], f"{path}.objectId")
            # Node responses carry versions as decimal strings.
            if isinstance(ref["version"], str):
                _expect_bigint(ref["version"], f"{path}.version")
            else:
                _expect_int(ref["version"], f"{path}.version")
            _expect_digest(ref["digest"], f"{path}.digest")
            payment.append({"objectId": ref["objectId"], "version": ref["version"], "digest": ref["digest"]})
        output["payment"] = payment
    if data.get("owner") is not None:
        output["owner"] = _expect_address(data["owner"], "gasConfig.owner")
    return output


# Whole builder

def dumps(state: dict) -> str:
    """
    :param state: {"sender", "expiration", "inputs", "commands", "gas_config"} of a builder
    """
    inputs = [input_to_json(v) for v in state["inputs"]]
    expiration = state["expiration"]
    data = {
        "version": SNAPSHOT_VERSION,
        "sender": state["sender"],
        "expiration": None if expiration is None else {"Epoch": expiration},
        "inputs": inputs,
        "commands": [command_to_json(v) for v in state["commands"]],
        "gasConfig": gas_config_to_json(state["gas_config"]),
    }
    return json.dumps(data)


def loads(serialized: str) -> dict:
    if not isinstance(serialized, str) or not serialized.lstrip().startswith("{"):
        raise SnapshotFormatError("Only serialized transaction text is supported, not transaction bytes")
    try:
        data = json.loads(serialized)
    except json.JSONDecodeError as e:
        raise SnapshotFormatError(f"Invalid serialized transaction: {e}")

    data = _expect_dict(data, "transaction", "version")
    if type(data["version"]) is not int or data["version"] != SNAPSHOT_VERSION:
        raise SnapshotVersionError(data["version"])

    sender = data.get("sender")
    if sender is not None:
        _expect_address(sender, "sender")

    expiration = data.get("expiration")
    if expiration is not None:
        expiration = _expect_int(_expect_dict(expiration, "expiration", "Epoch")["Epoch"], "expiration.Epoch")

    return {
        "sender": sender,
        "expiration": expiration,
        "inputs": [input_from_json(v, k) for k, v in enumerate(_expect_list(data.get("inputs"), "inputs"))],
        "commands": [command_from_json(v, k) for k, v in enumerate(_expect_list(data.get("commands"), "commands"))],
        "gas_config": gas_config_from_json(data.get("gasConfig", {})),
    }
