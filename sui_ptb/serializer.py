# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from __future__ import annotations

from typing import List, Optional

from .bcs import (
    U8, U16, U32, U64, U128, U256, Bool, NONE, Identifier, StructTag, SuiAddress, TypeTag, uleb128
)
from .exceptions import InvalidInputValueError, UnknownArgumentTypeError
from .utils import is_valid_sui_address, normalize_sui_address

MOVE_STDLIB_ADDRESS = normalize_sui_address("0x1")
SUI_FRAMEWORK_ADDRESS = normalize_sui_address("0x2")

UNSIGNED_TYPES = {
    "u8": U8,
    "u16": U16,
    "u32": U32,
    "u64": U64,
    "u128": U128,
    "u256": U256,
}

PRIMITIVE_TYPE_TAGS = {
    "bool": "Bool",
    "u8": "U8",
    "u16": "U16",
    "u32": "U32",
    "u64": "U64",
    "u128": "U128",
    "u256": "U256",
    "address": "Address",
    "signer": "Signer",
}

PURE_STRUCTS = {
    (MOVE_STDLIB_ADDRESS, "ascii", "String"): "string",
    (MOVE_STDLIB_ADDRESS, "string", "String"): "utf8string",
    (SUI_FRAMEWORK_ADDRESS, "object", "ID"): "address",
}

OPTION_STRUCT = (MOVE_STDLIB_ADDRESS, "option", "Option")


def split_type_args(data: str) -> List[str]:
    """
    "u8, vector<u64>, 0x2::m::S<u8, u16>" -> ["u8", "vector<u64>", "0x2::m::S<u8, u16>"]
    """
    output = []
    depth = 0
    start = 0
    for k, c in enumerate(data):
        if c == "<":
            depth += 1
        elif c == ">":
            depth -= 1
        elif c == "," and depth == 0:
            output.append(data[start:k].strip())
            start = k + 1
    output.append(data[start:].strip())
    return [v for v in output if v]


def parse_type_tag(type_arg: str) -> TypeTag:
    """
    :param type_arg:
        u64
        vector<0x2::coin::Coin<0x2::sui::SUI>>
        Vector<U8>
    :return: TypeTag
    """
    type_arg = type_arg.strip()
    lower = type_arg.lower()
    if lower in PRIMITIVE_TYPE_TAGS:
        return TypeTag(PRIMITIVE_TYPE_TAGS[lower], NONE())
    elif lower.startswith("vector<") and type_arg.endswith(">"):
        return TypeTag("Vector", parse_type_tag(type_arg[7:-1]))

    data = type_arg.split("::", 2)
    if len(data) != 3 or not is_valid_sui_address(data[0]):
        raise ValueError(f"Invalid type tag {type_arg!r}")
    address, module, struct_name = data
    type_arg_index = struct_name.find("<")
    if type_arg_index == -1:
        name = struct_name
        type_params = []
    else:
        if not struct_name.endswith(">"):
            raise ValueError(f"Invalid type tag {type_arg!r}")
        name = struct_name[:type_arg_index]
        type_params = [parse_type_tag(v) for v in split_type_args(struct_name[type_arg_index + 1:-1])]
    return TypeTag("Struct", StructTag(SuiAddress(address), Identifier(module), Identifier(name), type_params))


def format_type_tag(type_tag: TypeTag) -> str:
    if type_tag.key == "Vector":
        return f"vector<{format_type_tag(type_tag.value)}>"
    elif type_tag.key == "Struct":
        struct = type_tag.value
        output = f"{struct.address}::{struct.module}::{struct.name}"
        if struct.type_params:
            output += "<" + ", ".join(format_type_tag(v) for v in struct.type_params) + ">"
        return output
    else:
        return type_tag.key.lower()


def extract_struct_tag(param) -> Optional[dict]:
    """Struct payload of a normalized parameter, looking through references"""
    if not isinstance(param, dict):
        return None
    if "Struct" in param:
        return param["Struct"]
    if "Reference" in param:
        return extract_struct_tag(param["Reference"])
    if "MutableReference" in param:
        return extract_struct_tag(param["MutableReference"])
    return None


def is_type_parameter(param) -> bool:
    if not isinstance(param, dict):
        return False
    if "TypeParameter" in param:
        return True
    if "Reference" in param:
        return is_type_parameter(param["Reference"])
    if "MutableReference" in param:
        return is_type_parameter(param["MutableReference"])
    return False


def _struct_key(struct: dict):
    try:
        address = normalize_sui_address(struct["address"])
    except ValueError:
        return None
    return address, struct["module"], struct["name"]


def is_tx_context(param) -> bool:
    if not isinstance(param, dict) or "Struct" in param:
        return False
    struct = extract_struct_tag(param)
    if struct is None:
        return False
    return _struct_key(struct) == (SUI_FRAMEWORK_ADDRESS, "tx_context", "TxContext")


def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _expect(condition, type_name, value):
    if not condition:
        raise InvalidInputValueError(f"Expect {type_name} value, got {value!r}")


def get_pure_serialization_type(param, value) -> Optional[str]:
    """
    Pure type name of a normalized Move parameter, None when the parameter is not pure.

    :param param: normalized parameter, e.g. "U64", {"Vector": "U8"}, {"Struct": {...}}
    :param value: raw input value, checked against the type; None skips the check
    """
    if isinstance(param, str):
        name = param.lower()
        if name in UNSIGNED_TYPES:
            _expect(value is None or _is_int(value), name, value)
        elif name == "bool":
            _expect(value is None or isinstance(value, bool), name, value)
        elif name == "address":
            _expect(value is None or is_valid_sui_address(value), name, value)
        else:
            raise UnknownArgumentTypeError(param, value)
        return name

    if not isinstance(param, dict):
        return None

    if "Vector" in param:
        if param["Vector"] == "U8" and isinstance(value, (str, bytes)):
            return "vector<u8>"
        _expect(value is None or isinstance(value, list), "vector", value)
        inner = get_pure_serialization_type(param["Vector"], value[0] if value else None)
        if inner is None:
            return None
        return f"vector<{inner}>"

    if "Struct" in param:
        key = _struct_key(param["Struct"])
        if key in PURE_STRUCTS:
            type_name = PURE_STRUCTS[key]
            if type_name == "address":
                _expect(value is None or is_valid_sui_address(value), type_name, value)
            else:
                _expect(value is None or isinstance(value, (str, bytes)), type_name, value)
            return type_name
        if key == OPTION_STRUCT:
            type_arguments = param["Struct"].get("typeArguments", [])
            if len(type_arguments) != 1:
                return None
            inner = get_pure_serialization_type(type_arguments[0], value)
            if inner is None:
                return None
            return f"option<{inner}>"

    return None


def _inner_type(type_name: str, prefix: str) -> Optional[str]:
    if type_name.startswith(prefix + "<") and type_name.endswith(">"):
        return type_name[len(prefix) + 1:-1]
    return None


def encode_pure(type_name: str, value) -> bytes:
    """
    BCS bytes of a raw value for a pure type name.

    :param type_name: bool | u8..u256 | address | string | utf8string | vector<T> | option<T>
    """
    type_name = type_name.strip().lower()
    if type_name in UNSIGNED_TYPES:
        sui_type = UNSIGNED_TYPES[type_name]
        _expect(_is_int(value) and 0 <= value <= sui_type.MAX, type_name, value)
        return sui_type(value).encode
    elif type_name == "bool":
        _expect(isinstance(value, bool), type_name, value)
        return Bool(value).encode
    elif type_name == "address":
        if isinstance(value, bytes):
            _expect(len(value) == 32, type_name, value)
            return SuiAddress(value).encode
        _expect(is_valid_sui_address(value), type_name, value)
        return SuiAddress(value).encode
    elif type_name in ["string", "utf8string"]:
        if isinstance(value, str):
            if type_name == "string":
                _expect(value.isascii(), "ascii string", value)
            value = value.encode()
        _expect(isinstance(value, bytes), type_name, value)
        return uleb128(len(value)) + value

    inner = _inner_type(type_name, "vector")
    if inner is not None:
        if inner == "u8" and isinstance(value, (str, bytes)):
            data = value.encode() if isinstance(value, str) else value
            return uleb128(len(data)) + data
        _expect(isinstance(value, list), type_name, value)
        return uleb128(len(value)) + b"".join(encode_pure(inner, v) for v in value)

    inner = _inner_type(type_name, "option")
    if inner is not None:
        if value is None:
            return bytes([0])
        return bytes([1]) + encode_pure(inner, value)

    raise UnknownArgumentTypeError(type_name, value)
