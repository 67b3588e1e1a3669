# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

SUI_ADDRESS_LENGTH = 32


def padding_to_bytes(data: str, padding="right", length=32) -> str:
    if data[:2] == "0x":
        data = data[2:]
    padding_length = length * 2 - len(data)
    if padding == "right":
        return "0x" + data + "0" * padding_length
    else:
        return "0x" + "0" * padding_length + data


def judge_hex_str(data: str):
    flag = True
    if "0x" == data[:2]:
        data = data[2:]
    for k in data:
        if "0" <= k <= "9" or "a" <= k <= "f" or "A" <= k <= "F":
            continue
        flag = False
    return flag


def is_valid_sui_address(data) -> bool:
    if not isinstance(data, str) or data[:2] != "0x":
        return False
    return 0 < len(data) - 2 <= SUI_ADDRESS_LENGTH * 2 and judge_hex_str(data)


def normalize_sui_address(data: str) -> str:
    """
    0x2 -> 0x0000000000000000000000000000000000000000000000000000000000000002
    """
    if not is_valid_sui_address(data):
        raise ValueError(f"Invalid Sui address {data!r}")
    return padding_to_bytes(data, padding="left", length=SUI_ADDRESS_LENGTH).lower()


normalize_sui_object_id = normalize_sui_address


class WellKnownEncoding:
    """Expected argument kind of a command field that is known without a signature lookup"""
    kind = None
    is_array = False


class PureEncoding(WellKnownEncoding):
    kind = "pure"

    def __init__(self, type_name: str):
        self.type = type_name

    def __repr__(self):
        return f"PureEncoding({self.type!r})"


class ObjectEncoding(WellKnownEncoding):
    kind = "object"

    def __repr__(self):
        return "ObjectEncoding()"


class ArrayEncoding(WellKnownEncoding):
    is_array = True

    def __init__(self, element: WellKnownEncoding):
        self.element = element
        self.kind = element.kind

    def __repr__(self):
        return f"ArrayEncoding({self.element!r})"


def array_of(element: WellKnownEncoding) -> ArrayEncoding:
    return ArrayEncoding(element)
