# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0


class TransactionBuilderError(Exception):
    """Base class for every failure raised while assembling a transaction"""


class MissingFieldError(TransactionBuilderError):
    def __init__(self, field):
        super().__init__(f"Missing transaction {field}")
        self.field = field


class ArgumentCountMismatchError(TransactionBuilderError):
    def __init__(self, target, expected, actual):
        super().__init__(f"Incorrect number of arguments for {target}: expected {expected}, got {actual}")
        self.target = target
        self.expected = expected
        self.actual = actual


class UnknownArgumentTypeError(TransactionBuilderError):
    def __init__(self, param, value):
        super().__init__(f"Unknown call arg type {param!r} for value {value!r}")
        self.param = param
        self.value = value


class InvalidInputValueError(TransactionBuilderError):
    """A raw input value does not have the shape its expected kind requires"""


class ObjectLookupError(TransactionBuilderError):
    def __init__(self, object_id, reason, object_ids=None):
        """
        :param object_id: the object that failed, None when the whole batch failed
        :param object_ids: every object of the failed batch
        """
        target = object_id if object_id is not None else ", ".join(object_ids or [])
        super().__init__(f"Failed to resolve object {target}: {reason}")
        self.object_id = object_id
        self.object_ids = list(object_ids) if object_ids is not None else [object_id]
        self.reason = reason


class DanglingInputError(TransactionBuilderError):
    def __init__(self, index):
        super().__init__(f"Input {index} was never resolved, it is not used by any resolvable command field")
        self.index = index


class SnapshotVersionError(TransactionBuilderError):
    def __init__(self, version):
        super().__init__(f"Unsupported serialized transaction version: {version!r}")
        self.version = version


class SnapshotFormatError(TransactionBuilderError):
    """Serialized transaction text does not match the expected shape"""


class UnresolvedInputError(TransactionBuilderError):
    def __init__(self, index):
        super().__init__(f"All input values must be resolved before serializing, input {index} is not")
        self.index = index


class ResultMutationError(TransactionBuilderError, TypeError):
    def __init__(self):
        super().__init__("Transaction results are read-only references and do not support assignment")


class BuildInProgressError(TransactionBuilderError):
    def __init__(self):
        super().__init__("Transaction is being built, it cannot be modified or built again until the build finishes")


class MissingProviderError(TransactionBuilderError):
    def __init__(self):
        super().__init__("No provider passed to build, but transaction data was not sufficient to build offline")


class ConfigError(TransactionBuilderError):
    """Project configuration is missing or malformed"""
