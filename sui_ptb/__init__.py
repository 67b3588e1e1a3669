# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

from .bcs import *
from .commands import Commands, TransactionResult
from .config import NetworkConfig, load_network_config
from .exceptions import *
from .inputs import Inputs, TransactionInput
from .resolver import DEFAULT_SHARED_OBJECT_MUTABLE
from .serializer import encode_pure, format_type_tag, parse_type_tag
from .sui_client import ApiError, Provider, SuiClient
from .transaction import TransactionBuilder
from .version import __version__
