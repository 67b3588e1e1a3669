# Copyright (c) OmniBTC
# SPDX-License-Identifier: GPL-3.0

__version__ = "0.1.0"
