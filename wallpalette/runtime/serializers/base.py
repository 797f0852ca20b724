# Copyright (c) 2026 Wallpalette
# SPDX-License-Identifier: MIT

"""Base types for serializers."""

from enum import Enum


class SerializerFormat(Enum):
    """Output format for text serializers."""

    JSON = "json"
    JSON_PRETTY = "json_pretty"
