# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Genro-NodeTree - Mutable trees of tagged nodes.

A lightweight, zero-dependency library providing a generic node graph
for the Genro ecosystem: every node carries ordered tags, an optional
payload and an ordered list of children, and can be searched by tag and
converted to and from Data/Tags/Children documents.
"""

__version__ = "0.1.0"

from .exceptions import (
    DataTypeError,
    DeserializationError,
    NodeTreeError,
)
from .node import NO_DATA, ROOT_TAG, Node, new_node
from .serialization import as_dict, load_dict, load_json, to_json

__all__ = [
    # Core
    "Node",
    "new_node",
    "NO_DATA",
    "ROOT_TAG",
    # Serialization
    "as_dict",
    "load_dict",
    "to_json",
    "load_json",
    # Exceptions
    "NodeTreeError",
    "DataTypeError",
    "DeserializationError",
]
