# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""NodeTree exceptions."""

from __future__ import annotations


class NodeTreeError(Exception):
    """Base exception for NodeTree errors."""

    pass


class DataTypeError(NodeTreeError, TypeError):
    """Raised when a Node is assigned as the payload of another Node."""

    pass


class DeserializationError(NodeTreeError, ValueError):
    """Raised when a document cannot be loaded into a Node."""

    pass
