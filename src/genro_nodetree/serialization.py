# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Conversion between Node trees and Data/Tags/Children documents.

Every node maps to a dict with at most three keys:

- ``Data``: the payload, present only when the node has one
- ``Tags``: list of tags, present only when not empty
- ``Children``: list of child dicts in order, present only when not empty

Example:
    >>> root = new_node()
    >>> root.new_child('item', data=1)
    >>> as_dict(root)
    {'Tags': ['root'], 'Children': [{'Data': 1, 'Tags': ['item']}]}

Loading works the other way round: the document is built into a scratch
child of the target, which is then unwrapped so that the target itself
represents the top-level mapping.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from typing import Any

from .exceptions import DeserializationError, NodeTreeError
from .node import Node

logger = logging.getLogger(__name__)

DATA_KEY = 'Data'
TAGS_KEY = 'Tags'
CHILDREN_KEY = 'Children'


def _level_dict(node: Node) -> dict[str, Any]:
    """Return Data and Tags of a single node."""
    result: dict[str, Any] = {}
    if node.has_data:
        result[DATA_KEY] = node.data
    tags = node.tags
    if tags:
        result[TAGS_KEY] = tags
    return result


def as_dict(node: Node) -> dict[str, Any]:
    """Convert a subtree to nested Data/Tags/Children dicts.

    Levels are visited with an explicit stack, so any nesting depth works.

    Args:
        node: Top of the subtree.

    Returns:
        Dict for node, with its children converted in order.
    """
    result = _level_dict(node)
    stack = [(node, result)]
    while stack:
        current, out = stack.pop()
        if not len(current):
            continue
        kids: list[dict[str, Any]] = []
        out[CHILDREN_KEY] = kids
        for kid in current.iter_children():
            kid_dict = _level_dict(kid)
            kids.append(kid_dict)
            stack.append((kid, kid_dict))
    return result


def _fill(node: Node, source: Any, path: str) -> list[tuple[Node, Any, str]]:
    """Populate node from source: payload, then tags, then children.

    Args:
        node: Empty node to fill.
        source: Mapping for this level.
        path: Positional path of this level, for error messages.

    Returns:
        (child, mapping, path) for every child created, in order.

    Raises:
        DeserializationError: If source is not a valid node mapping.
        DataTypeError: If a payload is a Node.
    """
    where = path or 'document'
    if not isinstance(source, Mapping):
        raise DeserializationError(
            f"{where}: expected a mapping, got {type(source).__name__}"
        )

    if DATA_KEY in source:
        node.set_data(source[DATA_KEY])

    tags = source.get(TAGS_KEY)
    if tags is not None:
        if not isinstance(tags, (list, tuple)):
            raise DeserializationError(
                f"{where}: '{TAGS_KEY}' must be a list, got {type(tags).__name__}"
            )
        for tag in tags:
            if not isinstance(tag, str):
                raise DeserializationError(
                    f"{where}: tags must be strings, got {type(tag).__name__}"
                )
        node.add_tag(*tags)

    children = source.get(CHILDREN_KEY)
    if children is None:
        return []
    if not isinstance(children, (list, tuple)):
        raise DeserializationError(
            f"{where}: '{CHILDREN_KEY}' must be a list, "
            f"got {type(children).__name__}"
        )
    return [
        (node.new_child(), entry, f"{path}.#{i}" if path else f"#{i}")
        for i, entry in enumerate(children)
    ]


def _build(node: Node, source: Any) -> None:
    """Populate node and its descendants from source, in pre-order."""
    stack = [(node, source, '')]
    while stack:
        pending = _fill(*stack.pop())
        stack.extend(reversed(pending))


def _unwrap(target: Node, scratch: Node) -> None:
    """Move data, tags and children of scratch onto target, then drop it."""
    kids = scratch.children
    scratch.clear_children()
    # Releases the previous children of target, scratch included.
    target.clear_children()
    target.set_data(scratch.data)
    target.clear_tags()
    target.add_tag(*scratch.tags)
    for kid in kids:
        target.add_child(kid)
    scratch.destroy()


def load_dict(node: Node, source: Any) -> None:
    """Replace data, tags and children of node with those in source.

    Args:
        node: Target node. Its parent link is kept.
        source: Data/Tags/Children mapping, nested through Children.

    Raises:
        DeserializationError: If source is malformed.
        DataTypeError: If a payload in source is a Node.

    On error node is left as it was.
    """
    scratch = node.new_child()
    try:
        _build(scratch, source)
    except NodeTreeError as e:
        logger.debug(f"Loading aborted: {e}")
        scratch.detach()
        raise
    _unwrap(node, scratch)


def to_json(node: Node, **kwargs: Any) -> str:
    """Serialize a subtree to JSON.

    Args:
        node: Top of the subtree.
        **kwargs: Passed to json.dumps (indent, sort_keys, ...).

    Unlike as_dict, nesting depth is bound by the json module's
    recursion limit.

    Raises:
        TypeError: If a payload is not JSON serializable.
    """
    return json.dumps(as_dict(node), **kwargs)


def load_json(node: Node, text: str | bytes) -> None:
    """Replace data, tags and children of node with a JSON document.

    Raises:
        DeserializationError: If text is not valid JSON or not a valid
            node document.
    """
    try:
        source = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Invalid JSON document: {e}")
        raise DeserializationError(f"invalid JSON document: {e}") from e
    load_dict(node, source)
