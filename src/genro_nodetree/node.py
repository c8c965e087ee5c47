# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Node - A mutable tree vertex with tags, payload and owned children.

Each Node owns an ordered list of children and keeps a weak back-reference
to its parent, so the parent link is used for navigation only and never
keeps a parent alive.

Failure reporting:
    - ``set_data`` raises :class:`DataTypeError` when given a Node.
    - Every other invalid request (bad index, unmet insertion precondition,
      detaching a parentless node) returns a sentinel: ``None``, ``-1``
      or ``False``.

Example:
    Building and querying a tree::

        root = new_node()
        html = root.new_child('html')
        body = html.new_child('body', data={'class': 'main'})
        html.index_new_child(-1, 'head')

        root.child_by_tag_deep('body') is body  # True
        body.depth  # 1, the 'root' layer does not count
"""

from __future__ import annotations

import logging
import weakref
from typing import Any, Iterator

from .exceptions import DataTypeError
from .tags import TagsMixin

logger = logging.getLogger(__name__)

ROOT_TAG = 'root'


class _NoData:
    """Marker for a Node without payload, distinct from None."""

    __slots__ = ()

    _instance: _NoData | None = None

    def __new__(cls) -> _NoData:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return 'NO_DATA'

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple:
        return (_NoData, ())


NO_DATA: Any = _NoData()


def _is_node(value: Any) -> bool:
    """True if value is a Node or a weak reference to one."""
    if isinstance(value, weakref.ReferenceType):
        value = value()
    return isinstance(value, Node)


class Node(TagsMixin):
    """A vertex of a tag-addressable tree.

    Each node has:
    - tags: ordered, duplicate-free string labels
    - data: an optional payload of any type except Node
    - parent: the Node whose child list holds this node, or None
    - children: ordered list of owned child Nodes

    The class constructor builds a plain node. Use :func:`new_node` for a
    "root" node and :meth:`new_child` / :meth:`index_new_child` to grow the
    tree.

    Example:
        >>> node = Node('item', data=42)
        >>> node.tags
        ['item']
        >>> node.data
        42
    """

    __slots__ = ('_tags', '_data', '_parent', '_children', '__weakref__')

    def __init__(self, *tags: str, data: Any = NO_DATA) -> None:
        """Initialize a Node.

        Args:
            *tags: Initial tags, duplicates dropped.
            data: Optional payload. Leave as NO_DATA for no payload.

        Raises:
            DataTypeError: If data is a Node.
        """
        self._tags: list[str] = []
        self._data: Any = NO_DATA
        self._parent: weakref.ReferenceType[Node] | None = None
        self._children: list[Node] = []
        self.set_data(data)
        self.add_tag(*tags)

    # ==================== Special Methods ====================

    def __repr__(self) -> str:
        parts = [f"tags={self._tags!r}"]
        if self._data is not NO_DATA:
            parts.append(f"data={self._data!r}")
        if self._children:
            parts.append(f"children={len(self._children)}")
        return f"Node({', '.join(parts)})"

    def __len__(self) -> int:
        """Return the number of direct children."""
        return len(self._children)

    def __bool__(self) -> bool:
        # A childless node is still a node.
        return True

    def __iter__(self) -> Iterator[Node]:
        """Iterate over a snapshot of the direct children."""
        return self.iter_children()

    # ==================== Data ====================

    @property
    def data(self) -> Any:
        """The payload, or NO_DATA if none is set."""
        return self._data

    @property
    def has_data(self) -> bool:
        """True if a payload is set (None counts as a payload)."""
        return self._data is not NO_DATA

    def set_data(self, value: Any) -> None:
        """Assign the payload.

        Nodes belong in the child list, never in the payload slot.
        Passing NO_DATA clears the payload.

        Args:
            value: Any value except a Node or a weak reference to a Node.

        Raises:
            DataTypeError: If value is a Node. The previous payload is kept.
        """
        if _is_node(value):
            raise DataTypeError(
                f"data type of {type(value).__name__} not allowed"
            )
        self._data = value

    def clear_data(self) -> None:
        """Drop the payload."""
        self._data = NO_DATA

    # ==================== Navigation ====================

    @property
    def parent(self) -> Node | None:
        """The parent Node, or None for a free-standing node."""
        if self._parent is None:
            return None
        return self._parent()

    def _set_parent(self, parent: Node | None) -> None:
        self._parent = weakref.ref(parent) if parent is not None else None

    @property
    def root(self) -> Node:
        """The topmost ancestor of this node (self if it has no parent)."""
        top = self
        while top.parent is not None:
            top = top.parent
        return top

    @property
    def depth(self) -> int:
        """Number of parent hops up to the topmost ancestor.

        A topmost ancestor tagged 'root' does not count, so the direct
        children of a root node have depth 0. A node without parent has
        depth 0.
        """
        top = self
        hops = 0
        while top.parent is not None:
            top = top.parent
            hops += 1
        if hops and top.has_tag(ROOT_TAG):
            hops -= 1
        return hops

    @property
    def index(self) -> int:
        """Position of this node among its parent's children, -1 if none."""
        parent = self.parent
        if parent is None:
            return -1
        for i, kid in enumerate(parent._children):
            if kid is self:
                return i
        return -1

    @property
    def children(self) -> list[Node]:
        """Return a snapshot list of the direct children."""
        return list(self._children)

    def iter_children(self) -> Iterator[Node]:
        """Yield the direct children as they were when called."""
        return iter(list(self._children))

    def walk(self) -> Iterator[tuple[Node, int]]:
        """Walk the subtree below this node in pre-order.

        Each child is yielded before its own subtree, and its subtree
        before the next sibling. The level counts hops below this node, so
        direct children have level 1. Each child list is copied when its
        level is entered. An explicit stack is used, so nesting depth is
        not bound by the recursion limit.

        Yields:
            Tuples of (node, level).

        Example:
            >>> for node, level in root.walk():
            ...     print('  ' * level, node.tags)
        """
        stack = [iter(list(self._children))]
        while stack:
            kid = next(stack[-1], None)
            if kid is None:
                stack.pop()
                continue
            yield kid, len(stack)
            if kid._children:
                stack.append(iter(list(kid._children)))

    # ==================== Child Access ====================

    def child(self, index: int) -> Node | None:
        """Return the child at index, or None if out of range.

        Negative indices are out of range.
        """
        if 0 <= index < len(self._children):
            return self._children[index]
        return None

    def child_by_tag(self, *tags: str) -> Node | None:
        """Return the first direct child carrying all the given tags."""
        for kid in self._children:
            if kid.has_tag(*tags):
                return kid
        return None

    def child_by_tag_deep(self, *tags: str) -> Node | None:
        """Return the first descendant carrying all the given tags.

        Depth-first, pre-order: each child is tested before its own
        subtree, and its subtree is searched before the next sibling.
        """
        for node, _ in self.walk():
            if node.has_tag(*tags):
                return node
        return None

    def child_index_by_tag(self, *tags: str) -> int:
        """Return the index of the first direct child with the tags, or -1."""
        for i, kid in enumerate(self._children):
            if kid.has_tag(*tags):
                return i
        return -1

    # ==================== Child Creation ====================

    def _make_child(self, tags: tuple[str, ...], data: Any) -> Node | None:
        """Build an unattached Node, or None if data is rejected."""
        try:
            return Node(*tags, data=data)
        except DataTypeError as e:
            logger.debug(f"Child not created: {e}")
            return None

    def add_child(self, node: Node) -> None:
        """Append node as the last child and set its parent to self.

        Cycles are not checked: attaching an ancestor is the caller's
        responsibility. A node still listed under another parent should be
        detached first.

        Raises:
            TypeError: If node is not a Node.
        """
        if not isinstance(node, Node):
            raise TypeError(f"child must be a Node, not {type(node).__name__}")
        node._set_parent(self)
        self._children.append(node)

    def new_child(self, *tags: str, data: Any = NO_DATA) -> Node | None:
        """Create a Node and append it as the last child.

        Args:
            *tags: Tags for the new child.
            data: Optional payload for the new child.

        Returns:
            The new child, or None if data is a Node. In that case nothing
            is attached.
        """
        child = self._make_child(tags, data)
        if child is not None:
            self.add_child(child)
        return child

    def index_new_child(
        self, idx: int, *tags: str, data: Any = NO_DATA
    ) -> Node | None:
        """Create a Node right after the child at idx (-1 for the front).

        Only defined relative to existing children: a node without
        children rejects every idx. Valid positions are -1 through
        len(self); idx == len(self) appends.

        Args:
            idx: Position the new child follows, or -1.
            *tags: Tags for the new child.
            data: Optional payload for the new child.

        Returns:
            The new child, or None when the node has no children, idx is
            out of range or data is a Node. The child list is left unchanged
            on failure.
        """
        count = len(self._children)
        if count == 0 or idx < -1 or idx > count:
            logger.debug(
                f"Indexed insertion rejected: idx={idx}, children={count}"
            )
            return None
        child = self._make_child(tags, data)
        if child is None:
            return None
        child._set_parent(self)
        self._children.insert(idx + 1, child)
        return child

    # ==================== Child Removal ====================

    def replace_child(self, index: int, node: Node) -> None:
        """Put node in place of the child at index.

        The previous child is released (its parent is cleared) and stays
        usable. Out-of-range indices are ignored.

        Raises:
            TypeError: If node is not a Node.
        """
        if not isinstance(node, Node):
            raise TypeError(f"child must be a Node, not {type(node).__name__}")
        if not 0 <= index < len(self._children):
            logger.debug(f"replace_child ignored: index {index} out of range")
            return
        self._children[index]._set_parent(None)
        self._children[index] = node
        node._set_parent(self)

    def remove_child(self, *indices: int) -> None:
        """Remove the children at the given positions.

        Indices are taken as a set: order and repetitions do not matter and
        out-of-range values are ignored. Removed children have their parent
        cleared; the others keep their relative order.
        """
        if not indices:
            return
        drop = set(indices)
        kept: list[Node] = []
        for i, kid in enumerate(self._children):
            if i in drop:
                kid._set_parent(None)
            else:
                kept.append(kid)
        self._children = kept

    def clear_children(self) -> None:
        """Release every child and empty the child list."""
        for kid in self._children:
            kid._set_parent(None)
        self._children = []

    def detach(self) -> bool:
        """Remove this node from its parent.

        Returns:
            True if the node was removed, False if it has no parent.
        """
        parent = self.parent
        if parent is None:
            logger.debug("detach ignored: node has no parent")
            return False
        idx = self.index
        if idx == -1:
            return False
        parent.remove_child(idx)
        return True

    def destroy(self) -> None:
        """Reset this node and destroy its whole subtree.

        Tags and payload are dropped and every descendant is released and
        reset the same way. The node is also removed from its parent.
        """
        self.detach()
        subtree = [self] + [node for node, _ in self.walk()]
        for node in subtree:
            node._data = NO_DATA
            node._tags = []
            node._children = []
            node._parent = None

    # ==================== Conversion ====================

    def as_dict(self) -> dict[str, Any]:
        """Convert this subtree to a Data/Tags/Children dict (recursive)."""
        from .serialization import as_dict
        return as_dict(self)

    def load_dict(self, source: Any) -> None:
        """Make this node represent the given Data/Tags/Children mapping."""
        from .serialization import load_dict
        load_dict(self, source)

    def to_json(self, **kwargs: Any) -> str:
        """Serialize this subtree to a JSON string."""
        from .serialization import to_json
        return to_json(self, **kwargs)

    def load_json(self, text: str | bytes) -> None:
        """Make this node represent the given JSON document."""
        from .serialization import load_json
        load_json(self, text)

    @classmethod
    def from_dict(cls, source: Any) -> Node:
        """Build a free-standing Node from a Data/Tags/Children mapping."""
        node = cls()
        node.load_dict(source)
        return node

    @classmethod
    def from_json(cls, text: str | bytes) -> Node:
        """Build a free-standing Node from a JSON document."""
        node = cls()
        node.load_json(text)
        return node


def new_node(*tags: str, data: Any = NO_DATA) -> Node | None:
    """Create a "root" Node.

    The node is tagged 'root' followed by the given tags.

    Args:
        *tags: Additional tags.
        data: Optional payload.

    Returns:
        The new Node, or None if data is a Node.

    Example:
        >>> new_node('config', data={'debug': True}).tags
        ['root', 'config']
    """
    try:
        return Node(ROOT_TAG, *tags, data=data)
    except DataTypeError as e:
        logger.debug(f"Node not created: {e}")
        return None
