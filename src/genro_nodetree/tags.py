# Copyright 2025 Softwell S.r.l. - Genropy Team
# SPDX-License-Identifier: Apache-2.0

"""Ordered tag store mixed into Node."""

from __future__ import annotations


class TagsMixin:
    """Ordered, duplicate-free set of string tags.

    The host class must provide a ``_tags`` list. Insertion order is kept
    and visible through :attr:`tags`.

    Example:
        >>> node = Node('a')
        >>> node.add_tag('b', 'a', 'c')
        >>> node.tags
        ['a', 'b', 'c']
        >>> node.has_tag('a', 'c')
        True
    """

    __slots__ = ()

    _tags: list[str]

    @property
    def tags(self) -> list[str]:
        """Return a copy of the tags in insertion order."""
        return list(self._tags)

    def has_tag(self, *tags: str) -> bool:
        """True if every given tag is present (True when called without tags)."""
        return all(tag in self._tags for tag in tags)

    def add_tag(self, *tags: str) -> None:
        """Append the given tags, skipping the ones already present."""
        for tag in tags:
            if tag not in self._tags:
                self._tags.append(tag)

    def remove_tag(self, *tags: str) -> None:
        """Remove the given tags, keeping the order of the others."""
        drop = set(tags)
        self._tags = [tag for tag in self._tags if tag not in drop]

    def clear_tags(self) -> None:
        """Remove all tags."""
        self._tags = []
