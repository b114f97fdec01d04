"""
Recency Ordering Module

This module implements the ordering structure behind the LRU cache: a
doubly linked list of entries kept in recency order.

Recency Concept:
- The most recently used entry sits at the FRONT (head) of the list
- The least recently used entry sits at the BACK (tail)
- On access (get/set), an entry is moved to the front
- On eviction, the entry at the back is removed

The list itself is not thread-safe; LRUCache guards it with its lock.
"""

from typing import Any, Hashable, Iterator, Optional


class Entry:
    """
    A single cached value and its position in the recency list.

    Attributes:
        key: The key the entry is indexed under
        value: The opaque payload
        expires_at: Clock reading at which the entry becomes absent
                    (None = never expires)
    """

    __slots__ = ("key", "value", "expires_at", "prev", "next")

    def __init__(self, key: Hashable, value: Any, expires_at: Optional[float] = None):
        self.key = key
        self.value = value
        self.expires_at = expires_at
        self.prev: Optional["Entry"] = None
        self.next: Optional["Entry"] = None

    def is_expired(self, now: float) -> bool:
        """Check whether the entry is logically absent at time `now`."""
        return self.expires_at is not None and self.expires_at <= now

    def __repr__(self) -> str:
        return f"Entry(key={self.key!r}, expires_at={self.expires_at!r})"


class RecencyList:
    """
    Doubly linked list of Entry nodes with O(1) reordering.

    A sentinel node closes the list into a ring, so the head is
    `sentinel.next` and the tail is `sentinel.prev`. An empty list is the
    sentinel pointing at itself.

    Usage:
        order = RecencyList()
        order.push_front(Entry("a", 1))
        order.move_to_front(entry)
        victim = order.back()
    """

    def __init__(self):
        self._root = Entry(None, None)
        self._root.prev = self._root
        self._root.next = self._root
        self._len = 0

    def __len__(self) -> int:
        return self._len

    def __iter__(self) -> Iterator[Entry]:
        """Iterate entries from most to least recently used."""
        node = self._root.next
        while node is not self._root:
            yield node
            node = node.next

    def front(self) -> Optional[Entry]:
        """Return the most recently used entry, or None if empty."""
        if self._len == 0:
            return None
        return self._root.next

    def back(self) -> Optional[Entry]:
        """Return the least recently used entry, or None if empty."""
        if self._len == 0:
            return None
        return self._root.prev

    def push_front(self, entry: Entry) -> Entry:
        """
        Insert a detached entry at the front of the list.

        Args:
            entry: An entry that is not currently linked into any list

        Returns:
            The inserted entry
        """
        self._link_after(self._root, entry)
        self._len += 1
        return entry

    def move_to_front(self, entry: Entry) -> None:
        """Move an entry of this list to the front."""
        if self._root.next is entry:
            return
        self._unlink(entry)
        self._link_after(self._root, entry)

    def remove(self, entry: Entry) -> Entry:
        """
        Detach an entry from the list.

        Args:
            entry: An entry currently linked into this list

        Returns:
            The detached entry
        """
        self._unlink(entry)
        entry.prev = None
        entry.next = None
        self._len -= 1
        return entry

    def clear(self) -> None:
        """Drop every entry."""
        node = self._root.next
        while node is not self._root:
            following = node.next
            node.prev = None
            node.next = None
            node = following
        self._root.prev = self._root
        self._root.next = self._root
        self._len = 0

    @staticmethod
    def _link_after(anchor: Entry, entry: Entry) -> None:
        entry.prev = anchor
        entry.next = anchor.next
        anchor.next.prev = entry
        anchor.next = entry

    @staticmethod
    def _unlink(entry: Entry) -> None:
        entry.prev.next = entry.next
        entry.next.prev = entry.prev
