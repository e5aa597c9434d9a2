"""Sorted tag-to-member table used to locate SEQUENCE components by tag."""

from __future__ import annotations

import bisect
from dataclasses import dataclass

from asnber.tlv import tag_class, tag_value


@dataclass(frozen=True, order=False)
class TagToMember:
    """One entry of a tag table: a tag and the index of the member bearing it."""

    tag: int
    member_index: int

    def sort_key(self):
        """Canonical order: tag class, then tag number, then member index."""
        return (int(tag_class(self.tag)), tag_value(self.tag), self.member_index)


class TagMap:
    """Tags of a constructed type's members, kept in canonical order.

    Several members may share a tag; lookups then choose among them by
    member index.
    """

    def __init__(self, entries=()):
        items = []
        for entry in entries:
            if not isinstance(entry, TagToMember):
                tag, index = entry
                entry = TagToMember(tag, index)
            if entry.tag < 0 or entry.member_index < 0:
                raise ValueError("tags and member indices must not be negative")
            items.append(entry)
        items.sort(key=TagToMember.sort_key)
        self._entries = tuple(items)
        self._keys = [(int(tag_class(e.tag)), tag_value(e.tag)) for e in items]

    def __len__(self):
        return len(self._entries)

    def __iter__(self):
        return iter(self._entries)

    def __contains__(self, tag):
        key = (int(tag_class(tag)), tag_value(tag))
        pos = bisect.bisect_left(self._keys, key)
        return pos < len(self._keys) and self._keys[pos] == key

    def _span(self, tag):
        key = (int(tag_class(tag)), tag_value(tag))
        low = bisect.bisect_left(self._keys, key)
        high = bisect.bisect_right(self._keys, key)
        return self._entries[low:high]

    def find(self, tag, first, last):
        """Return the member index for ``tag`` within ``first..last``, or None.

        Among the members carrying the tag whose index lies in the range,
        the one with the highest index is chosen.
        """
        best = None
        for entry in self._span(tag):
            if entry.member_index > last:
                break
            if entry.member_index < first:
                continue
            best = entry.member_index
        return best