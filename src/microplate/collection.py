"""
Typed set keyed by canonical string identity.

``UniqueTypedCollection`` stores at most one member per ``str(member)`` key and
enforces that every member is an instance of a single declared type. Lookups,
removals and retains accept either a member or its raw string key.
"""

import logging
from typing import Any, Generic, Iterable, Iterator, TypeVar

from microplate.config import ERROR_WRONG_TYPE
from microplate.exceptions import InvalidTypeError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class UniqueTypedCollection(Generic[T]):
    """
    Set of members of one declared type, keyed by ``str(member)``.

    All bulk operations type-check every element before mutating, so a failed
    call leaves the collection untouched. Duplicate keys are resolved silently:
    the first member stored under a key is kept.
    """

    def __init__(self, item_type: type):
        if not isinstance(item_type, type):
            raise InvalidTypeError(f"The collection type must be a class: {item_type!r}")
        self.item_type = item_type
        self._members: dict[str, T] = {}

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    def _check_member(self, item: Any) -> str:
        if not isinstance(item, self.item_type):
            raise InvalidTypeError(
                ERROR_WRONG_TYPE.format(value=item, expected=self.item_type.__name__)
            )
        return str(item)

    def _check_key(self, item: Any) -> str:
        if isinstance(item, str) or isinstance(item, self.item_type):
            return str(item)
        raise InvalidTypeError(
            ERROR_WRONG_TYPE.format(value=item, expected=f"str or {self.item_type.__name__}")
        )

    @staticmethod
    def _check_iterable(items: Any) -> list:
        if isinstance(items, (str, bytes)) or not isinstance(items, Iterable):
            raise InvalidTypeError(f"Input must be an iterable of members: {items!r}")
        return list(items)

    # ------------------------------------------------------------------
    # Adding
    # ------------------------------------------------------------------

    def add(self, item: T) -> bool:
        """Add a member if its key is absent. Returns True if the collection changed."""
        key = self._check_member(item)
        if key in self._members:
            return False
        self._members[key] = item
        return True

    def add_all(self, items: Iterable[T]) -> bool:
        """Add every member whose key is absent. Returns True if the collection changed."""
        items = self._check_iterable(items)
        keys = [self._check_member(item) for item in items]

        changed = False
        for key, item in zip(keys, items):
            if key not in self._members:
                self._members[key] = item
                changed = True

        logger.debug("add_all(%s): %d candidate(s), changed=%s", self.item_type.__name__, len(keys), changed)
        return changed

    # ------------------------------------------------------------------
    # Removing
    # ------------------------------------------------------------------

    def remove(self, item: T | str) -> bool:
        """Remove a member (or key). Returns True if the collection changed."""
        key = self._check_key(item)
        return self._members.pop(key, None) is not None

    def remove_all(self, items: Iterable[T | str]) -> bool:
        """Remove every listed member (or key). Returns True if the collection changed."""
        keys = [self._check_key(item) for item in self._check_iterable(items)]

        changed = False
        for key in keys:
            if self._members.pop(key, None) is not None:
                changed = True
        return changed

    def clear(self) -> None:
        """Remove all members."""
        self._members.clear()

    # ------------------------------------------------------------------
    # Retaining
    # ------------------------------------------------------------------

    def retain(self, item: T | str) -> bool:
        """
        Keep only the given member.

        Returns:
            True if the member was present (and retained); otherwise the
            collection is emptied and False is returned
        """
        key = self._check_key(item)
        retained = {key: self._members[key]} if key in self._members else {}
        self._members = retained
        return bool(retained)

    def retain_all(self, items: Iterable[T | str]) -> bool:
        """
        Keep only the listed members.

        Returns:
            True if at least one listed member was present
        """
        keys = [self._check_key(item) for item in self._check_iterable(items)]
        retained = {key: self._members[key] for key in keys if key in self._members}
        self._members = retained
        return bool(retained)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def contains(self, item: T | str) -> bool:
        """Check whether a member (or key) is present."""
        return self._check_key(item) in self._members

    def contains_all(self, items: Iterable[T | str]) -> bool:
        """Check whether every listed member (or key) is present."""
        keys = [self._check_key(item) for item in self._check_iterable(items)]
        return all(key in self._members for key in keys)

    def get(self, item: T | str) -> T | None:
        """Return the stored member for a member or key, or None if absent."""
        return self._members.get(self._check_key(item))

    def keys(self) -> list[str]:
        """Return the member keys in insertion order."""
        return list(self._members)

    def size(self) -> int:
        return len(self._members)

    def is_empty(self) -> bool:
        return not self._members

    def to_list(self) -> list[T]:
        """Return the members in insertion order."""
        return list(self._members.values())

    # ------------------------------------------------------------------
    # Python protocols
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self._members)

    def __contains__(self, item: Any) -> bool:
        if not isinstance(item, str) and not isinstance(item, self.item_type):
            return False
        return str(item) in self._members

    def __iter__(self) -> Iterator[T]:
        # Each pass walks a snapshot so iteration is restartable.
        return iter(list(self._members.values()))

    def __repr__(self) -> str:
        return f"UniqueTypedCollection({self.item_type.__name__}, {self.keys()!r})"
