from abc import ABC, abstractmethod
from bisect import bisect_left
from dataclasses import dataclass, field
from functools import total_ordering
from typing import ClassVar, Generic, TypeVar

H = TypeVar("H", bound="Haystack")


class ContractViolation(Exception):
    ...


class CursorMismatchError(ContractViolation):
    ...


class InvertedRangeError(ContractViolation):
    ...


class OverlappingViewError(ContractViolation):
    ...


@total_ordering
@dataclass(slots=True, frozen=True, eq=False)
class Cursor:
    """
    An opaque position inside one borrow of a haystack

    Attributes
    ----------
    bounds: HaystackBounds
        The session which produced this cursor
    position: int
        Index of the element this cursor points before

    Notes
    -----
    Cursors are keyed on the memory their haystack borrows, not on the session,
    so bounds derived twice from the same haystack give equal cursors.
    Cursors of different haystacks are never equal, and ordering them raises a CursorMismatchError
    """

    bounds: "HaystackBounds" = field(repr=False)
    position: int

    def _same_borrow(self, other: "Cursor") -> None:
        if self.bounds.data is not other.bounds.data:
            raise CursorMismatchError(
                f"cannot order {self!r} and {other!r}: they come from different haystacks"
            )

    def __eq__(self, other):
        if not isinstance(other, Cursor):
            return NotImplemented
        return self.bounds.data is other.bounds.data and self.position == other.position

    def __lt__(self, other):
        if not isinstance(other, Cursor):
            return NotImplemented
        self._same_borrow(other)
        return self.position < other.position

    def __hash__(self):
        return hash((id(self.bounds.data), self.position))


@dataclass(slots=True, eq=False)
class HaystackBounds(Generic[H]):
    """
    The bounds of one borrow of a haystack, captured once per search session

    Attributes
    ----------
    kind: type[Haystack]
        The haystack type which materializes ranges of this session
    data: memoryview
        The memory borrowed for the whole session
    claimed: list[tuple[int, int]]
        Sorted non-empty ranges already handed out as mutable views
    """

    kind: type[H]
    data: memoryview = field(repr=False)
    claimed: list[tuple[int, int]] = field(default_factory=list, repr=False)

    def __len__(self):
        return len(self.data)

    @property
    def front(self) -> Cursor:
        return Cursor(self, 0)

    @property
    def back(self) -> Cursor:
        return Cursor(self, len(self.data))

    def cursor(self, position: int) -> Cursor:
        assert 0 <= position <= len(self.data), position
        return Cursor(self, position)

    def check(self, cursor: Cursor) -> int:
        # the disjointness ledger stays per session, only the borrowed memory has to agree
        if cursor.bounds.data is not self.data:
            raise CursorMismatchError(f"{cursor!r} was not derived from {self!r}")
        return cursor.position

    def slice(self, begin: Cursor, end: Cursor) -> memoryview:
        """Return the memory of [begin, end) without copying it"""
        start, stop = self.check(begin), self.check(end)
        if start > stop:
            raise InvertedRangeError(f"range starts at {start} but ends at {stop}")
        return self.data[start:stop]

    def claim(self, start: int, stop: int) -> None:
        """
        Record [start, stop) as handed out with mutation rights

        Raises
        ------
        OverlappingViewError
            If [start, stop) shares an element with an earlier claim
        """
        if start == stop:
            return
        index = bisect_left(self.claimed, (start, stop))
        if index > 0 and self.claimed[index - 1][1] > start:
            raise OverlappingViewError(
                f"[{start}, {stop}) overlaps {self.claimed[index - 1]}"
            )
        if index < len(self.claimed) and self.claimed[index][0] < stop:
            raise OverlappingViewError(f"[{start}, {stop}) overlaps {self.claimed[index]}")
        self.claimed.insert(index, (start, stop))


class Haystack(ABC):
    """
    Base class for every searchable kind of data

    A haystack only has to expose its memory and say how to wrap a piece of that memory back into itself.
    Everything else a Searcher or a consumer needs is derived from the HaystackBounds of a session.

    Notes
    -----
    All the contract methods take the bounds of a session instead of the haystack itself,
    so that ranges can be turned into views after the searcher which produced them is gone
    """

    __slots__ = ()

    # patterns may only target bytes below this value
    element_limit: ClassVar[int] = 0x100

    @property
    @abstractmethod
    def data(self) -> memoryview:
        pass

    @classmethod
    @abstractmethod
    def materialize(cls: type[H], bounds: HaystackBounds[H], begin: Cursor, end: Cursor) -> H:
        """
        Produce a value of this haystack type for exactly [begin, end)

        Parameters
        ----------
        bounds: HaystackBounds
            The session both cursors were derived from
        begin: Cursor
            The first position of the range
        end: Cursor
            The position just past the range

        Raises
        ------
        CursorMismatchError
            If either cursor does not come from bounds
        InvertedRangeError
            If begin is after end
        """
        pass

    def bounds(self: H) -> HaystackBounds[H]:
        return HaystackBounds(type(self), self.data)

    @staticmethod
    def offset_from_start(bounds: HaystackBounds, cursor: Cursor) -> int:
        return bounds.check(cursor)

    @staticmethod
    def cursor_at_front(bounds: HaystackBounds) -> Cursor:
        return bounds.front

    @staticmethod
    def cursor_at_back(bounds: HaystackBounds) -> Cursor:
        return bounds.back

    def __len__(self):
        return len(self.data)

    def __bytes__(self):
        return self.data.tobytes()

    def __iter__(self):
        return iter(self.data)
