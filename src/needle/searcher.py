from abc import ABC, abstractmethod
from typing import ClassVar, Generic, Iterator, Optional, TypeVar

from more_itertools import first

from needle.cursor import ContractViolation, Cursor, Haystack, HaystackBounds
from needle.utils import Span

H = TypeVar("H", bound=Haystack)


class PatternReuseError(ContractViolation):
    ...


class Searcher(ABC, Generic[H]):
    """
    A stateful scan over exactly one haystack

    Every call to next_match or next_reject moves the scan forward and never rewinds it.
    Once either returns None, every later call returns None as well.

    Notes
    -----
    Callers pick one of next_match and next_reject for a pass;
    what a reject call means after a match call depends on the implementation
    """

    @abstractmethod
    def haystack_bounds(self) -> HaystackBounds[H]:
        """The bounds captured when this searcher was created"""
        pass

    @abstractmethod
    def next_match(self) -> Optional[Span[Cursor]]:
        pass

    @abstractmethod
    def next_reject(self) -> Optional[Span[Cursor]]:
        pass

    def close(self) -> None:
        """Release anything held for the scan, stopping early needs nothing else"""

    def matches(self) -> Iterator[Span[Cursor]]:
        return iter(self.next_match, None)

    def rejects(self) -> Iterator[Span[Cursor]]:
        return iter(self.next_reject, None)


class ReverseSearcher(Searcher[H]):
    @abstractmethod
    def next_match_back(self) -> Optional[Span[Cursor]]:
        pass

    @abstractmethod
    def next_reject_back(self) -> Optional[Span[Cursor]]:
        pass

    def matches_back(self) -> Iterator[Span[Cursor]]:
        return iter(self.next_match_back, None)

    def rejects_back(self) -> Iterator[Span[Cursor]]:
        return iter(self.next_reject_back, None)


class DoubleEndedSearcher(ReverseSearcher[H]):
    """
    Marker for searchers whose forward and backward calls may be interleaved freely

    The two scan fronts never cross and no range is reported by both of them.
    Only claim this when the matching algorithm guarantees it, e.g. for fixed-width elements.
    """


class Pattern(ABC, Generic[H]):
    """
    A matching criterion which is used up by binding it to a haystack

    Subclasses set `searcher_type` to the class into_searcher returns,
    so that capabilities such as reverse scanning can be checked without building a searcher.

    Examples
    --------
    >>> from needle.element import Byte
    >>> from needle.text import TextView
    >>> pattern = Byte('a')
    >>> pattern.is_contained_in(TextView('banana'))
    True
    >>> pattern.is_contained_in(TextView('banana'))
    Traceback (most recent call last):
        ...
    needle.searcher.PatternReuseError: Byte(value=97) has already been used
    """

    searcher_type: ClassVar[type[Searcher]]

    def __init__(self):
        self._consumed = False

    def consume(self) -> None:
        if self._consumed:
            raise PatternReuseError(f"{self!r} has already been used")
        self._consumed = True

    def require_reverse(self) -> None:
        if not issubclass(self.searcher_type, ReverseSearcher):
            raise TypeError(
                f"{type(self).__name__} searchers cannot scan backwards, "
                f"so suffix queries are not supported"
            )

    @abstractmethod
    def into_searcher(self, haystack: H) -> Searcher[H]:
        pass

    @abstractmethod
    def is_prefix_of(self, haystack: H) -> bool:
        pass

    @abstractmethod
    def is_suffix_of(self, haystack: H) -> bool:
        """Only supported when searcher_type is a ReverseSearcher"""
        pass

    def is_contained_in(self, haystack: H) -> bool:
        searcher = self.into_searcher(haystack)
        found = first(searcher.matches(), None) is not None
        searcher.close()
        return found


if __name__ == "__main__":
    import doctest

    doctest.testmod()
