import logging
from typing import Callable, Iterable, Optional, TypeVar

from more_itertools import first, last
from tqdm import tqdm

from needle.cursor import Cursor, Haystack, HaystackBounds
from needle.searcher import DoubleEndedSearcher, Pattern
from needle.utils import ElementLike, SearchFlag, Span, fold_case, to_element

H = TypeVar("H", bound=Haystack)

logger = logging.getLogger(__name__)


class ElementSearcher(DoubleEndedSearcher[H]):
    """
    Finds single elements accepted by a predicate, from either end of a haystack

    The searcher keeps a half-open window [start, end) of elements it has not looked at yet.
    Forward calls shrink the window from the left and backward calls from the right,
    so the two fronts can never cross.

    Examples
    --------
    >>> from needle.text import TextView
    >>> searcher = ElementSearcher(TextView('banana').bounds(), lambda element: element == ord('a'))
    >>> [(span.start.position, span.end.position) for span in searcher.matches()]
    [(1, 2), (3, 4), (5, 6)]
    >>> searcher.next_match() is None
    True
    """

    def __init__(
        self,
        bounds: HaystackBounds[H],
        predicate: Callable[[int], bool],
        flags: SearchFlag = SearchFlag.NOFLAG,
    ):
        self.bounds: HaystackBounds[H] = bounds
        self.predicate = predicate
        self.start, self.end = 0, len(bounds)
        self.flags = flags
        self.progress: Optional[tqdm] = None
        if flags.should_debug():
            logger.debug("searching %d elements of %r", len(bounds), bounds)
            self.progress = tqdm(total=len(bounds), desc=bounds.kind.__name__)

    def haystack_bounds(self) -> HaystackBounds[H]:
        return self.bounds

    def _span(self, begin: int, end: int) -> Span[Cursor]:
        return Span(self.bounds.cursor(begin), self.bounds.cursor(end))

    def _scanned(self, count: int) -> None:
        if self.progress is None:
            return
        self.progress.update(count)
        if self.start == self.end:
            logger.debug("exhausted %r", self.bounds)
            self.close()

    def close(self) -> None:
        if self.progress is not None:
            self.progress.close()
            self.progress = None

    def __del__(self):
        # __init__ may have failed before progress was set
        if getattr(self, "progress", None) is not None:
            self.close()

    def next_match(self) -> Optional[Span[Cursor]]:
        data, origin = self.bounds.data, self.start
        while self.start != self.end:
            position = self.start
            self.start += 1
            if self.predicate(data[position]):
                self._scanned(self.start - origin)
                return self._span(position, self.start)
        self._scanned(self.start - origin)
        return None

    def next_reject(self) -> Optional[Span[Cursor]]:
        data, origin = self.bounds.data, self.start
        while self.start != self.end and self.predicate(data[self.start]):
            self.start += 1
        begin = self.start
        while self.start != self.end and not self.predicate(data[self.start]):
            self.start += 1
        self._scanned(self.start - origin)
        # the element which stopped the run stays in the window
        if begin == self.start:
            return None
        return self._span(begin, self.start)

    def next_match_back(self) -> Optional[Span[Cursor]]:
        data, origin = self.bounds.data, self.end
        while self.end != self.start:
            self.end -= 1
            if self.predicate(data[self.end]):
                self._scanned(origin - self.end)
                return self._span(self.end, self.end + 1)
        self._scanned(origin - self.end)
        return None

    def next_reject_back(self) -> Optional[Span[Cursor]]:
        data, origin = self.bounds.data, self.end
        while self.end != self.start and self.predicate(data[self.end - 1]):
            self.end -= 1
        stop = self.end
        while self.end != self.start and not self.predicate(data[self.end - 1]):
            self.end -= 1
        self._scanned(origin - self.end)
        if stop == self.end:
            return None
        return self._span(self.end, stop)


class ElementPattern(Pattern[H]):
    """
    Matches any one element out of a fixed set of bytes

    Parameters
    ----------
    elements: Iterable[int | bytes | str]
        The bytes to look for
    flags: SearchFlag
        SearchFlag.IGNORECASE makes ascii letters match either case,
        SearchFlag.DEBUG logs the scan and shows its progress
    """

    searcher_type = ElementSearcher

    def __init__(self, elements: Iterable[ElementLike], flags: SearchFlag = SearchFlag.NOFLAG):
        super().__init__()
        self.raw: frozenset[int] = frozenset(map(to_element, elements))
        if not self.raw:
            raise ValueError(f"{type(self).__name__} needs at least one element")
        self.flags = flags
        if flags.should_ignore_case():
            self.elements = frozenset(map(fold_case, self.raw))
        else:
            self.elements = self.raw

    def accepts(self, element: int) -> bool:
        if self.flags.should_ignore_case():
            element = fold_case(element)
        return element in self.elements

    def _bind(self, haystack: H) -> memoryview:
        if not isinstance(haystack, Haystack):
            raise TypeError(f"expected a Haystack, got {type(haystack).__name__}")
        self.consume()
        if max(self.raw) >= haystack.element_limit:
            raise ValueError(
                f"{type(haystack).__name__} only supports elements "
                f"below {haystack.element_limit:#x}, got {max(self.raw):#x}"
            )
        return haystack.data

    def into_searcher(self, haystack: H) -> ElementSearcher[H]:
        self._bind(haystack)
        return ElementSearcher(haystack.bounds(), self.accepts, self.flags)

    def is_prefix_of(self, haystack: H) -> bool:
        data = self._bind(haystack)
        return self.accepts(first(data)) if data else False

    def is_suffix_of(self, haystack: H) -> bool:
        self.require_reverse()
        data = self._bind(haystack)
        return self.accepts(last(data)) if data else False


class Byte(ElementPattern[H]):
    """
    Matches one byte

    Examples
    --------
    >>> from needle.text import TextView
    >>> Byte('h').is_prefix_of(TextView('hangman'))
    True
    >>> Byte('h').is_suffix_of(TextView('hangman'))
    False
    >>> Byte('H', SearchFlag.IGNORECASE).is_prefix_of(TextView('hangman'))
    True
    """

    def __init__(self, value: ElementLike, flags: SearchFlag = SearchFlag.NOFLAG):
        super().__init__((value,), flags)
        (self.value,) = self.raw

    def accepts(self, element: int) -> bool:
        if self.flags.should_ignore_case():
            return fold_case(element) == fold_case(self.value)
        return element == self.value

    def __repr__(self):
        return f"{self.__class__.__name__}(value={self.value})"


class AnyOf(ElementPattern[H]):
    """
    Matches any one byte of a set

    >>> AnyOf(' ,')
    AnyOf(values=b' ,')
    """

    def __init__(self, values: bytes | str | Iterable[ElementLike], flags=SearchFlag.NOFLAG):
        if isinstance(values, (str, bytes, bytearray)):
            values = [values[i : i + 1] for i in range(len(values))]
        super().__init__(values, flags)

    def __repr__(self):
        return f"{self.__class__.__name__}(values={bytes(sorted(self.raw))!r})"


if __name__ == "__main__":
    import doctest

    doctest.testmod()
