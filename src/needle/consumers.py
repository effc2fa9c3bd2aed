from itertools import chain
from typing import Iterable, TypeVar

from more_itertools import chunked

from needle.buffer import BufferView
from needle.cursor import Cursor, Haystack, HaystackBounds
from needle.searcher import Pattern, ReverseSearcher
from needle.text import TextView

H = TypeVar("H", bound=Haystack)


def as_haystack(haystack: H | str | bytes | bytearray) -> H:
    """
    Wrap plain python values in the haystack kind matching their mutability

    bytes must hold utf-8 text; raw binary data is searched through a bytearray

    Examples
    --------
    >>> as_haystack('abc')
    TextView('abc')
    >>> as_haystack(bytearray(b'abc'))
    BufferView(b'abc')
    """
    match haystack:
        case Haystack():
            return haystack
        case str() | bytes():
            return TextView(haystack)  # type: ignore
        case bytearray():
            return BufferView(haystack)  # type: ignore
        case _:
            raise TypeError(f"cannot search a {type(haystack).__name__}")


def _reverse_searcher(haystack: H, pattern: Pattern[H]) -> ReverseSearcher[H]:
    pattern.require_reverse()
    searcher = pattern.into_searcher(haystack)
    assert isinstance(searcher, ReverseSearcher)
    return searcher


def _gaps(bounds: HaystackBounds[H], ends: Iterable[Cursor]) -> list[H]:
    return [bounds.kind.materialize(bounds, begin, end) for begin, end in chunked(ends, 2)]


def match_indices(haystack: H | str | bytes | bytearray, pattern: Pattern[H]) -> list[tuple[int, H]]:
    """
    Collect every match of `pattern`, left to right, with its offset from the start of `haystack`

    Parameters
    ----------
    haystack: Haystack | str | bytes | bytearray
        The data to search, bytearrays are searched as mutable BufferViews
    pattern: Pattern
        The pattern to look for, it is used up by this call

    Returns
    -------
    list[tuple[int, Haystack]]
        (offset, view) pairs where each view covers exactly one match

    Examples
    --------
    >>> from needle.element import Byte
    >>> match_indices('banana', Byte('a'))
    [(1, TextView('a')), (3, TextView('a')), (5, TextView('a'))]
    """
    searcher = pattern.into_searcher(as_haystack(haystack))
    bounds = searcher.haystack_bounds()
    return [
        (bounds.kind.offset_from_start(bounds, begin), bounds.kind.materialize(bounds, begin, end))
        for begin, end in searcher.matches()
    ]


def rmatch_indices(
    haystack: H | str | bytes | bytearray, pattern: Pattern[H]
) -> list[tuple[int, H]]:
    """
    Like match_indices, but right to left

    Raises
    ------
    TypeError
        If the searcher of `pattern` cannot scan backwards

    Examples
    --------
    >>> from needle.element import Byte
    >>> [offset for offset, _ in rmatch_indices('banana', Byte('a'))]
    [5, 3, 1]
    """
    searcher = _reverse_searcher(as_haystack(haystack), pattern)
    bounds = searcher.haystack_bounds()
    return [
        (bounds.kind.offset_from_start(bounds, begin), bounds.kind.materialize(bounds, begin, end))
        for begin, end in searcher.matches_back()
    ]


def split(haystack: H | str | bytes | bytearray, pattern: Pattern[H]) -> list[H]:
    """
    Split `haystack` into the gaps around every match of `pattern`

    The leading and trailing gaps are always included, and adjacent matches produce empty views,
    so the result holds one more view than there are matches.

    Examples
    --------
    >>> from needle.element import Byte
    >>> [str(gap) for gap in split('hangman', Byte('a'))]
    ['h', 'ngm', 'n']
    >>> [str(gap) for gap in split('aa', Byte('a'))]
    ['', '', '']
    """
    searcher = pattern.into_searcher(as_haystack(haystack))
    bounds = searcher.haystack_bounds()
    kind = bounds.kind
    ends = chain(
        (kind.cursor_at_front(bounds),),
        chain.from_iterable(searcher.matches()),
        (kind.cursor_at_back(bounds),),
    )
    return _gaps(bounds, ends)


def rsplit(haystack: H | str | bytes | bytearray, pattern: Pattern[H]) -> list[H]:
    """
    Like split, but the gaps come right to left

    >>> from needle.element import Byte
    >>> [str(gap) for gap in rsplit('hangman', Byte('a'))]
    ['n', 'ngm', 'h']
    """
    searcher = _reverse_searcher(as_haystack(haystack), pattern)
    bounds = searcher.haystack_bounds()
    kind = bounds.kind
    ends = chain(
        (kind.cursor_at_back(bounds),),
        chain.from_iterable((end, begin) for begin, end in searcher.matches_back()),
        (kind.cursor_at_front(bounds),),
    )
    # walking backwards every gap arrives as (end, begin)
    return [kind.materialize(bounds, begin, end) for end, begin in chunked(ends, 2)]


if __name__ == "__main__":
    import doctest

    doctest.testmod()
