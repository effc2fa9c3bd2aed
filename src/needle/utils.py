from enum import IntFlag, auto
from typing import Generic, NamedTuple, TypeVar

T = TypeVar("T")

ElementLike = int | bytes | str


class Span(NamedTuple, Generic[T]):
    """A half-open range [start, end) between two positions of the same haystack"""

    start: T
    end: T


class SearchFlag(IntFlag):
    NOFLAG = auto()
    IGNORECASE = auto()  # ascii letters only
    DEBUG = auto()

    def should_ignore_case(self) -> bool:
        return bool(self & SearchFlag.IGNORECASE)

    def should_debug(self) -> bool:
        return bool(self & SearchFlag.DEBUG)


def to_element(value: ElementLike) -> int:
    """
    Coerce `value` to the single byte it names

    Parameters
    ----------
    value: int | bytes | str
        An integer in range(256), a bytes object of length one or a string holding one ascii character

    Returns
    -------
    int
        The byte value

    Raises
    ------
    TypeError
        If value is not one of the accepted types
    ValueError
        If value does not name exactly one byte

    Examples
    --------
    >>> to_element('a')
    97
    >>> to_element(b'a')
    97
    >>> to_element(255)
    255
    >>> to_element('ab')
    Traceback (most recent call last):
        ...
    ValueError: expected a single byte, got 'ab'
    """
    match value:
        case bool():
            raise TypeError(f"expected an int, bytes or str element, got {value!r}")
        case int() if 0 <= value < 0x100:
            return value
        case bytes() | bytearray() if len(value) == 1:
            return value[0]
        case str() if len(value) == 1 and value.isascii():
            return ord(value)
        case int() | bytes() | bytearray() | str():
            raise ValueError(f"expected a single byte, got {value!r}")
        case _:
            raise TypeError(f"expected an int, bytes or str element, got {value!r}")


def fold_case(element: int) -> int:
    """
    >>> chr(fold_case(ord('A')))
    'a'
    >>> chr(fold_case(ord('-')))
    '-'
    """
    if 0x41 <= element <= 0x5A:
        return element | 0x20
    return element


if __name__ == "__main__":
    import doctest

    doctest.testmod()
