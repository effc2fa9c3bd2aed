from needle.cursor import Cursor, Haystack, HaystackBounds
from needle.utils import ElementLike, to_element


class BufferView(Haystack):
    """
    A writable, exclusively borrowed view over a byte buffer

    Every view materialized from a session writes straight through to the buffer the session borrowed.
    Views handed out during one session must cover disjoint ranges,
    which is checked while assertions are enabled.

    Notes
    -----
    While any view is alive the underlying bytearray cannot be resized,
    which keeps the bounds of every session valid. Call release() on the views to lift that.

    Examples
    --------
    >>> buffer = bytearray(b'hangman')
    >>> view = BufferView(buffer)
    >>> bounds = view.bounds()
    >>> part = BufferView.materialize(bounds, bounds.cursor(2), bounds.cursor(5))
    >>> part.fill('-')
    >>> buffer
    bytearray(b'ha---an')
    """

    __slots__ = ("_data",)

    def __init__(self, buffer: bytearray | memoryview):
        data = memoryview(buffer)
        if data.readonly:
            raise TypeError(f"{type(self).__name__} needs a writable buffer")
        if data.format != "B":
            data = data.cast("B")
        self._data: memoryview = data

    @classmethod
    def _wrap(cls, data: memoryview) -> "BufferView":
        view = cls.__new__(cls)
        view._data = data
        return view

    @property
    def data(self) -> memoryview:
        return self._data

    @classmethod
    def materialize(
        cls, bounds: HaystackBounds["BufferView"], begin: Cursor, end: Cursor
    ) -> "BufferView":
        data = bounds.slice(begin, end)
        if __debug__:
            bounds.claim(begin.position, end.position)
        return cls._wrap(data)

    def fill(self, value: ElementLike) -> None:
        element = to_element(value)
        for index in range(len(self._data)):
            self._data[index] = element

    def release(self) -> None:
        self._data.release()

    def __getitem__(self, index: int) -> int:
        return self._data[index]

    def __setitem__(self, index: int, value: ElementLike) -> None:
        self._data[index] = to_element(value)

    def __repr__(self):
        return f"{self.__class__.__name__}({self._data.tobytes()!r})"

    def __eq__(self, other):
        match other:
            case BufferView():
                return self._data == other._data
            case bytes() | bytearray() | memoryview():
                return self._data == other
            case _:
                return NotImplemented

    __hash__ = None  # type: ignore


if __name__ == "__main__":
    import doctest

    doctest.testmod()
