from needle.cursor import Cursor, Haystack, HaystackBounds


class TextView(Haystack):
    """
    A read-only view over utf-8 encoded text

    Views produced by materialize share the memory of the view they were cut from.
    Patterns may only target ascii bytes, which never occur inside a multi-byte utf-8 sequence,
    so every materialized view decodes on its own.

    Examples
    --------
    >>> view = TextView('banana')
    >>> bounds = view.bounds()
    >>> part = TextView.materialize(bounds, bounds.cursor(1), bounds.cursor(4))
    >>> part
    TextView('ana')
    >>> part.data.obj is view.data.obj
    True
    """

    __slots__ = ("_data",)

    element_limit = 0x80

    def __init__(self, source: str | bytes | bytearray | memoryview):
        if isinstance(source, str):
            source = source.encode("utf-8")
        elif not isinstance(source, (bytes, bytearray, memoryview)):
            raise TypeError(f"cannot build a {type(self).__name__} from {type(source).__name__}")
        data = memoryview(source)
        if data.format != "B":
            data = data.cast("B")
        try:
            str(data, "utf-8")
        except UnicodeDecodeError as error:
            raise ValueError(
                f"{type(self).__name__} needs utf-8 text, use a BufferView for raw bytes: {error}"
            ) from error
        self._data: memoryview = data.toreadonly()

    @classmethod
    def _wrap(cls, data: memoryview) -> "TextView":
        view = cls.__new__(cls)
        view._data = data
        return view

    @property
    def data(self) -> memoryview:
        return self._data

    @classmethod
    def materialize(
        cls, bounds: HaystackBounds["TextView"], begin: Cursor, end: Cursor
    ) -> "TextView":
        return cls._wrap(bounds.slice(begin, end))

    def __str__(self):
        return str(self._data, "utf-8")

    def __repr__(self):
        return f"{self.__class__.__name__}({str(self)!r})"

    def __eq__(self, other):
        match other:
            case TextView():
                return self._data == other._data
            case str():
                return str(self) == other
            case _:
                return NotImplemented

    def __hash__(self):
        return hash(str(self))

    def __getitem__(self, index: int) -> int:
        return self._data[index]


if __name__ == "__main__":
    import doctest

    doctest.testmod()
