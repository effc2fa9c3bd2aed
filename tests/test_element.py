import gc
import logging

import pytest

from needle.buffer import BufferView
from needle.consumers import rsplit
from needle.element import AnyOf, Byte, ElementPattern, ElementSearcher
from needle.searcher import DoubleEndedSearcher, PatternReuseError, Searcher
from needle.text import TextView
from needle.utils import SearchFlag


def positions(spans):
    return [(span.start.position, span.end.position) for span in spans]


def searcher_for(text: str, element="a", flags=SearchFlag.NOFLAG) -> ElementSearcher:
    return Byte(element, flags).into_searcher(TextView(text))


@pytest.mark.parametrize(
    "text, expected",
    [
        ("banana", [(1, 2), (3, 4), (5, 6)]),
        ("", []),
        ("aaa", [(0, 1), (1, 2), (2, 3)]),
        ("xyz", []),
        ("hangman", [(1, 2), (5, 6)]),
    ],
)
def test_matches(text, expected):
    assert positions(searcher_for(text).matches()) == expected
    assert positions(searcher_for(text).matches_back()) == expected[::-1]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("banana", [(0, 1), (2, 3), (4, 5)]),
        ("baan", [(0, 1), (3, 4)]),
        ("aaa", []),
        ("", []),
        ("xyz", [(0, 3)]),
        ("hangman", [(0, 1), (2, 5), (6, 7)]),
    ],
)
def test_rejects_are_maximal(text, expected):
    assert positions(searcher_for(text).rejects()) == expected
    assert positions(searcher_for(text).rejects_back()) == expected[::-1]


@pytest.mark.parametrize("method", ["next_match", "next_reject", "next_match_back", "next_reject_back"])
def test_exhausted_searchers_stay_exhausted(method):
    searcher = searcher_for("banana")
    step = getattr(searcher, method)

    while step() is not None:
        pass

    for _ in range(3):
        assert step() is None


def test_forward_and_backward_calls_interleave():
    searcher = searcher_for("banana")

    assert isinstance(searcher, DoubleEndedSearcher)
    assert positions([searcher.next_match()]) == [(1, 2)]
    assert positions([searcher.next_match_back()]) == [(5, 6)]
    assert positions([searcher.next_match()]) == [(3, 4)]
    assert searcher.next_match_back() is None
    assert searcher.next_match() is None


def test_interleaving_reports_every_match_once():
    searcher = searcher_for("abracadabra")
    found = []
    forward = True
    while (span := searcher.next_match() if forward else searcher.next_match_back()) is not None:
        found.append(span.start.position)
        forward = not forward

    assert sorted(found) == [0, 3, 5, 7, 10]


def test_bounds_are_captured_once():
    searcher = searcher_for("banana")
    bounds = searcher.haystack_bounds()

    span = searcher.next_match()

    assert searcher.haystack_bounds() is bounds
    assert span.start.bounds is bounds
    assert TextView.offset_from_start(bounds, span.start) == 1


def test_searching_a_buffer_sees_earlier_writes():
    buffer = bytearray(b"banana")
    searcher = Byte("a").into_searcher(BufferView(buffer))

    found = []
    for begin, end in searcher.matches():
        found.append(begin.position)
        # hide the next 'a' from the scan
        if end.position + 1 < len(buffer):
            buffer[end.position + 1] = ord("x")

    assert found == [1, 5]
    assert buffer == bytearray(b"banxna")


def test_ignore_case():
    searcher = searcher_for("aAbA", "A", SearchFlag.IGNORECASE)
    assert positions(searcher.matches()) == [(0, 1), (1, 2), (3, 4)]

    assert positions(searcher_for("aAbA", "A").matches()) == [(1, 2), (3, 4)]


def test_any_of():
    searcher = AnyOf(", ").into_searcher(TextView("a,b c"))
    assert positions(searcher.matches()) == [(1, 2), (3, 4)]

    searcher = AnyOf([ord("X"), b"y"], SearchFlag.IGNORECASE).into_searcher(TextView("xYz"))
    assert positions(searcher.rejects()) == [(2, 3)]


@pytest.mark.parametrize(
    "value, error",
    [
        ("ab", ValueError),
        ("", ValueError),
        (256, ValueError),
        (-1, ValueError),
        (b"", ValueError),
        ("é", ValueError),
        (1.5, TypeError),
        (True, TypeError),
        (None, TypeError),
    ],
)
def test_invalid_elements(value, error):
    with pytest.raises(error):
        Byte(value)


def test_any_of_needs_elements():
    with pytest.raises(ValueError):
        AnyOf("")


def test_text_haystacks_only_take_ascii():
    with pytest.raises(ValueError):
        Byte(0xC3).into_searcher(TextView("é"))

    searcher = Byte(0xC3).into_searcher(BufferView(bytearray("é".encode())))
    assert positions(searcher.matches()) == [(0, 1)]


def test_patterns_need_a_haystack():
    with pytest.raises(TypeError):
        Byte("a").into_searcher("banana")  # type: ignore


@pytest.mark.parametrize(
    "haystack, element, prefix, suffix",
    [
        (TextView("hangman"), "h", True, False),
        (TextView("hangman"), "n", False, True),
        (TextView("a"), "a", True, True),
        (TextView(""), "a", False, False),
        (BufferView(bytearray(b"hangman")), "h", True, False),
        (BufferView(bytearray()), "h", False, False),
    ],
)
def test_prefix_and_suffix(haystack, element, prefix, suffix):
    assert Byte(element).is_prefix_of(haystack) is prefix
    assert Byte(element).is_suffix_of(haystack) is suffix


def test_prefix_and_suffix_do_not_build_searchers(monkeypatch):
    def fail(*_):
        raise AssertionError("a searcher was built")

    monkeypatch.setattr(ElementPattern, "into_searcher", fail)
    monkeypatch.setattr(ElementSearcher, "__init__", fail)

    assert Byte("h").is_prefix_of(TextView("hangman"))
    assert not Byte("h").is_suffix_of(TextView("hangman"))


@pytest.mark.parametrize(
    "text, element, expected",
    [("banana", "n", True), ("banana", "x", False), ("", "a", False)],
)
def test_is_contained_in(text, element, expected):
    assert Byte(element).is_contained_in(TextView(text)) is expected


@pytest.mark.parametrize("method", ["into_searcher", "is_prefix_of", "is_suffix_of", "is_contained_in"])
def test_patterns_are_single_use(method):
    pattern = Byte("a")
    pattern.into_searcher(TextView("banana"))

    with pytest.raises(PatternReuseError):
        getattr(pattern, method)(TextView("banana"))


class ForwardOnly(Byte):
    searcher_type = Searcher


def test_suffix_queries_need_a_reverse_searcher():
    with pytest.raises(TypeError):
        ForwardOnly("a").is_suffix_of(TextView("banana"))
    with pytest.raises(TypeError):
        rsplit("banana", ForwardOnly("a"))

    assert ForwardOnly("b").is_prefix_of(TextView("banana"))


def test_debug_flag_logs_and_reports_progress(caplog):
    with caplog.at_level(logging.DEBUG, logger="needle.element"):
        searcher = searcher_for("banana", flags=SearchFlag.DEBUG)
        assert searcher.progress is not None
        assert len(list(searcher.matches())) == 3

    assert searcher.progress is None
    assert "searching 6 elements" in caplog.text
    assert "exhausted" in caplog.text


def test_no_progress_without_debug_flag():
    assert searcher_for("banana").progress is None


def test_stopping_a_debug_scan_early_closes_progress():
    searcher = searcher_for("banana", flags=SearchFlag.DEBUG)
    bar = searcher.progress

    assert searcher.next_match() is not None
    searcher.close()
    searcher.close()

    assert searcher.progress is None
    assert bar.disable


def test_dropping_a_debug_searcher_closes_progress():
    searcher = searcher_for("banana", flags=SearchFlag.DEBUG)
    bar = searcher.progress
    searcher.next_match()

    del searcher
    gc.collect()

    assert bar.disable


def test_is_contained_in_closes_its_searcher(monkeypatch):
    closed = []
    close = ElementSearcher.close

    def recording_close(self):
        closed.append(self.progress is not None)
        close(self)

    monkeypatch.setattr(ElementSearcher, "close", recording_close)

    assert Byte("a", SearchFlag.DEBUG).is_contained_in(TextView("banana"))
    assert closed[0] is True
