import pytest

from luakit.stream import EOZ, ZStream, from_bytes


def test_eoz_is_returned_at_end_of_stream():
    stream = from_bytes(b"")
    assert stream.getc() == EOZ
    assert stream.getc() == -1


@pytest.mark.parametrize("chunk_size", [None, 1, 2, 3, 100])
def test_read_whole_round_trip(chunk_size):
    data = b"hello world"
    stream = from_bytes(data, chunk_size)
    assert stream.read(len(data)) == data
    assert stream.getc() == EOZ


@pytest.mark.parametrize("chunk_size", [1, 4, None])
def test_getc_yields_every_byte(chunk_size):
    data = b"\x00\x01abc\xff"
    stream = from_bytes(data, chunk_size)
    got = []
    while (c := stream.getc()) != EOZ:
        got.append(c)
    assert bytes(got) == data


def test_lookahead_does_not_consume():
    data = b"xyz"
    stream = from_bytes(data, 1)
    assert stream.lookahead() == data[0]
    assert stream.lookahead() == data[0]
    assert stream.getc() == data[0]
    assert stream.lookahead() == data[1]


def test_read_across_chunks_in_pieces():
    data = b"abcdefghij"
    stream = from_bytes(data, 3)
    assert stream.read(4) == data[:4]
    assert stream.read(5) == data[4:9]
    assert stream.read(1) == data[9:]


def test_read_past_end_is_short():
    data = b"abc"
    stream = from_bytes(data, 2)
    assert stream.read(10) == data
    assert stream.read(5) == b""


def test_read_zero_and_negative():
    stream = from_bytes(b"abc")
    assert stream.read(0) == b""
    with pytest.raises(ValueError):
        stream.read(-1)


def test_empty_stream():
    stream = from_bytes(b"")
    assert stream.lookahead() == EOZ
    assert stream.getc() == EOZ
    assert stream.fill() == EOZ


def test_fill_consumes_first_byte_of_chunk():
    chunks = iter([b"ab", b"cd"])
    stream = ZStream(lambda: next(chunks, None))
    assert stream.fill() == ord("a")
    assert stream.getc() == ord("b")
    assert stream.fill() == ord("c")
    assert stream.getc() == ord("d")
    assert stream.fill() == EOZ


def test_empty_chunk_ends_stream():
    chunks = iter([b"a", b"", b"b"])
    stream = ZStream(lambda: next(chunks, None))
    assert stream.read(5) == b"a"


def test_bad_chunk_size():
    with pytest.raises(ValueError):
        from_bytes(b"abc", 0)