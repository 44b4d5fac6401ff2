import io
import struct

import pytest

from config import MAX_PROCESSES
from loader import InputFormatError, load_processes, load_text_processes, read_process, write_processes
from page_table import InvalidReferenceError


def encode(records):
    buf = io.BytesIO()
    write_processes(buf, records)
    return buf.getvalue()


def test_record_layout():
    data = encode([(3, [1, 63])])
    assert data == struct.pack('<ii', 3, 2) + bytes([1, 63])


def test_load_processes_in_order():
    records = [(1, [0, 1, 2]), (7, []), (2, [63])]
    assert load_processes(io.BytesIO(encode(records))) == records


def test_load_stops_at_capacity():
    records = [(pid, [pid]) for pid in range(MAX_PROCESSES + 3)]
    loaded = load_processes(io.BytesIO(encode(records)))
    assert len(loaded) == MAX_PROCESSES
    assert loaded[-1] == (MAX_PROCESSES - 1, [MAX_PROCESSES - 1])


def test_truncated_record_ends_input():
    data = encode([(1, [4, 5]), (2, [6, 7, 8])])[:-1]
    assert load_processes(io.BytesIO(data)) == [(1, [4, 5])]
    with pytest.raises(InputFormatError):
        load_processes(io.BytesIO(data), strict=True)


def test_truncated_header():
    stream = io.BytesIO(b'\x01\x00')
    assert read_process(stream) is None
    with pytest.raises(InputFormatError):
        read_process(io.BytesIO(b'\x01\x00'), strict=True)
    assert read_process(io.BytesIO(b'')) is None


def test_out_of_range_page_rejected():
    data = encode([(5, [0, 64])])
    with pytest.raises(InvalidReferenceError) as excinfo:
        load_processes(io.BytesIO(data))
    assert excinfo.value.process_id == 5
    assert excinfo.value.virtual_page_num == 64


def test_text_format():
    lines = [
        "# pid: pages",
        "1: 5 5 5",
        "",
        "2: 0 8   # two level-1 entries",
        "3:",
    ]
    assert load_text_processes(lines) == [(1, [5, 5, 5]), (2, [0, 8]), (3, [])]


def test_text_format_errors():
    with pytest.raises(InputFormatError):
        load_text_processes(["1 2 3"])
    with pytest.raises(InputFormatError):
        load_text_processes(["1: a b"])
    with pytest.raises(InvalidReferenceError):
        load_text_processes(["1: 99"])


def test_reference_limit():
    data = encode([(1, [0] * 300)])
    with pytest.raises(InputFormatError):
        load_processes(io.BytesIO(data))
    assert read_process(io.BytesIO(data), max_references=300) == (1, [0] * 300)
