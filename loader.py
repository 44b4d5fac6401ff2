import struct

from config import MAX_PROCESSES, MAX_REFERENCES, VAS_PAGE_COUNT
from page_table import InvalidReferenceError

HEADER = struct.Struct('<ii')  # pid, number of references


class InputFormatError(ValueError):
    pass


def _check_references(pid, references, num_pages):
    for page_num in references:
        if not 0 <= page_num < num_pages:
            raise InvalidReferenceError(page_num, num_pages, pid)


def read_process(stream, strict=False, max_references=MAX_REFERENCES):
    """Read one (pid, references) record, or None at end of input."""
    header = stream.read(HEADER.size)
    if len(header) < HEADER.size:
        if header and strict:
            raise InputFormatError(f"Truncated record header ({len(header)} bytes)")
        return None
    pid, ref_len = HEADER.unpack(header)
    if ref_len < 0:
        raise InputFormatError(f"Process {pid}: negative reference count {ref_len}")
    if ref_len > max_references:
        raise InputFormatError(f"Process {pid}: {ref_len} references, limit is {max_references}")
    references = stream.read(ref_len)
    if len(references) != ref_len:
        if strict:
            raise InputFormatError(f"Process {pid}: expected {ref_len} references, "
                                   f"got {len(references)}")
        return None
    return pid, list(references)


def load_processes(stream, max_processes=MAX_PROCESSES, num_pages=VAS_PAGE_COUNT, strict=False):
    records = []
    while len(records) < max_processes:
        record = read_process(stream, strict=strict)
        if record is None:
            break
        _check_references(record[0], record[1], num_pages)
        records.append(record)
    return records


def write_processes(stream, records):
    for pid, references in records:
        stream.write(HEADER.pack(pid, len(references)))
        stream.write(bytes(references))


def load_text_processes(lines, max_processes=MAX_PROCESSES, num_pages=VAS_PAGE_COUNT):
    """Parse 'pid: page page ...' lines; blank lines and '#' comments are skipped."""
    records = []
    for line_num, line in enumerate(lines, 1):
        line = line.split('#', 1)[0].strip()
        if not line:
            continue
        if len(records) == max_processes:
            break
        pid_part, sep, refs_part = line.partition(':')
        if not sep:
            raise InputFormatError(f"Line {line_num}: expected 'pid: pages...'")
        try:
            pid = int(pid_part)
            references = [int(tok) for tok in refs_part.split()]
        except ValueError:
            raise InputFormatError(f"Line {line_num}: non-numeric value") from None
        _check_references(pid, references, num_pages)
        records.append((pid, references))
    return records
