class Process:
    """Replay state of one process: its references, cursor, table and counters."""

    def __init__(self, pid, references, page_table):
        self.pid = pid
        self.references = list(references)
        self.page_table = page_table
        self.cursor = 0
        self.page_faults = 0
        self.ref_count = 0

    def has_pending(self):
        return self.cursor < len(self.references)

    def access_next(self):
        index = self.cursor
        page_num = self.references[index]
        result = self.page_table.translate(page_num)
        self.page_faults += result.faults
        self.ref_count += 1
        self.cursor += 1
        return index, page_num, result

    def allocated_frames(self):
        return self.page_table.allocated_frames()

    def __repr__(self):
        return (f"Process(pid={self.pid}, refs={len(self.references)}, "
                f"cursor={self.cursor}, table={self.page_table.kind})")
