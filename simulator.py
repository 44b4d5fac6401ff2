import argparse
import sys

from config import FRAME_COUNT, FRAME_SIZE, MAX_PROCESSES
from loader import InputFormatError, load_processes, load_text_processes
from memory_manager import FrameAllocator, OutOfMemoryError, PhysicalMemory, ProcessSummary, Statistics
from page_table import (PAGE_TABLE_TYPES, HierarchicalPageTable, HierarchicalTranslation, InvalidReferenceError,
                        make_page_table, page_table_class)
from process import Process


class TraceEvent:
    def __init__(self, pid, index, page_num, result, l1_index=None):
        self.pid = pid
        self.index = index
        self.page_num = page_num
        self.result = result
        self.l1_index = l1_index

    @property
    def fault(self):
        return self.result.faults > 0

    @property
    def frame(self):
        return self.result.frame

    def __str__(self):
        prefix = f"[PID {self.pid:02d} IDX:{self.index:03d}]"
        if isinstance(self.result, HierarchicalTranslation):
            if self.result.l1_fault:
                l1 = f"PF -> Allocated Frame {self.result.l1_frame:03d}(PTE {self.l1_index:03d})"
            else:
                l1 = f"Frame {self.result.l1_frame:03d}"
            if self.result.l2_fault:
                l2 = f"PF -> Allocated Frame {self.result.l2_frame:03d}"
            else:
                l2 = f"Frame {self.result.l2_frame:03d}"
            return f"{prefix} Page access {self.page_num:03d}: (L1PT) {l1}, (L2PT) {l2}"
        if self.result.fault:
            return f"{prefix} {self.page_num:03d} Page access: PF -> Allocated Frame {self.frame:03d}"
        return f"{prefix} {self.page_num:03d} Page access: Frame {self.frame:03d}"


class TraceReporter:
    """Prints the simulation trace and keeps every event for later inspection."""

    def __init__(self, quiet=False, out=None):
        self.quiet = quiet
        self.out = out
        self.events = []
        self.out_of_memory = False

    def emit(self, line=''):
        if not self.quiet:
            print(line, file=self.out or sys.stdout)

    def load_start(self):
        self.emit("load_process() start")

    def process_loaded(self, pid, references):
        self.emit(f"{pid} {len(references)}")
        self.emit(" ".join(f"{page_num:02d}" for page_num in references) + " ")

    def load_end(self):
        self.emit("load_process() end")

    def simulate_start(self):
        self.emit("simulate() start")

    def access(self, event):
        self.events.append(event)
        self.emit(str(event))

    def memory_exhausted(self):
        self.out_of_memory = True
        self.emit("Out of memory!!")

    def simulate_end(self):
        self.emit("simulate() end")

    def page_table(self, summary, process):
        self.emit(str(summary))
        table = process.page_table
        if isinstance(table, HierarchicalPageTable):
            for l1_idx, l1_entry in table.valid_l1_entries():
                self.emit(f"(L1PT) [PTE] {l1_idx:03d} -> [FRAME] {l1_entry.frame:03d}")
                l2_table = table.get_l2_table(l1_entry)
                for l2_idx in range(table.l2_entries):
                    entry = l2_table.get_entry(l2_idx)
                    if entry.is_valid():
                        page_num = l1_idx * table.l2_entries + l2_idx
                        self.emit(f"(L2PT) [PAGE] {page_num:03d} -> [FRAME] {entry.frame:03d} "
                                  f"REF={entry.reference_count:03d}")
        else:
            for page_num, entry in table.valid_pages():
                self.emit(f"[PAGE] {page_num:03d} -> [FRAME] {entry.frame:03d} "
                          f"REF={entry.reference_count:03d}")

    def totals(self, stats):
        self.emit(str(stats))


class PagingSimulator:

    def __init__(self, table_type='flat', num_frames=FRAME_COUNT, frame_size=FRAME_SIZE,
                 reporter=None, **table_options):
        self.table_type = table_type
        self.table_options = table_options
        self.num_pages = page_table_class(table_type).page_count(**table_options)
        self.physical_memory = PhysicalMemory(num_frames=num_frames, frame_size=frame_size)
        self.allocator = FrameAllocator(self.physical_memory)
        self.processes = []
        self.reporter = reporter or TraceReporter()
        self.aborted = False

    def add_process(self, pid, references):
        references = list(references)
        # Rejected before the table claims any frames
        for page_num in references:
            if not 0 <= page_num < self.num_pages:
                raise InvalidReferenceError(page_num, self.num_pages, pid)
        page_table = make_page_table(self.table_type, pid, self.allocator, **self.table_options)
        process = Process(pid, references, page_table)
        self.processes.append(process)
        return process

    def load(self, records):
        self.reporter.load_start()
        for pid, references in records:
            self.reporter.process_loaded(pid, references)
            self.add_process(pid, references)
        self.reporter.load_end()

    def simulate(self):
        """Replay all references round-robin, one per process per sweep.

        Returns True when every reference was replayed, False when physical
        memory ran out first.
        """
        self.reporter.simulate_start()
        try:
            pending = [p for p in self.processes if p.has_pending()]
            while pending:
                for process in pending:
                    index, page_num, result = process.access_next()
                    l1_index = None
                    if isinstance(result, HierarchicalTranslation):
                        l1_index = process.page_table.split(page_num)[0]
                    self.reporter.access(TraceEvent(process.pid, index, page_num, result, l1_index))
                pending = [p for p in pending if p.has_pending()]
        except OutOfMemoryError:
            self.aborted = True
            self.reporter.memory_exhausted()
        self.reporter.simulate_end()
        return not self.aborted

    def collect_statistics(self):
        stats = Statistics(allocated_frames=self.allocator.allocated_frame_count)
        stats.out_of_memory = self.aborted
        for process in self.processes:
            stats.record_process(ProcessSummary(process.pid, process.allocated_frames(),
                                                process.page_faults, process.ref_count))
        return stats

    def report(self, stats=None):
        stats = stats or self.collect_statistics()
        for summary, process in zip(stats.processes, self.processes):
            self.reporter.page_table(summary, process)
        self.reporter.totals(stats)
        return stats

    def run(self, records):
        self.load(records)
        self.simulate()
        return self.report()


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Demand paging simulator (flat or two-level page tables)")
    parser.add_argument("-t", "--table", choices=sorted(PAGE_TABLE_TYPES), default='flat',
                        help="page table layout")
    parser.add_argument("-n", "--frames", type=int, default=FRAME_COUNT,
                        help="number of physical frames")
    parser.add_argument("--text", action="store_true",
                        help="read 'pid: page page ...' lines instead of binary records")
    parser.add_argument("-q", "--quiet", action="store_true",
                        help="print only the statistics")
    parser.add_argument("input", nargs="?", help="input file (default: stdin)")
    return parser.parse_args(argv)


def read_records(args):
    if args.text:
        if args.input:
            with open(args.input, 'r') as f:
                return load_text_processes(f, max_processes=MAX_PROCESSES)
        return load_text_processes(sys.stdin, max_processes=MAX_PROCESSES)
    if args.input:
        with open(args.input, 'rb') as f:
            return load_processes(f, max_processes=MAX_PROCESSES)
    return load_processes(sys.stdin.buffer, max_processes=MAX_PROCESSES)


def main(argv=None):
    args = parse_args(argv)
    try:
        records = read_records(args)
    except (InputFormatError, InvalidReferenceError) as e:
        print(f"Invalid input: {e}", file=sys.stderr)
        return 2

    simulator = PagingSimulator(table_type=args.table, num_frames=args.frames,
                                reporter=TraceReporter(quiet=args.quiet))
    try:
        simulator.load(records)
    except OutOfMemoryError:
        print("Out of memory!!")
        return 1

    simulator.simulate()
    stats = simulator.report()
    if args.quiet:
        print(stats)
    return 0


if __name__ == '__main__':
    sys.exit(main())
