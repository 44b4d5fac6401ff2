from collections import namedtuple

from config import L1_ENTRIES, L2_ENTRIES, PTE_SIZE, VAS_PAGE_COUNT
from memory_manager import DataPage, SimulationError


class InvalidReferenceError(SimulationError):
    def __init__(self, virtual_page_num, num_pages, process_id=None):
        owner = f" (pid {process_id})" if process_id is not None else ""
        super().__init__(f"Page {virtual_page_num}{owner} out of range (0 .. {num_pages - 1})")
        self.virtual_page_num = virtual_page_num
        self.process_id = process_id


class PageTableEntry:
    def __init__(self):
        self.frame = 0
        self.valid = False
        self.reference_count = 0

    def is_valid(self):
        return self.valid

    def map(self, frame_num):
        self.frame = frame_num
        self.valid = True


class PageTableFrame:
    """The PTE array held by one frame of physical memory."""

    def __init__(self, num_entries):
        self.entries = [PageTableEntry() for _ in range(num_entries)]

    def get_entry(self, index):
        return self.entries[index]

    def __len__(self):
        return len(self.entries)


class FlatTranslation(namedtuple('FlatTranslation', 'frame fault')):
    __slots__ = ()

    @property
    def faults(self):
        return int(self.fault)


class HierarchicalTranslation(namedtuple('HierarchicalTranslation',
                                         'l1_frame l1_fault l2_frame l2_fault')):
    __slots__ = ()

    @property
    def frame(self):
        return self.l2_frame

    @property
    def faults(self):
        return int(self.l1_fault) + int(self.l2_fault)


class PageTable:
    """Common base for the flat and two-level page tables.

    A table lives in frames of the shared physical memory. Its structural
    frames are claimed from the allocator when the table is built; data
    frames are claimed lazily by translate().
    """

    kind = None

    def __init__(self, process_id, allocator, num_pages):
        self.process_id = process_id
        self.allocator = allocator
        self.memory = allocator.physical_memory
        self.num_pages = num_pages
        self.entries_per_frame = self.memory.frame_size // PTE_SIZE
        if self.entries_per_frame == 0:
            raise ValueError(f"A {self.memory.frame_size}-byte frame cannot hold a page table entry")

    def check_page(self, virtual_page_num):
        if not 0 <= virtual_page_num < self.num_pages:
            raise InvalidReferenceError(virtual_page_num, self.num_pages, self.process_id)

    def _new_table_frame(self, frame_num, num_entries):
        table = PageTableFrame(num_entries)
        self.memory.store(frame_num, table)
        return table

    def _map_data_page(self, entry, virtual_page_num):
        frame_num = self.allocator.allocate_frame()
        self.memory.store(frame_num, DataPage(self.process_id, virtual_page_num))
        entry.map(frame_num)
        entry.reference_count = 1
        return frame_num

    def translate(self, virtual_page_num):
        raise NotImplementedError

    def get_entry(self, virtual_page_num):
        raise NotImplementedError

    def valid_pages(self):
        for page_num in range(self.num_pages):
            entry = self.get_entry(page_num)
            if entry.is_valid():
                yield page_num, entry

    def structural_frames(self):
        raise NotImplementedError

    def allocated_frames(self):
        return self.structural_frames() + sum(1 for _ in self.valid_pages())


class FlatPageTable(PageTable):
    kind = 'flat'

    @classmethod
    def page_count(cls, num_pages=VAS_PAGE_COUNT):
        return num_pages

    def __init__(self, process_id, allocator, num_pages=VAS_PAGE_COUNT):
        super().__init__(process_id, allocator, num_pages)
        num_frames = -(-num_pages // self.entries_per_frame)
        self.table_frames = allocator.allocate_frames(num_frames)
        for frame_num in self.table_frames:
            self._new_table_frame(frame_num, self.entries_per_frame)

    def get_entry(self, virtual_page_num):
        self.check_page(virtual_page_num)
        frame_num = self.table_frames[virtual_page_num // self.entries_per_frame]
        table = self.memory.get_frame_info(frame_num)
        return table.get_entry(virtual_page_num % self.entries_per_frame)

    def translate(self, virtual_page_num):
        entry = self.get_entry(virtual_page_num)
        if entry.is_valid():
            entry.reference_count += 1
            return FlatTranslation(entry.frame, False)
        frame_num = self._map_data_page(entry, virtual_page_num)
        return FlatTranslation(frame_num, True)

    def structural_frames(self):
        return len(self.table_frames)


class HierarchicalPageTable(PageTable):
    kind = 'two-level'

    @classmethod
    def page_count(cls, l1_entries=L1_ENTRIES, l2_entries=L2_ENTRIES, num_pages=None):
        return l1_entries * l2_entries if num_pages is None else num_pages

    def __init__(self, process_id, allocator, l1_entries=L1_ENTRIES, l2_entries=L2_ENTRIES,
                 num_pages=None):
        num_pages = self.page_count(l1_entries, l2_entries, num_pages)
        if l1_entries * l2_entries != num_pages:
            raise ValueError(f"{l1_entries} x {l2_entries} entries do not cover {num_pages} pages")
        super().__init__(process_id, allocator, num_pages)
        if max(l1_entries, l2_entries) > self.entries_per_frame:
            raise ValueError(f"A {self.memory.frame_size}-byte frame holds only "
                             f"{self.entries_per_frame} entries")
        self.l1_entries = l1_entries
        self.l2_entries = l2_entries
        self.l1_frame = allocator.allocate_frame()
        self._new_table_frame(self.l1_frame, l1_entries)

    def split(self, virtual_page_num):
        return divmod(virtual_page_num, self.l2_entries)

    def get_l1_entry(self, l1_idx):
        return self.memory.get_frame_info(self.l1_frame).get_entry(l1_idx)

    def get_l2_table(self, l1_entry):
        return self.memory.get_frame_info(l1_entry.frame)

    def get_entry(self, virtual_page_num):
        self.check_page(virtual_page_num)
        l1_idx, l2_idx = self.split(virtual_page_num)
        l1_entry = self.get_l1_entry(l1_idx)
        if not l1_entry.is_valid():
            # Nothing under this index has been touched yet
            return PageTableEntry()
        return self.get_l2_table(l1_entry).get_entry(l2_idx)

    def translate(self, virtual_page_num):
        self.check_page(virtual_page_num)
        l1_idx, l2_idx = self.split(virtual_page_num)

        l1_entry = self.get_l1_entry(l1_idx)
        l1_fault = not l1_entry.is_valid()
        if l1_fault:
            frame_num = self.allocator.allocate_frame()
            self._new_table_frame(frame_num, self.l2_entries)
            l1_entry.map(frame_num)

        # A failure here leaves the new level-2 table in place
        l2_entry = self.get_l2_table(l1_entry).get_entry(l2_idx)
        l2_fault = not l2_entry.is_valid()
        if l2_fault:
            self._map_data_page(l2_entry, virtual_page_num)
        else:
            l2_entry.reference_count += 1

        return HierarchicalTranslation(l1_entry.frame, l1_fault, l2_entry.frame, l2_fault)

    def valid_l1_entries(self):
        for l1_idx in range(self.l1_entries):
            l1_entry = self.get_l1_entry(l1_idx)
            if l1_entry.is_valid():
                yield l1_idx, l1_entry

    def valid_pages(self):
        for l1_idx, l1_entry in self.valid_l1_entries():
            table = self.get_l2_table(l1_entry)
            for l2_idx in range(self.l2_entries):
                entry = table.get_entry(l2_idx)
                if entry.is_valid():
                    yield l1_idx * self.l2_entries + l2_idx, entry

    def structural_frames(self):
        return 1 + sum(1 for _ in self.valid_l1_entries())


PAGE_TABLE_TYPES = {
    FlatPageTable.kind: FlatPageTable,
    HierarchicalPageTable.kind: HierarchicalPageTable,
}


def page_table_class(kind):
    try:
        return PAGE_TABLE_TYPES[kind]
    except KeyError:
        raise ValueError(f"Unknown page table type: {kind}") from None


def make_page_table(kind, process_id, allocator, **kwargs):
    return page_table_class(kind)(process_id, allocator, **kwargs)
