from config import FRAME_COUNT, FRAME_SIZE


class SimulationError(RuntimeError):
    pass


class OutOfMemoryError(SimulationError):
    def __init__(self, num_frames):
        super().__init__(f"Out of memory: all {num_frames} frames are allocated")
        self.num_frames = num_frames


class DataPage:
    """Marker stored in a frame that backs a process's data page."""

    def __init__(self, process_id, virtual_page_num):
        self.process_id = process_id
        self.virtual_page_num = virtual_page_num

    def __repr__(self):
        return f"DataPage(pid={self.process_id}, page={self.virtual_page_num})"


class PhysicalMemory:
    def __init__(self, num_frames=FRAME_COUNT, frame_size=FRAME_SIZE):
        self.num_frames = num_frames
        self.frame_size = frame_size
        # Each frame stores a page table record, a DataPage, or None if untouched
        self.frames = [None] * num_frames

    @property
    def size(self):
        return self.num_frames * self.frame_size

    def _check_index(self, frame_num):
        if not 0 <= frame_num < self.num_frames:
            raise IndexError(f"Frame {frame_num} out of range (0 .. {self.num_frames - 1})")

    def store(self, frame_num, contents):
        self._check_index(frame_num)
        self.frames[frame_num] = contents

    def get_frame_info(self, frame_num):
        self._check_index(frame_num)
        return self.frames[frame_num]


class FrameAllocator:
    """Bump allocator over the frames of a PhysicalMemory.

    Frames are handed out as 0, 1, 2, ... and never given back. The only
    way to run out is to reach the end of physical memory.
    """

    def __init__(self, physical_memory):
        self.physical_memory = physical_memory
        self.next_free_frame = 0

    @property
    def allocated_frame_count(self):
        return self.next_free_frame

    def is_full(self):
        return self.next_free_frame >= self.physical_memory.num_frames

    def allocate_frame(self):
        if self.is_full():
            raise OutOfMemoryError(self.physical_memory.num_frames)
        frame_num = self.next_free_frame
        self.next_free_frame += 1
        return frame_num

    def allocate_frames(self, count):
        # All or nothing: a contiguous block is reserved only if it fits
        if self.next_free_frame + count > self.physical_memory.num_frames:
            raise OutOfMemoryError(self.physical_memory.num_frames)
        base_frame = self.next_free_frame
        self.next_free_frame += count
        return list(range(base_frame, base_frame + count))


class ProcessSummary:
    def __init__(self, pid, allocated_frames, page_faults, references):
        self.pid = pid
        self.allocated_frames = allocated_frames
        self.page_faults = page_faults
        self.references = references

    def __str__(self):
        return (f"** Process {self.pid:03d}: Allocated Frames={self.allocated_frames:03d} "
                f"PageFaults/References={self.page_faults:03d}/{self.references:03d}")


class Statistics:
    def __init__(self, allocated_frames=0):
        self.allocated_frames = allocated_frames
        self.processes = []
        self.out_of_memory = False

    def record_process(self, summary):
        self.processes.append(summary)

    @property
    def page_faults(self):
        return sum(p.page_faults for p in self.processes)

    @property
    def references(self):
        return sum(p.references for p in self.processes)

    def __str__(self):
        return (f"Total: Allocated Frames={self.allocated_frames:03d} "
                f"Page Faults/References={self.page_faults:03d}/{self.references:03d}")
