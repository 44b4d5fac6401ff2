# Physical memory
FRAME_SIZE = 32
FRAME_COUNT = 256   # fits in the one-byte frame field of a PTE
MEMORY_SIZE = FRAME_SIZE * FRAME_COUNT

# Virtual address space
VAS_PAGE_COUNT = 64
PTE_SIZE = 4
FLAT_TABLE_FRAMES = VAS_PAGE_COUNT * PTE_SIZE // FRAME_SIZE  # 64 * 4 / 32 = 8

# Two-level split: upper 3 bits / lower 3 bits of the page number
L1_ENTRIES = 8
L2_ENTRIES = 8

# Input limits
MAX_PROCESSES = 10
MAX_REFERENCES = 256
