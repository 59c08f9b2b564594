import pytest

from xvkern.umalloc import UNIT, Heap


def test_malloc_fails_when_heap_cannot_grow():
    heap = Heap(1000)
    assert heap.malloc(10) is None
    assert heap.brk == 0


def test_blocks_are_aligned_inside_heap_and_disjoint():
    heap = Heap(1 << 20)
    sizes = [10, 100, 1, 500, 64]
    blocks = [(heap.malloc(n), n) for n in sizes]
    for addr, n in blocks:
        assert addr % UNIT == 0
        assert 0 < addr and addr + n <= heap.brk
    spans = sorted((addr, addr + n) for addr, n in blocks)
    for (_, end), (start, _) in zip(spans, spans[1:]):
        assert end <= start


def test_free_then_malloc_reuses_block():
    heap = Heap(1 << 20)
    heap.malloc(10)
    b = heap.malloc(10)
    heap.free(b)
    assert heap.malloc(10) == b


def test_data_survives_other_allocations():
    heap = Heap(1 << 20)
    a = heap.malloc(5)
    heap.memory[a:a + 5] = b"hello"
    b = heap.malloc(20)
    heap.memory[b:b + 20] = b"z" * 20
    heap.free(b)
    heap.malloc(40)
    assert bytes(heap.memory[a:a + 5]) == b"hello"


def test_freeing_everything_coalesces():
    heap = Heap(1 << 20)
    blocks = [heap.malloc(1000) for _ in range(50)]
    assert all(b is not None for b in blocks)
    brk = heap.brk
    for b in blocks[::2] + blocks[1::2]:
        heap.free(b)
    whole = heap.malloc(brk - UNIT)
    assert whole == UNIT
    assert heap.brk == brk


def test_exhaustion_after_heap_full():
    heap = Heap(UNIT * 4096)
    first = heap.malloc(UNIT * 4095)
    assert first is not None
    assert heap.brk == heap.limit
    assert heap.malloc(1) is None


def test_free_of_unknown_address_raises():
    heap = Heap(1 << 20)
    a = heap.malloc(10)
    with pytest.raises(ValueError):
        heap.free(a + 1)
    heap.free(a)
    with pytest.raises(ValueError):
        heap.free(a)


def test_sbrk_moves_break_within_limits():
    heap = Heap(100)
    assert heap.sbrk(40) == 0
    assert heap.sbrk(-10) == 40
    assert heap.brk == 30
    with pytest.raises(MemoryError):
        heap.sbrk(-31)
    with pytest.raises(MemoryError):
        heap.sbrk(71)
    assert heap.brk == 30