"""
In-place comparison sort over a collection accessed only by index.

`TableSorter` exposes `less(i, j)` and `swap(i, j)` on 1-based positions of a
collection and sorts the range with an introspective quicksort. Every loop is
bounded by explicit index limits, so a comparator that is not a strict
partial order can scramble the result but never reach outside the range.
"""
from tabula.tabula_datatypes import CollectionRuntimeError

# Runs at or below this length are finished with insertion sort.
INSERTION_THRESHOLD = 12


class TableSorter:
    """Sorts list[1..n] of a collection through the host interface."""

    def __init__(self, host, collection, n: int, comparator=None):
        self.host = host
        self.collection = collection
        self.n = n
        self.comparator = comparator
        self.comparisons = 0

    async def less(self, i: int, j: int) -> bool:
        host = self.host
        a = await host.get_index(self.collection, i)
        b = await host.get_index(self.collection, j)
        self.comparisons += 1
        if self.comparator is None:
            return await host.less_than(a, b)
        ok, res = await host.pcall(self.comparator, a, b)
        if not ok:
            raise CollectionRuntimeError(f"error in 'sort' comparator: {res}") from res
        return host.to_bool(res)

    async def swap(self, i: int, j: int):
        host = self.host
        a = await host.get_index(self.collection, i)
        b = await host.get_index(self.collection, j)
        await host.set_index(self.collection, i, b)
        await host.set_index(self.collection, j, a)

    async def sort(self):
        if self.n < 2:
            return
        depth = 2 * self.n.bit_length()
        await self._intro_sort(1, self.n, depth)

    async def _intro_sort(self, lo: int, hi: int, depth: int):
        while hi - lo + 1 > INSERTION_THRESHOLD:
            if depth == 0:
                await self._heap_sort(lo, hi)
                return
            depth -= 1
            p = await self._partition(lo, hi)
            # Recurse into the smaller side, loop on the larger one.
            if p - lo < hi - p:
                await self._intro_sort(lo, p - 1, depth)
                lo = p + 1
            else:
                await self._intro_sort(p + 1, hi, depth)
                hi = p - 1
        if hi > lo:
            await self._insertion_sort(lo, hi)

    async def _insertion_sort(self, lo: int, hi: int):
        for i in range(lo + 1, hi + 1):
            j = i
            while j > lo and await self.less(j, j - 1):
                await self.swap(j, j - 1)
                j -= 1

    async def _median_of_three(self, a: int, b: int, c: int):
        """Orders positions a, b, c so that b holds the median."""
        if await self.less(b, a):
            await self.swap(a, b)
        if await self.less(c, b):
            await self.swap(b, c)
            if await self.less(b, a):
                await self.swap(a, b)

    async def _partition(self, lo: int, hi: int) -> int:
        """Partitions lo..hi (at least 3 long) around a median pivot; returns its final position."""
        mid = lo + (hi - lo) // 2
        await self._median_of_three(lo, mid, hi)
        pivot = hi - 1
        await self.swap(mid, pivot)
        i, j = lo, pivot
        while True:
            i += 1
            while i < pivot and await self.less(i, pivot):
                i += 1
            j -= 1
            while j > lo and await self.less(pivot, j):
                j -= 1
            if i >= j:
                break
            await self.swap(i, j)
        if i != pivot:
            await self.swap(i, pivot)
        return i

    async def _sift_down(self, base: int, root: int, size: int):
        while True:
            child = 2 * root + 1
            if child >= size:
                return
            if child + 1 < size and await self.less(base + child, base + child + 1):
                child += 1
            if not await self.less(base + root, base + child):
                return
            await self.swap(base + root, base + child)
            root = child

    async def _heap_sort(self, lo: int, hi: int):
        size = hi - lo + 1
        for root in range(size // 2 - 1, -1, -1):
            await self._sift_down(lo, root, size)
        for end in range(size - 1, 0, -1):
            await self.swap(lo, lo + end)
            await self._sift_down(lo, 0, end)
