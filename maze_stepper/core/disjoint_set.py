from array import array


class DisjointSet:
    """
    Union-find over integer ids 0..size-1.
    Union by size, path halving on find.
    """

    __slots__ = ('parent', 'size', 'set_count')

    def __init__(self, size: int):
        self.parent = array('i', range(size))
        self.size = array('i', [1] * size)
        self.set_count = size

    def find(self, i: int) -> int:
        parent = self.parent
        while parent[i] != i:
            parent[i] = parent[parent[i]]
            i = parent[i]
        return i

    def union(self, a: int, b: int) -> bool:
        """Merges the sets holding a and b. Returns False if they were already joined."""
        ra, rb = self.find(a), self.find(b)
        if ra == rb:
            return False
        if self.size[ra] < self.size[rb]:
            ra, rb = rb, ra
        self.parent[rb] = ra
        self.size[ra] += self.size[rb]
        self.set_count -= 1
        return True

    def connected(self, a: int, b: int) -> bool:
        return self.find(a) == self.find(b)
