"""
Huffman code tree.

Nodes live in an arena (``HuffmanTree.nodes``) and refer to their children by
integer handle; there are no parent links. Codes are derived top-down once the
tree is complete.

Construction tie-break: the heap is keyed on ``(weight, order)``. A leaf's
order is its byte value, the k-th branch gets ``ALPHABET_SIZE + k``. Among
equal weights leaves are therefore merged before branches, lower byte values
before higher ones and older branches before newer ones. The first node popped
becomes the left child.
"""
import heapq
import logging
from dataclasses import dataclass
from typing import Iterator

from bitarray import bitarray, frozenbitarray

from .errors import CorruptArchive, DuplicateSymbol
from .frequency import ALPHABET_SIZE, FrequencyTable

logger = logging.getLogger(__name__)


@dataclass
class Branch:
    left: int | None = None
    right: int | None = None
    weight: int = 0


@dataclass
class Leaf:
    symbol: int
    weight: int = 0


Node = Branch | Leaf


class HuffmanTree:
    def __init__(self):
        self.nodes: list[Node] = []
        self.root: int | None = None
        self.leaves: list[int | None] = [None] * ALPHABET_SIZE

    @classmethod
    def build(cls, table: FrequencyTable) -> 'HuffmanTree':
        tree = cls()
        heap = [(count, symbol, tree.add_leaf(symbol, count)) for symbol, count in table.items()]
        heapq.heapify(heap)
        merged = 0
        while len(heap) > 1:
            w1, _, left = heapq.heappop(heap)
            w2, _, right = heapq.heappop(heap)
            heapq.heappush(heap, (w1 + w2, ALPHABET_SIZE + merged, tree.add_branch(left, right)))
            merged += 1
        if heap:
            tree.root = heap[0][2]
        logger.debug('built tree: %d leaves, %d branches, depth %d',
                     table.distinct, merged, tree.depth())
        return tree

    def add_leaf(self, symbol: int, weight: int = 0) -> int:
        if not 0 <= symbol < ALPHABET_SIZE:
            raise ValueError(f'symbol {symbol} outside the byte alphabet')
        if self.leaves[symbol] is not None:
            raise DuplicateSymbol(symbol)
        handle = self._add(Leaf(symbol, weight))
        self.leaves[symbol] = handle
        return handle

    def add_branch(self, left: int | None = None, right: int | None = None) -> int:
        handle = self._add(Branch())
        for child in (left, right):
            if child is not None:
                self.attach(handle, child)
        return handle

    def _add(self, node: Node) -> int:
        self.nodes.append(node)
        return len(self.nodes) - 1

    def attach(self, parent: int, child: int):
        """Hang ``child`` in the first free slot of branch ``parent``."""
        match self.nodes[parent]:
            case Branch(None, _, _) as branch:
                branch.left = child
            case Branch(_, None, _) as branch:
                branch.right = child
            case _:
                raise CorruptArchive(f'node {parent} has no free child slot')
        branch.weight += self.weight(child)

    def weight(self, handle: int) -> int:
        return self.nodes[handle].weight

    def preorder(self) -> Iterator[int]:
        if self.root is None:
            return
        stack = [self.root]
        while stack:
            handle = stack.pop()
            yield handle
            match self.nodes[handle]:
                case Branch(left, right, _):
                    stack.extend(child for child in (right, left) if child is not None)

    def paths(self) -> Iterator[tuple[int, bitarray]]:
        """Yield ``(handle, root-to-node path)`` for every reachable node."""
        if self.root is None:
            return
        stack = [(self.root, bitarray())]
        while stack:
            handle, path = stack.pop()
            yield handle, path
            match self.nodes[handle]:
                case Branch(left, right, _):
                    if right is not None:
                        stack.append((right, path + bitarray('1')))
                    if left is not None:
                        stack.append((left, path + bitarray('0')))

    def codes(self) -> list[frozenbitarray | None]:
        table: list[frozenbitarray | None] = [None] * ALPHABET_SIZE
        for handle, path in self.paths():
            match self.nodes[handle]:
                case Leaf(symbol, _):
                    table[symbol] = frozenbitarray(path)
        return table

    def code_lengths(self) -> dict[int, int]:
        return {symbol: len(code) for symbol, code in enumerate(self.codes()) if code is not None}

    def depth(self) -> int:
        return max((len(path) for _, path in self.paths()), default=0)

    def validate(self):
        seen = set()
        for handle in self.preorder():
            match self.nodes[handle]:
                case Branch(left, right, weight):
                    if left is None or right is None:
                        raise CorruptArchive(f'branch {handle} is missing a child')
                    if weight != self.weight(left) + self.weight(right):
                        raise CorruptArchive(f'branch {handle} weight differs from its children')
                case Leaf(symbol, _):
                    if symbol in seen:
                        raise DuplicateSymbol(symbol)
                    seen.add(symbol)

    def describe(self) -> list[str]:
        lines = []
        for handle, path in self.paths():
            indent = ' ' * len(path)
            match self.nodes[handle]:
                case Leaf(symbol, weight):
                    lines.append(f'{indent}{symbol:#04x} {chr(symbol)!r} x{weight}')
                case Branch(_, _, weight):
                    lines.append(f'{indent}@ x{weight}')
        return lines

    def __len__(self) -> int:
        return len(self.nodes)
