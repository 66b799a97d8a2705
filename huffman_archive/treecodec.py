"""
Preorder tree serialization.

A leaf is written as bit ``0`` followed by its 8-bit symbol, a branch as bit
``1`` followed by its left and then its right subtree. Siblings are not
separated; the tags alone delimit the structure.
"""
from bitarray import bitarray
from bitarray.util import int2ba

from .bitchannel import BitChannel
from .errors import CorruptArchive, truncation
from .frequency import ALPHABET_SIZE
from .tree import Branch, HuffmanTree, Leaf

SYMBOL_BITS = 8
LEAF_TAG = 0
BRANCH_TAG = 1


def tree_bits(tree: HuffmanTree) -> bitarray:
    result = bitarray(endian='big')
    for handle in tree.preorder():
        match tree.nodes[handle]:
            case Leaf(symbol, _):
                result.append(LEAF_TAG)
                result += int2ba(symbol, length=SYMBOL_BITS, endian='big')
            case Branch():
                result.append(BRANCH_TAG)
    return result


def write_tree(channel: BitChannel, tree: HuffmanTree) -> int:
    bits = tree_bits(tree)
    channel.write(bits)
    return len(bits)


def read_tree(channel: BitChannel) -> HuffmanTree:
    tree = HuffmanTree()
    # branches still waiting for a child, innermost last
    pending: list[int] = []
    with truncation('code tree'):
        while True:
            if channel.read_bit() == BRANCH_TAG:
                handle = tree.add_branch()
            else:
                handle = tree.add_leaf(channel.read_bits(SYMBOL_BITS))
            if tree.root is None:
                tree.root = handle
            else:
                parent = pending[-1]
                tree.attach(parent, handle)
                if tree.nodes[parent].right is not None:
                    pending.pop()
            if isinstance(tree.nodes[handle], Branch):
                if len(pending) == ALPHABET_SIZE:
                    raise CorruptArchive('code tree is deeper than the byte alphabet allows')
                pending.append(handle)
            if not pending:
                return tree
