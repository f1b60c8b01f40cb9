import heapq
import itertools


class HuffmanError(ValueError):
    """Base class for every failure raised by the Huffman core."""


class EmptyInputError(HuffmanError):
    pass


class MalformedTreeError(HuffmanError):
    pass


class InvalidFrequencyError(HuffmanError):
    pass


class SymbolNotInCodeMapError(HuffmanError):
    def __init__(self, symbol):
        super().__init__(f"symbol {symbol!r} has no code in the code map")
        self.symbol = symbol


class TruncatedStreamError(HuffmanError):
    def __init__(self, bits_consumed):
        super().__init__(f"bit stream ended mid-code after {bits_consumed} bits")
        self.bits_consumed = bits_consumed


class HuffmanNode: # Node for Huffman tree
    def __init__(self, symbol, frequency, left=None, right=None):
        self.symbol = symbol    # leaf symbol, or None for internal nodes
        self.frequency = frequency # weight of the whole subtree
        self.left = left
        self.right = right

    def is_leaf(self):
        return self.left is None and self.right is None

    def __lt__(self, other):
        return self.frequency < other.frequency

    def __repr__(self):
        if self.is_leaf():
            return f"HuffmanNode({self.symbol!r}, {self.frequency})"
        return f"HuffmanNode(None, {self.frequency}, {self.left!r}, {self.right!r})"


def count_frequencies(data, allow_empty=True): # data: any finite iterable of hashable symbols
    frequency_table = {}
    for symbol in data:
        frequency_table[symbol] = frequency_table.get(symbol, 0) + 1

    if not frequency_table and not allow_empty:
        raise EmptyInputError("no symbols to count")
    return frequency_table # insertion order follows first appearance in data


def build_huffman_tree(frequency_table): # frequency_table: dict of symbol -> frequency
    """
    Greedy merge of the two lightest trees until one remains.

    Ties between equal weights are broken first-in-first-out: leaves are
    numbered in the table's iteration order and every merged node gets the
    next number when it is pushed. The first tree popped becomes the left
    child, the second the right child.

    Returns None for an empty table and a lone leaf for a one-entry table.
    """
    sequence = itertools.count()
    priority_queue = []
    for symbol, frequency in frequency_table.items():
        if symbol is None:
            raise InvalidFrequencyError("None cannot be used as a symbol")
        if frequency < 1:
            raise InvalidFrequencyError(f"frequency of {symbol!r} must be positive, got {frequency}")
        priority_queue.append((frequency, next(sequence), HuffmanNode(symbol, frequency)))
    heapq.heapify(priority_queue)

    if not priority_queue:
        return None # empty tree

    while len(priority_queue) > 1:
        _, _, left = heapq.heappop(priority_queue)
        _, _, right = heapq.heappop(priority_queue)
        merged_node = HuffmanNode(None, left.frequency + right.frequency, left, right) # internal node with combined frequency
        heapq.heappush(priority_queue, (merged_node.frequency, next(sequence), merged_node))

    return priority_queue[0][2] # root of the tree


def _check_node(node):
    if (node.left is None) != (node.right is None):
        raise MalformedTreeError(f"node with weight {node.frequency} has exactly one child")
    if node.is_leaf() and node.symbol is None:
        raise MalformedTreeError(f"leaf with weight {node.frequency} has no symbol")
    if not node.is_leaf() and node.symbol is not None:
        raise MalformedTreeError(f"internal node carries symbol {node.symbol!r}")


def generate_huffman_codes(root): # root: root of the Huffman tree, or None
    codes = {}
    if root is None:
        return codes

    _check_node(root)
    if root.is_leaf():
        codes[root.symbol] = '0' # a zero-length code cannot be transmitted
        return codes

    def generate_codes_helper(node, current_code): # recursive helper function to traverse the tree and generate codes
        _check_node(node)

        # Leaf node -> assign code
        if node.is_leaf():
            codes[node.symbol] = current_code
            return

        generate_codes_helper(node.left, current_code + '0')
        generate_codes_helper(node.right, current_code + '1')

    generate_codes_helper(root, '')
    return codes # return the mapping of symbols to their corresponding Huffman codes


def validate_tree(root):
    """
    Raise MalformedTreeError unless every node has zero or two children,
    leaves (and only leaves) carry a symbol, and every internal weight is
    the sum of its children's weights.
    """
    if root is None:
        return
    stack = [root]
    while stack:
        node = stack.pop()
        _check_node(node)
        if node.is_leaf():
            continue
        if node.frequency != node.left.frequency + node.right.frequency:
            raise MalformedTreeError(
                f"internal weight {node.frequency} != "
                f"{node.left.frequency} + {node.right.frequency}"
            )
        stack.append(node.right)
        stack.append(node.left)


def tree_depth(root): # height in edges; a lone leaf or the empty tree is 0
    if root is None or root.is_leaf():
        return 0
    return 1 + max(tree_depth(root.left), tree_depth(root.right))


def encoded_bit_length(frequency_table, code_map): # total payload bits: sum of frequency * code length
    return sum(frequency * len(code_map[symbol]) for symbol, frequency in frequency_table.items())
