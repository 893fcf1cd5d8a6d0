"""
Реализует кодирование Хаффмана: таблица частот, построение дерева кодов,
канонический код и кодер/декодер поверх побитовых потоков.

Построение дерева полностью детерминировано: при равных частотах
меньшим считается узел с меньшим минимальным символом. Это нужно
адаптивному режиму, где кодер и декодер строят деревья независимо.
"""

import heapq
import itertools
from typing import List, Optional, Sequence, Union

from bitstream import BitInputStream, BitOutputStream
from format import FormatError


MAX_FREQUENCY = 0xFFFFFFFF


class Leaf:
    def __init__(self, symbol: int):
        if symbol < 0:
            raise ValueError("Symbol value must be non-negative")
        self.symbol = symbol
    
    def __repr__(self):
        return f"Leaf({self.symbol})"


class InternalNode:
    def __init__(self, left: 'Node', right: 'Node'):
        self.left = left
        self.right = right
    
    def __repr__(self):
        return f"InternalNode({self.left!r}, {self.right!r})"


Node = Union[Leaf, InternalNode]


class CodeTree:
    """
    Неизменяемое дерево префиксного кода. Левая ветвь - бит 0, правая - бит 1.
    Коды символов вычисляются один раз при создании.
    """
    
    def __init__(self, root: InternalNode, symbol_limit: int):
        if not isinstance(root, InternalNode):
            raise ValueError("Root must be an internal node")
        if symbol_limit < 2:
            raise ValueError("At least 2 symbols needed")
        
        self.root = root
        self.symbol_limit = symbol_limit
        self.codes: List[Optional[str]] = [None] * symbol_limit
        self._build_code_list(root, '')
    
    def _build_code_list(self, node: Node, prefix: str):
        if isinstance(node, InternalNode):
            self._build_code_list(node.left, prefix + '0')
            self._build_code_list(node.right, prefix + '1')
            return
        
        if node.symbol >= self.symbol_limit:
            raise ValueError("Symbol exceeds symbol limit")
        if self.codes[node.symbol] is not None:
            raise ValueError("Symbol has more than one code")
        self.codes[node.symbol] = prefix
    
    def get_code(self, symbol: int) -> str:
        if not 0 <= symbol < self.symbol_limit:
            raise ValueError("Symbol out of range")
        
        code = self.codes[symbol]
        if code is None:
            raise ValueError(f"No code for symbol {symbol}")
        return code
    
    def __str__(self):
        lines = []
        for symbol, code in enumerate(self.codes):
            if code is not None:
                lines.append(f"Code {code}: Symbol {symbol}")
        return '\n'.join(lines)


class FrequencyTable:
    def __init__(self, freqs: Sequence[int]):
        self.frequencies = list(freqs)
        
        if len(self.frequencies) < 2:
            raise ValueError("At least 2 symbols needed")
        if any(freq < 0 for freq in self.frequencies):
            raise ValueError("Negative frequency")
    
    def get_symbol_limit(self) -> int:
        return len(self.frequencies)
    
    def get(self, symbol: int) -> int:
        self._check_symbol(symbol)
        return self.frequencies[symbol]
    
    def set(self, symbol: int, freq: int):
        self._check_symbol(symbol)
        if not 0 <= freq <= MAX_FREQUENCY:
            raise ValueError("Frequency out of range")
        self.frequencies[symbol] = freq
    
    def increment(self, symbol: int):
        self._check_symbol(symbol)
        if self.frequencies[symbol] == MAX_FREQUENCY:
            raise ValueError("Maximum frequency reached")
        self.frequencies[symbol] += 1
    
    def _check_symbol(self, symbol: int):
        if not 0 <= symbol < len(self.frequencies):
            raise ValueError("Symbol out of range")
    
    def build_code_tree(self) -> CodeTree:
        """
        Строит дерево Хаффмана по текущим частотам.
        
        Элементы очереди упорядочены по (частота, минимальный символ, номер
        вставки), так что одинаковые таблицы всегда дают одинаковые деревья.
        Если ненулевая частота только у одного символа, добавляется символ
        с наименьшим индексом и нулевой частотой, чтобы получить два кода по 1 биту.
        """
        sequence = itertools.count()
        heap = []
        
        for symbol, freq in enumerate(self.frequencies):
            if freq > 0:
                heap.append((freq, symbol, next(sequence), Leaf(symbol)))
        
        if not heap:
            raise ValueError("Cannot build a code tree without any symbols")
        
        if len(heap) == 1:
            padding = next(s for s, f in enumerate(self.frequencies) if f == 0)
            heap.append((0, padding, next(sequence), Leaf(padding)))
        
        heapq.heapify(heap)
        
        while len(heap) > 1:
            left = heapq.heappop(heap)
            right = heapq.heappop(heap)
            
            parent = InternalNode(left[3], right[3])
            heapq.heappush(heap, (left[0] + right[0], min(left[1], right[1]),
                                  next(sequence), parent))
        
        return CodeTree(heap[0][3], len(self.frequencies))
    
    def __str__(self):
        return '\n'.join(f"Symbol {symbol}: {freq}"
                         for symbol, freq in enumerate(self.frequencies))


class CanonicalCode:
    """
    Канонический код: хранятся только длины кодов. Сами коды восстанавливаются
    сортировкой по (длина, символ) и последовательной нумерацией.
    """
    
    def __init__(self, code_lengths: Sequence[int]):
        self.code_lengths = list(code_lengths)
        
        if len(self.code_lengths) < 2:
            raise ValueError("At least 2 symbols needed")
        if any(length < 0 for length in self.code_lengths):
            raise ValueError("Illegal code length")
    
    @staticmethod
    def from_code_tree(tree: CodeTree, symbol_limit: int) -> 'CanonicalCode':
        if symbol_limit < 2:
            raise ValueError("At least 2 symbols needed")
        
        code_lengths = [0] * symbol_limit
        stack = [(tree.root, 0)]
        
        while stack:
            node, depth = stack.pop()
            if isinstance(node, InternalNode):
                stack.append((node.left, depth + 1))
                stack.append((node.right, depth + 1))
            else:
                if node.symbol >= symbol_limit:
                    raise ValueError("Symbol exceeds symbol limit")
                code_lengths[node.symbol] = depth
        
        return CanonicalCode(code_lengths)
    
    def get_symbol_limit(self) -> int:
        return len(self.code_lengths)
    
    def get_code_length(self, symbol: int) -> int:
        if not 0 <= symbol < len(self.code_lengths):
            raise ValueError("Symbol out of range")
        return self.code_lengths[symbol]
    
    def to_code_tree(self) -> CodeTree:
        pairs = sorted((length, symbol)
                       for symbol, length in enumerate(self.code_lengths)
                       if length > 0)
        if not pairs:
            raise FormatError("Code has no symbols")
        
        codewords = {}
        next_code = 0
        current_length = pairs[0][0]
        
        for length, symbol in pairs:
            next_code <<= length - current_length
            current_length = length
            
            if next_code >= 1 << length:
                raise FormatError("Over-subscribed code lengths")
            
            codewords[format(next_code, f'0{length}b')] = symbol
            next_code += 1
        
        if next_code != 1 << current_length:
            raise FormatError("Under-subscribed code lengths")
        
        return CodeTree(self._grow(codewords, ''), len(self.code_lengths))
    
    def _grow(self, codewords, prefix: str) -> Node:
        if prefix in codewords:
            return Leaf(codewords[prefix])
        return InternalNode(self._grow(codewords, prefix + '0'),
                            self._grow(codewords, prefix + '1'))


class HuffmanEncoder:
    def __init__(self, output: BitOutputStream):
        self.output = output
        self.code_tree: Optional[CodeTree] = None
    
    def write(self, symbol: int):
        if self.code_tree is None:
            raise ValueError("Code tree is not set")
        self.output.write_bits(self.code_tree.get_code(symbol))


class HuffmanDecoder:
    def __init__(self, input: BitInputStream):
        self.input = input
        self.code_tree: Optional[CodeTree] = None
    
    def read(self) -> int:
        if self.code_tree is None:
            raise ValueError("Code tree is not set")
        
        node = self.code_tree.root
        while True:
            if self.input.read_no_eof() == 0:
                node = node.left
            else:
                node = node.right
            
            if isinstance(node, Leaf):
                return node.symbol
