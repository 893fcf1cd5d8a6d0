# Статическое и адаптивное сжатие Хаффмана

"""
Huffman Compression Module

Статический режим: первый проход считает частоты, в файл пишется таблица
длин канонического кода, второй проход кодирует данные.

Адаптивный режим: таблица не передаётся. Кодер и декодер начинают с
одинаковых частот (все равны 1) и перестраивают дерево в одни и те же
моменты, которые зависят только от числа обработанных символов.
"""

import io
from typing import BinaryIO, Iterator, List

from bitstream import BLOCK_SIZE, BitInputStream, BitOutputStream
from format import (END_SYMBOL, RESET_PERIOD, SYMBOL_LIMIT,
                    check_code_lengths, read_code_lengths, write_code_lengths)
from huffman import (CanonicalCode, CodeTree, FrequencyTable,
                     HuffmanDecoder, HuffmanEncoder)


def _is_power_of_two(x: int) -> bool:
    return x > 0 and (x & (x - 1)) == 0


def _iter_bytes(input: BinaryIO) -> Iterator[int]:
    while True:
        block = input.read(BLOCK_SIZE)
        if not block:
            return
        yield from block


class AdaptiveModel:
    """
    Состояние адаптивного режима, общее для кодера и декодера.
    
    После каждого символа вызывается update(). Дерево перестраивается при
    count = 1, 2, 4, ... (пока count < reset_period) и при каждом count,
    кратном reset_period. На границе периода дерево строится по старой
    таблице, и только затем таблица сбрасывается к начальной.
    """
    
    def __init__(self, symbol_limit: int = SYMBOL_LIMIT,
                 reset_period: int = RESET_PERIOD):
        if reset_period < 1:
            raise ValueError("Reset period must be positive")
        
        self.initial_frequencies = [1] * symbol_limit
        self.reset_period = reset_period
        self.frequencies = FrequencyTable(self.initial_frequencies)
        self.code_tree: CodeTree = self.frequencies.build_code_tree()
        self.count = 0
        self.rebuild_points: List[int] = []
        self.reset_points: List[int] = []
    
    def update(self, symbol: int):
        self.frequencies.increment(symbol)
        self.count += 1
        
        at_boundary = self.count % self.reset_period == 0
        
        if (self.count < self.reset_period and _is_power_of_two(self.count)) or at_boundary:
            self.code_tree = self.frequencies.build_code_tree()
            self.rebuild_points.append(self.count)
        
        if at_boundary:
            self.frequencies = FrequencyTable(self.initial_frequencies)
            self.reset_points.append(self.count)


class CompressionStats:
    def __init__(self, original_size: int, compressed_size: int, symbols: int,
                 rebuilds: int = 1, resets: int = 0):
        self.original_size = original_size
        self.compressed_size = compressed_size
        self.symbols = symbols
        self.rebuilds = rebuilds
        self.resets = resets
        
        self.compression_ratio = (
            self.compressed_size / original_size * 100
            if original_size > 0 else 0
        )
    
    def print_stats(self):
        print(f"Huffman Compression Statistics:")
        print(f"  Original size:       {self.original_size} bytes")
        print(f"  Compressed size:     {self.compressed_size} bytes")
        print(f"  Coded symbols:       {self.symbols}")
        print(f"  Tree builds:         {self.rebuilds}")
        print(f"  Frequency resets:    {self.resets}")
        if self.original_size > 0:
            print(f"  Bits per byte:       {self.compressed_size * 8 / self.original_size:.3f}")
        print(f"  Compression ratio:   {self.compression_ratio:.1f}%")


def compress_static(input: BinaryIO, output: BinaryIO) -> CompressionStats:
    """Два прохода по входу, поэтому input должен поддерживать seek()"""
    freqs = FrequencyTable([0] * SYMBOL_LIMIT)
    for byte in _iter_bytes(input):
        freqs.increment(byte)
    freqs.increment(END_SYMBOL)
    
    # Канонический код сохраняет длины, но может поменять сами коды
    canonical = CanonicalCode.from_code_tree(freqs.build_code_tree(), SYMBOL_LIMIT)
    check_code_lengths(canonical.code_lengths)
    code_tree = canonical.to_code_tree()
    
    bit_out = BitOutputStream(output)
    write_code_lengths(bit_out, canonical.code_lengths)
    
    encoder = HuffmanEncoder(bit_out)
    encoder.code_tree = code_tree
    
    input.seek(0)
    original_size = 0
    for byte in _iter_bytes(input):
        encoder.write(byte)
        original_size += 1
    encoder.write(END_SYMBOL)
    bit_out.finish()
    
    return CompressionStats(original_size, (bit_out.bits_written + 7) // 8,
                            original_size + 1, rebuilds=2)


def decompress_static(input: BinaryIO, output: BinaryIO) -> CompressionStats:
    bit_in = BitInputStream(input)
    canonical = CanonicalCode(read_code_lengths(bit_in, SYMBOL_LIMIT))
    
    decoder = HuffmanDecoder(bit_in)
    decoder.code_tree = canonical.to_code_tree()
    
    buffer = bytearray()
    original_size = 0
    
    while True:
        symbol = decoder.read()
        if symbol == END_SYMBOL:
            break
        
        buffer.append(symbol)
        if len(buffer) >= BLOCK_SIZE:
            output.write(bytes(buffer))
            original_size += len(buffer)
            buffer.clear()
    
    output.write(bytes(buffer))
    original_size += len(buffer)
    
    return CompressionStats(original_size, (bit_in.bits_read + 7) // 8,
                            original_size + 1, rebuilds=1)


def compress_adaptive(input: BinaryIO, output: BinaryIO,
                      reset_period: int = RESET_PERIOD) -> CompressionStats:
    model = AdaptiveModel(SYMBOL_LIMIT, reset_period)
    bit_out = BitOutputStream(output)
    encoder = HuffmanEncoder(bit_out)
    encoder.code_tree = model.code_tree
    
    original_size = 0
    for byte in _iter_bytes(input):
        encoder.write(byte)
        model.update(byte)
        encoder.code_tree = model.code_tree
        original_size += 1
    
    encoder.write(END_SYMBOL)
    model.update(END_SYMBOL)
    bit_out.finish()
    
    return CompressionStats(original_size, (bit_out.bits_written + 7) // 8,
                            model.count, len(model.rebuild_points) + 1,
                            len(model.reset_points))


def decompress_adaptive(input: BinaryIO, output: BinaryIO,
                        reset_period: int = RESET_PERIOD) -> CompressionStats:
    model = AdaptiveModel(SYMBOL_LIMIT, reset_period)
    bit_in = BitInputStream(input)
    decoder = HuffmanDecoder(bit_in)
    decoder.code_tree = model.code_tree
    
    buffer = bytearray()
    original_size = 0
    
    while True:
        symbol = decoder.read()
        model.update(symbol)
        if symbol == END_SYMBOL:
            break
        
        decoder.code_tree = model.code_tree
        buffer.append(symbol)
        if len(buffer) >= BLOCK_SIZE:
            output.write(bytes(buffer))
            original_size += len(buffer)
            buffer.clear()
    
    output.write(bytes(buffer))
    original_size += len(buffer)
    
    return CompressionStats(original_size, (bit_in.bits_read + 7) // 8,
                            model.count, len(model.rebuild_points) + 1,
                            len(model.reset_points))


def compress(data: bytes, adaptive: bool = False) -> bytes:
    output = io.BytesIO()
    if adaptive:
        compress_adaptive(io.BytesIO(data), output)
    else:
        compress_static(io.BytesIO(data), output)
    return output.getvalue()


def decompress(data: bytes, adaptive: bool = False) -> bytes:
    output = io.BytesIO()
    if adaptive:
        decompress_adaptive(io.BytesIO(data), output)
    else:
        decompress_static(io.BytesIO(data), output)
    return output.getvalue()
