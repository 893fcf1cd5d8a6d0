"""
Побитовый ввод/вывод поверх байтовых потоков.
Биты упаковываются в байты начиная со старшего (MSB-first),
последний неполный байт дополняется нулями.
"""

from typing import BinaryIO


BLOCK_SIZE = 64 * 1024


class BitOutputStream:
    def __init__(self, output: BinaryIO):
        self.output = output
        self.current_byte = 0
        self.num_bits_filled = 0
        self.bits_written = 0
        self.buffer = bytearray()
    
    def write(self, bit: int):
        if bit not in (0, 1):
            raise ValueError("Argument must be 0 or 1")
        
        self.current_byte = (self.current_byte << 1) | bit
        self.num_bits_filled += 1
        self.bits_written += 1
        
        if self.num_bits_filled == 8:
            self.buffer.append(self.current_byte)
            self.current_byte = 0
            self.num_bits_filled = 0
            
            if len(self.buffer) >= BLOCK_SIZE:
                self._flush_buffer()
    
    def write_bits(self, code: str):
        for bit in code:
            self.write(1 if bit == '1' else 0)
    
    def finish(self):
        # Дополняем последний байт нулями; число битов дополнения не передаётся
        while self.num_bits_filled != 0:
            self.write(0)
        self._flush_buffer()
        self.output.flush()
    
    def _flush_buffer(self):
        if self.buffer:
            self.output.write(bytes(self.buffer))
            self.buffer.clear()


class BitInputStream:
    def __init__(self, input: BinaryIO):
        self.input = input
        self.block = b''
        self.pos = 0
        self.current_byte = 0
        self.num_bits_remaining = 0
        self.exhausted = False
        self.bits_read = 0
    
    def read(self) -> int:
        """Возвращает очередной бит (0 или 1) или -1 в конце потока"""
        if self.num_bits_remaining == 0:
            byte = self._next_byte()
            if byte == -1:
                return -1
            self.current_byte = byte
            self.num_bits_remaining = 8
        
        self.num_bits_remaining -= 1
        self.bits_read += 1
        return (self.current_byte >> self.num_bits_remaining) & 1
    
    def read_no_eof(self) -> int:
        bit = self.read()
        if bit == -1:
            raise EOFError("Unexpected end of bit stream")
        return bit
    
    def _next_byte(self) -> int:
        if self.pos >= len(self.block):
            if self.exhausted:
                return -1
            
            self.block = self.input.read(BLOCK_SIZE)
            self.pos = 0
            
            if not self.block:
                self.exhausted = True
                return -1
        
        byte = self.block[self.pos]
        self.pos += 1
        return byte
