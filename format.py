"""
Определяет константы формата сжатых файлов и заголовок статического режима.

Статический формат: 257 байт длин кодов (символы 0..256), затем поток битов.
Адаптивный формат заголовка не имеет.
"""

from typing import List, Sequence

from bitstream import BitInputStream, BitOutputStream


SYMBOL_LIMIT = 257
END_SYMBOL = 256
RESET_PERIOD = 262144
MAX_CODE_LENGTH = 255
HEADER_SIZE = SYMBOL_LIMIT


class FormatError(ValueError):
    """Сжатые данные повреждены или не соответствуют формату"""


class CodeLengthError(ValueError):
    """Длина кода не помещается в 8-битное поле заголовка"""


def check_code_lengths(code_lengths: Sequence[int]):
    for symbol, length in enumerate(code_lengths):
        if length > MAX_CODE_LENGTH:
            raise CodeLengthError(f"The code for symbol {symbol} is too long")


def write_code_lengths(output: BitOutputStream, code_lengths: Sequence[int]):
    check_code_lengths(code_lengths)
    
    for length in code_lengths:
        # 8 бит, старший бит первым
        for i in range(7, -1, -1):
            output.write((length >> i) & 1)


def read_code_lengths(input: BitInputStream, symbol_limit: int = SYMBOL_LIMIT) -> List[int]:
    code_lengths = []
    
    for _ in range(symbol_limit):
        value = 0
        for _ in range(8):
            bit = input.read()
            if bit == -1:
                raise FormatError("Truncated code length table")
            value = (value << 1) | bit
        code_lengths.append(value)
    
    return code_lengths
