"""
Главный класс для сжатия и разжатия файлов.
"""

import os
from pathlib import Path

from compressor import (CompressionStats, compress_adaptive, compress_static,
                        decompress_adaptive, decompress_static)
from format import RESET_PERIOD


class Archiver:
    def __init__(self, adaptive: bool = False, reset_period: int = RESET_PERIOD,
                 verbose: bool = True):
        self.adaptive = adaptive
        self.reset_period = reset_period
        self.verbose = verbose
    
    def compress_file(self, input_path: str, output_path: str) -> CompressionStats:
        self._check_paths(input_path, output_path)
        
        with open(input_path, 'rb') as src:
            if self.verbose:
                print(f"Compressing {Path(input_path).name}...", end=" ")
            
            stats = self._run(src, output_path, decompress=False)
        
        if self.verbose:
            print(f"OK ({stats.compression_ratio:.1f}%)")
        
        return stats
    
    def decompress_file(self, input_path: str, output_path: str) -> CompressionStats:
        self._check_paths(input_path, output_path)
        
        with open(input_path, 'rb') as src:
            if self.verbose:
                print(f"Decompressing {Path(input_path).name}...", end=" ")
            
            stats = self._run(src, output_path, decompress=True)
        
        if self.verbose:
            print(f"OK ({stats.original_size} bytes)")
        
        return stats
    
    @staticmethod
    def _check_paths(input_path: str, output_path: str):
        # Ссылка на входной файл тоже считается тем же файлом: 'wb' обрезал бы вход
        same = os.path.realpath(input_path) == os.path.realpath(output_path)
        if not same and os.path.exists(input_path) and os.path.exists(output_path):
            same = os.path.samefile(input_path, output_path)
        
        if same:
            raise ValueError("Input and output must be different files")
    
    def _run(self, src, output_path: str, decompress: bool) -> CompressionStats:
        try:
            with open(output_path, 'wb') as dst:
                if decompress and self.adaptive:
                    return decompress_adaptive(src, dst, self.reset_period)
                if decompress:
                    return decompress_static(src, dst)
                if self.adaptive:
                    return compress_adaptive(src, dst, self.reset_period)
                return compress_static(src, dst)
        except BaseException:
            # Частично записанный файл не является корректным результатом
            if self.verbose:
                print("FAILED")
            if os.path.isfile(output_path):
                os.remove(output_path)
            raise
