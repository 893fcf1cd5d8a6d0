"""
Модульные тесты для адаптивного режима
"""

import unittest
import io
import random
import sys

from huffman import FrequencyTable
from format import END_SYMBOL, RESET_PERIOD, SYMBOL_LIMIT
from compressor import (AdaptiveModel, compress, compress_adaptive, decompress,
                        decompress_adaptive)


def _roundtrip(data: bytes, reset_period: int = RESET_PERIOD):
    packed = io.BytesIO()
    encode_stats = compress_adaptive(io.BytesIO(data), packed, reset_period)
    
    restored = io.BytesIO()
    decode_stats = decompress_adaptive(io.BytesIO(packed.getvalue()), restored, reset_period)
    
    return packed.getvalue(), restored.getvalue(), encode_stats, decode_stats


class TestAdaptiveModel(unittest.TestCase):
    """Тесты расписания перестроения дерева и сброса частот"""
    
    def test_initial_state(self):
        """Начальная таблица: все 257 символов с частотой 1"""
        model = AdaptiveModel()
        self.assertEqual(model.frequencies.frequencies, [1] * SYMBOL_LIMIT)
        self.assertEqual(model.count, 0)
        for symbol in range(SYMBOL_LIMIT):
            self.assertIn(len(model.code_tree.get_code(symbol)), (8, 9))
    
    def test_schedule_with_small_period(self):
        model = AdaptiveModel(reset_period=64)
        for i in range(200):
            model.update(i % 7)
        
        self.assertEqual(model.rebuild_points, [1, 2, 4, 8, 16, 32, 64, 128, 192])
        self.assertEqual(model.reset_points, [64, 128, 192])
    
    def test_schedule_with_default_period(self):
        model = AdaptiveModel()
        for _ in range(RESET_PERIOD):
            model.update(0)
        
        self.assertEqual(model.rebuild_points, [2 ** i for i in range(18)] + [262144])
        self.assertEqual(model.reset_points, [262144])
    
    def test_rebuild_uses_counts_before_reset(self):
        """На границе периода дерево строится по старой таблице, затем таблица сбрасывается"""
        model = AdaptiveModel(reset_period=16)
        for _ in range(16):
            model.update(65)
        
        expected = [1] * SYMBOL_LIMIT
        expected[65] = 17
        expected_tree = FrequencyTable(expected).build_code_tree()
        
        self.assertEqual(model.code_tree.codes, expected_tree.codes)
        self.assertEqual(model.frequencies.get(65), 1)
        self.assertEqual(model.reset_points, [16])
    
    def test_tree_not_mutated_on_rebuild(self):
        model = AdaptiveModel()
        first = model.code_tree
        codes = list(first.codes)
        
        for _ in range(4):
            model.update(10)
        
        self.assertIsNot(model.code_tree, first)
        self.assertEqual(first.codes, codes)
    
    def test_lockstep(self):
        """Две независимые модели на одной последовательности ведут себя одинаково"""
        random.seed(5)
        symbols = [random.choice((0, 1, 2, 3, 97, 98, END_SYMBOL)) for _ in range(1000)]
        
        encoder_side = AdaptiveModel(reset_period=128)
        decoder_side = AdaptiveModel(reset_period=128)
        
        for symbol in symbols:
            encoder_side.update(symbol)
            decoder_side.update(symbol)
            self.assertEqual(encoder_side.code_tree.codes, decoder_side.code_tree.codes)
        
        self.assertEqual(encoder_side.rebuild_points, decoder_side.rebuild_points)
        self.assertEqual(encoder_side.reset_points, decoder_side.reset_points)
        self.assertEqual(encoder_side.reset_points, [128 * k for k in range(1, 8)])
    
    def test_invalid_symbol(self):
        with self.assertRaises(ValueError):
            AdaptiveModel().update(SYMBOL_LIMIT)
    
    def test_invalid_period(self):
        with self.assertRaises(ValueError):
            AdaptiveModel(reset_period=0)


class TestAdaptiveCompression(unittest.TestCase):
    """Тесты сжатия и распаковки в адаптивном режиме"""
    
    def test_empty_input(self):
        packed, restored, _, _ = _roundtrip(b'')
        self.assertIn(len(packed), (1, 2))
        self.assertEqual(restored, b'')
    
    def test_simple_text(self):
        data = b"The quick brown fox jumps over the lazy dog"
        self.assertEqual(decompress(compress(data, adaptive=True), adaptive=True), data)
    
    def test_all_byte_values(self):
        data = bytes(range(256)) * 3
        _, restored, _, _ = _roundtrip(data)
        self.assertEqual(restored, data)
    
    def test_deterministic(self):
        data = b"Lorem ipsum dolor sit amet " * 200
        self.assertEqual(compress(data, adaptive=True), compress(data, adaptive=True))
    
    def test_compresses_skewed_data(self):
        random.seed(1)
        data = bytes(random.choice(b'aaaaaaaabbbbccd') for _ in range(20000))
        packed, restored, _, _ = _roundtrip(data)
        self.assertLess(len(packed), len(data) // 3)
        self.assertEqual(restored, data)
    
    def test_small_reset_period(self):
        random.seed(9)
        data = bytes(random.choice(b'xyz\x00\xff') for _ in range(5000))
        _, restored, encode_stats, decode_stats = _roundtrip(data, reset_period=100)
        
        self.assertEqual(restored, data)
        self.assertEqual(encode_stats.resets, 50)
        self.assertEqual(encode_stats.resets, decode_stats.resets)
        self.assertEqual(encode_stats.rebuilds, decode_stats.rebuilds)
    
    def test_trailing_bits_ignored(self):
        data = b"abracadabra"
        packed = compress(data, adaptive=True)
        self.assertEqual(decompress(packed + b'\x00\xff', adaptive=True), data)
    
    def test_truncated_stream(self):
        packed = compress(b"Hello World! " * 10, adaptive=True)
        with self.assertRaises(EOFError):
            decompress(packed[:len(packed) // 2], adaptive=True)
        with self.assertRaises(EOFError):
            decompress(b'', adaptive=True)
    
    def test_million_repeated_bytes(self):
        data = b'\x2a' * 1000000
        packed, restored, encode_stats, decode_stats = _roundtrip(data)
        
        self.assertEqual(restored, data)
        self.assertEqual(encode_stats.symbols, 1000001)
        self.assertEqual(decode_stats.symbols, 1000001)
        # начальное дерево + 2^0..2^17 + три границы периода
        self.assertEqual(encode_stats.rebuilds, 1 + 18 + 3)
        self.assertEqual(encode_stats.resets, 3)
        self.assertEqual(decode_stats.rebuilds, encode_stats.rebuilds)
        self.assertEqual(decode_stats.resets, encode_stats.resets)
        self.assertLess(len(packed), len(data) // 6)


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    
    suite.addTests(loader.loadTestsFromTestCase(TestAdaptiveModel))
    suite.addTests(loader.loadTestsFromTestCase(TestAdaptiveCompression))
    
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)
    
    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
