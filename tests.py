import unittest
import tempfile
import io
import os
import sys
import random
import shutil
from contextlib import redirect_stdout, redirect_stderr

from bitstream import BitInputStream, BitOutputStream
from huffman import (CanonicalCode, CodeTree, FrequencyTable, HuffmanDecoder,
                     HuffmanEncoder, InternalNode, Leaf)
from format import (END_SYMBOL, HEADER_SIZE, SYMBOL_LIMIT, CodeLengthError,
                    FormatError, read_code_lengths, write_code_lengths)
from compressor import compress, decompress, compress_static, decompress_static
from archiver import Archiver
import main as cli


class TestBitStreams(unittest.TestCase):
    def test_msb_first_with_zero_padding(self):
        output = io.BytesIO()
        bit_out = BitOutputStream(output)
        for bit in (1, 0, 1):
            bit_out.write(bit)
        bit_out.finish()
        self.assertEqual(output.getvalue(), b'\xa0')
        self.assertEqual(bit_out.bits_written, 8)
    
    def test_write_bits_full_bytes(self):
        output = io.BytesIO()
        bit_out = BitOutputStream(output)
        bit_out.write_bits('0100000101000010')
        bit_out.finish()
        self.assertEqual(output.getvalue(), b'AB')
    
    def test_finish_on_byte_boundary_adds_nothing(self):
        output = io.BytesIO()
        bit_out = BitOutputStream(output)
        bit_out.write_bits('11111111')
        bit_out.finish()
        self.assertEqual(output.getvalue(), b'\xff')
    
    def test_invalid_bit(self):
        bit_out = BitOutputStream(io.BytesIO())
        with self.assertRaises(ValueError):
            bit_out.write(2)
    
    def test_read_bits_then_eof(self):
        bit_in = BitInputStream(io.BytesIO(b'\xa0'))
        bits = [bit_in.read() for _ in range(8)]
        self.assertEqual(bits, [1, 0, 1, 0, 0, 0, 0, 0])
        self.assertEqual(bit_in.read(), -1)
        self.assertEqual(bit_in.read(), -1)
        self.assertEqual(bit_in.bits_read, 8)
    
    def test_read_no_eof_raises(self):
        bit_in = BitInputStream(io.BytesIO(b''))
        with self.assertRaises(EOFError):
            bit_in.read_no_eof()


class TestFrequencyTable(unittest.TestCase):
    def test_increment_and_get(self):
        freqs = FrequencyTable([0] * SYMBOL_LIMIT)
        freqs.increment(65)
        freqs.increment(65)
        freqs.increment(END_SYMBOL)
        self.assertEqual(freqs.get(65), 2)
        self.assertEqual(freqs.get(END_SYMBOL), 1)
        self.assertEqual(freqs.get(0), 0)
        self.assertEqual(freqs.get_symbol_limit(), 257)
    
    def test_increment_out_of_range(self):
        freqs = FrequencyTable([0] * SYMBOL_LIMIT)
        with self.assertRaises(ValueError):
            freqs.increment(SYMBOL_LIMIT)
        with self.assertRaises(ValueError):
            freqs.increment(-1)
    
    def test_invalid_tables(self):
        with self.assertRaises(ValueError):
            FrequencyTable([1])
        with self.assertRaises(ValueError):
            FrequencyTable([1, -1])
    
    def test_maximum_frequency(self):
        freqs = FrequencyTable([0, 0])
        freqs.set(0, 0xFFFFFFFF)
        with self.assertRaises(ValueError):
            freqs.increment(0)
    
    def test_empty_table_cannot_build(self):
        with self.assertRaises(ValueError):
            FrequencyTable([0] * SYMBOL_LIMIT).build_code_tree()
    
    def test_table_is_copied(self):
        initial = [1, 1, 1]
        freqs = FrequencyTable(initial)
        freqs.increment(0)
        self.assertEqual(initial, [1, 1, 1])


class TestCodeTree(unittest.TestCase):
    def test_equal_frequencies_lower_symbol_first(self):
        tree = FrequencyTable([5, 5]).build_code_tree()
        self.assertEqual(tree.get_code(0), '0')
        self.assertEqual(tree.get_code(1), '1')
    
    def test_tie_break_is_exact(self):
        freqs = [0] * SYMBOL_LIMIT
        freqs[10] = 5
        freqs[20] = 5
        freqs[END_SYMBOL] = 1
        tree = FrequencyTable(freqs).build_code_tree()
        
        self.assertEqual(tree.get_code(20), '0')
        self.assertEqual(tree.get_code(END_SYMBOL), '10')
        self.assertEqual(tree.get_code(10), '11')
    
    def test_identical_tables_give_identical_trees(self):
        random.seed(7)
        freqs = [random.randint(0, 4) for _ in range(SYMBOL_LIMIT)]
        freqs[END_SYMBOL] = 1
        
        first = FrequencyTable(freqs).build_code_tree()
        second = FrequencyTable(list(freqs)).build_code_tree()
        self.assertEqual(first.codes, second.codes)
    
    def test_single_symbol_gets_padding_leaf(self):
        freqs = [0] * SYMBOL_LIMIT
        freqs[END_SYMBOL] = 1
        tree = FrequencyTable(freqs).build_code_tree()
        
        self.assertEqual(tree.get_code(0), '0')
        self.assertEqual(tree.get_code(END_SYMBOL), '1')
        with self.assertRaises(ValueError):
            tree.get_code(1)
    
    def test_zero_frequency_symbols_have_no_code(self):
        tree = FrequencyTable([3, 0, 2, 1]).build_code_tree()
        self.assertIsNone(tree.codes[1])
        with self.assertRaises(ValueError):
            tree.get_code(1)
        with self.assertRaises(ValueError):
            tree.get_code(4)
    
    def test_prefix_free(self):
        random.seed(11)
        freqs = [random.randint(1, 1000) for _ in range(SYMBOL_LIMIT)]
        codes = FrequencyTable(freqs).build_code_tree().codes
        for i, a in enumerate(codes):
            for j, b in enumerate(codes):
                if i != j:
                    self.assertFalse(b.startswith(a))
    
    def test_invalid_trees(self):
        with self.assertRaises(ValueError):
            CodeTree(Leaf(0), 2)
        with self.assertRaises(ValueError):
            CodeTree(InternalNode(Leaf(0), Leaf(0)), 2)
        with self.assertRaises(ValueError):
            CodeTree(InternalNode(Leaf(0), Leaf(5)), 2)
    
    def test_str_lists_codes(self):
        tree = FrequencyTable([5, 5]).build_code_tree()
        self.assertEqual(str(tree), "Code 0: Symbol 0\nCode 1: Symbol 1")


class TestCanonicalCode(unittest.TestCase):
    def test_lengths_preserved(self):
        random.seed(3)
        for _ in range(20):
            freqs = [random.choice((0, 0, 1, 2, 7, 50, 300)) for _ in range(SYMBOL_LIMIT)]
            freqs[END_SYMBOL] = 1
            tree = FrequencyTable(freqs).build_code_tree()
            
            canonical = CanonicalCode.from_code_tree(tree, SYMBOL_LIMIT)
            rebuilt = canonical.to_code_tree()
            
            for symbol in range(SYMBOL_LIMIT):
                original = tree.codes[symbol]
                code = rebuilt.codes[symbol]
                if original is None:
                    self.assertIsNone(code)
                    self.assertEqual(canonical.get_code_length(symbol), 0)
                else:
                    self.assertEqual(len(code), len(original))
    
    def test_canonical_assignment(self):
        tree = CanonicalCode([2, 1, 3, 3]).to_code_tree()
        self.assertEqual(tree.get_code(1), '0')
        self.assertEqual(tree.get_code(0), '10')
        self.assertEqual(tree.get_code(2), '110')
        self.assertEqual(tree.get_code(3), '111')
    
    def test_over_subscribed(self):
        with self.assertRaises(FormatError):
            CanonicalCode([1, 1, 1]).to_code_tree()
    
    def test_under_subscribed(self):
        with self.assertRaises(FormatError):
            CanonicalCode([1, 0]).to_code_tree()
        with self.assertRaises(FormatError):
            CanonicalCode([1, 2, 0]).to_code_tree()
    
    def test_no_symbols(self):
        with self.assertRaises(FormatError):
            CanonicalCode([0, 0, 0]).to_code_tree()
    
    def test_invalid_lengths(self):
        with self.assertRaises(ValueError):
            CanonicalCode([1])
        with self.assertRaises(ValueError):
            CanonicalCode([1, -1])
    
    def test_getters(self):
        canonical = CanonicalCode([1, 0, 1])
        self.assertEqual(canonical.get_symbol_limit(), 3)
        self.assertEqual(canonical.get_code_length(2), 1)
        with self.assertRaises(ValueError):
            canonical.get_code_length(3)


class TestHuffmanCoder(unittest.TestCase):
    def test_encode_decode_symbols(self):
        freqs = FrequencyTable([10, 3, 3, 1, 1])
        tree = freqs.build_code_tree()
        symbols = [0, 1, 2, 3, 4, 0, 0, 2]
        
        output = io.BytesIO()
        bit_out = BitOutputStream(output)
        encoder = HuffmanEncoder(bit_out)
        encoder.code_tree = tree
        for symbol in symbols:
            encoder.write(symbol)
        bit_out.finish()
        
        decoder = HuffmanDecoder(BitInputStream(io.BytesIO(output.getvalue())))
        decoder.code_tree = tree
        self.assertEqual([decoder.read() for _ in symbols], symbols)
    
    def test_encode_without_code(self):
        encoder = HuffmanEncoder(BitOutputStream(io.BytesIO()))
        encoder.code_tree = FrequencyTable([1, 1, 0]).build_code_tree()
        with self.assertRaises(ValueError):
            encoder.write(2)
    
    def test_tree_not_set(self):
        with self.assertRaises(ValueError):
            HuffmanEncoder(BitOutputStream(io.BytesIO())).write(0)
        with self.assertRaises(ValueError):
            HuffmanDecoder(BitInputStream(io.BytesIO(b'\x00'))).read()
    
    def test_decode_truncated(self):
        decoder = HuffmanDecoder(BitInputStream(io.BytesIO(b'')))
        decoder.code_tree = FrequencyTable([1, 1]).build_code_tree()
        with self.assertRaises(EOFError):
            decoder.read()


class TestCodeLengthHeader(unittest.TestCase):
    def test_write_and_read(self):
        lengths = [i % 9 for i in range(SYMBOL_LIMIT)]
        output = io.BytesIO()
        bit_out = BitOutputStream(output)
        write_code_lengths(bit_out, lengths)
        bit_out.finish()
        
        self.assertEqual(output.getvalue(), bytes(lengths))
        self.assertEqual(read_code_lengths(BitInputStream(io.BytesIO(output.getvalue()))), lengths)
    
    def test_length_too_long(self):
        bit_out = BitOutputStream(io.BytesIO())
        with self.assertRaises(CodeLengthError):
            write_code_lengths(bit_out, [256, 1])
        self.assertEqual(bit_out.bits_written, 0)
    
    def test_truncated_header(self):
        with self.assertRaises(FormatError):
            read_code_lengths(BitInputStream(io.BytesIO(b'\x01' * 100)))


class TestStaticCompression(unittest.TestCase):
    def test_empty_input(self):
        compressed = compress(b'')
        
        expected_header = bytearray(HEADER_SIZE)
        expected_header[0] = 1
        expected_header[END_SYMBOL] = 1
        self.assertEqual(compressed, bytes(expected_header) + b'\x80')
        self.assertEqual(decompress(compressed), b'')
    
    def test_simple_text(self):
        data = b"The quick brown fox jumps over the lazy dog"
        self.assertEqual(decompress(compress(data)), data)
    
    def test_single_repeated_byte(self):
        data = b"A" * 1000
        compressed = compress(data)
        self.assertLess(len(compressed), HEADER_SIZE + 300)
        self.assertEqual(decompress(compressed), data)
    
    def test_all_byte_values(self):
        data = bytes(range(256))
        compressed = compress(data)
        header = compressed[:HEADER_SIZE]
        
        for length in header[:256]:
            self.assertIn(length, (8, 9))
        self.assertEqual(header.count(9), 2)
        self.assertEqual(header.count(8), 255)
        self.assertEqual(decompress(compressed), data)
    
    def test_deterministic(self):
        data = b"Lorem ipsum dolor sit amet " * 200
        self.assertEqual(compress(data), compress(data))
    
    def test_trailing_bits_ignored(self):
        data = b"abracadabra"
        compressed = compress(data)
        self.assertEqual(decompress(compressed + b'\xff\xff\xff'), data)
    
    def test_truncated_stream(self):
        compressed = compress(b"Hello World! " * 10)
        with self.assertRaises(EOFError):
            decompress(compressed[:HEADER_SIZE])
    
    def test_truncated_header(self):
        with self.assertRaises(FormatError):
            decompress(b'\x02' * 10)
    
    def test_invalid_length_table(self):
        with self.assertRaises(FormatError):
            decompress(b'\x01' * HEADER_SIZE + b'\x00')
    
    def test_stats(self):
        data = b"aaaabbc" * 100
        output = io.BytesIO()
        stats = compress_static(io.BytesIO(data), output)
        self.assertEqual(stats.original_size, 700)
        self.assertEqual(stats.compressed_size, len(output.getvalue()))
        self.assertEqual(stats.symbols, 701)
        self.assertEqual(stats.rebuilds, 2)
        
        restored = io.BytesIO()
        back = decompress_static(io.BytesIO(output.getvalue()), restored)
        self.assertEqual(back.original_size, 700)
        self.assertEqual(back.rebuilds, 1)
        self.assertEqual(restored.getvalue(), data)
    
    def test_large_random_data(self):
        random.seed(42)
        data = bytes(random.randint(0, 255) for _ in range(100000))
        self.assertEqual(decompress(compress(data)), data)


class TestArchiver(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
    
    def tearDown(self):
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)
    
    def _path(self, name):
        return os.path.join(self.temp_dir, name)
    
    def test_compress_decompress_file(self):
        for adaptive in (False, True):
            archiver = Archiver(adaptive=adaptive, verbose=False)
            with open(self._path("test.txt"), 'wb') as f:
                f.write(b"Hello World! " * 100)
            
            stats = archiver.compress_file(self._path("test.txt"), self._path("test.huf"))
            self.assertEqual(stats.original_size, 1300)
            self.assertLess(stats.compressed_size, stats.original_size)
            
            archiver.decompress_file(self._path("test.huf"), self._path("test.out"))
            with open(self._path("test.out"), 'rb') as f:
                self.assertEqual(f.read(), b"Hello World! " * 100)
    
    def test_failed_run_removes_output(self):
        with open(self._path("bad.huf"), 'wb') as f:
            f.write(b'\x01\x02\x03')
        
        archiver = Archiver(verbose=False)
        with self.assertRaises(FormatError):
            archiver.decompress_file(self._path("bad.huf"), self._path("bad.out"))
        self.assertFalse(os.path.exists(self._path("bad.out")))
    
    def test_missing_input(self):
        archiver = Archiver(verbose=False)
        with self.assertRaises(OSError):
            archiver.compress_file(self._path("missing.txt"), self._path("out.huf"))
        self.assertFalse(os.path.exists(self._path("out.huf")))
    
    def test_same_input_and_output(self):
        with open(self._path("same.txt"), 'wb') as f:
            f.write(b"data")
        with self.assertRaises(ValueError):
            Archiver(verbose=False).compress_file(self._path("same.txt"), self._path("same.txt"))
    
    @unittest.skipUnless(hasattr(os, "symlink"), "symlinks not supported")
    def test_output_linked_to_input(self):
        original = bytes(range(256)) * 3
        with open(self._path("a.bin"), 'wb') as f:
            f.write(original)
        os.symlink(self._path("a.bin"), self._path("b.huf"))
        os.link(self._path("a.bin"), self._path("c.huf"))
        
        archiver = Archiver(verbose=False)
        for output in ("b.huf", "c.huf"):
            with self.assertRaises(ValueError):
                archiver.compress_file(self._path("a.bin"), self._path(output))
        
        with open(self._path("a.bin"), 'rb') as f:
            self.assertEqual(f.read(), original)


class TestCommandLine(unittest.TestCase):
    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.source = os.path.join(self.temp_dir, "input.bin")
        with open(self.source, 'wb') as f:
            f.write(b"command line data " * 50)
    
    def tearDown(self):
        shutil.rmtree(self.temp_dir)
    
    def test_compress_and_decompress(self):
        packed = os.path.join(self.temp_dir, "input.huf")
        restored = os.path.join(self.temp_dir, "input.out")
        
        with redirect_stdout(io.StringIO()):
            cli.main(['compress', self.source, packed, '--stats'])
            cli.main(['decompress', packed, restored])
        
        with open(restored, 'rb') as f:
            self.assertEqual(f.read(), b"command line data " * 50)
    
    def test_two_argument_programs(self):
        packed = os.path.join(self.temp_dir, "input.ahuf")
        restored = os.path.join(self.temp_dir, "input.out")
        
        with redirect_stdout(io.StringIO()):
            cli.adaptive_huffman_compress([self.source, packed])
            cli.adaptive_huffman_decompress([packed, restored])
        
        with open(restored, 'rb') as f:
            self.assertEqual(f.read(), b"command line data " * 50)
    
    def test_usage_error(self):
        with redirect_stderr(io.StringIO()):
            with self.assertRaises(SystemExit) as ctx:
                cli.huffman_compress([self.source])
        self.assertNotEqual(ctx.exception.code, 0)
    
    def test_io_error(self):
        errors = io.StringIO()
        with redirect_stdout(io.StringIO()), redirect_stderr(errors):
            with self.assertRaises(SystemExit) as ctx:
                cli.huffman_decompress([os.path.join(self.temp_dir, "missing"),
                                        os.path.join(self.temp_dir, "out")])
        self.assertEqual(ctx.exception.code, 1)
        self.assertTrue(errors.getvalue().startswith("Error:"))


def run_tests():
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()
    
    suite.addTests(loader.loadTestsFromTestCase(TestBitStreams))
    suite.addTests(loader.loadTestsFromTestCase(TestFrequencyTable))
    suite.addTests(loader.loadTestsFromTestCase(TestCodeTree))
    suite.addTests(loader.loadTestsFromTestCase(TestCanonicalCode))
    suite.addTests(loader.loadTestsFromTestCase(TestHuffmanCoder))
    suite.addTests(loader.loadTestsFromTestCase(TestCodeLengthHeader))
    suite.addTests(loader.loadTestsFromTestCase(TestStaticCompression))
    suite.addTests(loader.loadTestsFromTestCase(TestArchiver))
    suite.addTests(loader.loadTestsFromTestCase(TestCommandLine))
    
    runner = unittest.TextTestRunner(verbosity=2)
    result = runner.run(suite)
    
    return 0 if result.wasSuccessful() else 1


if __name__ == '__main__':
    sys.exit(run_tests())
