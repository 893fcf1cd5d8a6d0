"""
Командная строка для сжатия файлов кодом Хаффмана.
"""

import argparse
import sys
from typing import List, Optional

from archiver import Archiver


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(
        description='Static and adaptive Huffman compressor',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py compress input.bin output.huf
  python main.py decompress output.huf restored.bin
  python main.py compress --adaptive input.bin output.ahuf
        """
    )
    
    subparsers = parser.add_subparsers(dest='command', help='Command')
    
    for command, help_text in (('compress', 'Compress a file'),
                               ('decompress', 'Decompress a file')):
        sub = subparsers.add_parser(command, help=help_text)
        sub.add_argument('input', help='Input file')
        sub.add_argument('output', help='Output file')
        sub.add_argument('--adaptive', action='store_true',
                         help='Use adaptive Huffman coding (no code table)')
        sub.add_argument('--stats', action='store_true',
                         help='Print compression statistics')
    
    args = parser.parse_args(argv)
    
    if not args.command:
        parser.print_help()
        sys.exit(1)
    
    _execute(args.input, args.output, args.adaptive,
             args.command == 'decompress', args.stats)


def _execute(input_path: str, output_path: str, adaptive: bool,
             decompress: bool, show_stats: bool = False):
    archiver = Archiver(adaptive=adaptive)
    
    try:
        if decompress:
            stats = archiver.decompress_file(input_path, output_path)
        else:
            stats = archiver.compress_file(input_path, output_path)
    
    except (OSError, ValueError, EOFError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    
    if show_stats:
        stats.print_stats()


def _single_command(prog: str, adaptive: bool, decompress: bool,
                    argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(prog=prog)
    parser.add_argument('input', help='Input file')
    parser.add_argument('output', help='Output file')
    args = parser.parse_args(argv)
    
    _execute(args.input, args.output, adaptive, decompress)


def huffman_compress(argv: Optional[List[str]] = None):
    _single_command('huffman-compress', adaptive=False, decompress=False, argv=argv)


def huffman_decompress(argv: Optional[List[str]] = None):
    _single_command('huffman-decompress', adaptive=False, decompress=True, argv=argv)


def adaptive_huffman_compress(argv: Optional[List[str]] = None):
    _single_command('adaptive-huffman-compress', adaptive=True, decompress=False, argv=argv)


def adaptive_huffman_decompress(argv: Optional[List[str]] = None):
    _single_command('adaptive-huffman-decompress', adaptive=True, decompress=True, argv=argv)


if __name__ == '__main__':
    main()
