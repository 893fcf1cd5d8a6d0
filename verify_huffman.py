"""
Автоматическая интеграционная проверка компрессора Хаффмана

Полная проверка: создание → сжатие → распаковка → сравнение CRC32
для статического и адаптивного режимов.
"""

import os
import random
import sys
import tempfile
import zlib

from archiver import Archiver


def create_test_files(temp_dir: str) -> dict:
    random.seed(2024)
    
    files_to_create = {
        'empty.bin': b'',
        'text.txt': ("Привет, мир!\n" * 100 + "Повторяющийся текст.\n" * 50).encode('utf-8'),
        'all_bytes.bin': bytes(range(256)),
        'skewed.bin': bytes(random.choice(b'aaaaaaabbbc') for _ in range(20000)),
        'random.bin': bytes(random.randint(0, 255) for _ in range(5000)),
    }
    
    for filename, content in files_to_create.items():
        with open(os.path.join(temp_dir, filename), 'wb') as f:
            f.write(content)
        print(f"   {filename}: {len(content):,} байт")
    
    return files_to_create


def verify_mode(temp_dir: str, files: dict, adaptive: bool) -> bool:
    mode = 'adaptive' if adaptive else 'static'
    archiver = Archiver(adaptive=adaptive)
    all_match = True
    
    for filename, original in files.items():
        source = os.path.join(temp_dir, filename)
        packed = os.path.join(temp_dir, f"{filename}.{mode}.huf")
        restored = os.path.join(temp_dir, f"{filename}.{mode}.out")
        
        try:
            archiver.compress_file(source, packed)
            archiver.decompress_file(packed, restored)
        except (OSError, ValueError, EOFError) as e:
            print(f"    {filename}: ошибка: {e}")
            all_match = False
            continue
        
        with open(restored, 'rb') as f:
            extracted = f.read()
        
        if zlib.crc32(extracted) == zlib.crc32(original) and extracted == original:
            print(f"   {filename}: ИДЕНТИЧЕН исходному "
                  f"({os.path.getsize(packed):,} байт сжато)")
        else:
            print(f"    {filename}: ОТЛИЧАЕТСЯ от исходного!")
            all_match = False
    
    return all_match


def verify_huffman() -> bool:
    print("=" * 70)
    print("ПОЛНАЯ ПРОВЕРКА КОМПРЕССОРА ХАФФМАНА")
    print("=" * 70)
    
    with tempfile.TemporaryDirectory() as temp_dir:
        print("\n1. Создание тестовых файлов...")
        print("-" * 70)
        files = create_test_files(temp_dir)
        
        print("\n2. Статический режим...")
        print("-" * 70)
        if not verify_mode(temp_dir, files, adaptive=False):
            return False
        
        print("\n3. Адаптивный режим...")
        print("-" * 70)
        if not verify_mode(temp_dir, files, adaptive=True):
            return False
    
    print("\n" + "=" * 70)
    print(" Все проверки пройдены!")
    return True


if __name__ == '__main__':
    sys.exit(0 if verify_huffman() else 1)
