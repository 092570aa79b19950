from .artifacts import (
    collect_files,
    decode_single,
    encode_single,
    extract_ring_file,
    pack,
    unpack,
    write_files,
)

__all__ = [
    'collect_files',
    'decode_single',
    'encode_single',
    'extract_ring_file',
    'pack',
    'unpack',
    'write_files',
]
