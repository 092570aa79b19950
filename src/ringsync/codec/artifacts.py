"""Encoding of ring artifacts for storage in the ConfigMap binaryData."""

import base64
import binascii
import io
import logging
import os
import tarfile
from pathlib import Path, PurePosixPath
from typing import Dict, Optional, Union

from ringsync.errors import ArtifactError
from ringsync.models import Ring

logger = logging.getLogger(__name__)

FileSet = Dict[str, bytes]


def encode_single(data: bytes) -> str:
    """Base64 encode one artifact for the binaryData mapping."""
    return base64.b64encode(data).decode('ascii')


def decode_single(text: Union[str, bytes]) -> bytes:
    """Decode one base64 artifact from the binaryData mapping."""
    try:
        return base64.b64decode(text, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ArtifactError(f"Invalid base64 payload: {e}")


def _check_member_name(name: str) -> str:
    path = PurePosixPath(name)
    if path.is_absolute() or '..' in path.parts:
        raise ArtifactError(f"Refusing unsafe archive member: {name}")
    return str(path)


def pack(files: FileSet) -> str:
    """Archive a file set as tar.gz and return it base64 encoded."""
    buffer = io.BytesIO()
    total = 0
    with tarfile.open(fileobj=buffer, mode='w:gz') as tar:
        for name in sorted(files):
            data = files[name]
            info = tarfile.TarInfo(name=_check_member_name(name))
            info.size = len(data)
            info.mode = 0o644
            tar.addfile(info, io.BytesIO(data))
            total += len(data)
    logger.info(f"Packed {len(files)} files, total bytes written: {total}")
    return encode_single(buffer.getvalue())


def unpack(encoded: Optional[Union[str, bytes]]) -> FileSet:
    """Decode a bundle produced by pack().

    An empty or missing bundle is a valid never-initialized state and yields
    an empty file set.
    """
    if not encoded:
        return {}
    raw = decode_single(encoded)
    if not raw:
        return {}

    files: FileSet = {}
    try:
        with tarfile.open(fileobj=io.BytesIO(raw), mode='r:*') as tar:
            for member in tar.getmembers():
                if member.isdir():
                    continue
                if not member.isfile():
                    raise ArtifactError(f"Unexpected archive member type: {member.name}")
                name = _check_member_name(member.name)
                fileobj = tar.extractfile(member)
                files[name] = fileobj.read()
    except (tarfile.TarError, EOFError, OSError) as e:
        raise ArtifactError(f"Corrupt ring bundle: {e}")

    logger.info(f"Unpacked {len(files)} files from ring bundle")
    return files


def extract_ring_file(files: FileSet, ring: Ring) -> bytes:
    """Return the compiled ring file of one ring from a file set."""
    try:
        return files[ring.ring_file]
    except KeyError:
        raise ArtifactError(f"{ring.ring_file} missing from ring bundle")


def is_ring_artifact(name: str) -> bool:
    path = PurePosixPath(name)
    if name.endswith('.ring.gz') and len(path.parts) == 1:
        return True
    if name.endswith('.builder'):
        return len(path.parts) == 1 or (len(path.parts) == 2 and path.parts[0] == 'backups')
    return False


def collect_files(workdir: Union[str, Path]) -> FileSet:
    """Read the builder, ring and backup builder files from a directory."""
    root = Path(workdir)
    files: FileSet = {}
    for path in sorted(root.rglob('*')):
        if not path.is_file():
            continue
        name = path.relative_to(root).as_posix()
        if is_ring_artifact(name):
            files[name] = path.read_bytes()
    return files


def write_files(workdir: Union[str, Path], files: FileSet) -> None:
    """Write a file set below a directory, creating subdirectories as needed."""
    root = Path(workdir)
    for name, data in files.items():
        target = root / _check_member_name(name)
        os.makedirs(target.parent, exist_ok=True)
        target.write_bytes(data)
        logger.debug(f"Wrote {target} ({len(data)} bytes)")


def clear_files(workdir: Union[str, Path]) -> int:
    """Delete the builder, ring and backup builder files below a directory."""
    root = Path(workdir)
    removed = 0
    for name in collect_files(root):
        (root / name).unlink()
        removed += 1
    if removed:
        logger.info(f"Removed {removed} local ring files from {root}")
    return removed
