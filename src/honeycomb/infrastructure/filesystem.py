"""Profile file I/O.

INVARIANT: Output files are only ever produced whole.  A write goes to a
temporary sibling first and is renamed over the target, so readers never
observe a partial profile and a failed run leaves no output behind.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path

BACKUP_SUFFIX = ".bak"


# ---------------------------------------------------------------------------
# Reading
# ---------------------------------------------------------------------------


def read_profile(path: Path) -> bytes:
    """Read a whole profile into memory."""
    return path.read_bytes()


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def write_profile(path: Path, data: bytes) -> None:
    """Atomically replace *path* with *data*.

    An existing target keeps its owner, group, mode and extended
    attributes (including the SELinux label), since system_server
    only reads a profile that is still ``system:system``.  A chown the
    caller is not allowed to make fails the write instead of re-owning the
    file.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    tmp = Path(tmp_name)
    try:
        with os.fdopen(fd, "wb") as fh:
            fh.write(data)
            fh.flush()
            os.fsync(fh.fileno())
        if path.exists():
            _copy_ownership(path, tmp)
        os.replace(tmp, path)
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise


def _copy_ownership(src: Path, dst: Path) -> None:
    st = src.stat()
    current = dst.stat()
    if (current.st_uid, current.st_gid) != (st.st_uid, st.st_gid):
        os.chown(dst, st.st_uid, st.st_gid)
    # After chown, which may clear set-id bits.
    shutil.copystat(src, dst)
    os.utime(dst)


def backup_profile(path: Path, stamp: str) -> Path:
    """Copy *path* next to itself as ``<name>.<stamp>.bak`` and return the copy."""
    backup = path.with_name(f"{path.name}.{stamp}{BACKUP_SUFFIX}")
    shutil.copy2(path, backup)
    _copy_ownership(path, backup)
    return backup


# ---------------------------------------------------------------------------
# Path checks
# ---------------------------------------------------------------------------


def same_file(a: Path, b: Path) -> bool:
    """True when *a* and *b* name the same file (resolving symlinks)."""
    if a.exists() and b.exists():
        return os.path.samefile(a, b)
    return a.resolve() == b.resolve()
