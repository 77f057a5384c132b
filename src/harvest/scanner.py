"""Filesystem discovery utilities."""

from __future__ import annotations

import os
import stat
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Iterator, Optional, Tuple

from .errors import RootNotTraversableError, TraversalEntryError


TraversalErrorCallback = Callable[[TraversalEntryError], None]

# Reasonable default for directory scanning parallelism
_SCAN_MAX_WORKERS = 8

_DirKey = Tuple[int, int]


def _dir_key(st: os.stat_result) -> _DirKey:
    return (st.st_dev, st.st_ino)


def _list_directory(
    directory: Path,
    *,
    follow_symlinks: bool,
    is_root: bool,
) -> tuple[list[Path], list[tuple[Path, Optional[_DirKey]]], list[TraversalEntryError]]:
    files: list[Path] = []
    dirs: list[tuple[Path, Optional[_DirKey]]] = []
    errors: list[TraversalEntryError] = []
    try:
        with os.scandir(directory) as it:
            for entry in it:
                try:
                    if entry.is_file(follow_symlinks=follow_symlinks):
                        files.append(Path(entry.path))
                    elif entry.is_dir(follow_symlinks=follow_symlinks):
                        key = _dir_key(entry.stat()) if follow_symlinks else None
                        dirs.append((Path(entry.path), key))
                except OSError as exc:
                    # Race or permission problem on a single entry.
                    errors.append(TraversalEntryError.from_os_error(entry.path, exc))
    except OSError as exc:
        if is_root:
            raise RootNotTraversableError(directory, exc.strerror or str(exc)) from exc
        errors.append(TraversalEntryError.from_os_error(directory, exc))
    return files, dirs, errors


def iter_candidate_files(
    root: Path,
    *,
    follow_symlinks: bool = False,
    max_scan_workers: int = _SCAN_MAX_WORKERS,
    on_error: Optional[TraversalErrorCallback] = None,
) -> Iterator[Path]:
    """Yield every regular file under *root* using a threaded scandir walker.

    Entries that cannot be stat'd and directories that cannot be listed are
    dropped; they are passed to *on_error* when given and never raised. Only a
    root that cannot be read at all raises :class:`RootNotTraversableError`.
    """

    root = Path(root)
    try:
        root_stat = root.stat()
    except OSError as exc:
        raise RootNotTraversableError(root, exc.strerror or str(exc)) from exc

    if stat.S_ISREG(root_stat.st_mode):
        yield root
        return
    if not stat.S_ISDIR(root_stat.st_mode):
        raise RootNotTraversableError(root, "not a directory")

    visited: set[_DirKey] = {_dir_key(root_stat)}

    with ThreadPoolExecutor(max_workers=max_scan_workers) as executor:
        futures = [executor.submit(_list_directory, root, follow_symlinks=follow_symlinks, is_root=True)]
        while futures:
            future = futures.pop()
            files, dirs, errors = future.result()
            if on_error is not None:
                for error in errors:
                    on_error(error)
            for file_path in files:
                yield file_path
            for dir_path, key in dirs:
                if key is not None:
                    # Symlinked directories can loop back onto an ancestor.
                    if key in visited:
                        continue
                    visited.add(key)
                futures.append(
                    executor.submit(_list_directory, dir_path, follow_symlinks=follow_symlinks, is_root=False)
                )
