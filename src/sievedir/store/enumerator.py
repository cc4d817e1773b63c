"""Single-pass classification of repository directory entries."""

from __future__ import annotations

import os
import stat
from collections.abc import Iterator

from sievedir.store.types import DirEntry


def iter_entries(sievedir: str | os.PathLike[str]) -> Iterator[DirEntry]:
    """Yield the regular files and symbolic links of a repository directory.

    A directory that cannot be opened yields nothing. Links are detected with
    lstat rather than followed; their targets are read best-effort and left
    empty when unreadable. Every other file type is skipped. Order follows the
    OS listing and entries created or removed during the walk may or may not
    be seen.
    """
    try:
        scanner = os.scandir(sievedir)
    except OSError:
        return

    with scanner:
        for item in scanner:
            try:
                info = item.stat(follow_symlinks=False)
            except OSError:
                continue

            target = ""
            if stat.S_ISLNK(info.st_mode):
                try:
                    target = os.readlink(item.path)
                except OSError:
                    target = ""
            elif not stat.S_ISREG(info.st_mode):
                continue

            yield DirEntry(name=item.name, stat=info, link_target=target)
