"""Delete and rename of installed scripts.

Both operations touch the source file first, since it is the script's
primary record. Rename does not undo the source move when the compiled form
cannot follow it; the repository is then left with the new source beside the
old (or no) compiled form and IOERROR is reported.
"""

from __future__ import annotations

import logging
import os

from sievedir.store.active import activate
from sievedir.store.query import is_active
from sievedir.store.types import Outcome, bytecode_path, script_path

logger = logging.getLogger(__name__)


def delete_script(sievedir: str | os.PathLike[str], name: str) -> Outcome:
    path = script_path(sievedir, name)
    try:
        os.unlink(path)
    except FileNotFoundError:
        return Outcome.NOTFOUND
    except OSError as exc:
        logger.error("IOERROR: unlink(%s): %s", path, exc.strerror)
        return Outcome.IOERROR

    path = bytecode_path(sievedir, name)
    try:
        os.unlink(path)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.warning("IOERROR: unlink(%s): %s", path, exc.strerror)

    logger.info("Deleted script %s", name)
    return Outcome.OK


def rename_script(sievedir: str | os.PathLike[str], oldname: str, newname: str) -> Outcome:
    old_path = script_path(sievedir, oldname)
    new_path = script_path(sievedir, newname)
    try:
        os.rename(old_path, new_path)
    except FileNotFoundError:
        return Outcome.NOTFOUND
    except OSError as exc:
        logger.error("IOERROR: rename(%s, %s): %s", old_path, new_path, exc.strerror)
        return Outcome.IOERROR

    old_path = bytecode_path(sievedir, oldname)
    new_path = bytecode_path(sievedir, newname)
    try:
        os.rename(old_path, new_path)
    except OSError as exc:
        logger.error("IOERROR: rename(%s, %s): %s", old_path, new_path, exc.strerror)
        return Outcome.IOERROR

    logger.info("Renamed script %s to %s", oldname, newname)
    if is_active(sievedir, oldname):
        return activate(sievedir, newname)
    return Outcome.OK
