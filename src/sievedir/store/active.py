"""The active-script pointer.

The active script is named by a symbolic link, ``defaultbc``, whose target
is the relative filename of the script's compiled form. A new pointer is
built under a temporary name and renamed over the old one, so readers see
either the previous pointer or the new one, never a partial link.

Activation does not check that the compiled form exists; a pointer to a
missing script is tolerated and resolves to nothing at read time.
"""

from __future__ import annotations

import logging
import os

from sievedir.store.query import is_active
from sievedir.store.types import BYTECODE_SUFFIX, NEW_SUFFIX, Outcome, active_path

logger = logging.getLogger(__name__)


def activate(sievedir: str | os.PathLike[str], name: str) -> Outcome:
    if is_active(sievedir, name):
        return Outcome.OK

    target = name + BYTECODE_SUFFIX
    active = active_path(sievedir)
    tmp = active + NEW_SUFFIX

    # symlink() refuses to overwrite a temporary left behind by a crash.
    try:
        os.unlink(tmp)
    except FileNotFoundError:
        pass
    except OSError as exc:
        logger.error("IOERROR: unlink(%s): %s", tmp, exc.strerror)
        return Outcome.IOERROR

    try:
        os.symlink(target, tmp)
    except OSError as exc:
        logger.error("IOERROR: unable to symlink %s as %s: %s", target, tmp, exc.strerror)
        return Outcome.IOERROR

    try:
        os.rename(tmp, active)
    except OSError as exc:
        logger.error("IOERROR: unable to rename %s to %s: %s", tmp, active, exc.strerror)
        try:
            os.unlink(tmp)
        except OSError:
            logger.warning("Unable to remove temporary pointer %s", tmp)
        return Outcome.IOERROR

    logger.info("Activated script %s", name)
    return Outcome.OK


def deactivate(sievedir: str | os.PathLike[str]) -> Outcome:
    active = active_path(sievedir)
    try:
        os.unlink(active)
    except FileNotFoundError:
        return Outcome.OK
    except OSError as exc:
        logger.error("IOERROR: unable to unlink %s: %s", active, exc.strerror)
        return Outcome.IOERROR

    logger.info("Deactivated active script in %s", os.fspath(sievedir))
    return Outcome.OK
