import errno
import logging
import os
from pathlib import Path

import pytest

from sievedir.store.active import activate, deactivate
from sievedir.store.query import get_active, is_active
from sievedir.store.types import Outcome


def _pointer(sievedir: Path) -> Path:
    return sievedir / "defaultbc"


def test_activate_then_is_active(sievedir: Path) -> None:
    assert activate(sievedir, "vacation") is Outcome.OK

    assert is_active(sievedir, "vacation")
    assert _pointer(sievedir).is_symlink()
    assert os.readlink(_pointer(sievedir)) == "vacation.bc"
    assert not (sievedir / "defaultbc.NEW").exists()


def test_activate_is_idempotent(sievedir: Path) -> None:
    assert activate(sievedir, "a") is Outcome.OK
    first = os.lstat(_pointer(sievedir))
    assert activate(sievedir, "a") is Outcome.OK
    second = os.lstat(_pointer(sievedir))

    assert os.readlink(_pointer(sievedir)) == "a.bc"
    assert first.st_ino == second.st_ino
    assert sorted(os.listdir(sievedir)) == ["defaultbc"]


def test_activate_switches_scripts(sievedir: Path) -> None:
    activate(sievedir, "a")
    assert activate(sievedir, "b") is Outcome.OK

    assert get_active(sievedir) == "b"
    assert not is_active(sievedir, "a")


def test_activate_does_not_require_compiled_form(sievedir: Path) -> None:
    assert activate(sievedir, "missing") is Outcome.OK
    assert get_active(sievedir) == "missing"
    assert not (sievedir / "missing.bc").exists()


def test_activate_replaces_stale_temporary(sievedir: Path) -> None:
    (sievedir / "defaultbc.NEW").write_text("left over from a crash")

    assert activate(sievedir, "a") is Outcome.OK
    assert get_active(sievedir) == "a"
    assert not (sievedir / "defaultbc.NEW").exists()


def test_activate_symlink_failure_has_no_side_effect(
    sievedir: Path, monkeypatch: pytest.MonkeyPatch, caplog: pytest.LogCaptureFixture
) -> None:
    def _fail(*_args):
        raise OSError(errno.EACCES, "Permission denied")

    monkeypatch.setattr(os, "symlink", _fail)
    with caplog.at_level(logging.ERROR):
        assert activate(sievedir, "a") is Outcome.IOERROR

    assert os.listdir(sievedir) == []
    assert "IOERROR: unable to symlink a.bc" in caplog.text


def test_activate_rename_failure_keeps_old_pointer(
    sievedir: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    activate(sievedir, "a")

    def _fail(*_args):
        raise OSError(errno.EXDEV, "Invalid cross-device link")

    monkeypatch.setattr(os, "rename", _fail)
    assert activate(sievedir, "b") is Outcome.IOERROR

    assert get_active(sievedir) == "a"
    assert not os.path.lexists(sievedir / "defaultbc.NEW")


def test_activate_in_missing_repository(tmp_path: Path) -> None:
    assert activate(tmp_path / "absent", "a") is Outcome.IOERROR


def test_deactivate(sievedir: Path) -> None:
    activate(sievedir, "a")

    assert deactivate(sievedir) is Outcome.OK
    assert get_active(sievedir) is None
    assert deactivate(sievedir) is Outcome.OK


def test_deactivate_when_nothing_active(sievedir: Path) -> None:
    assert deactivate(sievedir) is Outcome.OK


def test_deactivate_failure(sievedir: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    activate(sievedir, "a")

    def _fail(*_args):
        raise OSError(errno.EROFS, "Read-only file system")

    with monkeypatch.context() as patch:
        patch.setattr(os, "unlink", _fail)
        assert deactivate(sievedir) is Outcome.IOERROR
    assert get_active(sievedir) == "a"
