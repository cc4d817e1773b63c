import os
from pathlib import Path

from sievedir.store.enumerator import iter_entries


def test_missing_directory_yields_nothing(tmp_path: Path) -> None:
    assert list(iter_entries(tmp_path / "absent")) == []


def test_regular_file_path_yields_nothing(tmp_path: Path) -> None:
    path = tmp_path / "plain"
    path.write_text("x")
    assert list(iter_entries(path)) == []


def test_classifies_files_and_links(sievedir: Path) -> None:
    (sievedir / "a.script").write_text("keep;")
    (sievedir / "a.bc").write_text("{}")
    (sievedir / "nested").mkdir()
    os.mkfifo(sievedir / "pipe")
    os.symlink("a.bc", sievedir / "defaultbc")
    os.symlink("gone.bc", sievedir / "dangling")

    entries = {entry.name: entry for entry in iter_entries(sievedir)}

    assert set(entries) == {"a.script", "a.bc", "defaultbc", "dangling"}
    assert entries["a.script"].is_file
    assert entries["a.script"].link_target == ""
    assert entries["defaultbc"].is_symlink
    assert not entries["defaultbc"].is_file
    assert entries["defaultbc"].link_target == "a.bc"
    assert entries["dangling"].link_target == "gone.bc"


def test_unreadable_link_target_leaves_empty_target(
    sievedir: Path, monkeypatch
) -> None:
    os.symlink("a.bc", sievedir / "defaultbc")

    def _fail(_path):
        raise OSError(5, "Input/output error")

    monkeypatch.setattr(os, "readlink", _fail)
    entries = list(iter_entries(sievedir))
    assert [(entry.name, entry.link_target) for entry in entries] == [("defaultbc", "")]


def test_consumer_can_stop_early(sievedir: Path) -> None:
    for index in range(5):
        (sievedir / f"s{index}.script").write_text("keep;")

    walk = iter_entries(sievedir)
    first = next(walk)
    walk.close()

    assert first.name.endswith(".script")
    assert list(walk) == []


def test_no_entry_is_visited_twice(sievedir: Path) -> None:
    for index in range(20):
        (sievedir / f"s{index}.script").write_text("keep;")

    names = [entry.name for entry in iter_entries(sievedir)]
    assert len(names) == len(set(names)) == 20
