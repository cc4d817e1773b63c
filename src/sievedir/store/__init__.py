"""Directory-backed repository of Sieve scripts."""

from sievedir.store.active import activate, deactivate
from sievedir.store.enumerator import iter_entries
from sievedir.store.install import check_script, normalize_line_endings, put_script, valid_name
from sievedir.store.mutation import delete_script, rename_script
from sievedir.store.query import (
    count_other_scripts,
    get_active,
    get_script,
    is_active,
    list_scripts,
    script_exists,
)
from sievedir.store.types import DirEntry, Outcome, PutResult, ScriptCompiler, ScriptInfo

__all__ = [
    "DirEntry",
    "Outcome",
    "PutResult",
    "ScriptCompiler",
    "ScriptInfo",
    "activate",
    "check_script",
    "count_other_scripts",
    "deactivate",
    "delete_script",
    "get_active",
    "get_script",
    "is_active",
    "iter_entries",
    "list_scripts",
    "normalize_line_endings",
    "put_script",
    "rename_script",
    "script_exists",
    "valid_name",
]
