"""
collect — Core dump packaging stages and the pipeline that runs them.
"""

from .archiver import create_archive, remove_staging
from .binary import find_binary, is_core, load_core, parse_binary_name, resolve_binary
from .copier import copy_file, copy_file_path, copy_files, deep_destination
from .integrity import find_missing_artifacts, verify_bundle
from .pipeline import CollectionRun, collect_core, pack_core_file
from .platform import write_platform_info
from .resolver import resolve_libraries, select_strategy
from .script import generate_gdb_script

__all__ = [
    "create_archive",
    "remove_staging",
    "find_binary",
    "is_core",
    "load_core",
    "parse_binary_name",
    "resolve_binary",
    "copy_file",
    "copy_file_path",
    "copy_files",
    "deep_destination",
    "find_missing_artifacts",
    "verify_bundle",
    "CollectionRun",
    "collect_core",
    "pack_core_file",
    "write_platform_info",
    "resolve_libraries",
    "select_strategy",
    "generate_gdb_script",
]
