from .exceptions import AlreadyExistsError, InvalidPatternError, PatternCompileError
from .location import Directory, File, Location, locate, temporary_directory
from .options import ExistingPolicy, Option
from .walk import (
    OperationMode, TreeWalker, WalkError, WalkReport,
    copy_tree, move_tree, delete_tree, walk_files, walk_directories,
)
from .watch import EventKind, Observation, WatchEvent
from .archive import Archive, is_archive
from .lock import lock

__all__ = [
    "AlreadyExistsError", "InvalidPatternError", "PatternCompileError",
    "Directory", "File", "Location", "locate", "temporary_directory",
    "ExistingPolicy", "Option",
    "OperationMode", "TreeWalker", "WalkError", "WalkReport",
    "copy_tree", "move_tree", "delete_tree", "walk_files", "walk_directories",
    "EventKind", "Observation", "WatchEvent",
    "Archive", "is_archive", "lock",
]
