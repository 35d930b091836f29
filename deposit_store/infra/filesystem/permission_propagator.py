# Copyright 2026 Dell Inc. or its subsidiaries. All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Recursive permission propagation over a deposit directory.

Best effort: every file and then every directory (post-order) gets the
same permission mask. The first failure is logged and stops the walk, so
nodes visited before it keep their new permissions and nothing after it
is touched.

Symbolic links are skipped: neither the link nor its target is changed.
The permission check looks at the file system the tree is mounted on, so
a FAT or SMB mount on a POSIX host is left alone.
"""

import errno
import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, List, Optional, Union

from deposit_store.common.logging_utils import deposit_logger
from deposit_store.core.deposit.exceptions import PermissionPropagationError
from deposit_store.core.deposit.value_objects import PosixPermissions

from .file_tree_walker import VisitResult, walk_file_tree

logger = logging.getLogger(__name__)

_UNSUPPORTED_ERRNOS = {errno.ENOTSUP, errno.EOPNOTSUPP, errno.ENOSYS}


class PermissionFailureKind(str, Enum):
    """Classification of a failure to set permissions on one node."""

    UNSUPPORTED_OPERATION = "UNSUPPORTED_OPERATION"
    MALFORMED_PERMISSIONS = "MALFORMED_PERMISSIONS"
    IO_ERROR = "IO_ERROR"
    INSUFFICIENT_PRIVILEGE = "INSUFFICIENT_PRIVILEGE"
    UNEXPECTED = "UNEXPECTED"


@dataclass(frozen=True)
class PermissionFailure:
    """A node whose permissions could not be set."""

    path: Path
    kind: PermissionFailureKind
    error: BaseException


@dataclass
class PermissionChangeResult:
    """Outcome of a permission walk.

    Attributes:
        completed: False when a failure stopped the walk early.
        visited: Nodes whose permissions were set, in walk order.
        failures: Nodes that failed; the walk stops at the first one.
    """

    completed: bool = True
    visited: List[Path] = field(default_factory=list)
    failures: List[PermissionFailure] = field(default_factory=list)


def classify_failure(exc: BaseException) -> PermissionFailureKind:
    """Map an exception raised while setting permissions onto a failure kind."""
    if isinstance(exc, NotImplementedError):
        return PermissionFailureKind.UNSUPPORTED_OPERATION
    if isinstance(exc, PermissionError):
        return PermissionFailureKind.INSUFFICIENT_PRIVILEGE
    if isinstance(exc, OSError):
        if exc.errno in _UNSUPPORTED_ERRNOS:
            return PermissionFailureKind.UNSUPPORTED_OPERATION
        return PermissionFailureKind.IO_ERROR
    if isinstance(exc, (ValueError, TypeError)):
        return PermissionFailureKind.MALFORMED_PERMISSIONS
    return PermissionFailureKind.UNEXPECTED


MOUNTS_FILE = "/proc/mounts"

# file systems that do not keep POSIX permission bits
_NON_POSIX_FILESYSTEMS = frozenset({
    "vfat", "msdos", "fat", "exfat", "ntfs", "ntfs3", "fuseblk", "cifs", "smb3", "smbfs",
})


def _unescape_mount_point(field: str) -> str:
    # /proc/mounts writes space, tab, newline and backslash as octal escapes
    return re.sub(r"\\([0-7]{3})", lambda match: chr(int(match.group(1), 8)), field)


def filesystem_type(path: Path, mounts_file: str = MOUNTS_FILE) -> Optional[str]:
    """Return the type of the file system mounted at or above *path*.

    The mount table is read from *mounts_file*; the mount point that is the
    longest prefix of the resolved path wins.

    Returns:
        The file system type (``ext4``, ``vfat``, ...), or None when the
        mount table cannot be read.
    """
    target = os.path.realpath(path)
    try:
        with open(mounts_file, "r", encoding="utf-8") as mounts:
            lines = mounts.readlines()
    except OSError:
        return None

    best_point, best_type = "", None
    for line in lines:
        fields = line.split()
        if len(fields) < 3:
            continue
        point = _unescape_mount_point(fields[1])
        prefix = point.rstrip("/") + "/"
        if (target == point or target.startswith(prefix)) and len(point) > len(best_point):
            best_point, best_type = point, fields[2]
    return best_type


def is_posix_filesystem(path: Path, mounts_file: str = MOUNTS_FILE) -> bool:
    """True when the file system holding *path* keeps POSIX permission bits.

    Requires a POSIX platform. Where the mount table is unavailable the
    platform answer stands.
    """
    if os.name != "posix":
        return False
    return filesystem_type(path, mounts_file) not in _NON_POSIX_FILESYSTEMS


class PermissionPropagator:
    """Applies a symbolic permission mask to a whole deposit tree."""

    def __init__(
        self,
        log: Optional[logging.Logger] = None,
        chmod: Callable[[Path, int], None] = os.chmod,
        posix_check: Callable[[Path], bool] = is_posix_filesystem,
    ) -> None:
        """Initialize propagator.

        Args:
            log: Logger to report through; defaults to this module's.
            chmod: Function setting the mode of one path.
            posix_check: Predicate telling whether a tree supports POSIX modes.
        """
        self._log = log or logger
        self._chmod = chmod
        self._posix_check = posix_check

    def change_permissions_recursively(
        self,
        root_dir: Union[str, Path],
        permissions: Union[str, PosixPermissions],
        deposit_id: str,
    ) -> PermissionChangeResult:
        """Set *permissions* on every file and directory under *root_dir*.

        Does nothing when the filesystem has no POSIX permission support.
        Per-node failures are logged and end the walk early; they are
        reported in the result, never raised.

        Args:
            root_dir: Top of the deposit tree.
            permissions: Symbolic mask such as ``rwxrwx---``.
            deposit_id: Deposit the tree belongs to, used to tag log messages.

        Returns:
            PermissionChangeResult describing what was changed.

        Raises:
            PermissionPropagationError: If the walk cannot start because
                *root_dir* does not exist.
        """
        root = Path(root_dir)
        log = deposit_logger(deposit_id, self._log)
        result = PermissionChangeResult()

        if not os.path.lexists(root):
            raise PermissionPropagationError(
                path=str(root), reason="directory does not exist", deposit_id=deposit_id
            )

        if not self._posix_check(root):
            log.debug("Not on a POSIX file system, leaving permissions of %s as they are", root)
            return result

        try:
            mask = (
                permissions
                if isinstance(permissions, PosixPermissions)
                else PosixPermissions(permissions)
            )
        except ValueError as exc:
            self._record_failure(result, log, root, exc)
            return result

        def apply(path: Path, node_kind: str) -> VisitResult:
            log.debug("Setting the following permissions %s on %s %s", mask, node_kind, path)
            try:
                self._chmod(path, mask.mode)
            except Exception as exc:  # pylint: disable=broad-except
                self._record_failure(result, log, path, exc)
                return VisitResult.TERMINATE
            result.visited.append(path)
            return VisitResult.CONTINUE

        def visit_file(path: Path) -> VisitResult:
            if path.is_symlink():
                # chmod would change the link target, which may lie outside the deposit
                log.debug("Skipping symbolic link %s", path)
                return VisitResult.CONTINUE
            return apply(path, "file")

        def post_visit_directory(directory: Path, error: Optional[OSError]) -> VisitResult:
            outcome = apply(directory, "directory")
            if error is not None:
                log.error("Could not read directory %s: %s", directory, error)
                result.completed = False
                return VisitResult.TERMINATE
            return outcome

        try:
            walk_file_tree(root, visit_file, post_visit_directory)
        except FileNotFoundError as exc:
            raise PermissionPropagationError(
                path=str(root), reason=str(exc), deposit_id=deposit_id
            ) from exc
        return result

    @staticmethod
    def _record_failure(
        result: PermissionChangeResult,
        log,
        path: Path,
        exc: BaseException,
    ) -> None:
        kind = classify_failure(exc)
        if kind is PermissionFailureKind.UNSUPPORTED_OPERATION:
            log.error("Not on a POSIX supported file system: %s", exc, exc_info=exc)
        elif kind is PermissionFailureKind.MALFORMED_PERMISSIONS:
            log.error("No valid file permission elements in %s: %s", path, exc, exc_info=exc)
        elif kind is PermissionFailureKind.INSUFFICIENT_PRIVILEGE:
            log.error("Not enough privileges to set file permissions on %s", path, exc_info=exc)
        elif kind is PermissionFailureKind.IO_ERROR:
            log.error("Could not set file permissions on %s", path, exc_info=exc)
        else:
            log.error("Unexpected exception on %s", path, exc_info=exc)
        result.completed = False
        result.failures.append(PermissionFailure(path=path, kind=kind, error=exc))
