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

"""Post-order directory walker driven by two callbacks.

Files are handed to ``visit_file``; each directory is handed to
``post_visit_directory`` after everything below it has been visited.
Either callback stops the whole walk by returning ``VisitResult.TERMINATE``.
Entries are visited in name order. Symbolic links are reported as files
and never followed into.
"""

import os
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator, List, Optional, Tuple


class VisitResult(str, Enum):
    """Decision returned by a visit callback."""

    CONTINUE = "CONTINUE"
    TERMINATE = "TERMINATE"


FileVisitor = Callable[[Path], VisitResult]
DirectoryVisitor = Callable[[Path, Optional[OSError]], VisitResult]


# (directory, entries not yet visited, error raised while listing it)
_Frame = Tuple[Path, Iterator[os.DirEntry], Optional[OSError]]


def _open_directory(directory: Path) -> _Frame:
    try:
        with os.scandir(directory) as entries:
            listing = sorted(entries, key=lambda entry: entry.name)
    except OSError as exc:
        return directory, iter(()), exc
    return directory, iter(listing), None


def walk_file_tree(
    root: Path,
    visit_file: FileVisitor,
    post_visit_directory: DirectoryVisitor,
) -> VisitResult:
    """Walk the tree under *root*, children before their directory.

    Directories still being visited are kept on an explicit stack, so the
    nesting depth of the tree is not bounded by the interpreter's
    recursion limit.

    Args:
        root: Directory (or single file) to walk.
        visit_file: Called for every non-directory entry.
        post_visit_directory: Called for every directory once its children
            are done, with the error raised while listing it (or None).

    Returns:
        TERMINATE if a callback stopped the walk, CONTINUE otherwise.

    Raises:
        FileNotFoundError: If *root* does not exist.
    """
    root = Path(root)
    if not root.is_dir() or root.is_symlink():
        if not os.path.lexists(root):
            raise FileNotFoundError(f"No such file or directory: {root}")
        return visit_file(root)

    stack: List[_Frame] = [_open_directory(root)]
    while stack:
        directory, entries, listing_error = stack[-1]
        entry = next(entries, None)
        if entry is None:
            stack.pop()
            if post_visit_directory(directory, listing_error) is VisitResult.TERMINATE:
                return VisitResult.TERMINATE
            continue

        path = Path(entry.path)
        if entry.is_dir(follow_symlinks=False):
            stack.append(_open_directory(path))
        elif visit_file(path) is VisitResult.TERMINATE:
            return VisitResult.TERMINATE
    return VisitResult.CONTINUE
