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

"""Shared pytest fixtures for the deposit store tests."""

# pylint: disable=redefined-outer-name

import contextlib
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, ContextManager, Dict, Optional

import pytest

from deposit_store.infra.properties.deposit_properties_file import (
    DepositPropertiesFileFactory,
)
from deposit_store.infra.properties.location_resolver import (
    PROPERTIES_FILENAME,
    DepositLocationResolver,
)
from deposit_store.infra.properties.properties_codec import format_properties

FIXED_NOW = datetime(2026, 2, 5, 14, 30, 0, 123456, tzinfo=timezone.utc)


@pytest.fixture
def deposit_roots(tmp_path) -> Dict[str, Path]:
    """Create the temp, inbox and archive roots under tmp_path."""
    roots = {
        "temp": tmp_path / "temp",
        "inbox": tmp_path / "inbox",
        "archive": tmp_path / "archive",
    }
    for root in roots.values():
        root.mkdir()
    return roots


@pytest.fixture
def resolver(deposit_roots) -> DepositLocationResolver:
    """Resolver over temp, inbox and archive, in that order."""
    return DepositLocationResolver(
        [deposit_roots["temp"], deposit_roots["inbox"], deposit_roots["archive"]]
    )


@pytest.fixture
def properties_factory(resolver) -> DepositPropertiesFileFactory:
    """Factory with a fixed creation clock."""
    return DepositPropertiesFileFactory(resolver=resolver, clock=lambda: FIXED_NOW)


@pytest.fixture
def write_record():
    """Return a helper that writes a raw deposit.properties under a root."""

    def _write(root: Path, deposit_id: str, entries: Dict[str, str],
               text: Optional[str] = None) -> Path:
        deposit_dir = root / deposit_id
        deposit_dir.mkdir(parents=True, exist_ok=True)
        path = deposit_dir / PROPERTIES_FILENAME
        path.write_text(text if text is not None else format_properties(entries),
                        encoding="utf-8")
        return path

    return _write


def _nested_tree(root: Path, depth: int) -> Path:
    root.mkdir()
    current = root
    for _ in range(depth):
        current = current / "d"
        current.mkdir()
    (current / "leaf.txt").write_text("leaf")
    return current


@pytest.fixture
def nested_tree() -> Callable[[Path, int], Path]:
    """Return a helper creating root/d/d/.../d with one file at the bottom."""
    return _nested_tree


@pytest.fixture
def recursion_headroom() -> Callable[[int], ContextManager[None]]:
    """Return a context manager allowing only *frames* more nested calls."""

    @contextlib.contextmanager
    def _limit(frames: int):
        depth = 0
        frame = sys._getframe()  # pylint: disable=protected-access
        while frame is not None:
            depth += 1
            frame = frame.f_back
        previous = sys.getrecursionlimit()
        sys.setrecursionlimit(depth + frames)
        try:
            yield
        finally:
            sys.setrecursionlimit(previous)

    return _limit
