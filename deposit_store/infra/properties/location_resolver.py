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

"""Resolves which deposit root currently holds a deposit."""

from pathlib import Path
from typing import Iterable, Tuple, Union

from deposit_store.core.deposit.value_objects import DepositId

PROPERTIES_FILENAME = "deposit.properties"


class DepositLocationResolver:
    """Finds a deposit directory among an ordered list of roots.

    Roots are searched in the order given (typically the temporary
    upload area, the ingest-flow inbox, then the archive). The first root
    containing a directory named after the deposit wins; when no root does,
    the deposit is placed under the first root.
    """

    def __init__(self, roots: Iterable[Union[str, Path]]) -> None:
        """Initialize resolver.

        Args:
            roots: Candidate root directories, in lookup order.

        Raises:
            ValueError: If no root is given.
        """
        self._roots: Tuple[Path, ...] = tuple(Path(root) for root in roots)
        if not self._roots:
            raise ValueError("At least one deposit root is required")

    @property
    def roots(self) -> Tuple[Path, ...]:
        """Candidate roots in lookup order."""
        return self._roots

    @property
    def default_root(self) -> Path:
        """Root under which new deposits are placed."""
        return self._roots[0]

    def deposit_dir(self, deposit_id: str) -> Path:
        """Return the directory of the deposit, or its default location.

        Args:
            deposit_id: Deposit identifier (directory name).

        Returns:
            ``<root>/<deposit_id>`` for the first root where it exists,
            otherwise ``<first root>/<deposit_id>``.

        Raises:
            ValueError: If deposit_id is not a valid directory name.
        """
        name = DepositId(deposit_id).value
        for root in self._roots:
            candidate = root / name
            if candidate.exists():
                return candidate
        return self.default_root / name

    def properties_file(self, deposit_id: str) -> Path:
        """Return the path of the deposit's ``deposit.properties``."""
        return self.deposit_dir(deposit_id) / PROPERTIES_FILENAME
