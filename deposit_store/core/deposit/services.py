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

"""Domain services for the Deposit module."""

import logging
from pathlib import Path
from typing import Iterator, List, Optional, Tuple, Union

from deposit_store.common.logging_utils import deposit_logger
from deposit_store.core.deposit.exceptions import DepositDomainError, DepositStoreError
from deposit_store.core.deposit.repositories import DepositPropertiesFactory
from deposit_store.core.deposit.value_objects import State

logger = logging.getLogger(__name__)


class DepositScanner:
    """Finds deposits that are waiting to be processed.

    Used by the scheduler that fills the processing queue: every deposit
    directory whose record is in state UPLOADED and names a client
    content type is reported.
    """

    def __init__(
        self,
        properties_factory: DepositPropertiesFactory,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize scanner.

        Args:
            properties_factory: Loads deposit records by id.
            log: Logger to report through; defaults to this module's.
        """
        self._properties_factory = properties_factory
        self._log = log or logger

    def get_sword2_uploaded_deposits(
        self, root_dir: Union[str, Path]
    ) -> Iterator[Tuple[str, str]]:
        """List UPLOADED deposits under *root_dir* with their content type.

        The directory is listed when this method is called; records are
        loaded lazily while the returned iterator is consumed. Deposits that
        cannot be loaded, have no state, or have no content type are logged
        and skipped.

        Args:
            root_dir: Directory whose subdirectories are deposits.

        Returns:
            One-shot iterator of ``(deposit_id, content_type)`` pairs.

        Raises:
            DepositStoreError: If *root_dir* cannot be listed.
        """
        root = Path(root_dir)
        try:
            deposit_ids: List[str] = sorted(
                child.name for child in root.iterdir() if child.is_dir()
            )
        except OSError as exc:
            self._log.error("Could not list deposits in %s: %s", root, exc)
            raise DepositStoreError(deposit_id=str(root), reason=str(exc)) from exc

        return self._uploaded(deposit_ids)

    def _uploaded(self, deposit_ids: List[str]) -> Iterator[Tuple[str, str]]:
        for deposit_id in deposit_ids:
            log = deposit_logger(deposit_id, self._log)
            try:
                props = self._properties_factory.load(deposit_id)
            except DepositDomainError as exc:
                log.warning(
                    "Could not load deposit properties (%s). "
                    "Not putting this deposit on the queue.",
                    exc,
                )
                continue

            try:
                label, _ = props.get_state()
            except DepositDomainError:
                log.warning("Could not get deposit state. Not putting this deposit on the queue.")
                continue
            if label != State.UPLOADED:
                continue

            try:
                content_type = props.get_client_message_content_type()
            except DepositDomainError:
                log.warning(
                    "Could not get deposit Content-Type. Not putting this deposit on the queue."
                )
                continue

            yield deposit_id, content_type
