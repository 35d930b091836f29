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

"""File-based implementation of the deposit property record."""

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Optional

from deposit_store.common.logging_utils import DepositLoggerAdapter, deposit_logger
from deposit_store.core.deposit.entities import DepositRecord, DepositState
from deposit_store.core.deposit.exceptions import (
    DepositAlreadyExistsError,
    DepositNotFoundError,
    DepositStoreError,
    InvalidStateLabelError,
    MalformedDepositError,
)
from deposit_store.core.deposit.value_objects import State

from .location_resolver import DepositLocationResolver
from .properties_codec import read_properties, write_properties

logger = logging.getLogger(__name__)

STATE_LABEL_KEY = "state.label"
STATE_DESCRIPTION_KEY = "state.description"
BAG_NAME_KEY = "bag-store.bag-name"
BAG_ID_KEY = "bag-store.bag-id"
DEPOSITOR_KEY = "depositor.userId"
CREATION_TIMESTAMP_KEY = "creation.timestamp"
ORIGIN_KEY = "deposit.origin"
DOI_KEY = "identifier.doi"
CLIENT_MESSAGE_CONTENT_TYPE_KEY = "easy-sword2.client-message.content-type"
CLIENT_MESSAGE_CONTENT_TYPE_KEY_OLD = "contentType"  # records from before the key rename

# current key first; reads take the first non-blank value
CLIENT_MESSAGE_CONTENT_TYPE_KEYS = (
    CLIENT_MESSAGE_CONTENT_TYPE_KEY,
    CLIENT_MESSAGE_CONTENT_TYPE_KEY_OLD,
)

DEPOSIT_ORIGIN = "SWORD2"
INITIAL_STATE_DESCRIPTION = "Deposit is open for additional data"


def format_timestamp(moment: datetime) -> str:
    """Render a timestamp as ``YYYY-MM-DDTHH:MM:SS.mmmZ`` in UTC."""
    moment = moment.astimezone(timezone.utc)
    return f"{moment:%Y-%m-%dT%H:%M:%S}.{moment.microsecond // 1000:03d}Z"


def parse_timestamp(text: str) -> datetime:
    """Parse an ISO timestamp written by ``format_timestamp`` (or with an offset).

    Raises:
        ValueError: If the text is not an ISO timestamp with a zone.
    """
    text = text.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    moment = datetime.fromisoformat(text)
    if moment.tzinfo is None:
        raise ValueError(f"Timestamp without time zone: {text}")
    return moment.astimezone(timezone.utc)


class DepositPropertiesFile:
    """A deposit's ``deposit.properties``, held in memory until saved.

    Not thread-safe: at most one processing thread may work on a given
    deposit's record at a time. Concurrent load-modify-save cycles on the
    same deposit lose updates (last save wins).
    """

    def __init__(
        self,
        path: Path,
        properties: Optional[Dict[str, str]] = None,
        log: Optional[logging.Logger] = None,
    ) -> None:
        """Initialize the record.

        Args:
            path: Location of the record file.
            properties: Values already read from the file, if any.
            log: Logger to report through; defaults to this module's.
        """
        self._path = Path(path)
        self._properties: Dict[str, str] = dict(properties or {})
        self._log = DepositLoggerAdapter(log or logger, self.deposit_id)
        self._log.debug("Using deposit.properties at %s", self._path)

    @property
    def path(self) -> Path:
        """Location of the record file."""
        return self._path

    @property
    def deposit_id(self) -> str:
        """Identifier of the deposit, i.e. the name of its directory."""
        return self._path.parent.name

    @property
    def exists(self) -> bool:
        """True iff the record file is present on disk."""
        return self._path.exists()

    def _get(self, key: str) -> Optional[str]:
        return self._properties.get(key)

    def _set(self, key: str, value: object) -> None:
        self._properties[key] = str(value)

    def _require(self, key: str, field: str) -> str:
        value = self._get(key)
        if value is None:
            raise MalformedDepositError(deposit_id=self.deposit_id, missing_field=field)
        return value

    def save(self) -> None:
        """Write all in-memory values to the record file.

        Raises:
            DepositStoreError: If the file cannot be written.
        """
        self._log.debug("Saving deposit.properties")
        self._write(exclusive=False)

    def commit_new(self) -> None:
        """Write the record only if no record file exists yet.

        Raises:
            DepositAlreadyExistsError: If a record file appeared in the meantime.
            DepositStoreError: If the file cannot be written.
        """
        self._log.debug("Creating deposit.properties")
        self._write(exclusive=True)

    def _write(self, exclusive: bool) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            write_properties(self._path, self._properties, exclusive=exclusive)
        except FileExistsError as exc:
            if exclusive:
                raise DepositAlreadyExistsError(
                    deposit_id=self.deposit_id, location=str(self._path)
                ) from exc
            raise DepositStoreError(deposit_id=self.deposit_id, reason=str(exc)) from exc
        except OSError as exc:
            self._log.error("Could not save deposit.properties at %s: %s", self._path, exc)
            raise DepositStoreError(deposit_id=self.deposit_id, reason=str(exc)) from exc

    def get_state(self) -> DepositState:
        """Return the state label and description.

        Raises:
            MalformedDepositError: If label or description is absent.
            InvalidStateLabelError: If the label is not a known state.
        """
        label = self._get(STATE_LABEL_KEY)
        description = self._get(STATE_DESCRIPTION_KEY)
        if label is None or description is None:
            raise MalformedDepositError(deposit_id=self.deposit_id, missing_field="state")
        try:
            state = State.parse(label)
        except InvalidStateLabelError as exc:
            raise InvalidStateLabelError(label=label, deposit_id=self.deposit_id) from exc
        return DepositState(label=state, description=description)

    def set_state(self, state: State, description: str) -> "DepositPropertiesFile":
        """Set label and description. The transition itself is not checked."""
        self._set(STATE_LABEL_KEY, State.parse(str(state)).value)
        self._set(STATE_DESCRIPTION_KEY, description)
        return self

    def get_bag_name(self) -> Optional[str]:
        """Return the bag name, or None before the bag has been recognised."""
        return self._get(BAG_NAME_KEY)

    def set_bag_name(self, bag_name: str) -> "DepositPropertiesFile":
        """Set the bag name; persisted on the next save()."""
        self._set(BAG_NAME_KEY, bag_name)
        return self

    def get_client_message_content_type(self) -> str:
        """Return the client's content type.

        Falls back to the legacy ``contentType`` key for deposits created
        before the key was renamed.

        Raises:
            MalformedDepositError: If no key holds a non-blank value.
        """
        for key in CLIENT_MESSAGE_CONTENT_TYPE_KEYS:
            value = self._get(key)
            if value is not None and value.strip():
                return value
        raise MalformedDepositError(
            deposit_id=self.deposit_id, missing_field=CLIENT_MESSAGE_CONTENT_TYPE_KEY
        )

    def set_client_message_content_type(self, content_type: str) -> "DepositPropertiesFile":
        """Set the content type under the current key only."""
        self._set(CLIENT_MESSAGE_CONTENT_TYPE_KEY, content_type)
        return self

    def remove_client_message_content_type(self) -> "DepositPropertiesFile":
        """Clear the content type, including any legacy value."""
        for key in CLIENT_MESSAGE_CONTENT_TYPE_KEYS:
            self._properties.pop(key, None)
        return self

    def get_depositor_id(self) -> str:
        """Return the depositor.

        Raises:
            MalformedDepositError: If the depositor is absent.
        """
        return self._require(DEPOSITOR_KEY, "depositor")

    def get_doi(self) -> Optional[str]:
        """Return the assigned DOI, or None if none has been assigned."""
        return self._get(DOI_KEY)

    def get_creation_timestamp(self) -> Optional[datetime]:
        """Return the UTC creation time, or None for records without one.

        Raises:
            MalformedDepositError: If the stored value cannot be parsed.
        """
        value = self._get(CREATION_TIMESTAMP_KEY)
        if value is None:
            return None
        try:
            return parse_timestamp(value)
        except ValueError as exc:
            raise MalformedDepositError(
                deposit_id=self.deposit_id,
                missing_field=CREATION_TIMESTAMP_KEY,
                reason=str(exc),
            ) from exc

    def get_last_modified_timestamp(self) -> Optional[datetime]:
        """Return the record file's modification time.

        Returns None when the file is absent, including when it disappears
        between the existence check and the read.
        """
        try:
            mtime = self._path.stat().st_mtime
        except FileNotFoundError:
            return None
        return datetime.fromtimestamp(mtime, tz=timezone.utc)

    def snapshot(self) -> DepositRecord:
        """Return a typed copy of all fields.

        Raises:
            MalformedDepositError: If state or depositor is absent.
        """
        try:
            content_type: Optional[str] = self.get_client_message_content_type()
        except MalformedDepositError:
            content_type = None
        return DepositRecord(
            deposit_id=self.deposit_id,
            state=self.get_state(),
            depositor_id=self.get_depositor_id(),
            bag_name=self.get_bag_name(),
            client_message_content_type=content_type,
            doi=self.get_doi(),
            creation_timestamp=self.get_creation_timestamp(),
            last_modified_timestamp=self.get_last_modified_timestamp(),
        )


class DepositPropertiesFileFactory:
    """Loads and creates ``deposit.properties`` files across the deposit roots."""

    def __init__(
        self,
        resolver: DepositLocationResolver,
        log: Optional[logging.Logger] = None,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        """Initialize factory.

        Args:
            resolver: Locates the deposit among the configured roots.
            log: Logger handed to every record; defaults to this module's.
            clock: Source of the creation timestamp.
        """
        self._resolver = resolver
        self._log = log or logger
        self._clock = clock

    @property
    def resolver(self) -> DepositLocationResolver:
        """Resolver used to locate deposits among the roots."""
        return self._resolver

    def exists(self, deposit_id: str) -> bool:
        """Check whether a record exists for the deposit in any root.

        An id that is not a valid directory name has no record.
        """
        try:
            path = self._resolver.properties_file(deposit_id)
        except ValueError:
            return False
        return path.exists()

    def load(self, deposit_id: str) -> DepositPropertiesFile:
        """Load the record of an existing deposit.

        Args:
            deposit_id: Deposit identifier.

        Returns:
            The loaded record.

        Raises:
            DepositNotFoundError: If no record exists in any root,
                or deposit_id is not a valid directory name.
            DepositStoreError: If the record cannot be read.
        """
        try:
            path = self._resolver.properties_file(deposit_id)
        except ValueError as exc:
            raise DepositNotFoundError(
                deposit_id=deposit_id, location=str(self._resolver.default_root)
            ) from exc
        if not path.exists():
            raise DepositNotFoundError(deposit_id=deposit_id, location=str(path))
        try:
            properties = read_properties(path)
        except FileNotFoundError as exc:
            raise DepositNotFoundError(deposit_id=deposit_id, location=str(path)) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise DepositStoreError(deposit_id=deposit_id, reason=str(exc)) from exc
        return DepositPropertiesFile(path, properties, log=self._log)

    def create(self, deposit_id: str, depositor_id: str) -> DepositPropertiesFile:
        """Create a new DRAFT record and save it immediately.

        Args:
            deposit_id: Deposit identifier; also used as the bag id.
            depositor_id: User opening the deposit.

        Returns:
            The created record.

        Raises:
            DepositAlreadyExistsError: If a record already exists.
            MalformedDepositError: If deposit_id is not a valid directory name.
            DepositStoreError: If the record cannot be written.
        """
        try:
            path = self._resolver.properties_file(deposit_id)
        except ValueError as exc:
            raise MalformedDepositError(
                deposit_id=deposit_id, missing_field="valid deposit id", reason=str(exc)
            ) from exc
        if path.exists():
            raise DepositAlreadyExistsError(deposit_id=deposit_id, location=str(path))

        props = DepositPropertiesFile(
            path,
            {
                BAG_ID_KEY: deposit_id,
                CREATION_TIMESTAMP_KEY: format_timestamp(self._clock()),
                ORIGIN_KEY: DEPOSIT_ORIGIN,
                STATE_LABEL_KEY: State.DRAFT.value,
                STATE_DESCRIPTION_KEY: INITIAL_STATE_DESCRIPTION,
                DEPOSITOR_KEY: depositor_id,
            },
            log=self._log,
        )
        props.commit_new()
        deposit_logger(deposit_id, self._log).info("Created deposit.properties at %s", path)
        return props
