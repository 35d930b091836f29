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

"""Unit tests for the file-based deposit property record."""

import os
from datetime import datetime, timezone
from unittest.mock import patch

import pytest

from deposit_store.core.deposit.exceptions import (
    DepositAlreadyExistsError,
    DepositNotFoundError,
    DepositStoreError,
    InvalidStateLabelError,
    MalformedDepositError,
)
from deposit_store.core.deposit.value_objects import State
from deposit_store.infra.properties.deposit_properties_file import (
    DepositPropertiesFile,
    format_timestamp,
    parse_timestamp,
)
from deposit_store.infra.properties.properties_codec import read_properties

CONTENT_TYPE_KEY = "easy-sword2.client-message.content-type"
LEGACY_CONTENT_TYPE_KEY = "contentType"


class TestTimestamps:
    """Tests for the creation timestamp format."""

    def test_format_has_millisecond_precision(self):
        """Timestamps should be written with milliseconds and a Z suffix."""
        moment = datetime(2026, 2, 5, 14, 30, 0, 123456, tzinfo=timezone.utc)
        assert format_timestamp(moment) == "2026-02-05T14:30:00.123Z"

    def test_format_converts_to_utc(self):
        """Aware timestamps in other zones should be converted to UTC."""
        moment = datetime.fromisoformat("2026-02-05T16:30:00.000+02:00")
        assert format_timestamp(moment) == "2026-02-05T14:30:00.000Z"

    def test_parse_round_trip(self):
        """parse_timestamp should read what format_timestamp writes."""
        parsed = parse_timestamp("2026-02-05T14:30:00.123Z")
        assert parsed == datetime(2026, 2, 5, 14, 30, 0, 123000, tzinfo=timezone.utc)

    def test_parse_without_zone_raises(self):
        """Timestamps without zone information are rejected."""
        with pytest.raises(ValueError):
            parse_timestamp("2026-02-05T14:30:00.123")


class TestCreate:
    """Tests for DepositPropertiesFileFactory.create."""

    def test_create_then_load(self, properties_factory):
        """A created deposit should load back as a DRAFT of its depositor."""
        properties_factory.create("dep-1", "user001")
        props = properties_factory.load("dep-1")

        label, description = props.get_state()
        assert label is State.DRAFT
        assert description == "Deposit is open for additional data"
        assert props.get_depositor_id() == "user001"
        assert props.deposit_id == "dep-1"

    def test_create_writes_all_initial_keys(self, deposit_roots, properties_factory):
        """The new record should carry bag id, timestamp, origin, state and depositor."""
        properties_factory.create("dep-1", "user001")

        stored = read_properties(deposit_roots["temp"] / "dep-1" / "deposit.properties")
        assert stored == {
            "bag-store.bag-id": "dep-1",
            "creation.timestamp": "2026-02-05T14:30:00.123Z",
            "deposit.origin": "SWORD2",
            "state.label": "DRAFT",
            "state.description": "Deposit is open for additional data",
            "depositor.userId": "user001",
        }

    def test_create_places_new_deposit_in_first_root(self, deposit_roots, properties_factory):
        """A new deposit should be created under the first root, directory included."""
        props = properties_factory.create("dep-1", "user001")

        assert props.path == deposit_roots["temp"] / "dep-1" / "deposit.properties"
        assert props.exists is True

    def test_create_uses_existing_directory_in_later_root(
        self, deposit_roots, properties_factory
    ):
        """A deposit directory already in the inbox should receive the record."""
        (deposit_roots["inbox"] / "dep-1").mkdir()

        props = properties_factory.create("dep-1", "user001")

        assert props.path.parent == deposit_roots["inbox"] / "dep-1"

    def test_create_twice_raises(self, properties_factory):
        """A second create for the same id should fail and leave the first intact."""
        properties_factory.create("dep-1", "user001")

        with pytest.raises(DepositAlreadyExistsError) as exc_info:
            properties_factory.create("dep-1", "user002")

        assert exc_info.value.deposit_id == "dep-1"
        assert properties_factory.load("dep-1").get_depositor_id() == "user001"

    def test_commit_new_refuses_record_written_meanwhile(self, deposit_roots):
        """A record appearing after the existence check should fail the commit."""
        path = deposit_roots["temp"] / "dep-1" / "deposit.properties"
        props = DepositPropertiesFile(path, {"depositor.userId": "user001"})
        path.parent.mkdir()
        path.write_text("depositor.userId = other\n", encoding="utf-8")

        with pytest.raises(DepositAlreadyExistsError):
            props.commit_new()

        assert read_properties(path) == {"depositor.userId": "other"}
        assert sorted(p.name for p in path.parent.iterdir()) == ["deposit.properties"]

    def test_create_invalid_id_raises_domain_error(self, deposit_roots, properties_factory):
        """Creating under an id with a path separator should fail without writing."""
        with pytest.raises(MalformedDepositError) as exc_info:
            properties_factory.create("a/b", "user001")

        assert exc_info.value.deposit_id == "a/b"
        assert not (deposit_roots["temp"] / "a").exists()

    def test_create_reports_io_failure(self, properties_factory):
        """A write failure should surface as DepositStoreError."""
        with patch(
            "deposit_store.infra.properties.deposit_properties_file.write_properties",
            side_effect=OSError("disk full"),
        ):
            with pytest.raises(DepositStoreError, match="disk full"):
                properties_factory.create("dep-1", "user001")


class TestLoad:
    """Tests for DepositPropertiesFileFactory.load."""

    def test_load_missing_raises(self, properties_factory):
        """Loading an unknown deposit should raise DepositNotFoundError."""
        with pytest.raises(DepositNotFoundError) as exc_info:
            properties_factory.load("nope")
        assert exc_info.value.deposit_id == "nope"

    def test_load_directory_without_record_raises(self, deposit_roots, properties_factory):
        """A deposit directory without deposit.properties is not a record."""
        (deposit_roots["temp"] / "dep-1").mkdir()

        with pytest.raises(DepositNotFoundError):
            properties_factory.load("dep-1")

    def test_load_prefers_first_root(self, deposit_roots, properties_factory, write_record):
        """With the deposit in temp and archive, temp's record should be loaded."""
        write_record(deposit_roots["temp"], "dep-1", {"depositor.userId": "from-temp"})
        write_record(deposit_roots["archive"], "dep-1", {"depositor.userId": "from-archive"})

        assert properties_factory.load("dep-1").get_depositor_id() == "from-temp"

    def test_load_from_archive(self, deposit_roots, properties_factory, write_record):
        """Archived deposits should still be loadable."""
        write_record(deposit_roots["archive"], "dep-1", {"depositor.userId": "user001"})

        props = properties_factory.load("dep-1")

        assert props.path.parent.parent == deposit_roots["archive"]

    def test_load_takes_values_literally(self, deposit_roots, properties_factory, write_record):
        """Commas in values must not be split."""
        write_record(
            deposit_roots["temp"], "dep-1", {},
            text="depositor.userId = a,b,c\nstate.label = DRAFT\nstate.description = x, y\n",
        )

        props = properties_factory.load("dep-1")

        assert props.get_depositor_id() == "a,b,c"
        assert props.get_state().description == "x, y"

    def test_load_undecodable_file_raises_store_error(self, deposit_roots, properties_factory):
        """A record that is not UTF-8 should raise DepositStoreError."""
        deposit_dir = deposit_roots["temp"] / "dep-1"
        deposit_dir.mkdir()
        (deposit_dir / "deposit.properties").write_bytes(b"a = \xff\xfe\n")

        with pytest.raises(DepositStoreError):
            properties_factory.load("dep-1")

    @pytest.mark.parametrize("deposit_id", ["../etc", "a/b", ".."])
    def test_load_invalid_id_raises_not_found(self, properties_factory, deposit_id):
        """An id that is not a directory name should be reported as not found."""
        with pytest.raises(DepositNotFoundError) as exc_info:
            properties_factory.load(deposit_id)
        assert isinstance(exc_info.value.__cause__, ValueError)

    def test_exists_invalid_id_is_false(self, properties_factory):
        """exists() should answer False for an invalid id instead of failing."""
        assert properties_factory.exists("../etc") is False

    def test_exists(self, properties_factory):
        """Factory exists() should follow record creation."""
        assert properties_factory.exists("dep-1") is False
        properties_factory.create("dep-1", "user001")
        assert properties_factory.exists("dep-1") is True


class TestStateAccessors:
    """Tests for get_state and set_state."""

    def test_set_state_save_reload(self, properties_factory):
        """A saved state change should survive a reload."""
        props = properties_factory.create("dep-1", "user001")
        props.set_state(State.UPLOADED, "d").save()

        label, description = properties_factory.load("dep-1").get_state()
        assert label is State.UPLOADED
        assert description == "d"

    def test_set_state_is_not_persisted_without_save(self, properties_factory):
        """Mutations should stay in memory until save()."""
        props = properties_factory.create("dep-1", "user001")
        props.set_state(State.UPLOADED, "d")

        assert properties_factory.load("dep-1").get_state().label is State.DRAFT
        assert props.get_state().label is State.UPLOADED

    def test_any_transition_is_allowed(self, properties_factory):
        """Transition order is not checked: ARCHIVED back to DRAFT is accepted."""
        props = properties_factory.create("dep-1", "user001")
        props.set_state(State.ARCHIVED, "done").set_state(State.DRAFT, "reopened")

        assert props.get_state().label is State.DRAFT

    def test_set_state_accepts_label_text(self, properties_factory):
        """A known label given as text should be stored."""
        props = properties_factory.create("dep-1", "user001")
        props.set_state("SUBMITTED", "sent")

        assert props.get_state().label is State.SUBMITTED

    def test_set_state_rejects_unknown_label(self, properties_factory):
        """Unknown labels should not be stored."""
        props = properties_factory.create("dep-1", "user001")

        with pytest.raises(InvalidStateLabelError):
            props.set_state("BOGUS", "x")
        assert props.get_state().label is State.DRAFT

    def test_missing_label_raises(self, deposit_roots, properties_factory, write_record):
        """A record without state.label is malformed."""
        write_record(deposit_roots["temp"], "dep-1", {
            "state.description": "x", "depositor.userId": "user001",
        })

        with pytest.raises(MalformedDepositError) as exc_info:
            properties_factory.load("dep-1").get_state()
        assert exc_info.value.missing_field == "state"

    def test_missing_description_raises(self, deposit_roots, properties_factory, write_record):
        """A record without state.description is malformed."""
        write_record(deposit_roots["temp"], "dep-1", {"state.label": "DRAFT"})

        with pytest.raises(MalformedDepositError):
            properties_factory.load("dep-1").get_state()

    def test_unknown_label_raises(self, deposit_roots, properties_factory, write_record):
        """A stored label outside the State enum should be reported with the deposit id."""
        write_record(deposit_roots["temp"], "dep-1", {
            "state.label": "PENDING", "state.description": "x",
        })

        with pytest.raises(InvalidStateLabelError) as exc_info:
            properties_factory.load("dep-1").get_state()
        assert exc_info.value.deposit_id == "dep-1"


class TestFieldAccessors:
    """Tests for the narrow field accessors."""

    def test_missing_depositor_raises(self, deposit_roots, properties_factory, write_record):
        """A record without depositor.userId is malformed."""
        write_record(deposit_roots["temp"], "dep-1", {
            "state.label": "DRAFT", "state.description": "x",
        })

        with pytest.raises(MalformedDepositError, match="without depositor"):
            properties_factory.load("dep-1").get_depositor_id()

    def test_bag_name(self, properties_factory):
        """set_bag_name should be saved under bag-store.bag-name."""
        props = properties_factory.create("dep-1", "user001")
        assert props.get_bag_name() is None

        props.set_bag_name("bag").save()

        assert properties_factory.load("dep-1").get_bag_name() == "bag"

    def test_doi_absent_is_none(self, properties_factory):
        """A deposit without DOI should report None, not fail."""
        assert properties_factory.create("dep-1", "user001").get_doi() is None

    def test_doi_present(self, deposit_roots, properties_factory, write_record):
        """identifier.doi should be returned as stored."""
        write_record(deposit_roots["temp"], "dep-1", {"identifier.doi": "10.5072/dans-x"})

        assert properties_factory.load("dep-1").get_doi() == "10.5072/dans-x"

    def test_creation_timestamp(self, properties_factory):
        """The creation timestamp should be parsed back in UTC."""
        props = properties_factory.create("dep-1", "user001")

        assert props.get_creation_timestamp() == datetime(
            2026, 2, 5, 14, 30, 0, 123000, tzinfo=timezone.utc
        )

    def test_unparsable_creation_timestamp_raises(
        self, deposit_roots, properties_factory, write_record
    ):
        """A garbled timestamp should raise MalformedDepositError."""
        write_record(deposit_roots["temp"], "dep-1", {"creation.timestamp": "yesterday"})

        with pytest.raises(MalformedDepositError):
            properties_factory.load("dep-1").get_creation_timestamp()


class TestClientMessageContentType:
    """Tests for the content type with legacy key fallback."""

    def test_legacy_key_only(self, deposit_roots, properties_factory, write_record):
        """A record with only the deprecated key should return its value."""
        write_record(deposit_roots["temp"], "dep-1", {LEGACY_CONTENT_TYPE_KEY: "application/zip"})

        assert properties_factory.load("dep-1").get_client_message_content_type() == (
            "application/zip"
        )

    def test_current_key_wins(self, deposit_roots, properties_factory, write_record):
        """With both keys set, the current key should be returned."""
        write_record(deposit_roots["temp"], "dep-1", {
            LEGACY_CONTENT_TYPE_KEY: "application/octet-stream",
            CONTENT_TYPE_KEY: "application/zip",
        })

        assert properties_factory.load("dep-1").get_client_message_content_type() == (
            "application/zip"
        )

    def test_blank_current_key_falls_back(self, deposit_roots, properties_factory, write_record):
        """A blank current value should not hide the legacy value."""
        write_record(deposit_roots["temp"], "dep-1", {
            CONTENT_TYPE_KEY: "   ",
            LEGACY_CONTENT_TYPE_KEY: "application/zip",
        })

        assert properties_factory.load("dep-1").get_client_message_content_type() == (
            "application/zip"
        )

    def test_neither_key_raises(self, properties_factory):
        """Without any content type the getter should fail."""
        props = properties_factory.create("dep-1", "user001")

        with pytest.raises(MalformedDepositError, match=CONTENT_TYPE_KEY):
            props.get_client_message_content_type()

    def test_set_writes_current_key(self, deposit_roots, properties_factory):
        """The setter should only ever write the current key."""
        props = properties_factory.create("dep-1", "user001")
        props.set_client_message_content_type("application/zip").save()

        stored = read_properties(props.path)
        assert stored[CONTENT_TYPE_KEY] == "application/zip"
        assert LEGACY_CONTENT_TYPE_KEY not in stored

    def test_remove_clears_both_keys(self, deposit_roots, properties_factory, write_record):
        """Removing the content type should also clear the legacy key."""
        path = write_record(deposit_roots["temp"], "dep-1", {
            "state.label": "UPLOADED",
            "state.description": "x",
            LEGACY_CONTENT_TYPE_KEY: "application/octet-stream",
            CONTENT_TYPE_KEY: "application/zip",
        })

        props = properties_factory.load("dep-1")
        props.remove_client_message_content_type().save()

        stored = read_properties(path)
        assert CONTENT_TYPE_KEY not in stored
        assert LEGACY_CONTENT_TYPE_KEY not in stored
        assert stored["state.label"] == "UPLOADED"


class TestPersistence:
    """Tests for save, exists and the modification timestamp."""

    def test_save_is_idempotent(self, properties_factory):
        """Saving twice without changes should leave the same content."""
        props = properties_factory.create("dep-1", "user001")
        props.save()
        first = props.path.read_text(encoding="utf-8")
        props.save()

        assert props.path.read_text(encoding="utf-8") == first

    def test_last_save_wins(self, properties_factory):
        """Two loaded copies saved in turn keep only the last one's values."""
        properties_factory.create("dep-1", "user001")
        first = properties_factory.load("dep-1")
        second = properties_factory.load("dep-1")

        first.set_bag_name("from-first").save()
        second.set_state(State.UPLOADED, "from-second").save()

        reloaded = properties_factory.load("dep-1")
        assert reloaded.get_bag_name() is None
        assert reloaded.get_state().description == "from-second"

    def test_save_failure_raises_store_error(self, deposit_roots, properties_factory):
        """An I/O failure on save should surface as DepositStoreError."""
        props = properties_factory.create("dep-1", "user001")

        with patch(
            "deposit_store.infra.properties.deposit_properties_file.write_properties",
            side_effect=PermissionError("read-only"),
        ):
            with pytest.raises(DepositStoreError) as exc_info:
                props.save()
        assert exc_info.value.deposit_id == "dep-1"

    def test_last_modified_timestamp(self, properties_factory):
        """The timestamp should be the record file's mtime in UTC."""
        props = properties_factory.create("dep-1", "user001")
        os.utime(props.path, (1_700_000_000, 1_700_000_000))

        assert props.get_last_modified_timestamp() == datetime.fromtimestamp(
            1_700_000_000, tz=timezone.utc
        )

    def test_last_modified_timestamp_of_removed_record_is_none(self, properties_factory):
        """A record removed from disk should give None, not an error."""
        props = properties_factory.create("dep-1", "user001")
        props.path.unlink()

        assert props.exists is False
        assert props.get_last_modified_timestamp() is None

    def test_unsaved_record_does_not_exist(self, tmp_path):
        """A record object without a file should report exists False."""
        props = DepositPropertiesFile(tmp_path / "dep-1" / "deposit.properties")

        assert props.exists is False
        assert props.deposit_id == "dep-1"


class TestSnapshot:
    """Tests for snapshot()."""

    def test_snapshot_of_created_record(self, properties_factory):
        """A snapshot should expose all fields with their types."""
        props = properties_factory.create("dep-1", "user001")
        props.set_client_message_content_type("application/zip")

        record = props.snapshot()

        assert record.deposit_id == "dep-1"
        assert record.state.label is State.DRAFT
        assert record.depositor_id == "user001"
        assert record.client_message_content_type == "application/zip"
        assert record.bag_name is None
        assert record.creation_timestamp.year == 2026
        assert record.last_modified_timestamp is not None

    def test_snapshot_without_content_type(self, properties_factory):
        """A missing content type is optional in a snapshot."""
        record = properties_factory.create("dep-1", "user001").snapshot()

        assert record.client_message_content_type is None

    def test_snapshot_of_malformed_record_raises(
        self, deposit_roots, properties_factory, write_record
    ):
        """Snapshots require state and depositor."""
        write_record(deposit_roots["temp"], "dep-1", {"state.label": "DRAFT", "state.description": "x"})

        with pytest.raises(MalformedDepositError):
            properties_factory.load("dep-1").snapshot()
