# Licensed to the Apache Software Foundation (ASF) under one
# or more contributor license agreements.  See the NOTICE file
# distributed with this work for additional information
# regarding copyright ownership.  The ASF licenses this file
# to you under the Apache License, Version 2.0 (the
# "License"); you may not use this file except in compliance
# with the License.  You may obtain a copy of the License at
#
#   http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing,
# software distributed under the License is distributed on an
# "AS IS" BASIS, WITHOUT WARRANTIES OR CONDITIONS OF ANY
# KIND, either express or implied.  See the License for the
# specific language governing permissions and limitations
# under the License.
# pylint:disable=redefined-outer-name
import uuid
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Tuple

import pytest
from pyiceberg.io import FileIO
from pyiceberg.io.pyarrow import PyArrowFileIO
from pyiceberg.manifest import (
    DataFile,
    DataFileContent,
    FileFormat,
    ManifestEntry,
    ManifestEntryStatus,
    ManifestFile,
    write_manifest,
    write_manifest_list,
)
from pyiceberg.partitioning import PartitionField, PartitionSpec
from pyiceberg.schema import Schema
from pyiceberg.table.metadata import TableMetadataV2
from pyiceberg.table.snapshots import Operation, Snapshot, Summary
from pyiceberg.transforms import DayTransform, IdentityTransform
from pyiceberg.typedef import Record
from pyiceberg.types import DateType, LongType, NestedField, StringType

from pyiceberg_partitions.source import CatalogTableSource

SNAPSHOT_ID = 3051729675574597004

# Days since epoch
JAN_1 = 19723
JAN_2 = 19724

TABLE_SCHEMA = Schema(
    NestedField(field_id=1, name="id", field_type=LongType(), required=False),
    NestedField(field_id=2, name="event_date", field_type=DateType(), required=False),
    NestedField(field_id=3, name="region", field_type=StringType(), required=False),
    schema_id=0,
)

DAY_SPEC = PartitionSpec(
    PartitionField(source_id=2, field_id=1000, transform=DayTransform(), name="date"),
    spec_id=0,
)

DAY_REGION_SPEC = PartitionSpec(
    PartitionField(source_id=2, field_id=1000, transform=DayTransform(), name="date"),
    PartitionField(source_id=3, field_id=1001, transform=IdentityTransform(), name="region"),
    spec_id=1,
)

EntrySpec = Tuple[ManifestEntryStatus, Record]
ManifestWriter = Callable[[PartitionSpec, Sequence[EntrySpec]], ManifestFile]
ManifestListWriter = Callable[[Sequence[ManifestFile]], str]


def table_metadata(
    specs: Sequence[PartitionSpec] = (DAY_SPEC,),
    manifest_list: Optional[str] = None,
    default_spec_id: Optional[int] = None,
) -> TableMetadataV2:
    """Metadata of a table with the given specs, and a current snapshot when a manifest list is passed."""
    snapshots: List[Snapshot] = []
    if manifest_list is not None:
        snapshots.append(
            Snapshot(
                snapshot_id=SNAPSHOT_ID,
                sequence_number=1,
                timestamp_ms=1704067200000,
                manifest_list=manifest_list,
                summary=Summary(Operation.APPEND),
                schema_id=0,
            )
        )
    return TableMetadataV2(
        location="s3://warehouse/analytics/events",
        table_uuid=uuid.UUID("9c12d441-03fe-4693-9a96-a0705ddf69c1"),
        last_updated_ms=1704067200000,
        last_column_id=3,
        schemas=[TABLE_SCHEMA],
        current_schema_id=0,
        partition_specs=list(specs),
        default_spec_id=default_spec_id if default_spec_id is not None else specs[-1].spec_id,
        last_partition_id=max((field.field_id for spec in specs for field in spec.fields), default=999),
        snapshots=snapshots,
        current_snapshot_id=SNAPSHOT_ID if manifest_list is not None else None,
        last_sequence_number=1 if manifest_list is not None else 0,
    )


@pytest.fixture
def io() -> FileIO:
    return PyArrowFileIO()


@pytest.fixture
def write_manifest_file(tmp_path: Path, io: FileIO) -> ManifestWriter:
    """Write a data manifest with one data file per (status, partition) pair."""
    counter = iter(range(1_000_000))

    def _write(spec: PartitionSpec, entries: Sequence[EntrySpec]) -> ManifestFile:
        manifest_number = next(counter)
        location = str(tmp_path / f"manifest-{manifest_number}.avro")
        with write_manifest(
            format_version=2,
            spec=spec,
            schema=TABLE_SCHEMA,
            output_file=io.new_output(location),
            snapshot_id=SNAPSHOT_ID,
            avro_compression="null",
        ) as writer:
            for pos, (status, partition) in enumerate(entries):
                writer.add_entry(
                    ManifestEntry.from_args(
                        status=status,
                        snapshot_id=SNAPSHOT_ID,
                        sequence_number=1,
                        file_sequence_number=1,
                        data_file=DataFile.from_args(
                            content=DataFileContent.DATA,
                            file_path=f"s3://warehouse/analytics/events/data/{manifest_number}-{pos}.parquet",
                            file_format=FileFormat.PARQUET,
                            partition=partition,
                            record_count=100,
                            file_size_in_bytes=1024,
                        ),
                    )
                )
        return writer.to_manifest_file()

    return _write


@pytest.fixture
def write_manifest_list_file(tmp_path: Path, io: FileIO) -> ManifestListWriter:
    counter = iter(range(1_000_000))

    def _write(manifests: Sequence[ManifestFile]) -> str:
        location = str(tmp_path / f"snap-{SNAPSHOT_ID}-{next(counter)}.avro")
        with write_manifest_list(
            format_version=2,
            output_file=io.new_output(location),
            snapshot_id=SNAPSHOT_ID,
            parent_snapshot_id=None,
            sequence_number=1,
            avro_compression="null",
        ) as writer:
            writer.add_manifests(list(manifests))
        return location

    return _write


@pytest.fixture
def table_source(io: FileIO) -> Callable[..., CatalogTableSource]:
    """Build a source over metadata with the given specs and manifest list."""

    def _source(
        specs: Sequence[PartitionSpec] = (DAY_SPEC,),
        manifest_list: Optional[str] = None,
        default_spec_id: Optional[int] = None,
    ) -> CatalogTableSource:
        return CatalogTableSource(table_metadata(specs, manifest_list, default_spec_id), io)

    return _source
