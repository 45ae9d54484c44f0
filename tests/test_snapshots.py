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
from typing import Callable

import pytest
from pyiceberg.manifest import ManifestEntryStatus
from pyiceberg.table.snapshots import Operation, Snapshot, Summary
from pyiceberg.typedef import Record

from pyiceberg_partitions.exceptions import ResourceDecodeError, SnapshotNotFoundError
from pyiceberg_partitions.snapshots import decode_manifest_list, resolve_manifests
from pyiceberg_partitions.source import CatalogTableSource
from tests.conftest import DAY_REGION_SPEC, DAY_SPEC, JAN_1, SNAPSHOT_ID, ManifestListWriter, ManifestWriter

SourceFactory = Callable[..., CatalogTableSource]


def test_resolve_without_snapshot(table_source: SourceFactory) -> None:
    assert resolve_manifests(table_source(manifest_list=None)) is None


def test_resolve_current_snapshot(
    table_source: SourceFactory, write_manifest_file: ManifestWriter, write_manifest_list_file: ManifestListWriter
) -> None:
    first = write_manifest_file(DAY_SPEC, [(ManifestEntryStatus.ADDED, Record(JAN_1))])
    second = write_manifest_file(DAY_REGION_SPEC, [(ManifestEntryStatus.ADDED, Record(JAN_1, "eu"))])
    manifest_list = write_manifest_list_file([first, second])

    resolved = resolve_manifests(table_source(specs=(DAY_SPEC, DAY_REGION_SPEC), manifest_list=manifest_list))

    assert resolved is not None
    assert resolved.snapshot_id == SNAPSHOT_ID
    assert resolved.manifest_list == manifest_list
    assert len(resolved) == 2
    assert [manifest.manifest_path for manifest in resolved.manifests] == [first.manifest_path, second.manifest_path]
    assert [manifest.partition_spec_id for manifest in resolved.manifests] == [0, 1]


def test_resolve_explicit_snapshot(
    table_source: SourceFactory, write_manifest_file: ManifestWriter, write_manifest_list_file: ManifestListWriter
) -> None:
    manifest_list = write_manifest_list_file([write_manifest_file(DAY_SPEC, [(ManifestEntryStatus.ADDED, Record(JAN_1))])])

    resolved = resolve_manifests(table_source(manifest_list=manifest_list), snapshot_id=SNAPSHOT_ID)

    assert resolved is not None
    assert len(resolved) == 1


def test_resolve_unknown_snapshot(table_source: SourceFactory) -> None:
    with pytest.raises(SnapshotNotFoundError):
        resolve_manifests(table_source(manifest_list=None), snapshot_id=1)


def test_resolve_snapshot_without_manifest_list(table_source: SourceFactory) -> None:
    source = table_source(manifest_list="unused.avro")
    snapshot = Snapshot.model_construct(
        snapshot_id=SNAPSHOT_ID, timestamp_ms=1704067200000, manifest_list=None, summary=Summary(Operation.APPEND)
    )
    metadata = source.current_metadata().model_copy(update={"snapshots": [snapshot]})

    with pytest.raises(ResourceDecodeError, match=f"Snapshot {SNAPSHOT_ID} does not reference a manifest list"):
        resolve_manifests(CatalogTableSource(metadata, source.io))


def test_decode_invalid_manifest_list() -> None:
    with pytest.raises(ResourceDecodeError, match="Cannot decode manifest list s3://bucket/snap.avro") as exc_info:
        decode_manifest_list("s3://bucket/snap.avro", b"garbage")

    assert exc_info.value.location == "s3://bucket/snap.avro"
