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
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from pyiceberg.manifest import ManifestFile, read_manifest_list
from pyiceberg.table.snapshots import Snapshot

from pyiceberg_partitions.exceptions import ResourceDecodeError, SnapshotNotFoundError
from pyiceberg_partitions.io import InMemoryFileIO
from pyiceberg_partitions.source import TableSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotManifests:
    """The manifests reachable from one snapshot, in manifest list order."""

    snapshot_id: int
    manifest_list: str
    manifests: Tuple[ManifestFile, ...]

    def __len__(self) -> int:
        """Return the number of manifests."""
        return len(self.manifests)


def _get_snapshot(source: TableSource, snapshot_id: Optional[int]) -> Optional[Snapshot]:
    metadata = source.current_metadata()
    if snapshot_id is None:
        return metadata.current_snapshot()

    if snapshot := metadata.snapshot_by_id(snapshot_id):
        return snapshot
    raise SnapshotNotFoundError(f"Cannot find snapshot with ID {snapshot_id}")


def decode_manifest_list(location: str, data: bytes) -> Tuple[ManifestFile, ...]:
    """Decode the Avro content of a manifest list.

    Raises:
        ResourceDecodeError: When the content is not a valid manifest list.
    """
    try:
        return tuple(read_manifest_list(InMemoryFileIO({location: data}).new_input(location)))
    except Exception as e:
        raise ResourceDecodeError(f"Cannot decode manifest list {location}: {e}", location=location) from e


def resolve_manifests(source: TableSource, snapshot_id: Optional[int] = None) -> Optional[SnapshotManifests]:
    """Return the manifests of the current snapshot, or of the given snapshot.

    A table without a current snapshot is not an error: this happens for a new
    table, and for a table of which all snapshots have expired. In that case
    there is nothing to report, and None is returned.

    Args:
        source: The table to resolve the snapshot of.
        snapshot_id: The snapshot to use instead of the current one.

    Returns:
        Optional[SnapshotManifests]: The manifests of the snapshot, or None when there is no snapshot.

    Raises:
        SnapshotNotFoundError: When an explicit snapshot_id does not exist.
        ResourceFetchError: When the manifest list cannot be fetched.
        ResourceDecodeError: When the manifest list cannot be decoded.
    """
    snapshot = _get_snapshot(source, snapshot_id)
    if snapshot is None:
        logger.info("Table has no current snapshot, nothing to resolve")
        return None

    if not snapshot.manifest_list:
        raise ResourceDecodeError(f"Snapshot {snapshot.snapshot_id} does not reference a manifest list")

    manifests = decode_manifest_list(snapshot.manifest_list, source.fetch(snapshot.manifest_list))
    logger.debug("Snapshot %s references %d manifest(s)", snapshot.snapshot_id, len(manifests))
    return SnapshotManifests(
        snapshot_id=snapshot.snapshot_id,
        manifest_list=snapshot.manifest_list,
        manifests=manifests,
    )
