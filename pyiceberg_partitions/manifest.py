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
from typing import Iterator, Tuple

from pyiceberg.manifest import ManifestEntryStatus, ManifestFile

from pyiceberg_partitions.exceptions import ResourceDecodeError
from pyiceberg_partitions.io import InMemoryFileIO
from pyiceberg_partitions.source import TableSource
from pyiceberg_partitions.typedef import PartitionValue, partition_values

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PartitionEntry:
    """The status and partition tuple of a single manifest entry."""

    status: ManifestEntryStatus
    partition: Tuple[PartitionValue, ...]

    @property
    def is_live(self) -> bool:
        return self.status != ManifestEntryStatus.DELETED


@dataclass(frozen=True)
class ManifestContents:
    """The entries of a manifest, together with the spec they were written with."""

    manifest_path: str
    partition_spec_id: int
    entries: Tuple[PartitionEntry, ...]

    def __iter__(self) -> Iterator[PartitionEntry]:
        """Iterate over the entries, in manifest order."""
        return iter(self.entries)

    def __len__(self) -> int:
        """Return the number of entries."""
        return len(self.entries)


def read_manifest(source: TableSource, manifest: ManifestFile) -> ManifestContents:
    """Fetch and decode a single manifest.

    Deleted entries are kept, it is up to the caller to discard them.

    Args:
        source: The table to fetch the manifest bytes from.
        manifest: The manifest as listed in a manifest list.

    Returns:
        ManifestContents: The partition spec id and the entries of the manifest.

    Raises:
        ResourceFetchError: When the manifest cannot be fetched.
        ResourceDecodeError: When the manifest cannot be decoded.
    """
    location = manifest.manifest_path
    io = InMemoryFileIO({location: source.fetch(location)})

    try:
        entries = tuple(
            PartitionEntry(status=entry.status, partition=partition_values(entry.data_file.partition))
            for entry in manifest.fetch_manifest_entry(io, discard_deleted=False)
        )
    except Exception as e:
        raise ResourceDecodeError(f"Cannot decode manifest {location}: {e}", location=location) from e

    logger.debug("Read %d entries from manifest %s", len(entries), location)
    return ManifestContents(
        manifest_path=location,
        partition_spec_id=manifest.partition_spec_id,
        entries=entries,
    )
