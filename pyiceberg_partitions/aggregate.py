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
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Set, Tuple

from pyiceberg.manifest import ManifestContent, ManifestFile
from pyiceberg.partitioning import PartitionSpec

from pyiceberg_partitions.exceptions import PartitionFieldCountMismatchError
from pyiceberg_partitions.manifest import PartitionEntry, read_manifest
from pyiceberg_partitions.snapshots import resolve_manifests
from pyiceberg_partitions.source import TableSource
from pyiceberg_partitions.typedef import PartitionValue

DEFAULT_MAX_WORKERS = 8

logger = logging.getLogger(__name__)


class PartitionAggregate:
    """The distinct partition values per field, for each partition spec.

    Each spec id maps onto a list with one set per partition field, in the
    order of the fields in the spec. The length of that list is fixed when the
    spec is first seen.
    """

    _fields_by_spec: Dict[int, List[Set[PartitionValue]]]

    def __init__(self) -> None:
        self._fields_by_spec = {}

    def _bucket(self, spec_id: int, field_count: int) -> List[Set[PartitionValue]]:
        if spec_id not in self._fields_by_spec:
            self._fields_by_spec[spec_id] = [set() for _ in range(field_count)]

        bucket = self._fields_by_spec[spec_id]
        if len(bucket) != field_count:
            raise PartitionFieldCountMismatchError(spec_id, expected=len(bucket), actual=field_count)
        return bucket

    def add(self, spec: PartitionSpec, entries: Iterable[PartitionEntry]) -> None:
        """Add the partition values of the live entries that were written with the given spec.

        Entries with status DELETED no longer represent data in the table, and are skipped.

        Raises:
            PartitionFieldCountMismatchError: When the partition tuple of an entry does not match the spec.
        """
        field_count = len(spec.fields)
        bucket = self._bucket(spec.spec_id, field_count)
        for entry in entries:
            if not entry.is_live:
                continue
            if len(entry.partition) != field_count:
                raise PartitionFieldCountMismatchError(spec.spec_id, expected=field_count, actual=len(entry.partition))
            for field_values, value in zip(bucket, entry.partition):
                field_values.add(value)

    def merge(self, other: PartitionAggregate) -> None:
        """Union the values of another aggregate into this one."""
        for spec_id, other_bucket in other._fields_by_spec.items():
            bucket = self._bucket(spec_id, len(other_bucket))
            for field_values, other_values in zip(bucket, other_bucket):
                field_values.update(other_values)

    def spec_ids(self) -> List[int]:
        return sorted(self._fields_by_spec)

    def field_sets(self, spec_id: int) -> Tuple[FrozenSet[PartitionValue], ...]:
        return tuple(frozenset(field_values) for field_values in self._fields_by_spec[spec_id])

    def distinct_counts(self) -> Dict[int, List[int]]:
        return {spec_id: [len(field_values) for field_values in self._fields_by_spec[spec_id]] for spec_id in self.spec_ids()}

    def __contains__(self, spec_id: object) -> bool:
        """Return whether values were collected for the spec id."""
        return spec_id in self._fields_by_spec

    def __len__(self) -> int:
        """Return the number of partition specs in the aggregate."""
        return len(self._fields_by_spec)

    def __eq__(self, other: Any) -> bool:
        """Compare if the aggregate holds the same values as another aggregate."""
        return self._fields_by_spec == other._fields_by_spec if isinstance(other, PartitionAggregate) else False

    def __repr__(self) -> str:
        """Return the string representation of the PartitionAggregate class."""
        return f"PartitionAggregate({self.distinct_counts()})"


def _aggregate_manifest(source: TableSource, manifest: ManifestFile) -> PartitionAggregate:
    contents = read_manifest(source, manifest)
    partial = PartitionAggregate()
    partial.add(source.partition_spec(contents.partition_spec_id), contents)
    return partial


def aggregate_partitions(
    source: TableSource, max_workers: Optional[int] = None, snapshot_id: Optional[int] = None
) -> PartitionAggregate:
    """Collect the distinct partition values of all live data files in a snapshot.

    Every data manifest of the snapshot is read on a bounded thread pool, and
    folded into its own partial aggregate. The partials are unioned once they
    complete, which is independent of the order of the manifests.

    Args:
        source: The table to aggregate the partitions of.
        max_workers: Maximum number of manifests that are fetched at the same time.
        snapshot_id: The snapshot to aggregate, defaults to the current snapshot.

    Returns:
        PartitionAggregate: The distinct values, empty when the table has no snapshot.

    Raises:
        MetadataReadError: When the manifest list or a manifest cannot be fetched or decoded.
        MetadataInvariantError: When a manifest does not agree with the partition specs of the table.
    """
    aggregate = PartitionAggregate()
    resolved = resolve_manifests(source, snapshot_id)
    if resolved is None:
        return aggregate

    data_manifests = [manifest for manifest in resolved.manifests if manifest.content == ManifestContent.DATA]
    if skipped := len(resolved.manifests) - len(data_manifests):
        logger.debug("Skipping %d delete manifest(s) of snapshot %s", skipped, resolved.snapshot_id)
    if not data_manifests:
        return aggregate

    executor = ThreadPoolExecutor(max_workers=max_workers or DEFAULT_MAX_WORKERS, thread_name_prefix="manifest-reader")
    try:
        futures = [executor.submit(_aggregate_manifest, source, manifest) for manifest in data_manifests]
        for future in as_completed(futures):
            aggregate.merge(future.result())
    finally:
        # On failure, the manifests that did not start yet are not read anymore
        executor.shutdown(wait=True, cancel_futures=True)

    logger.info(
        "Aggregated partitions of %d manifest(s) in snapshot %s over %d partition spec(s)",
        len(data_manifests),
        resolved.snapshot_id,
        len(aggregate),
    )
    return aggregate
