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
"""The table collaborator consumed by the partition report.

The report only needs three capabilities from a table: its current metadata,
the bytes behind a location and a partition spec by id. `TableSource` captures
those, so that any catalog backend (Glue, REST, Hive, SQL) can be plugged in.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Optional, Tuple, Union

from pyiceberg.catalog import load_catalog
from pyiceberg.io import FileIO
from pyiceberg.partitioning import PartitionSpec
from pyiceberg.table.metadata import TableMetadata
from pyiceberg.typedef import EMPTY_DICT, Identifier, Properties
from pyiceberg.utils.properties import property_as_int
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    retry_if_not_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from pyiceberg_partitions.exceptions import ResourceFetchError, UnknownPartitionSpecError

if TYPE_CHECKING:
    from pyiceberg.table import Table

    from pyiceberg_partitions.config import InspectConfig

FETCH_MAX_ATTEMPTS = "fetch.max-attempts"
FETCH_MAX_ATTEMPTS_DEFAULT = 3
FETCH_RETRY_MIN_WAIT_MS = "fetch.retry-min-wait-ms"
FETCH_RETRY_MIN_WAIT_MS_DEFAULT = 100
FETCH_RETRY_MAX_WAIT_MS = "fetch.retry-max-wait-ms"
FETCH_RETRY_MAX_WAIT_MS_DEFAULT = 5000

logger = logging.getLogger(__name__)


def _get_retry_decorator(max_attempts: int, min_wait: float, max_wait: float) -> Any:
    """
    Create a retry decorator with exponential backoff for transient I/O errors.

    Missing files and denied access are not transient, and are raised right away.

    Args:
        max_attempts: Maximum number of attempts.
        min_wait: Minimum wait time in seconds.
        max_wait: Maximum wait time in seconds.

    Returns:
        Configured retry decorator.
    """
    return retry(
        retry=retry_if_exception_type(OSError) & retry_if_not_exception_type((FileNotFoundError, PermissionError)),
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(min=min_wait, max=max_wait),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )


class TableSource(ABC):
    """The capabilities of a table that the partition report consumes."""

    @abstractmethod
    def current_metadata(self) -> TableMetadata:
        """Return the metadata of the table as it is right now."""

    @abstractmethod
    def fetch(self, location: str) -> bytes:
        """Return the full content of the file at the given location.

        Raises:
            ResourceFetchError: When the location cannot be read.
        """

    def partition_spec(self, spec_id: int) -> PartitionSpec:
        """Return the partition spec with the given id from the table's spec history.

        Raises:
            UnknownPartitionSpecError: When the metadata has no spec with this id.
        """
        specs = self.current_metadata().specs()
        if spec_id not in specs:
            raise UnknownPartitionSpecError(spec_id)
        return specs[spec_id]


class CatalogTableSource(TableSource):
    """A TableSource over the metadata and FileIO of a table loaded from any catalog.

    Args:
        metadata (TableMetadata): The metadata of the table.
        io (FileIO): The FileIO used to read metadata files of the table.
        properties (Properties): Properties to configure the fetch retries.
    """

    _metadata: TableMetadata
    _io: FileIO
    _read_with_retry: Callable[[str], bytes]

    def __init__(self, metadata: TableMetadata, io: FileIO, properties: Properties = EMPTY_DICT) -> None:
        self._metadata = metadata
        self._io = io

        max_attempts = property_as_int(properties, FETCH_MAX_ATTEMPTS, FETCH_MAX_ATTEMPTS_DEFAULT)
        min_wait_ms = property_as_int(properties, FETCH_RETRY_MIN_WAIT_MS, FETCH_RETRY_MIN_WAIT_MS_DEFAULT)
        max_wait_ms = property_as_int(properties, FETCH_RETRY_MAX_WAIT_MS, FETCH_RETRY_MAX_WAIT_MS_DEFAULT)
        retry_decorator = _get_retry_decorator(
            max_attempts=max(1, max_attempts),  # type: ignore
            min_wait=min_wait_ms / 1000,  # type: ignore
            max_wait=max_wait_ms / 1000,  # type: ignore
        )
        self._read_with_retry = retry_decorator(self._read)

    @classmethod
    def from_table(cls, table: Table) -> CatalogTableSource:
        return cls(table.metadata, table.io, table.io.properties)

    @property
    def io(self) -> FileIO:
        return self._io

    def current_metadata(self) -> TableMetadata:
        return self._metadata

    def fetch(self, location: str) -> bytes:
        logger.debug("Fetching %s", location)
        try:
            return self._read_with_retry(location)
        except (OSError, ValueError) as e:
            raise ResourceFetchError(f"Cannot fetch {location}: {e}", location=location) from e

    def _read(self, location: str) -> bytes:
        with self._io.new_input(location).open(seekable=False) as input_stream:
            return input_stream.read()


def load_table_source(config: InspectConfig, identifier: Optional[Union[str, Identifier]] = None) -> CatalogTableSource:
    """Load the table named by the config (or by an explicit identifier) from its catalog.

    Args:
        config: The inspection config, holding the catalog name and properties.
        identifier: The table to load. Defaults to the namespace and table of the config.

    Returns:
        CatalogTableSource: A source over the loaded table.
    """
    table_identifier: Union[str, Tuple[str, ...]] = identifier or config.identifier()
    catalog = load_catalog(config.catalog.name, **config.catalog_properties())
    logger.info("Loading table %s from catalog %s", table_identifier, catalog.name)
    return CatalogTableSource.from_table(catalog.load_table(table_identifier))
