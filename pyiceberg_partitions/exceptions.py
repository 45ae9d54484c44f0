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
from typing import Optional


class MetadataReadError(Exception):
    """Raised when a metadata resource cannot be fetched or decoded."""

    location: Optional[str]

    def __init__(self, message: str, location: Optional[str] = None) -> None:
        super().__init__(message)
        self.location = location


class ResourceFetchError(MetadataReadError):
    """Raised when the bytes of a manifest list or manifest cannot be fetched."""


class ResourceDecodeError(MetadataReadError):
    """Raised when a manifest list or manifest cannot be decoded."""


class MetadataInvariantError(Exception):
    """Raised when the table metadata is inconsistent with its manifests."""


class UnknownPartitionSpecError(MetadataInvariantError):
    """Raised when a manifest references a partition spec that is not part of the table metadata."""

    def __init__(self, spec_id: int) -> None:
        super().__init__(f"Cannot find partition spec with ID {spec_id} in table metadata")
        self.spec_id = spec_id


class PartitionFieldCountMismatchError(MetadataInvariantError):
    """Raised when partition tuples for a spec disagree on the number of fields."""

    def __init__(self, spec_id: int, expected: int, actual: int) -> None:
        super().__init__(f"Partition spec {spec_id} has {expected} field(s), but found {actual}")
        self.spec_id = spec_id
        self.expected = expected
        self.actual = actual


class SnapshotNotFoundError(ValueError):
    """Raised when a requested snapshot does not exist."""
