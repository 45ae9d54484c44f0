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
"""Partition values as a closed set of hashable variants.

A data file's partition tuple is decoded by pyiceberg into a `Record` of plain
Python objects. These objects are not safe to deduplicate directly: `True == 1`
and `1 == 1.0` hold in Python, `-0.0 == 0.0` holds although Iceberg orders them
apart, and `NaN` never equals itself. The variants below carry an explicit type
tag so that equality and hashing are total across them. Floats are stored by
their hex representation, which keeps the sign of zero and maps every NaN to `nan`.
"""

from __future__ import annotations

from abc import ABC
from dataclasses import dataclass
from typing import Any, Sequence, Tuple

from pyiceberg.typedef import Record


class PartitionValue(ABC):
    """Base class of the partition value variants."""

    __slots__ = ()


@dataclass(frozen=True)
class NullValue(PartitionValue):
    """The partition value of a null source column."""

    def __repr__(self) -> str:
        """Return the string representation of the NullValue class."""
        return "NullValue()"


@dataclass(frozen=True)
class ScalarValue(PartitionValue):
    """A primitive partition value, tagged with the name of its Python type."""

    kind: str
    value: Any

    @staticmethod
    def of(value: Any) -> ScalarValue:
        if isinstance(value, bytearray):
            value = bytes(value)
        if isinstance(value, float):
            return ScalarValue(kind="float", value=value.hex())
        try:
            hash(value)
        except TypeError as e:
            raise ValueError(f"Unsupported partition value: {value!r}") from e
        return ScalarValue(kind=type(value).__name__, value=value)

    def __repr__(self) -> str:
        """Return the string representation of the ScalarValue class."""
        return f"ScalarValue({self.kind}, {self.value!r})"


@dataclass(frozen=True)
class StructValue(PartitionValue):
    """A nested partition value, made of positional child values."""

    fields: Tuple[PartitionValue, ...]

    def __len__(self) -> int:
        """Return the number of child values."""
        return len(self.fields)

    def __repr__(self) -> str:
        """Return the string representation of the StructValue class."""
        return f"StructValue{self.fields!r}"


NULL = NullValue()


def partition_value(obj: Any) -> PartitionValue:
    """Convert a decoded partition field into a PartitionValue.

    Args:
        obj: The value as decoded from the manifest, e.g. an int for a day transform.

    Returns:
        PartitionValue: The tagged variant for the value.

    Raises:
        ValueError: When the value is of an unhashable type that has no variant.
    """
    if obj is None:
        return NULL
    if isinstance(obj, PartitionValue):
        return obj
    if isinstance(obj, Record):
        return StructValue(partition_values(obj))
    if isinstance(obj, (list, tuple)):
        return StructValue(tuple(partition_value(child) for child in obj))
    return ScalarValue.of(obj)


def partition_values(record: Record | Sequence[Any]) -> Tuple[PartitionValue, ...]:
    """Convert a partition tuple positionally, one PartitionValue per partition field."""
    return tuple(partition_value(record[pos]) for pos in range(len(record)))
