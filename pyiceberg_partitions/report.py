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

from typing import Any, List, Sequence

import click
from pyiceberg.table.metadata import TableMetadata

from pyiceberg_partitions.aggregate import PartitionAggregate
from pyiceberg_partitions.source import TableSource

COLUMN_WIDTH = 20
COLUMN_SEPARATOR = " | "
REPORT_COLUMNS = ("id", "name", "transform", "distinct_count")
SPEC_COLUMNS = ("id", "name", "source_id", "transform")


def _row(cells: Sequence[Any]) -> str:
    return COLUMN_SEPARATOR.join(f"{cell!s:<{COLUMN_WIDTH}}" for cell in cells)


def render_report(aggregate: PartitionAggregate, source: TableSource) -> str:
    """Render the distinct value counts as one table per partition spec.

    Blocks are ordered by ascending spec id, and rows follow the field order of the spec:

        partition spec id: 0
        id                   | name                 | transform            | distinct_count
        1000                 | date                 | day                  | 2

    Returns:
        str: The report, empty when the aggregate holds no partition specs.
    """
    lines: List[str] = []
    for spec_id in aggregate.spec_ids():
        spec = source.partition_spec(spec_id)
        lines.append(f"partition spec id: {spec_id}")
        lines.append(_row(REPORT_COLUMNS))
        for field, field_values in zip(spec.fields, aggregate.field_sets(spec_id)):
            lines.append(_row((field.field_id, field.name, field.transform, len(field_values))))
    return "".join(f"{line}\n" for line in lines)


def print_report(aggregate: PartitionAggregate, source: TableSource) -> None:
    click.echo(render_report(aggregate, source), nl=False)


def render_specs(metadata: TableMetadata) -> str:
    """Render every partition spec in the history of the table, marking the default spec."""
    lines: List[str] = []
    for spec_id, spec in sorted(metadata.specs().items()):
        suffix = " (default)" if spec_id == metadata.default_spec_id else ""
        lines.append(f"partition spec id: {spec_id}{suffix}")
        lines.append(_row(SPEC_COLUMNS))
        lines.extend(_row((field.field_id, field.name, field.source_id, field.transform)) for field in spec.fields)
    return "".join(f"{line}\n" for line in lines)
