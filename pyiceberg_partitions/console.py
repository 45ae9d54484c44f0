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
# pylint: disable=broad-except,redefined-builtin,redefined-outer-name
import logging
from functools import wraps
from typing import Any, Callable, Optional

import click
from click import Context

from pyiceberg_partitions.aggregate import aggregate_partitions
from pyiceberg_partitions.config import CatalogConfig, InspectConfig, load_config
from pyiceberg_partitions.report import print_report, render_specs
from pyiceberg_partitions.source import load_table_source

logger = logging.getLogger(__name__)


def catch_exception() -> Callable:  # type: ignore
    def decorator(func: Callable) -> Callable:  # type: ignore
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any):  # type: ignore
            try:
                return func(*args, **kwargs)
            except Exception as e:
                ctx: Context = click.get_current_context(silent=True)
                logger.debug("Command failed", exc_info=e)
                click.echo(f"{type(e).__name__}: {e}", err=True)
                ctx.exit(1)

        return wrapper

    return decorator


@click.group()
@click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False), help="Path to a YAML config file.")
@click.option("--catalog", default=None, help="Name of the catalog, overrides the config file.")
@click.option("--max-workers", type=click.IntRange(min=1), default=None, help="Maximum number of manifests read at once.")
@click.option("--verbose", is_flag=True, default=False, help="Log the traversal of the metadata to stderr.")
@click.pass_context
def run(ctx: Context, config_path: Optional[str], catalog: Optional[str], max_workers: Optional[int], verbose: bool) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    ctx.obj["catalog"] = catalog
    ctx.obj["max_workers"] = max_workers


def _config(ctx: Context) -> InspectConfig:
    config_path = ctx.obj["config_path"]
    config = load_config(config_path) if config_path else InspectConfig()
    if catalog := ctx.obj["catalog"]:
        config = config.model_copy(update={"catalog": CatalogConfig(name=catalog, properties=config.catalog.properties)})
    return config


@run.command()
@click.argument("identifier", required=False)
@click.option("--snapshot-id", type=int, default=None, help="Report on this snapshot instead of the current one.")
@click.pass_context
@catch_exception()
def partitions(ctx: Context, identifier: Optional[str], snapshot_id: Optional[int]) -> None:
    """Print the number of distinct values per partition field, for each partition spec."""
    config = _config(ctx)
    source = load_table_source(config, identifier)
    max_workers = ctx.obj["max_workers"] or config.max_workers
    aggregate = aggregate_partitions(source, max_workers=max_workers, snapshot_id=snapshot_id)
    print_report(aggregate, source)


@run.command()
@click.argument("identifier", required=False)
@click.pass_context
@catch_exception()
def spec(ctx: Context, identifier: Optional[str]) -> None:
    """Print the partition specs of the table."""
    source = load_table_source(_config(ctx), identifier)
    click.echo(render_specs(source.current_metadata()), nl=False)
