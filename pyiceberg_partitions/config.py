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
"""Configuration of a partition report run.

The config file is YAML, read with strictyaml in the same way pyiceberg reads
`.pyiceberg.yaml`:

    catalog:
      name: glue
      type: glue
    warehouse: s3://bucket/warehouse
    namespace: analytics
    table: events
    max-workers: 8
    aws:
      access-key-id: AKIA...
      secret-access-key: ...
      session-token: ...
      region: eu-west-1

Everything under `catalog` except `name` is handed to `load_catalog` as a
catalog property, so any catalog type pyiceberg supports can be configured.

The flat TOML files of earlier tooling, with `access_key_id`, `region`, `warehouse`
and friends at the top level, are not read, and top-level credential keys are
rejected. Move such settings into the layout above, with the credentials nested
under `aws` and the keys hyphenated.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

import strictyaml
from pydantic import Field, PositiveInt, ValidationError, model_validator
from pyiceberg.io import AWS_ACCESS_KEY_ID, AWS_REGION, AWS_SECRET_ACCESS_KEY, AWS_SESSION_TOKEN
from pyiceberg.typedef import UTF8, IcebergBaseModel, Properties

DEFAULT_CATALOG_NAME = "default"
WAREHOUSE = "warehouse"
FLAT_CREDENTIAL_KEYS = ("access_key_id", "secret_access_key", "session_token", "region")


class AwsCredentials(IcebergBaseModel):
    access_key_id: Optional[str] = Field(alias="access-key-id", default=None)
    secret_access_key: Optional[str] = Field(alias="secret-access-key", default=None)
    session_token: Optional[str] = Field(alias="session-token", default=None)
    region: Optional[str] = Field(default=None)

    def to_properties(self) -> Properties:
        """Map the credentials on the unified client properties, used by both the catalog and the FileIO."""
        properties = {
            AWS_ACCESS_KEY_ID: self.access_key_id,
            AWS_SECRET_ACCESS_KEY: self.secret_access_key,
            AWS_SESSION_TOKEN: self.session_token,
            AWS_REGION: self.region,
        }
        return {key: value for key, value in properties.items() if value is not None}


class CatalogConfig(IcebergBaseModel):
    name: str = Field(default=DEFAULT_CATALOG_NAME)
    properties: Dict[str, str] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def split_name_from_properties(cls, data: Any) -> Any:
        if isinstance(data, dict) and "properties" not in data:
            properties = {str(key): str(value) for key, value in data.items() if key != "name"}
            return {"name": data.get("name", DEFAULT_CATALOG_NAME), "properties": properties}
        return data


class InspectConfig(IcebergBaseModel):
    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    warehouse: Optional[str] = Field(default=None)
    namespace: Optional[str] = Field(default=None)
    table: Optional[str] = Field(default=None)
    max_workers: Optional[PositiveInt] = Field(alias="max-workers", default=None)
    aws: Optional[AwsCredentials] = Field(default=None)

    @model_validator(mode="before")
    @classmethod
    def reject_flat_credentials(cls, data: Any) -> Any:
        if isinstance(data, dict) and (flat_keys := [key for key in FLAT_CREDENTIAL_KEYS if key in data]):
            raise ValueError(f"AWS credentials belong under the aws key, with hyphenated names: {', '.join(flat_keys)}")
        return data

    def identifier(self) -> Tuple[str, ...]:
        """Return the identifier of the configured table.

        Raises:
            ValueError: When either the namespace or the table is not configured.
        """
        if not self.namespace or not self.table:
            raise ValueError("Both namespace and table need to be configured to identify the table")
        return tuple(self.namespace.split(".")) + (self.table,)

    def catalog_properties(self) -> Properties:
        properties: Dict[str, str] = {}
        if self.warehouse:
            properties[WAREHOUSE] = self.warehouse
        if self.aws:
            properties.update(self.aws.to_properties())
        # Explicit catalog properties take precedence
        properties.update(self.catalog.properties)
        return properties


def load_config(path: str) -> InspectConfig:
    """Read and validate a config file.

    Args:
        path: Location of the YAML config file on the local filesystem.

    Returns:
        InspectConfig: The validated config.

    Raises:
        ValueError: When the file does not describe a valid config.
    """
    with open(path, encoding=UTF8) as f:
        document = strictyaml.load(f.read())

    data = document.data
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file {path}: expected a mapping at the top level")

    try:
        return InspectConfig.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid config file {path}: {e}") from e
