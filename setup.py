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

from setuptools import find_packages, setup

setup(
    name="pyiceberg-partitions",
    version="0.1.0",
    description="Report the distinct partition values of an Apache Iceberg table, per partition spec",
    license="Apache-2.0",
    python_requires=">=3.9",
    packages=find_packages(include=["pyiceberg_partitions*"]),
    install_requires=[
        "pyiceberg[glue,pyarrow]>=0.9.0,<1.0.0",
        "pydantic>=2.0,<3.0",
        "strictyaml>=1.7.0",
        "tenacity>=8.2.3",
        "click>=7.1.1,<9.0.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
        ],
    },
    entry_points={
        "console_scripts": [
            "pyiceberg-partitions = pyiceberg_partitions.console:run",
        ],
    },
)
