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

from io import BytesIO
from typing import Dict, Mapping, Union

from pyiceberg.io import FileIO, InputFile, InputStream, OutputFile
from pyiceberg.typedef import EMPTY_DICT, Properties


class InMemoryInputFile(InputFile):
    """An InputFile over bytes that were already fetched from storage.

    Args:
        location (str): The location the bytes were fetched from.
        data (bytes): The full content of the file.

    Examples:
        >>> from pyiceberg_partitions.io import InMemoryInputFile
        >>> input_file = InMemoryInputFile("s3://foo/bar.avro", b"Obj")
        >>> input_file.open().read()
        b'Obj'
    """

    _data: bytes

    def __init__(self, location: str, data: bytes) -> None:
        super().__init__(location=location)
        self._data = data

    def __len__(self) -> int:
        """Return the total length of the file, in bytes."""
        return len(self._data)

    def exists(self) -> bool:
        return True

    def open(self, seekable: bool = True) -> InputStream:
        return BytesIO(self._data)


class InMemoryFileIO(FileIO):
    """A read-only FileIO that serves a fixed mapping of location to bytes.

    It lets pyiceberg's Avro readers decode manifest lists and manifests whose
    bytes were fetched through a TableSource.
    """

    _files: Dict[str, bytes]

    def __init__(self, files: Mapping[str, bytes], properties: Properties = EMPTY_DICT):
        super().__init__(properties=properties)
        self._files = dict(files)

    def new_input(self, location: str) -> InMemoryInputFile:
        """Get an InMemoryInputFile for a location that was handed to this FileIO.

        Raises:
            FileNotFoundError: When no bytes are held for the location.
        """
        if location not in self._files:
            raise FileNotFoundError(f"Cannot open file, not fetched: {location}")
        return InMemoryInputFile(location, self._files[location])

    def new_output(self, location: str) -> OutputFile:
        raise NotImplementedError(f"Cannot write to a read-only FileIO: {location}")

    def delete(self, location: Union[str, InputFile, OutputFile]) -> None:
        str_location = location.location if isinstance(location, (InputFile, OutputFile)) else location
        raise NotImplementedError(f"Cannot delete from a read-only FileIO: {str_location}")
