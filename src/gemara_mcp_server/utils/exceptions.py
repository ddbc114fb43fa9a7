# Copyright contributors to the Gemara MCP Server project
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""Exceptions raised by the lexicon and validation services."""

from typing import Optional


class GemaraMCPError(Exception):
    def __init__(self, message):
        super().__init__(message)
        self.message = message

    def __str__(self):
        return self.message


class LexiconFetchError(GemaraMCPError):
    """The remote lexicon could not be retrieved."""


class LexiconRequestError(LexiconFetchError):
    """Request construction, transport, timeout or body-read failure."""


class LexiconStatusError(LexiconFetchError):
    """The remote source answered with a status other than 200."""

    def __init__(self, status_code: int, message: Optional[str] = None):
        super().__init__(message or f"unexpected status code: {status_code}")
        self.status_code = status_code


class LexiconDecodeError(LexiconFetchError):
    """The remote document is not a YAML list of term records."""


class ArtifactInputError(GemaraMCPError):
    """A required validation input was missing."""


class SchemaResolutionError(GemaraMCPError):
    """The schema module or one of its definitions could not be loaded."""
