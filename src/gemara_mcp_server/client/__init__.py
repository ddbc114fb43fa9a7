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

"""
Client module for MCP servers.

This module provides client connections to external services.
"""

from .http_client import HTTPClient
from .lexicon_client import fetch_lexicon, parse_lexicon
from .schema_registry import SchemaRegistry, normalize_definition, resolve_module_url

__all__ = [
    "HTTPClient",
    "fetch_lexicon",
    "parse_lexicon",
    "SchemaRegistry",
    "normalize_definition",
    "resolve_module_url",
]
