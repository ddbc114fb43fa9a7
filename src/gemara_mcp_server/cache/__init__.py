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
Cache module for MCP servers.

This module provides the process-wide lexicon cache and the service that serves from it.
"""

# Use relative imports for direct script execution
from .lexicon import LexiconCache
from .lexicon_loader import LexiconService

__all__ = [
    "LexiconCache",
    "LexiconService",
]
