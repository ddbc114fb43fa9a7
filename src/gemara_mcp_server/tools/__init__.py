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
Tools module for MCP servers.

This module exports all tool registration functions from the tools directory.
"""

# Import all registration functions to make them available when importing from this package
from .lexicon import register_lexicon_tools
from .validation import register_validation_tools


# Define __all__ to specify what gets imported with "from tools import *"
__all__ = [
    "register_lexicon_tools",
    "register_validation_tools",
]
