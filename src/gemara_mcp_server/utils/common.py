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

from typing import List, Literal

from pydantic import BaseModel, Field, field_validator

from .constants import LEXICON_MIME_TYPE


class ToolError(BaseModel):
    """
    Represents an error response from a tool execution.

    This class helps the LLM understand error messages and provides suggestions
    for potential resolutions.
    """

    isError: Literal[True] = Field(
        default=True,
        description="Indicates that an error occurred during tool execution if value is True",
    )

    message: str = Field(description="Detailed error message")

    suggestions: List[str] = Field(
        default_factory=list, description="List of suggestions for resolving the error"
    )


class LexiconEntry(BaseModel):
    """A single term in the Gemara Lexicon."""

    term: str = Field(min_length=1, description="The headword being defined")
    definition: str = Field(default="", description="Explanation of the term")
    references: List[str] = Field(
        default_factory=list,
        description="Citations for the term, in source order",
    )

    @field_validator("references", mode="before")
    @classmethod
    def _null_references(cls, value):
        # `references:` with no value is read by YAML as null
        return [] if value is None else value


class LexiconOutput(BaseModel):
    """Result of the get_lexicon tool."""

    entries: List[LexiconEntry] = Field(description="Lexicon terms in source order")
    source: str = Field(description="URL the lexicon was fetched from")
    cached: bool = Field(
        description="True when the entries were served from the cache without a fetch"
    )


class LexiconResourceContents(BaseModel):
    """Contents of a lexicon resource read."""

    uri: str = Field(description="The resource URI that was requested")
    mime_type: str = Field(default=LEXICON_MIME_TYPE)
    text: str = Field(description="JSON array of lexicon entries")


class FetchOutcome(BaseModel):
    did_fetch: bool
    # Entries this call fetched; empty when the cache was served
    entries: List[LexiconEntry] = Field(default_factory=list)


class ValidationOutcome(BaseModel):
    """Result of validating one artifact against a schema definition."""

    valid: bool = Field(description="Whether the artifact satisfies the definition")
    errors: List[str] = Field(
        default_factory=list,
        description="One diagnostic line per violation, empty when valid",
    )
    message: str = Field(description="Human readable summary of the outcome")
