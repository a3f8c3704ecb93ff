"""Completion options and the prompt string table.

Both models accept snake_case field names and camelCase aliases, so options
persisted by a host application in either spelling load unchanged.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CompletionOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    # FileSystemCompleter
    complete_folders_only: bool = Field(default=False, alias="completeFoldersOnly")
    complete_files: bool = Field(default=True, alias="completeFiles")
    handle_leading_quote: bool = Field(default=False, alias="handleLeadingQuote")
    quote_char: str = Field(default="'", alias="quoteChar")

    # Shared by FileSystemCompleter and CompletionApplier
    print_space_after_full_completion: bool = Field(
        default=True, alias="printSpaceAfterFullCompletion"
    )

    # CompletionApplier
    consume_matching_suffix: bool = Field(default=False, alias="consumeMatchingSuffix")
    strip_display_styling: bool = Field(default=False, alias="stripDisplayStyling")

    @field_validator("quote_char")
    @classmethod
    def _single_char(cls, value: str) -> str:
        if len(value) != 1:
            raise ValueError("quote_char must be exactly one character")
        return value


class Messages(BaseModel):
    """Prompt strings used when a candidate listing needs confirmation.

    ``prompt_message`` is formatted with the candidate count. Only the first
    character of ``yes_key`` and ``no_key`` is significant.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    prompt_message: str = Field(
        default="Display all {count} possibilities? (y or n)", alias="promptMessage"
    )
    yes_key: str = Field(default="y", alias="yesKey")
    no_key: str = Field(default="n", alias="noKey")

    @field_validator("yes_key", "no_key")
    @classmethod
    def _not_empty(cls, value: str) -> str:
        if not value:
            raise ValueError("answer keys must not be empty")
        return value

    def format_prompt(self, count: int) -> str:
        return self.prompt_message.format(count=count)
