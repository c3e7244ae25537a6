"""Catalog record types.

`CardRow` validates one raw catalog row (column names as they appear in the card sheet);
`CardRecord` is the immutable value the indices point at.
"""

from __future__ import annotations

from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field


@dataclass(frozen=True, eq=False)
class CardRecord:
    """A single catalog entry.

    Records compare and hash by identity: two rows with identical fields are still two entries,
    and a record reached through several indices deduplicates to one candidate.
    """

    identifier: str
    title: str
    subtitle: str = ""
    title_suffix: str = ""
    nicknames: str = ""
    personas: str = ""
    display_name: str = ""
    image_url: str = ""
    wiki_url: str = ""
    collector_info: str = ""

    @property
    def is_indexable(self) -> bool:
        """Whether the record carries both an identifier and collector info."""

        return bool(self.identifier.strip()) and bool(self.collector_info.strip())

    @property
    def label(self) -> str:
        """Human-readable label used in replies and selection options."""

        return f"{self.display_name} ({self.collector_info})"


class CardRow(BaseModel):
    """One raw row of the card sheet."""

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True, populate_by_name=True)

    identifier: str = Field(default="", alias="ID")
    title: str = Field(default="", alias="Title")
    subtitle: str = Field(default="", alias="Subtitle")
    title_suffix: str = Field(default="", alias="TitleSuffix")
    nicknames: str = Field(default="", alias="Nicknames")
    personas: str = Field(default="", alias="Personas")
    display_name: str = Field(default="", alias="DisplayName")
    image_url: str = Field(default="", alias="ImageURL")
    wiki_url: str = Field(default="", alias="WikiURL")
    collector_info: str = Field(default="", alias="CollInfo")

    def to_record(self) -> CardRecord:
        """Convert the validated row into an immutable `CardRecord`."""

        return CardRecord(**self.model_dump())
