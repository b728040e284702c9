"""Pydantic models for normalized feed items and pipeline results."""

from typing import Literal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field


class FeedItem(BaseModel):
    """Represents a single entry from an RSS or Atom feed."""

    model_config = ConfigDict(frozen=True)

    feed_title: str
    title: str = ""
    link: str = ""
    pub_date: AwareDatetime


class SourceBatch(BaseModel):
    """Items from one source, newest first, already cut down to the limit."""

    model_config = ConfigDict(frozen=True)

    source: str
    items: list[FeedItem] = Field(default_factory=list)


class SourceFailure(BaseModel):
    """Record of a source that contributed nothing to the run."""

    model_config = ConfigDict(frozen=True)

    source: str
    stage: Literal["fetch", "parse", "cancelled"]
    reason: str


class CollectedResults(BaseModel):
    """Outcome of fanning out over all sources: batches in completion order."""

    batches: list[SourceBatch] = Field(default_factory=list)
    failures: list[SourceFailure] = Field(default_factory=list)


class AggregateResult(BaseModel):
    """Final merged list plus the per-source failures seen on the way."""

    items: list[FeedItem] = Field(default_factory=list)
    failures: list[SourceFailure] = Field(default_factory=list)
