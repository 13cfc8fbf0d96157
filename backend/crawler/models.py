"""Crawl data and the events streamed while a crawl runs.

Every model serializes with camelCase keys (``pagesFound``, ``siteTitle``) so
one event can be written per NDJSON line with ``event.to_json()``.
"""
from typing import Literal, Union

from pydantic import BaseModel, ConfigDict, SerializeAsAny
from pydantic.alias_generators import to_camel


class _Model(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True)


class PageData(_Model):
    url: str
    title: str
    description: str = ""


class CrawlResult(_Model):
    site_title: str
    site_description: str
    base_url: str
    pages: tuple[PageData, ...] = ()


class GenerateResult(CrawlResult):
    llms_txt: str


class Progress(_Model):
    type: Literal["progress"] = "progress"
    message: str
    pages_found: int


class Skip(_Model):
    type: Literal["skip"] = "skip"
    url: str
    reason: str


class AiToken(_Model):
    type: Literal["ai_token"] = "ai_token"
    token: str


class Done(_Model):
    type: Literal["done"] = "done"
    result: SerializeAsAny[CrawlResult]


class Error(_Model):
    type: Literal["error"] = "error"
    message: str


CrawlProgressEvent = Union[Progress, Skip, Done, Error]
RewriteEvent = Union[AiToken, Done, Error]
