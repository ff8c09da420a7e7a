from __future__ import annotations

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class _Upstream(BaseModel):
    model_config = ConfigDict(extra="ignore")


class AppleIndexNode(_Upstream):
    type: Optional[str] = None
    title: Optional[str] = None
    path: Optional[str] = None


class AppleLanguageTree(_Upstream):
    children: List[AppleIndexNode] = Field(default_factory=list)


class AppleDocsIndex(_Upstream):
    interface_languages: Dict[str, List[AppleLanguageTree]] = Field(alias="interfaceLanguages")


class AppleArticle(_Upstream):
    title: str = Field(min_length=1)
    path: str = Field(min_length=1)


class ChromeChannelInfo(_Upstream):
    version: Union[int, str]
    early_stable: Optional[str] = None
    stable_date: Optional[str] = None


class EdgeRelease(_Upstream):
    product_version: str = Field(alias="ProductVersion", min_length=1)
    published_time: str = Field(alias="PublishedTime", min_length=1)


class EdgeProduct(_Upstream):
    product: Optional[str] = Field(alias="Product", default=None)
    releases: List[Any] = Field(alias="Releases", default_factory=list)


class WhaleNotice(_Upstream):
    id: Union[int, str]
    title: str = Field(min_length=1)
    reg_date: str = Field(alias="regDate", min_length=1)


class WhaleNoticePage(_Upstream):
    item: List[WhaleNotice] = Field(default_factory=list)
