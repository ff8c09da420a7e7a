"""Upstream adapters mapping each release feed onto normalized Release records."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from release_monitor.common.clock import Clock
from release_monitor.common.enums import Platform, ReleaseStatus
from release_monitor.snapshot_store.models import DATE_UNKNOWN, Release
from release_monitor.sources.errors import SourceError, UpstreamPayloadError
from release_monitor.sources.models import (
    AppleArticle,
    AppleDocsIndex,
    ChromeChannelInfo,
    EdgeProduct,
    EdgeRelease,
    WhaleNotice,
    WhaleNoticePage,
)
from release_monitor.sources.transport import Transport, decode_json

logger = logging.getLogger(__name__)

SourceResult = Union[Release, Sequence[Release], None]

APPLE_INDEX_URL = "https://developer.apple.com/tutorials/data/index/ios-ipados-release-notes"
APPLE_DOCS_PREFIX = "/documentation/ios-ipados-release-notes"
APPLE_DOCS_URL = f"https://developer.apple.com{APPLE_DOCS_PREFIX}"
APPLE_LANGUAGE = "swift"

CHROME_CHANNELS_URL = "https://chromestatus.com/api/v0/channels"
CHROME_ROADMAP_URL = "https://chromestatus.com/roadmap"
CHROME_CHANNELS = (
    ("stable", ReleaseStatus.stable),
    ("beta", ReleaseStatus.beta),
    ("dev", ReleaseStatus.dev),
)
XSSI_GUARD = ")]}'"

EDGE_PRODUCTS_URL = "https://edgeupdates.microsoft.com/api/products"
EDGE_CHANNELS = (ReleaseStatus.stable, ReleaseStatus.beta, ReleaseStatus.dev)
EDGE_RELNOTES_URL = "https://learn.microsoft.com/en-us/deployedge/microsoft-edge-relnote-{channel}-channel"

WHALE_NOTICES_URL = "https://notice.naver.com/api/v1/services/whalehomepage/notices"
WHALE_NOTICES_PARAMS = {"sectionId": 199, "page": 1, "pageSize": 10}
WHALE_NOTICE_URL = "https://notice.naver.com/notices/whalehomepage/{notice_id}"

LEADING_DATE = re.compile(r"\s*(\d{4}-\d{2}-\d{2})(?!\d)")


def date_part(value: Optional[str]) -> str:
    if not value:
        return DATE_UNKNOWN
    match = LEADING_DATE.match(value)
    return match.group(1) if match else DATE_UNKNOWN


def classify_title(title: str) -> ReleaseStatus:
    if "Beta" in title:
        return ReleaseStatus.beta
    if "RC" in title:
        return ReleaseStatus.rc
    return ReleaseStatus.official


def strip_xssi_guard(body: str) -> str:
    text = body.lstrip("\ufeff")
    if not text.startswith(XSSI_GUARD):
        return text
    newline = text.find("\n")
    if newline == -1:
        return text[len(XSSI_GUARD):]
    return text[newline + 1:]


def _published_at(release: EdgeRelease) -> datetime:
    raw = release.published_time.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError as exc:
        raise UpstreamPayloadError(f"unparseable PublishedTime {release.published_time!r}") from exc
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


class ReleaseSource:
    platform: Platform

    def __init__(self, *, transport: Transport, url: str) -> None:
        self._transport = transport
        self._url = url

    @property
    def name(self) -> str:
        return self.platform.value

    async def fetch(self) -> SourceResult:
        try:
            return await self._fetch()
        except (SourceError, ValidationError) as exc:
            logger.warning("Error fetching %s release: %s", self.name, exc)
        except Exception:
            logger.exception("Unexpected error fetching %s release", self.name)
        return None

    async def _fetch(self) -> SourceResult:
        raise NotImplementedError


def parse_apple_index(payload: Any) -> Optional[AppleArticle]:
    index = AppleDocsIndex.model_validate(payload)
    trees = index.interface_languages.get(APPLE_LANGUAGE)
    if not trees:
        raise UpstreamPayloadError(f"index has no {APPLE_LANGUAGE!r} language tree")
    for node in trees[0].children:
        if node.type == "article":
            return AppleArticle.model_validate(node.model_dump())
    return None


class AppleReleaseSource(ReleaseSource):
    platform = Platform.ios

    def __init__(self, *, transport: Transport, url: str = APPLE_INDEX_URL, clock: Optional[Clock] = None) -> None:
        super().__init__(transport=transport, url=url)
        self._clock = clock or Clock()

    async def _fetch(self) -> SourceResult:
        article = parse_apple_index(await self._transport.get_json(self._url))
        if article is None:
            logger.info("Apple release notes index has no article entries")
            return None
        path = article.path
        if path.startswith(APPLE_DOCS_PREFIX):
            path = path[len(APPLE_DOCS_PREFIX):]
        return Release(
            platform=self.platform,
            version=article.title.replace(" Release Notes", ""),
            status=classify_title(article.title).value,
            # The docs index carries no publish date.
            date=self._clock.today().isoformat(),
            link=f"{APPLE_DOCS_URL}{path}",
        )


def parse_chrome_channels(body: str) -> Dict[str, ChromeChannelInfo]:
    payload = decode_json(strip_xssi_guard(body))
    if not isinstance(payload, dict):
        raise UpstreamPayloadError("channel payload is not an object")
    channels: Dict[str, ChromeChannelInfo] = {}
    for key, _ in CHROME_CHANNELS:
        if payload.get(key) is None:
            continue
        try:
            channels[key] = ChromeChannelInfo.model_validate(payload[key])
        except ValidationError as exc:
            logger.warning("Skipping malformed Chrome %s channel: %s", key, exc)
    return channels


class ChromeReleaseSource(ReleaseSource):
    platform = Platform.chrome

    def __init__(self, *, transport: Transport, url: str = CHROME_CHANNELS_URL) -> None:
        super().__init__(transport=transport, url=url)

    def _channel_release(self, key: str, label: ReleaseStatus, info: ChromeChannelInfo) -> Release:
        version = str(info.version).strip()
        if not version:
            raise UpstreamPayloadError(f"Chrome channel {key} has an empty version")
        return Release(
            platform=self.platform,
            channel=label.value,
            version=f"v{version}",
            status=label.value,
            date=date_part(info.early_stable or info.stable_date),
            link=CHROME_ROADMAP_URL,
        )

    async def _fetch(self) -> SourceResult:
        channels = parse_chrome_channels(await self._transport.get_text(self._url))
        releases: List[Release] = []
        for key, label in CHROME_CHANNELS:
            info = channels.get(key)
            if info is None:
                logger.info("Chrome channel %s missing from upstream", key)
                continue
            try:
                releases.append(self._channel_release(key, label, info))
            except (SourceError, ValidationError) as exc:
                logger.warning("Skipping Chrome %s channel: %s", key, exc)
        return releases


def parse_edge_products(payload: Any) -> List[EdgeProduct]:
    if not isinstance(payload, list):
        raise UpstreamPayloadError("product catalog is not a list")
    wanted = {channel.value for channel in EDGE_CHANNELS}
    products: List[EdgeProduct] = []
    for item in payload:
        if not isinstance(item, dict) or item.get("Product") not in wanted:
            continue
        try:
            products.append(EdgeProduct.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping malformed Edge %s product: %s", item.get("Product"), exc)
    return products


def _dated_releases(product: EdgeProduct) -> List[Tuple[datetime, EdgeRelease]]:
    dated: List[Tuple[datetime, EdgeRelease]] = []
    for raw in product.releases:
        try:
            release = EdgeRelease.model_validate(raw)
            dated.append((_published_at(release), release))
        except (SourceError, ValidationError) as exc:
            logger.warning("Skipping Edge %s release: %s", product.product, exc)
    return dated


def latest_edge_release(products: Sequence[EdgeProduct], channel: ReleaseStatus) -> Optional[EdgeRelease]:
    product = next((item for item in products if item.product == channel.value), None)
    if product is None:
        return None
    dated = _dated_releases(product)
    if not dated:
        return None
    return max(dated, key=lambda pair: pair[0])[1]


class EdgeReleaseSource(ReleaseSource):
    platform = Platform.edge

    def __init__(self, *, transport: Transport, url: str = EDGE_PRODUCTS_URL) -> None:
        super().__init__(transport=transport, url=url)

    async def _fetch(self) -> SourceResult:
        products = parse_edge_products(await self._transport.get_json(self._url))
        releases: List[Release] = []
        for channel in EDGE_CHANNELS:
            latest = latest_edge_release(products, channel)
            if latest is None:
                logger.info("Edge channel %s absent or empty", channel.value)
                continue
            try:
                releases.append(
                    Release(
                        platform=self.platform,
                        version=f"v{latest.product_version}",
                        status=channel.value,
                        date=date_part(latest.published_time),
                        link=EDGE_RELNOTES_URL.format(channel=channel.value.lower()),
                    )
                )
            except ValidationError as exc:
                logger.warning("Skipping Edge %s channel: %s", channel.value, exc)
        return releases


def parse_whale_notices(payload: Any) -> Optional[WhaleNotice]:
    page = WhaleNoticePage.model_validate(payload)
    if not page.item:
        return None
    return page.item[0]


class WhaleReleaseSource(ReleaseSource):
    platform = Platform.whale

    def __init__(self, *, transport: Transport, url: str = WHALE_NOTICES_URL) -> None:
        super().__init__(transport=transport, url=url)

    async def _fetch(self) -> SourceResult:
        payload = await self._transport.get_json(self._url, params=WHALE_NOTICES_PARAMS)
        latest = parse_whale_notices(payload)
        if latest is None:
            logger.info("Whale notice board returned no items")
            return None
        tokens = latest.title.split()
        if not tokens:
            raise UpstreamPayloadError("Whale notice title is blank")
        return Release(
            platform=self.platform,
            version=tokens[0],
            status=ReleaseStatus.official.value,
            date=date_part(latest.reg_date),
            link=WHALE_NOTICE_URL.format(notice_id=latest.id),
        )
