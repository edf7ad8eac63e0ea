"""Announcement source: fetch and parse the published closings page."""

from __future__ import annotations

import httpx
import structlog
from bs4 import BeautifulSoup

from snowday.config import SourceConfig
from snowday.errors import ConfigurationError, ParseError, UpstreamError
from snowday.types import Announcement

log = structlog.get_logger()


def is_closed_status(status: str, tokens: tuple[str, ...] = ("closed",)) -> bool:
    lower = (status or "").lower()
    return any(token.lower() in lower for token in tokens)


def make_announcement(name: str, status: str, config: SourceConfig | None = None) -> Announcement:
    tokens = (config or SourceConfig()).closed_tokens
    return Announcement(name=name, status=status, is_closed=is_closed_status(status, tokens))


def parse_announcements(html: str, config: SourceConfig | None = None) -> list[Announcement]:
    """Extract announcements from the closings page.

    Rows without a school name are skipped rather than failing the page.
    """
    config = config or SourceConfig()
    try:
        soup = BeautifulSoup(html, "html.parser")
    except Exception as e:  # bs4 surfaces parser failures as assorted types
        raise ParseError(f"could not parse closings page: {e}") from e

    announcements: list[Announcement] = []
    skipped = 0
    for row in soup.select(config.row_selector):
        name_el = row.select_one(config.name_selector)
        status_el = row.select_one(config.status_selector)
        name = name_el.get_text(strip=True) if name_el else ""
        status = status_el.get_text(strip=True) if status_el else ""
        if not name:
            skipped += 1
            log.debug("announcement_row_skipped", reason="missing_name")
            continue
        announcements.append(make_announcement(name, status, config))

    if not announcements:
        log.warning("no_announcements_found", skipped=skipped)
    else:
        log.debug("announcements_parsed", count=len(announcements), skipped=skipped)
    return announcements


class AnnouncementSource:
    """Fetches announcements from the configured URL."""

    def __init__(self, config: SourceConfig, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self._client = client

    async def fetch_html(self) -> str:
        if not self.config.url:
            raise ConfigurationError("announcement source url is not configured")

        headers = {"User-Agent": self.config.user_agent}
        try:
            if self._client is not None:
                resp = await self._client.get(
                    self.config.url, headers=headers, timeout=self.config.timeout
                )
            else:
                async with httpx.AsyncClient(follow_redirects=True) as client:
                    resp = await client.get(
                        self.config.url, headers=headers, timeout=self.config.timeout
                    )
            resp.raise_for_status()
        except httpx.TimeoutException as e:
            raise UpstreamError(f"timed out fetching {self.config.url}") from e
        except httpx.HTTPStatusError as e:
            raise UpstreamError(
                f"{self.config.url} returned HTTP {e.response.status_code}"
            ) from e
        except httpx.HTTPError as e:
            raise UpstreamError(f"could not fetch {self.config.url}: {e}") from e
        return resp.text

    async def fetch(self) -> list[Announcement]:
        html = await self.fetch_html()
        return parse_announcements(html, self.config)
