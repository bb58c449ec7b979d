# teamfeed/scrapers/espn_scraper.py

import json
from typing import Any

from loguru import logger

from teamfeed.models.league import FeedLocator
from .base_scraper import BaseScraper


class EspnTeamsScraper(BaseScraper):
    """Fetches league rosters from the ESPN site API."""

    async def fetch_payload(self, locator: FeedLocator) -> Any:
        """Returns the decoded JSON body, or None when the body is not JSON.

        A body that cannot be decoded is a payload-shape problem, not a
        transport failure, so it is handed to the normalizer as ``None``.
        """
        logger.info(f"Fetching teams for {locator.league} from: {locator.url}")
        response = await self._make_request(method="GET", url=locator.url)
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.warning(f"Feed for {locator.league} returned a non-JSON body: {e}")
            logger.debug(f"Raw response content: {response.text[:500]}")
            return None
