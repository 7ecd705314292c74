"""Unsplash photo search for the vision board."""
import logging
import os
from typing import List, Optional

import requests
from pydantic import Field

from ..constants import UNSPLASH_API_URL, UNSPLASH_ORIENTATION, UNSPLASH_PER_PAGE
from ..errors import ConfigurationError
from .base import CamelModel, Flow, FlowError

logger = logging.getLogger("wedly")

REQUEST_TIMEOUT_SECONDS = 10


class UnsplashSearchInput(CamelModel):
    query: str = Field(default="", description="The search query for images.")


class UnsplashUrls(CamelModel):
    regular: str
    thumb: str


class UnsplashUser(CamelModel):
    name: str


class UnsplashImage(CamelModel):
    id: str
    alt_description: Optional[str] = Field(default=None, alias="alt_description")
    urls: UnsplashUrls
    user: UnsplashUser


class UnsplashSearchOutput(CamelModel):
    images: List[UnsplashImage]


def _search(flow_input: UnsplashSearchInput) -> UnsplashSearchOutput:
    query = flow_input.query.strip()
    if not query:
        return UnsplashSearchOutput(images=[])

    access_key = os.environ.get("UNSPLASH_ACCESS_KEY")
    if not access_key:
        raise ConfigurationError("Unsplash API access key is not configured")

    try:
        response = requests.get(
            f"{UNSPLASH_API_URL}/search/photos",
            params={
                "query": query,
                "per_page": UNSPLASH_PER_PAGE,
                "orientation": UNSPLASH_ORIENTATION,
            },
            headers={"Authorization": f"Client-ID {access_key}"},
            timeout=REQUEST_TIMEOUT_SECONDS,
        )
    except requests.RequestException as e:
        raise FlowError(f"Unsplash request failed: {e}", 503, retryable=True) from e

    if response.status_code != 200:
        logger.error(f"[UNSPLASH] Search failed: {response.status_code} {response.text[:200]}")
        raise FlowError(f"Unsplash API request failed: {response.status_code}")

    results = response.json().get("results", [])
    images = [
        UnsplashImage(
            id=item["id"],
            alt_description=item.get("alt_description"),
            urls=UnsplashUrls(regular=item["urls"]["regular"], thumb=item["urls"]["thumb"]),
            user=UnsplashUser(name=(item.get("user") or {}).get("name", "")),
        )
        for item in results
    ]
    logger.info(f"[UNSPLASH] {len(images)} results for '{query}'")
    return UnsplashSearchOutput(images=images)


unsplash_image_search = Flow(
    "unsplashImageSearchFlow",
    UnsplashSearchInput,
    UnsplashSearchOutput,
    _search,
)
