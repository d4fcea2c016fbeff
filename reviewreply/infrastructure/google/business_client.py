"""
Google Business Client - Google Business Profile REST API
==========================================================

Accounts, locations and reviews of a Google Business Profile, using an
OAuth access token with the business.manage scope. Token acquisition
happens in the browser (Google Identity Services) and is not handled here.

ENDPOINTS:
- GET  {account_api}/accounts
- GET  {business_info_api}/{account}/locations?readMask=...
- GET  {reviews_api}/{location}/reviews?pageSize=50&pageToken=...
- PUT  {reviews_api}/{review}/reply   body: {"comment": "..."}
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional

import requests

from ...domain import BusinessProfile, RemoteReview, SourceUnavailable, star_rating_to_int
from ..config import get_settings
from .review_source import ReviewSource

logger = logging.getLogger(__name__)

LOCATION_READ_MASK = "name,title,storeCode,latlng"
NO_CONTENT = "(No content)"
REVIEWS_PAGE_SIZE = 50  # API maximum


class GoogleBusinessClient(ReviewSource):
    """
    Google Business Profile client.

    USAGE:
        client = GoogleBusinessClient()
        profile = client.discover_profile(access_token)
        reviews = client.list_reviews(profile.location_id, access_token)
    """

    def __init__(self):
        settings = get_settings()
        self._account_api = settings.google.account_api_url
        self._business_info_api = settings.google.business_info_api_url
        self._reviews_api = settings.google.reviews_api_url
        self._timeout = settings.google.timeout_seconds
        self._date_format = settings.reply.date_format

    # ── Profile discovery ──────────────────────────────────────────

    def fetch_accounts(self, access_token: str) -> List[Dict]:
        data = self._request("GET", f"{self._account_api}/accounts", access_token,
                             error="Failed to fetch accounts")
        return data.get("accounts", [])

    def fetch_locations(self, access_token: str, account_name: str) -> List[Dict]:
        data = self._request(
            "GET",
            f"{self._business_info_api}/{account_name}/locations",
            access_token,
            params={"readMask": LOCATION_READ_MASK},
            error="Failed to fetch locations",
        )
        return data.get("locations", [])

    def discover_profile(
        self,
        access_token: str,
        business_type: Optional[str] = None,
        signature: Optional[str] = None,
    ) -> BusinessProfile:
        """
        Build the BusinessProfile for a fresh access token.

        Multi-location management is out of scope: the first account and
        its first location are used.
        """
        accounts = self.fetch_accounts(access_token)
        if not accounts:
            raise SourceUnavailable(
                "No Google Business accounts found. "
                "Ensure your Google account manages a business."
            )

        try:
            account_name = accounts[0]["name"]
            locations = self.fetch_locations(access_token, account_name)
            if not locations:
                raise SourceUnavailable("No verified locations found for this account.")
            location = locations[0]
            location_name = location["name"]
            title = location.get("title")
        except (KeyError, TypeError, AttributeError) as e:
            logger.error(f"Unexpected account/location payload: {e!r}")
            raise SourceUnavailable(f"Failed to fetch locations (unexpected response format: {e!r})") from e

        if len(accounts) > 1 or len(locations) > 1:
            logger.info(
                f"{len(accounts)} accounts / {len(locations)} locations available, "
                f"using {location_name}"
            )

        return BusinessProfile(
            name=title or "My Business",
            account_id=account_name,
            location_id=location_name,
            access_token=access_token,
            is_connected=True,
            business_type=business_type,
            signature=signature,
        )

    # ── ReviewSource ───────────────────────────────────────────────

    def list_reviews(self, location_id: str, access_token: str) -> List[RemoteReview]:
        """
        Fetch the reviews of a location.
        location_id format: accounts/{accountId}/locations/{locationId}
        """
        error = "Failed to fetch reviews. Ensure API is enabled in GCP."
        reviews = []
        params = {"pageSize": REVIEWS_PAGE_SIZE}

        while True:
            data = self._request(
                "GET",
                f"{self._reviews_api}/{location_id}/reviews",
                access_token,
                params=params,
                error=error,
            )
            try:
                reviews.extend(self._parse_review(r) for r in data.get("reviews", []))
            except (KeyError, TypeError, AttributeError) as e:
                logger.error(f"Unexpected review payload for {location_id}: {e!r}")
                raise SourceUnavailable(f"{error} (unexpected response format: {e!r})") from e

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            params = {"pageSize": REVIEWS_PAGE_SIZE, "pageToken": page_token}

        logger.info(f"Fetched {len(reviews)} reviews for {location_id}")
        return reviews

    def publish_reply(self, review_id: str, access_token: str, text: str) -> bool:
        self._request(
            "PUT",
            f"{self._reviews_api}/{review_id}/reply",
            access_token,
            json={"comment": text},
            error="Failed to post reply.",
        )
        logger.info(f"Reply posted to {review_id}")
        return True

    # ── Helpers ────────────────────────────────────────────────────

    def _request(self, method: str, url: str, access_token: str, error: str, **kwargs) -> Dict:
        headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.request(
                method, url, headers=headers, timeout=self._timeout, **kwargs
            )
        except requests.RequestException as e:
            logger.warning(f"Google API request failed: {e}")
            raise SourceUnavailable(f"{error} ({e})") from e

        if not response.ok:
            logger.error(f"Google API error {response.status_code}: {response.text[:300]}")
            if response.status_code == 403:
                raise SourceUnavailable(
                    f"{error} Access Denied (403). "
                    "Did you add your email to 'Test Users' in OAuth Consent Screen?"
                )
            raise SourceUnavailable(f"{error} (HTTP {response.status_code})")

        if not response.content:
            return {}

        try:
            data = response.json()
        except ValueError as e:
            raise SourceUnavailable(f"{error} (invalid JSON response)") from e

        if not isinstance(data, dict):
            raise SourceUnavailable(f"{error} (unexpected response format)")
        return data

    def _parse_review(self, raw: Dict) -> RemoteReview:
        reviewer = raw.get("reviewer") or {}
        reply = raw.get("reviewReply")
        return RemoteReview(
            id=raw["name"],
            review_id=raw.get("reviewId", ""),
            reviewer_name=reviewer.get("displayName", ""),
            reviewer_avatar=reviewer.get("profilePhotoUrl"),
            rating=star_rating_to_int(raw.get("starRating")),
            content=raw.get("comment") or NO_CONTENT,
            created_at=self._format_date(raw.get("createTime", "")),
            existing_reply_text=(reply.get("comment") or "") if reply else None,
        )

    def _format_date(self, timestamp: str) -> str:
        # createTime is RFC 3339 with up to nanosecond precision
        try:
            return datetime.strptime(timestamp[:19], "%Y-%m-%dT%H:%M:%S").strftime(self._date_format)
        except ValueError:
            return timestamp
