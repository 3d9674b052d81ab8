"""
atlas/ingestion/metrics.py — Fetches public profile metrics from Instagram.

Uses Instagram's public profile JSON endpoint (no auth). Returns a
ProfileMetrics model for the qualification evaluators; raises
MetricsUnavailable when the profile is private, missing or blocked.
"""

import logging
from typing import Any

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from atlas.config import settings
from atlas.qualification.errors import MetricsUnavailable
from atlas.qualification.models import ProfileMetrics

logger = logging.getLogger(__name__)

INSTAGRAM_PROFILE_URL = "https://www.instagram.com/{handle}/?__a=1&__d=dis"

# Instagram serves JSON to mobile user agents; desktop UAs get a login page
HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (iPhone; CPU iPhone OS 16_0 like Mac OS X) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/16.0 Mobile/15E148 Safari/604.1"
    ),
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
}

# Averages are taken over this many of the most recent posts
RECENT_POSTS = 3


def normalize_handle(handle: str | None) -> str:
    """'@Glow.By.Amina ' → 'Glow.By.Amina'."""
    return (handle or "").replace("@", "").strip()


@retry(
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=2, max=10),
    reraise=True,
)
def _fetch_profile_raw(handle: str) -> requests.Response:
    """
    Internal: one GET against the profile endpoint.
    Retries up to 3 times on connection errors and timeouts only.
    """
    return requests.get(
        INSTAGRAM_PROFILE_URL.format(handle=handle),
        headers=HEADERS,
        timeout=settings.metrics_timeout_seconds,
    )


def _extract_user(payload: Any) -> dict[str, Any] | None:
    """Find the user object; Instagram has served it under both keys."""
    if not isinstance(payload, dict):
        return None
    for container in ("graphql", "data"):
        user = (payload.get(container) or {}).get("user")
        if isinstance(user, dict):
            return user
    return None


def _count(node: dict[str, Any], key: str) -> int:
    return int((node.get(key) or {}).get("count") or 0)


def parse_profile(handle: str, user: dict[str, Any]) -> ProfileMetrics:
    """
    Turn an Instagram user object into ProfileMetrics.

    Likes and comments are averaged over up to RECENT_POSTS posts and rounded
    to one decimal; both are 0 when the profile has no visible posts.
    """
    media = user.get("edge_owner_to_timeline_media") or {}
    recent = [edge.get("node") or {} for edge in (media.get("edges") or [])[:RECENT_POSTS]]

    if recent:
        avg_likes = round(sum(_count(n, "edge_liked_by") for n in recent) / len(recent), 1)
        avg_comments = round(sum(_count(n, "edge_media_to_comment") for n in recent) / len(recent), 1)
    else:
        avg_likes = avg_comments = 0.0

    return ProfileMetrics(
        instagram_handle=handle,
        follower_count=_count(user, "edge_followed_by"),
        post_count=int(media.get("count") or 0),
        avg_likes=avg_likes,
        avg_comments=avg_comments,
        biography=user.get("biography") or None,
    )


def fetch_instagram_metrics(handle: str) -> ProfileMetrics:
    """
    Fetch follower/post counts, recent engagement and bio for a handle.

    Args:
        handle: Instagram handle, with or without a leading '@'.

    Returns:
        ProfileMetrics for the profile.

    Raises:
        MetricsUnavailable: If the handle is empty, the profile is missing or
                            private, or Instagram returns something unusable.
    """
    ig_handle = normalize_handle(handle)
    if not ig_handle:
        raise MetricsUnavailable("A valid Instagram handle is required.")

    logger.info("Fetching Instagram metrics for @%s...", ig_handle)

    try:
        response = _fetch_profile_raw(ig_handle)
    except requests.RequestException as e:
        logger.error("Failed to fetch @%s after retries: %s", ig_handle, e)
        raise MetricsUnavailable(f"Could not reach Instagram for @{ig_handle}: {e}") from e

    if response.status_code == 404:
        raise MetricsUnavailable(f"Instagram profile @{ig_handle} not found or is private.")
    if not response.ok:
        logger.error("Instagram responded %d for @%s: %s", response.status_code, ig_handle, response.text[:500])
        raise MetricsUnavailable(
            f"Instagram responded with status {response.status_code} for @{ig_handle}; "
            "the profile may be private or access is restricted."
        )

    try:
        payload = response.json()
    except ValueError as e:
        raise MetricsUnavailable(f"Instagram returned invalid JSON for @{ig_handle}.") from e

    user = _extract_user(payload)
    if user is None:
        message = payload.get("message") if isinstance(payload, dict) else None
        logger.warning("No user data in response for @%s (message=%s)", ig_handle, message)
        raise MetricsUnavailable(f"No user data found for @{ig_handle}; the profile may be private.")

    metrics = parse_profile(ig_handle, user)
    logger.info(
        "Fetched @%s: followers=%s posts=%s avg_likes=%s",
        ig_handle, metrics.follower_count, metrics.post_count, metrics.avg_likes,
    )
    return metrics
