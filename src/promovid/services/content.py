"""Theme content provider backed by the Supabase component table."""

import asyncio
import logging
from typing import Optional

import requests
from pydantic import ValidationError

from ..config import config
from ..models import ContentSnippet, DEFAULT_THEME_ID

logger = logging.getLogger(__name__)

# Theme id -> section of the component_config table
SECTION_MAP: dict[str, str] = {
    "safety": "Safety",
    "efficacy": "Evidence",
    "brand": "Brand",
    "mechanism": "Solution",
    "patient": "Insight",
}

DEFAULT_SECTION = "Safety"


def _snippets(section: str, *rows: tuple[str, str, str]) -> tuple[ContentSnippet, ...]:
    return tuple(
        ContentSnippet(id=id_, name=name, content=content, section=section)
        for id_, name, content in rows
    )


# Used whenever the database is unavailable
FALLBACK_SNIPPETS: dict[str, tuple[ContentSnippet, ...]] = {
    "safety": _snippets(
        "Safety",
        ("SAFE_01", "Dosage Information", "Recommended dosage and administration guidelines"),
        ("SAFE_02", "Strength/Form", "Available strengths and formulations"),
        ("SAFE_03", "Safety Claims", "Key safety profile and tolerability data"),
        ("SAFE_04", "Side Effects", "Common and rare adverse reactions"),
        ("SAFE_05", "Contraindications", "When not to use this medication"),
    ),
    "efficacy": _snippets(
        "Evidence",
        ("EVID_01", "Efficacy Claim", "Primary efficacy endpoints and outcomes"),
        ("EVID_02", "Chart Data", "Clinical trial results visualization"),
        ("EVID_03", "Study Summary", "Key clinical study highlights"),
    ),
    "brand": _snippets(
        "Brand",
        ("INIT_01a", "Brand Root Name", "Primary brand identifier"),
        ("INIT_03", "Main Headline", "Primary marketing message"),
        ("INIT_06", "Tagline", "Brand positioning statement"),
    ),
    "mechanism": _snippets(
        "Solution",
        ("SOL_01", "USP/Claims", "Unique selling proposition"),
        ("SOL_03", "MOA Diagram", "Mechanism of action visualization"),
    ),
    "patient": _snippets(
        "Insight",
        ("INS_01", "Target Patient", "Ideal patient profile"),
        ("INS_02", "Disease Update", "Current disease landscape"),
    ),
}


def fallback_snippets(theme_id: str) -> list[ContentSnippet]:
    """Return the static snippets for a theme (default theme if unknown)."""
    return list(FALLBACK_SNIPPETS.get(theme_id, FALLBACK_SNIPPETS[DEFAULT_THEME_ID]))


def _snippet_from_row(row: dict, section: str) -> ContentSnippet:
    """Map one component_config row; the row keeps its own section if set."""
    return ContentSnippet(
        id=str(row.get("id", "")),
        name=row.get("name") or "",
        content=row.get("description") or "",
        section=row.get("section") or section,
    )


class ContentProvider:
    """Fetches theme snippets from Supabase, falling back to static data.

    The provider never raises: any configuration, transport or query problem
    yields the fallback list for the theme. One request per call, no retries.
    """

    TABLE = "component_config"
    DEFAULT_TIMEOUT = 10.0

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: float = DEFAULT_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        """Initialize the content provider.

        Args:
            supabase_url: Supabase project URL. Defaults to SUPABASE_URL env var.
            api_key: Supabase anon key. Defaults to SUPABASE_ANON_KEY env var.
            timeout: Request timeout in seconds.
            session: Optional requests session (mainly for tests).
        """
        self._url = (supabase_url if supabase_url is not None else config.supabase_url).rstrip("/")
        self._api_key = api_key if api_key is not None else config.supabase_anon_key
        self._timeout = timeout
        self._session = session or requests.Session()

    @property
    def configured(self) -> bool:
        return bool(self._url and self._api_key)

    async def fetch_snippets(self, theme_id: str) -> list[ContentSnippet]:
        """Return the content snippets for a theme.

        Args:
            theme_id: Theme identifier, e.g. 'safety'.

        Returns:
            Snippets from the database, or the static fallback list.
        """
        section = SECTION_MAP.get(theme_id, DEFAULT_SECTION)

        if not self.configured:
            logger.info("Supabase not configured, using fallback theme data")
            return fallback_snippets(theme_id)

        try:
            rows = await asyncio.to_thread(self._query_section, section)
        except Exception as e:
            logger.warning(f"Database not available, using fallback: {e}")
            return fallback_snippets(theme_id)

        if not rows:
            logger.info(f"No components for section {section}, using fallback")
            return fallback_snippets(theme_id)

        try:
            snippets = [_snippet_from_row(row, section) for row in rows]
        except (ValidationError, AttributeError, TypeError) as e:
            logger.warning(f"Malformed rows in {self.TABLE}, using fallback: {e}")
            return fallback_snippets(theme_id)

        logger.info(f"Retrieved {len(snippets)} components from {self.TABLE} table")
        return snippets

    def _query_section(self, section: str) -> list[dict]:
        """Select the components of one section through the PostgREST API."""
        url = f"{self._url}/rest/v1/{self.TABLE}"
        headers = {
            "apikey": self._api_key,
            "Authorization": f"Bearer {self._api_key}",
            "Accept": "application/json",
        }
        params = {
            "select": "id,name,description,section",
            "section": f"eq.{section}",
        }

        response = self._session.get(url, headers=headers, params=params, timeout=self._timeout)
        if response.status_code != 200:
            raise RuntimeError(f"{response.status_code}: {response.text[:200]}")

        data = response.json()
        if not isinstance(data, list):
            raise RuntimeError(f"Unexpected response from {self.TABLE}: {str(data)[:200]}")
        return data
