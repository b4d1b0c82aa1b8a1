# address_verification/services/geo_source.py
"""
Client for the nationwide address directory (turkiyeapi.dev).

Every public method returns the normalised payload, or None when the source
is unavailable: network error, timeout, non-2xx status or a payload that
does not have the expected shape. Nothing raises past this module; callers
decide how to degrade.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from address_verification.configs import configs

logger = logging.getLogger(__name__)

_source_config = configs.get("geo_source", {})

DEFAULT_BASE_URL = "https://turkiyeapi.dev/api/v1"


def _clean_items(items: Any) -> List[Dict[str, Any]]:
    """Keeps the {id, name} entries of a list, dropping malformed ones."""
    if not isinstance(items, list):
        return []
    cleaned = []
    for item in items:
        if not isinstance(item, dict):
            continue
        item_id = item.get("id")
        name = item.get("name")
        if item_id is None or not isinstance(name, str) or not name.strip():
            continue
        cleaned.append({"id": item_id, "name": name.strip()})
    return cleaned


def unwrap_payload(payload: Any) -> Optional[Any]:
    """
    Accepts both `{"status": "OK", "data": ...}` envelopes and bare data.
    Returns None for envelopes that report a failure.
    """
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        if "data" in payload:
            return payload["data"]
        if payload.get("status") not in (None, "OK"):
            return None
        return payload
    return None


class TurkiyeApiClient:
    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (
            base_url or _source_config.get("base_url") or DEFAULT_BASE_URL
        ).rstrip("/")
        self.timeout = timeout or float(_source_config.get("timeout_seconds", 15))
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "User-Agent": _source_config.get("user_agent", "adres-dogrulama/1.0"),
                "Accept": "application/json",
            }
        )

    def _fetch(self, endpoint: str) -> Optional[Any]:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.RequestException as e:
            logger.error(f"Address API request failed for {endpoint}: {e}")
            return None
        except ValueError as e:
            logger.error(f"Address API returned invalid JSON for {endpoint}: {e}")
            return None

        data = unwrap_payload(payload)
        if data is None:
            logger.error(f"Address API returned an error payload for {endpoint}.")
        return data

    def fetch_provinces(self) -> Optional[List[Dict[str, Any]]]:
        data = self._fetch("/provinces")
        if not isinstance(data, list):
            return None
        return _clean_items(data)

    def fetch_province_detail(self, province_id: Any) -> Optional[Dict[str, Any]]:
        data = self._fetch(f"/provinces/{province_id}")
        if not isinstance(data, dict) or not isinstance(data.get("districts"), list):
            return None
        return {"districts": _clean_items(data["districts"])}

    def fetch_district_detail(self, district_id: Any) -> Optional[Dict[str, Any]]:
        data = self._fetch(f"/districts/{district_id}")
        if not isinstance(data, dict) or not isinstance(
            data.get("neighborhoods"), list
        ):
            return None
        return {
            "neighborhoods": _clean_items(data["neighborhoods"]),
            "villages": _clean_items(data.get("villages")),
        }
