"""
Spoonacular HTTP client.

Thin wrapper over the Spoonacular REST API:
    - requests.Session with connection pooling and urllib3 retries on 429/5xx
    - a minimum interval between calls so bursts do not burn points
    - quota headers (X-API-Quota-Used / -Left / -Request) kept from the last response

Every failure surfaces as ExternalServiceError; callers decide whether a stale
cache entry can be served instead.
"""

import logging
import threading
import time
from typing import Any, Dict, Iterable, List, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from app.config import settings
from app.exceptions import ExternalServiceError

logger = logging.getLogger("smartplates.spoonacular")


class SpoonacularClient:
    """Synchronous Spoonacular API client."""

    # Retry configuration
    RETRY_TOTAL = 2
    RETRY_BACKOFF_FACTOR = 0.5
    RETRY_STATUS_FORCELIST = [429, 500, 502, 503, 504]

    # Connection pool configuration
    POOL_CONNECTIONS = 5
    POOL_MAXSIZE = 10

    DEFAULT_NUMBER = 12

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = "https://api.spoonacular.com",
        timeout: float = 15.0,
        min_interval: float = 0.5,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.min_interval = min_interval
        self.last_quota: Dict[str, Optional[float]] = {
            "used": None,
            "left": None,
            "request": None,
        }
        self._last_request_at = 0.0
        self._lock = threading.Lock()

        if session is None:
            session = requests.Session()
            retry_strategy = Retry(
                total=self.RETRY_TOTAL,
                backoff_factor=self.RETRY_BACKOFF_FACTOR,
                status_forcelist=self.RETRY_STATUS_FORCELIST,
                allowed_methods=["GET"],
                raise_on_status=False,
            )
            adapter = HTTPAdapter(
                pool_connections=self.POOL_CONNECTIONS,
                pool_maxsize=self.POOL_MAXSIZE,
                max_retries=retry_strategy,
            )
            session.mount("http://", adapter)
            session.mount("https://", adapter)
        self.session = session
        self.session.headers.update({"Accept": "application/json"})

    def is_configured(self) -> bool:
        return bool(self.api_key)

    def close(self) -> None:
        self.session.close()

    # ------------------ Internals ------------------
    def _throttle(self) -> None:
        with self._lock:
            wait = self.min_interval - (time.monotonic() - self._last_request_at)
            if wait > 0:
                time.sleep(wait)
            self._last_request_at = time.monotonic()

    def _read_quota(self, response: requests.Response) -> None:
        for key, header in (
            ("used", "X-API-Quota-Used"),
            ("left", "X-API-Quota-Left"),
            ("request", "X-API-Quota-Request"),
        ):
            raw = response.headers.get(header)
            try:
                self.last_quota[key] = float(raw) if raw is not None else None
            except ValueError:
                self.last_quota[key] = None

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None, allow_404: bool = False):
        if not self.is_configured():
            raise ExternalServiceError("Spoonacular API key is not configured", code="SPOONACULAR_NOT_CONFIGURED")

        query = {k: v for k, v in (params or {}).items() if v is not None}
        query["apiKey"] = self.api_key
        url = f"{self.base_url}{path}"

        self._throttle()
        started = time.monotonic()
        try:
            response = self.session.get(url, params=query, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning("spoonacular_request_failed path=%s error=%s", path, exc)
            raise ExternalServiceError(f"Spoonacular request failed: {exc}") from exc

        self._read_quota(response)
        logger.info(
            "spoonacular_call path=%s status=%s elapsed=%.3fs quota_left=%s",
            path,
            response.status_code,
            time.monotonic() - started,
            self.last_quota["left"],
        )

        if allow_404 and response.status_code == 404:
            return None
        if response.status_code == 402:
            raise ExternalServiceError(
                "Spoonacular daily quota exhausted", status_code=402, code="SPOONACULAR_QUOTA"
            )
        if response.status_code >= 400:
            raise ExternalServiceError(
                f"Spoonacular returned HTTP {response.status_code}",
                status_code=response.status_code,
                details={"path": path},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ExternalServiceError("Spoonacular returned invalid JSON") from exc

    # ------------------ Endpoints ------------------
    def complex_search(self, query: Optional[str] = None, filters: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """GET /recipes/complexSearch with full recipe information."""
        filters = dict(filters or {})
        params = {
            "query": query or None,
            "addRecipeInformation": "true",
            "fillIngredients": "true",
            "number": filters.pop("number", self.DEFAULT_NUMBER),
            "offset": filters.pop("offset", 0),
        }
        for key, value in filters.items():
            params[key] = _join(value)
        return self._get("/recipes/complexSearch", params) or {"results": [], "totalResults": 0}

    def get_recipe_information(self, recipe_id: int) -> Optional[Dict[str, Any]]:
        """GET /recipes/{id}/information; None when Spoonacular does not know the id."""
        return self._get(
            f"/recipes/{int(recipe_id)}/information",
            {"includeNutrition": "true"},
            allow_404=True,
        )

    def find_by_ingredients(self, ingredients: Iterable[str], number: int = DEFAULT_NUMBER) -> List[Dict[str, Any]]:
        params = {
            "ingredients": ",".join(ingredients),
            "number": number,
            "ranking": 1,
            "ignorePantry": "true",
        }
        return self._get("/recipes/findByIngredients", params) or []

    def random_recipes(self, tags: Optional[Iterable[str]] = None, number: int = DEFAULT_NUMBER) -> List[Dict[str, Any]]:
        params = {"number": number, "tags": _join(list(tags or [])) or None}
        data = self._get("/recipes/random", params) or {}
        return data.get("recipes", [])

    def nutrition_widget(self, recipe_id: int) -> Optional[Dict[str, Any]]:
        return self._get(f"/recipes/{int(recipe_id)}/nutritionWidget.json", allow_404=True)


def _join(value: Any) -> Any:
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return value


_client: Optional[SpoonacularClient] = None


def get_client() -> SpoonacularClient:
    """Process-wide client built from settings."""
    global _client
    if _client is None:
        _client = SpoonacularClient(
            api_key=settings.spoonacular_api_key,
            base_url=settings.spoonacular_base_url,
            timeout=settings.spoonacular_timeout_sec,
            min_interval=settings.spoonacular_min_interval_sec,
        )
    return _client


def close() -> None:
    global _client
    if _client is not None:
        _client.close()
        logger.info("Spoonacular session closed")
    _client = None
