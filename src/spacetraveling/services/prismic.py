"""Thin client for the Prismic REST API used by the page controllers."""

from __future__ import annotations

import logging
import time
from typing import Any, Callable, Dict, Iterator, List, Sequence

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from spacetraveling.config import BlogConfig

__all__ = [
    "ContentClientError",
    "DocumentNotFoundError",
    "MalformedResponseError",
    "PrismicClient",
    "at",
]

logger = logging.getLogger(__name__)

#: Seconds a master ref is reused before the API root is read again.
MASTER_REF_TTL_SECONDS = 5.0

DEFAULT_HEADERS = {
    "User-Agent": "spacetraveling/0.1 (+https://spacetraveling.dev)",
    "Accept": "application/json",
}


class ContentClientError(RuntimeError):
    """Base error raised for unusable CMS responses."""


class MalformedResponseError(ContentClientError):
    """The CMS answered with something other than the expected JSON shape."""


class DocumentNotFoundError(ContentClientError):
    """No document matches the requested uid."""

    def __init__(self, document_type: str, uid: str) -> None:
        super().__init__(f"No {document_type} document with uid {uid!r}")
        self.document_type = document_type
        self.uid = uid


def at(path: str, value: str) -> str:
    """Return an ``at`` predicate, e.g. ``[at(document.type, "post")]``."""

    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'[at({path}, "{escaped}")]'


class PrismicClient:
    """Query a Prismic repository configured by :class:`BlogConfig`.

    A single instance is created explicitly and passed to every controller;
    nothing is kept in module state except the HTTP session it owns.
    """

    def __init__(
        self,
        config: BlogConfig,
        session: requests.Session | None = None,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._config = config
        self._clock = clock
        self._session = session or requests.Session()
        self._session.headers.update(DEFAULT_HEADERS)
        if config.max_retries:
            retry = Retry(
                total=config.max_retries,
                connect=config.max_retries,
                read=config.max_retries,
                backoff_factor=1,
                status_forcelist=[429, 500, 502, 503, 504],
                allowed_methods={"GET"},
            )
            self._session.mount("https://", HTTPAdapter(max_retries=retry))
            self._session.mount("http://", HTTPAdapter(max_retries=retry))
        self._master_ref: str | None = None
        self._master_ref_fetched_at = 0.0

    @property
    def config(self) -> BlogConfig:
        return self._config

    def _auth_params(self) -> Dict[str, str]:
        if self._config.access_token:
            return {"access_token": self._config.access_token}
        return {}

    def _get_json(self, url: str, params: Dict[str, Any] | None = None) -> Any:
        response = self._session.get(url, params=params, timeout=self._config.request_timeout)
        response.raise_for_status()
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedResponseError(f"Response from {url} is not valid JSON") from exc

    @staticmethod
    def _check_page(payload: Any, url: str) -> Dict[str, Any]:
        if not isinstance(payload, dict) or not isinstance(payload.get("results"), list):
            raise MalformedResponseError(f"Response from {url} has no 'results' list")
        return payload

    def master_ref(self) -> str:
        """Return the ref of the published master release.

        A ref pins one release snapshot, so it is only reused for
        :data:`MASTER_REF_TTL_SECONDS`; later queries see newly published content.
        """

        now = self._clock()
        if self._master_ref is not None and now - self._master_ref_fetched_at < MASTER_REF_TTL_SECONDS:
            return self._master_ref

        payload = self._get_json(self._config.api_root, params=self._auth_params())
        refs = payload.get("refs") if isinstance(payload, dict) else None
        if not isinstance(refs, list):
            raise MalformedResponseError(f"Response from {self._config.api_root} has no 'refs' list")

        for ref in refs:
            if isinstance(ref, dict) and ref.get("isMasterRef"):
                self._master_ref = str(ref["ref"])
                self._master_ref_fetched_at = now
                return self._master_ref

        raise MalformedResponseError("The repository does not expose a master ref")

    def query(
        self,
        predicates: Sequence[str],
        *,
        fetch: Sequence[str] | None = None,
        page_size: int | None = None,
        page: int = 1,
    ) -> Dict[str, Any]:
        """Run a document search and return the raw page result."""

        params: Dict[str, Any] = {
            "ref": self.master_ref(),
            "q": "[" + "".join(predicates) + "]",
            "page": page,
            **self._auth_params(),
        }
        if fetch:
            params["fetch"] = ",".join(fetch)
        if page_size is not None:
            params["pageSize"] = page_size

        logger.info("Querying %s (page %s)", self._config.search_url, page)
        payload = self._get_json(self._config.search_url, params=params)
        return self._check_page(payload, self._config.search_url)

    def fetch_page(self, url: str) -> Dict[str, Any]:
        """Follow an opaque ``next_page`` URL returned by a previous query."""

        logger.info("Fetching next page %s", url)
        payload = self._get_json(url)
        return self._check_page(payload, url)

    def get_by_uid(self, document_type: str, uid: str) -> Dict[str, Any]:
        """Return the document of ``document_type`` whose uid is ``uid``."""

        page = self.query([at(f"my.{document_type}.uid", uid)], page_size=1)
        results: List[Dict[str, Any]] = page["results"]
        if not results:
            raise DocumentNotFoundError(document_type, uid)
        return results[0]

    def iter_documents(self, predicates: Sequence[str], *, page_size: int = 100) -> Iterator[Dict[str, Any]]:
        """Yield every document matching ``predicates``, walking all result pages."""

        page = self.query(predicates, page_size=page_size)
        while True:
            yield from page["results"]
            next_page = page.get("next_page")
            if not next_page:
                return
            page = self.fetch_page(next_page)
