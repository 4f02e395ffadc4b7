"""Configuration model and helpers for the spacetraveling blog."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Tuple

from pydantic import BaseModel, Field, HttpUrl, ValidationError

__all__ = ["BlogConfig", "DEFAULT_CONFIG_PATH", "ENV_PREFIX"]

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parents[2] / "data" / "blog.json"

#: Prefix of environment variables understood by :meth:`BlogConfig.from_env`.
ENV_PREFIX = "PRISMIC_"


class BlogConfig(BaseModel):
    """Settings shared by the content client, the page controllers and the web app."""

    api_endpoint: HttpUrl = Field(..., description="Prismic REST API endpoint, e.g. https://repo.cdn.prismic.io/api/v2")
    access_token: str | None = Field(default=None, description="Access token for private repositories")
    document_type: str = Field(default="publicationspace", description="Custom type holding blog posts")
    page_size: int = Field(default=1, ge=1, le=100, description="Number of posts per listing page")
    revalidate_seconds: int = Field(
        default=1800,
        ge=0,
        description="Maximum age of a generated post page before it is regenerated in the background",
    )
    words_per_minute: int = Field(default=200, ge=1, description="Reading speed used for reading time")
    locale: str = Field(default="pt-BR", description="Locale used to format publication dates")
    site_name: str = Field(default="spacetraveling", description="Suffix used in page titles")
    request_timeout: Tuple[float, float] = Field(
        default=(10, 60),
        description="Connect and read timeouts, in seconds, applied to every CMS request",
    )
    max_retries: int = Field(
        default=0,
        ge=0,
        description="Number of retries for idempotent CMS requests. Zero disables retrying.",
    )
    load_more_endpoint: str = Field(
        default="/api/posts/more",
        description="URL the listing page posts the pagination cursor to",
    )

    @property
    def api_root(self) -> str:
        """Return the API endpoint without a trailing slash."""

        return str(self.api_endpoint).rstrip("/")

    @property
    def search_url(self) -> str:
        return f"{self.api_root}/documents/search"

    @property
    def fetch_fields(self) -> list[str]:
        """Return the fields requested for listing pages."""

        return [f"{self.document_type}.{name}" for name in ("title", "subtitle", "author")]

    @classmethod
    def from_file(cls, path: Path | str | None = None) -> "BlogConfig":
        """Load configuration data from a JSON file."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        try:
            data = json.loads(config_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise FileNotFoundError(f"Configuration file not found: {config_path}") from exc
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON in configuration file: {config_path}") from exc

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Configuration file is invalid: {config_path}\n{exc}") from exc

    @classmethod
    def from_env(cls, *, base: "BlogConfig" | None = None) -> "BlogConfig":
        """Build a configuration from ``PRISMIC_*`` environment variables.

        Values found in the environment override those of ``base`` (or the
        configuration file when ``base`` is omitted and the file exists).
        ``PRISMIC_API_ENDPOINT`` is required when no base is available.
        """

        if base is None and DEFAULT_CONFIG_PATH.exists():
            base = cls.from_file()

        data = base.model_dump(mode="json") if base is not None else {}
        for field_name in cls.model_fields:
            value = os.environ.get(f"{ENV_PREFIX}{field_name.upper()}")
            if value is None or value == "":
                continue
            if field_name == "request_timeout":
                parts = [part.strip() for part in value.split(",") if part.strip()]
                # a single value applies to both connect and read
                data[field_name] = parts * 2 if len(parts) == 1 else parts
            else:
                data[field_name] = value

        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            raise ValueError(f"Environment configuration is invalid:\n{exc}") from exc

    def dump(self, path: Path | str | None = None) -> None:
        """Persist the configuration back to disk as JSON."""

        config_path = Path(path) if path else DEFAULT_CONFIG_PATH
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text(self.model_dump_json(indent=2), encoding="utf-8")
