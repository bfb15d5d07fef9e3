"""Pydantic configuration models with validation."""

from __future__ import annotations

from typing import Any, Literal, Optional

from pydantic import (
    AliasChoices,
    AliasPath,
    BaseModel,
    Field,
    field_validator,
    model_validator,
)
from pydantic_settings import BaseSettings, SettingsConfigDict

from modstream.infrastructure.common.http import BROWSER_USER_AGENT

Environment = Literal["dev", "test", "prod"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR"]
LogFormat = Literal["json", "console"]


class MoviesModConfig(BaseModel):
    """Site-specific knobs for the resolution chain.

    Selector chains and host lists live here so that markup or mirror
    drift only needs a YAML change (section ``moviesmod``).
    """

    # Domain source
    domain_source_url: str = Field(
        default="https://raw.githubusercontent.com/phisher98/TVVVV/refs/heads/main/domains.json",
        description="Remote JSON document naming the current base domain.",
    )
    domain_source_key: str = Field(
        default="moviesmod",
        description="Field of the domain document holding the base domain.",
    )
    fallback_domain: str = Field(
        default="https://moviesmod.chat",
        description="Base domain used until the domain source answers.",
    )
    domain_ttl_seconds: float = Field(
        default=4 * 60 * 60,
        description="Staleness window of the cached base domain.",
    )

    # Search
    search_selectors: list[str] = Field(
        default=[
            ".latestPost",
            ".post-outer",
            "article.post",
            ".post",
            ".entry",
            ".result-item",
            ".search-item",
            ".blog-post",
        ],
        description="Result-card selectors, most site-specific first.",
    )
    fallback_link_selector: str = Field(
        default="main a, #content a, .content a, .container a",
        description="Anchors scanned when no result-card selector matches.",
    )
    content_path_patterns: list[str] = Field(
        default=["/download/", "/movie/", "/tv/"],
        description="Path fragments identifying content pages.",
    )
    min_valid_html_length: int = Field(
        default=1000,
        description="Minimum body length for an accepted search page.",
    )
    min_html_length: int = Field(
        default=100,
        description="Minimum body length for any parseable search page.",
    )
    no_results_marker: str = Field(
        default="No results found",
        description="Text marking an empty search page.",
    )

    # Matching / filtering
    title_match_threshold: float = Field(
        default=0.3,
        description="Similarity score a best match must exceed.",
    )
    max_failure_search_results: int = Field(
        default=5,
        description="Search results echoed back when no match is found.",
    )
    excluded_quality: str = Field(
        default="480p",
        description="Quality links naming this token are never resolved.",
    )

    # Host families
    aggregator_hosts: list[str] = Field(
        default=["links.modpro.blog", "posts.modpro.blog"],
    )
    episode_hosts: list[str] = Field(default=["episodes.modpro.blog"])
    legacy_redirect_hosts: list[str] = Field(default=["modrefer.in"])
    downstream_hosts: list[str] = Field(
        default=[
            "driveseed.org",
            "tech.unblockedgames.world",
            "tech.creativeexpressionsblog.com",
            "tech.examzculture.in",
            "tech.examdegree.site",
        ],
        description="Hosts an intermediate page may point at.",
    )
    gated_hosts: list[str] = Field(
        default=[
            "tech.unblockedgames.world",
            "tech.creativeexpressionsblog.com",
            "tech.examzculture.in",
        ],
        description="Hosts requiring the token challenge.",
    )
    landing_hosts: list[str] = Field(
        default=["driveseed.org"],
        description="Hosts serving the download-options landing page.",
    )
    landing_referer: str = Field(default="https://links.modpro.blog/")

    # Output
    provider_name: str = Field(default="moviesmod")
    provider_label: str = Field(default="MoviesMod")
    stream_referer: str = Field(default="https://driveseed.org/")
    stream_user_agent: str = Field(
        default=(
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
        ),
    )

    @field_validator("title_match_threshold")
    @classmethod
    def _validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("title_match_threshold must be within [0, 1]")
        return v

    @field_validator("domain_ttl_seconds")
    @classmethod
    def _validate_ttl(cls, v: float) -> float:
        if v < 0:
            raise ValueError("domain_ttl_seconds must be >= 0")
        return v


class AppConfig(BaseModel):
    """
    Canonical application configuration (validated, final).

    Note:
    - YAML is expected to be sectioned (http/logging/moviesmod).
    - Environment variables are handled by EnvOverrides(BaseSettings) to allow strict
      precedence control (defaults < YAML < ENV < CLI) in load.py.
    """

    # General
    app_name: str = Field(default="modstream", description="Application name.")
    environment: Environment = Field(
        default="dev",
        description="Runtime environment (affects defaults like log format).",
    )

    # HTTP (YAML section: http.*)
    http_timeout_seconds: float = Field(
        default=30.0,
        validation_alias=AliasChoices(
            "http_timeout_seconds",
            AliasPath("http", "timeout_seconds"),
        ),
        description="HTTP timeout in seconds for every hop.",
    )
    http_follow_redirects: bool = Field(
        default=True,
        validation_alias=AliasChoices(
            "http_follow_redirects",
            AliasPath("http", "follow_redirects"),
        ),
        description="Whether HTTP client follows redirects.",
    )
    http_user_agent: str = Field(
        default=BROWSER_USER_AGENT,
        validation_alias=AliasChoices(
            "http_user_agent",
            AliasPath("http", "user_agent"),
        ),
        description="User-Agent for outgoing HTTP requests.",
    )

    # Reachability validation
    validation_timeout_seconds: float = Field(
        default=10.0,
        validation_alias=AliasChoices(
            "validation_timeout_seconds",
            AliasPath("http", "validation_timeout_seconds"),
        ),
        description="Deadline for one reachability probe (seconds).",
    )

    # Logging (YAML section: logging.*)
    log_level: LogLevel = Field(
        default="INFO",
        validation_alias=AliasChoices(
            "log_level",
            AliasPath("logging", "level"),
        ),
        description="Log level.",
    )
    log_format: Optional[LogFormat] = Field(
        default=None,
        validation_alias=AliasChoices(
            "log_format",
            AliasPath("logging", "format"),
        ),
        description=(
            "Log renderer format (console/json). If unset, derived from environment."
        ),
    )

    # Site configuration (YAML section: moviesmod.*)
    moviesmod: MoviesModConfig = Field(default_factory=MoviesModConfig)

    @field_validator("http_timeout_seconds", "validation_timeout_seconds")
    @classmethod
    def _validate_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeouts must be > 0")
        return v

    @model_validator(mode="after")
    def _derive_defaults(self) -> "AppConfig":
        # Default log format: console in dev/test, json in prod.
        if self.log_format is None:
            self.log_format = "json" if self.environment == "prod" else "console"
        return self

    def to_sectioned_dict(self) -> dict[str, Any]:
        """
        Dump configuration in the sectioned shape used by config.yaml/docs.
        """
        return {
            "app_name": self.app_name,
            "environment": self.environment,
            "http": {
                "timeout_seconds": self.http_timeout_seconds,
                "follow_redirects": self.http_follow_redirects,
                "user_agent": self.http_user_agent,
                "validation_timeout_seconds": self.validation_timeout_seconds,
            },
            "logging": {"level": self.log_level, "format": self.log_format},
            "moviesmod": self.moviesmod.model_dump(),
        }


class EnvOverrides(BaseSettings):
    """
    Environment-variable overrides (all optional).

    load.py creates EnvOverrides() to read MODSTREAM_* variables,
    converts them to a dict of set values and merges it over YAML/defaults
    before validating AppConfig.

    Supported env var examples (flat, explicit):
    - MODSTREAM_HTTP_TIMEOUT_SECONDS
    - MODSTREAM_LOG_LEVEL
    - MODSTREAM_FALLBACK_DOMAIN
    """

    model_config = SettingsConfigDict(
        env_prefix="MODSTREAM_",
        extra="ignore",
        case_sensitive=False,
    )

    app_name: Optional[str] = None
    environment: Optional[Environment] = None

    http_timeout_seconds: Optional[float] = None
    http_follow_redirects: Optional[bool] = None
    http_user_agent: Optional[str] = None
    validation_timeout_seconds: Optional[float] = None

    log_level: Optional[LogLevel] = None
    log_format: Optional[LogFormat] = None

    fallback_domain: Optional[str] = None
    domain_source_url: Optional[str] = None
    domain_ttl_seconds: Optional[float] = None

    def to_update_dict(self) -> dict[str, Any]:
        """
        Return only values that were actually provided (non-None), for merging.
        """
        return self.model_dump(exclude_none=True)
