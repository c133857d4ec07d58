# -*- coding: utf-8 -*-
"""
Run configuration.

Environment variables (safe for public repos; set these in your CI/CD or shell):
  CF_API_TOKEN       - Cloudflare API Token with Pages read/delete and Access edit permissions
  CF_ACCOUNT_ID      - Cloudflare Account ID
  CF_PAGES_PROJECT   - Cloudflare Pages project name
"""

import logging
import os
import typing as t
from dataclasses import dataclass

logger = logging.getLogger(__name__)

API_BASE = "https://api.cloudflare.com/client/v4"

ACTION_DEPLOYMENTS = "deployments"
ACTION_DISABLE_ACCESS = "disable-access"
ACTION_REMOVE_ACCESS = "remove-access"
ACTIONS = (ACTION_DEPLOYMENTS, ACTION_DISABLE_ACCESS, ACTION_REMOVE_ACCESS)

# -------------------- Defaults (annotated) --------------------
PER_PAGE      = 25     # deployments requested per listing page
BATCH_PAGES   = 4      # sequential pages gathered before a delete pass
MAX_RETRIES   = 5      # attempts per API call before giving up
TIMEOUT_SEC   = 30     # HTTP request timeout

PLACEHOLDER_PREFIX = "YOUR-"


@dataclass(frozen=True)
class RunConfig:
    """Immutable settings for one run, handed to every component."""

    api_token: str
    account_id: str
    project_name: str
    action: str = ACTION_DEPLOYMENTS
    per_page: int = PER_PAGE
    batch_pages: int = BATCH_PAGES
    max_retries: int = MAX_RETRIES
    delete_aliased: bool = False
    timeout: float = TIMEOUT_SEC
    base_url: str = API_BASE

    @classmethod
    def from_env(cls, environ: t.Optional[t.Mapping[str, str]] = None, **overrides: t.Any) -> "RunConfig":
        """Build a config from CF_* variables; explicit non-None overrides win."""
        env = os.environ if environ is None else environ
        values: t.Dict[str, t.Any] = {
            "api_token": env.get("CF_API_TOKEN", "YOUR-API-TOKEN"),
            "account_id": env.get("CF_ACCOUNT_ID", "YOUR-ACCOUNT-ID"),
            "project_name": env.get("CF_PAGES_PROJECT", "YOUR-PROJECT"),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

    @property
    def cap(self) -> int:
        """Most deployment ids gathered into a single batch."""
        return self.per_page * self.batch_pages

    @property
    def headers(self) -> t.Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def account_path(self) -> str:
        return f"accounts/{self.account_id}"

    @property
    def project_path(self) -> str:
        return f"{self.account_path}/pages/projects/{self.project_name}"

    def problems(self) -> t.List[str]:
        """Human-readable configuration problems; empty when usable."""
        found = []
        if not self.api_token or self.api_token.startswith(PLACEHOLDER_PREFIX):
            found.append("CF_API_TOKEN is not set (or using placeholder).")
        if not self.account_id or self.account_id.startswith(PLACEHOLDER_PREFIX):
            found.append("CF_ACCOUNT_ID is not set (or using placeholder).")
        if not self.project_name or self.project_name.startswith(PLACEHOLDER_PREFIX):
            found.append("CF_PAGES_PROJECT is not set (or using placeholder).")
        if self.action not in ACTIONS:
            found.append(f"Unknown action {self.action!r}; expected one of {', '.join(ACTIONS)}.")
        for name in ("per_page", "batch_pages", "max_retries"):
            if getattr(self, name) < 1:
                found.append(f"{name} must be at least 1 (got {getattr(self, name)}).")
        if self.timeout <= 0:
            found.append(f"timeout must be positive (got {self.timeout}).")
        return found


def check_config(config: RunConfig) -> None:
    """Validate configuration early with actionable messages."""
    problems = config.problems()
    if problems:
        for p in problems:
            logger.error(f"[config] {p}")
        raise SystemExit(1)
