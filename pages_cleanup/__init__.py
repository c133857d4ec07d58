"""
Cloudflare Pages cleanup tooling.

Bulk-deletes Pages deployments (keeping the live production one) and disables
or removes the Cloudflare Access applications guarding a Pages project.
"""

from .client import ApiError, CloudflareClient
from .config import RunConfig

__all__ = ["ApiError", "CloudflareClient", "RunConfig"]
__version__ = "0.3.0"
