# -*- coding: utf-8 -*-
"""
Pages deployment cleanup.

Deletes every deployment (production + preview) EXCEPT the live production one.
Deployments are gathered a few pages at a time, deleted one by one, and the
sweep repeats until only the protected deployment (or nothing) is left.
"""

import logging
import typing as t
from dataclasses import dataclass

from .client import ApiError, CloudflareClient, parse
from .models import Deployment
from .pacing import DELETE_DELAY, PAGE_DELAY, SWEEP_DELAY, Pacer
from .projects import fetch_project

logger = logging.getLogger(__name__)


@dataclass
class BatchResult:
    deleted: int = 0
    skipped: int = 0
    failed: int = 0


@dataclass
class CleanupSummary:
    production_id: t.Optional[str] = None
    deleted: int = 0
    skipped: int = 0
    failed: int = 0
    sweeps: int = 0

    def add(self, result: BatchResult) -> None:
        self.deleted += result.deleted
        self.skipped += result.skipped
        self.failed += result.failed


class DeploymentPager:
    """Reads deployment listings for the configured project."""

    def __init__(self, client: CloudflareClient, pacer: t.Optional[Pacer] = None):
        self.client = client
        self.config = client.config
        self.pacer = pacer or client.pacer

    def fetch_production_id(self) -> t.Optional[str]:
        """The live production deployment id, or None when the project has none."""
        production_id = fetch_project(self.client).production_id
        if production_id:
            logger.info(f"[keep] Keeping PRODUCTION deployment id={production_id}")
        else:
            logger.warning("[keep] Project has no production deployment; nothing will be protected.")
        return production_id

    def next_batch(self, per_page: t.Optional[int] = None, pages_per_batch: t.Optional[int] = None) -> t.List[str]:
        """
        Collect deployment ids from pages 1..pages_per_batch, in API order.

        Stops early on an empty page or once per_page * pages_per_batch ids
        are held. Listing failures propagate.
        """
        per_page = per_page or self.config.per_page
        pages_per_batch = pages_per_batch or self.config.batch_pages
        cap = per_page * pages_per_batch
        ids: t.List[str] = []
        page = 1
        while page <= pages_per_batch and len(ids) < cap:
            if page > 1:
                self.pacer.sleep(PAGE_DELAY)
            data = self.client.call(
                f"{self.config.project_path}/deployments",
                params={"per_page": per_page, "page": page},
                context=f"list deployments page {page}",
            )
            results = data.get("result") or []
            if not results:
                break
            for item in results:
                ids.append(parse(Deployment, item, f"list deployments page {page}").id)
            logger.debug(f"[fetch] Page {page}: {len(results)} deployments (batch total {len(ids)})")
            page += 1
        return ids[:cap]


class BatchDeleter:
    """Deletes a batch of deployments, never the production one."""

    def __init__(self, client: CloudflareClient, pacer: t.Optional[Pacer] = None, force: t.Optional[bool] = None):
        self.client = client
        self.config = client.config
        self.pacer = pacer or client.pacer
        self.force = self.config.delete_aliased if force is None else force

    def delete_deployment(self, deployment_id: str) -> None:
        params = {"force": "true"} if self.force else None
        self.client.call(
            f"{self.config.project_path}/deployments/{deployment_id}",
            method="DELETE",
            params=params,
            context=f"delete deployment {deployment_id}",
        )

    def delete_batch(self, ids: t.Sequence[str], production_id: t.Optional[str]) -> BatchResult:
        result = BatchResult()
        for deployment_id in ids:
            if production_id and deployment_id == production_id:
                logger.info(f"[delete] SKIP id={deployment_id} (production)")
                result.skipped += 1
                continue
            try:
                self.delete_deployment(deployment_id)
            except ApiError as e:
                logger.warning(f"[delete] FAIL id={deployment_id}: {e}")
                result.failed += 1
            else:
                logger.info(f"[delete] OK   id={deployment_id}")
                result.deleted += 1
            self.pacer.sleep(DELETE_DELAY)
        return result


def cleanup_deployments(client: CloudflareClient) -> CleanupSummary:
    """
    Repeatedly gather and delete batches until only the production deployment
    remains. Returns the run totals.
    """
    pager = DeploymentPager(client)
    deleter = BatchDeleter(client)
    summary = CleanupSummary(production_id=pager.fetch_production_id())
    previous: t.Optional[t.List[str]] = None

    while True:
        batch = pager.next_batch()
        summary.sweeps += 1
        logger.info(f"[loop] Sweep #{summary.sweeps}: {len(batch)} deployments in batch")
        if not batch:
            logger.info("[loop] No deployments left. Exiting cleanup loop.")
            break
        if len(batch) <= 1 and summary.production_id:
            logger.info("[loop] Only the production deployment remains. Exiting cleanup loop.")
            break

        result = deleter.delete_batch(batch, summary.production_id)
        summary.add(result)
        logger.info(f"[loop] Sweep #{summary.sweeps}: deleted={result.deleted} skipped={result.skipped} failed={result.failed}")

        # Same batch and no progress: what is left cannot be deleted this run.
        if result.deleted == 0 and batch == previous:
            logger.warning("[loop] No eligible deletions remain (same undeletable deployments persist). Exiting cleanup loop.")
            break
        previous = batch
        client.pacer.sleep(SWEEP_DELAY)

    return summary
