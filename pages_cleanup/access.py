# -*- coding: utf-8 -*-
"""
Cloudflare Access cleanup for a Pages project.

Applications are matched permissively: an app is attached to the project when
its domain contains `{subdomain}.pages.dev` or its name contains the project
name. Unrelated apps whose name embeds the project name will match too.
"""

import logging
import typing as t

from .client import ApiError, CloudflareClient, parse
from .models import AccessApplication, AccessPolicy, PagesProject, PolicyUpdate
from .projects import fetch_project

logger = logging.getLogger(__name__)


class AccessPolicyResolver:
    def __init__(self, client: CloudflareClient):
        self.client = client
        self.config = client.config

    def _apps_endpoint(self) -> str:
        return f"{self.config.account_path}/access/apps"

    def list_applications(self) -> t.List[AccessApplication]:
        data = self.client.call(self._apps_endpoint(), context="list Access applications")
        return [parse(AccessApplication, item, "list Access applications") for item in data.get("result") or []]

    def find_applications_for_project(self, project: PagesProject) -> t.List[AccessApplication]:
        """Access apps whose domain or name points at the project, in API order."""
        apps = self.list_applications()
        if not apps:
            logger.info("[access] No Access applications in account.")
            return []
        host = project.pages_host
        name = project.name or self.config.project_name
        matched = [
            app for app in apps
            if (host and host in (app.domain or "")) or (name and name in (app.name or ""))
        ]
        logger.info(f"[access] {len(matched)} of {len(apps)} Access applications match project {name}")
        for app in matched:
            logger.info(f"[access]   {app.name} ({app.domain}) id={app.id}")
        return matched

    def list_policies(self, app_id: str) -> t.List[AccessPolicy]:
        try:
            data = self.client.call(
                f"{self._apps_endpoint()}/{app_id}/policies",
                context=f"list policies of app {app_id}",
            )
            return [parse(AccessPolicy, item, f"list policies of app {app_id}") for item in data.get("result") or []]
        except ApiError as e:
            logger.warning(f"[access] Could not list policies for app {app_id}: {e}")
            return []

    def disable_policy(self, app_id: str, policy: AccessPolicy) -> bool:
        update = PolicyUpdate.disabling(policy)
        try:
            self.client.call(
                f"{self._apps_endpoint()}/{app_id}/policies/{policy.id}",
                method="PUT",
                body=update.body(),
                context=f"disable policy {policy.id}",
            )
        except ApiError as e:
            logger.warning(f"[access] FAIL disable policy {policy.name} ({policy.id}): {e}")
            return False
        logger.info(f"[access] Disabled policy {policy.name} ({policy.id})")
        return True

    def delete_policy(self, app_id: str, policy: AccessPolicy) -> bool:
        try:
            self.client.call(
                f"{self._apps_endpoint()}/{app_id}/policies/{policy.id}",
                method="DELETE",
                context=f"delete policy {policy.id}",
            )
        except ApiError as e:
            logger.warning(f"[access] FAIL delete policy {policy.name} ({policy.id}): {e}")
            return False
        logger.info(f"[access] Deleted policy {policy.name} ({policy.id})")
        return True

    def delete_application(self, app_id: str) -> bool:
        try:
            self.client.call(
                f"{self._apps_endpoint()}/{app_id}",
                method="DELETE",
                context=f"delete Access application {app_id}",
            )
        except ApiError as e:
            logger.warning(f"[access] FAIL delete application {app_id}: {e}")
            return False
        logger.info(f"[access] Deleted Access application {app_id}")
        return True


def disable_access(client: CloudflareClient, project: t.Optional[PagesProject] = None) -> bool:
    """Disable every enabled policy on the project's Access apps. True when anything changed."""
    resolver = AccessPolicyResolver(client)
    project = project or fetch_project(client)
    apps = resolver.find_applications_for_project(project)
    if not apps:
        return False
    changed = False
    for app in apps:
        for policy in resolver.list_policies(app.id):
            if policy.enabled is not True:
                logger.debug(f"[access] Policy {policy.name} ({policy.id}) already disabled")
                continue
            if resolver.disable_policy(app.id, policy):
                changed = True
    return changed


def remove_access(client: CloudflareClient, project: t.Optional[PagesProject] = None) -> bool:
    """Delete all policies, then the app itself, for each matching Access app."""
    resolver = AccessPolicyResolver(client)
    project = project or fetch_project(client)
    apps = resolver.find_applications_for_project(project)
    if not apps:
        return False
    changed = False
    for app in apps:
        for policy in resolver.list_policies(app.id):
            if resolver.delete_policy(app.id, policy):
                changed = True
        if resolver.delete_application(app.id):
            changed = True
    return changed
