import copy

import pytest
import requests

from pages_cleanup.client import CloudflareClient
from pages_cleanup.config import API_BASE, RunConfig
from pages_cleanup.pacing import Pacer

ACCOUNT = "acct-123"
PROJECT = "site"


class FakeResponse:
    def __init__(self, payload=None, json_error=False, status_code=200):
        self.payload = payload
        self.json_error = json_error
        self.status_code = status_code

    def json(self):
        if self.json_error:
            raise ValueError("Expecting value: line 1 column 1 (char 0)")
        return self.payload


def ok(result=None):
    return {"success": True, "errors": [], "messages": [], "result": result}


def failure(message="Something went wrong", code=1000):
    return {"success": False, "errors": [{"code": code, "message": message}], "messages": [], "result": None}


class ScriptedSession:
    """Plays back a fixed list of outcomes; exceptions are raised, dicts returned as JSON."""

    def __init__(self, outcomes):
        self.outcomes = list(outcomes)
        self.calls = []

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        self.calls.append({"method": method, "url": url, "headers": headers, "json": json,
                           "params": params, "timeout": timeout})
        outcome = self.outcomes.pop(0) if len(self.outcomes) > 1 else self.outcomes[0]
        if isinstance(outcome, Exception):
            raise outcome
        if isinstance(outcome, FakeResponse):
            return outcome
        return FakeResponse(outcome)


class FakeCloudflare:
    """In-memory stand-in for the handful of v4 endpoints the tool uses."""

    def __init__(self, account=ACCOUNT, project=PROJECT):
        self.prefix = f"{API_BASE}/accounts/{account}/"
        self.project = project
        self.subdomain = project
        self.deployments = []
        self.production_id = None
        self.apps = []
        self.policies = {}
        self.fail_deletes = set()
        self.fail_policy_lists = set()
        self.fail_policy_updates = set()
        self.fail_policy_deletes = set()
        self.fail_app_deletes = set()
        self.calls = []

    def add_deployments(self, count, production_index=None):
        self.deployments = [f"dep-{i:03d}" for i in range(count)]
        if production_index is not None:
            self.production_id = self.deployments[production_index]

    def calls_for(self, method, fragment=""):
        return [c for c in self.calls if c["method"] == method and fragment in c["path"]]

    def mutations(self):
        return [c for c in self.calls if c["method"] != "GET"]

    def request(self, method, url, headers=None, json=None, params=None, timeout=None):
        assert url.startswith(self.prefix), url
        path = url[len(self.prefix):]
        self.calls.append({"method": method, "path": path, "params": params, "json": copy.deepcopy(json)})
        return FakeResponse(self._route(method, path.split("/"), params or {}, json))

    def _route(self, method, parts, params, body):
        if parts[:2] == ["pages", "projects"]:
            if parts[2] != self.project:
                return failure("Project not found. The specified project name does not match any of your existing projects.", 8000007)
            return self._pages(method, parts[3:], params)
        if parts[:2] == ["access", "apps"]:
            return self._access(method, parts[2:], body)
        raise AssertionError(f"unexpected endpoint {method} {'/'.join(parts)}")

    def _pages(self, method, rest, params):
        if not rest:
            canonical = {"id": self.production_id} if self.production_id else None
            return ok({"name": self.project, "subdomain": self.subdomain, "canonical_deployment": canonical})
        if rest == ["deployments"] and method == "GET":
            per_page, page = int(params["per_page"]), int(params["page"])
            start = (page - 1) * per_page
            return ok([{"id": d, "environment": "preview"} for d in self.deployments[start:start + per_page]])
        if len(rest) == 2 and method == "DELETE":
            dep_id = rest[1]
            if dep_id in self.fail_deletes or dep_id not in self.deployments:
                return failure("Cannot delete an aliased deployment without `?force=true`.", 8000035)
            self.deployments.remove(dep_id)
            return ok(None)
        raise AssertionError(f"unexpected pages call {method} {rest}")

    def _access(self, method, rest, body):
        if not rest:
            return ok(copy.deepcopy(self.apps))
        app_id = rest[0]
        if len(rest) == 1 and method == "DELETE":
            if app_id in self.fail_app_deletes:
                return failure("access.api.error.conflict", 12130)
            self.apps = [a for a in self.apps if a["id"] != app_id]
            return ok({"id": app_id})
        if rest[1:] == ["policies"]:
            if app_id in self.fail_policy_lists:
                return failure("access.api.error.not_found", 12130)
            return ok(copy.deepcopy(self.policies.get(app_id, [])))
        policy_id = rest[2]
        policies = self.policies.get(app_id, [])
        if method == "PUT":
            if policy_id in self.fail_policy_updates:
                return failure("access.api.error.conflict", 12130)
            for i, policy in enumerate(policies):
                if policy["id"] == policy_id:
                    policies[i] = dict(body, id=policy_id)
                    return ok(policies[i])
            return failure("policy not found", 12130)
        if method == "DELETE":
            if policy_id in self.fail_policy_deletes:
                return failure("access.api.error.conflict", 12130)
            self.policies[app_id] = [p for p in policies if p["id"] != policy_id]
            return ok({"id": policy_id})
        raise AssertionError(f"unexpected access call {method} {rest}")


@pytest.fixture
def config():
    return RunConfig(
        api_token="test-token",
        account_id=ACCOUNT,
        project_name=PROJECT,
        per_page=10,
        batch_pages=3,
        max_retries=5,
    )


@pytest.fixture
def delays():
    return []


@pytest.fixture
def pacer(delays):
    return Pacer(sleep=delays.append)


@pytest.fixture
def cloudflare():
    return FakeCloudflare()


@pytest.fixture
def client(config, cloudflare, pacer):
    return CloudflareClient(config, session=cloudflare, pacer=pacer)


@pytest.fixture
def transport_error():
    return requests.ConnectionError("connection reset by peer")
