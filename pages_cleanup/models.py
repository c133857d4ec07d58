"""Typed views of the Cloudflare payloads this tool reads and writes."""

import typing as t

from pydantic import BaseModel, ConfigDict, Field

PAGES_DEV_SUFFIX = ".pages.dev"


class ApiEnvelope(BaseModel):
    """Common Cloudflare v4 response wrapper."""
    model_config = ConfigDict(extra="allow")

    success: bool = False
    errors: t.Optional[t.List[t.Any]] = None
    result: t.Any = None

    def first_error(self) -> str:
        if not self.errors:
            return "Unknown error"
        first = self.errors[0]
        if isinstance(first, dict):
            return str(first.get("message") or first)
        return str(first)


class CanonicalDeployment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: t.Optional[str] = None


class PagesProject(BaseModel):
    """The parts of a Pages project that drive cleanup."""
    model_config = ConfigDict(extra="ignore")

    name: t.Optional[str] = None
    subdomain: t.Optional[str] = None
    canonical_deployment: t.Optional[CanonicalDeployment] = None

    @property
    def production_id(self) -> t.Optional[str]:
        if self.canonical_deployment is None:
            return None
        return self.canonical_deployment.id or None

    @property
    def pages_host(self) -> t.Optional[str]:
        """`{subdomain}.pages.dev`, tolerating a subdomain that already carries the suffix."""
        if not self.subdomain:
            return None
        if self.subdomain.endswith(PAGES_DEV_SUFFIX):
            return self.subdomain
        return f"{self.subdomain}{PAGES_DEV_SUFFIX}"


class Deployment(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str


class AccessApplication(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    name: t.Optional[str] = None
    domain: t.Optional[str] = None


class AccessPolicy(BaseModel):
    """An Access policy; unknown fields are kept as-is."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: t.Optional[str] = None
    enabled: t.Optional[bool] = None
    decision: t.Optional[str] = None
    include: t.List[t.Dict[str, t.Any]] = Field(default_factory=list)
    exclude: t.Optional[t.List[t.Dict[str, t.Any]]] = None
    require: t.Optional[t.List[t.Dict[str, t.Any]]] = None
    precedence: t.Optional[int] = None


class PolicyUpdate(BaseModel):
    """PUT body for an Access policy."""

    name: t.Optional[str] = None
    decision: t.Optional[str] = None
    include: t.List[t.Dict[str, t.Any]] = Field(default_factory=list)
    exclude: t.Optional[t.List[t.Dict[str, t.Any]]] = None
    require: t.Optional[t.List[t.Dict[str, t.Any]]] = None
    precedence: t.Optional[int] = None
    enabled: bool

    @classmethod
    def disabling(cls, policy: AccessPolicy) -> "PolicyUpdate":
        return cls(
            name=policy.name,
            decision=policy.decision,
            include=policy.include,
            exclude=policy.exclude,
            require=policy.require,
            precedence=policy.precedence,
            enabled=False,
        )

    def body(self) -> t.Dict[str, t.Any]:
        """JSON body; optional rule lists and precedence only when present."""
        return self.model_dump(exclude_none=True)
