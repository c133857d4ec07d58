# -*- coding: utf-8 -*-
"""Retrying Cloudflare API client."""

import logging
import typing as t

import requests
from pydantic import BaseModel, ValidationError

from .config import RunConfig
from .models import ApiEnvelope
from .pacing import BACKOFF_START, Pacer

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A Cloudflare call that failed for good (retries exhausted, or an unusable result)."""

    def __init__(self, message: str, context: str = "", attempts: int = 0):
        self.message = message
        self.context = context
        self.attempts = attempts
        if context and attempts:
            message = f"{context} failed after {attempts} attempt(s): {message}"
        elif context:
            message = f"{context}: {message}"
        super().__init__(message)


class _ApiFailure(Exception):
    """Response decoded but reported success=false."""


M = t.TypeVar("M", bound=BaseModel)


def parse(model: t.Type[M], payload: t.Any, context: str) -> M:
    """Validate one result item, reporting a bad shape as an ApiError."""
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        logger.error(f"[http] {context}: unexpected {model.__name__} payload: {str(payload)[:200]}")
        raise ApiError(f"malformed {model.__name__} ({e.error_count()} error(s))", context=context) from e


class CloudflareClient:
    """
    Issues one logical API call with exponential backoff.

    Failures are transport errors, undecodable bodies and `success: false`
    envelopes. The wait starts at BACKOFF_START seconds and doubles after
    every failed attempt; there is no wait after the last one.
    """

    def __init__(
        self,
        config: RunConfig,
        session: t.Optional[requests.Session] = None,
        pacer: t.Optional[Pacer] = None,
    ):
        self.config = config
        self.session = session or requests.Session()
        self.pacer = pacer or Pacer()

    def call(
        self,
        endpoint: str,
        method: str = "GET",
        body: t.Optional[t.Dict[str, t.Any]] = None,
        params: t.Optional[t.Dict[str, t.Any]] = None,
        max_attempts: t.Optional[int] = None,
        context: str = "",
    ) -> t.Dict[str, t.Any]:
        """Return the decoded response of `method endpoint`, raising ApiError once retries run out."""
        max_attempts = max_attempts or self.config.max_retries
        context = context or f"{method.upper()} {endpoint}"
        url = self._url(endpoint)
        attempt = 1
        delay = BACKOFF_START
        while attempt <= max_attempts:
            try:
                logger.debug(f"[http] {method.upper()} {url} (attempt {attempt}/{max_attempts})")
                return self._once(method, url, body, params)
            except (requests.RequestException, ValueError, _ApiFailure) as e:
                reason = self._reason(e)
                if attempt >= max_attempts:
                    logger.error(f"[http] {context}: giving up after {attempt} attempts: {reason}")
                    raise ApiError(reason, context=context, attempts=attempt) from e
                logger.warning(f"[http] {context}: {reason}; retrying in {delay:.2f}s (attempt {attempt}/{max_attempts})")
                self.pacer.sleep(delay)
                delay *= 2
                attempt += 1
        # max_attempts < 1 never reaches the loop body
        raise ApiError("no attempts made", context=context, attempts=0)

    def _once(self, method, url, body, params) -> t.Dict[str, t.Any]:
        resp = self.session.request(
            method.upper(),
            url,
            headers=self.config.headers,
            json=body,
            params=params,
            timeout=self.config.timeout,
        )
        data = resp.json()
        if not isinstance(data, dict):
            raise ValueError(f"unexpected response body: {str(data)[:200]}")
        envelope = ApiEnvelope.model_validate(data)
        if not envelope.success:
            raise _ApiFailure(envelope.first_error())
        return data

    def _url(self, endpoint: str) -> str:
        return f"{self.config.base_url}/{endpoint.lstrip('/')}"

    @staticmethod
    def _reason(error: Exception) -> str:
        if isinstance(error, ValidationError):
            return f"malformed response envelope ({error.error_count()} error(s))"
        if isinstance(error, _ApiFailure):
            return str(error)
        return repr(error)
