"""HTTP request executor."""

from __future__ import annotations

import json
import time
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable

import httpx

from nodeweave.context.manager import ContextManager
from nodeweave.core.config import EngineSettings
from nodeweave.core.context import ExecutionContext, scope_of
from nodeweave.core.nodes import AuthConfig, HttpRequestNode, RetryConfig
from nodeweave.core.types import NodeExecutionResult
from nodeweave.errors.exceptions import (
    HTTPRequestError,
    NodeValidationError,
    RetryableStatusError,
)
from nodeweave.executors.base import NodeExecutor
from nodeweave.logging import get_logger
from nodeweave.resilience.retry import RetryPolicy, RetryStrategy

SUPPORTED_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
BODY_METHODS = ("POST", "PUT", "PATCH")
RESPONSE_TYPES = ("json", "text", "buffer")


class HttpRequestExecutor(NodeExecutor):
    """Executes ``http`` nodes.

    Only 5xx responses are retried, following the node's retry config.
    Network errors fail immediately.

    Args:
        client: Shared client to send requests with. When omitted, a
            client is opened per call.
    """

    node_class = HttpRequestNode

    def __init__(
        self,
        context_manager: ContextManager | None = None,
        settings: EngineSettings | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        super().__init__(context_manager, settings)
        self._client = client

    @asynccontextmanager
    async def _client_scope(self) -> AsyncIterator[httpx.AsyncClient]:
        if self._client is not None:
            yield self._client
            return
        async with httpx.AsyncClient() as client:
            yield client

    def _substitute_body(self, body: Any, substitute: Callable[[str], str]) -> Any:
        if isinstance(body, str):
            return substitute(body)
        if isinstance(body, dict):
            return {k: self._substitute_body(v, substitute) for k, v in body.items()}
        if isinstance(body, list):
            return [self._substitute_body(v, substitute) for v in body]
        return body

    def _prepare_body(self, body: Any, substitute: Callable[[str], str]) -> Any:
        if not isinstance(body, str):
            return self._substitute_body(body, substitute)

        stripped = body.strip()
        if stripped.startswith(("{", "[")):
            try:
                return self._substitute_body(json.loads(stripped), substitute)
            except ValueError:
                pass

        # Templates such as {"count": {{n}}} only become JSON after substitution
        rendered = substitute(body)
        if rendered.strip().startswith(("{", "[")):
            try:
                return json.loads(rendered)
            except ValueError:
                return rendered
        return rendered

    def _apply_auth(
        self,
        auth: AuthConfig | None,
        headers: dict[str, str],
        substitute: Callable[[str], str],
    ) -> httpx.Auth | None:
        if auth is None or auth.type in ("", "none"):
            return None

        config = {k: substitute(v) for k, v in auth.config.items()}
        if auth.type == "basic":
            return httpx.BasicAuth(config.get("username", ""), config.get("password", ""))
        if auth.type == "bearer":
            headers["Authorization"] = f"Bearer {config.get('token', '')}"
            return None
        if auth.type == "api-key":
            headers[config.get("headerName") or "X-API-Key"] = config.get("apiKey", "")
            return None
        raise NodeValidationError(f"Unsupported auth type: {auth.type}")

    @staticmethod
    def _parse_response(response: httpx.Response, response_type: str) -> Any:
        if response_type == "buffer":
            return response.content
        if response_type == "text":
            return response.text
        try:
            return response.json()
        except ValueError:
            return response.text

    async def _execute(
        self, node: HttpRequestNode, context: ExecutionContext
    ) -> NodeExecutionResult:
        scope = scope_of(context)

        def substitute(text: str) -> str:
            return self.context_manager.substitute(text, scope)

        method = node.method.upper()
        if method not in SUPPORTED_METHODS:
            raise NodeValidationError(f"Unsupported HTTP method: {node.method}", node_id=node.id)
        if node.response_type not in RESPONSE_TYPES:
            raise NodeValidationError(
                f"Unsupported response type: {node.response_type}", node_id=node.id
            )
        url = substitute(node.url).strip()
        if not url:
            raise NodeValidationError("URL is required", node_id=node.id)

        headers = {name: substitute(value) for name, value in node.headers.items()}
        auth = self._apply_auth(node.auth, headers, substitute)

        request_kwargs: dict[str, Any] = {}
        if method in BODY_METHODS and node.body is not None:
            body = self._prepare_body(node.body, substitute)
            if isinstance(body, (dict, list)):
                request_kwargs["json"] = body
            else:
                request_kwargs["content"] = body

        retry = node.retry_config or RetryConfig()
        logger = get_logger()
        policy = RetryPolicy(
            max_retries=retry.max_retries,
            strategy=RetryStrategy.EXPONENTIAL,
            base_delay=retry.retry_delay_ms / 1000,
            max_delay=float("inf"),
            backoff_multiplier=retry.backoff_multiplier,
            jitter=False,
            on_retry=lambda error, n, delay: logger.warning(
                f"Retrying {method} {url}", retry=n, delay_s=round(delay, 3), error=str(error)
            ),
        )
        timeout = (node.timeout_ms or self.settings.http_timeout_ms) / 1000
        attempts = 0

        async def send(client: httpx.AsyncClient) -> httpx.Response:
            nonlocal attempts
            attempts += 1
            response = await client.request(
                method,
                url,
                headers=headers,
                auth=auth,
                timeout=timeout,
                follow_redirects=True,
                **request_kwargs,
            )
            logger.http_attempt(method, url, attempts, response.status_code)
            if response.status_code >= 500:
                raise RetryableStatusError(response, response.status_code)
            return response

        started = time.monotonic()
        try:
            async with self._client_scope() as client:
                response = await policy.execute(send, client)
        except RetryableStatusError as e:
            response = e.response
        except httpx.HTTPError as e:
            raise HTTPRequestError(
                f"HTTP request failed: {str(e) or type(e).__name__}"
            ) from e
        elapsed_ms = int((time.monotonic() - started) * 1000)

        data = self._parse_response(response, node.response_type)
        output = {
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "headers": dict(response.headers),
            "data": data,
            "attempts": attempts,
            "executionTimeMs": elapsed_ms,
        }
        variables = {
            "status": response.status_code,
            "statusText": response.reason_phrase,
            "data": data,
            "headers": output["headers"],
        }

        if 200 <= response.status_code < 300:
            return self.success(node, output=output, variables=variables)
        return self.failure(
            node,
            f"HTTP {response.status_code}: {response.reason_phrase}",
            output=output,
            variables=variables,
        )
