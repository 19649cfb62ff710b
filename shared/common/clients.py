# shared/common/clients.py
"""
Portal Functions Client

HTTP client for invoking named portal functions.
Constructed explicitly and passed to whatever needs it.
"""

import json
import time
import httpx
import logging
from typing import Dict, Any
from django.conf import settings
from django.core.serializers.json import DjangoJSONEncoder

from .exceptions import RemoteCallError, MalformedPayloadError

logger = logging.getLogger(__name__)


# =============================================================================
# CIRCUIT BREAKER
# =============================================================================

class CircuitBreakerError(RemoteCallError):
    """Exception raised when circuit breaker is open"""
    code = 'CIRCUIT_OPEN'
    default_message = 'Circuit breaker is open'


class CircuitBreaker:
    """
    Circuit breaker implementation for handling service failures.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        success_threshold: int = 2,
        timeout: int = 30
    ):
        self.failure_threshold = failure_threshold
        self.success_threshold = success_threshold
        self.timeout = timeout
        self.failure_count = 0
        self.success_count = 0
        self.state = 'closed'  # closed, open, half_open
        self.last_failure_time = None

    def _should_try_reset(self) -> bool:
        if self.last_failure_time is None:
            return True
        return time.monotonic() - self.last_failure_time >= self.timeout

    def record_success(self):
        if self.state == 'half_open':
            self.success_count += 1
            if self.success_count >= self.success_threshold:
                self._reset()
        elif self.state == 'closed':
            self.failure_count = 0

    def record_failure(self):
        self.failure_count += 1
        self.last_failure_time = time.monotonic()
        if self.state == 'half_open' or self.failure_count >= self.failure_threshold:
            self.state = 'open'
            self.success_count = 0
            logger.warning(f"Circuit breaker opened after {self.failure_count} failures")

    def _reset(self):
        self.state = 'closed'
        self.failure_count = 0
        self.success_count = 0
        self.last_failure_time = None
        logger.info("Circuit breaker reset to closed state")

    def can_execute(self) -> bool:
        if self.state == 'closed':
            return True
        if self.state == 'open':
            if self._should_try_reset():
                self.state = 'half_open'
                return True
            return False
        return True  # half_open


# =============================================================================
# FUNCTIONS CLIENT
# =============================================================================

class FunctionsClient:
    """
    Invokes portal functions at ``{base_url}/functions/v1/<name>/``.

    Every function answers with the envelope
    ``{"success": bool, "data": ..., "error": ...}``. ``invoke`` returns the
    ``data`` member or raises ``RemoteCallError`` with the server's message.
    """

    def __init__(
        self,
        base_url: str = None,
        api_key: str = None,
        access_token: str = None,
        timeout: float = None,
        transport: httpx.AsyncBaseTransport = None,
        circuit_breaker: CircuitBreaker = None,
    ):
        self.base_url = (base_url or getattr(settings, 'PORTAL_FUNCTIONS_URL', 'http://localhost:8000')).rstrip('/')
        self.api_key = api_key if api_key is not None else getattr(settings, 'PORTAL_ANON_KEY', '')
        self.access_token = access_token
        self.timeout = httpx.Timeout(timeout or getattr(settings, 'PORTAL_FUNCTIONS_TIMEOUT', 10.0), connect=5.0)
        self.transport = transport
        self.circuit_breaker = circuit_breaker or CircuitBreaker()

    def _get_headers(self, extra_headers: Dict = None) -> Dict:
        """Build request headers"""
        headers = {
            'Content-Type': 'application/json',
            'Accept': 'application/json',
            'X-Client-Info': f"pilot-portal/{getattr(settings, 'SERVICE_VERSION', '1.0.0')}",
        }
        if self.api_key:
            headers['apikey'] = self.api_key
        if self.access_token:
            headers['Authorization'] = f"Bearer {self.access_token}"
        if extra_headers:
            headers.update(extra_headers)
        return headers

    def function_url(self, name: str) -> str:
        return f"{self.base_url}/functions/v1/{name}/"

    async def invoke(
        self,
        name: str,
        body: Dict[str, Any] = None,
        headers: Dict = None
    ) -> Any:
        """Invoke a portal function and return its ``data`` payload."""
        if not self.circuit_breaker.can_execute():
            raise CircuitBreakerError(f"Circuit breaker open for function {name}")

        url = self.function_url(name)

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    url,
                    content=json.dumps(body or {}, cls=DjangoJSONEncoder),
                    headers=self._get_headers(headers)
                )
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                status_code = e.response.status_code
                logger.error(
                    f"HTTP error calling function {name}: {status_code}",
                    extra={'url': url, 'status_code': status_code}
                )
                if status_code >= 500:
                    self.circuit_breaker.record_failure()
                raise RemoteCallError(
                    self._error_message(e.response),
                    details={'function': name, 'status_code': status_code}
                )
            except httpx.RequestError as e:
                logger.error(f"Request error calling function {name}: {e}")
                self.circuit_breaker.record_failure()
                raise RemoteCallError(
                    f"Could not reach function {name}: {e}",
                    details={'function': name}
                )

        self.circuit_breaker.record_success()

        try:
            payload = response.json()
        except ValueError:
            raise MalformedPayloadError(
                f"Function {name} returned a non-JSON response",
                details={'function': name}
            )

        if not isinstance(payload, dict) or 'success' not in payload:
            raise MalformedPayloadError(
                f"Function {name} returned an unexpected envelope",
                details={'function': name}
            )

        if not payload['success']:
            raise RemoteCallError(
                str(payload.get('error') or f"Function {name} failed"),
                details={'function': name, 'status_code': response.status_code}
            )

        return payload.get('data')

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        try:
            payload = response.json()
        except ValueError:
            return f"HTTP {response.status_code}"
        if isinstance(payload, dict) and payload.get('error'):
            return str(payload['error'])
        return f"HTTP {response.status_code}"
