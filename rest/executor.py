"""REST action executor for the Discord HTTP API."""
import logging
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any, Callable, Dict, Optional

import requests

from rest.errors import RemoteActionError
from rest.routes import CompiledRoute

logger = logging.getLogger(__name__)


class RestActionExecutor:
    """Executes compiled routes against the remote API."""

    BASE_URL = "https://discord.com/api/v10"
    USER_AGENT = "DiscordBot (https://github.com/guild-scheduled-events, 1.0)"

    def __init__(
        self,
        token: str,
        base_url: str = BASE_URL,
        timeout: int = 30,
        max_retries: int = 3,
        base_delay: float = 1,
        max_workers: int = 4
    ):
        """
        Initialize the executor.

        Args:
            token: Bot token used for authorization
            base_url: API root without trailing slash
            timeout: HTTP request timeout in seconds (default: 30)
            max_retries: Attempts for network errors and 5xx responses
            base_delay: Initial backoff delay in seconds
            max_workers: Thread pool size for submitted actions
        """
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.base_delay = base_delay
        self.max_workers = max_workers
        self.session = requests.Session()
        self.session.headers.update({
            'Authorization': f"Bot {token}",
            'User-Agent': self.USER_AGENT
        })
        self._pool: Optional[ThreadPoolExecutor] = None
        self._pool_lock = threading.Lock()

    def execute(
        self,
        route: CompiledRoute,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        reason: Optional[str] = None
    ) -> Any:
        """
        Perform a request with retry logic.

        Args:
            route: Compiled route to call
            body: JSON body, if any
            params: Query string parameters
            reason: Audit log reason header

        Returns:
            Decoded JSON response, or None for empty responses

        Raises:
            RemoteActionError: If the API answers with an error status
            requests.RequestException: If all retry attempts fail
        """
        url = f"{self.base_url}/{route.path}"
        headers = {}
        if reason:
            headers['X-Audit-Log-Reason'] = reason

        for attempt in range(self.max_retries):
            try:
                logger.debug(
                    f"{route.method} {route.path} "
                    f"(attempt {attempt + 1}/{self.max_retries})"
                )
                response = self.session.request(
                    route.method,
                    url,
                    json=body,
                    params=params,
                    headers=headers,
                    timeout=self.timeout
                )

                if response.status_code >= 500:
                    error = self._to_error(response)
                    if attempt < self.max_retries - 1:
                        self._backoff(attempt, route, error)
                        continue
                    logger.error(
                        f"All {self.max_retries} attempts failed for "
                        f"{route.method} {route.path}. Last error: {error}"
                    )
                    raise error

                if response.status_code >= 400:
                    raise self._to_error(response)

                if response.status_code == 204 or not response.content:
                    return None
                return response.json()

            except requests.RequestException as e:
                if attempt < self.max_retries - 1:
                    self._backoff(attempt, route, e)
                else:
                    logger.error(
                        f"All {self.max_retries} attempts failed for "
                        f"{route.method} {route.path}. Last error: {e}"
                    )
                    raise

    def submit(self, fn: Callable[[], Any]) -> Future:
        """
        Run work on the executor's thread pool.

        Returns:
            Future resolving to the return value of fn
        """
        with self._pool_lock:
            if self._pool is None:
                self._pool = ThreadPoolExecutor(
                    max_workers=self.max_workers,
                    thread_name_prefix='rest-action'
                )
            return self._pool.submit(fn)

    def close(self) -> None:
        """Release the HTTP session and the thread pool."""
        with self._pool_lock:
            pool, self._pool = self._pool, None
        if pool is not None:
            pool.shutdown(wait=True)
        self.session.close()

    def _backoff(self, attempt: int, route: CompiledRoute, error: Exception) -> None:
        delay = self.base_delay * (2 ** attempt)
        logger.warning(
            f"{route.method} {route.path} failed "
            f"(attempt {attempt + 1}/{self.max_retries}): {error}. "
            f"Retrying in {delay} seconds..."
        )
        time.sleep(delay)

    def _to_error(self, response: requests.Response) -> RemoteActionError:
        """
        Convert an error response into a RemoteActionError.

        The API usually answers with ``{"code": int, "message": str}``;
        anything else falls back to the raw body.
        """
        error_code = None
        message = response.text or response.reason or ''
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict):
            error_code = data.get('code')
            message = data.get('message', message)
        return RemoteActionError(
            status_code=response.status_code,
            message=message,
            error_code=error_code
        )
