"""Deferred REST actions."""
from concurrent.futures import Future
from typing import Any, Callable, Dict, Optional

from rest.routes import CompiledRoute


class RestAction:
    """
    A request that has been described but not yet sent.

    Nothing is executed until ``complete()`` or ``submit()`` is called.
    Failures of the remote call surface from those two methods only.
    """

    def __init__(
        self,
        executor,
        route: CompiledRoute,
        body: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        transform: Optional[Callable[[Any], Any]] = None
    ):
        self.executor = executor
        self.route = route
        self.body = body
        self.params = params
        self.transform = transform
        self.audit_reason: Optional[str] = None

    def reason(self, reason: Optional[str]) -> 'RestAction':
        """Set the audit log reason sent with the request."""
        self.audit_reason = reason
        return self

    def complete(self) -> Any:
        """Execute the request and block until its result is available."""
        response = self.executor.execute(
            self.route,
            body=self.body,
            params=self.params,
            reason=self.audit_reason
        )
        if self.transform is not None:
            return self.transform(response)
        return response

    def submit(self) -> Future:
        """Execute the request on the executor's pool."""
        return self.executor.submit(self.complete)

    def __repr__(self) -> str:
        return f"<RestAction {self.route.method} {self.route.path}>"
