"""
Remote Expenses API Storage

The expenses REST API owns persistence and server-side filtering:

    POST   /              create an expense
    GET    /              list expenses (dateRange, categories, paymentModes)
    GET    /analytics     per-category monthly totals
    DELETE /{id}          delete an expense

DESIGN DECISION: Requests that get no response at all are retried with
exponential back-off. A server that answered with an error is not
retried; its message is surfaced to the caller.
"""

from typing import Any, Optional

import requests
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from expense_tracker.analytics.aggregator import coerce_record
from expense_tracker.config import ApiSettings, get_settings
from expense_tracker.models.analytics import RawAggregate
from expense_tracker.models.expense import Expense, ExpenseFilters
from expense_tracker.services.storage.interface import (
    ExpenseStorageInterface,
    NotFoundError,
    StorageConnectionError,
    StorageError,
)


logger = structlog.get_logger(__name__)

NO_RESPONSE_MESSAGE = "No response from server. Please check your network connection."


class ExpenseApiStorage(ExpenseStorageInterface):
    """
    Expense storage backed by the remote REST API.

    Uses one requests.Session so connections are reused across calls.
    """

    def __init__(
        self,
        settings: Optional[ApiSettings] = None,
        session: Optional[requests.Session] = None,
    ):
        self._settings = settings or get_settings().api
        self._session = session or requests.Session()
        self._session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
        })

    def _send(self, method: str, path: str, failure_message: str, **kwargs) -> requests.Response:
        url = f"{self._settings.base_url}{path}"
        logger.debug("api_request", method=method, url=url, params=kwargs.get("params"))

        try:
            response = self._session.request(
                method,
                url,
                timeout=self._settings.timeout_seconds,
                **kwargs,
            )
        except (requests.ConnectionError, requests.Timeout) as e:
            logger.warning("api_no_response", method=method, url=url, error=str(e))
            raise StorageConnectionError(NO_RESPONSE_MESSAGE) from e
        except requests.RequestException as e:
            raise StorageError(f"Error preparing the request: {e}") from e

        logger.debug("api_response", method=method, url=url, status=response.status_code)

        if not response.ok:
            message = self._server_message(response) or failure_message
            logger.error(
                "api_error_response",
                method=method,
                url=url,
                status=response.status_code,
                message=message,
            )
            if response.status_code == 404:
                raise NotFoundError(message)
            raise StorageError(message)

        return response

    def _request(self, method: str, path: str, failure_message: str, **kwargs) -> requests.Response:
        """Send a request, retrying only when the server never answered."""
        retrying = Retrying(
            stop=stop_after_attempt(self._settings.retry_attempts),
            wait=wait_exponential(multiplier=1, min=2, max=10),
            retry=retry_if_exception_type(StorageConnectionError),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                return self._send(method, path, failure_message, **kwargs)

    @staticmethod
    def _server_message(response: requests.Response) -> Optional[str]:
        try:
            body = response.json()
        except ValueError:
            return None
        if isinstance(body, dict) and body.get("message"):
            return str(body["message"])
        return None

    @staticmethod
    def _json(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise StorageError(f"Server returned invalid JSON: {e}") from e

    def _json_list(self, response: requests.Response) -> list:
        payload = self._json(response)
        if not isinstance(payload, list):
            raise StorageError(
                f"Expected a JSON list from the server, got {type(payload).__name__}"
            )
        return payload

    async def create_expense(self, expense: Expense) -> Expense:
        """Create an expense through the API."""
        response = self._request(
            "POST",
            "/",
            "Failed to create expense",
            json=expense.to_api_payload(),
        )
        try:
            return Expense.model_validate(self._json(response))
        except ValueError as e:
            raise StorageError(f"Server returned an invalid expense: {e}") from e

    async def list_expenses(
        self,
        filters: Optional[ExpenseFilters] = None,
    ) -> list[Expense]:
        """List expenses; filtering happens on the server."""
        params = filters.to_query_params() if filters else {}
        response = self._request("GET", "/", "Failed to load expenses", params=params)
        try:
            return [Expense.model_validate(item) for item in self._json_list(response)]
        except ValueError as e:
            raise StorageError(f"Server returned an invalid expense: {e}") from e

    async def delete_expense(self, expense_id: str) -> None:
        """Delete an expense by its API id."""
        self._request("DELETE", f"/{expense_id}", f"Failed to delete expense {expense_id}")

    async def get_monthly_category_totals(self) -> list[RawAggregate]:
        """
        Fetch the per-category monthly totals.

        Raises:
            InvalidAggregateError: If the server sent a malformed total
        """
        response = self._request("GET", "/analytics", "Failed to load analytics")
        return [coerce_record(item) for item in self._json_list(response)]
