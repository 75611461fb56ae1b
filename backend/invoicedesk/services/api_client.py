"""
REST client for the invoicing backend (/api/jobs, /api/quotes, /api/invoices,
/api/customers, /api/hourly-rates, /api/material-templates).

This is the persistence collaborator of the calendar board and the document
editors: every call either returns the server's JSON or raises ApiError.
"""
import logging
from typing import Any, Dict, List, Optional

import requests

from invoicedesk.config import settings
from invoicedesk.schemas.job import JobEntry
from invoicedesk.schemas.template import Customer, HourlyRate, MaterialTemplate

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """A request to the backend failed (network error or non-2xx response)."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ApiClient:
    """JSON client around a requests.Session"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.API_TIMEOUT_SECONDS
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})

    def _request(self, method: str, endpoint: str, payload: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{endpoint}"
        try:
            response = self.session.request(method, url, json=payload, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            logger.error(f"API {method} {url} failed: {e}")
            raise ApiError(f"Network error: {e}") from e

        if not response.ok:
            try:
                message = response.json().get("error") or f"HTTP error! status: {response.status_code}"
            except ValueError:
                message = f"HTTP error! status: {response.status_code}"
            logger.error(f"API {method} {url} returned {response.status_code}: {message}")
            raise ApiError(message, status_code=response.status_code)

        if response.status_code == 204 or not response.content:
            return None
        return response.json()

    # Job entries
    def get_job_entries(self) -> List[JobEntry]:
        return [JobEntry.model_validate(row) for row in self._request("GET", "/jobs") or []]

    def update_job_entry(self, job_id: str, job: Dict[str, Any]) -> JobEntry:
        data = self._request("PUT", f"/jobs/{job_id}", job)
        return JobEntry.model_validate(data)

    # Quotes
    def get_quotes(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/quotes") or []

    def create_quote(self, quote: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/quotes", quote)

    def update_quote(self, quote_id: str, quote: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/quotes/{quote_id}", quote)

    # Invoices
    def get_invoices(self) -> List[Dict[str, Any]]:
        return self._request("GET", "/invoices") or []

    def create_invoice(self, invoice: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("POST", "/invoices", invoice)

    def update_invoice(self, invoice_id: str, invoice: Dict[str, Any]) -> Dict[str, Any]:
        return self._request("PUT", f"/invoices/{invoice_id}", invoice)

    # Lookup data
    def get_customers(self) -> List[Customer]:
        return [Customer.model_validate(row) for row in self._request("GET", "/customers") or []]

    def get_hourly_rates(self) -> List[HourlyRate]:
        return [HourlyRate.model_validate(row) for row in self._request("GET", "/hourly-rates") or []]

    def get_material_templates(self) -> List[MaterialTemplate]:
        return [MaterialTemplate.model_validate(row) for row in self._request("GET", "/material-templates") or []]
