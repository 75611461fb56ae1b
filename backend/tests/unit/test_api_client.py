from datetime import date
from unittest.mock import Mock, patch

import pytest
import requests

from invoicedesk.services.api_client import ApiClient, ApiError


def make_response(status_code=200, json_data=None, content=b"{}"):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.content = content
    response.json.return_value = json_data
    return response


@pytest.fixture
def client():
    return ApiClient(base_url="http://api.test/api/", timeout=5)


class TestApiClient:
    """Request plumbing and error mapping."""

    def test_base_url_and_timeout(self, client):
        with patch.object(client.session, "request", return_value=make_response(json_data=[])) as request:
            client.get_quotes()

        request.assert_called_once_with("GET", "http://api.test/api/quotes", json=None, timeout=5)

    def test_json_header(self, client):
        assert client.session.headers["Content-Type"] == "application/json"

    def test_error_message_from_body(self, client):
        response = make_response(400, json_data={"error": "Customer not found"})
        with patch.object(client.session, "request", return_value=response):
            with pytest.raises(ApiError) as exc_info:
                client.create_quote({"customerId": "x"})

        assert str(exc_info.value) == "Customer not found"
        assert exc_info.value.status_code == 400

    def test_error_without_json_body(self, client):
        response = make_response(502)
        response.json.side_effect = ValueError("no json")
        with patch.object(client.session, "request", return_value=response):
            with pytest.raises(ApiError) as exc_info:
                client.get_invoices()

        assert str(exc_info.value) == "HTTP error! status: 502"

    def test_network_error_wrapped(self, client):
        with patch.object(client.session, "request", side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(ApiError) as exc_info:
                client.get_job_entries()

        assert exc_info.value.status_code is None

    def test_empty_body(self, client):
        with patch.object(client.session, "request", return_value=make_response(204, content=b"")):
            assert client.update_invoice("r-1", {}) is None

    def test_job_entries_parsed(self, client):
        rows = [{"id": "j1", "title": "Wartung", "date": "2025-03-10T00:00:00.000Z", "status": "in-progress"}]
        with patch.object(client.session, "request", return_value=make_response(json_data=rows)):
            jobs = client.get_job_entries()

        assert jobs[0].date == date(2025, 3, 10)
        assert jobs[0].status.value == "in-progress"

    def test_update_job_entry_sends_payload(self, client):
        saved = {"id": "j1", "date": "2025-03-11"}
        with patch.object(client.session, "request", return_value=make_response(json_data=saved)) as request:
            job = client.update_job_entry("j1", {"date": "2025-03-11"})

        assert request.call_args[0][:2] == ("PUT", "http://api.test/api/jobs/j1")
        assert request.call_args[1]["json"] == {"date": "2025-03-11"}
        assert job.date == date(2025, 3, 11)

    def test_lookup_data(self, client):
        customers = [{"id": "c1", "name": "Muster GmbH", "hourlyRates": [{"id": "r1", "name": "Geselle", "rate": 55}]}]
        with patch.object(client.session, "request", return_value=make_response(json_data=customers)):
            result = client.get_customers()

        assert result[0].hourly_rates[0].name == "Geselle"
