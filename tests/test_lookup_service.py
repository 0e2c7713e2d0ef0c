"""Tests for the HTTP contact and rate lookups."""

from unittest.mock import Mock

import pytest
import requests

from resources_api.app.core.errors import NotFoundError, ServiceUnavailableError
from resources_api.app.services.lookup_service import HttpContactDirectory, HttpRateDirectory


def make_response(status_code=200, payload=None):
    response = Mock(status_code=status_code)
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error")
    return response


def make_session(response=None, error=None):
    session = Mock(spec=requests.Session)
    if error is not None:
        session.request.side_effect = error
    else:
        session.request.return_value = response
    return session


def test_contact_is_fetched_by_id():
    session = make_session(make_response(payload={"id": "c1", "firstName": "Jo", "lastName": "Doe"}))
    directory = HttpContactDirectory("http://contacts.local/api/contacts/", api_key="k", session=session, timeout=3)

    contact = directory.get_contact("c1")

    assert (contact.id, contact.first_name, contact.last_name) == ("c1", "Jo", "Doe")
    args, kwargs = session.request.call_args
    assert args == ("GET", "http://contacts.local/api/contacts/c1")
    assert kwargs["headers"]["Authorization"] == "Bearer k"
    assert kwargs["timeout"] == 3


def test_rate_title_is_read():
    session = make_session(make_response(payload={"id": "r1", "title": "Standard"}))
    rate = HttpRateDirectory("http://rates.local/api/rates", session=session).get_rate("r1")
    assert rate.title == "Standard"
    _, kwargs = session.request.call_args
    assert "Authorization" not in kwargs["headers"]


def test_missing_entity_is_not_found():
    session = make_session(make_response(status_code=404))
    with pytest.raises(NotFoundError):
        HttpContactDirectory("http://contacts.local", session=session).get_contact("nobody")


def test_server_error_is_unavailable():
    session = make_session(make_response(status_code=500))
    with pytest.raises(ServiceUnavailableError):
        HttpRateDirectory("http://rates.local", session=session).get_rate("r1")


def test_connection_error_is_unavailable():
    session = make_session(error=requests.ConnectionError("refused"))
    with pytest.raises(ServiceUnavailableError):
        HttpContactDirectory("http://contacts.local", session=session).get_contact("c1")


def test_non_object_payload_is_unavailable():
    session = make_session(make_response(payload=["not", "an", "object"]))
    with pytest.raises(ServiceUnavailableError):
        HttpRateDirectory("http://rates.local", session=session).get_rate("r1")
