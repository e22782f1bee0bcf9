import gzip
import json

import pytest
import responses

from appoptics.client import Client
from appoptics.errors import ErrorResponse
from appoptics.services import ListServicesResponse, Service, ServicesService

BASE_URL = "http://api.test/v1/"

LIST_BODY = """{
  "query": {"found": 2, "length": 2, "offset": 0, "total": 2},
  "services": [
    {"id": 145, "type": "slack", "settings": {"room": "Ops", "token": "token", "subdomain": "acme"},
     "title": "Notify Ops Room"},
    {"id": 156, "type": "mail", "settings": {"addresses": "ops@example.com"}, "title": "Email ops team"}
  ]
}"""


@pytest.fixture
def mocked():
    with responses.RequestsMock(assert_all_requests_are_fired=False) as rsps:
        yield rsps


@pytest.fixture
def services():
    return ServicesService(Client("token", base_url=BASE_URL))


def sent_json(call):
    return json.loads(gzip.decompress(call.request.body))


def test_list(mocked, services):
    mocked.add(responses.GET, BASE_URL + "services", body=LIST_BODY)
    result = services.list()
    assert result.query.found == 2
    assert result.query.length == 2
    assert result.query.offset == 0
    assert result.query.total == 2
    first = result.services[0]
    assert first.id == 145
    assert first.type == "slack"
    assert first.title == "Notify Ops Room"
    assert first.settings["room"] == "Ops"
    assert first.settings["subdomain"] == "acme"


def test_retrieve(mocked, services):
    mocked.add(
        responses.GET,
        BASE_URL + "services/123",
        json={"id": 156, "type": "mail", "title": "Email ops team"},
    )
    service = services.retrieve(123)
    assert service.id == 156
    assert service.type == "mail"
    assert service.title == "Email ops team"


def test_create_sends_service(mocked, services):
    mocked.add(
        responses.POST,
        BASE_URL + "services",
        status=201,
        json={"id": 145, "type": "campfire", "title": "Notify Ops Room"},
    )
    created = services.create(Service(type="campfire", title="Notify Ops Room"))
    assert created.id == 145
    assert created.type == "campfire"
    assert sent_json(mocked.calls[0]) == {"type": "campfire", "title": "Notify Ops Room"}


def test_update_puts_to_service_path(mocked, services):
    mocked.add(responses.PUT, BASE_URL + "services/9", status=204)
    assert services.update(Service(id=9, title="new-title")) is None
    call = mocked.calls[0]
    assert call.request.method == "PUT"
    assert sent_json(call) == {"id": 9, "title": "new-title"}


def test_delete(mocked, services):
    mocked.add(responses.DELETE, BASE_URL + "services/9", status=204)
    assert services.delete(9) is None
    assert mocked.calls[0].request.url == BASE_URL + "services/9"


def test_error_status_raises(mocked, services):
    mocked.add(
        responses.GET,
        BASE_URL + "services/1",
        status=404,
        json={"errors": {"request": ["not found"]}},
    )
    with pytest.raises(ErrorResponse) as excinfo:
        services.retrieve(1)
    assert excinfo.value.status.startswith("404")
    assert excinfo.value.errors == {"request": ["not found"]}


def test_round_trip():
    service = Service(id=3, type="slack", settings={"room": "deployments"}, title="test")
    assert Service.from_dict(service.to_dict()) == service


def test_empty_service_serialises_to_empty_dict():
    assert Service().to_dict() == {}


def test_list_response_from_empty():
    result = ListServicesResponse.from_dict(None)
    assert result.services == []
    assert result.query.total == 0