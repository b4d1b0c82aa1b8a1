import requests

from address_verification.services.geo_source import TurkiyeApiClient, unwrap_payload

BASE = "https://address.example/api/v1"


class FakeResponse:
    def __init__(self, payload=None, status_code=200, invalid_json=False):
        self.payload = payload
        self.status_code = status_code
        self.invalid_json = invalid_json

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        if self.invalid_json:
            raise ValueError("Expecting value")
        return self.payload


class FakeSession:
    def __init__(self, responses):
        self.responses = responses
        self.headers = {}
        self.requested = []

    def get(self, url, timeout=None):
        self.requested.append((url, timeout))
        response = self.responses[url]
        if isinstance(response, Exception):
            raise response
        return response


def client_for(responses):
    session = FakeSession({f"{BASE}{path}": r for path, r in responses.items()})
    return TurkiyeApiClient(base_url=BASE, timeout=3, session=session), session


def test_provinces_from_status_envelope():
    client, session = client_for(
        {
            "/provinces": FakeResponse(
                {"status": "OK", "data": [{"id": 6, "name": "Ankara", "population": 1}]}
            )
        }
    )

    assert client.fetch_provinces() == [{"id": 6, "name": "Ankara"}]
    assert session.requested == [(f"{BASE}/provinces", 3)]


def test_provinces_from_bare_list():
    client, _ = client_for({"/provinces": FakeResponse([{"id": 6, "name": " Ankara "}])})
    assert client.fetch_provinces() == [{"id": 6, "name": "Ankara"}]


def test_malformed_items_are_dropped():
    client, _ = client_for(
        {
            "/provinces": FakeResponse(
                {"data": [{"id": 6, "name": "Ankara"}, {"name": "No id"}, "junk", {"id": 7, "name": ""}]}
            )
        }
    )
    assert client.fetch_provinces() == [{"id": 6, "name": "Ankara"}]


def test_error_envelope_is_unavailable():
    client, _ = client_for({"/provinces": FakeResponse({"status": "ERROR", "error": "x"})})
    assert client.fetch_provinces() is None


def test_network_failures_are_unavailable():
    client, _ = client_for(
        {
            "/provinces": requests.Timeout("timed out"),
            "/provinces/6": requests.ConnectionError("refused"),
            "/districts/1130": FakeResponse(status_code=503),
        }
    )
    assert client.fetch_provinces() is None
    assert client.fetch_province_detail(6) is None
    assert client.fetch_district_detail(1130) is None


def test_invalid_json_is_unavailable():
    client, _ = client_for({"/provinces": FakeResponse(invalid_json=True)})
    assert client.fetch_provinces() is None


def test_province_detail_requires_districts():
    client, _ = client_for(
        {
            "/provinces/6": FakeResponse({"data": {"id": 6, "name": "Ankara"}}),
            "/provinces/19": FakeResponse(
                {"data": {"id": 19, "districts": [{"id": 1100, "name": "Merkez"}]}}
            ),
        }
    )
    assert client.fetch_province_detail(6) is None
    assert client.fetch_province_detail(19) == {"districts": [{"id": 1100, "name": "Merkez"}]}


def test_district_detail_defaults_villages():
    client, _ = client_for(
        {"/districts/1130": FakeResponse({"neighborhoods": [{"id": 501, "name": "Kızılay"}]})}
    )
    assert client.fetch_district_detail(1130) == {
        "neighborhoods": [{"id": 501, "name": "Kızılay"}],
        "villages": [],
    }


def test_unwrap_payload_shapes():
    assert unwrap_payload({"status": "OK", "data": [1]}) == [1]
    assert unwrap_payload([1, 2]) == [1, 2]
    assert unwrap_payload({"districts": []}) == {"districts": []}
    assert unwrap_payload({"status": "FAIL"}) is None
    assert unwrap_payload("oops") is None
