import pytest
from fastapi.testclient import TestClient

from flakeid.core.exceptions import ClockRollbackError
from flakeid.main import app
from flakeid.services import id_service


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_decode_reference_identifier(client):
    response = client.get("/catkin/decode", params={"id": "36671638107855309"})

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "36671638107855309"
    assert body["variant"] == "catkin"
    assert body["fields"] == {
        "reserved": 0,
        "timestamp": 8743199851,
        "region": 0,
        "machine": 0,
        "sequence": 6605,
    }
    assert body["creation_time"].startswith("2017-04-12T04:39:59.851")


def test_decode_negative_identifier(client):
    response = client.get("/catkin/decode", params={"id": "-9186966433981537281"})

    assert response.status_code == 200
    assert response.json()["fields"] == {
        "reserved": 1,
        "timestamp": 8679772108,
        "region": 5,
        "machine": 31,
        "sequence": 1023,
    }


def test_decode_jasmine_reads_precision_first(client):
    response = client.get("/jasmine/decode", params={"id": "4611695116789851300"})

    assert response.status_code == 200
    assert response.json()["fields"] == {
        "reserved": 0,
        "region": 2,
        "machine": 0,
        "precision": 0,
        "timestamp": 8676874,
        "sequence": 631972,
    }


@pytest.mark.parametrize("raw_id", ["12ab", "", "9223372036854775808", "+1"])
def test_decode_malformed_identifier(client, raw_id):
    response = client.get("/catkin/decode", params={"id": raw_id})

    assert response.status_code == 400


def test_decode_unknown_variant(client):
    response = client.get("/tulip/decode", params={"id": "1"})

    assert response.status_code == 404


def test_generate_with_overrides(client):
    response = client.get(
        "/catkin/generate", params={"timestamp": 8743199851, "sequence": 6605}
    )

    assert response.status_code == 200
    assert response.json() == {"id": "36671638107855309"}


def test_generate_then_decode_jasmine_milliseconds(client):
    generated = client.get(
        "/jasmine/generate", params={"precision": 1, "timestamp": 5, "sequence": 7}
    ).json()

    decoded = client.get("/jasmine/decode", params={"id": generated["id"]}).json()

    assert decoded["fields"]["precision"] == 1
    assert decoded["fields"]["timestamp"] == 5
    assert decoded["fields"]["sequence"] == 7


def test_generate_out_of_range_override(client):
    response = client.get("/catkin/generate", params={"sequence": 8192})

    assert response.status_code == 400
    assert "sequence" in response.json()["detail"]


def test_generate_unsupported_field(client):
    response = client.get("/catkin/generate", params={"precision": 1})

    assert response.status_code == 400


def test_generate_negative_override_fails_validation(client):
    response = client.get("/peony/generate", params={"sequence": -1})

    assert response.status_code == 422


def test_generate_unknown_variant(client):
    response = client.get("/tulip/generate")

    assert response.status_code == 404


def test_snowflake_ids_increase(client):
    first = int(client.get("/snowflake/generate").json()["id"])
    second = int(client.get("/snowflake/generate").json()["id"])

    assert second > first


def test_clock_rollback_maps_to_service_unavailable(client, monkeypatch):
    class RolledBackGenerator:
        def generate_id(self):
            raise ClockRollbackError(last_timestamp=10, timestamp=5)

    monkeypatch.setattr(id_service, "snowflake_generator", RolledBackGenerator())

    response = client.get("/snowflake/generate")

    assert response.status_code == 503
