from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from api.main import app


@pytest.fixture(autouse=True)
def cmdstack_home(tmp_path, monkeypatch):
    monkeypatch.setenv("CMDSTACK_HOME", str(tmp_path))


client = TestClient(app)


def test_health():
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json()["status"] == "ok"


def test_parse():
    resp = client.post("/parameters/parse", json={"command": "curl @{bool} @{int[1,5]} @{}"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["blank_count"] == 1
    assert data["parameters"] == [
        {"type": "Boolean", "data": {}},
        {"type": "Int", "data": {"min": 1, "max": 5}},
        {"type": "Blank", "data": {}},
    ]


def test_parse_error_is_422():
    resp = client.post("/parameters/parse", json={"command": "@{int[10,2]}"})
    assert resp.status_code == 422
    body = resp.json()
    assert body["error"] == "InvalidRange"
    assert body["position"] == 0


def test_index():
    resp = client.post("/parameters/index", json={"command": "echo @{} @{}"})
    assert resp.json()["indexed_command"] == "echo @{1} @{2}"


def test_generate():
    resp = client.post(
        "/parameters/generate",
        json={"command": "ssh @{}@@{string[3,3]} -p @{int[22,22]}", "blank_param_values": ["me"]},
    )
    assert resp.status_code == 200
    data = resp.json()
    blank, name, port = data["generated_values"]
    assert blank == ""
    assert len(name) == 3
    assert port == "22"
    assert data["generated_command"] == f"ssh me@{name} -p 22"


def test_values():
    resp = client.post(
        "/parameters/values",
        json={"parameters": [{"type": "String", "data": {"min": 4, "max": 4}}], "alphabet": "q"},
    )
    assert resp.status_code == 200
    assert resp.json()["values"] == ["qqqq"]


def test_values_rejects_bad_constraints():
    resp = client.post(
        "/parameters/values",
        json={"parameters": [{"type": "Int", "data": {"min": 9, "max": 1}}]},
    )
    assert resp.status_code == 400
    assert resp.json()["error"] == "ConstraintViolation"

    resp = client.post("/parameters/values", json={"parameters": [{"type": "Uuid"}]})
    assert resp.status_code == 400


def test_replace():
    resp = client.post(
        "/parameters/replace", json={"command": "echo @{} @{int}", "param_values": ["a", "1"]}
    )
    assert resp.json()["command"] == "echo a 1"


def test_replace_count_mismatch_is_400():
    resp = client.post("/parameters/replace", json={"command": "echo @{}", "param_values": []})
    assert resp.status_code == 400
    assert resp.json()["error"] == "ValueCountMismatch"


def test_values_rejects_missing_or_null_bounds():
    for data in ({"min": None, "max": 3}, {"max": 3}):
        resp = client.post(
            "/parameters/values", json={"parameters": [{"type": "Int", "data": data}]}
        )
        assert resp.status_code == 400
        assert resp.json()["error"] == "InvalidParameter"


@pytest.mark.parametrize(
    "data", [{"min": -1, "max": 3}, {"min": 1.5, "max": 3}, {"min": 0, "max": 2**40}]
)
def test_values_validates_bound_types(data):
    resp = client.post(
        "/parameters/values", json={"parameters": [{"type": "String", "data": data}]}
    )
    assert resp.status_code == 422


def test_generate_rejects_oversized_bound():
    resp = client.post("/parameters/generate", json={"command": "@{string[0,99999999999999]}"})
    assert resp.status_code == 422
    assert resp.json()["error"] == "InvalidBound"
