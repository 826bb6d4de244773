"""Tests for the block explorer client."""

from __future__ import annotations

import requests

from graphite_trust.services.explorer_client import ExplorerClient


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self.payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params))
        if self.error:
            raise self.error
        return self.response


def test_latest_block_is_parsed_from_hex():
    session = FakeSession(FakeResponse({"status": "1", "result": "0x1a4"}))
    stats = ExplorerClient("https://explorer.example/api", session=session).get_network_stats()

    assert stats.latest_block == 420
    assert session.requests == [
        ("https://explorer.example/api", {"module": "block", "action": "getlatestblockno"})
    ]


def test_error_status_returns_none():
    session = FakeSession(FakeResponse({"status": "0", "message": "NOTOK", "result": None}))
    assert ExplorerClient("https://explorer.example/api", session=session).get_network_stats() is None


def test_network_failure_returns_none():
    session = FakeSession(error=requests.ConnectionError("connection refused"))
    assert ExplorerClient("https://explorer.example/api", session=session).get_network_stats() is None


def test_http_error_returns_none():
    session = FakeSession(FakeResponse({}, status_code=503))
    assert ExplorerClient("https://explorer.example/api", session=session).get_network_stats() is None


def test_unconfigured_explorer():
    session = FakeSession()
    assert ExplorerClient("", session=session).get_network_stats() is None
    assert session.requests == []


def test_non_object_body_returns_none():
    for body in (["unexpected"], "1", 42, None):
        session = FakeSession(FakeResponse(body))
        assert ExplorerClient("https://explorer.example/api", session=session).get_network_stats() is None


def test_negative_block_number_returns_none():
    session = FakeSession(FakeResponse({"status": "1", "result": "-0x1"}))
    assert ExplorerClient("https://explorer.example/api", session=session).get_network_stats() is None


def test_non_hex_result_returns_none():
    session = FakeSession(FakeResponse({"status": "1", "result": "latest"}))
    assert ExplorerClient("https://explorer.example/api", session=session).get_network_stats() is None


def test_network_stats_route_unavailable_on_bad_body(client, trust_client):
    trust_client.explorer = ExplorerClient(
        "https://explorer.example/api",
        session=FakeSession(FakeResponse(["unexpected"]))
    )

    r = client.get("/network-stats")

    assert r.status_code == 404
    assert r.json()["detail"]["error"] == "stats_unavailable"
