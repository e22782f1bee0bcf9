import gzip
import json
from datetime import datetime, timezone

import responses

from appoptics.client import Client
from appoptics.snapshots import Snapshot, SnapshotChart, SnapshotsService

BASE = "http://unused:8383/v1/"

SNAPSHOT_BODY = """{
  "href": "https://api.example.com/v1/snapshots/1",
  "job_href": "https://api.example.com/v1/jobs/123456",
  "image_href": "http://snapshots.example.com/chart/abc-1.png",
  "duration": 3600,
  "end_time": "2016-02-20T01:18:46Z",
  "created_at": "2016-02-20T01:18:46Z",
  "updated_at": "2016-02-20T01:18:46Z",
  "subject": {
    "chart": {
      "id": 1,
      "sources": [
        "*"
      ],
      "type": "stacked"
    }
  }
}"""

EXPECTED_TIME = datetime(2016, 2, 20, 1, 18, 46, tzinfo=timezone.utc)


def _check(snapshot):
    assert snapshot.job_href == "https://api.example.com/v1/jobs/123456"
    assert snapshot.subject["chart"].id == 1
    assert snapshot.subject["chart"].sources[0] == "*"
    assert snapshot.end_time == EXPECTED_TIME
    assert snapshot.created_at == EXPECTED_TIME
    assert snapshot.updated_at == EXPECTED_TIME


def test_create_snapshot():
    client = Client("token", base_url=BASE)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.POST, BASE + "snapshots", body=SNAPSHOT_BODY, status=202)
        snapshot = SnapshotsService(client).create(Snapshot())
        sent = json.loads(gzip.decompress(rsps.calls[0].request.body))
    _check(snapshot)
    assert sent["subject"] is None
    assert sent["end_time"] == "0001-01-01T00:00:00Z"


def test_retrieve_snapshot_with_trailing_brace():
    client = Client("token", base_url=BASE)
    with responses.RequestsMock() as rsps:
        rsps.add(responses.GET, BASE + "snapshots/123", body=SNAPSHOT_BODY + "}", status=200)
        snapshot = SnapshotsService(client).retrieve(123)
    _check(snapshot)


def test_snapshot_round_trip():
    snapshot = Snapshot.from_dict(json.loads(SNAPSHOT_BODY))
    data = snapshot.to_dict()
    assert data["end_time"] == "2016-02-20T01:18:46Z"
    assert data["duration"] == 3600
    assert data["subject"] == {"chart": {"id": 1, "sources": ["*"], "type": "stacked"}}
    assert Snapshot.from_dict(data) == snapshot


def test_snapshot_chart_to_dict_keeps_zero_fields():
    assert SnapshotChart().to_dict() == {"id": 0, "sources": None, "type": ""}


def test_zero_time_parses_as_none():
    snapshot = Snapshot.from_dict({"end_time": "0001-01-01T00:00:00Z"})
    assert snapshot.end_time is None