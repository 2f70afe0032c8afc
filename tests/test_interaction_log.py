import json
from unittest.mock import MagicMock

from interaction_log import (
    BackgroundInteractionLog, FirestoreInteractionLog, JsonFileInteractionLog,
    SCHEME_QUERIES, SCHEME_QUERY_FAILURES, PRICE_QUERIES,
)
from kisan_models import MarketPriceAnalysis, SchemeQueryResult


def test_json_file_log_appends_lines(tmp_path):
    path = tmp_path / "logs.jsonl"
    log = JsonFileInteractionLog(str(path))

    log.record("crop insurance", SchemeQueryResult.not_found("crop insurance"))
    log.write(PRICE_QUERIES, {"result": MarketPriceAnalysis(summary="s", advice="a")}, language="hindi")

    lines = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert len(lines) == 2
    assert lines[0]["collection"] == SCHEME_QUERIES
    assert lines[0]["query"] == "crop insurance"
    assert lines[0]["result"]["scheme"] == "Not Found"
    assert lines[0]["language"] == "en"
    assert lines[1]["result"] == {"summary": "s", "advice": "a"}
    assert lines[1]["language"] == "hindi"
    assert "timestamp" in lines[1]


def test_failures_are_recorded_with_error_details(tmp_path):
    path = tmp_path / "logs.jsonl"
    JsonFileInteractionLog(str(path)).record_failure("loan", ValueError("bad corpus"))

    entry = json.loads(path.read_text(encoding="utf-8"))
    assert entry["collection"] == SCHEME_QUERY_FAILURES
    assert entry["error"] == {"type": "ValueError", "message": "bad corpus"}


def test_firestore_log_adds_document_to_collection():
    db = MagicMock()
    log = FirestoreInteractionLog(db=db)

    log.record("pm kisan", SchemeQueryResult.error())

    db.collection.assert_called_once_with(SCHEME_QUERIES)
    document = db.collection.return_value.add.call_args[0][0]
    assert document["query"] == "pm kisan"
    assert document["result"]["scheme"] == "Error"
    assert document["sessionId"] == "session_placeholder_id"
    assert "timestamp" in document


def test_background_log_writes_to_wrapped_sink(recording_log):
    log = BackgroundInteractionLog(recording_log, max_workers=1)

    future = log.write(SCHEME_QUERIES, {"query": "seeds"})
    future.result(timeout=5)
    log.close()

    assert recording_log.entries == [(SCHEME_QUERIES, {"query": "seeds"}, None)]


def test_background_log_swallows_sink_errors(failing_log):
    log = BackgroundInteractionLog(failing_log, max_workers=1)

    future = log.write(SCHEME_QUERIES, {"query": "seeds"})

    assert future.result(timeout=5) is None
    assert failing_log.calls == 1
    log.close()


def test_background_log_drops_writes_after_close(recording_log):
    log = BackgroundInteractionLog(recording_log, max_workers=1)
    log.close()

    assert log.write(SCHEME_QUERIES, {"query": "seeds"}) is None
    assert recording_log.entries == []
