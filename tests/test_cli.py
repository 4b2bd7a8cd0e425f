import json

import pytest

from timecard import cli
from timecard.models import ApprovalStatus
from timecard.storage import EventStore


def run(capsys, store, *argv):
    cli.main(["--store", str(store), *argv])
    return capsys.readouterr().out


def test_clock_day_with_selected_job(capsys, tmp_path):
    store = tmp_path / "timecards.json"

    run(capsys, store, "select-job", "J-7", "Harbor Bridge", "--task-id", "T-2", "--task-name", "Rebar")
    run(capsys, store, "clock", "clock_in", "--at", "2024-03-06T06:00:00-08:00")
    run(capsys, store, "clock", "lunch_out", "--at", "2024-03-06T11:00:00-08:00")
    run(capsys, store, "clock", "lunch_in", "--at", "2024-03-06T11:30:00-08:00")
    out = run(capsys, store, "clock", "clock_out", "--at", "2024-03-06T17:30:00-08:00")

    assert "Recorded clock_out" in out
    events = EventStore(store).fetch_events()
    assert len(events) == 4
    assert {e.job.name for e in events} == {"Harbor Bridge"}
    assert {e.task.name for e in events} == {"Rebar"}

    summary = json.loads(run(capsys, store, "summary", "--now", "2024-03-07T09:00:00-08:00"))

    assert summary["start"] == "2024-03-03"
    assert summary["total"] == pytest.approx(11)
    assert summary["regular"] == pytest.approx(8)
    assert summary["overtime"] == pytest.approx(3)
    assert summary["double_time"] == 0


def test_days_honours_period_and_query(capsys, tmp_path, make_shift):
    path = tmp_path / "timecards.json"
    store = EventStore(path)
    for event in make_shift("2024-03-06", 9, job="Harbor Bridge") + make_shift("2024-02-12", 4, job="Elm Street"):
        store.add_event(event)
    store.save()

    week = json.loads(run(capsys, path, "days", "--now", "2024-03-06T12:00:00-08:00"))
    everything = json.loads(run(capsys, path, "days", "--period", "all", "--query", "elm"))

    assert [d["date"] for d in week["days"]] == ["2024-03-06"]
    assert week["totals"]["overtime"] == pytest.approx(1)
    assert everything["period"] == "unrestricted"
    assert [d["date"] for d in everything["days"]] == ["2024-02-12"]


def test_submit_twice_reports_conflict(capsys, tmp_path, make_shift):
    path = tmp_path / "timecards.json"
    store = EventStore(path)
    for event in make_shift("2024-03-06", 8):
        store.add_event(event)
    store.save()

    assert "submitted for approval" in run(capsys, path, "submit", "2024-03-06")
    with pytest.raises(SystemExit) as exc:
        run(capsys, path, "submit", "2024-03-06")

    assert exc.value.code == 1
    assert "rejected: already submitted" in capsys.readouterr().out

    run(capsys, path, "approve", "2024-03-06")
    assert {e.status for e in EventStore(path).fetch_events()} == {ApprovalStatus.APPROVED}


def test_approve_without_submission_is_an_error(capsys, tmp_path, make_shift):
    path = tmp_path / "timecards.json"
    store = EventStore(path)
    for event in make_shift("2024-03-06", 8):
        store.add_event(event)
    store.save()

    with pytest.raises(SystemExit):
        run(capsys, path, "approve", "2024-03-06")

    assert "not submitted" in capsys.readouterr().err


def test_export_writes_requested_format(capsys, tmp_path, make_shift):
    path = tmp_path / "timecards.json"
    store = EventStore(path)
    for event in make_shift("2024-03-06", 8):
        store.add_event(event)
    store.save()
    out_dir = tmp_path / "exports"

    out = run(capsys, path, "export", "csv", "--period", "unrestricted", "--output-dir", str(out_dir))

    assert "Exported 2 records" in out
    assert [p.suffix for p in out_dir.iterdir()] == [".csv"]


def test_export_of_empty_history_fails(capsys, tmp_path):
    with pytest.raises(SystemExit):
        run(capsys, tmp_path / "timecards.json", "export", "json", "--output-dir", str(tmp_path / "out"))

    assert "No timecard records" in capsys.readouterr().err
