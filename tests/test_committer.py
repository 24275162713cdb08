from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path

import pytest

from evw_newsletter.exec.committer import publish_result, write_preview
from evw_newsletter.generation.base import GenerationResult
from evw_newsletter.sched.targets import EpisodeType, RunTarget
from tests.conftest import FakeStore

TARGET = RunTarget(season=2026, week=0, episode_type=EpisodeType.POST_DRAFT, storage_week=902, reason="force")


def _result() -> GenerationResult:
    return GenerationResult(
        newsletter={"meta": {"week": 0}, "sections": []},
        html="<h1>Draft grades</h1>",
        memory_entertainer={"mood": "giddy"},
        memory_analyst={"mood": "calm"},
        records={"entertainer": {"wins": 0, "losses": 0}},
        pending_picks={"week": 1, "picks": []},
    )


def test_write_preview_writes_html_and_metadata(tmp_path: Path) -> None:
    now = datetime(2026, 7, 25, 16, 0, tzinfo=UTC)

    html_path, meta_path = write_preview(
        _result(), TARGET, artifacts_dir=tmp_path / "artifacts", warnings=["Player 12"], now=now
    )

    assert html_path.read_text(encoding="utf-8") == "<h1>Draft grades</h1>"
    meta = json.loads(meta_path.read_text(encoding="utf-8"))
    assert meta["season"] == 2026
    assert meta["week"] == 0
    assert meta["episodeType"] == "post_draft"
    assert meta["storageWeek"] == 902
    assert meta["timestamp"] == "2026-07-25T16:00:00+00:00"
    assert meta["timestampEt"].startswith("2026-07-25T12:00:00")
    assert meta["warnings"] == ["Player 12"]
    assert not list((tmp_path / "artifacts").glob("*.tmp"))


def test_write_preview_omits_empty_warnings(tmp_path: Path) -> None:
    _, meta_path = write_preview(_result(), TARGET, artifacts_dir=tmp_path)

    assert "warnings" not in json.loads(meta_path.read_text(encoding="utf-8"))


def test_publish_saves_state_then_artifact() -> None:
    store = FakeStore()

    publish_result(store, _result(), TARGET, league_name="East v. West")

    assert sorted(store.writes[:4]) == ["save_memory", "save_memory", "save_pending_picks", "save_records"]
    assert store.writes[-1] == "save"
    assert store.newsletters[(2026, 902)]["league_name"] == "East v. West"
    assert store.memory[("entertainer", 2026)] == {"mood": "giddy"}
    assert store.memory[("analyst", 2026)] == {"mood": "calm"}
    assert store.picks[(2026, 1)] == {"week": 1, "picks": []}


def test_publish_failure_leaves_no_artifact() -> None:
    class BrokenRecords(FakeStore):
        def save_records(self, season: int, records: object) -> None:
            raise OSError("disk full")

    store = BrokenRecords()

    with pytest.raises(OSError):
        publish_result(store, _result(), TARGET, league_name="East v. West")

    assert (2026, 902) not in store.newsletters


def test_write_preview_records_generator_degradation(tmp_path: Path) -> None:
    result = _result()
    result.compose_failed = True
    result.fallback_sections = ["recap"]

    _, meta_path = write_preview(result, TARGET, artifacts_dir=tmp_path)

    meta = json.loads(meta_path.read_text(encoding="utf-8"))
    assert meta["degraded"] == {"composeFailed": True, "fallbackUsed": False, "fallbackSections": ["recap"]}
    _, clean_path = write_preview(_result(), TARGET, artifacts_dir=tmp_path / "clean")
    assert "degraded" not in json.loads(clean_path.read_text(encoding="utf-8"))
