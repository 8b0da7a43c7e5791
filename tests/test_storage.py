from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from gotodir.models import Directory, ProjectType, QueryMapping, Tag, VisitEvent, Workspace
from gotodir.storage import PurgeStats, Storage, default_db_path, open_storage


@pytest.fixture
def storage(tmp_path):
    with Storage(tmp_path / "db" / "store.sqlite") as s:
        yield s


def _make_dir(storage, path, project_type=ProjectType.UNKNOWN):
    return Directory(
        id=storage.next_directory_id(),
        path=Path(path),
        name=Path(path).name,
        depth=len(Path(path).parts),
        last_seen=datetime.now(timezone.utc),
        project_type=project_type,
    )


def test_purge_all_clears_all_trees(storage, tmp_path):
    root = tmp_path / "purge-workspace"
    root.mkdir()
    storage.add_workspace(root)
    d = _make_dir(storage, root)
    storage.add_directory(d)
    storage.add_visit(VisitEvent(path_id=d.id, timestamp=datetime.now(timezone.utc)))
    storage.update_query_mapping("purge-test", d.id)
    storage.add_tag("tmp", d.id)

    stats = storage.purge_all()
    assert stats.directories >= 1
    assert stats.visits >= 1
    assert stats.query_mappings >= 1
    assert stats.tags >= 1
    assert stats.workspaces >= 1

    assert storage.list_directories() == []
    assert storage.list_visits() == []
    assert storage.get_query_mappings() == []
    assert storage.list_tags() == []
    assert storage.list_workspaces() == []


def test_purge_empty_reports_zero(storage):
    assert storage.purge_all() == PurgeStats()


def test_directory_round_trip(storage):
    d = _make_dir(storage, "/work/app", ProjectType.RUST)
    storage.add_directory(d)
    assert storage.get_directory(d.id) == d
    assert storage.list_directories() == [d]


def test_add_directory_replaces_same_id(storage):
    d = _make_dir(storage, "/work/app")
    storage.add_directory(d)
    d.project_type = ProjectType.GIT
    storage.add_directory(d)
    listed = storage.list_directories()
    assert len(listed) == 1
    assert listed[0].project_type is ProjectType.GIT


def test_get_missing_directory_is_none(storage):
    assert storage.get_directory(12345) is None


def test_remove_directory(storage):
    a = _make_dir(storage, "/a")
    b = _make_dir(storage, "/b")
    storage.add_directory(a)
    storage.add_directory(b)
    storage.remove_directory(a.id)
    assert [d.id for d in storage.list_directories()] == [b.id]


def test_ids_strictly_increase(storage):
    ids = [storage.next_directory_id() for _ in range(5)]
    assert ids == sorted(set(ids))


def test_ids_survive_reopen(tmp_path):
    db = tmp_path / "store.sqlite"
    with Storage(db) as s:
        first = s.next_directory_id()
    with Storage(db) as s:
        assert s.next_directory_id() > first


def test_workspaces_add_list_remove(storage):
    storage.add_workspace(Path("/zeta"))
    storage.add_workspace("/alpha")
    storage.add_workspace(Path("/alpha"))
    assert storage.list_workspaces() == [Workspace(Path("/alpha")), Workspace(Path("/zeta"))]
    storage.remove_workspace(Path("/alpha"))
    assert storage.list_workspaces() == [Workspace(Path("/zeta"))]


def test_visits_round_trip_in_order(storage):
    now = datetime.now(timezone.utc)
    events = [VisitEvent(1, now - timedelta(hours=1)), VisitEvent(2, now), VisitEvent(1, now)]
    for e in events:
        storage.add_visit(e)
    assert storage.list_visits() == events


def test_query_mapping_counts_and_resets(storage):
    storage.update_query_mapping("proj", 3)
    storage.update_query_mapping("proj", 3)
    assert storage.get_query_mappings() == [QueryMapping("proj", 3, 2)]
    storage.update_query_mapping("proj", 4)
    assert storage.get_query_mappings() == [QueryMapping("proj", 4, 1)]


def test_tags_add_list_remove(storage):
    storage.add_tag("infra", 1)
    storage.add_tag("infra", 1)
    storage.add_tag("web", 2)
    assert sorted(storage.list_tags(), key=lambda t: t.name) == [Tag("infra", 1), Tag("web", 2)]
    storage.remove_tag("infra", 1)
    assert storage.list_tags() == [Tag("web", 2)]


def test_default_db_path_honours_env(monkeypatch, tmp_path):
    target = tmp_path / "custom.sqlite"
    monkeypatch.setenv("GOTO_DB_PATH", str(target))
    assert default_db_path() == target


def test_open_storage_uses_env_path(monkeypatch, tmp_path):
    target = tmp_path / "nested" / "custom.sqlite"
    monkeypatch.setenv("GOTO_DB_PATH", str(target))
    with open_storage() as s:
        s.add_workspace("/w")
        assert s.list_workspaces() == [Workspace(Path("/w"))]
    assert target.exists()