import io
from datetime import datetime, timezone
from pathlib import Path

import pytest

from gotodir.cli import (
    build_parser,
    confirm_purge,
    is_confirmation_accepted,
    is_direct_path_query,
    main,
    normalize_path,
    resolve_direct_directory_query,
    resolve_input_path,
    resolve_input_path_from_base,
)
from gotodir.models import Directory, ProjectType
from gotodir.storage import Storage


@pytest.fixture
def env(tmp_path, monkeypatch):
    db_path = tmp_path / "data" / "goto.sqlite"
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("GOTO_DB_PATH", str(db_path))
    monkeypatch.setenv("HOME", str(home))
    return db_path


@pytest.fixture
def tree(tmp_path):
    root = tmp_path / "ws"
    (root / "qqalpha" / "qqbeta").mkdir(parents=True)
    return root.resolve()


# Cases carried over from the source's own tests


def test_detects_relative_and_absolute_path_queries():
    assert is_direct_path_query("./abc/x")
    assert is_direct_path_query("..//abc/y")
    assert is_direct_path_query("/tmp")
    assert is_direct_path_query(".")
    assert is_direct_path_query("..")
    assert not is_direct_path_query("my-project")
    assert not is_direct_path_query("@infra")


def test_resolves_parent_traversal_to_root_for_workspace_paths():
    resolved = resolve_input_path_from_base(Path("/home/abc"), Path("../../"))
    assert resolved == Path("/")


def test_purge_confirmation_accepts_yes_and_y():
    assert is_confirmation_accepted("yes")
    assert is_confirmation_accepted("Y")
    assert is_confirmation_accepted("  Yes  ")
    assert not is_confirmation_accepted("no")


# Path helpers


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("/a/./b/../c", "/a/c"),
        ("/..", "/"),
        ("a/../..", ".."),
        ("..", ".."),
        (".", "."),
        ("a/b/..", "a"),
    ],
)
def test_normalize_path(raw, expected):
    assert normalize_path(raw) == Path(expected)


def test_resolve_input_path_from_base_keeps_absolute_input():
    assert resolve_input_path_from_base("/base", "/nonexistent-zz/x/../y") == Path(
        "/nonexistent-zz/y"
    )


def test_resolve_input_path_uses_cwd(tmp_path, monkeypatch):
    (tmp_path / "sub").mkdir()
    monkeypatch.chdir(tmp_path)
    assert resolve_input_path("sub") == (tmp_path / "sub").resolve()


def test_resolve_direct_directory_query(tmp_path, monkeypatch):
    (tmp_path / "inner").mkdir()
    monkeypatch.chdir(tmp_path)
    assert resolve_direct_directory_query("./inner") == (tmp_path / "inner").resolve()
    assert resolve_direct_directory_query("./missing") is None
    assert resolve_direct_directory_query("inner") is None


def test_confirm_purge_force_skips_prompt(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.StringIO("no\n"))
    assert confirm_purge(True) is True


@pytest.mark.parametrize(("answer", "expected"), [("yes\n", True), ("n\n", False)])
def test_confirm_purge_reads_answer(monkeypatch, capsys, answer, expected):
    monkeypatch.setattr("sys.stdin", io.StringIO(answer))
    assert confirm_purge(False) is expected
    assert "Type 'yes' to continue" in capsys.readouterr().err


def test_build_parser_workspace_add():
    args = build_parser().parse_args(["workspace", "add", "-f", "/x"])
    assert (args.command, args.action, args.force, args.path) == (
        "workspace",
        "add",
        True,
        Path("/x"),
    )


def test_build_parser_purge_force():
    args = build_parser().parse_args(["purge", "--force"])
    assert args.command == "purge"
    assert args.force is True


# Commands


def test_workspace_add_indexes_and_lists(env, tree, capsys):
    assert main(["workspace", "add", str(tree)]) == 0
    err = capsys.readouterr().err
    assert "Index complete: scanned 3, added 3, updated 0, removed 0 directories." in err

    assert main(["workspace", "list"]) == 0
    assert capsys.readouterr().out.splitlines() == [str(tree)]


def test_workspace_add_root_is_refused(env, capsys):
    assert main(["workspace", "add", "/"]) == 1
    assert "Refusing to add '/'" in capsys.readouterr().err


def test_index_command_reports_totals(env, tree, capsys):
    main(["workspace", "add", str(tree)])
    capsys.readouterr()
    assert main(["index"]) == 0
    err = capsys.readouterr().err
    assert (
        "Index complete: scanned 3, added 0, updated 3, removed 0 directories "
        "across 1 workspace(s)."
    ) in err


def test_workspace_remove_cleans_index(env, tree, capsys):
    main(["workspace", "add", str(tree)])
    capsys.readouterr()
    assert main(["workspace", "remove", str(tree)]) == 0
    assert "Cleanup complete: removed 3 directories." in capsys.readouterr().err
    with Storage(env) as storage:
        assert storage.list_directories() == []
        assert storage.list_workspaces() == []


def test_auto_query_prints_best_match(env, tree, capsys):
    main(["workspace", "add", str(tree)])
    capsys.readouterr()
    assert main(["--auto", "qqbeta"]) == 0
    assert capsys.readouterr().out.strip() == str(tree / "qqalpha" / "qqbeta")
    with Storage(env) as storage:
        assert len(storage.list_visits()) == 1
        assert [m.query for m in storage.get_query_mappings()] == ["qqbeta"]


def test_auto_query_without_match_fails(env, tree, capsys):
    main(["workspace", "add", str(tree)])
    capsys.readouterr()
    assert main(["-a", "nothingmatcheszz"]) == 1
    assert capsys.readouterr().out == ""


def test_auto_query_drops_dead_paths(env, tmp_path):
    ghost = tmp_path / "ghostdirzz"
    with Storage(env) as storage:
        storage.add_directory(
            Directory(
                id=storage.next_directory_id(),
                path=ghost,
                name="ghostdirzz",
                depth=len(ghost.parts),
                last_seen=datetime.now(timezone.utc),
                project_type=ProjectType.UNKNOWN,
            )
        )
    assert main(["--auto", "ghostdirzz"]) == 1
    with Storage(env) as storage:
        assert storage.list_directories() == []


def test_direct_path_query_prints_directory(env, tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main(["."]) == 0
    assert capsys.readouterr().out.strip() == str(tmp_path.resolve())


def test_tag_add_and_list(env, tree, capsys):
    main(["workspace", "add", str(tree)])
    assert main(["tag", "add", "proj", str(tree / "qqalpha")]) == 0
    capsys.readouterr()
    assert main(["tag", "list"]) == 0
    assert capsys.readouterr().out.splitlines() == [f"@proj -> {tree / 'qqalpha'}"]

    assert main(["tag", "remove", "proj", str(tree / "qqalpha")]) == 0
    main(["tag", "list"])
    assert capsys.readouterr().out == ""


def test_tag_add_unindexed_path_fails(env, tmp_path, capsys):
    assert main(["tag", "add", "proj", str(tmp_path)]) == 1
    assert "Path not found in index" in capsys.readouterr().err


def test_register_records_visit(env, tree):
    assert main(["register", str(tree / "qqalpha")]) == 0
    with Storage(env) as storage:
        dirs = storage.list_directories()
        assert [d.path for d in dirs] == [tree / "qqalpha"]
        assert [v.path_id for v in storage.list_visits()] == [dirs[0].id]


def test_register_missing_directory_is_silent(env, tmp_path):
    assert main(["register", str(tmp_path / "absent")]) == 0
    with Storage(env) as storage:
        assert storage.list_directories() == []


def test_doctor_and_purge(env, tree, capsys):
    main(["workspace", "add", str(tree)])
    capsys.readouterr()
    assert main(["doctor"]) == 0
    out = capsys.readouterr().out.splitlines()
    assert out == [
        "Goto Doctor Report:",
        "Workspaces: 1",
        f"  - {tree}",
        "Indexed directories: 3",
    ]

    assert main(["purge", "-f"]) == 0
    assert (
        "Purge complete: removed 3 directories, 0 visits, 0 query mappings, 0 tags, 1 workspaces."
        in capsys.readouterr().err
    )
    main(["doctor"])
    assert "Indexed directories: 0" in capsys.readouterr().out


def test_purge_cancelled_keeps_data(env, tree, monkeypatch, capsys):
    main(["workspace", "add", str(tree)])
    monkeypatch.setattr("sys.stdin", io.StringIO("n\n"))
    assert main(["purge"]) == 0
    assert "Purge cancelled." in capsys.readouterr().err
    with Storage(env) as storage:
        assert len(storage.list_workspaces()) == 1