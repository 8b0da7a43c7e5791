import pytest

from gotodir.models import ProjectType
from gotodir.project_detect import detect_project_type


@pytest.mark.parametrize(
    ("marker", "expected"),
    [
        ("Cargo.toml", ProjectType.RUST),
        ("package.json", ProjectType.NODE),
        ("pyproject.toml", ProjectType.PYTHON),
        ("requirements.txt", ProjectType.PYTHON),
        ("Dockerfile", ProjectType.DOCKER),
    ],
)
def test_marker_files(tmp_path, marker, expected):
    (tmp_path / marker).write_text("")
    assert detect_project_type(tmp_path) is expected


def test_git_directory_marker(tmp_path):
    (tmp_path / ".git").mkdir()
    assert detect_project_type(tmp_path) is ProjectType.GIT


def test_git_takes_precedence(tmp_path):
    (tmp_path / ".git").mkdir()
    (tmp_path / "Cargo.toml").write_text("")
    (tmp_path / "package.json").write_text("{}")
    assert detect_project_type(tmp_path) is ProjectType.GIT


def test_rust_before_node(tmp_path):
    (tmp_path / "Cargo.toml").write_text("")
    (tmp_path / "package.json").write_text("{}")
    assert detect_project_type(tmp_path) is ProjectType.RUST


def test_empty_directory_is_unknown(tmp_path):
    assert detect_project_type(tmp_path) is ProjectType.UNKNOWN


def test_missing_directory_is_unknown(tmp_path):
    assert detect_project_type(tmp_path / "absent") is ProjectType.UNKNOWN


def test_accepts_string_path(tmp_path):
    (tmp_path / "Dockerfile").write_text("")
    assert detect_project_type(str(tmp_path)) is ProjectType.DOCKER