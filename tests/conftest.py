"""Shared test fixtures for riskroute tests."""

import json
import shutil
import subprocess

import pytest

from riskroute.vcs import DiffFile

GIT_AVAILABLE = shutil.which("git") is not None

requires_git = pytest.mark.skipif(not GIT_AVAILABLE, reason="git not found")


def make_file(path, status="modified", additions=10, deletions=0, binary=False):
    """Build a DiffFile with sensible defaults."""
    return DiffFile(
        path=path,
        status=status,
        additions=additions,
        deletions=deletions,
        binary=binary,
    )


SAMPLE_LCOV = """\
TN:
SF:src/services/user_service.ts
FN:3,getUser
FN:10,deleteUser
FNDA:4,getUser
FNDA:0,deleteUser
DA:3,4
DA:4,4
DA:10,0
DA:11,0
BRDA:4,0,0,4
BRDA:4,0,1,-
LF:4
LH:2
end_of_record
SF:src/utils/format.ts
FNDA:2,formatDate
DA:1,2
DA:2,2
LF:2
LH:2
end_of_record
"""

SAMPLE_ISTANBUL_SUMMARY = {
    "total": {
        "lines": {"total": 30, "covered": 15, "pct": 50},
        "statements": {"total": 30, "covered": 15, "pct": 50},
        "functions": {"total": 4, "covered": 2, "pct": 50},
        "branches": {"total": 4, "covered": 2, "pct": 50},
    },
    "/repo/src/api/handler.ts": {
        "lines": {"total": 20, "covered": 5, "pct": 25},
        "statements": {"total": 20, "covered": 6, "pct": 30},
        "functions": {"total": 2, "covered": 1, "pct": 50},
        "branches": {"total": 4, "covered": 0, "pct": 0},
    },
    "/repo/src/index.ts": {
        "lines": {"total": 10, "covered": 10, "pct": 100},
    },
}

SAMPLE_ISTANBUL_DETAILED = {
    "src/auth/session.ts": {
        "path": "src/auth/session.ts",
        "statementMap": {
            "0": {"start": {"line": 1, "column": 0}, "end": {"line": 1, "column": 20}},
            "1": {"start": {"line": 5, "column": 2}, "end": {"line": 5, "column": 30}},
            "2": {"start": {"line": 5, "column": 31}, "end": {"line": 5, "column": 40}},
            "3": {"start": {"line": 2, "column": 2}, "end": {"line": 2, "column": 10}},
        },
        "s": {"0": 3, "1": 0, "2": 0, "3": 0},
        "branchMap": {
            "0": {
                "type": "if",
                "loc": {"start": {"line": 4, "column": 2}, "end": {"line": 6, "column": 3}},
                "locations": [],
            },
            "1": {"type": "cond-expr", "line": 8, "locations": []},
        },
        "b": {"0": [2, 0], "1": [0, 0]},
        "fnMap": {
            "0": {"name": "login", "decl": {}, "loc": {}},
            "1": {"name": "logout", "decl": {}, "loc": {}},
        },
        "f": {"0": 1, "1": 0},
    }
}


@pytest.fixture
def project_root(tmp_path):
    """An empty project directory."""
    return tmp_path


@pytest.fixture
def lcov_project(tmp_path):
    """Project with coverage/lcov.info and the sources it references."""
    (tmp_path / "coverage").mkdir()
    (tmp_path / "coverage" / "lcov.info").write_text(SAMPLE_LCOV)
    src = tmp_path / "src" / "services"
    src.mkdir(parents=True)
    (src / "user_service.ts").write_text("export function getUser() {\n  return 1;\n}\n")
    return tmp_path


@pytest.fixture
def write_json(tmp_path):
    """Write a JSON document at a path relative to tmp_path."""

    def _write(rel, data):
        target = tmp_path / rel
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(json.dumps(data))
        return target

    return _write


def git(repo, *args):
    return subprocess.run(
        ["git", "-C", str(repo), *args], capture_output=True, text=True, check=True
    ).stdout


@pytest.fixture
def git_repo(tmp_path):
    """A git repository with two commits touching several files."""
    if not GIT_AVAILABLE:
        pytest.skip("git not found")
    repo = tmp_path / "repo"
    repo.mkdir()
    git(repo, "init", "-q")
    git(repo, "config", "user.email", "dev@example.com")
    git(repo, "config", "user.name", "Dev One")
    git(repo, "config", "commit.gpgsign", "false")

    (repo / "README.md").write_text("# demo\n")
    (repo / "src").mkdir()
    (repo / "src" / "app.py").write_text("print('hello')\n")
    (repo / "src" / "old_name.py").write_text("".join(f"line {i}\n" for i in range(20)))
    (repo / "obsolete.txt").write_text("remove me\n")
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "initial")

    (repo / "src" / "app.py").write_text("print('hello')\nprint('world')\n")
    git(repo, "mv", "src/old_name.py", "src/new_name.py")
    git(repo, "rm", "-q", "obsolete.txt")
    (repo / "src" / "auth").mkdir()
    (repo / "src" / "auth" / "login.py").write_text("def login():\n    return True\n")
    (repo / "logo.bin").write_bytes(bytes(range(256)))
    git(repo, "add", ".")
    git(repo, "commit", "-q", "-m", "second")
    return repo
