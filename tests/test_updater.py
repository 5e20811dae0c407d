"""Tests for index synchronization against a local git upstream."""

import io
import json

import pytest
from rich.console import Console

from conftest import git, requires_git
from mpt_get.core.errors import IndexSyncError, StorageError
from mpt_get.core.output import ConsoleSink
from mpt_get.core.updater import MirrorRepo, SyncState, Updater
from mpt_get.models.package_id import PackageID


@pytest.fixture
def sink():
    return ConsoleSink(
        out=Console(file=io.StringIO(), highlight=False),
        err=Console(file=io.StringIO(), highlight=False),
    )


def output_of(console: Console) -> str:
    return console.file.getvalue()


class TestMirrorRepo:
    def test_branch_defaults_to_master(self):
        assert MirrorRepo("https://example.invalid/index.git").branch == "master"


class TestIndex:
    def test_index_reads_working_copy(self, index_dir, sink):
        updater = Updater(MirrorRepo("unused"), index_dir, sink=sink)
        packages = updater.index()
        assert PackageID.parse("net.mamoe:mirai-console") in packages
        assert updater.index_dir() == index_dir

    def test_index_rereads_on_every_call(self, index_dir, sink):
        updater = Updater(MirrorRepo("unused"), index_dir, sink=sink)
        assert len(updater.index()) == 1
        (index_dir / "packages.json").write_text("{}", encoding="utf-8")
        assert len(updater.index()) == 0

    def test_index_without_working_copy(self, tmp_path, sink):
        updater = Updater(MirrorRepo("unused"), tmp_path / "missing", sink=sink)
        with pytest.raises(StorageError):
            updater.index()


@requires_git
class TestClone:
    def test_clone_when_absent(self, upstream, tmp_path, sink):
        target = tmp_path / "home" / "index"
        updater = Updater(MirrorRepo(upstream.url), target, sink=sink)
        assert updater.state is SyncState.ABSENT

        updater.update()

        assert updater.state is SyncState.SYNCED
        assert "Index folder not found." in output_of(sink.info())
        assert len(updater.index()) == 1

    def test_clone_unreachable_remote(self, tmp_path, sink):
        updater = Updater(MirrorRepo(str(tmp_path / "nowhere")), tmp_path / "index", sink=sink)
        with pytest.raises(IndexSyncError) as exc:
            updater.update()
        assert "failed to clone" in exc.value.message
        assert updater.state is SyncState.CLONING


@requires_git
class TestFetchAndReset:
    def test_picks_up_new_commits(self, upstream, tmp_path, sink):
        target = tmp_path / "index"
        updater = Updater(MirrorRepo(upstream.url), target, sink=sink)
        updater.update()

        packages = json.loads((upstream.path / "packages.json").read_text(encoding="utf-8"))
        packages["org.example:tool"] = {
            "name": "Tool",
            "description": "",
            "channels": ["stable"],
            "website": "https://example.invalid",
        }
        (upstream.path / "packages.json").write_text(json.dumps(packages), encoding="utf-8")
        head = upstream.commit("add tool")

        updater.update()

        assert updater.state is SyncState.SYNCED
        assert git("rev-parse", "HEAD", cwd=target) == head
        assert PackageID.parse("org.example:tool") in updater.index()

    def test_local_edits_are_discarded(self, upstream, tmp_path, sink):
        target = tmp_path / "index"
        updater = Updater(MirrorRepo(upstream.url), target, sink=sink)
        updater.update()

        original = (target / "packages.json").read_text(encoding="utf-8")
        (target / "packages.json").write_text("garbage", encoding="utf-8")

        updater.update()
        assert (target / "packages.json").read_text(encoding="utf-8") == original

    def test_not_a_repository(self, tmp_path, sink):
        target = tmp_path / "index"
        target.mkdir()
        updater = Updater(MirrorRepo("unused"), target, sink=sink)
        with pytest.raises(IndexSyncError) as exc:
            updater.update()
        assert "not a git repository" in exc.value.message

    def test_enclosing_repository_is_left_alone(self, upstream, tmp_path, sink):
        home = tmp_path / "home"
        git("clone", "-q", upstream.url, str(home), cwd=tmp_path)
        head = git("rev-parse", "HEAD", cwd=home)
        (home / "packages.json").write_text("USER WORK", encoding="utf-8")

        target = home / "mpt" / "index"
        target.mkdir(parents=True)
        updater = Updater(MirrorRepo(upstream.url), target, sink=sink)
        with pytest.raises(IndexSyncError) as exc:
            updater.update()

        assert "not a git repository" in exc.value.message
        assert (home / "packages.json").read_text(encoding="utf-8") == "USER WORK"
        assert git("rev-parse", "HEAD", cwd=home) == head
        assert updater.state is SyncState.PRESENT

    def test_missing_origin(self, tmp_path, sink):
        target = tmp_path / "index"
        target.mkdir()
        git("init", "-q", cwd=target)
        updater = Updater(MirrorRepo("unused"), target, sink=sink)
        with pytest.raises(IndexSyncError) as exc:
            updater.update()
        assert "origin" in exc.value.message

    def test_unresolvable_branch(self, upstream, tmp_path, sink):
        target = tmp_path / "index"
        Updater(MirrorRepo(upstream.url), target, sink=sink).update()

        updater = Updater(MirrorRepo(upstream.url, branch="release"), target, sink=sink)
        with pytest.raises(IndexSyncError) as exc:
            updater.update()
        assert "refs/remotes/origin/release" in exc.value.message
        assert updater.state is SyncState.FETCHING


class TestGitExecutable:
    def test_missing_git_binary(self, tmp_path, sink):
        updater = Updater(
            MirrorRepo("unused"), tmp_path / "index", sink=sink, git="mpt-get-no-such-git"
        )
        with pytest.raises(IndexSyncError) as exc:
            updater.update()
        assert 'failed to execute command "mpt-get-no-such-git"' in exc.value.message
