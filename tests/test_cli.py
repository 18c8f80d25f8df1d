"""
Tests for the command line entry point.
"""

import logging

import pytest

from s3_bucket_deleter import UsageError, cli

from .conftest import (
    BrokenDeleteStore,
    FakeStore,
    InterruptedListingStore,
    object_page,
    version_page,
)


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    package = logging.getLogger("s3_bucket_deleter")
    handlers, level, package_level = list(root.handlers), root.level, package.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    package.setLevel(package_level)


@pytest.fixture
def fake_backend(monkeypatch):
    """Route region lookup and store construction to a FakeStore."""
    backend = {"store": FakeStore()}

    class _StoreFactory:
        @staticmethod
        def from_config(config, region):
            backend["region"] = region
            return backend["store"]

    monkeypatch.setattr(cli, "get_bucket_region", lambda config: "us-west-2")
    monkeypatch.setattr(cli, "S3Store", _StoreFactory)
    return backend


def test_missing_bucket_exits_non_zero(capsys):
    assert cli.main([]) == 1
    assert "You must specify a bucket name" in capsys.readouterr().err


def test_successful_run_exits_zero(fake_backend, capsys):
    fake_backend["store"] = FakeStore(
        version_pages=[version_page(markers=[("a", "m1")], versions=[("a", "v1")])],
        object_pages=[object_page(["b"])],
    )
    assert cli.main(["-b", "test", "-y", "-w", "2"]) == 0

    out = capsys.readouterr().out
    assert "Bucket test was found in us-west-2" in out
    assert "Deleted bucket test" in out
    assert fake_backend["region"] == "us-west-2"
    assert fake_backend["store"].calls[-1] == ("delete_bucket", "test")


def test_finalize_failure_exits_non_zero(fake_backend, capsys):
    fake_backend["store"] = FakeStore(
        version_pages=[version_page(versions=[("stuck", "v1")])],
        failures={("stuck", "v1"): -1},
    )
    assert cli.main(["-b", "test", "-y", "--max-retries", "1"]) == 1

    captured = capsys.readouterr()
    assert "Unable to delete bucket test" in captured.err
    assert "Unable to delete Version 'stuck' (v1)" in captured.out


def test_declined_confirmation_deletes_nothing(fake_backend, monkeypatch, capsys):
    monkeypatch.setattr("builtins.input", lambda prompt: "n")
    assert cli.main(["-b", "test"]) == 0
    assert fake_backend["store"].calls == []
    assert "Skipped: test" in capsys.readouterr().out


def test_region_lookup_failure_exits_non_zero(monkeypatch, capsys):
    def no_region(config):
        raise UsageError(f"Unable to find bucket for {config.bucket}")

    monkeypatch.setattr(cli, "get_bucket_region", no_region)
    assert cli.main(["-b", "ghost", "-y"]) == 1
    assert "Unable to find bucket for ghost" in capsys.readouterr().err


def test_verbose_logs_each_object(fake_backend, capsys):
    fake_backend["store"] = FakeStore(object_pages=[object_page(["one", "two"])])
    assert cli.main(["-b", "test", "-y", "-v"]) == 0
    out = capsys.readouterr().out
    assert "Deleted Object 'one'" in out
    assert "Deleted Object 'two'" in out


def test_interrupt_exits_non_zero(fake_backend, capsys):
    fake_backend["store"] = InterruptedListingStore()
    assert cli.main(["-b", "test", "-y"]) == 1
    assert "Operation interrupted by user" in capsys.readouterr().out


def test_unexpected_error_is_logged_and_exits_non_zero(fake_backend, capsys):
    fake_backend["store"] = BrokenDeleteStore(
        version_pages=[version_page(versions=[("a", "v1")])]
    )
    assert cli.main(["-b", "test", "-y", "-w", "1"]) == 1

    err = capsys.readouterr().err
    assert "Unexpected error while deleting bucket test" in err
    assert "TypeError: unexpected" in err
