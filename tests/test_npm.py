"""Tests for the npm command wrappers."""

import json
import subprocess

import pytest

from dependency_min_age import npm
from dependency_min_age.errors import MalformedResponseError, NpmCommandError
from dependency_min_age.models import ListOptions
from dependency_min_age.npm import NpmClient, parse_response, prepare_outdated, registry_name


def test_parse_response_empty_output_means_nothing_outdated():
    assert parse_response("") == {}
    assert parse_response("{}") == {}


def test_parse_response_rejects_non_objects():
    with pytest.raises(MalformedResponseError):
        parse_response("[1, 2]")
    with pytest.raises(MalformedResponseError):
        parse_response("not json")


def test_parse_response_raises_npm_error():
    stdout = json.dumps({"error": {"code": "E404", "summary": "Not found", "detail": "check the name"}})
    with pytest.raises(NpmCommandError) as excinfo:
        parse_response(stdout, ["npm", "outdated"])
    assert str(excinfo.value) == "Not found"
    assert excinfo.value.stderr == "check the name"


def test_prepare_outdated_fills_missing_fields():
    outdated = prepare_outdated({
        "left-pad": {"current": "1.0.0", "wanted": "1.0.1", "latest": "1.3.0", "location": "", "type": "dependencies"},
        "missing": {"wanted": "2.0.0", "latest": "2.0.0"},
    })

    assert outdated["left-pad"].name == "left-pad"
    assert outdated["left-pad"].location == "node_modules/left-pad"
    assert outdated["left-pad"].resolved_name == "left-pad"
    assert outdated["missing"].current == ""
    assert outdated["missing"].type == ""


def test_registry_name_follows_aliases():
    entry = {"version": "1.0.0", "resolved": "https://registry.npmjs.org/real-pkg/-/real-pkg-1.0.0.tgz"}
    scoped = {"resolved": "https://registry.npmjs.org/@scope/real/-/real-2.0.0.tgz"}

    assert registry_name("my-alias", entry) == "real-pkg"
    assert registry_name("alias", scoped) == "@scope/real"
    assert registry_name("git-dep", {"resolved": "git+ssh://git@github.com/a/b.git#abc"}) == "git-dep"
    assert registry_name("plain", None) == "plain"


def _fake_run(stdout="", returncode=0, stderr=""):
    calls = []

    def fake_run(cmd, **kwargs):
        calls.append(cmd)
        return subprocess.CompletedProcess(cmd, returncode, stdout=stdout, stderr=stderr)

    return fake_run, calls


def test_list_installed_builds_command(monkeypatch):
    payload = {"name": "app", "dependencies": {"a": {"version": "1.0.0"}, "b": {"version": "2.0.0"}}}
    fake_run, calls = _fake_run(stdout=json.dumps(payload))
    monkeypatch.setattr(npm.subprocess, "run", fake_run)

    installed = NpmClient().list_installed(ListOptions(global_scope=True, depth=2))

    assert set(installed) == {"a", "b"}
    assert calls == [["npm", "list", "--json", "--depth", "2", "--global"]]


def test_list_installed_without_dependencies(monkeypatch):
    fake_run, _ = _fake_run(stdout=json.dumps({"name": "app"}))
    monkeypatch.setattr(npm.subprocess, "run", fake_run)

    assert NpmClient().list_installed(ListOptions()) == {}


def test_outdated_nonzero_exit_with_output_is_not_an_error(monkeypatch):
    payload = {"a": {"current": "1.0.0", "wanted": "1.0.0", "latest": "2.0.0", "location": "node_modules/a"}}
    fake_run, calls = _fake_run(stdout=json.dumps(payload), returncode=1)
    monkeypatch.setattr(npm.subprocess, "run", fake_run)

    outdated = NpmClient().outdated_info("a")

    assert outdated["a"].latest == "2.0.0"
    assert calls == [["npm", "outdated", "--json", "--long", "a"]]


def test_outdated_nonzero_exit_without_output_raises(monkeypatch):
    fake_run, _ = _fake_run(returncode=1, stderr="npm ERR! network")
    monkeypatch.setattr(npm.subprocess, "run", fake_run)

    with pytest.raises(NpmCommandError) as excinfo:
        NpmClient().outdated_info("a")
    assert excinfo.value.returncode == 1
    assert "network" in excinfo.value.stderr


def test_missing_npm_executable(monkeypatch):
    def fake_run(cmd, **kwargs):
        raise FileNotFoundError(cmd[0])

    monkeypatch.setattr(npm.subprocess, "run", fake_run)

    with pytest.raises(NpmCommandError):
        NpmClient(npm="does-not-exist").list_installed(ListOptions())
