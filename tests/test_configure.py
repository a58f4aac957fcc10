import json

import pytest

from expo_updates_setup import configure
from expo_updates_setup.configure import ConfigureState, UpdatesConfigurator
from expo_updates_setup.errors import (
    BuildPhaseNotFoundError,
    DirtyGitTreeError,
    DirtyTreeAbortedError,
)
from expo_updates_setup.types import Platform, UpdateConfig


def _write_project(root, *, dependencies: dict, expo: dict) -> None:
    (root / "package.json").write_text(json.dumps({"dependencies": dependencies}), encoding="utf-8")
    (root / "app.json").write_text(json.dumps({"expo": expo}), encoding="utf-8")


@pytest.fixture
def project(tmp_path):
    _write_project(
        tmp_path,
        dependencies={"expo-updates": "~0.5.0"},
        expo={"slug": "my-app", "sdkVersion": "40.0.0"},
    )
    return tmp_path


@pytest.fixture
def applied(monkeypatch) -> list[tuple[Platform, UpdateConfig]]:
    calls: list[tuple[Platform, UpdateConfig]] = []

    def fake_apply(project_dir, platform, config, verbose=False):
        _ = (project_dir, verbose)
        calls.append((platform, config))
        return ["changed"]

    monkeypatch.setattr(configure, "apply_platform_config", fake_apply)
    return calls


def _dirty(**_kwargs) -> None:
    raise DirtyGitTreeError("dirty")


def test_skips_when_expo_updates_not_installed(tmp_path, applied, monkeypatch) -> None:
    _write_project(tmp_path, dependencies={"expo": "^40.0.0"}, expo={"slug": "x"})
    monkeypatch.setattr(
        configure.git,
        "ensure_git_status_is_clean",
        lambda **_kwargs: pytest.fail("git must not be touched"),
    )

    state = configure.configure_updates(str(tmp_path), Platform.ANDROID, username="u")

    assert state is ConfigureState.DONE
    assert applied == []


def test_clean_tree_finishes_done(project, applied, monkeypatch) -> None:
    monkeypatch.setattr(configure.git, "ensure_git_status_is_clean", lambda **_kwargs: None)

    runner = UpdatesConfigurator(str(project), Platform.IOS, username="alice")
    assert runner.run() is ConfigureState.DONE
    assert runner.changed_paths == ["changed"]
    assert applied == [
        (
            Platform.IOS,
            UpdateConfig(sdk_version="40.0.0", update_url="https://exp.host/@alice/my-app"),
        )
    ]


def test_runtime_version_is_passed_through(tmp_path, applied, monkeypatch) -> None:
    _write_project(
        tmp_path,
        dependencies={"expo-updates": "~0.5.0"},
        expo={"slug": "my-app", "sdkVersion": "40.0.0", "runtimeVersion": "2.0"},
    )
    monkeypatch.setattr(configure.git, "ensure_git_status_is_clean", lambda **_kwargs: None)

    configure.configure_updates(str(tmp_path), Platform.ANDROID, username="bob")

    _platform, config = applied[0]
    assert config.runtime_version == "2.0"
    assert config.uses_runtime_version


def test_dirty_tree_is_reviewed_and_committed(project, applied, monkeypatch) -> None:
    reviewed: list[tuple[str, bool]] = []
    monkeypatch.setattr(configure.git, "ensure_git_status_is_clean", _dirty)
    monkeypatch.setattr(
        configure.git,
        "review_and_commit_changes",
        lambda message, non_interactive, cwd=None, verbose=False: reviewed.append(
            (message, non_interactive)
        ),
    )

    state = configure.configure_updates(
        str(project), Platform.ANDROID, username="u", non_interactive=True
    )

    assert state is ConfigureState.DONE
    assert reviewed == [("Configure expo-updates for Android", True)]


def test_aborted_review_fails(project, applied, monkeypatch) -> None:
    def abort(*_args, **_kwargs) -> None:
        raise DirtyTreeAbortedError("Aborted by user")

    monkeypatch.setattr(configure.git, "ensure_git_status_is_clean", _dirty)
    monkeypatch.setattr(configure.git, "review_and_commit_changes", abort)

    runner = UpdatesConfigurator(str(project), Platform.IOS, username="u")
    with pytest.raises(DirtyTreeAbortedError) as e:
        runner.run()

    assert "run the command again" in str(e.value)
    assert runner.state is ConfigureState.FAILED


def test_editor_failure_propagates_unchanged(project, monkeypatch) -> None:
    error = BuildPhaseNotFoundError("no phase")

    def fail(*_args, **_kwargs):
        raise error

    monkeypatch.setattr(configure, "apply_platform_config", fail)
    monkeypatch.setattr(
        configure.git,
        "ensure_git_status_is_clean",
        lambda **_kwargs: pytest.fail("git must not be touched"),
    )

    runner = UpdatesConfigurator(str(project), Platform.IOS, username="u")
    with pytest.raises(BuildPhaseNotFoundError) as e:
        runner.run()

    assert e.value is error
    assert runner.state is ConfigureState.FAILED


def test_end_to_end_android(project, monkeypatch) -> None:
    app = project / "android" / "app"
    (app / "src" / "main").mkdir(parents=True)
    (app / "build.gradle").write_text('apply plugin: "com.android.application"\n', encoding="utf-8")
    (app / "src" / "main" / "AndroidManifest.xml").write_text(
        "<manifest xmlns:android=\"http://schemas.android.com/apk/res/android\">\n"
        "    <application></application>\n"
        "</manifest>\n",
        encoding="utf-8",
    )
    monkeypatch.setattr(configure.git, "ensure_git_status_is_clean", lambda **_kwargs: None)

    configure.configure_updates(str(project), Platform.ANDROID, username="u")
    manifest = (app / "src" / "main" / "AndroidManifest.xml").read_text(encoding="utf-8")

    assert 'android:value="https://exp.host/@u/my-app"' in manifest
    assert 'android:value="40.0.0"' in manifest
    assert "EXPO_RUNTIME_VERSION" not in manifest
