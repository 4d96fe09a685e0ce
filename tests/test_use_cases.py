"""
Tests for the create-project and setup-standards use cases.
"""

import json
import os
import stat

import pytest

from restbase.adapters.shell.command import ProcessResult, ProcessRunner
from restbase.core.errors import ProcessError, SecurityError, ValidationError
from restbase.core.models.config import GitConfig, ProjectDefaults, ScaffoldConfig
from restbase.core.use_cases.create_project import create_project
from restbase.core.use_cases.setup_standards import setup_standards


class ScriptedRunner(ProcessRunner):
    """Pretends every tool is installed; fails on a chosen subcommand."""

    def __init__(self, available=True, fail_on=None, creates=None):
        super().__init__()
        self.available = available
        self.fail_on = fail_on
        self.creates = creates or {}
        self.calls = []

    def is_available(self, executable):
        return self.available

    def spawn(self, argv, cwd, timeout=None):
        self.calls.append(list(argv))
        for rel in self.creates.get(argv[1], []):
            (cwd / rel).mkdir(parents=True, exist_ok=True)
        if argv[1] == self.fail_on:
            raise ProcessError(f"{argv[0]} {argv[1]} failed", argv=argv, returncode=1)
        return ProcessResult(argv=list(argv), returncode=0)


def _create(name, source_dir, config, cwd, **kwargs):
    return create_project(name, config=config, source_dir=source_dir, cwd=cwd, **kwargs)


class TestCreateProjectValidation:
    @pytest.mark.parametrize(
        "name", ["../evil", "a;b", "", ".hidden", "con", "%2e%2e%2fx", "node_modules"]
    )
    def test_bad_names_write_nothing(self, name, source_dir, config, workspace):
        with pytest.raises(ValidationError):
            _create(name, source_dir, config, workspace)
        assert list(workspace.iterdir()) == []

    def test_existing_directory(self, source_dir, config, workspace):
        (workspace / "taken").mkdir()
        (workspace / "taken" / "keep.txt").write_text("mine")
        with pytest.raises(ValidationError, match="already exists"):
            _create("taken", source_dir, config, workspace)
        assert (workspace / "taken" / "keep.txt").read_text() == "mine"

    def test_unknown_template(self, source_dir, config, workspace):
        with pytest.raises(ValidationError, match="unknown template"):
            _create("api", source_dir, config, workspace, template="nope")
        assert not (workspace / "api").exists()

    def test_missing_standards_file(self, source_dir, config, workspace):
        (source_dir / "validation.md").unlink()
        with pytest.raises(ValidationError, match="missing file"):
            _create("api", source_dir, config, workspace)
        assert not (workspace / "api").exists()

    def test_unsafe_package_manager_is_rejected_before_writing(
        self, source_dir, workspace
    ):
        config = ScaffoldConfig.model_validate(
            {"git": {"enabled": False}, "install": {"package_manager": "sh"}}
        )
        with pytest.raises(SecurityError):
            _create("api", source_dir, config, workspace, install=True)
        assert not (workspace / "api").exists()


class TestCreateProjectDryRun:
    def test_nothing_is_written(self, source_dir, config, workspace):
        result = _create("api", source_dir, config, workspace, dry_run=True)

        assert result.ok
        assert result.execution is None
        assert list(workspace.iterdir()) == []
        names = [p.name for p in result.plan.phases]
        assert names[0] == "Create project directory"
        assert "Write files" in names
        assert result.to_dict()["plan"]["operations"] == result.plan.operation_count


class TestCreateProject:
    def test_full_tree(self, source_dir, config, workspace):
        result = _create("orders-api", source_dir, config, workspace)

        assert result.ok, result.execution.to_dict()
        root = workspace / "orders-api"
        for rel in (
            "src/controllers",
            "src/utils",
            "tests/unit",
            "tests/fixtures",
            "public/styles",
            "docs/standards",
        ):
            assert (root / rel).is_dir(), rel
        for name in config.standards_files:
            assert (root / "docs" / "standards" / name).read_text() == f"# {name}\n"
        assert (root / ".gitignore").read_text() == "node_modules/\n"
        assert (root / ".markdownlint.json").is_file()
        assert (root / ".eslintrc.js").read_text().startswith("module.exports")
        assert json.loads((root / "package.json").read_text())["name"] == "orders-api"
        assert (root / "README.md").read_text().startswith("# orders-api")
        assert (root / "src" / "app.js").is_file()
        assert (root / ".env.example").is_file()

    def test_template_is_rendered_and_binaries_copied(self, source_dir, workspace):
        config = ScaffoldConfig(
            project=ProjectDefaults(author="Ada"), git=GitConfig(enabled=False)
        )
        result = _create("shop", source_dir, config, workspace, template="basic")

        assert result.ok
        root = workspace / "shop"
        assert (root / "src" / "routes" / "users.js").read_text() == (
            "// routes for shop by Ada\n"
        )
        assert (root / "docs" / "logo.bin").read_bytes() == b"\xff\xfe\x00binary"

    def test_template_file_replaces_generated_file(self, source_dir, config, workspace):
        (source_dir / "templates" / "basic" / "README.md").write_text("# {{projectName}}!\n")
        result = _create("shop", source_dir, config, workspace, template="basic")
        assert result.ok
        assert (workspace / "shop" / "README.md").read_text() == "# shop!\n"

    def test_git_steps_run_last_in_order(self, source_dir, workspace):
        runner = ScriptedRunner()
        result = _create("api", source_dir, ScaffoldConfig(), workspace, runner=runner)
        assert result.ok
        assert runner.calls == [
            ["git", "init"],
            ["git", "add", "-A"],
            ["git", "commit", "-m", "Initial commit with REST-Base standards"],
        ]
        assert [p.name for p in result.plan.phases][-3:] == [
            "git init",
            "git add -A",
            "git commit",
        ]

    def test_missing_git_is_a_warning(self, source_dir, workspace):
        runner = ScriptedRunner(available=False)
        result = _create("api", source_dir, ScaffoldConfig(), workspace, runner=runner)
        assert result.ok
        assert any("git not found" in w for w in result.warnings)
        assert runner.calls == []

    def test_failed_commit_removes_everything(self, source_dir, workspace):
        runner = ScriptedRunner(fail_on="commit", creates={"init": [".git"]})
        result = _create("api", source_dir, ScaffoldConfig(), workspace, runner=runner)

        assert not result.ok
        assert isinstance(result.execution.cause, ProcessError)
        assert result.execution.rollback.clean
        assert not (workspace / "api").exists()

    def test_install_phase(self, source_dir, config, workspace):
        runner = ScriptedRunner()
        result = _create("api", source_dir, config, workspace, runner=runner, install=True)
        assert result.ok
        assert runner.calls == [["npm", "install"]]


def _setup(project, **kwargs):
    """Run setup-standards on ``project`` given relative to its parent."""
    return setup_standards(project.name, cwd=project.parent, **kwargs)


@pytest.fixture
def npm_project(tmp_path):
    root = tmp_path / "existing"
    root.mkdir()
    (root / "package.json").write_text(
        json.dumps({"name": "legacy", "scripts": {"start": "node index.js"}}, indent=2)
    )
    (root / ".gitignore").write_text("dist/\n")
    (root / "index.js").write_text("console.log('hi');\n")
    return root


class TestSetupStandards:
    def test_adds_standards_and_keeps_the_rest(self, npm_project, source_dir, config):
        result = _setup(
            npm_project, config=config, source_dir=source_dir, skip_install=True
        )

        assert result.ok
        manifest = json.loads((npm_project / "package.json").read_text())
        assert manifest["name"] == "legacy"
        assert manifest["scripts"]["start"] == "node index.js"
        assert manifest["scripts"]["lint"] == "npm run lint:md && npm run lint:js"
        assert (npm_project / ".gitignore").read_text() == "node_modules/\n"
        assert (npm_project / ".eslintrc.js").is_file()
        assert (npm_project / "docs" / "standards" / "CLAUDE.md").is_file()
        assert (npm_project / "index.js").read_text() == "console.log('hi');\n"

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_rewritten_files_keep_their_mode(self, npm_project, source_dir, config):
        (npm_project / "package.json").chmod(0o600)
        (npm_project / ".gitignore").chmod(0o640)

        result = _setup(npm_project, config=config, source_dir=source_dir, skip_install=True)

        assert result.ok
        assert stat.S_IMODE((npm_project / "package.json").stat().st_mode) == 0o600
        assert stat.S_IMODE((npm_project / ".gitignore").stat().st_mode) == 0o640

    def test_failed_install_restores_the_project(
        self, npm_project, source_dir, config, tree_snapshot
    ):
        before = tree_snapshot(npm_project)
        runner = ScriptedRunner(fail_on="install", creates={"install": ["node_modules"]})

        result = _setup(
            npm_project, config=config, source_dir=source_dir, runner=runner
        )

        assert not result.ok
        assert runner.calls[0][:3] == ["npm", "install", "--save-dev"]
        assert result.execution.rollback.clean
        assert not result.left_behind
        assert tree_snapshot(npm_project) == before

    def test_failed_install_restores_existing_lock_file_and_modules(
        self, npm_project, source_dir, config, tree_snapshot
    ):
        (npm_project / "package-lock.json").write_text('{"lockfileVersion": 2}\n')
        (npm_project / "node_modules" / "left-pad").mkdir(parents=True)
        (npm_project / "node_modules" / "left-pad" / "index.js").write_text("pad\n")
        before = tree_snapshot(npm_project)

        class LockRewritingRunner(ScriptedRunner):
            def spawn(self, argv, cwd, timeout=None):
                (cwd / "package-lock.json").write_text('{"lockfileVersion": 3}\n')
                (cwd / "node_modules" / "left-pad" / "index.js").unlink()
                (cwd / "node_modules" / "eslint").mkdir()
                return super().spawn(argv, cwd, timeout)

        result = _setup(
            npm_project,
            config=config,
            source_dir=source_dir,
            runner=LockRewritingRunner(fail_on="install"),
        )

        assert not result.ok
        assert result.execution.cause.cleanup_error is None
        assert not result.left_behind
        assert tree_snapshot(npm_project) == before

    def test_cleanup_failure_counts_as_left_behind(
        self, npm_project, source_dir, config, monkeypatch
    ):
        def stuck(path, *args, **kwargs):
            raise PermissionError(13, "Permission denied", str(path))

        monkeypatch.setattr("restbase.adapters.shell.command.shutil.rmtree", stuck)
        runner = ScriptedRunner(fail_on="install", creates={"install": ["node_modules"]})

        result = _setup(npm_project, config=config, source_dir=source_dir, runner=runner)

        assert not result.ok
        assert result.execution.rollback.clean
        assert "node_modules" in result.execution.cause.cleanup_error
        assert result.left_behind
        assert result.to_dict()["execution"]["cause"]["cleanup_error"]

    @pytest.mark.parametrize("target", ["../outside", "existing/../../outside"])
    def test_target_outside_cwd_is_refused(self, tmp_path, source_dir, config, target):
        work = tmp_path / "work"
        (work / "existing").mkdir(parents=True)
        outside = tmp_path / "outside"
        outside.mkdir()
        (outside / "package.json").write_text('{"name": "victim"}')

        with pytest.raises(SecurityError):
            setup_standards(target, config=config, source_dir=source_dir, cwd=work)
        assert sorted(p.name for p in outside.iterdir()) == ["package.json"]

    def test_absolute_target_is_refused(self, npm_project, source_dir, config):
        with pytest.raises(SecurityError):
            setup_standards(
                str(npm_project), config=config, source_dir=source_dir, cwd=npm_project.parent
            )

    def test_target_must_be_a_directory(self, npm_project, source_dir, config):
        with pytest.raises(ValidationError, match="not a directory"):
            setup_standards(
                "existing/index.js",
                config=config,
                source_dir=source_dir,
                cwd=npm_project.parent,
            )

    def test_no_rollback_leaves_changes(self, npm_project, source_dir, config):
        runner = ScriptedRunner(fail_on="install")
        result = _setup(
            npm_project,
            config=config,
            source_dir=source_dir,
            runner=runner,
            rollback=False,
        )
        assert not result.ok
        assert result.execution.rollback is None
        assert result.left_behind
        assert (npm_project / ".eslintrc.js").is_file()

    def test_requires_package_json(self, tmp_path, source_dir, config, tree_snapshot):
        before = tree_snapshot(tmp_path)
        with pytest.raises(ValidationError, match="No package.json found"):
            setup_standards(".", config=config, source_dir=source_dir, cwd=tmp_path)
        assert tree_snapshot(tmp_path) == before

    def test_invalid_package_json(self, npm_project, source_dir, config):
        (npm_project / "package.json").write_text("{not json")
        with pytest.raises(ValidationError, match="invalid JSON"):
            _setup(npm_project, config=config, source_dir=source_dir)

    def test_missing_package_manager_is_a_warning(self, npm_project, source_dir, config):
        result = _setup(
            npm_project,
            config=config,
            source_dir=source_dir,
            runner=ScriptedRunner(available=False),
        )
        assert result.ok
        assert any("npm not found" in w for w in result.warnings)

    def test_dry_run(self, npm_project, source_dir, config, tree_snapshot):
        before = tree_snapshot(npm_project)
        result = _setup(
            npm_project, config=config, source_dir=source_dir, dry_run=True
        )
        assert result.ok
        assert tree_snapshot(npm_project) == before
