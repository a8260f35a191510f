"""
CLI tests.

Child command output bypasses CliRunner (it goes to the real file
descriptors), so commands here write to files instead of stdout.
"""
import textwrap

import pytest
from click.testing import CliRunner

from rayder.cli import cli


@pytest.fixture
def runner():
    return CliRunner()


def write_workflow(tmp_path, body):
    path = tmp_path / "workflow.yaml"
    path.write_text(textwrap.dedent(body))
    return path


def test_successful_run(runner, tmp_path):
    path = write_workflow(tmp_path, f"""
        vars:
          OUT: {tmp_path}/default.txt
        modules:
          - name: write
            cmds:
              - echo {{{{WORD}}}} > {{{{OUT}}}}
    """)
    result = runner.invoke(cli, ["-q", "-w", str(path), "WORD=hello"])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "default.txt").read_text().strip() == "hello"
    assert "Module 'write' completed" in result.output
    assert "All modules completed successfully" in result.output


def test_failure_exit_status(runner, tmp_path):
    path = write_workflow(tmp_path, f"""
        modules:
          - name: A
            cmds: ["true"]
          - name: B
            required: [A]
            cmds: ["false"]
          - name: C
            required: [B]
            cmds: ["touch {tmp_path}/c-ran"]
    """)
    result = runner.invoke(cli, ["-q", "-w", str(path)])

    assert result.exit_code == 1
    assert (tmp_path / "c-ran").exists()
    assert "Module 'B' errored" in result.output
    assert "Errors occurred during execution" in result.output


def test_success_only_policy(runner, tmp_path):
    path = write_workflow(tmp_path, f"""
        modules:
          - name: B
            cmds: ["false"]
          - name: C
            required: [B]
            cmds: ["touch {tmp_path}/c-ran"]
    """)
    result = runner.invoke(cli, ["-q", "--dependency-policy", "success", "-w", str(path)])

    assert result.exit_code == 1
    assert not (tmp_path / "c-ran").exists()
    assert "Skipping Module 'C'" in result.output


def test_parallelism_option(runner, tmp_path):
    path = write_workflow(tmp_path, f"""
        modules:
          - name: one
            parallel: true
            cmds: ["touch {tmp_path}/one"]
          - name: two
            parallel: true
            cmds: ["touch {tmp_path}/two"]
    """)
    result = runner.invoke(cli, ["-q", "-p", "2", "-w", str(path)])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "one").exists() and (tmp_path / "two").exists()


def test_parallelism_must_be_positive(runner, tmp_path):
    path = write_workflow(tmp_path, "modules: []\n")
    result = runner.invoke(cli, ["-q", "-p", "0", "-w", str(path)])
    assert result.exit_code == 2


def test_banner_unless_quiet(runner, tmp_path):
    path = write_workflow(tmp_path, "modules: []\n")

    loud = runner.invoke(cli, ["-w", str(path)])
    quiet = runner.invoke(cli, ["-q", "-w", str(path)])

    assert "/____/" in loud.output
    assert "/____/" not in quiet.output


def test_usage(runner, tmp_path):
    path = write_workflow(tmp_path, f"""
        vars:
          DOMAIN: example.host
          USAGE: "rayder -w workflow.yaml DOMAIN=target"
        modules:
          - name: never
            cmds: ["touch {tmp_path}/ran"]
    """)
    result = runner.invoke(cli, ["-q", "-w", str(path), "usage"])

    assert result.exit_code == 0
    assert "rayder -w workflow.yaml DOMAIN=target" in result.output
    assert "DOMAIN: example.host" in result.output
    assert "USAGE:" not in result.output
    assert not (tmp_path / "ran").exists()


def test_missing_workflow_file(runner, tmp_path):
    result = runner.invoke(cli, ["-q", "-w", str(tmp_path / "missing.yaml")])
    assert result.exit_code == 1
    assert "Failed to load workflow" in result.output


def test_invalid_workflow_is_fatal_before_dispatch(runner, tmp_path):
    path = write_workflow(tmp_path, "modules: {not: a list}\n")
    result = runner.invoke(cli, ["-q", "-w", str(path)])
    assert result.exit_code == 1
    assert "modules must be a list" in result.output


def test_workflow_option_required(runner):
    result = runner.invoke(cli, [])
    assert result.exit_code == 2


def test_debug_shows_failed_command(runner, tmp_path):
    path = write_workflow(tmp_path, """
        modules:
          - name: bad
            silent: true
            cmds: ["exit 7"]
    """)
    result = runner.invoke(cli, ["-q", "--debug", "-w", str(path)])
    assert result.exit_code == 1
    assert "command failed (exit=7): exit 7" in result.output


def test_unexpected_error_exits_one(runner, tmp_path, monkeypatch):
    import rayder.cli

    def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(rayder.cli, "run_workflow", boom)
    path = write_workflow(tmp_path, "modules: []\n")
    result = runner.invoke(cli, ["-q", "-w", str(path)])
    assert result.exit_code == 1
    assert "Error: boom" in result.output


def test_unquoted_yaml_words_run_verbatim(runner, tmp_path):
    path = write_workflow(tmp_path, f"""
        vars:
          MASK: 0755
        modules:
          - name: A
            cmds: [true]
          - name: B
            cmds:
              - touch {tmp_path}/f
              - chmod {{{{MASK}}}} {tmp_path}/f
    """)
    result = runner.invoke(cli, ["-q", "-w", str(path)])

    assert result.exit_code == 0, result.output
    assert oct((tmp_path / "f").stat().st_mode & 0o777) == "0o755"
