import json
import subprocess
import sys
from pathlib import Path
from unittest.mock import patch

import mcp_route_to_file

SCRIPT = Path(__file__).resolve().parent.parent / "mcp_route_to_file.py"


def _run(*args: str) -> subprocess.CompletedProcess:
    return subprocess.run(
        [sys.executable, str(SCRIPT), *args],
        capture_output=True,
        text=True,
    )


def test_cli_resolve_command(make_project):
    """Test CLI resolve subcommand."""
    root = make_project("pages/dashboard/settings.tsx")

    result = _run("resolve", "/dashboard/settings", "--project-root", str(root))

    assert result.returncode == 0
    output = json.loads(result.stdout)
    assert output["found"] is True
    assert output["confidence"] == "exact"
    assert output["relative_path"] == "pages/dashboard/settings.tsx"


def test_cli_resolve_keyword(make_project):
    root = make_project("src/views/user/List.vue", "src/views/user/Edit.vue")

    result = _run(
        "resolve", "/user/42", "--project-root", str(root), "--keyword", "list"
    )

    assert result.returncode == 0
    output = json.loads(result.stdout)
    assert output["relative_path"] == "src/views/user/List.vue"
    assert output["confidence"] == "keyword_unique"


def test_cli_resolve_text(make_project):
    root = make_project("views/.keep")

    result = _run("resolve", "/missing", "--project-root", str(root), "--text")

    assert result.returncode == 0
    assert result.stdout.startswith('No page source file found for route "/missing"')


def test_cli_candidates_command(make_project):
    """Test CLI candidates subcommand."""
    root = make_project("app/.keep", "src/views/.keep")

    result = _run("candidates", "/guild/salary", "--project-root", str(root))

    assert result.returncode == 0
    output = json.loads(result.stdout)
    assert [c["name"] for c in output["conventions"]] == ["next-app", "src-views"]
    assert output["candidates"][0].endswith("page.tsx")
    assert len(output["candidates"]) == 11


def test_cli_help():
    """Test CLI help output."""
    result = _run("-h")

    assert result.returncode == 0
    assert "Map a frontend route path" in result.stdout
    assert "resolve" in result.stdout
    assert "candidates" in result.stdout


def test_cli_in_process(make_project, capsys):
    """Test the CLI entry point without spawning a process."""
    root = make_project("views/about/index.vue")

    with patch(
        "sys.argv",
        ["mcp_route_to_file.py", "resolve", "/about", "--project-root", str(root)],
    ):
        mcp_route_to_file.main()

    output = json.loads(capsys.readouterr().out)
    assert output["relative_path"] == "views/about/index.vue"


def test_main_without_args_runs_server():
    with (
        patch("sys.argv", ["mcp_route_to_file.py"]),
        patch.object(mcp_route_to_file.mcp, "run") as mock_run,
    ):
        mcp_route_to_file.main()

    mock_run.assert_called_once_with()
