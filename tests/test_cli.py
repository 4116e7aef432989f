import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.dirname(CURRENT_DIR)
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

import pytest

import cli

QUEUE = """
package jobs;

public interface Queue {
    boolean offer(Object item);
    Object poll();
}
"""


@pytest.fixture
def src(tmp_path):
    root = tmp_path / "src"
    (root / "jobs").mkdir(parents=True)
    (root / "jobs" / "Queue.java").write_text(QUEUE, encoding="utf-8")
    return root


@pytest.mark.parametrize("argv", [[], ["only.One"], ["a.B", "out", "extra"], ["-jar", "a.B"]])
def test_usage_errors_exit_without_generation(argv, tmp_path, capsys):
    with pytest.raises(SystemExit) as exc:
        cli.main(argv)

    assert exc.value.code == 2
    assert "usage:" in capsys.readouterr().err


def test_generates_source(src, tmp_path, capsys):
    out = tmp_path / "out"
    code = cli.main(["-s", str(src), "jobs.Queue", str(out)])

    assert code == 0
    generated = out / "jobs" / "QueueImpl.java"
    assert generated.exists()
    assert str(generated) in capsys.readouterr().out
    assert "public boolean offer(java.lang.Object item) {" in generated.read_text(encoding="ascii")


def test_reports_unknown_type(src, tmp_path, capsys):
    code = cli.main(["--source-path", str(src), "jobs.Stack", str(tmp_path / "out")])

    assert code == 1
    assert "Error occurred while trying to implement" in capsys.readouterr().out
    assert not (tmp_path / "out").exists()
