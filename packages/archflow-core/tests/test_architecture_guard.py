from __future__ import annotations

import shutil
from pathlib import Path

import pytest

import archflow.core._architecture_guard as guard


def test_source_tree_passes(monkeypatch):
    monkeypatch.delenv("ARCHFLOW_STRICT_ARCH", raising=False)
    guard.assert_architecture()


def test_violations_are_reported(tmp_path, monkeypatch):
    src = Path(guard.__file__).resolve().parent
    pkg = tmp_path / "core"
    pkg.mkdir()
    shutil.copy(src / "_architecture_guard.py", pkg / "_architecture_guard.py")
    (pkg / "exception.py").write_text("class OkError(Exception):\n    pass\n", encoding="utf-8")
    (pkg / "spec.py").write_text("class OkSpec:\n    pass\n", encoding="utf-8")
    (pkg / "rogue.py").write_text(
        "class RogueError(ValueError):\n    pass\n\n\nclass RogueSpec:\n    pass\n",
        encoding="utf-8",
    )

    ns: dict = {"__file__": str(pkg / "_architecture_guard.py"), "__name__": "guard_copy"}
    exec(compile((pkg / "_architecture_guard.py").read_text(encoding="utf-8"), ns["__file__"], "exec"), ns)

    monkeypatch.delenv("ARCHFLOW_STRICT_ARCH", raising=False)
    with pytest.raises(RuntimeError) as ei:
        ns["assert_architecture"]()
    msg = str(ei.value)
    assert "RogueError" in msg
    assert "RogueSpec" in msg
    assert "OkError" not in msg

    monkeypatch.setenv("ARCHFLOW_STRICT_ARCH", "0")
    ns["assert_architecture"]()
