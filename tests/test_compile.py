"""
Tests for compiler adapters and the compile service.
"""

import sys
from pathlib import Path

import pytest

from protopkg.adapters.base import ExecutionContext
from protopkg.adapters.mock import MockAdapter
from protopkg.adapters.protoc import ProtocAdapter, resolve_protoc
from protopkg.core.errors import BuildError, CompilerError
from protopkg.core.models.action import Action
from protopkg.core.services.compile import (
    build_protoc_args,
    compile_schemas,
    guard_scratch,
    prepare_scratch,
)


def _context(args: list[str], working_dir: str = ".") -> ExecutionContext:
    return ExecutionContext(
        action=Action(id="protoc", adapter="protoc", params={"args": args}),
        working_dir=working_dir,
    )


# ── Compiler resolution ──────────────────────────────────────────────


class TestResolveProtoc:
    def test_explicit_string_is_split(self):
        assert resolve_protoc("/opt/bin/protoc --fatal_warnings") == [
            "/opt/bin/protoc",
            "--fatal_warnings",
        ]

    def test_explicit_list(self):
        assert resolve_protoc(["a", "b"]) == ["a", "b"]

    def test_env_var(self, monkeypatch):
        monkeypatch.setenv("PROTOC", "/custom/protoc")
        assert resolve_protoc() == ["/custom/protoc"]

    def test_path_lookup(self, monkeypatch):
        monkeypatch.delenv("PROTOC", raising=False)
        monkeypatch.setattr("shutil.which", lambda name: f"/usr/bin/{name}")
        assert resolve_protoc() == ["/usr/bin/protoc"]

    def test_grpc_tools_fallback(self, monkeypatch):
        monkeypatch.delenv("PROTOC", raising=False)
        monkeypatch.setattr("shutil.which", lambda name: None)
        monkeypatch.setattr("importlib.util.find_spec", lambda name: object())
        assert resolve_protoc() == [sys.executable, "-m", "grpc_tools.protoc"]

    def test_nothing_found(self, monkeypatch):
        monkeypatch.delenv("PROTOC", raising=False)
        monkeypatch.setattr("shutil.which", lambda name: None)
        monkeypatch.setattr("importlib.util.find_spec", lambda name: None)
        assert resolve_protoc() is None


# ── Protoc adapter ───────────────────────────────────────────────────


class TestProtocAdapter:
    def test_success(self, tmp_path: Path):
        adapter = ProtocAdapter([sys.executable, "-c", "import sys; print(sys.argv[1:])"])
        receipt = adapter.execute(_context(["--python_out=x", "a.proto"], str(tmp_path)))
        assert receipt.ok
        assert receipt.return_code == 0
        assert "a.proto" in receipt.output
        assert receipt.args == ["--python_out=x", "a.proto"]
        assert receipt.command[0] == sys.executable

    def test_nonzero_exit(self, tmp_path: Path):
        script = "import sys; sys.stderr.write('bad.proto: boom'); sys.exit(3)"
        adapter = ProtocAdapter([sys.executable, "-c", script])
        receipt = adapter.execute(_context(["a.proto"], str(tmp_path)))
        assert receipt.failed
        assert receipt.return_code == 3
        assert "boom" in receipt.error

    def test_missing_executable(self, tmp_path: Path):
        adapter = ProtocAdapter(str(tmp_path / "no-such-protoc"))
        receipt = adapter.execute(_context(["a.proto"], str(tmp_path)))
        assert receipt.failed
        assert "Cannot run" in receipt.error
        assert receipt.return_code is None

    def test_validate_requires_args(self):
        adapter = ProtocAdapter([sys.executable])
        valid, msg = adapter.validate(_context([]))
        assert not valid
        assert "args" in msg

    def test_validate_bad_working_dir(self):
        adapter = ProtocAdapter([sys.executable])
        valid, msg = adapter.validate(_context(["a.proto"], "/nonexistent/path"))
        assert not valid
        assert "does not exist" in msg

    def test_is_available(self):
        assert ProtocAdapter([sys.executable]).is_available()
        assert not ProtocAdapter(["definitely-not-a-real-protoc-binary"]).is_available()
        assert ProtocAdapter([sys.executable]).name == "protoc"


# ── Mock adapter ─────────────────────────────────────────────────────


class TestMockAdapter:
    def test_writes_outputs_into_python_out(self, tmp_path: Path):
        mock = MockAdapter(outputs={"a/x_pb2.py": "X = 1\n"})
        receipt = mock.execute(_context([f"--python_out={tmp_path}", "x.proto"]))
        assert receipt.ok
        assert (tmp_path / "a" / "x_pb2.py").read_text() == "X = 1\n"
        assert mock.call_count == 1

    def test_failure(self):
        mock = MockAdapter()
        mock.set_failure(return_code=2, error="nope")
        receipt = mock.execute(_context(["x.proto"]))
        assert receipt.failed
        assert receipt.return_code == 2

    def test_reset(self):
        mock = MockAdapter()
        mock.set_failure()
        mock.execute(_context(["x.proto"]))
        mock.reset()
        assert mock.call_count == 0
        assert mock.execute(_context(["x.proto"])).ok


# ── Compile service ──────────────────────────────────────────────────


class TestPrepareScratch:
    def test_wipes_previous_contents(self, tmp_path: Path):
        scratch = tmp_path / "protoc_out"
        (scratch / "old").mkdir(parents=True)
        (scratch / "old" / "stale_pb2.py").write_text("")
        result = prepare_scratch(scratch)
        assert result == scratch.resolve()
        assert list(result.iterdir()) == []

    def test_creates_missing(self, tmp_path: Path):
        scratch = tmp_path / "deep" / "protoc_out"
        assert prepare_scratch(scratch).is_dir()

    def test_replaces_file(self, tmp_path: Path):
        scratch = tmp_path / "protoc_out"
        scratch.write_text("not a dir")
        assert prepare_scratch(scratch).is_dir()


class TestBuildProtocArgs:
    def test_flags_then_schemas(self, tmp_path: Path):
        args = build_protoc_args([Path("/s/a.proto"), Path("/s/b.proto")], Path("/s"), Path("/o"))
        assert args == ["--proto_path=/s", "--python_out=/o", "/s/a.proto", "/s/b.proto"]

    def test_optional_outputs(self):
        args = build_protoc_args([Path("/s/a.proto")], Path("/s"), Path("/o"), pyi=True, grpc=True)
        assert "--pyi_out=/o" in args
        assert "--grpc_python_out=/o" in args
        assert args[-1] == "/s/a.proto"


class TestCompileSchemas:
    def test_invokes_once_with_all_schemas(self, proto_tree: Path, tmp_path: Path):
        mock = MockAdapter()
        schemas = sorted(proto_tree.rglob("*.proto"))
        scratch = prepare_scratch(tmp_path / "scratch")
        receipt = compile_schemas(mock, schemas, proto_tree, scratch)
        assert receipt.ok
        assert mock.call_count == 1
        args = mock.call_log[0].action.args
        assert args[0] == f"--proto_path={proto_tree}"
        assert args[1] == f"--python_out={scratch}"
        assert args[2:] == [str(s) for s in schemas]

    def test_failure_raises_with_command_and_args(self, proto_tree: Path, tmp_path: Path):
        mock = MockAdapter()
        mock.set_failure(return_code=1, error="x.proto: syntax error")
        scratch = prepare_scratch(tmp_path / "scratch")
        with pytest.raises(CompilerError) as exc_info:
            compile_schemas(mock, [proto_tree / "a" / "x.proto"], proto_tree, scratch)
        err = exc_info.value
        assert "exited with code 1" in str(err)
        assert err.command == ["mock"]
        assert str(proto_tree / "a" / "x.proto") in err.compiler_args
        assert err.stderr == "x.proto: syntax error"

    def test_failure_is_logged(self, proto_tree: Path, tmp_path: Path, caplog):
        mock = MockAdapter()
        mock.set_failure()
        scratch = prepare_scratch(tmp_path / "scratch")
        with caplog.at_level("ERROR"), pytest.raises(CompilerError):
            compile_schemas(mock, [proto_tree / "a" / "x.proto"], proto_tree, scratch)
        assert "cmd: mock" in caplog.text
        assert "arg: --proto_path=" in caplog.text

    def test_unavailable_compiler(self, proto_tree: Path, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("PROTOC", raising=False)
        monkeypatch.setattr("shutil.which", lambda name: None)
        monkeypatch.setattr("importlib.util.find_spec", lambda name: None)
        with pytest.raises(CompilerError, match="protoc not found"):
            compile_schemas(
                ProtocAdapter(), [proto_tree / "a" / "x.proto"], proto_tree, tmp_path
            )


class TestGuardScratch:
    def test_equal_path_refused(self, tmp_path: Path):
        with pytest.raises(BuildError, match="schema source"):
            guard_scratch(tmp_path / "proto", {"schema source": tmp_path / "proto"})

    def test_ancestor_refused(self, tmp_path: Path):
        with pytest.raises(BuildError, match="output directory"):
            guard_scratch(tmp_path, {"output directory": tmp_path / "pkg" / "gen"})

    def test_descendant_allowed(self, tmp_path: Path):
        guard_scratch(tmp_path / "pkg" / "protoc_out", {"output directory": tmp_path / "pkg"})

    def test_sibling_allowed(self, tmp_path: Path):
        guard_scratch(
            tmp_path / "protoc_out",
            {"schema source": tmp_path / "proto", "output directory": tmp_path / "gen"},
        )


def test_execution_context_fields():
    assert set(ExecutionContext.model_fields) == {"action", "working_dir"}
