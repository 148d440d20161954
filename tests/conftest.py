"""
Shared test fixtures and configuration.
"""

import shlex
import sys
import textwrap
from pathlib import Path

import pytest

# A stand-in for protoc: for every schema argument it writes
# <name>_pb2.py under --python_out, mirroring protoc's layout and its
# ``import "x/y.proto";`` -> ``from x import y_pb2`` translation.
FAKE_PROTOC = textwrap.dedent('''\
    import os
    import re
    import sys
    from pathlib import Path

    if os.environ.get("FAKE_PROTOC_FAIL"):
        sys.stderr.write("fake.proto:1:1: syntax error\\n")
        sys.exit(int(os.environ["FAKE_PROTOC_FAIL"]))

    proto_path = python_out = None
    schemas = []
    for arg in sys.argv[1:]:
        if arg.startswith("--proto_path="):
            proto_path = Path(arg.split("=", 1)[1])
        elif arg.startswith("--python_out="):
            python_out = Path(arg.split("=", 1)[1])
        elif not arg.startswith("--"):
            schemas.append(Path(arg))

    for schema in schemas:
        rel = schema.relative_to(proto_path)
        lines = [
            "# Generated by the protocol buffer compiler.  DO NOT EDIT!\\n",
            "from google.protobuf import descriptor as _descriptor\\n",
        ]
        for dep in re.findall(r'import "([^"]+)\\.proto";', schema.read_text()):
            parts = dep.split("/")
            package = ".".join(parts[:-1])
            module = parts[-1] + "_pb2"
            if package:
                lines.append(f"from {package} import {module} as {module}\\n")
            else:
                lines.append(f"import {module} as {module}\\n")
        lines.append("DESCRIPTOR = None\\n")
        target = python_out / rel.parent / (rel.stem + "_pb2.py")
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text("".join(lines))
''')


@pytest.fixture
def fake_protoc(tmp_path: Path) -> str:
    """Command string that runs the fake compiler."""
    script = tmp_path / "fake_protoc.py"
    script.write_text(FAKE_PROTOC)
    return f"{shlex.quote(sys.executable)} {shlex.quote(str(script))}"


@pytest.fixture
def proto_tree(tmp_path: Path) -> Path:
    """A schema root holding a/x.proto and a/b/y.proto (y imports x)."""
    root = tmp_path / "proto"
    (root / "a" / "b").mkdir(parents=True)
    (root / "a" / "x.proto").write_text('syntax = "proto3";\npackage a;\nmessage X {}\n')
    (root / "a" / "b" / "y.proto").write_text(
        'syntax = "proto3";\n'
        'import "a/x.proto";\n'
        'import "google/protobuf/any.proto";\n'
        "package a.b;\n"
        "message Y { a.X x = 1; }\n"
    )
    return root


@pytest.fixture
def build_yml(tmp_path: Path, proto_tree: Path, fake_protoc: str) -> Path:
    """A protopkg.yml wired to the fake compiler."""
    content = textwrap.dedent(f"""\
        source_dir: proto
        scratch_dir: protoc_out
        output_dir: mypkg
        prefix: "mypkg."
        protoc: {fake_protoc!r}
    """)
    path = tmp_path / "protopkg.yml"
    path.write_text(content)
    return path
