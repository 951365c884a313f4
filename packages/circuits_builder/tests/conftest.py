import logging
import os
import subprocess
import sys
from pathlib import Path

import pytest

# allow "packages" imports
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "..")))

from circuits_builder import ceremony, pipeline, prover, toolchain, witness
from circuits_builder.config import BuildConfig
from circuits_builder.context import BuildContext
from circuits_builder.registry import DEFAULT_REGISTRY


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger = logging.getLogger("circuits_builder")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def project(tmp_path, monkeypatch):
    """A project root with circuit sources, Makefiles and a ptau file."""
    root = tmp_path / "project"
    for circuit in DEFAULT_REGISTRY.values():
        src = circuit.source_path(root)
        src.parent.mkdir(parents=True, exist_ok=True)
        src.write_text("pragma circom 2.1.0;\n")
    for kind in ("witness-generator", "prover"):
        mk = root / ".github" / "resources" / kind / "Makefile"
        mk.parent.mkdir(parents=True, exist_ok=True)
        mk.write_text(f"# {kind}\n")
    (root / "rapidsnark" / "depends").mkdir(parents=True)
    (root / "rapidsnark" / "depends" / "gmp-6.2.1.tar.xz").write_bytes(b"gmp")
    (root / "powersOfTau28_hez_final_17.ptau").write_bytes(b"ptau")
    monkeypatch.setenv("CIRCUITS_PROJECT_ROOT", str(root))
    return root


def make_ctx(root: Path, **overrides) -> BuildContext:
    overrides.setdefault("arch", "x86_64")
    return BuildContext(config=BuildConfig(**overrides), root=root)


class FakeTools:
    """Stands in for circom, snarkjs, make and friends.

    Every call is recorded; the commands that produce files create
    placeholder outputs so later stages find them.
    """

    def __init__(self):
        self.calls = []
        self.fail_on = None

    def __call__(self, cmd, cwd=None, env=None, input=None, check=True, capture=False):
        cmd = [str(c) for c in cmd]
        cwd = Path(cwd) if cwd else Path.cwd()
        self.calls.append({"cmd": cmd, "cwd": cwd, "input": input, "env": env})
        if self.fail_on and self.fail_on(cmd):
            from circuits_builder.errors import ToolFailure
            raise ToolFailure(cmd, 1)
        self._produce(cmd, cwd)
        return subprocess.CompletedProcess(cmd, 0)

    def _produce(self, cmd, cwd):
        tool = cmd[0]
        if tool == "circom" and "--version" not in cmd:
            stem = Path(cmd[-1]).stem
            (cwd / f"{stem}.r1cs").write_bytes(b"r1cs")
            if "--c" in cmd:
                (cwd / f"{stem}_cpp").mkdir(exist_ok=True)
        elif cmd[:3] == ["snarkjs", "groth16", "setup"]:
            (cwd / cmd[5]).write_bytes(b"zkey-0")
        elif cmd[:3] == ["snarkjs", "zkey", "contribute"]:
            (cwd / cmd[4]).write_bytes(b"zkey-final")
        elif cmd[:4] == ["snarkjs", "zkey", "export", "verificationkey"]:
            (cwd / cmd[5]).write_text("{}")
        elif tool == "make" and cmd[1].startswith("PROJECT="):
            project = cmd[1].split("=", 1)[1]
            (cwd / project).write_bytes(b"\x7fELF")
            (cwd / f"{project}.dat").write_bytes(b"dat")
        elif tool == "make" and cmd[1].startswith("host_"):
            bin_dir = cwd / "package" / "bin"
            bin_dir.mkdir(parents=True, exist_ok=True)
            (bin_dir / "prover").write_bytes(b"prover")
            (bin_dir / "verifier").write_bytes(b"verifier")
        elif tool == "./build_gmp.sh":
            (cwd / "depends" / "gmp" / "package").mkdir(parents=True, exist_ok=True)

    def commands(self, tool=None):
        return [c["cmd"] for c in self.calls if tool is None or c["cmd"][0] == tool]


@pytest.fixture
def tools(monkeypatch):
    fake = FakeTools()
    for module in (ceremony, witness, prover, toolchain, pipeline):
        monkeypatch.setattr(module, "run", fake)
    return fake


@pytest.fixture
def make_context(project):
    def factory(**overrides):
        return make_ctx(project, **overrides)
    return factory
