# packages/circuits_builder/pipeline.py
"""Ordered build stages and the loop that drives them.

Every stage declares the paths it produces. A skipped stage whose outputs
must already exist (``require_on_skip``) aborts the build when they don't,
and a ``cacheable`` stage does no work when its outputs are present.
"""
import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from . import bundle, ceremony, host, prover, toolchain, witness
from .context import BuildContext
from .errors import BuildError, MissingPrerequisite
from .log import get_logger, success
from .registry import CircuitDescriptor
from .shell import run, which

logger = get_logger("pipeline")


class Status(str, Enum):
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StageResult:
    stage: str
    status: Status
    circuit: Optional[str] = None
    reason: Optional[str] = None

    def describe(self) -> str:
        label = f"{self.stage} [{self.circuit}]" if self.circuit else self.stage
        text = f"{label}: {self.status.value}"
        if self.reason:
            text += f" ({self.reason})"
        return text


class Stage:
    name = "stage"
    skip_flag: Optional[str] = None
    require_on_skip = False
    cacheable = False
    per_circuit = False

    def is_skipped(self, ctx: BuildContext) -> bool:
        return bool(self.skip_flag and getattr(ctx.config, self.skip_flag))

    def outputs(self, ctx: BuildContext, circuit: Optional[CircuitDescriptor] = None) -> list[Path]:
        return []

    def satisfied(self, ctx: BuildContext, circuit: Optional[CircuitDescriptor] = None) -> bool:
        paths = self.outputs(ctx, circuit)
        return bool(paths) and all(p.exists() for p in paths)

    def missing_message(self, ctx: BuildContext) -> str:
        missing = [str(p) for p in self.outputs(ctx) if not p.exists()]
        return f"{self.name}: required artifact not found: {', '.join(missing)}"

    def run(self, ctx: BuildContext, circuit: Optional[CircuitDescriptor] = None) -> None:
        raise NotImplementedError


class EnvironmentCheck(Stage):
    name = "Environment"

    def run(self, ctx, circuit=None):
        host.check_requirements(ctx.config.arch)


class Dependencies(Stage):
    name = "Dependencies"
    skip_flag = "skip_deps"

    def run(self, ctx, circuit=None):
        toolchain.install_dependencies(ctx)


class Submodules(Stage):
    name = "Submodules"

    def run(self, ctx, circuit=None):
        toolchain.init_submodules(ctx)


class ToolStage(Stage):
    tool = ""
    flag = ""
    require_on_skip = True

    def satisfied(self, ctx, circuit=None):
        return which(self.tool) is not None

    def missing_message(self, ctx):
        return f"{self.tool} not found in PATH. Please install it or remove {self.flag}"


class Circom(ToolStage):
    name = "Circom"
    skip_flag = "skip_circom"
    tool = "circom"
    flag = "--skip-circom"

    def run(self, ctx, circuit=None):
        toolchain.install_circom(ctx)


class Snarkjs(ToolStage):
    name = "snarkjs"
    skip_flag = "skip_snarkjs"
    tool = "snarkjs"
    flag = "--skip-snarkjs"

    def run(self, ctx, circuit=None):
        toolchain.install_snarkjs(ctx)


class PowersOfTau(Stage):
    name = "Powers of Tau"
    skip_flag = "skip_ptau"
    require_on_skip = True
    cacheable = True

    def outputs(self, ctx, circuit=None):
        return [ctx.ptau_path]

    def missing_message(self, ctx):
        return f"Powers of Tau file not found: {ctx.ptau_path}"

    def run(self, ctx, circuit=None):
        toolchain.download_ptau(ctx)


class ProvingKeys(Stage):
    name = "Proving Keys"
    skip_flag = "skip_proving_keys"
    per_circuit = True

    def outputs(self, ctx, circuit=None):
        if circuit is None:
            return []
        return [circuit.proving_key(ctx.root), circuit.verification_key(ctx.root)]

    def run(self, ctx, circuit=None):
        ceremony.generate_proving_key(ctx, circuit)


class ProverVerifier(Stage):
    name = "Prover/Verifier"
    skip_flag = "skip_prover"

    def outputs(self, ctx, circuit=None):
        return [ctx.prover_binary, ctx.verifier_binary]

    def run(self, ctx, circuit=None):
        prover.compile_prover_verifier(ctx)


class WitnessGenerators(Stage):
    name = "Witness Generators"
    skip_flag = "skip_witness"
    per_circuit = True

    def outputs(self, ctx, circuit=None):
        if circuit is None:
            return []
        return [circuit.witness_generator(ctx.root), circuit.witness_data(ctx.root)]

    def run(self, ctx, circuit=None):
        witness.compile_witness_generator(ctx, circuit)


class Bundle(Stage):
    name = "Bundle"

    def outputs(self, ctx, circuit=None):
        return [ctx.archive_path]

    def run(self, ctx, circuit=None):
        bundle.create_bundle(ctx)


DEFAULT_STAGES = (
    EnvironmentCheck(),
    Dependencies(),
    Submodules(),
    Circom(),
    Snarkjs(),
    PowersOfTau(),
    ProvingKeys(),
    ProverVerifier(),
    WitnessGenerators(),
    Bundle(),
)


def clean_artifacts(ctx: BuildContext) -> None:
    logger.info("Cleaning build artifacts...")
    root = ctx.root
    shutil.rmtree(ctx.circom_checkout, ignore_errors=True)

    if ctx.rapidsnark_dir.is_dir():
        try:
            run(["make", "clean"], cwd=ctx.rapidsnark_dir, check=False)
        except BuildError as exc:
            logger.warning("make clean failed in %s: %s", ctx.rapidsnark_dir, exc)

    for circuit in ctx.registry.values():
        shutil.rmtree(circuit.cpp_dir(root), ignore_errors=True)
        for path in (
            circuit.r1cs(root),
            circuit.proving_key(root),
            circuit.intermediate_zkey(root),
            circuit.verification_key(root),
        ):
            path.unlink(missing_ok=True)

    for pattern in ("nomos-circuits-*", "prover-*", "verifier-*", "witness-generators", "proving-keys"):
        for path in root.glob(pattern):
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            else:
                path.unlink(missing_ok=True)

    success(logger, "Cleaned build artifacts")


class Pipeline:
    def __init__(self, stages=DEFAULT_STAGES):
        self.stages = list(stages)
        self.results: list[StageResult] = []

    def _record(self, stage: Stage, status: Status, circuit=None, reason=None) -> None:
        key = circuit.key if circuit is not None else None
        self.results.append(StageResult(stage.name, status, key, reason))

    def _execute(self, stage: Stage, ctx: BuildContext, circuit=None) -> None:
        try:
            stage.run(ctx, circuit)
        except BuildError as exc:
            self._record(stage, Status.FAILED, circuit, str(exc))
            raise
        self._record(stage, Status.SUCCESS, circuit)

    def run_stage(self, stage: Stage, ctx: BuildContext) -> None:
        if stage.is_skipped(ctx):
            logger.info("Skipping %s...", stage.name)
            if stage.require_on_skip and not stage.satisfied(ctx):
                error = MissingPrerequisite(stage.missing_message(ctx))
                self._record(stage, Status.FAILED, reason=str(error))
                raise error
            self._record(stage, Status.SKIPPED, reason="skip flag")
            return

        if stage.cacheable and stage.satisfied(ctx):
            logger.info("%s already present, skipping...", stage.name)
            self._record(stage, Status.SKIPPED, reason="already present")
            return

        if not stage.per_circuit:
            self._execute(stage, ctx)
            return

        try:
            circuits = ctx.selected_circuits()
        except BuildError as exc:
            self._record(stage, Status.FAILED, reason=str(exc))
            raise
        for circuit in circuits:
            self._execute(stage, ctx, circuit)

    def run(self, ctx: BuildContext) -> list[StageResult]:
        """Run every stage in order. The first BuildError aborts the run."""
        self.results = []
        if ctx.config.clean:
            clean_artifacts(ctx)
        for stage in self.stages:
            self.run_stage(stage, ctx)
        return self.results
