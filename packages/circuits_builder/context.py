# packages/circuits_builder/context.py
from dataclasses import dataclass, field
from pathlib import Path

from . import config as cfg
from .config import BuildConfig
from .registry import DEFAULT_REGISTRY, CircuitDescriptor, CircuitRegistry


@dataclass(frozen=True)
class BuildContext:
    """Everything a stage reads: the config, the registry and the project root."""

    config: BuildConfig
    root: Path
    registry: CircuitRegistry = field(default_factory=lambda: DEFAULT_REGISTRY)

    def selected_circuits(self) -> list[CircuitDescriptor]:
        # Lookup happens here so an unknown --circuit fails in the stage that uses it.
        return self.registry.select(self.config.circuit)

    @property
    def ptau_path(self) -> Path:
        return self.root / cfg.PTAU_FILE

    @property
    def rapidsnark_dir(self) -> Path:
        return self.root / "rapidsnark"

    @property
    def gmp_archive(self) -> Path:
        return self.rapidsnark_dir / "depends" / f"gmp-{cfg.GMP_VERSION}.tar.xz"

    @property
    def circom_checkout(self) -> Path:
        return self.root / "circom"

    @property
    def resources_dir(self) -> Path:
        return self.root / ".github" / "resources"

    @property
    def prover_binary(self) -> Path:
        return self.rapidsnark_dir / "package" / "bin" / "prover"

    @property
    def verifier_binary(self) -> Path:
        return self.rapidsnark_dir / "package" / "bin" / "verifier"

    @property
    def bundle_dir(self) -> Path:
        return self.root / self.config.bundle_name

    @property
    def archive_path(self) -> Path:
        return self.root / self.config.archive_name
