# packages/circuits_builder/registry.py
from pathlib import Path, PurePosixPath
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional

from pydantic import BaseModel, ConfigDict

from .errors import ConfigError, MissingPrerequisite, UnknownCircuit


class CircuitDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    source: str
    name: str
    display_name: str

    @property
    def filename(self) -> str:
        return PurePosixPath(self.source).name

    def directory(self, root: Path) -> Path:
        return root / PurePosixPath(self.source).parent

    def source_path(self, root: Path) -> Path:
        return root / self.source

    def require_source(self, root: Path) -> Path:
        path = self.source_path(root)
        if not path.is_file():
            raise MissingPrerequisite(f"Circuit source not found for {self.key}: {path}")
        return path

    # --- generated artifacts, all relative to the circuit directory ---

    def r1cs(self, root: Path) -> Path:
        return self.directory(root) / f"{self.name}.r1cs"

    def intermediate_zkey(self, root: Path) -> Path:
        return self.directory(root) / f"{self.key}-0.zkey"

    def proving_key(self, root: Path) -> Path:
        return self.directory(root) / f"{self.key}.zkey"

    def verification_key(self, root: Path) -> Path:
        return self.directory(root) / f"{self.key}_verification_key.json"

    def cpp_dir(self, root: Path) -> Path:
        return self.directory(root) / f"{self.name}_cpp"

    def witness_generator(self, root: Path) -> Path:
        return self.cpp_dir(root) / self.name

    def witness_data(self, root: Path) -> Path:
        return self.cpp_dir(root) / f"{self.name}.dat"


class CircuitRegistry(Mapping[str, CircuitDescriptor]):
    """Immutable catalog of the circuits a build iterates over."""

    def __init__(self, descriptors: Iterable[CircuitDescriptor]):
        table: dict[str, CircuitDescriptor] = {}
        for d in descriptors:
            if d.key in table:
                raise ConfigError(f"Duplicate circuit key: {d.key}")
            table[d.key] = d
        self._table = MappingProxyType(table)

    def __getitem__(self, key: str) -> CircuitDescriptor:
        return self._table[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def lookup(self, key: str) -> CircuitDescriptor:
        try:
            return self._table[key]
        except KeyError:
            raise UnknownCircuit(key) from None

    def select(self, key: Optional[str] = None) -> list[CircuitDescriptor]:
        """Every circuit, or only ``key`` when a single circuit was requested."""
        if key:
            return [self.lookup(key)]
        return list(self._table.values())


DEFAULT_REGISTRY = CircuitRegistry(
    [
        CircuitDescriptor(key="pol", source="mantle/pol.circom", name="pol", display_name="PoL"),
        CircuitDescriptor(key="poq", source="blend/poq.circom", name="poq", display_name="PoQ"),
        CircuitDescriptor(key="zksign", source="mantle/signature.circom", name="signature", display_name="ZKSign"),
        CircuitDescriptor(key="poc", source="mantle/poc.circom", name="poc", display_name="PoC"),
    ]
)
