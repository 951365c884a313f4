# packages/circuits_builder/config.py
import os
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

# --- Environment configuration ---
DEFAULT_VERSION = "v0.0.0-local"
BUNDLE_PROJECT = "nomos-circuits"

PTAU_URL = os.getenv("PTAU_URL", "https://storage.googleapis.com/zkevm/ptau/powersOfTau28_hez_final_17.ptau")
PTAU_FILE = os.getenv("PTAU_FILE", "powersOfTau28_hez_final_17.ptau")

GMP_VERSION = os.getenv("GMP_VERSION", "6.2.1")
GMP_URL = os.getenv("GMP_URL", f"https://ftpmirror.gnu.org/gmp/gmp-{GMP_VERSION}.tar.xz")

CIRCOM_REPO = os.getenv("CIRCOM_REPO", "https://github.com/iden3/circom.git")
SENTRY_DSN = os.getenv("SENTRY_DSN")


def project_root() -> Path:
    """Directory every relative path of the build is resolved against."""
    return Path(os.getenv("CIRCUITS_PROJECT_ROOT", os.getcwd())).resolve()


class BuildConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    version: str = DEFAULT_VERSION
    os: str = "linux"
    arch: str
    skip_deps: bool = False
    skip_circom: bool = False
    skip_snarkjs: bool = False
    skip_ptau: bool = False
    skip_proving_keys: bool = False
    skip_prover: bool = False
    skip_witness: bool = False
    circuit: Optional[str] = None
    clean: bool = False

    @property
    def bundle_name(self) -> str:
        return bundle_name(self.version, self.os, self.arch)

    @property
    def archive_name(self) -> str:
        return f"{self.bundle_name}.tar.gz"

    def skip_flags(self) -> dict[str, bool]:
        return {
            "Dependencies": self.skip_deps,
            "Circom": self.skip_circom,
            "snarkjs": self.skip_snarkjs,
            "Powers of Tau": self.skip_ptau,
            "Proving Keys": self.skip_proving_keys,
            "Prover/Verifier": self.skip_prover,
            "Witness Generators": self.skip_witness,
        }


def bundle_name(version: str, os_tag: str, arch: str) -> str:
    return f"{BUNDLE_PROJECT}-{version}-{os_tag}-{arch}"
