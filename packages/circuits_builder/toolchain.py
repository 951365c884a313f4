# packages/circuits_builder/toolchain.py
import os
from pathlib import Path

from . import config as cfg
from .context import BuildContext
from .errors import MissingPrerequisite
from .log import get_logger, success
from .shell import run, run_shell, which
from .utils.download import download_file

logger = get_logger("toolchain")

# Package managers in priority order, each with the command that installs the
# native build dependencies.
PACKAGE_MANAGERS = [
    (
        "apt-get",
        [
            ["sudo", "apt-get", "update", "-y"],
            ["sudo", "apt-get", "install", "-y", "build-essential", "cmake", "libgmp-dev", "libsodium-dev",
             "nasm", "curl", "m4", "nlohmann-json3-dev", "git"],
        ],
    ),
    (
        "dnf",
        [
            ["sudo", "dnf", "install", "-y", "gcc", "gcc-c++", "make", "cmake", "gmp-devel", "libsodium-devel",
             "nasm", "curl", "m4", "json-devel", "git"],
        ],
    ),
    (
        "pacman",
        [
            ["sudo", "pacman", "-S", "--noconfirm", "base-devel", "cmake", "gmp", "libsodium", "nasm", "curl",
             "m4", "nlohmann-json", "git"],
        ],
    ),
]

MANUAL_DEPENDENCIES = "build-essential, cmake, libgmp-dev, libsodium-dev, nasm, curl, m4, nlohmann-json3-dev, git"

NODESOURCE_SETUP = {
    "apt-get": "curl -fsSL https://deb.nodesource.com/setup_20.x | sudo -E bash -",
    "dnf": "curl -fsSL https://rpm.nodesource.com/setup_20.x | sudo bash -",
}

RUSTUP_INSTALL = "curl --proto '=https' --tlsv1.2 -sSf https://sh.rustup.rs | sh -s -- -y"


def detect_package_manager():
    for name, commands in PACKAGE_MANAGERS:
        if which(name):
            return name, commands
    return None, None


def install_dependencies(ctx: BuildContext) -> None:
    logger.info("Installing system dependencies...")
    manager, commands = detect_package_manager()
    if manager is None:
        raise MissingPrerequisite(
            f"Unsupported package manager. Please install dependencies manually: {MANUAL_DEPENDENCIES}"
        )
    for cmd in commands:
        run(cmd)
    success(logger, "System dependencies installed")


def export_cargo_path() -> Path:
    """Put ~/.cargo/bin on PATH for this process and every command it starts.

    rustup and `cargo install` write there, and later stages call circom by name.
    """
    cargo_bin = Path.home() / ".cargo" / "bin"
    entries = os.environ.get("PATH", "").split(os.pathsep)
    if str(cargo_bin) not in entries:
        os.environ["PATH"] = os.pathsep.join([str(cargo_bin)] + [e for e in entries if e])
    return cargo_bin


def install_circom(ctx: BuildContext) -> None:
    logger.info("Installing Circom...")
    if not which("cargo"):
        logger.info("Installing Rust...")
        run_shell(RUSTUP_INSTALL)

    checkout = ctx.circom_checkout
    if not checkout.is_dir():
        run(["git", "clone", cfg.CIRCOM_REPO, checkout])

    export_cargo_path()
    env = {"RUSTFLAGS": "-A dead_code"}
    run(["cargo", "build", "--release"], cwd=checkout, env=env)
    run(["cargo", "install", "--path", "circom"], cwd=checkout, env=env)
    run(["circom", "--version"])
    success(logger, "Circom installed successfully")


def install_snarkjs(ctx: BuildContext) -> None:
    logger.info("Installing snarkjs...")
    if not which("node"):
        logger.info("Installing Node.js...")
        manager = next((m for m in NODESOURCE_SETUP if which(m)), None)
        if manager is None:
            raise MissingPrerequisite("Please install Node.js 20 manually")
        run_shell(NODESOURCE_SETUP[manager])
        if manager == "apt-get":
            run(["sudo", "apt-get", "install", "-y", "nodejs"])
        else:
            run(["sudo", "dnf", "install", "-y", "nodejs"])

    run(["sudo", "npm", "install", "-g", "snarkjs@latest"])
    # snarkjs prints its banner and exits non-zero on --version
    run(["snarkjs", "--version"], check=False)
    success(logger, "snarkjs installed successfully")


def init_submodules(ctx: BuildContext) -> None:
    logger.info("Initializing git submodules...")
    run(["git", "submodule", "update", "--init", "--recursive"], cwd=ctx.root)
    success(logger, "Git submodules initialized")


def download_ptau(ctx: BuildContext) -> None:
    logger.info("Downloading Powers of Tau file (this may take a while, ~3GB)...")
    download_file(cfg.PTAU_URL, ctx.ptau_path)
    success(logger, "Powers of Tau file downloaded")
