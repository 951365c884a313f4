# packages/circuits_builder/container.py
"""Run the local build inside a container so the host stays untouched.

All command line arguments are forwarded to ``circuits-build`` in the
container. Environment switches:

  DOCKER_BUILD=0     reuse the existing image instead of rebuilding it
  DOCKER_NOCACHE=1   rebuild the image without the docker layer cache
  SKIP_INSTALL=true  copy the built bundle into CIRCUITS_INSTALL_DIR afterwards
                     (the name is historical: unset or false leaves the host alone)
"""
import os
import shutil
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import config as cfg
from .config import bundle_name
from .errors import BuildError, MissingPrerequisite
from .host import detect_arch
from .log import configure, get_logger, success
from .shell import run, which

logger = get_logger("container")

IMAGE_NAME = os.getenv("CIRCUITS_DOCKER_IMAGE", "logos-circuits-builder")
DOCKERFILE = Path("scripts") / "Dockerfile"
INSTALL_DIR = Path(os.getenv("CIRCUITS_INSTALL_DIR", str(Path.home() / ".nomos-circuits")))


def _flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes")


def check_docker() -> None:
    if not which("docker"):
        raise MissingPrerequisite("Docker is not installed. Please install Docker first.")
    try:
        run(["docker", "info"], capture=True)
    except BuildError:
        raise MissingPrerequisite("Docker daemon is not running. Please start Docker first.") from None


def build_image(root: Path, nocache: bool = False) -> None:
    logger.info("Building Docker image: %s", IMAGE_NAME)
    cmd = ["docker", "build"]
    if nocache:
        cmd.append("--no-cache")
    cmd += ["-t", IMAGE_NAME, "-f", str(DOCKERFILE), "."]
    run(cmd, cwd=root)
    success(logger, "Docker image built successfully")


def run_command(root: Path, args: Sequence[str], interactive: bool) -> list[str]:
    cmd = ["docker", "run", "--rm"]
    if interactive:
        cmd.append("-it")
    cmd += [
        "-v", f"{root}:/workspace",
        "-v", f"{root / '.docker-cache'}:/root/.cache",
        "-e", f"TERM={os.getenv('TERM', 'xterm')}",
        IMAGE_NAME,
    ]
    return cmd + list(args)


def install_bundle(root: Path, dest: Optional[Path] = None) -> Path:
    dest = dest or INSTALL_DIR
    # the container always builds the default local version for linux
    source = root / bundle_name(cfg.DEFAULT_VERSION, "linux", detect_arch(strict=False))
    if not source.is_dir():
        raise MissingPrerequisite(f"Bundle directory not found: {source}")
    logger.info("Installing built artifacts to %s", dest)
    shutil.copytree(source, dest, dirs_exist_ok=True)
    return dest


def _interactive() -> bool:
    return sys.stdin is not None and sys.stdin.isatty()


def docker_build(args: Sequence[str], root: Optional[Path] = None) -> None:
    root = root or cfg.project_root()
    check_docker()

    if _flag("DOCKER_BUILD", "1"):
        build_image(root, nocache=_flag("DOCKER_NOCACHE", "0"))
    else:
        logger.info("Skipping Docker image build (DOCKER_BUILD=0)")

    logger.info("Running build in Docker container...")
    logger.info("Arguments: %s", " ".join(args))
    run(run_command(root, args, interactive=_interactive()))
    success(logger, "Docker build completed!")

    if not _flag("SKIP_INSTALL", "false"):
        logger.info("Remember to install the built artifacts if needed.")
        return
    install_bundle(root)


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure()
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        docker_build(args)
    except BuildError as exc:
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
