# packages/circuits_builder/release.py
"""Fetch a published circuits release for the current platform.

Each supported system maps to one archive on the GitHub releases page. The
archive is checked against a pinned SRI hash and unpacked with its top-level
directory stripped.
"""
import os
import tarfile
import tempfile
from pathlib import Path, PurePosixPath
from typing import Optional

import typer

from .errors import BuildError, PlatformError
from .hashes import file_sri, to_sri
from .host import detect_arch, detect_os
from .log import configure, get_logger, success
from .utils.download import download_file

logger = get_logger("release")

RELEASE_PROJECT = "logos-blockchain-circuits"
RELEASE_VERSION = os.getenv("CIRCUITS_RELEASE_VERSION", "0.3.2")
GITHUB_BASE = os.getenv(
    "CIRCUITS_RELEASE_BASE",
    "https://github.com/logos-blockchain/logos-blockchain-circuits/releases/download",
)

# system -> (os, arch) tokens used in the archive name
SYSTEMS = {
    "x86_64-linux": ("linux", "x86_64"),
    "aarch64-darwin": ("macos", "aarch64"),
    "x86_64-windows": ("windows", "x86_64"),
}

PINNED_HASHES = {
    "x86_64-linux": "sha256-80+GrB3kBhwLHvNemme5Vig6tPDRRZC7xHps0DNonzM=",
    "aarch64-darwin": "sha256-FbLgrHaa8djFEaA69WpZMB3uozkLT/abQiCWKrkzcsk=",
    "x86_64-windows": "sha256-VOBUXlXNHTY0l91G+B1vybDfES0Y0HXhUytJIfFEiBA=",
}

_SYSTEM_OS = {"linux": "linux", "macos": "darwin", "windows": "windows"}

app = typer.Typer(add_completion=False)


def archive_name(version: str, os_tag: str, arch: str) -> str:
    return f"{RELEASE_PROJECT}-v{version}-{os_tag}-{arch}.tar.gz"


def release_url(version: str, os_tag: str, arch: str, base: str = GITHUB_BASE) -> str:
    return f"{base}/v{version}/{archive_name(version, os_tag, arch)}"


def host_system() -> str:
    """The system string of this machine. Unsupported platforms are fatal here."""
    os_tag = detect_os()
    arch = detect_arch(strict=True)
    system = f"{arch}-{_SYSTEM_OS[os_tag]}"
    if system not in SYSTEMS:
        raise PlatformError(f"No circuits release for {system}")
    return system


def system_tokens(system: str) -> tuple[str, str]:
    try:
        return SYSTEMS[system]
    except KeyError:
        raise PlatformError(f"Unsupported system: {system}") from None


def _stripped_members(tar: tarfile.TarFile):
    for member in tar.getmembers():
        parts = PurePosixPath(member.name).parts[1:]
        if not parts:
            continue
        if any(p == ".." for p in parts) or PurePosixPath(member.name).is_absolute():
            raise BuildError(f"Refusing to extract unsafe path: {member.name}")
        member.name = PurePosixPath(*parts).as_posix()
        yield member


def unpack(archive: Path, dest: Path) -> Path:
    """Extract ``archive`` into ``dest``, dropping the leading path component."""
    dest.mkdir(parents=True, exist_ok=True)
    with tarfile.open(archive, "r:gz") as tar:
        members = list(_stripped_members(tar))
        if hasattr(tarfile, "data_filter"):
            tar.extractall(dest, members=members, filter="data")
        else:
            tar.extractall(dest, members=members)
    return dest


def verify(archive: Path, expected: str) -> None:
    try:
        expected = to_sri(expected)
    except ValueError as exc:
        raise BuildError(str(exc)) from exc
    actual = file_sri(archive)
    if actual != expected:
        raise BuildError(f"Hash mismatch for {archive.name}: expected {expected}, got {actual}")


def fetch_release(dest: Path, system: Optional[str] = None, version: str = RELEASE_VERSION,
                  expected_hash: Optional[str] = None) -> Path:
    system = system or host_system()
    os_tag, arch = system_tokens(system)
    if not expected_hash and version == RELEASE_VERSION:
        expected_hash = PINNED_HASHES.get(system)
    if not expected_hash:
        raise BuildError(f"No pinned hash for {system} at version {version}")

    url = release_url(version, os_tag, arch)
    logger.info("Fetching %s", url)
    with tempfile.TemporaryDirectory(prefix="circuits_") as tmp:
        archive = download_file(url, Path(tmp) / archive_name(version, os_tag, arch))
        verify(archive, expected_hash)
        unpack(archive, dest)
    success(logger, "Installed circuits %s for %s into %s", version, system, dest)
    return dest


@app.command()
def fetch(
    dest: Optional[Path] = typer.Argument(None, help="Directory to unpack the release into"),
    system: Optional[str] = typer.Option(None, "--system", help="Override the detected system, e.g. x86_64-linux"),
    version: str = typer.Option(RELEASE_VERSION, "--version"),
    sha256: Optional[str] = typer.Option(None, "--sha256", help="Expected hash, any form accepted by circuits-hash-to-sri"),
    print_url: bool = typer.Option(False, "--print-url", help="Only print the release URL"),
):
    try:
        if print_url:
            os_tag, arch = system_tokens(system or host_system())
            typer.echo(release_url(version, os_tag, arch))
            return
        if dest is None:
            raise BuildError("Missing destination directory")
        fetch_release(dest, system=system, version=version, expected_hash=sha256)
    except BuildError as exc:
        logger.error("%s", exc)
        raise typer.Exit(code=1)


def main() -> None:
    configure()
    app()


if __name__ == "__main__":
    main()
