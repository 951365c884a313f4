# packages/circuits_builder/host.py
import platform

from .errors import PlatformError
from .log import get_logger, success

logger = get_logger("host")

SUPPORTED_ARCHES = ("x86_64", "aarch64")

_OS_NAMES = {
    "linux": "linux",
    "darwin": "macos",
    "windows": "windows",
}

_ARCH_ALIASES = {
    "x86_64": "x86_64",
    "amd64": "x86_64",
    "aarch64": "aarch64",
    "arm64": "aarch64",
}


def detect_os(system: str | None = None) -> str:
    system = system if system is not None else platform.system()
    try:
        return _OS_NAMES[system.lower()]
    except KeyError:
        raise PlatformError(f"Unsupported OS: {system}") from None


def detect_arch(machine: str | None = None, strict: bool = True) -> str:
    """Normalize the CPU architecture.

    The release packaging path calls this strictly and refuses unknown
    machines. The local build path passes ``strict=False``: an unknown
    machine is logged and returned unchanged.
    """
    machine = machine if machine is not None else platform.machine()
    arch = _ARCH_ALIASES.get(machine.lower())
    if arch:
        return arch
    if strict:
        raise PlatformError(f"Unsupported architecture: {machine}")
    logger.warning("This script supports x86_64 and aarch64. Detected: %s", machine)
    return machine


def require_supported_arch(arch: str) -> str:
    """Used by the stages whose build targets only exist for known arches."""
    if arch not in SUPPORTED_ARCHES:
        raise PlatformError(f"No build target for architecture: {arch}")
    return arch


def check_requirements(arch: str, system: str | None = None) -> None:
    logger.info("Checking system requirements...")
    system = system if system is not None else platform.system()
    if system != "Linux":
        raise PlatformError(f"This script is designed for Linux. Detected: {system}")
    if arch in SUPPORTED_ARCHES:
        logger.info("Detected architecture: %s", arch)
    else:
        logger.warning("This script supports x86_64 and aarch64. Detected: %s", arch)
    success(logger, "System requirements check passed")
