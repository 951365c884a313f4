# packages/circuits_builder/prover.py
import shutil

from . import config as cfg
from .context import BuildContext
from .errors import MissingPrerequisite, ToolFailure
from .host import require_supported_arch
from .log import get_logger, success
from .shell import run
from .utils.download import download_file

logger = get_logger("prover")

MAKE_TARGETS = {
    "x86_64": "host_linux_x86_64_static",
    "aarch64": "host_linux_arm64_static",
}


def download_gmp(ctx: BuildContext) -> None:
    archive = ctx.gmp_archive
    if archive.is_file():
        logger.info("GMP archive already exists, skipping download...")
        return
    logger.info("Downloading GMP archive...")
    download_file(cfg.GMP_URL, archive)
    success(logger, "GMP archive downloaded")


def build_gmp(ctx: BuildContext) -> None:
    logger.info("  Building GMP...")
    try:
        # a rebuild over an existing package exits non-zero, the package check below decides
        run(["./build_gmp.sh", "host"], cwd=ctx.rapidsnark_dir, check=False)
    except ToolFailure as exc:
        logger.warning("build_gmp.sh could not be started: %s", exc)

    gmp = ctx.rapidsnark_dir / "depends" / "gmp"
    if not (gmp / "package").is_dir():
        raise MissingPrerequisite("GMP package not found after build_gmp.sh")

    # CMake looks for package_aarch64 on ARM64 while build_gmp.sh host writes package
    if ctx.config.arch == "aarch64":
        alias = gmp / "package_aarch64"
        if not alias.exists() and not alias.is_symlink():
            logger.info("  Creating symlink for ARM64 GMP package...")
            alias.symlink_to("package")


def compile_prover_verifier(ctx: BuildContext) -> None:
    target = MAKE_TARGETS[require_supported_arch(ctx.config.arch)]
    makefile = ctx.resources_dir / "prover" / "Makefile"
    if not makefile.is_file():
        raise MissingPrerequisite(f"Prover Makefile not found: {makefile}")
    if not ctx.rapidsnark_dir.is_dir():
        raise MissingPrerequisite(f"rapidsnark checkout not found: {ctx.rapidsnark_dir}")

    logger.info("Compiling prover and verifier...")
    logger.info("  Replacing Makefile...")
    shutil.copyfile(makefile, ctx.rapidsnark_dir / "Makefile")

    download_gmp(ctx)
    build_gmp(ctx)

    logger.info("  Building prover and verifier (static) for %s...", ctx.config.arch)
    run(["make", target], cwd=ctx.rapidsnark_dir)

    success(logger, "Prover and verifier compiled")
