# packages/circuits_builder/witness.py
import shutil

from .context import BuildContext
from .errors import MissingPrerequisite
from .host import require_supported_arch
from .log import get_logger, success
from .registry import CircuitDescriptor
from .shell import run

logger = get_logger("witness")

# make targets of the custom witness generator Makefile, per architecture
MAKE_TARGETS = {
    "x86_64": "linux",
    "aarch64": "linux_arm64",
}


def witness_makefile(ctx: BuildContext):
    return ctx.resources_dir / "witness-generator" / "Makefile"


def compile_witness_generator(ctx: BuildContext, circuit: CircuitDescriptor) -> None:
    root = ctx.root
    workdir = circuit.directory(root)
    circuit.require_source(root)
    target = MAKE_TARGETS[require_supported_arch(ctx.config.arch)]
    makefile = witness_makefile(ctx)
    if not makefile.is_file():
        raise MissingPrerequisite(f"Witness generator Makefile not found: {makefile}")

    logger.info("Compiling witness generator for %s...", circuit.display_name)

    logger.info("  Generating C++ code...")
    run(["circom", "--c", "--r1cs", "--no_asm", "--O2", circuit.filename], cwd=workdir)

    logger.info("  Copying custom Makefile...")
    cpp_dir = circuit.cpp_dir(root)
    shutil.copyfile(makefile, cpp_dir / "Makefile")

    logger.info("  Compiling...")
    run(["make", f"PROJECT={circuit.name}", target], cwd=cpp_dir)

    success(logger, "Witness generator compiled for %s", circuit.display_name)
