# packages/circuits_builder/ceremony.py
"""Groth16 key generation for a single circuit.

The ceremony is deliberately minimal: a setup against the shared powers of
tau file followed by exactly one randomness contribution. Builds that need a
stronger trust model must add contribution rounds outside this tool.
"""
import secrets

from .context import BuildContext
from .errors import MissingPrerequisite
from .log import get_logger, success
from .registry import CircuitDescriptor
from .shell import run

logger = get_logger("ceremony")

CONTRIBUTOR_NAME = "LOCAL_BUILD"
ENTROPY_BYTES = 32
OPTIMIZATION = "--O2"


def contribution_entropy() -> str:
    return secrets.token_hex(ENTROPY_BYTES)


def generate_proving_key(ctx: BuildContext, circuit: CircuitDescriptor) -> None:
    root = ctx.root
    workdir = circuit.directory(root)
    circuit.require_source(root)
    if not ctx.ptau_path.is_file():
        raise MissingPrerequisite(f"Powers of Tau file not found: {ctx.ptau_path}")

    logger.info("Generating proving key for %s...", circuit.display_name)

    intermediate = circuit.intermediate_zkey(root)
    final = circuit.proving_key(root)
    try:
        logger.info("  Generating R1CS constraints...")
        run(["circom", "--r1cs", OPTIMIZATION, circuit.filename], cwd=workdir)

        logger.info("  Running Groth16 setup...")
        run(["snarkjs", "groth16", "setup", circuit.r1cs(root).name, ctx.ptau_path, intermediate.name], cwd=workdir)

        logger.info("  Contributing to ceremony...")
        run(
            ["snarkjs", "zkey", "contribute", intermediate.name, final.name, f"--name={CONTRIBUTOR_NAME}", "-v"],
            cwd=workdir,
            input=contribution_entropy() + "\n",
        )

        logger.info("  Exporting verification key...")
        run(
            ["snarkjs", "zkey", "export", "verificationkey", final.name, circuit.verification_key(root).name],
            cwd=workdir,
        )
    finally:
        # the pre-contribution key is never shipped
        intermediate.unlink(missing_ok=True)

    success(logger, "Proving key generated for %s", circuit.display_name)

