# packages/circuits_builder/cli.py
import sys
from typing import Optional, Sequence

import click
import sentry_sdk
import typer

from . import config as cfg
from .config import BuildConfig
from .context import BuildContext
from .errors import BuildError
from .host import detect_arch
from .log import configure, get_logger, success
from .pipeline import Pipeline
from .summary import print_summary

PROG_NAME = "circuits-build"

HELP = """Local build for the Logos blockchain circuits.

Replicates the release workflow: installs circom and snarkjs, downloads the
powers of tau file, runs the key ceremony, builds the prover, verifier and
witness generators, and packs everything into a versioned tarball.
"""

app = typer.Typer(add_completion=False, help=HELP)
logger = get_logger()


@app.command(context_settings={"help_option_names": ["--help"]})
def build(
    version: str = typer.Option(cfg.DEFAULT_VERSION, "--version", help="Set the version"),
    skip_deps: bool = typer.Option(False, "--skip-deps", help="Skip installing system dependencies"),
    skip_circom: bool = typer.Option(False, "--skip-circom", help="Skip Circom installation (assumes circom is in PATH)"),
    skip_snarkjs: bool = typer.Option(False, "--skip-snarkjs", help="Skip snarkjs installation (assumes snarkjs is in PATH)"),
    skip_ptau: bool = typer.Option(False, "--skip-ptau", help="Skip Powers of Tau download (assumes file exists)"),
    skip_proving_keys: bool = typer.Option(False, "--skip-proving-keys", help="Skip proving key generation"),
    skip_prover: bool = typer.Option(False, "--skip-prover", help="Skip prover/verifier compilation"),
    skip_witness: bool = typer.Option(False, "--skip-witness", help="Skip witness generator compilation"),
    circuit: Optional[str] = typer.Option(None, "--circuit", help="Build only specified circuit (pol, poq, zksign, poc)"),
    clean: bool = typer.Option(False, "--clean", help="Clean all build artifacts before building"),
):
    config = BuildConfig(
        version=version,
        arch=detect_arch(strict=False),
        skip_deps=skip_deps,
        skip_circom=skip_circom,
        skip_snarkjs=skip_snarkjs,
        skip_ptau=skip_ptau,
        skip_proving_keys=skip_proving_keys,
        skip_prover=skip_prover,
        skip_witness=skip_witness,
        circuit=circuit,
        clean=clean,
    )
    run_build(config)


def parse_args(tokens: Sequence[str]) -> BuildConfig:
    """Turn command tokens into a BuildConfig without running the build.

    Raises click.NoSuchOption for unknown flags and click.exceptions.Exit
    for --help.
    """
    command = typer.main.get_command(app)
    ctx = command.make_context(PROG_NAME, list(tokens))
    params = dict(ctx.params)
    return BuildConfig(arch=detect_arch(strict=False), **params)


def run_build(config: BuildConfig) -> None:
    ctx = BuildContext(config=config, root=cfg.project_root())
    logger.info("==========================================")
    logger.info("Logos Blockchain Circuits - Local Build")
    logger.info("==========================================")
    logger.info("Version: %s", config.version)
    logger.info("Starting build process...")

    pipeline = Pipeline()
    results = pipeline.run(ctx)
    print_summary(ctx, results)
    success(logger, "Build completed successfully!")


def main(argv: Optional[Sequence[str]] = None) -> int:
    configure()
    if cfg.SENTRY_DSN:
        sentry_sdk.init(dsn=cfg.SENTRY_DSN)
    args = list(sys.argv[1:] if argv is None else argv)
    try:
        app(args=args, prog_name=PROG_NAME, standalone_mode=False)
    except click.exceptions.NoSuchOption as exc:
        logger.error("Unknown option: %s", exc.option_name)
        return 1
    except click.exceptions.Exit as exc:
        return exc.exit_code
    except click.ClickException as exc:
        logger.error("%s", exc.format_message())
        return 1
    except BuildError as exc:
        sentry_sdk.capture_exception(exc)
        logger.error("%s", exc)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
