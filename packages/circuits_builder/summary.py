# packages/circuits_builder/summary.py
from .context import BuildContext
from .log import get_logger, success

logger = get_logger("summary")

RULE = "=" * 42


def human_size(n: int) -> str:
    """Binary-prefixed size in the style of ``du -h``, which rounds up."""
    n = int(n)
    if n < 1024:
        return f"{n}B"
    for power, unit in enumerate("KMGTP", start=1):
        scale = 1024 ** power
        tenths = -(-n * 10 // scale)
        if tenths < 100:
            return f"{tenths // 10}.{tenths % 10}{unit}"
        whole = -(-n // scale)
        if whole < 1024 or unit == "P":
            return f"{whole}{unit}"


def print_summary(ctx: BuildContext, results=()) -> None:
    config = ctx.config
    logger.info(RULE)
    logger.info("Build Summary")
    logger.info(RULE)
    logger.info("Version: %s", config.version)
    logger.info("OS: %s", config.os)
    logger.info("Architecture: %s", config.arch)

    if config.circuit:
        logger.info("Built circuit: %s", config.circuit)
    else:
        logger.info("Built circuits: %s", ", ".join(ctx.registry))

    logger.info("Skip flags:")
    for label, value in config.skip_flags().items():
        logger.info("  - %s: %s", label, str(value).lower())

    if results:
        logger.info("Stages:")
        for result in results:
            logger.info("  - %s", result.describe())

    archive = ctx.archive_path
    if archive.is_file():
        success(logger, "Output bundle: %s (%s)", archive.name, human_size(archive.stat().st_size))
    logger.info(RULE)
