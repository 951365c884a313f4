# packages/circuits_builder/bundle.py
import os
import shutil
import stat
import tarfile
from pathlib import Path

from .context import BuildContext
from .log import get_logger, success

logger = get_logger("bundle")

LISTING_LIMIT = 50


def _copy(src: Path, dest: Path, executable: bool = False) -> bool:
    if not src.is_file():
        return False
    shutil.copyfile(src, dest)
    if executable:
        mode = dest.stat().st_mode
        dest.chmod(mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return True


def assemble_tree(ctx: BuildContext) -> Path:
    """Lay out the bundle directory. Missing per-circuit artifacts are skipped."""
    tree = ctx.bundle_dir
    if tree.exists():
        shutil.rmtree(tree)
    tree.mkdir(parents=True)

    (tree / "VERSION").write_text(f"{ctx.config.version}\n")

    if not ctx.config.skip_prover:
        logger.info("  Copying prover and verifier...")
        _copy(ctx.prover_binary, tree / "prover", executable=True)
        _copy(ctx.verifier_binary, tree / "verifier", executable=True)

    root = ctx.root
    for circuit in ctx.selected_circuits():
        logger.info("  Bundling %s...", circuit.display_name)
        out = tree / circuit.key
        out.mkdir()
        _copy(circuit.witness_generator(root), out / "witness_generator", executable=True)
        _copy(circuit.witness_data(root), out / "witness_generator.dat")
        _copy(circuit.proving_key(root), out / "proving_key.zkey")
        _copy(circuit.verification_key(root), out / "verification_key.json")
    return tree


def _normalize(info: tarfile.TarInfo) -> tarfile.TarInfo:
    info.uid = info.gid = 0
    info.uname = info.gname = ""
    return info


def archive_tree(tree: Path, archive: Path) -> Path:
    """Write ``tree`` as a gzip tarball whose single top-level entry is the tree name."""
    with tarfile.open(archive, "w:gz") as tar:
        tar.add(tree, arcname=tree.name, recursive=False, filter=_normalize)
        for dirpath, dirnames, filenames in os.walk(tree):
            dirnames.sort()
            base = Path(dirpath)
            for name in sorted(dirnames + filenames):
                path = base / name
                arcname = Path(tree.name) / path.relative_to(tree)
                tar.add(path, arcname=arcname.as_posix(), recursive=False, filter=_normalize)
    return archive


def list_archive(archive: Path, limit: int = LISTING_LIMIT) -> list[str]:
    with tarfile.open(archive, "r:gz") as tar:
        return tar.getnames()[:limit]


def create_bundle(ctx: BuildContext) -> Path:
    logger.info("Creating unified release bundle: %s", ctx.config.bundle_name)
    tree = assemble_tree(ctx)

    logger.info("  Creating tarball...")
    archive = archive_tree(tree, ctx.archive_path)
    success(logger, "Bundle created: %s", archive.name)

    logger.info("Bundle contents:")
    for name in list_archive(archive):
        logger.info("  %s", name)
    return archive
