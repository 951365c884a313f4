# packages/circuits_builder/hashes.py
import base64
import binascii
import hashlib
import re
from pathlib import Path
from typing import List, Optional

import typer

SRI_PREFIX = "sha256-"
HEX_PREFIX = "sha256:"
_HEX_DIGEST = re.compile(r"^[0-9a-fA-F]{64}$")

app = typer.Typer(add_completion=False)


def to_sri(value: str) -> str:
    """Convert a sha256 digest to its SRI form (``sha256-<base64>``).

    Accepts a raw hex digest, a ``sha256:``-prefixed hex digest or a value
    that is already in SRI form.
    """
    value = value.strip()
    if value.startswith(SRI_PREFIX):
        encoded = value[len(SRI_PREFIX):]
        try:
            digest = base64.b64decode(encoded, validate=True)
        except binascii.Error as exc:
            raise ValueError(f"invalid SRI hash: {value}") from exc
        if len(digest) != hashlib.sha256().digest_size:
            raise ValueError(f"invalid SRI hash: {value}")
        return value
    if value.startswith(HEX_PREFIX):
        value = value[len(HEX_PREFIX):]
    if not _HEX_DIGEST.match(value):
        raise ValueError(f"invalid sha256 hex digest: {value}")
    return SRI_PREFIX + base64.b64encode(bytes.fromhex(value)).decode()


def file_sri(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(1 << 20), b""):
            h.update(chunk)
    return SRI_PREFIX + base64.b64encode(h.digest()).decode()


USAGE = "usage: circuits-hash-to-sri <sha256-hex | sha256:hex | sha256-SRI>"


@app.command()
def convert(digests: Optional[List[str]] = typer.Argument(None, help="sha256-hex | sha256:hex | sha256-SRI")):
    if not digests or len(digests) != 1:
        typer.echo(USAGE)
        raise typer.Exit(code=1)
    try:
        typer.echo(to_sri(digests[0]))
    except ValueError as exc:
        typer.echo(f"error: {exc}", err=True)
        raise typer.Exit(code=1)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
