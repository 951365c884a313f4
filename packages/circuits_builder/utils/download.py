import os
from pathlib import Path

import requests

from ..errors import BuildError
from ..log import get_logger

logger = get_logger("download")

DOWNLOAD_TIMEOUT = int(os.getenv("CIRCUITS_DOWNLOAD_TIMEOUT", "60"))
CHUNK_SIZE = 1 << 20


def download_file(url: str, dest: Path) -> Path:
    """Stream ``url`` into ``dest``.

    The body lands in a ``.part`` file first so an interrupted download never
    looks like a cached one.
    """
    dest = Path(dest)
    dest.parent.mkdir(parents=True, exist_ok=True)
    tmp = dest.with_name(dest.name + ".part")
    logger.debug("GET %s -> %s", url, dest)
    try:
        with requests.get(url, stream=True, timeout=DOWNLOAD_TIMEOUT, allow_redirects=True) as resp:
            resp.raise_for_status()
            with open(tmp, "wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
    except (requests.RequestException, OSError) as exc:
        tmp.unlink(missing_ok=True)
        raise BuildError(f"Download failed for {url}: {exc}") from exc
    tmp.replace(dest)
    return dest
