from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

import requests

from scanner.errors import FetchError

logger = logging.getLogger(__name__)

DEFAULT_CSV_URL = (
    "https://raw.githubusercontent.com/Azure/Azure-Verified-Modules/refs/heads/main/"
    "docs/static/module-indexes/TerraformResourceModules.csv"
)

DEFAULT_HEADERS = {"User-Agent": "avm-version-check/1.0 (+module-index-fetch)"}


def download_csv(url: str, path: str | Path, timeout: int = 60) -> Path:
    out = Path(path)
    try:
        resp = requests.get(url, headers=DEFAULT_HEADERS, timeout=timeout, stream=True)
    except requests.RequestException as exc:
        raise FetchError(f"failed to download CSV: {exc}") from exc

    with resp:
        if resp.status_code != 200:
            raise FetchError(f"failed to download CSV: received status code {resp.status_code}")
        out.parent.mkdir(parents=True, exist_ok=True)
        tmp = out.with_name(out.name + ".part")
        try:
            with tmp.open("wb") as fh:
                for chunk in resp.iter_content(chunk_size=64 * 1024):
                    if chunk:
                        fh.write(chunk)
            tmp.replace(out)
        except (OSError, requests.RequestException) as exc:
            tmp.unlink(missing_ok=True)
            raise FetchError(f"failed to save CSV: {exc}") from exc

    logger.info("Downloaded module index from %s to %s", url, out)
    return out


def download_csv_if_needed(url: str, path: str | Path, force: bool = False) -> Literal["downloaded", "skipped"]:
    out = Path(path)
    if out.exists() and not force:
        return "skipped"
    download_csv(url, out)
    return "downloaded"
