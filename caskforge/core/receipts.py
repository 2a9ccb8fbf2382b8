"""Install receipts — one JSON file per package under the state directory.

A receipt is written as soon as a bundle is placed and updated once its
alias is linked.  On a repeated run it tells the installer whether an
existing bundle is one it placed for the same artifact (reuse it) or an
unrelated one (apply the overwrite policy).
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import ValidationError

from caskforge.models.install import InstallReceipt

logger = logging.getLogger(__name__)


class ReceiptStore:
    """Reads and writes install receipts.

    Parameters
    ----------
    base_path:
        Directory holding ``<identifier>.json`` receipts.  Created on
        first write.
    """

    def __init__(self, base_path: Path) -> None:
        self._base = Path(base_path)

    def _path(self, identifier: str) -> Path:
        return self._base / f"{identifier}.json"

    def load(self, identifier: str) -> InstallReceipt | None:
        """Return the receipt for *identifier*, or ``None`` if absent or unreadable."""
        path = self._path(identifier)
        if not path.exists():
            return None
        try:
            return InstallReceipt.model_validate_json(path.read_text(encoding="utf-8"))
        except ValidationError as exc:
            # An unreadable receipt cannot vouch for the bundle; treat as absent.
            logger.warning("Ignoring corrupt receipt %s: %s", path, exc)
            return None

    def save(self, receipt: InstallReceipt) -> Path:
        """Persist *receipt* atomically and return its path."""
        path = self._path(receipt.identifier)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(receipt.model_dump_json(indent=2) + "\n", encoding="utf-8")
        tmp.replace(path)
        logger.debug("Wrote receipt %s", path)
        return path
