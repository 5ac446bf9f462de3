"""Deal vault - saved deal sheets as JSON files on local disk.

One file per deal, named from the save time in epoch milliseconds. Records
are read back in directory order; callers sort with ``sort_by_timestamp``.
"""

import json
from pathlib import Path
from typing import Any, Union

from .common.models import Agreement, Trade, epoch_millis, utc_timestamp
from .common.safe_log import safe_log


def build_deal_sheet(agreement: Agreement, trade: Trade) -> dict[str, Any]:
    """Deal sheet record for a simulated trade on an agreement."""
    return {
        "id": f"deal-{epoch_millis()}",
        "title": f"{agreement.name} - Trade {trade.id[-4:]}",
        "trade": trade.to_dict(),
        "agreement": agreement.to_dict(),
        "timestamp": utc_timestamp(),
    }


def sort_by_timestamp(deals: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Newest first. ISO 8601 UTC timestamps sort correctly as strings."""
    return sorted(deals, key=lambda d: str(d.get("timestamp", "")), reverse=True)


class DealVault:
    """Directory-backed store of deal sheets."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory).expanduser()

    def save(self, deal: dict[str, Any]) -> Path:
        """Write a deal as ``deal-<epoch-millis>.json`` and return its path."""
        self.directory.mkdir(parents=True, exist_ok=True)

        stamp = epoch_millis()
        path = self.directory / f"deal-{stamp}.json"
        suffix = 1
        while path.exists():
            path = self.directory / f"deal-{stamp}-{suffix}.json"
            suffix += 1

        path.write_text(json.dumps(deal, indent=2, default=str), encoding="utf-8")
        safe_log("Saved deal to vault", path=str(path))
        return path

    def load_all(self) -> list[dict[str, Any]]:
        """Every saved deal, unsorted. Empty when the vault does not exist yet."""
        if not self.directory.exists():
            return []

        deals = []
        for path in self.directory.iterdir():
            if path.suffix != ".json" or not path.is_file():
                continue
            deals.append(json.loads(path.read_text(encoding="utf-8")))
        return deals
