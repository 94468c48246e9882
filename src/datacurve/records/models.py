"""Dataset and curve record models persisted by DatasetRegistry."""

from dataclasses import asdict, dataclass
from typing import Any

from datacurve.curve.models import CurveReference


@dataclass
class DatasetRecord:
    """A dataset uploaded to blob storage."""

    title: str
    description: str
    format: str
    categories: list[str]
    size: int
    chain_id: int
    file_id: str
    blob_id: str | None
    blob_object_id: str | None
    original_filename: str
    upload_date: str  # ISO 8601, UTC

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DatasetRecord":
        return cls(**{k: data.get(k) for k in cls.__dataclass_fields__})


@dataclass
class CurveRecord:
    """The bonding curve token attached to a dataset.

    ``address`` is the curve object id; empty when the ledger was not
    configured for submission at upload time.
    """

    name: str
    symbol: str
    chain_id: int
    address: str = ""
    package_id: str = ""
    treasury_provider_id: str = ""

    @classmethod
    def for_dataset(
        cls,
        title: str,
        chain_id: int,
        reference: CurveReference | None = None,
    ) -> "CurveRecord":
        return cls(
            name=f"{title} Token",
            symbol=title[:3].upper(),
            chain_id=chain_id,
            address=reference.curve_object_id if reference else "",
            package_id=reference.package_id if reference else "",
            treasury_provider_id=reference.treasury_provider_id if reference else "",
        )

    @property
    def reference(self) -> CurveReference | None:
        if not self.address:
            return None
        return CurveReference(
            package_id=self.package_id,
            treasury_provider_id=self.treasury_provider_id,
            curve_object_id=self.address,
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CurveRecord":
        return cls(
            name=data.get("name", ""),
            symbol=data.get("symbol", ""),
            chain_id=data.get("chain_id", 0),
            address=data.get("address", ""),
            package_id=data.get("package_id", ""),
            treasury_provider_id=data.get("treasury_provider_id", ""),
        )
