"""Static package catalogue.

Prices are whole units of the payment currency and are the only source of a
booking's price: the client never supplies one.
"""

from dataclasses import dataclass

from .enums import PackageType


@dataclass(frozen=True)
class PackageInfo:
    """Display and pricing details for one package."""

    package_type: PackageType
    name: str
    duration: str
    price: int

    @property
    def label(self) -> str:
        return f"{self.name} ({self.duration})"


PACKAGES: dict[PackageType, PackageInfo] = {
    PackageType.PRESCHOOL: PackageInfo(PackageType.PRESCHOOL, "Preschool Special", "30-45 mins", 1200),
    PackageType.CLASSIC: PackageInfo(PackageType.CLASSIC, "Classic Show", "45-60 mins", 1800),
    PackageType.HALFDAY: PackageInfo(PackageType.HALFDAY, "Half-Day Experience", "4 hours", 2500),
}


def _lookup(package_type: str | PackageType | None) -> PackageInfo | None:
    if package_type is None:
        return None
    try:
        return PACKAGES[PackageType(package_type)]
    except ValueError:
        return None


def price_for_package(package_type: str | PackageType | None) -> int | None:
    """Return the fixed price for a package, or None if the key is unknown."""
    info = _lookup(package_type)
    return info.price if info else None


def package_label(package_type: str | PackageType) -> str:
    """Human-readable package label, falling back to the raw value."""
    info = _lookup(package_type)
    if info:
        return info.label
    return package_type.value if isinstance(package_type, PackageType) else str(package_type)
