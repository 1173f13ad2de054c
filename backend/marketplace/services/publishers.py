"""Publisher directory - the imprints books can be published under."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Publisher:
    slug: str
    name: str


PUBLISHERS: tuple[Publisher, ...] = (
    Publisher("dhara-sci-tech", "Dhara Sci Tech Publications"),
    Publisher("yar-tech", "Yar Tech Publications"),
    Publisher("am-technical", "AM Technical Publications"),
    Publisher("dhara-publications", "Dhara Publications"),
    Publisher("as-nextgen", "AS NextGen Publishing Home"),
)

PUBLISHER_NAMES: tuple[str, ...] = tuple(p.name for p in PUBLISHERS)

_BY_SLUG = {p.slug: p for p in PUBLISHERS}


def get_publisher(slug: Optional[str]) -> Optional[Publisher]:
    if not slug:
        return None
    return _BY_SLUG.get(slug)
