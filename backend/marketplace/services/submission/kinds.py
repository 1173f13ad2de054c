"""Record kinds: which form fields each kind takes and where its assets go."""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from marketplace.config import settings
from marketplace.services.publishers import PUBLISHER_NAMES
from marketplace.services.submission.validator import AssetRule


class FieldKind(str, Enum):
    TEXT = "text"
    OPTIONAL_TEXT = "optional_text"
    INT = "int"
    FLOAT = "float"
    LIST = "list"
    DEFAULTED = "defaulted"
    FLAG = "flag"


@dataclass(frozen=True)
class FieldSpec:
    name: str
    kind: FieldKind = FieldKind.OPTIONAL_TEXT
    required: bool = False
    default: Any = None
    choices: Optional[tuple[str, ...]] = None


@dataclass(frozen=True)
class AssetSlot:
    name: str
    bucket: str
    url_field: str
    key_tag: Optional[str]
    limit_setting: str
    accepted_type_prefix: str = "image/"
    allowed_extensions: tuple[str, ...] = ()

    def rule(self) -> AssetRule:
        """Build the rule from current settings so limits stay configurable."""
        return AssetRule.megabytes(
            getattr(settings, self.limit_setting),
            self.accepted_type_prefix,
            self.allowed_extensions,
        )


@dataclass(frozen=True)
class RecordKind:
    name: str
    label: str
    table: str
    fields: tuple[FieldSpec, ...]
    assets: tuple[AssetSlot, ...] = ()
    editable: bool = False

    def slot(self, name: str) -> Optional[AssetSlot]:
        for slot in self.assets:
            if slot.name == name:
                return slot
        return None


BOOK_CATEGORIES = (
    "Science & Technology",
    "Medicine & Healthcare",
    "Engineering",
    "Social Sciences",
    "Humanities",
    "Business & Economics",
    "Law",
    "Education",
)

ACCESS_LEVELS = ("Public", "Restricted", "Private")

DATASET_EXTENSIONS = (".csv", ".json", ".xlsx", ".hdf5", ".zip")

F = FieldKind

BOOK = RecordKind(
    name="book",
    label="Book",
    table="books",
    editable=True,
    fields=(
        FieldSpec("title", F.TEXT, required=True),
        FieldSpec("author", F.TEXT, required=True),
        FieldSpec("publisher", F.TEXT, required=True, choices=PUBLISHER_NAMES),
        FieldSpec("isbn"),
        FieldSpec("description"),
        FieldSpec("publication_year", F.INT),
        FieldSpec("edition"),
        FieldSpec("language", F.DEFAULTED, default="English"),
        FieldSpec("page_count", F.INT),
        FieldSpec("category", choices=BOOK_CATEGORIES),
        FieldSpec("price", F.FLOAT),
        FieldSpec("subject_area"),
    ),
    assets=(
        AssetSlot("cover_image", "book-covers", "cover_image_url", "cover", "COVER_MAX_MB"),
        AssetSlot("thumbnail", "thumbnails", "thumbnail_url", "thumb", "THUMBNAIL_MAX_MB"),
    ),
)

JOURNAL = RecordKind(
    name="journal",
    label="Journal",
    table="journals",
    fields=(
        FieldSpec("title", F.TEXT, required=True),
        FieldSpec("authors", F.LIST, required=True),
        FieldSpec("journal_name", F.TEXT, required=True),
        FieldSpec("volume"),
        FieldSpec("issue"),
        FieldSpec("pages"),
        FieldSpec("doi"),
        FieldSpec("abstract"),
        FieldSpec("publication_date"),
        FieldSpec("keywords_list", F.LIST),
        FieldSpec("citations_count", F.INT, default=0),
        FieldSpec("impact_factor", F.FLOAT),
        FieldSpec("category"),
        FieldSpec("open_access", F.FLAG, default=False),
        FieldSpec("peer_reviewed", F.FLAG, default=True),
    ),
    assets=(
        AssetSlot("thumbnail", "thumbnails", "thumbnail_url", "journal", "THUMBNAIL_MAX_MB"),
    ),
)

DATASET = RecordKind(
    name="dataset",
    label="Dataset",
    table="datasets",
    fields=(
        FieldSpec("title", F.TEXT, required=True),
        FieldSpec("description", F.TEXT, required=True),
        FieldSpec("data_type"),
        FieldSpec("file_format"),
        FieldSpec("size_mb", F.FLOAT),
        FieldSpec("keywords", F.LIST),
        FieldSpec("license"),
        FieldSpec("version"),
        FieldSpec("access_level", F.DEFAULTED, default="Public", choices=ACCESS_LEVELS),
        FieldSpec("doi"),
        FieldSpec("citation"),
        FieldSpec("contributor_name"),
    ),
    assets=(
        AssetSlot("thumbnail", "thumbnails", "thumbnail_url", "dataset", "THUMBNAIL_MAX_MB"),
        AssetSlot(
            "dataset_file", "dataset-files", "dataset_url", None, "DATASET_FILE_MAX_MB",
            accepted_type_prefix="", allowed_extensions=DATASET_EXTENSIONS,
        ),
    ),
)

KINDS = {kind.name: kind for kind in (BOOK, JOURNAL, DATASET)}
