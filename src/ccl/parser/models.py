"""Pydantic models for the parsed Commerce Control List."""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class CclModel(BaseModel):
    """Base model: camelCase aliases, absent fields dropped on dump."""

    model_config = ConfigDict(populate_by_name=True)

    def to_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class ContentBlock(CclModel):
    """A piece of ECCN content: plain text or rendered markup."""

    type: Literal["text", "html"]
    tag: Optional[str] = None
    html: Optional[str] = None
    text: Optional[str] = None
    id: Optional[str] = None

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "type": "html",
                "tag": "P",
                "html": '<P ID="3b001d"><E T="03">d.</E> Control systems</P>',
                "text": "d. Control systems",
                "id": "3b001d",
            }
        },
    )


class EccnNode(CclModel):
    """Serialized outline node, nested for display."""

    identifier: Optional[str] = None
    label: Optional[str] = None
    heading: Optional[str] = None
    content: Optional[List[ContentBlock]] = None
    children: Optional[List["EccnNode"]] = None
    # True for every node with an identifier; bound children are still never
    # emitted as standalone entries.
    is_eccn: bool = Field(default=False, alias="isEccn")
    bound_to_parent: bool = Field(default=False, alias="boundToParent")
    require_all_children: Optional[bool] = Field(default=None, alias="requireAllChildren")


EccnNode.model_rebuild()


class SupplementRef(CclModel):
    """The supplement an entry was parsed from."""

    number: str
    heading: Optional[str] = None


class EccnEntry(CclModel):
    """One addressable ECCN in the flattened catalog."""

    eccn: str
    heading: Optional[str] = None
    title: Optional[str] = None
    category: Optional[str] = None
    group: Optional[str] = None
    breadcrumbs: List[str] = Field(default_factory=list)
    supplement: SupplementRef
    structure: EccnNode
    parent_eccn: Optional[str] = Field(default=None, alias="parentEccn")
    child_eccns: List[str] = Field(default_factory=list, alias="childEccns")

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "eccn": "3B001.d",
                "heading": "Control systems for manufacturing wafers",
                "title": "Control systems for manufacturing wafers",
                "category": "3",
                "group": "3B",
                "breadcrumbs": ["Category 3 - Electronics", "3B001 Equipment"],
                "supplement": {"number": "1", "heading": "Supplement No. 1 to Part 774"},
                "parentEccn": "3B001",
                "childEccns": ["3B001.d.1"],
            }
        },
    )


class SupplementMetadata(CclModel):
    """Summary counts for one supplement."""

    eccn_count: int = Field(default=0, alias="eccnCount")
    category_counts: Dict[str, int] = Field(default_factory=dict, alias="categoryCounts")


class CclSupplement(CclModel):
    """A parsed supplement and its flattened ECCNs."""

    number: str
    heading: Optional[str] = None
    eccns: List[EccnEntry] = Field(default_factory=list)
    metadata: SupplementMetadata = Field(default_factory=SupplementMetadata)


class ParsedPart(CclModel):
    """The complete parse result for one Part."""

    supplements: List[CclSupplement] = Field(default_factory=list)
    counts: Dict[str, int] = Field(default_factory=lambda: {"supplements": 0, "eccns": 0})


class CclDataset(ParsedPart):
    """A parsed Part stamped with the snapshot it came from."""

    version: str
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    date: str
    fetched_at: Optional[str] = Field(default=None, alias="fetchedAt")


class FederalRegisterDocument(CclModel):
    """A Federal Register rule touching the tracked supplements."""

    document_number: Optional[str] = Field(default=None, alias="documentNumber")
    title: Optional[str] = None
    html_url: Optional[str] = Field(default=None, alias="htmlUrl")
    publication_date: Optional[str] = Field(default=None, alias="publicationDate")
    effective_on: Optional[str] = Field(default=None, alias="effectiveOn")
    type: Optional[str] = None
    action: Optional[str] = None
    signing_date: Optional[str] = Field(default=None, alias="signingDate")
    supplements: List[str] = Field(default_factory=list)
    agencies: List[str] = Field(default_factory=list)
    citation: Optional[str] = None
    docket_ids: List[str] = Field(default_factory=list, alias="docketIds")
    cfr_references: List[dict] = Field(default_factory=list, alias="cfrReferences")


class VersionSummary(CclModel):
    """Listing row for a stored dataset."""

    date: str
    fetched_at: Optional[str] = Field(default=None, alias="fetchedAt")
    source_url: Optional[str] = Field(default=None, alias="sourceUrl")
    counts: Dict[str, int] = Field(default_factory=dict)
