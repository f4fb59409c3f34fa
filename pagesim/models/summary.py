from pydantic import BaseModel


class DocumentSummary(BaseModel):
    """Size of one document's path representation."""

    label: str
    leaf_count: int
    path_count: int
