from pydantic import BaseModel, Field

from pagesim.models.document import DocumentSource
from pagesim.services.similarity import DEFAULT_WEIGHT


class CompareRequest(BaseModel):
    first: DocumentSource
    second: DocumentSource
    weight: float = Field(
        default=DEFAULT_WEIGHT,
        ge=0.0,
        le=1.0,
        description="Share of tag-sequence similarity; the rest is positional similarity (0–1).",
    )
