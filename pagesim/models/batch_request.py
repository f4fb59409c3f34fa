from typing import List

from pydantic import BaseModel, Field

from pagesim.models.document import DocumentSource
from pagesim.services.clusterer import DEFAULT_DUPLICATE_THRESHOLD, MAX_BATCH_DOCUMENTS
from pagesim.services.similarity import DEFAULT_WEIGHT


class BatchRequest(BaseModel):
    documents: List[DocumentSource] = Field(
        min_length=2,
        max_length=MAX_BATCH_DOCUMENTS,
        description=f"Documents to compare pairwise (2–{MAX_BATCH_DOCUMENTS}).",
    )
    weight: float = Field(default=DEFAULT_WEIGHT, ge=0.0, le=1.0)
    threshold: float = Field(
        default=DEFAULT_DUPLICATE_THRESHOLD,
        ge=0.0,
        le=1.0,
        description="Minimum similarity for two documents to share a cluster (0–1).",
    )
