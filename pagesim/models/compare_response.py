from pydantic import BaseModel

from pagesim.models.summary import DocumentSummary


class CompareResponse(BaseModel):
    similarity: float
    weight: float
    first: DocumentSummary
    second: DocumentSummary
    path_comparisons: int
