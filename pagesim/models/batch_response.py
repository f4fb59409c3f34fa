from typing import List

from pydantic import BaseModel

from pagesim.models.summary import DocumentSummary


class BatchResponse(BaseModel):
    documents: List[DocumentSummary]
    matrix: List[List[float]]
    """Pairwise similarities, in the order of *documents*."""
    clusters: List[List[str]]
    """Labels of documents sharing a template, first-seen order."""
    path_comparisons: int
