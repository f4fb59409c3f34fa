import asyncio
import logging

from fastapi import APIRouter, Request

from pagesim.limiter import limiter
from pagesim.models.compare_request import CompareRequest
from pagesim.models.compare_response import CompareResponse
from pagesim.models.path import PathSet
from pagesim.models.summary import DocumentSummary
from pagesim.services.documents import load_path_sets
from pagesim.services.similarity import ComparisonCounter, similarity

logger = logging.getLogger(__name__)

router = APIRouter()


def summarize(path_set: PathSet) -> DocumentSummary:
    return DocumentSummary(
        label=path_set.label,
        leaf_count=path_set.leaf_count,
        path_count=len(path_set.groups),
    )


@router.post(
    "/compare",
    response_model=CompareResponse,
    summary="Structural similarity of two documents",
    description=(
        "Reduces both documents to their root-to-leaf tag paths and scores how "
        "similar the two path collections are, from 0 (unrelated structure) to "
        "1 (identical structure).  `weight` balances tag-sequence similarity "
        "against the similarity of leaf positions."
    ),
)
@limiter.limit("30/minute")
async def compare(request: Request, body: CompareRequest) -> CompareResponse:
    logger.info(
        "Compare request received",
        extra={
            "first": body.first.label or body.first.url,
            "second": body.second.label or body.second.url,
            "weight": body.weight,
        },
    )

    first, second = await load_path_sets([body.first, body.second])

    counter = ComparisonCounter()
    score = await asyncio.to_thread(similarity, first, second, body.weight, counter)

    return CompareResponse(
        similarity=score,
        weight=body.weight,
        first=summarize(first),
        second=summarize(second),
        path_comparisons=counter.path_comparisons,
    )
