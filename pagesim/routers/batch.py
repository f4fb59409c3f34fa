import asyncio
import logging

from fastapi import APIRouter, HTTPException, Request

from pagesim.limiter import limiter
from pagesim.models.batch_request import BatchRequest
from pagesim.models.batch_response import BatchResponse
from pagesim.routers.compare import summarize
from pagesim.services.clusterer import cluster_templates, similarity_matrix
from pagesim.services.documents import load_path_sets
from pagesim.services.similarity import ComparisonCounter

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/batch",
    response_model=BatchResponse,
    summary="Pairwise comparison and template clustering",
    description=(
        "Scores every pair of documents and groups documents whose structural "
        "similarity reaches `threshold` into clusters (single link), e.g. to "
        "find pages rendered from the same template."
    ),
)
@limiter.limit("5/minute")
async def batch(request: Request, body: BatchRequest) -> BatchResponse:
    logger.info(
        "Batch request received",
        extra={
            "documents": len(body.documents),
            "weight": body.weight,
            "threshold": body.threshold,
        },
    )

    path_sets = await load_path_sets(body.documents)
    labels = [path_set.label for path_set in path_sets]
    if len(set(labels)) != len(labels):
        logger.warning("Batch contains duplicate labels: %s", labels)
        raise HTTPException(status_code=400, detail="Document labels must be unique.")

    counter = ComparisonCounter()
    matrix = await asyncio.to_thread(similarity_matrix, path_sets, body.weight, counter=counter)
    clusters = cluster_templates(labels, matrix, body.threshold)

    return BatchResponse(
        documents=[summarize(path_set) for path_set in path_sets],
        matrix=matrix,
        clusters=clusters,
        path_comparisons=counter.path_comparisons,
    )
