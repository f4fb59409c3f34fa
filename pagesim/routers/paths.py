import logging

from fastapi import APIRouter, Request

from pagesim.limiter import limiter
from pagesim.models.document import DocumentSource
from pagesim.models.paths_response import PathResult, PathsResponse
from pagesim.services.documents import load_path_set

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/paths",
    response_model=PathsResponse,
    summary="Tag-path representation of a document",
    description=(
        "Returns the distinct root-to-leaf tag paths of the document with the "
        "number of leaves on each path and their positions in document order."
    ),
)
@limiter.limit("30/minute")
async def paths(request: Request, body: DocumentSource) -> PathsResponse:
    logger.info("Paths request received", extra={"label": body.label, "url": body.url})

    path_set = await load_path_set(body, "document-1")
    groups = sorted(path_set.groups, key=lambda group: group.occurrence_positions[0])

    return PathsResponse(
        label=path_set.label,
        leaf_count=path_set.leaf_count,
        path_count=len(groups),
        paths=[
            PathResult(
                tag_sequence=list(group.tag_sequence),
                occurrence_count=group.occurrence_count,
                occurrence_positions=list(group.occurrence_positions),
            )
            for group in groups
        ],
    )
