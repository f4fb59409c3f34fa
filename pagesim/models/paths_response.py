from typing import List

from pydantic import BaseModel


class PathResult(BaseModel):
    tag_sequence: List[str]
    occurrence_count: int
    occurrence_positions: List[int]


class PathsResponse(BaseModel):
    label: str
    leaf_count: int
    path_count: int
    paths: List[PathResult]
