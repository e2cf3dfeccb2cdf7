# content_engine/api/routes/content.py
"""Content index, navigation and tag routes."""

import logging

import anyio
from fastapi import APIRouter

from ...tags import build_tag_index
from ..dependencies import IndexManagerDep
from ..errors import APIError
from ..schemas import ContentIndexActionRequest, ContentIndexActionResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/content-index")
async def get_content_index(manager: IndexManagerDep, rebuild: bool = False):
    """Get the content index, rebuilding it when missing or requested."""
    index = await manager.get(force_rebuild=rebuild)
    return index.to_json_dict()


@router.post("/content-index", response_model=ContentIndexActionResponse)
async def content_index_action(
    request: ContentIndexActionRequest,
    manager: IndexManagerDep,
):
    """Rebuild or invalidate the content index."""
    if request.action == "rebuild-index":
        index = await manager.rebuild()
        return ContentIndexActionResponse(
            success=True,
            action="rebuild-index",
            message=(
                f"Index rebuilt: {index.stats.total_galleries} galleries, "
                f"{index.stats.total_posts} posts, {index.stats.total_pages} pages"
            ),
            stats=index.stats.to_json_dict(),
        )

    if request.action == "invalidate":
        await manager.invalidate()
        return ContentIndexActionResponse(
            success=True,
            action="invalidate",
            message="Index invalidated; it will be rebuilt on next access",
        )

    raise APIError.bad_request(f"Unknown action: {request.action}")


@router.get("/navigation")
async def get_navigation(manager: IndexManagerDep):
    """Nested gallery navigation built from the cached index."""
    return [item.to_json_dict() for item in await manager.get_navigation()]


@router.get("/tags")
async def get_tags(manager: IndexManagerDep):
    """Tag usage counts across public galleries, photos and posts."""
    results = {}

    async def scan(name, scanner) -> None:
        results[name] = await scanner.scan()

    async with anyio.create_task_group() as tg:
        tg.start_soon(scan, "galleries", manager.gallery_scanner)
        tg.start_soon(scan, "posts", manager.blog_scanner)

    tags = build_tag_index(results["galleries"], results["posts"])
    return [tag.to_json_dict() for tag in tags]
