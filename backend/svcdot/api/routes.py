import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from svcdot.compiler.compiler import render_graph, render_legend
from svcdot.config import REPOSITORY
from svcdot.errors import OptionsError, RegistryError
from svcdot.registry import Registry, open_registry
from svcdot.schemas import GraphOptions

logger = logging.getLogger(__name__)

DOT_MEDIA_TYPE = "text/vnd.graphviz"

router = APIRouter(
    prefix="",
    tags=["graph"],
)


def get_registry() -> Registry:
    try:
        return open_registry(REPOSITORY)
    except RegistryError as e:
        logger.error(f"Cannot open registry: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@router.get("/graph", response_class=PlainTextResponse)
def graph(
    simplify: str = "",
    size: Optional[str] = None,
    registry: Registry = Depends(get_registry),
):
    try:
        options = GraphOptions.from_simplify([simplify], size=size)
    except OptionsError as e:
        raise HTTPException(status_code=422, detail=str(e))

    try:
        source = render_graph(registry, options)
    except RegistryError as e:
        logger.error(f"Graph generation failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return PlainTextResponse(source, media_type=DOT_MEDIA_TYPE)


@router.get("/legend", response_class=PlainTextResponse)
def legend():
    return PlainTextResponse(render_legend(), media_type=DOT_MEDIA_TYPE)
