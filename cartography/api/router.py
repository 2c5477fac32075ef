# cartography/api/router.py
from fastapi import APIRouter, Depends, status, HTTPException, Response, Header, Request
from cartography.models.view import GraphView, DragRequest, PositionUpdate, LinkTarget, LegendItem
from cartography.services.render_adapter import RenderAdapter, legend
from cartography.services.sessions import SessionRegistry
from cartography.core.limiter import limiter

router = APIRouter()

# Dependency to extract the User ID from a header
def get_user_id(x_user_id: str = Header(..., description="Client-generated unique ID for the user workspace.")) -> str:
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="X-User-ID header is required.")
    return x_user_id

def get_registry(request: Request) -> SessionRegistry:
    registry = getattr(request.app.state, "sessions", None)
    if registry is None:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="Dataset is not loaded.")
    return registry

def get_session(
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_registry)
) -> RenderAdapter:
    return registry.get(user_id)

@router.get("/graph", response_model=GraphView, tags=["Graph"])
@limiter.limit("120/minute")
async def get_visible_graph(request: Request, session: RenderAdapter = Depends(get_session)):
    return session.render()

@router.delete("/graph", status_code=status.HTTP_204_NO_CONTENT, tags=["Graph"])
@limiter.limit("10/minute")
async def reset_workspace(
    request: Request,
    user_id: str = Depends(get_user_id),
    registry: SessionRegistry = Depends(get_registry)
):
    """Drops the workspace's visible graph; the next read starts again from the root."""
    registry.reset(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.get("/legend", response_model=list[LegendItem], tags=["Graph"])
async def get_legend():
    return legend()

@router.post("/nodes/{node_id}/expand", response_model=GraphView, tags=["Nodes"])
@limiter.limit("120/minute")
async def expand_node(
    request: Request,
    node_id: str,
    session: RenderAdapter = Depends(get_session)
):
    session.on_node_click(node_id)
    return session.render()

@router.post("/nodes/{node_id}/drag", status_code=status.HTTP_204_NO_CONTENT, tags=["Nodes"])
async def drag_node(node_id: str, drag: DragRequest, session: RenderAdapter = Depends(get_session)):
    session.on_node_drag(node_id, drag.x, drag.y)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/nodes/{node_id}/drag-end", status_code=status.HTTP_204_NO_CONTENT, tags=["Nodes"])
async def end_drag(node_id: str, session: RenderAdapter = Depends(get_session)):
    session.on_node_drag_end(node_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)

@router.post("/nodes/{node_id}/settled", tags=["Nodes"])
async def layout_settled(node_id: str, session: RenderAdapter = Depends(get_session)):
    """Called by the layout engine once it has stabilized around a freshly expanded node."""
    session.controller.visible.get_node(node_id)
    return {"released": session.controller.notify_settled(node_id)}

@router.post("/layout/positions", tags=["Layout"])
async def report_positions(updates: list[PositionUpdate], session: RenderAdapter = Depends(get_session)):
    return {"applied": session.controller.update_positions(updates)}

@router.get("/nodes/{node_id}/link", response_model=LinkTarget, tags=["Nodes"])
async def get_node_link(node_id: str, session: RenderAdapter = Depends(get_session)):
    node = session.controller.visible.get_node(node_id)
    if not node.url:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Node has no external link")
    return LinkTarget(id=node.id, url=node.url)
