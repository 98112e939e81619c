"""
studygraph backend - FastAPI Application

It provides:
- REST API for loading diagram descriptors and analysis results
- Pointer endpoints driving the drag state machine of each instance
- Static SVG rendering, printable export, validation and summaries
- WebSocket endpoint for real-time position updates
"""
import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import asdict

from fastapi import Depends, FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, Response

from studygraph import config
from studygraph.analysis import summarize_diagram
from studygraph.export import export_html
from studygraph.models import DiagramType, GraphDiagram, PointerRequest, ViewportRequest
from studygraph.render import render_svg
from studygraph.validation import validate_diagram, validation_summary

from .diagram_manager import DiagramInstance, DiagramManager, diagram_manager
from .websocket_manager import ws_manager

logger = logging.getLogger(__name__)


def get_manager() -> DiagramManager:
    return diagram_manager


# --- Async change notification ---
# Bridge between sync controller callbacks and async WebSocket broadcasts.
# The event belongs to the running loop, so each app start creates its own.

_change_event: asyncio.Event | None = None
_changed_instances: set[str] = set()


def on_diagram_change(instance_id: str):
    """Callback for position changes - sets event for async handler."""
    _changed_instances.add(instance_id)
    if _change_event is not None:
        _change_event.set()


async def change_broadcaster(event: asyncio.Event):
    """Background task that broadcasts changes to WebSocket clients."""
    while True:
        await event.wait()
        event.clear()

        changed = sorted(_changed_instances)
        _changed_instances.clear()
        if changed:
            await ws_manager.notify_positions_updated(changed)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan handler for startup/shutdown tasks."""
    global _change_event

    config.configure_logging()
    _change_event = asyncio.Event()
    # Registration is idempotent across repeated starts
    diagram_manager.on_change(on_diagram_change)

    broadcaster_task = asyncio.create_task(change_broadcaster(_change_event))
    logger.info("studygraph backend started")

    yield

    broadcaster_task.cancel()
    try:
        await broadcaster_task
    except asyncio.CancelledError:
        pass
    _change_event = None


# --- FastAPI App ---

app = FastAPI(
    title="studygraph API",
    description="Layout and drag positioning for study-note diagrams",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _require_instance(manager: DiagramManager, instance_id: str) -> DiagramInstance:
    instance = manager.get_instance(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail="Diagram not found")
    return instance


# --- Health Check ---

@app.get("/api/health")
async def health_check(manager: DiagramManager = Depends(get_manager)):
    """Health check endpoint."""
    return {
        "status": "ok",
        "instances": manager.instance_count,
        "connections": ws_manager.connection_count
    }


# --- Loading ---

@app.post("/api/diagrams")
async def load_diagram(diagram: GraphDiagram, manager: DiagramManager = Depends(get_manager)):
    """Open a diagram descriptor as a new interactive instance."""
    try:
        instance = manager.load_diagram(diagram)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "instance": instance.to_json_dict()}


@app.post("/api/analysis")
async def load_analysis(payload: dict, manager: DiagramManager = Depends(get_manager)):
    """Open every diagram found in an analysis result."""
    try:
        instances = manager.load_analysis(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "instances": [i.to_json_dict() for i in instances]}


# --- Instances ---

@app.get("/api/diagrams")
async def list_diagrams(manager: DiagramManager = Depends(get_manager)):
    """List open instances."""
    return {
        "success": True,
        "diagrams": [
            {
                "id": i.id,
                "title": i.diagram.title,
                "type": i.diagram.type,
                "nodes": len(i.diagram.nodes),
                "edges": len(i.diagram.edges),
            }
            for i in manager.list_instances()
        ]
    }


@app.get("/api/state")
async def get_state(manager: DiagramManager = Depends(get_manager)):
    """Get every instance with its live positions."""
    return manager.get_state()


@app.get("/api/diagrams/{instance_id}")
async def get_diagram(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Get an instance's positions and trimmed edge segments."""
    instance = _require_instance(manager, instance_id)
    return {"success": True, "instance": instance.to_json_dict()}


@app.delete("/api/diagrams/{instance_id}")
async def close_diagram(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Discard an instance."""
    if not manager.close_instance(instance_id):
        raise HTTPException(status_code=404, detail="Diagram not found")
    await ws_manager.notify_instance_closed(instance_id)
    return {"success": True}


@app.put("/api/diagrams/{instance_id}/viewport")
async def set_viewport(
    instance_id: str,
    request: ViewportRequest,
    manager: DiagramManager = Depends(get_manager)
):
    """Record where the instance's canvas is drawn on screen."""
    _require_instance(manager, instance_id)
    try:
        instance = manager.set_viewport(
            instance_id,
            left=request.left,
            top=request.top,
            width=request.width,
            height=request.height
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "transform": asdict(instance.transform)}


@app.post("/api/diagrams/{instance_id}/reset")
async def reset_diagram(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Restore the computed layout, discarding drags."""
    instance = manager.reset(instance_id)
    if instance is None:
        raise HTTPException(status_code=404, detail="Diagram not found")
    return {"success": True, "instance": instance.to_json_dict()}


# --- Pointer Input ---

@app.post("/api/diagrams/{instance_id}/nodes/{node_id}/pointer-down")
async def pointer_down(
    instance_id: str,
    node_id: str,
    request: PointerRequest,
    manager: DiagramManager = Depends(get_manager)
):
    """Press on a node; starts a drag unless one is already active."""
    started = manager.pointer_down(instance_id, node_id, request.x, request.y)
    if started is None:
        raise HTTPException(status_code=404, detail="Diagram not found")
    return {"success": True, "dragging": started}


@app.post("/api/pointer/move")
async def pointer_move(request: PointerRequest, manager: DiagramManager = Depends(get_manager)):
    """Document-level pointer move."""
    delivered = manager.pointer_move(request.x, request.y)
    return {"success": True, "delivered": delivered}


@app.post("/api/pointer/up")
async def pointer_up(request: PointerRequest, manager: DiagramManager = Depends(get_manager)):
    """Document-level pointer release."""
    delivered = manager.pointer_up(request.x, request.y)
    return {"success": True, "delivered": delivered}


@app.post("/api/pointer/cancel")
async def pointer_cancel(manager: DiagramManager = Depends(get_manager)):
    """The pointer left the window."""
    delivered = manager.pointer_cancel()
    return {"success": True, "delivered": delivered}


# --- Rendering & Export ---

@app.get("/api/diagrams/{instance_id}/svg")
async def diagram_svg(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Render the instance at its current positions."""
    if not config.ENABLE_EXPORT:
        raise HTTPException(status_code=404, detail="Export disabled")
    instance = _require_instance(manager, instance_id)
    svg = render_svg(instance.diagram, instance.controller.positions)
    return Response(content=svg, media_type="image/svg+xml")


@app.get("/api/diagrams/{instance_id}/export")
async def diagram_export(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Printable node/edge tables."""
    if not config.ENABLE_EXPORT:
        raise HTTPException(status_code=404, detail="Export disabled")
    instance = _require_instance(manager, instance_id)
    return HTMLResponse(export_html(instance.diagram))


# --- Analysis & Validation ---

@app.get("/api/diagrams/{instance_id}/validate")
async def validate_instance(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Report data-quality issues of the instance's descriptor."""
    instance = _require_instance(manager, instance_id)
    issues = validate_diagram(instance.diagram)
    return {
        "success": True,
        "issues": [issue.to_dict() for issue in issues],
        "summary": validation_summary(issues)
    }


@app.get("/api/diagrams/{instance_id}/summary")
async def summarize_instance(instance_id: str, manager: DiagramManager = Depends(get_manager)):
    """Structural summary of the instance's descriptor."""
    instance = _require_instance(manager, instance_id)
    return {"success": True, "summary": summarize_diagram(instance.diagram).to_dict()}


# --- Enums for Frontend ---

@app.get("/api/enums/types")
async def get_types():
    """Get available diagram types."""
    return {"types": [t.value for t in DiagramType]}


# --- WebSocket ---

@app.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket):
    """
    WebSocket endpoint for real-time updates.

    Clients connect here to receive positions_updated events.
    """
    await ws_manager.connect(websocket)

    try:
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text('{"type": "pong"}')
    except WebSocketDisconnect:
        await ws_manager.disconnect(websocket)
    except Exception:
        logger.exception("WebSocket error")
        await ws_manager.disconnect(websocket)


def run(host: str = config.HOST, port: int = config.PORT):
    """Run the backend with uvicorn."""
    import uvicorn
    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    run()
