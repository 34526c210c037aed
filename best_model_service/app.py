import logging
from pathlib import Path
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse

from best_model_service.config import ServiceConfig, load_config
from best_model_service.models import Record, SaveModelIn, SaveModelOut
from best_model_service.registry import BestScoreRegistry
from best_model_service.store import InvalidRecordName, RecordStore, StorageError

logger = logging.getLogger(__name__)


def get_registry(request: Request) -> BestScoreRegistry:
    return request.app.state.registry


def create_app(config: Optional[ServiceConfig] = None,
               registry: Optional[BestScoreRegistry] = None) -> FastAPI:
    config = config or load_config()
    if registry is None:
        store = RecordStore(config.data_dir)
        registry = BestScoreRegistry.from_store(store, config.default_name)

    app = FastAPI(title="Best Model Service (HTTP)")
    app.state.registry = registry
    app.state.config = config

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allow_origins,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    @app.get("/api/models", response_model=list[Record])
    def list_models(reg: BestScoreRegistry = Depends(get_registry)):
        try:
            return reg.store.list_all()
        except StorageError as e:
            logger.error("Error listing models: %s", e)
            raise HTTPException(500, "Error listing models")

    @app.get("/api/current-model", response_model=Record)
    def current_model(name: Optional[str] = None,
                      reg: BestScoreRegistry = Depends(get_registry)):
        return reg.current(name)

    @app.post("/api/save-model", response_model=SaveModelOut, response_model_exclude_unset=True)
    def save_model(body: SaveModelIn, reg: BestScoreRegistry = Depends(get_registry)):
        try:
            result = reg.submit(body.score, body.data, body.name)
        except InvalidRecordName as e:
            raise HTTPException(400, str(e))
        except StorageError:
            return JSONResponse(
                status_code=500,
                content={"success": False, "message": "Error saving model"},
            )
        if result.accepted:
            return SaveModelOut(success=True, message="Model saved successfully")
        return SaveModelOut(
            success=False,
            message="New score not higher than current best",
            current=result.record,
        )

    static_root = Path(config.static_root).resolve()

    # Catch-all is registered last so /api/* routes win.
    @app.get("/{path:path}", include_in_schema=False)
    def static_files(path: str):
        target = (static_root / path).resolve()
        if not target.is_relative_to(static_root):
            return PlainTextResponse("File not found", status_code=404)
        if target.is_dir():
            target = target / "index.html"
        if not target.is_file():
            return PlainTextResponse("File not found", status_code=404)
        return FileResponse(target)

    return app
