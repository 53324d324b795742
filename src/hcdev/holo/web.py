"""
Web server for a running chain.

Routes:
    POST /fn/{zome}/{fn}   call a public zome function, the request body is its argument
    GET  /_sys/dna         identity of the served chain
    GET  /...              static files from the chain's ui directory

Run with: WebServer(chain, port).start()  (blocks)
"""
from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI, HTTPException, Request
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel

from ..telemetry import get_logger
from .dna import Exposure
from .errors import ChainError, ZomeError

if TYPE_CHECKING:
    from .chain import Holochain

logger = get_logger(__name__)

DEFAULT_HOST = "0.0.0.0"


class DNAInfo(BaseModel):
    name: str
    dna_hash: str
    agent: str


def create_app(chain: "Holochain") -> FastAPI:
    """Build the FastAPI application serving chain."""
    app = FastAPI(
        title=f"holochain: {chain.name}",
        description="HTTP interface to a holochain app",
    )

    @app.get("/_sys/dna", response_model=DNAInfo)
    async def dna_info():
        return DNAInfo(name=chain.name, dna_hash=chain.dna_hash(), agent=chain.agent.identity)

    @app.post("/fn/{zome}/{fn_name}")
    async def call_function(zome: str, fn_name: str, request: Request) -> Any:
        """Call a public zome function with the raw request body."""
        body = (await request.body()).decode("utf-8")
        logger.debug("call %s/%s: %s", zome, fn_name, body)
        try:
            return await asyncio.to_thread(chain.call, zome, fn_name, body, Exposure.PUBLIC)
        except (ZomeError, ChainError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    ui_path = chain.ui_path()
    if ui_path.is_dir():
        app.mount("/", StaticFiles(directory=str(ui_path), html=True), name="ui")

    return app


class WebServer:
    def __init__(self, chain: "Holochain", port: int, host: str = DEFAULT_HOST):
        self.chain = chain
        self.port = port
        self.host = host
        self.app = create_app(chain)

    def start(self) -> None:
        """Serve until the process is stopped."""
        import uvicorn

        uvicorn.run(self.app, host=self.host, port=self.port, log_level="info")
