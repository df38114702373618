"""
API Endpoint for Domain Analysis

FastAPI app that:
1. Receives analysis requests ({domain, user_id})
2. Runs the analysis pipeline synchronously
3. Returns scores, findings and the optional report
4. Serves stored analyses by id
"""

import asyncio
import logging
import sys
from datetime import datetime
from typing import Optional
from uuid import UUID

from fastapi import Depends, FastAPI, HTTPException
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from domain_analyzer import __version__
from domain_analyzer.database import (
    AnalysisRepository,
    check_db_connection,
    init_db,
)
from domain_analyzer.pipeline.config import PipelineConfig
from domain_analyzer.pipeline.errors import PersistenceError
from domain_analyzer.pipeline.orchestrator import AnalysisPipeline
from domain_analyzer.pipeline.response import PERSISTENCE, VALIDATION
from domain_analyzer.utils.config import get_settings

# Configure logging to stdout
logging.basicConfig(
    level=get_settings().LOG_LEVEL.upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    stream=sys.stdout,
    force=True,
)
logger = logging.getLogger(__name__)

# Quiet down chatty loggers
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

app = FastAPI(
    title="Domain Analyzer",
    description="Technical SEO, performance and authority scoring for web domains",
    version=__version__,
)


# ============================================================================
# DEPENDENCIES
# ============================================================================

_repository: Optional[AnalysisRepository] = None
_pipeline: Optional[AnalysisPipeline] = None


def get_repository() -> AnalysisRepository:
    global _repository
    if _repository is None:
        _repository = AnalysisRepository()
    return _repository


def get_pipeline(repository: AnalysisRepository = Depends(get_repository)) -> AnalysisPipeline:
    global _pipeline
    if _pipeline is None:
        _pipeline = AnalysisPipeline(PipelineConfig.from_settings(), repository)
    return _pipeline


# ============================================================================
# LIFECYCLE
# ============================================================================

@app.on_event("startup")
async def startup_event():
    """Create tables on startup."""
    logger.info("Initializing database...")
    init_db()
    if check_db_connection():
        logger.info("Database connection verified")
    else:
        logger.warning("Database connection check failed - continuing anyway")


@app.on_event("shutdown")
async def shutdown_event():
    if _pipeline is not None:
        await _pipeline.close()


# ============================================================================
# REQUEST MODELS
# ============================================================================

class AnalyzeRequest(BaseModel):
    """
    Request to analyze a domain.

    `requester_id` is accepted as an alias of `user_id`. Missing fields are
    reported by the pipeline's own validation (HTTP 400), not by FastAPI.
    """
    domain: Optional[str] = None
    user_id: Optional[str] = Field(default=None, description="Id of the requesting user")
    requester_id: Optional[str] = Field(default=None, description="Alias of user_id")

    @property
    def resolved_requester(self) -> Optional[str]:
        return self.user_id or self.requester_id


# ============================================================================
# API ENDPOINTS
# ============================================================================

@app.get("/")
async def root():
    return {"status": "ok", "service": "Domain Analyzer"}


@app.get("/api/health")
async def health():
    """Health check including database status."""
    db_connected = await asyncio.to_thread(check_db_connection)
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": __version__,
        "database": "connected" if db_connected else "disconnected",
    }


@app.post("/api/analyze")
async def analyze(
    request: AnalyzeRequest,
    pipeline: AnalysisPipeline = Depends(get_pipeline),
):
    """
    Analyze a domain and return the stored result.

    Status codes:
        200: analysis completed
        400: missing or invalid input
        500: the analysis could not be stored, or failed unexpectedly
    """
    outcome = await pipeline.run(request.domain, request.resolved_requester)

    if outcome.success:
        status_code = 200
    elif outcome.error_type == VALIDATION:
        status_code = 400
    else:
        status_code = 500

    if outcome.error_type == PERSISTENCE:
        logger.error(f"Analysis request for {request.domain} not stored: {outcome.error}")

    return JSONResponse(status_code=status_code, content=outcome.to_dict())


@app.get("/api/analyses/{analysis_id}")
async def get_analysis(
    analysis_id: UUID,
    repository: AnalysisRepository = Depends(get_repository),
):
    """Stored analysis with its findings."""
    try:
        record = await asyncio.to_thread(repository.get_analysis, analysis_id)
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    if record is None:
        raise HTTPException(status_code=404, detail="Analysis not found")

    return record.to_dict()
