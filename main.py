#!/usr/bin/env python3
"""
Semantic Drift Analysis - Main Server

Exposes the drift pipeline over HTTP:
- Supervisor Agent runs full analyses (oracle or heuristic)
- Transition Analyzer and Synthesis Agent do the per-call work
- Document coordinator merges single appended versions incrementally

Runs on localhost:3000.
"""

import time
from datetime import datetime, timezone
from typing import Optional

import uvicorn
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from shared.config import Config
from shared.exceptions import (
    InvalidRequestError,
    OracleUnavailableError,
    SynthesisError,
    TransitionAnalysisError,
)
from shared.logging_config import get_agent_logger, setup_logging
from shared.models import AnalysisResult, AnalyzeRequest, SynthesisRequest, SynthesisResult
from shared.templates import TEMPLATE_OPTIONS
from Agents.Supervisor.merge_engine import DocumentAnalysisCoordinator
from Agents.Supervisor.supervisor_agent import create_supervisor

logger = get_agent_logger("api")

SERVICE_NAME = "Semantic Drift Analysis"
SERVICE_VERSION = "1.0.0"

# Initialize FastAPI app
app = FastAPI(
    title=SERVICE_NAME,
    description="Decision-level drift analysis across document versions",
    version=SERVICE_VERSION
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["GET", "POST", "DELETE"],
    allow_headers=["*"],
)

# Global state
config = Config()
supervisor = create_supervisor(config)
coordinator = DocumentAnalysisCoordinator(supervisor)


async def _run_full_analysis(request: AnalyzeRequest, skip_synthesis: bool) -> AnalysisResult:
    start_time = time.time()
    try:
        result = await supervisor.run_analysis(request, skip_synthesis=skip_synthesis)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransitionAnalysisError as e:
        logger.error(f"❌ Analysis failed: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except OracleUnavailableError as e:
        logger.error(f"❌ Oracle unavailable: {e}")
        raise HTTPException(status_code=503, detail=f"Oracle unavailable: {e}")

    if result is None:
        raise HTTPException(status_code=409, detail="Analysis was superseded")
    logger.info(f"Analysis served in {time.time() - start_time:.2f}s")
    return result


@app.get("/api/info")
async def api_info():
    """API information endpoint"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "running",
        "oracle": {
            "enabled": supervisor.oracle_configured,
            "transition_model": config.bedrock_model_id,
            "synthesis_model": config.bedrock_synthesis_model_id,
            "fallback_on_unavailable": config.fallback_on_unavailable,
        },
        "limits": {
            "max_versions": config.max_versions_per_request,
            "min_version_chars": config.min_version_chars,
            "transition_concurrency": config.transition_concurrency,
        },
        "endpoints": {
            "analyze": "POST /api/analyze",
            "analyze_transitions": "POST /api/analyze/transitions",
            "synthesis": "POST /api/analyze/synthesis",
            "document_analysis": "POST|GET|DELETE /api/documents/{doc_id}/analysis",
            "templates": "GET /api/templates",
            "health": "GET /health"
        }
    }


@app.get("/api/templates")
async def list_templates():
    """Domain templates accepted by the analyze endpoints"""
    return {"templates": TEMPLATE_OPTIONS}


@app.post("/api/analyze", response_model=AnalysisResult)
async def analyze(request: AnalyzeRequest):
    """Full analysis: every transition, aggregate, then synthesis."""
    return await _run_full_analysis(request, skip_synthesis=False)


@app.post("/api/analyze/transitions", response_model=AnalysisResult)
async def analyze_transitions(request: AnalyzeRequest):
    """
    Transitions only. Headline, narrative and action come from the
    deterministic aggregate; call /api/analyze/synthesis separately.
    """
    return await _run_full_analysis(request, skip_synthesis=True)


@app.post("/api/analyze/synthesis", response_model=SynthesisResult)
async def analyze_synthesis(request: SynthesisRequest):
    """Synthesis only, over drifts computed earlier"""
    if not request.drifts:
        raise HTTPException(status_code=400, detail="At least one drift is required for synthesis")
    try:
        return await supervisor.synthesize(request)
    except OracleUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    except SynthesisError as e:
        raise HTTPException(status_code=502, detail=f"Synthesis failed: {e}")


@app.post("/api/documents/{doc_id}/analysis", response_model=AnalysisResult)
async def submit_document_analysis(doc_id: str, request: AnalyzeRequest, force_full: bool = False):
    """
    Analyze a stored document's history.

    When exactly one version was appended since the stored analysis, only
    the newest transition is analyzed and merged.
    """
    try:
        result = await coordinator.submit(doc_id, request, force_full=force_full)
    except InvalidRequestError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except TransitionAnalysisError as e:
        logger.error(f"❌ Analysis failed for document {doc_id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))
    except OracleUnavailableError as e:
        raise HTTPException(status_code=503, detail=f"Oracle unavailable: {e}")

    if result is None:
        # Superseded, or an incremental merge that failed; keep whatever is stored
        stored = coordinator.get(doc_id)
        if stored is None:
            raise HTTPException(status_code=409, detail="Analysis was superseded or failed")
        return stored
    return result


@app.get("/api/documents/{doc_id}/analysis", response_model=AnalysisResult)
async def get_document_analysis(doc_id: str):
    """Latest stored analysis for a document"""
    result = coordinator.get(doc_id)
    if result is None:
        raise HTTPException(status_code=404, detail=f"No analysis stored for document {doc_id}")
    return result


@app.delete("/api/documents/{doc_id}/analysis")
async def delete_document_analysis(doc_id: str):
    """Cancel any in-flight computation and forget the stored analysis"""
    had_result = coordinator.get(doc_id) is not None
    coordinator.forget(doc_id)
    return {"doc_id": doc_id, "deleted": had_result}


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "version": SERVICE_VERSION,
        "oracle_enabled": supervisor.oracle_configured,
    }


def main(port: Optional[int] = None):
    """Start the drift analysis server"""
    setup_logging(config.log_level)
    config.validate()
    port = port or 3000

    print("\n" + "=" * 80)
    print(f"🚀 {SERVICE_NAME.upper()}")
    print("=" * 80)
    print()
    print("🌐 Server URLs:")
    print(f"   API Docs:   http://localhost:{port}/docs")
    print(f"   Health:     http://localhost:{port}/health")
    print()
    print("🤖 PIPELINE:")
    print(f"   Transition Analyzer: {'Bedrock ' + config.bedrock_model_id if supervisor.oracle_configured else 'heuristic'}")
    print(f"   Synthesis Agent:     {config.bedrock_synthesis_model_id if supervisor.oracle_configured else 'skipped'}")
    print(f"   Concurrency:         {config.transition_concurrency}")
    print()
    print("📚 ENDPOINTS:")
    print("   POST   /api/analyze                       - Full analysis")
    print("   POST   /api/analyze/transitions           - Transitions only")
    print("   POST   /api/analyze/synthesis             - Synthesis over given drifts")
    print("   POST   /api/documents/{doc_id}/analysis   - Incremental document analysis")
    print("   GET    /api/documents/{doc_id}/analysis   - Stored document analysis")
    print("   DELETE /api/documents/{doc_id}/analysis   - Cancel and forget")
    print()
    print("🛑 Press Ctrl+C to stop")
    print("=" * 80)
    print()

    uvicorn.run(
        app,
        host="0.0.0.0",  # Listen on all interfaces
        port=port,
        log_level=config.log_level.lower()
    )


if __name__ == "__main__":
    main()
