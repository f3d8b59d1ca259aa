"""
Health Router for FastAPI.

Liveness, readiness and process metrics endpoints for orchestration and
monitoring. These are unauthenticated and answer with plain JSON (no
success envelope).
"""

import logging
import time

import psutil
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from todochat.agents.intent_client import IntentClient
from todochat.config.configuration_manager import ConfigurationManager
from todochat.rest.db.database import check_database_connection
from todochat.rest.dependencies.config import get_config_manager, get_intent_client
from todochat.utils.util import utc_now

logger = logging.getLogger( __name__ )

router = APIRouter(
    prefix = "/api/health",
    tags   = ["Health"]
)


@router.get( "/liveness" )
async def liveness():
    """
    Liveness probe: the process is up and serving requests.

    Raises:
        - None (endpoint is designed to always succeed)
    """
    return {
        "status"    : "ok",
        "timestamp" : utc_now().isoformat()
    }


@router.get( "/readiness" )
async def readiness(
    config_mgr: ConfigurationManager = Depends( get_config_manager ),
    intent_client: IntentClient = Depends( get_intent_client )
):
    """
    Readiness probe: dependencies are reachable.

    Ensures:
        - database check always runs
        - claudeApi check runs only when "llm health check enabled" is set, else counts as passing
        - 200 with status "ready" when every check passes, 503 "not ready" otherwise
    """
    checks = {
        "database"  : False,
        "claudeApi" : False
    }

    checks["database"] = check_database_connection()

    if config_mgr.get( "llm health check enabled", default=False, return_type="boolean" ):
        checks["claudeApi"] = await intent_client.test_connection()
    else:
        checks["claudeApi"] = True

    is_ready = all( checks.values() )
    if not is_ready:
        logger.warning( f"Readiness check failed: {checks}" )

    return JSONResponse(
        status_code = status.HTTP_200_OK if is_ready else status.HTTP_503_SERVICE_UNAVAILABLE,
        content     = {
            "status"    : "ready" if is_ready else "not ready",
            "checks"    : checks,
            "timestamp" : utc_now().isoformat()
        }
    )


@router.get( "/metrics" )
async def metrics():
    """
    Process metrics: uptime in seconds and memory usage in bytes.
    """
    process = psutil.Process()
    memory  = process.memory_info()

    return {
        "uptime" : round( time.time() - process.create_time(), 3 ),
        "memory" : {
            "rss"     : memory.rss,
            "vms"     : memory.vms,
            "percent" : round( process.memory_percent(), 2 )
        },
        "timestamp" : utc_now().isoformat()
    }
