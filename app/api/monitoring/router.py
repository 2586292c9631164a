"""
Metrics and log access.
"""
import re
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from fastapi.responses import StreamingResponse

from app.core.admin_dependencies import require_admin
from app.utils.logger import LOG_FILE, logger
from app.utils.prometheus_metrics import CONTENT_TYPE_LATEST, get_metrics

router = APIRouter(
    prefix="/api/monitoring",
    tags=["Monitoring"],
    dependencies=[Depends(require_admin)],
)

# Scraped by Prometheus, no auth
router_public = APIRouter(
    prefix="/api/monitoring",
    tags=["Monitoring"],
)

_LOG_LINE = re.compile(r"^(\S+ \S+) \[(\w+)\] (\S+): (.*)$")


@router_public.get("/metrics")
async def metrics():
    return StreamingResponse(iter([get_metrics()]), media_type=CONTENT_TYPE_LATEST)


@router.get("/logs")
async def get_logs(
    lines: int = Query(100, ge=1, le=1000, description="How many of the latest lines to read"),
    level: Optional[str] = Query(None, description="INFO, WARNING, ERROR or DEBUG"),
    search: Optional[str] = Query(None, description="Case-insensitive text filter"),
):
    """Latest application log lines, parsed."""
    if not LOG_FILE.exists():
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Log file not found")

    try:
        with open(LOG_FILE, "r", encoding="utf-8") as f:
            log_lines = f.readlines()[-lines:]
    except OSError as e:
        logger.error(f"[Monitoring] Could not read logs: {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Could not read logs")

    if level:
        log_lines = [line for line in log_lines if f"[{level.upper()}]" in line]
    if search:
        log_lines = [line for line in log_lines if search.lower() in line.lower()]

    parsed = []
    for line in log_lines:
        line = line.strip()
        if not line:
            continue
        match = _LOG_LINE.match(line)
        if match:
            timestamp, log_level, logger_name, message = match.groups()
            parsed.append({"timestamp": timestamp, "level": log_level, "logger": logger_name, "message": message})
        else:
            parsed.append({"raw": line})

    return {
        "total": len(parsed),
        "lines": lines,
        "filters": {"level": level, "search": search},
        "logs": parsed,
    }
