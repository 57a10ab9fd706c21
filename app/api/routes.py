"""API routes for sitemap comparison."""

import json
import queue
import asyncio
import dataclasses
import traceback
import concurrent.futures
from typing import Any, AsyncGenerator, Optional

from fastapi import APIRouter, Form
from fastapi.responses import JSONResponse, Response, StreamingResponse
from pydantic import BaseModel

from ..models.progress import ProgressTracker
from ..services.comparator import SiteComparator
from ..services.sitemap import SitemapValidationError
from ..config import DEFAULT_APP_CONFIG, DEFAULT_COMPARISON_CONFIG, ComparisonConfig
from ..logger import get_logger
from .export import missing_links_report, export_json, export_csv

logger = get_logger('api')

router = APIRouter()


class CompareRequest(BaseModel):
    """Body of a comparison request."""
    file1: Any  # old sitemap
    file2: Any  # new sitemap
    new_site: Optional[str] = None
    verify_redirects: Optional[bool] = None
    concurrency: Optional[int] = None


def _build_config(concurrency: Optional[int]) -> ComparisonConfig:
    """Apply per-request overrides to the default comparison config."""
    if concurrency is None:
        return DEFAULT_COMPARISON_CONFIG
    batch_size = min(DEFAULT_APP_CONFIG.max_concurrency,
                     max(DEFAULT_APP_CONFIG.min_concurrency, concurrency))
    return dataclasses.replace(DEFAULT_COMPARISON_CONFIG, batch_size=batch_size)


def _run_comparison(request: CompareRequest, progress: ProgressTracker) -> None:
    """Run one comparison and finish the channel with a result or an error."""
    verify = DEFAULT_APP_CONFIG.verify_redirects if request.verify_redirects is None else request.verify_redirects
    new_site = request.new_site if verify else None

    comparator = SiteComparator(progress=progress, config=_build_config(request.concurrency))
    try:
        result = comparator.compare(request.file1, request.file2, new_site)
    except SitemapValidationError as e:
        logger.warning("Rejected comparison: %s", e)
        context = f"site={e.site}" + (f" page={e.page}" if e.page is not None else "")
        progress.send_error(str(e), context=context)
        return
    except Exception as e:
        logger.exception("Comparison failed")
        progress.send_error(str(e), context=traceback.format_exc())
        return

    data = result.to_dict()
    data['oldSite'] = request.file1
    data['newSite'] = request.file2
    progress.send_result(data)
    logger.info("Comparison run finished in %.1fs", progress.elapsed_seconds)


async def _compare_with_progress(request: CompareRequest) -> AsyncGenerator[str, None]:
    """Compare sitemaps with progress updates via SSE.

    Args:
        request: Comparison request

    Yields:
        SSE formatted progress events, then one result or error event
    """
    progress_queue: queue.Queue = queue.Queue()
    progress = ProgressTracker(callback=progress_queue.put)

    logger.info("Received comparison request")

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        future = executor.submit(_run_comparison, request, progress)

        # Yield progress updates while waiting
        while not future.done():
            await asyncio.sleep(0.1)
            try:
                while True:
                    data = progress_queue.get_nowait()
                    yield f"data: {json.dumps(data)}\n\n"
            except queue.Empty:
                pass

        try:
            future.result()
        except Exception as e:
            # Only reachable if the channel itself failed
            logger.exception("Comparison worker crashed")
            progress.send_error(str(e), context=traceback.format_exc())

        # Send remaining events, the terminal one last
        try:
            while True:
                data = progress_queue.get_nowait()
                yield f"data: {json.dumps(data)}\n\n"
        except queue.Empty:
            pass


@router.get("/health")
async def health():
    """Liveness check."""
    return {"status": "ok"}


@router.post("/compare")
async def compare(request: CompareRequest):
    """Compare two sitemaps with real-time progress updates via SSE."""
    return StreamingResponse(
        _compare_with_progress(request),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no"
        }
    )


@router.post("/export")
async def export(
    differences: str = Form(...),
    format: str = Form("json")
):
    """Export the missing-links report as JSON or CSV."""
    try:
        report = missing_links_report(json.loads(differences))
        if not report:
            return JSONResponse(status_code=400, content={"error": "No missing links to export"})

        if format == 'json':
            content = export_json(report)
            media_type = "application/json"
            filename = "missing_links.json"
        elif format == 'csv':
            content = export_csv(report)
            media_type = "text/csv"
            filename = "missing_links.csv"
        else:
            return JSONResponse(status_code=400, content={"error": f"Unknown format: {format}"})

        return Response(
            content=content,
            media_type=media_type,
            headers={"Content-Disposition": f"attachment; filename={filename}"}
        )

    except json.JSONDecodeError as e:
        return JSONResponse(status_code=400, content={"error": f"Invalid JSON data: {str(e)}"})
    except ValueError as e:
        return JSONResponse(status_code=400, content={"error": str(e)})
    except Exception as e:
        logger.exception("Export failed")
        return JSONResponse(status_code=500, content={"error": f"Export failed: {str(e)}"})
