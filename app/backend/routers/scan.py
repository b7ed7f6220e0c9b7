"""Scan router: run scans, read the last result, and drill into autoload and variations."""

from fastapi import APIRouter, Depends, Query

from ..services.context import envelope, get_context, read_or_error

router = APIRouter(prefix="/api", tags=["scan"])


@router.post("/scan")
def run_scan(context=Depends(get_context)):
    """Run a full health scan and return the new result."""
    result = context.run_scan()
    if not result.success:
        return envelope(False, {"error": result.error_kind.value}, result.message, status_code=500)
    return envelope(True, result.data, f"Health score {result.data['health_score']} ({result.data['score_label']})")


def _last_scan_with_age(app_context):
    scan = app_context.get_last_scan()
    if scan is None:
        return None
    return {**scan.to_dict(), "time_since_scan": app_context.scanner.time_since_scan()}


@router.get("/scan/last")
def last_scan(context=Depends(get_context)):
    """Most recent scan result, or null data if no scan has run."""
    data, error = read_or_error(context, "get_last_scan", _last_scan_with_age, app_context=context)
    if error is not None:
        return error
    if data is None:
        return envelope(True, None, "No scan data")
    return envelope(True, data)


@router.get("/metrics")
def display_metrics(context=Depends(get_context)):
    """Labelled metric cards from the last scan."""
    data, error = read_or_error(context, "get_display_metrics", context.get_display_metrics)
    return error if error is not None else envelope(True, data)


@router.get("/autoload/top")
def top_autoloaded(limit: int = Query(10, ge=1, le=50), context=Depends(get_context)):
    """Largest autoloaded options."""
    data, error = read_or_error(context, "get_top_autoloaded", context.get_top_autoloaded, n=limit)
    return error if error is not None else envelope(True, data)


@router.get("/products/high-variation")
def high_variation_products(
    threshold: int = Query(50, ge=1),
    limit: int = Query(10, ge=1, le=100),
    context=Depends(get_context),
):
    """Products with at least `threshold` variations."""
    data, error = read_or_error(
        context, "get_high_variation", context.get_high_variation, threshold=threshold, n=limit,
    )
    return error if error is not None else envelope(True, data)
