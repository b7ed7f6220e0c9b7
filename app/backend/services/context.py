"""Request-scoped access to the AppContext built at startup."""

from fastapi import HTTPException, Request
from fastapi.responses import JSONResponse

from framework.context import AppContext


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise HTTPException(status_code=503, detail="Store context not initialized")
    return context


def envelope(success: bool, data=None, message: str = "", status_code: int = 200):
    """Uniform {success, data, message} response body."""
    body = {"success": success, "data": data, "message": message}
    if status_code == 200:
        return body
    return JSONResponse(status_code=status_code, content=body)


def read_or_error(context: AppContext, name: str, handler, **kwargs):
    """
    Run a read through context.run_operation.
    Returns (payload, None) on success, or (None, error response) when the
    store raised, so routers answer with the envelope instead of a bare 500.
    """
    result = context.run_operation(name, lambda: {"payload": handler(**kwargs)})
    if not result.success:
        return None, envelope(False, {"error": result.error_kind.value}, result.message, status_code=500)
    return result.data["payload"], None
