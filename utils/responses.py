from fastapi.responses import JSONResponse
from constants.status import STATUS


def message_response(message: str, status_code: int = 200, **extra):
    """Plain acknowledgement body for actions that return no resource."""
    content = {"status": STATUS["SUCCESS"], "message": message}
    content.update(extra)
    return JSONResponse(content=content, status_code=status_code)


def error_response(message: str, status_code: int = 400):
    """Body used by the catch-all exception handler."""
    return JSONResponse(
        content={"status": STATUS["ERROR"], "message": message},
        status_code=status_code
    )
