# canteen/api/errors.py
from fastapi import HTTPException

from canteen.domain.errors import InvalidTransition, OrderNotFound, ValidationError


def to_http_error(e: Exception) -> HTTPException:
    """Map a domain error onto the HTTP status the clients expect."""
    if isinstance(e, InvalidTransition):
        return HTTPException(status_code=409, detail=e.to_dict())
    if isinstance(e, OrderNotFound):
        return HTTPException(status_code=404, detail=str(e))
    if isinstance(e, PermissionError):
        return HTTPException(status_code=403, detail=str(e))
    if isinstance(e, ValidationError):
        return HTTPException(status_code=400, detail=str(e))
    return HTTPException(status_code=500, detail=str(e))
