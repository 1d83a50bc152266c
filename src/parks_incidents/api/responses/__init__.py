from .handlers import get_request_id, install_exception_handlers
from .models import ErrorDetail, ErrorResponse, ResponseMetadata, ResponseStatus

__all__ = [
    "ErrorDetail",
    "ErrorResponse",
    "ResponseMetadata",
    "ResponseStatus",
    "install_exception_handlers",
    "get_request_id",
]
