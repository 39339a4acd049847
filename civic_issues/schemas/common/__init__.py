from .response_schemas import BaseResponse, ErrorDetails

__all__ = ["BaseResponse", "ErrorDetails"]
