from .token_schemas import AnonymousSessionResponse, CurrentUserResponse

__all__ = ["AnonymousSessionResponse", "CurrentUserResponse"]
