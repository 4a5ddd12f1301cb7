from authsession.services.auth_client import (
    AuthServiceClient,
    AuthServiceError,
    RequestRejected,
    ServiceResponse,
)
from authsession.services.session import (
    PROFILE_DESTINATION,
    ROOT_DESTINATION,
    SUCCESS_DESTINATION,
    FlowResult,
    SessionController,
)
from authsession.services.token_store import TokenStore

__all__ = [
    "AuthServiceClient",
    "AuthServiceError",
    "FlowResult",
    "PROFILE_DESTINATION",
    "ROOT_DESTINATION",
    "RequestRejected",
    "SUCCESS_DESTINATION",
    "ServiceResponse",
    "SessionController",
    "TokenStore",
]
