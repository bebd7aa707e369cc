from typing import Dict, Optional

from fastapi import status
from libs.result import Error

# Seconds a caller should wait before replaying a request that lost a write conflict
RETRY_AFTER_SECONDS = 1


class ClientError(Exception):
    def __init__(
        self,
        base_error: Error,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.base_error = base_error
        self.status_code = status_code
        self.headers = headers
        super().__init__(base_error.message)


class RetryableError(ClientError):
    """
    503 for CONCURRENCY_CONFLICT. Webhook senders redeliver on 5xx, so the
    event is retried instead of lost.
    """

    def __init__(self, base_error: Error, retry_after: int = RETRY_AFTER_SECONDS):
        super().__init__(
            base_error,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            headers={"Retry-After": str(retry_after)},
        )


class ServerError(Exception):
    def __init__(self, base_error: Error):
        self.base_error = base_error
        super().__init__(base_error.message)
