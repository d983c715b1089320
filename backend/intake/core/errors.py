from fastapi import status


class IntakeError(Exception):
    """
    Root of every classified ingestion error.

    Carries the user-facing message and the HTTP status the error envelope
    should be sent with, so handlers never need to inspect the cause.
    """

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message
