# ABOUTME: Error type for failed Notion API calls.
# ABOUTME: Carries the HTTP status and Notion error code when available.


class NotionApiError(Exception):
    """Raised when a Notion API request fails.

    Attributes:
        message: Human-readable description.
        status: HTTP status code, or None for transport failures.
        code: Notion error code (e.g. ``object_not_found``), or None.
    """

    def __init__(self, message: str, status: int | None = None, code: str | None = None):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code

    def __str__(self) -> str:
        details = ", ".join(
            part for part in (
                f"status {self.status}" if self.status is not None else "",
                self.code or "",
            ) if part
        )
        return f"{self.message} ({details})" if details else self.message
