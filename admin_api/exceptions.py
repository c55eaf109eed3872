from fastapi import status


class AdminApiException(Exception):
    def __init__(self, message: str | None = None):
        self.message = message
        super().__init__(message)


class AdminApiHTTPException(AdminApiException):
    def __init__(self, message: str | None = None, status_code: int = status.HTTP_400_BAD_REQUEST):
        self.status_code = status_code
        super().__init__(message)


class InvalidID(AdminApiHTTPException):
    def __init__(self, value: str | None = None, kind: str = "task", expected: str = "a positive integer") -> None:
        super().__init__(
            f"Invalid {kind} id {value!r}: expected {expected}",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class InvalidExternalID(AdminApiHTTPException):
    def __init__(self, value: str | None = None, task_run_id: str | None = None) -> None:
        super().__init__(
            f"Task run {task_run_id} has a malformed execution instance id {value!r}",
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        )


class InvalidPagination(AdminApiHTTPException):
    def __init__(self, page: int, page_size: int) -> None:
        super().__init__(
            f"Invalid pagination page={page} page_size={page_size}: both must be at least 1",
            status_code=status.HTTP_400_BAD_REQUEST,
        )


class TaskNotFound(AdminApiHTTPException):
    def __init__(self, task_id: str | None = None) -> None:
        super().__init__(f"Task {task_id} not found", status_code=status.HTTP_404_NOT_FOUND)


class TaskRunNotFound(AdminApiHTTPException):
    def __init__(self, task_run_id: str | None = None) -> None:
        super().__init__(f"Task run {task_run_id} not found", status_code=status.HTTP_404_NOT_FOUND)


class UserNotFound(AdminApiHTTPException):
    def __init__(self, user_id: str | None = None) -> None:
        super().__init__(f"User {user_id} not found", status_code=status.HTTP_404_NOT_FOUND)


class PersistenceError(AdminApiHTTPException):
    def __init__(self, operation: str, reason: str | None = None) -> None:
        self.operation = operation
        super().__init__(
            f"Persistence failure during {operation}: {reason}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class MappingError(AdminApiHTTPException):
    def __init__(self, task_id: str | None = None, reason: str | None = None) -> None:
        super().__init__(
            f"Failed to map task {task_id}: {reason}",
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )


class CacheUnavailable(AdminApiException):
    def __init__(self, key: str | None = None, reason: str | None = None) -> None:
        self.key = key
        super().__init__(f"Cache unavailable for key={key}: {reason}")


class NoAuthContext(AdminApiHTTPException):
    def __init__(self) -> None:
        super().__init__("No authentication context on the request", status_code=status.HTTP_401_UNAUTHORIZED)


class InvalidClaims(AdminApiHTTPException):
    def __init__(self, reason: str | None = None) -> None:
        super().__init__(f"Invalid claims: {reason}", status_code=status.HTTP_401_UNAUTHORIZED)


class InvalidRole(AdminApiHTTPException):
    def __init__(self, role: str | None = None) -> None:
        super().__init__(f"Invalid role {role}", status_code=status.HTTP_400_BAD_REQUEST)


class InsufficientRole(AdminApiHTTPException):
    def __init__(self, user_id: str | None = None, required: list[str] | None = None) -> None:
        required_str = ", ".join(required or [])
        super().__init__(
            f"User {user_id} lacks a required role ({required_str})",
            status_code=status.HTTP_403_FORBIDDEN,
        )


class IdentityProviderError(AdminApiHTTPException):
    def __init__(self, status_code: int, url: str, detail: str | None = None) -> None:
        self.provider_status_code = status_code
        self.url = url
        super().__init__(
            f"Identity provider request failed. status_code={status_code} url={url} detail={detail}",
            status_code=status.HTTP_502_BAD_GATEWAY,
        )
