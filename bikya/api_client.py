import logging
from functools import cache
from http import HTTPStatus
from typing import Any

import requests

from bikya.custom_types import DictWithStringKeys
from bikya.env import api_base_url, request_timeout

GENERIC_API_ERROR = "An API error occurred."

logger = logging.getLogger(__name__)


class ApiError(RuntimeError):
    def __init__(self, message: str, status: int | None = None, data: Any = None):
        super().__init__(message)
        self.status = status
        self.data = data


class AuthenticationMissingError(ApiError):
    pass


@cache
def create_http_session() -> requests.Session:
    logger.debug("Creating HTTP session")
    return requests.Session()


def build_headers(token: str | None = None) -> dict[str, str]:
    headers = {"Content-Type": "application/json", "Accept": "application/json"}
    if token:
        headers["Authorization"] = f"Bearer {token}"
    return headers


def require_token(
    token: str | None, message: str = "Authentication token is missing."
) -> str:
    if not token:
        raise AuthenticationMissingError(message)
    return token


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def extract_error_message(status: int, data: Any) -> str:
    """Turn an error body into one message.

    `errors[].msg` wins (joined with ", "), then `message`, then the status phrase.
    """
    if isinstance(data, dict):
        errors = data.get("errors")
        if errors:
            return ", ".join(
                str(err.get("msg", "")) if isinstance(err, dict) else str(err)
                for err in errors
            )
        if data.get("message"):
            return str(data["message"])
    return _status_text(status) or GENERIC_API_ERROR


def handle_response(response: Any) -> Any:
    content_type = response.headers.get("content-type") or ""
    status = response.status_code

    if "application/json" not in content_type:
        text = response.text
        if status >= 400:
            logger.error(f"Server returned non-JSON error ({status}): {text}")
            raise ApiError(
                f"Server returned status {status}: {text or 'Non-JSON error or no content'}",
                status=status,
            )
        return {"message": text}

    try:
        data = response.json()
    except ValueError as e:
        raise ApiError(
            f"Server returned status {status}: malformed JSON body", status=status
        ) from e

    if status >= 400:
        message = extract_error_message(status, data)
        logger.error(f"API request failed with {status}: {message}")
        raise ApiError(message, status=status, data=data)
    return data


def api_request(
    method: str,
    path: str,
    token: str | None = None,
    payload: DictWithStringKeys | None = None,
) -> Any:
    url = f"{api_base_url}{path}"
    logger.debug(f"{method.upper()} {url}")
    try:
        response = create_http_session().request(
            method.upper(),
            url,
            json=payload,
            headers=build_headers(token),
            timeout=request_timeout,
        )
    except requests.RequestException as e:
        logger.error(f"Network error calling {url}: {e}")
        raise ApiError(f"Network request failed: {e}") from e
    return handle_response(response)
