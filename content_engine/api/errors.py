# content_engine/api/errors.py
"""Standardized API error responses."""

from fastapi import HTTPException, status


class APIError:
    """Helper class for standardized API error responses."""

    @staticmethod
    def not_found(resource: str, identifier: str = "") -> HTTPException:
        detail = f"{resource} not found"
        if identifier:
            detail = f"{resource} not found: {identifier}"
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail)

    @staticmethod
    def bad_request(message: str) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=message)

    @staticmethod
    def forbidden(message: str) -> HTTPException:
        return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=message)
