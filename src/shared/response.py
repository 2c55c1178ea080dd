"""Response utilities for Lambda functions."""

import base64
import json
from typing import Any, Dict, Optional
from datetime import datetime, date
from decimal import Decimal

from pydantic import BaseModel


CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
    "Access-Control-Allow-Methods": "GET,POST,PUT,DELETE,OPTIONS",
    "Access-Control-Expose-Headers": "Content-Disposition"
}


class DecimalEncoder(json.JSONEncoder):
    """JSON encoder for Decimal, datetime and pydantic objects."""

    def default(self, obj):
        if isinstance(obj, Decimal):
            return float(obj)
        if isinstance(obj, (datetime, date)):
            return obj.isoformat()
        if isinstance(obj, BaseModel):
            return obj.model_dump(mode='python')
        return super().default(obj)


def _build_headers(content_type: str, headers: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    merged = {"Content-Type": content_type, **CORS_HEADERS}
    if headers:
        merged.update(headers)
    return merged


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status_code: int = 200,
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a standardized success response.

    Args:
        data: Response data
        message: Optional success message
        status_code: HTTP status code (default: 200)
        headers: Optional additional headers

    Returns:
        Lambda proxy response dictionary
    """
    body = {
        "success": True,
        "data": data
    }

    if message:
        body["message"] = message

    return {
        "statusCode": status_code,
        "headers": _build_headers("application/json", headers),
        "body": json.dumps(body, cls=DecimalEncoder)
    }


def error_response(
    message: str,
    status_code: int = 500,
    error_code: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None
) -> Dict[str, Any]:
    """
    Create a standardized error response.

    Args:
        message: Error message
        status_code: HTTP status code (default: 500)
        error_code: Optional error code
        details: Optional error details
        headers: Optional additional headers

    Returns:
        Lambda proxy response dictionary
    """
    body = {
        "success": False,
        "error": {
            "message": message,
            "code": error_code or f"ERROR_{status_code}"
        }
    }

    if details:
        body["error"]["details"] = details

    return {
        "statusCode": status_code,
        "headers": _build_headers("application/json", headers),
        "body": json.dumps(body, cls=DecimalEncoder)
    }


def file_response(content: bytes, filename: str, content_type: str) -> Dict[str, Any]:
    """
    Create a downloadable file response.

    The body is base64 encoded so API Gateway can pass binary documents
    (spreadsheets, PDFs) through unchanged.
    """
    return {
        "statusCode": 200,
        "headers": _build_headers(
            content_type,
            {"Content-Disposition": f'attachment; filename="{filename}"'}
        ),
        "body": base64.b64encode(content).decode('ascii'),
        "isBase64Encoded": True
    }


def validation_error_response(
    message: str,
    details: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Create a validation error response."""
    return error_response(
        message=message,
        status_code=400,
        error_code="VALIDATION_ERROR",
        details=details
    )


def not_found_response(message: str = "Resource not found") -> Dict[str, Any]:
    """Create a not found error response."""
    return error_response(
        message=message,
        status_code=404,
        error_code="NOT_FOUND"
    )


def conflict_response(message: str = "Request already in progress") -> Dict[str, Any]:
    """Create a conflict error response."""
    return error_response(
        message=message,
        status_code=409,
        error_code="CONFLICT"
    )
