# app/api/responses.py
from typing import Any, Dict, Union

from fastapi.responses import JSONResponse

from app.models.error_models import FlowError
from app.models.result_models import Ok


def success_response(data: Dict[str, Any], status: int = 200) -> JSONResponse:
    return JSONResponse(content={"success": True, **data}, status_code=status)


def error_response(message: str, status: int = 400, code: str = "ERROR") -> JSONResponse:
    return JSONResponse(
        content={"success": False, "error": message, "code": code},
        status_code=status,
    )


def flow_response(outcome: Union[Ok[Dict[str, Any]], FlowError]) -> JSONResponse:
    if isinstance(outcome, FlowError):
        return error_response(outcome.message, outcome.status, outcome.code)
    return success_response(outcome.value)
