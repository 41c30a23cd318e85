"""Turn service result pairs into HTTP responses."""

from typing import Annotated, Any

from fastapi import Body, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder

from gymdesk.app.services.base import FORBIDDEN, NOT_FOUND, ServiceResponse

# Bodies reach the services as raw JSON; the services validate them so that bad
# input is a 400 with a "field: message" detail rather than FastAPI's 422.
JsonBody = Annotated[dict | None, Body(description="camelCase JSON object, validated by the service layer")]

ERROR_STATUS = {
    NOT_FOUND: status.HTTP_404_NOT_FOUND,
    FORBIDDEN: status.HTTP_403_FORBIDDEN,
}


def unwrap(result: ServiceResponse) -> Any:
    """Return the camelCase JSON form of ``result.data`` or raise the matching HTTP error."""
    data, error = result
    if error:
        raise HTTPException(status_code=ERROR_STATUS.get(error, status.HTTP_400_BAD_REQUEST), detail=error)
    return jsonable_encoder(data, by_alias=True)


def query_filters(request: Request) -> dict:
    return dict(request.query_params)
