"""WebDAV reverse proxy route — ANY /proxy/{path}."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from cloudmgr.services import get_webdav_proxy
from cloudmgr.services.webdav_proxy import ProxyRequest, WebDAVProxy

router = APIRouter()

PROXY_METHODS = [
    "GET", "HEAD", "POST", "PUT", "DELETE", "OPTIONS", "PATCH",
    "PROPFIND", "PROPPATCH", "MKCOL", "MOVE", "COPY", "LOCK", "UNLOCK",
]

# Upstream message framing does not survive buffering
FRAMING_HEADERS = frozenset({"transfer-encoding"})


@router.api_route("/proxy", methods=PROXY_METHODS, include_in_schema=False)
@router.api_route("/proxy/{path:path}", methods=PROXY_METHODS, include_in_schema=False)
async def webdav_proxy(
    request: Request,
    proxy: WebDAVProxy = Depends(get_webdav_proxy),
) -> Response:
    """Relay the request to the upstream WebDAV origin."""
    path = request.path_params.get("path", "")
    result = await proxy.handle(
        ProxyRequest(
            method=request.method,
            path_segments=path.split("/") if path else [],
            headers=list(request.headers.items()),
            body=await request.body(),
        )
    )

    # The relayed body is fully buffered, so framing comes from this response
    response = Response(content=result.body, status_code=result.status_code)
    if request.method == "HEAD":
        # Starlette would advertise the empty HEAD body as the entity length
        del response.headers["content-length"]
    for name, value in result.headers:
        if name.lower() in FRAMING_HEADERS:
            continue
        response.headers.append(name, value)
    return response
