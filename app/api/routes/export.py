"""
Export Routes
All pass requests grouped by route, as JSON, CSV, Excel or PDF
"""
from enum import Enum
from typing import Optional
from fastapi import APIRouter, Depends
from fastapi.responses import Response

from app.api.dependencies import get_pass_store
from app.api.routes.auth import require_admin
from app.api.routes.passes import to_http_error
from app.exceptions import PassPortalError
from app.models.pass_request import ProfileType
from app.models.user import User
from app.services.export import (
    filter_by_profile_type,
    group_by_route,
    requests_to_csv,
    requests_to_pdf,
    requests_to_xlsx,
    route_label,
)
from app.services.pass_store import PassRequestStore

router = APIRouter()


class ExportFormat(str, Enum):
    JSON = "json"
    CSV = "csv"
    XLSX = "xlsx"
    PDF = "pdf"


MEDIA_TYPES = {
    ExportFormat.CSV: "text/csv",
    ExportFormat.XLSX: "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    ExportFormat.PDF: "application/pdf",
}


@router.get("/requests")
async def export_requests(
    profile_type: Optional[ProfileType] = None,
    format: ExportFormat = ExportFormat.JSON,
    admin: User = Depends(require_admin),
    store: PassRequestStore = Depends(get_pass_store)
):
    """Every request grouped by route, general pool first (Admin only)"""
    try:
        requests = await store.list_all_requests()
    except PassPortalError as exc:
        raise to_http_error(exc)

    groups = group_by_route(filter_by_profile_type(requests, profile_type))

    if format == ExportFormat.JSON:
        return {
            "total": sum(len(group) for group in groups.values()),
            "routes": [
                {
                    "route": key,
                    "label": route_label(key),
                    "requests": [request.model_dump(mode="json", by_alias=True) for request in group],
                }
                for key, group in groups.items()
            ]
        }

    suffix = profile_type.value.upper() if profile_type else "ALL"
    if format == ExportFormat.CSV:
        content = requests_to_csv(groups)
    elif format == ExportFormat.XLSX:
        content = requests_to_xlsx(groups)
    else:
        content = requests_to_pdf(groups, title=f"Bus Pass Report - {suffix}")

    return Response(
        content=content,
        media_type=MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="BusPassRequests_{suffix}.{format.value}"'}
    )
