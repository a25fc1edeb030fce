from fastapi import Depends, Header
from dependency_injector.wiring import Provide, inject
from starlette.datastructures import FormData, UploadFile

from src.sales.containers import Container
from src.sales.core.domain.models import DocumentUpload, Principal
from src.sales.core.services.auth_resolver import AuthResolver

DEFAULT_CONTENT_TYPE = "application/octet-stream"


@inject
async def get_current_principal(
    authorization: str | None = Header(default=None),
    resolver: AuthResolver = Depends(Provide[Container.auth_resolver]),
) -> Principal:
    """
    Resolve the caller of a protected route.

    Auth failures are raised as exceptions and rendered by the application's
    exception handlers, so routes only ever receive an authenticated principal.
    """
    return await resolver.resolve(authorization)


async def read_document_uploads(form: FormData) -> list[DocumentUpload]:
    """Collect every file part of a multipart form as a DocumentUpload."""
    uploads = []
    for field_name, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        uploads.append(
            DocumentUpload(
                field_name=field_name,
                filename=value.filename or field_name,
                content_type=value.content_type or DEFAULT_CONTENT_TYPE,
                content=await value.read(),
            )
        )
    return uploads
