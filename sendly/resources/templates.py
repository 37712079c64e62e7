from __future__ import annotations

from typing import Any, Mapping, Optional
from urllib.parse import quote

from sendly.adapters.http_client import HttpClient, RequestOptions
from sendly.errors import invalid_response, validation_error
from sendly.models import Template, TemplatePreview
from sendly.utils.validation import validate_resource_id


def _template_path(template_id: str, suffix: str = "") -> str:
    validate_resource_id(template_id, "template ID")
    return f"/v1/templates/{quote(template_id, safe='')}{suffix}"


def _templates(data: Any) -> list[Template]:
    items = data.get("templates") if isinstance(data, Mapping) else data
    if items is None:
        return []
    if not isinstance(items, list):
        raise invalid_response("templates", data)
    return [Template.from_api(item) for item in items]


class TemplatesResource:
    """SMS templates with ``{{variable}}`` placeholders.

    Preset templates are read-only; custom templates start as drafts and
    must be published before use.
    """

    def __init__(self, http: HttpClient):
        self._http = http

    async def list(self) -> list[Template]:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/templates"))
        return _templates(data)

    async def presets(self) -> list[Template]:
        data = await self._http.request(RequestOptions(method="GET", path="/v1/templates/presets"))
        return _templates(data)

    async def get(self, template_id: str) -> Template:
        data = await self._http.request(RequestOptions(method="GET", path=_template_path(template_id)))
        return Template.from_api(data)

    async def create(self, name: str, text: str) -> Template:
        if not name:
            raise validation_error("Template name is required")
        if not text:
            raise validation_error("Template text is required")
        data = await self._http.request(
            RequestOptions(method="POST", path="/v1/templates", body={"name": name, "text": text})
        )
        return Template.from_api(data)

    async def update(
        self,
        template_id: str,
        *,
        name: Optional[str] = None,
        text: Optional[str] = None,
    ) -> Template:
        path = _template_path(template_id)
        body: dict[str, Any] = {}
        if name:
            body["name"] = name
        if text:
            body["text"] = text
        data = await self._http.request(RequestOptions(method="PATCH", path=path, body=body))
        return Template.from_api(data)

    async def publish(self, template_id: str) -> Template:
        data = await self._http.request(
            RequestOptions(method="POST", path=_template_path(template_id, "/publish"))
        )
        return Template.from_api(data)

    async def preview(
        self,
        template_id: str,
        variables: Optional[Mapping[str, str]] = None,
    ) -> TemplatePreview:
        """Render a template with sample values without sending anything."""
        path = _template_path(template_id, "/preview")
        body = {"variables": dict(variables)} if variables else {}
        data = await self._http.request(RequestOptions(method="POST", path=path, body=body))
        return TemplatePreview.from_api(data)

    async def delete(self, template_id: str) -> None:
        await self._http.request(RequestOptions(method="DELETE", path=_template_path(template_id)))
