import json

import pytest
import respx
from httpx import Response

from sendly.errors import SendlyError


BASE = "https://sendly.live/api"

TEMPLATE = {
    "id": "tpl_preset_otp",
    "name": "OTP",
    "text": "Your {{app_name}} code is {{code}}",
    "variables": [{"key": "app_name", "type": "string"}, {"key": "code", "type": "string"}],
    "is_preset": True,
    "preset_slug": "otp",
    "status": "published",
    "version": 1,
}


@pytest.mark.asyncio
@respx.mock
async def test_list_and_presets(sendly):
    respx.get(f"{BASE}/v1/templates").mock(return_value=Response(200, json={"templates": [TEMPLATE]}))
    respx.get(f"{BASE}/v1/templates/presets").mock(return_value=Response(200, json={"templates": [TEMPLATE]}))
    templates = await sendly.templates.list()
    assert templates[0].variables[1].key == "code"
    presets = await sendly.templates.presets()
    assert presets[0].preset_slug == "otp"


@pytest.mark.asyncio
@respx.mock
async def test_create_update_publish(sendly):
    draft = dict(TEMPLATE, id="tpl_custom", is_preset=False, preset_slug=None, status="draft")
    create = respx.post(f"{BASE}/v1/templates").mock(return_value=Response(200, json=draft))
    update = respx.patch(f"{BASE}/v1/templates/tpl_custom").mock(return_value=Response(200, json=dict(draft, name="Login")))
    respx.post(f"{BASE}/v1/templates/tpl_custom/publish").mock(
        return_value=Response(200, json=dict(draft, status="published", version=2))
    )

    created = await sendly.templates.create("Custom", "Code: {{code}}")
    assert json.loads(create.calls.last.request.content) == {"name": "Custom", "text": "Code: {{code}}"}
    assert created.status == "draft"

    updated = await sendly.templates.update("tpl_custom", name="Login")
    assert json.loads(update.calls.last.request.content) == {"name": "Login"}
    assert updated.name == "Login"

    published = await sendly.templates.publish("tpl_custom")
    assert (published.status, published.version) == ("published", 2)


@pytest.mark.asyncio
async def test_create_requires_name_and_text(sendly):
    with pytest.raises(SendlyError, match="Template name is required"):
        await sendly.templates.create("", "text")
    with pytest.raises(SendlyError, match="Template text is required"):
        await sendly.templates.create("name", "")


@pytest.mark.asyncio
@respx.mock
async def test_preview_with_and_without_variables(sendly):
    route = respx.post(f"{BASE}/v1/templates/tpl_preset_otp/preview").mock(
        return_value=Response(
            200,
            json={
                "id": "tpl_preset_otp",
                "name": "OTP",
                "original_text": TEMPLATE["text"],
                "preview_text": "Your Acme code is 123456",
            },
        )
    )
    preview = await sendly.templates.preview("tpl_preset_otp", {"app_name": "Acme"})
    assert json.loads(route.calls.last.request.content) == {"variables": {"app_name": "Acme"}}
    assert preview.preview_text == "Your Acme code is 123456"

    await sendly.templates.preview("tpl_preset_otp")
    assert json.loads(route.calls.last.request.content) == {}


@pytest.mark.asyncio
@respx.mock
async def test_get_and_delete(sendly):
    respx.get(f"{BASE}/v1/templates/tpl_preset_otp").mock(return_value=Response(200, json=TEMPLATE))
    delete = respx.delete(f"{BASE}/v1/templates/tpl_custom").mock(return_value=Response(204))
    assert (await sendly.templates.get("tpl_preset_otp")).is_preset is True
    await sendly.templates.delete("tpl_custom")
    assert delete.called
