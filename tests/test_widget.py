"""Tests for widget and embed code rendering."""

import pytest

from api.tenants.store import ConfigStore
from api.widget.render import (
    js_string,
    render_embed_code,
    render_widget_page,
    safe_color,
    widget_url,
)


@pytest.fixture
def store():
    return ConfigStore(None)


class TestSafeColor:
    @pytest.mark.parametrize("value", ["#fff", "#0066FF", "#0066ffcc"])
    def test_hex_colors_pass(self, value):
        assert safe_color(value) == value

    @pytest.mark.parametrize("value", ["red", "#12", "#0066FF;}</style>", None, 42])
    def test_everything_else_falls_back(self, value):
        assert safe_color(value) == "#0066FF"


def test_js_string_escapes_script_close():
    encoded = js_string('bye</script><script>alert("x")')
    assert "</script>" not in encoded
    assert encoded.startswith('"') and encoded.endswith('"')


def test_widget_url_strips_trailing_slash():
    assert widget_url("bot_1", "http://chat.example.com/") == "http://chat.example.com/widget/bot_1"


class TestEmbedCode:
    def test_points_at_widget(self, store):
        tenant = store.create({"businessName": "Test Inn"})
        code = render_embed_code(tenant, "http://chat.example.com")

        assert f'src="http://chat.example.com/widget/{tenant.id}"' in code
        assert "#0066FF" in code
        assert code.startswith("<!-- Automagixx Chatbot -->")

    def test_uses_primary_color(self, store):
        tenant = store.create({
            "businessName": "Test Inn",
            "customization": {"primaryColor": "#FF5500"},
        })
        assert "background:#FF5500" in render_embed_code(tenant, "http://x")


class TestWidgetPage:
    def test_defaults(self, store):
        tenant = store.create({"businessName": "Test Inn"})
        page = render_widget_page(tenant)

        assert "<title>Test Inn</title>" in page
        assert "Hi! I'm Test Inn's AI assistant. How can I help you today?" in page
        assert f'const chatId = "{tenant.id}";' in page

    def test_business_name_is_escaped(self, store):
        tenant = store.create({"businessName": "<script>alert(1)</script>"})
        page = render_widget_page(tenant)

        assert "<title>&lt;script&gt;alert(1)&lt;/script&gt;</title>" in page
        assert "<h3><script>" not in page

    def test_welcome_message_cannot_break_out_of_script(self, store):
        tenant = store.create({
            "businessName": "Test Inn",
            "customization": {"welcomeMessage": "Aloha</script><img src=x>"},
        })
        page = render_widget_page(tenant)

        assert "Aloha</script>" not in page
        assert "Aloha<\\/script>" in page

    def test_invalid_color_replaced(self, store):
        tenant = store.create({
            "businessName": "Test Inn",
            "customization": {"primaryColor": "red;} body{display:none"},
        })
        page = render_widget_page(tenant)

        assert "display:none" not in page
        assert "background: #0066FF" in page

    def test_accent_defaults_to_primary(self, store):
        tenant = store.create({
            "businessName": "Test Inn",
            "customization": {"primaryColor": "#112233"},
        })
        assert "#send-btn { background: #112233" in render_widget_page(tenant)
