"""
Widget markup for tenant chatbots.

Pure render functions: a tenant config in, HTML out. Tenant-supplied text is
escaped for the context it lands in (HTML body or JavaScript string).
"""

import html
import json
import re
from string import Template
from typing import Any

DEFAULT_COLOR = "#0066FF"
COLOR_PATTERN = re.compile(r"^#[0-9a-fA-F]{3,8}$")


def safe_color(value: Any, default: str = DEFAULT_COLOR) -> str:
    """Return ``value`` if it is a hex color, otherwise ``default``."""
    if isinstance(value, str) and COLOR_PATTERN.match(value):
        return value
    return default


def js_string(value: Any) -> str:
    """Encode a value as a JavaScript string literal safe inside <script>."""
    return json.dumps("" if value is None else str(value)).replace("</", "<\\/")


EMBED_TEMPLATE = Template("""<!-- $brand Chatbot -->
<script>
(function(){
  var d=document,s=d.createElement('div');
  s.id='automagixx-chat';
  s.innerHTML='<style>#automagixx-btn{position:fixed;bottom:20px;right:20px;width:60px;height:60px;border-radius:50%;background:$color;color:white;border:none;font-size:28px;cursor:pointer;box-shadow:0 4px 12px rgba(0,0,0,0.15);z-index:9999}#automagixx-win{display:none;position:fixed;bottom:100px;right:20px;width:380px;height:600px;background:white;border-radius:16px;box-shadow:0 8px 32px rgba(0,0,0,0.12);z-index:9999;flex-direction:column}#automagixx-win iframe{width:100%;height:100%;border:0;border-radius:16px}</style><button id="automagixx-btn" onclick="toggleChat()">&#128172;</button><div id="automagixx-win"><iframe src="$widget_url"></iframe></div>';
  d.body.appendChild(s);
  window.toggleChat=function(){
    var w=d.getElementById('automagixx-win'),b=d.getElementById('automagixx-btn');
    if(w.style.display==='none'||!w.style.display){w.style.display='flex';b.style.display='none'}else{w.style.display='none';b.style.display='block'}
  };
})();
</script>""")


WIDGET_TEMPLATE = Template("""<!DOCTYPE html>
<html>
<head>
  <meta charset="UTF-8">
  <meta name="viewport" content="width=device-width, initial-scale=1.0">
  <title>$business_name</title>
  <style>
    * { margin: 0; padding: 0; box-sizing: border-box; }
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; height: 100vh; display: flex; flex-direction: column; }
    #header { background: $primary_color; color: white; padding: 16px; }
    #header h3 { font-size: 16px; font-weight: 600; }
    #header p { font-size: 12px; opacity: 0.9; margin-top: 4px; }
    #messages { flex: 1; overflow-y: auto; padding: 16px; background: #f8f9fa; display: flex; flex-direction: column; gap: 12px; }
    .msg { max-width: 80%; padding: 12px 16px; border-radius: 12px; font-size: 14px; line-height: 1.5; }
    .user { background: $primary_color; color: white; align-self: flex-end; }
    .bot { background: white; color: #1f2937; align-self: flex-start; box-shadow: 0 1px 2px rgba(0,0,0,0.05); }
    #input-area { padding: 16px; border-top: 1px solid #e5e7eb; background: white; }
    #input-form { display: flex; gap: 8px; }
    #msg-input { flex: 1; padding: 12px; border: 1px solid #e5e7eb; border-radius: 8px; font-size: 14px; }
    #send-btn { background: $accent_color; color: white; border: none; padding: 12px 20px; border-radius: 8px; cursor: pointer; font-weight: 500; }
    #send-btn:disabled { background: #ccc; cursor: not-allowed; }
  </style>
</head>
<body>
  <div id="header">
    <h3>$business_name</h3>
    <p>AI Assistant &bull; Online</p>
  </div>
  <div id="messages"></div>
  <div id="input-area">
    <form id="input-form">
      <input id="msg-input" placeholder="Type your message..." autocomplete="off" />
      <button id="send-btn" type="submit">Send</button>
    </form>
  </div>
  <script>
    const chatId = $chat_id;
    const welcomeMessage = $welcome_message;
    const conversationId = 'conv_' + Date.now().toString(36) + '_' + Math.random().toString(36).slice(2, 11);
    const messages = document.getElementById('messages');
    const form = document.getElementById('input-form');
    const input = document.getElementById('msg-input');
    const sendBtn = document.getElementById('send-btn');

    addMsg(welcomeMessage, 'bot');

    form.onsubmit = async (e) => {
      e.preventDefault();
      const msg = input.value.trim();
      if (!msg) return;

      input.value = '';
      sendBtn.disabled = true;
      addMsg(msg, 'user');

      try {
        const res = await fetch('/api/chat/' + encodeURIComponent(chatId) + '/message', {
          method: 'POST',
          headers: { 'Content-Type': 'application/json' },
          body: JSON.stringify({ message: msg, conversationId: conversationId })
        });
        const data = await res.json();
        addMsg(data.response || data.error, 'bot');
      } catch (error) {
        addMsg('Sorry, I encountered an error. Please try again.', 'bot');
      }

      sendBtn.disabled = false;
      input.focus();
    };

    function addMsg(text, sender) {
      const div = document.createElement('div');
      div.className = 'msg ' + sender;
      div.textContent = text;
      messages.appendChild(div);
      messages.scrollTop = messages.scrollHeight;
    }
  </script>
</body>
</html>""")


def widget_url(tenant_id: str, base_url: str) -> str:
    return f"{base_url.rstrip('/')}/widget/{tenant_id}"


def render_embed_code(tenant: Any, base_url: str, brand_name: str = "Automagixx") -> str:
    """Snippet a tenant pastes before </body> to get the floating chat button."""
    return EMBED_TEMPLATE.substitute(
        brand=html.escape(brand_name),
        color=safe_color(tenant.customization.primary_color),
        widget_url=html.escape(widget_url(tenant.id, base_url), quote=True),
    )


def render_widget_page(tenant: Any) -> str:
    """Full chat page served inside the iframe."""
    customization = tenant.customization
    primary = safe_color(customization.primary_color)
    return WIDGET_TEMPLATE.substitute(
        business_name=html.escape(tenant.business_name or ""),
        primary_color=primary,
        accent_color=safe_color(customization.accent_color, default=primary),
        chat_id=js_string(tenant.id),
        welcome_message=js_string(customization.welcome_message),
    )
