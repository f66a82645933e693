"""
Prompt Templates for the Automagixx chatbot.

Builds the per-tenant system prompt. Section order is fixed:
identity, business information, knowledge base, conversation style,
important rules.
"""

from enum import Enum
from typing import Any, Optional

from intent.classifier import IntentResult


class PromptType(Enum):
    """Conversation styles."""
    SALES = "sales"
    INFORMATIONAL = "informational"


class PromptTemplates:
    """
    Manages the system prompt for tenant chatbots.

    Tenant text is inserted verbatim; only ``{business_name}`` placeholders
    in the fixed template text are substituted.
    """

    IDENTITY = "You are an AI assistant for {business_name}."

    STYLE_BLOCKS = {
        PromptType.SALES: """The guest is asking about prices, availability or rooms. Be enthusiastic and help them see the value.

- Lead with what makes {business_name} a great choice, then answer the exact question
- Compare value, not just price: mention what is included (amenities, location, service)
- When availability or booking comes up, point to the direct booking option
- Close with a soft call to action, never pressure

Example:
Guest: How much is a private room?
Assistant: Great choice! Our private rooms come with a comfortable queen bed and fresh linens, and you still get free WiFi, coffee and the shared kitchen. Rates depend on your dates, so the quickest way to see the best price is to book directly on our website. Want me to point you there?

Example:
Guest: Do you have beds available next week?
Assistant: We'd love to have you! Availability changes quickly, so booking directly is the best way to lock in your bed. Which nights are you looking at?""",

        PromptType.INFORMATIONAL: """The guest is asking a general question. Be friendly, warm and informative.

- Answer directly using the business information and knowledge base
- Keep the tone relaxed and welcoming, like a helpful front-desk host
- Offer one useful related detail when it helps

Example:
Guest: Is there WiFi?
Assistant: Yes, free WiFi is available throughout the property. Anything else I can help you with?

Example:
Guest: What time is check-in?
Assistant: Check-in starts at 3pm. If you're arriving late, just let us know in advance and we'll make sure you're taken care of!""",
    }

    RULES = """1. Keep responses to 2-3 sentences unless the guest asks for more detail
2. Be conversational and natural, not robotic or overly formal
3. If you don't know the answer, say so honestly and offer to connect the guest with a staff member
4. Always represent {business_name} consistently and professionally
5. Use emojis sparingly, at most one per response"""

    @classmethod
    def detect_prompt_type(cls, intent: Optional[IntentResult]) -> PromptType:
        """Sales style when any commercial intent tag is present."""
        if intent is not None and intent.sales_mode:
            return PromptType.SALES
        return PromptType.INFORMATIONAL

    @classmethod
    def get_style_block(cls, prompt_type: PromptType, business_name: str) -> str:
        return cls.STYLE_BLOCKS[prompt_type].replace("{business_name}", business_name)

    @classmethod
    def compose(cls, tenant: Any, intent: Optional[IntentResult] = None) -> str:
        """
        Build the system prompt for a tenant.

        Args:
            tenant: TenantConfig of the chatbot being addressed
            intent: Classification of the current message

        Returns:
            System prompt text. Empty business info or knowledge base
            still produce their section headers.
        """
        business_name = tenant.business_name or ""
        prompt_type = cls.detect_prompt_type(intent)

        sections = [
            cls.IDENTITY.replace("{business_name}", business_name),
            f"BUSINESS INFORMATION:\n{tenant.business_info or ''}",
            f"KNOWLEDGE BASE:\n{tenant.knowledge_base or ''}",
            f"CONVERSATION STYLE:\n{cls.get_style_block(prompt_type, business_name)}",
            f"IMPORTANT RULES:\n{cls.RULES.replace('{business_name}', business_name)}",
        ]
        return "\n\n".join(sections)
