"""Menu-aware chat recommendations."""

import logging
from dataclasses import dataclass

from dining_assistant.services.llm import LlmGateway
from dining_assistant.services.summary import (
    DEFAULT_ITEMS_PER_CATEGORY,
    DEFAULT_TRUNCATION_THRESHOLD,
    truncate_menu_summary,
)

_logger = logging.getLogger(__name__)

APOLOGY = (
    "I'm having trouble processing your request right now. "
    "Could you try asking a more specific question about the menu items?"
)
NO_MENU = "No menu data is currently available."

_ITEM_FORMAT = """- For each food item, use the format "**[Food Item]**" (with double asterisks)
- List each food item on a NEW LINE with double asterisks, like:
  "**Turkey Breast** (Calories: 120, Protein: 24g, Carbs: 0g, Fat: 3g)
  **Swiss Cheese** (Calories: 80, Protein: 8g, Carbs: 1g, Fat: 6g)
  **Lettuce** (Calories: 5, Protein: 0g, Carbs: 1g, Fat: 0g)"
- IMPORTANT: Include estimated nutrition information for EACH individual food item in parentheses after the item name
- For each meal option, also include a meal total with format: "Total: Calories: X, Protein: Xg, Carbs: Xg, Fat: Xg\""""

_OPTIONS_FORMAT = (
    '- Use "**Option 1: [Name]**", "**Option 2: [Name]**", and '
    '"**Option 3: [Name]**" for the three meal options'
)


def system_prompt(menu_summary: str | None) -> str:
    """Build the system message describing the assistant and the menu."""
    menu_block = (
        f"Here is the current menu information:\n{menu_summary}"
        if menu_summary
        else NO_MENU
    )
    return f"""You are a helpful Rutgers Dining AI assistant. You provide personalized recommendations based on the dining hall menus.
{menu_block}

When making recommendations:
1. ALWAYS provide EXACTLY 3 meal options that match the user's preferences
2. Offer balanced meal combinations
3. Be helpful, concise, and friendly

FORMAT YOUR RESPONSES CLEARLY:
{_OPTIONS_FORMAT}
{_ITEM_FORMAT}
- Use proper spacing and line breaks between items for readability

If the user asks about items not on the menu, politely explain that you can only provide information about the current menu."""


def simplified_prompt(menu_summary: str | None, question: str) -> str:
    """Build the single-prompt retry used when the full conversation fails."""
    return f"""Based on this menu: {menu_summary or NO_MENU}

User question: {question}

Provide a helpful response about the menu items.

FORMAT YOUR RESPONSE:
- Use "**Option 1: [Name]**" for each meal option
{_ITEM_FORMAT}
- Use proper spacing and line breaks between items for readability"""


def direct_prompt(menu_summary: str | None, question: str) -> str:
    """Build the stand-alone prompt used by direct chat."""
    return f"""You are a helpful Rutgers Dining AI assistant.

Here is the current menu:
{menu_summary or NO_MENU}

User question: {question}

Provide a helpful response about the menu items.

FORMAT YOUR RESPONSE:
- Start with a brief introduction to your recommendations
- ALWAYS provide EXACTLY 3 meal options
{_OPTIONS_FORMAT}
{_ITEM_FORMAT}
- End with a brief conclusion or suggestion"""


@dataclass
class ChatService:
    """Answers menu questions, degrading through simpler prompts on failure."""

    llm: LlmGateway
    truncation_threshold: int = DEFAULT_TRUNCATION_THRESHOLD
    items_per_category: int = DEFAULT_ITEMS_PER_CATEGORY
    conversation_max_tokens: int = 800
    prompt_max_tokens: int = 500

    async def chat(self, messages: list[dict[str, str]], menu_summary: str | None) -> str:
        """Reply to a conversation; never raises for LLM failures."""
        summary = self._prepare_summary(menu_summary)
        conversation = list(messages)
        if not conversation or conversation[0].get("role") != "system":
            conversation.insert(0, {"role": "system", "content": system_prompt(summary)})
        question = _last_user_message(messages)

        try:
            return await self.llm.complete(
                conversation, max_tokens=self.conversation_max_tokens
            )
        except Exception:
            _logger.exception("Chat completion failed; retrying with simplified prompt")
        try:
            return await self.llm.complete_prompt(
                simplified_prompt(summary, question),
                max_tokens=self.prompt_max_tokens,
            )
        except Exception:
            _logger.exception("Simplified chat prompt failed; trying direct prompt")
        return await self._direct(summary, question)

    async def chat_direct(self, message: str, menu_summary: str | None) -> str:
        """Answer one question with a single prompt, else apologise."""
        return await self._direct(self._prepare_summary(menu_summary), message)

    async def _direct(self, summary: str | None, question: str) -> str:
        try:
            return await self.llm.complete_prompt(
                direct_prompt(summary, question), max_tokens=self.prompt_max_tokens
            )
        except Exception:
            _logger.exception("Direct chat prompt failed")
            return APOLOGY

    def _prepare_summary(self, menu_summary: str | None) -> str | None:
        if not menu_summary:
            return None
        return truncate_menu_summary(
            menu_summary, self.truncation_threshold, self.items_per_category
        )


def _last_user_message(messages: list[dict[str, str]]) -> str:
    for message in reversed(messages):
        if message.get("role") == "user":
            return message.get("content", "")
    return messages[-1].get("content", "") if messages else ""
