#!/usr/bin/env python3
"""Quick start for the Grok client.

Set your x.com cookie before running, for example::

    export GROK_COOKIES='ct0=YOUR_CT0_TOKEN; auth_token=YOUR_AUTH_TOKEN; ...'
    python examples/quick_start.py
"""

import asyncio
import sys

from rich.console import Console
from rich.style import Style

from grok_client import DeltaText, GrokClient, GrokError, get_settings
from grok_client.logging_config import configure_logging

USER_STYLE = Style(color="bright_blue", bold=True)
ASSISTANT_STYLE = Style(color="bright_green")
ERROR_STYLE = Style(color="red", bold=True)
INFO_STYLE = Style(color="cyan")

console = Console()


async def main() -> int:
    configure_logging()
    settings = get_settings()
    if settings.cookies is None and settings.cookies_file is None:
        console.print("GROK_COOKIES (or GROK_COOKIES_FILE) is not set.", style=ERROR_STYLE)
        return 1

    async with GrokClient(settings=settings) as client:
        try:
            conversation = await client.create_conversation()
            console.print(f"New conversation: {conversation.id}", style=INFO_STYLE)

            console.print("You: Hello, Grok!", style=USER_STYLE)
            async for event in conversation.stream("Hello, Grok!"):
                if isinstance(event, DeltaText):
                    console.print(event.text, end="", style=ASSISTANT_STYLE)
            console.print()

            content = await conversation.generate("What is the speed of light?")
            console.print(content.message, style=ASSISTANT_STYLE)
            if content.follow_up_suggestions:
                console.print(
                    "Follow-ups: " + " | ".join(content.follow_up_suggestions),
                    style=INFO_STYLE,
                )

            image_content = await conversation.generate("a cute robot reading a book")
            if image_content.attachments:
                attachment = image_content.attachments[0]
                path = await attachment.download("./robot_book.jpg")
                prompt, _ = await attachment.get_prompts()
                console.print(f"Saved {attachment.file_name} to {path}", style=INFO_STYLE)
                console.print(f"Prompt used: {prompt!r}", style=INFO_STYLE)
            else:
                console.print(image_content.message, style=ASSISTANT_STYLE)

            final = await conversation.generate("Thank you for your help!")
            console.print(final.message, style=ASSISTANT_STYLE)
            console.print(f"{len(conversation.history)} turns recorded.", style=INFO_STYLE)
        except GrokError as exc:
            console.print(f"{exc.operation} failed: {exc.detail}", style=ERROR_STYLE)
            return 1
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
