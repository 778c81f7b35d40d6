"""generative client using claude-agent-sdk.

the canvas only needs one call: prompt (+ optional quoted context and
system prompt) in, text out. any failure surfaces as ServiceError.
"""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from claude_agent_sdk import (
    ClaudeAgentOptions,
    ClaudeSDKClient,
)


# --- configuration ---

DEFAULT_MODEL = os.environ.get("CANVAS_CHAT_MODEL", "sonnet")
NO_RESPONSE_TEXT = "(no response)"


class ServiceError(Exception):
    """the generative service failed to produce a reply."""

    pass


def build_prompt(prompt: str, context: Optional[str] = None) -> str:
    """prefix the prompt with quoted context when there is some."""
    if context:
        return f"Context: {context}\n\nUser: {prompt}"
    return prompt


@runtime_checkable
class ClientProtocol(Protocol):
    """protocol for generative clients (real or mock)."""

    async def generate(
        self,
        prompt: str,
        context: Optional[str] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> str:
        """send prompt and return response text."""
        ...


class MockClient:
    """mock client for testing without api calls."""

    def __init__(
        self,
        responses: Optional[dict[str, str]] = None,
        delay: float = 0.5,
        fail: bool = False,
    ):
        """init with optional response mapping.

        responses: dict mapping prompt substrings to responses.
        if prompt contains key (case-insensitive), return value.
        delay: simulated API delay in seconds.
        fail: raise ServiceError instead of answering.
        """
        self.responses = responses or {}
        self.calls: list[dict] = []  # every request, in order
        self.delay = delay
        self.fail = fail
        self.default_response = "## mock response\n\nthis is a simulated response from mock mode.\n\n- point 1\n- point 2\n- point 3"

    async def generate(
        self,
        prompt: str,
        context: Optional[str] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> str:
        """return mock response based on prompt."""
        full_prompt = build_prompt(prompt, context)
        self.calls.append({"prompt": full_prompt, "model": model, "system_prompt": system_prompt})

        await asyncio.sleep(self.delay)

        if self.fail:
            raise ServiceError("mock failure")

        prompt_lower = full_prompt.lower()
        for key, response in self.responses.items():
            if key.lower() in prompt_lower:
                return response

        return self.default_response


class ClaudeClient:
    """async client for claude using claude-agent-sdk.

    creates a fresh connection per query so concurrent requests from
    different branches never share state.
    """

    def __init__(self, cwd: Optional[Path] = None, model: str = DEFAULT_MODEL):
        self.cwd = cwd or Path.cwd()
        self.model = model

    async def generate(
        self,
        prompt: str,
        context: Optional[str] = None,
        model: Optional[str] = None,
        system_prompt: Optional[str] = None,
    ) -> str:
        """send a prompt and collect the full response text."""
        opts = {
            "cwd": str(self.cwd),
            "model": model or self.model,
            "tools": [],
            "allowed_tools": [],
        }
        if system_prompt:
            opts["system_prompt"] = system_prompt
        options = ClaudeAgentOptions(**opts)
        client: Optional[ClaudeSDKClient] = None

        try:
            client = ClaudeSDKClient(options)
            await client.connect()
            await client.query(build_prompt(prompt, context))

            text_parts: list[str] = []
            async for event in client.receive_response():
                logging.debug(f"event type: {type(event).__name__}")

                if hasattr(event, "message") and hasattr(event.message, "content"):
                    for block in event.message.content:
                        if hasattr(block, "text"):
                            text_parts.append(block.text)
                elif hasattr(event, "content") and isinstance(event.content, list):
                    for block in event.content:
                        if hasattr(block, "text"):
                            text_parts.append(block.text)
                        elif isinstance(block, dict) and "text" in block:
                            text_parts.append(block["text"])

            logging.debug(f"total text parts collected: {len(text_parts)}")
            return "\n".join(text_parts) if text_parts else NO_RESPONSE_TEXT

        except Exception as e:
            logging.error(f"claude api error: {e}")
            raise ServiceError(f"claude api error: {e}") from e

        finally:
            if client:
                try:
                    await client.disconnect()
                except Exception as e:
                    logging.debug(f"ignoring disconnect error: {e}")
