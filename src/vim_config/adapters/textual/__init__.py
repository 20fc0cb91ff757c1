"""Textual host adapter; ``app`` holds the runnable demo."""

from .controller import TextualConfigAdapter, TextualUIHooks, textual_key_to_token

__all__ = ["TextualConfigAdapter", "TextualUIHooks", "textual_key_to_token"]
