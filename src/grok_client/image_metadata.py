"""Recover Grok generation prompts from the comment segment of an image."""

from __future__ import annotations

import re

from .errors import BinaryFormatError

COMMENT_MARKER = b"\xff\xfe"

GROK_IMAGE_PROMPT_PATTERN = re.compile(
    r"GrokImagePrompt:\s*(.*?),?(?=\s*GrokImageUpsampledPrompt:|\Z)",
    re.DOTALL,
)
GROK_IMAGE_UPSAMPLED_PROMPT_PATTERN = re.compile(
    r"GrokImageUpsampledPrompt:\s*(.*)",
    re.DOTALL,
)


def extract_image_comment(data: bytes) -> str:
    """Return the text of the first comment segment, or ``""`` when absent.

    The two bytes after the marker hold a big-endian length that counts
    itself but not the marker, so the payload spans
    ``[offset + 4, offset + 2 + length)``.
    """

    index = data.find(COMMENT_MARKER)
    if index == -1:
        return ""

    length_start = index + len(COMMENT_MARKER)
    if length_start + 2 > len(data):
        raise BinaryFormatError(
            "extract_image_comment",
            f"comment marker at offset {index} is missing its length field",
        )

    length = int.from_bytes(data[length_start : length_start + 2], "big")
    if length < 2:
        raise BinaryFormatError(
            "extract_image_comment",
            f"comment length {length} at offset {index} is smaller than its own field",
        )

    end = length_start + length
    if end > len(data):
        raise BinaryFormatError(
            "extract_image_comment",
            f"comment length {length} at offset {index} exceeds buffer "
            f"of {len(data)} bytes",
        )

    try:
        return data[length_start + 2 : end].decode("utf-8")
    except UnicodeDecodeError as exc:
        raise BinaryFormatError("extract_image_comment", str(exc)) from exc


def parse_image_prompts(comment: str) -> tuple[str, str]:
    prompt_match = GROK_IMAGE_PROMPT_PATTERN.search(comment)
    upsampled_match = GROK_IMAGE_UPSAMPLED_PROMPT_PATTERN.search(comment)

    prompt = prompt_match.group(1).strip() if prompt_match else ""
    upsampled = upsampled_match.group(1).strip() if upsampled_match else ""
    return prompt, upsampled


def extract_image_prompts(image: bytes) -> tuple[str, str]:
    """Return ``(prompt, upsampled_prompt)`` embedded in ``image``."""

    return parse_image_prompts(extract_image_comment(image))


__all__ = [
    "COMMENT_MARKER",
    "GROK_IMAGE_PROMPT_PATTERN",
    "GROK_IMAGE_UPSAMPLED_PROMPT_PATTERN",
    "extract_image_comment",
    "extract_image_prompts",
    "parse_image_prompts",
]
