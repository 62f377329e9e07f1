# comics_api/features/pages/prompt.py
from typing import List

from .continuity import PreviousPage


def _story_so_far(previous_pages: List[PreviousPage]) -> str:
    if not previous_pages:
        return ""
    lines = [f"{i + 1}. {p.prompt.strip()}" for i, p in enumerate(previous_pages)]
    return "**STORY SO FAR (earlier pages, in order):**\n" + "\n".join(lines)


def _reference_roles(has_anchor: bool, character_count: int) -> str:
    roles: List[str] = []
    idx = 1
    if has_anchor:
        roles.append(
            f"* Reference image {idx} is the PREVIOUS PAGE. Match its art style, color palette, "
            "line weight and character designs exactly so the comic reads as one continuous book."
        )
        idx += 1
    if character_count:
        last = idx + character_count - 1
        span = f"{idx}" if idx == last else f"{idx}-{last}"
        roles.append(
            f"* Reference image(s) {span} show the MAIN CHARACTERS. Keep faces, hair, outfits and "
            "proportions consistent with them in every panel."
        )
    if not roles:
        return ""
    return "**REFERENCE IMAGES:**\n" + "\n".join(roles)


def build_page_prompt(
    *,
    prompt: str,
    style: str,
    character_count: int,
    previous_pages: List[PreviousPage],
    has_anchor: bool = False,
) -> str:
    parts = [
        "You are illustrating one full page of a comic book.",
        f"**ART STYLE:** {style or 'classic comic book'}",
        _reference_roles(has_anchor, character_count),
        _story_so_far(previous_pages),
        "**THIS PAGE:**\n" + prompt.strip(),
        (
            "**LAYOUT:** a single comic page of 3-6 panels with clean gutters, readable speech "
            "bubbles and captions. Continue the story naturally from the earlier pages; do not "
            "repeat them."
            if previous_pages
            else "**LAYOUT:** a single comic page of 3-6 panels with clean gutters, readable speech "
            "bubbles and captions. This is the opening page: establish the setting and characters."
        ),
    ]
    return "\n\n".join(p for p in parts if p).strip()
