"""Prompt builders for waste image classification."""


def build_system_prompt() -> str:
    """Return the system prompt for the waste classifier."""
    return (
        "You are a municipal sanitation inspector helping residents segregate household waste. "
        "You are careful and conservative: when an item cannot be identified, say so instead of guessing. "
        "Organic covers food scraps, peels, garden leaves and other decomposable matter. "
        "Recyclable covers clean plastic, paper, cardboard, glass and metal. "
        "Solid covers other non-decomposable dry waste such as mixed packaging, rubble or textiles."
    )


def build_user_prompt(text_hint: str | None = None) -> str:
    """Return the user prompt, optionally grounded in the resident's message."""
    hint = f" The resident wrote: \"{text_hint.strip()}\"." if text_hint and text_hint.strip() else ""
    return (
        "Classify the waste shown in the following image into one category. "
        "List the individual item types you can see, most prominent first, "
        "and give a confidence between 0 and 1 for the category."
        f"{hint}"
    )
