"""Prompt builders for the text operations (rewrite, tweet generation).

User text is placed inside explicit delimiters so the model can tell the
instruction apart from the content it operates on.
"""

REWRITE_TEMPLATE = """Rewrite the following text in a "{style}" style.
Return only the rewritten text.

<text>
{text}
</text>"""

TWEETS_TEMPLATE = """Generate 3-5 engaging tweets about the following topic/idea.
Each tweet should be on a new line, and start with a '- '.

<idea>
{idea}
</idea>"""


def build_rewrite_prompt(text: str, style: str) -> str:
    """Build the prompt for a style rewrite."""
    return REWRITE_TEMPLATE.format(style=style.replace('"', "'"), text=text)


def build_tweets_prompt(idea: str) -> str:
    """Build the prompt for tweet generation."""
    return TWEETS_TEMPLATE.format(idea=idea)
