"""Plain-text helpers for HTML carried in feed descriptions."""

from bs4 import BeautifulSoup


def _normalize_whitespace(text: str) -> str:
    lines = (line.strip() for line in text.splitlines())
    chunks = (phrase.strip() for line in lines for phrase in line.split())
    return " ".join(chunk for chunk in chunks if chunk)


def clean_html_content(content: str | None) -> str:
    """Remove HTML tags from content and normalize whitespace.

    Args:
        content: Raw content that may contain HTML

    Returns:
        Clean text content without HTML tags
    """
    if not content:
        return ""

    if "<" not in content and ">" not in content:
        return _normalize_whitespace(content)

    soup = BeautifulSoup(content, "html.parser")

    for script in soup(["script", "style"]):
        script.decompose()

    text = soup.get_text(separator=" ")

    # Stray brackets that were not part of a tag
    text = text.replace("<", "").replace(">", "")

    return _normalize_whitespace(text)
