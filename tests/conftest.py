"""Pytest configuration and fixtures for knowledge crawler tests."""
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

import pytest

# Add the project root to the Python path
sys.path.insert(0, str(Path(__file__).parent.parent))

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    handlers=[logging.StreamHandler()],
)

# Reduce log noise for test output
logging.getLogger("aiohttp").setLevel(logging.WARNING)
logging.getLogger("asyncio").setLevel(logging.WARNING)


FILLER_TEXT = (
    "Knowledge bases work best when they are fed clean, readable prose. "
    "This paragraph exists so that every generated page clears the minimum "
    "content length the extractor enforces before a page is accepted."
)


def build_page(
    title: str = "Test Page",
    body: Optional[str] = None,
    links: Iterable[str] = (),
    head_extra: str = "",
) -> str:
    """Build an HTML document with a <main> section and the given anchors."""
    anchors = "\n".join(f'<a href="{href}">link</a>' for href in links)
    return f"""<!DOCTYPE html>
<html>
<head><title>{title}</title>{head_extra}</head>
<body>
<nav>{anchors}</nav>
<main><p>{body if body is not None else FILLER_TEXT}</p></main>
</body>
</html>"""


@pytest.fixture
def page_html():
    """Factory for HTML test pages."""
    return build_page


@pytest.fixture
def mock_aioresponse():
    """Create a mock aiohttp response using aioresponses."""
    from aioresponses import aioresponses
    with aioresponses() as m:
        yield m
