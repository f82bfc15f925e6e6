"""Open channel pages in the user's browser."""

import logging
import webbrowser

logger = logging.getLogger(__name__)


def open_in_browser(url: str) -> bool:
    """Open a URL in the default browser. Never raises."""
    try:
        webbrowser.open(url)
        return True
    except Exception as e:
        logger.error(f"Failed to open browser for {url}: {e}")
        return False
