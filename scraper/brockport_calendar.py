"""Calendar scraper for the SUNY Brockport academic calendar."""
import logging
import time
from typing import List

from bs4 import BeautifulSoup
import requests

from processor.models import RawEntry

logger = logging.getLogger(__name__)


class BrockportCalendarScraper:
    """Scraper for the Brockport academic calendar page."""

    BASE_URL = "https://www.brockport.edu/academics/calendar/"

    def __init__(self, url: str = BASE_URL, timeout: int = 30):
        """
        Initialize the calendar scraper.

        Args:
            url: Academic calendar page URL
            timeout: HTTP request timeout in seconds (default: 30)
        """
        self.url = url
        self.timeout = timeout

    def fetch_entries(self) -> List[RawEntry]:
        """
        Fetch every (event label, date text) pair from the calendar page.

        Returns:
            List of RawEntry objects in page order

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        logger.info(f"Fetching academic calendar from {self.url}")

        html_content = self._fetch_calendar_html()
        entries = self._parse_entries(html_content)

        logger.info(f"Successfully fetched {len(entries)} calendar entries")
        return entries

    def _fetch_calendar_html(self) -> str:
        """
        Fetch calendar HTML with retry logic.

        Returns:
            HTML content as string

        Raises:
            requests.RequestException: If all retry attempts fail
        """
        max_retries = 3
        base_delay = 1  # seconds

        for attempt in range(max_retries):
            try:
                logger.info(f"Fetching calendar HTML (attempt {attempt + 1}/{max_retries})")
                response = requests.get(self.url, timeout=self.timeout)
                response.raise_for_status()
                return response.text

            except requests.RequestException as e:
                if attempt < max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(
                        f"Request failed (attempt {attempt + 1}/{max_retries}): {e}. "
                        f"Retrying in {delay} seconds..."
                    )
                    time.sleep(delay)
                else:
                    logger.error(
                        f"All {max_retries} retry attempts failed. Last error: {e}"
                    )
                    raise

    def _parse_entries(self, html_content: str) -> List[RawEntry]:
        """
        Pair event labels with date texts by position.

        Args:
            html_content: HTML content from calendar page

        Returns:
            List of RawEntry objects
        """
        soup = BeautifulSoup(html_content, 'html.parser')

        labels = [self._element_text(el) for el in soup.find_all(class_='ev')]
        date_texts = [self._element_text(el) for el in soup.find_all(class_='date')]

        if len(labels) != len(date_texts):
            logger.warning(
                f"Found {len(labels)} event labels but {len(date_texts)} dates; "
                f"keeping the first {min(len(labels), len(date_texts))} pairs"
            )

        return [
            RawEntry(label=label, date_text=date_text)
            for label, date_text in zip(labels, date_texts)
        ]

    def _element_text(self, element) -> str:
        """Element text with runs of whitespace collapsed to one space."""
        return ' '.join(element.get_text(' ', strip=True).split())
