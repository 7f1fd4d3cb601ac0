#!/usr/bin/env python3
"""
ECHR application page fetcher
Loads one application page in headless Chromium and reads its fixed fields
"""

import logging
from typing import Optional

from playwright.async_api import async_playwright, Error as PlaywrightError

from config import ECHR_APPLICATION_URL, PAGE_TIMEOUT_MS, RESULT_PANEL_TIMEOUT_MS
from errors import FetchError
from models import CaseRecord, MajorEvent

logger = logging.getLogger(__name__)

EXTRACT_FIELDS_JS = '''() => {
    const getText = (selector) => {
        const element = document.querySelector(selector);
        return element ? element.textContent.trim() : null;
    };
    const events = [...document.querySelectorAll('#MajorEventsList tbody tr')]
        .map(row => ({
            description: row.querySelector('td:nth-child(1)')?.textContent.trim(),
            eventDate: row.querySelector('td:nth-child(2)')?.textContent.trim()
        }))
        .filter(event => event.description && event.eventDate);
    return {
        applicationNumber: getText('#ApplicationNumber p'),
        applicationTitle: getText('#ApplicationTitle p'),
        dateIntroduction: getText('#DateIntroduction p'),
        representant: getText('#Representant p'),
        events: events
    };
}'''


class EchrFetcher:
    """
    One browser shared by every fetch of a run

    Usage:
        async with EchrFetcher() as fetcher:
            record = await fetcher.fetch(152, 18)
    """

    def __init__(self, headless: bool = True):
        self.headless = headless
        self.playwright = None
        self.browser = None

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()

    async def start(self):
        """Start the browser."""
        self.playwright = await async_playwright().start()
        self.browser = await self.playwright.chromium.launch(headless=self.headless)
        logger.info("✅ Browser started")

    async def stop(self):
        """Stop the browser."""
        if self.browser:
            await self.browser.close()
        if self.playwright:
            await self.playwright.stop()
        logger.info("🛑 Browser stopped")

    async def fetch(self, number: int, year: int) -> Optional[CaseRecord]:
        """
        Fetch one application

        Returns:
            CaseRecord, or None when the site has no such application

        Raises:
            FetchError: page could not be loaded
        """
        url = ECHR_APPLICATION_URL.format(number=number, year=year)
        logger.debug(f"🔍 Checking: {number}/{year:02d}")

        context = await self.browser.new_context()
        try:
            page = await context.new_page()
            await page.goto(url, wait_until='domcontentloaded', timeout=PAGE_TIMEOUT_MS)

            if not await page.query_selector('#ResultPanel'):
                logger.debug("   ❌ Not found")
                return None

            await page.wait_for_selector('#ResultPanel', timeout=RESULT_PANEL_TIMEOUT_MS)
            data = await page.evaluate(EXTRACT_FIELDS_JS)

        except PlaywrightError as e:
            raise FetchError(f"Could not load {number}/{year:02d}: {e}") from e
        finally:
            await context.close()

        if not data.get('applicationNumber') or not data.get('applicationTitle'):
            logger.info(f"⚠️ Page for {number}/{year:02d} found but missing essential data")
            return None

        record = CaseRecord(
            application_number=data['applicationNumber'],
            application_title=data['applicationTitle'],
            date_introduction=data.get('dateIntroduction'),
            representative=data.get('representant'),
            major_events=[
                MajorEvent(description=event['description'], event_date=event['eventDate'])
                for event in data.get('events', [])
            ]
        )

        logger.debug(f"   ✅ Found: {record.application_title} ({len(record.major_events)} events)")
        return record
