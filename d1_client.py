#!/usr/bin/env python3
"""
Cloudflare D1 client operations
execute() goes through the /query REST endpoint with bound parameters,
bulk_load() through the import API (init -> upload -> ingest -> poll)
"""

import hashlib
import logging
import time
from typing import Dict, List, Any, Optional

import requests

from config import (
    CLOUDFLARE_ACCOUNT_ID, CLOUDFLARE_API_TOKEN, D1_DATABASE_ID, D1_API_BASE,
    IMPORT_POLL_INTERVAL, IMPORT_POLL_MAX, REQUEST_TIMEOUT
)
from errors import BulkLoadError, FatalConfigurationError, PersistenceError
from models import Statement
from statement_builder import render_script

logger = logging.getLogger(__name__)

IDLE_IMPORT_ERROR = "Not currently importing anything."


class D1Transport:
    """Talks to a remote D1 database over the Cloudflare API"""

    def __init__(
        self,
        account_id: Optional[str] = CLOUDFLARE_ACCOUNT_ID,
        database_id: Optional[str] = D1_DATABASE_ID,
        api_token: Optional[str] = CLOUDFLARE_API_TOKEN,
        session: Optional[requests.Session] = None
    ):
        missing = [
            name for name, value in (
                ("CLOUDFLARE_ACCOUNT_ID", account_id),
                ("D1_DATABASE_ID", database_id),
                ("CLOUDFLARE_API_TOKEN", api_token),
            ) if not value
        ]
        if missing:
            raise FatalConfigurationError(f"D1 storage needs {', '.join(missing)}")

        self.base_url = D1_API_BASE.format(account_id=account_id, database_id=database_id)
        self.session = session or requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_token}"
        })
        logger.info("✅ D1 client initialized")

    def execute(self, statement: Statement) -> List[Dict[str, Any]]:
        """Run one statement through /query and return its result rows"""
        response = self.session.post(
            f"{self.base_url}/query",
            json={"sql": statement.sql, "params": list(statement.params)},
            timeout=REQUEST_TIMEOUT
        )

        try:
            result = response.json()
        except ValueError:
            raise PersistenceError(f"D1 returned status {response.status_code}: {response.text[:200]}")

        if response.status_code != 200 or not result.get("success"):
            raise PersistenceError(f"D1 query failed ({response.status_code}): {result.get('errors')}")

        results = result.get("result") or [{}]
        return results[0].get("results") or []

    def bulk_load(self, statements: List[Statement]) -> bool:
        """Upload a rendered SQL script through the import API and wait for ingestion"""
        script = render_script(statements)
        etag = hashlib.md5(script.encode("utf-8")).hexdigest()

        try:
            logger.info("📤 Initiating D1 import...")
            upload = self._import_action({"action": "init", "etag": etag})

            logger.info("☁️ Uploading SQL script...")
            put_response = requests.put(upload["upload_url"], data=script.encode("utf-8"), timeout=REQUEST_TIMEOUT)
            uploaded_etag = (put_response.headers.get("ETag") or "").replace('"', '')
            if uploaded_etag != etag:
                raise BulkLoadError("ETag mismatch - upload corrupted")

            logger.info("💾 Starting ingestion...")
            ingest = self._import_action({"action": "ingest", "etag": etag, "filename": upload["filename"]})

            logger.info("⏳ Waiting for import to complete...")
            self._poll_import(ingest.get("at_bookmark"))

        except BulkLoadError:
            raise
        except (requests.RequestException, KeyError, ValueError) as e:
            raise BulkLoadError(f"D1 import failed: {e}") from e

        logger.info("✅ Import complete!")
        return True

    def _import_action(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        response = self.session.post(f"{self.base_url}/import", json=payload, timeout=REQUEST_TIMEOUT)
        data = response.json()
        if not data.get("success"):
            raise BulkLoadError(f"Import {payload['action']} failed: {data.get('errors')}")
        return data.get("result") or {}

    def _poll_import(self, bookmark: Optional[str]):
        payload = {"action": "poll", "current_bookmark": bookmark}

        for attempt in range(1, IMPORT_POLL_MAX + 1):
            response = self.session.post(f"{self.base_url}/import", json=payload, timeout=REQUEST_TIMEOUT)
            result = response.json().get("result") or {}

            if result.get("success") or result.get("error") == IDLE_IMPORT_ERROR:
                return

            if result.get("status") == "error":
                raise BulkLoadError(f"Import failed: {result.get('error')}")

            logger.debug(f"Import still running (poll {attempt}/{IMPORT_POLL_MAX})")
            time.sleep(IMPORT_POLL_INTERVAL)

        raise BulkLoadError(f"Import did not finish after {IMPORT_POLL_MAX} polls")
