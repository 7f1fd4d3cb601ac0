#!/usr/bin/env python3
"""
Configuration settings for the ECHR case tracker
"""

import os

from dotenv import load_dotenv

load_dotenv()

# === Source Website ===
ECHR_APPLICATION_URL = "https://app.echr.coe.int/SOP/en-GB/application?number={number}%2F{year:02d}"
PAGE_TIMEOUT_MS = 15000
RESULT_PANEL_TIMEOUT_MS = 5000

# === Storage Configuration ===
STORAGE_BACKEND = os.getenv("STORAGE_BACKEND", "sqlite")  # "sqlite" or "d1"
SQLITE_PATH = os.getenv("SQLITE_PATH", "echr.db")

# === Cloudflare D1 Configuration ===
CLOUDFLARE_ACCOUNT_ID = os.getenv("CLOUDFLARE_ACCOUNT_ID")
CLOUDFLARE_API_TOKEN = os.getenv("CLOUDFLARE_API_TOKEN")
D1_DATABASE_ID = os.getenv("D1_DATABASE_ID")
D1_API_BASE = "https://api.cloudflare.com/client/v4/accounts/{account_id}/d1/database/{database_id}"
IMPORT_POLL_INTERVAL = 1  # Seconds between import status polls
IMPORT_POLL_MAX = 300  # Give up on an import after this many polls

# === Retry Configuration ===
MAX_RETRIES = 5  # Maximum number of connection retry attempts
RETRY_DELAY = 5  # Initial delay between retries in seconds (will increase exponentially)
REQUEST_TIMEOUT = 30

# === Monthly Crawl Configuration ===
START_YEAR = int(os.getenv("START_YEAR", "16"))  # Last 2 digits: 16 = 2016
MAX_YEAR = int(os.getenv("MAX_YEAR", "26"))
MAX_CONSECUTIVE_SKIPS = int(os.getenv("MAX_CONSECUTIVE_SKIPS", "500"))  # Misses before moving to next year
START_NUMBER = int(os.getenv("START_NUMBER", "1"))
BATCH_FLUSH_ATTEMPTS = int(os.getenv("BATCH_FLUSH_ATTEMPTS", "250"))  # Write after every N fetch attempts
POLITENESS_DELAY_MS = int(os.getenv("POLITENESS_DELAY_MS", "400"))
PROGRESS_EVERY = 25  # Progress summary every N checks

# === Weekly Check Configuration ===
WEEKLY_DELAY_MS = int(os.getenv("WEEKLY_DELAY_MS", "500"))

# === Persistence Rules ===
NOT_FOUND_SKIP_THRESHOLD = 60  # not_found_count at which skip_scraping is set
REP_CACHE_SIZE = 500  # Representatives kept in the name -> id cache
EVENT_ROWS_PER_INSERT = 25  # 4 bound values per row; D1 accepts at most 100 per query

# === API Configuration ===
API_HOST = "0.0.0.0"
API_PORT = 8006
API_TITLE = "ECHR Case Tracker API"
API_DESCRIPTION = "Crawls the ECHR application lookup and keeps case history in SQL"
API_VERSION = "1.0.0"

# === Logging Configuration ===
LOG_FILE = "echr_scraper.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = '%(asctime)s - %(levelname)s - %(message)s'
