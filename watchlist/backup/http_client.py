"""HTTP session factory for the remote backup.

Creates a requests.Session pre-configured with:
- Honest User-Agent header (not browser impersonation)
- The X-Master-Key credential header and JSON content type
- A retry count from BackupConfig (0 by default: a failed backup waits
  for the next scheduled check instead of retrying inline)
"""

from __future__ import annotations

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from watchlist.config import BackupConfig


def create_session(config: BackupConfig) -> requests.Session:
    """Create an HTTP session carrying the backup credential.

    Args:
        config: Backup configuration with api_key, user_agent and
            retry_count.

    Returns:
        A requests.Session ready to POST backups.
    """
    session = requests.Session()
    session.headers["User-Agent"] = config.user_agent
    session.headers["Content-Type"] = "application/json"
    session.headers["X-Master-Key"] = config.api_key

    retry_strategy = Retry(
        total=config.retry_count,
        backoff_factor=1,
        status_forcelist=[429, 500, 502, 503, 504],
        allowed_methods=["POST"],
    )
    adapter = HTTPAdapter(max_retries=retry_strategy)
    session.mount("https://", adapter)
    session.mount("http://", adapter)

    return session
