from __future__ import annotations

import logging
from typing import List

import httplib2
from google.oauth2.service_account import Credentials
from googleapiclient.discovery import Resource
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from httplib2 import HttpLib2Error

from .config import SheetsConfig, SourceConfig
from .errors import FetchError

SCOPES = ["https://www.googleapis.com/auth/spreadsheets.readonly"]

LOGGER = logging.getLogger(__name__)

_TRANSPORT_EXCEPTIONS = (HttpLib2Error, OSError)


class CsvExportSource:
    """Downloads the published CSV export of the tracking sheet."""

    def __init__(self, conf: SourceConfig, http: httplib2.Http | None = None) -> None:
        self._conf = conf
        self._http = http

    def _http_client(self) -> httplib2.Http:
        if self._http is None:
            self._http = httplib2.Http(timeout=self._conf.request_timeout)
        return self._http

    @property
    def url(self) -> str:
        return self._conf.export_url

    def fetch_text(self) -> str:
        """Return the export body as text; one GET per call, no retries."""

        LOGGER.debug("Requesting %s", self.url)
        try:
            response, content = self._http_client().request(
                self.url,
                "GET",
                headers={"Accept": "text/csv, text/plain;q=0.9, */*;q=0.1"},
            )
        except _TRANSPORT_EXCEPTIONS as exc:
            raise FetchError(f"Request to {self.url} failed: {exc}") from exc

        status = int(getattr(response, "status", 0) or 0)
        if not 200 <= status < 300:
            reason = getattr(response, "reason", "") or ""
            msg = f"Export request returned HTTP {status} {reason}".rstrip()
            raise FetchError(msg, status=status)

        if isinstance(content, bytes):
            text = content.decode("utf-8-sig", errors="replace")
        else:
            text = str(content)
        LOGGER.info("Fetched %s characters from the sheet export", len(text))
        return text


class GoogleSheetsSource:
    """Reads the task tab through the Sheets API with a service account."""

    def __init__(self, conf: SheetsConfig) -> None:
        self._conf = conf
        self._service: Resource | None = None

    def _service_client(self) -> Resource:
        if self._service is None:
            creds = Credentials.from_service_account_file(
                str(self._conf.credentials_file), scopes=SCOPES
            )
            self._service = build("sheets", "v4", credentials=creds, cache_discovery=False)
        return self._service

    def fetch_values(self) -> List[List[str]]:
        """Load all values from the configured tab, header row first."""

        try:
            request = (
                self._service_client()
                .spreadsheets()
                .values()
                .get(
                    spreadsheetId=self._conf.spreadsheet_id,
                    range=self._conf.sheet_name,
                )
            )
            result = request.execute()
        except HttpError as exc:
            status = getattr(exc.resp, "status", None)
            raise FetchError(
                f"Sheets API read of '{self._conf.sheet_name}' failed: {exc}",
                status=int(status) if status is not None else None,
            ) from exc
        except _TRANSPORT_EXCEPTIONS as exc:
            raise FetchError(f"Sheets API transport failure: {exc}") from exc

        values = result.get("values", [])
        LOGGER.info("Fetched %s rows from sheet '%s'", len(values), self._conf.sheet_name)
        return [["" if cell is None else str(cell) for cell in row] for row in values]
