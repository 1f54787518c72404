"""Hubstaff v2 REST client (read-only)."""
from __future__ import annotations

import json
import logging
from datetime import date
from typing import Any, Dict, Iterable, Iterator, List, Optional
from urllib import error as urlerror
from urllib import parse as urlparse
from urllib import request as urlrequest

from ..common.datetime_utils import parse_iso_date
from ..core.exceptions import UpstreamError
from .model import ActivityEntry

logger = logging.getLogger(__name__)


class HubstaffClient:
    def __init__(self, *, base_url: str, token: str, org_id: str, timeout: int = 30, page_limit: int = 500):
        self._base_url = (base_url or "").rstrip("/")
        self._token = token or ""
        self._org_id = str(org_id or "")
        self._timeout = timeout
        self._page_limit = page_limit

    @property
    def configured(self) -> bool:
        return bool(self._token and self._org_id)

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.configured:
            raise UpstreamError("Hubstaff is not configured")

        query = urlparse.urlencode({k: v for k, v in (params or {}).items() if v not in (None, "")}, doseq=True)
        url = f"{self._base_url}{path}" + (f"?{query}" if query else "")
        req = urlrequest.Request(
            url,
            headers={"Authorization": f"Bearer {self._token}", "Accept": "application/json"},
            method="GET",
        )
        try:
            with urlrequest.urlopen(req, timeout=self._timeout) as resp:
                payload = resp.read().decode("utf-8")
        except urlerror.HTTPError as e:
            logger.error("Hubstaff %s -> HTTP %s", path, e.code)
            raise UpstreamError(f"Hubstaff request failed (HTTP {e.code})")
        except (urlerror.URLError, OSError) as e:
            logger.error("Hubstaff %s unreachable: %s", path, e)
            raise UpstreamError("Hubstaff is unreachable")

        try:
            return json.loads(payload or "{}")
        except ValueError:
            raise UpstreamError("Hubstaff returned an invalid response")

    def _paged(self, path: str, key: str, params: Optional[Dict[str, Any]] = None) -> Iterator[Dict[str, Any]]:
        params = dict(params or {})
        params["page_limit"] = self._page_limit
        while True:
            body = self._get(path, params)
            yield body
            next_start = (body.get("pagination") or {}).get("next_page_start_id")
            if not next_start or not body.get(key):
                return
            params["page_start_id"] = next_start

    def members(self) -> Dict[int, str]:
        """{hubstaff user id: display name} for the organization."""
        names: Dict[int, str] = {}
        path = f"/organizations/{self._org_id}/members"
        for body in self._paged(path, "members", {"include": "users"}):
            for user in body.get("users") or []:
                names[int(user["id"])] = str(user.get("name") or user.get("email") or user["id"])
            for member in body.get("members") or []:
                uid = int(member["user_id"])
                names.setdefault(uid, str(uid))
        return names

    def projects(self) -> Dict[int, str]:
        names: Dict[int, str] = {}
        for body in self._paged(f"/organizations/{self._org_id}/projects", "projects"):
            for project in body.get("projects") or []:
                names[int(project["id"])] = str(project.get("name") or project["id"])
        return names

    def daily_activities(
        self,
        start: date,
        stop: date,
        *,
        user_ids: Optional[Iterable[int]] = None,
        project_ids: Optional[Iterable[int]] = None,
    ) -> List[ActivityEntry]:
        params: Dict[str, Any] = {
            "date[start]": start.isoformat(),
            "date[stop]": stop.isoformat(),
            "user_ids": ",".join(str(i) for i in user_ids) if user_ids else None,
            "project_ids": ",".join(str(i) for i in project_ids) if project_ids else None,
        }
        rows: List[Dict[str, Any]] = []
        for body in self._paged(f"/organizations/{self._org_id}/activities/daily", "daily_activities", params):
            rows.extend(body.get("daily_activities") or [])

        if not rows:
            return []

        users = self.members()
        projects = self.projects()
        entries = []
        for row in rows:
            uid = int(row["user_id"])
            pid = row.get("project_id")
            entries.append(
                ActivityEntry(
                    user_id=uid,
                    user_name=users.get(uid, str(uid)),
                    project_id=int(pid) if pid is not None else None,
                    project_name=projects.get(int(pid)) if pid is not None else None,
                    day=parse_iso_date(str(row["date"])),
                    tracked_seconds=int(row.get("tracked") or 0),
                    active_seconds=int(row.get("overall") or 0),
                )
            )
        return entries
