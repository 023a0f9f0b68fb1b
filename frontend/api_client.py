"""
Quality Audit API Client

Wrapper for the FastAPI backend used by the Streamlit pages.
"""

import os
from typing import Any, Dict, List, Optional

import requests


class QualityAuditAPI:
    """
    Client for the Quality Audit FastAPI backend.

    Usage:
        api = QualityAuditAPI()
        page = api.get_admin_conversations("8742044", "2025-11-10 00:00:00", "2025-11-10 23:59:59")
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None):
        """
        Initialize API client.

        Args:
            base_url: API base URL. Defaults to API_URL or localhost:8000.
            api_key: Key sent as `apikey` and bearer token. Defaults to AUDIT_API_KEY.
        """
        self.base_url = base_url or os.getenv("API_URL", "http://localhost:8000")
        self.api_key = api_key or os.getenv("AUDIT_API_KEY")
        # Participation runs may use their whole 60s budget server-side
        self.timeout = 90

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
            headers["apikey"] = self.api_key
        return headers

    @staticmethod
    def _raise_for_status(response: requests.Response) -> None:
        """Raise HTTPError carrying the server's error message when present."""
        if response.ok:
            return
        try:
            body = response.json()
        except ValueError:
            body = {}
        message = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("detail")
        if not message:
            message = f"HTTP {response.status_code}: {response.reason}"
        raise requests.HTTPError(str(message), response=response)

    def _get(self, endpoint: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make GET request to API."""
        url = f"{self.base_url}{endpoint}"
        response = requests.get(url, params=params, headers=self._headers(), timeout=self.timeout)
        self._raise_for_status(response)
        return response.json()

    def _post(self, endpoint: str, data: Optional[Dict] = None) -> Dict[str, Any]:
        """Make POST request to API."""
        url = f"{self.base_url}{endpoint}"
        response = requests.post(url, json=data, headers=self._headers(), timeout=self.timeout)
        self._raise_for_status(response)
        return response.json()

    # Health endpoints
    def health_full(self) -> Dict[str, Any]:
        """Full health check including database."""
        return self._get("/health/full")

    # Intercom proxy
    def get_admin_conversations(
        self,
        admin_id: str,
        updated_since: str,
        updated_before: str,
        starting_after: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Get one page of participation-filtered conversations."""
        params = {
            "endpoint": "conversations",
            "admin_id": admin_id,
            "updated_since": updated_since,
            "updated_before": updated_before,
        }
        if starting_after:
            params["starting_after"] = starting_after
        return self._get("/api/intercom-proxy", params)

    def get_conversation(self, conversation_id: str, display_as: str = "plaintext") -> Dict[str, Any]:
        """Get a single conversation."""
        return self._get(
            "/api/intercom-proxy",
            {"conversation_id": conversation_id, "display_as": display_as},
        )

    def list_admins(self) -> Dict[str, Any]:
        """Get Intercom admins."""
        return self._get("/api/intercom-proxy", {"endpoint": "admins"})

    # Pull history
    def record_pull(
        self,
        pulled_by_email: str,
        employee_name: str,
        employee_email: str,
        employee_admin_id: str,
        pull_date: str,
        conversation_ids: List[str],
        pulled_by_name: Optional[str] = None,
        employee_intercom_name: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Record which conversations a pull returned."""
        return self._post("/api/pull-history", {
            "pulled_by_email": pulled_by_email,
            "pulled_by_name": pulled_by_name,
            "employee_name": employee_name,
            "employee_email": employee_email,
            "employee_admin_id": employee_admin_id,
            "employee_intercom_name": employee_intercom_name,
            "pull_date": pull_date,
            "conversation_ids": conversation_ids,
        })

    def list_pulls(
        self,
        admin_id: Optional[str] = None,
        pull_date: Optional[str] = None,
        limit: int = 50,
    ) -> Dict[str, Any]:
        """List recorded pulls."""
        params: Dict[str, Any] = {"limit": limit}
        if admin_id:
            params["admin_id"] = admin_id
        if pull_date:
            params["pull_date"] = pull_date
        return self._get("/api/pull-history", params)
