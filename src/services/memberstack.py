"""
Memberstack admin API: resolve a member token to the member's profile.
"""

from typing import Any, Dict, List, Optional

import requests

try:  # pragma: no cover
    from utils.errors import AppError, ErrorCode
except ModuleNotFoundError:  # pragma: no cover
    from ..utils.errors import AppError, ErrorCode


API_BASE_URL = "https://admin.memberstack.com"


class MemberstackClient:
    def __init__(self, secret_key: str) -> None:
        self.secret_key = secret_key

    def _request(self, method: str, path: str, body: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        try:
            response = requests.request(
                method,
                f"{API_BASE_URL}{path}",
                json=body,
                headers={"X-API-KEY": self.secret_key},
            )
        except requests.RequestException as e:
            raise AppError(ErrorCode.UPSTREAM_ERROR, f"Memberstack request failed: {e}")

        if response.status_code == 401:
            raise AppError(ErrorCode.UNAUTHORIZED, "Invalid or expired token")
        if not response.ok:
            raise AppError(
                ErrorCode.UPSTREAM_ERROR,
                f"Memberstack API error ({response.status_code})",
                {"statusCode": response.status_code},
            )
        try:
            return response.json()
        except ValueError:
            raise AppError(ErrorCode.UPSTREAM_ERROR, "Failed to parse Memberstack response")

    def get_member_info(self, token: str) -> Dict[str, Any]:
        """
        Verify a member token and return the member's public details.

        Returns:
            Dict with email, name and plans

        Raises:
            AppError: UNAUTHORIZED for a rejected token, UPSTREAM_ERROR otherwise
        """
        try:
            member_id = self._request("POST", "/members/verify-token", {"token": token})["data"]["id"]
            member = self._request("GET", f"/members/{member_id}")["data"]
        except (KeyError, TypeError):
            raise AppError(ErrorCode.UPSTREAM_ERROR, "Unexpected Memberstack response")

        custom_fields = member.get("customFields") or {}
        plans: List[Dict[str, Any]] = [
            {"planName": plan.get("planName") or plan.get("planId"), "status": plan.get("status")}
            for plan in member.get("planConnections") or []
        ]
        return {
            "email": (member.get("auth") or {}).get("email", ""),
            "name": custom_fields.get("firstName") or custom_fields.get("name") or "",
            "plans": plans,
        }
