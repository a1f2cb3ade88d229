"""
GitHub credentials.

Two ways to authenticate, selected by the node's ``authentication``
parameter:
- githubApi: personal access token (``Authorization: token ...``)
- githubOAuth2Api: OAuth2 token data (``Authorization: Bearer ...``)

SYNC-CELERY SAFE: credential tests use requests with a timeout.
"""
import logging
from typing import Any, Dict

import requests

from src.node_sdk.credentials import BaseCredential
from src.node_sdk.settings import get_settings

logger = logging.getLogger(__name__)

GITHUB_ACCEPT = "application/vnd.github.v3+json"


class GithubApiCredential(BaseCredential):
    """GitHub personal access token credential"""

    name = "githubApi"
    display_name = "GitHub API"
    properties = [
        {
            "name": "server",
            "displayName": "Github Server",
            "type": "string",
            "default": "https://api.github.com",
            "required": False,
            "description": "The server to connect to. Only has to be set if Github Enterprise is used."
        },
        {
            "name": "user",
            "displayName": "User",
            "type": "string",
            "default": "",
            "required": False,
        },
        {
            "name": "accessToken",
            "displayName": "Access Token",
            "type": "string",
            "required": True,
            "typeOptions": {"password": True},
        }
    ]

    def get_server_url(self) -> str:
        """API base URL, GitHub Enterprise aware"""
        return (self.data.get("server") or get_settings().github_api_url).rstrip("/")

    def get_token(self) -> str:
        token = self.data.get("accessToken")
        if not token:
            raise ValueError("Access token not found in credentials")
        return token

    def get_auth_headers(self) -> Dict[str, str]:
        """Get authentication headers for GitHub API requests"""
        return {
            "Authorization": f"token {self.get_token()}",
            "Accept": GITHUB_ACCEPT,
            "User-Agent": get_settings().user_agent,
        }

    def test(self) -> Dict[str, str]:
        """
        Check the token against the authenticated-user endpoint.

        Returns:
            {"status": "OK" | "Error", "message": str}; never raises
        """
        validation = self.validate()
        if not validation["valid"]:
            return {"status": "Error", "message": validation["message"]}

        settings = get_settings()
        url = f"{self.get_server_url()}/user"
        try:
            response = requests.get(
                url,
                headers=self.get_auth_headers(),
                timeout=settings.credential_test_timeout_s,
            )
            payload: Any = response.json() if response.content else {}
        except (requests.RequestException, ValueError) as e:
            logger.warning("GitHub credential test failed: %s", e)
            return {"status": "Error", "message": f"Settings are not valid: {e}"}

        if not isinstance(payload, dict) or not payload.get("id"):
            error = payload.get("message") if isinstance(payload, dict) else None
            return {
                "status": "Error",
                "message": f"Token is not valid: {error or response.status_code}",
            }

        return {"status": "OK", "message": "Authentication successful!"}


class GithubOAuth2ApiCredential(GithubApiCredential):
    """GitHub OAuth2 credential; the token dance happens in the host"""

    name = "githubOAuth2Api"
    display_name = "GitHub OAuth2 API"
    properties = [
        {
            "name": "server",
            "displayName": "Github Server",
            "type": "string",
            "default": "https://api.github.com",
            "required": False,
        },
        {
            "name": "oauthTokenData",
            "displayName": "OAuth Token Data",
            "type": "json",
            "required": True,
        }
    ]

    def get_token(self) -> str:
        token = (self.data.get("oauthTokenData") or {}).get("access_token")
        if not token:
            raise ValueError("OAuth2 access token not found in credentials")
        return token

    def get_auth_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.get_token()}",
            "Accept": GITHUB_ACCEPT,
            "User-Agent": get_settings().user_agent,
        }


CREDENTIAL_TYPES = {
    "accessToken": GithubApiCredential,
    "oAuth2": GithubOAuth2ApiCredential,
}
