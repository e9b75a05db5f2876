from typing import Any, Dict, List, Optional
import logging

import requests

from app.config.settings import settings
from app.core.errors import (
    CommitCreationFailed,
    RefUpdateFailed,
    RepositoryCreationFailed,
    TreeCreationFailed,
)

logger = logging.getLogger(__name__)

FILE_MODE = "100644"


def _error_payload(resp: requests.Response) -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        body = {"message": resp.text[:300]}
    if not isinstance(body, dict):
        body = {"message": str(body)[:300]}
    payload = {"status": resp.status_code, "message": body.get("message") or "Unknown error"}
    if body.get("errors"):
        payload["errors"] = body["errors"]
    return payload


class GitHubClient:
    """
    Thin wrapper over the GitHub REST git-data endpoints. One instance per
    publish call; the token is never persisted.
    """

    def __init__(
        self,
        token: str,
        session: Optional[requests.Session] = None,
        api_url: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_url = (api_url or settings.github_api_url).rstrip("/")
        self.timeout = timeout or settings.github_timeout_seconds
        self.session = session or requests.Session()
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Accept": "application/vnd.github+json",
        }

    def _request(self, method: str, path: str, json: Optional[Dict[str, Any]] = None) -> requests.Response:
        return self.session.request(
            method,
            f"{self.api_url}{path}",
            headers=self.headers,
            json=json,
            timeout=self.timeout,
        )

    def create_repository(self, name: str, description: str) -> Dict[str, Any]:
        try:
            resp = self._request("POST", "/user/repos", {
                "name": name,
                "description": description,
                "private": False,
                "auto_init": True,
            })
        except requests.RequestException as e:
            raise RepositoryCreationFailed({"message": str(e)})
        if not resp.ok:
            payload = _error_payload(resp)
            logger.error(f"GitHub API error creating {name}: {payload}")
            raise RepositoryCreationFailed(payload)
        return resp.json()

    def get_branch_sha(self, full_name: str, branch: str) -> Optional[str]:
        """Tip commit sha of the branch, or None when the ref cannot be read yet."""
        try:
            resp = self._request("GET", f"/repos/{full_name}/git/refs/heads/{branch}")
        except requests.RequestException as e:
            logger.warning(f"Reading {full_name} refs/heads/{branch} failed: {str(e)}")
            return None
        if not resp.ok:
            logger.warning(f"Reading {full_name} refs/heads/{branch} returned {resp.status_code}")
            return None
        data = resp.json()
        if isinstance(data, dict):
            return (data.get("object") or {}).get("sha")
        return None

    def create_tree(self, full_name: str, files: Dict[str, str], base_tree: Optional[str] = None) -> str:
        body: Dict[str, Any] = {
            "tree": [
                {"path": path, "mode": FILE_MODE, "type": "blob", "content": content}
                for path, content in files.items()
            ],
        }
        if base_tree:
            body["base_tree"] = base_tree
        try:
            resp = self._request("POST", f"/repos/{full_name}/git/trees", body)
        except requests.RequestException as e:
            raise TreeCreationFailed({"message": str(e)})
        if not resp.ok:
            payload = _error_payload(resp)
            logger.error(f"Failed to create tree in {full_name}: {payload}")
            raise TreeCreationFailed(payload)
        return resp.json()["sha"]

    def create_commit(self, full_name: str, message: str, tree_sha: str, parents: List[str]) -> str:
        try:
            resp = self._request("POST", f"/repos/{full_name}/git/commits", {
                "message": message,
                "tree": tree_sha,
                "parents": parents,
            })
        except requests.RequestException as e:
            raise CommitCreationFailed({"message": str(e)})
        if not resp.ok:
            payload = _error_payload(resp)
            logger.error(f"Failed to create commit in {full_name}: {payload}")
            raise CommitCreationFailed(payload)
        return resp.json()["sha"]

    def update_ref(self, full_name: str, branch: str, sha: str, force: bool = True) -> None:
        try:
            resp = self._request("PATCH", f"/repos/{full_name}/git/refs/heads/{branch}", {
                "sha": sha,
                "force": force,
            })
        except requests.RequestException as e:
            raise RefUpdateFailed({"message": str(e)})
        if not resp.ok:
            payload = _error_payload(resp)
            logger.error(f"Failed to update refs/heads/{branch} in {full_name}: {payload}")
            raise RefUpdateFailed(payload)

    def create_ref(self, full_name: str, branch: str, sha: str) -> None:
        try:
            resp = self._request("POST", f"/repos/{full_name}/git/refs", {
                "ref": f"refs/heads/{branch}",
                "sha": sha,
            })
        except requests.RequestException as e:
            raise RefUpdateFailed({"message": str(e)})
        if not resp.ok:
            payload = _error_payload(resp)
            logger.error(f"Failed to create refs/heads/{branch} in {full_name}: {payload}")
            raise RefUpdateFailed(payload)

    def delete_repository(self, full_name: str) -> bool:
        try:
            resp = self._request("DELETE", f"/repos/{full_name}")
        except requests.RequestException as e:
            logger.warning(f"Failed to delete {full_name}: {str(e)}")
            return False
        if not resp.ok:
            logger.warning(f"Failed to delete {full_name}: {_error_payload(resp)}")
            return False
        return True
