import logging
from typing import Any

import requests

from .errors import NotFoundError, RemoteError

logger = logging.getLogger(__name__)

API_PATH = "/rest/api/2"


class JiraClient:
    def __init__(
        self,
        endpoint: str,
        user: str | None,
        password: str | None,
        cacert: str | None = None,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._base_url = f"{endpoint.rstrip('/')}{API_PATH}"
        self._timeout = timeout
        self._session = session if session is not None else requests.Session()
        if user:
            self._session.auth = (user, password or "")
        self._session.headers.update({"Accept": "application/json"})
        if cacert:
            self._session.verify = cacert

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._session.close()

    def _request(self, method: str, path: str, body: dict | None = None, params: dict | None = None) -> Any:
        url = f"{self._base_url}{path}"
        logger.debug("%s %s params=%s body=%s", method, url, params, body)
        try:
            response = self._session.request(method, url, json=body, params=params, timeout=self._timeout)
        except requests.RequestException as e:
            raise RemoteError(f"Network error for {method} {url}: {e}") from e

        logger.debug("status: %s", response.status_code)
        logger.debug("response: %s", response.text)

        if response.status_code == 404:
            raise NotFoundError(f"Not found: {method} {url}", response.status_code, response.text)
        if response.status_code >= 400:
            raise RemoteError(
                f"{response.status_code} {response.reason} for {method} {url}", response.status_code, response.text
            )
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError as e:
            raise RemoteError(f"Invalid JSON in response to {method} {url}", response.status_code, response.text) from e

    def fetch_issue_by_id(self, issue_id: str) -> dict:
        return self._request("GET", f"/issue/{int(issue_id)}")

    def fetch_issue_by_key(self, key: str) -> dict:
        return self._request("GET", f"/issue/{key}")

    def search(self, jql: str, max_results: int = 50) -> list[dict]:
        data = self._request("GET", "/search", params={"jql": jql, "maxResults": max_results})
        return data.get("issues", [])

    def fetch_comments(self, issue: str) -> list[dict]:
        data = self._request("GET", f"/issue/{issue}/comment")
        return data.get("comments", [])

    def post_comment(self, issue: str, text: str) -> dict:
        return self._request("POST", f"/issue/{issue}/comment", {"body": text})

    def fetch_transitions(self, issue: str) -> list[dict]:
        data = self._request("GET", f"/issue/{issue}/transitions")
        return data.get("transitions", [])

    def post_transition(self, issue: str, transition_id: str, fields: dict | None = None) -> None:
        body: dict = {"transition": {"id": transition_id}}
        if fields:
            body["fields"] = fields
        self._request("POST", f"/issue/{issue}/transitions", body)

    def update_issue(self, issue: str, fields: dict, update: dict) -> None:
        body: dict = {}
        if fields:
            body["fields"] = fields
        if update:
            body["update"] = update
        self._request("PUT", f"/issue/{issue}", body)

    def create_issue(self, project: str, issue_type: str, fields: dict, update: dict | None = None) -> dict:
        body: dict = {"fields": {"project": {"key": project}, "issuetype": {"name": issue_type}, **fields}}
        if update:
            body["update"] = update
        return self._request("POST", "/issue", body)

    def delete_issue(self, issue: str) -> None:
        self._request("DELETE", f"/issue/{issue}")
