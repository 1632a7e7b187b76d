import requests
from typing import Optional

class TrackerClient:
    """Simple REST client for the exercise tracker API."""

    def __init__(self, base_url: str = "http://localhost:3000", timeout: float = 10.0) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def list_users(self) -> list:
        resp = requests.get(f"{self.base_url}/api/users", timeout=self.timeout)
        resp.raise_for_status()
        return resp.json()

    def create_user(self, username: str) -> dict:
        resp = requests.post(
            f"{self.base_url}/api/users",
            json={"username": username},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def add_exercise(
        self,
        user_id: int,
        description: str,
        duration: int,
        date: Optional[str] = None,
    ) -> dict:
        body = {"description": description, "duration": duration}
        if date is not None:
            body["date"] = date
        resp = requests.post(
            f"{self.base_url}/api/users/{user_id}/exercises",
            json=body,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()

    def get_logs(
        self,
        user_id: int,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> dict:
        params = {"from": date_from, "to": date_to, "limit": limit}
        resp = requests.get(
            f"{self.base_url}/api/users/{user_id}/logs",
            params={k: v for k, v in params.items() if v is not None},
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()
