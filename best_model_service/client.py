"""Small requests-based client for trainers talking to the service."""

from typing import Any, Optional

import requests


class ModelServiceClient:
    def __init__(self, base_url: str = "http://localhost:3000", timeout: float = 10.0):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def list_models(self) -> list:
        r = requests.get(f"{self.base_url}/api/models", timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def current_model(self, name: Optional[str] = None) -> dict:
        params = {"name": name} if name else None
        r = requests.get(f"{self.base_url}/api/current-model", params=params, timeout=self.timeout)
        r.raise_for_status()
        return r.json()

    def save_model(self, score: float, data: Any = None, name: Optional[str] = None) -> dict:
        """
        Submit a candidate. Returns the service's ``{"success", "message"}``
        body; a failed durable write (HTTP 500) is returned, not raised.
        """
        body = {"score": score, "data": data}
        if name:
            body["name"] = name
        r = requests.post(f"{self.base_url}/api/save-model", json=body, timeout=self.timeout)
        if r.status_code == 500:
            return r.json()
        r.raise_for_status()
        return r.json()
