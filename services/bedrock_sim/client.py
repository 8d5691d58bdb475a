from __future__ import annotations
import httpx

class SimApiClient:
    """Drives the simulator's HTTP control API from tests."""

    def __init__(self, base_url: str, timeout_s: float = 2.0):
        self._client = httpx.Client(base_url=base_url, timeout=timeout_s)

    def close(self) -> None:
        self._client.close()

    def _post(self, path: str, body: dict | None = None) -> dict:
        r = self._client.post(path, json=body)
        r.raise_for_status()
        return r.json()

    def health(self) -> dict:
        r = self._client.get("/health")
        r.raise_for_status()
        return r.json()

    def status(self) -> dict:
        r = self._client.get("/status")
        r.raise_for_status()
        return r.json()

    def reset(self) -> dict:
        return self._post("/control/reset")

    def set_status(self, **fields) -> dict:
        return self._post("/control/status", fields)

    def set_faults(self, **faults) -> dict:
        return self._post("/control/faults", faults)
