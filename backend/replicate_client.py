import asyncio
import logging
from typing import Any, Dict, Optional

import httpx

from config.settings import settings

from .errors import UpstreamError

logger = logging.getLogger(__name__)

TERMINAL_STATUSES = ("succeeded", "failed", "canceled")


def _error_detail(r: httpx.Response) -> str:
    """Pull Replicate's error message out of a failed response."""
    try:
        data = r.json()
    except ValueError:
        data = None
    if isinstance(data, dict):
        detail = data.get("detail") or data.get("error") or data.get("title")
        if detail:
            return str(detail)
    return f"Replicate returned HTTP {r.status_code}"


def extract_output(output: Any) -> str:
    """
    Replicate models return either a single URL or a list of URLs.
    Take the first one if it is a list.
    """
    if isinstance(output, (list, tuple)):
        if not output:
            raise UpstreamError("Generation returned no output")
        output = output[0]
    if output is None or output == "":
        raise UpstreamError("Generation returned no output")
    return str(output)


class ReplicateClient:
    """
    Small client for the Replicate predictions API: create a prediction,
    poll until it finishes, return its output.
    """

    def __init__(
        self,
        api_token: str,
        api_url: str = "https://api.replicate.com/v1",
        poll_interval: float = 1.0,
        request_timeout: float = 300.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_token = api_token
        self.api_url = api_url.rstrip("/")
        self.poll_interval = poll_interval
        self.request_timeout = request_timeout
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.api_url,
            timeout=self.request_timeout,
            headers={
                "Authorization": f"Bearer {self.api_token}",
                "Content-Type": "application/json",
            },
            transport=self.transport,
        )

    async def create_prediction(self, model_ref: str, model_input: Dict[str, Any]) -> Dict[str, Any]:
        """
        Start a prediction.
        "owner/name:version" goes to /predictions with an explicit version,
        "owner/name" goes to the model's own endpoint (official models).
        """
        if ":" in model_ref:
            _, version = model_ref.split(":", 1)
            path = "/predictions"
            payload: Dict[str, Any] = {"version": version, "input": model_input}
        else:
            path = f"/models/{model_ref}/predictions"
            payload = {"input": model_input}

        async with self._client() as client:
            r = await client.post(path, json=payload)

        if r.is_error:
            logger.error("Replicate returned %s for %s: %s", r.status_code, model_ref, r.text[:500])
            raise UpstreamError(_error_detail(r))

        data = r.json()
        if not data.get("id"):
            raise UpstreamError(f"Replicate did not return a prediction id: {data}")
        logger.info("Created prediction %s for %s", data["id"], model_ref)
        return data

    async def wait_for_result(self, prediction_id: str) -> Dict[str, Any]:
        """
        Poll /predictions/{id} until it reaches a terminal status.
        Returns the prediction on success, raises UpstreamError otherwise.
        """
        async with self._client() as client:
            while True:
                r = await client.get(f"/predictions/{prediction_id}")
                if r.is_error:
                    raise UpstreamError(_error_detail(r), prediction_id=prediction_id)

                data = r.json()
                status = data.get("status")
                logger.debug("Prediction %s status=%s", prediction_id, status)

                if status == "succeeded":
                    logger.info("Prediction %s succeeded", prediction_id)
                    return data
                if status in TERMINAL_STATUSES:
                    message = data.get("error") or f"Prediction {status}"
                    raise UpstreamError(str(message), prediction_id=prediction_id)

                await asyncio.sleep(self.poll_interval)

    async def run(self, model_ref: str, model_input: Dict[str, Any]) -> Any:
        prediction = await self.create_prediction(model_ref, model_input)
        if prediction.get("status") != "succeeded":
            prediction = await self.wait_for_result(prediction["id"])
        return prediction.get("output")


def get_replicate_client() -> ReplicateClient:
    return ReplicateClient(
        api_token=settings.REPLICATE_API_TOKEN or "",
        api_url=settings.REPLICATE_API_URL,
        poll_interval=settings.POLL_INTERVAL,
        request_timeout=settings.REQUEST_TIMEOUT,
    )
