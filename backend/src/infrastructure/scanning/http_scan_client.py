"""HTTP client for the external malware scanning service.

Wire contract:
    POST {base_url}/scan/batch
    multipart/form-data, one "files" part per file in batch order

    200 {"results": [{"clean": true, "threats": []}, ...]}

Results are positionally aligned with the submitted files.
"""

import logging
from typing import List, Optional, Sequence, Tuple

import httpx

from domain.documents.models import ScanVerdict
from domain.documents.ports.scan_service_port import ScanServiceError, ScanServicePort

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 300.0


class HttpScanClient(ScanServicePort):
    """ScanServicePort implementation over httpx.

    A batch of large files can take minutes to scan, so the default timeout
    is generous. Connecting is still bounded separately.
    """

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = httpx.Timeout(timeout_seconds, connect=10.0)
        self.api_key = api_key
        self.transport = transport

    async def scan_batch(self, files: Sequence[Tuple[bytes, str]]) -> List[ScanVerdict]:
        url = f"{self.base_url}/scan/batch"
        multipart = [
            ("files", (filename, content, "application/octet-stream"))
            for content, filename in files
        ]
        headers = {}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, files=multipart, headers=headers)
        except httpx.TimeoutException:
            logger.error(f"Scan service timeout after {self.timeout.read}s for {len(files)} file(s)")
            raise ScanServiceError("Scan service timeout")
        except httpx.HTTPError as e:
            logger.error(f"Scan service unreachable: {e}")
            raise ScanServiceError(f"Scan service unreachable: {e}")

        if response.status_code != 200:
            logger.error(f"Scan service error {response.status_code}: {response.text[:500]}")
            raise ScanServiceError(f"Scan service returned HTTP {response.status_code}")

        verdicts = self._parse_results(response)
        if len(verdicts) != len(files):
            raise ScanServiceError(
                f"Scan service returned {len(verdicts)} results for {len(files)} files"
            )

        logger.info(
            f"Scanned {len(files)} file(s): "
            f"{sum(1 for v in verdicts if not v.clean)} infected"
        )
        return verdicts

    @staticmethod
    def _parse_results(response: httpx.Response) -> List[ScanVerdict]:
        """Turn the JSON body into typed verdicts.

        Raises:
            ScanServiceError: If the body does not match the contract
        """
        try:
            payload = response.json()
        except ValueError as e:
            raise ScanServiceError(f"Scan service returned invalid JSON: {e}")

        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list):
            raise ScanServiceError("Scan service response has no 'results' list")

        verdicts = []
        for index, result in enumerate(results):
            if not isinstance(result, dict) or not isinstance(result.get("clean"), bool):
                raise ScanServiceError(f"Malformed scan result at position {index}")

            if result["clean"]:
                verdicts.append(ScanVerdict(clean=True))
                continue

            threats = result.get("threats") or []
            if not isinstance(threats, list):
                raise ScanServiceError(f"Malformed threat list at position {index}")
            verdicts.append(ScanVerdict.infected(*(str(t) for t in threats)))

        return verdicts
