"""Unit tests for HttpScanClient using httpx.MockTransport"""

import httpx
import pytest

from domain.documents.models import ScanVerdict
from domain.documents.ports import ScanServiceError
from infrastructure.scanning.http_scan_client import HttpScanClient

FILES = [(b"%PDF-one", "one.pdf"), (b"%PDF-two", "two.pdf")]


def client_for(handler, api_key=None):
    return HttpScanClient(
        "http://scanner.test/",
        timeout_seconds=5,
        api_key=api_key,
        transport=httpx.MockTransport(handler),
    )


class TestHttpScanClient:

    @pytest.mark.asyncio
    async def test_posts_batch_and_parses_verdicts(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = request.read()
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"results": [
                {"clean": True, "threats": []},
                {"clean": False, "threats": ["Win.Test.EICAR_HDB-1"]},
            ]})

        verdicts = await client_for(handler, api_key="scan-key").scan_batch(FILES)

        assert verdicts == [
            ScanVerdict(clean=True),
            ScanVerdict(clean=False, threats=("Win.Test.EICAR_HDB-1",)),
        ]
        assert seen["url"] == "http://scanner.test/scan/batch"
        assert seen["auth"] == "Bearer scan-key"
        # Both files travel in one request, in order
        assert seen["body"].index(b'filename="one.pdf"') < seen["body"].index(b'filename="two.pdf"')

    @pytest.mark.asyncio
    async def test_no_auth_header_without_key(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={"results": [{"clean": True}, {"clean": True}]})

        await client_for(handler).scan_batch(FILES)

        assert seen["auth"] is None

    @pytest.mark.asyncio
    async def test_infected_without_threats_gets_placeholder(self):
        def handler(request):
            return httpx.Response(200, json={"results": [{"clean": False}, {"clean": True}]})

        verdicts = await client_for(handler).scan_batch(FILES)

        assert verdicts[0].threats == ("Unknown threat",)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("response", [
        httpx.Response(503, text="busy"),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"verdicts": []}),
        httpx.Response(200, json={"results": [{"clean": "yes"}, {"clean": True}]}),
        httpx.Response(200, json={"results": [{"clean": True}]}),
    ])
    async def test_bad_responses_raise(self, response):
        def handler(request):
            return response

        with pytest.raises(ScanServiceError):
            await client_for(handler).scan_batch(FILES)

    @pytest.mark.asyncio
    async def test_timeout_raises(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(ScanServiceError, match="timeout"):
            await client_for(handler).scan_batch(FILES)

    @pytest.mark.asyncio
    async def test_connection_error_raises(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(ScanServiceError, match="unreachable"):
            await client_for(handler).scan_batch(FILES)
