"""
Unit Tests for SMS Central Client
Tests for config validation, send and status handling.
"""
from urllib.parse import parse_qs

import httpx
import pytest

from ausms.domain.exceptions import SMSProtocolError, SMSProviderFailure
from ausms.domain.models.sms import DeliveryStatus, Message, MessageId, PhoneNumber
from ausms.infrastructure.sms.smscentral import SmsCentralClient, SmsCentralConfig

BASE_URL = "https://my.smscentral.com.au/api/v3.2"


def form(request: httpx.Request) -> dict:
    """Decode a form-encoded request body into a flat dict."""
    return {k: v[0] for k, v in parse_qs(request.content.decode()).items()}


@pytest.fixture
def config():
    return SmsCentralConfig.create("user", "secret", "Acme")


@pytest.fixture
def make_client(make_http_client, config):
    def _make(handler):
        http_client, transport = make_http_client(handler)
        return SmsCentralClient(config, http_client, base_url=BASE_URL), transport
    return _make


class TestSmsCentralConfig:
    """Tests for originator validation."""

    @pytest.mark.parametrize("originator", ["A", "Acme", "ACME2026", "abcdefghijk", "12345678901"])
    def test_valid_originators(self, originator):
        config = SmsCentralConfig.create("user", "secret", originator)

        assert config is not None
        assert config.originator == originator

    @pytest.mark.parametrize("originator", ["", "abcdefghijkl", "Acme Ltd", "acme-co", "Café", "acme\n"])
    def test_invalid_originators_yield_none(self, originator):
        assert SmsCentralConfig.create("user", "secret", originator) is None

    def test_repr_hides_password(self, config):
        assert "secret" not in repr(config)


class TestSendMessage:
    """Tests for SmsCentralClient.send_message."""

    @pytest.mark.asyncio
    async def test_success_returns_generated_reference(self, make_client):
        """A "0" body returns the id sent as REFERENCE."""
        client, transport = make_client(lambda request: httpx.Response(200, text="0"))

        message_id = await client.send_message(PhoneNumber(value="0412345678"), Message(value="Hello"))

        assert len(transport.requests) == 1
        sent = form(transport.requests[0])
        assert sent["REFERENCE"] == message_id.value

    @pytest.mark.asyncio
    async def test_request_shape(self, make_client):
        """Form payload carries credentials, originator and international recipient."""
        client, transport = make_client(lambda request: httpx.Response(200, text="0"))

        await client.send_message(PhoneNumber(value="0412345678"), Message(value="Hello there"))

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == BASE_URL
        sent = form(request)
        assert sent["USERNAME"] == "user"
        assert sent["PASSWORD"] == "secret"
        assert sent["ACTION"] == "send"
        assert sent["ORIGINATOR"] == "Acme"
        assert sent["RECIPIENT"] == "61412345678"
        assert sent["MESSAGE_TEXT"] == "Hello there"

    @pytest.mark.asyncio
    async def test_each_send_gets_a_new_id(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, text="0"))
        to = PhoneNumber(value="0412345678")

        first = await client.send_message(to, Message(value="a"))
        second = await client.send_message(to, Message(value="b"))

        assert first != second

    @pytest.mark.asyncio
    async def test_coded_failure(self, make_client):
        """A "<code> <text>" body raises a coded failure."""
        client, _ = make_client(lambda request: httpx.Response(200, text="42 bad number"))

        with pytest.raises(SMSProviderFailure) as exc_info:
            await client.send_message(PhoneNumber(value="0412345678"), Message(value="Hello"))

        assert exc_info.value.code == 42
        assert exc_info.value.message == "bad number"
        assert exc_info.value.provider == "smscentral"

    @pytest.mark.asyncio
    async def test_unstructured_failure(self, make_client):
        """Any other body raises an unstructured error carrying the body."""
        client, _ = make_client(lambda request: httpx.Response(200, text="garbage"))

        with pytest.raises(SMSProtocolError) as exc_info:
            await client.send_message(PhoneNumber(value="0412345678"), Message(value="Hello"))

        assert exc_info.value.message == "garbage"
        assert exc_info.value.body == "garbage"

    @pytest.mark.asyncio
    async def test_non_200_is_unstructured(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(500, text="0"))

        with pytest.raises(SMSProtocolError) as exc_info:
            await client.send_message(PhoneNumber(value="0412345678"), Message(value="Hello"))

        assert exc_info.value.status_code == 500
        assert "500" in exc_info.value.message


class TestMessageStatus:
    """Tests for SmsCentralClient.message_status."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("code,expected", [
        ("PEND", DeliveryStatus.PENDING),
        ("SENT", DeliveryStatus.SENT),
        ("DELIVRD", DeliveryStatus.DELIVERED),
        ("READ", DeliveryStatus.READ),
    ])
    async def test_status_mapping(self, make_client, code, expected):
        body = f"<response><message><status>{code}</status></message></response>"
        client, _ = make_client(lambda request: httpx.Response(200, text=body))

        assert await client.message_status(MessageId(value="ref-1")) is expected

    @pytest.mark.asyncio
    async def test_request_shape(self, make_client):
        body = "<response><message><status>SENT</status></message></response>"
        client, transport = make_client(lambda request: httpx.Response(200, text=body))

        await client.message_status(MessageId(value="ref-1"))

        request = transport.requests[0]
        assert request.method == "POST"
        assert str(request.url) == f"{BASE_URL}/checkstatus"
        assert form(request) == {"USERNAME": "user", "PASSWORD": "secret", "REFERENCE": "ref-1"}

    @pytest.mark.asyncio
    async def test_error_document_is_coded_failure(self, make_client):
        body = "<response><errorcode>7</errorcode><errormessage>x</errormessage></response>"
        client, _ = make_client(lambda request: httpx.Response(200, text=body))

        with pytest.raises(SMSProviderFailure) as exc_info:
            await client.message_status(MessageId(value="ref-1"))

        assert exc_info.value.code == 7
        assert exc_info.value.message == "x"

    @pytest.mark.asyncio
    async def test_unknown_status_falls_through_to_document_error(self, make_client):
        """Unrecognised status text without error fields wraps the document."""
        body = "<response><message><status>EXPIRED</status></message></response>"
        client, _ = make_client(lambda request: httpx.Response(200, text=body))

        with pytest.raises(SMSProtocolError) as exc_info:
            await client.message_status(MessageId(value="ref-1"))

        assert "EXPIRED" in exc_info.value.message
        assert "EXPIRED" in exc_info.value.body

    @pytest.mark.asyncio
    async def test_non_numeric_error_code_is_unstructured(self, make_client):
        body = "<response><errorcode>oops</errorcode><errormessage>x</errormessage></response>"
        client, _ = make_client(lambda request: httpx.Response(200, text=body))

        with pytest.raises(SMSProtocolError):
            await client.message_status(MessageId(value="ref-1"))

    @pytest.mark.asyncio
    async def test_invalid_xml(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(200, text="not xml <"))

        with pytest.raises(SMSProtocolError) as exc_info:
            await client.message_status(MessageId(value="ref-1"))

        assert exc_info.value.message == "Failure parsing response as XML"

    @pytest.mark.asyncio
    async def test_non_200(self, make_client):
        client, _ = make_client(lambda request: httpx.Response(503, text=""))

        with pytest.raises(SMSProtocolError) as exc_info:
            await client.message_status(MessageId(value="ref-1"))

        assert exc_info.value.status_code == 503


class TestRoundTrip:
    """Ids returned by send_message are used verbatim by message_status."""

    @pytest.mark.asyncio
    async def test_send_then_status(self, make_client):
        def handler(request):
            if request.url.path.endswith("/checkstatus"):
                return httpx.Response(
                    200, text="<response><message><status>DELIVRD</status></message></response>"
                )
            return httpx.Response(200, text="0")

        client, transport = make_client(handler)

        message_id = await client.send_message(PhoneNumber(value="0412345678"), Message(value="Hi"))
        status = await client.message_status(message_id)

        assert status is DeliveryStatus.DELIVERED
        assert form(transport.requests[1])["REFERENCE"] == message_id.value


class TestClientLifecycle:
    """Tests for HTTP client ownership."""

    @pytest.mark.asyncio
    async def test_shared_client_is_not_closed(self, make_http_client, config):
        http_client, _ = make_http_client(lambda request: httpx.Response(200, text="0"))

        async with SmsCentralClient(config, http_client) as client:
            assert client.provider_name == "smscentral"

        assert not http_client.is_closed
        await http_client.aclose()

    @pytest.mark.asyncio
    async def test_owned_client_is_closed(self, config):
        client = SmsCentralClient(config)
        await client.aclose()

        assert client._client.is_closed
