"""Unit tests for sonos_upnp.lib.upnp — description loading and action dispatch.

Test Techniques Used:
    - In-process Server: aiohttp.test_utils.TestServer plays the speaker,
      serving a device description, SCPDs and control endpoints
    - Error Guessing: faults, HTTP errors, unknown services and actions
"""

import aiohttp
import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from sonos_upnp.lib.errors import ActionError, DescriptionError, UpnpError
from sonos_upnp.lib.upnp import ActionInvoker, UpnpClient

RC = "urn:schemas-upnp-org:service:RenderingControl:1"
AVT = "urn:schemas-upnp-org:service:AVTransport:1"
ALARM = "urn:schemas-upnp-org:service:AlarmClock:1"

DESCRIPTION = f"""<?xml version="1.0" encoding="utf-8"?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
  <specVersion><major>1</major><minor>0</minor></specVersion>
  <device>
    <deviceType>urn:schemas-upnp-org:device:ZonePlayer:1</deviceType>
    <friendlyName>127.0.0.1 - Sonos One</friendlyName>
    <manufacturer>Sonos, Inc.</manufacturer>
    <modelName>Sonos One</modelName>
    <roomName>Kitchen</roomName>
    <feature>airplay</feature>
    <feature>voice</feature>
    <UDN>uuid:RINCON_000E58000001</UDN>
    <serviceList>
      <service>
        <serviceType>{ALARM}</serviceType>
        <serviceId>urn:upnp-org:serviceId:AlarmClock</serviceId>
        <controlURL>/AlarmClock/Control</controlURL>
        <eventSubURL>/AlarmClock/Event</eventSubURL>
        <SCPDURL>/xml/AlarmClock1.xml</SCPDURL>
      </service>
    </serviceList>
    <deviceList>
      <device>
        <deviceType>urn:schemas-upnp-org:device:MediaRenderer:1</deviceType>
        <friendlyName>Kitchen - Sonos One Media Renderer</friendlyName>
        <manufacturer>Sonos, Inc.</manufacturer>
        <modelName>Sonos One</modelName>
        <UDN>uuid:RINCON_000E58000001_MR</UDN>
        <serviceList>
          <service>
            <serviceType>{RC}</serviceType>
            <serviceId>urn:upnp-org:serviceId:RenderingControl</serviceId>
            <controlURL>/MediaRenderer/RenderingControl/Control</controlURL>
            <eventSubURL>/MediaRenderer/RenderingControl/Event</eventSubURL>
            <SCPDURL>/xml/RenderingControl1.xml</SCPDURL>
          </service>
          <service>
            <serviceType>{AVT}</serviceType>
            <serviceId>urn:upnp-org:serviceId:AVTransport</serviceId>
            <controlURL>/MediaRenderer/AVTransport/Control</controlURL>
            <eventSubURL>/MediaRenderer/AVTransport/Event</eventSubURL>
            <SCPDURL>/xml/AVTransport1.xml</SCPDURL>
          </service>
        </serviceList>
      </device>
    </deviceList>
  </device>
</root>"""


def _arg(name, direction, variable):
    return (f"<argument><name>{name}</name><direction>{direction}</direction>"
            f"<relatedStateVariable>{variable}</relatedStateVariable></argument>")


def _scpd(actions, variables):
    action_xml = "".join(
        f"<action><name>{name}</name><argumentList>{''.join(args)}</argumentList></action>"
        for name, args in actions)
    variable_xml = "".join(
        f'<stateVariable sendEvents="no"><name>{name}</name>'
        f"<dataType>{data_type}</dataType></stateVariable>"
        for name, data_type in variables)
    return ('<?xml version="1.0" encoding="utf-8"?>'
            '<scpd xmlns="urn:schemas-upnp-org:service-1-0">'
            "<specVersion><major>1</major><minor>0</minor></specVersion>"
            f"<actionList>{action_xml}</actionList>"
            f"<serviceStateTable>{variable_xml}</serviceStateTable></scpd>")


INSTANCE = _arg("InstanceID", "in", "A_ARG_TYPE_InstanceID")
CHANNEL = _arg("Channel", "in", "A_ARG_TYPE_Channel")

RC_SCPD = _scpd(
    [("GetVolume", [INSTANCE, CHANNEL, _arg("CurrentVolume", "out", "Volume")]),
     ("SetVolume", [INSTANCE, CHANNEL, _arg("DesiredVolume", "in", "Volume")])],
    [("A_ARG_TYPE_InstanceID", "ui4"), ("A_ARG_TYPE_Channel", "string"),
     ("Volume", "ui2")])

AVT_SCPD = _scpd(
    [("Play", [INSTANCE, _arg("Speed", "in", "TransportPlaySpeed")]),
     ("Stop", [INSTANCE])],
    [("A_ARG_TYPE_InstanceID", "ui4"), ("TransportPlaySpeed", "string")])

ALARM_SCPD = _scpd(
    [("GetTimeZone", [_arg("CurrentTimeZone", "out", "TimeZone")])],
    [("TimeZone", "string")])


def _reply(service_type, action, body=""):
    return ('<?xml version="1.0"?>'
            '<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/"'
            ' s:encodingStyle="http://schemas.xmlsoap.org/soap/encoding/"><s:Body>'
            f'<u:{action}Response xmlns:u="{service_type}">{body}</u:{action}Response>'
            "</s:Body></s:Envelope>")


FAULT_REPLY = """<?xml version="1.0"?>
<s:Envelope xmlns:s="http://schemas.xmlsoap.org/soap/envelope/">
  <s:Body>
    <s:Fault>
      <faultcode>s:Client</faultcode>
      <faultstring>UPnPError</faultstring>
      <detail>
        <UPnPError xmlns="urn:schemas-upnp-org:control-1-0">
          <errorCode>402</errorCode>
          <errorDescription>Invalid Args</errorDescription>
        </UPnPError>
      </detail>
    </s:Fault>
  </s:Body>
</s:Envelope>"""


@pytest.fixture
async def speaker():
    """A fake speaker.

    ``server.requests`` collects (path, SOAPACTION, body) for every action;
    ``server.counts["descriptions"]`` counts description fetches.
    """
    requests = []
    counts = {"descriptions": 0}

    def xml(text, status=200):
        return web.Response(status=status, text=text, content_type="text/xml")

    async def description(request: web.Request) -> web.Response:
        counts["descriptions"] += 1
        return xml(DESCRIPTION)

    async def rendering_control(request: web.Request) -> web.Response:
        body = await request.text()
        requests.append((request.path, request.headers.get("SOAPACTION"), body))
        if "GetVolume" in request.headers.get("SOAPACTION", ""):
            return xml(_reply(RC, "GetVolume", "<CurrentVolume>25</CurrentVolume>"))
        if "<DesiredVolume>99</DesiredVolume>" in body:
            return xml(FAULT_REPLY, status=500)
        return xml(_reply(RC, "SetVolume"))

    async def av_transport(request: web.Request) -> web.Response:
        body = await request.text()
        requests.append((request.path, request.headers.get("SOAPACTION"), body))
        if "Stop" in request.headers.get("SOAPACTION", ""):
            return web.Response(status=404, text="not found")
        return xml(_reply(AVT, "Play"))

    async def alarm_clock(request: web.Request) -> web.Response:
        return xml(_reply(ALARM, "GetTimeZone",
                          "<CurrentTimeZone>Europe/Copenhagen</CurrentTimeZone>"))

    async def broken(request: web.Request) -> web.Response:
        return web.Response(status=404, text="not found")

    app = web.Application()
    app.router.add_get("/xml/device_description.xml", description)
    app.router.add_get("/xml/RenderingControl1.xml", _serve(RC_SCPD))
    app.router.add_get("/xml/AVTransport1.xml", _serve(AVT_SCPD))
    app.router.add_get("/xml/AlarmClock1.xml", _serve(ALARM_SCPD))
    app.router.add_get("/broken.xml", broken)
    app.router.add_post("/MediaRenderer/RenderingControl/Control", rendering_control)
    app.router.add_post("/MediaRenderer/AVTransport/Control", av_transport)
    app.router.add_post("/AlarmClock/Control", alarm_clock)

    async with TestServer(app) as server:
        server.requests = requests
        server.counts = counts
        yield server


def _serve(text: str):
    async def handler(request: web.Request) -> web.Response:
        return web.Response(text=text, content_type="text/xml")
    return handler


def _location(server) -> str:
    return str(server.make_url("/xml/device_description.xml"))


def _address(server) -> str:
    return f"{server.host}:{server.port}"


@pytest.fixture
async def client():
    client = UpnpClient(timeout=2)
    yield client
    await client.close()


class TestGet:

    async def test_attribute_bag(self, speaker, client) -> None:
        desc = await client.get(_location(speaker))

        device = desc["device"]
        assert device["modelName"] == "Sonos One"
        assert device["roomName"] == "Kitchen"
        assert device["UDN"] == "uuid:RINCON_000E58000001"
        assert "serviceList" not in device

    async def test_repeated_fields_become_lists(self, speaker, client) -> None:
        desc = await client.get(_location(speaker))
        assert desc["device"]["feature"] == ["airplay", "voice"]

    async def test_device_is_kept_for_actions(self, speaker, client) -> None:
        await client.get(_location(speaker))
        assert client.device(_address(speaker)) is not None

    async def test_http_error(self, speaker, client) -> None:
        with pytest.raises(DescriptionError):
            await client.get(str(speaker.make_url("/broken.xml")))

    async def test_unreachable(self) -> None:
        client = UpnpClient(timeout=1)
        try:
            with pytest.raises(DescriptionError):
                await client.get("http://127.0.0.1:9/xml/device_description.xml")
        finally:
            await client.close()


class TestPost:

    async def test_volume_resolves_to_rendering_control(self, speaker, client) -> None:
        await client.get(_location(speaker))
        result = await client.post(_address(speaker), "GetVolume",
                                   {"InstanceID": 0, "Channel": "Master"})

        assert result == {"CurrentVolume": 25}
        path, soap_action, body = speaker.requests[-1]
        assert path == "/MediaRenderer/RenderingControl/Control"
        assert soap_action == f'"{RC}#GetVolume"'
        assert "<InstanceID>0</InstanceID>" in body
        assert "<Channel>Master</Channel>" in body

    async def test_loads_description_on_first_use(self, speaker, client) -> None:
        await client.post(_address(speaker), "Play", {"InstanceID": 0, "Speed": 1})
        await client.post(_address(speaker), "Play", {"InstanceID": 0, "Speed": 1})
        assert speaker.counts["descriptions"] == 1

    async def test_arguments_coerced_to_declared_types(self, speaker, client) -> None:
        await client.post(_address(speaker), "Play", {"InstanceID": 0, "Speed": 1})
        path, soap_action, body = speaker.requests[-1]
        assert path == "/MediaRenderer/AVTransport/Control"
        assert "<Speed>1</Speed>" in body

    async def test_explicit_service_on_root_device(self, speaker, client) -> None:
        result = await client.post(_address(speaker), "GetTimeZone", {},
                                   service="AlarmClock")
        assert result == {"CurrentTimeZone": "Europe/Copenhagen"}

    async def test_fault(self, speaker, client) -> None:
        with pytest.raises(ActionError) as exc_info:
            await client.post(_address(speaker), "SetVolume",
                              {"InstanceID": 0, "Channel": "Master", "DesiredVolume": 99})
        assert exc_info.value.code == 402
        assert exc_info.value.action == "SetVolume"

    async def test_unexpected_status(self, speaker, client) -> None:
        with pytest.raises(UpnpError):
            await client.post(_address(speaker), "Stop", {"InstanceID": 0})

    async def test_unknown_service_name(self, client) -> None:
        with pytest.raises(UpnpError):
            await client.post("10.0.0.5", "Anything", {}, service="NoSuchService")

    async def test_service_missing_on_device(self, speaker, client) -> None:
        with pytest.raises(UpnpError, match="no QPlay service"):
            await client.post(_address(speaker), "QPlayAuth", {"Seed": "x"},
                              service="QPlay")

    async def test_unknown_action(self, speaker, client) -> None:
        with pytest.raises(UpnpError):
            await client.post(_address(speaker), "Bogus", {"InstanceID": 0})

    async def test_unexpected_argument(self, speaker, client) -> None:
        with pytest.raises(UpnpError, match="unexpected argument"):
            await client.post(_address(speaker), "Stop", {"InstanceID": 0, "Extra": 1})

    async def test_unreachable_speaker(self) -> None:
        client = UpnpClient(timeout=1)
        try:
            with pytest.raises(UpnpError):
                await client.post("127.0.0.1:9", "Play", {"InstanceID": 0, "Speed": 1})
        finally:
            await client.close()


class TestClient:

    def test_base_url(self) -> None:
        client = UpnpClient(port=1400)
        assert client.base_url("10.0.0.5") == "http://10.0.0.5:1400"
        assert client.base_url("10.0.0.5:1401") == "http://10.0.0.5:1401"
        assert client.base_url("http://10.0.0.5:1400/") == "http://10.0.0.5:1400"

    async def test_device_keyed_by_host_and_port(self, speaker, client) -> None:
        await client.get(_location(speaker))
        assert client.device(f"http://{_address(speaker)}") is client.device(_address(speaker))
        assert client.device("10.0.0.5") is None

    async def test_injected_session_is_not_closed(self) -> None:
        async with aiohttp.ClientSession() as session:
            client = UpnpClient(session=session)
            await client.close()
            assert not session.closed


class TestActionInvoker:

    async def test_binds_address(self, make_upnp) -> None:
        upnp = make_upnp()
        invoke = ActionInvoker(upnp, "10.0.0.5")
        await invoke("GetZoneInfo", service="DeviceProperties")
        assert upnp.last_call == ("10.0.0.5", "GetZoneInfo", {}, "DeviceProperties")
        assert invoke.address == "10.0.0.5"
