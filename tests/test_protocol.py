"""Tests for the OpenRGB command layer against a local fake server."""

import asyncio

import pytest
import pytest_asyncio

from openrgb_sdk import OpenRGBProtocol, OpenRGBConfig, RGBColor, ModePatch, Command
from openrgb_sdk.api import codec
from openrgb_sdk.api.types import Const
from openrgb_sdk.exceptions import OpenRGBDisconnectedError, OpenRGBNegotiationError

import payloads
from fake_server import FakeOpenRGBServer


@pytest_asyncio.fixture
async def server():
    server = await FakeOpenRGBServer(protocol_version=4, profiles=["Day", "Night"],
                                     devices=[payloads.sample_device, payloads.sample_device]).start()
    yield server
    await server.close()


@pytest_asyncio.fixture
async def orgb(server):
    async with OpenRGBProtocol(port=server.port, name="pytest", timeout=1.0, request_timeout=2.0) as orgb:
        yield orgb


async def _flush(orgb: OpenRGBProtocol):
    """Fire-and-forget commands are processed in order; a round trip makes sure the server has them."""
    await orgb.get_controller_count()


@pytest.mark.asyncio
async def test_connect_negotiates_and_sends_name(server, orgb):
    assert orgb.is_connected()
    assert orgb.protocol_version == 4
    await _flush(orgb)
    assert server.commands(Command.SET_CLIENT_NAME) == [(0, b"pytest\x00")]


@pytest.mark.asyncio
async def test_controller_count(orgb):
    assert await orgb.get_controller_count() == 2


@pytest.mark.asyncio
async def test_get_controller_data_uses_negotiated_version(server, orgb):
    device = await orgb.get_controller_data(1)
    assert device.device_id == 1
    assert device.vendor == "Acme"
    assert device.zones[0].segments is not None
    assert server.commands(Command.REQUEST_CONTROLLER_DATA) == [(1, payloads.u32(4))]


@pytest.mark.asyncio
async def test_get_all_controller_data(orgb):
    devices = await orgb.get_all_controller_data()
    assert [d.device_id for d in devices] == [0, 1]
    assert all(d.name == "Strip" for d in devices)


@pytest.mark.asyncio
async def test_get_protocol_version(orgb):
    assert await orgb.get_protocol_version() == 4
    assert orgb.protocol_version == 4


@pytest.mark.asyncio
async def test_get_profile_list(orgb):
    assert await orgb.get_profile_list() == ["Day", "Night"]


@pytest.mark.asyncio
async def test_update_mode_by_name(server, orgb):
    sent = await orgb.update_mode(0, "rainbow")
    await _flush(orgb)
    [(device_id, payload)] = server.commands(Command.UPDATE_MODE)
    assert device_id == 0
    assert codec.decode_mode_update(payload, 4) == sent
    assert sent.name == "Rainbow"


@pytest.mark.asyncio
async def test_save_mode_with_patch(server, orgb):
    blue = RGBColor(0, 0, 255)
    sent = await orgb.save_mode(1, ModePatch(id=1, colors=[blue], brightness=20))
    await _flush(orgb)
    [(device_id, payload)] = server.commands(Command.SAVE_MODE)
    assert device_id == 1
    decoded = codec.decode_mode_update(payload, 4)
    assert decoded.colors == [blue]
    assert decoded.brightness == 20
    assert decoded == sent


@pytest.mark.asyncio
async def test_update_mode_unknown_name_sends_nothing(server, orgb):
    with pytest.raises(ValueError):
        await orgb.update_mode(0, "Strobe")
    await _flush(orgb)
    assert server.commands(Command.UPDATE_MODE) == []


@pytest.mark.asyncio
async def test_led_commands(server, orgb):
    red = RGBColor(255, 0, 0)
    orgb.set_custom_mode(1)
    orgb.update_leds(1, [red, red])
    orgb.update_zone_leds(1, 0, [red])
    orgb.update_single_led(1, 3, red)
    orgb.resize_zone(1, 0, 12)
    await _flush(orgb)
    assert server.commands(Command.SET_CUSTOM_MODE) == [(1, b"")]
    assert server.commands(Command.UPDATE_LEDS) == [(1, codec.encode_update_leds([red, red]))]
    assert server.commands(Command.UPDATE_ZONE_LEDS) == [(1, codec.encode_update_zone_leds(0, [red]))]
    assert server.commands(Command.UPDATE_SINGLE_LED) == [(1, codec.encode_update_single_led(3, red))]
    assert server.commands(Command.RESIZE_ZONE) == [(1, codec.encode_resize_zone(0, 12))]


@pytest.mark.asyncio
async def test_profile_commands(server, orgb):
    orgb.save_profile("Evening")
    orgb.load_profile("Day")
    orgb.delete_profile("Night")
    await _flush(orgb)
    assert server.commands(Command.REQUEST_SAVE_PROFILE) == [(0, b"Evening\x00")]
    assert server.commands(Command.REQUEST_LOAD_PROFILE) == [(0, b"Day\x00")]
    assert server.commands(Command.REQUEST_DELETE_PROFILE) == [(0, b"Night\x00")]


@pytest.mark.asyncio
async def test_device_list_updated(server, orgb):
    called = asyncio.Event()

    async def on_update():
        called.set()

    orgb.set_callbacks(device_list_updated_callback=on_update)
    await server.send_raw(payloads.packet(0, Command.DEVICE_LIST_UPDATED))
    await asyncio.wait_for(called.wait(), timeout=1.0)

    updates = [u async for u in orgb.device_list_updates(timeout=0.1)]
    assert len(updates) == 1


@pytest.mark.asyncio
async def test_commands_after_disconnect(orgb):
    await orgb.disconnect()
    assert not orgb.is_connected()
    with pytest.raises(OpenRGBDisconnectedError):
        orgb.update_leds(0, [])
    with pytest.raises(OpenRGBDisconnectedError):
        await orgb.get_controller_count()


@pytest.mark.asyncio
async def test_old_server_without_forced_version():
    server = await FakeOpenRGBServer(protocol_version=None).start()
    try:
        orgb = OpenRGBProtocol(port=server.port, timeout=0.2)
        with pytest.raises(OpenRGBNegotiationError):
            await orgb.connect()
        assert not orgb.is_connected()
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_old_server_with_forced_version():
    server = await FakeOpenRGBServer(protocol_version=None).start()
    try:
        config = OpenRGBConfig(port=server.port, timeout=0.2, force_protocol_version=1, name="legacy")
        async with OpenRGBProtocol.from_config(config) as orgb:
            assert orgb.protocol_version == 1
            device = await orgb.get_controller_data(0)
            assert device.vendor == "Acme"
            assert device.modes[1].brightness is None
    finally:
        await server.close()


@pytest.mark.asyncio
async def test_print_traffic(server, capsys):
    async with OpenRGBProtocol(port=server.port, print_traffic=True) as orgb:
        await orgb.get_controller_count()
    out = capsys.readouterr().out
    assert "REQUEST_CONTROLLER_COUNT" in out
    assert "RESPONSE" in out


@pytest.mark.asyncio
async def test_get_protocol_version_announces_forced_zero(server):
    async with OpenRGBProtocol(port=server.port, force_protocol_version=0) as orgb:
        assert orgb.protocol_version == 0
        assert await orgb.get_protocol_version() == 4
    assert [payload for _, payload in server.commands(Command.REQUEST_PROTOCOL_VERSION)] == [payloads.u32(0)] * 2


@pytest.mark.asyncio
async def test_failing_device_list_callback_is_logged(server, orgb, caplog):
    async def on_update():
        raise RuntimeError("boom")

    orgb.set_callbacks(device_list_updated_callback=on_update)
    await server.send_raw(payloads.packet(0, Command.DEVICE_LIST_UPDATED))
    await _flush(orgb)
    for _ in range(10):
        if not orgb._callback_tasks:
            break
        await asyncio.sleep(0.01)
    assert not orgb._callback_tasks
    assert "boom" in caplog.text


@pytest.mark.asyncio
async def test_unread_device_list_updates_are_bounded(server, orgb):
    await server.send_raw(payloads.packet(0, Command.DEVICE_LIST_UPDATED) * (Const.DEVICE_LIST_QUEUE_SIZE + 5))
    await _flush(orgb)
    updates = [u async for u in orgb.device_list_updates(timeout=0.1)]
    assert len(updates) == Const.DEVICE_LIST_QUEUE_SIZE
