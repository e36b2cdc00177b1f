import asyncio
import logging
from typing import Optional, Self, Callable, Awaitable, AsyncGenerator
from colorama import Fore, Style

from ..io import OpenRGBClient, ClientConst, Packet
from ..exceptions import OpenRGBDisconnectedError, OpenRGBNegotiationError
from ..config import OpenRGBConfig
from .models import RGBColor, Device, Mode, ModeSelector, select_mode
from .negotiation import negotiate_protocol_version, preferred_protocol_version
from .types import Command, Const
from . import codec

"""
===================================================================================
This module implements the OpenRGB SDK commands using the wire-level client.
===================================================================================
"""


class OpenRGBProtocol:

    def __init__(self,
                 host: str = ClientConst.DEFAULT_HOST,
                 port: int = ClientConst.DEFAULT_PORT,
                 name: str = Const.DEFAULT_CLIENT_NAME,
                 timeout: float = ClientConst.CONNECT_TIMEOUT,
                 request_timeout: Optional[float] = None,
                 force_protocol_version: Optional[int] = None,
                 strict_framing: bool = False,
                 print_traffic: bool = False,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self.host = host
        self.port = port
        self.name = name
        self.timeout = timeout
        self.request_timeout = request_timeout
        self.force_protocol_version = force_protocol_version
        self.strict_framing = strict_framing
        self.print_traffic = print_traffic

        # Set once per connection by negotiation
        self.protocol_version: Optional[int] = None
        self.client: Optional[OpenRGBClient] = None

        # Device list broadcasts
        self.device_list_updated_callback: Optional[Callable[[], Awaitable[None]]] = None
        self._device_list_queue: asyncio.Queue = asyncio.Queue(maxsize=Const.DEVICE_LIST_QUEUE_SIZE)
        self._callback_tasks: set[asyncio.Task] = set()

    @classmethod
    def from_config(cls, config: OpenRGBConfig, logger: Optional[logging.Logger] = None) -> Self:
        return cls(host=config.host,
                   port=config.port,
                   name=config.name,
                   timeout=config.timeout,
                   request_timeout=config.request_timeout,
                   force_protocol_version=config.force_protocol_version,
                   strict_framing=config.strict_framing,
                   print_traffic=config.print_traffic,
                   logger=logger)

    async def __aenter__(self):
        """Async context manager entry"""
        await self.connect()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit"""
        await self.disconnect()

    # ============================
    # CONNECTION
    # ============================

    async def connect(self):
        """Connect, agree a protocol version and announce the client name"""
        if self.is_connected():
            return
        self.client = OpenRGBClient((self.host, self.port),
                                    broadcast_command=Command.DEVICE_LIST_UPDATED,
                                    on_broadcast=self._broadcast_received,
                                    strict_framing=self.strict_framing,
                                    logger=self.logger)
        if self.print_traffic:
            self.client.on_send = self._print_sent
            self.client.on_receive = self._print_received
        await self.client.connect(self.timeout)

        try:
            self.protocol_version = await negotiate_protocol_version(self.client,
                                                                     forced=self.force_protocol_version,
                                                                     timeout=self.timeout,
                                                                     logger=self.logger)
        except OpenRGBNegotiationError:
            self.logger.error(f"Protocol negotiation with {self.host}:{self.port} failed")
            await self.disconnect()
            raise

        self.set_client_name(self.name)

    async def disconnect(self):
        if self.client:
            await self.client.close()
        self.client = None
        self.protocol_version = None

    def is_connected(self) -> bool:
        return self.client is not None and self.client.is_connected()

    # ============================
    # PACKET SENDING
    # ============================

    def _connected_client(self) -> OpenRGBClient:
        if not self.is_connected():
            raise OpenRGBDisconnectedError(f"Not connected to OpenRGB at {self.host}:{self.port}")
        return self.client

    def _send(self, command: Command, payload: bytes = b"", device_id: int = 0):
        self._connected_client().send_packet(device_id, command, payload)

    async def _request(self, command: Command, payload: bytes = b"", device_id: int = 0) -> bytes:
        return await self._connected_client().request(device_id, command, payload, timeout=self.request_timeout)

    def _print_sent(self, packet: Packet):
        print(Fore.MAGENTA + f"REQUEST:  device {packet.device_id} {self._command_name(packet.command_id)}".ljust(48)
              + Style.DIM + f"[{packet.payload.hex(' ')}]" + Style.RESET_ALL)

    def _print_received(self, packet: Packet):
        print(Fore.CYAN + f"RESPONSE: device {packet.device_id} {self._command_name(packet.command_id)}".ljust(48)
              + Style.DIM + f"[{packet.payload.hex(' ')}]" + Style.RESET_ALL)

    @staticmethod
    def _command_name(command_id: int) -> str:
        return Command(command_id).name if command_id in Command._value2member_map_ else f"COMMAND_{command_id}"

    # ============================
    # QUERIES
    # ============================

    async def get_controller_count(self) -> int:
        """Number of controllers (devices) the server knows about."""
        return codec.decode_u32(await self._request(Command.REQUEST_CONTROLLER_COUNT))

    async def get_controller_data(self, device_id: int) -> Device:
        """Full description of one controller: modes, zones, LEDs and colours."""
        payload = await self._request(Command.REQUEST_CONTROLLER_DATA, codec.encode_u32(self.protocol_version), device_id)
        return codec.decode_device(payload, device_id, self.protocol_version)

    async def get_all_controller_data(self) -> list[Device]:
        devices = []
        for device_id in range(await self.get_controller_count()):
            devices.append(await self.get_controller_data(device_id))
        return devices

    async def get_protocol_version(self) -> int:
        """Ask the server for its protocol version. This does not change the negotiated version."""
        preferred = preferred_protocol_version(self.force_protocol_version)
        return codec.decode_u32(await self._request(Command.REQUEST_PROTOCOL_VERSION, codec.encode_u32(preferred)))

    async def get_profile_list(self) -> list[str]:
        return codec.decode_profile_list(await self._request(Command.REQUEST_PROFILE_LIST))

    # ============================
    # COMMANDS
    # ============================

    def set_client_name(self, name: str):
        """Set the name shown for this client in OpenRGB."""
        self._send(Command.SET_CLIENT_NAME, codec.encode_name(name))

    def update_leds(self, device_id: int, colors: list[RGBColor]):
        self._send(Command.UPDATE_LEDS, codec.encode_update_leds(colors), device_id)

    def update_zone_leds(self, device_id: int, zone_id: int, colors: list[RGBColor]):
        self._send(Command.UPDATE_ZONE_LEDS, codec.encode_update_zone_leds(zone_id, colors), device_id)

    def update_single_led(self, device_id: int, led_id: int, color: RGBColor):
        self._send(Command.UPDATE_SINGLE_LED, codec.encode_update_single_led(led_id, color), device_id)

    def set_custom_mode(self, device_id: int):
        """Switch the device to the mode used for direct per-LED control."""
        self._send(Command.SET_CUSTOM_MODE, device_id=device_id)

    async def update_mode(self, device_id: int, mode: ModeSelector) -> Mode:
        """Activate a mode by index, name or ModePatch. Returns the mode as sent.

        Unset ModePatch fields keep the values the server currently reports.
        """
        return await self._send_mode(device_id, mode, Command.UPDATE_MODE)

    async def save_mode(self, device_id: int, mode: ModeSelector) -> Mode:
        """As update_mode(), but also asks the device to store the mode."""
        return await self._send_mode(device_id, mode, Command.SAVE_MODE)

    async def _send_mode(self, device_id: int, selector: ModeSelector, command: Command) -> Mode:
        device = await self.get_controller_data(device_id)
        mode = select_mode(device.modes, selector)
        self._send(command, codec.encode_mode(mode, self.protocol_version), device_id)
        return mode

    def resize_zone(self, device_id: int, zone_id: int, size: int):
        self._send(Command.RESIZE_ZONE, codec.encode_resize_zone(zone_id, size), device_id)

    def save_profile(self, name: str):
        """Store the current state of all devices as a new profile."""
        self._send(Command.REQUEST_SAVE_PROFILE, codec.encode_name(name))

    def load_profile(self, name: str):
        self._send(Command.REQUEST_LOAD_PROFILE, codec.encode_name(name))

    def delete_profile(self, name: str):
        self._send(Command.REQUEST_DELETE_PROFILE, codec.encode_name(name))

    # ============================
    # DEVICE LIST BROADCASTS
    # ============================

    def set_callbacks(self, device_list_updated_callback: Optional[Callable[[], Awaitable[None]]] = None):
        self.device_list_updated_callback = device_list_updated_callback

    def _broadcast_received(self, packet: Packet):
        self.logger.info(f"Device list updated on {self.host}:{self.port}")
        if self._device_list_queue.full():
            self.logger.debug("Device list update queue is full, dropping notification")
        else:
            self._device_list_queue.put_nowait(packet)
        if self.device_list_updated_callback:
            task = asyncio.create_task(self.device_list_updated_callback())
            self._callback_tasks.add(task)
            task.add_done_callback(self._callback_done)

    def _callback_done(self, task: asyncio.Task):
        self._callback_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            self.logger.error(f"Device list updated callback failed: {task.exception()!r}")

    async def device_list_updates(self, timeout: Optional[float] = None) -> AsyncGenerator[None, None]:
        """Async generator yielding each time the server reports a changed device list"""
        while True:
            try:
                await asyncio.wait_for(self._device_list_queue.get(), timeout=timeout)
            except asyncio.TimeoutError:
                break
            yield
            self._device_list_queue.task_done()
