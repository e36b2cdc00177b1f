import logging
import sys

from openrgb_sdk import OpenRGBProtocol, OpenRGBConfig, RGBColor, ModePatch, load_config, run_with_keyboard_interrupt

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')


async def main():
    """List every device on an OpenRGB server and set the first one to static red"""
    config = load_config(sys.argv[1]) if len(sys.argv) > 1 else OpenRGBConfig()

    async with OpenRGBProtocol.from_config(config) as orgb:
        print(f"Protocol version: {orgb.protocol_version}")
        print("=" * 50)

        devices = await orgb.get_all_controller_data()
        for device in devices:
            print(f"{device.device_id}: {device.name} ({device.device_type.name if device.device_type else device.type})")
            for mode in device.modes:
                active = "*" if mode.id == device.active_mode else " "
                print(f"   {active} {mode.name}: {', '.join(mode.flag_list)}")
            for zone in device.zones:
                print(f"     zone {zone.id} {zone.name}: {zone.leds_count} LEDs")

        print(f"Profiles: {await orgb.get_profile_list()}")

        if devices:
            red = RGBColor(255, 0, 0)
            mode = await orgb.update_mode(0, ModePatch(name="Static", colors=[red]))
            print(f"Set {devices[0].name} to {mode.name}")

        print("=" * 50)


if __name__ == "__main__":
    run_with_keyboard_interrupt(main)
