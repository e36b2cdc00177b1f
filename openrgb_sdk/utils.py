"""
Utility functions for the OpenRGB SDK library
"""
import asyncio
import sys
from typing import Callable, Any

from .exceptions import OpenRGBError


def run_with_keyboard_interrupt(main_func: Callable[[], Any]) -> None:
    """
    Run an async main function with graceful KeyboardInterrupt handling.

    Ctrl+C exits with status 0. A library error is printed and exits with status 1.

    Args:
        main_func: The async main function to run
    """
    try:
        asyncio.run(main_func())
    except KeyboardInterrupt:
        print("\n🛑 Interrupted by user (Ctrl+C)")
        sys.exit(0)
    except OpenRGBError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)
