"""Platform-specific printing drivers."""

from .linux_driver import LinuxPrinterDriver
from .mac_driver import MacPrinterDriver
from .memory_driver import MemoryPrinterDriver
from .win_driver import WindowsPrinterDriver

__all__ = [
    "WindowsPrinterDriver",
    "LinuxPrinterDriver",
    "MacPrinterDriver",
    "MemoryPrinterDriver",
]
