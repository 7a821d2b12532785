from types import SimpleNamespace

import pytest

from pdf_printer import DirectoryUnavailableError, PrinterDirectory
from pdf_printer.platforms import LinuxPrinterDriver, MemoryPrinterDriver, WindowsPrinterDriver
from pdf_printer.platforms import linux_driver, win_driver
from pdf_printer.platforms.linux_driver import parse_lpoptions


class FakeProc:
    def __init__(self, returncode=0, stdout="", stderr=""):
        self.returncode = returncode
        self.stdout = stdout
        self.stderr = stderr


def test_memory_directory_lists_in_order(driver):
    directory = PrinterDirectory(driver)
    assert directory.list_printers() == ["Office-LJ", "Basement Mono"]


def test_exists_is_case_sensitive(driver):
    directory = PrinterDirectory(driver)
    assert directory.exists("Office-LJ")
    assert not directory.exists("office-lj")
    assert not directory.exists("Office-LJ ")


def test_unreachable_registry_raises():
    directory = PrinterDirectory(MemoryPrinterDriver(available=False))
    with pytest.raises(DirectoryUnavailableError):
        directory.list_printers()
    with pytest.raises(DirectoryUnavailableError):
        directory.exists("anything")


def test_lpstat_listing(monkeypatch):
    monkeypatch.setattr(linux_driver, "cups", None)
    monkeypatch.setattr("shutil.which", lambda _p: "/usr/bin/" + _p)
    monkeypatch.setattr(
        "subprocess.run",
        lambda cmd, **kw: FakeProc(stdout="HP_LaserJet\nPDF\n\n"),
    )
    assert LinuxPrinterDriver().list_printers() == ["HP_LaserJet", "PDF"]


def test_lpstat_without_destinations_is_empty(monkeypatch):
    monkeypatch.setattr(linux_driver, "cups", None)
    monkeypatch.setattr("shutil.which", lambda _p: "/usr/bin/" + _p)
    monkeypatch.setattr(
        "subprocess.run",
        lambda cmd, **kw: FakeProc(returncode=1, stderr="lpstat: No destinations added."),
    )
    assert LinuxPrinterDriver().list_printers() == []


def test_lpstat_scheduler_down_is_unavailable(monkeypatch):
    monkeypatch.setattr(linux_driver, "cups", None)
    monkeypatch.setattr("shutil.which", lambda _p: "/usr/bin/" + _p)
    monkeypatch.setattr(
        "subprocess.run",
        lambda cmd, **kw: FakeProc(returncode=1, stderr="lpstat: Scheduler is not running."),
    )
    with pytest.raises(DirectoryUnavailableError, match="Scheduler is not running"):
        LinuxPrinterDriver().list_printers()


LPOPTIONS_OUTPUT = """\
PageSize/Media Size: *A4 Letter Legal
InputSlot/Media Source: *Auto Tray1 Manual
Duplex/2-Sided Printing: *None DuplexNoTumble DuplexTumble
ColorModel/Output Mode: Gray *RGB
"""


def test_parse_lpoptions():
    options = parse_lpoptions(LPOPTIONS_OUTPUT)
    assert options["InputSlot"] == ["Auto", "Tray1", "Manual"]
    assert options["ColorModel"] == ["Gray", "RGB"]


def test_lpoptions_capabilities(monkeypatch):
    monkeypatch.setattr(linux_driver, "cups", None)
    monkeypatch.setattr("shutil.which", lambda _p: "/usr/bin/" + _p)
    calls = []

    def fake_run(cmd, **kw):
        calls.append(cmd)
        return FakeProc(stdout=LPOPTIONS_OUTPUT)

    monkeypatch.setattr("subprocess.run", fake_run)
    caps = LinuxPrinterDriver().get_capabilities("HP_LaserJet")

    assert calls == [["lpoptions", "-p", "HP_LaserJet", "-l"]]
    assert caps.supports_color
    assert caps.supports_duplex
    assert caps.paper_sizes == frozenset({"A4", "Letter", "Legal"})
    assert caps.source_names() == ["Auto", "Tray1", "Manual"]
    assert caps.paper_sources[1].token == "InputSlot=Tray1"


def test_lpoptions_grayscale_simplex_printer(monkeypatch):
    monkeypatch.setattr(linux_driver, "cups", None)
    monkeypatch.setattr("shutil.which", lambda _p: "/usr/bin/" + _p)
    output = "ColorModel/Output Mode: *Gray\nDuplex/2-Sided Printing: *None\n"
    monkeypatch.setattr("subprocess.run", lambda cmd, **kw: FakeProc(stdout=output))
    caps = LinuxPrinterDriver().get_capabilities("Mono")
    assert not caps.supports_color
    assert not caps.supports_duplex
    assert caps.paper_sources == ()


class FakeIPPError(Exception):
    pass


class FakeCupsConnection:
    def __init__(self, printers=None, attrs=None, fail=False):
        self._printers = printers or {}
        self._attrs = attrs or {}
        self._fail = fail
        self.printed = []

    def getPrinters(self):
        if self._fail:
            raise RuntimeError("cupsd went away")
        return self._printers

    def getPrinterAttributes(self, name, requested_attributes=None):
        return self._attrs

    def getPPD(self, name):
        raise FakeIPPError("no PPD")

    def printFile(self, printer, path, title, options):
        self.printed.append((printer, path, title, options))
        return 42


def _fake_cups(conn):
    return SimpleNamespace(Connection=lambda: conn, IPPError=FakeIPPError)


def test_cups_listing_and_capabilities(monkeypatch):
    conn = FakeCupsConnection(
        printers={"Office-LJ": {}, "PDF": {}},
        attrs={
            "color-supported": True,
            "sides-supported": ["one-sided", "two-sided-long-edge"],
            "media-supported": ["iso_a4_210x297mm", "na_letter_8.5x11in"],
            "media-source-supported": ["auto", "tray-1"],
        },
    )
    monkeypatch.setattr(linux_driver, "cups", _fake_cups(conn))
    driver = LinuxPrinterDriver()

    assert driver.list_printers() == ["Office-LJ", "PDF"]
    caps = driver.get_capabilities("Office-LJ")
    assert caps.supports_color and caps.supports_duplex
    assert caps.source_names() == ["auto", "tray-1"]
    assert caps.paper_sources[1].token == "media-source=tray-1"


def test_cups_failure_is_unavailable(monkeypatch):
    monkeypatch.setattr(linux_driver, "cups", _fake_cups(FakeCupsConnection(fail=True)))
    with pytest.raises(DirectoryUnavailableError, match="cupsd went away"):
        LinuxPrinterDriver().list_printers()


class FakeWin32Print:
    PRINTER_ENUM_LOCAL = 2
    PRINTER_ENUM_CONNECTIONS = 4

    def __init__(self, fail=False):
        self.fail = fail

    def EnumPrinters(self, flags):
        if self.fail:
            raise OSError("The RPC server is unavailable.")
        return [(0, "", "Office-LJ", ""), (0, "", "Microsoft Print to PDF", "")]

    def OpenPrinter(self, name):
        return name

    def ClosePrinter(self, handle):
        pass

    def GetPrinter(self, handle, level):
        return {"pPortName": "USB001"}

    def DeviceCapabilities(self, name, port, capability):
        return {
            "bins": [7, 2, 260],
            "binnames": ["Automatically Select\x00", "Tray 1", "Custom Bin"],
            "papernames": ["A4", "Letter"],
            "color": 1,
            "duplex": 0,
        }[capability]


FAKE_WIN32CON = SimpleNamespace(
    DC_BINS="bins",
    DC_BINNAMES="binnames",
    DC_PAPERNAMES="papernames",
    DC_COLORDEVICE="color",
    DC_DUPLEX="duplex",
)


def test_windows_listing_and_capabilities(monkeypatch):
    monkeypatch.setattr(win_driver, "win32print", FakeWin32Print())
    monkeypatch.setattr(win_driver, "win32con", FAKE_WIN32CON)
    driver = WindowsPrinterDriver()

    assert driver.list_printers() == ["Office-LJ", "Microsoft Print to PDF"]
    caps = driver.get_capabilities("Office-LJ")
    assert caps.supports_color
    assert not caps.supports_duplex
    assert caps.paper_sizes == frozenset({"A4", "Letter"})
    assert caps.source_names() == ["Automatically Select", "Tray 1", "Custom Bin"]
    assert [s.token for s in caps.paper_sources] == ["bin:7", "bin:2", "bin:260"]


def test_windows_spooler_down(monkeypatch):
    monkeypatch.setattr(win_driver, "win32print", FakeWin32Print(fail=True))
    with pytest.raises(DirectoryUnavailableError, match="Print Spooler"):
        WindowsPrinterDriver().list_printers()
