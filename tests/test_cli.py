import pytest

from ssdp_discovery_protocol import SsdpNotification, build_notify, classify, __version__
from ssdp_discovery_protocol.__main__ import run, parse_cli_target, summarize_message


def test_version_command(capsys):
    assert run(["version"]) == 0
    assert capsys.readouterr().out.strip() == __version__


def test_bare_command_is_an_error(capsys):
    assert run([]) == 1
    assert "A command is required" in capsys.readouterr().err


def test_unknown_option_returns_argparse_exit_code(capsys):
    assert run(["--no-such-option"]) == 2


@pytest.mark.parametrize("arg, expected", [
    ("root", "root"),
    ("device:MediaServer:1", ("device", "MediaServer:1")),
    ("service:ContentDirectory:1", ("service", "ContentDirectory:1")),
    ("urn:schemas-upnp-org:device:Basic:1", "urn:schemas-upnp-org:device:Basic:1"),
])
def test_parse_cli_target(arg, expected):
    assert parse_cli_target(arg) == expected


def test_summarize_notification():
    notify = build_notify("239.255.255.250", 1900, "http://h:1/description", "upnp:rootdevice",
                          "uuid:r::upnp:rootdevice", "S/1 UPnP/1.0 K/1")
    message = classify(notify.raw_data, src_addr=("192.0.2.5", 1900))
    assert isinstance(message, SsdpNotification)
    summary = summarize_message(message)
    assert summary["kind"] == "notification"
    assert summary["src_addr"] == "192.0.2.5:1900"
    assert summary["usn"] == "uuid:r::upnp:rootdevice"
    assert summary["headers"]["NTS"] == "ssdp:alive"
