import logging

import pytest

from circuits_builder import host
from circuits_builder.errors import PlatformError


@pytest.mark.parametrize(
    "system,expected",
    [("Linux", "linux"), ("Darwin", "macos"), ("Windows", "windows")],
)
def test_detect_os(system, expected):
    assert host.detect_os(system) == expected


def test_detect_os_unsupported():
    with pytest.raises(PlatformError, match="FreeBSD"):
        host.detect_os("FreeBSD")


@pytest.mark.parametrize(
    "machine,expected",
    [("x86_64", "x86_64"), ("amd64", "x86_64"), ("AMD64", "x86_64"), ("aarch64", "aarch64"), ("arm64", "aarch64")],
)
def test_detect_arch_aliases(machine, expected):
    assert host.detect_arch(machine) == expected
    assert host.detect_arch(machine, strict=False) == expected


def test_detect_arch_strict_rejects_unknown():
    with pytest.raises(PlatformError, match="riscv64"):
        host.detect_arch("riscv64", strict=True)


def test_detect_arch_lenient_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="circuits_builder"):
        assert host.detect_arch("riscv64", strict=False) == "riscv64"
    assert "riscv64" in caplog.text


def test_check_requirements_requires_linux():
    with pytest.raises(PlatformError, match="Darwin"):
        host.check_requirements("aarch64", system="Darwin")


def test_check_requirements_unknown_arch_is_warning(caplog):
    with caplog.at_level(logging.INFO, logger="circuits_builder"):
        host.check_requirements("ppc64le", system="Linux")
    assert "ppc64le" in caplog.text
    assert "System requirements check passed" in caplog.text


def test_require_supported_arch():
    assert host.require_supported_arch("aarch64") == "aarch64"
    with pytest.raises(PlatformError):
        host.require_supported_arch("i686")
