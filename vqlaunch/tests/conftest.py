"""
Pytest fixtures for vqlaunch tests.

External tools (rustc, cargo, rustup, qemu) are replaced by recording fakes
so the suite runs without a Rust toolchain or emulator installed.
"""
import pytest

from vqlaunch.config import RunConfig

from .fakes import FakeRunner, make_sysroot


@pytest.fixture
def sysroot(tmp_path):
    return make_sysroot(tmp_path / "sysroot")


@pytest.fixture
def config(tmp_path):
    project = tmp_path / "workspace" / "qemu"
    project.mkdir(parents=True)
    return RunConfig(arch="riscv64", mode="release", tcp=False, project_dir=project)


@pytest.fixture
def runner(sysroot):
    return FakeRunner(sysroot)
