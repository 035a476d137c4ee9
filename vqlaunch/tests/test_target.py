from pathlib import Path

import pytest

from vqlaunch.config import RunConfig
from vqlaunch.errors import ToolchainNotFound
from vqlaunch.target import (
    SysrootLocator,
    query_sysroot,
    resolve,
    resolve_toolchain,
    triple_for,
)

from .fakes import FakeRunner, make_sysroot


@pytest.mark.parametrize("arch", ["riscv64", "riscv32", "aarch64", "", "not an arch"])
def test_triple_substitutes_any_arch(arch):
    assert triple_for(arch) == arch + "imac-unknown-none-elf"


def test_resolve_release_paths(tmp_path):
    cfg = RunConfig(arch="riscv64", mode="release", project_dir=tmp_path / "qemu", target_dir=tmp_path / "target")
    paths = resolve(cfg)
    assert paths.triple == "riscv64imac-unknown-none-elf"
    assert paths.kernel_path == tmp_path / "target" / "riscv64imac-unknown-none-elf" / "release" / "qemu"
    assert paths.image_path == tmp_path / "target" / "riscv64imac-unknown-none-elf" / "release" / "img"


def test_resolve_default_target_dir_is_workspace_target(tmp_path):
    cfg = RunConfig(mode="debug", project_dir=tmp_path / "qemu")
    paths = resolve(cfg)
    assert paths.kernel_path == tmp_path / "qemu" / ".." / "target" / "riscv64imac-unknown-none-elf" / "debug" / "qemu"
    assert paths.kernel_path.as_posix().endswith("riscv64imac-unknown-none-elf/debug/qemu")


def test_malformed_arch_propagates_into_paths(tmp_path):
    cfg = RunConfig(arch="bogus", project_dir=tmp_path)
    assert "bogusimac-unknown-none-elf" in resolve(cfg).kernel_path.as_posix()


class TestSysrootLocator:
    def test_finds_tool(self, sysroot):
        found = SysrootLocator(sysroot).find("llvm-objdump")
        assert found.name == "llvm-objdump"
        assert found.is_file()

    def test_missing_tool_raises(self, tmp_path):
        root = make_sysroot(tmp_path / "sysroot", tools=("llvm-objcopy",))
        with pytest.raises(ToolchainNotFound) as info:
            SysrootLocator(root).find("llvm-objdump")
        assert info.value.tool == "llvm-objdump"
        assert info.value.exit_code == 3

    def test_first_match_in_sorted_walk_wins(self, tmp_path):
        root = tmp_path / "sysroot"
        for sub in ("zeta/bin", "alpha/bin", "alpha/deeper/bin"):
            (root / sub).mkdir(parents=True)
            (root / sub / "llvm-objdump").write_text("")
        locator = SysrootLocator(root)
        candidates = locator.candidates("llvm-objdump")
        assert candidates == [
            root / "alpha" / "bin" / "llvm-objdump",
            root / "alpha" / "deeper" / "bin" / "llvm-objdump",
            root / "zeta" / "bin" / "llvm-objdump",
        ]
        assert locator.find("llvm-objdump") == candidates[0]

    def test_directories_with_tool_name_are_skipped(self, tmp_path):
        root = tmp_path / "sysroot"
        (root / "a" / "llvm-objcopy").mkdir(parents=True)
        (root / "b").mkdir()
        (root / "b" / "llvm-objcopy").write_text("")
        assert SysrootLocator(root).find("llvm-objcopy") == root / "b" / "llvm-objcopy"


class TestQuerySysroot:
    def test_returns_stripped_path(self, sysroot):
        runner = FakeRunner(sysroot)
        assert query_sysroot(runner) == sysroot
        assert runner.calls == [["rustc", "--print", "sysroot"]]

    def test_non_zero_exit_raises(self):
        with pytest.raises(ToolchainNotFound) as info:
            query_sysroot(FakeRunner(None))
        assert "no rustc" in str(info.value)

    def test_missing_rustc_raises(self):
        def runner(cmd, **kwargs):
            raise FileNotFoundError(2, "No such file or directory", "rustc")

        with pytest.raises(ToolchainNotFound):
            query_sysroot(runner)


class StaticLocator:
    def __init__(self, tools):
        self.tools = tools
        self.lookups = []

    def find(self, tool_name):
        self.lookups.append(tool_name)
        if tool_name not in self.tools:
            raise ToolchainNotFound(tool_name)
        return self.tools[tool_name]


def test_resolve_toolchain_uses_injected_locator():
    locator = StaticLocator({"llvm-objdump": Path("/x/objdump"), "llvm-objcopy": Path("/x/objcopy")})
    paths = resolve_toolchain(locator, Path("/x"))
    assert paths.objdump == Path("/x/objdump")
    assert paths.objcopy == Path("/x/objcopy")
    assert paths.sysroot == Path("/x")
    assert locator.lookups == ["llvm-objdump", "llvm-objcopy"]


def test_resolve_toolchain_fails_when_either_tool_missing():
    locator = StaticLocator({"llvm-objdump": Path("/x/objdump")})
    with pytest.raises(ToolchainNotFound) as info:
        resolve_toolchain(locator, Path("/x"))
    assert info.value.tool == "llvm-objcopy"
