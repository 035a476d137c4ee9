"""Recording stand-ins for subprocess.run / subprocess.Popen and the sysroot."""
import subprocess
from pathlib import Path
from typing import List, Optional


class FakeRunner:
    """Stands in for subprocess.run and records every command."""

    def __init__(self, sysroot: Optional[Path] = None, returncodes=None) -> None:
        self.sysroot = sysroot
        self.calls: List[List[str]] = []
        self.returncodes = dict(returncodes or {})

    def __call__(self, cmd, **kwargs):
        cmd = [str(c) for c in cmd]
        self.calls.append(cmd)
        if cmd[:3] == ["rustc", "--print", "sysroot"]:
            if self.sysroot is None:
                return subprocess.CompletedProcess(cmd, 1, stdout="", stderr="error: no rustc")
            return subprocess.CompletedProcess(cmd, 0, stdout=f"{self.sysroot}\n", stderr="")
        code = self.returncodes.get(cmd[0], 0)
        return subprocess.CompletedProcess(cmd, code)

    def commands(self, program: str) -> List[List[str]]:
        return [cmd for cmd in self.calls if cmd[0] == program]


class FakeProcess:
    def __init__(self, cmd, returncode: int = 0) -> None:
        self.cmd = cmd
        self.pid = 4242
        self.returncode = returncode
        self.waited = False
        self.stdout = None

    def wait(self, timeout=None):
        self.waited = True
        return self.returncode

    def poll(self):
        return self.returncode if self.waited else None


class FakePopen:
    """Stands in for subprocess.Popen; every process exits with ``returncode``."""

    def __init__(self, returncode: int = 0) -> None:
        self.returncode = returncode
        self.calls = []
        self.processes: List[FakeProcess] = []

    def __call__(self, cmd, **kwargs):
        self.calls.append((list(cmd), kwargs))
        proc = FakeProcess(list(cmd), self.returncode)
        self.processes.append(proc)
        return proc


def make_sysroot(root: Path, tools=("llvm-objdump", "llvm-objcopy")) -> Path:
    bin_dir = root / "lib" / "rustlib" / "x86_64-unknown-linux-gnu" / "bin"
    bin_dir.mkdir(parents=True)
    for tool in tools:
        path = bin_dir / tool
        path.write_text("#!/bin/sh\n")
        path.chmod(0o755)
    return root
