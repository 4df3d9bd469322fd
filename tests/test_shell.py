import asyncio

from tweakport.core.config_model import EngineSettings
from tweakport.core.shell import ShellController

from conftest import FakeProcess

SETTINGS = EngineSettings(
    shell_restart_max_polls=5,
    shell_restart_poll_interval=0.25,
    shell_start_verify_max_polls=3,
    shell_start_verify_interval=0.5,
    shell_kill_settle_delay=1.0,
)


def _shell(process):
    sleeps = []

    async def _sleep(seconds):
        sleeps.append(seconds)

    return ShellController(process, SETTINGS, sleep=_sleep), sleeps


class _DeadProcess(FakeProcess):
    """Never runs, even after a start."""

    def start_process(self, name):
        self.log.append(("start", name))


def test_pause_kills_and_settles():
    process = FakeProcess()
    shell, sleeps = _shell(process)

    assert asyncio.run(shell.pause())
    assert process.log == [("kill", "explorer")]
    assert sleeps == [1.0]


def test_pause_when_not_running():
    process = FakeProcess(running=False)
    shell, _ = _shell(process)

    assert not asyncio.run(shell.pause())
    assert process.log == []


def test_resume_waits_for_automatic_restart():
    process = FakeProcess(restart_after=2)
    shell, sleeps = _shell(process)
    asyncio.run(shell.pause())

    assert asyncio.run(shell.resume())
    assert ("start", "explorer") not in process.log
    assert sleeps == [1.0, 0.25, 0.25]


def test_resume_starts_shell_after_poll_budget():
    process = FakeProcess(restart_after=None)
    shell, sleeps = _shell(process)
    asyncio.run(shell.pause())

    assert asyncio.run(shell.resume())
    assert process.log == [("kill", "explorer"), ("start", "explorer")]
    assert sleeps == [1.0] + [0.25] * 5 + [0.5]


def test_resume_gives_up_after_verify_budget():
    process = _DeadProcess(restart_after=None)
    shell, sleeps = _shell(process)
    asyncio.run(shell.pause())

    assert not asyncio.run(shell.resume())
    assert process.log.count(("start", "explorer")) == 1
    assert len(sleeps) == 1 + 5 + 3


def test_restart_other_process():
    process = FakeProcess()
    shell, _ = _shell(process)

    asyncio.run(shell.restart("sihost"))
    assert process.log == [("kill", "sihost"), ("start", "sihost")]
