import asyncio
import shutil
import unittest
from unittest import mock

from claunch.automation import engine as engine_module
from claunch.automation.engine import AutomationScriptEngine
from claunch.errors import AutomationScriptError, AutomationTimeoutError, FailureKind


class FakeProcess:
    def __init__(self, returncode: int = 0, stderr: bytes = b"", delay: float = 0.0) -> None:
        self.returncode = None
        self._final_code = returncode
        self._stderr = stderr
        self._delay = delay
        self.input = None
        self.killed = False

    async def communicate(self, input=None):
        self.input = input
        if self._delay:
            await asyncio.sleep(self._delay)
        self.returncode = self._final_code
        return b"", self._stderr

    def kill(self) -> None:
        self.killed = True
        self.returncode = -9

    async def wait(self) -> int:
        return self.returncode


class AutomationEngineTests(unittest.IsolatedAsyncioTestCase):
    async def test_script_is_written_to_stdin(self) -> None:
        proc = FakeProcess()
        with mock.patch.object(
            engine_module.asyncio, "create_subprocess_exec", mock.AsyncMock(return_value=proc)
        ) as spawn:
            await AutomationScriptEngine().run('tell application "Terminal" to activate\n')
        self.assertEqual(spawn.call_args.args, ("osascript",))
        self.assertEqual(proc.input, b'tell application "Terminal" to activate\n')

    async def test_timeout_kills_process(self) -> None:
        proc = FakeProcess(delay=5)
        with mock.patch.object(
            engine_module.asyncio, "create_subprocess_exec", mock.AsyncMock(return_value=proc)
        ):
            with self.assertRaises(AutomationTimeoutError) as ctx:
                await AutomationScriptEngine().run("delay 5", timeout=0.05)
        self.assertTrue(proc.killed)
        self.assertEqual(ctx.exception.kind, FailureKind.AUTOMATION_TIMEOUT)
        self.assertIn("timed out", ctx.exception.message)

    async def test_non_zero_exit_is_script_error(self) -> None:
        proc = FakeProcess(returncode=1, stderr=b"execution error: Not authorized (-1743)\n")
        with mock.patch.object(
            engine_module.asyncio, "create_subprocess_exec", mock.AsyncMock(return_value=proc)
        ):
            with self.assertRaises(AutomationScriptError) as ctx:
                await AutomationScriptEngine().run("bad")
        self.assertEqual(ctx.exception.diagnostic, "execution error: Not authorized (-1743)")
        self.assertTrue(ctx.exception.message.startswith("AppleScript error:"))

    async def test_missing_interpreter_is_script_error(self) -> None:
        engine = AutomationScriptEngine(interpreter="claunch-no-such-interpreter")
        with self.assertRaises(AutomationScriptError):
            await engine.run("return 1")

    @unittest.skipIf(shutil.which("cat") is None, "needs cat")
    async def test_real_interpreter_success(self) -> None:
        await AutomationScriptEngine(interpreter="cat").run("anything")

    @unittest.skipIf(shutil.which("false") is None, "needs false")
    async def test_real_interpreter_failure(self) -> None:
        with self.assertRaises(AutomationScriptError) as ctx:
            await AutomationScriptEngine(interpreter="false").run("anything")
        self.assertIn("exit code 1", ctx.exception.message)


if __name__ == "__main__":
    unittest.main()
