import json
import os
import sys
import tempfile
import unittest
from io import StringIO
from pathlib import Path
from unittest import mock

from rich.console import Console

from claunch import __version__
from claunch.assistant.options import ACCEPT_EDITS_TOOLS, PermissionMode
from claunch.config import ClaunchPaths, ConfigManager


def _clean_env(home: str, **extra: str) -> dict:
    env = {key: value for key, value in os.environ.items() if not key.startswith("CLAUNCH_")}
    env["HOME"] = home
    env.update(extra)
    return env


class ConfigTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self._home = tempfile.TemporaryDirectory()
        self._root = tempfile.TemporaryDirectory()
        self.home = Path(self._home.name)
        self.root = Path(self._root.name)
        self.output = StringIO()
        self.console = Console(file=self.output, force_terminal=False, width=200)
        self.env = mock.patch.dict(os.environ, _clean_env(self._home.name), clear=True)
        self.env.start()

    def tearDown(self) -> None:
        self.env.stop()
        self._home.cleanup()
        self._root.cleanup()

    def manager(self) -> ConfigManager:
        return ConfigManager(ClaunchPaths(self.root), console=self.console)

    def write_project(self, data) -> None:
        config_dir = self.root / ".claunch"
        config_dir.mkdir(parents=True, exist_ok=True)
        text = data if isinstance(data, str) else json.dumps(data)
        (config_dir / "claunch.json").write_text(text, encoding="utf-8")


class BootstrapTests(ConfigTestCase):
    def test_global_config_created_with_defaults(self) -> None:
        self.manager()
        global_file = self.home / ".claunch" / "claunch.json"
        self.assertTrue(global_file.exists())
        data = json.loads(global_file.read_text(encoding="utf-8"))
        self.assertEqual(data["version"], __version__)
        self.assertEqual(data["terminal_delay_ms"], 1500)
        self.assertEqual(data["assistant"]["permission_mode"], "default")
        self.assertIn("Created default config", self.output.getvalue())

    def test_existing_global_config_is_kept(self) -> None:
        global_dir = self.home / ".claunch"
        global_dir.mkdir()
        (global_dir / "claunch.json").write_text('{"terminal_app": "iterm"}', encoding="utf-8")
        settings = self.manager().load_settings()
        self.assertEqual(settings.terminal_app, "iterm")
        self.assertEqual(self.output.getvalue(), "")


class LayeringTests(ConfigTestCase):
    def test_defaults(self) -> None:
        settings = self.manager().load_settings()
        expected_app = "terminal" if sys.platform == "darwin" else "direct"
        self.assertEqual(settings.terminal_app, expected_app)
        self.assertEqual(settings.terminal_delay, 1.5)
        self.assertEqual(settings.automation_timeout, 10.0)
        self.assertEqual(settings.command_timeout, 30.0)
        self.assertIsNone(settings.spawn_timeout)
        self.assertTrue(settings.check_application)
        self.assertFalse(settings.use_custom_assistant_path)
        self.assertEqual(settings.options.permission_mode, PermissionMode.DEFAULT)

    def test_project_overrides_global_and_env_overrides_project(self) -> None:
        manager = self.manager()
        self.write_project(
            {
                "terminal_app": "Warp",
                "terminal_delay_ms": 2000,
                "assistant": {"model": "opus", "max_turns": 25},
            }
        )
        settings = manager.load_settings()
        self.assertEqual(settings.terminal_app, "warp")
        self.assertEqual(settings.terminal_delay_ms, 2000)
        self.assertEqual(settings.options.model, "opus")
        self.assertEqual(settings.options.max_turns, 25)

        with mock.patch.dict(
            os.environ,
            {"CLAUNCH_TERMINAL_APP": "ghostty", "CLAUNCH_TERMINAL_DELAY_MS": "500"},
        ):
            settings = manager.load_settings()
        self.assertEqual(settings.terminal_app, "ghostty")
        self.assertEqual(settings.terminal_delay, 0.5)

    def test_assistant_path_env_enables_override(self) -> None:
        manager = self.manager()
        with mock.patch.dict(os.environ, {"CLAUNCH_ASSISTANT_PATH": "/opt/bin/claude"}):
            settings = manager.load_settings()
        self.assertEqual(settings.assistant_path, "/opt/bin/claude")
        self.assertTrue(settings.use_custom_assistant_path)

    def test_bad_json_falls_back_to_defaults(self) -> None:
        manager = self.manager()
        self.write_project("{not json")
        settings = manager.load_settings()
        self.assertEqual(settings.terminal_delay_ms, 1500)
        self.assertIn("Failed to parse JSON config", self.output.getvalue())

    def test_invalid_durations_are_normalised(self) -> None:
        manager = self.manager()
        self.write_project({"terminal_delay_ms": "soon", "automation_timeout_ms": -5})
        settings = manager.load_settings()
        self.assertEqual(settings.terminal_delay_ms, 1500)
        self.assertEqual(settings.automation_timeout_ms, 10000)
        self.assertIn("Ignoring terminal_delay_ms", self.output.getvalue())
        self.assertIn("Ignoring automation_timeout_ms", self.output.getvalue())

    def test_string_booleans(self) -> None:
        manager = self.manager()
        self.write_project({"always_open_vault_root": "yes", "check_application": "off"})
        settings = manager.load_settings()
        self.assertTrue(settings.always_open_vault_root)
        self.assertFalse(settings.check_application)


class ProjectFileTests(ConfigTestCase):
    def test_create_config_template_once(self) -> None:
        manager = self.manager()
        self.assertTrue(manager.create_config_template())
        self.assertFalse(manager.create_config_template())
        data = json.loads((self.root / ".claunch" / "claunch.json").read_text(encoding="utf-8"))
        self.assertEqual(data["assistant"], {"permission_mode": "default"})
        self.assertIn("terminal_app", data)

    def test_set_permission_mode_applies_preset(self) -> None:
        manager = self.manager()
        self.write_project({"assistant": {"denied_tools": ["Edit", "Bash"], "verbose": True}})
        options = manager.set_permission_mode(PermissionMode.ACCEPT_EDITS)

        self.assertEqual(options.permission_mode, PermissionMode.ACCEPT_EDITS)
        self.assertEqual(options.allowed_tools, ACCEPT_EDITS_TOOLS)
        self.assertEqual(options.denied_tools, ("Bash",))
        self.assertTrue(options.verbose)

    def test_custom_mode_keeps_tool_lists(self) -> None:
        manager = self.manager()
        self.write_project({"assistant": {"allowed_tools": ["Bash"]}})
        options = manager.set_permission_mode(PermissionMode.CUSTOM)
        self.assertEqual(options.permission_mode, PermissionMode.CUSTOM)
        self.assertEqual(options.allowed_tools, ("Bash",))


if __name__ == "__main__":
    unittest.main()
