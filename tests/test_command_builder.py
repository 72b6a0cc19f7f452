import unittest

from claunch.assistant.command import build_assistant_command, render_custom_command
from claunch.assistant.options import (
    ACCEPT_EDITS_TOOLS,
    BYPASS_PERMISSIONS_TOOLS,
    KNOWN_TOOLS,
    OptionSet,
    PermissionMode,
    preset_allowed_tools,
)
from claunch.errors import FailureKind, InvalidConfigurationError


class CommandBuilderTests(unittest.TestCase):
    def test_defaults_produce_bare_command(self) -> None:
        self.assertEqual(build_assistant_command(OptionSet()), "claude")

    def test_accept_edits_mode(self) -> None:
        options = OptionSet(permission_mode=PermissionMode.ACCEPT_EDITS)
        self.assertEqual(build_assistant_command(options), "claude --permission-mode acceptEdits")

    def test_skip_permissions_model_and_turns(self) -> None:
        options = OptionSet(skip_permissions=True, model="opus", max_turns=25)
        self.assertEqual(
            build_assistant_command(options),
            "claude --dangerously-skip-permissions --model opus --max-turns 25",
        )

    def test_flag_order_is_fixed(self) -> None:
        options = OptionSet(
            permission_mode=PermissionMode.PLAN,
            skip_permissions=True,
            allowed_tools=("Edit", "Write"),
            denied_tools=("Bash",),
            model="sonnet",
            continue_last_session=True,
            max_turns=3,
            verbose=True,
            additional_directories=("/a", "/b"),
        )
        self.assertEqual(
            build_assistant_command(options),
            "claude --permission-mode plan --dangerously-skip-permissions "
            "--allowedTools Edit,Write --disallowedTools Bash --model sonnet "
            '--continue --max-turns 3 --verbose --add-dir "/a" --add-dir "/b"',
        )

    def test_add_dir_is_escaped(self) -> None:
        options = OptionSet(additional_directories=('/tmp/my "notes"', "  ", "/tmp/$x"))
        self.assertEqual(
            build_assistant_command(options),
            'claude --add-dir "/tmp/my \\"notes\\"" --add-dir "/tmp/\\$x"',
        )

    def test_default_model_and_turns_are_omitted(self) -> None:
        options = OptionSet(model="default", max_turns=10)
        self.assertEqual(build_assistant_command(options), "claude")

    def test_override_path_replaces_program(self) -> None:
        options = OptionSet(verbose=True)
        self.assertEqual(
            build_assistant_command(options, True, "/opt/tools/claude"),
            "/opt/tools/claude --verbose",
        )
        self.assertEqual(
            build_assistant_command(options, True, "/opt/my tools/claude"),
            '"/opt/my tools/claude" --verbose',
        )

    def test_override_ignored_when_disabled_or_blank(self) -> None:
        self.assertEqual(build_assistant_command(OptionSet(), False, "/opt/claude"), "claude")
        self.assertEqual(build_assistant_command(OptionSet(), True, "   "), "claude")


class CustomTemplateTests(unittest.TestCase):
    def test_substitutes_first_occurrence_of_each_placeholder(self) -> None:
        rendered = render_custom_command(
            "kitty --directory {{cwd}} {{assistant}} # {{cwd}}", "/work", "claude --verbose"
        )
        self.assertEqual(rendered, "kitty --directory /work claude --verbose # {{cwd}}")

    def test_legacy_placeholder_name(self) -> None:
        self.assertEqual(render_custom_command("run {{claude}}", "/w", "claude"), "run claude")

    def test_values_are_not_rescanned(self) -> None:
        rendered = render_custom_command("{{cwd}} {{assistant}}", "/dir/{{assistant}}", "claude")
        self.assertEqual(rendered, "/dir/{{assistant}} claude")

    def test_blank_template_is_invalid(self) -> None:
        with self.assertRaises(InvalidConfigurationError) as ctx:
            render_custom_command("   ", "/w", "claude")
        self.assertEqual(ctx.exception.kind, FailureKind.INVALID_CONFIGURATION)


class OptionSetTests(unittest.TestCase):
    def test_from_mapping_normalises_values(self) -> None:
        options = OptionSet.from_mapping(
            {
                "permission_mode": "ACCEPTEDITS",
                "allowed_tools": "Edit, Write,",
                "max_turns": "nope",
                "model": "  ",
                "additional_directories": ["/a", ""],
            }
        )
        self.assertIs(options.permission_mode, PermissionMode.ACCEPT_EDITS)
        self.assertEqual(options.allowed_tools, ("Edit", "Write"))
        self.assertEqual(options.max_turns, 10)
        self.assertEqual(options.model, "default")
        self.assertEqual(options.additional_directories, ("/a",))

    def test_unknown_mode_falls_back_to_default(self) -> None:
        self.assertIs(
            OptionSet.from_mapping({"permission_mode": "yolo"}).permission_mode,
            PermissionMode.DEFAULT,
        )

    def test_mapping_round_trip(self) -> None:
        options = OptionSet(permission_mode=PermissionMode.PLAN, denied_tools=("Bash",), verbose=True)
        self.assertEqual(OptionSet.from_mapping(options.to_mapping()), options)

    def test_parse_rejects_unknown(self) -> None:
        with self.assertRaises(ValueError):
            PermissionMode.parse("sometimes")


class PresetTests(unittest.TestCase):
    def test_presets(self) -> None:
        self.assertEqual(preset_allowed_tools(PermissionMode.ACCEPT_EDITS), ACCEPT_EDITS_TOOLS)
        self.assertEqual(
            preset_allowed_tools(PermissionMode.BYPASS_PERMISSIONS), BYPASS_PERMISSIONS_TOOLS
        )
        self.assertEqual(preset_allowed_tools(PermissionMode.DEFAULT), ())
        self.assertEqual(preset_allowed_tools(PermissionMode.PLAN), ())
        self.assertIsNone(preset_allowed_tools(PermissionMode.CUSTOM))

    def test_presets_only_name_known_tools(self) -> None:
        known = {name for name, _ in KNOWN_TOOLS}
        self.assertEqual(len(known), 7)
        self.assertTrue(set(BYPASS_PERMISSIONS_TOOLS) <= known)
        self.assertTrue(set(ACCEPT_EDITS_TOOLS) <= known)


if __name__ == "__main__":
    unittest.main()
