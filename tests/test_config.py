import os
import tempfile
import unittest

from lockwatch.config import OutputConfig, OutputFormat, load_config
from lockwatch.core.errors import ConfigError


class TestOutputConfig(unittest.TestCase):

    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmp.name, "audit.toml")

    def tearDown(self):
        self.tmp.cleanup()

    def write(self, content):
        with open(self.path, "w", encoding="utf-8") as f:
            f.write(content)

    def test_defaults(self):
        config = OutputConfig()

        self.assertIs(config.format, OutputFormat.HUMAN)
        self.assertFalse(config.is_quiet())
        self.assertIsNone(config.show_tree)

    def test_json_is_always_quiet(self):
        self.assertTrue(OutputConfig(format=OutputFormat.JSON).is_quiet())

    def test_missing_file_gives_defaults(self):
        self.assertEqual(load_config(self.path), OutputConfig())

    def test_load_output_table(self):
        self.write('[output]\nformat = "json"\nquiet = true\nshow_tree = false\ncolor = "never"\n')

        config = load_config(self.path)

        self.assertEqual(config, OutputConfig(OutputFormat.JSON, True, False, "never"))

    def test_unknown_format(self):
        self.write('[output]\nformat = "xml"\n')

        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_show_tree_must_be_bool(self):
        self.write('[output]\nshow_tree = "no"\n')

        with self.assertRaises(ConfigError):
            load_config(self.path)

    def test_merge_ignores_none(self):
        config = OutputConfig(show_tree=False).merge(quiet=True, show_tree=None, format=None)

        self.assertTrue(config.quiet)
        self.assertFalse(config.show_tree)
        self.assertIs(config.format, OutputFormat.HUMAN)
