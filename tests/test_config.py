import shutil
import tempfile
import unittest
from pathlib import Path

from kaori_compiler.compiler.exceptions import ConfigError
from kaori_compiler.config import CompilerOptions, find_project_root, load_options


class TestConfig(unittest.TestCase):
    def setUp(self) -> None:
        self.test_dir = tempfile.mkdtemp()
        self.tmp_path = Path(self.test_dir).resolve()

    def tearDown(self) -> None:
        shutil.rmtree(self.test_dir)

    def write_pyproject(self, body: str) -> None:
        (self.tmp_path / "pyproject.toml").write_text(body, encoding="utf-8")

    def test_default_options(self) -> None:
        options = CompilerOptions()
        self.assertEqual(options.package_name, "kaori.js")
        self.assertEqual(options.package_match, "kaori")
        self.assertTrue(options.keep_inline_whitespace)
        self.assertTrue(options.source_maps)
        self.assertIsNone(options.typescript)

    def test_find_project_root_walks_up(self) -> None:
        nested = self.tmp_path / "src" / "components"
        nested.mkdir(parents=True)
        (self.tmp_path / "package.json").write_text("{}", encoding="utf-8")

        self.assertEqual(find_project_root(nested), self.tmp_path)

    def test_find_project_root_from_file(self) -> None:
        (self.tmp_path / ".git").mkdir()
        source = self.tmp_path / "app.jsx"
        source.write_text("", encoding="utf-8")

        self.assertEqual(find_project_root(source), self.tmp_path)

    def test_load_options_from_pyproject(self) -> None:
        self.write_pyproject(
            "[tool.kaori]\n"
            'package-name = "@acme/kaori"\n'
            "keep_inline_whitespace = false\n"
            "source-maps = false\n"
        )
        options = load_options(self.tmp_path)

        self.assertEqual(options.package_name, "@acme/kaori")
        self.assertFalse(options.keep_inline_whitespace)
        self.assertFalse(options.source_maps)
        self.assertEqual(options.package_match, "kaori")

    def test_missing_table_gives_defaults(self) -> None:
        self.write_pyproject('[project]\nname = "demo"\n')
        self.assertEqual(load_options(self.tmp_path), CompilerOptions())

    def test_unknown_key_is_rejected(self) -> None:
        self.write_pyproject("[tool.kaori]\nminify = true\n")
        with self.assertRaises(ConfigError) as ctx:
            load_options(self.tmp_path)
        self.assertIn("minify", str(ctx.exception))

    def test_wrong_type_is_rejected(self) -> None:
        self.write_pyproject('[tool.kaori]\nsource-maps = "yes"\n')
        with self.assertRaises(ConfigError) as ctx:
            load_options(self.tmp_path)
        self.assertIn("must be bool", str(ctx.exception))

    def test_invalid_toml(self) -> None:
        self.write_pyproject("[tool.kaori\n")
        with self.assertRaises(ConfigError):
            load_options(self.tmp_path)

    def test_merged_ignores_none(self) -> None:
        options = CompilerOptions(package_name="a").merged(package_name=None, source_maps=False)
        self.assertEqual(options.package_name, "a")
        self.assertFalse(options.source_maps)


if __name__ == "__main__":
    unittest.main()
