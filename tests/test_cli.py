"""Tests for the Click CLI interface.

These tests verify that:
1. CLI arguments are parsed correctly
2. Environment variables are used as fallbacks
3. Exit codes follow the release outcome
4. Help and version options work
"""

import json
import tempfile
import unittest
from importlib import import_module
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from sourcemap_release._release import ReleaseReport, ReleaseState
from sourcemap_release.cli.main import VERSION, build_config, cli, evaluate_boolean, load_build
from sourcemap_release.exceptions import ConfigurationError

# sourcemap_release.cli re-exports `main`, so import the module object to patch it.
cli_main_module = import_module("sourcemap_release.cli.main")

CLEAN_ENV = {
    "SENTRY_ORG": None,
    "SENTRY_PROJECT": None,
    "SENTRY_AUTH_TOKEN": None,
    "RELEASE_VERSION": None,
    "SENTRY_RELEASE": None,
    "STATS_FILE": None,
    "OUTPUT_DIR": None,
    "PUBLIC_PATH": None,
    "PUBLIC_PATH_MAP": None,
    "UPLOAD_ENABLED": None,
    "SENTRY_URL": None,
}

REQUIRED_ARGS = ["--org", "acme", "--project", "web", "--auth-token", "token", "--release", "v1"]


class TestCLIHelp(unittest.TestCase):
    """Test CLI help and version options."""

    def setUp(self):
        self.runner = CliRunner()

    def test_help_option(self):
        result = self.runner.invoke(cli, ["--help"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Upload build scripts and source maps", result.output)
        self.assertIn("--public-path-map", result.output)
        self.assertIn("--finalize-mode", result.output)

    def test_short_help_option(self):
        result = self.runner.invoke(cli, ["-h"])
        self.assertEqual(result.exit_code, 0)

    def test_version_option(self):
        result = self.runner.invoke(cli, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(VERSION, result.output)


class TestCLIExecution(unittest.TestCase):
    """Test CLI runs with the pipeline patched out."""

    def setUp(self):
        self.runner = CliRunner()
        self._tmp = tempfile.TemporaryDirectory()
        self.output_dir = Path(self._tmp.name)
        (self.output_dir / "app.js").write_text("console.log(1)", encoding="utf-8")
        (self.output_dir / "app.js.map").write_text("{}", encoding="utf-8")

    def tearDown(self):
        self._tmp.cleanup()

    @patch.object(cli_main_module, "run_pipeline")
    def test_success_exits_zero(self, mock_run):
        mock_run.return_value = ReleaseReport.success_result("v1", [])

        result = self.runner.invoke(
            cli,
            REQUIRED_ARGS + ["--output-dir", str(self.output_dir), "--public-path", "/static/"],
            env=CLEAN_ENV,
        )

        self.assertEqual(result.exit_code, 0, result.output)
        config, build = mock_run.call_args.args
        self.assertEqual(config.version, "v1")
        self.assertEqual(config.default_public_path, "/static/")
        self.assertEqual(build.chunks[0].files, ["app.js", "app.js.map"])

    @patch.object(cli_main_module, "run_pipeline")
    def test_failed_report_exits_one(self, mock_run):
        mock_run.return_value = ReleaseReport.failure_result(
            "v1", ReleaseState.ABORTED, "Failed to create release v1: [403]"
        )

        result = self.runner.invoke(cli, REQUIRED_ARGS + ["--output-dir", str(self.output_dir)], env=CLEAN_ENV)

        self.assertEqual(result.exit_code, 1)

    @patch.object(cli_main_module, "run_pipeline")
    def test_partial_report_exits_zero(self, mock_run):
        from sourcemap_release._release import Artifact, UploadOutcome

        outcome = UploadOutcome(Artifact("app.js", "/d/app.js"), "~/app.js", succeeded=False, error="[500]")
        mock_run.return_value = ReleaseReport.success_result("v1", [outcome])

        result = self.runner.invoke(cli, REQUIRED_ARGS + ["--output-dir", str(self.output_dir)], env=CLEAN_ENV)

        self.assertEqual(result.exit_code, 0, result.output)

    @patch.object(cli_main_module, "run_pipeline")
    def test_missing_required_value_exits_one(self, mock_run):
        result = self.runner.invoke(
            cli,
            ["--org", "acme", "--project", "web", "--auth-token", "token", "--output-dir", str(self.output_dir)],
            env=CLEAN_ENV,
        )

        self.assertEqual(result.exit_code, 1)
        mock_run.assert_not_called()

    @patch.object(cli_main_module, "run_pipeline")
    def test_missing_build_source_exits_one(self, mock_run):
        result = self.runner.invoke(cli, REQUIRED_ARGS, env=CLEAN_ENV)

        self.assertEqual(result.exit_code, 1)
        mock_run.assert_not_called()

    @patch.object(cli_main_module, "run_pipeline")
    def test_missing_stats_file_exits_one(self, mock_run):
        result = self.runner.invoke(
            cli, REQUIRED_ARGS + ["--stats-file", str(self.output_dir / "missing.json")], env=CLEAN_ENV
        )

        self.assertEqual(result.exit_code, 1)
        mock_run.assert_not_called()

    @patch.object(cli_main_module, "run_pipeline")
    def test_malformed_stats_chunks_exits_one(self, mock_run):
        stats_file = self.output_dir / "stats.json"
        stats_file.write_text(json.dumps({"outputPath": str(self.output_dir), "chunks": [1]}), encoding="utf-8")

        result = self.runner.invoke(cli, REQUIRED_ARGS + ["--stats-file", str(stats_file)], env=CLEAN_ENV)

        self.assertEqual(result.exit_code, 1)
        self.assertNotIsInstance(result.exception, AttributeError)
        mock_run.assert_not_called()

    @patch.object(cli_main_module, "run_pipeline")
    def test_invalid_public_path_map_exits_one(self, mock_run):
        result = self.runner.invoke(
            cli,
            REQUIRED_ARGS + ["--output-dir", str(self.output_dir), "--public-path-map", "{not json"],
            env=CLEAN_ENV,
        )

        self.assertEqual(result.exit_code, 1)
        mock_run.assert_not_called()

    @patch.object(cli_main_module, "run_pipeline")
    def test_disabled_skips_build_loading(self, mock_run):
        mock_run.return_value = ReleaseReport.skipped_result("v1")

        result = self.runner.invoke(cli, REQUIRED_ARGS + ["--disabled"], env=CLEAN_ENV)

        self.assertEqual(result.exit_code, 0, result.output)
        config, build = mock_run.call_args.args
        self.assertFalse(config.enabled)
        self.assertEqual(build.chunks, [])

    def test_disabled_makes_no_requests(self):
        with patch("sourcemap_release._release.client.requests.request") as mock_request:
            result = self.runner.invoke(cli, REQUIRED_ARGS + ["--disabled"], env=CLEAN_ENV)

        self.assertEqual(result.exit_code, 0, result.output)
        mock_request.assert_not_called()

    @patch.object(cli_main_module, "run_pipeline")
    def test_environment_fallbacks(self, mock_run):
        mock_run.return_value = ReleaseReport.success_result("v2", [])
        env = dict(CLEAN_ENV)
        env.update(
            {
                "SENTRY_ORG": "env-org",
                "SENTRY_PROJECT": "env-project",
                "SENTRY_AUTH_TOKEN": "env-token",
                "SENTRY_RELEASE": "v2",
                "OUTPUT_DIR": str(self.output_dir),
                "PUBLIC_PATH_MAP": json.dumps({"app.js": "/cdn/"}),
                "SENTRY_URL": "https://sentry.example.com/",
            }
        )

        result = self.runner.invoke(cli, [], env=env)

        self.assertEqual(result.exit_code, 0, result.output)
        config, _build = mock_run.call_args.args
        self.assertEqual(config.organization, "env-org")
        self.assertEqual(config.project, "env-project")
        self.assertEqual(config.auth_token, "env-token")
        self.assertEqual(config.version, "v2")
        self.assertEqual(dict(config.public_path_map), {"app.js": "/cdn/"})
        self.assertEqual(config.api_base_url, "https://sentry.example.com")

    @patch.object(cli_main_module, "run_pipeline")
    def test_cli_takes_precedence_over_env(self, mock_run):
        mock_run.return_value = ReleaseReport.success_result("cli-version", [])
        env = dict(CLEAN_ENV)
        env.update({"SENTRY_RELEASE": "env-version"})

        result = self.runner.invoke(
            cli,
            ["--org", "acme", "--project", "web", "--auth-token", "t", "--release", "cli-version"]
            + ["--output-dir", str(self.output_dir)],
            env=env,
        )

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(mock_run.call_args.args[0].version, "cli-version")

    def test_invalid_finalize_mode_is_usage_error(self):
        result = self.runner.invoke(cli, REQUIRED_ARGS + ["--finalize-mode", "ship"], env=CLEAN_ENV)
        self.assertEqual(result.exit_code, 2)


class TestBuildConfig(unittest.TestCase):
    """Tests for build_config and load_build."""

    def test_json_options(self):
        config = build_config(
            org="acme",
            project="web",
            auth_token="t",
            release="v1",
            public_path_map='{"vendor.js": "/cdn/"}',
            refs='[{"repository": "acme/web", "commit": "abc"}]',
            commits='[{"id": "abc"}]',
        )

        self.assertEqual(dict(config.public_path_map), {"vendor.js": "/cdn/"})
        self.assertEqual(config.refs, [{"repository": "acme/web", "commit": "abc"}])
        self.assertEqual(config.commits, [{"id": "abc"}])

    def test_json_option_wrong_type(self):
        with self.assertRaises(ConfigurationError) as ctx:
            build_config(org="acme", project="web", auth_token="t", release="v1", refs='{"a": 1}')
        self.assertIn("--refs", str(ctx.exception))

    def test_missing_values_raise(self):
        with self.assertRaises(ConfigurationError):
            build_config(org=None, project="web", auth_token="t", release="v1")

    def test_load_build_requires_source(self):
        with self.assertRaises(ConfigurationError):
            load_build(None, None, None)


class TestEvaluateBoolean(unittest.TestCase):
    def test_truthy_values(self):
        for value in ("true", "TRUE", "yes", "1", "on", " yeah "):
            with self.subTest(value=value):
                self.assertTrue(evaluate_boolean(value))

    def test_falsy_values(self):
        for value in ("false", "no", "0", "off", ""):
            with self.subTest(value=value):
                self.assertFalse(evaluate_boolean(value))


if __name__ == "__main__":
    unittest.main()
