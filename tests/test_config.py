"""Tests for ReleaseConfig validation."""

import unittest

from sourcemap_release._release import DEFAULT_API_BASE_URL, ReleaseConfig
from sourcemap_release.exceptions import ConfigurationError


def _values(**overrides):
    values = dict(organization="acme", project="web", auth_token="token", version="v1")
    values.update(overrides)
    return values


class TestReleaseConfig(unittest.TestCase):
    """Tests for ReleaseConfig."""

    def test_defaults(self):
        config = ReleaseConfig(**_values())

        self.assertTrue(config.enabled)
        self.assertEqual(config.retries, 5)
        self.assertEqual(config.retry_delay, 1.0)
        self.assertEqual(config.timeout, 60.0)
        self.assertIsNone(config.max_concurrency)
        self.assertIsNone(config.default_public_path)
        self.assertEqual(config.finalize_mode, "release")
        self.assertEqual(config.api_base_url, DEFAULT_API_BASE_URL)
        self.assertEqual(dict(config.public_path_map), {})

    def test_required_fields(self):
        for field_name in ("organization", "project", "auth_token", "version"):
            with self.subTest(field=field_name):
                with self.assertRaises(ConfigurationError) as ctx:
                    ReleaseConfig(**_values(**{field_name: ""}))
                self.assertIn(field_name, str(ctx.exception))

    def test_whitespace_is_not_a_value(self):
        with self.assertRaises(ConfigurationError):
            ReleaseConfig(**_values(version="   "))

    def test_invalid_numbers(self):
        cases = [
            {"retries": -1},
            {"retry_delay": -0.5},
            {"timeout": 0},
            {"max_concurrency": 0},
        ]
        for overrides in cases:
            with self.subTest(**overrides):
                with self.assertRaises(ConfigurationError):
                    ReleaseConfig(**_values(**overrides))

    def test_invalid_finalize_mode(self):
        with self.assertRaises(ConfigurationError) as ctx:
            ReleaseConfig(**_values(finalize_mode="ship-it"))
        self.assertIn("finalize_mode", str(ctx.exception))

    def test_deploy_finalize_mode(self):
        self.assertEqual(ReleaseConfig(**_values(finalize_mode="deploy")).finalize_mode, "deploy")

    def test_invalid_api_url(self):
        for url in ("sentry.io", "ftp://sentry.io", "https://"):
            with self.subTest(url=url):
                with self.assertRaises(ConfigurationError):
                    ReleaseConfig(**_values(api_base_url=url))

    def test_api_url_trailing_slash_removed(self):
        config = ReleaseConfig(**_values(api_base_url="https://sentry.example.com/"))
        self.assertEqual(config.api_base_url, "https://sentry.example.com")

    def test_public_path_map_is_read_only_copy(self):
        source = {"vendor.js": "/cdn/"}
        config = ReleaseConfig(**_values(public_path_map=source))
        source["app.js"] = "/other/"

        self.assertEqual(dict(config.public_path_map), {"vendor.js": "/cdn/"})
        with self.assertRaises(TypeError):
            config.public_path_map["app.js"] = "/x/"  # type: ignore[index]

    def test_public_path_map_values_must_be_strings(self):
        with self.assertRaises(ConfigurationError):
            ReleaseConfig(**_values(public_path_map={"vendor.js": 3}))

    def test_config_is_frozen(self):
        config = ReleaseConfig(**_values())
        with self.assertRaises(AttributeError):
            config.version = "v2"  # type: ignore[misc]

    def test_release_metadata(self):
        refs = [{"repository": "acme/web", "commit": "abc"}]
        config = ReleaseConfig(**_values(ref="abc", refs=refs, commits=None))

        self.assertEqual(config.release_metadata, {"ref": "abc", "refs": refs})
        self.assertEqual(ReleaseConfig(**_values()).release_metadata, {})


if __name__ == "__main__":
    unittest.main()
