import json
import os
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

from vc_changelog import cli
from vc_changelog.changelog.link_style import LinkStyle
from vc_changelog.changelog.renderer import ChangelogFormat
from vc_changelog.config.loader import ClogConfig
from vc_changelog.error import ClogError, ErrorKind
from vc_changelog.parsing.entry_model import RawCommit
from vc_changelog.vcs.git_client import GitClient, GitError


FEAT_HASH = "a" * 40
FIX_HASH = "b" * 40
CHORE_HASH = "c" * 40


class DummyGitClient:
    """Stand-in for GitClient that serves a fixed history."""

    def __init__(self, records=None, latest_tag=None, latest_version=None, fail=None):
        self.records = records if records is not None else [
            RawCommit(FEAT_HASH, "feat(cli): add --json flag\n\nCloses #12"),
            RawCommit(FIX_HASH, "fix: handle empty history"),
            RawCommit(CHORE_HASH, "chore: tidy"),
        ]
        self.latest_tag = latest_tag
        self.latest_version = latest_version
        self.fail = fail
        self.log_calls = []

    def get_log_records(self, from_ref=None, to_ref="HEAD"):
        self.log_calls.append((from_ref, to_ref))
        if self.fail:
            raise self.fail
        return list(self.records)

    def get_latest_tag(self):
        return self.latest_tag

    def get_latest_tag_version(self):
        return self.latest_version

    def get_last_commit(self):
        return "f" * 40

    def get_short_head(self):
        return "ffffffff"


class TestCliMain(unittest.TestCase):
    def setUp(self) -> None:
        self.runner = CliRunner()

    def invoke(self, args, client):
        with patch.object(cli, "GitClient", return_value=client) as factory:
            factory.find_repo_root.side_effect = GitClient.find_repo_root
            result = self.runner.invoke(cli.main, args)
        return result, factory

    def test_markdown_to_stdout(self) -> None:
        client = DummyGitClient()
        result, _ = self.invoke(
            ["--setversion", "1.0.0", "-r", "https://github.com/owner/proj.git"], client
        )
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertTrue(result.output.startswith('<a name="1.0.0"></a>\n## 1.0.0 ('))
        self.assertIn("#### Features", result.output)
        self.assertIn("#### Bug Fixes", result.output)
        self.assertIn(
            "* **cli:** add --json flag "
            f"([aaaaaaaa](https://github.com/owner/proj/commit/{FEAT_HASH}), "
            "closes [#12](https://github.com/owner/proj/issues/12))",
            result.output,
        )
        self.assertNotIn("tidy", result.output)
        self.assertEqual(client.log_calls, [(None, "HEAD")])

    def test_version_defaults_to_short_head(self) -> None:
        result, _ = self.invoke([], DummyGitClient())
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("## ffffffff", result.output)

    def test_json_format(self) -> None:
        result, _ = self.invoke(["--setversion", "2.0.0", "-T", "json", "-l", "none"], DummyGitClient())
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual(payload["version"], "2.0.0")
        self.assertEqual([s["title"] for s in payload["sections"]], ["Features", "Bug Fixes"])
        commit = payload["sections"][0]["components"][0]["commits"][0]
        self.assertEqual(commit["closes"], [12])
        self.assertIsNone(commit["commit_link"])

    def test_minor_bump_from_latest_tag(self) -> None:
        result, _ = self.invoke(["--minor"], DummyGitClient(latest_version="v1.2.3"))
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("## v1.3.0", result.output)

    def test_patch_bump_uses_patch_heading(self) -> None:
        result, _ = self.invoke(["-p"], DummyGitClient(latest_version="v1.2.3"))
        self.assertIn('<a name="v1.2.4"></a>\n### v1.2.4', result.output)

    def test_bump_without_tags_starts_at_initial_version(self) -> None:
        result, _ = self.invoke(["-M"], DummyGitClient())
        self.assertIn("## 1.0.0", result.output)

    def test_malformed_tag_is_reported_without_failure(self) -> None:
        result, _ = self.invoke(["--major"], DummyGitClient(latest_version="nightly"))
        self.assertEqual(result.exit_code, 0)
        self.assertIn("cannot parse semantic version from tag", result.output)

    def test_from_latest_tag(self) -> None:
        client = DummyGitClient(latest_tag="d" * 40)
        result, _ = self.invoke(["-F", "--setversion", "1.0.0"], client)
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(client.log_calls, [("d" * 40, "HEAD")])

    def test_unknown_link_style_stops_before_reading_history(self) -> None:
        client = DummyGitClient()
        result, factory = self.invoke(["-l", "sourceforge"], client)
        self.assertEqual(result.exit_code, 0)
        self.assertIn("unrecognized link-style field", result.output)
        factory.assert_not_called()
        self.assertEqual(client.log_calls, [])

    def test_git_failure_is_fatal(self) -> None:
        result, _ = self.invoke(["--setversion", "1.0.0"], DummyGitClient(fail=GitError("bad revision")))
        self.assertEqual(result.exit_code, 1)
        self.assertIn("error: unknown fatal error: git: bad revision", result.output)

    def test_git_dir_options_reach_client(self) -> None:
        result, factory = self.invoke(
            ["--setversion", "1.0.0", "-g", "/proj/.git", "-w", "/proj"], DummyGitClient()
        )
        self.assertEqual(result.exit_code, 0, result.output)
        factory.assert_called_once_with(work_tree=Path("/proj"), git_dir=Path("/proj/.git"))

    def test_repository_root_is_detected_from_subdirectory(self) -> None:
        with self.runner.isolated_filesystem():
            root = Path.cwd().resolve()
            (root / ".git").mkdir()
            (root / "docs").mkdir()
            os.chdir(root / "docs")
            result, factory = self.invoke(["--setversion", "1.0.0"], DummyGitClient())
            os.chdir(root)

        self.assertEqual(result.exit_code, 0, result.output)
        factory.assert_called_once_with(work_tree=root, git_dir=None)

    def test_changelog_file_is_prepended(self) -> None:
        with self.runner.isolated_filesystem():
            first, _ = self.invoke(["--setversion", "1.0.0", "-C", "CHANGELOG.md"], DummyGitClient())
            self.assertEqual(first.exit_code, 0, first.output)
            second, _ = self.invoke(
                ["--setversion", "1.1.0", "-C", "CHANGELOG.md"],
                DummyGitClient(records=[RawCommit("e" * 40, "perf: faster parse")]),
            )
            self.assertEqual(second.exit_code, 0, second.output)
            content = Path("CHANGELOG.md").read_text(encoding="utf-8")

        self.assertTrue(content.startswith('<a name="1.1.0"></a>'))
        self.assertIn("#### Performance", content)
        self.assertLess(content.index("1.1.0"), content.index('<a name="1.0.0"></a>'))
        self.assertIn("Wrote changelog for 1.1.0", second.output)

    def test_config_file_is_used(self) -> None:
        with self.runner.isolated_filesystem():
            Path(".clog.toml").write_text(
                '[clog]\nsubtitle = "Codename"\n\n[sections]\nHousekeeping = ["chore"]\n',
                encoding="utf-8",
            )
            result, _ = self.invoke(["--setversion", "1.0.0"], DummyGitClient())

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("## 1.0.0 Codename (", result.output)
        self.assertIn("#### Housekeeping", result.output)
        self.assertIn("* tidy", result.output)

    def test_invalid_config_is_fatal(self) -> None:
        with self.runner.isolated_filesystem():
            Path(".clog.toml").write_text("[clog\n", encoding="utf-8")
            result, factory = self.invoke([], DummyGitClient())

        self.assertEqual(result.exit_code, 1)
        self.assertIn("error: ", result.output)
        factory.assert_not_called()


class TestResolveWorkTree(unittest.TestCase):
    def test_explicit_settings_win(self) -> None:
        config = ClogConfig(git_work_tree=Path("/proj"))
        self.assertEqual(cli.resolve_work_tree(config), Path("/proj"))
        self.assertIsNone(cli.resolve_work_tree(ClogConfig(git_dir=Path("/proj/.git"))))

    def test_outside_a_repository(self) -> None:
        with patch.object(GitClient, "find_repo_root", return_value=None) as finder:
            self.assertIsNone(cli.resolve_work_tree(ClogConfig()))
        finder.assert_called_once_with(Path.cwd())

    def test_missing_current_directory(self) -> None:
        with patch.object(cli.Path, "cwd", side_effect=FileNotFoundError("gone")):
            with self.assertRaises(ClogError) as ctx:
                cli.resolve_work_tree(ClogConfig())
        self.assertEqual(ctx.exception.kind, ErrorKind.CURRENT_DIR)


class TestApplyOverrides(unittest.TestCase):
    def test_none_values_keep_config(self) -> None:
        config = ClogConfig(repository="https://example.com/r", subtitle="Title")
        self.assertEqual(cli.apply_overrides(config, repository=None, subtitle=None), config)

    def test_tokens_are_parsed(self) -> None:
        config = cli.apply_overrides(ClogConfig(), link_style="GitLab", output_format="JSON")
        self.assertIs(config.link_style, LinkStyle.GITLAB)
        self.assertIs(config.output_format, ChangelogFormat.JSON)

    def test_outfile_option_replaces_configured_changelog(self) -> None:
        config = cli.apply_overrides(ClogConfig(changelog="CHANGELOG.md"), outfile="out.md")
        self.assertIsNone(config.changelog)
        self.assertEqual(config.outfile, "out.md")

    def test_bad_format_raises(self) -> None:
        with self.assertRaises(ClogError) as ctx:
            cli.apply_overrides(ClogConfig(), output_format="html")
        self.assertEqual(ctx.exception.kind, ErrorKind.CONFIG_FORMAT)


if __name__ == "__main__":
    unittest.main()
