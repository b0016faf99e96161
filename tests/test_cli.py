"""
Tests for the tagbuild command line.
"""

import json
import tarfile
import zipfile

import pytest
from click.testing import CliRunner

from tagbuild.cli import cli
from tagbuild.exit_codes import ARCHIVE_ERROR, NO_VERSION_TAG, NOT_AT_TAG, SUCCESS


@pytest.fixture
def runner(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("TAGBUILD_CONFIG", raising=False)
    return CliRunner()


class TestVersionCommand:

    def test_at_tag(self, runner, tagged_repo):
        result = runner.invoke(cli, ['version'])
        assert result.exit_code == SUCCESS
        assert result.output.strip() == "1.2.3"

    def test_past_tag(self, runner, tagged_repo):
        tagged_repo.commit()
        tagged_repo.commit()
        result = runner.invoke(cli, ['version'])
        assert result.exit_code == SUCCESS
        assert result.output.strip() == "1.2.4-alpha.4.devel.2"

    def test_no_tags(self, runner, git_repo):
        git_repo.commit()
        result = runner.invoke(cli, ['version'])
        assert result.exit_code == NO_VERSION_TAG
        assert "no semver tags found" in result.output


class TestDescribeCommand:

    def test_json(self, runner, tagged_repo):
        result = runner.invoke(cli, ['describe', '--json'])
        assert result.exit_code == SUCCESS
        data = json.loads(result.output)
        assert data['tag']['name'] == "v1.2.3"
        assert data['distance'] == 0
        assert data['clean'] is True
        assert data['ref']['commit'] == tagged_repo.head()

    def test_panel(self, runner, tagged_repo):
        tagged_repo.commit()
        result = runner.invoke(cli, ['describe'])
        assert result.exit_code == SUCCESS
        assert "v1.2.3" in result.output
        assert "+1 commits" in result.output


class TestArchiveCommand:

    def test_default_tgz(self, runner, tagged_repo):
        result = runner.invoke(cli, ['archive'])
        assert result.exit_code == SUCCESS, result.output

        output = tagged_repo.path / "project-1.2.3.tar.gz"
        with tarfile.open(output, "r:gz") as tar:
            names = tar.getnames()
        assert "project-1.2.3/README.md" in names
        assert "project-1.2.3/src/util/helpers.py" in names

    def test_zip_with_prefix_output_and_extra(self, runner, tagged_repo, tmp_path):
        tagged_repo.write("dist/VERSION", "1.2.3\n")
        output = tmp_path / "out.zip"
        result = runner.invoke(cli, ['archive', '-f', 'zip', '-p', 'src-pkg', '-o', str(output), 'dist/VERSION'])
        assert result.exit_code == SUCCESS, result.output

        with zipfile.ZipFile(output) as zf:
            names = zf.namelist()
        assert names[0] == "src-pkg/README.md"
        assert names[-1] == "src-pkg/dist/VERSION"

    def test_head_past_tag(self, runner, tagged_repo):
        for _ in range(3):
            tagged_repo.commit()
        result = runner.invoke(cli, ['archive', '-o', 'out.tar.gz'])
        assert result.exit_code == NOT_AT_TAG
        assert "must also be HEAD" in result.output
        assert not (tagged_repo.path / "out.tar.gz").exists()

    def test_failed_entry_removes_output(self, runner, tagged_repo):
        result = runner.invoke(cli, ['archive', '-o', 'out.tar.gz', 'does-not-exist.txt'])
        assert result.exit_code != SUCCESS
        assert "does-not-exist.txt" in result.output
        assert not (tagged_repo.path / "out.tar.gz").exists()

    def test_unopenable_output_is_left_alone(self, runner, tagged_repo, monkeypatch):
        existing = tagged_repo.path / "out.tar.gz"
        existing.write_bytes(b"keep me")

        def refuse(*args, **kwargs):
            raise PermissionError(13, "Permission denied", args[0])

        monkeypatch.setattr("tagbuild.commands.archive.open", refuse, raising=False)
        result = runner.invoke(cli, ['archive', '-o', 'out.tar.gz'])
        assert result.exit_code == ARCHIVE_ERROR
        assert "Permission" in result.output
        assert existing.read_bytes() == b"keep me"


class TestOtherCommands:

    def test_ls_tree(self, runner, tagged_repo):
        result = runner.invoke(cli, ['ls-tree'])
        assert result.exit_code == SUCCESS
        assert result.output.splitlines() == [
            "README.md", "src", "src/main.py", "src/util", "src/util/helpers.py",
        ]

    def test_ls_tree_json_without_tag(self, runner, git_repo):
        git_repo.commit()
        result = runner.invoke(cli, ['ls-tree', '--json'])
        assert result.exit_code == SUCCESS
        assert json.loads(result.output)['status'] == "no_tag"

    def test_package_name(self, runner, tagged_repo):
        result = runner.invoke(cli, ['package-name', '-f', 'rpm', '-a', 'arm64', '-n', 'tool'])
        assert result.exit_code == SUCCESS
        assert result.output.strip() == "tool-1.2.3-1.aarch64.rpm"

    def test_package_name_defaults_to_repository_name(self, runner, tagged_repo):
        result = runner.invoke(cli, ['package-name'])
        assert result.exit_code == SUCCESS
        assert result.output.strip() == "project_1.2.3-1_amd64.deb"

    def test_config_show_reads_local_file(self, runner, tagged_repo):
        tagged_repo.write(".tagbuild.yaml", "package:\n  release: '3'\n")
        result = runner.invoke(cli, ['config', 'show'])
        assert result.exit_code == SUCCESS
        assert json.loads(result.output)['package']['release'] == "3"
