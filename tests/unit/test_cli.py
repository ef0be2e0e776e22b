"""
Tests for the Good4Work Command Line Interface

Commands are driven through click's CliRunner with storage and web3
collaborators patched out.
"""

import json
import logging

import pytest
from click.testing import CliRunner
from unittest.mock import patch

from cli.main import cli
from nft.hashing import compute_metadata_hash
from nft.ipfs import UploadResult
from nft.metadata import generate_metadata
from nft.minting import MintResult

CREDENTIALS = {
    'API_KEY': 'cli-key',
    'API_SECRET': 'cli-secret',
    'STORAGE_TOKEN': None,
    'PINATA_API_KEY': None,
    'PINATA_SECRET_KEY': None,
    'WEB3_STORAGE_TOKEN': None,
}

NO_CREDENTIALS = {name: None for name in CREDENTIALS}

CONTRACT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
RECIPIENT = "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"


@pytest.fixture(autouse=True)
def isolated_cli(tmp_path, monkeypatch):
    """Run each command in an empty directory with the root logger restored afterwards."""
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level

    with patch('cli.config.CONFIG_SEARCH_PATHS', []):
        yield tmp_path

    root.handlers = handlers
    root.setLevel(level)


@pytest.fixture
def runner():
    return CliRunner()


def write_json(path, data):
    path.write_text(json.dumps(data))
    return path


class TestGlobalOptions:
    """Test group level options."""

    def test_version(self, runner):
        result = runner.invoke(cli, ['--version'])

        assert result.exit_code == 0
        assert "1.0.0" in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(cli, ['--help'])

        assert result.exit_code == 0
        for command in ('config', 'metadata', 'mint', 'upload'):
            assert command in result.output

    def test_missing_config_file(self, runner):
        result = runner.invoke(cli, ['-c', 'absent.yml', 'config', 'show'])

        assert result.exit_code == 1
        assert "Config file not found" in result.output


class TestMetadataCommands:
    """Test metadata create, hash and validate."""

    def test_create_prints_document_and_hash(self, runner):
        result = runner.invoke(cli, [
            '-o', 'json', 'metadata', 'create',
            '-n', 'Cert1', '-d', 'Completed task', '-i', 'ipfs://bafyTEST'
        ])

        assert result.exit_code == 0, result.output
        output = json.loads(result.output)
        expected = generate_metadata("Cert1", "Completed task", "ipfs://bafyTEST", attributes=[])
        assert output["metadata"] == expected
        assert output["hash"] == compute_metadata_hash(expected)

    def test_create_with_attributes_and_out_file(self, runner, isolated_cli):
        result = runner.invoke(cli, [
            '-o', 'json', 'metadata', 'create',
            '-n', 'Cert1', '-d', 'Completed task', '-i', 'ipfs://bafyTEST',
            '-a', 'Type=Gold', '-a', 'Level=3', '--out', 'cert1.json'
        ])

        assert result.exit_code == 0, result.output
        saved = json.loads((isolated_cli / 'cert1.json').read_text())
        assert saved["attributes"] == [
            {"trait_type": "Type", "value": "Gold"},
            {"trait_type": "Level", "value": "3"},
        ]
        assert json.loads(result.output)["hash"] == compute_metadata_hash(saved)

    def test_create_invalid_image(self, runner):
        result = runner.invoke(cli, [
            'metadata', 'create', '-n', 'Cert1', '-d', 'Completed task', '-i', 'ftp://x'
        ])

        assert result.exit_code == 1
        assert "Error: Image must be" in result.output

    def test_create_malformed_attribute(self, runner):
        result = runner.invoke(cli, [
            'metadata', 'create', '-n', 'Cert1', '-d', 'Completed task',
            '-i', 'ipfs://bafyTEST', '-a', 'no-separator'
        ])

        assert result.exit_code == 2
        assert "TRAIT=VALUE" in result.output

    def test_hash(self, runner, isolated_cli, metadata_fields):
        document = generate_metadata(**metadata_fields)
        write_json(isolated_cli / 'doc.json', document)

        result = runner.invoke(cli, ['-o', 'json', 'metadata', 'hash', 'doc.json'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["hash"] == compute_metadata_hash(document)

    def test_hash_invalid_json(self, runner, isolated_cli):
        (isolated_cli / 'doc.json').write_text("{broken")

        result = runner.invoke(cli, ['metadata', 'hash', 'doc.json'])
        assert result.exit_code == 1
        assert "invalid JSON" in result.output

    def test_validate_valid(self, runner, isolated_cli, metadata_fields):
        write_json(isolated_cli / 'doc.json', generate_metadata(**metadata_fields))

        result = runner.invoke(cli, ['-o', 'json', 'metadata', 'validate', 'doc.json'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["valid"] is True

    def test_validate_invalid(self, runner, isolated_cli):
        write_json(isolated_cli / 'doc.json', {"name": "Cert1"})

        result = runner.invoke(cli, ['-o', 'json', 'metadata', 'validate', 'doc.json'])

        assert result.exit_code == 1
        assert "is not valid erc721 metadata" in result.output

    def test_validate_protected_schema(self, runner, isolated_cli, metadata_fields):
        write_json(isolated_cli / 'doc.json', generate_metadata(**metadata_fields))

        result = runner.invoke(cli, ['metadata', 'validate', 'doc.json', '--schema', 'protected'])
        assert result.exit_code == 1


class TestUploadCommand:
    """Test the upload command."""

    @patch('cli.commands.upload.UploadOrchestrator')
    def test_upload_success(self, mock_orchestrator, runner, isolated_cli):
        (isolated_cli / 'cert.png').write_bytes(b"\x89PNG")
        mock_orchestrator.return_value.upload_content.return_value = UploadResult.ok("bafyIMG")

        result = runner.invoke(cli, ['-o', 'json', 'upload', 'cert.png'], env=CREDENTIALS)

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {
            "success": True, "contentId": "bafyIMG", "uri": "ipfs://bafyIMG"
        }
        config = mock_orchestrator.call_args[0][0]
        assert config.api_key == 'cli-key'
        mock_orchestrator.return_value.upload_content.assert_called_once_with(
            b"\x89PNG", "cert.png", "pinata"
        )

    @patch('cli.commands.upload.UploadOrchestrator')
    def test_upload_service_and_name(self, mock_orchestrator, runner, isolated_cli):
        (isolated_cli / 'cert.png').write_bytes(b"\x89PNG")
        mock_orchestrator.return_value.upload_content.return_value = UploadResult.ok("bafyIMG")
        env = dict(CREDENTIALS, STORAGE_TOKEN='cli-token')

        result = runner.invoke(cli, [
            'upload', 'cert.png', '--service', 'web3.storage', '--name', 'renamed.png'
        ], env=env)

        assert result.exit_code == 0, result.output
        mock_orchestrator.return_value.upload_content.assert_called_once_with(
            b"\x89PNG", "renamed.png", "web3.storage"
        )

    @patch('cli.commands.upload.UploadOrchestrator')
    def test_upload_failure_exits_nonzero(self, mock_orchestrator, runner, isolated_cli):
        (isolated_cli / 'cert.png').write_bytes(b"\x89PNG")
        mock_orchestrator.return_value.upload_content.return_value = UploadResult.failed("quota exceeded")

        result = runner.invoke(cli, ['upload', 'cert.png'], env=CREDENTIALS)

        assert result.exit_code == 1
        assert "Upload failed: quota exceeded" in result.output

    def test_upload_without_credentials(self, runner, isolated_cli):
        (isolated_cli / 'cert.png').write_bytes(b"\x89PNG")

        result = runner.invoke(cli, ['upload', 'cert.png'], env=NO_CREDENTIALS)

        assert result.exit_code == 1
        assert "No IPFS service credentials found" in result.output

    def test_upload_missing_file(self, runner):
        result = runner.invoke(cli, ['upload', 'absent.png'], env=CREDENTIALS)
        assert result.exit_code == 2


class TestMintCommand:
    """Test the end-to-end mint command."""

    @pytest.fixture
    def mint_args(self, isolated_cli):
        (isolated_cli / 'cert.png').write_bytes(b"\x89PNG")
        write_json(isolated_cli / 'abi.json', {"abi": []})
        return [
            'mint', '-i', 'cert.png', '-n', 'Cert One', '-d', 'Completed task',
            '-r', RECIPIENT, '--contract', CONTRACT, '--rpc', 'http://127.0.0.1:8545',
            '--private-key', '0x' + '11' * 32, '--abi', 'abi.json'
        ]

    @patch('cli.commands.mint.NFTMinter')
    @patch('cli.commands.mint.UploadOrchestrator')
    def test_mint_flow(self, mock_orchestrator, mock_minter, runner, mint_args):
        upload_content = mock_orchestrator.return_value.upload_content
        upload_content.side_effect = [UploadResult.ok("bafyIMG"), UploadResult.ok("bafyMETA")]
        mock_minter.return_value.mint.return_value = MintResult("0xfeed", 42, 7)

        result = runner.invoke(cli, mint_args, env=CREDENTIALS)

        assert result.exit_code == 0, result.output
        image_call, metadata_call = upload_content.call_args_list
        assert image_call[0] == (b"\x89PNG", "cert.png", "pinata")

        document, file_name, _ = metadata_call[0]
        assert file_name == "Cert_One_metadata.json"
        assert document["image"] == "ipfs://bafyIMG"
        assert document["attributes"][0] == {"trait_type": "Type", "value": "Good4Work Certificate"}
        assert document["attributes"][1]["trait_type"] == "Created"

        mock_minter.assert_called_once_with(
            'http://127.0.0.1:8545', '0x' + '11' * 32, CONTRACT, []
        )
        mock_minter.return_value.mint.assert_called_once_with(
            RECIPIENT, "ipfs://bafyMETA", timeout=120
        )
        assert compute_metadata_hash(document) in result.output
        assert "0xfeed" in result.output

    @patch('cli.commands.mint.NFTMinter')
    @patch('cli.commands.mint.UploadOrchestrator')
    def test_image_upload_failure(self, mock_orchestrator, mock_minter, runner, mint_args):
        mock_orchestrator.return_value.upload_content.return_value = UploadResult.failed("503")

        result = runner.invoke(cli, mint_args, env=CREDENTIALS)

        assert result.exit_code == 1
        assert "Failed to upload image: 503" in result.output
        mock_minter.assert_not_called()

    @patch('cli.commands.mint.NFTMinter')
    @patch('cli.commands.mint.UploadOrchestrator')
    def test_metadata_upload_failure(self, mock_orchestrator, mock_minter, runner, mint_args):
        mock_orchestrator.return_value.upload_content.side_effect = [
            UploadResult.ok("bafyIMG"), UploadResult.failed("timed out")
        ]

        result = runner.invoke(cli, mint_args, env=CREDENTIALS)

        assert result.exit_code == 1
        assert "Failed to upload metadata: timed out" in result.output
        mock_minter.assert_not_called()

    def test_missing_abi(self, runner, mint_args):
        mint_args[-1] = 'absent.json'

        result = runner.invoke(cli, mint_args, env=CREDENTIALS)

        assert result.exit_code == 1
        assert "Contract ABI not found" in result.output

    @patch('cli.commands.mint.NFTMinter')
    @patch('cli.commands.mint.UploadOrchestrator')
    def test_invalid_recipient(self, mock_orchestrator, mock_minter, runner, mint_args):
        mint_args[mint_args.index(RECIPIENT)] = '0x1234'

        result = runner.invoke(cli, mint_args, env=CREDENTIALS)

        assert result.exit_code == 2
        mock_orchestrator.return_value.upload_content.assert_not_called()


class TestConfigCommands:
    """Test configuration inspection commands."""

    def test_show_masks_credentials(self, runner):
        result = runner.invoke(cli, ['-o', 'json', 'config', 'show'], env=CREDENTIALS)

        assert result.exit_code == 0, result.output
        shown = json.loads(result.output)
        assert shown["storage"]["api_key"] == "***"
        assert "cli-secret" not in result.output

    def test_show_key(self, runner):
        result = runner.invoke(cli, ['-o', 'json', 'config', 'show', '--key', 'storage.timeout'],
                               env={'G4W_STORAGE__TIMEOUT': '30'})

        assert result.exit_code == 0, result.output
        assert json.loads(result.output) == {"storage.timeout": 30}

    def test_show_unknown_key(self, runner):
        result = runner.invoke(cli, ['config', 'show', '--key', 'storage.nope'])

        assert result.exit_code == 1
        assert "Configuration key not found" in result.output

    def test_show_sources_with_profile(self, runner):
        result = runner.invoke(cli, ['-o', 'json', '-p', 'production', 'config', 'show', '--sources'],
                               env=NO_CREDENTIALS)

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)[:2] == ["defaults", "profile:production"]

    def test_list_profiles(self, runner):
        result = runner.invoke(cli, ['-o', 'json', 'config', 'list-profiles'])

        assert result.exit_code == 0, result.output
        profiles = {row["profile"]: row["overrides"] for row in json.loads(result.output)}
        assert "storage.max_attempts=3" in profiles["production"]

    def test_search_paths(self, runner):
        result = runner.invoke(cli, ['-o', 'json', 'config', 'search-paths'])

        assert result.exit_code == 0, result.output
        assert json.loads(result.output)["env_prefix"] == "G4W_"
