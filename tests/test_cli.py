"""
Tests for CLI commands — generate, features, properties, and global options.
"""

import json
from pathlib import Path

from click.testing import CliRunner

from cloudgen.main import cli


def make_request(tmp_path: Path, *features: str, **options: str) -> Path:
    """Write a cloudgen.yml for testing."""
    lines = ["project: com.example.demo", "features:"]
    lines += [f"  - {name}" for name in features] or ["  []"]
    if options:
        lines.append("options:")
        lines += [f"  {key}: {value}" for key, value in options.items()]
    path = tmp_path / "cloudgen.yml"
    path.write_text("\n".join(lines) + "\n")
    return path


class TestCLIGlobal:
    """Tests for global CLI behavior."""

    def test_help(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "several clouds" in result.output

    def test_version(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output


class TestGenerateCommand:
    def test_generate(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch", "oci-tracing")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate"])
        assert result.exit_code == 0
        assert "Modules: lib, aws, oci" in result.output
        assert "[aws] application, logback, aws-cloudwatch" in result.output

    def test_generate_files(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate", "--files"])
        assert result.exit_code == 0
        assert "aws/build.gradle" in result.output

    def test_generate_platform_independent(self, tmp_path: Path):
        config = make_request(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate"])
        assert result.exit_code == 0
        assert "Single module" in result.output

    def test_generate_json(self, tmp_path: Path):
        config = make_request(tmp_path, "gcp-kafka")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["ok"] is True
        assert data["summary"]["module_names"] == ["lib", "gcp"]

    def test_generate_output(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        out = tmp_path / "out"
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate", "--output", str(out)])
        assert result.exit_code == 0
        assert (out / "aws" / "build.gradle").is_file()
        assert "Written to" in result.output

    def test_generate_unknown_feature(self, tmp_path: Path):
        config = make_request(tmp_path, "nope")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "generate"])
        assert result.exit_code == 1
        assert "Unknown feature" in result.output

    def test_generate_missing_config(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["generate"])
        assert result.exit_code == 1
        assert "No cloudgen.yml" in result.output

    def test_generate_missing_config_json(self, tmp_path: Path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        runner = CliRunner()
        result = runner.invoke(cli, ["generate", "--json"])
        assert result.exit_code == 1
        assert json.loads(result.output)["ok"] is False


class TestFeaturesCommand:
    def test_list(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["features"])
        assert result.exit_code == 0
        assert "aws-cloudwatch @aws" in result.output
        assert "gradle (default)" in result.output

    def test_json(self):
        runner = CliRunner()
        result = runner.invoke(cli, ["features", "--json"])
        assert result.exit_code == 0
        data = {f["name"]: f for f in json.loads(result.output)}
        assert data["oci-tracing"]["target"] == "OCI"
        assert data["jib"]["roles"] == ["build-plugin"]


class TestPropertiesCommand:
    def test_module_configuration(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "properties", "aws"])
        assert result.exit_code == 0
        assert "micronaut.metrics.enabled=true" in result.output

    def test_environment(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "properties", "aws", "--env", "test"])
        assert result.exit_code == 0
        assert result.output == "micronaut.metrics.export.cloudwatch.enabled=false\n"

    def test_yaml(self, tmp_path: Path):
        config = make_request(tmp_path, "oci-tracing", config_format="yaml")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "properties", "oci"])
        assert result.exit_code == 0
        assert "exporter: zipkin" in result.output

    def test_module_not_in_build(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "properties", "gcp"])
        assert result.exit_code == 1
        assert "not part of this build" in result.output

    def test_unknown_module(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "properties", "heroku"])
        assert result.exit_code == 1
        assert "Unknown target" in result.output

    def test_unknown_environment(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--config", str(config), "properties", "aws", "--env", "prod"])
        assert result.exit_code == 1
        assert "No 'prod' configuration" in result.output


class TestLogging:
    def test_debug_flag(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        runner = CliRunner()
        result = runner.invoke(cli, ["--debug", "--config", str(config), "features"])
        assert result.exit_code == 0

    def test_log_file_from_env(self, tmp_path: Path):
        config = make_request(tmp_path, "aws-cloudwatch")
        log_file = tmp_path / "cloudgen.log"
        runner = CliRunner(env={"CLOUDGEN_LOG_FILE": str(log_file), "CLOUDGEN_LOG_FILE_LEVEL": "INFO"})
        result = runner.invoke(cli, ["--config", str(config), "generate"])
        assert result.exit_code == 0
        assert "Generated" in log_file.read_text()

    def test_setup_logging_levels(self):
        import logging

        from cloudgen.core.observability.logging_config import _parse_level, setup_logging

        assert _parse_level("debug") == logging.DEBUG
        assert _parse_level("nonsense") == logging.WARNING
        assert _parse_level(None) == logging.WARNING

        setup_logging("ERROR")
        assert logging.getLogger().level == logging.ERROR
        setup_logging("WARNING")

    def test_placement_loggers_held_back_when_verbose(self):
        import logging

        from cloudgen.core.observability.logging_config import PLACEMENT_LOGGERS, setup_logging

        setup_logging("INFO")
        assert all(logging.getLogger(name).level == logging.INFO for name in PLACEMENT_LOGGERS)
        assert logging.getLogger("cloudgen.core.generator.context").getEffectiveLevel() == logging.INFO

        setup_logging("DEBUG")
        assert all(logging.getLogger(name).level == logging.NOTSET for name in PLACEMENT_LOGGERS)
        assert logging.getLogger("cloudgen.core.generator.router").getEffectiveLevel() == logging.DEBUG
        setup_logging("WARNING")

    def test_short_logger_names(self):
        import logging

        from cloudgen.core.observability.logging_config import _ShortNameFormatter

        record = logging.LogRecord(
            "cloudgen.core.generator.context", logging.INFO, __file__, 1,
            "Applying %d features", (3,), None,
        )
        formatter = _ShortNameFormatter("%(short_name)s: %(message)s")
        assert formatter.format(record) == "generator.context: Applying 3 features"
