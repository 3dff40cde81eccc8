"""Tests for the svcrulesd command-line interface."""

import json
import logging
from pathlib import Path

import pytest

import svcrulesd


@pytest.fixture
def config_file(tmp_path: Path) -> Path:
    """Config file keeping logs inside the test directory."""
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"config_dir": str(tmp_path), "logs_dir": "logs"}))
    return path


@pytest.fixture
def instances_file(tmp_path: Path, make_instance) -> Path:
    """Instance document with one redis and one postgres instance."""
    path = tmp_path / "instances.json"
    instances = [
        make_instance(image="redis:6", names=["/cache"], container_id="1"),
        make_instance(image="postgres:13", names=["/db"], container_id="2"),
    ]
    path.write_text(json.dumps({"instances": [i.to_dict() for i in instances]}))
    return path


class TestArgumentParser:
    """Tests for argument parsing."""

    def test_classify_rules_repeatable(self) -> None:
        """Test --rules collects files in order."""
        parser = svcrulesd.create_argument_parser()
        args = parser.parse_args(["classify", "in.json", "-r", "a.json", "--rules", "b.json"])

        assert args.command == "classify"
        assert args.instances == Path("in.json")
        assert args.rules == ["a.json", "b.json"]

    def test_log_levels(self) -> None:
        """Test verbosity maps to log levels."""
        assert svcrulesd.get_log_level(0) == logging.WARNING
        assert svcrulesd.get_log_level(1) == logging.INFO
        assert svcrulesd.get_log_level(2) == logging.DEBUG


class TestClassifyCommand:
    """Tests for the classify command."""

    def test_text_output(self, config_file, instances_file, redis_rules, capsys) -> None:
        """Test matched instances are listed with their type."""
        code = svcrulesd.main(
            ["--config", str(config_file), "-q", "classify", str(instances_file), "-r", str(redis_rules)]
        )

        out = capsys.readouterr().out
        assert code == 0
        assert "Matched 1 of 2 instances" in out
        assert "/cache (redis:6) -> redis [redis: Redis]" in out
        assert "/db" not in out

    def test_json_output_file(self, config_file, instances_file, redis_rules, tmp_path) -> None:
        """Test JSON results written to a file."""
        output = tmp_path / "out.json"

        code = svcrulesd.main(
            [
                "--config", str(config_file), "-q",
                "classify", str(instances_file),
                "-r", str(redis_rules), "--json", "-o", str(output),
            ]
        )

        data = json.loads(output.read_text())
        assert code == 0
        assert data["total_instances"] == 2
        assert data["matched"] == 1
        assert data["services"][0]["service"]["type"] == "redis"
        assert data["services"][0]["matched_by"] == {"source": "redis", "ruleset": "Redis"}

    def test_rules_from_config(self, tmp_path, instances_file, redis_rules, capsys) -> None:
        """Test rule files come from the config when --rules is absent."""
        config_path = tmp_path / "with-rules.json"
        config_path.write_text(
            json.dumps({"config_dir": str(tmp_path), "servicesfiles": [str(redis_rules)]})
        )

        code = svcrulesd.main(["--config", str(config_path), "-q", "classify", str(instances_file)])

        assert code == 0
        assert "Matched 1 of 2 instances" in capsys.readouterr().out

    def test_null_fields_in_instances(self, config_file, redis_rules, tmp_path, capsys) -> None:
        """Test null labels and names in the instance file are tolerated."""
        instances = tmp_path / "nulls.json"
        instances.write_text(
            json.dumps(
                [
                    {
                        "container": {"id": "1", "image": "redis:6", "names": None, "labels": None},
                        "port": {"type": "TCP", "private_port": 6379, "labels": None},
                    }
                ]
            )
        )

        code = svcrulesd.main(
            ["--config", str(config_file), "-q", "classify", str(instances), "-r", str(redis_rules)]
        )

        assert code == 0
        assert "1 (redis:6) -> redis [redis: Redis]" in capsys.readouterr().out

    def test_logs_follow_config_dir(self, tmp_path, instances_file, redis_rules) -> None:
        """Test log files land under config_dir when logs_dir is not set."""
        config_path = tmp_path / "only-dir.json"
        config_path.write_text(json.dumps({"config_dir": str(tmp_path / "home")}))

        code = svcrulesd.main(
            ["--config", str(config_path), "-q", "classify", str(instances_file), "-r", str(redis_rules)]
        )

        assert code == 0
        assert (tmp_path / "home" / "logs" / "main.log").exists()
        assert (tmp_path / "home" / "logs" / "classify.log").exists()

    def test_no_rules_fails(self, config_file, instances_file) -> None:
        """Test classifying without any rule file exits with an error."""
        assert svcrulesd.main(["--config", str(config_file), "-q", "classify", str(instances_file)]) == 1

    def test_bad_rules_fail(self, config_file, instances_file, tmp_path) -> None:
        """Test a malformed rule file exits with an error."""
        bad = tmp_path / "bad.json"
        bad.write_text("{")

        code = svcrulesd.main(
            ["--config", str(config_file), "-q", "classify", str(instances_file), "-r", str(bad)]
        )

        assert code == 1


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_and_invalid(self, config_file, redis_rules, tmp_path, capsys) -> None:
        """Test each file is reported and failures set the exit code."""
        bad = tmp_path / "bad.json"
        bad.write_text(json.dumps({"signatures": [{"name": "x", "type": ""}]}))

        code = svcrulesd.main(
            ["--config", str(config_file), "-q", "validate", str(redis_rules), str(bad)]
        )

        out = capsys.readouterr().out
        assert code == 1
        assert f"OK   {redis_rules}: 1 rulesets (redis)" in out
        assert f"FAIL {bad}" in out

    def test_all_valid(self, config_file, redis_rules) -> None:
        """Test validating only good files succeeds."""
        assert svcrulesd.main(["--config", str(config_file), "-q", "validate", str(redis_rules)]) == 0


class TestConfigCommand:
    """Tests for the config command."""

    def test_show(self, config_file, tmp_path, capsys) -> None:
        """Test --show prints the effective configuration."""
        code = svcrulesd.main(["--config", str(config_file), "-q", "config", "--show"])

        data = json.loads(capsys.readouterr().out)
        assert code == 0
        assert data["logs_dir"] == str(tmp_path / "logs")

    def test_init(self, config_file, tmp_path) -> None:
        """Test --init writes config.json into the config directory."""
        code = svcrulesd.main(["--config", str(config_file), "-q", "config", "--init"])

        assert code == 0
        assert json.loads((tmp_path / "config.json").read_text())["servicesfiles"] == []

    def test_init_writes_to_config_path(self, tmp_path) -> None:
        """Test --init writes to the --config path when one is given."""
        config_path = tmp_path / "etc" / "svcrules.json"
        config_path.parent.mkdir()
        config_path.write_text(json.dumps({"config_dir": str(tmp_path), "servicesfiles": ["a.json"]}))

        code = svcrulesd.main(["--config", str(config_path), "-q", "config", "--init"])

        assert code == 0
        saved = json.loads(config_path.read_text())
        assert saved["servicesfiles"] == ["a.json"]
        assert saved["config_dir"] == str(tmp_path)
        assert not (tmp_path / "config.json").exists()

    def test_no_flags(self, config_file) -> None:
        """Test config without flags returns an error code."""
        assert svcrulesd.main(["--config", str(config_file), "-q", "config"]) == 1
