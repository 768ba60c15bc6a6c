"""Tests for configuration loading and validation."""

import pytest

from riskroute.config import DEFAULT_CONFIG, RiskRouteConfig, load_config
from riskroute.exceptions import ConfigurationError, InvalidConfigError


@pytest.fixture
def isolated(tmp_path, monkeypatch):
    """Run with an empty home and working directory and no RISKROUTE_* env."""
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for field_name in RiskRouteConfig.__dataclass_fields__:
        monkeypatch.delenv(f"RISKROUTE_{field_name.upper()}", raising=False)
    return work


class TestRiskRouteConfig:
    """Test field defaults and validation."""

    def test_defaults(self):
        assert DEFAULT_CONFIG.default_ref == "HEAD~1"
        assert DEFAULT_CONFIG.coverage_threshold == 80.0
        assert DEFAULT_CONFIG.route_gap_limit == 10
        assert DEFAULT_CONFIG.suggest_limit == 20
        assert DEFAULT_CONFIG.use_enhancers is True
        assert DEFAULT_CONFIG.verbosity == "normal"

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("default_ref", " "),
            ("git_timeout_seconds", 0),
            ("coverage_threshold", 101.0),
            ("coverage_threshold", -1.0),
            ("route_gap_limit", 0),
            ("suggest_limit", 0),
            ("router_timeout_seconds", 0),
            ("verbosity", "loud"),
        ],
    )
    def test_invalid_values(self, field_name, value):
        with pytest.raises(InvalidConfigError) as excinfo:
            RiskRouteConfig(**{field_name: value})
        assert excinfo.value.key == field_name

    @pytest.mark.parametrize(
        "field_name, value",
        [
            ("default_ref", 5),
            ("git_timeout_seconds", 2.5),
            ("coverage_threshold", "high"),
            ("suggest_limit", True),
            ("use_enhancers", "yes"),
            ("verbosity", None),
        ],
    )
    def test_wrong_types(self, field_name, value):
        with pytest.raises(InvalidConfigError) as excinfo:
            RiskRouteConfig(**{field_name: value})
        assert excinfo.value.key == field_name
        assert excinfo.value.reason.startswith("expected ")

    def test_int_accepted_for_float(self):
        assert RiskRouteConfig(coverage_threshold=70).coverage_threshold == 70

    def test_frozen(self):
        with pytest.raises(AttributeError):
            DEFAULT_CONFIG.coverage_threshold = 10.0


class TestLoadConfig:
    """Test layered configuration loading."""

    def test_defaults_when_nothing_configured(self, isolated):
        assert load_config() == DEFAULT_CONFIG

    def test_overrides(self, isolated):
        config = load_config(coverage_threshold=70.0, suggest_limit=None)
        assert config.coverage_threshold == 70.0
        assert config.suggest_limit == 20

    def test_verbose_and_quiet_flags(self, isolated):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=None).verbosity == "normal"

    def test_project_file_with_table(self, isolated):
        (isolated / "riskroute.toml").write_text("[riskroute]\ncoverage_threshold = 65.0\n")
        assert load_config().coverage_threshold == 65.0

    def test_global_file_top_level_keys(self, isolated, tmp_path):
        (tmp_path / "home" / ".riskroute.toml").write_text('default_ref = "main"\n')
        assert load_config().default_ref == "main"

    def test_explicit_file_beats_project_file(self, isolated, tmp_path):
        (isolated / "riskroute.toml").write_text("suggest_limit = 5\n")
        explicit = tmp_path / "explicit.toml"
        explicit.write_text("suggest_limit = 7\n")
        assert load_config(config_file=explicit).suggest_limit == 7

    def test_missing_explicit_file(self, isolated, tmp_path):
        with pytest.raises(ConfigurationError):
            load_config(config_file=tmp_path / "absent.toml")

    def test_unknown_key(self, isolated):
        (isolated / "riskroute.toml").write_text("colour = true\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_non_string_ref_in_file(self, isolated):
        (isolated / "riskroute.toml").write_text("default_ref = 5\n")
        with pytest.raises(ConfigurationError) as excinfo:
            load_config()
        assert excinfo.value.details["key"] == "default_ref"

    def test_invalid_toml(self, isolated):
        (isolated / "riskroute.toml").write_text("this is = = not toml\n")
        with pytest.raises(ConfigurationError):
            load_config()

    def test_env_vars(self, isolated, monkeypatch):
        monkeypatch.setenv("RISKROUTE_COVERAGE_THRESHOLD", "55")
        monkeypatch.setenv("RISKROUTE_USE_ENHANCERS", "off")
        monkeypatch.setenv("RISKROUTE_ROUTE_GAP_LIMIT", "3")
        config = load_config()
        assert config.coverage_threshold == 55.0
        assert config.use_enhancers is False
        assert config.route_gap_limit == 3

    def test_env_beats_file_and_overrides_beat_env(self, isolated, monkeypatch):
        (isolated / "riskroute.toml").write_text("coverage_threshold = 60.0\n")
        monkeypatch.setenv("RISKROUTE_COVERAGE_THRESHOLD", "50")
        assert load_config().coverage_threshold == 50.0
        assert load_config(coverage_threshold=40.0).coverage_threshold == 40.0

    def test_bad_env_value(self, isolated, monkeypatch):
        monkeypatch.setenv("RISKROUTE_GROUP_BY_AGENT", "maybe")
        with pytest.raises(InvalidConfigError) as excinfo:
            load_config()
        assert excinfo.value.key == "group_by_agent"
