"""
Tests for configuration trees — nesting, environment identities, serialization.
"""

from cloudgen.core.models.configuration import (
    MAIN_RESOURCES,
    TEST_RESOURCES,
    ApplicationConfiguration,
    BootstrapConfiguration,
    Configuration,
    flatten,
    to_properties,
)


class TestConfigurationTree:
    def test_add_nested_builds_tree(self):
        config = Configuration()
        config.add_nested("micronaut.metrics.enabled", True)
        assert config.to_dict() == {"micronaut": {"metrics": {"enabled": True}}}

    def test_add_nested_mapping(self):
        config = Configuration()
        config.add_nested({"a.b": 1, "a.c": 2})
        assert config.get("a.b") == 1
        assert config.get("a.c") == 2

    def test_scalar_replaced_by_subtree(self):
        config = Configuration()
        config.add_nested("a", "x")
        config.add_nested("a.b", "y")
        assert config.to_dict() == {"a": {"b": "y"}}

    def test_contains_and_remove(self):
        config = Configuration()
        config.add_nested("a.b", None)
        assert config.contains("a.b")
        config.remove("a.b")
        assert not config.contains("a.b")

    def test_to_dict_is_a_copy(self):
        config = Configuration()
        config.add_nested("a.b", [1, 2])
        config.to_dict()["a"]["b"].append(3)
        assert config.get("a.b") == [1, 2]

    def test_is_empty(self):
        assert Configuration().is_empty()


class TestIdentities:
    def test_default_application(self):
        config = ApplicationConfiguration()
        assert config.key == "application-config"
        assert config.file_path() == f"{MAIN_RESOURCES}/application.properties"

    def test_environment_application(self):
        config = ApplicationConfiguration("dev")
        assert config.key == "application-config-dev"
        assert config.environment == "dev"
        assert config.file_path("yml") == f"{MAIN_RESOURCES}/application-dev.yml"

    def test_test_configs_live_in_test_resources(self):
        assert ApplicationConfiguration.test_config().location == TEST_RESOURCES
        assert ApplicationConfiguration.function_test_config().file_name == "application-function"
        assert BootstrapConfiguration.test_config().key == "bootstrap-config-test"

    def test_bootstrap_default(self):
        config = BootstrapConfiguration()
        assert config.key == "bootstrap-config"
        assert config.file_name == "bootstrap"


class TestSerialization:
    def test_flatten_lists(self):
        assert flatten({"a": {"hosts": ["x", "y"]}}) == {"a.hosts[0]": "x", "a.hosts[1]": "y"}

    def test_booleans_lower_case(self):
        assert to_properties({"a": True, "b": False}) == "a=true\nb=false\n"

    def test_lines_sorted(self):
        config = Configuration()
        config.add_nested("z.last", 1)
        config.add_nested("a.first", 2)
        assert config.to_properties() == "a.first=2\nz.last=1\n"

    def test_escaping(self):
        text = to_properties({"url": "jdbc:h2:mem:db", "key with space": "a=b"})
        assert "url=jdbc\\:h2\\:mem\\:db" in text
        assert "key\\ with\\ space=a\\=b" in text

    def test_unicode_escaped(self):
        assert to_properties({"name": "café"}) == "name=caf\\u00E9\n"

    def test_empty_tree(self):
        assert to_properties({}) == ""

    def test_last_line_terminated(self):
        text = to_properties({"a": 1, "b": 2})
        assert text.endswith("b=2\n")
        assert text.count("\n") == 2

    def test_deterministic(self):
        def make():
            config = Configuration()
            config.add_nested({"b.x": 1, "a.y": [True, "z"]})
            return config

        assert make().to_properties() == make().to_properties()
        assert make().to_yaml() == make().to_yaml()

    def test_yaml_sorted(self):
        config = Configuration()
        config.add_nested("b", 1)
        config.add_nested("a", 2)
        assert config.to_yaml() == "a: 2\nb: 1\n"
